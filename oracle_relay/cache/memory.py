"""In-process cache store implementations."""

from __future__ import annotations

import copy
import threading
from typing import Any

from .interfaces import CacheStorePort


class NullCacheStore(CacheStorePort):
    """Cache store that never holds values; every lookup misses."""

    def cache_get(self, key: str) -> Any | None:
        _ = key
        return None

    def cache_set(self, key: str, value: Any) -> None:
        _ = (key, value)


class InMemoryCacheStore(CacheStorePort):
    """Thread-safe dictionary cache store.

    Values are deep-copied on write and read so callers cannot mutate cached
    payloads in place.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}
        self._lock = threading.Lock()

    def cache_get(self, key: str) -> Any | None:
        with self._lock:
            if key not in self._entries:
                return None
            return copy.deepcopy(self._entries[key])

    def cache_set(self, key: str, value: Any) -> None:
        stored_value = copy.deepcopy(value)
        with self._lock:
            self._entries[key] = stored_value

    def cache_size(self) -> int:
        """Return number of cached keys."""

        with self._lock:
            return len(self._entries)
