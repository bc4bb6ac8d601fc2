"""Typed interfaces for fetch result caching."""

from typing import Any, Protocol


class CacheStorePort(Protocol):
    """Port definition for a key/value store of fetched payloads.

    Implementations must tolerate concurrent calls; same-key writes resolve
    last-write-wins.
    """

    def cache_get(self, key: str) -> Any | None:
        """Return cached value for key.

        Args:
            key: Cache key, the source URI.

        Returns:
            Any | None: Cached value, or None on a miss.

        Raises:
            RuntimeError: Raised when the backing store cannot be read.
        """

    def cache_set(self, key: str, value: Any) -> None:
        """Store value for key, replacing any previous value.

        Args:
            key: Cache key, the source URI.
            value: Payload to cache.

        Returns:
            None: Stores value as side effect.

        Raises:
            RuntimeError: Raised when the backing store cannot be written.
        """
