"""Cache package for pluggable fetch result stores."""

from .interfaces import CacheStorePort
from .memory import InMemoryCacheStore, NullCacheStore

__all__ = ["CacheStorePort", "InMemoryCacheStore", "NullCacheStore"]
