"""Two-tier TTL caching for list pages and detail records."""

from rootly_tui.cache.base import CacheEntry, TTLCache
from rootly_tui.cache.factory import open_cache_tiers, open_durable_tiers
from rootly_tui.cache.keys import CacheKeyBuilder, build_key
from rootly_tui.cache.memory import MemoryCache
from rootly_tui.cache.persistent import PersistentCache, open_persistent_cache
from rootly_tui.cache.store import PersistentStore

__all__ = [
    "CacheEntry",
    "CacheKeyBuilder",
    "MemoryCache",
    "PersistentCache",
    "PersistentStore",
    "TTLCache",
    "build_key",
    "open_cache_tiers",
    "open_durable_tiers",
    "open_persistent_cache",
]
