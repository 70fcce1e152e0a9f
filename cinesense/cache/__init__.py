"""Response caching for the API client."""

from cinesense.cache.base import CacheEntry, now_ms
from cinesense.cache.key_builder import build_cache_key
from cinesense.cache.store import CACHE_PREFIX, CacheStore
from cinesense.types import CacheTTL

__all__ = [
    "CACHE_PREFIX",
    "CacheEntry",
    "CacheStore",
    "CacheTTL",
    "build_cache_key",
    "now_ms",
]
