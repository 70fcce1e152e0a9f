"""TTL cache over a key-value storage backend."""

from typing import Any, Callable, Optional

import structlog

from cinesense.cache.base import DEFAULT_TTL_MS, CacheEntry, now_ms
from cinesense.exceptions import StorageError
from cinesense.storage.base import KeyValueStorage

logger = structlog.get_logger(__name__)

CACHE_PREFIX = "api_cache_"

# Anything the storage layer or (de)serialization can raise for one entry.
_CACHE_FAULTS = (StorageError, TypeError, ValueError)


class CacheStore:
    """Response cache with per-entry TTL and lazy eviction.

    Every call is synchronous. Faults in the storage backend or in JSON
    (de)serialization are logged and degrade to a miss; they never reach the
    caller.

    Example:
        ```python
        cache = CacheStore(InMemoryStorage())
        cache.set("/media/trending", {"results": []}, ttl_ms=CacheTTL.SHORT)
        cache.get("/media/trending")  # {"results": []}
        ```
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        prefix: str = CACHE_PREFIX,
        default_ttl_ms: int = DEFAULT_TTL_MS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        """Initialize the cache store.

        Args:
            storage: Backend holding the serialized entries
            prefix: Prefix separating cache keys from other stored keys
            default_ttl_ms: TTL used when ``set`` is called without one
            clock: Source of the current time in milliseconds
        """
        self.storage = storage
        self.prefix = prefix
        self.default_ttl_ms = default_ttl_ms
        self._clock = clock
        self._hits = 0
        self._misses = 0
        self._expired = 0

    def _storage_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def _read_entry(self, key: str) -> Optional[CacheEntry]:
        raw = self.storage.get(self._storage_key(key))
        if raw is None:
            return None
        return CacheEntry.from_json(key, raw)

    def set(self, key: str, value: Any, ttl_ms: Optional[int] = None) -> None:
        """Store ``value`` under ``key``, replacing any previous entry.

        Args:
            key: Cache key
            value: JSON-serializable payload
            ttl_ms: Lifetime in milliseconds
        """
        entry = CacheEntry(
            key=key,
            value=value,
            stored_at=self._clock(),
            ttl_ms=self.default_ttl_ms if ttl_ms is None else int(ttl_ms),
        )
        try:
            self.storage.set(self._storage_key(key), entry.to_json())
        except _CACHE_FAULTS as exc:
            logger.warning("cache_set_failed", key=key, error=str(exc))

    def get(self, key: str) -> Any:
        """Get a fresh value.

        An expired entry is deleted on read.

        Args:
            key: Cache key

        Returns:
            Cached value, or None if absent or expired
        """
        try:
            entry = self._read_entry(key)
        except _CACHE_FAULTS as exc:
            logger.warning("cache_get_failed", key=key, error=str(exc))
            self._misses += 1
            return None

        if entry is None:
            self._misses += 1
            return None

        if entry.is_expired(self._clock()):
            self._expired += 1
            self._misses += 1
            self.delete(key)
            return None

        self._hits += 1
        return entry.value

    def lookup(self, key: str) -> Optional[CacheEntry]:
        """Get the entry for ``key`` if it is fresh.

        Unlike :meth:`get`, an expired entry is left in place so it can still
        be served by :meth:`get_raw` if the refresh that follows fails.

        Args:
            key: Cache key

        Returns:
            Fresh entry, or None if absent or expired
        """
        entry = self.get_entry(key)
        if entry is None:
            self._misses += 1
            return None
        if entry.is_expired(self._clock()):
            self._expired += 1
            self._misses += 1
            return None
        self._hits += 1
        return entry

    def get_raw(self, key: str) -> Any:
        """Get a value regardless of freshness.

        Used once a network call has already failed, so that outdated data
        can stand in for none at all.

        Args:
            key: Cache key

        Returns:
            Cached value, or None if absent
        """
        try:
            entry = self._read_entry(key)
        except _CACHE_FAULTS as exc:
            logger.warning("cache_get_raw_failed", key=key, error=str(exc))
            return None
        return entry.value if entry is not None else None

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        """Get the full entry, timestamps included, without evicting it."""
        try:
            return self._read_entry(key)
        except _CACHE_FAULTS as exc:
            logger.warning("cache_get_entry_failed", key=key, error=str(exc))
            return None

    def delete(self, key: str) -> None:
        """Remove the entry for ``key``; no-op if absent."""
        try:
            self.storage.delete(self._storage_key(key))
        except StorageError as exc:
            logger.warning("cache_delete_failed", key=key, error=str(exc))

    def keys(self) -> list[str]:
        """List cache keys, without the storage prefix."""
        try:
            stored = self.storage.get_all_keys()
        except StorageError as exc:
            logger.warning("cache_keys_failed", error=str(exc))
            return []
        return [k[len(self.prefix):] for k in stored if k.startswith(self.prefix)]

    def clear_all(self) -> None:
        """Remove every cache entry.

        Keys without the cache prefix (such as the auth token) are left alone.
        """
        try:
            stored = self.storage.get_all_keys()
            self.storage.delete_many([k for k in stored if k.startswith(self.prefix)])
        except StorageError as exc:
            logger.warning("cache_clear_failed", error=str(exc))
            return
        logger.debug("cache_cleared")

    def stats(self) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Statistics dictionary
        """
        total = self._hits + self._misses
        return {
            "entries": len(self.keys()),
            "hits": self._hits,
            "misses": self._misses,
            "expired": self._expired,
            "hit_rate": self._hits / total if total > 0 else 0,
        }
