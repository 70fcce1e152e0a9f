"""Cache entry model."""

import json
import time
from dataclasses import dataclass
from typing import Any, Optional

from cinesense.types import CacheTTL

DEFAULT_TTL_MS = int(CacheTTL.MEDIUM)


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


@dataclass
class CacheEntry:
    """Cache entry.

    Attributes:
        key: Cache key, as formed by the caller
        value: Cached JSON-serializable payload
        stored_at: Write time in milliseconds since the epoch
        ttl_ms: Maximum age in milliseconds
    """

    key: str
    value: Any
    stored_at: int
    ttl_ms: int = DEFAULT_TTL_MS

    def age_ms(self, now: Optional[int] = None) -> int:
        return (now_ms() if now is None else now) - self.stored_at

    def is_fresh(self, now: Optional[int] = None) -> bool:
        """Check whether the entry is still within its TTL.

        Args:
            now: Reference time in milliseconds; defaults to the current time

        Returns:
            True if ``now - stored_at <= ttl_ms``
        """
        return self.age_ms(now) <= self.ttl_ms

    def is_expired(self, now: Optional[int] = None) -> bool:
        return not self.is_fresh(now)

    def to_json(self) -> str:
        """Serialize to the stored form ``{"data", "timestamp", "ttl"}``.

        Raises:
            TypeError: If the value is not JSON-serializable
        """
        return json.dumps(
            {"data": self.value, "timestamp": self.stored_at, "ttl": self.ttl_ms},
            separators=(",", ":"),
        )

    @classmethod
    def from_json(cls, key: str, raw: str) -> "CacheEntry":
        """Parse the stored form back into an entry.

        Raises:
            ValueError: If ``raw`` is not a well-formed entry
        """
        payload = json.loads(raw)
        if not isinstance(payload, dict) or "timestamp" not in payload or "ttl" not in payload:
            raise ValueError(f"Malformed cache entry for {key!r}")
        return cls(
            key=key,
            value=payload.get("data"),
            stored_at=int(payload["timestamp"]),
            ttl_ms=int(payload["ttl"]),
        )
