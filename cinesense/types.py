"""Type definitions shared across the client."""

from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Any, Optional

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Failure taxonomy every request error is classified into."""

    CLIENT_ERROR = "ClientError"
    SERVER_ERROR = "ServerError"
    RATE_LIMITED = "RateLimited"
    TIMEOUT = "Timeout"
    NETWORK_UNREACHABLE = "NetworkUnreachable"
    UNKNOWN = "Unknown"


class CacheTTL(IntEnum):
    """TTL presets in milliseconds."""

    SHORT = 60 * 1000
    MEDIUM = 5 * 60 * 1000
    LONG = 30 * 60 * 1000
    VERY_LONG = 24 * 60 * 60 * 1000


@dataclass
class RequestOptions:
    """Per-call options for cached and plain requests.

    Attributes:
        use_cache: Consult and populate the response cache
        cache_ttl: Entry lifetime in milliseconds; None uses the configured default
        timeout: Request timeout in seconds; None uses the client default
        params: Query parameters
        headers: Extra request headers
    """

    use_cache: bool = True
    cache_ttl: Optional[int] = None
    timeout: Optional[float] = None
    params: Optional[dict[str, Any]] = None
    headers: Optional[dict[str, str]] = field(default=None)

    def with_params(self, **params: Any) -> "RequestOptions":
        """Return a copy with ``params`` merged in, dropping ``None`` values."""
        merged = dict(self.params or {})
        merged.update({k: v for k, v in params.items() if v is not None})
        return replace(self, params=merged)


class CachedResponse(BaseModel):
    """Result of a cached GET.

    ``status`` and ``headers`` are only populated for network responses.
    """

    data: Any = None
    status: Optional[int] = None
    headers: dict[str, str] = Field(default_factory=dict)
    from_cache: bool = False
    is_stale: bool = False
