"""CineSense - cached, retrying REST client for the watchlist API."""

__version__ = "0.1.0"

from cinesense.cache import CacheStore, build_cache_key
from cinesense.client import ApiClient
from cinesense.config import Settings, load_settings
from cinesense.context import AppContext
from cinesense.exceptions import (
    RequestFailure,
    ClientError,
    AuthenticationError,
    PermissionDeniedError,
    NotFoundError,
    RateLimitError,
    ServerError,
    APITimeoutError,
    NetworkUnreachableError,
    UnknownRequestError,
    classify,
)
from cinesense.retry import retry_request
from cinesense.types import CachedResponse, CacheTTL, FailureKind, RequestOptions

__all__ = [
    # Version
    "__version__",
    # Client
    "ApiClient",
    "AppContext",
    "CacheStore",
    "build_cache_key",
    "retry_request",
    # Config
    "Settings",
    "load_settings",
    # Types
    "CachedResponse",
    "CacheTTL",
    "FailureKind",
    "RequestOptions",
    # Exceptions
    "RequestFailure",
    "ClientError",
    "AuthenticationError",
    "PermissionDeniedError",
    "NotFoundError",
    "RateLimitError",
    "ServerError",
    "APITimeoutError",
    "NetworkUnreachableError",
    "UnknownRequestError",
    "classify",
]
