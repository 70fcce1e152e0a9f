"""Cache key derivation for GET requests."""

import json
from typing import Any, Mapping, Optional


def _normalize(data: Any) -> Any:
    if isinstance(data, Mapping):
        return {str(k): _normalize(v) for k, v in sorted(data.items(), key=lambda kv: str(kv[0]))}
    if isinstance(data, (list, tuple)):
        return [_normalize(item) for item in data]
    return data


def build_cache_key(url: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Build the cache key for a URL and its query parameters.

    Parameters are serialized canonically (keys sorted recursively, compact
    separators), so dicts holding the same values in a different insertion
    order map to the same key.

    Args:
        url: Request path or absolute URL
        params: Query parameters

    Returns:
        ``url`` alone when there are no params, else ``url`` followed by the
        canonical JSON of the params
    """
    if not params:
        return url
    canonical = json.dumps(_normalize(params), separators=(",", ":"), default=str)
    return f"{url}{canonical}"
