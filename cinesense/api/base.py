"""Shared helpers for resource services."""

from typing import Any, Optional

import httpx

from cinesense.client import ApiClient
from cinesense.types import CachedResponse, CacheTTL, RequestOptions


def unwrap(data: Any) -> Any:
    """Strip the server's ``{"success": ..., "data": ...}`` envelope."""
    if isinstance(data, dict) and "data" in data and ("success" in data or len(data) == 1):
        return data["data"]
    return data


class BaseService:
    """Base class for services built on an :class:`ApiClient`."""

    default_ttl: int = CacheTTL.MEDIUM

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    async def _get(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        *,
        ttl: Optional[int] = None,
        use_cache: bool = True,
    ) -> CachedResponse:
        options = RequestOptions(
            use_cache=use_cache,
            cache_ttl=self.default_ttl if ttl is None else ttl,
        ).with_params(**(params or {}))
        return await self.client.get_cached(url, options)

    async def _get_data(self, url: str, params: Optional[dict[str, Any]] = None, **kwargs: Any) -> Any:
        return unwrap((await self._get(url, params, **kwargs)).data)

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        if not response.content:
            return None
        return unwrap(response.json())
