"""HTTP client wrapper with auth, logging, caching and retries."""

import asyncio
import json
from typing import Any, Optional

import httpx
import structlog

from cinesense.cache.key_builder import build_cache_key
from cinesense.cache.store import CacheStore
from cinesense.config import Settings
from cinesense.exceptions import AuthenticationError, RequestFailure, classify
from cinesense.logger import ApiLogger
from cinesense.retry import retry_request
from cinesense.tokens import TokenStore
from cinesense.types import CachedResponse, RequestOptions

logger = structlog.get_logger(__name__)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

_TRANSPORT_ERRORS = (httpx.HTTPError, httpx.InvalidURL)


def _decode_content(content: bytes) -> Any:
    if not content:
        return None
    try:
        return json.loads(content)
    except ValueError:
        return content.decode("utf-8", errors="replace")


def _bearer_of(request: Optional[httpx.Request]) -> Optional[str]:
    if request is None:
        return None
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer "):]
    return None


class ApiClient:
    """REST client for the watchlist API.

    Every request carries the stored bearer token and is logged with
    sanitized bodies. Failures are raised as classified
    :class:`~cinesense.exceptions.RequestFailure` subclasses.

    Example:
        ```python
        async with ApiClient(settings, cache, token_store) as api:
            trending = await api.get_cached(
                "/media/trending",
                RequestOptions(params={"mediaType": "movie"}, cache_ttl=CacheTTL.LONG),
            )
        ```
    """

    def __init__(
        self,
        settings: Settings,
        cache: CacheStore,
        token_store: TokenStore,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        api_logger: Optional[ApiLogger] = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Client settings
            cache: Response cache used by :meth:`get_cached`
            token_store: Source of the bearer token
            transport: Optional httpx transport override
            api_logger: Request/response logger; defaults to one enabled in debug mode
        """
        self.settings = settings
        self.cache = cache
        self.token_store = token_store
        self.api_logger = api_logger or ApiLogger(enabled=settings.debug)
        self._auth_lock = asyncio.Lock()
        self._client = httpx.AsyncClient(
            base_url=settings.api_url,
            timeout=settings.timeout,
            headers=DEFAULT_HEADERS,
            transport=transport,
            event_hooks={
                "request": [self._on_request],
                "response": [self._on_response],
            },
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _on_request(self, request: httpx.Request) -> None:
        token = await self.token_store.get_token()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        self.api_logger.api_request(
            request.method, str(request.url), _decode_content(request.content)
        )

    async def _on_response(self, response: httpx.Response) -> None:
        await response.aread()
        self.api_logger.api_response(
            response.request.method,
            str(response.request.url),
            response.status_code,
            _decode_content(response.content),
        )

    async def _handle_unauthorized(self, sent_token: Optional[str]) -> None:
        """Drop the stored token after a 401.

        The lock plus the equality check mean a burst of 401s for the same
        token removes it once, and a token stored after the failing request
        was sent is kept.
        """
        async with self._auth_lock:
            current = await self.token_store.get_token()
            if current is None or current != sent_token:
                return
            await self.token_store.clear_token()
            logger.info("auth_token_cleared")

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        options: Optional[RequestOptions] = None,
    ) -> httpx.Response:
        """Issue a request and raise a classified failure on error.

        Args:
            method: HTTP method
            url: Path relative to the API base URL, or an absolute URL
            json: JSON body
            options: Query parameters, headers and timeout

        Returns:
            Successful (2xx) response

        Raises:
            RequestFailure: Classified failure, chained from the transport error
        """
        options = options or RequestOptions()
        kwargs: dict[str, Any] = {}
        if options.params:
            kwargs["params"] = options.params
        if options.headers:
            kwargs["headers"] = options.headers
        if options.timeout is not None:
            kwargs["timeout"] = options.timeout

        try:
            response = await self._client.request(method, url, json=json, **kwargs)
            response.raise_for_status()
            return response
        except _TRANSPORT_ERRORS as e:
            failure = classify(e)
            self.api_logger.api_error(method, url, e, failure.http_status, failure.body)
            if isinstance(failure, AuthenticationError):
                request = e.request if isinstance(e, httpx.HTTPStatusError) else None
                await self._handle_unauthorized(_bearer_of(request))
            raise failure from e

    async def get(self, url: str, options: Optional[RequestOptions] = None) -> httpx.Response:
        return await self.request("GET", url, options=options)

    async def post(self, url: str, json: Any = None, options: Optional[RequestOptions] = None) -> httpx.Response:
        return await self.request("POST", url, json=json, options=options)

    async def put(self, url: str, json: Any = None, options: Optional[RequestOptions] = None) -> httpx.Response:
        return await self.request("PUT", url, json=json, options=options)

    async def patch(self, url: str, json: Any = None, options: Optional[RequestOptions] = None) -> httpx.Response:
        return await self.request("PATCH", url, json=json, options=options)

    async def delete(self, url: str, options: Optional[RequestOptions] = None) -> httpx.Response:
        return await self.request("DELETE", url, options=options)

    async def get_cached(self, url: str, options: Optional[RequestOptions] = None) -> CachedResponse:
        """GET through the response cache.

        A fresh cache hit returns without touching the network. On a miss the
        response body is cached under ``cache_ttl``. If the network is
        unreachable, an expired entry for the same key is returned with
        ``is_stale=True`` instead of raising.

        Args:
            url: Request path
            options: Cache switches, TTL and query parameters

        Returns:
            Cached or fresh response data

        Raises:
            RequestFailure: Any failure that cannot be served from the cache
        """
        options = options or RequestOptions()
        ttl_ms = options.cache_ttl
        if ttl_ms is None:
            ttl_ms = self.settings.default_cache_ttl_ms
        key = build_cache_key(url, options.params)

        if options.use_cache:
            entry = self.cache.lookup(key)
            if entry is not None:
                logger.debug("cache_hit", key=key)
                return CachedResponse(data=entry.value, from_cache=True)

        try:
            response = await self.request("GET", url, options=options)
        except RequestFailure as failure:
            if options.use_cache and failure.is_network_error:
                stale = self.cache.get_raw(key)
                if stale is not None:
                    logger.info("cache_stale_fallback", key=key)
                    return CachedResponse(data=stale, from_cache=True, is_stale=True)
            raise

        data = _decode_content(response.content)
        if options.use_cache and data is not None and data != "":
            self.cache.set(key, data, ttl_ms)

        return CachedResponse(
            data=data,
            status=response.status_code,
            headers=dict(response.headers),
            from_cache=False,
        )

    async def get_with_retry(
        self,
        url: str,
        options: Optional[RequestOptions] = None,
        max_retries: int = 3,
        base_delay_ms: int = 1000,
    ) -> httpx.Response:
        """GET with exponential backoff; see :func:`cinesense.retry.retry_request`."""
        return await retry_request(
            lambda: self.request("GET", url, options=options),
            max_retries=max_retries,
            base_delay_ms=base_delay_ms,
        )

    def invalidate(self, url: str, params: Optional[dict[str, Any]] = None) -> None:
        """Drop the cached response for one URL and parameter set."""
        self.cache.delete(build_cache_key(url, params))

    def invalidate_prefix(self, url: str) -> None:
        """Drop every cached response whose key starts with ``url``."""
        for key in self.cache.keys():
            if key.startswith(url):
                self.cache.delete(key)

    async def health_check(self) -> bool:
        """Check that the API is reachable.

        Returns:
            True if the liveness endpoint answered with a 2xx status
        """
        try:
            response = await self._client.get(
                self.settings.health_path,
                timeout=self.settings.health_timeout,
            )
            return response.is_success
        except Exception as e:
            logger.debug("health_check_failed", error=str(e))
            return False
