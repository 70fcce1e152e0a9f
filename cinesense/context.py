"""Application context wiring storage, cache, tokens and the HTTP client."""

from dataclasses import dataclass
from typing import Any, Optional

import httpx
import structlog

from cinesense.cache.store import CacheStore
from cinesense.client import ApiClient
from cinesense.config import Settings
from cinesense.logger import configure_logging
from cinesense.storage.base import KeyValueStorage
from cinesense.storage.encryption import EncryptedStorage, load_or_create_secret
from cinesense.storage.memory import InMemoryStorage
from cinesense.storage.sqlite import SQLiteStorage
from cinesense.tokens import StorageTokenStore, TokenStore

logger = structlog.get_logger(__name__)


def build_storage(settings: Settings) -> KeyValueStorage:
    """Create the storage backend described by ``settings``.

    By default this is SQLite at ``settings.resolved_cache_path``, encrypted
    with ``encryption_key`` or a secret persisted next to it. ``in_memory``
    selects volatile storage, encrypted only if a key is given.
    """
    if settings.in_memory:
        storage: KeyValueStorage = InMemoryStorage()
        if settings.encryption_key:
            storage = EncryptedStorage(storage, settings.encryption_key)
        return storage

    secret = settings.encryption_key or load_or_create_secret(settings.resolved_key_path)
    return EncryptedStorage(SQLiteStorage(settings.resolved_cache_path), secret)


@dataclass
class AppContext:
    """Everything that needs one instance per process.

    Build it once at start-up with :meth:`create` and pass it to whatever
    needs cache or HTTP access.
    """

    settings: Settings
    storage: KeyValueStorage
    cache: CacheStore
    token_store: TokenStore
    client: ApiClient

    @classmethod
    def create(
        cls,
        settings: Optional[Settings] = None,
        *,
        storage: Optional[KeyValueStorage] = None,
        token_store: Optional[TokenStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        configure_logs: bool = True,
    ) -> "AppContext":
        """Build a context.

        Args:
            settings: Client settings; read from the environment when omitted
            storage: Storage override; built from settings when omitted
            token_store: Token store override; defaults to one over ``storage``
            transport: httpx transport override
            configure_logs: Configure structlog from the settings

        Returns:
            Ready-to-use context
        """
        settings = settings or Settings()
        if configure_logs:
            configure_logging(settings.log_level, settings.json_logs)

        storage = storage if storage is not None else build_storage(settings)
        cache = CacheStore(storage, default_ttl_ms=settings.default_cache_ttl_ms)
        token_store = token_store or StorageTokenStore(storage)
        client = ApiClient(settings, cache, token_store, transport=transport)

        logger.debug(
            "context_created",
            api_url=settings.api_url,
            storage=type(storage).__name__,
        )
        return cls(
            settings=settings,
            storage=storage,
            cache=cache,
            token_store=token_store,
            client=client,
        )

    async def logout(self) -> None:
        """Forget the bearer token and every cached response."""
        await self.token_store.clear_token()
        self.cache.clear_all()
        logger.info("logged_out")

    async def aclose(self) -> None:
        await self.client.aclose()
        self.storage.close()

    async def __aenter__(self) -> "AppContext":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
