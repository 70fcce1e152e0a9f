"""Bearer token stores."""

from abc import ABC, abstractmethod
from typing import Optional

import structlog

from cinesense.exceptions import StorageError
from cinesense.storage.base import KeyValueStorage

logger = structlog.get_logger(__name__)

AUTH_TOKEN_KEY = "authToken"


class TokenStore(ABC):
    """Async-capable key-value store holding the bearer token."""

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        pass

    async def get_token(self) -> Optional[str]:
        return await self.get_item(AUTH_TOKEN_KEY)

    async def set_token(self, token: str) -> None:
        await self.set_item(AUTH_TOKEN_KEY, token)

    async def clear_token(self) -> None:
        await self.remove_item(AUTH_TOKEN_KEY)


class InMemoryTokenStore(TokenStore):
    """Token store that forgets everything when the process exits."""

    def __init__(self, token: Optional[str] = None) -> None:
        self._items: dict[str, str] = {}
        if token:
            self._items[AUTH_TOKEN_KEY] = token

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class StorageTokenStore(TokenStore):
    """Token store persisted in a :class:`KeyValueStorage` backend.

    A value that cannot be read back, for example after the encryption key
    changed, is dropped and reported as missing.
    """

    def __init__(self, storage: KeyValueStorage) -> None:
        self.storage = storage

    async def get_item(self, key: str) -> Optional[str]:
        try:
            return self.storage.get(key)
        except StorageError as e:
            logger.warning("token_unreadable", key=key, error=str(e))
        try:
            self.storage.delete(key)
        except StorageError as e:
            logger.warning("token_drop_failed", key=key, error=str(e))
        return None

    async def set_item(self, key: str, value: str) -> None:
        self.storage.set(key, value)

    async def remove_item(self, key: str) -> None:
        self.storage.delete(key)
