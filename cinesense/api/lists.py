"""Custom list endpoints."""

from typing import Any

from cinesense.api.base import BaseService
from cinesense.types import CacheTTL

LISTS_URL = "/lists"


class ListsAPI(BaseService):
    """User-defined lists.

    Reads are cached briefly; every mutation drops all cached ``/lists``
    responses so the next read sees the change.
    """

    default_ttl = CacheTTL.SHORT

    async def all(self) -> Any:
        return await self._get_data(LISTS_URL)

    async def create(self, name: str, description: str = "", is_public: bool = False) -> Any:
        response = await self.client.post(
            LISTS_URL,
            json={"name": name, "description": description, "isPublic": is_public},
        )
        self.client.invalidate_prefix(LISTS_URL)
        return self._json(response)

    async def update(self, list_id: str, **updates: Any) -> Any:
        response = await self.client.put(f"{LISTS_URL}/{list_id}", json=updates)
        self.client.invalidate_prefix(LISTS_URL)
        return self._json(response)

    async def delete(self, list_id: str) -> None:
        await self.client.delete(f"{LISTS_URL}/{list_id}")
        self.client.invalidate_prefix(LISTS_URL)

    async def add_item(self, list_id: str, item_id: str) -> Any:
        response = await self.client.post(f"{LISTS_URL}/{list_id}/items", json={"itemId": item_id})
        self.client.invalidate_prefix(LISTS_URL)
        return self._json(response)

    async def remove_item(self, list_id: str, item_id: str) -> Any:
        response = await self.client.delete(f"{LISTS_URL}/{list_id}/items/{item_id}")
        self.client.invalidate_prefix(LISTS_URL)
        return self._json(response)
