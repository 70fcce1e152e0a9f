"""Signed-in user profile endpoints."""

from typing import Any

from cinesense.api.base import BaseService

ME_URL = "/auth/me"
PROFILE_URL = "/auth/profile"


class ProfileAPI(BaseService):
    """Current user profile; never served from the cache."""

    async def me(self) -> Any:
        return await self._get_data(ME_URL, use_cache=False)

    async def update(self, **fields: Any) -> Any:
        response = await self.client.put(PROFILE_URL, json=fields)
        return self._json(response)
