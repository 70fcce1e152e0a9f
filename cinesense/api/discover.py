"""Discovery endpoints."""

from typing import Any, Union

from cinesense.api.base import BaseService
from cinesense.types import CacheTTL


class DiscoverAPI(BaseService):
    """Streaming availability lookups."""

    default_ttl = CacheTTL.VERY_LONG

    async def where_to_watch(self, media_type: str, media_id: Union[int, str]) -> Any:
        return await self._get_data(f"/discover/where-to-watch/{media_type}/{media_id}")
