"""Media metadata endpoints."""

from typing import Any, Union

from cinesense.api.base import BaseService
from cinesense.types import CacheTTL

MediaId = Union[int, str]


class MediaAPI(BaseService):
    """Search, trending lists, titles, seasons and people.

    Metadata changes rarely, so titles and people are cached for a long time;
    search and trending results use shorter presets.
    """

    default_ttl = CacheTTL.LONG

    async def search(self, query: str, page: int = 1) -> Any:
        return await self._get_data(
            "/media/search", {"query": query, "page": page}, ttl=CacheTTL.MEDIUM
        )

    async def trending(
        self,
        media_type: str = "all",
        time_window: str = "week",
        page: int = 1,
        **filters: Any,
    ) -> Any:
        """Get trending titles.

        Args:
            media_type: "all", "movie" or "tv"
            time_window: "day" or "week"
            page: Result page
            **filters: Extra query parameters such as ``genre`` or ``sort_by``

        Returns:
            Trending results
        """
        params = {"mediaType": media_type, "timeWindow": time_window, "page": page, **filters}
        return await self._get_data("/media/trending", params, ttl=CacheTTL.MEDIUM)

    async def details(self, media_type: str, media_id: MediaId) -> Any:
        return await self._get_data(f"/media/{media_type}/{media_id}")

    async def credits(self, media_type: str, media_id: MediaId) -> Any:
        return await self._get_data(f"/media/{media_type}/{media_id}/credits")

    async def season(self, tv_id: MediaId, season_number: int) -> Any:
        return await self._get_data(f"/media/tv/{tv_id}/season/{season_number}")

    async def person(self, person_id: MediaId) -> Any:
        return await self._get_data(f"/media/person/{person_id}")

    async def person_credits(self, person_id: MediaId) -> Any:
        return await self._get_data(f"/media/person/{person_id}/credits")
