"""Resource services for the watchlist REST API."""

from cinesense.api.base import BaseService, unwrap
from cinesense.api.discover import DiscoverAPI
from cinesense.api.lists import ListsAPI
from cinesense.api.media import MediaAPI
from cinesense.api.profile import ProfileAPI

__all__ = [
    "BaseService",
    "DiscoverAPI",
    "ListsAPI",
    "MediaAPI",
    "ProfileAPI",
    "unwrap",
]
