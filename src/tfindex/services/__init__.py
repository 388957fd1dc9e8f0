"""Service layer: sync, tagging, releases and search over the index."""

from .container import ServiceContainer
from .releases import ReleaseService
from .search import SearchHit, SearchService
from .sync import SyncService
from .tagging import TaggingService

__all__ = [
    "ServiceContainer",
    "ReleaseService",
    "SearchHit",
    "SearchService",
    "SyncService",
    "TaggingService",
]
