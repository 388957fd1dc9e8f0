"""Wires the index and the GitHub client into the services."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from ..core.config import Config
from ..sources.github import GitHubClient
from ..store.database import Database
from ..store.files import FileRepository
from ..store.modules import ModuleRepository
from ..store.releases import ReleaseRepository
from ..store.structure import StructureRepository

if TYPE_CHECKING:
    from .releases import ReleaseService
    from .search import SearchService
    from .sync import SyncService
    from .tagging import TaggingService


class ServiceContainer:
    """Holds one index connection and hands out services bound to it.

    Services and repositories are created lazily on first access. The
    GitHub client is only opened by operations that talk to the remote.

    Usage as context manager (recommended):

        with ServiceContainer(Config.from_env()) as services:
            progress = services.sync.sync_updates()
            hits = services.search.search_modules("network")

    Attributes:
        config: Application configuration.
        db: Database instance (connected after connect() or __enter__).
    """

    def __init__(self, config: Config, github: GitHubClient | None = None):
        """Initialize container with configuration.

        Args:
            config: Application configuration.
            github: Pre-built client (tests); created from config otherwise.
        """
        self.config = config
        self.db = Database(config.db_path)
        self._github = github
        self._owns_github = github is None
        self._connected = False

        # built on first access
        self._sync: SyncService | None = None
        self._tagging: TaggingService | None = None
        self._releases: ReleaseService | None = None
        self._search: SearchService | None = None

        self._module_repo: ModuleRepository | None = None
        self._file_repo: FileRepository | None = None
        self._structure_repo: StructureRepository | None = None
        self._release_repo: ReleaseRepository | None = None

    def connect(self) -> None:
        """Open the index. The context manager calls this for you."""
        if not self._connected:
            self.db.connect()
            self._connected = True
            logger.debug("ServiceContainer connected to database")

    def close(self) -> None:
        """Close the index and any client this container created."""
        if self._github is not None and self._owns_github:
            self._github.close()
            self._github = None
            logger.debug("GitHub client closed")

        if self._connected:
            self.db.close()
            self._connected = False
            logger.debug("ServiceContainer closed")

    def __enter__(self) -> "ServiceContainer":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # --- Remote client ---

    @property
    def github(self) -> GitHubClient:
        """Get or create the GitHub client."""
        if self._github is None:
            self._github = GitHubClient(self.config.github)
            logger.debug(
                f"GitHub client created: api={self._github.api_url}, "
                f"authenticated={self._github.authenticated}"
            )
        return self._github

    # --- Repositories ---

    @property
    def module_repo(self) -> ModuleRepository:
        if self._module_repo is None:
            self._module_repo = ModuleRepository(self.db)
        return self._module_repo

    @property
    def file_repo(self) -> FileRepository:
        if self._file_repo is None:
            self._file_repo = FileRepository(self.db)
        return self._file_repo

    @property
    def structure_repo(self) -> StructureRepository:
        if self._structure_repo is None:
            self._structure_repo = StructureRepository(self.db)
        return self._structure_repo

    @property
    def release_repo(self) -> ReleaseRepository:
        if self._release_repo is None:
            self._release_repo = ReleaseRepository(self.db)
        return self._release_repo

    # --- Services ---

    @property
    def sync(self) -> "SyncService":
        if self._sync is None:
            from .sync import SyncService

            self._sync = SyncService(self)
        return self._sync

    @property
    def tagging(self) -> "TaggingService":
        if self._tagging is None:
            from .tagging import TaggingService

            self._tagging = TaggingService(self)
        return self._tagging

    @property
    def releases(self) -> "ReleaseService":
        if self._releases is None:
            from .releases import ReleaseService

            self._releases = ReleaseService(self)
        return self._releases

    @property
    def search(self) -> "SearchService":
        if self._search is None:
            from .search import SearchService

            self._search = SearchService(self)
        return self._search
