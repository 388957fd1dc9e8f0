"""Sync service: mirrors eligible repositories into the local index."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from ..core.exceptions import (
    ContentUnavailableError,
    FetchError,
    HCLParseError,
    InvalidInputError,
    NotFoundError,
    SyncError,
)
from ..core.types import (
    CompareResult,
    FileType,
    Module,
    ModuleFile,
    ModuleStructure,
    Repository,
    SyncProgress,
)
from ..parsing.extractor import detect_provider, extract_structure
from ..parsing.hcl import HCLFile, parse_hcl
from .archive import iter_archive_entries

if TYPE_CHECKING:
    from ..sources.github import GitHubClient
    from .container import ServiceContainer

# Files consulted first when looking for a provider declaration
PROVIDER_FILES = ("terraform.tf", "versions.tf", "providers.tf", "main.tf")


@dataclass
class ArchiveResult:
    """What archive ingestion produced for one repository."""

    files: int
    has_examples: bool
    submodule_ids: list[int]


class SyncService:
    """Service for full and incremental sync passes.

    Repositories are processed sequentially in discovery order. A failure
    in one repository is recorded in the pass summary and never stops the
    others.

    Example:

        with ServiceContainer(config) as services:
            progress = services.sync.sync_updates()
            print(progress.updated_repos)
    """

    def __init__(self, container: "ServiceContainer"):
        """Initialize SyncService.

        Args:
            container: Service container with shared resources.
        """
        self._container = container

    @property
    def _github(self) -> "GitHubClient":
        return self._container.github

    # -------------------------------------------------------------------------
    # Discovery
    # -------------------------------------------------------------------------

    def ineligibility_reason(self, repo: Repository) -> str | None:
        """Why a repository is not indexed, or None if it is eligible."""
        prefix = self._container.config.sync.module_prefix
        if not repo.name.startswith(prefix):
            return f"name does not start with {prefix!r}"
        if repo.private:
            return "private repository"
        if repo.archived:
            return "archived repository"
        if repo.size <= 0:
            return "empty repository"
        return None

    def discover(self) -> list[Repository]:
        """List the organization's repositories that should be indexed.

        Raises:
            SyncError: If the repository listing cannot be fetched.
        """
        org = self._container.config.github.org
        try:
            repositories = self._github.list_org_repositories(org)
        except FetchError as e:
            raise SyncError(f"Failed to fetch repositories: {e}") from e

        eligible: list[Repository] = []
        for repo in repositories:
            reason = self.ineligibility_reason(repo)
            if reason is None:
                eligible.append(repo)
            elif repo.name.startswith(self._container.config.sync.module_prefix):
                logger.info(f"Skipping {repo.name} ({reason})")

        logger.info(f"Found {len(eligible)} repositories: org={org!r}, listed={len(repositories)}")
        return eligible

    # -------------------------------------------------------------------------
    # Passes
    # -------------------------------------------------------------------------

    def sync_all(self, cancel: threading.Event | None = None) -> SyncProgress:
        """Process every eligible repository unconditionally.

        Args:
            cancel: Checked between repositories; stops the pass when set.

        Returns:
            Summary of the pass (partial if cancelled).

        Raises:
            SyncError: If discovery fails.
        """
        return self._run(incremental=False, cancel=cancel)

    def sync_updates(self, cancel: threading.Event | None = None) -> SyncProgress:
        """Process only repositories whose remote update marker changed.

        The response cache is cleared first so freshness is judged against
        the remote's current state.
        """
        self._github.clear_cache()
        return self._run(incremental=True, cancel=cancel)

    def _run(self, incremental: bool, cancel: threading.Event | None) -> SyncProgress:
        progress = SyncProgress()
        start_time = time.perf_counter()

        logger.info(f"Starting {'incremental' if incremental else 'full'} sync")
        repositories = self.discover()
        progress.total_repos = len(repositories)

        for repo in repositories:
            if cancel is not None and cancel.is_set():
                progress.cancelled = True
                logger.warning(
                    f"Sync cancelled: processed={progress.processed_repos}/{progress.total_repos}"
                )
                break

            progress.current_repo = repo.name

            if incremental and self._is_up_to_date(repo):
                logger.debug(f"Skipping {repo.name} (already up-to-date)")
                progress.skipped_repos += 1
                progress.processed_repos += 1
                continue

            logger.info(
                f"Syncing repository: {repo.name} "
                f"({progress.processed_repos + 1}/{progress.total_repos})"
            )
            try:
                ingested = self.sync_repository(repo)
            except (FetchError, HCLParseError) as e:
                message = f"Failed to sync {repo.name}: {e}"
                logger.warning(message)
                progress.errors.append(message)
            else:
                if ingested and incremental:
                    progress.updated_repos.append(repo.name)

            progress.processed_repos += 1

        if progress.processed_repos > progress.skipped_repos:
            self._container.tagging.retag_all()

        elapsed = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Sync complete: total={progress.total_repos}, processed={progress.processed_repos}, "
            f"skipped={progress.skipped_repos}, errors={len(progress.errors)}, "
            f"updated={len(progress.updated_repos)}, {elapsed:.1f}ms"
        )
        return progress

    def _is_up_to_date(self, repo: Repository) -> bool:
        existing = self._container.module_repo.get_by_name(repo.name)
        if existing is None:
            logger.debug(f"Module {repo.name} not in index, will sync")
            return False
        if existing.last_updated == repo.updated_at:
            return True
        logger.debug(
            f"Module {repo.name} needs update: stored={existing.last_updated!r}, "
            f"remote={repo.updated_at!r}"
        )
        return False

    # -------------------------------------------------------------------------
    # Per repository
    # -------------------------------------------------------------------------

    def sync_repository(self, repo: Repository) -> bool:
        """Rebuild one repository's modules from its archive.

        Returns:
            True if content was ingested, False if the archive was
            unavailable and the module record was removed.

        Raises:
            FetchError: If the archive download or read fails.
        """
        modules = self._container.module_repo
        module = Module(
            name=repo.name,
            full_name=repo.full_name,
            description=repo.description,
            repo_url=repo.html_url,
            last_updated=repo.updated_at,
        )
        module_id, existed = modules.upsert(module)
        if existed:
            modules.clear_children(module_id)
        modules.delete_submodules(repo.name)

        try:
            readme = self._github.fetch_readme(repo.full_name)
        except FetchError as e:
            logger.warning(f"Failed to fetch README for {repo.name}: {e}")
        else:
            modules.set_readme(module_id, readme)

        try:
            result = self._ingest_archive(module_id, repo)
        except ContentUnavailableError:
            logger.warning(f"Skipping {repo.name}: repository content unavailable")
            modules.delete(module_id)
            return False
        except FetchError:
            # Force the next incremental pass to retry this repository
            modules.set_last_updated(module_id, "")
            raise

        self.index_structure(module_id)
        for submodule_id in result.submodule_ids:
            self.index_structure(submodule_id)

        modules.set_has_examples(module_id, result.has_examples)

        if self._container.config.sync.ingest_changelogs:
            try:
                self._container.releases.ingest_latest_release(repo.name)
            except NotFoundError as e:
                logger.debug(f"No release ingested for {repo.name}: {e}")

        logger.debug(
            f"Synced repository: {repo.name}, files={result.files}, "
            f"submodules={len(result.submodule_ids)}"
        )
        return True

    def _ensure_submodule(self, repo: Repository, key: str) -> int:
        modules = self._container.module_repo
        submodule = Module(
            name=f"{repo.name}//modules/{key}",
            full_name=repo.full_name,
            description=f"Submodule {key} of {repo.name}",
            repo_url=repo.html_url,
            last_updated=repo.updated_at,
        )
        submodule_id, existed = modules.upsert(submodule)
        if existed:
            modules.clear_children(submodule_id)
        return submodule_id

    def _ingest_archive(self, module_id: int, repo: Repository) -> ArchiveResult:
        archive = self._github.get_archive(self._github.archive_url(repo.full_name))
        files = self._container.file_repo
        submodules: dict[str, int] = {}
        has_examples = False
        count = 0

        try:
            for entry in iter_archive_entries(archive, self._container.config.sync.skip_dirs):
                target_id = module_id
                if (key := entry.submodule) is not None:
                    if key not in submodules:
                        submodules[key] = self._ensure_submodule(repo, key)
                    target_id = submodules[key]

                files.insert(
                    ModuleFile(
                        module_id=target_id,
                        file_name=entry.name,
                        file_path=entry.path,
                        file_type=FileType.from_filename(entry.name),
                        content=entry.data.decode("utf-8", errors="replace"),
                        size_bytes=len(entry.data),
                    )
                )
                count += 1

                if entry.path.startswith("examples/"):
                    has_examples = True
        finally:
            archive.close()

        return ArchiveResult(files=count, has_examples=has_examples, submodule_ids=list(submodules.values()))

    def index_structure(self, module_id: int) -> ModuleStructure:
        """Extract and store the structure of a module's configuration files.

        Files that do not parse are logged and skipped.
        """
        structure = ModuleStructure()
        parsed: list[HCLFile] = []

        for file in self._container.file_repo.list_for_module(module_id, FileType.TERRAFORM):
            try:
                hcl_file = parse_hcl(file.content, file.file_path)
            except HCLParseError as e:
                logger.warning(f"Failed to parse {file.file_path}: {e.reason}")
                continue
            parsed.append(hcl_file)
            structure.extend(extract_structure(hcl_file, file.file_path))

        self._container.structure_repo.insert_structure(module_id, structure)

        parsed.sort(key=_provider_file_rank)
        provider = detect_provider(parsed, structure.resources)
        self._container.module_repo.set_provider(module_id, provider)

        logger.debug(
            f"Indexed structure: module_id={module_id}, files={len(parsed)}, "
            f"variables={len(structure.variables)}, outputs={len(structure.outputs)}, "
            f"resources={len(structure.resources)}, data_sources={len(structure.data_sources)}, "
            f"provider={provider!r}"
        )
        return structure

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def compare_tags(self, full_name: str, from_tag: str, to_tag: str) -> CompareResult:
        """Files changed between two tags of a repository.

        Raises:
            InvalidInputError: If any argument is empty or malformed.
            FetchError: If the comparison cannot be fetched.
        """
        full_name, from_tag, to_tag = full_name.strip(), from_tag.strip(), to_tag.strip()
        if not full_name or not from_tag or not to_tag:
            raise InvalidInputError("full_name, from_tag and to_tag are required")
        owner, _, name = full_name.partition("/")
        if not owner or not name or "/" in name:
            raise InvalidInputError(f"Expected owner/name, got {full_name!r}")

        return self._github.compare(full_name, from_tag, to_tag)


def _provider_file_rank(hcl_file: HCLFile) -> tuple[int, int, str]:
    path = hcl_file.filename
    name = path.rsplit("/", 1)[-1]
    depth = path.count("/")
    rank = PROVIDER_FILES.index(name) if name in PROVIDER_FILES else len(PROVIDER_FILES)
    return depth, rank, path
