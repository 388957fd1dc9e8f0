"""Release service: changelog ingestion, summaries and diff snippets."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from ..core.exceptions import (
    ChangelogNotFoundError,
    InvalidInputError,
    ModuleNotIndexedError,
    NotFoundError,
    ReleaseNotFoundError,
)
from ..core.types import Module, ModuleFile, ModuleRelease, ModuleReleaseEntry
from ..releases.changelog import (
    extract_release_block,
    list_changelog_versions,
    normalize_version,
    tag_for_version,
)
from ..releases.formatting import format_release_summary, format_snippet
from ..releases.matcher import DEFAULT_MAX_LINES, locate_patch, select_release_entry, trim_patch_lines

if TYPE_CHECKING:
    from .container import ServiceContainer

ReleaseWithEntries = tuple[ModuleRelease, list[ModuleReleaseEntry]]


class ReleaseService:
    """Service for module release metadata.

    Example:

        with ServiceContainer(config) as services:
            services.releases.backfill_release("terraform-azure-vnet", "2.1.0")
            print(services.releases.get_release_summary("terraform-azure-vnet"))
    """

    def __init__(self, container: "ServiceContainer"):
        """Initialize ReleaseService.

        Args:
            container: Service container with shared resources.
        """
        self._container = container

    def resolve_module(self, name: str) -> Module:
        """Find a module by name or ``owner/name`` reference.

        Raises:
            InvalidInputError: If the name is empty.
            ModuleNotIndexedError: If no such module is indexed.
        """
        name = name.strip()
        if not name:
            raise InvalidInputError("module name is required")

        modules = self._container.module_repo
        module = modules.get_by_name(name)
        if module is None and "/" in name and "//" not in name:
            module = modules.get_by_full_name(name)
        if module is None:
            raise ModuleNotIndexedError(name)
        return module

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get_release(
        self, module_name: str, version: str | None = None
    ) -> tuple[Module, ModuleRelease, list[ModuleReleaseEntry]]:
        """Load a release and its entries (the latest when no version is given).

        The version is tried without a ``v`` prefix first, then as a tag.

        Raises:
            ModuleNotIndexedError: If the module is not indexed.
            ReleaseNotFoundError: If no matching release is stored.
        """
        module = self.resolve_module(module_name)
        releases = self._container.release_repo
        version = (version or "").strip()

        found: ReleaseWithEntries | None
        if not version:
            found = releases.get_latest_with_entries(module.id)  # type: ignore[arg-type]
        else:
            found = releases.get_with_entries_by_version(module.id, normalize_version(version))  # type: ignore[arg-type]
            if found is None:
                found = releases.get_with_entries_by_tag(module.id, tag_for_version(version))  # type: ignore[arg-type]

        if found is None:
            raise ReleaseNotFoundError(module.name, version or None)

        release, entries = found
        return module, release, entries

    def get_release_summary(self, module_name: str, version: str | None = None) -> str:
        """Render a release as a plain-text summary."""
        module, release, entries = self.get_release(module_name, version)
        return format_release_summary(module.display_name, release, entries)

    # -------------------------------------------------------------------------
    # Changelog ingestion
    # -------------------------------------------------------------------------

    def find_changelog(self, module: Module) -> ModuleFile | None:
        """First indexed changelog file of a module."""
        files = self._container.file_repo
        for candidate in self._container.config.sync.changelog_candidates:
            changelog = files.get(module.id, candidate)  # type: ignore[arg-type]
            if changelog is not None:
                return changelog
        return None

    def backfill_release(self, module_name: str, version: str) -> ReleaseWithEntries:
        """Store a release and its entries from the module's indexed changelog.

        Re-running replaces the entries of that release.

        Raises:
            InvalidInputError: If the version is empty.
            ChangelogNotFoundError: If the module has no (non-empty) changelog.
            ReleaseNotFoundError: If the changelog does not mention the version.
        """
        if not version.strip():
            raise InvalidInputError("version is required")

        module = self.resolve_module(module_name)
        changelog = self.find_changelog(module)
        if changelog is None or not changelog.content.strip():
            raise ChangelogNotFoundError(module.name)

        return self._ingest(module, changelog.content.strip(), version)

    def ingest_latest_release(self, module_name: str) -> ModuleRelease | None:
        """Store the newest release described by the module's changelog.

        Returns:
            The stored release, or None when there is no changelog or it
            names no version.
        """
        module = self.resolve_module(module_name)
        changelog = self.find_changelog(module)
        if changelog is None:
            return None

        versions = list_changelog_versions(changelog.content)
        if not versions:
            return None

        release, _ = self._ingest(module, changelog.content.strip(), versions[0])
        return release

    def _ingest(self, module: Module, changelog: str, version: str) -> ReleaseWithEntries:
        normalized = normalize_version(version.lower())
        block = extract_release_block(changelog, normalized)
        if block is None:
            raise ReleaseNotFoundError(module.name, version)

        previous_tag = block.previous_tag
        if previous_tag is None:
            versions = list_changelog_versions(changelog)
            if normalized in versions:
                index = versions.index(normalized)
                if index + 1 < len(versions):
                    previous_tag = tag_for_version(versions[index + 1])

        release = ModuleRelease(
            module_id=module.id,  # type: ignore[arg-type]
            version=normalized,
            tag=tag_for_version(version),
            release_date=block.release_date,
            previous_tag=previous_tag,
            comparison_url=block.comparison_url,
        )
        releases = self._container.release_repo
        release_id = releases.upsert(release)
        releases.replace_entries(release_id, block.entries)

        logger.info(
            f"Stored release: module={module.name!r}, tag={release.tag}, entries={len(block.entries)}"
        )
        return release, block.entries

    # -------------------------------------------------------------------------
    # Snippets
    # -------------------------------------------------------------------------

    def get_release_snippet(
        self,
        module_name: str,
        version: str,
        query: str,
        max_lines: int = DEFAULT_MAX_LINES,
        fallback: str | None = None,
    ) -> str:
        """Show the diff hunk that best matches a changelog entry.

        Raises:
            InvalidInputError: If version or query is empty.
            NotFoundError: If the module, release, entry or diff is missing.
            FetchError: If the comparison cannot be fetched.
        """
        if not version.strip() or not query.strip():
            raise InvalidInputError("version and query are required")

        module, release, entries = self.get_release(module_name, version)

        entry = select_release_entry(entries, query, fallback)
        if entry is None:
            raise NotFoundError("No matching release entry found for that query")

        if not release.previous_tag:
            raise NotFoundError(
                "Unable to compute diff for the earliest release (missing previous tag)"
            )

        compare = self._container.sync.compare_tags(
            module.full_name, release.previous_tag, release.tag
        )
        self._record_commits(release, compare.base_commit_sha, compare.head_commit_sha, compare.html_url)

        match = locate_patch(compare, entry, query)
        if match is None:
            raise NotFoundError(
                "Diff data not available for that entry. "
                "Try a different query or rerun the incremental sync."
            )

        if max_lines <= 0:
            max_lines = DEFAULT_MAX_LINES
        patch, truncated = trim_patch_lines(match.patch, max_lines)
        return format_snippet(
            module.display_name, release, entry, match.filename, patch, truncated, max_lines
        )

    def _record_commits(self, release: ModuleRelease, base_sha: str, head_sha: str, url: str) -> None:
        if not (base_sha or head_sha or url):
            return
        release.previous_commit_sha = release.previous_commit_sha or base_sha or None
        release.commit_sha = release.commit_sha or head_sha or None
        release.comparison_url = release.comparison_url or url or None
        self._container.release_repo.upsert(release)
