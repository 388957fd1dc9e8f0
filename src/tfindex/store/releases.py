"""Release and changelog entry storage for tfindex."""

from loguru import logger

from ..core.types import ModuleRelease, ModuleReleaseEntry
from .database import Database
from .modules import utc_now

ReleaseWithEntries = tuple[ModuleRelease, list[ModuleReleaseEntry]]


class ReleaseRepository:
    """Repository for module releases and their entries."""

    def __init__(self, db: Database):
        self.db = db

    def upsert(self, release: ModuleRelease) -> int:
        """Insert a release or update the one with the same module and version.

        Optional fields left as None keep their stored values.

        Returns:
            The release row ID.
        """
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO module_releases
                    (module_id, version, tag, release_date, previous_tag, commit_sha,
                     previous_commit_sha, comparison_url, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(module_id, version) DO UPDATE SET
                    tag = excluded.tag,
                    release_date = COALESCE(excluded.release_date, module_releases.release_date),
                    previous_tag = COALESCE(excluded.previous_tag, module_releases.previous_tag),
                    commit_sha = COALESCE(excluded.commit_sha, module_releases.commit_sha),
                    previous_commit_sha = COALESCE(
                        excluded.previous_commit_sha, module_releases.previous_commit_sha
                    ),
                    comparison_url = COALESCE(excluded.comparison_url, module_releases.comparison_url)
                """,
                (
                    release.module_id,
                    release.version,
                    release.tag,
                    release.release_date,
                    release.previous_tag,
                    release.commit_sha,
                    release.previous_commit_sha,
                    release.comparison_url,
                    utc_now(),
                ),
            )
            cursor.execute(
                "SELECT id FROM module_releases WHERE module_id = ? AND version = ?",
                (release.module_id, release.version),
            )
            release_id = cursor.fetchone()[0]

        release.id = release_id
        logger.debug(
            f"Stored release: id={release_id}, module_id={release.module_id}, version={release.version!r}"
        )
        return release_id

    def replace_entries(self, release_id: int, entries: list[ModuleReleaseEntry]) -> None:
        """Atomically replace every entry of a release."""
        with self.db.transaction() as cursor:
            cursor.execute("DELETE FROM module_release_entries WHERE release_id = ?", (release_id,))
            cursor.executemany(
                """
                INSERT INTO module_release_entries
                    (release_id, section, entry_key, title, order_index, identifier)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (release_id, e.section, e.entry_key, e.title, e.order_index, e.identifier)
                    for e in entries
                ],
            )
        for entry in entries:
            entry.release_id = release_id

    def get_with_entries_by_version(self, module_id: int, version: str) -> ReleaseWithEntries | None:
        cursor = self.db.execute(
            "SELECT * FROM module_releases WHERE module_id = ? AND version = ?",
            (module_id, version),
        )
        return self._with_entries(cursor.fetchone())

    def get_with_entries_by_tag(self, module_id: int, tag: str) -> ReleaseWithEntries | None:
        cursor = self.db.execute(
            "SELECT * FROM module_releases WHERE module_id = ? AND tag = ? ORDER BY id DESC LIMIT 1",
            (module_id, tag),
        )
        return self._with_entries(cursor.fetchone())

    def get_latest_with_entries(self, module_id: int) -> ReleaseWithEntries | None:
        """Most recent release by date, then by insertion."""
        cursor = self.db.execute(
            """
            SELECT * FROM module_releases WHERE module_id = ?
            ORDER BY COALESCE(release_date, '') DESC, id DESC
            LIMIT 1
            """,
            (module_id,),
        )
        return self._with_entries(cursor.fetchone())

    def list_for_module(self, module_id: int) -> list[ModuleRelease]:
        cursor = self.db.execute(
            """
            SELECT * FROM module_releases WHERE module_id = ?
            ORDER BY COALESCE(release_date, '') DESC, id DESC
            """,
            (module_id,),
        )
        return [self._row_to_release(row) for row in cursor.fetchall()]

    def list_entries(self, release_id: int) -> list[ModuleReleaseEntry]:
        cursor = self.db.execute(
            "SELECT * FROM module_release_entries WHERE release_id = ? ORDER BY order_index",
            (release_id,),
        )
        return [
            ModuleReleaseEntry(
                id=row["id"],
                release_id=row["release_id"],
                section=row["section"],
                entry_key=row["entry_key"],
                title=row["title"],
                order_index=row["order_index"],
                identifier=row["identifier"],
            )
            for row in cursor.fetchall()
        ]

    def _with_entries(self, row) -> ReleaseWithEntries | None:
        if row is None:
            return None
        release = self._row_to_release(row)
        return release, self.list_entries(release.id)  # type: ignore[arg-type]

    def _row_to_release(self, row) -> ModuleRelease:
        return ModuleRelease(
            id=row["id"],
            module_id=row["module_id"],
            version=row["version"],
            tag=row["tag"],
            release_date=row["release_date"],
            previous_tag=row["previous_tag"],
            commit_sha=row["commit_sha"],
            previous_commit_sha=row["previous_commit_sha"],
            comparison_url=row["comparison_url"],
        )
