"""Module CRUD operations for tfindex."""

import json
from datetime import datetime, timezone

from loguru import logger

from ..core.types import Module
from .database import Database

# Tables holding a module's structural children (releases are kept)
CHILD_TABLES = (
    "module_files",
    "module_variables",
    "module_outputs",
    "module_resources",
    "module_data_sources",
)

SUBMODULE_SEPARATOR = "//modules/"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ModuleRepository:
    """Repository for module operations."""

    def __init__(self, db: Database):
        """Initialize with database connection.

        Args:
            db: Database instance to use for operations.
        """
        self.db = db

    def upsert(self, module: Module) -> tuple[int, bool]:
        """Insert a module or update the existing row with the same name.

        Args:
            module: Module to store; ``synced_at`` is set to now.

        Returns:
            Tuple of (module_id, existed_before).
        """
        existing = self.get_by_name(module.name)
        now = utc_now()

        with self.db.transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO modules (name, full_name, description, repo_url, last_updated, synced_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(name) DO UPDATE SET
                    full_name = excluded.full_name,
                    description = excluded.description,
                    repo_url = excluded.repo_url,
                    last_updated = excluded.last_updated,
                    synced_at = excluded.synced_at
                """,
                (
                    module.name,
                    module.full_name,
                    module.description,
                    module.repo_url,
                    module.last_updated,
                    now,
                ),
            )
            if existing is None:
                module_id = cursor.lastrowid
            else:
                module_id = existing.id

        module.id = module_id
        module.synced_at = now
        logger.debug(f"Upserted module: id={module_id}, name={module.name!r}, existed={existing is not None}")
        return module_id, existing is not None  # type: ignore[return-value]

    def get_by_name(self, name: str) -> Module | None:
        """Get module by name.

        Returns:
            Module if found, None otherwise.
        """
        cursor = self.db.execute("SELECT * FROM modules WHERE name = ?", (name,))
        row = cursor.fetchone()
        return self._row_to_module(row) if row else None

    def get_by_id(self, module_id: int) -> Module | None:
        cursor = self.db.execute("SELECT * FROM modules WHERE id = ?", (module_id,))
        row = cursor.fetchone()
        return self._row_to_module(row) if row else None

    def get_by_full_name(self, full_name: str) -> Module | None:
        """Root module for an ``owner/name`` reference."""
        cursor = self.db.execute(
            "SELECT * FROM modules WHERE full_name = ? AND instr(name, ?) = 0 ORDER BY id LIMIT 1",
            (full_name, SUBMODULE_SEPARATOR),
        )
        row = cursor.fetchone()
        return self._row_to_module(row) if row else None

    def list_all(self) -> list[Module]:
        cursor = self.db.execute("SELECT * FROM modules ORDER BY name")
        return [self._row_to_module(row) for row in cursor.fetchall()]

    def list_submodules(self, repo_name: str) -> list[Module]:
        prefix = f"{repo_name}{SUBMODULE_SEPARATOR}"
        cursor = self.db.execute(
            "SELECT * FROM modules WHERE substr(name, 1, ?) = ? ORDER BY name",
            (len(prefix), prefix),
        )
        return [self._row_to_module(row) for row in cursor.fetchall()]

    def clear_children(self, module_id: int) -> None:
        """Delete every file and structural entity of a module."""
        with self.db.transaction() as cursor:
            for table in CHILD_TABLES:
                cursor.execute(f"DELETE FROM {table} WHERE module_id = ?", (module_id,))
        logger.debug(f"Cleared module children: id={module_id}")

    def delete(self, module_id: int) -> None:
        """Delete a module and, by cascade, everything it owns."""
        with self.db.transaction() as cursor:
            cursor.execute("DELETE FROM modules WHERE id = ?", (module_id,))
        logger.debug(f"Deleted module: id={module_id}")

    def delete_submodules(self, repo_name: str) -> int:
        """Delete every submodule of a repository.

        Returns:
            Number of submodules deleted.
        """
        prefix = f"{repo_name}{SUBMODULE_SEPARATOR}"
        with self.db.transaction() as cursor:
            cursor.execute(
                "DELETE FROM modules WHERE substr(name, 1, ?) = ?",
                (len(prefix), prefix),
            )
            deleted = cursor.rowcount
        if deleted:
            logger.debug(f"Deleted submodules: repo={repo_name!r}, count={deleted}")
        return deleted

    def set_readme(self, module_id: int, readme: str) -> None:
        with self.db.transaction() as cursor:
            cursor.execute("UPDATE modules SET readme_content = ? WHERE id = ?", (readme, module_id))

    def set_has_examples(self, module_id: int, has_examples: bool) -> None:
        with self.db.transaction() as cursor:
            cursor.execute(
                "UPDATE modules SET has_examples = ? WHERE id = ?", (int(has_examples), module_id)
            )

    def set_tags(self, module_id: int, tags: list[str]) -> None:
        with self.db.transaction() as cursor:
            cursor.execute("UPDATE modules SET tags = ? WHERE id = ?", (json.dumps(tags), module_id))

    def set_last_updated(self, module_id: int, last_updated: str) -> None:
        with self.db.transaction() as cursor:
            cursor.execute(
                "UPDATE modules SET last_updated = ? WHERE id = ?", (last_updated, module_id)
            )

    def set_provider(self, module_id: int, provider: str) -> None:
        with self.db.transaction() as cursor:
            cursor.execute("UPDATE modules SET provider = ? WHERE id = ?", (provider, module_id))

    def count(self) -> int:
        cursor = self.db.execute("SELECT COUNT(*) FROM modules")
        return cursor.fetchone()[0]

    def _row_to_module(self, row) -> Module:
        """Convert database row to Module object."""
        return Module(
            id=row["id"],
            name=row["name"],
            full_name=row["full_name"],
            description=row["description"],
            repo_url=row["repo_url"],
            last_updated=row["last_updated"],
            synced_at=row["synced_at"],
            readme_content=row["readme_content"],
            has_examples=bool(row["has_examples"]),
            provider=row["provider"],
            tags=json.loads(row["tags"] or "[]"),
        )
