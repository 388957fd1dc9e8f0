"""Module file storage for tfindex."""

from loguru import logger

from ..core.types import FileType, ModuleFile
from .database import Database


class FileRepository:
    """Repository for files persisted from repository archives."""

    def __init__(self, db: Database):
        self.db = db

    def insert(self, file: ModuleFile) -> int:
        """Insert a file, replacing any file at the same module path.

        Returns:
            The file row ID.
        """
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO module_files (module_id, file_name, file_path, file_type, content, size_bytes)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(module_id, file_path) DO UPDATE SET
                    file_name = excluded.file_name,
                    file_type = excluded.file_type,
                    content = excluded.content,
                    size_bytes = excluded.size_bytes
                """,
                (
                    file.module_id,
                    file.file_name,
                    file.file_path,
                    file.file_type.value,
                    file.content,
                    file.size_bytes,
                ),
            )
            cursor.execute(
                "SELECT id FROM module_files WHERE module_id = ? AND file_path = ?",
                (file.module_id, file.file_path),
            )
            file_id = cursor.fetchone()[0]

        file.id = file_id
        logger.debug(f"Stored file: module_id={file.module_id}, path={file.file_path!r}")
        return file_id

    def list_for_module(self, module_id: int, file_type: FileType | None = None) -> list[ModuleFile]:
        """Files of a module ordered by path, optionally of one type."""
        if file_type is None:
            cursor = self.db.execute(
                "SELECT * FROM module_files WHERE module_id = ? ORDER BY file_path", (module_id,)
            )
        else:
            cursor = self.db.execute(
                "SELECT * FROM module_files WHERE module_id = ? AND file_type = ? ORDER BY file_path",
                (module_id, file_type.value),
            )
        return [self._row_to_file(row) for row in cursor.fetchall()]

    def get(self, module_id: int, file_path: str) -> ModuleFile | None:
        cursor = self.db.execute(
            "SELECT * FROM module_files WHERE module_id = ? AND file_path = ?",
            (module_id, file_path),
        )
        row = cursor.fetchone()
        return self._row_to_file(row) if row else None

    def count_for_module(self, module_id: int) -> int:
        cursor = self.db.execute(
            "SELECT COUNT(*) FROM module_files WHERE module_id = ?", (module_id,)
        )
        return cursor.fetchone()[0]

    def _row_to_file(self, row) -> ModuleFile:
        return ModuleFile(
            id=row["id"],
            module_id=row["module_id"],
            file_name=row["file_name"],
            file_path=row["file_path"],
            file_type=FileType(row["file_type"]),
            content=row["content"],
            size_bytes=row["size_bytes"],
        )
