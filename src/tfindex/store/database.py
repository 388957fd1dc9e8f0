"""Connection handling for the tfindex SQLite index."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from loguru import logger

from ..core.exceptions import DatabaseError
from .schema import SCHEMA_VERSION, get_schema


class Database:
    """Owns the single sqlite3 connection used by every repository.

    The schema is created on connect, so a fresh path yields a usable
    empty index. Foreign keys are enforced so deleting a module cascades
    to its files, structure rows and releases.
    """

    def __init__(self, path: Path):
        """
        Args:
            path: Index file location, or ``:memory:`` for a throwaway index.
        """
        self.path = path
        self._connection: sqlite3.Connection | None = None

    @property
    def connected(self) -> bool:
        return self._connection is not None

    def _require(self) -> sqlite3.Connection:
        if self._connection is None:
            raise DatabaseError(f"Index at {self.path} is not open")
        return self._connection

    def connect(self) -> None:
        """Open the index, creating its directory and tables on first use."""
        try:
            if str(self.path) != ":memory:":
                self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.path))
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            self._connection = conn
            self._init_schema()
        except Exception as e:
            self._connection = None
            raise DatabaseError(f"Cannot open index {self.path}: {e}") from e
        logger.debug(f"Database connected: path={self.path} schema_version={SCHEMA_VERSION}")

    def close(self) -> None:
        conn, self._connection = self._connection, None
        if conn is None:
            return
        try:
            conn.close()
        except sqlite3.Error as e:
            raise DatabaseError(f"Cannot close index {self.path}: {e}") from e

    def __enter__(self) -> "Database":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor whose statements commit together.

        Any exception inside the block rolls the whole unit back and is
        re-raised as DatabaseError.
        """
        conn = self._require()
        cursor = conn.cursor()
        try:
            yield cursor
            conn.commit()
        except Exception as e:
            conn.rollback()
            raise DatabaseError(f"Index write rolled back: {e}") from e
        finally:
            cursor.close()

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """Run one statement outside an explicit transaction."""
        conn = self._require()
        try:
            return conn.execute(sql, params)
        except sqlite3.Error as e:
            raise DatabaseError(f"Index query failed: {e}") from e

    def executescript(self, sql: str) -> None:
        conn = self._require()
        try:
            conn.executescript(sql)
        except sqlite3.Error as e:
            raise DatabaseError(f"Index script failed: {e}") from e

    def _init_schema(self) -> None:
        self.executescript(get_schema())
        self.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
