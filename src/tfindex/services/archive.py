"""Streaming extraction of repository tarballs."""

from __future__ import annotations

import tarfile
import zlib
from dataclasses import dataclass
from typing import IO, Iterable, Iterator

from ..core.exceptions import FetchError

DEFAULT_SKIP_DIRS = (".git", ".github", "node_modules", ".terraform")


@dataclass(frozen=True)
class ArchiveEntry:
    """A regular file from an archive, path relative to the repository root."""

    path: str
    data: bytes

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def submodule(self) -> str | None:
        """``foo`` for ``modules/foo/<file>``, else None."""
        parts = self.path.split("/")
        if len(parts) >= 3 and parts[0] == "modules" and parts[1]:
            return parts[1]
        return None


def normalize_archive_path(name: str) -> str:
    """Strip the archive's synthetic top-level directory.

    Returns:
        The relative path, or an empty string for top-level entries.
    """
    parts = name.split("/", 1)
    if len(parts) < 2:
        return ""
    return parts[1]


def should_skip_path(relative_path: str, skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS) -> bool:
    """Whether any path segment names a skipped directory."""
    skip = set(skip_dirs)
    return any(segment in skip for segment in relative_path.split("/"))


def iter_archive_entries(
    archive: IO[bytes],
    skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
) -> Iterator[ArchiveEntry]:
    """Yield regular files of a gzip-compressed tarball in archive order.

    Raises:
        FetchError: If the archive is corrupt.
    """
    skip = tuple(skip_dirs)
    try:
        with tarfile.open(fileobj=archive, mode="r|gz") as tar:
            for member in tar:
                if not member.isreg():
                    continue
                relative_path = normalize_archive_path(member.name)
                if not relative_path or should_skip_path(relative_path, skip):
                    continue
                extracted = tar.extractfile(member)
                if extracted is None:
                    continue
                yield ArchiveEntry(relative_path, extracted.read())
    except (tarfile.TarError, EOFError, OSError, zlib.error) as e:
        raise FetchError("<archive>", f"failed to read archive: {e}") from e
