"""SQLite persistence for modules, files, structure and releases."""

from .database import Database
from .files import FileRepository
from .modules import ModuleRepository
from .releases import ReleaseRepository
from .structure import StructureRepository

__all__ = [
    "Database",
    "FileRepository",
    "ModuleRepository",
    "ReleaseRepository",
    "StructureRepository",
]
