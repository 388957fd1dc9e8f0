"""Core types, configuration and exceptions for tfindex."""

from .config import Config, GitHubConfig, SyncConfig
from .exceptions import (
    ChangelogNotFoundError,
    ContentUnavailableError,
    DatabaseError,
    FetchError,
    HCLParseError,
    InvalidInputError,
    ModuleNotIndexedError,
    NotFoundError,
    RateLimitExceededError,
    ReleaseNotFoundError,
    SyncError,
    TfIndexError,
)
from .types import (
    CompareFile,
    CompareResult,
    DataSource,
    FileType,
    Module,
    ModuleFile,
    ModuleRelease,
    ModuleReleaseEntry,
    ModuleStructure,
    Output,
    Repository,
    Resource,
    SyncProgress,
    Variable,
)

__all__ = [
    "Config",
    "GitHubConfig",
    "SyncConfig",
    "TfIndexError",
    "DatabaseError",
    "InvalidInputError",
    "FetchError",
    "RateLimitExceededError",
    "ContentUnavailableError",
    "HCLParseError",
    "NotFoundError",
    "ModuleNotIndexedError",
    "ReleaseNotFoundError",
    "ChangelogNotFoundError",
    "SyncError",
    "FileType",
    "Repository",
    "Module",
    "ModuleFile",
    "Variable",
    "Output",
    "Resource",
    "DataSource",
    "ModuleStructure",
    "ModuleRelease",
    "ModuleReleaseEntry",
    "SyncProgress",
    "CompareFile",
    "CompareResult",
]
