"""Type definitions for tfindex."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from ..parsing.values import StaticValue


class FileType(str, Enum):
    """Coarse classification of a persisted module file."""

    TERRAFORM = "terraform"
    MARKDOWN = "markdown"
    YAML = "yaml"
    JSON = "json"
    OTHER = "other"

    @classmethod
    def from_filename(cls, file_name: str) -> "FileType":
        """Classify a file by its name."""
        lower = file_name.lower()
        if lower.endswith(".tf"):
            return cls.TERRAFORM
        if lower.endswith(".md"):
            return cls.MARKDOWN
        if lower.endswith((".yml", ".yaml")):
            return cls.YAML
        if lower.endswith(".json"):
            return cls.JSON
        return cls.OTHER


@dataclass(frozen=True)
class Repository:
    """A repository as listed by the remote host.

    Transient: only used to decide whether to sync and to drive
    archive retrieval.
    """

    id: int
    name: str
    full_name: str
    description: str = ""
    updated_at: str = ""
    html_url: str = ""
    private: bool = False
    archived: bool = False
    size: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Repository":
        """Build from a GitHub repository payload."""
        return cls(
            id=int(data.get("id") or 0),
            name=data.get("name") or "",
            full_name=data.get("full_name") or "",
            description=data.get("description") or "",
            updated_at=data.get("updated_at") or "",
            html_url=data.get("html_url") or "",
            private=bool(data.get("private", False)),
            archived=bool(data.get("archived", False)),
            size=int(data.get("size") or 0),
        )


@dataclass
class Module:
    """An indexed module (root repository or submodule)."""

    name: str
    full_name: str = ""
    description: str = ""
    repo_url: str = ""
    last_updated: str = ""
    id: Optional[int] = None
    synced_at: Optional[str] = None
    readme_content: Optional[str] = None
    has_examples: bool = False
    provider: str = ""
    tags: list[str] = field(default_factory=list)

    @property
    def is_submodule(self) -> bool:
        """Whether this module was discovered under a modules/ path."""
        return "//modules/" in self.name

    @property
    def display_name(self) -> str:
        """Full owner/name reference, falling back to the module name."""
        return self.full_name or self.name


@dataclass
class ModuleFile:
    """A file persisted under a module."""

    module_id: int
    file_name: str
    file_path: str
    file_type: FileType
    content: str
    size_bytes: int
    id: Optional[int] = None


@dataclass
class Variable:
    """A `variable` block."""

    name: str
    type: str = ""
    description: str = ""
    default_text: Optional[str] = None
    default_value: Optional[StaticValue] = None
    required: bool = True
    sensitive: bool = False
    source_file: str = ""


@dataclass
class Output:
    """An `output` block."""

    name: str
    description: str = ""
    sensitive: bool = False
    source_file: str = ""


@dataclass
class Resource:
    """A `resource` block."""

    type: str
    name: str
    provider: str
    source_file: str = ""


@dataclass
class DataSource:
    """A `data` block."""

    type: str
    name: str
    provider: str
    source_file: str = ""


@dataclass
class ModuleStructure:
    """Structural entities extracted from one or more configuration files."""

    variables: list[Variable] = field(default_factory=list)
    outputs: list[Output] = field(default_factory=list)
    resources: list[Resource] = field(default_factory=list)
    data_sources: list[DataSource] = field(default_factory=list)

    def extend(self, other: "ModuleStructure") -> None:
        """Append the entities of another structure."""
        self.variables.extend(other.variables)
        self.outputs.extend(other.outputs)
        self.resources.extend(other.resources)
        self.data_sources.extend(other.data_sources)

    @property
    def is_empty(self) -> bool:
        return not (self.variables or self.outputs or self.resources or self.data_sources)


@dataclass
class ModuleRelease:
    """A released version of a module."""

    module_id: int
    version: str
    tag: str
    id: Optional[int] = None
    release_date: Optional[str] = None
    previous_tag: Optional[str] = None
    commit_sha: Optional[str] = None
    previous_commit_sha: Optional[str] = None
    comparison_url: Optional[str] = None


@dataclass
class ModuleReleaseEntry:
    """One changelog bullet of a release."""

    section: str
    entry_key: str
    title: str
    order_index: int
    identifier: Optional[str] = None
    release_id: Optional[int] = None
    id: Optional[int] = None


@dataclass
class SyncProgress:
    """Summary of a sync pass."""

    total_repos: int = 0
    processed_repos: int = 0
    skipped_repos: int = 0
    current_repo: str = ""
    errors: list[str] = field(default_factory=list)
    updated_repos: list[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def synced_repos(self) -> int:
        """Repositories that were processed without error and not skipped."""
        return self.processed_repos - len(self.errors) - self.skipped_repos


@dataclass(frozen=True)
class CompareFile:
    """One changed file of a two-ref comparison."""

    filename: str
    patch: str = ""
    status: str = ""


@dataclass
class CompareResult:
    """Files changed between two refs."""

    files: list[CompareFile] = field(default_factory=list)
    html_url: str = ""
    base_commit_sha: str = ""
    head_commit_sha: str = ""
