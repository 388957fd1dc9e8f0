"""Configuration management for tfindex."""

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class GitHubConfig:
    """Remote host (GitHub REST API) configuration."""

    api_url: str = "https://api.github.com"
    org: str = "cloudnationhq"
    # Literal token or credential reference such as "$ENV:GITHUB_TOKEN"
    token: str | None = None
    timeout: float = 30.0
    cache_ttl: float = 600.0
    user_agent: str = "tfindex/1.0 (Terraform Module Indexer)"
    anonymous_rate_limit: int = 60
    authenticated_rate_limit: int = 5000
    # Window after which the token bucket is refilled to full capacity
    rate_limit_window: float = 3600.0


@dataclass
class SyncConfig:
    """Repository sync configuration."""

    module_prefix: str = "terraform-azure-"
    skip_dirs: tuple[str, ...] = (".git", ".github", "node_modules", ".terraform")
    # Name segments never used as category hints
    generic_name_words: tuple[str, ...] = ("terraform", "azure")
    changelog_candidates: tuple[str, ...] = (
        "CHANGELOG.md",
        "changelog.md",
        "docs/CHANGELOG.md",
        "docs/changelog.md",
    )
    ingest_changelogs: bool = True


def _default_db_path() -> Path:
    """Get default database path."""
    cache_dir = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    return cache_dir / "tfindex" / "index.db"


@dataclass
class Config:
    """Main application configuration."""

    db_path: Path = field(default_factory=_default_db_path)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        config = cls()

        if org := os.environ.get("GITHUB_ORG"):
            config.github.org = org

        if token := os.environ.get("GITHUB_TOKEN"):
            config.github.token = token

        if url := os.environ.get("GITHUB_API_URL"):
            config.github.api_url = url.rstrip("/")

        if prefix := os.environ.get("TFINDEX_MODULE_PREFIX"):
            config.sync.module_prefix = prefix

        if path := os.environ.get("INDEX_PATH"):
            config.db_path = Path(path)

        return config
