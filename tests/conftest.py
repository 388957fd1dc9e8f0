"""Pytest configuration and fixtures."""

import io
import tarfile
from pathlib import Path

import pytest
import respx

from tfindex.core.config import Config
from tfindex.services import ServiceContainer
from tfindex.sources.github import GitHubClient
from tfindex.store.database import Database
from tfindex.store.files import FileRepository
from tfindex.store.modules import ModuleRepository
from tfindex.store.releases import ReleaseRepository
from tfindex.store.structure import StructureRepository

API_URL = "https://api.github.test"
ORG = "cloudnationhq"


def make_tarball(files: dict[str, str | bytes], root: str = "cloudnationhq-repo-abc1234") -> bytes:
    """Build a gzip tarball with every file under a synthetic top-level directory."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        root_info = tarfile.TarInfo(root)
        root_info.type = tarfile.DIRTYPE
        tar.addfile(root_info)
        for path, content in files.items():
            data = content.encode("utf-8") if isinstance(content, str) else content
            info = tarfile.TarInfo(f"{root}/{path}")
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def repo_payload(name: str, updated_at: str = "2024-01-01T00:00:00Z", **overrides) -> dict:
    """A repository item as returned by the organization listing."""
    payload = {
        "id": abs(hash(name)) % 100000,
        "name": name,
        "full_name": f"{ORG}/{name}",
        "description": f"Terraform module for {name}",
        "updated_at": updated_at,
        "html_url": f"https://github.com/{ORG}/{name}",
        "private": False,
        "archived": False,
        "size": 42,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def test_db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path for tests."""
    return tmp_path / "test.db"


@pytest.fixture
def db(test_db_path: Path) -> Database:
    """Provide a connected database instance."""
    database = Database(test_db_path)
    database.connect()
    yield database
    database.close()


@pytest.fixture
def module_repo(db: Database) -> ModuleRepository:
    return ModuleRepository(db)


@pytest.fixture
def file_repo(db: Database) -> FileRepository:
    return FileRepository(db)


@pytest.fixture
def structure_repo(db: Database) -> StructureRepository:
    return StructureRepository(db)


@pytest.fixture
def release_repo(db: Database) -> ReleaseRepository:
    return ReleaseRepository(db)


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Provide a Config pointing at a temporary database and the mocked API."""
    cfg = Config()
    cfg.db_path = tmp_path / "index.db"
    cfg.github.api_url = API_URL
    cfg.github.org = ORG
    return cfg


@pytest.fixture
def mock_api():
    """Respx router for the mocked GitHub API; unmatched requests fail."""
    with respx.mock(base_url=API_URL, assert_all_called=False) as router:
        yield router


@pytest.fixture
def github(config: Config, mock_api) -> GitHubClient:
    """Anonymous client talking to the mocked API."""
    client = GitHubClient(config.github)
    yield client
    client.close()


@pytest.fixture
def services(config: Config, github: GitHubClient) -> ServiceContainer:
    """Connected container wired to the mocked client."""
    container = ServiceContainer(config, github=github)
    container.connect()
    yield container
    container.close()


@pytest.fixture
def tarball():
    """Factory building repository tarballs."""
    return make_tarball


@pytest.fixture
def repo_item():
    """Factory building repository listing items."""
    return repo_payload
