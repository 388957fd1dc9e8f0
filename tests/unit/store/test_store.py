"""Tests for the SQLite store: schema, modules, files, structure and releases."""

import pytest

from tfindex.core.exceptions import DatabaseError
from tfindex.core.types import (
    DataSource,
    FileType,
    Module,
    ModuleFile,
    ModuleRelease,
    ModuleReleaseEntry,
    ModuleStructure,
    Output,
    Resource,
    Variable,
)
from tfindex.parsing.values import StaticValue
from tfindex.store.database import Database
from tfindex.store.schema import SCHEMA_VERSION


def _module(name: str = "terraform-azure-vnet", **overrides) -> Module:
    values = {
        "name": name,
        "full_name": f"cloudnationhq/{name.split('//')[0]}",
        "description": "Virtual network",
        "repo_url": f"https://github.com/cloudnationhq/{name}",
        "last_updated": "2024-01-01T00:00:00Z",
    }
    values.update(overrides)
    return Module(**values)


def _file(module_id: int, path: str, content: str = "") -> ModuleFile:
    name = path.rsplit("/", 1)[-1]
    return ModuleFile(
        module_id=module_id,
        file_name=name,
        file_path=path,
        file_type=FileType.from_filename(name),
        content=content,
        size_bytes=len(content),
    )


class TestDatabase:
    """Tests for connection lifecycle and schema."""

    def test_connect_creates_parent_directories(self, tmp_path):
        db = Database(tmp_path / "nested" / "dir" / "index.db")
        db.connect()

        assert (tmp_path / "nested" / "dir" / "index.db").exists()
        db.close()

    def test_in_memory(self):
        with Database(":memory:") as db:
            assert db.execute("SELECT COUNT(*) FROM modules").fetchone()[0] == 0

    def test_schema_version_recorded(self, db: Database):
        assert db.execute("PRAGMA user_version").fetchone()[0] == SCHEMA_VERSION

    def test_connect_is_idempotent_on_existing_file(self, test_db_path):
        with Database(test_db_path):
            pass
        db = Database(test_db_path)
        db.connect()

        assert db.connected
        db.close()

    def test_execute_after_close_raises(self, test_db_path):
        db = Database(test_db_path)
        db.connect()
        db.close()

        with pytest.raises(DatabaseError, match="is not open"):
            db.execute("SELECT 1")

    def test_failed_transaction_rolls_back(self, db: Database, module_repo):
        module_repo.upsert(_module())

        with pytest.raises(DatabaseError):
            with db.transaction() as cursor:
                cursor.execute("UPDATE modules SET description = 'changed'")
                cursor.execute("INSERT INTO no_such_table VALUES (1)")

        assert module_repo.get_by_name("terraform-azure-vnet").description == "Virtual network"


class TestModuleRepository:
    """Tests for ModuleRepository."""

    def test_upsert_reports_existence(self, module_repo):
        first_id, existed = module_repo.upsert(_module())
        second_id, existed_again = module_repo.upsert(_module(description="Updated"))

        assert existed is False
        assert existed_again is True
        assert first_id == second_id
        assert module_repo.get_by_id(first_id).description == "Updated"
        assert module_repo.count() == 1

    def test_setters(self, module_repo):
        module_id, _ = module_repo.upsert(_module())

        module_repo.set_readme(module_id, "# VNet")
        module_repo.set_has_examples(module_id, True)
        module_repo.set_tags(module_id, ["network", "azurerm"])
        module_repo.set_provider(module_id, "azurerm")
        module_repo.set_last_updated(module_id, "")

        module = module_repo.get_by_id(module_id)
        assert module.readme_content == "# VNet"
        assert module.has_examples is True
        assert module.tags == ["network", "azurerm"]
        assert module.provider == "azurerm"
        assert module.last_updated == ""
        assert module.synced_at

    def test_full_name_lookup_ignores_submodules(self, module_repo):
        module_repo.upsert(_module("terraform-azure-vnet//modules/subnet"))
        root_id, _ = module_repo.upsert(_module())

        found = module_repo.get_by_full_name("cloudnationhq/terraform-azure-vnet")

        assert found.id == root_id

    def test_delete_submodules_matches_prefix_only(self, module_repo):
        module_repo.upsert(_module())
        module_repo.upsert(_module("terraform-azure-vnet//modules/subnet"))
        module_repo.upsert(_module("terraform-azure-vnet//modules/peering"))
        module_repo.upsert(_module("terraform-azure-vnet-extra//modules/subnet"))

        assert [m.name for m in module_repo.list_submodules("terraform-azure-vnet")] == [
            "terraform-azure-vnet//modules/peering",
            "terraform-azure-vnet//modules/subnet",
        ]
        assert module_repo.delete_submodules("terraform-azure-vnet") == 2
        assert module_repo.count() == 2

    def test_delete_cascades(self, module_repo, file_repo, structure_repo):
        module_id, _ = module_repo.upsert(_module())
        file_repo.insert(_file(module_id, "main.tf"))
        structure_repo.insert_resource(module_id, Resource("azurerm_subnet", "this", "azurerm"))

        module_repo.delete(module_id)

        assert file_repo.count_for_module(module_id) == 0
        assert structure_repo.resource_types(module_id) == []

    def test_clear_children_keeps_module(self, module_repo, file_repo, structure_repo):
        module_id, _ = module_repo.upsert(_module())
        file_repo.insert(_file(module_id, "main.tf"))
        structure_repo.insert_variable(module_id, Variable(name="name"))

        module_repo.clear_children(module_id)

        assert module_repo.get_by_id(module_id) is not None
        assert file_repo.count_for_module(module_id) == 0
        assert structure_repo.list_variables(module_id) == []


class TestFileRepository:
    """Tests for FileRepository."""

    def test_insert_replaces_same_path(self, module_repo, file_repo):
        module_id, _ = module_repo.upsert(_module())
        first = file_repo.insert(_file(module_id, "main.tf", "old"))
        second = file_repo.insert(_file(module_id, "main.tf", "new"))

        assert first == second
        assert file_repo.get(module_id, "main.tf").content == "new"
        assert file_repo.count_for_module(module_id) == 1

    def test_list_filters_by_type_and_orders_by_path(self, module_repo, file_repo):
        module_id, _ = module_repo.upsert(_module())
        for path in ["variables.tf", "README.md", "main.tf", "examples/default/main.tf"]:
            file_repo.insert(_file(module_id, path))

        terraform = file_repo.list_for_module(module_id, FileType.TERRAFORM)

        assert [f.file_path for f in terraform] == [
            "examples/default/main.tf",
            "main.tf",
            "variables.tf",
        ]
        assert len(file_repo.list_for_module(module_id)) == 4


class TestStructureRepository:
    """Tests for StructureRepository."""

    def test_structure_round_trip(self, module_repo, structure_repo):
        module_id, _ = module_repo.upsert(_module())
        structure = ModuleStructure(
            variables=[
                Variable(name="name", type="string"),
                Variable(
                    name="tags",
                    type="map(string)",
                    default_text='{ env = "prod" }',
                    default_value=StaticValue.mapping([("env", StaticValue.string("prod"))]),
                    required=False,
                ),
                Variable(name="subnets", default_text="merge(a, b)", required=False),
                Variable(name="password", sensitive=True),
            ],
            outputs=[Output(name="id", description="VNet id", sensitive=False)],
            resources=[
                Resource("azurerm_virtual_network", "this", "azurerm", "main.tf"),
                Resource("azurerm_subnet", "this", "azurerm", "main.tf"),
            ],
            data_sources=[DataSource("azurerm_client_config", "current", "azurerm", "main.tf")],
        )

        structure_repo.insert_structure(module_id, structure)
        stored = structure_repo.get_structure(module_id)

        assert stored == structure

    def test_null_default_distinct_from_non_static(self, module_repo, structure_repo):
        module_id, _ = module_repo.upsert(_module())
        structure_repo.insert_variable(
            module_id,
            Variable(name="location", default_text="null", default_value=StaticValue.null(), required=False),
        )
        structure_repo.insert_variable(
            module_id, Variable(name="subnets", default_text="merge(a, b)", required=False)
        )

        location, subnets = structure_repo.list_variables(module_id)

        assert location.default_value == StaticValue.null()
        assert subnets.default_value is None

    def test_resource_types_in_declaration_order(self, module_repo, structure_repo):
        module_id, _ = module_repo.upsert(_module())
        structure_repo.insert_resource(module_id, Resource("azurerm_subnet", "a", "azurerm"))
        structure_repo.insert_resource(module_id, Resource("azurerm_route_table", "b", "azurerm"))

        assert structure_repo.resource_types(module_id) == ["azurerm_subnet", "azurerm_route_table"]


class TestReleaseRepository:
    """Tests for ReleaseRepository."""

    def _entries(self) -> list[ModuleReleaseEntry]:
        return [
            ModuleReleaseEntry("Features", "features-0000", "add nat gateway", 0, "add-nat-gateway"),
            ModuleReleaseEntry("Bug Fixes", "bug-fixes-0001", "fix routes", 1, "fix-routes"),
        ]

    def test_upsert_keeps_stored_optional_fields(self, module_repo, release_repo):
        module_id, _ = module_repo.upsert(_module())
        first = release_repo.upsert(
            ModuleRelease(module_id, "1.2.0", "v1.2.0", release_date="2024-03-01", previous_tag="v1.1.0")
        )
        second = release_repo.upsert(ModuleRelease(module_id, "1.2.0", "v1.2.0", commit_sha="abc1234"))

        release, _ = release_repo.get_with_entries_by_version(module_id, "1.2.0")
        assert first == second
        assert release.release_date == "2024-03-01"
        assert release.previous_tag == "v1.1.0"
        assert release.commit_sha == "abc1234"

    def test_replace_entries(self, module_repo, release_repo):
        module_id, _ = module_repo.upsert(_module())
        release_id = release_repo.upsert(ModuleRelease(module_id, "1.2.0", "v1.2.0"))

        release_repo.replace_entries(release_id, self._entries())
        release_repo.replace_entries(release_id, self._entries()[:1])

        entries = release_repo.list_entries(release_id)
        assert [e.entry_key for e in entries] == ["features-0000"]
        assert entries[0].release_id == release_id

    def test_lookup_by_tag_and_latest(self, module_repo, release_repo):
        module_id, _ = module_repo.upsert(_module())
        release_repo.upsert(ModuleRelease(module_id, "1.1.0", "v1.1.0", release_date="2024-02-01"))
        newest_id = release_repo.upsert(
            ModuleRelease(module_id, "1.2.0", "v1.2.0", release_date="2024-03-01")
        )
        release_repo.replace_entries(newest_id, self._entries())

        by_tag, _ = release_repo.get_with_entries_by_tag(module_id, "v1.1.0")
        latest, entries = release_repo.get_latest_with_entries(module_id)

        assert by_tag.version == "1.1.0"
        assert latest.version == "1.2.0"
        assert [e.order_index for e in entries] == [0, 1]
        assert [r.version for r in release_repo.list_for_module(module_id)] == ["1.2.0", "1.1.0"]

    def test_releases_survive_clear_children(self, module_repo, release_repo):
        module_id, _ = module_repo.upsert(_module())
        release_repo.upsert(ModuleRelease(module_id, "1.0.0", "v1.0.0"))

        module_repo.clear_children(module_id)

        assert release_repo.get_latest_with_entries(module_id) is not None

    def test_missing_release(self, module_repo, release_repo):
        module_id, _ = module_repo.upsert(_module())

        assert release_repo.get_with_entries_by_version(module_id, "9.9.9") is None
        assert release_repo.get_latest_with_entries(module_id) is None
