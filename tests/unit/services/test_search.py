"""Tests for SearchService and TaggingService."""

import pytest

from tfindex.core.exceptions import InvalidInputError
from tfindex.core.types import Module, Resource
from tfindex.services.search import score_module


def _add(services, name, description, resource_types=(), tags=None):
    module_id, _ = services.module_repo.upsert(
        Module(name=name, full_name=f"cloudnationhq/{name}", description=description)
    )
    for index, type_name in enumerate(resource_types):
        services.structure_repo.insert_resource(
            module_id, Resource(type_name, f"r{index}", type_name.split("_", 1)[0])
        )
    if tags is not None:
        services.module_repo.set_tags(module_id, tags)
    return module_id


@pytest.fixture
def indexed(services):
    _add(
        services,
        "terraform-azure-vnet",
        "Virtual network with subnets",
        ["azurerm_virtual_network", "azurerm_subnet"],
        ["network", "subnet", "azurerm"],
    )
    _add(
        services,
        "terraform-azure-nsg",
        "Network security groups",
        ["azurerm_network_security_group"],
        ["network", "security", "azurerm"],
    )
    _add(
        services,
        "terraform-azure-kv",
        "Key vault for secrets",
        ["azurerm_key_vault"],
        ["vault", "azurerm"],
    )
    return services


class TestScoring:
    """Tests for score_module."""

    def test_weights(self):
        module = Module(name="terraform-azure-vnet", description="vnet module", tags=["vnet", "x"])

        assert score_module(module, ["azurerm_vnet_peering"], "vnet") == 10 + 5 + 3 + 2

    def test_no_match(self):
        assert score_module(Module(name="a"), [], "zzz") == 0


class TestSearchModules:
    """Tests for search_modules."""

    def test_ranked_by_score_then_name(self, indexed):
        hits = indexed.search.search_modules("network")

        assert [h.module.name for h in hits] == ["terraform-azure-nsg", "terraform-azure-vnet"]
        assert hits[0].score == hits[1].score == 10

    def test_resource_type_match(self, indexed):
        hits = indexed.search.search_modules("key_vault")

        assert [h.module.name for h in hits] == ["terraform-azure-kv"]

    def test_limit(self, indexed):
        assert len(indexed.search.search_modules("azure", limit=2)) == 2

    def test_empty_query_rejected(self, indexed):
        with pytest.raises(InvalidInputError):
            indexed.search.search_modules("   ")


class TestRelations:
    """Tests for related_modules and categories."""

    def test_related_needs_two_shared_tags(self, indexed):
        related = indexed.search.related_modules("terraform-azure-vnet")

        assert [m.name for m in related] == ["terraform-azure-nsg"]

    def test_categories_index(self, indexed):
        categories = indexed.search.categories()

        assert list(categories)[0] == "azurerm"
        assert categories["network"] == ["terraform-azure-nsg", "terraform-azure-vnet"]


class TestTagging:
    """Tests for TaggingService.retag_all."""

    def test_retag_replaces_tags(self, indexed):
        count = indexed.tagging.retag_all()

        vnet = indexed.module_repo.get_by_name("terraform-azure-vnet")
        kv = indexed.module_repo.get_by_name("terraform-azure-kv")
        assert count == 3
        assert "vault" in kv.tags
        assert "vnet" in vnet.tags
        assert len(vnet.tags) == len(set(vnet.tags))

    def test_learner_sees_whole_index(self, indexed):
        learner = indexed.tagging.build_learner()

        assert learner.modules_seen == 3
        assert learner.resource_types["azurerm_subnet"] == 1
