"""Fixtures for service layer tests: a mocked organization and sample modules."""

import base64

import pytest

ORG = "cloudnationhq"

CHANGELOG = """# Changelog

## [1.1.0](https://github.com/cloudnationhq/terraform-azure-vnet/compare/v1.0.0...v1.1.0) (2024-02-01)

### Features

* add subnet delegation support

### Bug Fixes

* fix route table association

## 1.0.0 (2024-01-01)

* first release
"""

VNET_FILES = {
    "main.tf": """
resource "azurerm_virtual_network" "this" {
  name          = var.name
  address_space = var.address_space
}

resource "azurerm_subnet" "this" {
  for_each = var.subnets
  name     = each.key
}
""",
    "variables.tf": """
variable "name" {
  type        = string
  description = "Name of the virtual network"
}

variable "address_space" {
  type    = list(string)
  default = ["10.0.0.0/16"]
}

variable "subnets" {
  type    = map(any)
  default = {}
}
""",
    "outputs.tf": """
output "id" {
  value = azurerm_virtual_network.this.id
}
""",
    "terraform.tf": """
terraform {
  required_providers {
    azurerm = {
      source = "hashicorp/azurerm"
    }
  }
}
""",
    "README.md": "# Virtual network\n",
    "CHANGELOG.md": CHANGELOG,
    "examples/default/main.tf": """
module "vnet" {
  source = "../.."
  name   = "example"
}
""",
    "modules/subnet/main.tf": """
resource "azurerm_subnet" "this" {
  name = var.name
}

resource "azurerm_subnet_network_security_group_association" "this" {
  subnet_id = azurerm_subnet.this.id
}
""",
    "modules/subnet/variables.tf": 'variable "name" {\n  type = string\n}\n',
    ".github/workflows/ci.yml": "on: push\n",
}


class MockOrg:
    """Organization listing, READMEs and archives served by the mocked API."""

    def __init__(self, router, repo_item, tarball):
        self._router = router
        self._repo_item = repo_item
        self._tarball = tarball
        self.items: list[dict] = []
        self.archives = {}
        self.listing = router.get(f"/orgs/{ORG}/repos")
        self._refresh()

    def add(self, name: str, files: dict | None = None, archive_status: int = 200, **overrides):
        item = self._repo_item(name, **overrides)
        self.items.append(item)
        full_name = item["full_name"]

        readme = base64.b64encode(f"# {name}\n".encode()).decode()
        self._router.get(f"/repos/{full_name}/readme").respond(
            200, json={"path": "README.md", "content": readme}
        )
        archive = self._router.get(f"/repos/{full_name}/tarball")
        if files is None:
            archive.respond(archive_status)
        else:
            archive.respond(archive_status, content=self._tarball(files))
        self.archives[name] = archive

        self._refresh()
        return item

    def update(self, name: str, **changes) -> None:
        for item in self.items:
            if item["name"] == name:
                item.update(changes)
        self._refresh()

    def _refresh(self) -> None:
        self.listing.respond(200, json=[dict(item) for item in self.items])


@pytest.fixture
def org(mock_api, repo_item, tarball) -> MockOrg:
    return MockOrg(mock_api, repo_item, tarball)


@pytest.fixture
def vnet_files() -> dict:
    return dict(VNET_FILES)
