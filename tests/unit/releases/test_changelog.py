"""Tests for changelog parsing."""

from tfindex.releases.changelog import (
    extract_release_block,
    list_changelog_versions,
    normalize_version,
    parse_release_entries,
    safe_slug,
    slugify,
    tag_for_version,
)

CHANGELOG = """# Changelog

## [1.2.0](https://github.com/cloudnationhq/terraform-azure-vnet/compare/v1.1.0...v1.2.0) (2024-03-01)

### Features

* add subnet delegation support
* support custom dns servers

### Bug Fixes

* fix route table association

## [1.1.0](https://github.com/cloudnationhq/terraform-azure-vnet/compare/v1.0.0...v1.1.0) (2024-02-01)

### Features

* initial peering support

## 1.0.0 (2024-01-01)

- first release
"""


class TestSlugs:
    """Tests for slug and version helpers."""

    def test_slugify(self):
        assert slugify("  Add NAT Gateway!  ") == "add-nat-gateway"

    def test_safe_slug_empty(self):
        assert safe_slug("") == "section"
        assert safe_slug("Bug Fixes") == "bug-fixes"

    def test_versions_and_tags(self):
        assert normalize_version("v1.2.0") == "1.2.0"
        assert normalize_version("1.2.0") == "1.2.0"
        assert tag_for_version("1.2.0") == "v1.2.0"
        assert tag_for_version("v1.2.0") == "v1.2.0"


class TestExtractReleaseBlock:
    """Tests for extract_release_block."""

    def test_block_bounded_by_next_heading(self):
        block = extract_release_block(CHANGELOG, "1.2.0")

        assert block is not None
        assert block.text.startswith("## [1.2.0]")
        assert "fix route table association" in block.text
        assert "initial peering support" not in block.text

    def test_release_metadata_from_heading(self):
        block = extract_release_block(CHANGELOG, "1.2.0")

        assert block.release_date == "2024-03-01"
        assert block.comparison_url.endswith("/compare/v1.1.0...v1.2.0")
        assert block.previous_tag == "v1.1.0"

    def test_plain_heading_with_date(self):
        block = extract_release_block(CHANGELOG, "1.0.0")

        assert block is not None
        assert block.release_date == "2024-01-01"
        assert block.previous_tag is None
        assert [e.title for e in block.entries] == ["first release"]

    def test_v_prefixed_heading(self):
        block = extract_release_block("## v2.0.0\n\n* breaking rename\n", "2.0.0")

        assert block is not None
        assert block.entries[0].title == "breaking rename"

    def test_unknown_version(self):
        assert extract_release_block(CHANGELOG, "9.9.9") is None

    def test_prefix_version_does_not_match_longer_one(self):
        assert extract_release_block("## [1.2.10]\n\n* x\n", "1.2.1") is None


class TestParseReleaseEntries:
    """Tests for parse_release_entries."""

    def test_entries_ordered_with_sections(self):
        entries = extract_release_block(CHANGELOG, "1.2.0").entries

        assert [(e.section, e.order_index) for e in entries] == [
            ("Features", 0),
            ("Features", 1),
            ("Bug Fixes", 2),
        ]

    def test_entry_keys_unique_and_prefixed(self):
        entries = extract_release_block(CHANGELOG, "1.2.0").entries

        assert [e.entry_key for e in entries] == [
            "features-0000",
            "features-0001",
            "bug-fixes-0002",
        ]

    def test_identifier_is_title_slug(self):
        entries = extract_release_block(CHANGELOG, "1.2.0").entries

        assert entries[2].identifier == "fix-route-table-association"

    def test_bullets_before_subheading_are_other(self):
        entries = parse_release_entries("## 1.0.0\n\n* one\n- two\n\nprose line\n")

        assert [(e.section, e.title) for e in entries] == [("Other", "one"), ("Other", "two")]
        assert entries[0].entry_key == "section-0000"

    def test_empty_bullets_skipped(self):
        entries = parse_release_entries("### Features\n\n*\n* real entry\n")

        assert len(entries) == 1
        assert entries[0].order_index == 0


def test_list_changelog_versions_newest_first():
    assert list_changelog_versions(CHANGELOG) == ["1.2.0", "1.1.0", "1.0.0"]
