"""Tests for changed-file matching and release formatting."""

from tfindex.core.types import CompareFile, CompareResult, ModuleRelease, ModuleReleaseEntry
from tfindex.releases.formatting import format_release_summary, format_snippet, group_by_section
from tfindex.releases.matcher import (
    ReleaseEntryTargets,
    build_targets,
    locate_patch,
    score_patch_candidate,
    select_release_entry,
    tokenize_identifier,
    trim_patch_lines,
)


def _entry(title: str, section: str = "Features", order: int = 0) -> ModuleReleaseEntry:
    identifier = title.lower().replace(" ", "-")
    return ModuleReleaseEntry(
        section=section,
        entry_key=f"{section.lower().replace(' ', '-')}-{order:04d}",
        title=title,
        order_index=order,
        identifier=identifier,
    )


class TestTargets:
    """Tests for token derivation."""

    def test_tokenize_identifier(self):
        assert tokenize_identifier("add-subnet_delegation.v2: now") == [
            "add",
            "subnet",
            "delegation",
            "v2",
            "now",
        ]

    def test_build_targets_from_identifier_and_query(self):
        targets = build_targets(_entry("add subnet delegation"), "delegation Support")

        assert targets.filename_tokens[0] == "add-subnet-delegation"
        assert targets.filename_tokens.count("delegation") == 1
        assert "support" in targets.content_tokens
        assert targets.fallback_token == "delegation support"

    def test_title_is_fallback_without_query(self):
        targets = build_targets(_entry("add subnet delegation"))

        assert targets.fallback_token == "add subnet delegation"


class TestScoring:
    """Tests for score_patch_candidate."""

    def test_config_file_beats_changelog(self):
        targets = ReleaseEntryTargets(["subnet"], ["subnet"], "")

        assert score_patch_candidate("main.tf", "", targets) == 150
        assert score_patch_candidate("CHANGELOG.md", "", targets) == -180

    def test_path_bonuses_and_penalties(self):
        targets = ReleaseEntryTargets(["subnet"], [], "")

        assert score_patch_candidate("modules/subnet/main.tf", "", targets) == 150 + 20 + 35
        assert score_patch_candidate("examples/default/main.tf", "", targets) == 150 - 60
        assert score_patch_candidate("tests/vnet_test.go", "", targets) == -40

    def test_content_tokens_and_patch_size(self):
        targets = ReleaseEntryTargets([], ["delegation", "subnet"], "subnet delegation")
        patch = "+ subnet delegation\n" + "x" * 800

        assert score_patch_candidate("variables.tf", patch, targets) == 150 + 40 + 10 + len(patch) // 400


class TestLocatePatch:
    """Tests for locate_patch."""

    def test_prefers_configuration_over_docs(self):
        compare = CompareResult(
            files=[
                CompareFile("CHANGELOG.md", "+* add subnet delegation support"),
                CompareFile("main.tf", "+  delegation {\n+    name = \"subnet\"\n+  }"),
                CompareFile("logo.png", ""),
            ]
        )

        match = locate_patch(compare, _entry("add subnet delegation support"))

        assert match is not None
        assert match.filename == "main.tf"

    def test_ties_go_to_first_file(self):
        files = [CompareFile("a.tf", "+x"), CompareFile("b.tf", "+x")]

        assert locate_patch(files, _entry("unrelated change")).filename == "a.tf"

    def test_no_patches(self):
        assert locate_patch([CompareFile("logo.png", "")], _entry("x")) is None


class TestTrimAndSelect:
    """Tests for trim_patch_lines and select_release_entry."""

    def test_trim(self):
        assert trim_patch_lines("a\nb\nc", 2) == ("a\nb", True)
        assert trim_patch_lines("a\nb", 2) == ("a\nb", False)
        assert trim_patch_lines("a\nb\nc", 0) == ("a\nb\nc", False)

    def test_select_by_identifier_or_slug(self):
        entries = [_entry("add nat gateway"), _entry("fix route table", "Bug Fixes", 1)]

        assert select_release_entry(entries, "fix-route-table") is entries[1]
        assert select_release_entry(entries, "Fix Route Table") is entries[1]

    def test_select_by_fallback_then_title(self):
        entries = [_entry("add nat gateway"), _entry("fix route table", "Bug Fixes", 1)]

        assert select_release_entry(entries, "unknown", fallback="ROUTE") is entries[1]
        assert select_release_entry(entries, "nat") is entries[0]
        assert select_release_entry(entries, "firewall") is None
        assert select_release_entry(entries, "  ") is None


class TestFormatting:
    """Tests for summary and snippet rendering."""

    def test_summary_orders_preferred_sections(self):
        release = ModuleRelease(
            module_id=1,
            version="1.2.0",
            tag="v1.2.0",
            release_date="2024-03-01",
            previous_tag="v1.1.0",
            commit_sha="bbbbbbbbbb",
            previous_commit_sha="aaaaaaaaaa",
        )
        entries = [
            _entry("fix route table", "Bug Fixes", 0),
            _entry("add nat gateway", "Features", 1),
            _entry("bump provider", "", 2),
        ]

        summary = format_release_summary("cloudnationhq/terraform-azure-vnet", release, entries)

        assert summary.splitlines() == [
            "Module Release Summary",
            "- Module: cloudnationhq/terraform-azure-vnet",
            "- Range: v1.1.0 (aaaaaaa) -> v1.2.0 (bbbbbbb)",
            "- Date: March 1, 2024",
            "- Features",
            "    - add nat gateway",
            "- Bug Fixes",
            "    - fix route table",
            "- Other",
            "    - bump provider",
        ]

    def test_summary_without_release(self):
        assert format_release_summary("x", None, []) == (
            "Module Release Summary\n- No release metadata available"
        )

    def test_summary_without_entries_or_date(self):
        release = ModuleRelease(module_id=1, version="1.0.0", tag="v1.0.0")

        summary = format_release_summary("x", release, [])

        assert "- Range: v1.0.0" in summary
        assert "- Date: unknown" in summary
        assert "- No categorized entries found" in summary

    def test_group_by_section_keeps_appearance_order(self):
        entries = [_entry("a", "Docs"), _entry("b", "Chores"), _entry("c", "Docs")]

        assert group_by_section(entries) == {"Docs": ["a", "c"], "Chores": ["b"]}

    def test_snippet_mentions_truncation(self):
        release = ModuleRelease(
            module_id=1, version="1.2.0", tag="v1.2.0", comparison_url="https://example.test/c"
        )

        snippet = format_snippet("vnet", release, _entry("add nat"), "main.tf", "+a", True, 24)

        assert snippet.splitlines() == [
            "Release 1.2.0 - add nat",
            "Module: vnet",
            "File: main.tf",
            "```diff",
            "+a",
            "```",
            "... showing first 24 diff lines",
            "Compare: https://example.test/c",
        ]
