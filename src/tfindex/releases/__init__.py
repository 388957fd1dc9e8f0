"""Changelog parsing, release rendering and diff matching."""

from .changelog import (
    ReleaseBlock,
    extract_release_block,
    list_changelog_versions,
    normalize_version,
    parse_release_entries,
    safe_slug,
    slugify,
    tag_for_version,
)
from .formatting import format_release_summary, format_snippet
from .matcher import (
    PatchMatch,
    ReleaseEntryTargets,
    build_targets,
    locate_patch,
    score_patch_candidate,
    select_release_entry,
    tokenize_identifier,
    trim_patch_lines,
)

__all__ = [
    "ReleaseBlock",
    "extract_release_block",
    "list_changelog_versions",
    "normalize_version",
    "parse_release_entries",
    "safe_slug",
    "slugify",
    "tag_for_version",
    "format_release_summary",
    "format_snippet",
    "PatchMatch",
    "ReleaseEntryTargets",
    "build_targets",
    "locate_patch",
    "score_patch_candidate",
    "select_release_entry",
    "tokenize_identifier",
    "trim_patch_lines",
]
