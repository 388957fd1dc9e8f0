"""Plain-text rendering of releases and diff snippets."""

from __future__ import annotations

from datetime import datetime

from ..core.types import ModuleRelease, ModuleReleaseEntry

# Sections listed first, in this order, when present
PREFERRED_SECTIONS = ("Features", "Enhancements", "Bug Fixes", "Breaking Changes", "Security")


def short_sha(sha: str | None) -> str:
    sha = (sha or "").strip()
    return sha[:7]


def format_tag(tag: str | None, sha: str | None = None) -> str:
    tag = (tag or "").strip()
    if not tag:
        return ""
    if sha:
        return f"{tag} ({short_sha(sha)})"
    return tag


def format_range(release: ModuleRelease) -> str:
    head = format_tag(release.tag, release.commit_sha)
    previous = format_tag(release.previous_tag, release.previous_commit_sha)
    return f"{previous} -> {head}" if previous else head


def format_date(release: ModuleRelease) -> str:
    if not release.release_date:
        return "unknown"
    try:
        date = datetime.strptime(release.release_date, "%Y-%m-%d")
    except ValueError:
        return release.release_date
    return f"{date:%B} {date.day}, {date.year}"


def group_by_section(entries: list[ModuleReleaseEntry]) -> dict[str, list[str]]:
    """Titles per section: preferred sections first, then by appearance."""
    grouped: dict[str, list[str]] = {}
    for entry in entries:
        grouped.setdefault(entry.section.strip() or "Other", []).append(entry.title)

    ordered = {name: grouped[name] for name in PREFERRED_SECTIONS if name in grouped}
    for name, titles in grouped.items():
        ordered.setdefault(name, titles)
    return ordered


def format_release_summary(
    module_name: str,
    release: ModuleRelease | None,
    entries: list[ModuleReleaseEntry],
) -> str:
    if release is None:
        return "Module Release Summary\n- No release metadata available"

    lines = [
        "Module Release Summary",
        f"- Module: {module_name}",
        f"- Range: {format_range(release)}",
        f"- Date: {format_date(release)}",
    ]

    sections = group_by_section(entries)
    if not sections:
        lines.append("- No categorized entries found")
    for section, titles in sections.items():
        lines.append(f"- {section}")
        lines.extend(f"    - {title}" for title in titles)

    return "\n".join(lines)


def format_snippet(
    module_name: str,
    release: ModuleRelease,
    entry: ModuleReleaseEntry,
    filename: str,
    patch: str,
    truncated: bool,
    max_lines: int,
) -> str:
    lines = [
        f"Release {release.version} - {entry.title}",
        f"Module: {module_name}",
        f"File: {filename}",
        "```diff",
        patch,
        "```",
    ]
    if truncated:
        lines.append(f"... showing first {max_lines} diff lines")
    if release.comparison_url:
        lines.append(f"Compare: {release.comparison_url}")
    return "\n".join(lines)
