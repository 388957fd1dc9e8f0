"""Changelog parsing into release entries.

A release section is the text between a heading naming the version and the
next level-two heading. Accepted heading forms::

    ## [1.2.0]
    ## 1.2.0 (2024-03-01)
    ## v1.2.0
    ## [1.2.0](https://github.com/org/repo/compare/v1.1.0...v1.2.0) (2024-03-01)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ..core.types import ModuleReleaseEntry

DEFAULT_SECTION = "Other"

_NEXT_HEADING_RE = re.compile(r"^##\s+", re.MULTILINE)
_ANY_VERSION_HEADING_RE = re.compile(
    r"^##\s*\[?v?(\d+(?:\.\d+)*(?:[-+][0-9A-Za-z.\-]+)?)\]?", re.MULTILINE
)
_COMPARE_LINK_RE = re.compile(r"/compare/(?P<base>[^/]+?)\.\.\.(?P<head>[^/]+)$")


@dataclass
class ReleaseBlock:
    """One version's section of a changelog."""

    version: str
    text: str
    release_date: str | None = None
    comparison_url: str | None = None
    previous_tag: str | None = None
    entries: list[ModuleReleaseEntry] = field(default_factory=list)


def slugify(value: str) -> str:
    """Lowercase, non-alphanumerics to ``-``, trimmed of ``-``."""
    value = value.strip().lower()
    return re.sub(r"[^a-z0-9]", "-", value).strip("-")


def safe_slug(value: str) -> str:
    """Slug usable as an entry-key prefix; ``section`` for empty input."""
    if not value.strip():
        return "section"
    return slugify(value)


def normalize_version(version: str) -> str:
    """``v1.2.0`` -> ``1.2.0``"""
    version = version.strip()
    return version[1:] if version[:1] in ("v", "V") else version


def tag_for_version(version: str) -> str:
    """``1.2.0`` -> ``v1.2.0``; existing ``v`` prefixes are kept."""
    version = version.strip()
    return version if version.lower().startswith("v") else f"v{version}"


def _heading_re(version: str) -> re.Pattern[str]:
    esc = re.escape(version)
    return re.compile(
        rf"^##\s*(?:\[{esc}\](?:\((?P<link>[^)]*)\))?|v?{esc})\s*(?:\((?P<date>[^)]+)\))?\s*$",
        re.MULTILINE,
    )


def extract_release_block(changelog: str, version: str) -> ReleaseBlock | None:
    """Find the section of a changelog describing a version.

    Args:
        changelog: Raw markdown.
        version: Version without a ``v`` prefix.

    Returns:
        The block with parsed entries, or None when no heading matches.
    """
    match = _heading_re(version).search(changelog)
    if match is None:
        return None

    start = match.start()
    following = _NEXT_HEADING_RE.search(changelog, start + 2)
    end = following.start() if following else len(changelog)
    text = changelog[start:end].strip()

    date = (match.group("date") or "").strip() or None
    link = (match.group("link") or "").strip() or None
    previous_tag = None
    if link:
        compare = _COMPARE_LINK_RE.search(link)
        if compare:
            previous_tag = compare.group("base")

    return ReleaseBlock(
        version=version,
        text=text,
        release_date=date,
        comparison_url=link,
        previous_tag=previous_tag,
        entries=parse_release_entries(text),
    )


def parse_release_entries(block: str) -> list[ModuleReleaseEntry]:
    """Turn the bullets of a release block into ordered entries.

    ``### `` lines set the section for the bullets that follow; bullets
    before any sub-heading land in ``Other``.
    """
    section = ""
    order = 0
    entries: list[ModuleReleaseEntry] = []

    for line in block.splitlines():
        stripped = line.strip()
        if stripped.startswith("## "):
            continue
        if stripped.startswith("### "):
            section = stripped[4:].strip()
            continue
        if not stripped.startswith(("-", "*")):
            continue

        title = stripped.lstrip("-* ").strip()
        if not title:
            continue

        entries.append(
            ModuleReleaseEntry(
                section=section or DEFAULT_SECTION,
                entry_key=f"{safe_slug(section)}-{order:04d}",
                title=title,
                order_index=order,
                identifier=slugify(title) or None,
            )
        )
        order += 1

    return entries


def list_changelog_versions(changelog: str) -> list[str]:
    """Versions named by level-two headings, in document order (newest first)."""
    versions: list[str] = []
    for match in _ANY_VERSION_HEADING_RE.finditer(changelog):
        version = match.group(1)
        if version not in versions:
            versions.append(version)
    return versions
