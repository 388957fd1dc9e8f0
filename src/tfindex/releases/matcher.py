"""Heuristic location of the changed file that best matches a changelog entry.

Each changed file of a two-ref comparison is scored against tokens derived
from the entry identifier and the caller's query; the highest score wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Sequence

from ..core.types import CompareFile, CompareResult, ModuleReleaseEntry
from .changelog import slugify

DEFAULT_MAX_LINES = 24

# Score weights
CONFIG_FILE_BONUS = 150
MODULES_PATH_BONUS = 20
EXAMPLES_PATH_PENALTY = 60
DOCUMENTATION_PENALTY = 180
TEST_PATH_PENALTY = 40
FILENAME_TOKEN_BONUS = 35
CONTENT_TOKEN_BONUS = 20
FALLBACK_TOKEN_BONUS = 10
PATCH_SIZE_DIVISOR = 400

_TOKEN_SPLIT_RE = re.compile(r"[-\s:]+")


@dataclass
class ReleaseEntryTargets:
    """Tokens searched for in changed file paths and patch bodies."""

    filename_tokens: list[str] = field(default_factory=list)
    content_tokens: list[str] = field(default_factory=list)
    fallback_token: str = ""


@dataclass(frozen=True)
class PatchMatch:
    """The winning changed file."""

    filename: str
    patch: str
    score: int


def tokenize_identifier(value: str) -> list[str]:
    """Split on ``-``, ``_``, ``.``, ``:`` and whitespace."""
    value = value.replace("_", "-").replace(".", "-")
    return [part for part in _TOKEN_SPLIT_RE.split(value) if part]


def _unique(values: list[str]) -> list[str]:
    seen: list[str] = []
    for value in values:
        value = value.strip()
        if value and value not in seen:
            seen.append(value)
    return seen


def build_targets(entry: ModuleReleaseEntry, query: str = "") -> ReleaseEntryTargets:
    """Derive search tokens from an entry and an optional query."""
    tokens: list[str] = []

    if entry.identifier:
        identifier = entry.identifier.lower()
        tokens.append(identifier)
        tokens.extend(tokenize_identifier(identifier))

    fallback = ""
    if query:
        tokens.extend(tokenize_identifier(query.lower()))
        fallback = query.lower()
    elif entry.title:
        fallback = entry.title.lower()

    unique = _unique(tokens)
    return ReleaseEntryTargets(
        filename_tokens=list(unique),
        content_tokens=list(unique),
        fallback_token=fallback,
    )


def score_patch_candidate(filename: str, patch: str, targets: ReleaseEntryTargets) -> int:
    """Score one changed file; higher is a better match."""
    path = "/" + filename.replace("\\", "/").lower().lstrip("/")
    body = patch.lower()
    score = 0

    if path.endswith(".tf"):
        score += CONFIG_FILE_BONUS
    if "/modules/" in path:
        score += MODULES_PATH_BONUS
    if "/examples/" in path:
        score -= EXAMPLES_PATH_PENALTY
    if path.endswith(".md") or "changelog" in path:
        score -= DOCUMENTATION_PENALTY
    if "/test" in path:
        score -= TEST_PATH_PENALTY

    score += FILENAME_TOKEN_BONUS * sum(1 for token in targets.filename_tokens if token in path)
    score += CONTENT_TOKEN_BONUS * sum(1 for token in targets.content_tokens if token in body)

    if targets.fallback_token and targets.fallback_token in body:
        score += FALLBACK_TOKEN_BONUS

    score += len(patch) // PATCH_SIZE_DIVISOR
    return score


def locate_patch(
    compare: CompareResult | Sequence[CompareFile],
    entry: ModuleReleaseEntry,
    query: str = "",
) -> PatchMatch | None:
    """Pick the highest scoring changed file.

    Files without a patch are ignored; ties go to the earlier file.

    Returns:
        The match, or None when no file has a patch.
    """
    files = compare.files if isinstance(compare, CompareResult) else compare
    targets = build_targets(entry, query)

    best: PatchMatch | None = None
    for changed in files:
        if not changed.patch:
            continue
        score = score_patch_candidate(changed.filename, changed.patch, targets)
        if best is None or score > best.score:
            best = PatchMatch(changed.filename, changed.patch, score)
    return best


def trim_patch_lines(patch: str, max_lines: int = DEFAULT_MAX_LINES) -> tuple[str, bool]:
    """Keep the first ``max_lines`` lines; report whether anything was cut."""
    if max_lines <= 0:
        return patch, False
    lines = patch.split("\n")
    if len(lines) <= max_lines:
        return patch, False
    return "\n".join(lines[:max_lines]), True


def select_release_entry(
    entries: Sequence[ModuleReleaseEntry],
    query: str,
    fallback: str | None = None,
) -> ModuleReleaseEntry | None:
    """Choose the entry a query refers to.

    Tried in order: identifier equal to the query (or to its slug), title
    containing the fallback text, title containing the query.
    """
    normalized = query.strip().lower()
    if not normalized:
        return None
    slugged = slugify(normalized)

    for entry in entries:
        if entry.identifier and (
            entry.identifier.lower() == normalized or slugify(entry.identifier) == slugged
        ):
            return entry

    if fallback:
        needle = fallback.lower()
        for entry in entries:
            if needle in entry.title.lower():
                return entry

    for entry in entries:
        if normalized in entry.title.lower():
            return entry

    return None
