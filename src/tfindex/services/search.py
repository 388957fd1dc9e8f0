"""Search service: keyword scoring over indexed modules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..core.exceptions import InvalidInputError
from ..core.types import Module

if TYPE_CHECKING:
    from .container import ServiceContainer

NAME_WEIGHT = 10
DESCRIPTION_WEIGHT = 5
TAG_WEIGHT = 3
RESOURCE_TYPE_WEIGHT = 2

# Shared tags needed for two modules to count as related
MIN_COMMON_TAGS = 2


@dataclass
class SearchHit:
    """A module and its relevance score."""

    module: Module
    score: int


def score_module(module: Module, resource_types: list[str], query: str) -> int:
    """Substring relevance of a module for a lowercased query."""
    score = 0
    if query in module.name.lower():
        score += NAME_WEIGHT
    if query in module.description.lower():
        score += DESCRIPTION_WEIGHT
    score += TAG_WEIGHT * sum(1 for tag in module.tags if query in tag.lower())
    score += RESOURCE_TYPE_WEIGHT * sum(1 for t in resource_types if query in t.lower())
    return score


class SearchService:
    """Keyword search and tag-based relations over the index."""

    def __init__(self, container: "ServiceContainer"):
        self._container = container

    def search_modules(self, query: str, limit: int = 20) -> list[SearchHit]:
        """Modules matching a query, best first (ties by name).

        Raises:
            InvalidInputError: If the query is empty.
        """
        query = query.strip().lower()
        if not query:
            raise InvalidInputError("query is required")

        structure = self._container.structure_repo
        hits = []
        for module in self._container.module_repo.list_all():
            score = score_module(module, structure.resource_types(module.id), query)  # type: ignore[arg-type]
            if score > 0:
                hits.append(SearchHit(module, score))

        hits.sort(key=lambda hit: (-hit.score, hit.module.name))
        return hits[:limit] if limit > 0 else hits

    def related_modules(self, module_name: str) -> list[Module]:
        """Modules sharing at least two tags with the given module."""
        module = self._container.releases.resolve_module(module_name)
        tags = set(module.tags)
        return [
            other
            for other in self._container.module_repo.list_all()
            if other.name != module.name and len(tags.intersection(other.tags)) >= MIN_COMMON_TAGS
        ]

    def categories(self) -> dict[str, list[str]]:
        """Module names per tag, tags sorted."""
        index: dict[str, list[str]] = {}
        for module in self._container.module_repo.list_all():
            for tag in module.tags:
                index.setdefault(tag, []).append(module.name)
        return dict(sorted(index.items()))
