"""Unsupervised category learning over the indexed module corpus.

Tags are inferred from the corpus itself instead of a hand-maintained
taxonomy: resource types that appear together in a module form clusters
named by their most frequent type fragment, and words from module names and
descriptions are counted under a hint derived from the module name.

A learner is built fresh for every index pass and discarded afterwards.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from typing import Iterable

from loguru import logger

DEFAULT_GENERIC_WORDS = ("terraform", "azure")

# Words and fragments of this length or shorter carry no category signal
MIN_WORD_LENGTH = 3


def _words(text: str) -> list[str]:
    return [word for word in text.lower().split() if len(word) > MIN_WORD_LENGTH]


class CategoryLearner:
    """Learns category tags from resource co-occurrence and module text.

    Example:
        learner = CategoryLearner()
        for module in modules:
            learner.learn_from_module(module.name, module.description, types)
        tags = learner.categorize(name, description, types, provider)
    """

    def __init__(self, generic_words: Iterable[str] = DEFAULT_GENERIC_WORDS):
        self._generic_words = frozenset(word.lower() for word in generic_words)
        self.resource_types: Counter[str] = Counter()
        self.clusters: dict[str, tuple[str, ...]] = {}
        self.text_patterns: dict[str, Counter[str]] = defaultdict(Counter)
        self.modules_seen = 0

    def category_hint(self, module_name: str) -> str:
        """First name segment longer than three characters that is not generic."""
        for part in module_name.lower().split("-"):
            if len(part) > MIN_WORD_LENGTH and part not in self._generic_words:
                return part
        return ""

    def learn_from_module(
        self,
        name: str,
        description: str,
        resource_types: Iterable[str],
    ) -> None:
        """Record one module's resource types and text."""
        types = list(resource_types)
        self.resource_types.update(types)

        distinct = sorted(set(types))
        if len(distinct) > 1:
            self.clusters[",".join(distinct)] = tuple(distinct)

        hint = self.category_hint(name)
        if hint:
            self.text_patterns[hint].update(_words(f"{name} {description}"))

        self.modules_seen += 1

    def _cluster_category(self, cluster: tuple[str, ...]) -> str:
        counts: Counter[str] = Counter()
        for type_name in cluster:
            for fragment in type_name.split("_")[1:]:
                if len(fragment) > MIN_WORD_LENGTH:
                    counts[fragment] += 1
        if not counts:
            return ""
        return counts.most_common(1)[0][0]

    @staticmethod
    def _resource_category(type_name: str) -> str:
        fragments = type_name.split("_")
        for fragment in fragments[1:]:
            if len(fragment) > MIN_WORD_LENGTH:
                return fragment
        return fragments[1] if len(fragments) > 1 else ""

    def categories_for_resource(self, type_name: str) -> list[str]:
        """Categories of every learned cluster containing the type.

        Falls back to a fragment of the type itself when no cluster matches.
        """
        categories: list[str] = []
        for cluster in self.clusters.values():
            if type_name in cluster:
                category = self._cluster_category(cluster)
                if category and category not in categories:
                    categories.append(category)

        if not categories:
            category = self._resource_category(type_name)
            if category:
                categories.append(category)
        return categories

    def categories_for_text(self, text: str) -> list[str]:
        """Every learned category whose word table matches the text.

        Ordered by score (highest first), then name.
        """
        words = text.lower().split()
        scores: dict[str, int] = {}
        for category, counts in self.text_patterns.items():
            score = sum(counts.get(word, 0) for word in words)
            if score > 0:
                scores[category] = score
        return sorted(scores, key=lambda category: (-scores[category], category))

    def categorize(
        self,
        name: str,
        description: str,
        resource_types: Iterable[str],
        provider: str = "",
    ) -> list[str]:
        """Tags for one module: resource categories, text categories, provider."""
        tags: list[str] = []

        def add(tag: str) -> None:
            if tag and tag not in tags:
                tags.append(tag)

        for type_name in resource_types:
            for category in self.categories_for_resource(type_name):
                add(category)
        for category in self.categories_for_text(f"{name} {description}"):
            add(category)
        add(provider)

        logger.debug(f"Categorized module: name={name!r}, tags={tags}")
        return tags
