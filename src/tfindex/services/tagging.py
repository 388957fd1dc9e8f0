"""Tagging service: retrains the category learner and re-tags modules."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from loguru import logger

from ..categories.learner import CategoryLearner

if TYPE_CHECKING:
    from .container import ServiceContainer


class TaggingService:
    """Rebuilds learned category tags over the whole index."""

    def __init__(self, container: "ServiceContainer"):
        self._container = container

    def build_learner(self) -> CategoryLearner:
        """Train a fresh learner over every module in the index."""
        learner = CategoryLearner(self._container.config.sync.generic_name_words)
        structure = self._container.structure_repo
        for module in self._container.module_repo.list_all():
            learner.learn_from_module(
                module.name, module.description, structure.resource_types(module.id)  # type: ignore[arg-type]
            )
        return learner

    def retag_all(self) -> int:
        """Retrain and store new tags for every module.

        Returns:
            Number of modules tagged.
        """
        start_time = time.perf_counter()
        learner = self.build_learner()

        modules = self._container.module_repo
        structure = self._container.structure_repo
        tagged = 0
        for module in modules.list_all():
            tags = learner.categorize(
                module.name,
                module.description,
                structure.resource_types(module.id),  # type: ignore[arg-type]
                module.provider,
            )
            modules.set_tags(module.id, tags)  # type: ignore[arg-type]
            tagged += 1

        elapsed = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Tagging complete: modules={tagged}, clusters={len(learner.clusters)}, "
            f"categories={len(learner.text_patterns)}, {elapsed:.1f}ms"
        )
        return tagged
