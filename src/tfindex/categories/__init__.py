"""Learned module categories."""

from .learner import CategoryLearner

__all__ = ["CategoryLearner"]
