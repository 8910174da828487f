"""
Relevance scoring and hiring classification.

Provides keyword relevance under a precision mode and the hiring vs.
self-promotion classifier for mixed-intent sources.
"""

from .hiring_classifier import ACCEPTED_LABELS, HiringClassification, HiringClassifier
from .relevance import MODE_THRESHOLDS, RelevanceEngine, get_threshold, score_relevance

__all__ = [
    "ACCEPTED_LABELS",
    "HiringClassification",
    "HiringClassifier",
    "MODE_THRESHOLDS",
    "RelevanceEngine",
    "get_threshold",
    "score_relevance",
]
