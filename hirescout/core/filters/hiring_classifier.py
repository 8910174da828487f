"""
Hiring vs. self-promotion classification for community posts.

This module provides the HiringClassifier class used on mixed-intent sources
(forums, social feeds) where "[Hiring]" posts sit next to freelancers
advertising themselves. Negative patterns are checked first and always win.

Key Features:
- Pattern-based classification using readable regex definitions
- Matched pattern and snippet reporting for debugging decisions
- Mode-aware acceptance (loose mode also keeps unclear posts)
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List

from ..models import HiringLabel, SearchMode
from .pattern_definitions import (
    ALL_CLASSIFIER_PATTERNS,
    SALARY_PATTERNS,
    SELF_PROMOTION_PATTERNS,
    STRONG_HIRING_PATTERNS,
    STRUCTURE_PATTERNS,
    WEAK_HIRING_PATTERNS,
)

# Labels kept per search mode; each mode keeps a superset of the stricter one
ACCEPTED_LABELS: Dict[SearchMode, FrozenSet[HiringLabel]] = {
    SearchMode.STRICT: frozenset({HiringLabel.HIRING}),
    SearchMode.MODERATE: frozenset({HiringLabel.HIRING}),
    SearchMode.LOOSE: frozenset({HiringLabel.HIRING, HiringLabel.UNCLEAR}),
}


@dataclass
class HiringClassification:
    """Outcome of classifying one post."""

    label: HiringLabel
    matched_patterns: Dict[str, List[str]] = field(default_factory=dict)
    reason: str = ""

    @property
    def is_hiring(self) -> bool:
        return self.label == HiringLabel.HIRING


class HiringClassifier:
    """
    Classifier separating hiring posts from self-promotion.

    The classifier works by:
    1. Checking self-promotion patterns ("available for hire", "my rate")
    2. ANY self-promotion match = SELF_PROMOTION, even if hiring phrases appear
    3. Otherwise strong hiring phrases or formatted Requirements/Responsibilities
       blocks = HIRING
    4. Otherwise salary language together with a weak hiring phrase = HIRING
    5. Nothing conclusive = UNCLEAR
    """

    def classify(self, text: str) -> HiringClassification:
        """
        Classify a post's title and body.

        Args:
            text: Post text (title and body concatenated)

        Returns:
            HiringClassification with the label, matched patterns and reason
        """
        if not text or not text.strip():
            return HiringClassification(label=HiringLabel.UNCLEAR, reason="Empty text")

        matched = self.get_matched_patterns(text)

        if matched["self_promotion"]:
            return HiringClassification(
                label=HiringLabel.SELF_PROMOTION,
                matched_patterns=matched,
                reason=f"Offers services: {', '.join(matched['self_promotion'])}",
            )

        if matched["strong_hiring"]:
            return HiringClassification(
                label=HiringLabel.HIRING,
                matched_patterns=matched,
                reason=f"Seeks candidates: {', '.join(matched['strong_hiring'])}",
            )

        if matched["structure"]:
            return HiringClassification(
                label=HiringLabel.HIRING,
                matched_patterns=matched,
                reason=f"Formatted job post: {', '.join(matched['structure'])}",
            )

        if matched["salary"] and matched["weak_hiring"]:
            return HiringClassification(
                label=HiringLabel.HIRING,
                matched_patterns=matched,
                reason="Salary language alongside hiring phrasing",
            )

        return HiringClassification(label=HiringLabel.UNCLEAR, matched_patterns=matched, reason="No conclusive signal")

    def is_hiring(self, text: str) -> bool:
        return self.classify(text).is_hiring

    def accepts(self, classification: HiringClassification, mode: SearchMode) -> bool:
        """Whether a classified post should be kept under the given search mode."""
        return classification.label in ACCEPTED_LABELS[mode]

    def get_matched_patterns(self, text: str) -> Dict[str, List[str]]:
        """
        Get the names of all patterns that match, grouped by category.

        Args:
            text: Text to check

        Returns:
            Dict mapping category name to matched pattern names
        """
        return {
            "self_promotion": [name for name, p in SELF_PROMOTION_PATTERNS.items() if p.search(text)],
            "strong_hiring": [name for name, p in STRONG_HIRING_PATTERNS.items() if p.search(text)],
            "structure": [name for name, p in STRUCTURE_PATTERNS.items() if p.search(text)],
            "salary": [name for name, p in SALARY_PATTERNS.items() if p.search(text)],
            "weak_hiring": [name for name, p in WEAK_HIRING_PATTERNS.items() if p.search(text)],
        }

    def get_matched_snippets(self, text: str, context: int = 30) -> List[str]:
        """
        Get text snippets around each match for debugging.

        Args:
            text: Text to check
            context: Characters of context on each side

        Returns:
            List of "CATEGORY/NAME: ...snippet..." strings
        """
        snippets = []
        for category, patterns in ALL_CLASSIFIER_PATTERNS.items():
            for name, pattern in patterns.items():
                match = pattern.search(text)
                if match:
                    start = max(0, match.start() - context)
                    end = min(len(text), match.end() + context)
                    snippet = text[start:end].replace("\n", " ").strip()
                    snippets.append(f"{category}/{name}: ...{snippet}...")
        return snippets

    def validate_patterns(self) -> bool:
        """Check that every pattern compiled and is searchable."""
        for patterns in ALL_CLASSIFIER_PATTERNS.values():
            for pattern in patterns.values():
                if not hasattr(pattern, "search"):
                    return False
        return True
