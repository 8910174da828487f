"""
Unit tests for hiring vs. self-promotion classification.

Test Categories:
- Self-promotion detection (always wins over hiring phrases)
- Strong hiring phrases and formatted job posts
- Salary plus weak hiring phrasing
- Mode-aware acceptance
"""

import pytest

from ...models import HiringLabel, SearchMode
from ..hiring_classifier import ACCEPTED_LABELS, HiringClassifier


@pytest.fixture
def classifier() -> HiringClassifier:
    return HiringClassifier()


class TestSelfPromotion:
    """Posts from people offering their own services."""

    @pytest.mark.parametrize(
        "text",
        [
            "[For Hire] React developer with 5 years of experience",
            "Available for hire! Check out my portfolio",
            "I'm looking for work as a Python developer, my rate is $50/hr",
            "Offering freelance services for Shopify stores",
            "Open to work - senior backend engineer",
        ],
    )
    def test_self_promotion_detected(self, classifier: HiringClassifier, text: str) -> None:
        assert classifier.classify(text).label == HiringLabel.SELF_PROMOTION

    def test_self_promotion_wins_over_hiring_phrases(self, classifier: HiringClassifier) -> None:
        result = classifier.classify("Available for hire. We are hiring too, join our team!")

        assert result.label == HiringLabel.SELF_PROMOTION
        assert not result.is_hiring
        assert "AVAILABLE_FOR_HIRE" in result.matched_patterns["self_promotion"]
        assert "WE_ARE_HIRING" in result.matched_patterns["strong_hiring"]


class TestHiring:
    """Posts from companies looking for people."""

    @pytest.mark.parametrize(
        ("text", "reason"),
        [
            ("[Hiring] Senior React Developer (Remote)", "Hiring tag"),
            ("We're hiring a backend engineer to join our team", "We are hiring"),
            ("Looking for a React developer for a 3 month project", "Seeking candidates"),
            ("Send your resume to jobs@acme.example", "Send resume"),
            ("Frontend role at Acme\nRequirements:\n- 3 years React", "Requirements block"),
        ],
    )
    def test_hiring_detected(self, classifier: HiringClassifier, text: str, reason: str) -> None:
        assert classifier.is_hiring(text), f"Failed: {reason}"

    def test_salary_with_weak_phrase_is_hiring(self, classifier: HiringClassifier) -> None:
        result = classifier.classify("Need help with a website rebuild, budget $500")

        assert result.label == HiringLabel.HIRING
        assert result.matched_patterns["salary"]
        assert result.matched_patterns["weak_hiring"]

    def test_salary_alone_is_unclear(self, classifier: HiringClassifier) -> None:
        assert classifier.classify("Bought a keyboard for $150 today").label == HiringLabel.UNCLEAR


class TestUnclearAndModes:
    """Inconclusive posts and what each search mode keeps."""

    @pytest.mark.parametrize("text", ["", "   ", "Just shipped my side project, feedback welcome"])
    def test_unclear(self, classifier: HiringClassifier, text: str) -> None:
        assert classifier.classify(text).label == HiringLabel.UNCLEAR

    def test_loose_mode_keeps_unclear(self, classifier: HiringClassifier) -> None:
        unclear = classifier.classify("Interesting discussion about React hooks")

        assert not classifier.accepts(unclear, SearchMode.STRICT)
        assert not classifier.accepts(unclear, SearchMode.MODERATE)
        assert classifier.accepts(unclear, SearchMode.LOOSE)

    def test_self_promotion_rejected_in_every_mode(self, classifier: HiringClassifier) -> None:
        promo = classifier.classify("[For Hire] Designer, hire me")

        for mode in SearchMode:
            assert not classifier.accepts(promo, mode)

    def test_accepted_labels_grow_with_looser_modes(self) -> None:
        assert ACCEPTED_LABELS[SearchMode.STRICT] <= ACCEPTED_LABELS[SearchMode.MODERATE]
        assert ACCEPTED_LABELS[SearchMode.MODERATE] <= ACCEPTED_LABELS[SearchMode.LOOSE]


def test_matched_snippets(classifier: HiringClassifier) -> None:
    snippets = classifier.get_matched_snippets("Big news: we are hiring engineers in Berlin")

    assert any(snippet.startswith("strong_hiring/WE_ARE_HIRING") for snippet in snippets)


def test_patterns_are_valid(classifier: HiringClassifier) -> None:
    assert classifier.validate_patterns()
