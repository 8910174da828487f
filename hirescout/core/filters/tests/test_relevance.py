"""
Unit tests for keyword relevance scoring.

Test Categories:
- Exact phrase vs. partial word credit
- Synonym credit (moderate) and category credit (loose)
- Mode monotonicity of scores and kept volume
- RelevanceEngine filtering and threshold validation
"""

import pytest

from ...models import SearchMode
from ..relevance import (
    MODE_THRESHOLDS,
    RelevanceEngine,
    contains_phrase,
    get_threshold,
    score_relevance,
    tokenize,
)

CANDIDATE_TEXTS = [
    "We need a frontend developer for our React app",
    "Senior Frontend Engineer, remote",
    "Python backend role at a fintech startup",
    "Front-end programmer wanted",
    "Bakery looking for a morning shift cashier",
    "UI engineer for design systems",
]


class TestScoring:
    def test_exact_phrase_scores_one(self) -> None:
        assert score_relevance("Hiring a Frontend Developer in Lisbon", ["frontend developer"]) == 1.0

    def test_partial_match_is_weighted(self) -> None:
        # one of two words present: 0.6 * 1/2
        assert score_relevance("Senior Frontend Engineer", ["frontend developer"], SearchMode.STRICT) == 0.3

    def test_strict_drops_partial_matches(self) -> None:
        engine = RelevanceEngine(SearchMode.STRICT)

        assert not engine.is_relevant(engine.score("Senior Frontend Engineer", ["frontend developer"]))
        assert engine.is_relevant(engine.score("We need a frontend developer", ["frontend developer"]))

    def test_moderate_counts_synonyms(self) -> None:
        score = score_relevance("Senior Frontend Engineer", ["frontend developer"], SearchMode.MODERATE)

        assert score == 0.6
        assert RelevanceEngine(SearchMode.MODERATE).is_relevant(score)

    def test_loose_gives_category_credit(self) -> None:
        text = "Python backend role"

        assert score_relevance(text, ["frontend developer"], SearchMode.MODERATE) == 0.0
        assert score_relevance(text, ["frontend developer"], SearchMode.LOOSE) == 0.3

    def test_multiple_keywords_are_averaged(self) -> None:
        assert score_relevance("React developer", ["react", "golang"]) == 0.5

    def test_empty_keywords_score_zero(self) -> None:
        assert score_relevance("anything", []) == 0.0
        assert score_relevance("anything", ["  "]) == 0.0

    def test_phrase_match_respects_word_boundaries(self) -> None:
        assert contains_phrase("java developer", "java")
        assert not contains_phrase("javascript developer", "java")

    def test_tokenize_keeps_tech_spellings(self) -> None:
        assert {"c++", "c#", "node.js"} <= tokenize("C++, C# and Node.js.")


class TestModeMonotonicity:
    @pytest.mark.parametrize("text", CANDIDATE_TEXTS)
    def test_score_never_drops_in_looser_modes(self, text: str) -> None:
        keywords = ["frontend developer"]
        strict = score_relevance(text, keywords, SearchMode.STRICT)
        moderate = score_relevance(text, keywords, SearchMode.MODERATE)
        loose = score_relevance(text, keywords, SearchMode.LOOSE)

        assert strict <= moderate <= loose

    def test_kept_volume_is_non_decreasing(self) -> None:
        kept = {
            mode: len(RelevanceEngine(mode).filter(CANDIDATE_TEXTS, ["frontend developer"], lambda t: t))
            for mode in SearchMode
        }

        assert kept[SearchMode.STRICT] <= kept[SearchMode.MODERATE] <= kept[SearchMode.LOOSE]
        assert kept[SearchMode.STRICT] == 1

    def test_thresholds_decrease(self) -> None:
        assert get_threshold(SearchMode.STRICT) > get_threshold(SearchMode.MODERATE) > get_threshold(SearchMode.LOOSE)


class TestRelevanceEngine:
    def test_filter_preserves_order_and_scores(self) -> None:
        items = [{"text": "frontend developer"}, {"text": "cashier"}, {"text": "Frontend Developer, remote"}]

        kept = RelevanceEngine(SearchMode.STRICT).filter(items, ["frontend developer"], lambda i: i["text"])

        assert [item["text"] for item, _ in kept] == ["frontend developer", "Frontend Developer, remote"]
        assert all(score == 1.0 for _, score in kept)

    def test_increasing_thresholds_rejected(self) -> None:
        thresholds = dict(MODE_THRESHOLDS)
        thresholds[SearchMode.LOOSE] = 0.9

        with pytest.raises(ValueError):
            RelevanceEngine(SearchMode.LOOSE, thresholds)
