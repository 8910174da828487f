"""
Keyword relevance scoring under a precision mode.

Score per keyword:
- exact phrase in the text: 1.0
- otherwise PARTIAL_MATCH_WEIGHT * (keyword words present / keyword words)
- moderate also counts a word as present when one of its synonyms is
- loose also awards CATEGORY_MATCH_CREDIT when the text belongs to the
  keyword's broad category

A mode's credit is the best of the strategies it allows, so for the same text
the score never drops from strict to moderate to loose. With thresholds that
also decrease, result volume is non-decreasing strict -> moderate -> loose.
"""

import logging
import re
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple, TypeVar

from ..models import SearchMode

logger = logging.getLogger(__name__)

T = TypeVar("T")

MODE_THRESHOLDS: Dict[SearchMode, float] = {
    SearchMode.STRICT: 0.8,
    SearchMode.MODERATE: 0.4,
    SearchMode.LOOSE: 0.2,
}

PARTIAL_MATCH_WEIGHT = 0.6
CATEGORY_MATCH_CREDIT = 0.3

SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "developer": ("engineer", "programmer", "dev", "coder"),
    "engineer": ("developer", "programmer", "dev"),
    "programmer": ("developer", "engineer", "coder"),
    "frontend": ("front-end", "front end", "ui", "client-side"),
    "backend": ("back-end", "back end", "server-side", "api"),
    "fullstack": ("full-stack", "full stack"),
    "javascript": ("js", "typescript", "node.js", "nodejs"),
    "react": ("reactjs", "react.js", "next.js", "nextjs"),
    "python": ("django", "flask", "fastapi"),
    "designer": ("design", "ux", "ui/ux"),
    "remote": ("work from home", "wfh", "distributed", "anywhere"),
    "senior": ("sr", "lead", "principal", "staff"),
    "junior": ("jr", "entry-level", "entry level", "graduate"),
    "manager": ("lead", "head", "director"),
    "devops": ("sre", "site reliability", "platform engineer", "infrastructure"),
    "data": ("analytics", "analyst"),
    "ml": ("machine learning", "ai", "deep learning"),
    "mobile": ("ios", "android", "react native", "flutter"),
    "writer": ("copywriter", "content", "editor"),
    "marketing": ("marketer", "growth", "seo"),
}

KEYWORD_CATEGORIES: Dict[str, FrozenSet[str]] = {
    "software": frozenset(
        {
            "developer", "engineer", "programmer", "software", "frontend", "backend", "fullstack",
            "javascript", "typescript", "python", "java", "react", "node", "golang", "ruby", "php",
            "web", "devops", "coding", "mobile", "ios", "android",
        }
    ),
    "data": frozenset({"data", "analyst", "analytics", "scientist", "ml", "machine", "sql", "etl", "bi"}),
    "design": frozenset({"designer", "design", "ux", "ui", "figma", "graphic", "product"}),
    "marketing": frozenset({"marketing", "marketer", "seo", "growth", "content", "social", "writer", "copywriter"}),
    "management": frozenset({"manager", "lead", "director", "head", "product", "project", "scrum"}),
}

_TOKEN_RE = re.compile(r"[a-z0-9][a-z0-9+#.\-]*")


def normalize_text(text: str) -> str:
    return re.sub(r"\s+", " ", (text or "").lower()).strip()


def tokenize(text: str) -> Set[str]:
    """Lowercased word tokens, keeping tech spellings like c++, c# and node.js."""
    return {token.rstrip(".-") for token in _TOKEN_RE.findall(text.lower()) if token.rstrip(".-")}


def contains_phrase(text: str, phrase: str) -> bool:
    """Whole-word phrase search on already-normalized text."""
    phrase = normalize_text(phrase)
    if not phrase:
        return False
    return re.search(r"(?<![\w])" + re.escape(phrase) + r"(?![\w])", text) is not None


def _word_present(word: str, text: str, tokens: Set[str], use_synonyms: bool) -> bool:
    if word in tokens:
        return True
    if use_synonyms:
        return any(contains_phrase(text, synonym) for synonym in SYNONYMS.get(word, ()))
    return False


def _category_credit(words: Sequence[str], tokens: Set[str]) -> float:
    for terms in KEYWORD_CATEGORIES.values():
        if terms.intersection(words) and terms.intersection(tokens):
            return CATEGORY_MATCH_CREDIT
    return 0.0


def keyword_credit(keyword: str, text: str, mode: SearchMode = SearchMode.STRICT) -> float:
    """
    Credit in [0, 1] for a single keyword against normalized text.

    Args:
        keyword: Keyword phrase as supplied by the caller
        text: Output of normalize_text()
        mode: Precision mode, controls synonym and category credit
    """
    phrase = normalize_text(keyword)
    if not phrase:
        return 0.0
    if contains_phrase(text, phrase):
        return 1.0

    words = sorted(tokenize(phrase))
    if not words:
        return 0.0

    tokens = tokenize(text)
    use_synonyms = mode in (SearchMode.MODERATE, SearchMode.LOOSE)
    matched = sum(1 for word in words if _word_present(word, text, tokens, use_synonyms))
    credit = PARTIAL_MATCH_WEIGHT * matched / len(words)

    if mode == SearchMode.LOOSE:
        credit = max(credit, _category_credit(words, tokens))

    return credit


def score_relevance(text: str, keywords: Iterable[str], mode: SearchMode = SearchMode.STRICT) -> float:
    """
    Average per-keyword credit, in [0, 1].

    Args:
        text: Title and description of a candidate
        keywords: Requested keywords
        mode: Precision mode

    Returns:
        Relevance score rounded to 4 decimals
    """
    keywords = [k for k in keywords if k and k.strip()]
    if not keywords:
        return 0.0

    normalized = normalize_text(text)
    total = sum(keyword_credit(keyword, normalized, mode) for keyword in keywords)
    return round(min(max(total / len(keywords), 0.0), 1.0), 4)


def get_threshold(mode: SearchMode) -> float:
    return MODE_THRESHOLDS[mode]


class RelevanceEngine:
    """
    Scores and filters candidates for one search mode.

    Attributes:
        mode: Precision mode in effect
        threshold: Minimum score a candidate needs to be kept
    """

    def __init__(self, mode: SearchMode = SearchMode.MODERATE, thresholds: Optional[Dict[SearchMode, float]] = None):
        thresholds = thresholds or MODE_THRESHOLDS
        if not thresholds[SearchMode.STRICT] >= thresholds[SearchMode.MODERATE] >= thresholds[SearchMode.LOOSE]:
            raise ValueError("Thresholds must not increase from strict to moderate to loose")
        self.mode = mode
        self.threshold = thresholds[mode]

    def score(self, text: str, keywords: Iterable[str]) -> float:
        return score_relevance(text, keywords, self.mode)

    def is_relevant(self, score: float) -> bool:
        return score >= self.threshold

    def filter(
        self, items: Iterable[T], keywords: Sequence[str], get_text: Callable[[T], str]
    ) -> List[Tuple[T, float]]:
        """
        Score every item and keep those at or above the mode threshold.

        Args:
            items: Candidates in input order
            keywords: Requested keywords
            get_text: Extracts the text to score from an item

        Returns:
            (item, score) pairs in input order
        """
        kept = []
        total = 0
        for item in items:
            total += 1
            score = self.score(get_text(item), keywords)
            if self.is_relevant(score):
                kept.append((item, score))

        logger.debug(f"Relevance filter ({self.mode.value}, >= {self.threshold}): kept {len(kept)}/{total}")
        return kept
