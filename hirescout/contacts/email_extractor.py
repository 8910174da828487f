"""
Email address extraction and ranking.

PATTERNS (highest confidence first, first match per address wins):
- mailto:        0.95  explicit mail links
- standard:      0.90  name@domain.tld
- [at]/[dot]:    0.80  name [at] domain [dot] tld
- (at)/(dot):    0.80  name (at) domain (dot) tld
- spaced:        0.70  name @ domain . tld

RANKING:
Role of the local part (HR > executive > personal > generic) plus ten times
the source confidence. Disposable domains always sort last.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Tuple

from bs4 import BeautifulSoup

from ..core.models import (
    Deliverability,
    EmailContact,
    EmailSource,
    EmailSourceType,
    EmailValidationResult,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailPattern:
    name: str
    regex: Pattern[str]
    confidence: float


MAILTO_METHOD = "mailto"
MAILTO_CONFIDENCE = 0.95

EMAIL_PATTERNS: List[EmailPattern] = [
    EmailPattern(
        MAILTO_METHOD,
        re.compile(r"mailto:\s*([A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,})", re.IGNORECASE),
        MAILTO_CONFIDENCE,
    ),
    EmailPattern("standard", re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"), 0.9),
    EmailPattern(
        "bracket_obfuscated",
        re.compile(
            r"\b[A-Za-z0-9._%+-]+\s*\[\s*at\s*\]\s*[A-Za-z0-9.-]+\s*\[\s*dot\s*\]\s*[A-Za-z]{2,}\b", re.IGNORECASE
        ),
        0.8,
    ),
    EmailPattern(
        "paren_obfuscated",
        re.compile(
            r"\b[A-Za-z0-9._%+-]+\s*\(\s*at\s*\)\s*[A-Za-z0-9.-]+\s*\(\s*dot\s*\)\s*[A-Za-z]{2,}\b", re.IGNORECASE
        ),
        0.8,
    ),
    EmailPattern("spaced", re.compile(r"\b[A-Za-z0-9._%+-]+\s*@\s*[A-Za-z0-9.-]+\s*\.\s*[A-Za-z]{2,}\b"), 0.7),
]

DISPOSABLE_DOMAINS = frozenset(
    {
        "10minutemail.com",
        "guerrillamail.com",
        "mailinator.com",
        "tempmail.org",
        "yopmail.com",
        "temp-mail.org",
        "throwaway.email",
        "getnada.com",
        "dispostable.com",
        "tempmail.net",
        "sharklasers.com",
        "guerrillamailblock.com",
        "emailondeck.com",
        "temp-mail.io",
        "mohmal.com",
        "mytrashmail.com",
    }
)

HR_PREFIXES = frozenset(
    {
        "hr", "careers", "jobs", "recruiting", "recruitment", "talent", "hiring",
        "work", "employment", "human.resources", "people",
    }
)
EXECUTIVE_PREFIXES = frozenset(
    {"ceo", "founder", "president", "director", "manager", "lead", "head", "chief", "vp", "vice.president", "exec"}
)
GENERIC_PREFIXES = frozenset({"info", "contact", "support", "hello", "admin", "office", "team", "sales"})

ROLE_SCORES: Dict[str, int] = {"hr": 50, "executive": 30, "personal": 20, "generic": 10}
CONFIDENCE_WEIGHT = 10

# Asset names like logo@2x.png match the address pattern
_ASSET_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".css", ".js")

_VALID_EMAIL_RE = re.compile(r"^[a-z0-9._%+-]+@[a-z0-9-]+(\.[a-z0-9-]+)*\.[a-z]{2,}$")
_ROLE_SPLIT_RE = re.compile(r"[._+-]")

_NAME_PATTERNS = [
    re.compile(r"([A-Z][a-z]+ [A-Z][a-z]+)\s*[:\-]?\s*\(?\s*$"),
    re.compile(r"(?i:contact):?\s*([A-Z][a-z]+ [A-Z][a-z]+)"),
]
_TITLE_PATTERNS = [
    re.compile(r"\b(?:CEO|CTO|CFO|COO|VP|Director|Manager|Lead|Head|Senior|Junior|Associate)\s+[A-Z][a-z]+"),
    re.compile(r"\b[A-Z][a-z]+\s+(?:Manager|Director|Lead|Recruiter)\b"),
    re.compile(r"\b(?:CEO|CTO|CFO|COO|Founder|Co-Founder|Recruiter)\b"),
]
_CONTEXT_CHARS = 100


class EmailExtractor:
    """Finds, normalizes, scores and sanity-checks email addresses in page content."""

    def __init__(self, patterns: Optional[List[EmailPattern]] = None):
        self.patterns = patterns or EMAIL_PATTERNS

    # ------------------------------------------------------------------
    # Normalization and format
    # ------------------------------------------------------------------

    @staticmethod
    def normalize_email(raw: str) -> str:
        """Lowercase, undo [at]/(dot) obfuscation and strip whitespace and mailto:."""
        email = raw.lower()
        email = re.sub(r"\s*[\[(]\s*at\s*[\])]\s*", "@", email)
        email = re.sub(r"\s*[\[(]\s*dot\s*[\])]\s*", ".", email)
        email = re.sub(r"\s+", "", email)
        email = email.replace("mailto:", "")
        return email.split("?", 1)[0].strip(".")

    @staticmethod
    def is_valid_email_format(email: str) -> bool:
        if not email or len(email) > 254 or ".." in email:
            return False
        if not _VALID_EMAIL_RE.match(email):
            return False
        local = email.split("@", 1)[0]
        if local.startswith(".") or local.endswith(".") or len(local) > 64:
            return False
        return not email.endswith(_ASSET_SUFFIXES)

    @staticmethod
    def is_disposable_email(email: str) -> bool:
        if "@" not in email:
            return False
        return email.rsplit("@", 1)[1].lower() in DISPOSABLE_DOMAINS

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def extract_from_text(
        self,
        text: str,
        source_type: EmailSourceType = EmailSourceType.WEBPAGE,
        url: str = "",
        page_confidence: Optional[float] = None,
        company: Optional[str] = None,
    ) -> List[EmailContact]:
        """
        Extract every distinct address in ``text``.

        Without a page confidence each contact carries its pattern's
        confidence. With one, contacts carry the page confidence, except
        mailto hits which never drop below 0.95.
        """
        contacts: List[EmailContact] = []
        seen = set()
        if not text:
            return contacts

        for pattern in self.patterns:
            for match in pattern.regex.finditer(text):
                raw = match.group(1) if pattern.regex.groups else match.group(0)
                email = self.normalize_email(raw)
                if email in seen or not self.is_valid_email_format(email):
                    continue
                seen.add(email)

                if page_confidence is None:
                    confidence = pattern.confidence
                elif pattern.name == MAILTO_METHOD:
                    confidence = max(page_confidence, MAILTO_CONFIDENCE)
                else:
                    confidence = page_confidence

                name, title = self.extract_context(text, match.start(), match.end())
                contacts.append(
                    EmailContact(
                        email=email,
                        name=name,
                        title=title,
                        company=company,
                        source=EmailSource(type=source_type, url=url, confidence=confidence, method=pattern.name),
                        is_disposable=self.is_disposable_email(email),
                    )
                )

        return contacts

    def extract_from_html(
        self,
        html: str,
        source_type: EmailSourceType = EmailSourceType.WEBPAGE,
        url: str = "",
        page_confidence: Optional[float] = None,
        company: Optional[str] = None,
    ) -> List[EmailContact]:
        """Extract from visible text plus mailto: hrefs, ignoring scripts and styles."""
        soup = BeautifulSoup(html or "", "html.parser")
        for tag in soup(["script", "style", "noscript"]):
            tag.decompose()

        mailto_links = [
            f"mailto:{a['href'].split(':', 1)[1]}"
            for a in soup.select("a[href]")
            if a["href"].strip().lower().startswith("mailto:")
        ]
        text = soup.get_text(" ", strip=True)
        # Link targets first so their addresses are credited to the mailto pattern
        combined = " ".join(mailto_links + [text])
        return self.extract_from_text(combined, source_type, url, page_confidence, company)

    @staticmethod
    def extract_context(text: str, start: int, end: int) -> Tuple[Optional[str], Optional[str]]:
        """Best-effort (name, title) from the text around an address."""
        before = text[max(0, start - _CONTEXT_CHARS):start]
        window = text[max(0, start - _CONTEXT_CHARS):min(len(text), end + _CONTEXT_CHARS)]

        name = None
        for pattern in _NAME_PATTERNS:
            match = pattern.search(before)
            if match:
                name = match.group(1).strip()
                break

        title = None
        for pattern in _TITLE_PATTERNS:
            match = pattern.search(window)
            if match:
                title = match.group(0).strip()
                break

        return name, title

    # ------------------------------------------------------------------
    # Ranking
    # ------------------------------------------------------------------

    @staticmethod
    def email_role(email: str) -> Optional[str]:
        """hr, executive, generic or personal, checked in that order; None for anything else."""
        local = email.split("@", 1)[0].lower()
        head = _ROLE_SPLIT_RE.split(local)[0]

        for role, prefixes in (("hr", HR_PREFIXES), ("executive", EXECUTIVE_PREFIXES), ("generic", GENERIC_PREFIXES)):
            if local in prefixes or head in prefixes:
                return role
        if _ROLE_SPLIT_RE.search(local):
            return "personal"
        return None

    def email_score(self, contact: EmailContact) -> float:
        role = self.email_role(contact.email)
        return ROLE_SCORES.get(role, 0) + contact.source.confidence * CONFIDENCE_WEIGHT

    def prioritize_emails(self, contacts: List[EmailContact]) -> List[EmailContact]:
        """Best contacts first; disposable addresses always last."""
        return sorted(contacts, key=lambda c: (c.is_disposable, -self.email_score(c)))

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_email_deliverability(self, email: str, check_disposable: bool = True) -> EmailValidationResult:
        """
        Offline deliverability verdict: format, disposable domain, domain shape.

        No DNS or SMTP checks are made; an address passing all local checks
        is reported as valid.
        """
        normalized = self.normalize_email(email or "")
        is_disposable = self.is_disposable_email(normalized)

        if not self.is_valid_email_format(normalized):
            return EmailValidationResult(
                email=email,
                is_valid=False,
                is_disposable=is_disposable,
                deliverable=Deliverability.INVALID,
                reason="Invalid email format",
            )

        if check_disposable and is_disposable:
            return EmailValidationResult(
                email=normalized,
                is_valid=True,
                is_disposable=True,
                deliverable=Deliverability.INVALID,
                reason="Disposable email domain",
            )

        domain = normalized.split("@", 1)[1]
        if len(domain) < 3 or "." not in domain:
            return EmailValidationResult(
                email=normalized,
                is_valid=True,
                is_disposable=is_disposable,
                deliverable=Deliverability.INVALID,
                reason="Invalid domain",
            )

        return EmailValidationResult(
            email=normalized, is_valid=True, is_disposable=is_disposable, deliverable=Deliverability.VALID
        )

    def suggest_email_formats(self, name: str, domain: str) -> List[str]:
        """Likely addresses for a person at a domain (top 5)."""
        if not name or not domain:
            return []
        parts = [re.sub(r"[^a-z]", "", part) for part in name.lower().split()]
        parts = [part for part in parts if part]
        if not parts:
            return []

        first, last = parts[0], parts[-1]
        domain = domain.lower().strip()
        candidates = [
            f"{first}.{last}@{domain}",
            f"{first}{last}@{domain}",
            f"{first}_{last}@{domain}",
            f"{first[0]}{last}@{domain}",
            f"{first}.{last[0]}@{domain}",
            f"{first[0]}.{last}@{domain}",
            f"{last}.{first}@{domain}",
            f"{last}{first}@{domain}",
            f"{last}_{first}@{domain}",
        ]

        suggestions: List[str] = []
        for candidate in candidates:
            if self.is_valid_email_format(candidate) and candidate not in suggestions:
                suggestions.append(candidate)
        return suggestions[:5]
