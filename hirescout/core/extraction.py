"""
Heuristic field extraction from free-text job posts.

Structured sources only need the helpers for job type, remote flag and ids;
community and social posts go through the full set of title, company,
location, salary, requirement and contact extractors.
"""

import hashlib
import re
from typing import Iterable, List, Optional

from .filters.pattern_definitions import JOB_TYPE_PATTERNS, REMOTE_INDICATOR, SALARY_EXTRACTION_PATTERNS
from .models import JobType

EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
URL_RE = re.compile(r"https?://[^\s<>()\[\]\"']+")

FREE_MAIL_DOMAINS = frozenset(
    {"gmail.com", "yahoo.com", "hotmail.com", "outlook.com", "aol.com", "icloud.com", "protonmail.com", "live.com"}
)

# Hosts that are never a company's own website
NON_COMPANY_HOSTS = (
    "reddit.com", "redd.it", "twitter.com", "x.com", "t.co", "nitter.", "imgur.com",
    "linkedin.com", "facebook.com", "instagram.com", "youtube.com", "google.com",
)

TECH_KEYWORDS = [
    "javascript", "typescript", "python", "java", "golang", "rust", "ruby", "php", "c#", "c++", "swift",
    "kotlin", "react", "vue", "angular", "svelte", "next.js", "node.js", "django", "flask", "fastapi",
    "rails", "laravel", "spring", "aws", "gcp", "azure", "docker", "kubernetes", "terraform", "sql",
    "postgresql", "mysql", "mongodb", "redis", "graphql", "html", "css", "tailwind", "figma", "git",
    "machine learning", "pandas", "tensorflow", "pytorch", "ios", "android", "flutter", "react native",
]

TITLE_PATTERNS = [
    re.compile(r"\b(?:position|role|title)\s*:\s*([^\n|]{3,80})", re.IGNORECASE),
    re.compile(
        r"\b(?:hiring|looking\s+for|seeking|need)\s+(?:an?\s+|two\s+|\d+\s+)?"
        r"((?:[\w+#./-]+\s+){0,4}?(?:developer|engineer|designer|programmer|manager|analyst|scientist|"
        r"architect|specialist|consultant|writer|marketer|intern|lead|administrator|editor)s?)\b",
        re.IGNORECASE,
    ),
]

COMPANY_PATTERNS = [
    re.compile(r"\bcompany\s*:\s*([^\n|,]{2,60})", re.IGNORECASE),
    re.compile(r"\b([A-Z][\w&.'-]*(?:\s+[A-Z][\w&.'-]*){0,3})\s+is\s+(?:hiring|looking|seeking)\b"),
    re.compile(r"\b(?:join|at|@)\s+([A-Z][\w&.'-]*(?:\s+[A-Z][\w&.'-]*){0,2})"),
]

LOCATION_PATTERNS = [
    re.compile(r"\blocation\s*:\s*([^\n|]{2,60})", re.IGNORECASE),
    re.compile(r"\b(?:based\s+in|located\s+in|office\s+in|onsite\s+in|on-site\s+in)\s+([A-Z][\w .'-]{1,40}?(?:,\s*[A-Z]{2,})?)(?=[.,;!\n]|$)"),
    re.compile(r"\(([A-Z][\w .'-]+,\s*[A-Z]{2,}[\w ]*)\)"),
]

_TAG_RE = re.compile(r"\[[^\]]*\]|\([^)]*hiring[^)]*\)", re.IGNORECASE)
_MARKDOWN_RE = re.compile(r"[*_`#>]+")
_MD_LINK_RE = re.compile(r"\[([^\]]+)\]\((https?://[^)]+)\)")

# Words that look like capitalized company names but are not
_COMPANY_STOPWORDS = frozenset({"We", "I", "Our", "The", "This", "A", "Remote", "Hiring", "Looking", "Job", "Apply"})


def clean_text(text: Optional[str]) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def clean_description(text: Optional[str], max_length: int = 500) -> str:
    """Strip markdown noise and collapse whitespace, truncating with an ellipsis."""
    text = _MD_LINK_RE.sub(r"\1 (\2)", text or "")
    text = _MARKDOWN_RE.sub("", text)
    text = clean_text(text)
    if len(text) > max_length:
        text = text[: max_length - 3].rstrip() + "..."
    return text


def strip_post_tags(title: str) -> str:
    """Remove "[Hiring]"-style tags from a post title."""
    return clean_text(_TAG_RE.sub(" ", title or "")).strip(" -|:")


def extract_title(text: str, fallback: Optional[str] = None) -> str:
    """
    Best-effort job title.

    Explicit "Position:" lines win, then "hiring a X developer" phrasing,
    then the fallback (usually the cleaned post title).
    """
    for pattern in TITLE_PATTERNS:
        match = pattern.search(text or "")
        if match:
            title = clean_text(match.group(1)).strip(" .,-")
            if len(title) >= 3:
                return title[:100].title() if title.islower() else title[:100]
    if fallback:
        return strip_post_tags(fallback)[:100]
    return ""


def extract_company(text: str, fallback: Optional[str] = None) -> str:
    for pattern in COMPANY_PATTERNS:
        for match in pattern.finditer(text or ""):
            company = clean_text(match.group(1)).strip(" .,-")
            if company and company.split()[0] not in _COMPANY_STOPWORDS and len(company) <= 60:
                return company
    return fallback or ""


def extract_location(text: str) -> Optional[str]:
    for pattern in LOCATION_PATTERNS:
        match = pattern.search(text or "")
        if match:
            return clean_text(match.group(1)).strip(" .,-")
    if REMOTE_INDICATOR.search(text or ""):
        return "Remote"
    return None


def extract_salary(text: str) -> Optional[str]:
    for pattern in SALARY_EXTRACTION_PATTERNS:
        match = pattern.search(text or "")
        if match:
            return clean_text(match.group(0))
    return None


def format_salary_range(
    minimum: Optional[float], maximum: Optional[float], currency: str = "USD", interval: Optional[str] = None
) -> Optional[str]:
    """Render structured salary fields, e.g. "$80,000 - $120,000 / yearly"."""
    symbol = "$" if currency in ("USD", "", None) else f"{currency} "
    suffix = f" / {interval}" if interval else ""
    if minimum and maximum:
        return f"{symbol}{minimum:,.0f} - {symbol}{maximum:,.0f}{suffix}"
    if minimum:
        return f"{symbol}{minimum:,.0f}+{suffix}"
    if maximum:
        return f"Up to {symbol}{maximum:,.0f}{suffix}"
    return None


def determine_job_type(text: str) -> JobType:
    """First job type mentioned in priority order, full-time if none."""
    for job_type, pattern in JOB_TYPE_PATTERNS:
        if pattern.search(text or ""):
            return job_type
    return JobType.FULL_TIME


def normalize_job_type(value: Optional[str]) -> JobType:
    """Map source spellings ("fulltime", "Part Time", "temporary"...) onto JobType."""
    normalized = re.sub(r"[\s_-]+", "", (value or "").lower())
    mapping = {
        "fulltime": JobType.FULL_TIME,
        "parttime": JobType.PART_TIME,
        "contract": JobType.CONTRACT,
        "contractor": JobType.CONTRACT,
        "temporary": JobType.CONTRACT,
        "internship": JobType.INTERNSHIP,
        "intern": JobType.INTERNSHIP,
        "freelance": JobType.FREELANCE,
        "freelancer": JobType.FREELANCE,
    }
    if normalized in mapping:
        return mapping[normalized]
    return determine_job_type(value or "")


def is_remote_job(description: Optional[str], location: Optional[str] = None) -> bool:
    """Remote when the location or description carries a remote indicator."""
    return bool(REMOTE_INDICATOR.search(f"{location or ''} {description or ''}"))


def extract_requirements(text: str, tags: Optional[Iterable[str]] = None, max_items: int = 10) -> List[str]:
    """
    Requirements from source tags, a "Requirements:" bullet block and known tech keywords.
    """
    requirements: List[str] = []

    def add(item: str) -> None:
        item = clean_text(item).strip(" -*•.")
        if item and item.lower() not in (r.lower() for r in requirements):
            requirements.append(item)

    for tag in list(tags or [])[:5]:
        add(str(tag))

    block = re.search(
        r"(?:requirements|qualifications|must\s+haves?)\s*:\s*\n?((?:\s*[-*•].+\n?){1,10})", text or "", re.IGNORECASE
    )
    if block:
        for line in block.group(1).splitlines():
            if line.strip():
                add(line[:120])

    lowered = (text or "").lower()
    for keyword in TECH_KEYWORDS:
        if re.search(r"(?<![\w])" + re.escape(keyword) + r"(?![\w+#])", lowered):
            add(keyword)

    return requirements[:max_items]


def extract_contact_email(text: str, business_only: bool = False) -> Optional[str]:
    """
    First email address in text, lowercased.

    Args:
        business_only: Skip free webmail domains (gmail, yahoo...)
    """
    for match in EMAIL_RE.finditer(text or ""):
        email = match.group(0).lower()
        if business_only and email.split("@", 1)[1] in FREE_MAIL_DOMAINS:
            continue
        return email
    return None


def extract_website(text: str) -> Optional[str]:
    """First URL that does not point at a social network or the source itself."""
    for match in URL_RE.finditer(text or ""):
        url = match.group(0).rstrip(".,;:!?")
        if not any(host in url.lower() for host in NON_COMPANY_HOSTS):
            return url
    return None


def generate_job_id(source: str, title: str, company: str, url: str) -> str:
    """Stable id from the job's identity fields."""
    digest = hashlib.sha1(f"{title}-{company}-{url}".lower().encode("utf-8")).hexdigest()[:16]
    return f"{source}-{digest}"
