"""
Data model shared by scrapers and contact discovery.

Records are pydantic models so every Job and EmailContact that leaves the core
has passed schema validation.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from urllib.parse import urlparse

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ErrorType


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# ENUMS
# ============================================================================


class JobType(str, Enum):
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"
    FREELANCE = "freelance"


class JobSource(str, Enum):
    TWITTER = "twitter"
    REDDIT = "reddit"
    LINKEDIN = "linkedin"
    GOOGLE = "google"
    FACEBOOK = "facebook"
    GITHUB = "github"
    REMOTEOK = "remoteok"


class DatePosted(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    ANY = "any"


class SearchMode(str, Enum):
    STRICT = "strict"
    MODERATE = "moderate"
    LOOSE = "loose"


class HiringLabel(str, Enum):
    HIRING = "hiring"
    SELF_PROMOTION = "self_promotion"
    UNCLEAR = "unclear"


class EmailSourceType(str, Enum):
    CONTACT_PAGE = "contact_page"
    JOB_POST = "job_post"
    TEAM_PAGE = "team_page"
    ABOUT_PAGE = "about_page"
    WEBPAGE = "webpage"
    SOCIAL = "social"
    WHOIS = "whois"


# Higher wins when two discoveries of the same address have equal confidence
SOURCE_PRIORITY: Dict[EmailSourceType, int] = {
    EmailSourceType.CONTACT_PAGE: 10,
    EmailSourceType.JOB_POST: 8,
    EmailSourceType.TEAM_PAGE: 7,
    EmailSourceType.ABOUT_PAGE: 6,
    EmailSourceType.WEBPAGE: 5,
    EmailSourceType.SOCIAL: 3,
    EmailSourceType.WHOIS: 2,
}


class Deliverability(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    UNKNOWN = "unknown"


# ============================================================================
# JOBS
# ============================================================================


class JobContact(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    name: Optional[str] = None
    website: Optional[str] = None


class ScrapedMetadata(BaseModel):
    """Provenance of a job plus the platform's own fields in ``raw_data``."""

    scraped_at: datetime = Field(default_factory=utc_now)
    scraper_id: str = ""
    relevance_score: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    classification: Optional[HiringLabel] = None
    raw_data: Dict[str, Any] = Field(default_factory=dict)


class Job(BaseModel):
    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    company: str = Field(min_length=1)
    location: Optional[str] = None
    description: str = ""
    requirements: List[str] = Field(default_factory=list)
    salary: Optional[str] = None
    job_type: JobType = JobType.FULL_TIME
    remote: bool = False
    url: str
    source: JobSource
    contact: Optional[JobContact] = None
    posted_at: datetime
    scraped_metadata: ScrapedMetadata = Field(default_factory=ScrapedMetadata)

    @field_validator("title", "company", "url")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("url")
    @classmethod
    def _http_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"not an http(s) URL: {value!r}")
        return value


class SearchParams(BaseModel):
    keywords: List[str] = Field(min_length=1)
    location: Optional[str] = None
    date_posted: DatePosted = DatePosted.ANY
    job_type: List[JobType] = Field(default_factory=list)
    remote: Optional[bool] = None
    search_mode: SearchMode = SearchMode.MODERATE
    limit: int = Field(default=50, ge=1, le=500)
    offset: int = Field(default=0, ge=0)

    @field_validator("keywords")
    @classmethod
    def _clean_keywords(cls, value: List[str]) -> List[str]:
        cleaned = [keyword.strip() for keyword in value if keyword and keyword.strip()]
        if not cleaned:
            raise ValueError("at least one non-blank keyword is required")
        return cleaned


class ScraperError(BaseModel):
    type: ErrorType
    message: str
    timestamp: datetime = Field(default_factory=utc_now)
    details: Optional[Dict[str, Any]] = None


class ResultMetadata(BaseModel):
    search_params: SearchParams
    scraped_at: datetime = Field(default_factory=utc_now)
    scraper_id: str
    platform: JobSource
    took: float = 0.0
    errors: List[str] = Field(default_factory=list)


class ScraperResult(BaseModel):
    jobs: List[Job] = Field(default_factory=list)
    total_found: int = 0
    has_more: bool = False
    metadata: ResultMetadata


class FailureReason(str, Enum):
    DISABLED = "disabled"
    EXHAUSTED = "exhausted"


class ScrapeFailure(BaseModel):
    """Returned instead of a ScraperResult when a scrape could not run at all."""

    scraper_id: str
    platform: JobSource
    reason: FailureReason
    error: ScraperError


ScrapeOutcome = Union[ScraperResult, ScrapeFailure]


class ScraperStatus(BaseModel):
    id: str
    name: str
    platform: JobSource
    enabled: bool
    healthy: bool
    last_run: Optional[datetime] = None
    success_rate: float = 0.0
    average_response_time: float = 0.0
    total_runs: int = 0
    errors: List[ScraperError] = Field(default_factory=list)


# ============================================================================
# CONTACTS
# ============================================================================


class EmailSource(BaseModel):
    type: EmailSourceType
    url: str
    confidence: float = Field(ge=0.0, le=1.0)
    extracted_at: datetime = Field(default_factory=utc_now)
    method: str = ""

    @property
    def priority(self) -> int:
        return SOURCE_PRIORITY[self.type]


class EmailContact(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    email: str
    name: Optional[str] = None
    title: Optional[str] = None
    company: Optional[str] = None
    source: EmailSource
    verified: bool = False
    is_disposable: bool = False
    deliverable: Optional[Deliverability] = None

    @field_validator("email")
    @classmethod
    def _normalized(cls, value: str) -> str:
        value = value.strip().lower()
        if value.count("@") != 1:
            raise ValueError(f"email must contain exactly one '@': {value!r}")
        local, domain = value.split("@")
        if not local or not domain:
            raise ValueError(f"email is missing a local part or domain: {value!r}")
        return value

    @property
    def domain(self) -> str:
        return self.email.split("@", 1)[1]


class EmailValidationResult(BaseModel):
    email: str
    is_valid: bool
    is_disposable: bool = False
    deliverable: Deliverability = Deliverability.UNKNOWN
    reason: Optional[str] = None


class DiscoveryMethod(str, Enum):
    WEBSITE = "website"
    JOB_POST = "job_post"
    ADDITIONAL_URLS = "additional_urls"


class EmailDiscoveryParams(BaseModel):
    company_name: str = Field(min_length=1)
    company_website: Optional[str] = None
    job_url: Optional[str] = None
    additional_urls: List[str] = Field(default_factory=list)
    methods: List[DiscoveryMethod] = Field(default_factory=lambda: list(DiscoveryMethod))


class EmailDiscoveryError(BaseModel):
    type: ErrorType
    message: str
    url: Optional[str] = None
    timestamp: datetime = Field(default_factory=utc_now)


class DiscoveryMetadata(BaseModel):
    website_scanned: bool = False
    contact_page_found: bool = False
    job_post_scanned: bool = False
    urls_scanned: int = 0
    processing_steps: List[str] = Field(default_factory=list)


class EmailDiscoveryResult(BaseModel):
    company_name: str
    company_domain: Optional[str] = None
    emails: List[EmailContact] = Field(default_factory=list)
    total_found: int = 0
    unique_emails: int = 0
    verified_emails: int = 0
    processing_time: float = 0.0
    errors: List[EmailDiscoveryError] = Field(default_factory=list)
    metadata: DiscoveryMetadata = Field(default_factory=DiscoveryMetadata)


# ============================================================================
# EXPORT
# ============================================================================

EXPORT_COLUMNS = [
    "id",
    "title",
    "company",
    "location",
    "job_type",
    "remote",
    "salary",
    "url",
    "source",
    "contact_email",
    "posted_at",
    "relevance_score",
]


def jobs_to_dataframe(jobs: List[Job]) -> pd.DataFrame:
    """Flatten jobs into a DataFrame for downstream storage or CSV export."""
    rows = []
    for job in jobs:
        rows.append(
            {
                "id": job.id,
                "title": job.title,
                "company": job.company,
                "location": job.location or "",
                "job_type": job.job_type.value,
                "remote": job.remote,
                "salary": job.salary or "",
                "url": job.url,
                "source": job.source.value,
                "contact_email": job.contact.email if job.contact and job.contact.email else "",
                "posted_at": job.posted_at,
                "relevance_score": job.scraped_metadata.relevance_score,
            }
        )
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)
