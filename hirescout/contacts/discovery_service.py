"""
Hiring-contact email discovery.

Pipeline for one company:

1. Website: homepage, up to N contact pages (or probed contact paths when the
   homepage links none), then a few team/about pages
2. Job post page, when a URL is given
3. Any additional URLs supplied by the caller
4. Merge duplicates case-insensitively, keeping the most trusted source
5. Rank (HR first, disposable last) and validate

Every fetch waits on one sliding-window rate limiter. A page that fails is
recorded as a typed EmailDiscoveryError and the pipeline moves on; discovery
itself only raises on programming errors.
"""

import logging
import time
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import httpx

from ..config.environment import EmailDiscoveryConfig, get_email_discovery_config
from ..core.errors import ScrapingError, classify_exception
from ..core.events import EventCallback, EventType, emit_event
from ..core.models import (
    Deliverability,
    DiscoveryMethod,
    EmailContact,
    EmailDiscoveryError,
    EmailDiscoveryParams,
    EmailDiscoveryResult,
    EmailSourceType,
    EmailValidationResult,
)
from ..core.resilience import RateLimitConfig, SlidingWindowRateLimiter
from ..utils.http import HttpFetcher
from .email_extractor import EmailExtractor
from .website_parser import COMMON_CONTACT_PATHS, WebsiteAnalysis, WebsiteParser, normalize_url, site_host

logger = logging.getLogger(__name__)

RATE_LIMIT_KEY = "email-discovery"
EVENT_SOURCE = "email-discovery"

CONTACT_PAGE_CONFIDENCE = 0.9
JOB_POST_CONFIDENCE = 0.8
TEAM_PAGE_CONFIDENCE = 0.7
ADDITIONAL_URL_CONFIDENCE = 0.6


def merge_contacts(contacts: Iterable[EmailContact]) -> List[EmailContact]:
    """
    Collapse repeated addresses, case-insensitively.

    The copy with the higher (confidence, source priority) wins; name, title
    and company missing on the winner are taken from the other copy.
    """
    merged: Dict[str, EmailContact] = {}

    for contact in contacts:
        key = contact.email.lower()
        existing = merged.get(key)
        if existing is None:
            merged[key] = contact
            continue

        if (contact.source.confidence, contact.source.priority) > (
            existing.source.confidence,
            existing.source.priority,
        ):
            winner, loser = contact, existing
        else:
            winner, loser = existing, contact

        merged[key] = winner.model_copy(
            update={
                "name": winner.name or loser.name,
                "title": winner.title or loser.title,
                "company": winner.company or loser.company,
            }
        )

    return list(merged.values())


def extract_company_domain(website: Optional[str]) -> Optional[str]:
    if not website:
        return None
    try:
        return site_host(normalize_url(website)) or None
    except ScrapingError:
        return None


class EmailDiscoveryService:
    """
    Finds likely hiring-contact addresses for a company.

    The service owns its HTTP client (unless one is injected) and a single
    rate limiter shared by every page it fetches.
    """

    def __init__(
        self,
        config: Optional[EmailDiscoveryConfig] = None,
        http_client: Optional[httpx.Client] = None,
        event_callback: Optional[EventCallback] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or get_email_discovery_config()
        self.event_callback = event_callback
        self.fetcher = HttpFetcher(
            user_agent=self.config.user_agent, timeout=self.config.request_timeout, client=http_client
        )
        self.extractor = EmailExtractor()
        self.parser = WebsiteParser(self.fetcher, self.extractor)
        self.rate_limiter = SlidingWindowRateLimiter(
            RateLimitConfig(
                requests=self.config.requests_per_minute, period=60.0, min_interval=self.config.request_delay
            ),
            clock=clock,
            sleep=sleep,
        )

    def close(self) -> None:
        self.fetcher.close()

    def __enter__(self) -> "EmailDiscoveryService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def discover_emails(self, params: EmailDiscoveryParams) -> EmailDiscoveryResult:
        """
        Run every requested discovery method and return ranked contacts.

        Args:
            params: Company, optional website/job URL/extra URLs and methods

        Returns:
            EmailDiscoveryResult; failed pages show up in ``errors``
        """
        if not isinstance(params, EmailDiscoveryParams):
            params = EmailDiscoveryParams.model_validate(params)

        start_time = time.time()
        errors: List[EmailDiscoveryError] = []
        found: List[EmailContact] = []
        result = EmailDiscoveryResult(
            company_name=params.company_name, company_domain=extract_company_domain(params.company_website)
        )
        steps = result.metadata.processing_steps

        emit_event(self.event_callback, EventType.START, EVENT_SOURCE, company=params.company_name)
        logger.info(f"🔎 Starting email discovery for {params.company_name}")

        if (
            DiscoveryMethod.WEBSITE in params.methods
            and self.config.enable_website_parsing
            and params.company_website
        ):
            self._progress("Analyzing company website", url=params.company_website)
            website_emails = self._discover_from_website(params.company_website, result, errors)
            found.extend(website_emails)
            steps.append(
                "Website analysis completed" if result.metadata.website_scanned else "Website analysis failed"
            )
            self._progress(f"Found {len(website_emails)} emails on website", count=len(website_emails))

        if DiscoveryMethod.JOB_POST in params.methods and params.job_url:
            self._progress("Analyzing job post", url=params.job_url)
            job_emails = self._scan_page(params.job_url, EmailSourceType.JOB_POST, JOB_POST_CONFIDENCE, errors)
            if job_emails is not None:
                result.metadata.job_post_scanned = True
                found.extend(job_emails)
                steps.append("Job post analysis completed")
                self._progress(f"Found {len(job_emails)} emails in job post", count=len(job_emails))
            else:
                steps.append("Job post analysis failed")

        if DiscoveryMethod.ADDITIONAL_URLS in params.methods and params.additional_urls:
            self._progress(f"Analyzing {len(params.additional_urls)} additional URLs")
            for url in params.additional_urls:
                url_emails = self._scan_page(url, EmailSourceType.WEBPAGE, ADDITIONAL_URL_CONFIDENCE, errors)
                if url_emails is not None:
                    result.metadata.urls_scanned += 1
                    found.extend(url_emails)
            steps.append(f"Analyzed {len(params.additional_urls)} additional URLs")

        for contact in found:
            contact.company = contact.company or params.company_name

        unique = merge_contacts(found)
        if self.config.enable_email_validation:
            self._progress("Validating discovered emails", count=len(unique))
            unique = self._apply_validation(unique)
            steps.append("Email validation completed")
        ranked = self.extractor.prioritize_emails(unique)

        result.emails = ranked
        result.total_found = len(found)
        result.unique_emails = len(ranked)
        result.verified_emails = sum(1 for contact in ranked if contact.verified)
        result.errors = errors
        result.processing_time = round((time.time() - start_time) * 1000, 1)

        logger.info(
            f"✅ Discovery for {params.company_name}: {result.unique_emails} unique emails, "
            f"{result.verified_emails} verified, {len(errors)} errors"
        )
        emit_event(
            self.event_callback,
            EventType.COMPLETE,
            EVENT_SOURCE,
            company=params.company_name,
            unique_emails=result.unique_emails,
            errors=len(errors),
        )
        return result

    def discover_from_job_post(self, job_url: str, company_name: str) -> EmailDiscoveryResult:
        return self.discover_emails(
            EmailDiscoveryParams(company_name=company_name, job_url=job_url, methods=[DiscoveryMethod.JOB_POST])
        )

    def discover_from_company(self, company_name: str, company_website: Optional[str] = None) -> EmailDiscoveryResult:
        return self.discover_emails(
            EmailDiscoveryParams(
                company_name=company_name, company_website=company_website, methods=[DiscoveryMethod.WEBSITE]
            )
        )

    def validate_email_list(self, emails: Iterable[str]) -> List[EmailValidationResult]:
        return [
            self.extractor.validate_email_deliverability(email, check_disposable=self.config.enable_disposable_check)
            for email in emails
        ]

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _discover_from_website(
        self, website: str, result: EmailDiscoveryResult, errors: List[EmailDiscoveryError]
    ) -> List[EmailContact]:
        self._throttle()
        try:
            analysis = self.parser.parse_website(website)
        except ScrapingError as e:
            self._record_error(errors, "Website parsing failed", e, website)
            return []

        result.metadata.website_scanned = True
        contacts = list(analysis.emails)
        scanned = {analysis.url}

        contact_pages = analysis.contact_links[: self.config.max_contact_pages]
        if not contact_pages:
            contact_pages = self._probe_contact_paths(analysis.url)[: self.config.max_contact_pages]
        result.metadata.contact_page_found = bool(contact_pages)

        for url in contact_pages:
            scanned.add(url)
            page_emails = self._scan_page(url, EmailSourceType.CONTACT_PAGE, CONTACT_PAGE_CONFIDENCE, errors)
            contacts.extend(page_emails or [])

        for url, source_type in self._secondary_pages(analysis, scanned):
            page_emails = self._scan_page(url, source_type, TEAM_PAGE_CONFIDENCE, errors)
            contacts.extend(page_emails or [])

        return contacts

    def _secondary_pages(self, analysis: WebsiteAnalysis, scanned: set) -> List[Tuple[str, EmailSourceType]]:
        pages: List[Tuple[str, EmailSourceType]] = []
        candidates = [(url, EmailSourceType.TEAM_PAGE) for url in analysis.team_page_links] + [
            (url, EmailSourceType.ABOUT_PAGE) for url in analysis.about_page_links
        ]
        for url, source_type in candidates:
            if url in scanned or any(url == page for page, _ in pages):
                continue
            pages.append((url, source_type))
        return pages[: self.config.max_team_pages]

    def _probe_contact_paths(self, base_url: str) -> List[str]:
        found = []
        for path in COMMON_CONTACT_PATHS:
            self._throttle()
            found.extend(self.parser.probe_contact_paths(base_url, [path]))
        return found

    def _scan_page(
        self,
        url: str,
        source_type: EmailSourceType,
        confidence: float,
        errors: List[EmailDiscoveryError],
    ) -> Optional[List[EmailContact]]:
        """Addresses on one page, or None when the page could not be read."""
        self._throttle()
        try:
            return self.parser.extract_emails_from_page(url, source_type, confidence)
        except ScrapingError as e:
            self._record_error(errors, f"Failed to read {source_type.value.replace('_', ' ')}", e, url)
            return None

    def _apply_validation(self, contacts: List[EmailContact]) -> List[EmailContact]:
        validated = []
        for contact in contacts:
            verdict = self.extractor.validate_email_deliverability(
                contact.email, check_disposable=self.config.enable_disposable_check
            )
            validated.append(
                contact.model_copy(
                    update={
                        "verified": verdict.is_valid and verdict.deliverable == Deliverability.VALID,
                        "is_disposable": verdict.is_disposable,
                        "deliverable": verdict.deliverable,
                    }
                )
            )
        return validated

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _throttle(self) -> None:
        self.rate_limiter.acquire(RATE_LIMIT_KEY)

    def _progress(self, message: str, **payload) -> None:
        emit_event(self.event_callback, EventType.PROGRESS, EVENT_SOURCE, message=message, **payload)

    def _record_error(
        self, errors: List[EmailDiscoveryError], context: str, error: ScrapingError, url: str
    ) -> None:
        error_type = classify_exception(error)
        message = f"{context}: {error.message}"
        logger.warning(f"⚠️ {message} ({url})")
        errors.append(EmailDiscoveryError(type=error_type, message=message, url=url))
        emit_event(self.event_callback, EventType.ERROR, EVENT_SOURCE, error=message, type=error_type.value, url=url)
