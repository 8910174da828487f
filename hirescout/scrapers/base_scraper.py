"""
Base scraper contract shared by every platform adapter.

This module wraps each adapter's source-specific fetch in the same lifecycle:

Architecture:
- Disabled check: fails fast with a typed ScrapeFailure, no network call
- Rate limiting: sliding window acquired per scraper id
- Retry: bounded attempts with fixed/linear/exponential backoff and jitter
- Validation: every raw record is validated into a Job; bad records are dropped
- Metadata: timing, platform, params and accumulated errors are stamped

Adapters implement _perform_scrape() returning raw record dicts and use the
post-processing helpers here (relevance, classification, recency, dedup,
sorting, paging) so every source ranks results the same way.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
from pydantic import ValidationError

from ..config.environment import get_scraper_config
from ..config.platforms import ScraperConfig, merge_scraper_config
from ..core.deduplication import deduplicate
from ..core.errors import ErrorType, classify_exception
from ..core.events import EventCallback, EventType, emit_event
from ..core.extraction import generate_job_id, is_remote_job
from ..core.filters import HiringClassifier, RelevanceEngine
from ..core.models import (
    FailureReason,
    Job,
    JobSource,
    ResultMetadata,
    ScrapeFailure,
    ScrapeOutcome,
    ScraperError,
    ScraperResult,
    ScraperStatus,
    SearchParams,
)
from ..core.monitor import ScraperMonitor
from ..core.resilience import RateLimiterRegistry, call_with_retry
from ..utils.http import HttpFetcher
from ..utils.time_filters import filter_by_date, get_max_age

logger = logging.getLogger(__name__)

TEST_SEARCH = {"keywords": ["software engineer"], "limit": 1}


@dataclass
class RawScrapeResult:
    """What an adapter hands back before schema validation."""

    records: List[Dict[str, Any]] = field(default_factory=list)
    total_found: int = 0
    has_more: bool = False
    errors: List[str] = field(default_factory=list)


class BaseScraper(ABC):
    """
    Abstract base class for all platform scrapers.

    Subclasses set ``platform`` and ``name`` and implement _perform_scrape()
    and _perform_validation(). Rate limiter, retry policy, HTTP client and
    run history are owned by the instance.
    """

    platform: JobSource
    name: str = "Scraper"
    # Mixed-intent sources run the hiring classifier on every candidate
    classify_posts: bool = False
    # Whether the URL is part of the within-source dedup key
    dedup_include_url: bool = False

    def __init__(
        self,
        config: Optional[ScraperConfig] = None,
        scraper_id: Optional[str] = None,
        rate_limiters: Optional[RateLimiterRegistry] = None,
        http_client: Optional[httpx.Client] = None,
        event_callback: Optional[EventCallback] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the scraper.

        Args:
            config: Scraper settings (defaults to the platform's environment config)
            scraper_id: Key for rate limiting and logging
            rate_limiters: Registry to register this scraper's limiter in
            http_client: Preconfigured httpx client (tests pass a MockTransport client)
            event_callback: Receives start/progress/success/error/complete events
            sleep: Blocking sleep used for pacing and backoff
        """
        self.scraper_id = scraper_id or f"{self.platform.value}-scraper"
        self.config = config or get_scraper_config(self.platform)
        self.event_callback = event_callback
        self._sleep = sleep
        self._http_client = http_client
        self._rate_limiters = rate_limiters or RateLimiterRegistry(sleep=sleep)
        self._rate_limiters.replace(self.scraper_id, self.config.rate_limit)
        self.fetcher = self._build_fetcher()
        self.monitor = ScraperMonitor(self.scraper_id)
        self.classifier = HiringClassifier()

    # ------------------------------------------------------------------
    # Adapter hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _perform_scrape(self, params: SearchParams) -> RawScrapeResult:
        """
        Fetch and normalize postings for the given params.

        Per-query failures should be recorded with _record_query_error() and
        skipped; raising here fails the whole attempt and triggers a retry.
        """
        pass

    @abstractmethod
    def _perform_validation(self) -> bool:
        """Cheap reachability probe against the source."""
        pass

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    def scrape(self, params: Union[SearchParams, Dict[str, Any]]) -> ScrapeOutcome:
        """
        Run one scrape.

        Args:
            params: SearchParams or an equivalent dict

        Returns:
            ScraperResult on success (possibly with non-fatal errors), or
            ScrapeFailure when the scraper is disabled or every attempt failed
        """
        if not isinstance(params, SearchParams):
            params = SearchParams.model_validate(params)

        if not self.config.enabled:
            message = f"Scraper {self.scraper_id} is disabled"
            logger.info(f"⏭️ {message}, skipping")
            error = self.monitor.record_error(ErrorType.VALIDATION, message)
            return ScrapeFailure(
                scraper_id=self.scraper_id, platform=self.platform, reason=FailureReason.DISABLED, error=error
            )

        emit_event(self.event_callback, EventType.START, self.scraper_id, keywords=params.keywords)
        started_at = self.monitor.start_run(params.keywords, params.search_mode.value)

        try:
            self._rate_limiters.get(self.scraper_id, self.config.rate_limit).acquire(self.scraper_id)
            raw = call_with_retry(
                self._perform_scrape,
                params,
                policy=self.config.retry,
                label=f"{self.name} scrape",
                sleep=self._sleep,
                on_failed_attempt=self._on_failed_attempt,
            )
        except Exception as e:
            error_type = classify_exception(e)
            self.monitor.end_run(False, started_at, error_msg=str(e))
            logger.error(f"{self.name} scrape failed after {self.config.retry.attempts} attempt(s): {e}")
            error = ScraperError(type=error_type, message=str(e), details={"attempts": self.config.retry.attempts})
            emit_event(self.event_callback, EventType.ERROR, self.scraper_id, error=str(e), type=error_type.value)
            emit_event(self.event_callback, EventType.COMPLETE, self.scraper_id, success=False)
            return ScrapeFailure(
                scraper_id=self.scraper_id, platform=self.platform, reason=FailureReason.EXHAUSTED, error=error
            )

        jobs, validation_errors = self.validate_jobs(raw.records)
        errors = list(raw.errors) + validation_errors
        dropped = len(raw.records) - len(jobs)
        took = self.monitor.end_run(True, started_at, job_count=len(jobs))

        result = ScraperResult(
            jobs=jobs,
            total_found=max(raw.total_found - dropped, len(jobs)),
            has_more=raw.has_more,
            metadata=ResultMetadata(
                search_params=params,
                scraper_id=self.scraper_id,
                platform=self.platform,
                took=round(took, 1),
                errors=errors,
            ),
        )

        emit_event(
            self.event_callback, EventType.SUCCESS, self.scraper_id, jobs=len(jobs), errors=len(errors), took=took
        )
        emit_event(self.event_callback, EventType.COMPLETE, self.scraper_id, success=True)
        return result

    def validate(self) -> bool:
        """Check the source is reachable. Never raises."""
        try:
            return bool(self._perform_validation())
        except Exception as e:
            logger.warning(f"{self.name} validation failed: {e}")
            self.monitor.record_error(classify_exception(e), f"Validation failed: {e}")
            return False

    def test(self) -> bool:
        """Run a minimal real scrape."""
        return isinstance(self.scrape(TEST_SEARCH), ScraperResult)

    def update_config(self, partial: Dict[str, Any]) -> ScraperConfig:
        """
        Merge a partial config update.

        The rate limiter for this scraper id is replaced wholesale and the
        HTTP fetcher is rebuilt with the new user agent and timeout.

        Raises:
            ValueError: Unknown keys or invalid values (config is left unchanged)
        """
        self.config = merge_scraper_config(self.config, partial)
        self._rate_limiters.replace(self.scraper_id, self.config.rate_limit)
        self.fetcher.close()
        self.fetcher = self._build_fetcher()
        logger.info(f"Updated {self.name} config: {sorted(partial)}")
        return self.config

    def get_status(self) -> ScraperStatus:
        return ScraperStatus(
            id=self.scraper_id,
            name=self.name,
            platform=self.platform,
            enabled=self.config.enabled,
            healthy=self.monitor.healthy,
            last_run=self.monitor.last_run,
            success_rate=round(self.monitor.success_rate, 1),
            average_response_time=round(self.monitor.average_response_time, 1),
            total_runs=self.monitor.total_runs,
            errors=self.monitor.recent_errors(),
        )

    def close(self) -> None:
        self.fetcher.close()

    def __enter__(self) -> "BaseScraper":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_jobs(self, records: List[Dict[str, Any]]) -> Tuple[List[Job], List[str]]:
        """
        Validate raw records into Jobs, dropping (and reporting) invalid ones.

        Returns:
            (valid jobs with unique ids, error messages for dropped records)
        """
        jobs: List[Job] = []
        errors: List[str] = []
        seen_ids = set()
        scraped_at = datetime.now(timezone.utc)

        for record in records:
            try:
                job = Job.model_validate(record)
            except ValidationError as e:
                fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
                message = f"Dropped invalid {self.platform.value} record {record.get('id', '?')}: {fields}"
                logger.warning(f"⚠️ {message}")
                self.monitor.record_error(ErrorType.VALIDATION, message)
                errors.append(f"[validation] {message}")
                continue

            if job.id in seen_ids:
                continue
            seen_ids.add(job.id)

            job.scraped_metadata.scraped_at = scraped_at
            job.scraped_metadata.scraper_id = self.scraper_id
            jobs.append(job)

        return jobs, errors

    # ------------------------------------------------------------------
    # Helpers for adapters
    # ------------------------------------------------------------------

    def _build_fetcher(self) -> HttpFetcher:
        return HttpFetcher(
            user_agent=self.config.user_agent,
            timeout=self.config.timeout,
            headers=self.config.headers,
            client=self._http_client,
        )

    def _on_failed_attempt(self, attempt: int, error: BaseException) -> None:
        logger.warning(f"⚠️ {self.name} attempt {attempt}/{self.config.retry.attempts} failed: {error}")
        self.monitor.record_error(classify_exception(error), str(error), {"attempt": attempt})

    def _fetch_json(self, url: str, params: Optional[Dict[str, Any]] = None, **kwargs: Any) -> Any:
        """GET JSON with this scraper's retry policy."""
        return call_with_retry(
            self.fetcher.get_json,
            url,
            params=params,
            policy=self.config.retry,
            label=f"{self.name} GET {url}",
            sleep=self._sleep,
            **kwargs,
        )

    def _fetch_text(self, url: str, params: Optional[Dict[str, Any]] = None, **kwargs: Any) -> str:
        """GET a page body with this scraper's retry policy."""
        return call_with_retry(
            self.fetcher.get_text,
            url,
            params=params,
            policy=self.config.retry,
            label=f"{self.name} GET {url}",
            sleep=self._sleep,
            **kwargs,
        )

    def _pause(self, seconds: Optional[float] = None) -> None:
        """Cooperative pacing between sequential requests."""
        delay = self.config.request_delay if seconds is None else seconds
        if delay > 0:
            self._sleep(delay)

    def _record_query_error(self, errors: List[str], context: str, error: BaseException) -> None:
        """Record a failed query without aborting its siblings."""
        error_type = classify_exception(error)
        message = f"{context}: {error}"
        logger.warning(f"⚠️ {self.name} {message}")
        self.monitor.record_error(error_type, message)
        errors.append(f"[{error_type.value}] {message}")

    def _emit_progress(self, message: str, **payload: Any) -> None:
        emit_event(self.event_callback, EventType.PROGRESS, self.scraper_id, message=message, **payload)

    def _make_record(
        self,
        *,
        title: str,
        company: str,
        url: str,
        description: str = "",
        posted_at: Optional[datetime] = None,
        location: Optional[str] = None,
        requirements: Optional[List[str]] = None,
        salary: Optional[str] = None,
        job_type: Any = None,
        contact: Optional[Dict[str, Any]] = None,
        raw_data: Optional[Dict[str, Any]] = None,
        job_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Build a raw record in the Job shape.

        The remote flag is always derived from location and description so
        every source reports it the same way.
        """
        record: Dict[str, Any] = {
            "id": job_id or generate_job_id(self.platform.value, title, company, url),
            "title": (title or "").strip(),
            "company": (company or "").strip(),
            "location": location,
            "description": description or "",
            "requirements": requirements or [],
            "salary": salary,
            "remote": is_remote_job(description, location),
            "url": url,
            "source": self.platform,
            "contact": contact if contact and any(contact.values()) else None,
            "posted_at": posted_at or datetime.now(timezone.utc),
            "scraped_metadata": {"scraper_id": self.scraper_id, "raw_data": raw_data or {}},
        }
        if job_type is not None:
            record["job_type"] = job_type
        return record

    def _post_process(
        self,
        candidates: List[Dict[str, Any]],
        params: SearchParams,
        errors: Optional[List[str]] = None,
        now: Optional[datetime] = None,
    ) -> RawScrapeResult:
        """
        Shared ranking pipeline applied to an adapter's candidates.

        1. Hiring classification (mixed-intent sources only)
        2. Relevance scoring against the mode threshold
        3. Recency cutoff from params.date_posted
        4. Remote and job type filters from params
        5. Dedup by title+company[+url], first occurrence wins
        6. Stable sort by relevance, descending
        7. offset/limit paging
        """
        engine = RelevanceEngine(params.search_mode)
        kept: List[Dict[str, Any]] = []

        for record in candidates:
            text = f"{record.get('title', '')} {record.get('description', '')}"
            metadata = record.setdefault("scraped_metadata", {})

            if self.classify_posts:
                classification = self.classifier.classify(text)
                metadata["classification"] = classification.label
                if not self.classifier.accepts(classification, params.search_mode):
                    continue

            score = engine.score(text, params.keywords)
            if not engine.is_relevant(score):
                continue
            metadata["relevance_score"] = score
            kept.append(record)

        kept = filter_by_date(kept, get_max_age(params.date_posted), lambda r: r.get("posted_at"), now=now)

        if params.remote is not None:
            kept = [r for r in kept if bool(r.get("remote")) == params.remote]
        if params.job_type:
            allowed = {t.value for t in params.job_type}
            kept = [r for r in kept if _job_type_value(r.get("job_type")) in allowed]

        unique = deduplicate(kept, include_url=self.dedup_include_url)
        ranked = sorted(unique, key=lambda r: -r["scraped_metadata"]["relevance_score"])

        start = params.offset
        end = params.offset + params.limit
        logger.info(
            f"📊 {self.name}: {len(candidates)} candidates -> {len(kept)} relevant -> {len(unique)} unique"
        )
        return RawScrapeResult(
            records=ranked[start:end],
            total_found=len(ranked),
            has_more=len(ranked) > end,
            errors=list(errors or []),
        )


def _job_type_value(value: Any) -> str:
    if value is None:
        return "full-time"
    return getattr(value, "value", value)
