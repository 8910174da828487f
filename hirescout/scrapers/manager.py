"""
Scraper manager for multi-platform searches.

This module provides:
- A registry of scraper instances keyed by platform
- ThreadPoolExecutor fan-out of one search across platforms
- Cross-source deduplication of the merged jobs
- Collected failures and per-platform status reporting
"""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Union

from ..config.environment import ManagerConfig, get_manager_config
from ..core.deduplication import deduplicate_jobs
from ..core.events import EventCallback, EventType, emit_event
from ..core.models import (
    FailureReason,
    Job,
    JobSource,
    ScrapeFailure,
    ScraperError,
    ScraperResult,
    ScraperStatus,
    SearchParams,
)
from ..core.errors import ErrorType
from ..core.resilience import RateLimiterRegistry
from .base_scraper import BaseScraper
from .google_jobs_scraper import GoogleJobsScraper
from .reddit_scraper import RedditScraper
from .remoteok_scraper import RemoteOKScraper
from .twitter_scraper import TwitterScraper

logger = logging.getLogger(__name__)

SCRAPER_CLASSES: Dict[JobSource, Callable[..., BaseScraper]] = {
    JobSource.REDDIT: RedditScraper,
    JobSource.TWITTER: TwitterScraper,
    JobSource.GOOGLE: GoogleJobsScraper,
    JobSource.REMOTEOK: RemoteOKScraper,
}


@dataclass
class AggregatedResult:
    """Merged outcome of a multi-platform search."""

    jobs: List[Job] = field(default_factory=list)
    results: Dict[JobSource, ScraperResult] = field(default_factory=dict)
    failures: Dict[JobSource, ScrapeFailure] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    search_time: float = 0.0

    @property
    def total_found(self) -> int:
        return sum(result.total_found for result in self.results.values())

    @property
    def success(self) -> bool:
        return bool(self.results)


class ScraperManager:
    """
    Runs one search across several registered scrapers.

    Scrapers share a RateLimiterRegistry owned by the manager, each keeping
    its own limiter under its scraper id.
    """

    def __init__(
        self,
        config: Optional[ManagerConfig] = None,
        event_callback: Optional[EventCallback] = None,
        rate_limiters: Optional[RateLimiterRegistry] = None,
    ) -> None:
        self.config = config or get_manager_config()
        self.event_callback = event_callback
        self.rate_limiters = rate_limiters or RateLimiterRegistry()
        self._scrapers: Dict[JobSource, BaseScraper] = {}
        self._lock = threading.Lock()

    @classmethod
    def with_default_scrapers(
        cls, platforms: Optional[Iterable[JobSource]] = None, event_callback: Optional[EventCallback] = None
    ) -> "ScraperManager":
        """Manager with environment-configured scrapers for the given platforms (all by default)."""
        manager = cls(event_callback=event_callback)
        for platform in platforms or SCRAPER_CLASSES:
            scraper_class = SCRAPER_CLASSES[JobSource(platform)]
            manager.register(scraper_class(rate_limiters=manager.rate_limiters, event_callback=event_callback))
        return manager

    def register(self, scraper: BaseScraper) -> None:
        with self._lock:
            if scraper.platform in self._scrapers:
                logger.info(f"Replacing registered {scraper.platform.value} scraper")
            self._scrapers[scraper.platform] = scraper

    def unregister(self, platform: Union[JobSource, str]) -> Optional[BaseScraper]:
        with self._lock:
            scraper = self._scrapers.pop(JobSource(platform), None)
        if scraper is not None:
            scraper.close()
        return scraper

    def get_scraper(self, platform: Union[JobSource, str]) -> Optional[BaseScraper]:
        return self._scrapers.get(JobSource(platform))

    def get_all_scrapers(self) -> List[BaseScraper]:
        return list(self._scrapers.values())

    def scrape_all(
        self,
        params: Union[SearchParams, dict],
        platforms: Optional[Iterable[Union[JobSource, str]]] = None,
    ) -> AggregatedResult:
        """
        Search every selected platform in parallel and merge the jobs.

        Args:
            params: Search parameters shared by all platforms
            platforms: Subset of registered platforms (all registered by default)

        Returns:
            AggregatedResult with deduplicated jobs sorted by relevance
        """
        if not isinstance(params, SearchParams):
            params = SearchParams.model_validate(params)

        selected = [JobSource(p) for p in platforms] if platforms else list(self._scrapers)
        scrapers = [self._scrapers[p] for p in selected if p in self._scrapers]
        aggregated = AggregatedResult()

        if not scrapers:
            aggregated.errors.append("No scrapers registered for the requested platforms")
            return aggregated

        start_time = time.time()
        emit_event(self.event_callback, EventType.START, "manager", platforms=[s.platform.value for s in scrapers])
        logger.info(f"🌍 Starting search on {len(scrapers)} platform(s) with {self.config.max_workers} workers")

        # Overrunning scrape threads are abandoned, not joined
        total_timeout = self.config.timeout_per_platform * len(scrapers)
        executor = ThreadPoolExecutor(max_workers=min(self.config.max_workers, len(scrapers)))
        pending = {executor.submit(scraper.scrape, params): scraper for scraper in scrapers}
        completed = 0
        try:
            for future in as_completed(list(pending), timeout=total_timeout):
                completed += 1
                scraper = pending.pop(future)
                self._collect(aggregated, scraper, self._outcome(future, scraper), completed, len(scrapers))
        except FuturesTimeoutError:
            for future, scraper in pending.items():
                completed += 1
                if future.done():
                    outcome = self._outcome(future, scraper)
                else:
                    future.cancel()
                    logger.error(f"⏱️ {scraper.name} did not finish within {total_timeout}s")
                    outcome = self._failure(scraper, f"Timed out after {total_timeout}s")
                self._collect(aggregated, scraper, outcome, completed, len(scrapers))
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        merged = [job for result in aggregated.results.values() for job in result.jobs]
        merged.sort(key=lambda job: -(job.scraped_metadata.relevance_score or 0.0))
        aggregated.jobs = deduplicate_jobs(merged)
        aggregated.search_time = time.time() - start_time

        logger.info(
            f"🏁 Search finished in {aggregated.search_time:.1f}s: {len(aggregated.jobs)} unique jobs, "
            f"{len(aggregated.failures)} platform failure(s)"
        )
        emit_event(
            self.event_callback, EventType.COMPLETE, "manager", jobs=len(aggregated.jobs), success=aggregated.success
        )
        return aggregated

    def _outcome(self, future: Future, scraper: BaseScraper) -> Union[ScraperResult, ScrapeFailure]:
        try:
            return future.result()
        except Exception as e:
            # scrape() returns failures instead of raising; this guards against bugs in adapters
            logger.error(f"Unexpected error from {scraper.name}: {e}")
            return self._failure(scraper, str(e))

    def _failure(self, scraper: BaseScraper, message: str) -> ScrapeFailure:
        return ScrapeFailure(
            scraper_id=scraper.scraper_id,
            platform=scraper.platform,
            reason=FailureReason.EXHAUSTED,
            error=ScraperError(type=ErrorType.NETWORK, message=message),
        )

    def _collect(
        self,
        aggregated: AggregatedResult,
        scraper: BaseScraper,
        outcome: Union[ScraperResult, ScrapeFailure],
        completed: int,
        total: int,
    ) -> None:
        if isinstance(outcome, ScraperResult):
            aggregated.results[scraper.platform] = outcome
            aggregated.errors.extend(f"{scraper.platform.value}: {msg}" for msg in outcome.metadata.errors)
            status = f"✅ {scraper.platform.value} ({len(outcome.jobs)} jobs)"
        else:
            aggregated.failures[scraper.platform] = outcome
            aggregated.errors.append(f"{scraper.platform.value}: {outcome.reason.value}: {outcome.error.message}")
            status = f"❌ {scraper.platform.value}"

        emit_event(
            self.event_callback,
            EventType.PROGRESS,
            "manager",
            message=f"{completed}/{total} platforms: {status}",
            progress=completed / total,
        )

    def get_statuses(self) -> Dict[JobSource, ScraperStatus]:
        return {platform: scraper.get_status() for platform, scraper in self._scrapers.items()}

    def validate_all(self) -> Dict[JobSource, bool]:
        return {platform: scraper.validate() for platform, scraper in self._scrapers.items()}

    def close(self) -> None:
        for scraper in self._scrapers.values():
            scraper.close()
