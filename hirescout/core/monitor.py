"""
Run history and health monitoring for scrapers.

Tracks outcomes and latency of every scrape with bounded memory:
- Run counters and accumulated response time
- Last MAX_ERRORS errors (older ones are discarded)
- Concise start/finish logging per run
"""

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .errors import ErrorType
from .models import ScraperError

HEALTHY_SUCCESS_RATE = 70.0
MAX_ERRORS = 50
STATUS_ERRORS = 10


class ScraperMonitor:
    """
    Lightweight run monitor for one scraper.

    Features:
    - Success rate and average latency over all runs
    - Bounded error history
    - Consistent start/finish log lines
    """

    def __init__(self, scraper_id: str, max_errors: int = MAX_ERRORS):
        self.scraper_id = scraper_id
        self.max_errors = max_errors
        self.total_runs = 0
        self.successful_runs = 0
        self.total_response_time = 0.0
        self.last_run: Optional[datetime] = None
        self.errors: List[ScraperError] = []
        self._lock = threading.Lock()
        self.logger = logging.getLogger(f"scraper.{scraper_id}")

    def start_run(self, keywords: List[str], mode: str) -> float:
        """Log the start of a run and return its start time."""
        display = ", ".join(keywords)
        display = display[:40] + "..." if len(display) > 40 else display
        self.logger.info(f"🚀 STARTING SCRAPE | '{display}' | mode={mode}")
        return time.time()

    def end_run(self, success: bool, started_at: float, job_count: int = 0, error_msg: Optional[str] = None) -> float:
        """
        Record the outcome of a run.

        Returns:
            Elapsed time in milliseconds
        """
        took_ms = (time.time() - started_at) * 1000
        with self._lock:
            self.total_runs += 1
            self.total_response_time += took_ms
            self.last_run = datetime.now(timezone.utc)
            if success:
                self.successful_runs += 1

        status = "✅ SUCCESS" if success else "❌ FAILED"
        if error_msg:
            self.logger.info(f"🔍 {status} | ⏱️ {took_ms / 1000:.1f}s | 📊 {job_count} jobs | ❌ {error_msg}")
        else:
            self.logger.info(f"🔍 {status} | ⏱️ {took_ms / 1000:.1f}s | 📊 {job_count} jobs")
        return took_ms

    def record_error(self, error_type: ErrorType, message: str, details: Optional[Dict[str, Any]] = None) -> ScraperError:
        error = ScraperError(type=error_type, message=message, details=details)
        with self._lock:
            self.errors.append(error)
            if len(self.errors) > self.max_errors:
                self.errors = self.errors[-self.max_errors:]
        return error

    @property
    def success_rate(self) -> float:
        """Percentage of successful runs, 0 before the first run."""
        if self.total_runs == 0:
            return 0.0
        return self.successful_runs / self.total_runs * 100

    @property
    def average_response_time(self) -> float:
        if self.total_runs == 0:
            return 0.0
        return self.total_response_time / self.total_runs

    @property
    def healthy(self) -> bool:
        return self.total_runs == 0 or self.success_rate >= HEALTHY_SUCCESS_RATE

    def recent_errors(self, count: int = STATUS_ERRORS) -> List[ScraperError]:
        return list(self.errors[-count:])

    def get_stats(self) -> Dict[str, Any]:
        return {
            "scraper": self.scraper_id,
            "total_runs": self.total_runs,
            "successful_runs": self.successful_runs,
            "success_rate": round(self.success_rate, 1),
            "average_response_time_ms": round(self.average_response_time, 1),
            "errors_retained": len(self.errors),
        }
