"""
Sliding Window Rate Limiter

This module implements per-key request quotas with:
- Sliding time window (N requests per period, no fixed-bucket boundary bursts)
- Minimum spacing between consecutive requests for the same key
- Read-only inspection of remaining quota and window reset time
- A registry holding one limiter per scraper id
"""

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Deque, Dict, Optional

# Set up logging
logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """
    Rate Limiter Configuration

    requests calls are admitted per sliding window of period seconds, and
    consecutive calls for one key are at least min_interval seconds apart.
    """

    requests: int = 60
    period: float = 60.0
    min_interval: float = 0.0

    def __post_init__(self) -> None:
        """Validate configuration after initialization"""
        if self.requests < 1:
            raise ValueError("Rate limit must allow at least 1 request")
        if self.period <= 0:
            raise ValueError("Rate limit period must be positive")
        if self.min_interval < 0:
            raise ValueError("Minimum interval must be non-negative")


class SlidingWindowRateLimiter:
    """
    Per-key sliding window rate limiter.

    Each key keeps the timestamps of its admitted calls inside the current
    window. acquire() blocks until the oldest timestamp falls out of the window
    (and the spacing interval has elapsed), then records the new call.
    """

    def __init__(
        self,
        config: Optional[RateLimitConfig] = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the rate limiter

        Args:
            config: Quota and spacing settings
            clock: Returns the current time in seconds (injectable for tests)
            sleep: Blocks for the given seconds (injectable for tests)
        """
        self.config = config or RateLimitConfig()
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._windows: Dict[str, Deque[float]] = {}
        self._last_call: Dict[str, float] = {}

    def _prune(self, key: str, now: float) -> Deque[float]:
        window = self._windows.setdefault(key, deque())
        cutoff = now - self.config.period
        while window and window[0] <= cutoff:
            window.popleft()
        return window

    def _wait_time(self, key: str, now: float) -> float:
        window = self._prune(key, now)
        wait = 0.0
        if len(window) >= self.config.requests:
            wait = window[0] + self.config.period - now
        last = self._last_call.get(key)
        if last is not None and self.config.min_interval > 0:
            wait = max(wait, last + self.config.min_interval - now)
        return max(wait, 0.0)

    def acquire(self, key: str) -> float:
        """
        Block until the window for key admits one more call, then record it.

        Args:
            key: Independent quota bucket (usually a scraper id)

        Returns:
            Total seconds spent waiting
        """
        waited = 0.0
        while True:
            with self._lock:
                now = self._clock()
                wait = self._wait_time(key, now)
                if wait <= 0:
                    self._windows[key].append(now)
                    self._last_call[key] = now
                    if waited:
                        logger.debug(f"Rate limiter admitted '{key}' after {waited:.2f}s")
                    return waited

            logger.info(f"⏳ Rate limit reached for '{key}', waiting {wait:.2f}s")
            self._sleep(wait)
            waited += wait

    def get_remaining(self, key: str) -> int:
        """Calls still admitted for key in the current window."""
        with self._lock:
            window = self._prune(key, self._clock())
            return max(self.config.requests - len(window), 0)

    def get_reset_time(self, key: str) -> Optional[datetime]:
        """When the oldest call in the window expires, or None if the window is empty."""
        with self._lock:
            window = self._prune(key, self._clock())
            if not window:
                return None
            return datetime.fromtimestamp(window[0] + self.config.period)

    def reset(self, key: str) -> None:
        """Forget all recorded calls for key."""
        with self._lock:
            self._windows.pop(key, None)
            self._last_call.pop(key, None)
            logger.info(f"Reset rate limiter for '{key}'")

    def get_status(self, key: str) -> Dict[str, Any]:
        """Snapshot of the quota for key, for diagnostics."""
        reset_time = self.get_reset_time(key)
        return {
            "key": key,
            "limit": self.config.requests,
            "period": self.config.period,
            "remaining": self.get_remaining(key),
            "reset_time": reset_time.isoformat() if reset_time else None,
        }


class RateLimiterRegistry:
    """
    One limiter per scraper id.

    Owned by whoever constructs the scrapers; replacing an entry swaps the
    limiter wholesale so a config update never inherits stale window state.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._limiters: Dict[str, SlidingWindowRateLimiter] = {}

    def get(self, key: str, config: Optional[RateLimitConfig] = None) -> SlidingWindowRateLimiter:
        """Return the limiter for key, creating it from config on first use."""
        with self._lock:
            limiter = self._limiters.get(key)
            if limiter is None:
                limiter = SlidingWindowRateLimiter(config, clock=self._clock, sleep=self._sleep)
                self._limiters[key] = limiter
            return limiter

    def replace(self, key: str, config: RateLimitConfig) -> SlidingWindowRateLimiter:
        """Install a fresh limiter for key."""
        limiter = SlidingWindowRateLimiter(config, clock=self._clock, sleep=self._sleep)
        with self._lock:
            self._limiters[key] = limiter
        logger.info(f"Replaced rate limiter for '{key}': {config.requests} req / {config.period:.0f}s")
        return limiter

    def remove(self, key: str) -> None:
        with self._lock:
            self._limiters.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._limiters
