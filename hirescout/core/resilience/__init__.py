"""
Resilience module for rate limiting and retries.

Provides per-key sliding window rate limiting and retry policies with
backoff and jitter to keep scrapers within informal source tolerances.
"""

from .rate_limiter import RateLimitConfig, RateLimiterRegistry, SlidingWindowRateLimiter
from .retry import BackoffStrategy, RetryPolicy, call_with_retry

__all__ = [
    "RateLimitConfig",
    "SlidingWindowRateLimiter",
    "RateLimiterRegistry",
    "BackoffStrategy",
    "RetryPolicy",
    "call_with_retry",
]
