"""
Per-platform scraper configuration.

Defaults reflect each source's informal tolerance: Twitter mirrors are
throttled per 15 minutes, Reddit allows roughly one request per second,
search and feed endpoints are more forgiving.
"""

import copy
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Optional

from ..core.models import JobSource
from ..core.resilience import BackoffStrategy, RateLimitConfig, RetryPolicy

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; HireScout/1.0; +https://github.com/hirescout)"
REDDIT_USER_AGENT = "HireScout/1.0 (by u/hirescout-bot)"


@dataclass
class ScraperConfig:
    """
    Scraper Configuration

    This dataclass holds everything a scraper needs besides its search params.
    Adapter-specific knobs live in ``options``.
    """

    enabled: bool = True
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = 30.0
    request_delay: float = 1.0
    headers: Dict[str, str] = field(default_factory=dict)
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate configuration after initialization"""
        if isinstance(self.rate_limit, dict):
            self.rate_limit = RateLimitConfig(**self.rate_limit)
        if isinstance(self.retry, dict):
            self.retry = RetryPolicy(**self.retry)
        if self.timeout <= 0:
            raise ValueError("Timeout must be positive")
        if self.request_delay < 0:
            raise ValueError("Request delay must be non-negative")
        if not self.user_agent:
            raise ValueError("User agent must not be empty")


PLATFORM_DEFAULTS: Dict[JobSource, ScraperConfig] = {
    JobSource.TWITTER: ScraperConfig(
        rate_limit=RateLimitConfig(requests=100, period=900.0),
        retry=RetryPolicy(attempts=3, delay=1.0, backoff=BackoffStrategy.EXPONENTIAL),
        timeout=30.0,
        request_delay=2.0,
        options={
            "instances": ["https://nitter.net", "https://nitter.it", "https://nitter.fdn.fr"],
            "max_queries": 10,
        },
    ),
    JobSource.REDDIT: ScraperConfig(
        rate_limit=RateLimitConfig(requests=60, period=60.0),
        retry=RetryPolicy(attempts=2, delay=0.5, backoff=BackoffStrategy.LINEAR),
        user_agent=REDDIT_USER_AGENT,
        timeout=15.0,
        request_delay=1.5,
        options={"max_subreddits": 10, "keyword_delay": 2.0},
    ),
    JobSource.GOOGLE: ScraperConfig(
        rate_limit=RateLimitConfig(requests=100, period=60.0),
        retry=RetryPolicy(attempts=2, delay=1.0, backoff=BackoffStrategy.FIXED),
        timeout=20.0,
        request_delay=2.0,
        options={"max_queries": 3, "country": "usa"},
    ),
    JobSource.REMOTEOK: ScraperConfig(
        rate_limit=RateLimitConfig(requests=60, period=60.0),
        retry=RetryPolicy(attempts=3, delay=1.0, backoff=BackoffStrategy.EXPONENTIAL),
        timeout=15.0,
        request_delay=1.0,
        options={"feed_url": "https://remoteok.com/api"},
    ),
}


def get_default_config(platform: JobSource) -> ScraperConfig:
    """Fresh copy of a platform's defaults, safe to mutate."""
    return copy.deepcopy(PLATFORM_DEFAULTS.get(platform, ScraperConfig()))


def merge_scraper_config(config: ScraperConfig, partial: Optional[Dict[str, Any]]) -> ScraperConfig:
    """
    Deep-merge a partial update into a config and re-validate it.

    Nested ``rate_limit``, ``retry``, ``headers`` and ``options`` dicts are
    merged key by key; everything else replaces the current value.

    Raises:
        ValueError: On unknown keys or values that fail validation
    """
    if not partial:
        return copy.deepcopy(config)

    known = {f.name for f in fields(ScraperConfig)}
    unknown = set(partial) - known
    if unknown:
        raise ValueError(f"Unknown scraper config keys: {sorted(unknown)}")

    merged = asdict(config)
    for key, value in partial.items():
        if key in ("rate_limit", "retry", "headers", "options") and isinstance(value, dict):
            merged[key] = {**merged[key], **value}
        elif key in ("rate_limit", "retry") and not isinstance(value, dict):
            merged[key] = asdict(value)
        else:
            merged[key] = value

    return ScraperConfig(**merged)
