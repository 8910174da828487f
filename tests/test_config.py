"""
Tests for platform defaults and environment configuration loading.
"""

import pytest

from hirescout.config.environment import (
    EmailDiscoveryConfig,
    EnvironmentManager,
    ManagerConfig,
    get_config_summary,
    get_email_discovery_config,
    get_scraper_config,
)
from hirescout.config.platforms import PLATFORM_DEFAULTS, ScraperConfig, get_default_config, merge_scraper_config
from hirescout.core.models import JobSource
from hirescout.core.resilience import BackoffStrategy, RateLimitConfig


class TestPlatformDefaults:
    def test_each_platform_has_defaults(self) -> None:
        for platform in (JobSource.REDDIT, JobSource.TWITTER, JobSource.GOOGLE, JobSource.REMOTEOK):
            assert platform in PLATFORM_DEFAULTS

    def test_twitter_rate_limit_is_per_fifteen_minutes(self) -> None:
        config = get_default_config(JobSource.TWITTER)

        assert (config.rate_limit.requests, config.rate_limit.period) == (100, 900.0)
        assert config.retry.backoff == BackoffStrategy.EXPONENTIAL

    def test_default_copies_are_independent(self) -> None:
        config = get_default_config(JobSource.REDDIT)
        config.options["max_subreddits"] = 1

        assert get_default_config(JobSource.REDDIT).options["max_subreddits"] == 10

    def test_unknown_platform_gets_generic_config(self) -> None:
        assert get_default_config(JobSource.GITHUB) == ScraperConfig()


class TestScraperConfig:
    def test_nested_dicts_are_converted(self) -> None:
        config = ScraperConfig(rate_limit={"requests": 5, "period": 10.0}, retry={"attempts": 2, "backoff": "linear"})

        assert config.rate_limit == RateLimitConfig(requests=5, period=10.0)
        assert config.retry.backoff == BackoffStrategy.LINEAR

    @pytest.mark.parametrize(
        "kwargs", [{"timeout": 0}, {"request_delay": -1}, {"user_agent": ""}, {"rate_limit": {"requests": 0}}]
    )
    def test_invalid_values(self, kwargs) -> None:
        with pytest.raises(ValueError):
            ScraperConfig(**kwargs)

    def test_merge_keeps_unspecified_nested_values(self) -> None:
        base = get_default_config(JobSource.TWITTER)

        merged = merge_scraper_config(base, {"options": {"max_queries": 2}, "rate_limit": {"requests": 50}})

        assert merged.options["max_queries"] == 2
        assert merged.options["instances"] == base.options["instances"]
        assert merged.rate_limit.requests == 50
        assert merged.rate_limit.period == 900.0
        assert base.rate_limit.requests == 100

    def test_merge_rejects_unknown_keys(self) -> None:
        with pytest.raises(ValueError, match="Unknown scraper config keys"):
            merge_scraper_config(ScraperConfig(), {"proxy": "socks5://localhost"})


class TestEnvironmentManager:
    def test_defaults_without_environment(self) -> None:
        manager = EnvironmentManager()

        assert manager.email_discovery == EmailDiscoveryConfig()
        assert manager.manager == ManagerConfig()

    def test_email_discovery_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("HIRESCOUT_EMAIL_REQUESTS_PER_MINUTE", "10")
        monkeypatch.setenv("HIRESCOUT_EMAIL_VALIDATION", "false")

        config = get_email_discovery_config()

        assert config.requests_per_minute == 10
        assert config.enable_email_validation is False

    def test_invalid_values_fall_back_to_defaults(self, monkeypatch) -> None:
        monkeypatch.setenv("HIRESCOUT_EMAIL_REQUEST_DELAY", "soon")
        monkeypatch.setenv("HIRESCOUT_MAX_WORKERS", "-3")
        monkeypatch.setenv("HIRESCOUT_EMAIL_DISPOSABLE_CHECK", "maybe")

        manager = EnvironmentManager()

        assert manager.email_discovery.request_delay == 2.0
        assert manager.email_discovery.enable_disposable_check is True
        assert manager.manager.max_workers == 4

    def test_out_of_range_manager_config_uses_safe_defaults(self, monkeypatch) -> None:
        monkeypatch.setenv("HIRESCOUT_MAX_WORKERS", "64")

        assert EnvironmentManager().manager.max_workers == 4

    def test_scraper_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("HIRESCOUT_REDDIT_ENABLED", "0")
        monkeypatch.setenv("HIRESCOUT_REDDIT_RATE_LIMIT_REQUESTS", "30")
        monkeypatch.setenv("HIRESCOUT_REDDIT_USER_AGENT", "custom-agent/2.0")

        config = get_scraper_config(JobSource.REDDIT)

        assert config.enabled is False
        assert config.rate_limit.requests == 30
        assert config.rate_limit.period == 60.0
        assert config.user_agent == "custom-agent/2.0"

    def test_get_scraper_config_returns_copies(self) -> None:
        first = get_scraper_config(JobSource.GOOGLE)
        first.options["country"] = "uk"

        assert get_scraper_config(JobSource.GOOGLE).options["country"] == "usa"

    def test_config_summary(self) -> None:
        summary = get_config_summary()

        assert summary["manager"]["max_workers"] == 4
        assert summary["scrapers"]["twitter"]["rate_limit"] == "100/900s"
        assert set(summary["scrapers"]) == {"reddit", "twitter", "google", "remoteok"}


def test_manager_config_validation() -> None:
    with pytest.raises(ValueError):
        ManagerConfig(max_workers=0)
    with pytest.raises(ValueError):
        ManagerConfig(timeout_per_platform=0)
