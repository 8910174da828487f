"""
Environment Configuration Management

This module loads and validates HIRESCOUT_* environment variables (a local
.env file is honoured through python-dotenv). Every value has a safe default;
invalid or negative values are logged and ignored.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from ..core.models import JobSource
from .platforms import DEFAULT_USER_AGENT, ScraperConfig, get_default_config, merge_scraper_config

load_dotenv()

# Set up logging for configuration loading
logger = logging.getLogger(__name__)

ENV_PREFIX = "HIRESCOUT_"


@dataclass
class EmailDiscoveryConfig:
    """
    Email Discovery Configuration

    Delays and timeouts are in seconds.
    """

    requests_per_minute: int = 30
    request_delay: float = 2.0
    request_timeout: float = 10.0
    enable_email_validation: bool = True
    enable_disposable_check: bool = True
    enable_website_parsing: bool = True
    max_contact_pages: int = 3
    max_team_pages: int = 2
    user_agent: str = "Mozilla/5.0 (compatible; HireScout/1.0; Email Discovery Bot)"

    def __post_init__(self) -> None:
        """Validate configuration after initialization"""
        if self.requests_per_minute < 1:
            raise ValueError("Requests per minute must be at least 1")
        if self.request_delay < 0:
            raise ValueError("Request delay must be non-negative")
        if self.request_timeout <= 0:
            raise ValueError("Request timeout must be positive")
        if self.max_contact_pages < 0 or self.max_team_pages < 0:
            raise ValueError("Page limits must be non-negative")


@dataclass
class ManagerConfig:
    """
    Scraper Manager Configuration

    max_workers bounds how many platforms are scraped concurrently.
    """

    max_workers: int = 4
    timeout_per_platform: int = 300

    def __post_init__(self) -> None:
        """Validate configuration after initialization"""
        if self.max_workers < 1:
            raise ValueError("Max workers must be at least 1")
        if self.max_workers > 16:
            raise ValueError("Max workers cannot exceed 16 (to prevent source overload)")
        if self.timeout_per_platform < 1:
            raise ValueError("Timeout per platform must be at least 1 second")


class EnvironmentManager:
    """
    Environment Variable Manager

    Loads every configuration section once and serves validated objects.
    """

    def __init__(self) -> None:
        """Initialize the environment manager and load all configurations"""
        self._email_discovery_config: Optional[EmailDiscoveryConfig] = None
        self._manager_config: Optional[ManagerConfig] = None
        self._scraper_configs: Dict[JobSource, ScraperConfig] = {}
        self._load_configurations()

    def _load_configurations(self) -> None:
        """Load and validate all environment configurations"""
        logger.info("Loading environment configurations...")

        try:
            self._email_discovery_config = self._load_email_discovery_config()
            self._manager_config = self._load_manager_config()
            logger.info("Environment configurations loaded successfully")

        except ValueError as e:
            logger.error(f"Failed to load environment configurations: {e}")
            # Use safe defaults if configuration fails
            self._email_discovery_config = EmailDiscoveryConfig()
            self._manager_config = ManagerConfig()

    def _load_email_discovery_config(self) -> EmailDiscoveryConfig:
        """
        Load email discovery configuration from environment variables

        Returns:
            EmailDiscoveryConfig: Validated configuration object
        """
        defaults = EmailDiscoveryConfig()
        config = EmailDiscoveryConfig(
            requests_per_minute=self._get_env_int("EMAIL_REQUESTS_PER_MINUTE", defaults.requests_per_minute),
            request_delay=self._get_env_float("EMAIL_REQUEST_DELAY", defaults.request_delay),
            request_timeout=self._get_env_float("EMAIL_REQUEST_TIMEOUT", defaults.request_timeout),
            enable_email_validation=self._get_env_bool("EMAIL_VALIDATION", defaults.enable_email_validation),
            enable_disposable_check=self._get_env_bool("EMAIL_DISPOSABLE_CHECK", defaults.enable_disposable_check),
            enable_website_parsing=self._get_env_bool("EMAIL_WEBSITE_PARSING", defaults.enable_website_parsing),
            user_agent=os.getenv(f"{ENV_PREFIX}EMAIL_USER_AGENT", defaults.user_agent),
        )

        logger.debug(
            f"Email discovery config - {config.requests_per_minute} req/min, "
            f"delay: {config.request_delay}s, timeout: {config.request_timeout}s"
        )
        return config

    def _load_manager_config(self) -> ManagerConfig:
        """
        Load scraper manager configuration from environment variables

        Returns:
            ManagerConfig: Validated configuration object
        """
        max_workers = self._get_env_int("MAX_WORKERS", default=4)
        timeout = self._get_env_int("TIMEOUT_PER_PLATFORM", default=300)

        logger.debug(f"Manager config - max_workers: {max_workers}, timeout_per_platform: {timeout}s")

        return ManagerConfig(max_workers=max_workers, timeout_per_platform=timeout)

    def _load_scraper_config(self, platform: JobSource) -> ScraperConfig:
        """
        Apply HIRESCOUT_<PLATFORM>_* overrides on top of the platform defaults

        Returns:
            ScraperConfig: Validated configuration object
        """
        defaults = get_default_config(platform)
        prefix = platform.value.upper()

        overrides: Dict[str, Any] = {
            "enabled": self._get_env_bool(f"{prefix}_ENABLED", defaults.enabled),
            "timeout": self._get_env_float(f"{prefix}_TIMEOUT", defaults.timeout),
            "request_delay": self._get_env_float(f"{prefix}_REQUEST_DELAY", defaults.request_delay),
            "rate_limit": {
                "requests": self._get_env_int(f"{prefix}_RATE_LIMIT_REQUESTS", defaults.rate_limit.requests),
                "period": self._get_env_float(f"{prefix}_RATE_LIMIT_PERIOD", defaults.rate_limit.period),
            },
            "retry": {"attempts": self._get_env_int(f"{prefix}_RETRY_ATTEMPTS", defaults.retry.attempts)},
        }

        user_agent = os.getenv(f"{ENV_PREFIX}{prefix}_USER_AGENT")
        if user_agent:
            overrides["user_agent"] = user_agent

        try:
            return merge_scraper_config(defaults, overrides)
        except ValueError as e:
            logger.warning(f"Invalid {platform.value} scraper config from environment ({e}), using defaults")
            return get_default_config(platform)

    def _get_env_float(self, key: str, default: float) -> float:
        """
        Get float environment variable with validation

        Args:
            key: Variable name without the HIRESCOUT_ prefix
            default: Default value if not set or invalid

        Returns:
            float: Validated float value
        """
        value = os.getenv(f"{ENV_PREFIX}{key}")

        if value is None:
            logger.debug(f"Environment variable {ENV_PREFIX}{key} not set, using default: {default}")
            return default

        try:
            float_value = float(value)
            if float_value < 0:
                logger.warning(f"Environment variable {ENV_PREFIX}{key} is negative, using default: {default}")
                return default
            return float_value

        except ValueError:
            logger.warning(f"Environment variable {ENV_PREFIX}{key} is not a valid float, using default: {default}")
            return default

    def _get_env_int(self, key: str, default: int) -> int:
        """
        Get integer environment variable with validation

        Args:
            key: Variable name without the HIRESCOUT_ prefix
            default: Default value if not set or invalid

        Returns:
            int: Validated integer value
        """
        value = os.getenv(f"{ENV_PREFIX}{key}")

        if value is None:
            logger.debug(f"Environment variable {ENV_PREFIX}{key} not set, using default: {default}")
            return default

        try:
            int_value = int(value)
            if int_value < 0:
                logger.warning(f"Environment variable {ENV_PREFIX}{key} is negative, using default: {default}")
                return default
            return int_value

        except ValueError:
            logger.warning(f"Environment variable {ENV_PREFIX}{key} is not a valid integer, using default: {default}")
            return default

    def _get_env_bool(self, key: str, default: bool) -> bool:
        value = os.getenv(f"{ENV_PREFIX}{key}")
        if value is None:
            return default

        normalized = value.strip().lower()
        if normalized in ("1", "true", "yes", "on"):
            return True
        if normalized in ("0", "false", "no", "off"):
            return False

        logger.warning(f"Environment variable {ENV_PREFIX}{key} is not a valid boolean, using default: {default}")
        return default

    @property
    def email_discovery(self) -> EmailDiscoveryConfig:
        if self._email_discovery_config is None:
            self._email_discovery_config = EmailDiscoveryConfig()
        return self._email_discovery_config

    @property
    def manager(self) -> ManagerConfig:
        if self._manager_config is None:
            self._manager_config = ManagerConfig()
        return self._manager_config

    def scraper(self, platform: JobSource) -> ScraperConfig:
        """
        Get a platform's scraper configuration

        Returns:
            ScraperConfig: Loaded on first access and cached afterwards
        """
        if platform not in self._scraper_configs:
            self._scraper_configs[platform] = self._load_scraper_config(platform)
        return self._scraper_configs[platform]


# Global environment manager instance
_environment_manager: Optional[EnvironmentManager] = None


def get_environment_manager() -> EnvironmentManager:
    """
    Get the global environment manager instance

    Returns:
        EnvironmentManager: Shared environment manager
    """
    global _environment_manager
    if _environment_manager is None:
        _environment_manager = EnvironmentManager()
    return _environment_manager


def reset_environment_manager() -> None:
    """Drop the cached manager so the next access re-reads the environment."""
    global _environment_manager
    _environment_manager = None


def get_scraper_config(platform: JobSource) -> ScraperConfig:
    """Convenience function returning a copy of a platform's configuration"""
    return merge_scraper_config(get_environment_manager().scraper(platform), None)


def get_email_discovery_config() -> EmailDiscoveryConfig:
    """Convenience function to get email discovery configuration"""
    return get_environment_manager().email_discovery


def get_manager_config() -> ManagerConfig:
    """Convenience function to get scraper manager configuration"""
    return get_environment_manager().manager


def get_config_summary() -> Dict[str, Any]:
    """
    Get a summary of all configuration values

    Returns:
        Dict with configuration summary
    """
    manager = get_environment_manager()
    email = manager.email_discovery

    return {
        "email_discovery": {
            "requests_per_minute": email.requests_per_minute,
            "request_delay": email.request_delay,
            "request_timeout": email.request_timeout,
            "validation": email.enable_email_validation,
            "disposable_check": email.enable_disposable_check,
            "website_parsing": email.enable_website_parsing,
        },
        "manager": {
            "max_workers": manager.manager.max_workers,
            "timeout_per_platform": manager.manager.timeout_per_platform,
        },
        "scrapers": {
            platform.value: {
                "enabled": manager.scraper(platform).enabled,
                "rate_limit": f"{manager.scraper(platform).rate_limit.requests}/"
                f"{manager.scraper(platform).rate_limit.period:.0f}s",
                "retry_attempts": manager.scraper(platform).retry.attempts,
            }
            for platform in (JobSource.REDDIT, JobSource.TWITTER, JobSource.GOOGLE, JobSource.REMOTEOK)
        },
        "default_user_agent": DEFAULT_USER_AGENT,
    }
