"""
Configuration package.

Platform defaults live in platforms.py; environment overrides are applied by
environment.py.
"""

from .environment import (
    EmailDiscoveryConfig,
    EnvironmentManager,
    ManagerConfig,
    get_config_summary,
    get_email_discovery_config,
    get_environment_manager,
    get_manager_config,
    get_scraper_config,
)
from .platforms import PLATFORM_DEFAULTS, ScraperConfig, get_default_config, merge_scraper_config

__all__ = [
    "EmailDiscoveryConfig",
    "EnvironmentManager",
    "ManagerConfig",
    "ScraperConfig",
    "PLATFORM_DEFAULTS",
    "get_config_summary",
    "get_default_config",
    "get_email_discovery_config",
    "get_environment_manager",
    "get_manager_config",
    "get_scraper_config",
    "merge_scraper_config",
]
