"""
Platform scrapers.

Every scraper follows the BaseScraper contract: scrape(), validate(), test(),
update_config() and get_status().
"""

from .base_scraper import BaseScraper, RawScrapeResult
from .google_jobs_scraper import GoogleJobsScraper
from .manager import SCRAPER_CLASSES, AggregatedResult, ScraperManager
from .reddit_scraper import RedditScraper
from .remoteok_scraper import RemoteOKScraper
from .twitter_scraper import TwitterScraper

__all__ = [
    "AggregatedResult",
    "BaseScraper",
    "GoogleJobsScraper",
    "RawScrapeResult",
    "RedditScraper",
    "RemoteOKScraper",
    "SCRAPER_CLASSES",
    "ScraperManager",
    "TwitterScraper",
]
