"""
Twitter/X job scraper.

Twitter's own search requires an authenticated, JavaScript-rendered session,
so tweets are read from server-rendered Nitter mirrors instead. Mirrors come
and go; each query falls back across the configured instances and a page
without timeline items (rate-limit or bot wall) is reported, not raised.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from ..core.errors import ErrorType, ScrapingError
from ..core.extraction import (
    clean_description,
    clean_text,
    determine_job_type,
    extract_company,
    extract_contact_email,
    extract_location,
    extract_requirements,
    extract_salary,
    extract_title,
    extract_website,
)
from ..core.models import JobSource, SearchParams
from ..utils.time_filters import get_since_date
from .base_scraper import BaseScraper, RawScrapeResult

logger = logging.getLogger(__name__)

DEFAULT_INSTANCES = ["https://nitter.net", "https://nitter.it", "https://nitter.fdn.fr"]

HIRING_TERMS = "(hiring OR job OR opportunity)"


def build_search_queries(params: SearchParams, now: Optional[datetime] = None, max_queries: int = 10) -> List[str]:
    """
    Twitter search operators for each keyword.

    Every keyword gets a hiring query (with location when given), a remote
    variant and a plain location variant, capped at max_queries.
    """
    since = get_since_date(params.date_posted, now).strftime("%Y-%m-%d")
    queries: List[str] = []

    for keyword in params.keywords:
        location = f' "{params.location}"' if params.location else ""
        queries.append(f'"{keyword}" {HIRING_TERMS}{location} since:{since} -filter:retweets')
        if params.remote is not False:
            queries.append(f'"{keyword}" remote {HIRING_TERMS} since:{since} -filter:retweets')
        if params.location:
            queries.append(f'"{keyword}" hiring "{params.location}" since:{since} -filter:retweets')

    unique: List[str] = []
    for query in queries:
        if query not in unique:
            unique.append(query)
    return unique[:max_queries]


def parse_tweet_date(title: Optional[str]) -> Optional[datetime]:
    """Parse Nitter's "Oct 10, 2026 · 3:04 PM UTC" date tooltip."""
    if not title:
        return None
    normalized = re.sub(r"\s*·\s*", " ", title).replace(" UTC", "").strip()
    try:
        return datetime.strptime(normalized, "%b %d, %Y %I:%M %p").replace(tzinfo=timezone.utc)
    except ValueError:
        return None


class TwitterScraper(BaseScraper):
    """
    Scraper for hiring tweets via Nitter mirrors.

    Options (config.options):
        instances: Mirror base URLs, tried in order
        max_queries: Cap on generated search queries
    """

    platform = JobSource.TWITTER
    name = "Twitter Scraper"
    classify_posts = True
    dedup_include_url = True

    @property
    def instances(self) -> List[str]:
        return list(self.config.options.get("instances") or DEFAULT_INSTANCES)

    def _perform_scrape(self, params: SearchParams) -> RawScrapeResult:
        errors: List[str] = []
        candidates: List[Dict[str, Any]] = []
        queries = build_search_queries(params, max_queries=int(self.config.options.get("max_queries", 10)))

        for index, query in enumerate(queries):
            if index > 0:
                self._pause()
            self._emit_progress(f"Searching tweets ({index + 1}/{len(queries)})", query=query)
            candidates.extend(self._search(query, errors))

        return self._post_process(candidates, params, errors)

    def _perform_validation(self) -> bool:
        for instance in self.instances:
            try:
                self.fetcher.get(instance)
                return True
            except ScrapingError as e:
                logger.debug(f"Nitter instance {instance} unavailable: {e}")
        return False

    def _search(self, query: str, errors: List[str]) -> List[Dict[str, Any]]:
        """Run one query, falling back across mirrors until one returns tweets."""
        failures: List[str] = []
        last_error: Optional[ScrapingError] = None

        for instance in self.instances:
            search_url = f"{instance}/search"
            try:
                html = self._fetch_text(search_url, params={"f": "tweets", "q": query})
            except ScrapingError as e:
                failures.append(f"{instance}: {e}")
                last_error = e
                continue

            records = self.parse_search_page(html, instance)
            if records:
                return records
            failures.append(f"{instance}: no tweets (possibly rate limited or blocked)")

        message = f"No results for '{query}' on any mirror ({'; '.join(failures)})"
        if last_error is not None:
            self._record_query_error(errors, message, last_error)
            return []

        logger.warning(f"⚠️ Twitter {message}")
        self.monitor.record_error(ErrorType.BLOCKED, message)
        errors.append(f"[blocked] {message}")
        return []

    def parse_search_page(self, html: str, instance: str) -> List[Dict[str, Any]]:
        """Turn a Nitter search results page into raw job records."""
        soup = BeautifulSoup(html, "html.parser")
        records = []

        for item in soup.select(".timeline-item"):
            content = item.select_one(".tweet-content")
            if content is None:
                continue
            text = content.get_text(" ", strip=True)
            if not text:
                continue

            record = self._parse_tweet(item, text, instance)
            if record is not None:
                records.append(record)

        return records

    def _parse_tweet(self, item: Any, text: str, instance: str) -> Optional[Dict[str, Any]]:
        username_el = item.select_one(".username")
        fullname_el = item.select_one(".fullname")
        link_el = item.select_one(".tweet-link") or item.select_one(".tweet-date a")
        date_el = item.select_one(".tweet-date a")

        if link_el is None or not link_el.get("href"):
            return None

        path = link_el["href"].split("#")[0]
        username = clean_text(username_el.get_text()) if username_el else ""
        fullname = clean_text(fullname_el.get_text()) if fullname_el else ""
        links = [a["href"] for a in item.select(".tweet-content a[href]") if a["href"].startswith("http")]

        first_sentence = re.split(r"(?<=[.!?])\s", text, maxsplit=1)[0][:100]

        return self._make_record(
            title=extract_title(text, fallback=first_sentence) or first_sentence,
            company=extract_company(text, fallback=fullname or username or "Unknown"),
            url=urljoin("https://twitter.com", path),
            description=clean_description(text),
            posted_at=parse_tweet_date(date_el.get("title") if date_el else None),
            location=extract_location(text),
            requirements=extract_requirements(text),
            salary=extract_salary(text),
            job_type=determine_job_type(text),
            contact={
                "email": extract_contact_email(text),
                "name": username or None,
                "website": extract_website(" ".join(links)) or extract_website(text),
            },
            raw_data={
                "username": username,
                "fullname": fullname,
                "mirror_url": urljoin(instance, path),
                "links": links,
            },
        )
