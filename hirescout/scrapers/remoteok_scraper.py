"""
RemoteOK job scraper.

RemoteOK publishes all current listings as one static JSON feed. The first
element is a legal/metadata notice, the rest are postings with structured
fields, so no heuristic title or company extraction is needed here.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from ..core.errors import ParsingError, ScrapingError
from ..core.extraction import (
    clean_description,
    determine_job_type,
    extract_contact_email,
    extract_requirements,
    format_salary_range,
)
from ..core.models import JobSource, SearchParams
from .base_scraper import BaseScraper, RawScrapeResult

logger = logging.getLogger(__name__)

DEFAULT_FEED_URL = "https://remoteok.com/api"


def _posted_at(item: Dict[str, Any]) -> Optional[datetime]:
    epoch = item.get("epoch")
    if epoch:
        try:
            return datetime.fromtimestamp(int(epoch), tz=timezone.utc)
        except (TypeError, ValueError, OverflowError):
            pass
    raw_date = item.get("date")
    if raw_date:
        try:
            parsed = datetime.fromisoformat(str(raw_date).replace("Z", "+00:00"))
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
        except ValueError:
            return None
    return None


class RemoteOKScraper(BaseScraper):
    """
    Scraper for the RemoteOK JSON feed.

    Options (config.options):
        feed_url: Feed endpoint
    """

    platform = JobSource.REMOTEOK
    name = "RemoteOK Scraper"

    @property
    def feed_url(self) -> str:
        return self.config.options.get("feed_url", DEFAULT_FEED_URL)

    def _perform_scrape(self, params: SearchParams) -> RawScrapeResult:
        errors: List[str] = []
        self._emit_progress("Fetching RemoteOK feed", url=self.feed_url)

        try:
            items = self.fetch_feed()
        except ScrapingError as e:
            self._record_query_error(errors, "feed fetch", e)
            return RawScrapeResult(errors=errors)

        candidates = []
        for item in items:
            try:
                record = self.parse_item(item)
            except (KeyError, TypeError, ValueError) as e:
                self._record_query_error(errors, f"parse item {item.get('id')}", e)
                continue
            if record is not None:
                candidates.append(record)

        logger.info(f"RemoteOK: {len(candidates)} postings in feed")
        return self._post_process(candidates, params, errors)

    def _perform_validation(self) -> bool:
        self.fetch_feed()
        return True

    def fetch_feed(self) -> List[Dict[str, Any]]:
        """
        Download the feed and drop its leading metadata element.

        Raises:
            ParsingError: The feed is not a JSON array
        """
        data = self._fetch_json(self.feed_url)
        if not isinstance(data, list):
            raise ParsingError("RemoteOK feed is not a JSON array", url=self.feed_url)
        return [item for item in data[1:] if isinstance(item, dict) and item.get("position")]

    def parse_item(self, item: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Map one feed posting onto a raw job record."""
        url = item.get("url") or (f"https://remoteok.com/remote-jobs/{item['slug']}" if item.get("slug") else None)
        if not url:
            return None

        tags = [str(tag) for tag in item.get("tags") or []]
        description_text = BeautifulSoup(item.get("description") or "", "html.parser").get_text(" ", strip=True)
        if tags:
            description_text = f"{description_text}\nTags: {', '.join(tags)}"

        location = (item.get("location") or "").strip()
        if not location:
            location = "Remote"
        elif "remote" not in location.lower():
            location = f"Remote ({location})"

        apply_url = item.get("apply_url")
        website = apply_url if apply_url and "remoteok" not in apply_url else None

        return self._make_record(
            job_id=f"remoteok-{item['id']}" if item.get("id") else None,
            title=item["position"],
            company=item.get("company") or "Not specified",
            url=url,
            description=clean_description(description_text, max_length=1000),
            posted_at=_posted_at(item),
            location=location,
            requirements=extract_requirements(description_text, tags=tags),
            salary=format_salary_range(item.get("salary_min") or None, item.get("salary_max") or None, interval="yearly"),
            job_type=determine_job_type(f"{item['position']} {description_text}"),
            contact={"email": extract_contact_email(description_text), "website": website},
            raw_data={
                "slug": item.get("slug"),
                "tags": tags,
                "company_logo": item.get("company_logo") or item.get("logo"),
                "apply_url": apply_url,
                "salary_min": item.get("salary_min"),
                "salary_max": item.get("salary_max"),
            },
        )
