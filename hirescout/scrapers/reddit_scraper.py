"""
Reddit job scraper.

Searches Reddit's public JSON endpoints with several query phrasings and
result orderings per keyword, plus a restricted search inside job-focused
subreddits. Reddit is a mixed-intent source: "[Hiring]" posts share
subreddits with "[For Hire]" self-promotion, so every candidate goes through
the hiring classifier before relevance ranking.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..core.errors import ScrapingError
from ..core.extraction import (
    clean_description,
    determine_job_type,
    extract_company,
    extract_contact_email,
    extract_location,
    extract_requirements,
    extract_salary,
    extract_title,
    extract_website,
    strip_post_tags,
)
from ..core.models import JobSource, SearchMode, SearchParams
from ..utils.time_filters import get_reddit_time_filter
from .base_scraper import BaseScraper, RawScrapeResult

logger = logging.getLogger(__name__)

REDDIT_BASE_URL = "https://www.reddit.com"

# (sort, limit, time filter override)
SEARCH_STRATEGIES: List[Tuple[str, int, Optional[str]]] = [
    ("new", 50, None),
    ("relevance", 40, None),
    ("hot", 30, None),
    ("top", 20, "week"),
]

TARGET_SUBREDDITS = [
    "forhire", "remotework", "RemoteJobs", "jobs", "hiring", "WorkOnline", "freelance",
    "JobsNoExperience", "webdev", "Frontend", "reactjs", "javascript", "Python", "golang",
    "datascience", "MLJobs", "DevOps", "androiddev", "iOSProgramming", "DesignJobs",
]

MODE_PHRASINGS: Dict[SearchMode, List[str]] = {
    SearchMode.STRICT: ['"{kw}" hiring', '"{kw}" job', '"{kw}" "looking for"'],
    SearchMode.MODERATE: [
        "{kw} hiring", "{kw} job", "{kw} position", "{kw} opportunity", "{kw} remote", "{kw} freelance",
    ],
    SearchMode.LOOSE: [
        "{kw} hiring", "{kw} job", "{kw} work", "{kw} career", "{kw} position", "{kw} opportunity",
        "{kw} looking", "{kw} need", "{kw} developer", "{kw} engineer",
    ],
}

JOB_INDICATORS = re.compile(
    r"\b(hiring|hire|jobs?|positions?|roles?|openings?|opportunit(y|ies)|looking\s+for|seeking|"
    r"freelance|contract|gigs?|salary|apply|recruit\w*|vacanc(y|ies))\b",
    re.IGNORECASE,
)


def build_search_queries(keyword: str, params: SearchParams) -> List[str]:
    """
    Query phrasings for one keyword under the requested search mode.

    Location and remote add one extra phrasing each rather than narrowing
    every query.
    """
    queries = [template.format(kw=keyword) for template in MODE_PHRASINGS[params.search_mode]]
    if params.location:
        queries.append(f'"{keyword}" hiring {params.location}')
    if params.remote:
        queries.append(f'"{keyword}" remote hiring')

    unique: List[str] = []
    for query in queries:
        if query not in unique:
            unique.append(query)
    return unique


def parse_created_utc(value: Any) -> Optional[datetime]:
    """Post creation time, or None when Reddit sent no timestamp."""
    if value is None or value == "":
        return None
    return datetime.fromtimestamp(float(value), tz=timezone.utc)


class RedditScraper(BaseScraper):
    """
    Scraper for Reddit hiring posts.

    Options (config.options):
        max_subreddits: How many TARGET_SUBREDDITS to search per keyword
        keyword_delay: Extra pause between keywords, in seconds
    """

    platform = JobSource.REDDIT
    name = "Reddit Scraper"
    classify_posts = True

    def _perform_scrape(self, params: SearchParams) -> RawScrapeResult:
        errors: List[str] = []
        posts: Dict[str, Dict[str, Any]] = {}

        for index, keyword in enumerate(params.keywords):
            if index > 0:
                self._pause(self.config.options.get("keyword_delay", 2.0))

            self._emit_progress(f"Searching Reddit for '{keyword}'", keyword=keyword)
            for post in self._search_global(keyword, params, errors) + self._search_subreddits(keyword, params, errors):
                post_id = post.get("id")
                if post_id and post_id not in posts:
                    posts[post_id] = post

        logger.info(f"Reddit: {len(posts)} unique posts for {params.keywords}")

        candidates = []
        for post in posts.values():
            if not self.is_job_related_post(post):
                continue
            try:
                candidates.append(self.parse_post(post))
            except (KeyError, TypeError, ValueError) as e:
                self._record_query_error(errors, f"parse post {post.get('id')}", e)

        return self._post_process(candidates, params, errors)

    def _perform_validation(self) -> bool:
        data = self._fetch_json(f"{REDDIT_BASE_URL}/.json", params={"limit": 1})
        return isinstance(data, dict) and "data" in data

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def _search_global(self, keyword: str, params: SearchParams, errors: List[str]) -> List[Dict[str, Any]]:
        """Every phrasing under every ordering on the site-wide search."""
        posts: List[Dict[str, Any]] = []
        time_filter = get_reddit_time_filter(params.date_posted)

        for query in build_search_queries(keyword, params):
            for sort, limit, strategy_time in SEARCH_STRATEGIES:
                request_params = {
                    "q": query,
                    "sort": sort,
                    "limit": limit,
                    "t": strategy_time or time_filter,
                    "type": "link",
                    "raw_json": 1,
                }
                try:
                    data = self._fetch_json(f"{REDDIT_BASE_URL}/search.json", params=request_params)
                    posts.extend(self._extract_posts(data))
                except ScrapingError as e:
                    self._record_query_error(errors, f"search '{query}' ({sort})", e)
                self._pause()

        return posts

    def _search_subreddits(self, keyword: str, params: SearchParams, errors: List[str]) -> List[Dict[str, Any]]:
        """Restricted search inside job-focused subreddits."""
        posts: List[Dict[str, Any]] = []
        max_subreddits = int(self.config.options.get("max_subreddits", 10))

        for subreddit in TARGET_SUBREDDITS[:max_subreddits]:
            request_params = {
                "q": keyword,
                "restrict_sr": 1,
                "sort": "new",
                "limit": 20,
                "t": get_reddit_time_filter(params.date_posted),
                "raw_json": 1,
            }
            try:
                data = self._fetch_json(f"{REDDIT_BASE_URL}/r/{subreddit}/search.json", params=request_params)
                posts.extend(self._extract_posts(data))
            except ScrapingError as e:
                self._record_query_error(errors, f"r/{subreddit} search '{keyword}'", e)
            self._pause()

        return posts

    @staticmethod
    def _extract_posts(data: Any) -> List[Dict[str, Any]]:
        if not isinstance(data, dict):
            return []
        listing = data.get("data") or {}
        if not isinstance(listing, dict):
            return []
        return [
            child.get("data") or {}
            for child in listing.get("children") or []
            if isinstance(child, dict) and child.get("kind", "t3") == "t3"
        ]

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @staticmethod
    def is_job_related_post(post: Dict[str, Any]) -> bool:
        text = f"{post.get('title', '')} {post.get('selftext', '')} {post.get('link_flair_text') or ''}"
        return bool(JOB_INDICATORS.search(text))

    def parse_post(self, post: Dict[str, Any]) -> Dict[str, Any]:
        """
        Normalize a Reddit post into a raw job record.

        Raises:
            KeyError: Post is missing id, title or permalink
        """
        post_title = post["title"]
        body = post.get("selftext") or ""
        full_text = f"{post_title}\n{body}"
        cleaned_title = strip_post_tags(post_title)
        author = post.get("author") or "unknown"

        link_url = post.get("url") if not post.get("is_self", True) else None
        website = extract_website(body) or (link_url if link_url and "reddit.com" not in link_url else None)

        return self._make_record(
            job_id=f"reddit-{post['id']}",
            title=extract_title(cleaned_title, fallback=cleaned_title) or cleaned_title,
            company=extract_company(full_text, fallback=f"u/{author}"),
            url=f"https://www.reddit.com{post['permalink']}",
            description=clean_description(full_text),
            posted_at=parse_created_utc(post.get("created_utc")),
            location=extract_location(full_text),
            requirements=extract_requirements(body),
            salary=extract_salary(full_text),
            job_type=determine_job_type(full_text),
            contact={
                "email": extract_contact_email(full_text, business_only=True),
                "name": f"u/{author}",
                "website": website,
            },
            raw_data={
                "subreddit": post.get("subreddit"),
                "author": author,
                "ups": post.get("ups", 0),
                "comments": post.get("num_comments", 0),
                "flair": post.get("link_flair_text"),
                "original_url": post.get("url"),
            },
        )
