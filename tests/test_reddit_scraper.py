"""
Tests for the Reddit scraper against a mocked JSON API.
"""

import time
from datetime import datetime, timezone
from typing import Any, Dict, List

import httpx
import pytest

from hirescout.core.models import DatePosted, HiringLabel, JobSource, ScraperResult, SearchMode, SearchParams
from hirescout.scrapers.reddit_scraper import RedditScraper, build_search_queries, parse_created_utc


def listing(*posts: Dict[str, Any]) -> Dict[str, Any]:
    return {"kind": "Listing", "data": {"children": [{"kind": "t3", "data": post} for post in posts]}}


HIRING_POST = {
    "id": "abc",
    "title": "[Hiring] Python Developer at Acme",
    "selftext": "we are hiring a Python developer to build our API. Fully remote. "
    "Salary $100k - $120k. Email jobs@acme.io to apply.",
    "permalink": "/r/forhire/comments/abc/hiring_python_developer/",
    "created_utc": time.time() - 3600,
    "author": "acme_hr",
    "subreddit": "forhire",
    "is_self": True,
    "ups": 12,
    "num_comments": 3,
}

FOR_HIRE_POST = {
    "id": "def",
    "title": "[For Hire] Python developer available for hire",
    "selftext": "Check out my portfolio, my rate is $50/hr.",
    "permalink": "/r/forhire/comments/def/for_hire/",
    "created_utc": time.time() - 7200,
    "author": "freelancer",
    "subreddit": "forhire",
    "is_self": True,
}

OFF_TOPIC_POST = {
    "id": "ghi",
    "title": "Weekend photos from the Python meetup",
    "selftext": "Great talks everyone",
    "permalink": "/r/Python/comments/ghi/photos/",
    "created_utc": time.time() - 600,
    "author": "someone",
    "subreddit": "Python",
    "is_self": True,
}


@pytest.fixture
def params() -> SearchParams:
    return SearchParams(keywords=["python developer"], search_mode=SearchMode.STRICT)


def make_scraper(mock_client, scraper_config, handler) -> RedditScraper:
    return RedditScraper(
        config=scraper_config(options={"max_subreddits": 2, "keyword_delay": 0.0}),
        http_client=mock_client(handler),
    )


class TestBuildSearchQueries:
    def test_strict_queries_quote_the_keyword(self) -> None:
        queries = build_search_queries("python", SearchParams(keywords=["python"], search_mode=SearchMode.STRICT))

        assert queries == ['"python" hiring', '"python" job', '"python" "looking for"']

    def test_location_and_remote_add_one_query_each(self) -> None:
        params = SearchParams(keywords=["python"], location="Berlin", remote=True, search_mode=SearchMode.STRICT)

        queries = build_search_queries("python", params)

        assert queries[-2:] == ['"python" hiring Berlin', '"python" remote hiring']

    def test_loose_mode_searches_more_phrasings(self) -> None:
        strict = build_search_queries("python", SearchParams(keywords=["python"], search_mode=SearchMode.STRICT))
        loose = build_search_queries("python", SearchParams(keywords=["python"], search_mode=SearchMode.LOOSE))

        assert len(loose) > len(strict)


class TestRedditScrape:
    def test_keeps_hiring_posts_only(self, mock_client, scraper_config, params) -> None:
        requests: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=listing(HIRING_POST, FOR_HIRE_POST, OFF_TOPIC_POST))

        scraper = make_scraper(mock_client, scraper_config, handler)

        outcome = scraper.scrape(params)

        assert isinstance(outcome, ScraperResult)
        assert len(outcome.jobs) == 1
        job = outcome.jobs[0]
        assert job.id == "reddit-abc"
        assert job.source == JobSource.REDDIT
        assert job.url == "https://www.reddit.com/r/forhire/comments/abc/hiring_python_developer/"
        assert job.company == "Acme"
        assert "Python Developer" in job.title
        assert job.remote
        assert job.contact.email == "jobs@acme.io"
        assert job.scraped_metadata.relevance_score == 1.0
        assert job.scraped_metadata.classification == HiringLabel.HIRING
        assert job.scraped_metadata.raw_data["subreddit"] == "forhire"
        assert outcome.metadata.errors == []

        paths = {request.url.path for request in requests}
        assert "/search.json" in paths
        assert "/r/forhire/search.json" in paths
        assert "/r/remotework/search.json" in paths
        assert "/r/RemoteJobs/search.json" not in paths

    def test_loose_mode_also_keeps_unclear_posts(self, mock_client, scraper_config) -> None:
        unclear = {
            **OFF_TOPIC_POST,
            "id": "jkl",
            "title": "Python developer gig",
            "selftext": "Small freelance project, details in comments",
        }

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=listing(unclear))

        scraper = make_scraper(mock_client, scraper_config, handler)

        moderate = scraper.scrape(SearchParams(keywords=["python developer"], search_mode=SearchMode.MODERATE))
        loose = scraper.scrape(SearchParams(keywords=["python developer"], search_mode=SearchMode.LOOSE))

        assert moderate.jobs == []
        assert [job.id for job in loose.jobs] == ["reddit-jkl"]
        assert loose.jobs[0].scraped_metadata.classification == HiringLabel.UNCLEAR

    def test_failed_queries_are_reported_not_raised(self, mock_client, scraper_config, params) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/search.json":
                return httpx.Response(429)
            return httpx.Response(200, json=listing(HIRING_POST))

        scraper = make_scraper(mock_client, scraper_config, handler)

        outcome = scraper.scrape(params)

        assert isinstance(outcome, ScraperResult)
        assert [job.id for job in outcome.jobs] == ["reddit-abc"]
        assert outcome.metadata.errors
        assert all(error.startswith("[rate_limit]") for error in outcome.metadata.errors)

    def test_malformed_payload_yields_no_jobs(self, mock_client, scraper_config, params) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=["not", "a", "listing"])

        outcome = make_scraper(mock_client, scraper_config, handler).scrape(params)

        assert isinstance(outcome, ScraperResult)
        assert outcome.jobs == []

    def test_null_listing_does_not_abort_sibling_queries(self, mock_client, scraper_config, params) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/search.json":
                return httpx.Response(200, json={"kind": "Listing", "data": None})
            return httpx.Response(200, json=listing(HIRING_POST))

        outcome = make_scraper(mock_client, scraper_config, handler).scrape(params)

        assert isinstance(outcome, ScraperResult)
        assert [job.id for job in outcome.jobs] == ["reddit-abc"]

    def test_post_without_timestamp_survives_date_filter(self, mock_client, scraper_config) -> None:
        undated = {key: value for key, value in HIRING_POST.items() if key != "created_utc"}

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=listing(undated))

        params = SearchParams(
            keywords=["python developer"], search_mode=SearchMode.STRICT, date_posted=DatePosted.WEEK
        )
        outcome = make_scraper(mock_client, scraper_config, handler).scrape(params)

        assert isinstance(outcome, ScraperResult)
        assert [job.id for job in outcome.jobs] == ["reddit-abc"]
        assert outcome.jobs[0].posted_at.year >= 2026


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (1700000000, datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)),
        ("1700000000.0", datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)),
        (None, None),
        ("", None),
    ],
)
def test_parse_created_utc(value, expected) -> None:
    assert parse_created_utc(value) == expected


class TestPostParsing:
    def test_is_job_related_post(self) -> None:
        assert RedditScraper.is_job_related_post(HIRING_POST)
        assert not RedditScraper.is_job_related_post(OFF_TOPIC_POST)

    def test_parse_post_uses_author_when_no_company(self, scraper_config) -> None:
        scraper = RedditScraper(config=scraper_config())
        post = {**HIRING_POST, "title": "[Hiring] backend help needed", "selftext": "need someone for a project"}

        record = scraper.parse_post(post)

        assert record["company"] == "u/acme_hr"
        assert record["contact"]["name"] == "u/acme_hr"
        scraper.close()

    def test_parse_post_requires_permalink(self, scraper_config) -> None:
        scraper = RedditScraper(config=scraper_config())
        post = dict(HIRING_POST)
        del post["permalink"]

        with pytest.raises(KeyError):
            scraper.parse_post(post)
        scraper.close()
