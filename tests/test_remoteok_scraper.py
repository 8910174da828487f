"""
Tests for the RemoteOK feed scraper.
"""

import time

import httpx

from hirescout.core.models import JobSource, JobType, ScraperResult, SearchMode, SearchParams
from hirescout.scrapers.remoteok_scraper import RemoteOKScraper

FEED = [
    {"legal": "API Terms of Service: link back to RemoteOK"},
    {
        "id": "101",
        "slug": "remote-python-developer-acme-101",
        "epoch": int(time.time()) - 3600,
        "position": "Python Developer",
        "company": "Acme",
        "location": "",
        "tags": ["python", "django", "aws"],
        "description": "<p>Build things with <b>Python</b>. Email jobs@acme.io</p>",
        "url": "https://remoteok.com/remote-jobs/101",
        "apply_url": "https://acme.io/apply",
        "salary_min": 90000,
        "salary_max": 120000,
    },
    {
        "id": "102",
        "slug": "remote-marketing-lead-beta-102",
        "epoch": int(time.time()) - 7200,
        "position": "Marketing Lead",
        "company": "Beta",
        "location": "Europe",
        "tags": ["marketing"],
        "description": "<p>Own our growth strategy.</p>",
        "url": "https://remoteok.com/remote-jobs/102",
        "apply_url": "https://remoteok.com/l/102",
    },
    {"id": "103", "slug": "no-position"},
]


def make_scraper(mock_client, scraper_config, handler) -> RemoteOKScraper:
    return RemoteOKScraper(config=scraper_config(), http_client=mock_client(handler))


class TestRemoteOKScrape:
    def test_feed_postings_become_jobs(self, mock_client, scraper_config) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == "https://remoteok.com/api"
            return httpx.Response(200, json=FEED)

        scraper = make_scraper(mock_client, scraper_config, handler)

        outcome = scraper.scrape(SearchParams(keywords=["python developer"], search_mode=SearchMode.STRICT))

        assert isinstance(outcome, ScraperResult)
        assert len(outcome.jobs) == 1
        job = outcome.jobs[0]
        assert job.id == "remoteok-101"
        assert job.source == JobSource.REMOTEOK
        assert job.location == "Remote"
        assert job.remote
        assert job.job_type == JobType.FULL_TIME
        assert job.salary == "$90,000 - $120,000 / yearly"
        assert job.contact.email == "jobs@acme.io"
        assert job.contact.website == "https://acme.io/apply"
        assert job.requirements[:3] == ["python", "django", "aws"]
        assert "<p>" not in job.description
        assert outcome.metadata.errors == []

    def test_non_array_feed_is_a_parsing_error(self, mock_client, scraper_config) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"error": "maintenance"})

        outcome = make_scraper(mock_client, scraper_config, handler).scrape(SearchParams(keywords=["python"]))

        assert isinstance(outcome, ScraperResult)
        assert outcome.jobs == []
        assert len(outcome.metadata.errors) == 1
        assert outcome.metadata.errors[0].startswith("[parsing] feed fetch")

    def test_server_error_is_reported(self, mock_client, scraper_config) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502)

        outcome = make_scraper(mock_client, scraper_config, handler).scrape(SearchParams(keywords=["python"]))

        assert outcome.jobs == []
        assert outcome.metadata.errors[0].startswith("[network] feed fetch")


class TestParseItem:
    def test_location_is_marked_remote(self, scraper_config) -> None:
        scraper = RemoteOKScraper(config=scraper_config())

        record = scraper.parse_item(FEED[2])

        assert record["location"] == "Remote (Europe)"
        assert record["contact"] is None
        assert record["salary"] is None
        scraper.close()

    def test_item_without_url_or_slug_is_skipped(self, scraper_config) -> None:
        scraper = RemoteOKScraper(config=scraper_config())

        assert scraper.parse_item({"id": "9", "position": "Engineer"}) is None
        scraper.close()
