"""
Tests for the hirescout command line.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pandas as pd
import pytest

from hirescout.cli import build_parser, main
from hirescout.core.models import (
    EmailContact,
    EmailDiscoveryResult,
    EmailSource,
    FailureReason,
    Job,
    JobSource,
    ScrapeFailure,
    ScraperError,
)
from hirescout.core.errors import ErrorType
from hirescout.scrapers import AggregatedResult


def sample_job() -> Job:
    return Job(
        id="remoteok-101",
        title="Python Developer",
        company="Acme",
        url="https://remoteok.com/remote-jobs/101",
        source=JobSource.REMOTEOK,
        posted_at=datetime(2026, 10, 1, tzinfo=timezone.utc),
        scraped_metadata={"relevance_score": 0.9},
    )


class TestParser:
    def test_search_arguments(self) -> None:
        args = build_parser().parse_args(
            ["search", "python developer", "react", "--platform", "reddit", "--platform", "remoteok", "--remote"]
        )

        assert args.command == "search"
        assert args.keywords == ["python developer", "react"]
        assert args.platform == ["reddit", "remoteok"]
        assert args.remote is True
        assert args.mode == "moderate"
        assert args.limit == 50

    def test_remote_defaults_to_either(self) -> None:
        assert build_parser().parse_args(["search", "python"]).remote is None
        assert build_parser().parse_args(["search", "python", "--onsite"]).remote is False

    def test_unknown_platform_is_rejected(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["search", "python", "--platform", "myspace"])

    def test_remote_and_onsite_are_exclusive(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["search", "python", "--remote", "--onsite"])


class TestSearchCommand:
    @patch("hirescout.cli.ScraperManager")
    def test_prints_results_and_writes_csv(self, mock_manager_class, tmp_path, capsys) -> None:
        manager = MagicMock()
        manager.scrape_all.return_value = AggregatedResult(jobs=[sample_job()], search_time=1.2)
        manager.scrape_all.return_value.results[JobSource.REMOTEOK] = MagicMock()
        mock_manager_class.with_default_scrapers.return_value = manager
        csv_path = tmp_path / "jobs.csv"

        exit_code = main(["search", "python developer", "--platform", "remoteok", "--csv", str(csv_path)])

        assert exit_code == 0
        platforms = mock_manager_class.with_default_scrapers.call_args.args[0]
        assert platforms == [JobSource.REMOTEOK]
        manager.close.assert_called_once()
        output = capsys.readouterr().out
        assert "1 unique jobs" in output
        assert "Python Developer @ Acme" in output
        saved = pd.read_csv(csv_path)
        assert saved.loc[0, "id"] == "remoteok-101"

    @patch("hirescout.cli.ScraperManager")
    def test_all_platforms_failing_exits_non_zero(self, mock_manager_class, capsys) -> None:
        failure = ScrapeFailure(
            scraper_id="twitter-scraper",
            platform=JobSource.TWITTER,
            reason=FailureReason.EXHAUSTED,
            error=ScraperError(type=ErrorType.BLOCKED, message="captcha"),
        )
        manager = MagicMock()
        manager.scrape_all.return_value = AggregatedResult(failures={JobSource.TWITTER: failure})
        mock_manager_class.with_default_scrapers.return_value = manager

        assert main(["search", "python"]) == 1
        assert "twitter: exhausted (captcha)" in capsys.readouterr().out

    @patch("hirescout.cli.ScraperManager")
    def test_invalid_search_exits_with_usage_error(self, mock_manager_class, capsys) -> None:
        assert main(["search", "python", "--limit", "0"]) == 2
        mock_manager_class.with_default_scrapers.assert_not_called()
        assert "Invalid search" in capsys.readouterr().out


class TestDiscoverCommand:
    @patch("hirescout.cli.EmailDiscoveryService")
    def test_prints_ranked_contacts(self, mock_service_class, capsys) -> None:
        contact = EmailContact(
            email="jobs@acme.io",
            name="Jane Doe",
            source=EmailSource(type="contact_page", url="https://acme.io/contact", confidence=0.9),
        )
        service = mock_service_class.return_value.__enter__.return_value
        service.discover_emails.return_value = EmailDiscoveryResult(
            company_name="Acme", emails=[contact], unique_emails=1
        )

        exit_code = main(["discover", "Acme", "--website", "acme.io", "--url", "https://blog.example/acme"])

        assert exit_code == 0
        params = service.discover_emails.call_args.args[0]
        assert params.company_website == "acme.io"
        assert params.additional_urls == ["https://blog.example/acme"]
        output = capsys.readouterr().out
        assert "jobs@acme.io (contact_page, 0.90) - Jane Doe" in output
