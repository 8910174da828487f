"""
Command line entry point.

Usage:
    hirescout search "python developer" --platform reddit --platform remoteok --csv jobs.csv
    hirescout discover "Acme" --website https://acme.example --job-url https://acme.example/jobs/1
"""

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from .contacts import EmailDiscoveryService
from .core.events import ScrapeEvent
from .core.models import (
    DatePosted,
    DiscoveryMethod,
    EmailDiscoveryParams,
    JobSource,
    SearchMode,
    SearchParams,
    jobs_to_dataframe,
)
from .scrapers import SCRAPER_CLASSES, ScraperManager

logger = logging.getLogger(__name__)


def _print_event(event: ScrapeEvent) -> None:
    message = event.payload.get("message")
    if message:
        print(f"   [{event.source}] {message}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hirescout",
        description="Find job postings across social and job-board sources and discover hiring contacts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="Search job postings")
    search.add_argument("keywords", nargs="+", help="Keywords or phrases to search for")
    search.add_argument(
        "--platform",
        action="append",
        choices=[platform.value for platform in SCRAPER_CLASSES],
        help="Platform to search (repeatable, default: all)",
    )
    search.add_argument("--mode", choices=[m.value for m in SearchMode], default=SearchMode.MODERATE.value)
    search.add_argument("--location", help="Location filter")
    remote = search.add_mutually_exclusive_group()
    remote.add_argument("--remote", dest="remote", action="store_const", const=True, help="Remote jobs only")
    remote.add_argument("--onsite", dest="remote", action="store_const", const=False, help="Non-remote jobs only")
    search.add_argument("--date-posted", choices=[d.value for d in DatePosted], default=DatePosted.ANY.value)
    search.add_argument("--limit", type=int, default=50, help="Results per platform (default: 50)")
    search.add_argument("--csv", metavar="PATH", help="Write merged results to a CSV file")

    discover = subparsers.add_parser("discover", help="Discover hiring contact emails for a company")
    discover.add_argument("company", help="Company name")
    discover.add_argument("--website", help="Company website")
    discover.add_argument("--job-url", help="Job posting URL")
    discover.add_argument("--url", action="append", default=[], help="Additional page to scan (repeatable)")

    return parser


def run_search(args: argparse.Namespace) -> int:
    try:
        params = SearchParams(
            keywords=args.keywords,
            location=args.location,
            remote=args.remote,
            date_posted=DatePosted(args.date_posted),
            search_mode=SearchMode(args.mode),
            limit=args.limit,
        )
    except ValidationError as e:
        print(f"❌ Invalid search: {e}")
        return 2

    platforms = [JobSource(p) for p in args.platform] if args.platform else None
    manager = ScraperManager.with_default_scrapers(platforms, event_callback=_print_event)
    try:
        result = manager.scrape_all(params)
    finally:
        manager.close()

    print(f"\n🔍 {len(result.jobs)} unique jobs in {result.search_time:.1f}s")
    for job in result.jobs[:20]:
        score = job.scraped_metadata.relevance_score or 0.0
        print(f"   [{job.source.value}] {job.title} @ {job.company} ({score:.2f}) {job.url}")

    for platform, failure in result.failures.items():
        print(f"❌ {platform.value}: {failure.reason.value} ({failure.error.message})")
    if result.errors:
        print(f"⚠️ {len(result.errors)} non-fatal error(s); run with --verbose for details")
        for message in result.errors:
            logger.debug(message)

    if args.csv:
        jobs_to_dataframe(result.jobs).to_csv(args.csv, index=False)
        print(f"💾 Saved {len(result.jobs)} jobs to {args.csv}")

    return 0 if result.success else 1


def run_discover(args: argparse.Namespace) -> int:
    methods = [DiscoveryMethod.WEBSITE, DiscoveryMethod.JOB_POST, DiscoveryMethod.ADDITIONAL_URLS]
    try:
        params = EmailDiscoveryParams(
            company_name=args.company,
            company_website=args.website,
            job_url=args.job_url,
            additional_urls=args.url,
            methods=methods,
        )
    except ValidationError as e:
        print(f"❌ Invalid discovery request: {e}")
        return 2

    with EmailDiscoveryService(event_callback=_print_event) as service:
        result = service.discover_emails(params)

    print(f"\n📧 {result.unique_emails} unique emails for {result.company_name} ({result.processing_time:.0f} ms)")
    for contact in result.emails:
        details = ", ".join(part for part in (contact.name, contact.title) if part)
        flags = " [disposable]" if contact.is_disposable else ""
        print(
            f"   {contact.email} ({contact.source.type.value}, {contact.source.confidence:.2f})"
            f"{' - ' + details if details else ''}{flags}"
        )
    for error in result.errors:
        print(f"⚠️ [{error.type.value}] {error.message}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main function with argument parsing."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "search":
        return run_search(args)
    return run_discover(args)


if __name__ == "__main__":
    sys.exit(main())
