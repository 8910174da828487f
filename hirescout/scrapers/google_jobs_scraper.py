"""
Google Jobs scraper using JobSpy.

Google's job panel is search-engine style: one free-text query per request,
rendered client-side and quick to wall off automated traffic. JobSpy handles
the page protocol; this adapter builds several query phrasings, normalizes
the returned DataFrame rows and treats an empty frame as a soft failure.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

import pandas as pd
from jobspy import scrape_jobs

from ..core.extraction import (
    clean_description,
    clean_text,
    extract_contact_email,
    extract_requirements,
    extract_salary,
    format_salary_range,
    normalize_job_type,
)
from ..core.models import DatePosted, JobSource, SearchParams
from ..core.resilience import call_with_retry
from .base_scraper import BaseScraper, RawScrapeResult

logger = logging.getLogger(__name__)

RECENCY_PHRASES: Dict[DatePosted, str] = {
    DatePosted.TODAY: " since yesterday",
    DatePosted.WEEK: " in the last week",
    DatePosted.MONTH: " in the last month",
    DatePosted.ANY: "",
}


def build_search_queries(keyword: str, params: SearchParams, max_queries: int = 3) -> List[str]:
    """Google search phrasings for one keyword."""
    location = f" near {params.location}" if params.location else ""
    recency = RECENCY_PHRASES[params.date_posted]

    queries = [f"{keyword} jobs{location}{recency}"]
    if params.remote is not False:
        queries.append(f"remote {keyword} jobs{recency}")
    queries.append(f"{keyword} hiring{location}{recency}")
    return queries[:max_queries]


def _clean_value(value: Any) -> Any:
    """None for NaN/NaT/empty cells, the value otherwise."""
    if value is None:
        return None
    if isinstance(value, (list, tuple, dict)):
        return value
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if isinstance(value, str) and value.strip().lower() in ("", "nan", "none", "null"):
        return None
    return value


def _to_datetime(value: Any) -> Optional[datetime]:
    value = _clean_value(value)
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    try:
        timestamp = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(timestamp):
        return None
    timestamp = timestamp.tz_localize("UTC") if timestamp.tzinfo is None else timestamp.tz_convert("UTC")
    return timestamp.to_pydatetime()


class GoogleJobsScraper(BaseScraper):
    """
    Scraper for the Google Jobs panel.

    Options (config.options):
        max_queries: Phrasings per keyword
        country: Country hint passed to JobSpy
    """

    platform = JobSource.GOOGLE
    name = "Google Jobs Scraper"
    dedup_include_url = False

    def _perform_scrape(self, params: SearchParams) -> RawScrapeResult:
        errors: List[str] = []
        candidates: List[Dict[str, Any]] = []
        max_queries = int(self.config.options.get("max_queries", 3))
        results_wanted = min(params.offset + params.limit, 100)
        queries = [q for keyword in params.keywords for q in build_search_queries(keyword, params, max_queries)]

        for index, query in enumerate(queries):
            if index > 0:
                self._pause()
            self._emit_progress(f"Searching Google Jobs: {query}", query=query)

            try:
                jobs_df = self._run_query(query, params, results_wanted)
            except Exception as e:
                self._record_query_error(errors, f"query '{query}'", e)
                continue

            if jobs_df is None or jobs_df.empty:
                message = f"Google Jobs returned no results for '{query}' (page may be rendered client-side or blocked)"
                logger.warning(f"⚠️ {message}")
                errors.append(f"[blocked] {message}")
                continue

            candidates.extend(self.process_jobs(jobs_df))

        return self._post_process(candidates, params, errors)

    def _perform_validation(self) -> bool:
        jobs_df = scrape_jobs(site_name=["google"], google_search_term="software engineer jobs", results_wanted=1)
        return isinstance(jobs_df, pd.DataFrame)

    def _run_query(self, query: str, params: SearchParams, results_wanted: int) -> pd.DataFrame:
        search_params: Dict[str, Any] = {
            "site_name": ["google"],
            "search_term": query,
            "google_search_term": query,
            "results_wanted": results_wanted,
            "country_indeed": self.config.options.get("country", "usa"),
            "description_format": "markdown",
            "verbose": 0,
        }
        if params.location:
            search_params["location"] = params.location

        return call_with_retry(
            scrape_jobs,
            policy=self.config.retry,
            label=f"{self.name} '{query}'",
            sleep=self._sleep,
            **search_params,
        )

    def process_jobs(self, jobs_df: pd.DataFrame) -> List[Dict[str, Any]]:
        """Normalize JobSpy rows into raw job records, skipping rows without a URL."""
        records = []

        for row in jobs_df.to_dict("records"):
            url = _clean_value(row.get("job_url")) or _clean_value(row.get("job_url_direct"))
            title = _clean_value(row.get("title"))
            if not url or not title:
                continue

            description_raw = str(_clean_value(row.get("description")) or "")
            location = _clean_value(row.get("location"))
            job_type_raw = _clean_value(row.get("job_type"))
            if isinstance(job_type_raw, str):
                job_type_raw = job_type_raw.split(",")[0]

            salary = format_salary_range(
                _clean_value(row.get("min_amount")),
                _clean_value(row.get("max_amount")),
                _clean_value(row.get("currency")) or "USD",
                _clean_value(row.get("interval")),
            ) or extract_salary(description_raw)

            emails = _clean_value(row.get("emails"))
            email = None
            if isinstance(emails, (list, tuple)) and emails:
                email = str(emails[0]).lower()
            elif isinstance(emails, str):
                email = emails.split(",")[0].strip().lower()
            email = email or extract_contact_email(description_raw)

            records.append(
                self._make_record(
                    title=clean_text(str(title)),
                    company=clean_text(str(_clean_value(row.get("company")) or "")) or "Not specified",
                    url=str(url),
                    description=clean_description(description_raw, max_length=1000),
                    posted_at=_to_datetime(row.get("date_posted")),
                    location=clean_text(str(location)) if location else None,
                    requirements=extract_requirements(description_raw),
                    salary=salary,
                    job_type=normalize_job_type(job_type_raw) if job_type_raw else None,
                    contact={"email": email, "website": _clean_value(row.get("company_url"))},
                    raw_data={
                        "site": _clean_value(row.get("site")),
                        "is_remote": bool(_clean_value(row.get("is_remote"))),
                        "job_url_direct": _clean_value(row.get("job_url_direct")),
                        "company_industry": _clean_value(row.get("company_industry")),
                        "job_level": _clean_value(row.get("job_level")),
                    },
                )
            )

        return records
