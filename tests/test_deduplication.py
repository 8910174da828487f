"""
Tests for composite-key deduplication.
"""

from datetime import datetime, timezone

from hirescout.core.deduplication import dedup_key, deduplicate, deduplicate_jobs
from hirescout.core.models import Job, JobSource


def record(title: str, company: str, url: str = "https://acme.io/1") -> dict:
    return {"title": title, "company": company, "url": url}


def job(job_id: str, title: str, company: str, source: JobSource = JobSource.REDDIT) -> Job:
    return Job(
        id=job_id,
        title=title,
        company=company,
        url=f"https://example.com/{job_id}",
        source=source,
        posted_at=datetime(2026, 10, 1, tzinfo=timezone.utc),
    )


class TestDedupKey:
    def test_normalizes_case_and_whitespace(self) -> None:
        assert dedup_key(record("Python  Developer", "ACME ")) == dedup_key(record("python developer", "acme"))

    def test_url_is_optional_part_of_key(self) -> None:
        a = record("Python Developer", "Acme", "https://acme.io/1")
        b = record("Python Developer", "Acme", "https://acme.io/2/")

        assert dedup_key(a) == dedup_key(b)
        assert dedup_key(a, include_url=True) != dedup_key(b, include_url=True)
        assert dedup_key(b, include_url=True).endswith("https://acme.io/2")


class TestDeduplicate:
    def test_keeps_first_occurrence_in_order(self) -> None:
        items = [
            record("Python Developer", "Acme", "https://a.io"),
            record("Data Engineer", "Beta"),
            record("python developer", "acme", "https://b.io"),
        ]

        result = deduplicate(items)

        assert result == [items[0], items[1]]

    def test_include_url_keeps_distinct_links(self) -> None:
        items = [record("Python Developer", "Acme", "https://a.io"), record("Python Developer", "Acme", "https://b.io")]

        assert len(deduplicate(items, include_url=True)) == 2

    def test_idempotent(self) -> None:
        items = [record("A", "X"), record("a", "x"), record("B", "Y")]

        once = deduplicate(items)

        assert deduplicate(once) == once

    def test_empty(self) -> None:
        assert deduplicate([]) == []


def test_deduplicate_jobs_also_collapses_ids() -> None:
    jobs = [
        job("shared-id", "Python Developer", "Acme"),
        job("shared-id", "Data Engineer", "Beta", JobSource.REMOTEOK),
        job("other", "PYTHON DEVELOPER", "acme", JobSource.TWITTER),
    ]

    result = deduplicate_jobs(jobs)

    assert [(j.id, j.title) for j in result] == [("shared-id", "Python Developer")]
