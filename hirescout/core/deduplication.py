"""
Composite-key deduplication for jobs and raw records.

Duplicates are collapsed with pandas drop_duplicates on a key column, keeping
the first occurrence so that callers control which copy survives by ordering
their input.
"""

import logging
import re
from typing import Any, Dict, List, Mapping, Sequence, TypeVar, Union

import pandas as pd

from .models import Job

logger = logging.getLogger(__name__)

T = TypeVar("T", Job, Dict[str, Any])


def _normalize(value: Any) -> str:
    return re.sub(r"\s+", " ", str(value or "")).strip().lower()


def _get(item: Union[Job, Mapping[str, Any]], field: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(field)
    return getattr(item, field, None)


def dedup_key(item: Union[Job, Mapping[str, Any]], include_url: bool = False) -> str:
    """
    Composite identity of a posting: title + company, optionally + url.

    Args:
        item: Job model or raw record dict with title/company/url
        include_url: Also distinguish postings by URL
    """
    parts = [_normalize(_get(item, "title")), _normalize(_get(item, "company"))]
    if include_url:
        parts.append(_normalize(_get(item, "url")).rstrip("/"))
    return "|".join(parts)


def deduplicate(items: Sequence[T], include_url: bool = False) -> List[T]:
    """
    Remove duplicates by composite key, keeping the first occurrence.

    Idempotent: deduplicating an already deduplicated list returns it unchanged.

    Args:
        items: Jobs or raw records in priority order
        include_url: Use title+company+url instead of title+company

    Returns:
        New list with duplicates removed, input order preserved
    """
    items = list(items)
    if not items:
        return []

    keys = pd.DataFrame({"key": [dedup_key(item, include_url) for item in items]})
    kept_index = keys.drop_duplicates(subset=["key"], keep="first").index

    removed = len(items) - len(kept_index)
    if removed:
        logger.debug(f"Deduplication removed {removed} of {len(items)} items")

    return [items[i] for i in kept_index]


def deduplicate_jobs(jobs: Sequence[Job], include_url: bool = False) -> List[Job]:
    """
    Cross-source job deduplication.

    Jobs are first collapsed by composite key, then by id so the returned list
    never carries two jobs with the same id.
    """
    unique = deduplicate(jobs, include_url=include_url)
    seen_ids = set()
    result = []
    for job in unique:
        if job.id in seen_ids:
            continue
        seen_ids.add(job.id)
        result.append(job)
    return result
