"""Search filters for job listings.

Four filters, all of which must hold:
1. Location: exact match
2. Category: exact match
3. Job type: exact match
4. Free text: case-insensitive substring of title, company or description

An empty filter value imposes no constraint, so ``JobFilters()`` returns
everything. Order of the input is preserved.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from jobboard.models import Job, JobFilters

logger = logging.getLogger(__name__)


# ── Field Matching ──────────────────────────────────────────────────────────


def exact_matches(value: str, wanted: str) -> bool:
    """True when ``wanted`` is empty or equals ``value`` exactly."""
    if not wanted:
        return True
    return value == wanted


def text_matches(job: Job, query: str) -> bool:
    """Check if title, company or description contains ``query`` (case-insensitive)."""
    if not query:
        return True

    needle = query.lower()
    return (
        needle in job.title.lower()
        or needle in job.company.lower()
        or needle in job.description.lower()
    )


def job_matches(job: Job, filters: JobFilters) -> bool:
    """All supplied filter fields must hold (logical AND)."""
    return (
        exact_matches(job.location, filters.location)
        and exact_matches(job.category, filters.category)
        and exact_matches(job.job_type, filters.job_type)
        and text_matches(job, filters.search)
    )


# ── Filter Pipeline ─────────────────────────────────────────────────────────


def apply_filters(jobs: Iterable[Job], filters: JobFilters | None) -> list[Job]:
    """Return the jobs that satisfy ``filters``, in their original order."""
    jobs = list(jobs)
    if filters is None or filters.is_empty:
        return jobs

    matched = [job for job in jobs if job_matches(job, filters)]
    logger.debug(
        "Search filters %s: %d of %d jobs matched", filters, len(matched), len(jobs)
    )
    return matched


def filters_from_mapping(raw: Mapping[str, str | None]) -> JobFilters:
    """Build ``JobFilters`` from loose input (query params, CLI args).

    Accepts both ``job_type`` and the external ``jobType`` spelling. None is
    treated as empty. Only the free-text query is stripped; exact-match
    values are taken as given.
    """
    job_type = raw.get("job_type") or raw.get("jobType") or ""
    return JobFilters(
        location=raw.get("location") or "",
        category=raw.get("category") or "",
        job_type=job_type,
        search=(raw.get("search") or "").strip(),
    )
