"""Dashboard views derived from the repository.

Pure read-side helpers: nothing here mutates the board. Only the platform
totals are restricted (to administrators).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Optional

from jobboard.errors import PermissionDenied
from jobboard.models import (
    Actor,
    ApplicationStatus,
    Job,
    JobApplication,
    Role,
    utcnow,
)
from jobboard.repository import JobRepository
from jobboard.session import SessionStore

logger = logging.getLogger(__name__)


@dataclass
class SeekerSummary:
    total: int = 0
    applied: int = 0
    under_review: int = 0
    accepted: int = 0
    rejected: int = 0
    nearby_jobs: list[Job] = field(default_factory=list)
    recommended_jobs: list[Job] = field(default_factory=list)


@dataclass
class EmployerSummary:
    total_jobs: int = 0
    active_jobs: int = 0
    total_applicants: int = 0
    new_applicants: int = 0
    recent_jobs: list[Job] = field(default_factory=list)
    recent_applications: list[JobApplication] = field(default_factory=list)


@dataclass
class PlatformStats:
    total_users: int
    employers: int
    job_seekers: int
    admins: int
    total_jobs: int
    active_jobs: int
    closed_jobs: int
    total_applications: int


def count_by_status(applications: Iterable[JobApplication]) -> dict[ApplicationStatus, int]:
    counts = {status: 0 for status in ApplicationStatus}
    for application in applications:
        counts[application.status] += 1
    return counts


def applicant_buckets(applications: Iterable[JobApplication]) -> dict[str, list[JobApplication]]:
    """Group applications the way the applicants screen tabs them.

    ``new`` is still ``applied``, ``reviewing`` is ``under_review`` and
    ``processed`` is either accepted or rejected.
    """
    applications = list(applications)
    return {
        "all": applications,
        "new": [a for a in applications if a.status is ApplicationStatus.APPLIED],
        "reviewing": [a for a in applications if a.status is ApplicationStatus.UNDER_REVIEW],
        "processed": [
            a for a in applications
            if a.status in (ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED)
        ],
    }


def seeker_buckets(applications: Iterable[JobApplication]) -> dict[str, list[JobApplication]]:
    """Group a seeker's applications: ``pending`` covers applied and under_review."""
    applications = list(applications)
    return {
        "pending": [
            a for a in applications
            if a.status in (ApplicationStatus.APPLIED, ApplicationStatus.UNDER_REVIEW)
        ],
        "accepted": [a for a in applications if a.status is ApplicationStatus.ACCEPTED],
        "rejected": [a for a in applications if a.status is ApplicationStatus.REJECTED],
    }


def nearby_jobs(repo: JobRepository, actor: Optional[Actor], limit: int = 3) -> list[Job]:
    """Jobs in the actor's own location. Empty when the actor has none."""
    if actor is None or not actor.location:
        return []
    return [j for j in repo.jobs if j.location == actor.location][:limit]


def recommended_jobs(repo: JobRepository, actor: Optional[Actor], limit: int = 3) -> list[Job]:
    """Jobs elsewhere, to broaden the seeker's search."""
    if actor is None or not actor.location:
        return []
    return [j for j in repo.jobs if j.location != actor.location][:limit]


def seeker_summary(repo: JobRepository, actor: Optional[Actor], limit: int = 3) -> SeekerSummary:
    """Application counts per status plus nearby/recommended listings."""
    applications = repo.applications_for_actor(actor)
    counts = count_by_status(applications)
    return SeekerSummary(
        total=len(applications),
        applied=counts[ApplicationStatus.APPLIED],
        under_review=counts[ApplicationStatus.UNDER_REVIEW],
        accepted=counts[ApplicationStatus.ACCEPTED],
        rejected=counts[ApplicationStatus.REJECTED],
        nearby_jobs=nearby_jobs(repo, actor, limit),
        recommended_jobs=recommended_jobs(repo, actor, limit),
    )


def employer_summary(
    repo: JobRepository,
    actor: Optional[Actor],
    now: Optional[datetime] = None,
    recent_days: int = 7,
    jobs_limit: int = 3,
    applications_limit: int = 5,
) -> EmployerSummary:
    """Listing and applicant counts across the employer's own jobs.

    ``new_applicants`` counts applications newer than ``recent_days``;
    ``recent_applications`` is newest first.
    """
    jobs = repo.jobs_for_employer(actor)
    cutoff = (now or utcnow()) - timedelta(days=recent_days)

    applications: list[JobApplication] = []
    for job in jobs:
        applications.extend(repo.applications_for_job(job.id))

    applications.sort(key=lambda a: a.applied_date, reverse=True)

    return EmployerSummary(
        total_jobs=len(jobs),
        active_jobs=sum(1 for j in jobs if j.is_active),
        total_applicants=len(applications),
        new_applicants=sum(1 for a in applications if a.applied_date > cutoff),
        recent_jobs=jobs[:jobs_limit],
        recent_applications=applications[:applications_limit],
    )


def platform_stats(
    repo: JobRepository,
    sessions: SessionStore,
    actor: Optional[Actor],
) -> PlatformStats:
    """Aggregate totals for administrators. Raises PermissionDenied otherwise."""
    if actor is None or not actor.is_admin:
        logger.warning("Platform stats denied for %s", actor.id if actor else "anonymous")
        raise PermissionDenied("Only administrators can view platform statistics.")

    users = sessions.users()
    jobs = repo.jobs
    active = sum(1 for j in jobs if j.is_active)
    return PlatformStats(
        total_users=len(users),
        employers=sum(1 for u in users if u.role is Role.EMPLOYER),
        job_seekers=sum(1 for u in users if u.role is Role.SEEKER),
        admins=sum(1 for u in users if u.role is Role.ADMIN),
        total_jobs=len(jobs),
        active_jobs=active,
        closed_jobs=len(jobs) - active,
        total_applications=len(repo.applications),
    )
