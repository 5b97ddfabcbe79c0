"""Seed data loader and board wiring.

Reads seed.yaml (demo accounts, jobs and applications) and builds a
``SessionStore`` plus a ``JobRepository`` configured from ``BoardConfig``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from jobboard.config import BoardConfig
from jobboard.models import (
    Actor,
    ApplicationStatus,
    Job,
    JobApplication,
    JobStatus,
    Role,
    parse_timestamp,
)
from jobboard.notify import Notifier
from jobboard.repository import JobRepository
from jobboard.session import CredentialRecord, SessionStore

logger = logging.getLogger(__name__)


@dataclass
class SeedData:
    credentials: list[CredentialRecord] = field(default_factory=list)
    jobs: list[Job] = field(default_factory=list)
    applications: list[JobApplication] = field(default_factory=list)


@dataclass
class Board:
    """A wired session store and repository."""

    sessions: SessionStore
    repository: JobRepository
    config: BoardConfig


def load_seed(path: Path | str) -> SeedData:
    """Parse a seed file. A missing file yields an empty board."""
    seed_path = Path(path)
    if not seed_path.exists():
        logger.warning("Seed file not found at %s — starting empty", seed_path)
        return SeedData()

    with open(seed_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    try:
        seed = SeedData(
            credentials=[_parse_user(u) for u in raw.get("users", [])],
            jobs=[_parse_job(j) for j in raw.get("jobs", [])],
            applications=[_parse_application(a) for a in raw.get("applications", [])],
        )
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Invalid seed file {seed_path}: {exc}") from exc

    employers = {r.actor.id for r in seed.credentials if r.actor.is_employer}
    for job in seed.jobs:
        if job.employer_id not in employers:
            raise ValueError(
                f"Invalid seed file {seed_path}: job {job.id} is owned by "
                f"{job.employer_id}, which is not an employer account"
            )

    logger.info(
        "Loaded seed: %d users, %d jobs, %d applications",
        len(seed.credentials), len(seed.jobs), len(seed.applications),
    )
    return seed


def build_board(
    config: BoardConfig,
    notifier: Optional[Notifier] = None,
    seed: Optional[SeedData] = None,
) -> Board:
    """Create the session store and a seeded repository from ``config``."""
    if seed is None:
        seed = load_seed(config.seed_path)

    sessions = SessionStore(
        credentials=seed.credentials,
        session_path=config.session_path,
        notifier=notifier,
        latency_seconds=config.latency_seconds,
    )
    repository = JobRepository(
        jobs=seed.jobs,
        applications=seed.applications,
        enforce_ownership=config.enforce_ownership,
        notifier=notifier,
        latency_seconds=config.latency_seconds,
    )
    return Board(sessions=sessions, repository=repository, config=config)


# ── Record Parsing ─────────────────────────────────────────────────────────

def _parse_user(raw: dict) -> CredentialRecord:
    actor = Actor(
        id=str(raw["id"]),
        name=raw["name"],
        email=raw["email"],
        role=Role(raw["role"]),
        location=str(raw.get("location") or ""),
    )
    return CredentialRecord.create(actor, str(raw["password"]))


def _parse_job(raw: dict) -> Job:
    return Job(
        id=str(raw["id"]),
        title=raw["title"],
        company=raw["company"],
        location=str(raw["location"]),
        description=raw["description"],
        salary=str(raw["salary"]),
        job_type=raw["job_type"],
        category=raw["category"],
        employer_id=str(raw["employer_id"]),
        requirements=[str(r) for r in raw.get("requirements", [])],
        posted_date=parse_timestamp(raw["posted_date"]),
        status=JobStatus(raw.get("status", "active")),
    )


def _parse_application(raw: dict) -> JobApplication:
    return JobApplication(
        id=str(raw["id"]),
        job_id=str(raw["job_id"]),
        seeker_id=str(raw["seeker_id"]),
        status=ApplicationStatus(raw.get("status", "applied")),
        applied_date=parse_timestamp(raw["applied_date"]),
        cover_letter=raw.get("cover_letter"),
    )
