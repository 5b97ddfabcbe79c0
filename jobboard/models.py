"""Data models for the job board core.

Entities reference each other by id only (Job.employer_id, JobApplication.job_id,
JobApplication.seeker_id). The repository keeps the id -> entity indexes.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict, replace
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional


class Role(Enum):
    """Who an actor is. Fixed at registration."""

    SEEKER = "seeker"
    EMPLOYER = "employer"
    ADMIN = "admin"


class JobStatus(Enum):
    ACTIVE = "active"
    CLOSED = "closed"


class ApplicationStatus(Enum):
    """Application lifecycle. Employers may move between any two values."""

    APPLIED = "applied"
    UNDER_REVIEW = "under_review"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """Accept a datetime, a date or an ISO 8601 string and return an aware datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Actor:
    """The authenticated identity performing operations.

    Frozen. Location changes produce a new snapshot via ``with_location``.
    """

    id: str
    name: str
    email: str
    role: Role
    location: str = ""

    @property
    def is_seeker(self) -> bool:
        return self.role is Role.SEEKER

    @property
    def is_employer(self) -> bool:
        return self.role is Role.EMPLOYER

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def with_location(self, location: str) -> Actor:
        return replace(self, location=location)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "location": self.location,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Actor:
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            email=data.get("email", ""),
            role=Role(data["role"]),
            location=data.get("location") or "",
        )


@dataclass
class Job:
    """A listing posted by one employer."""

    id: str
    title: str
    company: str
    location: str
    description: str
    salary: str
    job_type: str  # e.g. "Full-time", "Contract"
    category: str  # e.g. "Information Technology"
    employer_id: str
    requirements: list[str] = field(default_factory=list)
    posted_date: datetime = field(default_factory=utcnow)
    status: JobStatus = JobStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status is JobStatus.ACTIVE

    def to_dict(self) -> dict:
        """Serialize using the external (camelCase) field names."""
        return {
            "id": self.id,
            "title": self.title,
            "company": self.company,
            "location": self.location,
            "description": self.description,
            "requirements": list(self.requirements),
            "salary": self.salary,
            "jobType": self.job_type,
            "category": self.category,
            "postedDate": self.posted_date.isoformat(),
            "employerId": self.employer_id,
            "status": self.status.value,
        }

    def __repr__(self) -> str:
        return (
            f"Job(id={self.id!r}, title={self.title!r}, company={self.company!r}, "
            f"status={self.status.value!r})"
        )


@dataclass
class JobApplication:
    """A seeker's application to one job."""

    id: str
    job_id: str
    seeker_id: str
    status: ApplicationStatus = ApplicationStatus.APPLIED
    applied_date: datetime = field(default_factory=utcnow)
    cover_letter: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "jobId": self.job_id,
            "seekerId": self.seeker_id,
            "status": self.status.value,
            "appliedDate": self.applied_date.isoformat(),
            "coverLetter": self.cover_letter,
        }


@dataclass
class JobFilters:
    """Search criteria. Empty fields impose no constraint."""

    location: str = ""
    category: str = ""
    job_type: str = ""
    search: str = ""

    @property
    def is_empty(self) -> bool:
        return not any(asdict(self).values())


class IdSequence:
    """Hands out increasing numeric string ids and never repeats one.

    Ids loaded from elsewhere (seed data) are fed through ``observe`` so the
    sequence continues after the highest of them.
    """

    def __init__(self, start: int = 1):
        self._next = start

    def observe(self, existing_id: str) -> None:
        if str(existing_id).isdigit():
            self._next = max(self._next, int(existing_id) + 1)

    def next_id(self) -> str:
        value = str(self._next)
        self._next += 1
        return value
