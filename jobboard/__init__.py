"""In-memory job board core: sessions, job listings and applications."""

from jobboard.errors import (
    AlreadyApplied,
    EmailAlreadyExists,
    InvalidCredentials,
    JobBoardError,
    NotFound,
    PermissionDenied,
    ValidationFailed,
)
from jobboard.models import (
    Actor,
    ApplicationStatus,
    Job,
    JobApplication,
    JobFilters,
    JobStatus,
    Role,
)
from jobboard.repository import JobRepository
from jobboard.session import Registration, SessionStore

__all__ = [
    "Actor",
    "AlreadyApplied",
    "ApplicationStatus",
    "EmailAlreadyExists",
    "InvalidCredentials",
    "Job",
    "JobApplication",
    "JobBoardError",
    "JobFilters",
    "JobRepository",
    "JobStatus",
    "NotFound",
    "PermissionDenied",
    "Registration",
    "Role",
    "SessionStore",
    "ValidationFailed",
]
