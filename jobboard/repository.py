"""Job/application repository: the authoritative in-memory store.

Queries are open to anyone, including anonymous callers (``actor=None``).
Every mutation takes the acting ``Actor`` explicitly and re-checks it at call
time, in this order:

  1. Role          -> PermissionDenied
  2. Existence     -> NotFound
  3. Ownership     -> NotFound (another employer's job is reported as missing)
  4. Payload       -> ValidationFailed

Ownership is only checked when ``enforce_ownership`` is on; with it off the
repository trusts the employer role alone.

Jobs and applications are kept in insertion-ordered dicts keyed by id;
applications point at jobs and seekers by id only. Callers always receive
copies, so the only way to change stored state is through the operations
below.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional

from jobboard.errors import AlreadyApplied, NotFound, PermissionDenied, ValidationFailed
from jobboard.filters import apply_filters
from jobboard.models import (
    Actor,
    ApplicationStatus,
    IdSequence,
    Job,
    JobApplication,
    JobFilters,
    JobStatus,
    Role,
    utcnow,
)
from jobboard.notify import Notifier, Publisher

logger = logging.getLogger(__name__)

REQUIRED_JOB_FIELDS = (
    "title", "company", "location", "description", "salary", "job_type", "category",
)
EDITABLE_JOB_FIELDS = REQUIRED_JOB_FIELDS + ("requirements", "status")
IMMUTABLE_JOB_FIELDS = ("id", "employer_id", "posted_date")

# External (camelCase) spellings accepted in job payloads
_FIELD_ALIASES = {
    "jobType": "job_type",
    "employerId": "employer_id",
    "postedDate": "posted_date",
}


class JobRepository(Publisher):
    """In-memory jobs and applications with role-gated mutations."""

    def __init__(
        self,
        jobs: Iterable[Job] = (),
        applications: Iterable[JobApplication] = (),
        *,
        enforce_ownership: bool = True,
        notifier: Optional[Notifier] = None,
        latency_seconds: float = 0.0,
        clock: Callable[[], datetime] = utcnow,
    ):
        super().__init__(notifier)
        self.enforce_ownership = enforce_ownership
        self.latency_seconds = latency_seconds
        self._clock = clock

        self._jobs: dict[str, Job] = {}
        self._applications: dict[str, JobApplication] = {}
        self._job_ids = IdSequence()
        self._application_ids = IdSequence()

        for job in jobs:
            self._load_job(job)
        for application in applications:
            self._load_application(application)

        logger.debug(
            "Repository ready with %d jobs and %d applications (ownership checks %s)",
            len(self._jobs), len(self._applications),
            "on" if enforce_ownership else "off",
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def jobs(self) -> list[Job]:
        """Every stored job, in insertion order."""
        return [_copy_job(j) for j in self._jobs.values()]

    @property
    def applications(self) -> list[JobApplication]:
        return [replace(a) for a in self._applications.values()]

    def search(self, filters: JobFilters | None = None) -> list[Job]:
        self._pause()
        return [_copy_job(j) for j in apply_filters(self._jobs.values(), filters)]

    def get_by_id(self, job_id: str) -> Optional[Job]:
        self._pause()
        job = self._jobs.get(str(job_id))
        return _copy_job(job) if job else None

    def get_application(self, application_id: str) -> Optional[JobApplication]:
        application = self._applications.get(str(application_id))
        return replace(application) if application else None

    def applications_for_job(self, job_id: str) -> list[JobApplication]:
        job_id = str(job_id)
        return [replace(a) for a in self._applications.values() if a.job_id == job_id]

    def applications_for_actor(self, actor: Optional[Actor]) -> list[JobApplication]:
        """A seeker's own applications. Empty for anyone who is not a seeker."""
        if actor is None or not actor.is_seeker:
            return []
        return [replace(a) for a in self._applications.values() if a.seeker_id == actor.id]

    def jobs_for_employer(self, actor: Optional[Actor]) -> list[Job]:
        """An employer's own listings. Empty for anyone who is not an employer."""
        if actor is None or not actor.is_employer:
            return []
        return [_copy_job(j) for j in self._jobs.values() if j.employer_id == actor.id]

    # ------------------------------------------------------------------
    # Job mutations
    # ------------------------------------------------------------------

    def create_job(self, actor: Optional[Actor], data: Mapping[str, Any]) -> str:
        """Post a new listing owned by ``actor``. Returns the new job id."""
        self._require_role(actor, Role.EMPLOYER, "Only employers can create job listings.")
        self._pause()

        fields = self._validate_new_job(_normalize_keys(data))
        job = Job(
            id=self._job_ids.next_id(),
            employer_id=actor.id,
            posted_date=self._clock(),
            status=JobStatus.ACTIVE,
            **fields,
        )
        self._jobs[job.id] = job

        logger.info("Employer %s created job %s (%r)", actor.id, job.id, job.title)
        self._publish("Success", "Job listing created successfully.")
        return job.id

    def update_job(self, actor: Optional[Actor], job_id: str, changes: Mapping[str, Any]) -> bool:
        """Apply a partial update to a job. Status may move in either direction."""
        self._require_role(actor, Role.EMPLOYER, "Only employers can update job listings.")
        self._pause()

        job = self._require_owned_job(actor, job_id)
        updates = self._validate_job_changes(_normalize_keys(changes))
        for name, value in updates.items():
            setattr(job, name, value)

        logger.info("Employer %s updated job %s: %s", actor.id, job.id, sorted(updates))
        self._publish("Success", "Job listing updated successfully.")
        return True

    def close_job(self, actor: Optional[Actor], job_id: str) -> bool:
        """Shorthand for the product flow ``active -> closed``."""
        return self.update_job(actor, job_id, {"status": JobStatus.CLOSED})

    def delete_job(self, actor: Optional[Actor], job_id: str) -> bool:
        """Remove a job together with every application that references it."""
        self._require_role(actor, Role.EMPLOYER, "Only employers can delete job listings.")
        self._pause()

        job = self._require_owned_job(actor, job_id)
        del self._jobs[job.id]

        orphaned = [a.id for a in self._applications.values() if a.job_id == job.id]
        for application_id in orphaned:
            del self._applications[application_id]

        logger.info(
            "Employer %s deleted job %s (cascaded %d applications)",
            actor.id, job.id, len(orphaned),
        )
        self._publish("Success", "Job listing deleted successfully.")
        return True

    # ------------------------------------------------------------------
    # Application mutations
    # ------------------------------------------------------------------

    def apply_to_job(
        self,
        actor: Optional[Actor],
        job_id: str,
        cover_letter: Optional[str] = None,
    ) -> bool:
        """Submit the seeker's application. One application per (job, seeker)."""
        self._require_role(actor, Role.SEEKER, "Only job seekers can apply to jobs.")
        self._pause()

        job_id = str(job_id)
        if job_id not in self._jobs:
            raise self._fail(NotFound(f"Job {job_id} not found"))

        if self._find_application(job_id, actor.id) is not None:
            logger.warning("Seeker %s already applied to job %s", actor.id, job_id)
            raise self._fail(AlreadyApplied("You have already applied to this job."))

        application = JobApplication(
            id=self._application_ids.next_id(),
            job_id=job_id,
            seeker_id=actor.id,
            status=ApplicationStatus.APPLIED,
            applied_date=self._clock(),
            cover_letter=(cover_letter or "").strip() or None,
        )
        self._applications[application.id] = application

        logger.info("Seeker %s applied to job %s (application %s)", actor.id, job_id, application.id)
        self._publish("Application Submitted", "Your application has been submitted successfully.")
        return True

    def update_application_status(
        self,
        actor: Optional[Actor],
        application_id: str,
        status: ApplicationStatus | str,
    ) -> bool:
        """Move an application to any of the four statuses (no terminal state)."""
        self._require_role(actor, Role.EMPLOYER, "Only employers can update application status.")
        self._pause()

        application = self._applications.get(str(application_id))
        if application is None:
            raise self._fail(NotFound(f"Application {application_id} not found"))

        job = self._jobs.get(application.job_id)
        if job is None or not self._may_manage(actor, job):
            raise self._fail(NotFound(f"Application {application_id} not found"))

        try:
            new_status = ApplicationStatus(status)
        except ValueError:
            raise self._fail(ValidationFailed(
                f"Unknown application status: {status!r}", fields=["status"],
            )) from None

        previous = application.status
        application.status = new_status

        logger.info(
            "Employer %s moved application %s from %s to %s",
            actor.id, application.id, previous.value, new_status.value,
        )
        self._publish("Status Updated", "Application status updated successfully.")
        return True

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------

    def _require_role(self, actor: Optional[Actor], role: Role, message: str) -> None:
        if actor is None or actor.role is not role:
            logger.warning(
                "Permission denied for %s (needs %s)",
                actor.id if actor else "anonymous", role.value,
            )
            raise self._fail(PermissionDenied(message))

    @staticmethod
    def owns(actor: Actor, job: Job) -> bool:
        """Ownership predicate: the actor is the employer who posted ``job``."""
        return job.employer_id == actor.id

    def _may_manage(self, actor: Actor, job: Job) -> bool:
        return not self.enforce_ownership or self.owns(actor, job)

    def _require_owned_job(self, actor: Actor, job_id: str) -> Job:
        job = self._jobs.get(str(job_id))
        if job is None:
            raise self._fail(NotFound(f"Job {job_id} not found"))
        if not self._may_manage(actor, job):
            logger.warning("Employer %s is not the owner of job %s", actor.id, job.id)
            raise self._fail(NotFound(f"Job {job_id} not found"))
        return job

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate_new_job(self, data: dict[str, Any]) -> dict[str, Any]:
        forbidden = [k for k in data if k not in EDITABLE_JOB_FIELDS or k == "status"]
        if forbidden:
            raise self._fail(ValidationFailed(
                f"Fields not accepted when creating a job: {', '.join(sorted(forbidden))}",
                fields=forbidden,
            ))

        missing = [f for f in REQUIRED_JOB_FIELDS if not _clean_text(data.get(f))]
        if missing:
            raise self._fail(ValidationFailed(
                f"Missing required fields: {', '.join(missing)}", fields=missing,
            ))

        fields = {f: _clean_text(data[f]) for f in REQUIRED_JOB_FIELDS}
        fields["requirements"] = self._validate_requirements(data.get("requirements", []))
        return fields

    def _validate_job_changes(self, changes: dict[str, Any]) -> dict[str, Any]:
        immutable = [k for k in changes if k in IMMUTABLE_JOB_FIELDS]
        if immutable:
            raise self._fail(ValidationFailed(
                f"Fields cannot be changed: {', '.join(sorted(immutable))}", fields=immutable,
            ))
        unknown = [k for k in changes if k not in EDITABLE_JOB_FIELDS]
        if unknown:
            raise self._fail(ValidationFailed(
                f"Unknown job fields: {', '.join(sorted(unknown))}", fields=unknown,
            ))

        updates: dict[str, Any] = {}
        for name, value in changes.items():
            if name == "status":
                try:
                    updates[name] = JobStatus(value)
                except ValueError:
                    raise self._fail(ValidationFailed(
                        f"Unknown job status: {value!r}", fields=["status"],
                    )) from None
            elif name == "requirements":
                updates[name] = self._validate_requirements(value)
            else:
                text = _clean_text(value)
                if not text:
                    raise self._fail(ValidationFailed(f"{name} cannot be empty", fields=[name]))
                updates[name] = text
        return updates

    def _validate_requirements(self, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str) or not isinstance(value, (list, tuple)):
            raise self._fail(ValidationFailed(
                "requirements must be a list of strings", fields=["requirements"],
            ))
        return [str(item).strip() for item in value if str(item).strip()]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _find_application(self, job_id: str, seeker_id: str) -> Optional[JobApplication]:
        for application in self._applications.values():
            if application.job_id == job_id and application.seeker_id == seeker_id:
                return application
        return None

    def _load_job(self, job: Job) -> None:
        if job.id in self._jobs:
            raise ValueError(f"Duplicate job id in seed data: {job.id}")
        self._jobs[job.id] = _copy_job(job)
        self._job_ids.observe(job.id)

    def _load_application(self, application: JobApplication) -> None:
        if application.job_id not in self._jobs:
            raise ValueError(
                f"Application {application.id} references unknown job {application.job_id}"
            )
        if application.id in self._applications:
            raise ValueError(f"Duplicate application id in seed data: {application.id}")
        if self._find_application(application.job_id, application.seeker_id) is not None:
            raise ValueError(
                f"Seeker {application.seeker_id} has two applications to job {application.job_id}"
            )
        self._applications[application.id] = replace(application)
        self._application_ids.observe(application.id)

    def _pause(self) -> None:
        if self.latency_seconds > 0:
            time.sleep(self.latency_seconds)


def _copy_job(job: Job) -> Job:
    return replace(job, requirements=list(job.requirements))


def _normalize_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    return {_FIELD_ALIASES.get(k, k): v for k, v in dict(data).items()}


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
