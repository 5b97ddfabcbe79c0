"""Command-line front end for the job board.

Usage:
    python -m jobboard.main login seeker@example.com password123
    python -m jobboard.main search --category Marketing
    python -m jobboard.main search --query developer --location 110001
    python -m jobboard.main apply 4 --cover-letter "I'm interested"
    python -m jobboard.main close 2
    python -m jobboard.main status 1 accepted
    python -m jobboard.main script demo.txt
    python -m jobboard.main dashboard
    python -m jobboard.main logout

The session (current actor + token) persists between invocations. Jobs and
applications are re-seeded each time, so mutations only last for one run.
Use ``script FILE`` to run several commands against the same board.
"""

from __future__ import annotations

import argparse
import logging
import shlex
import sys
from pathlib import Path
from typing import Optional

from jobboard.config import load_config
from jobboard.errors import JobBoardError, ValidationFailed
from jobboard.filters import filters_from_mapping
from jobboard.models import ApplicationStatus, Job, JobApplication, JobStatus, Role
from jobboard.notify import Notice, notice_for_error
from jobboard.repository import REQUIRED_JOB_FIELDS
from jobboard.seed import Board, build_board
from jobboard.session import Registration
from jobboard.stats import (
    applicant_buckets,
    employer_summary,
    platform_stats,
    seeker_buckets,
    seeker_summary,
)

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the CLI."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _add_job_fields(p: argparse.ArgumentParser, default: Optional[str]) -> None:
    for name in REQUIRED_JOB_FIELDS:
        p.add_argument("--" + name.replace("_", "-"), dest=name, default=default)
    p.add_argument(
        "--requirement",
        dest="requirements",
        action="append",
        default=None,
        help="Repeat once per requirement",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Job board: browse and apply to listings, manage applicants."
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug-level logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login", help="Log in with email and password")
    p.add_argument("email")
    p.add_argument("password")

    p = sub.add_parser("register", help="Create an account and log in")
    p.add_argument("name")
    p.add_argument("email")
    p.add_argument("password")
    p.add_argument("--role", choices=[r.value for r in Role], required=True)
    p.add_argument("--location", default="")

    sub.add_parser("logout", help="End the current session")
    sub.add_parser("whoami", help="Show the current actor")

    p = sub.add_parser("location", help="Update your location (PIN code)")
    p.add_argument("pin")

    p = sub.add_parser("search", help="Search job listings")
    p.add_argument("--location", default=None, help="Defaults to your own location")
    p.add_argument("--anywhere", action="store_true", help="Ignore your own location")
    p.add_argument("--category", default="")
    p.add_argument("--job-type", default="")
    p.add_argument("--query", "-q", default="", help="Free text (title, company, description)")

    p = sub.add_parser("show", help="Show one job")
    p.add_argument("job_id")

    p = sub.add_parser("apply", help="Apply to a job (seekers)")
    p.add_argument("job_id")
    p.add_argument("--cover-letter", default=None)

    sub.add_parser("applications", help="List your applications (seekers)")

    p = sub.add_parser("applicants", help="List applicants for one of your jobs (employers)")
    p.add_argument("job_id")

    p = sub.add_parser("create-job", help="Post a new job listing (employers)")
    _add_job_fields(p, default="")

    p = sub.add_parser("update-job", help="Change fields of one of your listings (employers)")
    p.add_argument("job_id")
    _add_job_fields(p, default=None)
    p.add_argument("--status", choices=[s.value for s in JobStatus], default=None)

    p = sub.add_parser("close", help="Stop accepting applications for a job (employers)")
    p.add_argument("job_id")

    p = sub.add_parser("delete", help="Delete a job and its applications (employers)")
    p.add_argument("job_id")

    p = sub.add_parser("status", help="Set an application's status (employers)")
    p.add_argument("application_id")
    p.add_argument("status", choices=[s.value for s in ApplicationStatus])

    p = sub.add_parser("script", help="Run commands from a file, one per line, in one session")
    p.add_argument("file")

    sub.add_parser("dashboard", help="Role-specific summary")
    sub.add_parser("options", help="List search categories, job types and locations")

    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


# ── Rendering ───────────────────────────────────────────────────────────────


def format_job(job: Job) -> str:
    return (
        f"{job.id:>4}  {job.title} @ {job.company}  [{job.location}]  "
        f"{job.job_type} / {job.category}  ({job.status.value})"
    )


def format_application(application: JobApplication, board: Board) -> str:
    job = board.repository.get_by_id(application.job_id)
    title = job.title if job else f"job {application.job_id}"
    return (
        f"{application.id:>4}  {title}  seeker={application.seeker_id}  "
        f"{application.status.value}  {application.applied_date.date().isoformat()}"
    )


def print_jobs(jobs: list[Job]) -> None:
    if not jobs:
        print("No jobs found.")
    for job in jobs:
        print(format_job(job))


# ── Commands ────────────────────────────────────────────────────────────────


def run_command(args: argparse.Namespace, board: Board) -> None:
    sessions, repo = board.sessions, board.repository
    actor = sessions.current_actor

    if args.command == "login":
        sessions.login(args.email, args.password)
    elif args.command == "register":
        sessions.register(Registration(
            name=args.name,
            email=args.email,
            password=args.password,
            role=args.role,
            location=args.location,
        ))
    elif args.command == "logout":
        sessions.logout()
    elif args.command == "whoami":
        if actor is None:
            print("Not logged in.")
        else:
            print(f"{actor.name} <{actor.email}>  role={actor.role.value}  "
                  f"location={actor.location or '-'}")
    elif args.command == "location":
        if actor is None:
            print("Log in to set your location.")
        else:
            sessions.update_location(args.pin)
    elif args.command == "search":
        location = args.location
        if location is None:
            location = "" if args.anywhere or actor is None else actor.location
        filters = filters_from_mapping({
            "location": location,
            "category": args.category,
            "job_type": args.job_type,
            "search": args.query,
        })
        print_jobs(repo.search(filters))
    elif args.command == "show":
        _print_job_details(args.job_id, board)
    elif args.command == "apply":
        job = repo.get_by_id(args.job_id)
        if actor is not None and actor.is_seeker and job is not None and not job.is_active:
            raise ValidationFailed(
                "This job is no longer accepting applications.",
                fields=["status"],
                title="Job Closed",
            )
        repo.apply_to_job(actor, args.job_id, args.cover_letter)
    elif args.command == "applications":
        _print_applications(board)
    elif args.command == "applicants":
        _print_applicants(args.job_id, board)
    elif args.command == "create-job":
        data = {name: getattr(args, name) for name in REQUIRED_JOB_FIELDS}
        data["requirements"] = args.requirements or []
        job_id = repo.create_job(actor, data)
        print(f"Created job {job_id}.")
    elif args.command == "update-job":
        changes = {
            name: getattr(args, name)
            for name in REQUIRED_JOB_FIELDS + ("requirements", "status")
            if getattr(args, name) is not None
        }
        if not changes:
            print("Nothing to update.")
            return
        repo.update_job(actor, args.job_id, changes)
    elif args.command == "close":
        repo.close_job(actor, args.job_id)
    elif args.command == "delete":
        repo.delete_job(actor, args.job_id)
    elif args.command == "status":
        repo.update_application_status(actor, args.application_id, args.status)
    elif args.command == "script":
        run_script(args.file, board)
    elif args.command == "dashboard":
        _print_dashboard(board)
    elif args.command == "options":
        print("Categories: " + ", ".join(board.config.categories))
        print("Job types:  " + ", ".join(board.config.job_types))
        print("Locations:  " + ", ".join(board.config.locations))


def run_script(path: str, board: Board) -> None:
    """Run each non-blank, non-comment line of ``path`` as a command.

    All lines share one board, so jobs created early in the script are
    visible later on. The first failing command stops the script.
    """
    parser = build_parser()
    lines = Path(path).read_text(encoding="utf-8").splitlines()
    for lineno, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        args = parser.parse_args(shlex.split(line))
        if args.command == "script":
            raise ValidationFailed(
                f"{path}:{lineno}: scripts cannot run other scripts", fields=["command"],
            )
        print(f"> {line}")
        logger.debug("Script %s line %d: %s", path, lineno, args.command)
        run_command(args, board)


def _print_job_details(job_id: str, board: Board) -> None:
    repo, actor = board.repository, board.sessions.current_actor
    job = repo.get_by_id(job_id)
    if job is None:
        print(f"Job {job_id} not found.")
        return
    print(format_job(job))
    print(f"      Salary: {job.salary}")
    print(f"      Posted: {job.posted_date.date().isoformat()}")
    print(f"      {job.description}")
    for requirement in job.requirements:
        print(f"        - {requirement}")

    mine = [a for a in repo.applications_for_actor(actor) if a.job_id == job.id]
    if mine:
        print(f"      Already applied ({mine[0].status.value})")
    elif not job.is_active:
        print("      No longer accepting applications.")


def _print_applications(board: Board) -> None:
    applications = board.repository.applications_for_actor(board.sessions.current_actor)
    if not applications:
        print("No applications.")
        return
    for name, group in seeker_buckets(applications).items():
        print(f"{name.capitalize()} ({len(group)})")
        for application in group:
            print("  " + format_application(application, board))


def _print_applicants(job_id: str, board: Board) -> None:
    repo, actor = board.repository, board.sessions.current_actor
    own_ids = {j.id for j in repo.jobs_for_employer(actor)}
    if job_id not in own_ids:
        print(f"Job {job_id} is not one of your listings.")
        return
    for name, group in applicant_buckets(repo.applications_for_job(job_id)).items():
        print(f"{name.capitalize()} ({len(group)})")
        for application in group:
            print("  " + format_application(application, board))


def _print_dashboard(board: Board) -> None:
    repo, actor = board.repository, board.sessions.current_actor
    limit = board.config.dashboard_limit

    if actor is None:
        print("Log in to see your dashboard.")
    elif actor.is_seeker:
        summary = seeker_summary(repo, actor, limit=limit)
        print(f"Applications: {summary.total} (applied {summary.applied}, "
              f"under review {summary.under_review}, accepted {summary.accepted}, "
              f"rejected {summary.rejected})")
        print("Jobs near you:")
        print_jobs(summary.nearby_jobs)
        print("Recommended:")
        print_jobs(summary.recommended_jobs)
    elif actor.is_employer:
        summary = employer_summary(
            repo, actor, recent_days=board.config.recent_days, jobs_limit=limit,
        )
        print(f"Jobs: {summary.total_jobs} ({summary.active_jobs} active)")
        print(f"Applicants: {summary.total_applicants} "
              f"({summary.new_applicants} in the last {board.config.recent_days} days)")
        print("Recent jobs:")
        print_jobs(summary.recent_jobs)
        print("Recent applications:")
        for application in summary.recent_applications:
            print(format_application(application, board))
    else:
        stats = platform_stats(repo, board.sessions, actor)
        print(f"Users: {stats.total_users} ({stats.employers} employers, "
              f"{stats.job_seekers} job seekers, {stats.admins} admins)")
        print(f"Jobs: {stats.total_jobs} ({stats.active_jobs} active, {stats.closed_jobs} closed)")
        print(f"Applications: {stats.total_applications}")


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    config = load_config(args.config)
    setup_logging("DEBUG" if args.verbose else config.log_level)

    shown: list[Notice] = []

    def print_notice(notice: Notice) -> None:
        shown.append(notice)
        print(notice)

    board = build_board(config, notifier=print_notice)
    board.sessions.restore()

    try:
        run_command(args, board)
    except JobBoardError as exc:
        notice = notice_for_error(exc)
        if notice not in shown:
            print(notice)
        logger.debug("Command %s failed: %s", args.command, exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
