"""Exceptions raised by the session store and the job repository.

Every error is recoverable: the failing operation leaves state untouched and
the caller decides what to show. ``title`` is the short heading a front end
displays, ``str(exc)`` the description.
"""

from __future__ import annotations


class JobBoardError(Exception):
    """Base class for all job board failures."""

    title = "Error"

    def __init__(self, message: str = "", *, title: str | None = None):
        super().__init__(message or self.title)
        if title:
            self.title = title


class PermissionDenied(JobBoardError):
    """The actor's role does not allow the requested mutation."""

    title = "Permission Denied"


class NotFound(JobBoardError):
    """A referenced job or application does not exist (or is hidden)."""

    title = "Not Found"


class AlreadyApplied(JobBoardError):
    title = "Already Applied"


class InvalidCredentials(JobBoardError):
    title = "Login failed"


class EmailAlreadyExists(JobBoardError):
    title = "Registration failed"


class ValidationFailed(JobBoardError):
    """A required field is missing or a value is outside its allowed set."""

    title = "Validation failed"

    def __init__(self, message: str = "", *, fields: list[str] | None = None, title: str | None = None):
        super().__init__(message, title=title)
        self.fields = list(fields or [])
