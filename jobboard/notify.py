"""User-facing notices for the job board core.

The session store and the repository publish one ``Notice`` per outcome
(success or failure). A front end passes in a ``Notifier`` to receive them;
without one, notices are only logged.
"""

from __future__ import annotations

import logging
from typing import Callable, NamedTuple, Optional

from jobboard.errors import JobBoardError

logger = logging.getLogger(__name__)


class Notice(NamedTuple):
    """A message a front end should show to the user."""

    title: str
    description: str
    destructive: bool = False

    def __str__(self) -> str:
        marker = "!" if self.destructive else "*"
        return f"[{marker}] {self.title}: {self.description}"


Notifier = Callable[[Notice], None]


def log_notifier(notice: Notice) -> None:
    """Default notifier: route notices into the log."""
    if notice.destructive:
        logger.warning("%s: %s", notice.title, notice.description)
    else:
        logger.info("%s: %s", notice.title, notice.description)


def notice_for_error(exc: JobBoardError) -> Notice:
    return Notice(exc.title, str(exc), destructive=True)


class Publisher:
    """Small mixin that owns an optional notifier."""

    def __init__(self, notifier: Optional[Notifier] = None):
        self.notifier: Notifier = notifier or log_notifier

    def _publish(self, title: str, description: str) -> None:
        self.notifier(Notice(title, description))

    def _fail(self, exc: JobBoardError) -> JobBoardError:
        """Publish ``exc`` as a destructive notice and hand it back for raising."""
        self.notifier(notice_for_error(exc))
        return exc
