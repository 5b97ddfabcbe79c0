"""Session/identity store: who is acting now, and with what role.

Holds the credential directory and at most one live ``Actor`` with its
opaque token. The repository never reads this store directly; callers pass
``store.current_actor`` into each repository operation.

Emails are normalized (stripped, lower-cased) both when registering and when
logging in, so ``Seeker@Example.com`` and ``seeker@example.com`` are the
same account.

Roles are taken from the registrant as given. Nothing here issues or
verifies roles server-side.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from jobboard.errors import EmailAlreadyExists, InvalidCredentials, ValidationFailed
from jobboard.models import Actor, IdSequence, Role
from jobboard.notify import Notifier, Publisher
from jobboard.storage import clear_session, load_session, save_session

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _hash_secret(password: str, salt: str) -> str:
    return hashlib.sha256(f"{salt}:{password}".encode("utf-8")).hexdigest()


@dataclass
class Registration:
    """Profile submitted by someone signing up."""

    name: str
    email: str
    password: str
    role: Role | str
    location: str = ""


@dataclass
class CredentialRecord:
    """A directory entry: the actor's public profile plus a salted secret hash."""

    actor: Actor
    salt: str
    secret_hash: str

    @classmethod
    def create(cls, actor: Actor, password: str) -> CredentialRecord:
        salt = secrets.token_hex(8)
        return cls(actor=actor, salt=salt, secret_hash=_hash_secret(password, salt))

    def check(self, password: str) -> bool:
        return hmac.compare_digest(self.secret_hash, _hash_secret(password, self.salt))


class SessionStore(Publisher):
    """Zero-or-one live actor plus the credential directory."""

    def __init__(
        self,
        credentials: Iterable[CredentialRecord] = (),
        session_path: str | Path | None = None,
        notifier: Optional[Notifier] = None,
        latency_seconds: float = 0.0,
    ):
        super().__init__(notifier)
        self.session_path = Path(session_path) if session_path else None
        self.latency_seconds = latency_seconds

        self._directory: dict[str, CredentialRecord] = {}
        self._ids = IdSequence()
        for record in credentials:
            self.add_credential(record)

        self._actor: Optional[Actor] = None
        self._token: Optional[str] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def current_actor(self) -> Optional[Actor]:
        return self._actor

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._actor is not None and self._token is not None

    def users(self) -> list[Actor]:
        """All registered actors, in registration order."""
        return [record.actor for record in self._directory.values()]

    def add_credential(self, record: CredentialRecord) -> None:
        """Add a directory entry (used when seeding)."""
        email = normalize_email(record.actor.email)
        if email in self._directory:
            raise EmailAlreadyExists(f"Email is already registered: {email}")
        self._directory[email] = record
        self._ids.observe(record.actor.id)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> bool:
        """Establish a session for the matching credential record.

        Raises InvalidCredentials on mismatch. A failed attempt leaves any
        existing session in place.
        """
        self._pause()
        record = self._directory.get(normalize_email(email))
        if record is None or not record.check(password):
            logger.warning("Login failed for %s", normalize_email(email))
            raise self._fail(InvalidCredentials("Invalid email or password"))

        self._establish(record.actor)
        logger.info("Logged in %s (role=%s)", record.actor.email, record.actor.role.value)
        self._publish("Login successful", f"Welcome back, {record.actor.name}!")
        return True

    def register(self, profile: Registration) -> bool:
        """Create an account and log it in.

        Raises EmailAlreadyExists if the (normalized) email is taken and
        ValidationFailed for missing fields or an unknown role.
        """
        self._pause()
        missing = [
            name for name in ("name", "email", "password")
            if not str(getattr(profile, name) or "").strip()
        ]
        if missing:
            raise self._fail(ValidationFailed(
                f"Missing required fields: {', '.join(missing)}", fields=missing,
            ))

        try:
            role = Role(profile.role)
        except ValueError:
            raise self._fail(ValidationFailed(
                f"Unknown role: {profile.role!r}", fields=["role"],
            )) from None

        email = normalize_email(profile.email)
        if email in self._directory:
            logger.warning("Registration rejected, email exists: %s", email)
            raise self._fail(EmailAlreadyExists("Email is already registered"))

        actor = Actor(
            id=self._ids.next_id(),
            name=profile.name.strip(),
            email=email,
            role=role,
            location=(profile.location or "").strip(),
        )
        self._directory[email] = CredentialRecord.create(actor, profile.password)
        self._establish(actor)
        logger.info("Registered %s as %s (id=%s)", email, role.value, actor.id)
        self._publish("Registration successful", f"Welcome, {actor.name}!")
        return True

    def logout(self) -> None:
        """Clear the live actor and token. Idempotent."""
        was_live = self._actor is not None
        self._actor = None
        self._token = None
        if self.session_path:
            clear_session(self.session_path)
        if was_live:
            logger.info("Logged out")
        self._publish("Logged out", "You have been successfully logged out.")

    def update_location(self, new_location: str) -> None:
        """Change the live actor's location. Does nothing when nobody is logged in."""
        if self._actor is None:
            logger.debug("update_location ignored: no live session")
            return

        location = (new_location or "").strip()
        if not location:
            raise self._fail(ValidationFailed("Location cannot be empty", fields=["location"]))

        self._actor = self._actor.with_location(location)
        record = self._directory.get(normalize_email(self._actor.email))
        if record is not None:
            record.actor = self._actor
        self._persist()
        logger.info("Updated location for %s to %s", self._actor.email, location)
        self._publish("Location updated", f"Your location has been updated to {location}.")

    def restore(self) -> bool:
        """Load a persisted session, if any. Returns True when one was restored."""
        if not self.session_path:
            return False
        stored = load_session(self.session_path)
        if stored is None:
            return False
        self._actor, self._token = stored
        logger.debug("Restored session for %s", self._actor.email)
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _establish(self, actor: Actor) -> None:
        self._actor = actor
        self._token = f"session-{uuid.uuid4().hex}"
        self._persist()

    def _persist(self) -> None:
        if self.session_path and self._actor is not None and self._token is not None:
            save_session(self._actor, self._token, self.session_path)

    def _pause(self) -> None:
        if self.latency_seconds > 0:
            time.sleep(self.latency_seconds)
