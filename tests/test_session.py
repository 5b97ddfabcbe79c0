"""Tests for the session/identity store."""

import json

import pytest

from jobboard.errors import EmailAlreadyExists, InvalidCredentials, ValidationFailed
from jobboard.models import Actor, Role
from jobboard.notify import Notice
from jobboard.session import CredentialRecord, Registration, SessionStore, normalize_email


@pytest.fixture
def credentials() -> list[CredentialRecord]:
    return [
        CredentialRecord.create(
            Actor(id="1", name="Job Seeker", email="seeker@example.com",
                  role=Role.SEEKER, location="110001"),
            "password123",
        ),
        CredentialRecord.create(
            Actor(id="2", name="Employer", email="employer@example.com", role=Role.EMPLOYER),
            "password123",
        ),
    ]


@pytest.fixture
def notices() -> list[Notice]:
    return []


@pytest.fixture
def store(credentials, notices) -> SessionStore:
    return SessionStore(credentials=credentials, notifier=notices.append)


def test_starts_unauthenticated(store):
    assert store.current_actor is None
    assert store.token is None
    assert not store.is_authenticated


# ── Login ───────────────────────────────────────────────────────────────────


class TestLogin:
    def test_success(self, store, notices):
        assert store.login("seeker@example.com", "password123")
        assert store.is_authenticated
        assert store.current_actor.id == "1"
        assert store.current_actor.role is Role.SEEKER
        assert store.token.startswith("session-")
        assert notices[-1] == Notice("Login successful", "Welcome back, Job Seeker!")

    def test_actor_has_no_secret(self, store):
        store.login("seeker@example.com", "password123")
        assert "password" not in store.current_actor.to_dict()

    def test_email_is_normalized(self, store):
        assert store.login("  Seeker@Example.COM ", "password123")

    def test_wrong_password(self, store, notices):
        with pytest.raises(InvalidCredentials):
            store.login("seeker@example.com", "wrong")
        assert not store.is_authenticated
        assert notices[-1].destructive

    def test_unknown_email(self, store):
        with pytest.raises(InvalidCredentials):
            store.login("nobody@example.com", "password123")

    def test_failure_keeps_existing_session(self, store):
        store.login("employer@example.com", "password123")
        token = store.token

        with pytest.raises(InvalidCredentials):
            store.login("seeker@example.com", "wrong")

        assert store.current_actor.id == "2"
        assert store.token == token

    def test_new_login_gets_new_token(self, store):
        store.login("seeker@example.com", "password123")
        first = store.token
        store.login("seeker@example.com", "password123")
        assert store.token != first


# ── Registration ────────────────────────────────────────────────────────────


class TestRegister:
    def test_success_logs_in(self, store):
        assert store.register(Registration(
            name="New Person", email="new@example.com", password="pw", role="employer",
            location="560001",
        ))
        actor = store.current_actor
        assert actor.role is Role.EMPLOYER
        assert actor.location == "560001"
        assert actor.id == "3"
        assert store.is_authenticated

    def test_registered_user_can_log_in(self, store):
        store.register(Registration(name="N", email="n@example.com", password="pw", role=Role.SEEKER))
        store.logout()
        assert store.login("n@example.com", "pw")

    def test_duplicate_email(self, store):
        with pytest.raises(EmailAlreadyExists):
            store.register(Registration(
                name="Dup", email="seeker@example.com", password="pw", role="seeker",
            ))
        assert store.current_actor is None

    def test_duplicate_email_is_case_insensitive(self, store):
        with pytest.raises(EmailAlreadyExists):
            store.register(Registration(
                name="Dup", email="SEEKER@example.com", password="pw", role="seeker",
            ))

    def test_location_optional(self, store):
        store.register(Registration(name="A", email="a@example.com", password="pw", role="admin"))
        assert store.current_actor.location == ""

    def test_unknown_role(self, store):
        with pytest.raises(ValidationFailed):
            store.register(Registration(name="A", email="a@example.com", password="pw", role="boss"))

    def test_missing_fields(self, store):
        with pytest.raises(ValidationFailed) as exc_info:
            store.register(Registration(name="", email="a@example.com", password="", role="seeker"))
        assert exc_info.value.fields == ["name", "password"]

    def test_users_lists_directory(self, store):
        store.register(Registration(name="A", email="a@example.com", password="pw", role="admin"))
        assert [u.id for u in store.users()] == ["1", "2", "3"]

    def test_seed_duplicate_rejected(self, credentials):
        with pytest.raises(EmailAlreadyExists):
            SessionStore(credentials=credentials + [credentials[0]])


# ── Logout / Location ───────────────────────────────────────────────────────


class TestLogoutAndLocation:
    def test_logout_clears(self, store):
        store.login("seeker@example.com", "password123")
        store.logout()
        assert store.current_actor is None
        assert store.token is None
        assert not store.is_authenticated

    def test_logout_is_idempotent(self, store):
        store.logout()
        store.logout()
        assert not store.is_authenticated

    def test_update_location(self, store, notices):
        store.login("seeker@example.com", "password123")
        store.update_location("400001")
        assert store.current_actor.location == "400001"
        assert store.current_actor.role is Role.SEEKER
        assert notices[-1].title == "Location updated"

    def test_location_survives_relogin(self, store):
        store.login("seeker@example.com", "password123")
        store.update_location("400001")
        store.logout()
        store.login("seeker@example.com", "password123")
        assert store.current_actor.location == "400001"

    def test_update_location_without_session_is_noop(self, store, notices):
        store.update_location("400001")
        assert store.current_actor is None
        assert notices == []

    def test_blank_location_rejected(self, store):
        store.login("seeker@example.com", "password123")
        with pytest.raises(ValidationFailed):
            store.update_location("   ")
        assert store.current_actor.location == "110001"


# ── Persistence ─────────────────────────────────────────────────────────────


class TestPersistence:
    def test_login_persists_and_restores(self, credentials, tmp_path):
        path = tmp_path / "session.json"
        store = SessionStore(credentials=credentials, session_path=path)
        store.login("employer@example.com", "password123")

        data = json.loads(path.read_text())
        assert data["user"]["email"] == "employer@example.com"
        assert "password" not in data["user"]
        assert data["token"] == store.token

        fresh = SessionStore(credentials=credentials, session_path=path)
        assert fresh.restore()
        assert fresh.current_actor == store.current_actor
        assert fresh.token == store.token
        assert fresh.is_authenticated

    def test_location_update_persists(self, credentials, tmp_path):
        path = tmp_path / "session.json"
        store = SessionStore(credentials=credentials, session_path=path)
        store.login("seeker@example.com", "password123")
        store.update_location("700001")

        fresh = SessionStore(credentials=credentials, session_path=path)
        fresh.restore()
        assert fresh.current_actor.location == "700001"

    def test_logout_removes_session(self, credentials, tmp_path):
        path = tmp_path / "session.json"
        store = SessionStore(credentials=credentials, session_path=path)
        store.login("seeker@example.com", "password123")
        store.logout()

        assert not path.exists()
        assert not SessionStore(credentials=credentials, session_path=path).restore()

    def test_restore_without_path(self, store):
        assert store.restore() is False


def test_normalize_email():
    assert normalize_email("  A@B.com ") == "a@b.com"
    assert normalize_email(None) == ""


def test_delayed_logins_resolve_last_writer_wins(credentials, monkeypatch):
    sleeps: list[float] = []
    monkeypatch.setattr("jobboard.session.time.sleep", sleeps.append)
    store = SessionStore(credentials=credentials, latency_seconds=0.02)

    store.login("seeker@example.com", "password123")
    store.login("employer@example.com", "password123")

    assert store.current_actor.id == "2"
    assert sleeps == [0.02, 0.02]
