"""Tests for session persistence (atomic writes, backup recovery)."""

import json

import pytest

from jobboard.models import Actor, Role
from jobboard.storage import clear_session, load_session, save_session


@pytest.fixture
def actor() -> Actor:
    return Actor(id="2", name="Employer", email="employer@example.com",
                 role=Role.EMPLOYER, location="110001")


def test_save_and_load(actor, tmp_path):
    path = tmp_path / "nested" / "session.json"
    save_session(actor, "session-abc", path)

    loaded = load_session(path)
    assert loaded == (actor, "session-abc")
    assert not path.with_suffix(".json.tmp").exists()


def test_missing_file(tmp_path):
    assert load_session(tmp_path / "session.json") is None


def test_second_save_creates_backup(actor, tmp_path):
    path = tmp_path / "session.json"
    save_session(actor, "first", path)
    save_session(actor, "second", path)

    backup = json.loads(path.with_suffix(".json.bak").read_text())
    assert backup["token"] == "first"
    assert load_session(path)[1] == "second"


def test_corrupted_file_restored_from_backup(actor, tmp_path):
    path = tmp_path / "session.json"
    save_session(actor, "first", path)
    save_session(actor, "second", path)
    path.write_text("{not json")

    loaded = load_session(path)
    assert loaded == (actor, "first")
    # Primary is rewritten from the backup
    assert json.loads(path.read_text())["token"] == "first"


def test_corrupted_without_backup(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("garbage")
    assert load_session(path) is None


@pytest.mark.parametrize("payload", [
    {"user": None, "token": "t"},
    {"user": {"id": "1", "role": "seeker"}, "token": ""},
    {"user": {"id": "1", "role": "overlord"}, "token": "t"},
    ["not", "a", "dict"],
])
def test_incomplete_session_is_ignored(tmp_path, payload):
    path = tmp_path / "session.json"
    path.write_text(json.dumps(payload))
    assert load_session(path) is None


def test_clear_session(actor, tmp_path):
    path = tmp_path / "session.json"
    save_session(actor, "first", path)
    save_session(actor, "second", path)

    clear_session(path)
    clear_session(path)

    assert not path.exists()
    assert not path.with_suffix(".json.bak").exists()
