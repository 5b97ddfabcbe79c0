"""Tests for seed loading and board wiring."""

import pytest
import yaml

from jobboard.config import BoardConfig, load_config
from jobboard.errors import AlreadyApplied
from jobboard.models import ApplicationStatus, JobStatus, Role
from jobboard.seed import SeedData, build_board, load_seed
from jobboard.session import Registration


def test_project_seed_loads():
    """The project's seed.yaml should describe the demo board."""
    seed = load_seed(load_config().seed_path)
    assert [r.actor.role for r in seed.credentials] == [Role.SEEKER, Role.EMPLOYER, Role.ADMIN]
    assert len(seed.jobs) == 5
    assert len(seed.applications) == 2
    assert seed.jobs[0].title == "Software Developer"
    assert seed.jobs[0].posted_date.year == 2023
    assert seed.applications[1].status is ApplicationStatus.UNDER_REVIEW


def test_missing_seed_file(tmp_path):
    seed = load_seed(tmp_path / "missing.yaml")
    assert seed == SeedData()


def test_invalid_seed_file(tmp_path):
    path = tmp_path / "seed.yaml"
    path.write_text(yaml.dump({"jobs": [{"id": "1", "title": "No other fields"}]}))
    with pytest.raises(ValueError):
        load_seed(path)


def test_job_owner_must_be_employer(tmp_path):
    path = tmp_path / "seed.yaml"
    path.write_text(yaml.dump({
        "users": [{"id": "1", "name": "S", "email": "s@example.com",
                   "password": "pw", "role": "seeker"}],
        "jobs": [{
            "id": "1", "title": "T", "company": "C", "location": "110001",
            "description": "D", "salary": "S", "job_type": "Full-time",
            "category": "Design", "posted_date": "2023-04-15", "employer_id": "1",
        }],
    }))
    with pytest.raises(ValueError, match="not an employer"):
        load_seed(path)


@pytest.fixture
def board(tmp_path):
    config = BoardConfig(data_dir=str(tmp_path), seed_file=str(load_config().seed_path))
    return build_board(config)


def test_board_is_seeded(board):
    assert len(board.repository.jobs) == 5
    assert all(j.status is JobStatus.ACTIVE for j in board.repository.jobs)
    assert len(board.sessions.users()) == 3


def test_seed_accounts_can_log_in(board):
    assert board.sessions.login("employer@example.com", "password123")
    assert board.sessions.current_actor.is_employer


def test_new_ids_continue_after_seed(board):
    board.sessions.login("employer@example.com", "password123")
    job_id = board.repository.create_job(board.sessions.current_actor, {
        "title": "QA Engineer",
        "company": "Tech Solutions",
        "location": "560001",
        "description": "Test all the things",
        "salary": "Negotiable",
        "job_type": "Contract",
        "category": "Engineering",
    })
    assert job_id == "6"


def test_seeded_application_blocks_duplicate(board):
    board.sessions.login("seeker@example.com", "password123")
    with pytest.raises(AlreadyApplied):
        board.repository.apply_to_job(board.sessions.current_actor, "1")


def test_new_registration_gets_next_id(board):
    board.sessions.register(Registration(
        name="New", email="new@example.com", password="pw", role="seeker",
    ))
    assert board.sessions.current_actor.id == "4"
