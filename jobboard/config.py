"""Configuration loader for the job board.

Reads config.yaml and returns a typed ``BoardConfig`` that the CLI, the
session store and the repository consume.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config.yaml"

DEFAULT_CATEGORIES = [
    "Information Technology",
    "Marketing",
    "Sales",
    "Finance",
    "Healthcare",
    "Education",
    "Engineering",
    "Customer Service",
    "Design",
    "Data Science",
]

DEFAULT_JOB_TYPES = [
    "Full-time",
    "Part-time",
    "Contract",
    "Internship",
    "Remote",
    "Temporary",
]

DEFAULT_LOCATIONS = [
    "110001",  # Delhi
    "400001",  # Mumbai
    "560001",  # Bangalore
    "600001",  # Chennai
    "700001",  # Kolkata
    "500001",  # Hyderabad
]


@dataclass
class BoardConfig:
    """Top-level job board configuration."""

    log_level: str = "INFO"
    data_dir: str = "data"
    session_file: str = "session.json"  # relative to data_dir
    seed_file: str = "seed.yaml"  # relative to the project root

    # Simulated round-trip delay applied before every repository operation
    latency_seconds: float = 0.0

    # Require job ownership (not just the employer role) for job and
    # application-status mutations
    enforce_ownership: bool = True

    recent_days: int = 7
    dashboard_limit: int = 3

    # Option lists offered by the search front end
    categories: list[str] = field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    job_types: list[str] = field(default_factory=lambda: list(DEFAULT_JOB_TYPES))
    locations: list[str] = field(default_factory=lambda: list(DEFAULT_LOCATIONS))

    @property
    def session_path(self) -> Path:
        return _resolve(self.data_dir) / self.session_file

    @property
    def seed_path(self) -> Path:
        return _resolve(self.seed_file)


def _resolve(path: str | Path) -> Path:
    p = Path(path)
    return p if p.is_absolute() else PROJECT_ROOT / p


def load_config(path: Path | str | None = None) -> BoardConfig:
    """Load and validate the board configuration from a YAML file."""
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.warning("Config file not found at %s — using defaults", config_path)
        return BoardConfig()

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    if not raw:
        return BoardConfig()

    latency = float(raw.get("latency_seconds", 0.0))
    if latency < 0:
        logger.warning("Negative latency_seconds (%s) — using 0", latency)
        latency = 0.0

    return BoardConfig(
        log_level=raw.get("log_level", "INFO"),
        data_dir=raw.get("data_dir", "data"),
        session_file=raw.get("session_file", "session.json"),
        seed_file=raw.get("seed_file", "seed.yaml"),
        latency_seconds=latency,
        enforce_ownership=bool(raw.get("enforce_ownership", True)),
        recent_days=int(raw.get("recent_days", 7)),
        dashboard_limit=int(raw.get("dashboard_limit", 3)),
        categories=raw.get("categories") or list(DEFAULT_CATEGORIES),
        job_types=raw.get("job_types") or list(DEFAULT_JOB_TYPES),
        locations=[str(loc) for loc in raw.get("locations") or DEFAULT_LOCATIONS],
    )
