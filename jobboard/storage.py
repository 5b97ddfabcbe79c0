"""Session persistence for the job board.

The only state that survives a restart is the live session: the current
actor record and its opaque token, stored as one JSON object

    {"user": {...actor fields...}, "token": "session-..."}

Jobs and applications are never written here; they are re-seeded at start-up.

Writes use the atomic write pattern:
  1. Write to .tmp file
  2. fsync
  3. Rename to target (atomic on POSIX)

Before each write, a .bak backup is created. If the primary file is
corrupted, it's restored from .bak automatically.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Any, Optional

from jobboard.models import Actor

logger = logging.getLogger(__name__)


# ── Session ────────────────────────────────────────────────────────────────

def save_session(actor: Actor, token: str, path: str | Path) -> None:
    """Persist the live actor and token (backup + atomic write)."""
    session_path = Path(path)
    session_path.parent.mkdir(parents=True, exist_ok=True)
    _backup_and_write(session_path, {"user": actor.to_dict(), "token": token})
    logger.debug("Saved session for %s to %s", actor.email, session_path)


def load_session(path: str | Path) -> Optional[tuple[Actor, str]]:
    """Return the persisted (actor, token), or None if there is no usable session.

    Both the user record and the token must be present; a half-written
    session is treated as absent.
    """
    data = _safe_read_json(Path(path))
    if not isinstance(data, dict):
        return None

    user, token = data.get("user"), data.get("token")
    if not user or not token:
        return None

    try:
        actor = Actor.from_dict(user)
    except (KeyError, ValueError) as exc:
        logger.error("Stored session at %s is malformed: %s", path, exc)
        return None
    return actor, str(token)


def clear_session(path: str | Path) -> None:
    """Delete the session file and its backup. Safe to call repeatedly."""
    session_path = Path(path)
    for p in (session_path, _bak_path(session_path)):
        if p.exists():
            p.unlink()
            logger.debug("Removed %s", p)


# ── Internal Helpers ───────────────────────────────────────────────────────

def _bak_path(path: Path) -> Path:
    return path.with_suffix(path.suffix + ".bak")


def _safe_read_json(path: Path) -> Any:
    """Read a JSON file, restoring from .bak if corrupted.

    If the primary file can't be parsed, tries .bak. If both fail,
    returns None and logs an error.
    """
    if not path.exists():
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Failed to read %s: %s — trying backup", path, exc)

    bak_path = _bak_path(path)
    if bak_path.exists():
        try:
            with open(bak_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            logger.info("Restored %s from backup", path)
            _atomic_write_json(path, data)
            return data
        except (json.JSONDecodeError, OSError) as exc:
            logger.error("Backup %s also corrupted: %s", bak_path, exc)

    logger.error("Could not read %s or its backup — ignoring stored session", path)
    return None


def _backup_and_write(path: Path, data: Any) -> None:
    """Create a .bak backup of the current file, then atomically write new data."""
    if path.exists():
        try:
            shutil.copy2(path, _bak_path(path))
        except OSError as exc:
            logger.warning("Failed to create backup of %s: %s", path, exc)

    _atomic_write_json(path, data)


def _atomic_write_json(path: Path, data: Any) -> None:
    """Write JSON data atomically using temp file + rename."""
    tmp_path = path.with_suffix(path.suffix + ".tmp")

    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())

        tmp_path.replace(path)
    except OSError as exc:
        logger.error("Failed to write %s: %s", path, exc)
        if tmp_path.exists():
            tmp_path.unlink()
        raise
