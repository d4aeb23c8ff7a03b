# brewlab_backend/app/services/data_stores/sessions.py
from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from brewlab_backend.app.config import SESSION_FRESHNESS_SEC
from brewlab_backend.app.config.paths import path_under_data, ensure_data_dir_exists
from brewlab_backend.app.schemas import SessionSnapshot
from brewlab_backend.app.utils.strings import safe_filename
from .io_utils import atomic_write, read_json

# Directory: ./data/sessions/  (one resumable snapshot per recipe)

def _snapshot_path(recipe_id: str) -> Path:
    ensure_data_dir_exists("sessions")
    return path_under_data("sessions", f"{safe_filename(recipe_id, fallback='recipe')}.json")

def _parse_ts(value: str) -> Optional[dt.datetime]:
    try:
        ts = dt.datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None
    return ts if ts.tzinfo else ts.replace(tzinfo=dt.timezone.utc)

def save_snapshot(recipe_id: str, snapshot: SessionSnapshot) -> Path:
    """
    Overwrite the recipe's snapshot (last write wins). stored_at is refreshed.
    """
    stamped = snapshot.model_copy(update={"stored_at": dt.datetime.now(dt.timezone.utc).isoformat()})
    path = _snapshot_path(recipe_id)
    atomic_write(path, stamped.model_dump_json(by_alias=True, indent=2))
    return path

def load_snapshot(
    recipe_id: str,
    now: Optional[dt.datetime] = None,
    max_age_sec: int = SESSION_FRESHNESS_SEC,
) -> Optional[SessionSnapshot]:
    """
    Missing, unreadable, invalid or stale snapshots all read as None (cold start).
    """
    raw = read_json(_snapshot_path(recipe_id), default=None)
    if not isinstance(raw, dict):
        return None
    try:
        snap = SessionSnapshot.model_validate(raw)
    except ValidationError:
        return None
    stored = _parse_ts(snap.stored_at)
    if stored is None:
        return None
    now = now or dt.datetime.now(dt.timezone.utc)
    if (now - stored).total_seconds() >= max_age_sec:
        return None
    return snap

def drop_snapshot(recipe_id: str) -> bool:
    path = _snapshot_path(recipe_id)
    if not path.exists():
        return False
    path.unlink(missing_ok=True)
    return True
