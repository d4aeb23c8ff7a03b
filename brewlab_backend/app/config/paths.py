# brewlab_backend/app/config/paths.py
"""
Where Brew Lab reads and writes files.

    DATA_DIR  (env DATA_DIR, default <repo_root>/data)      runtime state: recipes, sessions
    SEED_DIR  (env SEED_DIR, default brewlab_backend/app/seed)  shipped legacy cards, read-only
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

_THIS_FILE = Path(__file__).resolve()

# config/ -> app/ -> brewlab_backend/ -> repo root
APP_ROOT: Path = _THIS_FILE.parents[1]
REPO_ROOT: Path = APP_ROOT.parents[1]

def _env_path(name: str) -> Optional[Path]:
    raw = (os.getenv(name) or "").strip().strip('"').strip("'")
    return Path(raw).expanduser().resolve() if raw else None

SEED_DIR: Path = _env_path("SEED_DIR") or (APP_ROOT / "seed").resolve()

# DATA_DIR is re-read on every call so tests can point it at a tmp tree
def get_data_dir() -> Path:
    return _env_path("DATA_DIR") or (REPO_ROOT / "data").resolve()

DATA_DIR: Path = get_data_dir()

def get_seed_dir() -> Path:
    return SEED_DIR

def resolve_seed_file(name: str) -> Path:
    return SEED_DIR / name

def path_under_data(*parts: str) -> Path:
    """Absolute path under DATA_DIR; the parent directory is created."""
    p = get_data_dir().joinpath(*parts)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p

def ensure_data_dir_exists(*parts: str) -> Path:
    """
    Create DATA_DIR (or a subdirectory of it) and return it.
        ensure_data_dir_exists("sessions") -> <DATA_DIR>/sessions
    """
    p = get_data_dir().joinpath(*parts)
    p.mkdir(parents=True, exist_ok=True)
    return p

__all__ = [
    "DATA_DIR", "SEED_DIR", "REPO_ROOT", "APP_ROOT",
    "get_data_dir", "get_seed_dir",
    "resolve_seed_file", "path_under_data", "ensure_data_dir_exists",
]
