# brewlab_backend/app/utils/io_guards.py
from __future__ import annotations

from pathlib import Path

from brewlab_backend.app.config.paths import get_seed_dir

def assert_writable(path: Path) -> None:
    """
    Seed cards are shipped data, never runtime state: refuse any write under SEED_DIR.
    """
    seed_dir = get_seed_dir().resolve()
    if Path(path).resolve().is_relative_to(seed_dir):
        raise AssertionError(f"refusing to write under the seed directory {seed_dir}: {path}")
