# brewlab_backend/app/services/data_stores/__init__.py
"""
Unified export surface for data store helpers.

Import from here in routers/service code, e.g.:
    from brewlab_backend.app.services.data_stores import (
        read_json, atomic_write, write_json,
        LocalRecipeStore,
        save_snapshot, load_snapshot, drop_snapshot,
    )
"""

from __future__ import annotations

# ---- Low-level IO helpers ----
from .io_utils import read_json, atomic_write, write_json  # noqa: F401

# ---- Recipes + share links (local backend) ----
from .local_store import LocalRecipeStore  # noqa: F401

# ---- Session snapshots ----
from .sessions import save_snapshot, load_snapshot, drop_snapshot  # noqa: F401

__all__ = [
    # io_utils
    "read_json", "atomic_write", "write_json",
    # recipes
    "LocalRecipeStore",
    # sessions
    "save_snapshot", "load_snapshot", "drop_snapshot",
]
