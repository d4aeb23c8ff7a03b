# brewlab_backend/app/config/__init__.py
from __future__ import annotations

# Re-export config surface expected by callers across the app.

# DB and misc settings live in manifest.py
from .manifest import (
    DB_URL,
    STORE_BACKEND,
    APP_NAME,
    APP_URL,
    CORS_ORIGINS,
    SESSION_FRESHNESS_SEC,
)

# Path helpers live in paths.py
from .paths import (
    REPO_ROOT,
    APP_ROOT,
    SEED_DIR,
    get_data_dir,
    resolve_seed_file,
    path_under_data,
    ensure_data_dir_exists,
)

__all__ = [
    # manifest
    "DB_URL",
    "STORE_BACKEND",
    "APP_NAME",
    "APP_URL",
    "CORS_ORIGINS",
    "SESSION_FRESHNESS_SEC",
    # paths
    "REPO_ROOT",
    "APP_ROOT",
    "SEED_DIR",
    "get_data_dir",
    "resolve_seed_file",
    "path_under_data",
    "ensure_data_dir_exists",
]
