# brewlab_backend/app/config/manifest.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List

# ---- DB settings and environment mode ----
from .paths import REPO_ROOT, resolve_seed_file

_DEFAULT_SQLITE_PATH: Path = (REPO_ROOT / "brewlab.sqlite3").resolve()
_env_db_url = os.getenv("DATABASE_URL", "").strip()

# Exported DB_URL (used by db/session.py)
DB_URL: str = _env_db_url or f"sqlite:///{_DEFAULT_SQLITE_PATH}"

# Which recipe store backs the repository: "local" (JSON files) or "sql"
STORE_BACKEND: str = os.getenv("BREWLAB_STORE", "local").strip().lower() or "local"

# Optional env flags
APP_NAME: str = "Coffee Brew Lab"
APP_URL: str = os.getenv("APP_URL", "http://localhost:3000")
APP_ENV: str = os.getenv("APP_ENV", "development")
DEBUG_MODE: bool = os.getenv("DEBUG", "0") not in ("", "0", "false", "False")

CORS_ORIGINS: List[str] = [
    o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if o.strip()
]

# Snapshots older than this are treated as absent
SESSION_FRESHNESS_SEC: int = int(os.getenv("SESSION_FRESHNESS_SEC", str(24 * 60 * 60)))

# ---- Seed data manifest ----
SEED_REQUIRED: List[str] = [
    "legacy_cards.yaml",
]

def validate_manifest() -> Dict[str, object]:
    missing = [name for name in SEED_REQUIRED if not resolve_seed_file(name).exists()]
    return {
        "status": "ok" if not missing else "missing_required",
        "required": SEED_REQUIRED,
        "missing_required": missing,
        "store_backend": STORE_BACKEND,
    }


__all__ = [
    "DB_URL", "STORE_BACKEND", "APP_NAME", "APP_URL", "APP_ENV", "DEBUG_MODE",
    "CORS_ORIGINS", "SESSION_FRESHNESS_SEC", "validate_manifest",
]
