# brewlab_backend/app/db/session.py

# [DB Session] Engine factory + helpers.
# The engine is built once at app startup and passed to the SQL store; nothing here
# holds a module-level engine.
from typing import Optional

from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine
from sqlalchemy.engine import Engine

from brewlab_backend.app.config import DB_URL
from brewlab_backend.app.config.paths import ensure_data_dir_exists

def build_engine(url: Optional[str] = None, echo: bool = False) -> Engine:
    url = url or DB_URL
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo)

    # SQLite needs check_same_thread=False for typical FastAPI usage
    connect_args = {"check_same_thread": False}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # one shared connection, otherwise every session sees a fresh empty db
        return create_engine(url, echo=echo, connect_args=connect_args, poolclass=StaticPool)
    ensure_data_dir_exists()
    return create_engine(url, echo=echo, connect_args=connect_args)

def init_db(engine: Engine) -> None:
    # Ensure table definitions are registered before create_all
    from . import models  # noqa: F401
    SQLModel.metadata.create_all(engine)

