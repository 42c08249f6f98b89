"""Lazily built engine and session factory for the audit database.

The audit table is created on first use; there are no migrations to run
for a single append-only table.
"""
from collections.abc import Iterator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from phiguard.core.settings import get_settings
from phiguard.db.base import Base

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def _connect_args(url: str) -> dict:
    # FastAPI runs sync routes in a threadpool
    return {"check_same_thread": False} if url.startswith("sqlite") else {}


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        url = get_settings().database_url
        _engine = create_engine(url, pool_pre_ping=True, connect_args=_connect_args(url))
        Base.metadata.create_all(bind=_engine)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False)
    return _session_factory


def get_db_session() -> Iterator[Session]:
    """Yield a session; commit on success, rollback on error."""
    with get_session_factory()() as db:
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
