"""Engine and session factory shared by the API, the prune job and scripts."""
from __future__ import annotations

from collections.abc import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from helpdesk.config import get_settings
from helpdesk.models.base import Base

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Engine for the configured ``database_url``, built on first use."""

    global _engine, _session_factory
    if _engine is None:
        url = get_settings().database_url
        if url.startswith("sqlite"):
            # Route handlers run in the threadpool and share pooled connections.
            options: dict[str, object] = {"connect_args": {"check_same_thread": False}}
        else:
            options = {"pool_pre_ping": True}
        _engine = create_engine(url, **options)
        _session_factory = sessionmaker(bind=_engine, autoflush=False, expire_on_commit=False)
    return _engine


def get_sessionmaker() -> sessionmaker[Session]:
    get_engine()
    assert _session_factory is not None
    return _session_factory


@event.listens_for(Engine, "connect")
def _sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # pragma: no cover
    """Sessions cascade and audit actors are nulled only when SQLite enforces FKs."""

    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_all() -> None:
    """Dev shortcut; deployed databases get their schema from Alembic."""

    Base.metadata.create_all(bind=get_engine())


def dispose_engine() -> None:
    """Drop pooled connections; the next ``get_engine`` call builds a new engine."""

    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


def get_db() -> Iterator[Session]:
    """Request-scoped session. Services commit their own unit of work."""

    session = get_sessionmaker()()
    try:
        yield session
    finally:
        session.close()


__all__ = ["create_all", "dispose_engine", "get_db", "get_engine", "get_sessionmaker"]
