"""Engine and session helpers for the ledger database.

One engine per process, bound to ``DATABASE_URL`` (or an explicit override)
on first use. SQLite URLs get foreign-key enforcement switched on per
connection, since the ledger relies on ``ledger_transactions.category_id``
pointing at a real category.

Usage
-----
from db.client import session_scope

with session_scope() as s:
    s.execute(...)
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

_ENGINE: Engine | None = None
_SESSION_MAKER: sessionmaker[Session] | None = None
_DB_URL: str | None = None


def _database_url(override: str | None = None) -> str:
    url = override or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not set; pass --database-url or add it to .env"
        )
    return url


def _build_engine(url: str) -> Engine:
    if make_url(url).get_backend_name() != "sqlite":
        return create_engine(url, pool_pre_ping=True)

    engine = create_engine(url)

    @event.listens_for(engine, "connect")
    def _sqlite_foreign_keys(dbapi_conn, _record):  # pragma: no cover - driver hook
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys = ON")
        cur.close()

    return engine


def get_engine(*, database_url: str | None = None) -> Engine:
    """Return the shared engine, creating it on first use.

    Asking for a different URL than the one already bound is an error; call
    :func:`reset_engine` first when switching databases (tests do).
    """

    global _ENGINE, _SESSION_MAKER, _DB_URL
    url = _database_url(database_url)
    if _ENGINE is None:
        _ENGINE = _build_engine(url)
        _SESSION_MAKER = sessionmaker(bind=_ENGINE, expire_on_commit=False, class_=Session)
        _DB_URL = url
    elif url != _DB_URL:
        raise RuntimeError(
            "engine already bound to a different DATABASE_URL; call reset_engine() first"
        )
    return _ENGINE


def reset_engine() -> None:
    """Dispose the shared engine so the next call may bind a new URL."""

    global _ENGINE, _SESSION_MAKER, _DB_URL
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = None
    _SESSION_MAKER = None
    _DB_URL = None


def create_schema(*, database_url: str | None = None) -> None:
    """Create any missing ledger tables directly from the ORM metadata.

    Meant for local SQLite ledgers and tests; managed databases are migrated
    with Alembic instead.
    """

    from .models.ledger import Base

    Base.metadata.create_all(bind=get_engine(database_url=database_url))


def get_session(*, database_url: str | None = None) -> Session:
    get_engine(database_url=database_url)
    assert _SESSION_MAKER is not None  # bound by get_engine
    return _SESSION_MAKER()


@contextmanager
def session_scope(*, database_url: str | None = None) -> Iterator[Session]:
    """Commit on success, roll back on any exception, always close."""

    session = get_session(database_url=database_url)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = [
    "get_engine",
    "get_session",
    "reset_engine",
    "create_schema",
    "session_scope",
]
