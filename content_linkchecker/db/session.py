"""Database session and engine setup.

This module provides:
- SQLAlchemy Engine configured from DATABASE_URL (defaults to SQLite ./data/linkchecker.db)
- SessionLocal factory
- session_scope() transactional context manager
- reconfigure_database() to point the engine elsewhere (tests, Postgres)
- ping_db() connectivity check
"""
from __future__ import annotations

import atexit
import logging
import os
import pathlib
from contextlib import contextmanager
from typing import Iterator

from dotenv import load_dotenv
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from content_linkchecker.db.models import Base

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------------------
# Configuration
# --------------------------------------------------------------------------------------
load_dotenv()
DEFAULT_SQLITE_URL = "sqlite:///./data/linkchecker.db"
DATABASE_URL: str = os.getenv("DATABASE_URL", DEFAULT_SQLITE_URL)
ECHO_SQL: bool = os.getenv("SQL_ECHO", "0") in {"1", "true", "True"}


def _make_engine(url: str, *, echo: bool) -> Engine:
    is_sqlite = url.startswith("sqlite")

    engine_kwargs = {
        "future": True,
        "echo": echo,
        "pool_pre_ping": True,
    }
    if is_sqlite:
        engine_kwargs["connect_args"] = {"check_same_thread": False}

    eng = create_engine(url, **engine_kwargs)

    if is_sqlite:

        @event.listens_for(eng, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):  # type: ignore[unused-ignore]
            cur = dbapi_connection.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()

    # If SQLite file path points to a nested folder, ensure parent exists
    if is_sqlite and url.startswith("sqlite:///") and ":memory:" not in url:
        db_path = url.replace("sqlite:///", "", 1)
        pathlib.Path(db_path).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)

    return eng


def _dispose_current_engine() -> None:
    global engine
    try:
        engine.dispose()
    except NameError:
        pass


engine = _make_engine(DATABASE_URL, echo=ECHO_SQL)
# Close pooled connections at process exit to avoid ResourceWarning
atexit.register(_dispose_current_engine)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
    future=True,
)


def reconfigure_database(url: str | None = None, *, echo: bool | None = None) -> None:
    """Rebuild the global engine using a new URL or echo flag."""
    global engine, DATABASE_URL, ECHO_SQL
    if url is not None:
        DATABASE_URL = url
    if echo is not None:
        ECHO_SQL = bool(echo)
    _dispose_current_engine()
    engine = _make_engine(DATABASE_URL, echo=ECHO_SQL)
    SessionLocal.configure(bind=engine)


def get_engine() -> Engine:
    return engine


def get_session() -> Session:
    """Return a new SQLAlchemy session (non-generator)."""
    return SessionLocal()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_all() -> None:
    """Create tables from ORM metadata (local bootstrap; Alembic owns real schemas)."""
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created: %s", DATABASE_URL)


def ping_db() -> bool:
    """Lightweight connectivity check (SELECT 1). Returns True if OK, False otherwise."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("DB ping failed")
        return False


__all__ = [
    "engine",
    "SessionLocal",
    "create_all",
    "get_engine",
    "get_session",
    "ping_db",
    "reconfigure_database",
    "session_scope",
]
