"""
Database engine, session factory, and metadata shared across the application.

Nothing here is created at import time: the application factory builds the
engine and session factory at startup and disposes them at shutdown.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _is_in_memory(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(url: str, *, echo: bool = False) -> Engine:
    """
    Build an engine for the booking store.

    SQLite connections are shared across request threads and the email
    workers, so `check_same_thread` is disabled; in-memory databases use a
    single static connection so every session sees the same data.
    """
    kwargs: dict[str, Any] = {"echo": echo, "future": True}
    if _is_sqlite(url):
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_in_memory(url):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True

    engine = create_engine(url, **kwargs)
    if _is_sqlite(url):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    logger.info("Database engine created for dialect %s", engine.dialect.name)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create any missing tables. Migrations are managed outside this service."""
    from .. import models  # noqa: F401  registers mappers on Base

    Base.metadata.create_all(bind=engine)
