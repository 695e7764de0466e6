"""
core/db.py -- Engine factory and storage error translation shared by all stores.

One Engine is built per process (in the FastAPI lifespan or the CLI) and
injected into every store constructor. Stores own their own tables and call
create_all() on construction; nothing here holds module-level connection state.

storage_errors() is the single place where raw SQLAlchemy failures become
InternalServerError. Stores wrap each statement group in it so no driver
exception reaches the HTTP layer untranslated.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.errors import InternalServerError

logger = logging.getLogger("billboard.db")


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def create_db_engine(db_url: str) -> Engine:
    """Build the process-wide Engine for db_url.

    SQLite URLs get check_same_thread=False because FastAPI runs sync route
    handlers in a thread pool, plus WAL mode on every new connection.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine


def ping(engine: Engine) -> bool:
    """Return True if a trivial query succeeds. Used by the health endpoint."""
    try:
        with engine.connect() as conn:
            conn.exec_driver_sql("SELECT 1")
        return True
    except SQLAlchemyError:
        logger.exception("Database ping failed")
        return False


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Translate SQLAlchemyError raised inside the block into InternalServerError.

    The original exception is logged with its traceback; the client only sees
    "Error <action>". Errors that are already AppError pass through untouched.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Storage failure while %s", action)
        raise InternalServerError(f"Error {action}") from exc


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
