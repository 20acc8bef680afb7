"""SQLite engine and session handling for the shopping list store.

The engine is created lazily from settings and shared by every request. Each
connection enables foreign keys (item rows cascade with their list) and waits
on a locked database instead of failing, since concurrent generations may
write the same list. JSON columns are serialized without ASCII escaping so
stored meal text stays readable.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from swipechef.config import get_settings
from swipechef.db.models import Base

SQLITE_PRAGMAS = (
    ("foreign_keys", "ON"),
    ("busy_timeout", "5000"),
)

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None
_sessions: Optional[sessionmaker[Session]] = None


def _dump_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _apply_pragmas(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    try:
        for name, value in SQLITE_PRAGMAS:
            cursor.execute(f"PRAGMA {name}={value}")
    finally:
        cursor.close()


def get_engine(database_path: Optional[Path] = None) -> Engine:
    """Return the shared engine, creating the database file and schema on first use."""
    global _engine, _sessions

    if _engine is not None:
        return _engine

    path = database_path or get_settings().database_path
    path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False},
        json_serializer=_dump_json,
    )
    event.listen(engine, "connect", _apply_pragmas)
    Base.metadata.create_all(engine)
    logger.debug("Opened shopping list store at %s", path)

    _engine = engine
    _sessions = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    return engine


@contextmanager
def session_scope() -> Iterator[Session]:
    """Yield a session that commits on success and rolls back on any error."""

    if _sessions is None:
        get_engine()
    assert _sessions is not None
    session = _sessions()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def reset_repository_state() -> None:
    """Dispose of the shared engine so the next use re-reads settings."""

    global _engine, _sessions
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _sessions = None


__all__ = ["SQLITE_PRAGMAS", "get_engine", "reset_repository_state", "session_scope"]
