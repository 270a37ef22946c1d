"""SQLite engine and session management for SqlEntityStore."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from devcourses.entity_store.models import Base

if TYPE_CHECKING:
    from sqlalchemy import Engine

MEMORY_PATH = ":memory:"

# Seconds a writer waits on a locked SQLite file before giving up
BUSY_TIMEOUT_SECONDS = 30


def _engine_options(db_path: str) -> dict[str, Any]:
    if db_path == MEMORY_PATH:
        # One shared connection, or every checkout would see an empty database
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {"connect_args": {"timeout": BUSY_TIMEOUT_SECONDS, "check_same_thread": False}}


def _apply_pragmas(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Lazily created SQLite engine with WAL journaling and foreign keys on.

    Sessions do not expire objects on commit, so records returned by the
    store stay readable after their session closes.
    """

    def __init__(self, db_path: str = "devcourses.db") -> None:
        """Initialize the manager. Nothing is opened until first use.

        Args:
            db_path: SQLite file path, or ":memory:".
        """
        self.db_path = db_path
        self._engine: Engine | None = None
        self._sessions: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine:
        """The engine, created on first access."""
        if self._engine is None:
            if self.db_path != MEMORY_PATH:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            engine = create_engine(f"sqlite:///{self.db_path}", **_engine_options(self.db_path))
            event.listen(engine, "connect", _apply_pragmas)
            self._engine = engine
        return self._engine

    def create_tables(self) -> None:
        """Create missing tables."""
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """Open a new session bound to the engine."""
        if self._sessions is None:
            self._sessions = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._sessions()

    def is_wal_mode(self) -> bool:
        with self.engine.connect() as conn:
            return conn.execute(text("PRAGMA journal_mode")).scalar() == "wal"

    def close(self) -> None:
        """Dispose of the engine. Safe to call more than once."""
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._sessions = None
