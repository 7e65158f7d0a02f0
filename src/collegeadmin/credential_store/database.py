"""SQLite engine and session handling for the Credential Store."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from collegeadmin.credential_store.models import Base

if TYPE_CHECKING:
    from sqlalchemy import Engine

MEMORY = ":memory:"

# Milliseconds a writer waits on a locked database before failing
BUSY_TIMEOUT_MS = 5000


def create_sqlite_engine(db_path: str) -> Engine:
    """Build an engine for a SQLite file, or a shared in-memory database.

    File databases run in WAL mode so readers never block the single writer.
    An in-memory database lives on one connection that every thread reuses.
    """
    connect_args = {"check_same_thread": False}
    if db_path == MEMORY:
        engine = create_engine(
            f"sqlite:///{MEMORY}", poolclass=StaticPool, connect_args=connect_args
        )
    else:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(f"sqlite:///{db_path}", connect_args=connect_args)

    @event.listens_for(engine, "connect")
    def configure_connection(dbapi_connection: object, _connection_record: object) -> None:
        cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
        if db_path != MEMORY:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}")
        cursor.close()

    return engine


class Database:
    """Owns the engine and hands out short-lived sessions.

    Sessions keep attribute values after commit so that returned accounts stay
    readable once their session is closed.
    """

    def __init__(self, db_path: str = "collegeadmin.db") -> None:
        """
        Args:
            db_path: SQLite file path, or ":memory:" for a throwaway database.
        """
        self.db_path = db_path
        self._engine: Engine | None = create_sqlite_engine(db_path)
        self._sessions = sessionmaker(bind=self._engine, expire_on_commit=False)

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is closed")
        return self._engine

    def create_tables(self) -> None:
        """Create the account tables if they don't exist."""
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """Open a new session; the caller closes it."""
        if self._engine is None:
            raise RuntimeError("Database is closed")
        return self._sessions()

    def is_wal_mode(self) -> bool:
        """Whether the database runs with a write-ahead log."""
        with self.engine.connect() as conn:
            return conn.execute(text("PRAGMA journal_mode")).scalar() == "wal"

    def close(self) -> None:
        """Dispose of the engine's connections."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
