"""SQLite event store for sessions and session events."""

from __future__ import annotations

import logging
import sqlite3
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterator, Optional

from .errors import (
    SessionEventNotFoundError,
    SessionNotFoundError,
    StorageError,
)
from .models import Session, SessionEvent, SessionEventKind, SessionKind

logger = logging.getLogger(__name__)

DATETIME_FMT = "%Y-%m-%d %H:%M:%S.%f"

MEMORY_DATABASE = ":memory:"

SCHEMA = """
CREATE TABLE IF NOT EXISTS session (
    session_id TEXT PRIMARY KEY,
    session_kind TEXT NOT NULL,
    planned_secs INTEGER NOT NULL CHECK (planned_secs > 0),
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS session_event (
    session_event_id TEXT PRIMARY KEY,
    session_event_kind TEXT NOT NULL,
    session_id TEXT NOT NULL REFERENCES session (session_id) ON DELETE CASCADE,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_session_event_session_id
    ON session_event (session_id, session_event_id);
"""


@dataclass(frozen=True, slots=True)
class Queries:
    """Named SQL statements used by :class:`SessionStore`."""

    schema: str
    insert_session: str
    get_session: str
    list_sessions: str
    insert_session_event: str
    get_session_event: str
    list_session_events: str


def load_queries() -> Queries:
    return Queries(
        schema=SCHEMA,
        insert_session="""
            INSERT INTO session (session_id, session_kind, planned_secs, created_at)
            VALUES (:session_id, :session_kind, :planned_secs, :created_at)
        """,
        get_session="""
            SELECT session_id, session_kind, planned_secs, created_at
            FROM session
            WHERE session_id = :session_id
        """,
        list_sessions="""
            SELECT session_id, session_kind, planned_secs, created_at
            FROM session
            ORDER BY session_id DESC
            LIMIT COALESCE(:limit, -1) OFFSET COALESCE(:offset, 0)
        """,
        insert_session_event="""
            INSERT INTO session_event (
                session_event_id,
                session_event_kind,
                session_id,
                created_at
            ) VALUES (:session_event_id, :session_event_kind, :session_id, :created_at)
        """,
        get_session_event="""
            SELECT session_event_id, session_event_kind, session_id, created_at
            FROM session_event
            WHERE session_event_id = :session_event_id
        """,
        list_session_events="""
            SELECT session_event_id, session_event_kind, session_id, created_at
            FROM session_event
            WHERE (:session_id IS NULL OR session_id = :session_id)
            ORDER BY session_event_id DESC
            LIMIT COALESCE(:limit, -1) OFFSET COALESCE(:offset, 0)
        """,
    )


@contextmanager
def _storage_errors(context: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        raise StorageError(f"{context}: {exc}") from exc


def open_database(path: Path | str) -> sqlite3.Connection:
    """Open the SQLite database, ``:memory:`` for an ephemeral one."""
    target = str(path)
    with _storage_errors("Failed to open database connection"):
        conn = sqlite3.connect(target, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
    logger.debug("Opened database %s", target)
    return conn


@contextmanager
def database_connection(path: Path | str) -> Iterator[sqlite3.Connection]:
    conn = open_database(path)
    try:
        yield conn
    finally:
        conn.close()


def format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime(DATETIME_FMT)


def parse_timestamp(value: str) -> datetime:
    return datetime.strptime(value, DATETIME_FMT).replace(tzinfo=timezone.utc)


def _session_from_row(row: sqlite3.Row) -> Session:
    return Session(
        id=uuid.UUID(row["session_id"]),
        kind=SessionKind.parse(row["session_kind"]),
        planned_duration=timedelta(seconds=row["planned_secs"]),
        created_at=parse_timestamp(row["created_at"]),
    )


def _session_event_from_row(row: sqlite3.Row) -> SessionEvent:
    return SessionEvent(
        id=uuid.UUID(row["session_event_id"]),
        kind=SessionEventKind.parse(row["session_event_kind"]),
        session_id=uuid.UUID(row["session_id"]),
        created_at=parse_timestamp(row["created_at"]),
    )


class SessionStore:
    """Append-only persistence for sessions and their events.

    Listings are ordered newest-first by identifier; identifiers are UUIDv7 so
    that order matches creation time.
    """

    def __init__(self, conn: sqlite3.Connection, queries: Optional[Queries] = None) -> None:
        self._conn = conn
        self._queries = queries or load_queries()

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def migrate(self) -> None:
        with _storage_errors("Failed to migrate database"):
            self._conn.executescript(self._queries.schema)

    @contextmanager
    def write_transaction(self) -> Iterator["SessionStore"]:
        """Run the enclosed block as one immediate write transaction.

        Commits when the block exits normally and rolls back on any exception.
        """
        if self._conn.in_transaction:
            raise StorageError("A write transaction is already open")
        with _storage_errors("Failed to start transaction"):
            self._conn.execute("BEGIN IMMEDIATE")
        try:
            yield self
        except BaseException:
            self._rollback()
            raise
        try:
            with _storage_errors("Failed to commit transaction"):
                self._conn.execute("COMMIT")
        except StorageError:
            self._rollback()
            raise

    def _rollback(self) -> None:
        if not self._conn.in_transaction:
            return
        with _storage_errors("Failed to roll back transaction"):
            self._conn.execute("ROLLBACK")
        logger.debug("Transaction rolled back.")

    def insert_session(self, session: Session) -> Session:
        with _storage_errors("Failed to insert session"):
            self._conn.execute(
                self._queries.insert_session,
                {
                    "session_id": str(session.id),
                    "session_kind": session.kind.value,
                    "planned_secs": session.planned_secs,
                    "created_at": format_timestamp(session.created_at),
                },
            )
        logger.debug("Inserted %s session %s", session.kind, session.id)
        return session

    def get_session(self, session_id: uuid.UUID) -> Session:
        with _storage_errors("Failed to get session"):
            row = self._conn.execute(
                self._queries.get_session, {"session_id": str(session_id)}
            ).fetchone()
        if row is None:
            raise SessionNotFoundError(session_id)
        return _session_from_row(row)

    def list_sessions(
        self, *, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> list[Session]:
        with _storage_errors("Failed to list sessions"):
            rows = self._conn.execute(
                self._queries.list_sessions, {"limit": limit, "offset": offset}
            ).fetchall()
        return [_session_from_row(row) for row in rows]

    def latest_session(self) -> Optional[Session]:
        sessions = self.list_sessions(limit=1)
        return sessions[0] if sessions else None

    def insert_session_event(self, session_event: SessionEvent) -> SessionEvent:
        with _storage_errors("Failed to insert session event"):
            self._conn.execute(
                self._queries.insert_session_event,
                {
                    "session_event_id": str(session_event.id),
                    "session_event_kind": session_event.kind.value,
                    "session_id": str(session_event.session_id),
                    "created_at": format_timestamp(session_event.created_at),
                },
            )
        logger.debug(
            "Inserted %s event %s for session %s",
            session_event.kind,
            session_event.id,
            session_event.session_id,
        )
        return session_event

    def get_session_event(self, session_event_id: uuid.UUID) -> SessionEvent:
        with _storage_errors("Failed to get session event"):
            row = self._conn.execute(
                self._queries.get_session_event,
                {"session_event_id": str(session_event_id)},
            ).fetchone()
        if row is None:
            raise SessionEventNotFoundError(session_event_id)
        return _session_event_from_row(row)

    def list_session_events(
        self,
        *,
        session_id: Optional[uuid.UUID] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[SessionEvent]:
        with _storage_errors("Failed to list session events"):
            rows = self._conn.execute(
                self._queries.list_session_events,
                {
                    "session_id": str(session_id) if session_id is not None else None,
                    "limit": limit,
                    "offset": offset,
                },
            ).fetchall()
        return [_session_event_from_row(row) for row in rows]

    def latest_event(self) -> Optional[SessionEvent]:
        """Return the most recent event across all sessions."""
        events = self.list_session_events(limit=1)
        return events[0] if events else None
