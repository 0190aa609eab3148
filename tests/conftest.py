"""
Pytest fixtures for pomodoro tests.
"""
from datetime import datetime, timedelta, timezone

import pytest

from pomodoro.db import MEMORY_DATABASE, SessionStore, open_database
from pomodoro.models import Session, SessionEvent, SessionEventKind, SessionKind


T0 = datetime(2024, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


class RecordingHooks:
    """Stand-in for HookRunner that remembers every dispatched event."""

    def __init__(self):
        self.calls = []

    def dispatch(self, session, session_event):
        self.calls.append((session, session_event))
        return True

    @property
    def kinds(self):
        return [event.kind for _, event in self.calls]


@pytest.fixture
def store():
    """Provide a migrated in-memory store."""
    conn = open_database(MEMORY_DATABASE)
    store = SessionStore(conn)
    store.migrate()
    yield store
    conn.close()


@pytest.fixture
def hooks():
    return RecordingHooks()


@pytest.fixture
def seed(store):
    """Insert a session and the given event kinds, one second apart."""

    def _seed(
        *kinds,
        kind=SessionKind.FOCUS,
        planned=timedelta(minutes=25),
        start=T0,
        offsets=None,
    ):
        session = store.insert_session(Session.create(kind, planned, start))
        offsets = offsets or [timedelta(seconds=i) for i in range(len(kinds))]
        for event_kind, offset in zip(kinds, offsets):
            store.insert_session_event(
                SessionEvent.create(SessionEventKind(event_kind), session.id, start + offset)
            )
        return session

    return _seed
