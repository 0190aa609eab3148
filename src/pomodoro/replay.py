"""Rebuild elapsed time and lifecycle state from a session's event history."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, Optional

from .models import SessionEvent, SessionEventKind


class SessionState(str, Enum):
    NONE = "none"
    RUNNING = "running"
    PAUSED = "paused"
    ABORTED = "aborted"
    COMPLETED = "completed"

    def __str__(self) -> str:
        return self.value


_STATE_BY_EVENT: dict[SessionEventKind, SessionState] = {
    SessionEventKind.STARTED: SessionState.RUNNING,
    SessionEventKind.RESUMED: SessionState.RUNNING,
    SessionEventKind.PAUSED: SessionState.PAUSED,
    SessionEventKind.ABORTED: SessionState.ABORTED,
    SessionEventKind.COMPLETED: SessionState.COMPLETED,
}


@dataclass(frozen=True, slots=True)
class Replay:
    elapsed: timedelta
    running_since: Optional[datetime]

    @property
    def elapsed_secs(self) -> int:
        return int(self.elapsed.total_seconds())

    @property
    def is_running(self) -> bool:
        return self.running_since is not None


def replay(events: Iterable[SessionEvent], now: datetime) -> Replay:
    """Sum the running intervals of one session's events, oldest first.

    A segment opens on ``started``/``resumed`` and closes on any other event;
    a segment still open after the last event is measured up to ``now``.
    """
    segment_start: Optional[datetime] = None
    elapsed = timedelta(0)
    for event in events:
        if event.kind.is_running:
            segment_start = event.created_at
        elif segment_start is not None:
            elapsed += event.created_at - segment_start
            segment_start = None

    if segment_start is not None:
        elapsed += now - segment_start

    # Clock skew can make intervals negative.
    return Replay(elapsed=max(elapsed, timedelta(0)), running_since=segment_start)


def derive_state(last_event: Optional[SessionEvent]) -> SessionState:
    if last_event is None:
        return SessionState.NONE
    return _STATE_BY_EVENT[last_event.kind]
