"""Transition rules deciding what ``start`` and ``stop`` append to the log.

Both commands look only at the most recent event across all sessions. That is
sound because at most one session is ever live: a new session is only created
once the previous one has a terminal event.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .models import SessionEvent, SessionEventKind


class Action(str, Enum):
    NEW_SESSION = "new_session"
    APPEND = "append"
    NOOP = "noop"


@dataclass(frozen=True, slots=True)
class Transition:
    """Effect of a command: which event to write, if any, and what to report.

    ``message`` is a format string taking the session ``kind``.
    """

    action: Action
    event_kind: Optional[SessionEventKind]
    message: str

    @property
    def is_noop(self) -> bool:
        return self.action is Action.NOOP


STARTED_NEW = Transition(
    Action.NEW_SESSION, SessionEventKind.STARTED, "Started a new {kind} session."
)
ALREADY_RUNNING = Transition(Action.NOOP, None, "A {kind} session is already running.")
RESUMED = Transition(Action.APPEND, SessionEventKind.RESUMED, "Resumed the {kind} session.")
PAUSED = Transition(Action.APPEND, SessionEventKind.PAUSED, "Paused the {kind} session.")
ABORTED = Transition(Action.APPEND, SessionEventKind.ABORTED, "Aborted the {kind} session.")
ALREADY_PAUSED = Transition(Action.NOOP, None, "The {kind} session is already paused.")
NOTHING_TO_STOP = Transition(Action.NOOP, None, "No active {kind} session to stop.")
NO_SESSION = Transition(Action.NOOP, None, "No active session found.")


def plan_start(latest: Optional[SessionEvent]) -> Transition:
    if latest is None or latest.kind.is_terminal:
        return STARTED_NEW
    if latest.kind.is_running:
        return ALREADY_RUNNING
    return RESUMED


def plan_stop(latest: Optional[SessionEvent], reset: bool = False) -> Transition:
    if latest is None:
        return NO_SESSION
    if latest.kind.is_terminal:
        return NOTHING_TO_STOP
    if reset:
        return ABORTED
    if latest.kind.is_running:
        return PAUSED
    return ALREADY_PAUSED
