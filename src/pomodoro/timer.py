"""Execute ``start``, ``stop`` and ``status`` against the event store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from .db import SessionStore
from .errors import InconsistentStateError, PomodoroError, SessionNotFoundError
from .hooks import HookRunner
from .models import Session, SessionEvent, SessionEventKind, SessionKind, utc_now
from .replay import SessionState
from .state import Action, Transition, plan_start, plan_stop
from .status import SessionStatus, assemble_status

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of a ``start`` or ``stop`` command."""

    message: str
    session: Optional[Session] = None
    event: Optional[SessionEvent] = None


class PomodoroTimer:
    """Apply commands to the session log.

    Callers are expected to wrap each call in
    :meth:`SessionStore.write_transaction` so every write commits together.
    """

    def __init__(
        self,
        store: SessionStore,
        hooks: Optional[HookRunner] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.hooks = hooks
        self._clock = clock

    def start(self, kind: SessionKind, duration: timedelta) -> CommandResult:
        now = self._clock()
        latest = self._latest_event()
        transition = plan_start(latest)
        if transition.action is Action.NEW_SESSION:
            if duration.total_seconds() < 1:
                raise PomodoroError("Session duration must be at least one second")
            session = self.store.insert_session(Session.create(kind, duration, now))
        else:
            assert latest is not None
            session = self.store.get_session(latest.session_id)
        return self._apply(transition, session, now)

    def stop(self, reset: bool = False) -> CommandResult:
        now = self._clock()
        latest = self._latest_event()
        transition = plan_stop(latest, reset)
        if latest is None:
            return CommandResult(message=transition.message)
        session = self.store.get_session(latest.session_id)
        return self._apply(transition, session, now)

    def toggle(self, kind: SessionKind, duration: timedelta) -> CommandResult:
        """Pause a running session, otherwise start or resume one.

        The status check runs first so an expired session is completed rather
        than paused.
        """
        if self.status().state is SessionState.RUNNING:
            return self.stop()
        return self.start(kind, duration)

    def status(self) -> SessionStatus:
        now = self._clock()
        session = self.store.latest_session()
        if session is None:
            return SessionStatus.empty()

        # Listings are newest-first; replay needs oldest-first.
        events = self.store.list_session_events(session_id=session.id)
        events.reverse()
        status = assemble_status(session, events, now)

        if status.needs_completion:
            event = self.store.insert_session_event(
                SessionEvent.create(SessionEventKind.COMPLETED, session.id, now)
            )
            status.state = SessionState.COMPLETED
            logger.debug("Session %s reached its planned time.", session.id)
            self._notify(session, event)
        return status

    def _latest_event(self) -> Optional[SessionEvent]:
        """Return the newest event, checking it belongs to the newest session."""
        latest = self.store.latest_event()
        if latest is None:
            return None
        session = self.store.latest_session()
        if session is None:
            raise SessionNotFoundError(latest.session_id)
        if session.id != latest.session_id:
            raise InconsistentStateError(
                f"latest event {latest.id} belongs to session {latest.session_id}, "
                f"but the newest session is {session.id}"
            )
        return latest

    def _apply(self, transition: Transition, session: Session, now: datetime) -> CommandResult:
        message = transition.message.format(kind=session.kind)
        if transition.is_noop:
            logger.debug("No-op: %s", message)
            return CommandResult(message=message, session=session)

        assert transition.event_kind is not None
        event = self.store.insert_session_event(
            SessionEvent.create(transition.event_kind, session.id, now)
        )
        self._notify(session, event)
        return CommandResult(message=message, session=session, event=event)

    def _notify(self, session: Session, event: SessionEvent) -> None:
        if self.hooks is None:
            return
        self.hooks.dispatch(session, event)
