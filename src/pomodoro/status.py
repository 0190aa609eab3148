"""Status assembly combining a session's plan with its replayed history."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict

from .models import Session, SessionEvent
from .replay import SessionState, derive_state, replay


class SessionStatus(BaseModel):
    """Renderable snapshot of the current session."""

    kind: str = "none"
    state: SessionState = SessionState.NONE
    planned_secs: int = 0
    elapsed_secs: int = 0
    remaining_secs: int = 0

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def empty(cls) -> "SessionStatus":
        return cls()

    @property
    def needs_completion(self) -> bool:
        """True once a running session has used up its planned time."""
        return self.state is SessionState.RUNNING and self.remaining_secs == 0


def assemble_status(
    session: Optional[Session],
    events: Sequence[SessionEvent],
    now: datetime,
) -> SessionStatus:
    """Build the status for ``session`` from its events in chronological order."""
    if session is None:
        return SessionStatus.empty()

    result = replay(events, now)
    planned_secs = session.planned_secs
    elapsed_secs = result.elapsed_secs
    return SessionStatus(
        kind=session.kind.value,
        state=derive_state(events[-1] if events else None),
        planned_secs=planned_secs,
        elapsed_secs=elapsed_secs,
        remaining_secs=max(planned_secs - elapsed_secs, 0),
    )
