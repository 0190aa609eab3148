"""Fire-and-forget hook executables run on session lifecycle events."""

from __future__ import annotations

import logging
import subprocess
import uuid
import warnings
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel

from .models import Session, SessionEvent, SessionEventKind, SessionKind

logger = logging.getLogger(__name__)

START_HOOK = "start"
STOP_HOOK = "stop"


class SessionPayload(BaseModel):
    id: uuid.UUID
    kind: SessionKind
    planned_secs: int
    created_at: datetime

    @classmethod
    def from_session(cls, session: Session) -> "SessionPayload":
        return cls(
            id=session.id,
            kind=session.kind,
            planned_secs=session.planned_secs,
            created_at=session.created_at,
        )


class SessionEventPayload(BaseModel):
    id: uuid.UUID
    kind: SessionEventKind
    session_id: uuid.UUID
    created_at: datetime

    @classmethod
    def from_event(cls, session_event: SessionEvent) -> "SessionEventPayload":
        return cls(
            id=session_event.id,
            kind=session_event.kind,
            session_id=session_event.session_id,
            created_at=session_event.created_at,
        )


class HookPayload(BaseModel):
    """JSON document written to a hook's standard input."""

    session: SessionPayload
    session_event: SessionEventPayload

    @classmethod
    def build(cls, session: Session, session_event: SessionEvent) -> "HookPayload":
        return cls(
            session=SessionPayload.from_session(session),
            session_event=SessionEventPayload.from_event(session_event),
        )


def hook_name(session_event: SessionEvent) -> str:
    return START_HOOK if session_event.kind.is_running else STOP_HOOK


class HookRunner:
    """Run ``start``/``stop`` executables found in a hooks directory.

    Dispatch is best-effort: the child is never awaited and no failure reaches
    the caller.
    """

    def __init__(self, hooks_dir: Path) -> None:
        self.hooks_dir = Path(hooks_dir)

    def dispatch(self, session: Session, session_event: SessionEvent) -> bool:
        """Spawn the matching hook; return whether a process was started."""
        name = hook_name(session_event)
        path = self.hooks_dir / name
        if not path.exists():
            logger.debug("No %s hook at %s; skipping.", name, path)
            return False
        try:
            self._spawn(path, HookPayload.build(session, session_event))
        except Exception as exc:
            logger.warning("Failed to run %s hook %s: %s", name, path, exc)
            return False
        logger.debug("Spawned %s hook for %s event.", name, session_event.kind)
        return True

    @staticmethod
    def _spawn(path: Path, payload: HookPayload) -> None:
        data = payload.model_dump_json().encode("utf-8")
        process = subprocess.Popen(
            [str(path)],
            stdin=subprocess.PIPE,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
        try:
            assert process.stdin is not None
            try:
                process.stdin.write(data)
            finally:
                process.stdin.close()
        finally:
            # Never awaited: drop the handle without the "still running" ResourceWarning.
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", ResourceWarning)
                del process
