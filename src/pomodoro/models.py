"""Domain models for recorded sessions and their lifecycle events."""

from __future__ import annotations

import secrets
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

from .errors import UnknownVariantError


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class _Uuid7Generator:
    """Produce version 7 UUIDs that sort in creation order.

    The 12-bit ``rand_a`` field carries a sequence counter so ids minted within
    the same millisecond still increase; on overflow the timestamp is advanced.
    """

    def __init__(self) -> None:
        self._last_ms = -1
        self._seq = 0

    def __call__(self) -> uuid.UUID:
        now_ms = time.time_ns() // 1_000_000
        if now_ms > self._last_ms:
            self._last_ms = now_ms
            # Leave headroom in the counter for bursts within one millisecond.
            self._seq = secrets.randbits(10)
        else:
            self._seq += 1
            if self._seq > 0xFFF:
                self._last_ms += 1
                self._seq = 0

        value = (self._last_ms & 0xFFFF_FFFF_FFFF) << 80
        value |= 0x7 << 76
        value |= self._seq << 64
        value |= 0b10 << 62
        value |= secrets.randbits(62)
        return uuid.UUID(int=value)


new_id = _Uuid7Generator()


class SessionKind(str, Enum):
    FOCUS = "focus"
    BREAK = "break"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> "SessionKind":
        try:
            return cls(value)
        except ValueError:
            raise UnknownVariantError("session kind", value) from None


class SessionEventKind(str, Enum):
    STARTED = "started"
    RESUMED = "resumed"
    PAUSED = "paused"
    ABORTED = "aborted"
    COMPLETED = "completed"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> "SessionEventKind":
        try:
            return cls(value)
        except ValueError:
            raise UnknownVariantError("session event kind", value) from None

    @property
    def is_running(self) -> bool:
        return self in (SessionEventKind.STARTED, SessionEventKind.RESUMED)

    @property
    def is_terminal(self) -> bool:
        return self in (SessionEventKind.ABORTED, SessionEventKind.COMPLETED)


@dataclass(frozen=True, slots=True)
class Session:
    """A single focus or break interval with a fixed planned duration."""

    id: uuid.UUID
    kind: SessionKind
    planned_duration: timedelta
    created_at: datetime

    @classmethod
    def create(
        cls,
        kind: SessionKind,
        planned_duration: timedelta,
        now: datetime | None = None,
    ) -> "Session":
        return cls(
            id=new_id(),
            kind=kind,
            # Stored with whole-second precision.
            planned_duration=timedelta(seconds=int(planned_duration.total_seconds())),
            created_at=now or utc_now(),
        )

    @property
    def planned_secs(self) -> int:
        return int(self.planned_duration.total_seconds())


@dataclass(frozen=True, slots=True)
class SessionEvent:
    """One immutable lifecycle transition recorded against a session."""

    id: uuid.UUID
    kind: SessionEventKind
    session_id: uuid.UUID
    created_at: datetime

    @classmethod
    def create(
        cls,
        kind: SessionEventKind,
        session_id: uuid.UUID,
        now: datetime | None = None,
    ) -> "SessionEvent":
        return cls(
            id=new_id(),
            kind=kind,
            session_id=session_id,
            created_at=now or utc_now(),
        )
