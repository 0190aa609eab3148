"""Exceptions raised by the pomodoro timer."""

from __future__ import annotations


class PomodoroError(Exception):
    """Base exception for all fatal timer errors."""


class ConfigError(PomodoroError):
    """Raised when the configuration file cannot be read or parsed."""


class UnknownVariantError(PomodoroError):
    """Raised when a stored string does not name a known enum variant."""

    def __init__(self, what: str, value: object) -> None:
        self.what = what
        self.value = value
        super().__init__(f"unknown {what}: {value}")


class StorageError(PomodoroError):
    """Raised when the underlying database fails."""


class NotFoundError(PomodoroError):
    """Raised when a record referenced by id does not exist."""

    resource = "record"

    def __init__(self, resource_id: object) -> None:
        self.resource_id = resource_id
        super().__init__(f"{self.resource} with id {resource_id} not found")


class SessionNotFoundError(NotFoundError):
    resource = "session"


class SessionEventNotFoundError(NotFoundError):
    resource = "session event"


class InconsistentStateError(PomodoroError):
    """Raised when the event log breaks the single-live-session rule."""


class RenderError(PomodoroError):
    """Raised when a status template cannot be rendered."""
