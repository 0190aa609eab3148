"""Configuration models and helpers for the pomodoro timer."""

from __future__ import annotations

import logging
import re
import tomllib
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any, Optional

from .errors import ConfigError
from .models import SessionKind
from .paths import get_config_path

logger = logging.getLogger(__name__)

_UNIT_SECONDS: dict[str, float] = {
    "ms": 0.001,
    "msec": 0.001,
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3600,
    "hr": 3600,
    "hrs": 3600,
    "hour": 3600,
    "hours": 3600,
    "d": 86400,
    "day": 86400,
    "days": 86400,
}

_TERM_PATTERN = re.compile(r"\s*(\d+(?:\.\d+)?)\s*([a-zA-Z]+)\s*")


def parse_duration(text: str) -> timedelta:
    """Parse a human duration such as ``25m``, ``1h 30m`` or ``90sec``."""
    value = text.strip()
    if not value:
        raise ValueError("duration must not be empty")

    total = 0.0
    position = 0
    while position < len(value):
        match = _TERM_PATTERN.match(value, position)
        if not match:
            raise ValueError(f"invalid duration: {text!r}")
        amount, unit = match.groups()
        factor = _UNIT_SECONDS.get(unit.lower())
        if factor is None:
            raise ValueError(f"unknown duration unit {unit!r} in {text!r}")
        total += float(amount) * factor
        position = match.end()
    try:
        return timedelta(seconds=total)
    except OverflowError as exc:
        raise ValueError(f"duration out of range: {text!r}") from exc


def _coerce_duration(key: str, raw: Any) -> timedelta:
    if isinstance(raw, bool):
        raise ConfigError(f"{key} must be a duration, got {raw!r}")
    if isinstance(raw, (int, float)):
        try:
            duration = timedelta(seconds=raw)
        except (ValueError, OverflowError) as exc:
            raise ConfigError(f"{key}: invalid duration {raw!r}") from exc
    elif isinstance(raw, str):
        try:
            duration = parse_duration(raw)
        except ValueError as exc:
            raise ConfigError(f"{key}: {exc}") from exc
    else:
        raise ConfigError(f"{key} must be a duration, got {raw!r}")
    if duration.total_seconds() < 1:
        raise ConfigError(f"{key} must be at least one second")
    return duration


@dataclass(slots=True)
class ProgramConfig:
    """User defaults applied when ``start`` is called without a duration."""

    focus_duration: timedelta = timedelta(minutes=25)
    break_duration: timedelta = timedelta(minutes=5)

    def duration_for(self, kind: SessionKind) -> timedelta:
        if kind is SessionKind.BREAK:
            return self.break_duration
        return self.focus_duration

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "ProgramConfig":
        config = cls()
        if "focus_duration" in data:
            config.focus_duration = _coerce_duration("focus_duration", data["focus_duration"])
        if "break_duration" in data:
            config.break_duration = _coerce_duration("break_duration", data["break_duration"])
        return config

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "ProgramConfig":
        path = Path(path) if path is not None else get_config_path()
        try:
            with path.open("rb") as handle:
                data = tomllib.load(handle)
        except OSError as exc:
            raise ConfigError(f"Failed to read configuration file {path}: {exc}") from exc
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            raise ConfigError(f"Failed to load configuration file {path}: {exc}") from exc
        return cls.from_mapping(data)

    @classmethod
    def load_or_default(cls, path: Optional[Path] = None) -> "ProgramConfig":
        path = Path(path) if path is not None else get_config_path()
        if not path.exists():
            logger.debug("No configuration file at %s; using defaults.", path)
            return cls()
        try:
            return cls.load(path)
        except ConfigError as exc:
            logger.warning("%s; using defaults.", exc)
            return cls()
