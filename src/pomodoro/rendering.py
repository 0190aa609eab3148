"""Render session status for console output."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from jinja2 import Environment, TemplateError

from .errors import RenderError
from .status import SessionStatus

DEFAULT_TEXT_TEMPLATE = (
    "{{ kind }} | {{ state }} | elapsed {{ elapsed_secs | mmss }}"
    " | remaining {{ remaining_secs | mmss }}"
)


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"


def format_clock(seconds: float) -> str:
    """Format seconds as zero-padded ``MM:SS``; minutes are not capped at 59."""
    total_seconds = max(int(seconds), 0)
    minutes, secs = divmod(total_seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


def _environment() -> Environment:
    env = Environment(autoescape=False)
    env.filters["mmss"] = format_clock
    return env


def render_text(status: SessionStatus, template: Optional[str] = None) -> str:
    try:
        compiled = _environment().from_string(template or DEFAULT_TEXT_TEMPLATE)
        return compiled.render(**status.model_dump(mode="json"))
    except (TemplateError, ArithmeticError, TypeError, ValueError) as exc:
        raise RenderError(f"Failed to render status template: {exc}") from exc


def render_json(status: SessionStatus) -> str:
    return status.model_dump_json(indent=2)


def render_status(
    status: SessionStatus,
    output: OutputFormat = OutputFormat.TEXT,
    template: Optional[str] = None,
) -> str:
    if output is OutputFormat.JSON:
        return render_json(status)
    return render_text(status, template)
