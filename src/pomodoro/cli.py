"""Command-line interface for the pomodoro timer."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Callable, Optional, TypeVar

import typer

from . import __version__
from .config import ProgramConfig, parse_duration
from .db import MEMORY_DATABASE, SessionStore, database_connection
from .errors import PomodoroError
from .hooks import HookRunner
from .models import SessionKind
from .paths import get_db_path, get_hooks_dir
from .rendering import OutputFormat, render_status
from .timer import PomodoroTimer

logger = logging.getLogger(__name__)

T = TypeVar("T")

app = typer.Typer(help="A simple pomodoro timer.")


@dataclass(slots=True)
class CliState:
    db_target: Path | str
    hooks: Optional[HookRunner]


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"pomodoro {__version__}")
        raise typer.Exit()


@app.callback(no_args_is_help=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs."),
    in_memory: bool = typer.Option(
        False, "--in-memory", hidden=True, help="Use an ephemeral database."
    ),
    no_hooks: bool = typer.Option(
        False, "--no-hooks", hidden=True, help="Do not run hook executables."
    ),
    db_path: Optional[Path] = typer.Option(
        None, "--db", path_type=Path, hidden=True, help="Location of the session database."
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    if in_memory:
        db_target: Path | str = MEMORY_DATABASE
    else:
        db_target = db_path or get_db_path()
    ctx.obj = CliState(
        db_target=db_target,
        hooks=None if no_hooks else HookRunner(get_hooks_dir()),
    )


def _run(ctx: typer.Context, action: Callable[[PomodoroTimer], T]) -> T:
    """Run ``action`` inside a single write transaction, exiting 1 on failure."""
    state: CliState = ctx.obj
    try:
        with database_connection(state.db_target) as conn:
            store = SessionStore(conn)
            store.migrate()
            timer = PomodoroTimer(store, hooks=state.hooks)
            with store.write_transaction():
                return action(timer)
    except PomodoroError as exc:
        logger.debug("Command failed.", exc_info=True)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _planned_duration(mode: SessionKind, duration: Optional[str]) -> timedelta:
    if duration is None:
        return ProgramConfig.load_or_default().duration_for(mode)
    try:
        return parse_duration(duration)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--duration") from exc


@app.command()
def start(
    ctx: typer.Context,
    mode: SessionKind = typer.Option(
        SessionKind.FOCUS, "--mode", "-m", help="The session mode."
    ),
    duration: Optional[str] = typer.Option(
        None,
        "--duration",
        "-d",
        help="Planned duration such as 25m or 1h30m. Defaults to the configured one.",
    ),
) -> None:
    """Start a new session, or resume a paused one."""
    planned = _planned_duration(mode, duration)
    result = _run(ctx, lambda timer: timer.start(mode, planned))
    typer.echo(result.message)


@app.command()
def stop(
    ctx: typer.Context,
    reset: bool = typer.Option(
        False, "--reset", "-r", help="Abort the session instead of pausing it."
    ),
) -> None:
    """Pause the running session, or abort it with --reset."""
    result = _run(ctx, lambda timer: timer.stop(reset=reset))
    typer.echo(result.message)


@app.command()
def toggle(
    ctx: typer.Context,
    mode: SessionKind = typer.Option(
        SessionKind.FOCUS, "--mode", "-m", help="The mode used when a session is started."
    ),
    duration: Optional[str] = typer.Option(
        None, "--duration", "-d", help="Planned duration for a new session."
    ),
) -> None:
    """Pause the running session, otherwise start or resume one."""
    planned = _planned_duration(mode, duration)
    result = _run(ctx, lambda timer: timer.toggle(mode, planned))
    typer.echo(result.message)


@app.command()
def status(
    ctx: typer.Context,
    output: OutputFormat = typer.Option(
        OutputFormat.TEXT, "--output", "-o", help="The output type."
    ),
    template: Optional[str] = typer.Option(
        None, "--format", "-f", help="Custom Jinja2 template for text output."
    ),
) -> None:
    """Display the current session status."""

    def _status(timer: PomodoroTimer) -> str:
        return render_status(timer.status(), output, template)

    typer.echo(_run(ctx, _status))
