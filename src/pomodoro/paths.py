"""Helpers for locating application directories."""

from __future__ import annotations

from pathlib import Path

from platformdirs import PlatformDirs


APP_NAME = "pomodoro"


def _dirs() -> PlatformDirs:
    return PlatformDirs(appname=APP_NAME, appauthor=False)


def get_state_dir() -> Path:
    """Return the directory holding the session database."""
    path = Path(_dirs().user_state_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Return the directory holding ``config.toml`` and the hooks."""
    return Path(_dirs().user_config_path)


def get_db_path() -> Path:
    return get_state_dir() / "state.db"


def get_config_path() -> Path:
    return get_config_dir() / "config.toml"


def get_hooks_dir() -> Path:
    return get_config_dir() / "hooks"
