"""
Unit tests for configuration loading and duration parsing.
"""
from datetime import timedelta

import pytest

from pomodoro.config import ProgramConfig, parse_duration
from pomodoro.errors import ConfigError
from pomodoro.models import SessionKind


@pytest.mark.parametrize(
    "text, expected",
    [
        ("25m", timedelta(minutes=25)),
        ("25min", timedelta(minutes=25)),
        ("90s", timedelta(seconds=90)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("1h 30m", timedelta(hours=1, minutes=30)),
        ("2 hours 5 minutes", timedelta(hours=2, minutes=5)),
        ("1.5h", timedelta(minutes=90)),
        ("500ms", timedelta(milliseconds=500)),
        ("1d", timedelta(days=1)),
        ("  10sec ", timedelta(seconds=10)),
    ],
)
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize(
    "text",
    ["", "   ", "25", "10 parsecs", "m", "5m-3s", "99999999999d", "9" * 400 + "s"],
)
def test_parse_duration_rejects_invalid(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_defaults():
    config = ProgramConfig()
    assert config.focus_duration == timedelta(minutes=25)
    assert config.break_duration == timedelta(minutes=5)
    assert config.duration_for(SessionKind.FOCUS) == timedelta(minutes=25)
    assert config.duration_for(SessionKind.BREAK) == timedelta(minutes=5)


def test_load_reads_toml(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('focus_duration = "50m"\nbreak_duration = 600\n')

    config = ProgramConfig.load(path)

    assert config.focus_duration == timedelta(minutes=50)
    assert config.break_duration == timedelta(minutes=10)


def test_load_keeps_defaults_for_missing_keys(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('break_duration = "15m"\n')

    config = ProgramConfig.load(path)

    assert config.focus_duration == timedelta(minutes=25)
    assert config.break_duration == timedelta(minutes=15)


@pytest.mark.parametrize(
    "content",
    [
        "focus_duration = ",
        'focus_duration = "soon"',
        "focus_duration = true",
        "break_duration = 0",
        "focus_duration = [1, 2]",
        "focus_duration = nan",
        "focus_duration = inf",
        "focus_duration = 1e20",
        "focus_duration = 99999999999999",
        'focus_duration = "99999999999d"',
    ],
)
def test_load_rejects_bad_content(tmp_path, content):
    path = tmp_path / "config.toml"
    path.write_text(content + "\n")

    with pytest.raises(ConfigError):
        ProgramConfig.load(path)


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(ConfigError):
        ProgramConfig.load(tmp_path / "missing.toml")


def test_load_or_default_falls_back(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("not toml at all = = =\n")

    assert ProgramConfig.load_or_default(path) == ProgramConfig()
    assert ProgramConfig.load_or_default(tmp_path / "missing.toml") == ProgramConfig()


@pytest.mark.parametrize(
    "content",
    [
        b"focus_duration = nan\n",
        b"focus_duration = inf\n",
        b"focus_duration = 1e20\n",
        b"focus_duration = 99999999999999\n",
        b'focus_duration = "99999999999d"\n',
        b'focus_duration = "\xff\xfe"\n',
    ],
)
def test_load_or_default_survives_out_of_range_values(tmp_path, content):
    path = tmp_path / "config.toml"
    path.write_bytes(content)

    assert ProgramConfig.load_or_default(path) == ProgramConfig()


def test_load_rejects_non_utf8_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_bytes(b"\xff\xfe\x00junk\n")

    with pytest.raises(ConfigError):
        ProgramConfig.load(path)
