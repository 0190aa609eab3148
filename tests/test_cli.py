"""
End-to-end tests for the command-line interface.
"""
import json
import sys

import pytest
from typer.testing import CliRunner

from pomodoro import __version__
from pomodoro.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))


@pytest.fixture
def invoke(tmp_path):
    db_path = tmp_path / "state.db"

    def _invoke(*args):
        return runner.invoke(app, ["--db", str(db_path), "--no-hooks", *args])

    return _invoke


def _status(invoke):
    result = invoke("status", "--output", "json")
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


def test_start_stop_cycle(invoke):
    result = invoke("start")
    assert result.exit_code == 0, result.output
    assert "Started a new focus session." in result.output

    result = invoke("start")
    assert "A focus session is already running." in result.output

    result = invoke("stop")
    assert "Paused the focus session." in result.output

    status = _status(invoke)
    assert status["kind"] == "focus"
    assert status["state"] == "paused"
    assert status["planned_secs"] == 1500

    result = invoke("stop")
    assert "The focus session is already paused." in result.output

    result = invoke("start")
    assert "Resumed the focus session." in result.output

    result = invoke("stop", "--reset")
    assert "Aborted the focus session." in result.output
    assert _status(invoke)["state"] == "aborted"

    result = invoke("stop")
    assert "No active focus session to stop." in result.output


def test_toggle_cycle(invoke):
    assert "Started a new focus session." in invoke("toggle").output
    assert "Paused the focus session." in invoke("toggle").output
    assert "Resumed the focus session." in invoke("toggle").output
    assert _status(invoke)["state"] == "running"


def test_start_break_with_custom_duration(invoke):
    result = invoke("start", "--mode", "break", "--duration", "10m")
    assert result.exit_code == 0, result.output
    assert "Started a new break session." in result.output

    status = _status(invoke)
    assert status["kind"] == "break"
    assert status["state"] == "running"
    assert status["planned_secs"] == 600


def test_stop_without_session(invoke):
    result = invoke("stop")
    assert result.exit_code == 0
    assert "No active session found." in result.output


def test_status_text_when_empty():
    result = runner.invoke(app, ["--in-memory", "--no-hooks", "status"])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "none | none | elapsed 00:00 | remaining 00:00"


def test_status_custom_format(invoke):
    invoke("start", "-d", "1h")
    result = invoke("status", "--format", "{{ kind }}/{{ planned_secs }}")
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "focus/3600"


def test_in_memory_does_not_persist():
    runner.invoke(app, ["--in-memory", "--no-hooks", "start"])
    result = runner.invoke(app, ["--in-memory", "--no-hooks", "status", "-o", "json"])
    assert json.loads(result.output)["state"] == "none"


def test_invalid_duration_is_a_usage_error(invoke):
    result = invoke("start", "--duration", "soon")
    assert result.exit_code == 2
    assert _status(invoke)["state"] == "none"


def test_out_of_range_duration_is_a_usage_error(invoke):
    result = invoke("start", "--duration", "99999999999d")
    assert result.exit_code == 2
    assert not isinstance(result.exception, OverflowError)
    assert _status(invoke)["state"] == "none"


def test_invalid_mode_is_a_usage_error(invoke):
    result = invoke("start", "--mode", "nap")
    assert result.exit_code == 2


def test_broken_template_exits_nonzero(invoke):
    result = invoke("status", "--format", "{{ kind ")
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_unopenable_database_exits_nonzero(tmp_path):
    result = runner.invoke(app, ["--db", str(tmp_path), "--no-hooks", "status"])
    assert result.exit_code == 1
    assert "Error:" in result.output


@pytest.mark.skipif(not sys.platform.startswith("linux"), reason="XDG config on Linux")
def test_start_uses_configured_default(tmp_path, invoke):
    config_dir = tmp_path / "config" / "pomodoro"
    config_dir.mkdir(parents=True)
    (config_dir / "config.toml").write_text('focus_duration = "50m"\nbreak_duration = "7m"\n')

    invoke("start", "--mode", "break")
    assert _status(invoke)["planned_secs"] == 420


@pytest.mark.skipif(not sys.platform.startswith("linux"), reason="XDG config on Linux")
def test_broken_config_falls_back_to_defaults(tmp_path, invoke):
    config_dir = tmp_path / "config" / "pomodoro"
    config_dir.mkdir(parents=True)
    (config_dir / "config.toml").write_text("focus_duration = = =\n")

    result = invoke("start")
    assert result.exit_code == 0
    assert _status(invoke)["planned_secs"] == 1500


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output
