"""Tests for the scry command line."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from click.testing import CliRunner

from scry import __main__ as cli_module
from scry import __version__
from scry.errors import ScryError
from scry.utils import persistence


class RecordingSession:
    instances: list["RecordingSession"] = []

    def __init__(self, stdin_is_tty: bool, stream=None):
        self.stdin_is_tty = stdin_is_tty
        self.stream = stream
        self.ran = False
        RecordingSession.instances.append(self)

    def run(self) -> None:
        self.ran = True


@pytest.fixture
def runner(scry_dirs: Path, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    RecordingSession.instances = []
    monkeypatch.setattr(cli_module, "ScrySession", RecordingSession)
    monkeypatch.setattr(cli_module, "setup_logging", lambda: scry_dirs / "scry.log")
    return CliRunner()


def test_version(runner: CliRunner) -> None:
    result = runner.invoke(cli_module.cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_key_is_stored(runner: CliRunner) -> None:
    result = runner.invoke(cli_module.cli, ["--key", "sk-abc"])

    assert result.exit_code == 0
    assert "API key saved" in result.output
    assert persistence.get_api_key() == "sk-abc"
    assert RecordingSession.instances == []


def test_empty_key_is_rejected(runner: CliRunner) -> None:
    result = runner.invoke(cli_module.cli, ["-k", "  "])
    assert result.exit_code != 0
    assert not persistence.has_api_key()


def test_delete_removes_key(runner: CliRunner) -> None:
    persistence.set_api_key("sk-abc")

    result = runner.invoke(cli_module.cli, ["-d"])

    assert result.exit_code == 0
    assert "API key deleted" in result.output
    assert not persistence.has_api_key()


def test_interactive_stdin_prints_usage(
    runner: CliRunner, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(cli_module, "_is_terminal", lambda stream: True)

    result = runner.invoke(cli_module.cli, [])

    assert result.exit_code == 0
    assert "Usage:" in result.output
    assert "tail -f /var/log/syslog | scry" in result.output
    assert RecordingSession.instances == []


def test_start_opens_viewer_without_input(
    runner: CliRunner, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(cli_module, "_is_terminal", lambda stream: True)

    result = runner.invoke(cli_module.cli, ["--start"])

    assert result.exit_code == 0
    [session] = RecordingSession.instances
    assert session.stdin_is_tty
    assert session.stream is None
    assert session.ran


def test_piped_input_is_streamed(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_module, "_is_terminal", lambda stream: stream is not sys.stdin)

    result = runner.invoke(cli_module.cli, [], input="one\ntwo\n")

    assert result.exit_code == 0
    [session] = RecordingSession.instances
    assert not session.stdin_is_tty
    assert session.stream.read() == b"one\ntwo\n"


def test_requires_terminal_on_stdout(runner: CliRunner) -> None:
    result = runner.invoke(cli_module.cli, [], input="one\n")

    assert result.exit_code == 1
    assert "interactive terminal" in result.output


def test_session_errors_become_click_errors(
    runner: CliRunner, monkeypatch: pytest.MonkeyPatch
) -> None:
    class FailingSession(RecordingSession):
        def run(self) -> None:
            raise ScryError("terminal went away")

    monkeypatch.setattr(cli_module, "ScrySession", FailingSession)
    monkeypatch.setattr(cli_module, "_is_terminal", lambda stream: True)

    result = runner.invoke(cli_module.cli, ["--start"])

    assert result.exit_code == 1
    assert "terminal went away" in result.output
