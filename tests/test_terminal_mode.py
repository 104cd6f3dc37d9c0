from __future__ import annotations

import os
import pty
import termios

import pytest

from scry.errors import TerminalModeError
from scry.input import terminal_mode
from scry.input.terminal_mode import TerminalModeGuard, restore_all


@pytest.fixture
def slave_fd():
    master, slave = pty.openpty()
    try:
        yield slave
    finally:
        os.close(master)
        os.close(slave)


def _lflag(fd: int) -> int:
    return termios.tcgetattr(fd)[3]


def test_guard_clears_canonical_and_echo(slave_fd: int) -> None:
    before = termios.tcgetattr(slave_fd)

    with TerminalModeGuard(slave_fd) as guard:
        assert guard.active
        attrs = termios.tcgetattr(slave_fd)
        assert not attrs[3] & termios.ICANON
        assert not attrs[3] & termios.ECHO
        assert attrs[6][termios.VMIN] in (1, b"\x01")

    assert not guard.active
    assert termios.tcgetattr(slave_fd) == before


def test_guard_restores_on_exception(slave_fd: int) -> None:
    before = _lflag(slave_fd)

    with pytest.raises(RuntimeError):
        with TerminalModeGuard(slave_fd):
            raise RuntimeError("boom")

    assert _lflag(slave_fd) == before


def test_restore_is_idempotent(slave_fd: int) -> None:
    guard = TerminalModeGuard(slave_fd)
    guard.acquire()
    guard.restore()
    guard.restore()
    assert _lflag(slave_fd) & termios.ICANON


def test_restore_all_releases_held_guards(slave_fd: int) -> None:
    guard = TerminalModeGuard(slave_fd)
    guard.acquire()
    assert guard in terminal_mode._ACTIVE

    restore_all()

    assert not guard.active
    assert guard not in terminal_mode._ACTIVE
    assert _lflag(slave_fd) & termios.ICANON


def test_acquire_on_non_terminal_raises(tmp_path) -> None:
    path = tmp_path / "plain.txt"
    path.write_text("x")
    fd = os.open(path, os.O_RDONLY)
    try:
        with pytest.raises(TerminalModeError):
            TerminalModeGuard(fd).acquire()
    finally:
        os.close(fd)
