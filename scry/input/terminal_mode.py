"""Scoped override of a terminal's line discipline.

While a guard is held the device delivers bytes one at a time without local
echo. The original attributes are put back when the guard is released, and
an ``atexit`` hook restores any guard still held when the interpreter exits
(reader threads blocked in ``read`` never reach their own ``finally``).
"""

from __future__ import annotations

import atexit
import logging
import termios
import threading
from typing import Any, List, Optional, Set

from ..errors import TerminalModeError

logger = logging.getLogger(__name__)

_ACTIVE: Set["TerminalModeGuard"] = set()
_ACTIVE_LOCK = threading.Lock()


class TerminalModeGuard:
    """Put ``fd`` into non-canonical, no-echo mode for the guarded scope."""

    def __init__(self, fd: int):
        self.fd = fd
        self._saved: Optional[List[Any]] = None

    @property
    def active(self) -> bool:
        return self._saved is not None

    def acquire(self) -> None:
        if self._saved is not None:
            return
        try:
            saved = termios.tcgetattr(self.fd)
            mode = termios.tcgetattr(self.fd)
            mode[3] &= ~(termios.ICANON | termios.ECHO)
            mode[6][termios.VMIN] = 1
            mode[6][termios.VTIME] = 0
            termios.tcsetattr(self.fd, termios.TCSANOW, mode)
        except (termios.error, OSError) as exc:
            raise TerminalModeError(
                f"Cannot switch fd {self.fd} to unbuffered mode: {exc}"
            ) from exc
        self._saved = saved
        with _ACTIVE_LOCK:
            _ACTIVE.add(self)
        logger.debug(f"Terminal mode acquired on fd {self.fd}")

    def restore(self) -> None:
        saved = self._saved
        if saved is None:
            return
        self._saved = None
        with _ACTIVE_LOCK:
            _ACTIVE.discard(self)
        try:
            termios.tcsetattr(self.fd, termios.TCSANOW, saved)
        except (termios.error, OSError) as exc:
            logger.warning(f"Failed to restore terminal mode on fd {self.fd}: {exc}")
            return
        logger.debug(f"Terminal mode restored on fd {self.fd}")

    def __enter__(self) -> "TerminalModeGuard":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.restore()


def restore_all() -> None:
    """Restore every guard that is still held."""
    with _ACTIVE_LOCK:
        guards = list(_ACTIVE)
    for guard in guards:
        guard.restore()


atexit.register(restore_all)


__all__ = ["TerminalModeGuard", "restore_all"]
