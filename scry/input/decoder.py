"""Decode raw keyboard bytes read from a terminal.

Used directly on ``/dev/tty`` when stdin carries piped log data, and on the
text ``click.getchar`` returns when stdin is the terminal. Only the handful
of sequences the viewer binds are recognised; any other escape sequence is
consumed up to its final byte and dropped without an event.
"""

from __future__ import annotations

import logging
import os
import queue
import select
import threading
from enum import Enum
from typing import Iterable, List, Optional

from ..errors import TerminalModeError
from .keys import KeyKind, LogicalKeyEvent, char_event
from .terminal_mode import TerminalModeGuard

logger = logging.getLogger(__name__)

ESC = 0x1B
CSI_INTRODUCER = 0x5B  # '['
SS3_INTRODUCER = 0x4F  # 'O'
TILDE = 0x7E
ETX = 0x03  # Ctrl+C

# ECMA-48 byte classes inside a control sequence.
PARAMETER_BYTES = range(0x30, 0x40)
INTERMEDIATE_BYTES = range(0x20, 0x30)
FINAL_BYTES = range(0x40, 0x7F)

# Final byte of ESC [ X and ESC O X without parameters.
CSI_KEYS = {
    0x41: KeyKind.UP,  # A
    0x42: KeyKind.DOWN,  # B
    0x48: KeyKind.HOME,  # H
    0x46: KeyKind.END,  # F
}
SS3_KEYS = CSI_KEYS

# Parameter of ESC [ <n> ~ sequences.
CSI_TILDE_KEYS = {
    "5": KeyKind.PAGE_UP,
    "6": KeyKind.PAGE_DOWN,
    "1": KeyKind.HOME,
    "7": KeyKind.HOME,
    "4": KeyKind.END,
    "8": KeyKind.END,
}


class _State(Enum):
    GROUND = "ground"
    ESCAPE = "escape"
    CSI = "csi"
    SS3 = "ss3"
    SKIP = "skip"


class EscapeDecoder:
    """Byte-at-a-time state machine producing :class:`LogicalKeyEvent` values."""

    def __init__(self) -> None:
        self._state = _State.GROUND
        self._params = ""
        self._intermediate = False
        # Set when a lone ESC was reported on timeout; the rest of a slow
        # sequence may still arrive.
        self._late_escape = False

    @property
    def pending_escape(self) -> bool:
        """True right after a lone ESC, before the next byte arrives."""
        return self._state is _State.ESCAPE

    def feed(self, byte: int) -> List[LogicalKeyEvent]:
        state = self._state

        if state is _State.ESCAPE:
            if byte == CSI_INTRODUCER:
                self._state = _State.CSI
                return []
            if byte == SS3_INTRODUCER:
                self._state = _State.SS3
                return []
            # ESC followed by anything else: report ESC, then decode the byte.
            self._reset()
            return [LogicalKeyEvent.key(KeyKind.ESCAPE)] + self.feed(byte)

        if state is _State.CSI:
            if byte in PARAMETER_BYTES:
                self._params += chr(byte)
                return []
            if byte in INTERMEDIATE_BYTES:
                self._intermediate = True
                return []
            if byte in FINAL_BYTES:
                kind = self._csi_key(byte)
                self._reset()
                return [LogicalKeyEvent.key(kind)] if kind is not None else []
            # A control byte aborts the sequence and is decoded on its own.
            self._reset()
            return self.feed(byte)

        if state is _State.SS3:
            if byte in PARAMETER_BYTES or byte in INTERMEDIATE_BYTES:
                self._state = _State.SKIP
                return []
            self._reset()
            if byte in SS3_KEYS:
                return [LogicalKeyEvent.key(SS3_KEYS[byte])]
            if byte in FINAL_BYTES:
                return []
            return self.feed(byte)

        if state is _State.SKIP:
            if byte in PARAMETER_BYTES or byte in INTERMEDIATE_BYTES:
                return []
            self._reset()
            if byte in FINAL_BYTES:
                return []
            return self.feed(byte)

        if self._late_escape:
            self._late_escape = False
            if byte in (CSI_INTRODUCER, SS3_INTRODUCER):
                self._state = _State.SKIP
                return []

        if byte == ESC:
            self._state = _State.ESCAPE
            return []
        if byte == ETX:
            return [LogicalKeyEvent.ctrl("c")]
        if byte < 0x80:
            event = char_event(chr(byte))
            if event is not None:
                return [event]
        return []

    def finish(self) -> List[LogicalKeyEvent]:
        """Flush state at end of input.

        A lone ESC becomes an escape event; a half-read sequence is
        discarded.
        """
        lone_escape = self._state is _State.ESCAPE
        self._reset()
        self._late_escape = False
        if lone_escape:
            return [LogicalKeyEvent.key(KeyKind.ESCAPE)]
        return []

    def expire_escape(self) -> List[LogicalKeyEvent]:
        """Report a pending ESC whose follow-up byte did not arrive in time.

        If ``[`` or ``O`` shows up next anyway, that sequence is skipped
        instead of being read as typed characters.
        """
        if self._state is not _State.ESCAPE:
            return []
        self._reset()
        self._late_escape = True
        return [LogicalKeyEvent.key(KeyKind.ESCAPE)]

    def decode(self, data: Iterable[int], final: bool = True) -> List[LogicalKeyEvent]:
        events: List[LogicalKeyEvent] = []
        for byte in data:
            events.extend(self.feed(byte))
        if final:
            events.extend(self.finish())
        return events

    def _csi_key(self, final: int) -> Optional[KeyKind]:
        if self._intermediate:
            return None
        if final == TILDE:
            return CSI_TILDE_KEYS.get(self._params)
        if not self._params:
            return CSI_KEYS.get(final)
        return None

    def _reset(self) -> None:
        self._state = _State.GROUND
        self._params = ""
        self._intermediate = False


class TtyKeyReader:
    """Reader thread that feeds decoded keys into ``events``.

    The thread owns its terminal-mode guard. ``pause()`` makes it give the
    device back (mode restored, no reads) so an external program can use the
    terminal; ``resume()`` takes it again. Any failure to open or configure
    the device ends the reader quietly; the session keeps running and can
    still be stopped with SIGINT/SIGTERM.
    """

    # Upper bound on how long a pause or stop request waits for a blocked read.
    IDLE_POLL = 0.1

    def __init__(
        self,
        events: "queue.Queue[LogicalKeyEvent]",
        device: str = "/dev/tty",
        escape_timeout: float = 0.03,
    ):
        self.events = events
        self.device = device
        self.escape_timeout = escape_timeout
        self._stop = threading.Event()
        self._running = threading.Event()
        self._running.set()
        self._parked = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> threading.Thread:
        if self._thread is None:
            self._thread = threading.Thread(
                target=self.run, name="scry-tty-keys", daemon=True
            )
            self._thread.start()
        return self._thread

    def stop(self) -> None:
        self._stop.set()
        self._running.set()

    def pause(self, wait: float = 0.5) -> None:
        self._running.clear()
        if self._thread is not None and self._thread.is_alive():
            self._parked.wait(wait)

    def resume(self) -> None:
        self._parked.clear()
        self._running.set()

    def run(self) -> None:
        try:
            fd = os.open(self.device, os.O_RDONLY)
        except OSError as exc:
            logger.warning(f"Cannot open {self.device} for keyboard input: {exc}")
            return
        try:
            with TerminalModeGuard(fd) as guard:
                self._read_loop(fd, guard)
        except TerminalModeError as exc:
            logger.warning(f"Keyboard reader disabled: {exc}")
        finally:
            os.close(fd)
            self._parked.set()
        logger.info("Keyboard reader stopped")

    def _read_loop(self, fd: int, guard: TerminalModeGuard) -> None:
        decoder = EscapeDecoder()
        while not self._stop.is_set():
            if not self._running.is_set():
                self._emit(decoder.finish())
                guard.restore()
                self._parked.set()
                self._running.wait()
                if self._stop.is_set():
                    break
                guard.acquire()
                continue
            if not self._readable(fd, self.IDLE_POLL):
                continue
            try:
                data = os.read(fd, 1)
            except OSError as exc:
                logger.info(f"Keyboard device read failed: {exc}")
                break
            if not data:
                break
            self._emit(decoder.feed(data[0]))
            if decoder.pending_escape and not self._escape_continues(fd):
                self._emit(decoder.expire_escape())
        self._emit(decoder.finish())

    def _escape_continues(self, fd: int) -> bool:
        if self.escape_timeout <= 0:
            return True
        return self._readable(fd, self.escape_timeout)

    @staticmethod
    def _readable(fd: int, timeout: float) -> bool:
        try:
            readable, _, _ = select.select([fd], [], [], timeout)
        except (OSError, ValueError):
            # Fall through to a blocking read, which reports the real error.
            return True
        return bool(readable)

    def _emit(self, events: List[LogicalKeyEvent]) -> None:
        for event in events:
            self.events.put(event)


__all__ = ["EscapeDecoder", "TtyKeyReader"]
