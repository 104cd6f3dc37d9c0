"""Pick one keyboard source per session and normalise its events."""

from __future__ import annotations

import logging
import queue
import select
import sys
import time
from abc import ABC, abstractmethod
from typing import List, Optional, TextIO

import click

from ..errors import TerminalModeError
from .decoder import EscapeDecoder, TtyKeyReader
from .keys import LogicalKeyEvent
from .terminal_mode import TerminalModeGuard

logger = logging.getLogger(__name__)


def translate_keys(chunk: str) -> List[LogicalKeyEvent]:
    """Turn text read from a raw terminal into logical key events.

    A single read may hold several keys when the user types quickly. The text
    goes through the same :class:`EscapeDecoder` as ``/dev/tty`` bytes so both
    keyboard paths report identical events.
    """
    return EscapeDecoder().decode(chunk.encode("utf-8", errors="replace"))


class EventSource(ABC):
    """A keyboard source the arbiter can drain once per loop iteration."""

    name = "source"

    @abstractmethod
    def start(self) -> None: ...

    @abstractmethod
    def drain(self, timeout: float) -> List[LogicalKeyEvent]: ...

    @abstractmethod
    def suspend(self) -> None: ...

    @abstractmethod
    def resume(self) -> None: ...

    @abstractmethod
    def close(self) -> None: ...


class TtyDecoderSource(EventSource):
    """Keys decoded from ``/dev/tty`` by a background reader thread."""

    name = "tty-decoder"

    def __init__(self, device: str = "/dev/tty", escape_timeout: float = 0.03):
        self.events: "queue.Queue[LogicalKeyEvent]" = queue.Queue()
        self.reader = TtyKeyReader(
            self.events, device=device, escape_timeout=escape_timeout
        )

    def start(self) -> None:
        self.reader.start()

    def drain(self, timeout: float) -> List[LogicalKeyEvent]:
        events: List[LogicalKeyEvent] = []
        try:
            if timeout > 0:
                events.append(self.events.get(timeout=timeout))
            else:
                events.append(self.events.get_nowait())
        except queue.Empty:
            return events
        while True:
            try:
                events.append(self.events.get_nowait())
            except queue.Empty:
                return events

    def suspend(self) -> None:
        self.reader.pause()

    def resume(self) -> None:
        self.reader.resume()

    def close(self) -> None:
        self.reader.stop()


class TerminalEventSource(EventSource):
    """Keys polled from an interactive stdin with ``select`` and ``click.getchar``."""

    name = "terminal"

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdin
        self.guard = TerminalModeGuard(self.stream.fileno())
        self._suspended = False

    def start(self) -> None:
        try:
            self.guard.acquire()
        except TerminalModeError as exc:
            # click.getchar still switches to raw mode for each read.
            logger.warning(f"Keeping stdin in its current mode: {exc}")

    def drain(self, timeout: float) -> List[LogicalKeyEvent]:
        if self._suspended:
            time.sleep(timeout)
            return []
        try:
            readable, _, _ = select.select([self.stream], [], [], timeout)
        except (OSError, ValueError) as exc:
            logger.debug(f"Polling stdin failed: {exc}")
            return []
        if not readable:
            return []
        try:
            chunk = click.getchar(echo=False)
        except KeyboardInterrupt:
            return [LogicalKeyEvent.ctrl("c")]
        except EOFError:
            return []
        return translate_keys(chunk)

    def suspend(self) -> None:
        self._suspended = True
        self.guard.restore()

    def resume(self) -> None:
        self._suspended = False
        try:
            self.guard.acquire()
        except TerminalModeError as exc:
            logger.warning(f"Could not reacquire stdin mode: {exc}")

    def close(self) -> None:
        self.guard.restore()


class InputArbiter:
    """Own the keyboard source chosen at startup.

    The choice depends only on whether stdin was a terminal when the session
    began and never changes afterwards.
    """

    def __init__(self, source: EventSource):
        self.source = source
        self._started = False

    @classmethod
    def for_stdin(
        cls, stdin_is_tty: bool, escape_timeout: float = 0.03
    ) -> "InputArbiter":
        if stdin_is_tty:
            source: EventSource = TerminalEventSource()
        else:
            source = TtyDecoderSource(escape_timeout=escape_timeout)
        return cls(source)

    @property
    def mode(self) -> str:
        return self.source.name

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        logger.info(f"Keyboard input path: {self.mode}")
        self.source.start()

    def drain(self, timeout: float = 0.0) -> List[LogicalKeyEvent]:
        """Return the key events available now, waiting at most ``timeout``."""
        return [event for event in self.source.drain(timeout) if event.pressed]

    def suspend(self) -> None:
        self.source.suspend()

    def resume(self) -> None:
        self.source.resume()

    def close(self) -> None:
        self.source.close()


__all__ = [
    "EventSource",
    "InputArbiter",
    "TerminalEventSource",
    "TtyDecoderSource",
    "translate_keys",
]
