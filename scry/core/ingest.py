"""Background reader that turns a byte stream into log lines."""

from __future__ import annotations

import logging
import queue
import threading
from typing import BinaryIO, Optional

logger = logging.getLogger(__name__)


def decode_line(raw: bytes) -> str:
    """Decode one raw line lossily and strip its terminator."""
    return raw.decode("utf-8", errors="replace").rstrip("\n").rstrip("\r")


class LineReader:
    """Read lines from ``stream`` and hand them to the session through ``lines``.

    ``lines`` is bounded; when it is full the reader waits instead of dropping
    input. End of stream or a read error ends the reader without raising.
    """

    PUT_TIMEOUT = 0.1

    def __init__(self, stream: BinaryIO, lines: "queue.Queue[str]"):
        self.stream = stream
        self.lines = lines
        self.count = 0
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> threading.Thread:
        if self._thread is None:
            self._thread = threading.Thread(
                target=self.run, name="scry-ingest", daemon=True
            )
            self._thread.start()
        return self._thread

    def stop(self) -> None:
        self._stop.set()

    @property
    def alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run(self) -> None:
        try:
            for raw in iter(self.stream.readline, b""):
                if not self._forward(decode_line(raw)):
                    return
        except (OSError, ValueError) as exc:
            logger.info(f"Input stream read failed after {self.count} lines: {exc}")
            return
        logger.info(f"Input stream ended after {self.count} lines")

    def _forward(self, line: str) -> bool:
        while not self._stop.is_set():
            try:
                self.lines.put(line, timeout=self.PUT_TIMEOUT)
            except queue.Full:
                continue
            self.count += 1
            return True
        return False


__all__ = ["LineReader", "decode_line"]
