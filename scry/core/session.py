"""The single-threaded loop that owns the log state and reacts to keys."""

from __future__ import annotations

import logging
import queue
import signal
import threading
from typing import Any, BinaryIO, Dict, Optional

from ..classifier.client import AnalysisWorker, Classifier
from ..classifier.models import JSON, PLAIN, AnalysisResult, ViewKind
from ..config import Config, get_config
from ..errors import ExternalToolError
from ..input.arbiter import InputArbiter
from ..input.keys import KeyKind, LogicalKeyEvent
from ..input.terminal_mode import restore_all
from ..plugins import ToolRegistry
from ..ui.screen import Screen, StatusLine
from ..utils.input_source import detect_input_source
from ..utils.persistence import API_KEY_HINT, has_api_key
from .buffer import LogState
from .ingest import LineReader

logger = logging.getLogger(__name__)

WAITING_MESSAGE = "Waiting for log input on stdin..."


class ScrySession:
    """Run the viewer until the user quits or a signal arrives.

    Lines, classifier results and key events reach the loop through queues.
    Only this loop mutates ``state``.
    """

    def __init__(
        self,
        stdin_is_tty: bool,
        stream: Optional[BinaryIO] = None,
        config: Optional[Config] = None,
        arbiter: Optional[InputArbiter] = None,
        screen: Optional[Screen] = None,
        worker: Optional[AnalysisWorker] = None,
        registry: Optional[ToolRegistry] = None,
        quit_event: Optional[threading.Event] = None,
        source_label: Optional[str] = None,
    ):
        self.config = config or get_config()
        self.state = LogState(self.config.buffer.capacity)
        self.lines: "queue.Queue[str]" = queue.Queue(
            maxsize=self.config.buffer.ingest_queue_size
        )
        self.reader = LineReader(stream, self.lines) if stream is not None else None
        self.arbiter = arbiter or InputArbiter.for_stdin(
            stdin_is_tty, escape_timeout=self.config.input.escape_timeout
        )
        self.screen = screen or Screen()
        self.registry = registry or ToolRegistry()
        self.worker = worker or AnalysisWorker(
            Classifier(self.config.classifier, self.registry)
        )
        self.quit = quit_event or threading.Event()
        self.view: ViewKind = PLAIN
        self.status = StatusLine(
            source=source_label or detect_input_source(stdin_is_tty),
            has_api_key=has_api_key(),
        )
        if stdin_is_tty:
            self.state.append(WAITING_MESSAGE)

    def run(self) -> None:
        previous = self._install_signal_handlers()
        logger.info(f"Session started ({self.status.source})")
        try:
            if self.reader is not None:
                self.reader.start()
            self.arbiter.start()
            self.screen.start()
            while not self.quit.is_set():
                self.step(self.config.input.poll_interval)
        finally:
            if self.reader is not None:
                self.reader.stop()
            self.arbiter.close()
            self.screen.stop()
            restore_all()
            self._restore_signal_handlers(previous)
            logger.info(f"Session stopped with {len(self.state)} lines buffered")

    def step(self, timeout: float = 0.0) -> None:
        """Run one loop iteration."""
        if self.quit.is_set():
            return
        self.drain_lines()
        self.drain_results()
        self.screen.render(self.state, self.view, self.status)
        for event in self.arbiter.drain(timeout):
            self.handle_key(event)
            if self.quit.is_set():
                break

    def drain_lines(self) -> int:
        count = 0
        while count < self.config.buffer.ingest_queue_size:
            try:
                line = self.lines.get_nowait()
            except queue.Empty:
                break
            self.state.append(line)
            count += 1
        return count

    def drain_results(self) -> None:
        for result in self.worker.drain():
            self.apply_result(result)

    def apply_result(self, result: AnalysisResult) -> None:
        self.view = result.view
        self.status.message = result.summary
        if result.view.is_external and result.view.tool:
            self.launch_external(result.view.tool)

    def launch_external(self, name: str) -> None:
        tool = self.registry.get(name)
        if tool is None or not tool.is_available():
            logger.warning(f"{name} is not installed, falling back to Json view")
            self.view = JSON
            self.status.message = f"Json ({name} not available)"
            return
        with self.screen.handed_off(self.arbiter):
            try:
                tool.spawn_with_logs(self.state.snapshot())
            except ExternalToolError as exc:
                logger.error(f"External tool failed: {exc}")
                self.status.message = f"Error launching {name}: {exc}"

    def request_analysis(self) -> None:
        self.status.has_api_key = has_api_key()
        if not self.status.has_api_key:
            self.status.message = API_KEY_HINT
            return
        model = self.config.classifier.model
        self.status.message = f"Calling OpenAI API ({model}) to analyze logs..."
        self.worker.request(self.state.snapshot())

    def handle_key(self, event: LogicalKeyEvent) -> None:
        state = self.state
        page = self.config.input.page_size

        if event.is_char("q") or event.is_ctrl("c"):
            self.quit.set()
        elif event.is_char("a"):
            self.request_analysis()
        elif event.is_char("f"):
            self.toggle_selection()
        elif event.is_char("c") or event.kind is KeyKind.ESCAPE:
            state.clear_selection()
        elif event.kind is KeyKind.UP:
            if state.selected is None:
                state.scroll_up(1)
            else:
                state.move_selection(-1)
        elif event.kind is KeyKind.DOWN:
            if state.selected is None:
                state.scroll_down(1)
            else:
                state.move_selection(1)
        elif event.kind is KeyKind.PAGE_UP:
            state.scroll_up(page)
        elif event.kind is KeyKind.PAGE_DOWN:
            state.scroll_down(page)
        elif event.kind is KeyKind.HOME:
            state.scroll_to_start()
        elif event.kind is KeyKind.END:
            state.scroll_to_end()

    def toggle_selection(self) -> None:
        state = self.state
        if state.selected is not None:
            state.clear_selection()
            return
        index = state.index_at(state.scroll_offset)
        if index is None:
            return
        state.select(index)
        state.follow_selection()

    def _install_signal_handlers(self) -> Dict[int, Any]:
        previous: Dict[int, Any] = {}
        if threading.current_thread() is not threading.main_thread():
            return previous
        for signum in (signal.SIGINT, signal.SIGTERM):
            previous[signum] = signal.signal(signum, self._on_signal)
        return previous

    def _restore_signal_handlers(self, previous: Dict[int, Any]) -> None:
        for signum, handler in previous.items():
            signal.signal(signum, handler)

    def _on_signal(self, signum: int, frame: Any) -> None:
        logger.info(f"Received signal {signum}, quitting")
        self.quit.set()


__all__ = ["ScrySession", "WAITING_MESSAGE"]
