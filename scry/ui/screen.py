"""Full-screen layout drawn with a rich ``Live`` display."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.text import Text

from ..classifier.models import ViewKind
from ..core.buffer import LogState
from ..input.arbiter import InputArbiter
from .views import render_view

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "q quit  a analyze  f select/clear  c clear  "
    "↑/↓ move  PgUp/PgDn page  Home/End jump"
)


@dataclass
class StatusLine:
    """What the bottom bar shows."""

    source: str
    has_api_key: bool
    message: str = "Ready"

    def render(self) -> Text:
        key = ("API key: set", "green") if self.has_api_key else ("API key: missing", "red")
        return Text.assemble(
            (self.source, "bold"), "  |  ", key, "  |  ", self.message
        )


def header_text(state: LogState, view: ViewKind) -> Text:
    parts = [
        ("scry", "bold magenta"),
        f"  view: {view.name}",
        f"  lines: {len(state)}/{state.capacity}",
    ]
    if state.selected is not None:
        parts.append(f"  selected: {state.selected}")
    return Text.assemble(*parts)


class Screen:
    """Own the alternate screen while the session runs."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self.live: Optional[Live] = None

    @property
    def height(self) -> int:
        return self.console.size.height

    def start(self) -> None:
        if self.live is not None:
            return
        self.live = Live(
            console=self.console,
            screen=True,
            auto_refresh=False,
            redirect_stdout=False,
            redirect_stderr=False,
        )
        self.live.start()

    def stop(self) -> None:
        if self.live is None:
            return
        live, self.live = self.live, None
        live.stop()

    def build_layout(self, state: LogState, view: ViewKind, status: StatusLine) -> Layout:
        # Header, help and status take one row each.
        main_height = max(self.height - 3, 3)
        layout = Layout()
        layout.split_column(
            Layout(header_text(state, view), name="header", size=1),
            Layout(render_view(view, state, main_height), name="main"),
            Layout(Text(HELP_TEXT, style="dim"), name="help", size=1),
            Layout(status.render(), name="status", size=1),
        )
        return layout

    def render(self, state: LogState, view: ViewKind, status: StatusLine) -> None:
        if self.live is None:
            return
        self.live.update(self.build_layout(state, view, status), refresh=True)

    @contextmanager
    def handed_off(self, arbiter: Optional[InputArbiter] = None) -> Iterator[None]:
        """Give the terminal to another program for the duration of the block.

        The live display is stopped and keyboard reading suspended so the
        terminal is back in its original mode; both are reacquired on exit.
        """
        was_live = self.live is not None
        self.stop()
        if arbiter is not None:
            arbiter.suspend()
        try:
            yield
        finally:
            if arbiter is not None:
                arbiter.resume()
            if was_live:
                self.start()


__all__ = ["HELP_TEXT", "Screen", "StatusLine", "header_text"]
