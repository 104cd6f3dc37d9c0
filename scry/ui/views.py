"""rich renderables for each view kind.

Views read the log state through ``display_window()``, the selection and the
filter token only. They never mutate it.
"""

from __future__ import annotations

import json
from typing import List, Tuple

from rich.console import RenderableType
from rich.panel import Panel
from rich.text import Text

from ..classifier.models import ViewKind, ViewType
from ..core.buffer import LogState
from ..core.cleaner import extract_key_value_pairs, safe_json_display, safe_string_display

SELECTED_STYLE = "black on cyan"
MATCH_STYLE = "bold yellow"
KEY_STYLE = "bold cyan"
INDEX_STYLE = "dim"


def view_title(name: str, state: LogState) -> str:
    if state.filter_token is None:
        return name
    return (
        f"{name} (filtered: '{state.filter_token}', "
        f"{len(state.matching_indices)} matches)"
    )


def visible_rows(state: LogState, height: int) -> List[Tuple[int, str]]:
    """Rows of the display window starting at the scroll offset that fit ``height``."""
    if height <= 0:
        return []
    window = state.display_window()
    start = min(state.scroll_offset, max(len(window) - 1, 0))
    return window[start : start + height]


def styled_line(state: LogState, index: int, text: str) -> Text:
    """Build one display line with filter matches emphasised."""
    line = Text(f"{index:>5} ", style=INDEX_STYLE)
    body = Text(text)
    for start, end in state.highlight_spans(text):
        body.stylize(MATCH_STYLE, start, end)
    line.append_text(body)
    if index == state.selected:
        line.stylize(SELECTED_STYLE)
    return line


def render_plain(state: LogState, height: int) -> Text:
    rows = [
        styled_line(state, index, safe_string_display(line))
        for index, line in visible_rows(state, height)
    ]
    return Text("\n").join(rows)


def render_key_value(state: LogState, height: int) -> Text:
    rows: List[Text] = []
    for index, line in visible_rows(state, height):
        pairs = extract_key_value_pairs(line)
        if not pairs:
            rows.append(styled_line(state, index, safe_string_display(line)))
            continue
        row = Text(f"{index:>5} ", style=INDEX_STYLE)
        for n, (key, value) in enumerate(pairs):
            if n:
                row.append("  ")
            row.append(f"{key}: ", style=KEY_STYLE)
            cell = Text(value)
            for start, end in state.highlight_spans(value):
                cell.stylize(MATCH_STYLE, start, end)
            row.append_text(cell)
        if index == state.selected:
            row.stylize(SELECTED_STYLE)
        rows.append(row)
    return Text("\n").join(rows)


def render_json(state: LogState, height: int) -> Text:
    # One row per top-level key, so stop once the panel is full.
    rows: List[Text] = []
    window = state.display_window()
    for index, line in window[state.scroll_offset :]:
        if len(rows) >= height:
            break
        try:
            value = json.loads(line)
        except ValueError:
            continue
        if not isinstance(value, dict):
            continue
        for key, item in value.items():
            if len(rows) >= height:
                break
            text = f"{safe_json_display(key)}: {safe_json_display(item)}"
            rows.append(styled_line(state, index, text))
    if not rows and height > 0:
        rows.append(Text("No JSON objects in view", style="dim"))
    return Text("\n").join(rows)


def render_external(tool: str) -> Text:
    return Text.assemble(
        ("Handing the buffer to ", ""),
        (tool, "bold"),
        ("\nThe viewer resumes when the tool exits.", "dim"),
    )


def render_view(view: ViewKind, state: LogState, height: int) -> RenderableType:
    """Return the main panel for ``view``, sized for ``height`` terminal rows."""
    inner = max(height - 2, 0)
    if view.type is ViewType.PLAIN:
        body: RenderableType = render_plain(state, inner)
    elif view.type is ViewType.KEY_VALUE:
        body = render_key_value(state, inner)
    elif view.type is ViewType.JSON:
        body = render_json(state, inner)
    else:
        body = render_external(view.tool or "")
    return Panel(body, title=view_title(view.name, state), title_align="left")


__all__ = [
    "render_external",
    "render_json",
    "render_key_value",
    "render_plain",
    "render_view",
    "styled_line",
    "view_title",
    "visible_rows",
]
