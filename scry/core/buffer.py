"""Bounded log buffer with selection, substring filter, and scroll state."""

from __future__ import annotations

from bisect import bisect_left
from collections import deque
from typing import List, Optional, Tuple

from .constants import DEFAULT_BUFFER_CAPACITY
from .extractor import extract_filter_token


class LogState:
    """Keep the latest log lines plus the indices that point into them.

    Indices are positions in the current buffer, so evicting the oldest line
    renumbers every stored index. Mutations never raise on out-of-range
    arguments; they are ignored instead.
    """

    def __init__(self, capacity: int = DEFAULT_BUFFER_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.lines: deque[str] = deque(maxlen=capacity)
        self.selected: Optional[int] = None
        self.filter_token: Optional[str] = None
        self.matching_indices: List[int] = []
        self.scroll_offset: int = 0
        self.evicted: int = 0

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def is_filtering(self) -> bool:
        return self.filter_token is not None

    def append(self, line: str) -> None:
        if len(self.lines) == self.capacity:
            self._evict_oldest()
        self.lines.append(line)
        if self.filter_token is not None and self.filter_token in line:
            self.matching_indices.append(len(self.lines) - 1)
        self._clamp_scroll()

    def _evict_oldest(self) -> None:
        self.lines.popleft()
        self.evicted += 1

        if self.matching_indices:
            self.matching_indices = [i - 1 for i in self.matching_indices if i != 0]

        if self.selected is not None:
            self.selected = None if self.selected == 0 else self.selected - 1

        if self.scroll_offset > 0:
            self.scroll_offset -= 1

    def select(self, index: int) -> None:
        if index < 0 or index >= len(self.lines):
            return
        self.selected = index
        token = extract_filter_token(self.lines[index])
        if token is None:
            self._clear_filter()
        else:
            self.filter_token = token
            self.matching_indices = [
                i for i, line in enumerate(self.lines) if token in line
            ]
        self.scroll_offset = 0

    def clear_selection(self) -> None:
        self.selected = None
        self._clear_filter()
        self._clamp_scroll()

    def _clear_filter(self) -> None:
        self.filter_token = None
        self.matching_indices = []

    def display_count(self) -> int:
        if self.is_filtering:
            return len(self.matching_indices)
        return len(self.lines)

    def display_window(self) -> List[Tuple[int, str]]:
        """Return ``(buffer_index, line)`` pairs in display order."""
        if self.is_filtering:
            return [(i, self.lines[i]) for i in self.matching_indices]
        return list(enumerate(self.lines))

    def display_position(self, index: int) -> Optional[int]:
        """Return where buffer ``index`` sits in the display sequence, if shown."""
        if not self.is_filtering:
            return index if 0 <= index < len(self.lines) else None
        pos = bisect_left(self.matching_indices, index)
        if pos < len(self.matching_indices) and self.matching_indices[pos] == index:
            return pos
        return None

    def index_at(self, position: int) -> Optional[int]:
        """Return the buffer index shown at display ``position``."""
        if position < 0 or position >= self.display_count():
            return None
        if self.is_filtering:
            return self.matching_indices[position]
        return position

    def is_match(self, index: int) -> bool:
        if self.filter_token is None or not 0 <= index < len(self.lines):
            return False
        return self.filter_token in self.lines[index]

    def highlight_spans(self, text: str) -> List[Tuple[int, int]]:
        """Return non-overlapping ``(start, end)`` spans of the filter token in ``text``."""
        token = self.filter_token
        if not token:
            return []
        spans: List[Tuple[int, int]] = []
        start = text.find(token)
        while start != -1:
            end = start + len(token)
            spans.append((start, end))
            start = text.find(token, end)
        return spans

    def scroll_up(self, amount: int = 1) -> None:
        self.scroll_offset = max(self.scroll_offset - max(amount, 0), 0)
        self._clamp_scroll()

    def scroll_down(self, amount: int = 1, display_count: Optional[int] = None) -> None:
        if display_count is None:
            display_count = self.display_count()
        max_scroll = max(display_count - 1, 0)
        self.scroll_offset = min(self.scroll_offset + max(amount, 0), max_scroll)

    def scroll_to_start(self) -> None:
        self.scroll_offset = 0

    def scroll_to_end(self) -> None:
        self.scroll_offset = max(self.display_count() - 1, 0)

    def follow_selection(self) -> None:
        """Move the scroll offset so the selected line is on screen."""
        if self.selected is None:
            return
        position = self.display_position(self.selected)
        if position is None:
            position = min(self.selected, max(len(self.lines) - 1, 0))
        self.scroll_offset = position
        self._clamp_scroll()

    def move_selection(self, delta: int) -> bool:
        """Select the neighbouring buffer line and follow it.

        Returns ``False`` when there is no selection or the move would leave
        the buffer.
        """
        if self.selected is None:
            return False
        target = self.selected + delta
        if target < 0 or target >= len(self.lines):
            return False
        self.select(target)
        self.follow_selection()
        return True

    def _clamp_scroll(self) -> None:
        self.scroll_offset = min(self.scroll_offset, max(self.display_count() - 1, 0))

    def get_last(self, n: int = 100) -> List[str]:
        if n <= 0:
            return []
        return list(self.lines)[-n:]

    def snapshot(self) -> List[str]:
        return list(self.lines)


__all__ = ["LogState"]
