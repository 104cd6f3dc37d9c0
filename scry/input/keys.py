"""Logical key events shared by every input path."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

# Plain characters the viewer binds. Both input paths report only these,
# lowercased, so the session sees the same stream whichever path is active.
RECOGNIZED_CHARS = frozenset("qafc")


class KeyKind(str, Enum):
    """Kinds of key the session reacts to."""

    CHAR = "char"
    UP = "up"
    DOWN = "down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    HOME = "home"
    END = "end"
    ESCAPE = "escape"
    CTRL = "ctrl"


@dataclass(frozen=True)
class LogicalKeyEvent:
    kind: KeyKind
    char: Optional[str] = None
    pressed: bool = True

    @classmethod
    def key(cls, kind: KeyKind) -> "LogicalKeyEvent":
        return cls(kind)

    @classmethod
    def character(cls, ch: str) -> "LogicalKeyEvent":
        return cls(KeyKind.CHAR, ch.lower())

    @classmethod
    def ctrl(cls, ch: str) -> "LogicalKeyEvent":
        return cls(KeyKind.CTRL, ch.lower())

    def is_char(self, ch: str) -> bool:
        return self.kind is KeyKind.CHAR and self.char == ch

    def is_ctrl(self, ch: str) -> bool:
        return self.kind is KeyKind.CTRL and self.char == ch


def char_event(ch: str) -> Optional[LogicalKeyEvent]:
    """Return a character event for ``ch`` if it is a bound character."""
    if len(ch) != 1:
        return None
    lowered = ch.lower()
    if lowered not in RECOGNIZED_CHARS:
        return None
    return LogicalKeyEvent.character(lowered)


__all__ = ["KeyKind", "LogicalKeyEvent", "RECOGNIZED_CHARS", "char_event"]
