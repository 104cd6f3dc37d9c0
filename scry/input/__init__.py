"""Keyboard input: raw tty decoding, terminal polling, and the arbiter."""

from __future__ import annotations

from scry.input.arbiter import InputArbiter, translate_keys
from scry.input.decoder import EscapeDecoder, TtyKeyReader
from scry.input.keys import KeyKind, LogicalKeyEvent
from scry.input.terminal_mode import TerminalModeGuard, restore_all

__all__ = [
    "EscapeDecoder",
    "InputArbiter",
    "KeyKind",
    "LogicalKeyEvent",
    "TerminalModeGuard",
    "TtyKeyReader",
    "restore_all",
    "translate_keys",
]
