"""Display sanitisation so arbitrary input cannot break the terminal UI."""

from __future__ import annotations

import re
from typing import Any, List, Tuple

from .constants import MAX_DISPLAY_CHARS

ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


def sanitize_for_display(text: str, max_len: int) -> str:
    """Replace control characters and cap the length at ``max_len``.

    Tabs become two spaces, newlines a single space, carriage returns are
    dropped, NUL is shown as ``\\0`` and any other control character as ``?``.
    Truncated output ends with ``...``.
    """
    out: List[str] = []
    length = 0
    for ch in text:
        if length >= max_len:
            out.append("...")
            break
        if ch == "\t":
            piece = "  "
        elif ch == "\n":
            piece = " "
        elif ch == "\r":
            continue
        elif ch == "\x00":
            piece = "\\0"
        elif _is_control(ch):
            piece = "?"
        else:
            piece = ch
        out.append(piece)
        length += len(piece)
    return "".join(out)


def _is_control(ch: str) -> bool:
    code = ord(ch)
    return code < 0x20 or 0x7F <= code <= 0x9F


def safe_string_display(text: str) -> str:
    sanitized = sanitize_for_display(ANSI_ESCAPE.sub("", text), MAX_DISPLAY_CHARS)
    if not sanitized.strip():
        return "[empty line]"
    return sanitized


def extract_key_value_pairs(line: str) -> List[Tuple[str, str]]:
    """Split whitespace-separated ``key=value`` parts, skipping empty keys."""
    pairs: List[Tuple[str, str]] = []
    for part in line.split():
        if "=" not in part:
            continue
        key, value = part.split("=", 1)
        key = sanitize_for_display(key, 100)
        if key:
            pairs.append((key, sanitize_for_display(value, 200)))
    return pairs


def safe_json_display(value: Any) -> str:
    """Summarise a decoded JSON value on a single line."""
    if isinstance(value, str):
        return sanitize_for_display(value, 500)
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return f"[{len(value)} items]" if value else "[]"
    if isinstance(value, dict):
        return f"{{{len(value)} keys}}" if value else "{}"
    return sanitize_for_display(str(value), 500)


__all__ = [
    "ANSI_ESCAPE",
    "sanitize_for_display",
    "safe_string_display",
    "extract_key_value_pairs",
    "safe_json_display",
]
