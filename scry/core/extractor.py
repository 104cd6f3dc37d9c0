"""Derive a short filter token from a selected log line."""

from __future__ import annotations

from itertools import takewhile
from typing import Optional

from .constants import MAX_TOKEN_CHARS


def extract_filter_token(line: str) -> Optional[str]:
    """Return the token used to narrow the display when ``line`` is selected.

    Strategies are tried in order and the first hit wins:

    1. the first double-quoted value (``msg="connection refused"``)
    2. the value after the first ``=`` (``status=500``)
    3. the first word with an alphanumeric character, trailing punctuation removed

    Returns ``None`` when nothing usable is found; callers clear the filter.
    """
    return _quoted_value(line) or _key_value(line) or _first_word(line)


def _quoted_value(line: str) -> Optional[str]:
    start = line.find('"')
    if start == -1:
        return None
    end = line.find('"', start + 1)
    if end == -1:
        return None
    value = line[start + 1 : end]
    if value and len(value) < MAX_TOKEN_CHARS:
        return value
    return None


def _key_value(line: str) -> Optional[str]:
    eq_pos = line.find("=")
    # A leading or trailing '=' has no key or no value.
    if eq_pos <= 0 or eq_pos >= len(line) - 1:
        return None
    parts = line[eq_pos + 1 :].split()
    if not parts:
        return None
    value = parts[0]
    if len(value) < MAX_TOKEN_CHARS:
        return value
    return None


def _first_word(line: str) -> Optional[str]:
    for word in line.split():
        if len(word) >= 2 and any(ch.isalnum() for ch in word):
            cleaned = "".join(
                takewhile(lambda ch: ch.isalnum() or ch in "_-", word)
            )
            return cleaned if len(cleaned) >= 2 else None
    return None


__all__ = ["extract_filter_token"]
