"""Describe where piped log input is coming from."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Optional

MAX_COMMAND_CHARS = 60


def detect_input_source(stdin_is_tty: bool) -> str:
    """Return a short status-bar label for the input source."""
    if stdin_is_tty:
        return "Waiting for input..."

    if sys.platform != "win32":
        command = get_parent_command(os.getppid())
        if command:
            cleaned = clean_command(command)
            if cleaned:
                return f"Reading from: {cleaned}"

    return "Reading from stdin"


def get_parent_command(ppid: int) -> Optional[str]:
    """Best-effort lookup of the parent process command line."""
    cmdline_path = Path(f"/proc/{ppid}/cmdline")
    try:
        raw = cmdline_path.read_bytes()
    except OSError:
        raw = b""
    if raw:
        args = [part for part in raw.decode("utf-8", errors="replace").split("\0") if part]
        if args:
            return " ".join(args[:3])

    try:
        result = subprocess.run(
            ["ps", "-p", str(ppid), "-o", "command="],
            capture_output=True,
            text=True,
            timeout=2,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if result.returncode == 0 and result.stdout.strip():
        return result.stdout.strip()
    return None


def clean_command(command: str) -> str:
    """Unwrap ``sh -c '...'`` and shorten long commands."""
    command = command.strip()
    if command.startswith(("sh -c ", "/bin/sh -c ")):
        start = command.find("'")
        end = command.rfind("'")
        if start != -1 and end > start:
            return command[start + 1 : end]

    if len(command) > MAX_COMMAND_CHARS:
        return command[: MAX_COMMAND_CHARS - 3] + "..."
    return command


__all__ = ["clean_command", "detect_input_source", "get_parent_command"]
