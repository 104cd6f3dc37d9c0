"""External terminal viewers scry can hand the buffer to."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .errors import ExternalToolError

logger = logging.getLogger(__name__)


@dataclass
class ExternalTool:
    """A viewer that reads the log buffer on stdin."""

    name: str
    check_cmd: str
    run_cmd: str
    args: List[str] = field(default_factory=list)
    description: str = ""

    def is_available(self) -> bool:
        return shutil.which(self.check_cmd) is not None

    def command(self) -> List[str]:
        return [self.run_cmd, *self.args]

    def spawn_with_logs(self, lines: Sequence[str]) -> None:
        """Run the tool with ``lines`` on stdin and wait for it to exit.

        The tool inherits the terminal for stdout/stderr, so the caller must
        release the screen first.

        Raises:
            ExternalToolError: If the tool cannot start or exits non-zero
        """
        text = "\n".join(lines)
        logger.info(f"Launching {self.name}: {' '.join(self.command())}")
        try:
            result = subprocess.run(
                self.command(),
                input=text.encode("utf-8", errors="replace"),
                check=False,
            )
        except OSError as exc:
            raise ExternalToolError(f"Failed to spawn {self.name}: {exc}") from exc

        if result.returncode != 0:
            raise ExternalToolError(
                f"{self.name} exited with status: {result.returncode}"
            )
        logger.info(f"{self.name} exited cleanly")


def all_tools() -> List[ExternalTool]:
    """Every tool scry knows about, installed or not."""
    return [
        ExternalTool(
            name="jless",
            check_cmd="jless",
            run_cmd="jless",
            args=["--no-auto-expand"],
            description="JSON viewer with syntax highlighting and navigation",
        ),
        ExternalTool(
            name="fx",
            check_cmd="fx",
            run_cmd="fx",
            description="Interactive JSON viewer with search and filtering",
        ),
        ExternalTool(
            name="visidata",
            check_cmd="vd",
            run_cmd="vd",
            args=["-f", "jsonl"],
            description="Interactive spreadsheet/data analysis tool for structured data",
        ),
        ExternalTool(
            name="tabview",
            check_cmd="tabview",
            run_cmd="tabview",
            description="Table viewer for structured data",
        ),
        ExternalTool(
            name="lnav",
            check_cmd="lnav",
            run_cmd="lnav",
            description="Advanced log file viewer with SQL queries and filtering",
        ),
        ExternalTool(
            name="gonzo",
            check_cmd="gonzo",
            run_cmd="gonzo",
            description="Real-time log analysis terminal UI",
        ),
        ExternalTool(
            name="csvtk",
            check_cmd="csvtk",
            run_cmd="csvtk",
            args=["view"],
            description="CSV/TSV viewer and processor",
        ),
        ExternalTool(
            name="less",
            check_cmd="less",
            run_cmd="less",
            args=["-R", "-S"],
            description="Text viewer with search and navigation (fallback)",
        ),
    ]


class ToolRegistry:
    """External tools keyed by name."""

    def __init__(self, tools: Optional[Sequence[ExternalTool]] = None):
        self.tools: Dict[str, ExternalTool] = {}
        for tool in all_tools() if tools is None else tools:
            self.tools[tool.name] = tool

    def get(self, name: str) -> Optional[ExternalTool]:
        return self.tools.get(name)

    def get_available(self) -> List[ExternalTool]:
        return [tool for tool in self.tools.values() if tool.is_available()]

    def get_available_descriptions(self) -> str:
        return "\n".join(
            f"{tool.name}: {tool.description}" for tool in self.get_available()
        )


__all__ = ["ExternalTool", "ToolRegistry", "all_tools"]
