from __future__ import annotations

import shutil
import sys

import pytest

from scry.errors import ExternalToolError
from scry.plugins import ExternalTool, ToolRegistry, all_tools


def test_registry_knows_the_bundled_tools() -> None:
    registry = ToolRegistry()

    names = {tool.name for tool in all_tools()}
    assert {"jless", "fx", "visidata", "tabview", "lnav", "gonzo", "csvtk", "less"} == names
    assert registry.get("visidata").command() == ["vd", "-f", "jsonl"]
    assert registry.get("less").command() == ["less", "-R", "-S"]
    assert registry.get("nope") is None


def test_availability_follows_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(shutil, "which", lambda cmd: "/usr/bin/lnav" if cmd == "lnav" else None)
    registry = ToolRegistry()

    assert [tool.name for tool in registry.get_available()] == ["lnav"]
    assert registry.get_available_descriptions() == (
        "lnav: Advanced log file viewer with SQL queries and filtering"
    )


def test_spawn_with_logs_pipes_buffer(tmp_path) -> None:
    out = tmp_path / "out.txt"
    tool = ExternalTool(
        name="copy",
        check_cmd=sys.executable,
        run_cmd=sys.executable,
        args=["-c", f"import sys; open({str(out)!r}, 'w').write(sys.stdin.read())"],
    )

    tool.spawn_with_logs(["first", "second"])

    assert out.read_text() == "first\nsecond"


def test_spawn_with_logs_reports_exit_status() -> None:
    tool = ExternalTool(
        name="fail",
        check_cmd=sys.executable,
        run_cmd=sys.executable,
        args=["-c", "import sys; sys.exit(3)"],
    )

    with pytest.raises(ExternalToolError, match="exited with status: 3"):
        tool.spawn_with_logs(["x"])


def test_spawn_with_logs_reports_missing_binary() -> None:
    tool = ExternalTool(name="ghost", check_cmd="ghost-viewer", run_cmd="/nonexistent/ghost-viewer")

    assert not tool.is_available()
    with pytest.raises(ExternalToolError, match="Failed to spawn ghost"):
        tool.spawn_with_logs([])
