from __future__ import annotations

from pathlib import Path

import pytest

from scry import config


@pytest.fixture
def scry_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point scry's config and log directories at a temporary location."""
    config_dir = tmp_path / "config"
    log_dir = tmp_path / "logs"
    monkeypatch.setenv("SCRY_CONFIG_DIR", str(config_dir))
    monkeypatch.setenv("SCRY_LOG_DIR", str(log_dir))
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setattr(config, "_config", None)
    return tmp_path
