from __future__ import annotations

import logging
import stat
from pathlib import Path

import pytest

from scry.config import get_config
from scry.errors import MissingApiKeyError
from scry.utils import persistence


def test_api_key_round_trip(scry_dirs: Path) -> None:
    assert not persistence.has_api_key()

    persistence.set_api_key("  sk-test-123\n")

    assert persistence.get_api_key() == "sk-test-123"
    assert persistence.has_api_key()
    assert persistence.key_file() == scry_dirs / "config" / "api_key"
    assert stat.S_IMODE(persistence.key_file().stat().st_mode) == 0o600

    persistence.delete_api_key()
    assert not persistence.has_api_key()


def test_missing_key_raises_with_hint(scry_dirs: Path) -> None:
    with pytest.raises(MissingApiKeyError, match="scry --key"):
        persistence.get_api_key()


def test_delete_without_key_is_noop(scry_dirs: Path) -> None:
    persistence.delete_api_key()
    assert not persistence.key_file().exists()


def test_environment_key_is_a_fallback(
    scry_dirs: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    assert persistence.get_api_key() == "sk-env"

    persistence.set_api_key("sk-file")
    assert persistence.get_api_key() == "sk-file"


def test_log_rotation_trims_old_lines(scry_dirs: Path) -> None:
    log_path = persistence.get_log_path()
    log_path.write_text("first\nsecond\nthird\n", encoding="utf-8")

    persistence.rotate_log(max_lines=2)

    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert lines == ["second", "third"]


def test_setup_logging_writes_to_log_file(scry_dirs: Path) -> None:
    log_path = persistence.setup_logging("INFO")
    try:
        logging.getLogger("scry.tests").info("hello from the test")
        for handler in logging.getLogger("scry").handlers:
            handler.flush()

        assert log_path == scry_dirs / "logs" / "scry.log"
        content = log_path.read_text(encoding="utf-8")
        assert "scry.tests - INFO - hello from the test" in content
    finally:
        logger = logging.getLogger("scry")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.propagate = True


def test_setup_logging_replaces_its_own_handler(scry_dirs: Path) -> None:
    persistence.setup_logging()
    persistence.setup_logging()
    logger = logging.getLogger("scry")
    try:
        ours = [h for h in logger.handlers if getattr(h, "_scry_handler", False)]
        assert len(ours) == 1
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.propagate = True


def test_config_dir_falls_back_when_unset(scry_dirs: Path) -> None:
    get_config().paths.config_dir = None

    config_dir = persistence.get_config_dir()

    assert config_dir == scry_dirs / "config"
    assert config_dir.is_dir()
