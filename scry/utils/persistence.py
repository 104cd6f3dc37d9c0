"""scry directories, API key storage, and the log file."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from scry.config import default_config_dir, get_config
from scry.errors import MissingApiKeyError

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
API_KEY_HINT = "API key not set. Run 'scry --key YOUR_API_KEY' to set it."


def _create_dir(path: Path) -> bool:
    try:
        path.mkdir(parents=True, exist_ok=True)
        return True
    except OSError:
        return False


def get_config_dir() -> Path:
    """Get the config directory, creating it if needed."""
    config_dir = get_config().paths.config_dir
    if config_dir is None:
        config_dir = default_config_dir()
    _create_dir(config_dir)
    return config_dir


def get_logs_dir() -> Path:
    """Get the log directory, falling back to the config directory."""
    log_dir = get_config().paths.log_dir
    if log_dir is not None and _create_dir(log_dir):
        return log_dir
    return get_config_dir()


def get_log_path() -> Path:
    return get_logs_dir() / "scry.log"


def key_file() -> Path:
    return get_config_dir() / "api_key"


def get_api_key() -> str:
    """Return the stored API key, falling back to ``OPENAI_API_KEY``.

    Raises:
        MissingApiKeyError: If no key is stored or exported
    """
    try:
        key = key_file().read_text(encoding="utf-8").strip()
    except OSError:
        key = ""
    if not key:
        key = os.environ.get("OPENAI_API_KEY", "").strip()
    if not key:
        raise MissingApiKeyError(API_KEY_HINT)
    return key


def has_api_key() -> bool:
    try:
        get_api_key()
    except MissingApiKeyError:
        return False
    return True


def set_api_key(key: str) -> None:
    path = key_file()
    path.write_text(key.strip(), encoding="utf-8")
    try:
        os.chmod(path, 0o600)
    except OSError:
        pass


def delete_api_key() -> None:
    path = key_file()
    if path.exists():
        path.unlink()


def rotate_log(max_lines: int | None = None) -> None:
    """Keep only the last N lines of the log file."""
    if max_lines is None:
        max_lines = get_config().logging.max_log_lines
    path = get_log_path()
    if not path.exists():
        return
    try:
        lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
        if len(lines) > max_lines:
            path.write_text("\n".join(lines[-max_lines:]) + "\n", encoding="utf-8")
    except OSError:
        pass


def setup_logging(level: str | None = None) -> Path:
    """Send scry's log records to the log file; the screen belongs to the TUI."""
    level_name = (level or get_config().logging.log_level).upper()
    log_path = get_log_path()
    rotate_log()

    logger = logging.getLogger("scry")
    logger.setLevel(getattr(logging, level_name, logging.INFO))
    for handler in list(logger.handlers):
        if getattr(handler, "_scry_handler", False):
            logger.removeHandler(handler)
            handler.close()

    handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    handler._scry_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.propagate = False
    return log_path


__all__ = [
    "API_KEY_HINT",
    "delete_api_key",
    "get_api_key",
    "get_config_dir",
    "get_log_path",
    "get_logs_dir",
    "has_api_key",
    "key_file",
    "rotate_log",
    "set_api_key",
    "setup_logging",
]
