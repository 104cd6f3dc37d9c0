"""Configuration management for scry.

This module handles loading and accessing configuration from:
1. scry.toml file in the user config directory
2. Environment variables (SCRY_* prefix)
3. Default values

Environment variables override config file values, which override defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import platformdirs
import toml

from .core.constants import (
    DEFAULT_BUFFER_CAPACITY,
    DEFAULT_ESCAPE_TIMEOUT_MS,
    DEFAULT_INGEST_QUEUE_SIZE,
    DEFAULT_MAX_LINE_CHARS,
    DEFAULT_MAX_MESSAGE_CHARS,
    DEFAULT_MODEL,
    DEFAULT_PAGE_SIZE,
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_SAMPLE_LINES,
)

APP_NAME = "scry"


@dataclass
class BufferConfig:
    """Log buffer sizing."""

    capacity: int = DEFAULT_BUFFER_CAPACITY
    ingest_queue_size: int = DEFAULT_INGEST_QUEUE_SIZE


@dataclass
class InputConfig:
    """Keyboard handling."""

    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    escape_timeout_ms: int = DEFAULT_ESCAPE_TIMEOUT_MS
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def poll_interval(self) -> float:
        return self.poll_interval_ms / 1000

    @property
    def escape_timeout(self) -> float:
        return self.escape_timeout_ms / 1000


@dataclass
class ClassifierConfig:
    """Layout classifier (OpenAI chat completions) settings."""

    model: str = DEFAULT_MODEL
    sample_lines: int = DEFAULT_SAMPLE_LINES
    max_line_chars: int = DEFAULT_MAX_LINE_CHARS
    max_message_chars: int = DEFAULT_MAX_MESSAGE_CHARS
    base_url: str | None = None
    timeout: int = 30


@dataclass
class PathConfig:
    """Directory path configuration."""

    config_dir: Path | None = None
    log_dir: Path | None = None


@dataclass
class LoggingConfig:
    """Logging configuration."""

    max_log_lines: int = 1000
    log_level: str = "INFO"


@dataclass
class Config:
    """Main configuration container."""

    buffer: BufferConfig = field(default_factory=BufferConfig)
    input: InputConfig = field(default_factory=InputConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    paths: PathConfig = field(default_factory=PathConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self) -> None:
        """Resolve paths after initialization."""
        if self.paths.config_dir is None:
            self.paths.config_dir = default_config_dir()
        if self.paths.log_dir is None:
            self.paths.log_dir = Path(platformdirs.user_log_dir(APP_NAME))


def default_config_dir() -> Path:
    """Config directory from SCRY_CONFIG_DIR or the platform default."""
    override = os.environ.get("SCRY_CONFIG_DIR")
    if override:
        return Path(override)
    return Path(platformdirs.user_config_dir(APP_NAME))


def _positive_int(value: Any, default: int) -> int:
    """Coerce a config value to a positive integer, or fall back to ``default``."""
    if isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def _non_empty_str(value: Any, default: str | None) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return default


def _get_env_int(key: str, default: int) -> int:
    """Get a positive integer from environment variable."""
    value = os.environ.get(key)
    if value is None:
        return default
    return _positive_int(value.strip(), default)


def _get_env_str(key: str, default: str | None) -> str | None:
    """Get string from environment variable."""
    return os.environ.get(key, default)


def _get_env_path(key: str, default: Path | None) -> Path | None:
    """Get path from environment variable."""
    value = os.environ.get(key)
    if value:
        return Path(value)
    return default


def _load_config_file() -> dict[str, Any]:
    """Load configuration from scry.toml file."""
    config_path = default_config_dir() / "scry.toml"
    if not config_path.exists():
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError):
        return {}


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config."""
    config.buffer.capacity = _get_env_int("SCRY_BUFFER_CAPACITY", config.buffer.capacity)
    config.buffer.ingest_queue_size = _get_env_int(
        "SCRY_INGEST_QUEUE_SIZE", config.buffer.ingest_queue_size
    )

    config.input.poll_interval_ms = _get_env_int(
        "SCRY_POLL_INTERVAL_MS", config.input.poll_interval_ms
    )
    config.input.escape_timeout_ms = _get_env_int(
        "SCRY_ESCAPE_TIMEOUT_MS", config.input.escape_timeout_ms
    )
    config.input.page_size = _get_env_int("SCRY_PAGE_SIZE", config.input.page_size)

    config.classifier.model = (
        _get_env_str("SCRY_MODEL", config.classifier.model) or config.classifier.model
    )
    config.classifier.sample_lines = _get_env_int(
        "SCRY_SAMPLE_LINES", config.classifier.sample_lines
    )
    config.classifier.max_line_chars = _get_env_int(
        "SCRY_MAX_LINE_CHARS", config.classifier.max_line_chars
    )
    config.classifier.max_message_chars = _get_env_int(
        "SCRY_MAX_MESSAGE_CHARS", config.classifier.max_message_chars
    )
    config.classifier.base_url = _get_env_str(
        "SCRY_API_BASE_URL", config.classifier.base_url
    )
    config.classifier.timeout = _get_env_int(
        "SCRY_API_TIMEOUT", config.classifier.timeout
    )

    config.paths.config_dir = _get_env_path("SCRY_CONFIG_DIR", config.paths.config_dir)
    config.paths.log_dir = _get_env_path("SCRY_LOG_DIR", config.paths.log_dir)

    config.logging.max_log_lines = _get_env_int(
        "SCRY_MAX_LOG_LINES", config.logging.max_log_lines
    )
    config.logging.log_level = (
        _get_env_str("SCRY_LOG_LEVEL", config.logging.log_level)
        or config.logging.log_level
    )

    return config


def _section(file_config: dict[str, Any], name: str) -> dict[str, Any]:
    section = file_config.get(name)
    return section if isinstance(section, dict) else {}


def _apply_file_config(config: Config, file_config: dict[str, Any]) -> Config:
    """Apply configuration from file to config object.

    Values of the wrong type, and numbers that are not positive, keep the
    current setting.
    """
    buffer = _section(file_config, "buffer")
    config.buffer.capacity = _positive_int(
        buffer.get("capacity"), config.buffer.capacity
    )
    config.buffer.ingest_queue_size = _positive_int(
        buffer.get("ingest_queue_size"), config.buffer.ingest_queue_size
    )

    input_section = _section(file_config, "input")
    config.input.poll_interval_ms = _positive_int(
        input_section.get("poll_interval_ms"), config.input.poll_interval_ms
    )
    config.input.escape_timeout_ms = _positive_int(
        input_section.get("escape_timeout_ms"), config.input.escape_timeout_ms
    )
    config.input.page_size = _positive_int(
        input_section.get("page_size"), config.input.page_size
    )

    classifier = _section(file_config, "classifier")
    config.classifier.model = _non_empty_str(
        classifier.get("model"), config.classifier.model
    ) or config.classifier.model
    config.classifier.sample_lines = _positive_int(
        classifier.get("sample_lines"), config.classifier.sample_lines
    )
    config.classifier.max_line_chars = _positive_int(
        classifier.get("max_line_chars"), config.classifier.max_line_chars
    )
    config.classifier.max_message_chars = _positive_int(
        classifier.get("max_message_chars"), config.classifier.max_message_chars
    )
    config.classifier.base_url = _non_empty_str(
        classifier.get("base_url"), config.classifier.base_url
    )
    config.classifier.timeout = _positive_int(
        classifier.get("timeout"), config.classifier.timeout
    )

    paths = _section(file_config, "paths")
    log_dir = _non_empty_str(paths.get("log_dir"), None)
    if log_dir is not None:
        config.paths.log_dir = Path(log_dir)

    logging = _section(file_config, "logging")
    config.logging.max_log_lines = _positive_int(
        logging.get("max_log_lines"), config.logging.max_log_lines
    )
    config.logging.log_level = _non_empty_str(
        logging.get("log_level"), config.logging.log_level
    ) or config.logging.log_level

    return config


def load_config() -> Config:
    """Load configuration from defaults, file, and environment.

    Priority (highest to lowest):
    1. Environment variables (SCRY_*)
    2. scry.toml file
    3. Default values

    Returns:
        Config: The loaded configuration object
    """
    config = Config()

    file_config = _load_config_file()
    if file_config:
        config = _apply_file_config(config, file_config)

    config = _apply_env_overrides(config)

    return config


# Global config instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance.

    Returns:
        Config: The configuration object
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """Reload configuration from file and environment.

    Returns:
        Config: The reloaded configuration object
    """
    global _config
    _config = load_config()
    return _config


__all__ = [
    "Config",
    "BufferConfig",
    "InputConfig",
    "ClassifierConfig",
    "PathConfig",
    "LoggingConfig",
    "default_config_dir",
    "load_config",
    "get_config",
    "reload_config",
]
