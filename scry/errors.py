"""Exception hierarchy for scry."""

from __future__ import annotations


class ScryError(RuntimeError):
    """Base class for errors scry reports to the user."""


class MissingApiKeyError(ScryError):
    """Raised when no classifier API key is configured."""


class ClassifierError(ScryError):
    """Raised when the classifier call fails or returns an unusable answer."""


class ExternalToolError(ScryError):
    """Raised when an external viewer cannot be launched or exits non-zero."""


class TerminalModeError(ScryError):
    """Raised when a terminal device cannot be queried or reconfigured."""


__all__ = [
    "ScryError",
    "MissingApiKeyError",
    "ClassifierError",
    "ExternalToolError",
    "TerminalModeError",
]
