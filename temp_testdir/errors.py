"""Exception types raised by temp_testdir."""
from __future__ import annotations

from pathlib import Path


class TempDirError(Exception):
    """Base class for every error raised by this package."""


class TempDirSetupError(TempDirError, OSError):
    """Raised when a temporary directory (or one of its ancestors) cannot be created."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class ConfigError(TempDirError, ValueError):
    """Raised when a configuration file contains invalid values."""


__all__ = [
    "ConfigError",
    "TempDirError",
    "TempDirSetupError",
]
