"""Self-removing temporary directories for test suites."""
from __future__ import annotations

from .config import TempDirConfig, load_config, resolve_root
from .errors import ConfigError, TempDirError, TempDirSetupError
from .tempdir import TempDir, allocate, next_candidate

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "TempDir",
    "TempDirConfig",
    "TempDirError",
    "TempDirSetupError",
    "allocate",
    "load_config",
    "next_candidate",
    "resolve_root",
    "__version__",
]
