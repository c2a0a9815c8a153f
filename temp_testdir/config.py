"""Configuration loading for temp_testdir."""
from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, MutableMapping

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older interpreters
    import tomli as tomllib  # type: ignore

from .errors import ConfigError

ROOT_ENV_VAR = "RSTEST_TEMP_DIR_ROOT"
ROOT_NAME_ENV_VAR = "RSTEST_TEMP_DIR_ROOT_NAME"
CONFIG_ENV_VAR = "RSTEST_TEMP_DIR_CONFIG"
DEFAULT_ROOT_NAME = "rstest"


def _default_root() -> Path:
    return Path(tempfile.gettempdir())


@dataclass(slots=True)
class TempDirConfig:
    """Where default temporary directories are allocated.

    ``root`` is the base directory and ``name`` the first path segment placed
    under it; allocated directories are ``root / name`` or a numbered sibling.
    """

    root: Path = field(default_factory=_default_root)
    name: str = DEFAULT_ROOT_NAME

    @property
    def base_path(self) -> Path:
        return self.root / self.name


def _as_path(value: Any) -> Path:
    if isinstance(value, Path):
        return value
    return Path(str(value))


def _load_toml(path: Path) -> Mapping[str, Any]:
    if not path.exists():
        return {}
    with path.open("rb") as fh:
        try:
            return tomllib.load(fh)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"{path} is not valid TOML: {exc}") from exc


def load_config(path: str | Path | None = None) -> TempDirConfig:
    """Load configuration from ``path`` if provided, otherwise defaults.

    Parameters
    ----------
    path:
        Path to a TOML file with a ``[tempdir]`` table. A missing file, or
        ``None``, yields the default configuration.
    """

    cfg = TempDirConfig()
    if path is None:
        return cfg

    data = _load_toml(Path(path))
    tempdir_data = data.get("tempdir")
    if tempdir_data is None:
        return cfg
    if not isinstance(tempdir_data, Mapping):
        raise ConfigError("tempdir must be a table with 'root' and/or 'name' keys")
    return _parse_tempdir(tempdir_data, base=cfg)


def _parse_tempdir(data: Mapping[str, Any], base: TempDirConfig) -> TempDirConfig:
    overrides: MutableMapping[str, Any] = {}
    if "root" in data:
        if not isinstance(data["root"], str):
            raise ConfigError("tempdir.root must be a string path")
        overrides["root"] = _as_path(data["root"])
    if "name" in data:
        name = data["name"]
        if not isinstance(name, str) or not name:
            raise ConfigError("tempdir.name must be a non-empty string")
        overrides["name"] = name
    if not overrides:
        return base
    return replace(base, **overrides)


def resolve_root(
    environ: Mapping[str, str] | None = None,
    config: TempDirConfig | None = None,
) -> tuple[Path, str]:
    """Return the ``(root, name)`` pair used for default construction.

    Environment overrides win over ``config``, which wins over the defaults
    (the system temporary directory and ``"rstest"``). Empty variables are
    treated as unset. This never fails.
    """

    env = os.environ if environ is None else environ
    if config is None:
        config = config_from_env(env)

    root_override = env.get(ROOT_ENV_VAR)
    name_override = env.get(ROOT_NAME_ENV_VAR)
    root = Path(root_override) if root_override else config.root
    name = name_override if name_override else config.name
    return root, name


def config_from_env(environ: Mapping[str, str] | None = None) -> TempDirConfig:
    """Load the file named by ``RSTEST_TEMP_DIR_CONFIG``, or the defaults."""

    env = os.environ if environ is None else environ
    config_path = env.get(CONFIG_ENV_VAR)
    return load_config(config_path) if config_path else TempDirConfig()


__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_ROOT_NAME",
    "ROOT_ENV_VAR",
    "ROOT_NAME_ENV_VAR",
    "TempDirConfig",
    "config_from_env",
    "load_config",
    "resolve_root",
]
