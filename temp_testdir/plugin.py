"""pytest integration: ``temp_testdir`` fixtures and command line options."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Iterator

import pytest

from .config import ROOT_ENV_VAR, ROOT_NAME_ENV_VAR
from .tempdir import TempDir

TempDirFactory = Callable[..., TempDir]


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register the temp_testdir command line options."""

    group = parser.getgroup("temp_testdir")
    group.addoption(
        "--temp-testdir-root",
        action="store",
        default=None,
        help=f"Base directory for temp_testdir fixtures (overrides ${ROOT_ENV_VAR}).",
    )
    group.addoption(
        "--temp-testdir-name",
        action="store",
        default=None,
        help=f"Root directory name for temp_testdir fixtures (overrides ${ROOT_NAME_ENV_VAR}).",
    )
    group.addoption(
        "--keep-temp-testdir",
        action="store_true",
        default=False,
        help="Leave fixture directories on disk after each test.",
    )


def _fixture_environ(config: pytest.Config) -> dict[str, str]:
    environ = dict(os.environ)
    root = config.getoption("temp_testdir_root")
    name = config.getoption("temp_testdir_name")
    if root:
        environ[ROOT_ENV_VAR] = root
    if name:
        environ[ROOT_NAME_ENV_VAR] = name
    return environ


@pytest.fixture
def temp_testdir_factory(request: pytest.FixtureRequest) -> Iterator[TempDirFactory]:
    """Return a callable creating :class:`TempDir` handles removed at teardown.

    Called without arguments it allocates under the configured root; pass a
    path to allocate there instead.
    """

    keep = bool(request.config.getoption("keep_temp_testdir"))
    created: list[TempDir] = []

    def factory(path: str | Path | None = None) -> TempDir:
        if path is None:
            handle = TempDir.default(environ=_fixture_environ(request.config))
        else:
            handle = TempDir(path)
        if keep:
            handle.permanent()
        created.append(handle)
        return handle

    yield factory

    for handle in reversed(created):
        handle.cleanup()


@pytest.fixture
def temp_testdir(temp_testdir_factory: TempDirFactory) -> TempDir:
    """A fresh directory for the current test."""

    return temp_testdir_factory()
