"""Self-removing temporary directories for test suites."""
from __future__ import annotations

import logging
import os
import shutil
import weakref
from pathlib import Path
from typing import Mapping

from .config import TempDirConfig, resolve_root
from .errors import TempDirSetupError

logger = logging.getLogger(__name__)

# Diagnostic only: allocation keeps probing past this many collisions.
COLLISION_WARNING_THRESHOLD = 1000


def _split_suffix(name: str) -> tuple[str, str]:
    stem, dot, suffix = name.rpartition(".")
    if not dot or not stem:
        return name, ""
    return stem, suffix


def next_candidate(path: Path) -> Path:
    """Return ``path`` with its numeric suffix incremented.

    The suffix is whatever follows the last ``.`` of the final segment. When it
    is missing or not a non-negative integer it counts as ``0``, so
    ``rstest`` becomes ``rstest.1`` and ``my.dir`` becomes ``my.1``.
    """

    stem, suffix = _split_suffix(path.name)
    counter = int(suffix) if suffix.isdecimal() else 0
    return path.with_name(f"{stem}.{counter + 1}")


def _create_parents(path: Path) -> None:
    parent = path.parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise TempDirSetupError(f"Cannot create parent directory {parent}: {exc}", parent) from exc


def allocate(path: str | os.PathLike[str]) -> Path:
    """Create and return a directory that did not exist before this call.

    ``path`` is tried first; on collision the numeric suffix is bumped (see
    :func:`next_candidate`) until an exclusive create succeeds. There is no
    upper bound on the number of attempts.

    Raises
    ------
    TempDirSetupError
        If the ancestors cannot be created, or creation fails for any reason
        other than the candidate already existing.
    """

    candidate = Path(path)
    _create_parents(candidate)
    collisions = 0
    while True:
        try:
            candidate.mkdir()
        except FileExistsError:
            collisions += 1
            if collisions == COLLISION_WARNING_THRESHOLD:
                logger.warning(
                    "Still probing for a free directory after %d collisions (last tried %s)",
                    collisions,
                    candidate,
                )
            candidate = next_candidate(candidate)
            continue
        except OSError as exc:
            raise TempDirSetupError(f"Cannot create directory {candidate}: {exc}", candidate) from exc
        if collisions:
            logger.debug("Allocated %s after %d collision(s)", candidate, collisions)
        else:
            logger.debug("Allocated %s", candidate)
        return candidate


def remove_tree(path: Path) -> None:
    """Recursively delete ``path``, logging and ignoring any failure."""

    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        logger.debug("Temporary directory %s was already removed", path)
    except OSError as exc:
        logger.debug("Could not fully remove temporary directory %s: %s", path, exc)
        shutil.rmtree(path, ignore_errors=True)
    else:
        logger.debug("Removed temporary directory %s", path)


def leftover_dirs(root: Path, name: str) -> list[Path]:
    """List directories under ``root`` that allocation at ``root / name`` could have produced."""

    if not root.is_dir():
        return []
    stem, _ = _split_suffix(name)
    found: list[Path] = []
    for entry in sorted(root.iterdir()):
        if not entry.is_dir() or entry.is_symlink():
            continue
        if entry.name == name:
            found.append(entry)
            continue
        entry_stem, suffix = _split_suffix(entry.name)
        if entry_stem == stem and suffix.isdecimal():
            found.append(entry)
    return found


class TempDir:
    """A freshly created directory that is removed when the handle goes away.

    Use it as a context manager to bound its lifetime explicitly::

        with TempDir.default() as temp:
            (temp / "hello.txt").write_text("Hello World!")

    Handles that are never entered are cleaned up when garbage collected (or
    at interpreter exit). Call :meth:`permanent` to keep the directory.
    """

    def __init__(self, path: str | os.PathLike[str], destroy: bool = True) -> None:
        self._path = allocate(path)
        self._destroy = destroy
        # Removal targets the directory resolved against the cwd at allocation time.
        self._finalizer = weakref.finalize(self, remove_tree, self._path.absolute())
        if not destroy:
            self._finalizer.detach()

    @classmethod
    def default(
        cls,
        config: TempDirConfig | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "TempDir":
        """Allocate under the configured root; see :func:`resolve_root`."""

        root, name = resolve_root(environ=environ, config=config)
        return cls(root / name, destroy=True)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def destroy(self) -> bool:
        return self._destroy

    def permanent(self) -> "TempDir":
        """Keep the directory on disk after the handle is gone.

        Returns the same handle; the original reference stays valid.
        """

        self._destroy = False
        self._finalizer.detach()
        return self

    def cleanup(self) -> None:
        """Remove the directory now unless the handle is permanent.

        Runs at most once and never raises.
        """

        self._finalizer()

    def joinpath(self, *segments: str | os.PathLike[str]) -> Path:
        return self._path.joinpath(*segments)

    def __truediv__(self, other: str | os.PathLike[str]) -> Path:
        return self._path / other

    def __fspath__(self) -> str:
        return os.fspath(self._path)

    def __str__(self) -> str:
        return str(self._path)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self._path)!r}, destroy={self._destroy})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TempDir):
            return NotImplemented
        return self._path == other._path

    def __hash__(self) -> int:
        return hash(self._path)

    def __enter__(self) -> "TempDir":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()


__all__ = [
    "COLLISION_WARNING_THRESHOLD",
    "TempDir",
    "allocate",
    "leftover_dirs",
    "next_candidate",
    "remove_tree",
]
