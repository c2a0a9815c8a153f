"""Command line interface for temp_testdir."""
from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Sequence

from .config import ROOT_ENV_VAR, ROOT_NAME_ENV_VAR, resolve_root
from .errors import TempDirError
from .tempdir import TempDir, leftover_dirs, remove_tree

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="temp-testdir", description="temp_testdir maintenance tools")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log allocation and cleanup details")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("root", help="Print the base path new directories are allocated from")

    create_parser = subparsers.add_parser("create", help="Allocate a permanent directory and print its path")
    create_parser.add_argument("--root", default=None, help=f"Base directory (overrides ${ROOT_ENV_VAR})")
    create_parser.add_argument("--name", default=None, help=f"Root directory name (overrides ${ROOT_NAME_ENV_VAR})")

    purge_parser = subparsers.add_parser("purge", help="Remove directories left behind under the root")
    purge_parser.add_argument("--root", default=None, help=f"Base directory (overrides ${ROOT_ENV_VAR})")
    purge_parser.add_argument("--name", default=None, help=f"Root directory name (overrides ${ROOT_NAME_ENV_VAR})")
    purge_parser.add_argument("--dry-run", action="store_true", help="List matching directories without removing them")

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format=LOG_FORMAT)

    try:
        if args.command == "root":
            return _cmd_root()
        if args.command == "create":
            return _cmd_create(args)
        if args.command == "purge":
            return _cmd_purge(args)
    except TempDirError as exc:
        logging.getLogger(__name__).error("%s", exc)
        return 1

    parser.print_help()
    return 1


def _environ(args: argparse.Namespace) -> dict[str, str]:
    environ = dict(os.environ)
    if getattr(args, "root", None):
        environ[ROOT_ENV_VAR] = args.root
    if getattr(args, "name", None):
        environ[ROOT_NAME_ENV_VAR] = args.name
    return environ


def _cmd_root() -> int:
    root, name = resolve_root()
    print(root / name)
    return 0


def _cmd_create(args: argparse.Namespace) -> int:
    temp = TempDir.default(environ=_environ(args)).permanent()
    print(temp.path)
    return 0


def _cmd_purge(args: argparse.Namespace) -> int:
    root, name = resolve_root(environ=_environ(args))
    matches = leftover_dirs(Path(root), name)
    for path in matches:
        print(path)
        if not args.dry_run:
            remove_tree(path)
    verb = "Found" if args.dry_run else "Removed"
    print(f"{verb} {len(matches)} director{'y' if len(matches) == 1 else 'ies'} under {root}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
