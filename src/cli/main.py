"""CrumbDB CLI entry points.
This module exposes file-level collection commands.
It maps argparse commands onto Database calls.
"""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from core.config import CrumbConfig
from core.errors import CrumbError
from store.database import Database, open_database


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="crumbdb", description="CrumbDB collection tools")
    parser.add_argument("--data-root", help="Override CRUMBDB_DATA_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("collections", help="List collection names")
    _add_named_command(subparsers, "path", "Print the file path of a collection")
    _add_named_command(subparsers, "drop", "Delete a collection file")
    _add_named_command(subparsers, "purge", "Empty a collection file without deleting it")
    _add_named_command(subparsers, "copy", "Copy a collection file under a timestamped name")
    subparsers.add_parser("purge-all", help="Empty every collection file")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CrumbDB CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        database = _open(args.data_root)
        return _dispatch(database, args)
    except CrumbError as error:
        print(f"error={error}")
        return 1


def _dispatch(database: Database, args: argparse.Namespace) -> int:
    """Route parsed args to a command handler."""
    if args.command == "collections":
        for name in database.collection_names():
            print(name)
        return 0
    if args.command == "path":
        print(database.path_of(args.name))
        return 0
    if args.command == "drop":
        return _report(database.drop_collection(args.name), "dropped", args.name)
    if args.command == "purge":
        purged = asyncio.run(database.purge_collection(args.name))
        return _report(purged, "purged", args.name)
    if args.command == "copy":
        copy_path = database.copy_collection(args.name)
        if copy_path is None:
            return _report(False, "copied", args.name)
        print(copy_path)
        return 0
    if args.command == "purge-all":
        print(f"purged={asyncio.run(database.purge_collections())}")
        return 0
    raise CrumbError(f"Unsupported command: {args.command}")


def _open(data_root: str | None) -> Database:
    """Open the database with optional data-root override.

    Args:
        data_root: Optional override path.

    Returns:
        Opened database.
    """
    config = CrumbConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return open_database(config=config)


def _report(found: bool, action: str, name: str) -> int:
    """Print a command outcome and map it onto an exit code."""
    if found:
        print(f"{action}={name}")
        return 0
    print(f"not_found={name}")
    return 1


def _add_named_command(subparsers: Any, command: str, help_text: str) -> None:
    """Register a subcommand taking one collection name."""
    parser = subparsers.add_parser(command, help=help_text)
    parser.add_argument("name", help="Collection or record type name")
