"""SAAQ ingest CLI entry points.

This module exposes commands for schema setup, imports, and inspection.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
import sys
from pathlib import Path
from typing import Any, Sequence

from cli.dictionary_command import (
    add_dictionary_command,
    add_imports_command,
    run_dictionary_command,
    run_imports_command,
)
from cli.import_command import (
    add_import_batch_command,
    add_import_command,
    run_import_batch_command,
    run_import_command,
)
from core.config import SaaqConfig
from core.errors import SaaqConfigError, SaaqError
from store.saaq_sdk import SaaqClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="saaq", description="SAAQ extract ingest CLI")
    parser.add_argument("--database", help="Override SAAQ_DATABASE_PATH for this command")
    parser.add_argument("--workers", type=int, help="Override SAAQ_WORKER_COUNT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_init_db_command(subparsers)
    add_import_command(subparsers)
    add_import_batch_command(subparsers)
    add_dictionary_command(subparsers)
    add_imports_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the SAAQ CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        client = _build_client(args.database, args.workers)
        try:
            return _dispatch(parser, client, args)
        finally:
            client.close()
    except SaaqError as error:
        print(f"error={error}", file=sys.stderr)
        return 1


def _dispatch(parser: argparse.ArgumentParser, client: SaaqClient, args: argparse.Namespace) -> int:
    if args.command == "init-db":
        return _run_init_db_command(client)
    if args.command == "import":
        return run_import_command(client, args)
    if args.command == "import-batch":
        return run_import_batch_command(client, args)
    if args.command == "dictionary":
        return run_dictionary_command(client, args)
    if args.command == "imports":
        return run_imports_command(client)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(database: str | None, workers: int | None) -> SaaqClient:
    """Build SDK client with optional overrides.

    Raises:
        SaaqConfigError: If the worker override is not positive.
    """
    config = SaaqConfig.from_env()
    if database:
        config = replace(config, database_path=Path(database).expanduser().resolve())
    if workers is not None:
        if workers < 1:
            raise SaaqConfigError(
                f"Invalid --workers value {workers}: expected a positive integer."
            )
        config = replace(config, worker_count=workers)
    return SaaqClient(config)


def _add_init_db_command(subparsers: Any) -> None:
    """Register init-db subcommand."""
    subparsers.add_parser("init-db", help="Create the schema and seed closed vocabularies")


def _run_init_db_command(client: SaaqClient) -> int:
    inserted = client.initialize()
    print(f"database={client.config.database_path}")
    print(f"seeded_entries={inserted}")
    return 0
