"""CLI commands for extract imports."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

from cli.progress_display import TqdmProgressReporter
from core.errors import SaaqConfigError
from core.types import SUPPORTED_RECORD_TYPES, ImportRequest, ImportResult, RecordType
from store.saaq_sdk import SaaqClient


def add_import_command(subparsers: Any) -> None:
    """Register import subcommand."""
    parser = subparsers.add_parser("import", help="Import one yearly CSV extract")
    parser.add_argument("source", help="CSV extract path")
    parser.add_argument("--year", type=int, required=True, help="Data year of the extract")
    _add_shared_import_arguments(parser)
    parser.add_argument(
        "--skip-duplicate-check",
        action="store_true",
        help="Import without checking whether the year already has data",
    )


def add_import_batch_command(subparsers: Any) -> None:
    """Register import-batch subcommand."""
    parser = subparsers.add_parser(
        "import-batch", help="Import several extracts with one index rebuild"
    )
    parser.add_argument("items", nargs="+", help="Extracts as PATH:YEAR")
    _add_shared_import_arguments(parser)


def run_import_command(client: SaaqClient, args: argparse.Namespace) -> int:
    """Import one extract and print its result."""
    request = ImportRequest(
        source_path=Path(args.source).expanduser().resolve(),
        year=args.year,
        record_type=args.type,
        skip_duplicate_check=args.skip_duplicate_check,
    )
    reporter = TqdmProgressReporter()
    try:
        result = client.import_file(request, reporter, _build_replace_decider(args.yes))
    finally:
        reporter.close()
    _print_result(request, result)
    return 0


def run_import_batch_command(client: SaaqClient, args: argparse.Namespace) -> int:
    """Import several extracts and print one result per file."""
    requests = [_parse_batch_item(item, args.type) for item in args.items]
    reporter = TqdmProgressReporter()
    try:
        results = client.import_files(requests, reporter, _build_replace_decider(args.yes))
    finally:
        reporter.close()
    for request, result in zip(requests, results):
        _print_result(request, result)
    return 0


def _add_shared_import_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--type",
        required=True,
        choices=SUPPORTED_RECORD_TYPES,
        help="Record layout of the extract",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Replace already imported years without asking",
    )


def _parse_batch_item(item: str, record_type: RecordType) -> ImportRequest:
    path_text, separator, year_text = item.rpartition(":")
    if not separator or not year_text.isdigit():
        raise SaaqConfigError(
            f"Invalid batch item '{item}': expected PATH:YEAR. "
            "Append the data year to each extract path."
        )
    return ImportRequest(
        source_path=Path(path_text).expanduser().resolve(),
        year=int(year_text),
        record_type=record_type,
    )


def _build_replace_decider(assume_yes: bool):
    if assume_yes:
        return lambda year, record_type: True

    def ask(year: int, record_type: RecordType) -> bool:
        answer = input(f"{record_type} data for {year} already exists. Replace it? [y/N] ")
        return answer.strip().lower() in {"y", "yes"}

    return ask


def _print_result(request: ImportRequest, result: ImportResult) -> None:
    print(f"file={request.source_path.name}")
    print(f"year={request.year}")
    print(f"total_records={result.total_records}")
    print(f"success_count={result.success_count}")
    print(f"error_count={result.error_count}")
    print(f"skipped_lines={result.skipped_lines}")
    print(f"success_rate={result.success_rate:.4f}")
    print(f"duration_seconds={result.duration_seconds:.2f}")
