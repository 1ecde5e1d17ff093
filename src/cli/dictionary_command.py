"""CLI commands for dictionary and import log inspection."""

from __future__ import annotations

import argparse
from typing import Any

from store.dictionary_domains import DOMAINS
from store.saaq_sdk import SaaqClient


def add_dictionary_command(subparsers: Any) -> None:
    """Register dictionary subcommand."""
    parser = subparsers.add_parser("dictionary", help="List dictionary entries of a domain")
    parser.add_argument("domain", choices=[spec.key for spec in DOMAINS], help="Domain key")
    parser.add_argument(
        "--provenance",
        action="store_true",
        help="Include provenance status and affected row counts",
    )


def add_imports_command(subparsers: Any) -> None:
    """Register imports subcommand."""
    subparsers.add_parser("imports", help="List the import log")


def run_dictionary_command(client: SaaqClient, args: argparse.Namespace) -> int:
    """Print entries as tab-separated rows."""
    entries = client.entries(args.domain)
    provenance = client.provenance(args.domain) if args.provenance else {}
    for entry in entries:
        columns = [str(entry.entry_id), entry.value]
        if entry.parent_id is not None:
            columns.append(f"parent={entry.parent_id}")
        record = provenance.get(entry.entry_id)
        if record is not None:
            columns.append(f"status={record.status}")
            columns.append(f"records={record.record_count}")
            if record.canonical_value is not None:
                columns.append(f"canonical={record.canonical_value}")
        print("\t".join(columns))
    return 0


def run_imports_command(client: SaaqClient) -> int:
    """Print one line per import log row."""
    for entry in client.import_log():
        print(
            "\t".join(
                [
                    entry.import_date.isoformat(timespec="seconds"),
                    entry.record_type,
                    str(entry.year),
                    entry.file_name,
                    str(entry.record_count),
                    entry.status,
                ]
            )
        )
    return 0
