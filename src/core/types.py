"""Shared typed models.

This module defines immutable data models used by ingest, store,
CLI, and facade layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Literal, Mapping

RecordType = Literal["vehicle", "license"]
RawRecord = Mapping[str, str]
ProvenanceStatus = Literal["canonical", "regularized", "uncuratedOnly"]

SUPPORTED_RECORD_TYPES: tuple[RecordType, ...] = ("vehicle", "license")


@dataclass(frozen=True)
class ImportRequest:
    """One file import request.

    Attributes:
        source_path: CSV file to import.
        year: Data year the file belongs to.
        record_type: Vehicle or license layout.
        skip_duplicate_check: Skip the already-imported year check.
        defer_indexing: Leave index rebuilds to an outer batch operation.
    """

    source_path: Path
    year: int
    record_type: RecordType
    skip_duplicate_check: bool = False
    defer_indexing: bool = False


@dataclass(frozen=True)
class ImportBatchResult:
    """Success and error counts for one transactional batch."""

    success_count: int
    error_count: int


@dataclass(frozen=True)
class ImportResult:
    """Outcome of one file import.

    Attributes:
        total_records: Records produced by parsing.
        success_count: Records written to the store.
        error_count: Records rejected during import.
        duration_seconds: Wall-clock import duration.
        skipped_lines: Malformed lines dropped while parsing.
    """

    total_records: int
    success_count: int
    error_count: int
    duration_seconds: float
    skipped_lines: int = 0

    @property
    def success_rate(self) -> float:
        """Fraction of parsed records that were written."""
        if self.total_records == 0:
            return 0.0
        return self.success_count / self.total_records


@dataclass(frozen=True)
class ImportLogEntry:
    """Row of the append-only import log."""

    file_name: str
    year: int
    record_type: RecordType
    record_count: int
    import_date: datetime
    status: str


@dataclass(frozen=True)
class DictionaryEntry:
    """Categorical dictionary entry.

    Attributes:
        entry_id: Surrogate id, immutable once assigned.
        value: Natural value (text or integer rendered as text).
        parent_id: Parent entry id for dependent domains.
        description: Optional human readable description.
    """

    entry_id: int
    value: str
    parent_id: int | None = None
    description: str | None = None


@dataclass(frozen=True)
class ProvenanceRecord:
    """Read-side provenance classification of one dictionary entry.

    Attributes:
        domain: Domain key.
        entry_id: Dictionary entry id.
        value: Observed value.
        status: Provenance classification.
        canonical_value: Intended value, for regularized entries only.
        record_count: Affected fact rows. Uncurated-year rows for
            ``uncuratedOnly`` entries, rows across all years otherwise.
    """

    domain: str
    entry_id: int
    value: str
    status: ProvenanceStatus
    canonical_value: str | None
    record_count: int


@dataclass(frozen=True)
class YearPartition:
    """Curated and uncurated year sets used for provenance."""

    curated_years: frozenset[int]
    uncurated_years: frozenset[int]
