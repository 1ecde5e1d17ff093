"""Runtime configuration model for SAAQ ingest.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DATABASE_FILE_NAME,
    DEFAULT_CURATED_YEARS,
    DEFAULT_DATA_ROOT,
    DEFAULT_MAX_WORKERS,
    DEFAULT_UNCURATED_YEARS,
)
from core.errors import SaaqConfigError
from core.types import YearPartition


@dataclass(frozen=True)
class SaaqConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory for the store.
        database_path: SQLite database file.
        worker_count: Manual parse worker count, or None for adaptive sizing.
        max_workers: Upper bound for adaptive worker sizing.
        year_partition: Curated and uncurated year sets.
        regularization_path: Optional YAML regularization mapping file.
    """

    data_root: Path
    database_path: Path
    worker_count: int | None
    max_workers: int
    year_partition: YearPartition
    regularization_path: Path | None

    @classmethod
    def from_env(cls) -> "SaaqConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            SaaqConfigError: If environment values are invalid.
        """
        data_root = Path(os.getenv("SAAQ_DATA_ROOT", str(DEFAULT_DATA_ROOT))).expanduser().resolve()
        database_value = os.getenv("SAAQ_DATABASE_PATH")
        database_path = (
            Path(database_value).expanduser().resolve()
            if database_value
            else data_root / DATABASE_FILE_NAME
        )
        worker_value = os.getenv("SAAQ_WORKER_COUNT")
        worker_count = (
            _parse_positive_int("SAAQ_WORKER_COUNT", worker_value) if worker_value else None
        )
        max_workers = _parse_positive_int(
            "SAAQ_MAX_WORKERS", os.getenv("SAAQ_MAX_WORKERS", str(DEFAULT_MAX_WORKERS))
        )
        curated = parse_year_set(
            "SAAQ_CURATED_YEARS", os.getenv("SAAQ_CURATED_YEARS", DEFAULT_CURATED_YEARS)
        )
        uncurated = parse_year_set(
            "SAAQ_UNCURATED_YEARS", os.getenv("SAAQ_UNCURATED_YEARS", DEFAULT_UNCURATED_YEARS)
        )
        overlap = curated & uncurated
        if overlap:
            raise SaaqConfigError(
                f"Years {sorted(overlap)} are both curated and uncurated. "
                "Adjust SAAQ_CURATED_YEARS or SAAQ_UNCURATED_YEARS so they do not overlap."
            )
        regularization_value = os.getenv("SAAQ_REGULARIZATION_FILE")
        return cls(
            data_root=data_root,
            database_path=database_path,
            worker_count=worker_count,
            max_workers=max_workers,
            year_partition=YearPartition(curated_years=curated, uncurated_years=uncurated),
            regularization_path=(
                Path(regularization_value).expanduser().resolve() if regularization_value else None
            ),
        )


def parse_year_set(variable: str, raw_value: str) -> frozenset[int]:
    """Parse a year range (``2011-2022``) or comma list (``2011,2013``).

    Args:
        variable: Source variable name, used in error messages.
        raw_value: Raw string from environment.

    Returns:
        Set of years, empty for a blank value.

    Raises:
        SaaqConfigError: If the value is not a range or list of years.
    """
    text = raw_value.strip()
    if not text:
        return frozenset()
    try:
        if "-" in text:
            start_text, end_text = text.split("-", 1)
            start, end = int(start_text), int(end_text)
            if start > end:
                raise ValueError(text)
            return frozenset(range(start, end + 1))
        return frozenset(int(part) for part in text.split(",") if part.strip())
    except ValueError as error:
        raise SaaqConfigError(
            f"Invalid {variable} value: expected 'START-END' or comma-separated years, "
            f"got '{raw_value}'. Set {variable} to a valid year range."
        ) from error


def _parse_positive_int(variable: str, raw_value: str) -> int:
    """Parse a positive integer environment value.

    Raises:
        SaaqConfigError: If value is not a positive integer.
    """
    try:
        value = int(raw_value)
    except ValueError as error:
        raise SaaqConfigError(
            f"Invalid {variable} value: expected integer, got '{raw_value}'. "
            f"Set {variable} to a positive number."
        ) from error
    if value < 1:
        raise SaaqConfigError(
            f"Invalid {variable} value: expected a positive integer, got {value}. "
            f"Set {variable} to 1 or more."
        )
    return value
