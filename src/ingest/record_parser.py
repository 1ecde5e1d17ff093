"""CSV line tokenization and record construction.

Lines are split on commas outside double quotes. Values carrying
double-encoded UTF-8 sequences are repaired with a fixed lookup table.
"""

from __future__ import annotations

from typing import Sequence

from core.constants import (
    FUEL_TYPE_FIRST_YEAR,
    LICENSE_COLUMN_COUNT,
    MOJIBAKE_REPLACEMENTS,
    MOJIBAKE_SIGNATURES,
    VEHICLE_COLUMN_COUNT_WITH_FUEL,
    VEHICLE_COLUMN_COUNT_WITHOUT_FUEL,
)
from core.errors import InvalidSchemaError
from core.types import RawRecord, RecordType


def parse_line(line: str) -> list[str]:
    """Split one CSV line into trimmed fields.

    Quote characters toggle the quoted state and are not kept. The trailing
    field is always emitted.

    Args:
        line: One raw CSV line.

    Returns:
        Ordered field values.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    for character in line:
        if character == '"':
            in_quotes = not in_quotes
        elif character == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(character)
    fields.append("".join(current).strip())
    return fields


def parse_record(line: str, headers: Sequence[str]) -> RawRecord | None:
    """Build a header-keyed record from one data line.

    Args:
        line: Raw data line.
        headers: Validated header names.

    Returns:
        Record mapping, or None when the field count does not match.
    """
    fields = parse_line(line)
    if len(fields) != len(headers):
        return None
    return {header: repair_mojibake(value) for header, value in zip(headers, fields)}


def repair_mojibake(value: str) -> str:
    """Replace known double-encoded substrings with their intended text."""
    if not any(signature in value for signature in MOJIBAKE_SIGNATURES):
        return value
    repaired = value
    for corrupted, correct in MOJIBAKE_REPLACEMENTS:
        repaired = repaired.replace(corrupted, correct)
    return repaired


def expected_column_count(record_type: RecordType, year: int) -> int:
    """Return the header column count for a record layout and year."""
    if record_type == "license":
        return LICENSE_COLUMN_COUNT
    if year >= FUEL_TYPE_FIRST_YEAR:
        return VEHICLE_COLUMN_COUNT_WITH_FUEL
    return VEHICLE_COLUMN_COUNT_WITHOUT_FUEL


def validate_headers(headers: Sequence[str], record_type: RecordType, year: int) -> None:
    """Check the header column count against the year's layout.

    Args:
        headers: Parsed header names.
        record_type: Vehicle or license layout.
        year: Data year of the file.

    Raises:
        InvalidSchemaError: If the column count does not match.
    """
    expected = expected_column_count(record_type, year)
    if len(headers) == expected:
        return
    if record_type == "license":
        raise InvalidSchemaError(
            f"Expected {expected} columns for license data but found {len(headers)}"
        )
    raise InvalidSchemaError(
        f"Expected {expected} columns but found {len(headers)} for year {year}"
    )
