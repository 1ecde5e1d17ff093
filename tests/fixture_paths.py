"""Locate checked-in CSV extracts under tests/fixtures."""

from __future__ import annotations

from pathlib import Path

FIXTURES_ROOT = Path(__file__).resolve().parent / "fixtures"


def fixture_path(file_name: str) -> Path:
    """Return the absolute path of a fixture extract.

    Args:
        file_name: File name under the fixtures directory.

    Returns:
        Absolute fixture path.
    """
    return FIXTURES_ROOT / file_name
