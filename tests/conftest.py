"""Pytest configuration for SAAQ ingest test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_sessionstart() -> None:
    """Put src/ on sys.path so tests import packages without installing."""
    src_path = Path(__file__).resolve().parent.parent / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def _isolated_saaq_environment(monkeypatch) -> None:
    """Keep developer SAAQ_* settings out of test runs."""
    for variable in (
        "SAAQ_DATA_ROOT",
        "SAAQ_DATABASE_PATH",
        "SAAQ_WORKER_COUNT",
        "SAAQ_MAX_WORKERS",
        "SAAQ_CURATED_YEARS",
        "SAAQ_UNCURATED_YEARS",
        "SAAQ_REGULARIZATION_FILE",
    ):
        monkeypatch.delenv(variable, raising=False)
