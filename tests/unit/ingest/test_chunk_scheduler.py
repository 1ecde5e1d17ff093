"""Unit tests for chunk planning."""

from __future__ import annotations

import pytest

from core.errors import SaaqConfigError
from ingest.chunk_scheduler import compute_chunk_size, plan_chunks


@pytest.mark.parametrize(
    ("total_lines", "worker_count"),
    [(5, 4), (9_999, 1), (120_000, 3), (200_001, 2), (95_000, 8), (1_000_000, 4)],
)
def test_plan_chunks_bounds_and_order(total_lines: int, worker_count: int) -> None:
    """Chunks stay within size bounds and reproduce the input order."""
    lines = [str(index) for index in range(total_lines)]

    chunks = plan_chunks(lines, worker_count)

    assert [line for chunk in chunks for line in chunk.lines] == lines
    assert all(10_000 <= len(chunk.lines) <= 50_000 for chunk in chunks[:-1])
    assert len(chunks[-1].lines) <= 50_000
    assert [chunk.index for chunk in chunks] == list(range(len(chunks)))


def test_compute_chunk_size_clamps_to_bounds() -> None:
    """Chunk size is clamped between the minimum and maximum."""
    assert compute_chunk_size(1_000, 8) == 10_000
    assert compute_chunk_size(120_000, 4) == 30_000
    assert compute_chunk_size(10_000_000, 2) == 50_000


def test_plan_chunks_tracks_start_offsets() -> None:
    """Each chunk records its offset into the full line list."""
    lines = [str(index) for index in range(25_000)]

    chunks = plan_chunks(lines, 1)

    assert [chunk.start_line for chunk in chunks] == [0]
    assert len(plan_chunks(lines * 3, 1)) == 2


def test_plan_chunks_rejects_non_positive_workers() -> None:
    """Worker count must be positive."""
    with pytest.raises(SaaqConfigError):
        plan_chunks(["a"], 0)
