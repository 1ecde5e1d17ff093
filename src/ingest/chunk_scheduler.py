"""Work partitioning for parallel parsing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from core.constants import MAX_CHUNK_SIZE, MIN_CHUNK_SIZE
from core.errors import SaaqConfigError


@dataclass(frozen=True)
class LineChunk:
    """Contiguous slice of data lines assigned to one parse task.

    Attributes:
        index: Position of the chunk in input order.
        start_line: Offset of the first line in the full data line list.
        lines: Lines in the chunk.
    """

    index: int
    start_line: int
    lines: Sequence[str]


def compute_chunk_size(total_lines: int, worker_count: int) -> int:
    """Return ``clamp(total_lines // worker_count, MIN_CHUNK_SIZE, MAX_CHUNK_SIZE)``."""
    if worker_count < 1:
        raise SaaqConfigError(
            f"Invalid worker count {worker_count}: expected a positive integer. "
            "Set SAAQ_WORKER_COUNT or --workers to 1 or more."
        )
    return min(MAX_CHUNK_SIZE, max(MIN_CHUNK_SIZE, total_lines // worker_count))


def plan_chunks(lines: Sequence[str], worker_count: int) -> list[LineChunk]:
    """Partition lines into ordered contiguous chunks.

    Args:
        lines: Data lines in file order.
        worker_count: Parse worker count from the sizing policy.

    Returns:
        Chunks whose concatenation reproduces ``lines``.
    """
    chunk_size = compute_chunk_size(len(lines), worker_count)
    return [
        LineChunk(index=index, start_line=start, lines=lines[start : start + chunk_size])
        for index, start in enumerate(range(0, len(lines), chunk_size))
    ]
