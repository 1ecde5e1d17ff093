"""Parallel chunked parsing with live progress.

Chunks are parsed on a bounded thread pool. A ticker thread forwards the
shared processed-record counter to the progress reporter, and results are
reassembled in chunk order so output order matches input line order.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
import threading
import time
from typing import Sequence

from core.constants import MAX_LOGGED_LINE_WARNINGS, PROGRESS_TICK_SECONDS
from core.logging_config import get_logger
from core.types import RawRecord
from ingest.chunk_scheduler import LineChunk, plan_chunks
from ingest.progress import ProgressReporter
from ingest.record_parser import parse_record

_LOGGER = get_logger(__name__)


class ProgressCounter:
    """Thread-safe monotonically increasing counter."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    def increment(self, amount: int = 1) -> None:
        with self._lock:
            self._value += amount

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


class ProgressTicker:
    """Background thread polling a counter at a fixed interval."""

    def __init__(
        self,
        counter: ProgressCounter,
        total_records: int,
        reporter: ProgressReporter,
        interval_seconds: float = PROGRESS_TICK_SECONDS,
    ) -> None:
        self._counter = counter
        self._total_records = total_records
        self._reporter = reporter
        self._interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._run, name="parse-progress", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        """Stop polling and wait for the ticker thread to exit."""
        self._stop_event.set()
        self._thread.join()

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval_seconds):
            self._reporter.parsing_progress(self._counter.value, self._total_records)


@dataclass(frozen=True)
class ChunkParseResult:
    """Records parsed from one chunk."""

    chunk_index: int
    records: list[RawRecord]
    skipped_lines: int


@dataclass(frozen=True)
class ParseOutcome:
    """Ordered records from all chunks.

    Attributes:
        records: Parsed records in input line order.
        skipped_lines: Malformed lines dropped across all chunks.
        chunk_count: Number of chunks scheduled.
        duration_seconds: Parse wall-clock time.
    """

    records: list[RawRecord]
    skipped_lines: int
    chunk_count: int
    duration_seconds: float


class ParallelParseEngine:
    """Bounded-pool CSV parser for validated data lines."""

    def __init__(
        self,
        worker_count: int,
        reporter: ProgressReporter,
        tick_interval_seconds: float = PROGRESS_TICK_SECONDS,
    ) -> None:
        self._worker_count = worker_count
        self._reporter = reporter
        self._tick_interval_seconds = tick_interval_seconds

    def parse(self, data_lines: Sequence[str], headers: Sequence[str]) -> ParseOutcome:
        """Parse all data lines into header-keyed records.

        Args:
            data_lines: Non-blank data lines in file order.
            headers: Validated header names.

        Returns:
            Records in input order with skipped-line accounting.
        """
        started_at = time.monotonic()
        chunks = plan_chunks(data_lines, self._worker_count)
        counter = ProgressCounter()
        ticker = ProgressTicker(
            counter, len(data_lines), self._reporter, self._tick_interval_seconds
        )
        ticker.start()
        try:
            results = self._run_chunks(chunks, headers, counter)
        finally:
            ticker.stop()
        self._reporter.parsing_progress(counter.value, len(data_lines))
        records: list[RawRecord] = []
        skipped_lines = 0
        for chunk_index in sorted(results):
            records.extend(results[chunk_index].records)
            skipped_lines += results[chunk_index].skipped_lines
        duration_seconds = time.monotonic() - started_at
        if skipped_lines:
            _LOGGER.warning("malformed_lines_skipped", skipped_lines=skipped_lines)
        _LOGGER.info(
            "parallel_parse_completed",
            record_count=len(records),
            chunk_count=len(chunks),
            worker_count=self._worker_count,
            duration_seconds=round(duration_seconds, 3),
        )
        return ParseOutcome(
            records=records,
            skipped_lines=skipped_lines,
            chunk_count=len(chunks),
            duration_seconds=duration_seconds,
        )

    def _run_chunks(
        self,
        chunks: list[LineChunk],
        headers: Sequence[str],
        counter: ProgressCounter,
    ) -> dict[int, ChunkParseResult]:
        results: dict[int, ChunkParseResult] = {}
        with ThreadPoolExecutor(max_workers=self._worker_count) as executor:
            futures: list[Future[ChunkParseResult]] = [
                executor.submit(parse_chunk, chunk, headers, counter) for chunk in chunks
            ]
            for future in as_completed(futures):
                result = future.result()
                results[result.chunk_index] = result
        return results


def parse_chunk(
    chunk: LineChunk,
    headers: Sequence[str],
    counter: ProgressCounter,
) -> ChunkParseResult:
    """Parse one chunk, dropping lines whose field count does not match.

    Args:
        chunk: Lines to parse.
        headers: Validated header names.
        counter: Shared processed-line counter, skipped lines included.

    Returns:
        Parsed records for the chunk.
    """
    records: list[RawRecord] = []
    skipped_lines = 0
    for offset, line in enumerate(chunk.lines):
        counter.increment()
        record = parse_record(line, headers)
        if record is None:
            skipped_lines += 1
            if skipped_lines <= MAX_LOGGED_LINE_WARNINGS:
                _LOGGER.warning(
                    "malformed_line_skipped",
                    chunk_index=chunk.index,
                    line_number=chunk.start_line + offset + 2,
                    expected_fields=len(headers),
                )
            continue
        records.append(record)
    return ChunkParseResult(chunk_index=chunk.index, records=records, skipped_lines=skipped_lines)
