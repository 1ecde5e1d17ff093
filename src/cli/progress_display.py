"""Terminal progress display for imports."""

from __future__ import annotations

import sys

from tqdm import tqdm

from ingest.progress import StageChange


class TqdmProgressReporter:
    """Render parse and batch progress as tqdm bars on stderr."""

    def __init__(self, disable: bool | None = None) -> None:
        self._disable = (not sys.stderr.isatty()) if disable is None else disable
        self._bar: tqdm | None = None

    def stage_changed(self, change: StageChange) -> None:
        self._close_bar()
        if change.stage == "parsing":
            self._bar = tqdm(
                total=change.total_records,
                desc=f"Parsing {change.year} ({change.worker_count} workers)",
                unit="rec",
                disable=self._disable,
            )
        elif change.stage == "importing":
            self._bar = tqdm(
                total=change.total_records,
                desc=f"Importing {change.year} ({change.total_batches} batches)",
                unit="rec",
                disable=self._disable,
            )
        elif not self._disable:
            tqdm.write(f"[{change.year}] {change.stage.replace('_', ' ')}", file=sys.stderr)

    def parsing_progress(self, processed_records: int, total_records: int) -> None:
        self._advance_to(processed_records)

    def importing_progress(
        self, current_batch: int, total_batches: int, records_processed: int
    ) -> None:
        self._advance_to(records_processed)

    def close(self) -> None:
        self._close_bar()

    def _advance_to(self, position: int) -> None:
        if self._bar is None:
            return
        delta = position - self._bar.n
        if delta > 0:
            self._bar.update(delta)

    def _close_bar(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None
