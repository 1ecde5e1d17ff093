"""Import progress events and reporters.

Stage transitions and counters are pushed to a reporter supplied by the
caller. Reporters never influence pipeline control flow.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol

from core.logging_config import get_logger
from core.types import ImportResult

_LOGGER = get_logger(__name__)

ImportStage = Literal[
    "idle",
    "replacing_year",
    "reading",
    "parsing",
    "importing",
    "indexing",
    "completed",
    "cancelled",
]


@dataclass(frozen=True)
class StageChange:
    """Stage transition with the details known at entry.

    Attributes:
        stage: Stage being entered.
        year: Data year of the import.
        total_records: Records to parse or import, when known.
        worker_count: Parse workers, for the parsing stage.
        total_batches: Write batches, for the importing stage.
        result: Final result, for the completed stage.
    """

    stage: ImportStage
    year: int
    total_records: int | None = None
    worker_count: int | None = None
    total_batches: int | None = None
    result: ImportResult | None = None


class ProgressReporter(Protocol):
    """Receiver of import progress."""

    def stage_changed(self, change: StageChange) -> None:
        """Handle a stage transition."""

    def parsing_progress(self, processed_records: int, total_records: int) -> None:
        """Handle a parse counter update."""

    def importing_progress(
        self, current_batch: int, total_batches: int, records_processed: int
    ) -> None:
        """Handle a committed batch."""


class NullProgressReporter:
    """Reporter that discards all progress."""

    def stage_changed(self, change: StageChange) -> None:
        return None

    def parsing_progress(self, processed_records: int, total_records: int) -> None:
        return None

    def importing_progress(
        self, current_batch: int, total_batches: int, records_processed: int
    ) -> None:
        return None


class LoggingProgressReporter:
    """Reporter that emits structured log events.

    Parse counter updates are throttled to whole-percent changes so the
    ticker does not flood the log.
    """

    def __init__(self) -> None:
        self._last_parse_percent = -1

    def stage_changed(self, change: StageChange) -> None:
        if change.stage == "parsing":
            self._last_parse_percent = -1
        fields: dict[str, object] = {"stage": change.stage, "year": change.year}
        if change.total_records is not None:
            fields["total_records"] = change.total_records
        if change.worker_count is not None:
            fields["worker_count"] = change.worker_count
        if change.total_batches is not None:
            fields["total_batches"] = change.total_batches
        if change.result is not None:
            fields["success_count"] = change.result.success_count
            fields["error_count"] = change.result.error_count
            fields["duration_seconds"] = round(change.result.duration_seconds, 3)
        _LOGGER.info("import_stage_changed", **fields)

    def parsing_progress(self, processed_records: int, total_records: int) -> None:
        if total_records <= 0:
            return
        percent = processed_records * 100 // total_records
        if percent == self._last_parse_percent:
            return
        self._last_parse_percent = percent
        _LOGGER.info(
            "import_parsing_progress",
            processed_records=processed_records,
            total_records=total_records,
            percent=percent,
        )

    def importing_progress(
        self, current_batch: int, total_batches: int, records_processed: int
    ) -> None:
        _LOGGER.info(
            "import_batch_progress",
            current_batch=current_batch,
            total_batches=total_batches,
            records_processed=records_processed,
        )
