"""Import orchestration for yearly extracts.

This module sequences duplicate-year handling, encoding-resolved reads,
parallel parsing, batched writes, index refresh, and import logging.
"""

from __future__ import annotations

from dataclasses import replace
import time
from typing import Callable, Sequence

from core.constants import IMPORT_BATCH_SIZE
from core.errors import ImportCancelledError, SaaqStoreError
from core.logging_config import get_logger
from core.types import ImportBatchResult, ImportRequest, ImportResult, RecordType
from ingest.batch_importer import BatchImporter
from ingest.input_reader import SourceDocument, read_source_document
from ingest.parallel_parser import ParallelParseEngine, ParseOutcome
from ingest.progress import (
    ImportStage,
    NullProgressReporter,
    ProgressReporter,
    StageChange,
)
from ingest.worker_policy import WorkerCountPolicy
from store.categorical_dictionary import CategoricalDictionary
from store.database import SaaqDatabase
from store.import_log import append_import_log

_LOGGER = get_logger(__name__)

ReplaceYearDecider = Callable[[int, RecordType], bool]


def always_replace(year: int, record_type: RecordType) -> bool:
    """Duplicate-year decider that always replaces."""
    return True


class ImportCoordinator:
    """Stateful coordinator for end-to-end file imports."""

    def __init__(
        self,
        database: SaaqDatabase,
        dictionary: CategoricalDictionary,
        worker_policy: WorkerCountPolicy,
        reporter: ProgressReporter | None = None,
        replace_decider: ReplaceYearDecider = always_replace,
        batch_size: int = IMPORT_BATCH_SIZE,
    ) -> None:
        self._database = database
        self._dictionary = dictionary
        self._worker_policy = worker_policy
        self._reporter = reporter or NullProgressReporter()
        self._replace_decider = replace_decider
        self._batch_size = batch_size

    def import_file(self, request: ImportRequest) -> ImportResult:
        """Import one extract, replacing any existing data for its year.

        Args:
            request: File, year, and layout to import.

        Returns:
            Final counts and duration.

        Raises:
            ImportCancelledError: If replacing an existing year is declined.
            SaaqIngestError: If the file cannot be read, decoded, or validated.
            SaaqStoreError: If the year cannot be cleared.
        """
        started_at = time.monotonic()
        self._replace_existing_year(request)
        document = self._read_document(request)
        outcome = self._parse_document(request, document)
        try:
            batch_results = self._import_records(request, outcome)
        except Exception:
            self._restore_indexes(request.year)
            raise
        if not request.defer_indexing:
            self._rebuild_indexes(request.year)
        result = ImportResult(
            total_records=len(outcome.records),
            success_count=sum(batch.success_count for batch in batch_results),
            error_count=sum(batch.error_count for batch in batch_results),
            duration_seconds=time.monotonic() - started_at,
            skipped_lines=outcome.skipped_lines,
        )
        append_import_log(
            self._database,
            file_name=request.source_path.name,
            year=request.year,
            record_type=request.record_type,
            record_count=result.success_count,
            error_count=result.error_count,
        )
        self._stage("completed", request.year, result=result)
        _log_import_completion(request, result)
        return result

    def import_files(self, requests: Sequence[ImportRequest]) -> list[ImportResult]:
        """Import several extracts back to back with one index rebuild.

        Args:
            requests: Imports to run in order.

        Returns:
            One result per request.
        """
        results = [
            self.import_file(replace(request, defer_indexing=True)) for request in requests
        ]
        if requests:
            self._rebuild_indexes(requests[-1].year)
        return results

    def _replace_existing_year(self, request: ImportRequest) -> None:
        if request.skip_duplicate_check:
            return
        if not self._database.has_year_data(request.record_type, request.year):
            return
        if not self._replace_decider(request.year, request.record_type):
            self._stage("cancelled", request.year)
            _LOGGER.info(
                "import_cancelled", record_type=request.record_type, year=request.year
            )
            raise ImportCancelledError(
                f"Import of {request.record_type} data for year {request.year} was cancelled: "
                "the year already has data and replacement was declined."
            )
        self._stage("replacing_year", request.year)
        self._database.clear_year(request.record_type, request.year)

    def _read_document(self, request: ImportRequest) -> SourceDocument:
        self._stage("reading", request.year)
        return read_source_document(request.source_path, request.record_type, request.year)

    def _parse_document(self, request: ImportRequest, document: SourceDocument) -> ParseOutcome:
        total_lines = len(document.data_lines)
        worker_count = max(1, self._worker_policy(total_lines))
        self._stage("parsing", request.year, total_records=total_lines, worker_count=worker_count)
        engine = ParallelParseEngine(worker_count, self._reporter)
        return engine.parse(document.data_lines, document.headers)

    def _import_records(
        self, request: ImportRequest, outcome: ParseOutcome
    ) -> list[ImportBatchResult]:
        importer = BatchImporter(
            self._database, self._dictionary, request.record_type, self._batch_size
        )
        self._stage(
            "importing",
            request.year,
            total_records=len(outcome.records),
            total_batches=importer.total_batches(len(outcome.records)),
        )
        self._database.begin_bulk_import()
        return importer.import_records(outcome.records, request.year, self._reporter)

    def _rebuild_indexes(self, year: int) -> None:
        self._stage("indexing", year)
        self._database.end_bulk_import()
        self._dictionary.refresh_cache()

    def _restore_indexes(self, year: int) -> None:
        try:
            self._database.end_bulk_import()
        except SaaqStoreError as error:
            _LOGGER.error("index_restore_failed", year=year, error=str(error))
        self._dictionary.refresh_cache()

    def _stage(self, stage: ImportStage, year: int, **details: object) -> None:
        self._reporter.stage_changed(StageChange(stage=stage, year=year, **details))


def import_file(
    request: ImportRequest,
    database: SaaqDatabase,
    dictionary: CategoricalDictionary,
    worker_policy: WorkerCountPolicy,
    reporter: ProgressReporter | None = None,
) -> ImportResult:
    """Run one import with the default duplicate-year policy.

    Args:
        request: Import request.
        database: Store owner.
        dictionary: Categorical dictionaries bound to the store.
        worker_policy: Parse worker sizing policy.
        reporter: Optional progress receiver.

    Returns:
        Final import result.
    """
    coordinator = ImportCoordinator(database, dictionary, worker_policy, reporter)
    return coordinator.import_file(request)


def _log_import_completion(request: ImportRequest, result: ImportResult) -> None:
    _LOGGER.info(
        "import_completed",
        source_path=str(request.source_path),
        record_type=request.record_type,
        year=request.year,
        total_records=result.total_records,
        success_count=result.success_count,
        error_count=result.error_count,
        skipped_lines=result.skipped_lines,
        duration_seconds=round(result.duration_seconds, 3),
    )
