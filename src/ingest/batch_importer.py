"""Transactional batch writer for parsed records.

Each batch runs in one transaction on a single writer connection.
Per-record failures are counted and skipped, while a failure to begin or
commit the transaction rejects the whole batch and the import moves on.
"""

from __future__ import annotations

from math import ceil
from typing import Sequence

from sqlalchemy import insert
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from core.constants import IMPORT_BATCH_SIZE, MAX_LOGGED_INSERT_ERRORS
from core.errors import BatchTransactionError, LookupUnresolvedError
from core.logging_config import get_logger
from core.types import ImportBatchResult, RawRecord, RecordType
from ingest.progress import NullProgressReporter, ProgressReporter
from ingest.record_mapping import (
    NormalizedRecord,
    collect_observed_values,
    encode_record,
    normalize_record,
)
from store.categorical_dictionary import CategoricalDictionary
from store.database import SaaqDatabase

_LOGGER = get_logger(__name__)


class BatchImporter:
    """Single-writer importer for one record layout."""

    def __init__(
        self,
        database: SaaqDatabase,
        dictionary: CategoricalDictionary,
        record_type: RecordType,
        batch_size: int = IMPORT_BATCH_SIZE,
    ) -> None:
        self._database = database
        self._dictionary = dictionary
        self._record_type = record_type
        self._batch_size = batch_size

    def total_batches(self, record_count: int) -> int:
        return ceil(record_count / self._batch_size)

    def import_records(
        self,
        records: Sequence[RawRecord],
        year: int,
        reporter: ProgressReporter | None = None,
    ) -> list[ImportBatchResult]:
        """Import records in fixed-size batches.

        Args:
            records: Parsed records in input order.
            year: Year the records belong to.
            reporter: Receiver of per-batch progress.

        Returns:
            One result per batch, in batch order.
        """
        progress = reporter or NullProgressReporter()
        total_batches = self.total_batches(len(records))
        results: list[ImportBatchResult] = []
        for batch_number, start in enumerate(range(0, len(records), self._batch_size), start=1):
            batch = records[start : start + self._batch_size]
            try:
                result = self.import_batch(batch, year)
            except BatchTransactionError as error:
                _LOGGER.error(
                    "import_batch_failed",
                    batch_number=batch_number,
                    record_count=len(batch),
                    error=str(error),
                )
                result = ImportBatchResult(success_count=0, error_count=len(batch))
            results.append(result)
            progress.importing_progress(batch_number, total_batches, start + len(batch))
        return results

    def import_batch(self, records: Sequence[RawRecord], year: int) -> ImportBatchResult:
        """Write one batch inside one transaction.

        Observed categorical values are registered in the dictionaries in
        the same transaction before the records are encoded.

        Args:
            records: Records of the batch.
            year: Year the records belong to.

        Returns:
            Success and error counts of the batch.

        Raises:
            BatchTransactionError: If the transaction cannot begin or commit.
        """
        normalized = [normalize_record(record, self._record_type, year) for record in records]
        try:
            connection = self._database.engine.connect()
        except SQLAlchemyError as error:
            raise BatchTransactionError(
                f"Failed to open a writer connection for year {year}: {error}."
            ) from error
        with connection:
            try:
                transaction = connection.begin()
            except SQLAlchemyError as error:
                raise BatchTransactionError(
                    f"Failed to begin batch transaction for year {year}: {error}."
                ) from error
            try:
                self._dictionary.populate(collect_observed_values(normalized), connection)
                result = self._insert_records(connection, normalized)
                transaction.commit()
            except SQLAlchemyError as error:
                # A failed commit leaves the transaction inactive with the write lock held.
                transaction.rollback()
                self._dictionary.refresh_cache()
                raise BatchTransactionError(
                    f"Batch transaction for year {year} failed: {error}. "
                    f"All {len(records)} records of the batch were rolled back."
                ) from error
        _LOGGER.info(
            "import_batch_committed",
            record_type=self._record_type,
            year=year,
            success_count=result.success_count,
            error_count=result.error_count,
        )
        return result

    def _insert_records(
        self, connection: Connection, records: list[NormalizedRecord]
    ) -> ImportBatchResult:
        statement = insert(self._database.tables.fact_table(self._record_type))
        success_count = 0
        error_count = 0
        for record in records:
            try:
                connection.execute(statement, encode_record(record, self._dictionary))
            except (LookupUnresolvedError, SQLAlchemyError) as error:
                error_count += 1
                if error_count <= MAX_LOGGED_INSERT_ERRORS:
                    _LOGGER.warning(
                        "record_insert_failed",
                        record_type=self._record_type,
                        error=str(error).splitlines()[0],
                    )
                continue
            success_count += 1
        return ImportBatchResult(success_count=success_count, error_count=error_count)
