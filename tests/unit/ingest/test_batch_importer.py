"""Unit tests for transactional batch imports."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import event, select
from sqlalchemy.exc import OperationalError

from core.types import ImportBatchResult
from ingest.batch_importer import BatchImporter
from store.categorical_dictionary import CategoricalDictionary
from store.database import SaaqDatabase
from tests.extract_builders import license_record, vehicle_record


def _open_store(tmp_path: Path) -> tuple[SaaqDatabase, CategoricalDictionary]:
    database = SaaqDatabase.from_path(tmp_path / "store.sqlite")
    database.create_schema()
    return database, CategoricalDictionary(database)


def test_import_batch_writes_encoded_vehicle_rows(tmp_path: Path) -> None:
    """Vehicle rows reference dictionary ids instead of strings."""
    database, dictionary = _open_store(tmp_path)
    importer = BatchImporter(database, dictionary, "vehicle")

    result = importer.import_batch(
        [vehicle_record(2017, "1", REG_ADM="Capitale-Nationale(03)")], 2017
    )

    vehicles = database.tables.vehicles
    with database.engine.connect() as connection:
        row = connection.execute(select(vehicles)).one()
    assert result == ImportBatchResult(success_count=1, error_count=0)
    assert dictionary.value_for("admin_region", row.admin_region_id) == "Capitale-Nationale (03)"
    assert dictionary.value_for("classification", row.classification_id) == "PAU"
    assert row.net_mass == 1250.0


def test_import_batch_counts_failed_records_without_aborting(tmp_path: Path) -> None:
    """Duplicate keys and unresolvable values are per-record errors."""
    database, dictionary = _open_store(tmp_path)
    importer = BatchImporter(database, dictionary, "vehicle")
    records = [
        vehicle_record(2017, "1"),
        vehicle_record(2017, "1"),
        vehicle_record(2017, "2", NB_CYL="four"),
        vehicle_record(2017, "3"),
    ]

    result = importer.import_batch(records, 2017)

    assert result == ImportBatchResult(success_count=2, error_count=2)
    assert database.count_rows("vehicle", 2017) == 2


def test_out_of_range_integer_value_is_a_record_error(tmp_path: Path) -> None:
    """Integers beyond the 64-bit store range are unresolved, not fatal."""
    database, dictionary = _open_store(tmp_path)
    importer = BatchImporter(database, dictionary, "vehicle", batch_size=2)
    records = [
        vehicle_record(2017, "1"),
        vehicle_record(2017, "2", ANNEE_MOD="99999999999999999999"),
        vehicle_record(2017, "3"),
    ]

    results = importer.import_records(records, 2017)

    assert results == [
        ImportBatchResult(success_count=1, error_count=1),
        ImportBatchResult(success_count=1, error_count=0),
    ]
    assert dictionary.lookup("model_year", "99999999999999999999") is None


def test_import_batch_coerces_license_flags(tmp_path: Path) -> None:
    """OUI flags are stored as true and anything else as false."""
    database, dictionary = _open_store(tmp_path)
    importer = BatchImporter(database, dictionary, "license")

    importer.import_batch(
        [license_record(2022, "L1", IND_PERMISCONDUIRE_1234="OUI", IND_PROBATOIRE="")], 2022
    )

    licenses = database.tables.licenses
    with database.engine.connect() as connection:
        row = connection.execute(select(licenses)).one()
    assert row.license_1234 is True
    assert row.probationary is False
    assert dictionary.value_for("license_type", row.license_type_id) == "RÉGULIER"


def test_failed_commit_counts_whole_batch_and_continues(tmp_path: Path) -> None:
    """A commit failure rejects its batch and the next batch still imports."""
    database, dictionary = _open_store(tmp_path)
    importer = BatchImporter(database, dictionary, "license")
    records = [license_record(2022, f"L{index}") for index in range(50_001)]
    commit_attempts: list[int] = []

    def fail_first_commit(connection) -> None:
        commit_attempts.append(1)
        if len(commit_attempts) == 1:
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    event.listen(database.engine, "commit", fail_first_commit)

    results = importer.import_records(records, 2022)

    assert results == [
        ImportBatchResult(success_count=0, error_count=50_000),
        ImportBatchResult(success_count=1, error_count=0),
    ]
    assert database.count_rows("license", 2022) == 1


def test_failed_commit_releases_the_write_lock(tmp_path: Path) -> None:
    """Batches after a failed commit can still write."""
    database, dictionary = _open_store(tmp_path)
    importer = BatchImporter(database, dictionary, "license", batch_size=2)
    commit_attempts: list[int] = []

    def fail_first_commit(connection) -> None:
        commit_attempts.append(1)
        if len(commit_attempts) == 1:
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    event.listen(database.engine, "commit", fail_first_commit)

    results = importer.import_records(
        [license_record(2022, f"L{index}") for index in range(4)], 2022
    )

    assert results == [
        ImportBatchResult(success_count=0, error_count=2),
        ImportBatchResult(success_count=2, error_count=0),
    ]
    assert database.count_rows("license", 2022) == 2
    assert dictionary.lookup("year", "2022") is not None


def test_import_records_reports_batch_progress(tmp_path: Path) -> None:
    """Each batch reports its number and cumulative record count."""
    database, dictionary = _open_store(tmp_path)
    importer = BatchImporter(database, dictionary, "license", batch_size=2)
    updates: list[tuple[int, int, int]] = []

    class _Reporter:
        def stage_changed(self, change) -> None:
            return None

        def parsing_progress(self, processed_records: int, total_records: int) -> None:
            return None

        def importing_progress(
            self, current_batch: int, total_batches: int, records_processed: int
        ) -> None:
            updates.append((current_batch, total_batches, records_processed))

    importer.import_records(
        [license_record(2022, f"L{index}") for index in range(5)], 2022, _Reporter()
    )

    assert updates == [(1, 3, 2), (2, 3, 4), (3, 3, 5)]
