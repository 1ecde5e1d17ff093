"""Unit tests for dictionary provenance classification."""

from __future__ import annotations

from pathlib import Path

from core.types import YearPartition
from ingest.batch_importer import BatchImporter
from store.categorical_dictionary import CategoricalDictionary
from store.database import SaaqDatabase
from store.provenance import ProvenanceTracker
from store.regularization import StaticRegularizationSource, YamlRegularizationSource
from tests.extract_builders import vehicle_record

_PARTITION = YearPartition(
    curated_years=frozenset(range(2011, 2023)), uncurated_years=frozenset({2023, 2024})
)


def _seed_store(tmp_path: Path) -> tuple[SaaqDatabase, CategoricalDictionary]:
    database = SaaqDatabase.from_path(tmp_path / "store.sqlite")
    database.create_schema()
    dictionary = CategoricalDictionary(database)
    importer = BatchImporter(database, dictionary, "vehicle")
    importer.import_batch(
        [vehicle_record(2022, "1", MARQ_VEH="TOYOTA"), vehicle_record(2022, "2", MARQ_VEH="HONDA")],
        2022,
    )
    importer.import_batch(
        [
            vehicle_record(2023, "1", MARQ_VEH="TOYOTA"),
            vehicle_record(2023, "2", MARQ_VEH="TOYOT"),
            vehicle_record(2023, "3", MARQ_VEH="TOYOT"),
        ],
        2023,
    )
    importer.import_batch([vehicle_record(2024, "4", MARQ_VEH="HONDAA")], 2024)
    return database, dictionary


def test_compute_marks_uncurated_only_entries(tmp_path: Path) -> None:
    """Makes that only appear in uncurated years carry their row counts."""
    database, dictionary = _seed_store(tmp_path)
    tracker = ProvenanceTracker(database, _PARTITION)

    records = tracker.compute("make")

    toyot = records[dictionary.require("make", "TOYOT")]
    toyota = records[dictionary.require("make", "TOYOTA")]
    assert toyot.status == "uncuratedOnly"
    assert toyot.record_count == 2
    assert toyota.status == "canonical"
    assert toyota.record_count == 2


def test_compute_marks_regularized_entries(tmp_path: Path) -> None:
    """Mapped values that differ from their canonical value are regularized."""
    database, dictionary = _seed_store(tmp_path)
    source = StaticRegularizationSource({"make": {"TOYOT": "TOYOTA", "HONDA": "HONDA"}})
    tracker = ProvenanceTracker(database, _PARTITION, source)

    records = tracker.compute("make")

    toyot = records[dictionary.require("make", "TOYOT")]
    honda = records[dictionary.require("make", "HONDA")]
    assert toyot.status == "regularized"
    assert toyot.canonical_value == "TOYOTA"
    assert toyot.record_count == 2
    assert honda.status == "canonical"


def test_load_tolerates_unavailable_mapping(tmp_path: Path) -> None:
    """A missing mapping file falls back to an empty mapping."""
    database, _ = _seed_store(tmp_path)
    source = YamlRegularizationSource(tmp_path / "missing.yaml")
    tracker = ProvenanceTracker(database, _PARTITION, source)

    provenance = tracker.load()

    assert "year" not in provenance
    assert {record.status for record in provenance["make"].values()} == {
        "canonical",
        "uncuratedOnly",
    }


def test_uncurated_only_lists_affected_counts(tmp_path: Path) -> None:
    """The uncurated-only view maps entry ids to affected rows."""
    database, dictionary = _seed_store(tmp_path)
    tracker = ProvenanceTracker(database, _PARTITION)

    uncurated = tracker.uncurated_only("make")

    assert uncurated == {
        dictionary.require("make", "TOYOT"): 2,
        dictionary.require("make", "HONDAA"): 1,
    }


class _BrokenRegularizationSource:
    def load(self) -> dict[str, dict[str, str]]:
        raise RuntimeError("mapping service unreachable")


def test_load_tolerates_any_source_failure(tmp_path: Path) -> None:
    """Unexpected source errors also fall back to an empty mapping."""
    database, dictionary = _seed_store(tmp_path)
    tracker = ProvenanceTracker(database, _PARTITION, _BrokenRegularizationSource())

    provenance = tracker.load()

    assert provenance["make"][dictionary.require("make", "TOYOT")].status == "uncuratedOnly"
    assert "regularized" not in {record.status for record in provenance["make"].values()}


def test_regularized_entries_count_rows_across_all_years(tmp_path: Path) -> None:
    """Regularized entries report every fact row that references them."""
    database, dictionary = _seed_store(tmp_path)
    source = StaticRegularizationSource({"make": {"TOYOTA": "TOYOT"}})
    tracker = ProvenanceTracker(database, _PARTITION, source)

    toyota = tracker.compute("make")[dictionary.require("make", "TOYOTA")]

    assert toyota.status == "regularized"
    assert toyota.record_count == 2
