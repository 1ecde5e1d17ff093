"""Unit tests for record normalization and encoding."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import LookupUnresolvedError
from ingest.record_mapping import (
    coerce_flag,
    collect_observed_values,
    encode_record,
    normalize_geographic_name,
    normalize_record,
)
from store.categorical_dictionary import CategoricalDictionary
from store.database import SaaqDatabase
from tests.extract_builders import license_record, vehicle_record


def test_coerce_flag_accepts_only_oui() -> None:
    """Only the literal OUI token is true."""
    assert coerce_flag("OUI") is True
    assert coerce_flag("NON") is False
    assert coerce_flag("") is False
    assert coerce_flag("oui") is False
    assert coerce_flag(None) is False


def test_normalize_geographic_name_inserts_space_before_parenthesis() -> None:
    """Region codes are separated from names by exactly one space."""
    assert normalize_geographic_name("Capitale-Nationale(03)") == "Capitale-Nationale (03)"
    assert normalize_geographic_name(" Montréal (06) ") == "Montréal (06)"
    assert normalize_geographic_name("Laval  (13)") == "Laval (13)"
    assert normalize_geographic_name("Estrie") == "Estrie"


def test_normalize_vehicle_applies_defaults() -> None:
    """Missing classification and geography fall back to documented defaults."""
    record = vehicle_record(2017, "", CLAS="", REG_ADM="", MRC="", CG_FIXE="", MASSE_NETTE="n/a")

    normalized = normalize_record(record, "vehicle", 2017)

    assert normalized.categorical["classification"] == "UNK"
    assert normalized.categorical["admin_region"] == "Unknown Region"
    assert normalized.categorical["mrc"] == "Unknown MRC"
    assert normalized.categorical["municipality"] == "00000"
    assert normalized.attributes["vehicle_sequence"] == "2017_UNKNOWN"
    assert normalized.attributes["net_mass"] is None


def test_normalize_pre_fuel_vehicle_has_empty_fuel_type() -> None:
    """Years without a fuel type column leave the fuel reference empty."""
    record = vehicle_record(2016, "1")
    del record["TYP_CARBU"]

    normalized = normalize_record(record, "vehicle", 2016)

    assert normalized.categorical["fuel_type"] == ""


def test_normalize_license_coerces_flags() -> None:
    """License indicator columns become booleans."""
    record = license_record(2022, "L1", IND_PROBATOIRE="OUI", REG_ADM="Capitale-Nationale(03)")

    normalized = normalize_record(record, "license", 2022)

    assert normalized.attributes["probationary"] is True
    assert normalized.attributes["learner_123"] is False
    assert normalized.categorical["admin_region"] == "Capitale-Nationale (03)"


def test_encode_record_resolves_ids_in_dependency_order(tmp_path: Path) -> None:
    """Models resolve under the make resolved for the same record."""
    database = SaaqDatabase.from_path(tmp_path / "store.sqlite")
    database.create_schema()
    dictionary = CategoricalDictionary(database)
    normalized = [normalize_record(vehicle_record(2017, "1"), "vehicle", 2017)]
    dictionary.populate(collect_observed_values(normalized))

    row = encode_record(normalized[0], dictionary)

    make_id = dictionary.require("make", "TOYOT")
    assert row["make_id"] == make_id
    assert row["model_id"] == dictionary.require("model", "COROL", make_id)
    assert row["fuel_type_id"] == dictionary.require("fuel_type", "E")
    assert row["year"] == 2017


def test_encode_record_rejects_model_without_make(tmp_path: Path) -> None:
    """A model with no make cannot be encoded."""
    database = SaaqDatabase.from_path(tmp_path / "store.sqlite")
    database.create_schema()
    dictionary = CategoricalDictionary(database)
    normalized = normalize_record(vehicle_record(2017, "1", MARQ_VEH=""), "vehicle", 2017)
    dictionary.populate(collect_observed_values([normalized]))

    with pytest.raises(LookupUnresolvedError):
        encode_record(normalized, dictionary)
