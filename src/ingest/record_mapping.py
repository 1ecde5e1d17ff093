"""Raw record normalization and dictionary encoding.

Normalization applies field defaults, flag coercion, and geographic text
formatting. Encoding resolves each categorical value to a dictionary id.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from core.constants import (
    DEFAULT_ADMIN_REGION,
    DEFAULT_CLASSIFICATION,
    DEFAULT_GEO_CODE,
    DEFAULT_MRC,
    TRUE_FLAG_TOKEN,
    UNKNOWN_SEQUENCE_SUFFIX,
)
from core.errors import LookupUnresolvedError
from core.types import RawRecord, RecordType
from store.categorical_dictionary import CategoricalDictionary, ObservedValues
from store.dictionary_domains import DOMAINS
from store.schema import LICENSE_EXPERIENCE_COLUMNS, LICENSE_FLAG_COLUMNS


@dataclass(frozen=True)
class NormalizedRecord:
    """Record with cleaned categorical values and plain fact attributes.

    Attributes:
        categorical: Domain key to normalized value, empty when absent.
        attributes: Fact columns stored as-is.
    """

    categorical: dict[str, str]
    attributes: dict[str, object]


def coerce_flag(value: str | None) -> bool:
    """Return True only for the literal ``OUI`` token."""
    return value == TRUE_FLAG_TOKEN


def normalize_geographic_name(value: str) -> str:
    """Ensure exactly one space precedes the last opening parenthesis.

    ``"Capitale-Nationale(03)"`` becomes ``"Capitale-Nationale (03)"``.
    """
    text = value.strip()
    position = text.rfind("(")
    if position > 0:
        text = f"{text[:position].rstrip()} {text[position:]}"
    return text


def normalize_record(record: RawRecord, record_type: RecordType, year: int) -> NormalizedRecord:
    """Normalize one raw record for the given layout."""
    if record_type == "vehicle":
        return _normalize_vehicle(record, year)
    return _normalize_license(record, year)


def collect_observed_values(records: Iterable[NormalizedRecord]) -> ObservedValues:
    """Collect the distinct categorical values of a set of records."""
    observed = ObservedValues()
    for record in records:
        for domain, value in record.categorical.items():
            if domain == "model":
                observed.add(domain, value, record.categorical.get("make", ""))
            else:
                observed.add(domain, value)
    return observed


def encode_record(record: NormalizedRecord, dictionary: CategoricalDictionary) -> dict[str, object]:
    """Build a fact row with dictionary ids.

    Empty optional values become NULL references.

    Raises:
        LookupUnresolvedError: If a present value cannot be resolved.
    """
    row = dict(record.attributes)
    for spec in DOMAINS:
        if spec.key not in record.categorical:
            continue
        value = record.categorical[spec.key]
        if not value:
            row[spec.id_column] = None
            continue
        parent_id = None
        if spec.parent is not None:
            parent_id = row.get(f"{spec.parent}_id")
            if parent_id is None:
                raise LookupUnresolvedError(
                    f"Unresolved {spec.key} value '{value}': {spec.parent} is missing."
                )
        row[spec.id_column] = dictionary.require(spec.key, value, parent_id)
    return row


def _normalize_vehicle(record: RawRecord, year: int) -> NormalizedRecord:
    categorical = {
        "year": str(year),
        "classification": _text(record, "CLAS") or DEFAULT_CLASSIFICATION,
        "make": _text(record, "MARQ_VEH"),
        "model": _text(record, "MODEL_VEH"),
        "model_year": _text(record, "ANNEE_MOD"),
        "cylinder_count": _text(record, "NB_CYL"),
        "axle_count": _text(record, "NB_ESIEU_MAX"),
        "color": _text(record, "COUL_ORIG"),
        "fuel_type": _text(record, "TYP_CARBU"),
        "admin_region": normalize_geographic_name(_text(record, "REG_ADM")) or DEFAULT_ADMIN_REGION,
        "mrc": normalize_geographic_name(_text(record, "MRC")) or DEFAULT_MRC,
        "municipality": _text(record, "CG_FIXE") or DEFAULT_GEO_CODE,
    }
    attributes: dict[str, object] = {
        "year": year,
        "vehicle_sequence": _text(record, "NOSEQ_VEH") or f"{year}{UNKNOWN_SEQUENCE_SUFFIX}",
        "vehicle_type": _text(record, "TYP_VEH_CATEG_USA") or None,
        "net_mass": _parse_float(_text(record, "MASSE_NETTE")),
        "displacement": _parse_float(_text(record, "CYL_VEH")),
    }
    return NormalizedRecord(categorical=categorical, attributes=attributes)


def _normalize_license(record: RawRecord, year: int) -> NormalizedRecord:
    categorical = {
        "year": str(year),
        "age_group": _text(record, "AGE_1ER_JUIN"),
        "gender": _text(record, "SEXE"),
        "admin_region": normalize_geographic_name(_text(record, "REG_ADM")) or DEFAULT_ADMIN_REGION,
        "mrc": normalize_geographic_name(_text(record, "MRC")) or DEFAULT_MRC,
        "license_type": _text(record, "TYPE_PERMIS"),
    }
    attributes: dict[str, object] = {
        "year": year,
        "license_sequence": _text(record, "NOSEQ_TITUL") or f"{year}{UNKNOWN_SEQUENCE_SUFFIX}",
    }
    for source_column, fact_column in LICENSE_FLAG_COLUMNS.items():
        attributes[fact_column] = coerce_flag(record.get(source_column))
    for source_column, fact_column in LICENSE_EXPERIENCE_COLUMNS.items():
        attributes[fact_column] = _text(record, source_column) or None
    return NormalizedRecord(categorical=categorical, attributes=attributes)


def _text(record: RawRecord, column: str) -> str:
    return (record.get(column) or "").strip()


def _parse_float(value: str) -> float | None:
    if not value:
        return None
    try:
        return float(value.replace(",", "."))
    except ValueError:
        return None
