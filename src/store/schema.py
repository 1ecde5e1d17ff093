"""Relational schema for the normalized store.

Fact tables reference dictionary tables through ``<domain>_id`` columns.
Secondary fact indexes are exposed separately so bulk imports can drop
and rebuild them.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
)

from core.types import RecordType
from store.dictionary_domains import DOMAINS, DomainSpec

LICENSE_FLAG_COLUMNS = {
    "IND_PERMISAPPRENTI_123": "learner_123",
    "IND_PERMISAPPRENTI_5": "learner_5",
    "IND_PERMISAPPRENTI_6A6R": "learner_6a6r",
    "IND_PERMISCONDUIRE_1234": "license_1234",
    "IND_PERMISCONDUIRE_5": "license_5",
    "IND_PERMISCONDUIRE_6ABCE": "license_6abce",
    "IND_PERMISCONDUIRE_6D": "license_6d",
    "IND_PERMISCONDUIRE_8": "license_8",
    "IND_PROBATOIRE": "probationary",
}

LICENSE_EXPERIENCE_COLUMNS = {
    "EXPERIENCE_1234": "experience_1234",
    "EXPERIENCE_5": "experience_5",
    "EXPERIENCE_6ABCE": "experience_6abce",
    "EXPERIENCE_GLOBALE": "experience_global",
}

_REQUIRED_DOMAINS = {"year", "classification"}

_INDEXED_DOMAINS = {
    "vehicles": ("classification", "make", "model", "fuel_type", "admin_region", "mrc"),
    "licenses": ("age_group", "gender", "license_type", "admin_region", "mrc"),
}


@dataclass(frozen=True)
class StoreTables:
    """Table handles for one metadata instance."""

    metadata: MetaData
    dictionaries: dict[str, Table]
    vehicles: Table
    licenses: Table
    import_log: Table
    fact_indexes: tuple[Index, ...]

    def fact_table(self, record_type: RecordType) -> Table:
        return self.vehicles if record_type == "vehicle" else self.licenses


def build_tables() -> StoreTables:
    """Declare every store table on a fresh metadata object."""
    metadata = MetaData()
    dictionaries: dict[str, Table] = {}
    for spec in DOMAINS:
        dictionaries[spec.key] = _dictionary_table(metadata, spec, dictionaries)
    vehicles = Table(
        "vehicles",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("year", Integer, nullable=False),
        Column("vehicle_sequence", String, nullable=False),
        Column("vehicle_type", String),
        Column("net_mass", Float),
        Column("displacement", Float),
        *_reference_columns("vehicles", dictionaries),
        UniqueConstraint("year", "vehicle_sequence", name="uq_vehicles_year_sequence"),
    )
    licenses = Table(
        "licenses",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("year", Integer, nullable=False),
        Column("license_sequence", String, nullable=False),
        *[
            Column(column, Boolean, nullable=False, default=False)
            for column in LICENSE_FLAG_COLUMNS.values()
        ],
        *[Column(column, String) for column in LICENSE_EXPERIENCE_COLUMNS.values()],
        *_reference_columns("licenses", dictionaries),
        UniqueConstraint("year", "license_sequence", name="uq_licenses_year_sequence"),
    )
    import_log = Table(
        "import_log",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("file_name", String, nullable=False),
        Column("year", Integer, nullable=False),
        Column("record_type", String, nullable=False),
        Column("record_count", Integer, nullable=False),
        Column("import_date", DateTime, nullable=False),
        Column("status", String, nullable=False),
    )
    fact_indexes = tuple(
        Index(f"idx_{table.name}_{domain}", table.c[f"{domain}_id"])
        for table in (vehicles, licenses)
        for domain in _INDEXED_DOMAINS[table.name]
    )
    return StoreTables(
        metadata=metadata,
        dictionaries=dictionaries,
        vehicles=vehicles,
        licenses=licenses,
        import_log=import_log,
        fact_indexes=fact_indexes,
    )


def _dictionary_table(metadata: MetaData, spec: DomainSpec, built: dict[str, Table]) -> Table:
    value_type = Integer if spec.value_kind == "integer" else String
    columns: list[object] = [
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("value", value_type, nullable=False),
        Column("description", String),
    ]
    if spec.parent is not None:
        parent_table = built[spec.parent]
        columns.append(Column("parent_id", Integer, ForeignKey(parent_table.c.id), nullable=False))
        columns.append(UniqueConstraint("value", "parent_id", name=f"uq_{spec.table_name}_value"))
    else:
        columns.append(UniqueConstraint("value", name=f"uq_{spec.table_name}_value"))
    return Table(spec.table_name, metadata, *columns, sqlite_autoincrement=True)


def _reference_columns(fact_table: str, dictionaries: dict[str, Table]) -> list[Column]:
    return [
        Column(
            spec.id_column,
            Integer,
            ForeignKey(dictionaries[spec.key].c.id),
            nullable=spec.key not in _REQUIRED_DOMAINS,
        )
        for spec in DOMAINS
        if fact_table in spec.fact_tables
    ]
