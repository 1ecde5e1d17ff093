"""Categorical dictionary domain definitions.

Domains are listed in dependency order: a dependent domain always follows
its parent. Closed vocabularies are compiled-in ``(code, description)``
tables seeded before any observed value is backfilled.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from core.errors import DictionaryError

ValueKind = Literal["text", "integer"]

CLASSIFICATION_VOCABULARY = (
    ("PAU", "Personal automobile/light truck"),
    ("PMC", "Personal motorcycle"),
    ("PCY", "Personal moped"),
    ("PHM", "Personal motorhome"),
    ("CAU", "Commercial automobile/light truck"),
    ("CMC", "Commercial motorcycle"),
    ("CCY", "Commercial moped"),
    ("CHM", "Commercial motorhome"),
    ("TTA", "Taxi"),
    ("TAB", "Bus"),
    ("TAS", "School bus"),
    ("BCA", "Truck/road tractor"),
    ("CVO", "Tool vehicle"),
    ("COT", "Other commercial"),
    ("RAU", "Restricted automobile/light truck"),
    ("RMC", "Restricted motorcycle"),
    ("RCY", "Restricted moped"),
    ("RHM", "Restricted motorhome"),
    ("RAB", "Restricted bus"),
    ("RCA", "Restricted truck"),
    ("RMN", "Restricted snowmobile"),
    ("ROT", "Other restricted"),
    ("HAU", "Off-road automobile/light truck"),
    ("HCY", "Off-road moped"),
    ("HAB", "Off-road bus"),
    ("HCA", "Off-road truck/road tractor"),
    ("HMN", "Off-road snowmobile"),
    ("HVT", "Off-road all-terrain vehicle"),
    ("HVO", "Off-road tool vehicle"),
    ("HOT", "Other off-road"),
    ("UNK", "Unknown"),
)

FUEL_TYPE_VOCABULARY = (
    ("E", "Gasoline"),
    ("D", "Diesel"),
    ("L", "Electric"),
    ("H", "Hybrid"),
    ("W", "Plug-in Hybrid"),
    ("C", "Hydrogen"),
    ("P", "Propane"),
    ("N", "Natural Gas"),
    ("M", "Methanol"),
    ("T", "Ethanol"),
    ("A", "Other"),
    ("S", "Non-powered"),
    ("U", "Unknown"),
)

AGE_GROUP_VOCABULARY = tuple(
    (bucket, bucket)
    for bucket in ("16-19", "20-24", "25-34", "35-44", "45-54", "55-64", "65-74", "75+")
)

GENDER_VOCABULARY = (("M", "Male"), ("F", "Female"))

LICENSE_TYPE_VOCABULARY = (
    ("APPRENTI", "Learner's Permit"),
    ("PROBATOIRE", "Probationary License"),
    ("RÉGULIER", "Regular License"),
)


@dataclass(frozen=True)
class DomainSpec:
    """One categorical domain.

    Attributes:
        key: Domain name, also the ``<key>_id`` fact column prefix.
        table_name: Dictionary table name.
        value_kind: Storage type of the natural value.
        parent: Parent domain key for dependent domains.
        vocabulary: Hardcoded canonical ``(code, description)`` pairs.
        fact_tables: Fact tables holding a ``<key>_id`` reference.
    """

    key: str
    table_name: str
    value_kind: ValueKind = "text"
    parent: str | None = None
    vocabulary: tuple[tuple[str, str], ...] = ()
    fact_tables: tuple[str, ...] = ()

    @property
    def id_column(self) -> str:
        return f"{self.key}_id"

    @property
    def is_closed(self) -> bool:
        return bool(self.vocabulary)


DOMAINS: tuple[DomainSpec, ...] = (
    DomainSpec("year", "year_enum", "integer", fact_tables=("vehicles", "licenses")),
    DomainSpec(
        "classification",
        "classification_enum",
        vocabulary=CLASSIFICATION_VOCABULARY,
        fact_tables=("vehicles",),
    ),
    DomainSpec("make", "make_enum", fact_tables=("vehicles",)),
    DomainSpec("model", "model_enum", parent="make", fact_tables=("vehicles",)),
    DomainSpec("model_year", "model_year_enum", "integer", fact_tables=("vehicles",)),
    DomainSpec("cylinder_count", "cylinder_count_enum", "integer", fact_tables=("vehicles",)),
    DomainSpec("axle_count", "axle_count_enum", "integer", fact_tables=("vehicles",)),
    DomainSpec("color", "color_enum", fact_tables=("vehicles",)),
    DomainSpec(
        "fuel_type", "fuel_type_enum", vocabulary=FUEL_TYPE_VOCABULARY, fact_tables=("vehicles",)
    ),
    DomainSpec("admin_region", "admin_region_enum", fact_tables=("vehicles", "licenses")),
    DomainSpec("mrc", "mrc_enum", fact_tables=("vehicles", "licenses")),
    DomainSpec("municipality", "municipality_enum", fact_tables=("vehicles",)),
    DomainSpec(
        "age_group", "age_group_enum", vocabulary=AGE_GROUP_VOCABULARY, fact_tables=("licenses",)
    ),
    DomainSpec("gender", "gender_enum", vocabulary=GENDER_VOCABULARY, fact_tables=("licenses",)),
    DomainSpec(
        "license_type",
        "license_type_enum",
        vocabulary=LICENSE_TYPE_VOCABULARY,
        fact_tables=("licenses",),
    ),
)

_DOMAINS_BY_KEY = {spec.key: spec for spec in DOMAINS}


def get_domain(key: str) -> DomainSpec:
    """Return a domain definition by key.

    Raises:
        DictionaryError: If the domain does not exist.
    """
    spec = _DOMAINS_BY_KEY.get(key)
    if spec is None:
        raise DictionaryError(
            f"Unknown dictionary domain '{key}'. "
            f"Use one of: {', '.join(_DOMAINS_BY_KEY)}."
        )
    return spec
