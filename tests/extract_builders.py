"""Helpers that write small CSV extracts for tests."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Sequence

VEHICLE_HEADERS_2017 = (
    "AN",
    "NOSEQ_VEH",
    "CLAS",
    "TYP_VEH_CATEG_USA",
    "MARQ_VEH",
    "MODEL_VEH",
    "ANNEE_MOD",
    "MASSE_NETTE",
    "NB_CYL",
    "CYL_VEH",
    "NB_ESIEU_MAX",
    "COUL_ORIG",
    "TYP_CARBU",
    "REG_ADM",
    "MRC",
    "CG_FIXE",
)
VEHICLE_HEADERS_2016 = tuple(header for header in VEHICLE_HEADERS_2017 if header != "TYP_CARBU")

LICENSE_HEADERS = (
    "AN",
    "NOSEQ_TITUL",
    "AGE_1ER_JUIN",
    "SEXE",
    "MRC",
    "REG_ADM",
    "TYPE_PERMIS",
    "IND_PERMISAPPRENTI_123",
    "IND_PERMISAPPRENTI_5",
    "IND_PERMISAPPRENTI_6A6R",
    "IND_PERMISCONDUIRE_1234",
    "IND_PERMISCONDUIRE_5",
    "IND_PERMISCONDUIRE_6ABCE",
    "IND_PERMISCONDUIRE_6D",
    "IND_PERMISCONDUIRE_8",
    "IND_PROBATOIRE",
    "EXPERIENCE_1234",
    "EXPERIENCE_5",
    "EXPERIENCE_6ABCE",
    "EXPERIENCE_GLOBALE",
)


def vehicle_record(year: int, sequence: str, **overrides: str) -> dict[str, str]:
    """Build a 2017-layout vehicle record with sensible defaults."""
    record = {
        "AN": str(year),
        "NOSEQ_VEH": sequence,
        "CLAS": "PAU",
        "TYP_VEH_CATEG_USA": "AU",
        "MARQ_VEH": "TOYOT",
        "MODEL_VEH": "COROL",
        "ANNEE_MOD": "2015",
        "MASSE_NETTE": "1250",
        "NB_CYL": "4",
        "CYL_VEH": "1800",
        "NB_ESIEU_MAX": "2",
        "COUL_ORIG": "BLANC",
        "TYP_CARBU": "E",
        "REG_ADM": "Montréal (06)",
        "MRC": "Montréal (66)",
        "CG_FIXE": "66023",
    }
    record.update(overrides)
    return record


def license_record(year: int, sequence: str, **overrides: str) -> dict[str, str]:
    """Build a license record with sensible defaults."""
    record = {header: "NON" for header in LICENSE_HEADERS if header.startswith("IND_")}
    record.update(
        {
            "AN": str(year),
            "NOSEQ_TITUL": sequence,
            "AGE_1ER_JUIN": "25-34",
            "SEXE": "F",
            "MRC": "Montréal (66)",
            "REG_ADM": "Montréal (06)",
            "TYPE_PERMIS": "RÉGULIER",
            "EXPERIENCE_1234": "10 ans ou plus",
            "EXPERIENCE_5": "Absente",
            "EXPERIENCE_6ABCE": "Absente",
            "EXPERIENCE_GLOBALE": "10 ans ou plus",
        }
    )
    record.update(overrides)
    return record


def write_extract(
    path: Path,
    headers: Sequence[str],
    records: Sequence[Mapping[str, str]],
    encoding: str = "utf-8",
) -> Path:
    """Write records as a CSV extract and return its path."""
    lines = [",".join(headers)]
    lines.extend(",".join(record[header] for header in headers) for record in records)
    path.write_bytes(("\n".join(lines) + "\n").encode(encoding))
    return path
