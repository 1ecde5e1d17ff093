"""Core constants used across SAAQ ingest modules.

This module centralizes file-format, batching, and vocabulary constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".saaq")
DATABASE_FILE_NAME = "saaq.sqlite"
DEFAULT_MAX_WORKERS = 8
DEFAULT_CURATED_YEARS = "2011-2022"
DEFAULT_UNCURATED_YEARS = "2023-2024"

IMPORT_BATCH_SIZE = 50_000
MIN_CHUNK_SIZE = 10_000
MAX_CHUNK_SIZE = 50_000
PROGRESS_TICK_SECONDS = 0.1
MAX_LOGGED_LINE_WARNINGS = 5
MAX_LOGGED_INSERT_ERRORS = 5

ENCODING_CANDIDATES = ("utf-8", "latin-1", "cp1252")
DIAGNOSTIC_CHARACTERS = ("é", "è", "à")
UTF8_BYTE_ORDER_MARK = "\ufeff"

FUEL_TYPE_FIRST_YEAR = 2017
VEHICLE_COLUMN_COUNT_WITH_FUEL = 16
VEHICLE_COLUMN_COUNT_WITHOUT_FUEL = 15
LICENSE_COLUMN_COUNT = 20
TRUE_FLAG_TOKEN = "OUI"

MOJIBAKE_SIGNATURES = ("Ã", "Â")
MOJIBAKE_REPLACEMENTS = (
    ("MontrÃ©al", "Montréal"),
    ("QuÃ©bec", "Québec"),
    ("LÃ©vis", "Lévis"),
    ("GaspÃ©", "Gaspé"),
    ("ChaudiÃ¨re", "Chaudière"),
    ("MontÃ©rÃ©gie", "Montérégie"),
    ("TÃ©miscamingue", "Témiscamingue"),
    ("Ã®les", "Îles"),
    ("RÃ‰GULIER", "RÉGULIER"),
    ("Ã‰", "É"),
    ("Ã¨", "è"),
    ("Ã©", "é"),
    ("Ã ", "à"),
    ("Ã´", "ô"),
)

DEFAULT_CLASSIFICATION = "UNK"
DEFAULT_ADMIN_REGION = "Unknown Region"
DEFAULT_MRC = "Unknown MRC"
DEFAULT_GEO_CODE = "00000"
UNKNOWN_SEQUENCE_SUFFIX = "_UNKNOWN"

VEHICLE_STATUS_SUCCESS = "success"
VEHICLE_STATUS_PARTIAL = "partial"
LICENSE_STATUS_SUCCESS = "success"
LICENSE_STATUS_PARTIAL = "completed_with_errors"
