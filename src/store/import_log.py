"""Append-only import log persistence."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import insert, select

from core.constants import (
    LICENSE_STATUS_PARTIAL,
    LICENSE_STATUS_SUCCESS,
    VEHICLE_STATUS_PARTIAL,
    VEHICLE_STATUS_SUCCESS,
)
from core.types import ImportLogEntry, RecordType
from store.database import SaaqDatabase


def import_status(record_type: RecordType, error_count: int) -> str:
    """Return the log status for a finished import."""
    if record_type == "vehicle":
        return VEHICLE_STATUS_SUCCESS if error_count == 0 else VEHICLE_STATUS_PARTIAL
    return LICENSE_STATUS_SUCCESS if error_count == 0 else LICENSE_STATUS_PARTIAL


def append_import_log(
    database: SaaqDatabase,
    file_name: str,
    year: int,
    record_type: RecordType,
    record_count: int,
    error_count: int,
) -> ImportLogEntry:
    """Append one import log row.

    Args:
        database: Store owner.
        file_name: Imported file name.
        year: Imported year.
        record_type: Imported layout.
        record_count: Records written.
        error_count: Records rejected, selects the status.

    Returns:
        Persisted log entry.
    """
    entry = ImportLogEntry(
        file_name=file_name,
        year=year,
        record_type=record_type,
        record_count=record_count,
        import_date=datetime.now(timezone.utc).replace(tzinfo=None),
        status=import_status(record_type, error_count),
    )
    with database.engine.begin() as connection:
        connection.execute(
            insert(database.tables.import_log).values(
                file_name=entry.file_name,
                year=entry.year,
                record_type=entry.record_type,
                record_count=entry.record_count,
                import_date=entry.import_date,
                status=entry.status,
            )
        )
    return entry


def read_import_log(database: SaaqDatabase) -> list[ImportLogEntry]:
    """Return log rows in insertion order."""
    table = database.tables.import_log
    with database.engine.connect() as connection:
        rows = connection.execute(select(table).order_by(table.c.id)).all()
    return [
        ImportLogEntry(
            file_name=row.file_name,
            year=row.year,
            record_type=row.record_type,
            record_count=row.record_count,
            import_date=row.import_date,
            status=row.status,
        )
        for row in rows
    ]
