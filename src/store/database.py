"""SQLite engine ownership and fact-table maintenance.

One ``SaaqDatabase`` owns the engine and table handles. Dictionaries,
importers, and provenance tracking receive it through their constructors.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, delete, event, exists, func, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.config import SaaqConfig
from core.errors import SaaqStoreError
from core.logging_config import get_logger
from core.types import RecordType
from store.schema import StoreTables, build_tables

_LOGGER = get_logger(__name__)


class SaaqDatabase:
    """Owner of the store engine and schema."""

    def __init__(self, database_url: str) -> None:
        self._database_url = database_url
        self._engine = create_engine(database_url)
        event.listen(self._engine, "connect", _configure_sqlite_connection)
        self._tables = build_tables()

    @classmethod
    def from_config(cls, config: SaaqConfig) -> "SaaqDatabase":
        """Open the file-backed store named by the config."""
        return cls.from_path(config.database_path)

    @classmethod
    def from_path(cls, database_path: Path) -> "SaaqDatabase":
        database_path.parent.mkdir(parents=True, exist_ok=True)
        return cls(f"sqlite:///{database_path}")

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def tables(self) -> StoreTables:
        return self._tables

    def create_schema(self) -> None:
        """Create all tables and fact indexes that do not exist yet.

        Raises:
            SaaqStoreError: If the schema cannot be created.
        """
        try:
            self._tables.metadata.create_all(self._engine)
            with self._engine.begin() as connection:
                for index in self._tables.fact_indexes:
                    index.create(connection, checkfirst=True)
        except SQLAlchemyError as error:
            raise SaaqStoreError(
                f"Failed to create schema at {self._database_url}: {error}. "
                "Check that the database file is writable."
            ) from error
        _LOGGER.info("schema_ready", database_url=self._database_url)

    def has_year_data(self, record_type: RecordType, year: int) -> bool:
        """Return whether any fact rows exist for a year."""
        table = self._tables.fact_table(record_type)
        with self._engine.connect() as connection:
            return bool(connection.execute(select(exists().where(table.c.year == year))).scalar())

    def clear_year(self, record_type: RecordType, year: int) -> int:
        """Delete a year's fact rows and its import log entries.

        Args:
            record_type: Fact table to clear.
            year: Year to remove.

        Returns:
            Number of fact rows deleted.

        Raises:
            SaaqStoreError: If the delete transaction fails.
        """
        table = self._tables.fact_table(record_type)
        import_log = self._tables.import_log
        try:
            with self._engine.begin() as connection:
                deleted = connection.execute(delete(table).where(table.c.year == year)).rowcount
                connection.execute(
                    delete(import_log).where(
                        import_log.c.year == year, import_log.c.record_type == record_type
                    )
                )
        except SQLAlchemyError as error:
            raise SaaqStoreError(
                f"Failed to clear {record_type} data for year {year}: {error}. "
                "Close other writers and retry."
            ) from error
        _LOGGER.info("year_cleared", record_type=record_type, year=year, deleted_rows=deleted)
        return deleted

    def count_rows(self, record_type: RecordType, year: int | None = None) -> int:
        """Count fact rows, optionally restricted to one year."""
        table = self._tables.fact_table(record_type)
        query = select(func.count()).select_from(table)
        if year is not None:
            query = query.where(table.c.year == year)
        with self._engine.connect() as connection:
            return int(connection.execute(query).scalar_one())

    def begin_bulk_import(self) -> None:
        """Drop secondary fact indexes before a bulk write."""
        with self._engine.begin() as connection:
            for index in self._tables.fact_indexes:
                index.drop(connection, checkfirst=True)
        _LOGGER.info("fact_indexes_dropped", index_count=len(self._tables.fact_indexes))

    def end_bulk_import(self) -> None:
        """Recreate secondary fact indexes and refresh planner statistics.

        Raises:
            SaaqStoreError: If an index cannot be created.
        """
        try:
            with self._engine.begin() as connection:
                for index in self._tables.fact_indexes:
                    index.create(connection, checkfirst=True)
                connection.execute(text("ANALYZE"))
        except SQLAlchemyError as error:
            raise SaaqStoreError(
                f"Failed to rebuild fact indexes in {self._database_url}: {error}. "
                "Run the import again or recreate the indexes manually."
            ) from error
        _LOGGER.info("fact_indexes_rebuilt", index_count=len(self._tables.fact_indexes))

    def dispose(self) -> None:
        self._engine.dispose()


def _configure_sqlite_connection(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
    finally:
        cursor.close()
