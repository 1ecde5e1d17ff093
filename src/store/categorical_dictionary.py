"""Categorical dictionaries mapping observed values to surrogate ids.

Closed vocabularies are seeded from compiled-in tables and open ones are
backfilled from observed values. Lookups are served from an in-memory
cache owned by the single writer context.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Connection

from core.errors import DictionaryError, LookupUnresolvedError
from core.logging_config import get_logger
from core.types import DictionaryEntry
from store.database import SaaqDatabase
from store.dictionary_domains import DOMAINS, DomainSpec, get_domain

_LOGGER = get_logger(__name__)
_MIN_FUZZY_LENGTH = 3
_SQLITE_INTEGER_MIN = -(2**63)
_SQLITE_INTEGER_MAX = 2**63 - 1

EntryKey = tuple[str, Optional[int]]


@dataclass
class ObservedValues:
    """Distinct categorical values seen in a set of records.

    Dependent domains keep ``(value, parent_value)`` pairs.
    """

    values: dict[str, set[str]] = field(default_factory=lambda: defaultdict(set))
    pairs: dict[str, set[tuple[str, str]]] = field(default_factory=lambda: defaultdict(set))

    def add(self, domain: str, value: str, parent_value: str | None = None) -> None:
        if not value:
            return
        if parent_value is None:
            self.values[domain].add(value)
        elif parent_value:
            self.pairs[domain].add((value, parent_value))


class CategoricalDictionary:
    """Bijective value-to-id tables for every categorical domain."""

    def __init__(self, database: SaaqDatabase) -> None:
        if database is None:
            raise DictionaryError(
                "CategoricalDictionary requires an open SaaqDatabase. "
                "Create the database before the dictionary."
            )
        self._database = database
        self._ids: dict[str, dict[EntryKey, int]] = {}
        self._entries: dict[str, dict[int, DictionaryEntry]] = {}

    def create_schema(self) -> None:
        """Ensure every dictionary table exists."""
        self._database.create_schema()

    def populate(
        self,
        observed: ObservedValues | None = None,
        connection: Connection | None = None,
    ) -> int:
        """Seed closed vocabularies and backfill observed values.

        Domains are processed in dependency order, so parents are always
        populated before the dependent domain in the same run. Values that
        already exist are left untouched.

        Args:
            observed: Values seen in data, or None to seed vocabularies only.
            connection: Writer connection with an open transaction. A new
                transaction is used when omitted.

        Returns:
            Number of entries inserted.
        """
        if connection is None:
            with self._database.engine.begin() as own_connection:
                return self.populate(observed, own_connection)
        self._ensure_loaded(connection)
        inserted = 0
        for spec in DOMAINS:
            rows = self._pending_rows(spec, observed)
            if not rows:
                continue
            table = self._database.tables.dictionaries[spec.key]
            connection.execute(sqlite_insert(table).on_conflict_do_nothing(), rows)
            self._load_domain(connection, spec)
            inserted += len(rows)
        if inserted:
            _LOGGER.info("dictionaries_populated", inserted_entries=inserted)
        return inserted

    def insert_entry(
        self,
        domain: str,
        value: str,
        parent_id: int | None = None,
        description: str | None = None,
        connection: Connection | None = None,
    ) -> int:
        """Insert one entry if missing and return its id.

        Raises:
            DictionaryError: If the value is invalid or a dependent entry
                names a parent that was never populated.
        """
        spec = get_domain(domain)
        if connection is None:
            with self._database.engine.begin() as own_connection:
                return self.insert_entry(domain, value, parent_id, description, own_connection)
        self._ensure_loaded(connection)
        if spec.parent is None and parent_id is not None:
            raise DictionaryError(f"Domain '{domain}' does not take a parent id.")
        if spec.parent is not None and parent_id not in self._entries[spec.parent]:
            raise DictionaryError(
                f"Cannot add {domain} '{value}': parent {spec.parent} id {parent_id} "
                f"does not exist. Populate {spec.parent} before {domain}."
            )
        key = _normalize_value(spec, value)
        if key is None:
            raise DictionaryError(f"Value '{value}' is not a valid {spec.value_kind} for {domain}.")
        existing = self._ids[domain].get((key, parent_id))
        if existing is not None:
            return existing
        row = _build_row(spec, key, description, parent_id)
        table = self._database.tables.dictionaries[domain]
        connection.execute(sqlite_insert(table).on_conflict_do_nothing(), [row])
        self._load_domain(connection, spec)
        return self._ids[domain][(key, parent_id)]

    def lookup(self, domain: str, value: str, parent_id: int | None = None) -> int | None:
        """Resolve a value to its id.

        Exact match first, then the whitespace-trimmed value, then a unique
        substring match for text domains.

        Args:
            domain: Domain key.
            value: Observed value.
            parent_id: Parent entry id for dependent domains.

        Returns:
            Entry id, or None when no strategy matches.
        """
        spec = get_domain(domain)
        self._ensure_loaded()
        ids = self._ids[domain]
        if spec.value_kind == "integer":
            key = _normalize_value(spec, value)
            return None if key is None else ids.get((key, parent_id))
        entry_id = ids.get((value, parent_id))
        if entry_id is not None:
            return entry_id
        trimmed = value.strip()
        entry_id = ids.get((trimmed, parent_id))
        if entry_id is not None:
            return entry_id
        return self._fuzzy_lookup(domain, trimmed, parent_id)

    def require(self, domain: str, value: str, parent_id: int | None = None) -> int:
        """Resolve a value or raise.

        Raises:
            LookupUnresolvedError: If no lookup strategy matches.
        """
        entry_id = self.lookup(domain, value, parent_id)
        if entry_id is None:
            raise LookupUnresolvedError(
                f"Unresolved {domain} value '{value}'"
                + (f" under parent id {parent_id}" if parent_id is not None else "")
                + "."
            )
        return entry_id

    def value_for(self, domain: str, entry_id: int) -> str | None:
        """Reverse lookup of an id to its value."""
        get_domain(domain)
        self._ensure_loaded()
        entry = self._entries[domain].get(entry_id)
        return None if entry is None else entry.value

    def entries(self, domain: str) -> list[DictionaryEntry]:
        """Return all entries of a domain ordered by id."""
        get_domain(domain)
        self._ensure_loaded()
        return [self._entries[domain][entry_id] for entry_id in sorted(self._entries[domain])]

    def refresh_cache(self, connection: Connection | None = None) -> None:
        """Reload every domain from the store."""
        if connection is None:
            with self._database.engine.connect() as own_connection:
                self.refresh_cache(own_connection)
            return
        for spec in DOMAINS:
            self._load_domain(connection, spec)

    def _ensure_loaded(self, connection: Connection | None = None) -> None:
        if len(self._ids) != len(DOMAINS):
            self.refresh_cache(connection)

    def _load_domain(self, connection: Connection, spec: DomainSpec) -> None:
        table = self._database.tables.dictionaries[spec.key]
        has_parent = spec.parent is not None
        columns = [table.c.id, table.c.value, table.c.description]
        if has_parent:
            columns.append(table.c.parent_id)
        ids: dict[EntryKey, int] = {}
        entries: dict[int, DictionaryEntry] = {}
        for row in connection.execute(select(*columns)):
            parent_id = row.parent_id if has_parent else None
            value = str(row.value)
            ids[(value, parent_id)] = row.id
            entries[row.id] = DictionaryEntry(
                entry_id=row.id, value=value, parent_id=parent_id, description=row.description
            )
        self._ids[spec.key] = ids
        self._entries[spec.key] = entries

    def _pending_rows(self, spec: DomainSpec, observed: ObservedValues | None) -> list[dict]:
        known = self._ids[spec.key]
        rows: dict[EntryKey, dict] = {}
        for code, description in spec.vocabulary:
            if (code, None) not in known:
                rows[(code, None)] = _build_row(spec, code, description, None)
        if observed is None:
            return list(rows.values())
        if spec.parent is None:
            keys = {_normalize_value(spec, value) for value in observed.values.get(spec.key, ())}
            for key in sorted((key for key in keys if key is not None), key=_sort_key(spec)):
                if (key, None) not in known and (key, None) not in rows:
                    description = key if spec.is_closed else None
                    rows[(key, None)] = _build_row(spec, key, description, None)
            return list(rows.values())
        parent_ids = self._ids[spec.parent]
        for value, parent_value in sorted(observed.pairs.get(spec.key, ())):
            parent_id = parent_ids.get((parent_value, None))
            if parent_id is None:
                _LOGGER.warning(
                    "dictionary_parent_missing",
                    domain=spec.key,
                    value=value,
                    parent_value=parent_value,
                )
                continue
            if (value, parent_id) not in known and (value, parent_id) not in rows:
                rows[(value, parent_id)] = _build_row(spec, value, None, parent_id)
        return list(rows.values())

    def _fuzzy_lookup(self, domain: str, value: str, parent_id: int | None) -> int | None:
        if len(value) < _MIN_FUZZY_LENGTH:
            return None
        matches = [
            entry_id
            for (candidate, candidate_parent), entry_id in self._ids[domain].items()
            if candidate_parent == parent_id and value in candidate
        ]
        if len(matches) != 1:
            if matches:
                _LOGGER.debug(
                    "dictionary_lookup_ambiguous", domain=domain, value=value, matches=len(matches)
                )
            return None
        return matches[0]


def _normalize_value(spec: DomainSpec, value: str) -> str | None:
    text = value.strip()
    if spec.value_kind == "text":
        return text or None
    try:
        number = int(text)
    except ValueError:
        return None
    if not _SQLITE_INTEGER_MIN <= number <= _SQLITE_INTEGER_MAX:
        return None
    return str(number)


def _build_row(spec: DomainSpec, key: str, description: str | None, parent_id: int | None) -> dict:
    row: dict[str, object] = {
        "value": int(key) if spec.value_kind == "integer" else key,
        "description": description,
    }
    if spec.parent is not None:
        row["parent_id"] = parent_id
    return row


def _sort_key(spec: DomainSpec):
    if spec.value_kind == "integer":
        return int
    return str
