"""Dictionary entry provenance classification.

Entries are compared across curated and uncurated years so display layers
can badge values that only appear in unreviewed data or that have been
regularized to a canonical value.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass

from sqlalchemy import func, select

from core.logging_config import get_logger
from core.types import ProvenanceRecord, YearPartition
from store.database import SaaqDatabase
from store.dictionary_domains import DOMAINS, DomainSpec, get_domain
from store.regularization import RegularizationMapping, RegularizationSource

_LOGGER = get_logger(__name__)


@dataclass
class _UsageCounts:
    curated: int = 0
    uncurated: int = 0
    total: int = 0


class ProvenanceTracker:
    """Read-side aggregation of dictionary entry provenance."""

    def __init__(
        self,
        database: SaaqDatabase,
        partition: YearPartition,
        regularization_source: RegularizationSource | None = None,
    ) -> None:
        self._database = database
        self._partition = partition
        self._regularization_source = regularization_source

    def load(self) -> dict[str, dict[int, ProvenanceRecord]]:
        """Compute provenance for every fact-referenced domain except years.

        Returns:
            Mapping of domain key to records keyed by entry id.
        """
        mapping = self._load_mapping()
        provenance = {
            spec.key: self._compute(spec, mapping)
            for spec in DOMAINS
            if spec.fact_tables and spec.key != "year"
        }
        _LOGGER.info(
            "provenance_loaded",
            domain_count=len(provenance),
            uncurated_only=_count_status(provenance, "uncuratedOnly"),
            regularized=_count_status(provenance, "regularized"),
        )
        return provenance

    def compute(self, domain: str) -> dict[int, ProvenanceRecord]:
        """Compute provenance for one domain."""
        return self._compute(get_domain(domain), self._load_mapping())

    def uncurated_only(self, domain: str) -> dict[int, int]:
        """Return uncurated-only entry ids with their affected row counts."""
        return {
            entry_id: record.record_count
            for entry_id, record in self.compute(domain).items()
            if record.status == "uncuratedOnly"
        }

    def _compute(
        self, spec: DomainSpec, mapping: RegularizationMapping
    ) -> dict[int, ProvenanceRecord]:
        usage = self._usage_counts(spec)
        canonical_by_value = mapping.get(spec.key, {})
        table = self._database.tables.dictionaries[spec.key]
        with self._database.engine.connect() as connection:
            entries = connection.execute(select(table.c.id, table.c.value).order_by(table.c.id)).all()
        records: dict[int, ProvenanceRecord] = {}
        for entry in entries:
            value = str(entry.value)
            counts = usage.get(entry.id, _UsageCounts())
            canonical_value = canonical_by_value.get(value)
            if canonical_value is not None and canonical_value != value:
                records[entry.id] = ProvenanceRecord(
                    domain=spec.key,
                    entry_id=entry.id,
                    value=value,
                    status="regularized",
                    canonical_value=canonical_value,
                    record_count=counts.total,
                )
            elif counts.uncurated > 0 and counts.curated == 0:
                records[entry.id] = ProvenanceRecord(
                    domain=spec.key,
                    entry_id=entry.id,
                    value=value,
                    status="uncuratedOnly",
                    canonical_value=None,
                    record_count=counts.uncurated,
                )
            else:
                records[entry.id] = ProvenanceRecord(
                    domain=spec.key,
                    entry_id=entry.id,
                    value=value,
                    status="canonical",
                    canonical_value=None,
                    record_count=counts.total,
                )
        return records

    def _usage_counts(self, spec: DomainSpec) -> dict[int, _UsageCounts]:
        usage: dict[int, _UsageCounts] = defaultdict(_UsageCounts)
        with self._database.engine.connect() as connection:
            for table_name in spec.fact_tables:
                table = self._database.tables.metadata.tables[table_name]
                column = table.c[spec.id_column]
                query = (
                    select(column, table.c.year, func.count())
                    .where(column.is_not(None))
                    .group_by(column, table.c.year)
                )
                for entry_id, year, row_count in connection.execute(query):
                    counts = usage[entry_id]
                    counts.total += row_count
                    if year in self._partition.curated_years:
                        counts.curated += row_count
                    elif year in self._partition.uncurated_years:
                        counts.uncurated += row_count
        return usage

    def _load_mapping(self) -> RegularizationMapping:
        if self._regularization_source is None:
            return {}
        try:
            return self._regularization_source.load()
        except Exception as error:
            _LOGGER.warning(
                "regularization_mapping_unavailable",
                error_type=type(error).__name__,
                error=str(error),
            )
            return {}


def _count_status(provenance: dict[str, dict[int, ProvenanceRecord]], status: str) -> int:
    return sum(
        1 for records in provenance.values() for record in records.values() if record.status == status
    )
