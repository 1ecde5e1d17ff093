"""Python SDK for store and import operations.

This module wires the database, dictionaries, provenance tracking,
and import coordinator behind one client object.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Sequence

from core.config import SaaqConfig
from core.types import (
    DictionaryEntry,
    ImportLogEntry,
    ImportRequest,
    ImportResult,
    ProvenanceRecord,
)
from ingest.pipeline import ImportCoordinator, ReplaceYearDecider, always_replace
from ingest.progress import ProgressReporter
from ingest.worker_policy import build_worker_policy
from store.categorical_dictionary import CategoricalDictionary
from store.database import SaaqDatabase
from store.import_log import read_import_log
from store.provenance import ProvenanceTracker
from store.regularization import RegularizationSource, YamlRegularizationSource


class SaaqClient:
    """Primary SDK entry point for imports and dictionary inspection."""

    def __init__(
        self,
        config: SaaqConfig | None = None,
        regularization_source: RegularizationSource | None = None,
    ) -> None:
        """Create SDK client and ensure the schema exists.

        Args:
            config: Optional runtime configuration.
            regularization_source: Optional mapping source, defaults to the
                configured YAML file when one is set.
        """
        self._config = config or SaaqConfig.from_env()
        self._database = SaaqDatabase.from_config(self._config)
        self._database.create_schema()
        self._dictionary = CategoricalDictionary(self._database)
        if regularization_source is None and self._config.regularization_path is not None:
            regularization_source = YamlRegularizationSource(self._config.regularization_path)
        self._provenance = ProvenanceTracker(
            self._database, self._config.year_partition, regularization_source
        )

    @property
    def config(self) -> SaaqConfig:
        return self._config

    @property
    def database(self) -> SaaqDatabase:
        return self._database

    @property
    def dictionary(self) -> CategoricalDictionary:
        return self._dictionary

    def initialize(self) -> int:
        """Seed closed vocabularies and return the number of new entries."""
        return self._dictionary.populate()

    def import_file(
        self,
        request: ImportRequest,
        reporter: ProgressReporter | None = None,
        replace_decider: ReplaceYearDecider = always_replace,
    ) -> ImportResult:
        """Import one extract.

        Args:
            request: Import request.
            reporter: Optional progress receiver.
            replace_decider: Duplicate-year decision callback.

        Returns:
            Final import result.

        Raises:
            SaaqIngestError: If the file cannot be imported or is cancelled.
            SaaqStoreError: If the store cannot be updated.
        """
        return self._coordinator(reporter, replace_decider).import_file(request)

    def import_files(
        self,
        requests: Sequence[ImportRequest],
        reporter: ProgressReporter | None = None,
        replace_decider: ReplaceYearDecider = always_replace,
    ) -> list[ImportResult]:
        """Import several extracts with a single index rebuild."""
        return self._coordinator(reporter, replace_decider).import_files(requests)

    def entries(self, domain: str) -> list[DictionaryEntry]:
        return self._dictionary.entries(domain)

    def provenance(self, domain: str) -> dict[int, ProvenanceRecord]:
        """Classify every entry of a domain by provenance."""
        return self._provenance.compute(domain)

    def import_log(self) -> list[ImportLogEntry]:
        return read_import_log(self._database)

    def with_database_path(self, database_path: str) -> "SaaqClient":
        """Clone the client against a different database file."""
        resolved_path = Path(database_path).expanduser().resolve()
        return SaaqClient(replace(self._config, database_path=resolved_path))

    def close(self) -> None:
        self._database.dispose()

    def _coordinator(
        self, reporter: ProgressReporter | None, replace_decider: ReplaceYearDecider
    ) -> ImportCoordinator:
        return ImportCoordinator(
            self._database,
            self._dictionary,
            build_worker_policy(self._config),
            reporter=reporter,
            replace_decider=replace_decider,
        )
