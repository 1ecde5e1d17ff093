"""Public SDK surface for SAAQ extract ingest.

This module provides a stable import path for library users.
It re-exports the primary client and typed request models.
"""

from __future__ import annotations

from core.config import SaaqConfig
from core.types import (
    DictionaryEntry,
    ImportLogEntry,
    ImportRequest,
    ImportResult,
    ProvenanceRecord,
    RecordType,
)
from ingest.progress import LoggingProgressReporter, ProgressReporter, StageChange
from store.regularization import StaticRegularizationSource, YamlRegularizationSource
from store.saaq_sdk import SaaqClient

__all__ = [
    "DictionaryEntry",
    "ImportLogEntry",
    "ImportRequest",
    "ImportResult",
    "LoggingProgressReporter",
    "ProgressReporter",
    "ProvenanceRecord",
    "RecordType",
    "SaaqClient",
    "SaaqConfig",
    "StageChange",
    "StaticRegularizationSource",
    "YamlRegularizationSource",
]
