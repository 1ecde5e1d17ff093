"""SAAQ ingest exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class SaaqError(Exception):
    """Base exception for all SAAQ ingest failures."""


class SaaqConfigError(SaaqError):
    """Raised for invalid runtime configuration."""


class SaaqIngestError(SaaqError):
    """Raised for source reading and parsing failures."""


class EncodingUnresolvableError(SaaqIngestError):
    """Raised when no candidate encoding yields trustworthy text."""


class InvalidSchemaError(SaaqIngestError):
    """Raised when the header column count does not match the record layout."""


class EmptyFileError(SaaqIngestError):
    """Raised when a source file has no data lines."""


class ImportCancelledError(SaaqIngestError):
    """Raised when the caller declines replacing an already imported year."""


class SaaqStoreError(SaaqError):
    """Raised for relational store failures."""


class BatchTransactionError(SaaqStoreError):
    """Raised when a batch transaction cannot begin or commit."""


class DictionaryError(SaaqStoreError):
    """Raised for invalid categorical dictionary operations."""


class LookupUnresolvedError(SaaqStoreError):
    """Raised when a categorical value cannot be encoded to an id."""
