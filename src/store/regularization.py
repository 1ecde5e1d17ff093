"""Regularization mapping sources.

A mapping sends observed dictionary values to their intended canonical
value, per domain. Mappings are curated outside the ingest pipeline.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, cast

import yaml

from core.errors import DictionaryError, SaaqConfigError
from store.dictionary_domains import get_domain

RegularizationMapping = dict[str, dict[str, str]]


class RegularizationSource(Protocol):
    """Provider of a regularization mapping."""

    def load(self) -> RegularizationMapping:
        """Return the current mapping."""


class StaticRegularizationSource:
    """In-memory mapping source."""

    def __init__(self, mapping: RegularizationMapping) -> None:
        self._mapping = mapping

    def load(self) -> RegularizationMapping:
        return {domain: dict(values) for domain, values in self._mapping.items()}


class YamlRegularizationSource:
    """Mapping source reading ``{domain: {observed: canonical}}`` YAML."""

    def __init__(self, mapping_path: Path) -> None:
        self._mapping_path = mapping_path

    def load(self) -> RegularizationMapping:
        """Read and validate the YAML mapping file.

        Raises:
            SaaqConfigError: If the file is missing, unreadable, or malformed.
        """
        if not self._mapping_path.is_file():
            raise SaaqConfigError(
                f"Regularization file does not exist at {self._mapping_path}. "
                "Set SAAQ_REGULARIZATION_FILE to an existing YAML file."
            )
        try:
            payload = cast(object, yaml.safe_load(self._mapping_path.read_text(encoding="utf-8")))
        except OSError as error:
            raise SaaqConfigError(
                f"Failed to read regularization file at {self._mapping_path}: {error}. "
                "Check file permissions and retry."
            ) from error
        except yaml.YAMLError as error:
            raise SaaqConfigError(
                f"Failed to parse regularization file at {self._mapping_path}: {error}. "
                "Fix YAML syntax and retry."
            ) from error
        return parse_regularization_payload(payload, str(self._mapping_path))


def parse_regularization_payload(payload: object, source_name: str) -> RegularizationMapping:
    """Validate a decoded mapping payload.

    Raises:
        SaaqConfigError: If the payload is not a mapping of string mappings
            keyed by known domains.
    """
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise SaaqConfigError(
            f"Regularization mapping in {source_name} must be a mapping of domains."
        )
    mapping: RegularizationMapping = {}
    for domain, values in payload.items():
        try:
            get_domain(str(domain))
        except DictionaryError as error:
            raise SaaqConfigError(f"{error} Fix the domain key in {source_name}.") from error
        if not isinstance(values, dict):
            raise SaaqConfigError(
                f"Regularization entries for '{domain}' in {source_name} must map "
                "observed values to canonical values."
            )
        mapping[str(domain)] = {str(observed): str(canonical) for observed, canonical in values.items()}
    return mapping
