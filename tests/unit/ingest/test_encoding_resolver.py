"""Unit tests for encoding recovery."""

from __future__ import annotations

import pytest

from core.errors import EncodingUnresolvableError
from ingest.encoding_resolver import resolve_encoding


def test_resolve_encoding_prefers_utf8() -> None:
    """UTF-8 text with accents should decode as UTF-8."""
    encoding, text = resolve_encoding("Montréal,Québec".encode("utf-8"))

    assert encoding == "utf-8"
    assert text == "Montréal,Québec"


def test_resolve_encoding_falls_back_to_latin1() -> None:
    """Latin-1 bytes are invalid UTF-8 and should decode as Latin-1."""
    encoding, text = resolve_encoding("Lévis,Gaspé".encode("latin-1"))

    assert encoding == "latin-1"
    assert text == "Lévis,Gaspé"


def test_resolve_encoding_honours_candidate_order() -> None:
    """Candidates that fail to decode are skipped in order."""
    encoding, _ = resolve_encoding("Montréal".encode("cp1252"), candidates=("ascii", "cp1252"))

    assert encoding == "cp1252"


def test_resolve_encoding_raises_without_accented_text() -> None:
    """Plain ASCII content cannot be trusted and should fail."""
    with pytest.raises(EncodingUnresolvableError):
        resolve_encoding(b"A,B,C\n1,2,3\n")
