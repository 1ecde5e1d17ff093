"""Source extract readers for ingestion.

This module loads a CSV extract from disk, recovers its encoding,
and validates the header row before any data line is parsed.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from core.constants import UTF8_BYTE_ORDER_MARK
from core.errors import EmptyFileError, SaaqIngestError
from core.logging_config import get_logger
from core.types import RecordType
from ingest.encoding_resolver import resolve_encoding
from ingest.record_parser import parse_line, validate_headers

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class SourceDocument:
    """Decoded extract with validated headers.

    Attributes:
        source_path: Extract location.
        encoding: Encoding used to decode the file.
        headers: Header names from the first line.
        data_lines: Non-blank data lines in file order.
    """

    source_path: Path
    encoding: str
    headers: list[str]
    data_lines: list[str]


def read_source_document(source_path: Path, record_type: RecordType, year: int) -> SourceDocument:
    """Load and validate one extract.

    Args:
        source_path: CSV extract path.
        record_type: Expected record layout.
        year: Data year, selects the vehicle column layout.

    Returns:
        Decoded document ready for parsing.

    Raises:
        SaaqIngestError: If the file is missing or unreadable.
        EncodingUnresolvableError: If no encoding candidate is trustworthy.
        EmptyFileError: If the file has no data lines.
        InvalidSchemaError: If the header does not match the layout.
    """
    if not source_path.is_file():
        raise SaaqIngestError(
            f"Failed to read source at {source_path}: file does not exist. "
            "Provide an existing CSV extract."
        )
    try:
        payload = source_path.read_bytes()
    except OSError as error:
        raise SaaqIngestError(
            f"Failed to read source at {source_path}: {error}. "
            "Check file permissions and retry."
        ) from error
    encoding, text = resolve_encoding(payload)
    return build_source_document(source_path, encoding, text, record_type, year)


def build_source_document(
    source_path: Path,
    encoding: str,
    text: str,
    record_type: RecordType,
    year: int,
) -> SourceDocument:
    """Split decoded text into a header and data lines and validate it."""
    if text.startswith(UTF8_BYTE_ORDER_MARK):
        text = text[len(UTF8_BYTE_ORDER_MARK) :]
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) < 2:
        raise EmptyFileError(
            f"Source at {source_path} has no data lines. "
            "Provide an extract with a header row and at least one record."
        )
    headers = parse_line(lines[0])
    validate_headers(headers, record_type, year)
    data_lines = lines[1:]
    _LOGGER.info(
        "source_loaded",
        source_path=str(source_path),
        encoding=encoding,
        column_count=len(headers),
        line_count=len(data_lines),
    )
    return SourceDocument(
        source_path=source_path,
        encoding=encoding,
        headers=headers,
        data_lines=data_lines,
    )
