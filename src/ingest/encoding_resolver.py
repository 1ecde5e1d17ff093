"""Text encoding recovery for source extracts.

Yearly extracts arrive in varying encodings. A candidate is accepted only
when it decodes cleanly and yields recognizable accented French text.
"""

from __future__ import annotations

from typing import Sequence

from core.constants import DIAGNOSTIC_CHARACTERS, ENCODING_CANDIDATES
from core.errors import EncodingUnresolvableError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


def resolve_encoding(
    payload: bytes,
    candidates: Sequence[str] = ENCODING_CANDIDATES,
    diagnostic_characters: Sequence[str] = DIAGNOSTIC_CHARACTERS,
) -> tuple[str, str]:
    """Decode a raw byte buffer with the first trustworthy candidate.

    Args:
        payload: Raw file bytes.
        candidates: Encodings tried in order.
        diagnostic_characters: Accented characters expected in valid text.

    Returns:
        Tuple of (encoding name, decoded text).

    Raises:
        EncodingUnresolvableError: If no candidate decodes to text
            containing a diagnostic character.
    """
    for encoding in candidates:
        try:
            text = payload.decode(encoding)
        except UnicodeDecodeError:
            _LOGGER.debug("encoding_rejected", encoding=encoding, reason="decode_failed")
            continue
        if any(character in text for character in diagnostic_characters):
            _LOGGER.info("encoding_resolved", encoding=encoding, byte_count=len(payload))
            return encoding, text
        _LOGGER.debug("encoding_rejected", encoding=encoding, reason="no_accented_text")
    raise EncodingUnresolvableError(
        f"Unable to decode source with any of {list(candidates)}: no candidate produced "
        f"text containing {list(diagnostic_characters)}. "
        "Check that the file is an unmodified SAAQ extract."
    )
