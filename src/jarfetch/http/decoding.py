"""Response content decoding."""

from __future__ import annotations

import codecs
import logging
from typing import Optional, Union

from charset_normalizer import from_bytes as detect_encoding

from ..errors import ResponseDecodeError

logger = logging.getLogger(__name__)

# Encoding name that asks for detection instead of a fixed codec
AUTO_ENCODING = "auto"


def resolve_encoding(request_encoding: Optional[str], default_encoding: Optional[str]) -> Optional[str]:
    """Per-request encoding wins over the facade-wide default."""
    return request_encoding or default_encoding


def _detect(content: bytes) -> str:
    result = detect_encoding(content)
    best_match = result.best() if result else None
    if best_match is not None:
        logger.debug(f"Detected encoding: {best_match.encoding}")
        return str(best_match)
    return content.decode("utf-8", errors="replace")


def decode_content(
    content: bytes,
    *,
    encoding: Optional[str] = None,
    return_buffer: bool = False,
) -> Union[str, bytes]:
    """
    Convert a response body to text, or hand the raw bytes back.

    Args:
        content: Raw response bytes
        encoding: Codec the body is declared in; "auto" detects it with
            charset-normalizer; None means UTF-8
        return_buffer: Return ``content`` unmodified

    Returns:
        Decoded text, or the raw bytes when return_buffer is set

    Raises:
        ResponseDecodeError: If ``encoding`` is not a known codec
    """
    if return_buffer:
        return content

    if not encoding:
        return content.decode("utf-8", errors="replace")

    if encoding.lower() == AUTO_ENCODING:
        return _detect(content)

    try:
        # bytes.decode() also raises LookupError for non-text codecs like "rot13"
        return content.decode(codecs.lookup(encoding).name, errors="replace")
    except LookupError as err:
        raise ResponseDecodeError(encoding) from err
