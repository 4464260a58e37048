"""
Decide where a field's data ends when its declared length may count bytes or characters.

The tag carries no unit, and writers disagree: some count UTF-8 bytes, some
count characters. Picking the wrong unit either cuts a character in half or
swallows the start of the next token. The resolver prefers the byte reading
and switches to the character reading only when that leaves strictly less
non-whitespace noise between the data and the next token; ties go to bytes.
"""
from __future__ import annotations

import logging
from typing import NamedTuple, Optional

from .charsets import Encoding
from .errors import MalformedField
from .tokenizer import next_token

log = logging.getLogger(__name__)

BYTES = "bytes"
CHARS = "chars"

_WHITESPACE = b" \t\r\n\x0b\x0c"


class Resolution(NamedTuple):
    end: int
    unit: str


def trailing_noise(buf: bytes, pos: int) -> int:
    """Count non-whitespace bytes between ``pos`` and the next token (or end of buffer)."""
    token = next_token(buf, pos)
    stop = token.start if token is not None else len(buf)
    return len(buf[pos:stop].translate(None, _WHITESPACE))


def _char_end(buf: bytes, start: int, count: int, encoding: Encoding) -> Optional[int]:
    """Byte offset just past ``count`` characters from ``start``; None if the buffer runs out."""
    if encoding.is_single_byte:
        end = start + count
        return end if end <= len(buf) else None
    # no character is wider than four bytes, so the window always holds the first `count`
    text, _ = encoding.decode(buf[start:start + count * 4])
    if len(text) < count:
        return None
    return start + len(encoding.encode(text[:count])[0])


def resolve_length(buf: bytes, start: int, declared: int, encoding: Encoding, name: str = "") -> Resolution:
    byte_end = start + declared

    if byte_end > len(buf):
        char_end = _char_end(buf, start, declared, encoding)
        if char_end is None:
            raise MalformedField(name, start, f"declared length {declared} runs past the end of the data")
        log.debug("field %s at %d: byte length overruns buffer, counting characters", name, start)
        return Resolution(char_end, CHARS)

    if encoding.is_single_byte:
        return Resolution(byte_end, BYTES)

    text, had_errors = encoding.decode(buf[start:byte_end])
    if len(text) == declared and not had_errors:
        return Resolution(byte_end, BYTES)

    char_end = _char_end(buf, start, declared, encoding)
    if char_end is None or char_end == byte_end:
        return Resolution(byte_end, BYTES)

    if trailing_noise(buf, char_end) < trailing_noise(buf, byte_end):
        log.debug("field %s at %d: length %d reinterpreted as characters", name, start, declared)
        return Resolution(char_end, CHARS)
    return Resolution(byte_end, BYTES)
