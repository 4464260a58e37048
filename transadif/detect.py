"""
Source encoding detection for whole log buffers.

Detection priority:
1. Explicit hint from the caller (an unsupported name is an error)
2. ``<ENCODING:n>`` field in the file's own header
3. Valid UTF-8 that carries no mis-decoding signature
4. charset-normalizer's best single-byte guess
5. Fallback to Windows-1252
"""

from __future__ import annotations

import logging
from typing import Optional

from charset_normalizer import from_bytes

from .charsets import Encoding
from .errors import UnsupportedEncoding
from .mojibake import has_mojibake_signature
from .rules import DETECTION_FALLBACK, ENCODING_FIELD
from .tokenizer import EOH, EOR, FIELD, next_token

log = logging.getLogger(__name__)

# charset-normalizer reports Python codec names
_SINGLE_BYTE_GUESSES = {
    "cp1252": Encoding.WINDOWS_1252,
    "windows_1252": Encoding.WINDOWS_1252,
    "latin_1": Encoding.ISO_8859_1,
    "iso8859_1": Encoding.ISO_8859_1,
}


def header_encoding_name(data: bytes) -> Optional[str]:
    """
    Return the value of the header's ENCODING field, if the buffer has one.

    Walks tags from the start of the buffer, stepping over field data by its
    declared byte length, and gives up at the first sentinel.
    """
    pos = 0
    while True:
        token = next_token(data, pos)
        if token is None or token.kind in (EOH, EOR):
            return None
        pos = token.end
        if token.kind != FIELD or not token.length.isdigit():
            continue
        length = int(token.length)
        if token.name.upper() == ENCODING_FIELD:
            return data[token.end:token.end + length].decode("ascii", errors="replace").strip()
        pos = token.end + length


def detect_encoding(data: bytes, hint: Optional[str] = None) -> Encoding:
    """Pick the most likely source encoding for ``data``; never fails without a bad hint."""
    if hint:
        encoding = Encoding.lookup(hint)
        log.debug("using caller hint %s", encoding.label)
        return encoding

    declared = header_encoding_name(data)
    if declared:
        try:
            encoding = Encoding.lookup(declared)
        except UnsupportedEncoding:
            log.info("ignoring unsupported header encoding %r", declared)
        else:
            log.debug("using header encoding %s", encoding.label)
            return encoding

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        text = None
    if text is not None and not has_mojibake_signature(text):
        log.debug("buffer is clean UTF-8")
        return Encoding.UTF_8

    match = from_bytes(data).best()
    if match is not None:
        guess = _SINGLE_BYTE_GUESSES.get(match.encoding.lower())
        if guess is not None:
            log.debug("charset-normalizer guessed %s", guess.label)
            return guess
        log.debug("charset-normalizer guess %s is not a supported single-byte page", match.encoding)

    return Encoding.lookup(DETECTION_FALLBACK)
