"""
Field-start and sentinel lookahead over a raw byte buffer.

A field tag is ``<name:length>`` or ``<name:length:type>``; sentinels are the
case-insensitive ``<eoh>`` and ``<eor>``. Anything else starting with ``<`` is
ordinary text. Tags are pure ASCII, so matching runs on bytes before any
decoding decision has been made.
"""
from __future__ import annotations

import re
from typing import NamedTuple, Optional

FIELD = "field"
EOH = "eoh"
EOR = "eor"

# A sign is accepted here only so the parser can reject it as malformed
# instead of silently treating the tag as text.
_TAG = re.compile(
    rb"<(?:(?P<sentinel>eoh|eor)"
    rb"|(?P<name>[A-Za-z][A-Za-z0-9_]*):(?P<length>[-+]?[0-9]+)(?::(?P<type>[A-Za-z][A-Za-z0-9_]*))?)>",
    re.IGNORECASE,
)


class Token(NamedTuple):
    kind: str
    start: int
    end: int
    name: Optional[str] = None
    length: Optional[str] = None
    type_tag: Optional[str] = None


def match_token(buf: bytes, pos: int) -> Optional[Token]:
    """Return the token starting exactly at ``pos``, or None."""
    m = _TAG.match(buf, pos)
    if m is None:
        return None
    sentinel = m.group("sentinel")
    if sentinel is not None:
        return Token(sentinel.decode("ascii").lower(), m.start(), m.end())
    type_tag = m.group("type")
    return Token(
        FIELD,
        m.start(),
        m.end(),
        m.group("name").decode("ascii"),
        m.group("length").decode("ascii"),
        type_tag.decode("ascii") if type_tag is not None else None,
    )


def next_token(buf: bytes, pos: int) -> Optional[Token]:
    """Return the first token at or after ``pos``, or None."""
    while True:
        pos = buf.find(b"<", pos)
        if pos < 0:
            return None
        token = match_token(buf, pos)
        if token is not None:
            return token
        pos += 1


_EOH = re.compile(rb"<eoh>", re.IGNORECASE)


def find_eoh(buf: bytes, pos: int = 0) -> int:
    """Offset of the first ``<eoh>`` at or after ``pos``, or -1."""
    m = _EOH.search(buf, pos)
    return m.start() if m else -1
