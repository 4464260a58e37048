"""
The closed set of byte encodings a log may be read from or written to.

Every encoding exposes the same two operations:

- ``decode(data) -> (text, had_errors)``: never raises. Bytes that are not
  valid in the encoding survive as surrogate escapes (U+DC80..U+DCFF), so
  ``encode(decode(data)[0])[0] == data`` for any input.
- ``encode(text) -> (data, had_errors)``: never raises. Surrogate escapes are
  written back as the raw bytes they stand for; characters the encoding
  cannot represent become ``?`` and set ``had_errors``.

Windows-1252 uses the WHATWG table: the five bytes Python's ``cp1252`` leaves
undefined (0x81, 0x8D, 0x8F, 0x90, 0x9D) map to the matching C1 code points,
so the page decodes every byte.
"""
from __future__ import annotations

import codecs
from enum import Enum

from .errors import UnsupportedEncoding

__all__ = ["Encoding", "CP1252_DECODING_TABLE"]


def _build_cp1252_table() -> str:
    chars = []
    for value in range(256):
        try:
            chars.append(bytes([value]).decode("cp1252"))
        except UnicodeDecodeError:
            chars.append(chr(value))
    return "".join(chars)


CP1252_DECODING_TABLE = _build_cp1252_table()
_CP1252_ENCODING_MAP = codecs.charmap_build(CP1252_DECODING_TABLE)

_ALIASES = {
    "utf-8": "UTF-8",
    "utf8": "UTF-8",
    "iso-8859-1": "ISO-8859-1",
    "iso8859-1": "ISO-8859-1",
    "latin1": "ISO-8859-1",
    "latin-1": "ISO-8859-1",
    "windows-1252": "Windows-1252",
    "win1252": "Windows-1252",
    "cp1252": "Windows-1252",
    "cp-1252": "Windows-1252",
    "ascii": "ASCII",
    "us-ascii": "ASCII",
}


class Encoding(Enum):
    UTF_8 = "UTF-8"
    ISO_8859_1 = "ISO-8859-1"
    WINDOWS_1252 = "Windows-1252"
    ASCII = "ASCII"

    @classmethod
    def lookup(cls, name: str) -> "Encoding":
        """Resolve a user- or file-supplied encoding name (case-insensitive)."""
        key = name.strip().lower().replace("_", "-")
        label = _ALIASES.get(key)
        if label is None:
            raise UnsupportedEncoding(name)
        return cls(label)

    @property
    def label(self) -> str:
        return self.value

    @property
    def counts_characters(self) -> bool:
        """Whether field lengths written in this encoding count characters."""
        return self is Encoding.UTF_8

    @property
    def is_single_byte(self) -> bool:
        return self is not Encoding.UTF_8

    def decode(self, data: bytes) -> tuple[str, bool]:
        try:
            return self._decode(data, "strict"), False
        except UnicodeDecodeError:
            return self._decode(data, "surrogateescape"), True

    def encode(self, text: str) -> tuple[bytes, bool]:
        try:
            return self._encode(text, "surrogateescape"), False
        except UnicodeEncodeError:
            pass
        out = bytearray()
        for ch in text:
            try:
                out += self._encode(ch, "surrogateescape")
            except UnicodeEncodeError:
                out += b"?"
        return bytes(out), True

    def decode_mixed(self, data: bytes, fallback: "Encoding") -> str:
        """Decode ``data``, reading each invalid byte run through ``fallback`` instead."""
        parts = []
        while data:
            try:
                parts.append(self._decode(data, "strict"))
                break
            except UnicodeDecodeError as exc:
                parts.append(self._decode(data[:exc.start], "strict"))
                parts.append(fallback.decode(data[exc.start:exc.end])[0])
                data = data[exc.end:]
        return "".join(parts)

    def can_encode(self, ch: str) -> bool:
        """Whether ``ch`` is representable; surrogate escapes always are."""
        try:
            self._encode(ch, "surrogateescape")
        except UnicodeEncodeError:
            return False
        return True

    def _decode(self, data: bytes, errors: str) -> str:
        if self is Encoding.WINDOWS_1252:
            return codecs.charmap_decode(data, errors, CP1252_DECODING_TABLE)[0]
        return data.decode(_PYTHON_CODECS[self], errors)

    def _encode(self, text: str, errors: str) -> bytes:
        if self is Encoding.WINDOWS_1252:
            return codecs.charmap_encode(text, errors, _CP1252_ENCODING_MAP)[0]
        return text.encode(_PYTHON_CODECS[self], errors)


_PYTHON_CODECS = {
    Encoding.UTF_8: "utf-8",
    Encoding.ISO_8859_1: "latin-1",
    Encoding.ASCII: "ascii",
}
