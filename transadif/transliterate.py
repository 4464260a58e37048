"""ASCII approximations for Latin text: diacritics stripped, ligatures and special letters spelled out."""
from __future__ import annotations

import unicodedata as _ud

# Letters that do not decompose into ASCII + combining marks.
_SPECIAL = {
    "ß": "ss", "ẞ": "SS",
    "æ": "ae", "Æ": "AE",
    "œ": "oe", "Œ": "OE",
    "ø": "o", "Ø": "O",
    "ł": "l", "Ł": "L",
    "đ": "d", "Đ": "D",
    "ð": "d", "Ð": "D",
    "þ": "th", "Þ": "Th",
    "ı": "i",
    "ħ": "h", "Ħ": "H",
    "ŋ": "ng", "Ŋ": "NG",
    "‘": "'", "’": "'", "‚": "'",
    "“": '"', "”": '"', "„": '"',
    "–": "-", "—": "-",
    "…": "...",
    "«": '"', "»": '"',
}


def transliterate_char(ch: str) -> str:
    """Return an ASCII spelling of ``ch``, or ``ch`` itself when there is none."""
    if ord(ch) < 0x80:
        return ch
    special = _SPECIAL.get(ch)
    if special is not None:
        return special
    stripped = "".join(c for c in _ud.normalize("NFKD", ch) if not _ud.combining(c))
    if stripped and stripped.isascii():
        return stripped
    return ch


def transliterate(text: str) -> str:
    return "".join(transliterate_char(ch) for ch in text)
