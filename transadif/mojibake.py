"""
Detection and reversal of UTF-8 text that was decoded one byte at a time.

When UTF-8 bytes are read through a single-byte page every multi-byte
sequence turns into two to four characters in the 0x80..0xFF byte range
("ñ" -> "Ã±"). Saving that text as UTF-8 and reading it back the same way
repeats the damage ("ñ" -> "ÃƒÂ±"). ``correct`` undoes one layer per pass and
stops at a fixed point or after ``MAX_CORRECTION_PASSES``.

Characters are mapped back to bytes through Latin-1 and, for the 27
characters Windows-1252 places in 0x80..0x9F ("€", "ƒ", "™", ...), through
that table, so layers produced by either page are reversible.

Each pass tries, in order:

1) the whole string, reinterpreted as UTF-8 bytes;
2) each space-separated word on its own;
3) every lead/continuation run found in the text.

Candidates from 1) and 2) are adopted only when they read as meaningful text.
Runs from 3) are spliced in when they decode to a printable character.
A two-byte sequence counts only when it decodes to a letter of a script that
such damage actually produces, so "CAFÉ’S" (0xC9 0x92) is left alone instead
of turning into an IPA letter.
"""
from __future__ import annotations

import logging
import unicodedata as _ud
from typing import Optional

from .charsets import CP1252_DECODING_TABLE
from .rules import MAX_CORRECTION_PASSES, MEANINGFUL_RATIO, OVERCORRECTION_RATIO

__all__ = ["correct", "has_mojibake_signature", "is_meaningful"]

log = logging.getLogger(__name__)

_CP1252_BYTES = {ch: value for value, ch in enumerate(CP1252_DECODING_TABLE) if ord(ch) > 0xFF}

_PUNCTUATION = frozenset(".,!?:;-_()[]{}'\"@#$%&*+=/\\|~`^<>")

_LEGITIMATE_RANGES = (
    (0x1100, 0x11FF),  # Hangul Jamo
    (0x3130, 0x318F),  # Hangul Compatibility Jamo
    (0xAC00, 0xD7AF),  # Hangul Syllables
    (0x4E00, 0x9FFF),  # CJK Unified Ideographs
    (0x3040, 0x309F),  # Hiragana
    (0x30A0, 0x30FF),  # Katakana
    (0x2600, 0x27BF),  # Miscellaneous Symbols, Dingbats
    (0x1F300, 0x1FAFF),  # Emoji
)

_OVERCORRECTION_RANGES = (
    (0x0400, 0x04FF),  # Cyrillic
)

# What a two-byte UTF-8 sequence may decode to. Leads 0xC8..0xCD and
# 0xD4..0xDF land in IPA, modifier letters, combining marks and rarer
# scripts, which a capital accented letter followed by punctuation would
# otherwise produce.
_TWO_BYTE_TARGETS = (
    (0x00A0, 0x017F),  # Latin-1 letters and symbols, Latin Extended-A
    (0x0218, 0x021B),  # Romanian comma-below letters
    (0x0386, 0x03CE),  # Greek
    (0x0400, 0x04FF),  # Cyrillic
    (0x05D0, 0x05EA),  # Hebrew letters
    (0x0620, 0x064A),  # Arabic letters
)

# (lowest lead byte, highest lead byte, continuation bytes required)
_SEQUENCES = (
    (0xC0, 0xDF, 1),
    (0xE0, 0xEF, 2),
    (0xF0, 0xF7, 3),
)


def _in_ranges(code: int, ranges) -> bool:
    return any(lo <= code <= hi for lo, hi in ranges)


def is_meaningful(text: str) -> bool:
    """Return True when ``text`` looks like real writing rather than noise."""
    if not text:
        return False
    meaningful = 0
    unusual = 0
    for ch in text:
        code = ord(ch)
        if ch.isalpha() or ch.isdigit() or ch.isspace() or ch in _PUNCTUATION:
            meaningful += 1
        elif _in_ranges(code, _LEGITIMATE_RANGES):
            meaningful += 1
        if _in_ranges(code, _OVERCORRECTION_RANGES):
            unusual += 1
    total = len(text)
    return meaningful / total >= MEANINGFUL_RATIO and unusual / total < OVERCORRECTION_RATIO


def _plausible(ch: str) -> bool:
    code = ord(ch)
    return code < 0x80 or code > 0x7FF or _in_ranges(code, _TWO_BYTE_TARGETS)


def _latin1_byte(ch: str) -> Optional[int]:
    code = ord(ch)
    return code if code <= 0xFF else None


def _byte_of(ch: str) -> Optional[int]:
    code = ord(ch)
    if code <= 0xFF:
        return code
    return _CP1252_BYTES.get(ch)


def _as_bytes(text: str) -> Optional[bytes]:
    out = bytearray()
    for ch in text:
        value = _byte_of(ch)
        if value is None:
            return None
        out.append(value)
    return bytes(out)


def _reinterpret(text: str) -> Optional[str]:
    """Decode ``text``'s byte values as UTF-8; None unless that is an improvement."""
    raw = _as_bytes(text)
    if raw is None:
        return None
    try:
        decoded = raw.decode("utf-8")
    except UnicodeDecodeError:
        return None
    if decoded == text or not is_meaningful(decoded) or not all(_plausible(ch) for ch in decoded):
        return None
    return decoded


def _continuations_needed(lead: Optional[int]) -> int:
    if lead is None:
        return 0
    for lo, hi, width in _SEQUENCES:
        if lo <= lead <= hi:
            return width
    return 0


def _fix_sequences(text: str, byte_of=_byte_of) -> str:
    out = []
    i = 0
    n = len(text)
    while i < n:
        lead = byte_of(text[i])
        width = _continuations_needed(lead)
        if width and i + width < n:
            tail = [byte_of(ch) for ch in text[i + 1:i + 1 + width]]
            if all(value is not None and 0x80 <= value <= 0xBF for value in tail):
                try:
                    decoded = bytes([lead, *tail]).decode("utf-8")
                except UnicodeDecodeError:
                    decoded = None
                # C1 controls and lone surrogates are never what the writer meant
                if decoded is not None and _ud.category(decoded)[0] != "C" and _plausible(decoded):
                    out.append(decoded)
                    i += width + 1
                    continue
        out.append(text[i])
        i += 1
    return "".join(out)


def _correct_once(text: str) -> str:
    whole = _reinterpret(text)
    if whole is not None:
        return whole

    words = text.split(" ")
    if len(words) > 1:
        fixed = [(_reinterpret(word) if word else None) or word for word in words]
        if fixed != words:
            return " ".join(fixed)

    return _fix_sequences(text)


def correct(text: str, max_passes: int = MAX_CORRECTION_PASSES) -> str:
    """Undo layered UTF-8 mis-decoding; returns ``text`` unchanged when nothing improves."""
    current = text
    for _ in range(max_passes):
        fixed = _correct_once(current)
        if fixed == current:
            break
        current = fixed
    else:
        log.debug("mojibake correction stopped after %d passes: %r", max_passes, text)
    return current


def has_mojibake_signature(text: str) -> bool:
    """
    True when ``text`` contains at least one run that decodes as mis-read UTF-8.

    Only code points up to 0xFF count here: valid UTF-8 is full of curly
    quotes and dashes, and mapping those back through Windows-1252 would flag
    clean files.
    """
    return _fix_sequences(text, _latin1_byte) != text
