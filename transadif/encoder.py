"""
Serialize an ``AdifDocument`` into a target encoding.

Rules:
- Field lengths are rewritten in the unit a reader of the target expects:
  characters for UTF-8, encoded bytes for single-byte pages. The new value is
  stored back on the field.
- Characters the target cannot represent are transliterated (when asked),
  then deleted, replaced or escaped as ``&0xNN;`` according to the policy.
  Strict mode refuses them instead.
- Preamble, trailing text and sentinels are copied through; stray source
  bytes kept as surrogate escapes are written back unchanged.
- Outside strict mode an ENCODING header field naming the target is set when
  the header already carries fields, and field text is NFC-normalized.
- In strict mode, writing back to the source encoding reuses each unchanged
  field's original tag, so the output is the input byte for byte.
"""
from __future__ import annotations

import logging
import unicodedata as _ud
from typing import List, Optional, Tuple, Union

from .charsets import Encoding
from .document import AdifDocument, AdifField
from .errors import StrictModeViolation
from .models import EncodePolicy, ReportItem, printable
from .rules import ENCODING_FIELD
from .transliterate import transliterate

log = logging.getLogger(__name__)


def _escape(ch: str) -> str:
    code = ord(ch)
    return f"&0x{code:02X};" if code <= 0xFF else f"&0x{code:04X};"


class _Encoder:
    def __init__(self, doc: AdifDocument, target: Encoding, policy: EncodePolicy):
        self.doc = doc
        self.target = target
        self.policy = policy
        self.warnings: List[ReportItem] = []
        self.record_no: Optional[int] = None

    def _warn(self, field: Optional[str], issue: str, value: Optional[str], action: str) -> None:
        self.warnings.append(
            ReportItem(record=self.record_no, field=field, issue=issue, value=printable(value), action=action)
        )

    def _substitute(self, text: str, where: str) -> Tuple[bytes, str]:
        """Encode ``text``, applying the incompatible-character policy; returns bytes and the text written."""
        data, had_errors = self.target.encode(text)
        if not had_errors:
            return data, text

        policy = self.policy
        out = []
        for ch in text:
            if self.target.can_encode(ch):
                out.append(ch)
                continue
            if policy.strict:
                raise StrictModeViolation(where, ch)
            if policy.delete:
                self._warn(where, "character_deleted", ch, "deleted")
            elif policy.replacement == "":
                out.append(_escape(ch))
                self._warn(where, "character_escaped", ch, f"escaped_as_{_escape(ch)}")
            else:
                out.append(policy.replacement)
                self._warn(where, "character_replaced", ch, f"replaced_with_{policy.replacement}")
        written = "".join(out)
        return self.target.encode(written)[0], written

    def _field(self, field: AdifField) -> bytes:
        text = field.text
        if not self.policy.strict:
            text = _ud.normalize("NFC", text)
            if self.policy.transliterate:
                ascii_text = transliterate(text)
                if ascii_text != text:
                    self._warn(field.name, "character_transliterated", text, f"written_as_{ascii_text}")
                text = ascii_text

        data, written = self._substitute(text, field.name)

        if self.policy.strict and field.tag and self.doc.encoding is self.target and data == field.raw_bytes:
            tag = field.tag
        else:
            field.declared_length = len(written) if self.target.counts_characters else len(data)
            tag = field.render_tag()
        return tag.encode("ascii") + data + self._substitute(field.trailing, field.name)[0]

    def _sentinel(self, sentinel: Optional[str]) -> bytes:
        return sentinel.encode("ascii") if sentinel else b""

    def _stamp_header(self) -> None:
        header = self.doc.header
        if self.policy.strict or not header.fields:
            return
        current = self.doc.get_header_field(ENCODING_FIELD)
        if current is None or current.text != self.target.label:
            self.doc.set_header_field(ENCODING_FIELD, self.target.label)
            self._warn(ENCODING_FIELD, "header_field_set", self.target.label, "set")

    def encode(self) -> bytes:
        self._stamp_header()
        header = self.doc.header
        out = bytearray(self._substitute(header.preamble, "preamble")[0])
        for field in header.fields:
            out += self._field(field)
        out += self._sentinel(header.sentinel)
        out += self._substitute(header.trailing, "header")[0]

        for number, record in enumerate(self.doc.records, start=1):
            self.record_no = number
            for field in record.fields:
                out += self._field(field)
            out += self._sentinel(record.sentinel)
            out += self._substitute(record.trailing, "record")[0]
        return bytes(out)


def encode_document(
    doc: AdifDocument,
    target: Union[Encoding, str],
    policy: Optional[EncodePolicy] = None,
) -> Tuple[bytes, List[ReportItem]]:
    """
    Serialize ``doc`` into ``target``.

    Returns the output bytes and the non-fatal warnings. Raises
    UnsupportedEncoding for an unknown target name and, in strict mode,
    StrictModeViolation for the first character the target cannot hold.
    """
    if not isinstance(target, Encoding):
        target = Encoding.lookup(target)
    encoder = _Encoder(doc, target, policy or EncodePolicy())
    data = encoder.encode()
    log.debug("encoded %d records to %s (%d bytes)", len(doc.records), target.label, len(data))
    return data, encoder.warnings
