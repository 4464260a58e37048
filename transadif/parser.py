"""
Tokenize a raw log buffer into an ``AdifDocument``.

The whole buffer is detected once, then walked front to back:

    preamble -> header fields -> <eoh> -> record fields -> <eor> -> ...

Every byte lands in exactly one place: the preamble, a field tag, field data,
trailing text, or a sentinel. Field data is located by ``resolve_length`` on
the raw bytes first and decoded afterwards, so corrections made to one
field's text can never move the offsets of the fields after it.

Outside strict mode each field's text is recovered (invalid bytes read as
Windows-1252), its character references expanded and mojibake reversed;
every such change is reported as a warning. Strict mode keeps the decoded
text as is and refuses invalid byte sequences.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .charsets import Encoding
from .detect import detect_encoding, header_encoding_name
from .document import AdifDocument, AdifField, AdifHeader, AdifRecord
from .entities import decode_entities
from .errors import MalformedField, StrictModeViolation, UnsupportedEncoding
from .lengths import CHARS, resolve_length
from .models import ReportItem, printable
from .mojibake import correct
from .tokenizer import EOH, EOR, FIELD, Token, find_eoh, next_token

log = logging.getLogger(__name__)

_HEADER_TOKENS = (FIELD, EOH)
_RECORD_TOKENS = (FIELD, EOR)
_BOM = b"\xef\xbb\xbf"


class _Parser:
    def __init__(self, data: bytes, encoding: Encoding, strict: bool):
        self.buf = data
        self.encoding = encoding
        self.strict = strict
        self.warnings: List[ReportItem] = []
        # 1-based record number for warnings; None while in the header
        self.record_no: Optional[int] = None

    def _text(self, start: int, end: int) -> str:
        return self.encoding.decode(self.buf[start:end])[0]

    def _next(self, pos: int, kinds) -> Optional[Token]:
        # tokens of other kinds are left in place as ordinary text
        while True:
            token = next_token(self.buf, pos)
            if token is None or token.kind in kinds:
                return token
            pos = token.end

    def _stop(self, token: Optional[Token]) -> int:
        return token.start if token is not None else len(self.buf)

    def _warn(self, field: Optional[str], issue: str, value: Optional[str], action: str) -> None:
        self.warnings.append(
            ReportItem(record=self.record_no, field=field, issue=issue, value=printable(value), action=action)
        )

    def _has_header(self, first: Token) -> bool:
        if first.kind != FIELD:
            return first.kind == EOH
        lead = self.buf[len(_BOM):] if self.buf.startswith(_BOM) else self.buf
        if lead.lstrip().startswith(b"<"):
            return False
        return find_eoh(self.buf, first.start) >= 0

    def parse(self) -> AdifDocument:
        doc = AdifDocument(encoding=self.encoding)
        first = next_token(self.buf, 0)
        if first is None:
            doc.header.preamble = self._text(0, len(self.buf))
            return doc

        doc.header.preamble = self._text(0, first.start)
        if self._has_header(first):
            pos = self._read_header(doc.header, first)
        else:
            pos = first.start
        self._read_records(doc, pos)
        return doc

    def _read_header(self, header: AdifHeader, token: Optional[Token]) -> int:
        while token is not None and token.kind == FIELD:
            field, end = self._read_field(token)
            header.fields.append(field)
            token = self._next(end, _HEADER_TOKENS)
            field.trailing = self._text(end, self._stop(token))

        if token is None:
            return len(self.buf)
        header.sentinel = self._text(token.start, token.end)
        following = self._next(token.end, _RECORD_TOKENS)
        stop = self._stop(following)
        header.trailing = self._text(token.end, stop)
        return stop

    def _read_records(self, doc: AdifDocument, pos: int) -> None:
        record: Optional[AdifRecord] = None
        token = self._next(pos, _RECORD_TOKENS)
        while token is not None:
            if record is None:
                record = AdifRecord()
                self.record_no = len(doc.records) + 1
            if token.kind == FIELD:
                field, end = self._read_field(token)
                record.fields.append(field)
                token = self._next(end, _RECORD_TOKENS)
                field.trailing = self._text(end, self._stop(token))
                continue
            record.sentinel = self._text(token.start, token.end)
            end = token.end
            token = self._next(end, _RECORD_TOKENS)
            record.trailing = self._text(end, self._stop(token))
            doc.records.append(record)
            record = None
        if record is not None:
            doc.records.append(record)

    def _read_field(self, token: Token) -> Tuple[AdifField, int]:
        if not token.length.isdigit():
            raise MalformedField(token.name, token.start, f"length {token.length!r} is not a non-negative integer")
        declared = int(token.length)
        start = token.end
        resolution = resolve_length(self.buf, start, declared, self.encoding, token.name)
        raw = self.buf[start:resolution.end]
        if resolution.unit == CHARS:
            self._warn(token.name, "length_reinterpreted", str(declared), "counted_as_characters")
        field = AdifField(
            name=token.name,
            declared_length=declared,
            type_tag=token.type_tag,
            raw_bytes=raw,
            text=self._decode_field(token.name, raw),
            tag=self.buf[token.start:token.end].decode("ascii"),
            unit=resolution.unit,
        )
        return field, resolution.end

    def _decode_field(self, name: str, raw: bytes) -> str:
        text, had_errors = self.encoding.decode(raw)
        if self.strict:
            if had_errors:
                raise StrictModeViolation(name, reason=f"invalid {self.encoding.label} byte sequence")
            return text

        if had_errors:
            text = self.encoding.decode_mixed(raw, Encoding.WINDOWS_1252)
            self._warn(name, "invalid_bytes_recovered", text, "decoded_as_windows_1252")

        expanded = decode_entities(text)
        if expanded != text:
            self._warn(name, "entities_decoded", text, "expanded")

        corrected = correct(expanded)
        if corrected != expanded:
            log.debug("corrected mojibake in %s: %r -> %r", name, expanded, corrected)
            self._warn(name, "mojibake_corrected", f"{expanded} -> {corrected}", "corrected")
        return corrected


def parse_document(
    data: bytes,
    hint: Optional[str] = None,
    strict: bool = False,
) -> Tuple[AdifDocument, List[ReportItem]]:
    """
    Parse ``data`` into a document.

    Returns the document and the non-fatal warnings raised while decoding it.
    Raises MalformedField, UnsupportedEncoding (bad ``hint``) or, in strict
    mode, StrictModeViolation; no partial document is ever returned.
    """
    encoding = detect_encoding(data, hint)
    parser = _Parser(data, encoding, strict)

    if not hint:
        declared = header_encoding_name(data)
        if declared:
            try:
                Encoding.lookup(declared)
            except UnsupportedEncoding:
                parser._warn("ENCODING", "unsupported_header_encoding", declared, f"used_{encoding.label}")

    doc = parser.parse()
    log.debug("parsed %d header fields and %d records as %s", len(doc.header.fields), len(doc.records), encoding.label)
    return doc, parser.warnings
