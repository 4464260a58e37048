"""
In-memory form of a parsed log: a header followed by records of tagged fields.

Text attributes hold everything the format does not define (comments,
whitespace, stray bytes) decoded with surrogate escapes, so bytes that were
not valid in the source encoding are written back unchanged.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .charsets import Encoding
from .rules import PROGRAMID_FIELD


@dataclass
class AdifField:
    name: str
    declared_length: int
    type_tag: Optional[str] = None
    raw_bytes: bytes = b""
    text: str = ""
    trailing: str = ""
    # Tag exactly as it appeared in the source; empty for fields built in memory.
    tag: str = ""
    unit: str = "bytes"

    def render_tag(self) -> str:
        if self.type_tag:
            return f"<{self.name}:{self.declared_length}:{self.type_tag}>"
        return f"<{self.name}:{self.declared_length}>"

    def is_named(self, name: str) -> bool:
        return self.name.upper() == name.upper()


@dataclass
class AdifHeader:
    preamble: str = ""
    fields: List[AdifField] = field(default_factory=list)
    # "<eoh>" as written, or None when the file has no header terminator
    sentinel: Optional[str] = None
    trailing: str = ""


@dataclass
class AdifRecord:
    fields: List[AdifField] = field(default_factory=list)
    # "<eor>" as written, or None for an unterminated final record
    sentinel: Optional[str] = None
    trailing: str = ""


@dataclass
class AdifDocument:
    header: AdifHeader = field(default_factory=AdifHeader)
    records: List[AdifRecord] = field(default_factory=list)
    encoding: Encoding = Encoding.UTF_8

    def get_header_field(self, name: str) -> Optional[AdifField]:
        for f in self.header.fields:
            if f.is_named(name):
                return f
        return None

    def set_header_field(self, name: str, value: str) -> AdifField:
        """
        Replace the value of header field ``name`` or insert it.

        An existing field keeps its position, spelling and trailing text.
        A new field goes right after PROGRAMID when present, otherwise first,
        and copies the separator used by its neighbour.
        """
        existing = self.get_header_field(name)
        if existing is not None:
            if existing.text != value:
                existing.text = value
                existing.declared_length = len(value)
                existing.tag = ""
            return existing

        fields = self.header.fields
        index = 0
        if name.upper() != PROGRAMID_FIELD:
            for i, f in enumerate(fields):
                if f.is_named(PROGRAMID_FIELD):
                    index = i + 1
                    break
        neighbour = fields[index - 1] if index else (fields[0] if fields else None)
        trailing = neighbour.trailing if neighbour is not None and neighbour.trailing else "\n"
        new = AdifField(name=name, declared_length=len(value), text=value, trailing=trailing)
        fields.insert(index, new)
        return new
