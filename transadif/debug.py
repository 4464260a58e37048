"""Human-readable dump of selected records, for diagnosing how a log was read."""
from __future__ import annotations

from typing import Iterable, List

from .document import AdifDocument
from .models import printable


def hex_preview(data: bytes) -> str:
    if len(data) <= 32:
        return data.hex(" ")
    return f"{data[:16].hex(' ')} ... ({len(data) - 16} more bytes)"


def select_records(doc: AdifDocument, specs: Iterable[str]) -> tuple[List[int], List[str]]:
    """Resolve "1", "3", "all" style selectors to 1-based record numbers plus complaints."""
    numbers: List[int] = []
    problems: List[str] = []
    total = len(doc.records)
    for spec in specs:
        spec = spec.strip()
        if not spec:
            continue
        if spec.lower() == "all":
            return list(range(1, total + 1)), problems
        if not spec.isdigit():
            problems.append(f"Warning: Invalid record number '{spec}'")
            continue
        number = int(spec)
        if number == 0 or number > total:
            problems.append(f"Warning: record {number} does not exist (valid range: 1-{total})")
            continue
        numbers.append(number)
    return numbers, problems


def dump_records(doc: AdifDocument, specs: Iterable[str]) -> str:
    numbers, problems = select_records(doc, specs)
    lines = ["=== DEBUG MODE ===", f"Source encoding: {doc.encoding.label}",
             f"Total records in file: {len(doc.records)}", f"Debugging records: {numbers}"]
    lines.extend(problems)
    lines.append("")

    for number in numbers:
        record = doc.records[number - 1]
        lines.append(f"=== Record {number} ===")
        lines.append(f"Fields: {len(record.fields)}")
        for index, field in enumerate(record.fields, start=1):
            lines.append(f"  Field {index}: {field.name.upper()}")
            lines.append(f"    Declared length: {field.declared_length} ({field.unit})")
            if field.raw_bytes:
                lines.append(f"    Original bytes: {len(field.raw_bytes)} bytes")
                lines.append(f"    Original hex: {hex_preview(field.raw_bytes)}")
            lines.append(f"    Interpreted data: {printable(field.text)!r}")
            lines.append(f"    Character count: {len(field.text)}")
            lines.append(f"    Byte count (UTF-8): {len(field.text.encode('utf-8', 'surrogateescape'))}")
            if field.trailing:
                lines.append(f"    Trailing text: {printable(field.trailing)!r}")
            lines.append("")
        if record.trailing:
            lines.append(f"  Record trailing text: {printable(record.trailing)!r}")
        lines.append("")
    return "\n".join(lines)
