"""
End-to-end conversion: detect, parse, correct, stamp the header, encode.

Responsibilities:
- pick the source encoding (hint, header field, UTF-8 check, detector)
- parse with length disambiguation and, unless strict, text correction
- identify this program in a header that already carries fields
- re-encode to the requested target and report every non-fatal change
"""

from __future__ import annotations

import base64
import hashlib
from typing import Any, Callable, Dict, List, Optional, Tuple

from .charsets import Encoding
from .detect import header_encoding_name
from .document import AdifDocument
from .encoder import encode_document
from .models import EncodePolicy, ReportItem
from .parser import parse_document
from .rules import DEFAULT_OUTPUT_ENCODING, PROGRAM_ID, PROGRAMID_FIELD


def _sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def convert_adif(
    raw: bytes,
    *,
    input_encoding: Optional[str] = None,
    output_encoding: str = DEFAULT_OUTPUT_ENCODING,
    policy: Optional[EncodePolicy] = None,
    on_parsed: Optional[Callable[[AdifDocument], None]] = None,
) -> Tuple[bytes, AdifDocument, Dict[str, Any], List[ReportItem]]:
    """
    Convert a raw log to ``output_encoding``.

    Returns (output bytes, parsed document, detection details, warnings).
    Fatal problems raise a TransAdifError subclass; nothing is returned for
    a log that cannot be converted.

    ``on_parsed`` sees the document as read, before any header stamping or
    length rewriting.
    """
    policy = policy or EncodePolicy()
    # resolve the target up front so a bad name fails before any parsing work
    target = Encoding.lookup(output_encoding)

    doc, warnings = parse_document(raw, hint=input_encoding, strict=policy.strict)
    if on_parsed is not None:
        on_parsed(doc)

    if not policy.strict and doc.header.fields:
        current = doc.get_header_field(PROGRAMID_FIELD)
        if current is None or current.text != PROGRAM_ID:
            doc.set_header_field(PROGRAMID_FIELD, PROGRAM_ID)

    output, encode_warnings = encode_document(doc, target, policy)
    warnings.extend(encode_warnings)

    detection = {
        "detected": doc.encoding.label,
        "hint": input_encoding,
        "header_declared": header_encoding_name(raw),
        "output": target.label,
        "strict": policy.strict,
    }
    return output, doc, detection, warnings


def convert_adif_bytes(
    raw: bytes,
    *,
    input_encoding: Optional[str] = None,
    output_encoding: str = DEFAULT_OUTPUT_ENCODING,
    policy: Optional[EncodePolicy] = None,
) -> Dict[str, Any]:
    """
    Convert and wrap the result in the API's response envelope.
    """
    output, doc, detection, warnings = convert_adif(
        raw,
        input_encoding=input_encoding,
        output_encoding=output_encoding,
        policy=policy,
    )

    b64 = base64.b64encode(output).decode("ascii")
    return {
        "converted_adif": {
            "sha256": _sha256_hex(output),
            "encoding": detection["output"],
            "content_b64": b64,
        },
        "report": {
            "summary": {
                "records": len(doc.records),
                "header_fields": len(doc.header.fields),
                "warnings": len(warnings),
                "errors": 0,
                "deterministic": True,
            },
            "detection": detection,
            "warnings": [w.model_dump() for w in warnings],
            "errors": [],
        },
    }
