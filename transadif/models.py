from __future__ import annotations

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from .rules import DEFAULT_REPLACEMENT


def printable(text: Optional[str]) -> Optional[str]:
    """Render surrogate-escaped stray bytes as ``\\udcXX`` so the value is valid UTF-8."""
    if text is None:
        return None
    return text.encode("utf-8", "backslashreplace").decode("utf-8")


class EncodePolicy(BaseModel):
    # "" escapes incompatible characters as &0xNN; instead of replacing them
    replacement: str = Field(default=DEFAULT_REPLACEMENT, max_length=1)
    delete: bool = False
    transliterate: bool = False
    strict: bool = False


class ReportItem(BaseModel):
    record: Optional[int] = None
    field: Optional[str] = None
    issue: str
    value: Optional[str] = None
    action: str


class ConvertedAdif(BaseModel):
    sha256: str
    encoding: str = Field(default="UTF-8")
    content_b64: str


class ReportSummary(BaseModel):
    records: int = 0
    header_fields: int = 0
    warnings: int = 0
    errors: int = 0
    deterministic: bool = True


class ConversionReport(BaseModel):
    summary: ReportSummary
    detection: Dict[str, Any] = Field(default_factory=dict)
    warnings: List[ReportItem] = Field(default_factory=list)
    errors: List[ReportItem] = Field(default_factory=list)


class ConvertResponse(BaseModel):
    converted_adif: ConvertedAdif
    report: ConversionReport

class HealthResponse(BaseModel):
    ok: bool = True
