from __future__ import annotations

from typing import Optional


class TransAdifError(Exception):
    """Base class for fatal conversion errors."""


class MalformedField(TransAdifError):
    def __init__(self, name: str, offset: int, reason: str):
        self.name = name
        self.offset = offset
        self.reason = reason
        super().__init__(f"Malformed field {name!r} at byte {offset}: {reason}")


class UnsupportedEncoding(TransAdifError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unsupported encoding: {name!r}")


class StrictModeViolation(TransAdifError):
    def __init__(self, field: str, char: Optional[str] = None, reason: Optional[str] = None):
        self.field = field
        self.char = char
        if reason is None:
            reason = f"character {char!r} (U+{ord(char):04X}) cannot be represented" if char else "invalid data"
        self.reason = reason
        super().__init__(f"Strict mode violation in field {field!r}: {reason}")
