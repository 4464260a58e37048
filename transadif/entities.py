"""Expansion of character references found in field data."""
from __future__ import annotations

import re
from html.entities import html5

# &amp;  &#65;  &#x41;  &0x41;
_REFERENCE = re.compile(
    r"&(?:#(?P<dec>[0-9]+)|#[xX](?P<hex>[0-9A-Fa-f]+)|0x(?P<fmt>[0-9A-Fa-f]+)|(?P<name>[A-Za-z][A-Za-z0-9]*));"
)


def _expand(m: re.Match) -> str:
    name = m.group("name")
    if name is not None:
        return html5.get(name + ";", m.group(0))
    if m.group("dec") is not None:
        code = int(m.group("dec"))
    else:
        code = int(m.group("hex") or m.group("fmt"), 16)
    if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
        return m.group(0)
    return chr(code)


def decode_entities(text: str) -> str:
    """Replace named, decimal, hex and ``&0xNN;`` references; unknown ones are left alone."""
    if "&" not in text:
        return text
    return _REFERENCE.sub(_expand, text)
