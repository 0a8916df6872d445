"""
Java XML properties format used as the canonical license content.

The signed bytes are exactly what store_properties returns, so the output
must be stable for a given mapping: entries are written sorted by key.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from xml.etree import ElementTree
from xml.sax.saxutils import escape

from lijense.common.config import Config
from lijense.common.exceptions import FormatError

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="no"?>'
DOCTYPE = '<!DOCTYPE properties SYSTEM "http://java.sun.com/dtd/properties.dtd">'

# Characters outside the XML 1.0 Char production cannot be stored at all
_INVALID_XML_CHARS = re.compile(
    "[^\u0009\u000a\u000d\u0020-\uD7FF\uE000-\uFFFD\U00010000-\U0010ffff]"
)

# Parsers normalize raw whitespace, so it is written as character references
_ATTRIBUTE_ENTITIES = {'"': "&quot;", "\t": "&#9;", "\n": "&#10;", "\r": "&#13;"}
_TEXT_ENTITIES = {"\r": "&#13;"}


def check_storable(text: str) -> None:
    """Raise FormatError if the text contains characters XML cannot carry."""
    match = _INVALID_XML_CHARS.search(text)
    if match:
        msg = f"Character {match.group()!r} cannot be stored in a license"
        raise FormatError(msg)


def store_properties(entries: Mapping[str, str], comment: str | None = None) -> bytes:
    """Serialize the entries into UTF-8 encoded XML properties."""
    lines = [XML_DECLARATION, DOCTYPE, "<properties>"]
    if comment is not None:
        check_storable(comment)
        lines.append(f"<comment>{escape(comment, _TEXT_ENTITIES)}</comment>")
    for key in sorted(entries):
        value = entries[key]
        check_storable(key)
        check_storable(value)
        lines.append(
            f'<entry key="{escape(key, _ATTRIBUTE_ENTITIES)}">'
            f"{escape(value, _TEXT_ENTITIES)}</entry>"
        )
    lines.append("</properties>")
    return ("\n".join(lines) + "\n").encode(Config.LICENSE_ENCODING)


def load_properties(data: bytes) -> dict[str, str]:
    """Parse XML properties back into a flat string mapping."""
    try:
        root = ElementTree.fromstring(data)
    except ElementTree.ParseError as err:
        msg = "The license content is not well-formed XML"
        raise FormatError(msg) from err

    if root.tag != "properties":
        msg = f"Unexpected root element <{root.tag}>"
        raise FormatError(msg)

    entries: dict[str, str] = {}
    for element in root.iter("entry"):
        key = element.get("key")
        if key is None:
            msg = "Found a license entry without a key"
            raise FormatError(msg)
        entries[key] = element.text or ""
    return entries
