"""JSON bodies and headers of the query request, and the response reader."""

from __future__ import annotations

import json
import re
from typing import Optional

from .constants import DOCUMENTS_PROPERTY

__all__ = [
    "build_partition_key_header",
    "build_query_payload",
    "encode_json_string",
    "first_document_text",
]

_SHORT_ESCAPES = {
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

# Escaped as \uXXXX even though they are printable ASCII.
_HTML_SENSITIVE = frozenset("\"&<>'+`")

_WHITESPACE_RE = re.compile(r"[ \t\n\r]*")
_decoder = json.JSONDecoder()


def encode_json_string(value: str) -> str:
    """Escape ``value`` for a JSON string the way .NET's default encoder does.

    Backslash and the short control escapes use their two-character forms.
    Quotes, other controls, HTML-sensitive characters and everything
    outside printable ASCII become upper-case ``\\uXXXX`` (surrogate pairs
    above the BMP).
    """
    out = []
    for char in value:
        short = _SHORT_ESCAPES.get(char)
        if short is not None:
            out.append(short)
            continue
        code = ord(char)
        if 0x20 <= code < 0x7F and char not in _HTML_SENSITIVE:
            out.append(char)
        elif code > 0xFFFF:
            code -= 0x10000
            out.append(f"\\u{0xD800 + (code >> 10):04X}\\u{0xDC00 + (code & 0x3FF):04X}")
        else:
            out.append(f"\\u{code:04X}")
    return "".join(out)


def build_query_payload(query: str) -> str:
    return '{"query":"' + encode_json_string(query) + '","parameters":[]}'


def build_partition_key_header(partition_key: str) -> str:
    return '["' + encode_json_string(partition_key) + '"]'


def _skip_whitespace(text: str, position: int) -> int:
    return _WHITESPACE_RE.match(text, position).end()


def first_document_text(content: str) -> Optional[str]:
    """
    Return the raw text of ``Documents[0]`` in a query response.

    The element is sliced out of ``content`` unchanged, so key order,
    spacing and number formatting survive.  ``None`` means the property is
    missing or the array is empty.  A repeated ``Documents`` property
    resolves to its last occurrence.  Malformed JSON raises ``ValueError``.
    """
    json.loads(content)
    position = _skip_whitespace(content, 0)
    if not content.startswith("{", position):
        raise ValueError("Query response is not a JSON object")

    documents_at: Optional[int] = None
    position = _skip_whitespace(content, position + 1)
    while not content.startswith("}", position):
        name, position = _decoder.raw_decode(content, position)
        position = _skip_whitespace(content, position)
        position = _skip_whitespace(content, position + 1)
        value_start = position
        _, position = _decoder.raw_decode(content, position)
        if name == DOCUMENTS_PROPERTY:
            documents_at = value_start
        position = _skip_whitespace(content, position)
        if content.startswith(",", position):
            position = _skip_whitespace(content, position + 1)

    if documents_at is None:
        return None
    if not content.startswith("[", documents_at):
        raise ValueError(f"'{DOCUMENTS_PROPERTY}' is not an array")
    first = _skip_whitespace(content, documents_at + 1)
    if content.startswith("]", first):
        return None
    _, end = _decoder.raw_decode(content, first)
    return content[first:end]
