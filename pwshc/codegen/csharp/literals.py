"""C# source literals."""

from __future__ import annotations

import unicodedata

__all__ = ["csharp_string_literal"]

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\0": "\\0",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}

# Line terminators and code units C# source cannot hold verbatim.
_UNICODE_ESCAPED = {"\u0085", "\u2028", "\u2029"}


def csharp_string_literal(value: str) -> str:
    """Quote ``value`` as a regular (non-verbatim) C# string literal."""
    out = ['"']
    for char in value:
        escaped = _ESCAPES.get(char)
        if escaped is not None:
            out.append(escaped)
        elif char in _UNICODE_ESCAPED or unicodedata.category(char) in ("Cc", "Cs"):
            out.append(f"\\u{ord(char):04x}")
        else:
            out.append(char)
    out.append('"')
    return "".join(out)
