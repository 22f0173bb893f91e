"""Restricted PowerShell parser producing :mod:`pwshc.ast` trees."""

from .diagnostics import ParseDiagnostic, ParseResult
from .parse import KEYWORDS, ScriptParser, parse_script
from .scanner import Scanner

__all__ = [
    "KEYWORDS",
    "ParseDiagnostic",
    "ParseResult",
    "Scanner",
    "ScriptParser",
    "parse_script",
]
