"""Error types reported by pwshc.

Errors raised while compiling a page point at the page, the script block
inside it and the line within that block.  Block line numbers count from
the first line of the trimmed block text, not from the top of the page.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class ErrorLocation:
    """Where an error was raised.

    ``path`` is the HTML page (or the configuration file for config
    errors).  ``block`` is the zero-based index of the kept script block.
    """

    path: Optional[str] = None
    block: Optional[int] = None
    line: Optional[int] = None
    column: Optional[int] = None

    def describe(self) -> Optional[str]:
        parts = []
        if self.path:
            parts.append(self.path)
        if self.block is not None:
            parts.append(f"block {self.block}")
        if self.line is not None:
            if self.column is None:
                parts.append(f"line {self.line}")
            else:
                parts.append(f"line {self.line}, column {self.column}")
        return ", ".join(parts) or None


class PwshcError(Exception):
    """Base class for all compiler errors surfaced to users."""

    code: Optional[str] = None
    hint: Optional[str] = None

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        block: Optional[int] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        code: Optional[str] = None,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.location = ErrorLocation(path=path, block=block, line=line, column=column)
        if code is not None:
            self.code = code
        if hint is not None:
            self.hint = hint

    @property
    def path(self) -> Optional[str]:
        return self.location.path

    @property
    def block(self) -> Optional[int]:
        return self.location.block

    @property
    def line(self) -> Optional[int]:
        return self.location.line

    @property
    def column(self) -> Optional[int]:
        return self.location.column

    def format(self) -> str:
        """Render as ``message [CODE] at page, block N, line L, column C. Hint: ...``."""
        text = self.message
        if self.code:
            text += f" [{self.code}]"
        where = self.location.describe()
        if where:
            text += f" at {where}"
        if self.hint:
            text += f". Hint: {self.hint}"
        return text


class PwshcSyntaxError(PwshcError):
    """A script block could not be parsed."""

    code = "SYNTAX_ERROR"


class PwshcCompileError(PwshcError):
    code = "COMPILE_ERROR"


class PwshcConfigError(PwshcError):
    """A pwshc.toml file or [tool.pwshc] table is invalid."""

    code = "CONFIG_ERROR"


__all__ = [
    "PwshcError",
    "PwshcSyntaxError",
    "PwshcCompileError",
    "PwshcConfigError",
    "ErrorLocation",
]
