"""Parse result and diagnostic records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from pwshc.ast import ScriptTree
from pwshc.errors import PwshcSyntaxError

__all__ = ["ParseDiagnostic", "ParseResult"]


@dataclass
class ParseDiagnostic:
    message: str
    line: Optional[int] = None
    column: Optional[int] = None
    path: Optional[str] = None
    block: Optional[int] = None
    code: str = "SYNTAX_ERROR"

    @classmethod
    def from_error(cls, error: PwshcSyntaxError) -> "ParseDiagnostic":
        return cls(
            message=error.message,
            line=error.line,
            column=error.column,
            path=error.path,
            block=error.block,
            code=error.code or "SYNTAX_ERROR",
        )

    def to_error(self) -> PwshcSyntaxError:
        return PwshcSyntaxError(
            self.message,
            path=self.path,
            block=self.block,
            line=self.line,
            column=self.column,
            code=self.code,
        )

    def __str__(self) -> str:
        return self.to_error().format()


@dataclass
class ParseResult:
    """A syntax tree plus whatever the parser complained about.

    The tree is still returned when diagnostics are present, but it may be
    missing the statements that failed to parse; callers that need a
    faithful tree check :attr:`ok` first.
    """

    tree: ScriptTree
    diagnostics: List[ParseDiagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics
