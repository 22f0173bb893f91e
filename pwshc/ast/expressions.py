"""Expression nodes of the PowerShell subset."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from .source_location import SourceLocation

__all__ = [
    "Expression",
    "StringConstant",
    "ExpandableString",
    "NumberConstant",
    "VariableExpression",
    "HashtableEntry",
    "HashtableLiteral",
    "RawExpression",
]


@dataclass
class Expression:
    """Base class for all expression types.

    Every concrete node keeps ``text``, the exact source extent it was
    parsed from; value resolution falls back to it for nodes the compiler
    does not interpret.
    """

    pass


@dataclass
class StringConstant(Expression):
    """Single-quoted string, single-quoted here-string or bareword."""

    text: str
    value: str
    quote: str = "single"  # "single", "here", "bare"
    location: Optional[SourceLocation] = None


@dataclass
class ExpandableString(Expression):
    """Double-quoted string or here-string; ``body`` is kept unexpanded."""

    text: str
    body: str
    location: Optional[SourceLocation] = None


@dataclass
class NumberConstant(Expression):
    text: str
    value: Union[int, float]
    location: Optional[SourceLocation] = None


@dataclass
class VariableExpression(Expression):
    """``$name``, ``${name}``, ``$env:NAME`` or the splat form ``@name``."""

    text: str
    name: str
    drive: Optional[str] = None
    splatted: bool = False
    location: Optional[SourceLocation] = None

    @property
    def user_path(self) -> str:
        if self.drive:
            return f"{self.drive}:{self.name}"
        return self.name

    @property
    def is_env(self) -> bool:
        return self.drive is not None and self.drive.casefold() == "env"


@dataclass
class HashtableEntry:
    key: Expression
    value: Expression


@dataclass
class HashtableLiteral(Expression):
    text: str
    entries: List[HashtableEntry] = field(default_factory=list)
    location: Optional[SourceLocation] = None


@dataclass
class RawExpression(Expression):
    """
    Anything the compiler never looks inside.

    ``kind`` records what was parsed: ``subexpression`` (``$(...)``),
    ``array`` (``@(...)``), ``paren``, ``scriptblock``, ``list`` (comma
    separated values), ``index`` or ``pipeline`` (a command used as a
    value).
    """

    text: str
    kind: str
    location: Optional[SourceLocation] = None
