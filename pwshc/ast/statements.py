"""Statement nodes of the PowerShell subset."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from .expressions import Expression
from .source_location import SourceLocation

__all__ = [
    "Statement",
    "Assignment",
    "CommandParameter",
    "CommandElement",
    "CommandInvocation",
    "OtherStatement",
    "ScriptTree",
]


@dataclass
class Statement:
    """Base class for top-level statements."""

    pass


@dataclass
class Assignment(Statement):
    text: str
    target: Expression
    operator: str
    value: Expression
    location: Optional[SourceLocation] = None


@dataclass
class CommandParameter:
    """``-Name``, ``-Name value`` or ``-Name:value``.

    ``argument`` is only set by the parser for the attached ``-Name:value``
    form; the value of ``-Name value`` stays a separate command element
    and is paired up by the parameter collector.
    """

    text: str
    name: str
    argument: Optional[Expression] = None
    location: Optional[SourceLocation] = None


CommandElement = Union[CommandParameter, Expression]


@dataclass
class CommandInvocation(Statement):
    text: str
    name: str
    elements: List[CommandElement] = field(default_factory=list)
    location: Optional[SourceLocation] = None


@dataclass
class OtherStatement(Statement):
    """Pipelines, bare expressions and keyword statements, kept as text."""

    text: str
    kind: str
    location: Optional[SourceLocation] = None


@dataclass
class ScriptTree:
    text: str
    statements: List[Statement] = field(default_factory=list)
