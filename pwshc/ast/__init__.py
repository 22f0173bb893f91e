"""AST dataclasses for the PowerShell subset understood by pwshc."""

from .expressions import (
    ExpandableString,
    Expression,
    HashtableEntry,
    HashtableLiteral,
    NumberConstant,
    RawExpression,
    StringConstant,
    VariableExpression,
)
from .source_location import SourceLocation
from .statements import (
    Assignment,
    CommandElement,
    CommandInvocation,
    CommandParameter,
    OtherStatement,
    ScriptTree,
    Statement,
)

__all__ = [
    "Assignment",
    "CommandElement",
    "CommandInvocation",
    "CommandParameter",
    "ExpandableString",
    "Expression",
    "HashtableEntry",
    "HashtableLiteral",
    "NumberConstant",
    "OtherStatement",
    "RawExpression",
    "ScriptTree",
    "SourceLocation",
    "Statement",
    "StringConstant",
    "VariableExpression",
]
