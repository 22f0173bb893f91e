"""Scalar value resolution for command arguments and hashtable values."""

from __future__ import annotations

import logging
import os
import re
from typing import Mapping, Optional, Tuple

from pwshc.ast import (
    Assignment,
    ExpandableString,
    Expression,
    NumberConstant,
    StringConstant,
    VariableExpression,
)
from pwshc.utils import CaseInsensitiveDict

logger = logging.getLogger(__name__)

__all__ = ["ValueResolver", "format_number"]

_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_BACKTICK_ESCAPES = {
    "0": "\0",
    "a": "\a",
    "b": "\b",
    "e": "\x1b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
}

_AUTOMATIC_VARIABLES = CaseInsensitiveDict({"true": "True", "false": "False", "null": ""})


def format_number(value: int | float) -> str:
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e15:
            return str(int(value))
        return repr(value)
    return str(value)


class ValueResolver:
    """
    Turns expression nodes into the strings the compiler embeds.

    The resolver owns the block-scoped variable table; it is reset at the
    start of each block and filled by :meth:`record_assignment` as
    statements are walked in order.

    Parameters
    ----------
    environ : Mapping[str, str], optional
        Environment consulted for ``$env:`` references (defaults to
        ``os.environ``).
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self.environ = os.environ if environ is None else environ
        self.variables: CaseInsensitiveDict[str] = CaseInsensitiveDict()

    def reset(self) -> None:
        self.variables.clear()

    # -- variables ------------------------------------------------------------

    def lookup(self, name: str) -> Optional[str]:
        if name in _AUTOMATIC_VARIABLES:
            return _AUTOMATIC_VARIABLES[name]
        return self.variables.get(name)

    def record_assignment(self, assignment: Assignment) -> None:
        """Track ``$name = <scalar>`` so later references can see it.

        Values that are not scalars (hashtables, pipelines, expressions with
        operators) make the variable unknown again.
        """
        target = assignment.target
        if not isinstance(target, VariableExpression) or target.is_env:
            return
        value = assignment.value
        scalar: Optional[str] = None
        if isinstance(value, (StringConstant, ExpandableString, NumberConstant, VariableExpression)):
            scalar = self.resolve(value, target.name, CaseInsensitiveDict()) or ""
        if scalar is None or assignment.operator not in ("=", "+="):
            self.variables.pop(target.name, None)
            return
        if assignment.operator == "+=":
            scalar = (self.variables.get(target.name) or "") + scalar
        self.variables[target.name] = scalar

    # -- resolution -----------------------------------------------------------

    def resolve(
        self,
        expr: Optional[Expression],
        param_name: str,
        env_refs: CaseInsensitiveDict[str],
    ) -> Optional[str]:
        """
        Resolve ``expr`` to a string.

        ``$env:NAME`` references record ``NAME`` in ``env_refs`` under
        ``param_name`` and fall back to ``NAME`` itself when the variable is
        unset, so callers can tell an environment-sourced value apart even
        when it is empty at build time.
        """
        if expr is None:
            return None
        if isinstance(expr, StringConstant):
            return expr.value
        if isinstance(expr, ExpandableString):
            return self.expand(expr.body)
        if isinstance(expr, NumberConstant):
            return format_number(expr.value)
        if isinstance(expr, VariableExpression) and not expr.splatted:
            if expr.is_env:
                return self._resolve_env(expr.name, param_name, env_refs)
            return self.lookup(expr.name) or ""
        return expr.text.strip("\"'")

    def _resolve_env(self, name: str, param_name: str, env_refs: CaseInsensitiveDict[str]) -> str:
        env_refs[param_name] = name
        value = self.environ.get(name)
        if not value:
            logger.debug("Environment variable %s is not set at build time", name)
            return name
        return value

    def expand(self, body: str) -> str:
        """Expand a double-quoted string body.

        Backtick escapes are applied, ``""`` collapses to one quote and
        ``$name``/``${name}``/``$env:NAME`` references are substituted.
        References that cannot be resolved stay in the text as written.
        """
        out = []
        index = 0
        length = len(body)
        while index < length:
            char = body[index]
            if char == "`" and index + 1 < length:
                escaped = body[index + 1]
                out.append(_BACKTICK_ESCAPES.get(escaped, escaped))
                index += 2
                continue
            if char == '"' and body.startswith('"', index + 1):
                out.append('"')
                index += 2
                continue
            if char == "$":
                reference = self._match_reference(body, index)
                if reference is not None:
                    value, index = reference
                    out.append(value)
                    continue
            out.append(char)
            index += 1
        return "".join(out)

    def _match_reference(self, body: str, start: int) -> Optional[Tuple[str, int]]:
        if body.startswith("{", start + 1):
            close = body.find("}", start + 2)
            if close < 0:
                return None
            drive, _, name = body[start + 2:close].rpartition(":")
            value = self._reference_value(drive, name)
            return None if value is None else (value, close + 1)

        match = _IDENTIFIER_RE.match(body, start + 1)
        if match is None:
            return None
        drive, name, end = "", match.group(0), match.end()
        if body.startswith(":", end):
            qualified = _IDENTIFIER_RE.match(body, end + 1)
            if qualified is not None:
                drive, name, end = name, qualified.group(0), qualified.end()
        value = self._reference_value(drive, name)
        return None if value is None else (value, end)

    def _reference_value(self, drive: str, name: str) -> Optional[str]:
        if drive.casefold() == "env":
            return self.environ.get(name) or None
        return self.lookup(name)
