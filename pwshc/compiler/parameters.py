"""Collect the effective parameter map of one command invocation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from pwshc.ast import CommandInvocation, CommandParameter, HashtableLiteral, VariableExpression
from pwshc.utils import CaseInsensitiveDict

from .hashtables import HashtableBinding, convert_hashtable
from .resolver import ValueResolver

__all__ = ["ResolvedParameters", "collect_command_parameters"]

SWITCH_VALUE = "true"


@dataclass
class ResolvedParameters:
    values: CaseInsensitiveDict[str] = field(default_factory=CaseInsensitiveDict)
    env_refs: CaseInsensitiveDict[str] = field(default_factory=CaseInsensitiveDict)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.values.get(name, default)

    def merge(self, binding: HashtableBinding) -> None:
        for key, value in binding.params.items():
            self.values[key] = value
            if key in binding.env_refs:
                self.env_refs[key] = binding.env_refs[key]
            else:
                self.env_refs.pop(key, None)


def collect_command_parameters(
    command: CommandInvocation,
    resolver: ValueResolver,
    bindings: Mapping[str, HashtableBinding],
) -> ResolvedParameters:
    """
    Walk ``command``'s elements left to right.

    ``-Name value`` consumes the next element unless it is itself a
    parameter; a bare ``-Name`` is a switch.  ``@name`` merges a recorded
    binding and an inline ``@{...}`` merges directly.  Later writes win.
    """
    result = ResolvedParameters()
    elements = command.elements
    index = 0
    while index < len(elements):
        element = elements[index]
        index += 1
        if isinstance(element, CommandParameter):
            if not element.name:
                continue
            argument = element.argument
            if argument is None and index < len(elements) and not isinstance(elements[index], CommandParameter):
                argument = elements[index]
                index += 1
            result.env_refs.pop(element.name, None)
            if argument is None:
                result.values[element.name] = SWITCH_VALUE
            else:
                result.values[element.name] = resolver.resolve(argument, element.name, result.env_refs) or ""
        elif isinstance(element, VariableExpression) and element.splatted:
            binding = bindings.get(element.name)
            if binding is not None:
                result.merge(binding)
        elif isinstance(element, HashtableLiteral):
            result.merge(convert_hashtable(element, resolver))
    return result
