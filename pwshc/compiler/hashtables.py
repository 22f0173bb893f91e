"""Hashtable literals assigned to variables, kept for later splatting."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from pwshc.ast import (
    Assignment,
    ExpandableString,
    HashtableLiteral,
    NumberConstant,
    Statement,
    StringConstant,
    VariableExpression,
)
from pwshc.utils import CaseInsensitiveDict

from .resolver import ValueResolver

logger = logging.getLogger(__name__)

__all__ = ["HashtableBinding", "HashtablePreprocessor", "convert_hashtable"]

_ENV_PREFIX = "$env:"


@dataclass
class HashtableBinding:
    params: CaseInsensitiveDict[str] = field(default_factory=CaseInsensitiveDict)
    env_refs: CaseInsensitiveDict[str] = field(default_factory=CaseInsensitiveDict)


def _key_text(key, resolver: ValueResolver) -> str:
    if isinstance(key, (StringConstant, ExpandableString, NumberConstant)):
        return resolver.resolve(key, "", CaseInsensitiveDict()) or key.text
    return key.text


def convert_hashtable(table: HashtableLiteral, resolver: ValueResolver) -> HashtableBinding:
    """
    Resolve every entry of ``table``.

    An entry written as ``$env:NAME`` whose variable is unset keeps ``NAME``
    both as its placeholder value and as the recorded environment reference.
    """
    binding = HashtableBinding()
    for entry in table.entries:
        key = _key_text(entry.key, resolver)
        binding.env_refs.pop(key, None)
        value = resolver.resolve(entry.value, key, binding.env_refs) or ""
        raw = entry.value.text
        if not value and raw[: len(_ENV_PREFIX)].casefold() == _ENV_PREFIX:
            env_name = raw[len(_ENV_PREFIX):]
            binding.env_refs[key] = env_name
            value = env_name
        binding.params[key] = value
    return binding


class HashtablePreprocessor:
    """First pass over a block: record ``$name = @{...}`` bindings.

    Scalar assignments are replayed in the same pass so hashtable values
    can refer to variables assigned above them.
    """

    def __init__(self, resolver: ValueResolver):
        self.resolver = resolver
        self.bindings: CaseInsensitiveDict[HashtableBinding] = CaseInsensitiveDict()

    def reset(self) -> None:
        self.bindings.clear()

    def process(self, statements: Iterable[Statement]) -> None:
        for statement in statements:
            if isinstance(statement, Assignment):
                self.process_assignment(statement)

    def process_assignment(self, assignment: Assignment) -> None:
        target = assignment.target
        if not isinstance(target, VariableExpression):
            return
        if isinstance(assignment.value, HashtableLiteral) and assignment.operator == "=":
            binding = convert_hashtable(assignment.value, self.resolver)
            self.bindings[target.name] = binding
            self.resolver.record_assignment(assignment)
            logger.debug("Bound hashtable $%s with %d key(s)", target.name, len(binding.params))
            return
        self.bindings.pop(target.name, None)
        self.resolver.record_assignment(assignment)
