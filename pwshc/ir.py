"""
Intermediate representation between the statement compiler and its
back ends.

Each operation maps to one C# statement group in the generated
``ExecuteAsync`` method and to one step of :class:`pwshc.runtime.PlanExecutor`.
The set is closed: back ends reject anything else.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Union

__all__ = [
    "EmitText",
    "ReadFirstItem",
    "ReadFirstItemFromEnv",
    "Operation",
    "BlockPlan",
    "ModulePlan",
]


@dataclass(frozen=True)
class EmitText:
    """Append a fixed line to the block output."""

    text: str


@dataclass(frozen=True)
class ReadFirstItem:
    """Query Cosmos DB with a connection string known at build time."""

    connection_string: str
    database: str
    container: str
    query: str
    partition_key: str = ""


@dataclass(frozen=True)
class ReadFirstItemFromEnv:
    """Query Cosmos DB with an account key read from ``env_var`` at run time."""

    env_var: str
    endpoint: str
    database: str
    container: str
    query: str
    partition_key: str = ""


Operation = Union[EmitText, ReadFirstItem, ReadFirstItemFromEnv]


@dataclass
class BlockPlan:
    index: int
    operations: List[Operation] = field(default_factory=list)


@dataclass
class ModulePlan:
    source_name: str
    blocks: List[BlockPlan] = field(default_factory=list)
