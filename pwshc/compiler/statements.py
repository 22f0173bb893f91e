"""Compile recognized commands into IR operations."""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from pwshc import messages
from pwshc.ast import Assignment, CommandInvocation, CommandParameter, Statement
from pwshc.config import CompilerConfig
from pwshc.ir import EmitText, Operation, ReadFirstItem, ReadFirstItemFromEnv
from pwshc.protocol.auth import build_connection_string
from pwshc.utils import CaseInsensitiveDict

from .hashtables import HashtablePreprocessor
from .parameters import ResolvedParameters, collect_command_parameters
from .resolver import ValueResolver

logger = logging.getLogger(__name__)

__all__ = ["StatementCompiler", "WRITE_OUTPUT", "READ_COSMOS_ITEMS", "looks_like_env_name", "parse_top"]

WRITE_OUTPUT = "write-output"
READ_COSMOS_ITEMS = "read-azcosmositems"

DEFAULT_TOP = 1

_ENV_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_INT_RE = re.compile(r"\s*[+-]?\d+\s*")
_INT32_MAX = 2**31 - 1
_INT32_MIN = -(2**31)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def looks_like_env_name(value: Optional[str]) -> bool:
    return value is not None and _ENV_NAME_RE.fullmatch(value) is not None


def parse_top(value: Optional[str]) -> int:
    """Parse ``-Top`` like a 32-bit integer; anything else means the default."""
    if value is None or _INT_RE.fullmatch(value) is None:
        return DEFAULT_TOP
    number = int(value)
    if not _INT32_MIN <= number <= _INT32_MAX:
        return DEFAULT_TOP
    return number


class StatementCompiler:
    """Second pass over a block.

    Scalar assignments update the resolver's variable table in order;
    ``Write-Output`` and ``Read-AzCosmosItems`` become operations; every
    other statement compiles to nothing.
    """

    def __init__(self, config: CompilerConfig, resolver: ValueResolver, preprocessor: HashtablePreprocessor):
        self.config = config
        self.resolver = resolver
        self.preprocessor = preprocessor

    def compile_statement(self, statement: Statement) -> List[Operation]:
        if isinstance(statement, Assignment):
            self.resolver.record_assignment(statement)
            return []
        if not isinstance(statement, CommandInvocation):
            return []
        name = statement.name.casefold()
        if name == WRITE_OUTPUT:
            return self.compile_write_output(statement)
        if name == READ_COSMOS_ITEMS:
            return self.compile_read_cosmos_items(statement)
        logger.debug("Ignoring command %s", statement.name)
        return []

    def compile_write_output(self, command: CommandInvocation) -> List[Operation]:
        argument = next(
            (element for element in command.elements if not isinstance(element, CommandParameter)),
            None,
        )
        message = self.resolver.resolve(argument, "InputObject", CaseInsensitiveDict())
        if not message:
            return []
        return [EmitText(message)]

    def compile_read_cosmos_items(self, command: CommandInvocation) -> List[Operation]:
        params = collect_command_parameters(command, self.resolver, self.preprocessor.bindings)
        values = params.values

        database = values.get("DatabaseName")
        container = values.get("ContainerName")
        if _blank(database) or _blank(container):
            return [EmitText(messages.MISSING_PARAMETERS)]

        top = parse_top(values.get("Top"))
        query = values["Query"] if "Query" in values else f"SELECT TOP {top} * FROM c"
        partition_key = values.get("PartitionKey", "")
        account = values.get("AccountName")

        env_var = self._account_key_env_var(params)
        if env_var and not _blank(account):
            logger.debug("Account key for %s read from $env:%s at run time", account, env_var)
            return [
                ReadFirstItemFromEnv(
                    env_var=env_var,
                    endpoint=self.config.endpoint_for(account),
                    database=database,
                    container=container,
                    query=query,
                    partition_key=partition_key,
                )
            ]

        key = values.get("AccountKey")
        connection_string: Optional[str] = None
        if not _blank(account) and not _blank(key):
            connection_string = build_connection_string(self.config.endpoint_for(account), key.lstrip("="))
        elif not _blank(values.get("ConnectionString")):
            connection_string = values["ConnectionString"]

        if connection_string is None:
            return [EmitText(messages.MISSING_ACCOUNT_KEY)]
        return [
            ReadFirstItem(
                connection_string=connection_string,
                database=database,
                container=container,
                query=query,
                partition_key=partition_key,
            )
        ]

    @staticmethod
    def _account_key_env_var(params: ResolvedParameters) -> Optional[str]:
        if "AccountKey" in params.env_refs:
            return params.env_refs["AccountKey"]
        key = params.values.get("AccountKey")
        if looks_like_env_name(key):
            return key
        return None
