"""Run a compiled plan in-process instead of through the generated C#."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import List, Mapping, Optional

import httpx

from pwshc import messages
from pwshc.compiler import PowerShellCompiler
from pwshc.config import CompilerConfig
from pwshc.errors import PwshcCompileError
from pwshc.ir import EmitText, ModulePlan, Operation, ReadFirstItem, ReadFirstItemFromEnv
from pwshc.protocol import build_connection_string, client_options, read_first_item_via_rest

logger = logging.getLogger(__name__)

__all__ = ["PlanExecutor", "run_markup"]


class PlanExecutor:
    """
    Execute a :class:`ModulePlan` with the semantics of ``ExecuteAsync()``.

    Every operation yields exactly one line.  Lines are joined per block and
    blocks are joined again with ``os.linesep``; a plan without blocks
    yields the configured no-output message.  Queries run one at a time in
    plan order through a single ``httpx.AsyncClient``.

    Parameters
    ----------
    config : CompilerConfig, optional
    environ : Mapping[str, str], optional
        Source of account keys on the environment path.
    client : httpx.AsyncClient, optional
        Shared client; one is opened per :meth:`execute` call otherwise.
    now : datetime, optional
        Fixed request time, for reproducible signatures.
    """

    def __init__(
        self,
        config: Optional[CompilerConfig] = None,
        *,
        environ: Optional[Mapping[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
        now: Optional[datetime] = None,
    ):
        self.config = config or CompilerConfig()
        self.environ = os.environ if environ is None else environ
        self.client = client
        self.now = now

    async def execute(self, plan: ModulePlan) -> str:
        if self.client is not None:
            return await self._execute(plan, self.client)
        async with httpx.AsyncClient(**client_options(self.config.request_timeout)) as client:
            return await self._execute(plan, client)

    async def _execute(self, plan: ModulePlan, client: httpx.AsyncClient) -> str:
        outputs: List[str] = []
        for block in plan.blocks:
            block_outputs = [await self.run_operation(operation, client) for operation in block.operations]
            outputs.append(os.linesep.join(block_outputs))
        if not outputs:
            return self.config.no_output_message
        return os.linesep.join(outputs)

    async def run_operation(self, operation: Operation, client: httpx.AsyncClient) -> str:
        if isinstance(operation, EmitText):
            return operation.text
        if isinstance(operation, ReadFirstItem):
            return await self._query(operation.connection_string, operation, client)
        if isinstance(operation, ReadFirstItemFromEnv):
            key = self._account_key(operation.env_var)
            if key is None:
                return messages.env_var_not_set(operation.env_var)
            connection_string = build_connection_string(operation.endpoint, key.lstrip("="))
            return await self._query(connection_string, operation, client)
        raise PwshcCompileError(f"Unsupported operation {type(operation).__name__}")

    def _account_key(self, env_var: str) -> Optional[str]:
        for name in (env_var, self.config.fallback_secret_env):
            value = self.environ.get(name)
            if value and value.strip():
                return value
        logger.debug("No account key in $env:%s or $env:%s", env_var, self.config.fallback_secret_env)
        return None

    async def _query(self, connection_string: str, operation, client: httpx.AsyncClient) -> str:
        return await read_first_item_via_rest(
            connection_string,
            operation.database,
            operation.container,
            operation.query,
            operation.partition_key,
            client=client,
            now=self.now,
        )


async def run_markup(
    html: str,
    config: Optional[CompilerConfig] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    client: Optional[httpx.AsyncClient] = None,
    now: Optional[datetime] = None,
) -> str:
    """Compile the PowerShell blocks of ``html`` and run them immediately."""
    config = config or CompilerConfig()
    plan = PowerShellCompiler(config, environ=environ).plan_markup(html)
    executor = PlanExecutor(config, environ=environ, client=client, now=now)
    return await executor.execute(plan)
