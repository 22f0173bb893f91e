"""Pretty-print a :class:`~pwshc.ir.ModulePlan` as a C# source file."""

from __future__ import annotations

import logging
from typing import List, Optional

from jinja2 import Environment, PackageLoader, StrictUndefined

from pwshc import messages
from pwshc.config import CompilerConfig
from pwshc.errors import PwshcCompileError
from pwshc.ir import BlockPlan, EmitText, ModulePlan, Operation, ReadFirstItem, ReadFirstItemFromEnv
from pwshc.protocol import constants

from .literals import csharp_string_literal

logger = logging.getLogger(__name__)

__all__ = ["CSharpEmitter", "create_environment"]

INDENT = "    "
HELPER_METHOD = "ReadFirstCosmosItemViaRestAsync"


def create_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("pwshc.codegen.csharp", "templates"),
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["cs"] = csharp_string_literal
    return env


class _Writer:
    """Indented line buffer for the body of ``ExecuteAsync``."""

    def __init__(self, level: int):
        self.level = level
        self.lines: List[str] = []

    def line(self, text: str = "") -> None:
        self.lines.append(f"{INDENT * self.level}{text}" if text else "")

    def open(self, header: Optional[str] = None) -> None:
        if header:
            self.line(header)
        self.line("{")
        self.level += 1

    def close(self) -> None:
        self.level -= 1
        self.line("}")


class CSharpEmitter:
    """
    Render module plans through the ``module.cs.j2`` template.

    The body of ``ExecuteAsync`` is built here line by line; the file
    scaffold and the REST helper routines come from the templates, the
    latter filled in from :mod:`pwshc.protocol.constants`.  Output depends
    only on the plan and the configuration.
    """

    def __init__(self, config: Optional[CompilerConfig] = None, env: Optional[Environment] = None):
        self.config = config or CompilerConfig()
        self.env = env or create_environment()

    def render(self, plan: ModulePlan) -> str:
        template = self.env.get_template("module.cs.j2")
        source = template.render(
            source_name=plan.source_name,
            namespace=self.config.namespace,
            class_name=self.config.class_name,
            body=self.render_body(plan),
            p=constants.as_template_context(),
        )
        if self.config.newline != "\n":
            source = source.replace("\n", self.config.newline)
        logger.debug("Rendered %d block(s) into %s.%s", len(plan.blocks), self.config.namespace, self.config.class_name)
        return source

    def render_helpers(self) -> str:
        """The REST helper routines on their own, as they appear in every file."""
        return self.env.get_template("rest_helpers.cs.j2").render(p=constants.as_template_context())

    def render_body(self, plan: ModulePlan) -> List[str]:
        out = _Writer(level=2)
        out.line("var outputs = new List<string>();")
        for block in plan.blocks:
            self._block(out, block)
        out.line()
        out.open("if (outputs.Count == 0)")
        out.line(f"return {csharp_string_literal(self.config.no_output_message)};")
        out.close()
        out.line()
        out.line("return string.Join(Environment.NewLine, outputs);")
        return out.lines

    def _block(self, out: _Writer, block: BlockPlan) -> None:
        out.line(f"// block {block.index}")
        out.open()
        out.line("var blockOutputs = new List<string>();")
        for operation in block.operations:
            self._operation(out, operation)
        out.line("outputs.Add(string.Join(Environment.NewLine, blockOutputs));")
        out.close()

    def _operation(self, out: _Writer, operation: Operation) -> None:
        if isinstance(operation, EmitText):
            out.line(f"blockOutputs.Add({csharp_string_literal(operation.text)});")
        elif isinstance(operation, ReadFirstItem):
            call = self._helper_call(csharp_string_literal(operation.connection_string), operation)
            out.line(f"blockOutputs.Add({call});")
        elif isinstance(operation, ReadFirstItemFromEnv):
            self._read_from_env(out, operation)
        else:
            raise PwshcCompileError(f"Unsupported operation {type(operation).__name__}")

    def _read_from_env(self, out: _Writer, operation: ReadFirstItemFromEnv) -> None:
        out.open()
        out.line(f"string? accountKey = Environment.GetEnvironmentVariable({csharp_string_literal(operation.env_var)});")
        out.open("if (string.IsNullOrWhiteSpace(accountKey))")
        out.line(f"accountKey = {self.config.secret_reference};")
        out.close()
        out.line()
        out.open("if (string.IsNullOrWhiteSpace(accountKey))")
        out.line(f"blockOutputs.Add({csharp_string_literal(messages.env_var_not_set(operation.env_var))});")
        out.close()
        out.open("else")
        out.open('if (accountKey.StartsWith("="))')
        out.line("accountKey = accountKey.TrimStart('=');")
        out.close()
        out.line()
        out.line(f"string endpoint = {csharp_string_literal(operation.endpoint)};")
        out.line(
            'string connectionString = $"'
            f"{constants.ENDPOINT_KEY}={{endpoint}};{constants.ACCOUNT_KEY}={{accountKey}};"
            '";'
        )
        out.line(f"blockOutputs.Add({self._helper_call('connectionString', operation)});")
        out.close()
        out.close()

    @staticmethod
    def _helper_call(connection_string: str, operation) -> str:
        return (
            f"await {HELPER_METHOD}("
            f"connectionString: {connection_string}, "
            f"databaseName: {csharp_string_literal(operation.database)}, "
            f"containerName: {csharp_string_literal(operation.container)}, "
            f"query: {csharp_string_literal(operation.query)}, "
            f"partitionKey: {csharp_string_literal(operation.partition_key)})"
        )
