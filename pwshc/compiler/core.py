"""Drive extraction, parsing and statement compilation for one page."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

from pwshc.codegen.csharp import CSharpEmitter
from pwshc.config import CompilerConfig
from pwshc.extract import ScriptBlock, extract_script_blocks, read_script_blocks
from pwshc.ir import BlockPlan, ModulePlan
from pwshc.parser import parse_script

from .hashtables import HashtablePreprocessor
from .resolver import ValueResolver
from .statements import StatementCompiler

logger = logging.getLogger(__name__)

__all__ = ["PowerShellCompiler", "compile_html"]


class PowerShellCompiler:
    """
    Compile the PowerShell blocks of an HTML page into one C# source file.

    A block with parse errors is logged and skipped; the remaining blocks
    still compile.  Variable and hashtable tables never outlive a block.
    """

    def __init__(self, config: Optional[CompilerConfig] = None, *, environ: Optional[Mapping[str, str]] = None):
        self.config = config or CompilerConfig()
        self.resolver = ValueResolver(environ=os.environ if environ is None else environ)
        self.preprocessor = HashtablePreprocessor(self.resolver)
        self.statements = StatementCompiler(self.config, self.resolver, self.preprocessor)
        self.emitter = CSharpEmitter(self.config)

    def compile_from_html(self, html_path: Union[str, Path]) -> str:
        path = Path(html_path)
        blocks = read_script_blocks(path, self.config.script_type)
        return self.emitter.render(self.build_plan(blocks, source_name=path.name))

    def compile_markup(self, html: str, *, source_name: Optional[str] = None) -> str:
        return self.emitter.render(self.plan_markup(html, source_name=source_name))

    def plan_markup(self, html: str, *, source_name: Optional[str] = None) -> ModulePlan:
        blocks = extract_script_blocks(html, self.config.script_type)
        return self.build_plan(blocks, source_name=source_name)

    def build_plan(self, blocks: Iterable[ScriptBlock], *, source_name: Optional[str] = None) -> ModulePlan:
        plan = ModulePlan(source_name=source_name or self.config.source_label)
        for block in blocks:
            block_plan = self.compile_block(block, source_name=plan.source_name)
            if block_plan is not None:
                plan.blocks.append(block_plan)
        logger.debug("Planned %d block(s) for %s", len(plan.blocks), plan.source_name)
        return plan

    def compile_block(self, block: ScriptBlock, *, source_name: Optional[str] = None) -> Optional[BlockPlan]:
        result = parse_script(block.text, source_name or self.config.source_label, block=block.index)
        if not result.ok:
            logger.warning("Parse errors in PowerShell block %d: %s", block.index, result.diagnostics[0])
            return None

        statements = result.tree.statements
        self.preprocessor.reset()
        self.resolver.reset()
        self.preprocessor.process(statements)
        self.resolver.reset()

        block_plan = BlockPlan(index=block.index)
        for statement in statements:
            block_plan.operations.extend(self.statements.compile_statement(statement))
        logger.debug("Block %d: %d operation(s)", block.index, len(block_plan.operations))
        return block_plan


def compile_html(html_path: Union[str, Path], config: Optional[CompilerConfig] = None) -> str:
    return PowerShellCompiler(config).compile_from_html(html_path)
