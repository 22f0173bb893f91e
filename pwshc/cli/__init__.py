"""
Command line interface for pwshc.

    pwshc SOURCE.html OUTPUT.cs [--config PATH] [--log-level LEVEL] [--run]

Exit status is 0 when the C# file was written and 1 otherwise.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from pwshc import __version__
from pwshc.compiler import PowerShellCompiler
from pwshc.config import load_compiler_config
from pwshc.extract import read_script_blocks
from pwshc.errors import PwshcError
from pwshc.runtime import PlanExecutor

logger = logging.getLogger(__name__)

__all__ = ["main", "build_parser"]

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pwshc",
        description="Compile <script type=\"pwsh\"> blocks of an HTML page into a C# source file.",
    )
    parser.add_argument("source", nargs="?", help="HTML page containing the PowerShell blocks")
    parser.add_argument("output", nargs="?", help="path of the C# file to write")
    parser.add_argument("--config", type=Path, help="explicit pwshc.toml or pyproject.toml")
    parser.add_argument(
        "--log-level",
        choices=sorted(_LEVELS),
        help="log verbosity (default: $PWSHC_LOG_LEVEL or warning)",
    )
    parser.add_argument("--run", action="store_true", help="also execute the compiled blocks and print their output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    """Configure the ``pwshc`` logger from the CLI flag, the environment, or the default."""
    level_name = (args.log_level or os.getenv("PWSHC_LOG_LEVEL", "warning")).lower()
    level = _LEVELS.get(level_name, logging.WARNING)

    package_logger = logging.getLogger("pwshc")
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        package_logger.addHandler(handler)


def _compile(args: argparse.Namespace) -> int:
    source = Path(args.source)
    output = Path(args.output)
    config = load_compiler_config(args.config, start=source.parent)

    compiler = PowerShellCompiler(config)
    plan = compiler.build_plan(read_script_blocks(source, config.script_type), source_name=source.name)
    code = compiler.emitter.render(plan)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(code, encoding="utf-8", newline="")
    print(f"Generated: {output}")

    if args.run:
        print(asyncio.run(PlanExecutor(config).execute(plan)))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.source or not args.output:
        parser.print_usage(sys.stderr)
        return 1

    _configure_logging(args)
    try:
        return _compile(args)
    except PwshcError as exc:
        print(f"Error: {exc.format()}", file=sys.stderr)
    except Exception as exc:
        logger.debug("Compilation failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
    return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
