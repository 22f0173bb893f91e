"""PowerShell-to-C# compilation passes."""

from .core import PowerShellCompiler, compile_html
from .hashtables import HashtableBinding, HashtablePreprocessor, convert_hashtable
from .parameters import ResolvedParameters, collect_command_parameters
from .resolver import ValueResolver
from .statements import StatementCompiler

__all__ = [
    "PowerShellCompiler",
    "compile_html",
    "HashtableBinding",
    "HashtablePreprocessor",
    "convert_hashtable",
    "ResolvedParameters",
    "collect_command_parameters",
    "ValueResolver",
    "StatementCompiler",
]
