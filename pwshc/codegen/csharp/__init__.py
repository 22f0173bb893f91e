"""C# back end."""

from .emitter import CSharpEmitter, create_environment
from .literals import csharp_string_literal

__all__ = ["CSharpEmitter", "create_environment", "csharp_string_literal"]
