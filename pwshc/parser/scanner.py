"""Character cursor for the PowerShell subset.

PowerShell tokenizes differently in argument and expression mode, so the
parser drives this cursor directly instead of consuming a flat token
stream.  The scanner owns everything that is mode-independent: string
literals, comments, line continuations and balanced groups that are kept
as raw text.
"""

from __future__ import annotations

from typing import List, Optional

from pwshc.ast import SourceLocation
from pwshc.errors import PwshcSyntaxError

__all__ = ["Scanner", "is_identifier_char", "is_identifier_start"]

_CLOSERS = {"(": ")", "{": "}", "[": "]"}


def is_identifier_start(char: Optional[str]) -> bool:
    return char is not None and (char.isalpha() or char == "_")


def is_identifier_char(char: Optional[str]) -> bool:
    return char is not None and (char.isalnum() or char in "_?")


class Scanner:
    """Cursor over one script block."""

    def __init__(self, source: str, path: str = "<script>", block: Optional[int] = None):
        self.source = source.replace("\r\n", "\n")
        self.path = path
        self.block = block
        self.pos = 0

    # -- position helpers -------------------------------------------------

    def line_column(self, pos: Optional[int] = None) -> tuple[int, int]:
        if pos is None:
            pos = self.pos
        line = self.source.count("\n", 0, pos) + 1
        column = pos - (self.source.rfind("\n", 0, pos) + 1) + 1
        return line, column

    def location(self, pos: Optional[int] = None) -> SourceLocation:
        line, column = self.line_column(pos)
        return SourceLocation(file=self.path, line=line, column=column)

    def error(self, message: str, pos: Optional[int] = None) -> PwshcSyntaxError:
        """Create a syntax error at ``pos`` (defaults to the cursor)."""
        line, column = self.line_column(pos)
        return PwshcSyntaxError(message, path=self.path, block=self.block, line=line, column=column)

    def text_from(self, start: int) -> str:
        return self.source[start:self.pos]

    # -- cursor -------------------------------------------------------------

    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def peek(self, offset: int = 0) -> Optional[str]:
        pos = self.pos + offset
        if pos < len(self.source):
            return self.source[pos]
        return None

    def startswith(self, text: str) -> bool:
        return self.source.startswith(text, self.pos)

    def advance(self, count: int = 1) -> str:
        chunk = self.source[self.pos:self.pos + count]
        self.pos += len(chunk)
        return chunk

    # -- trivia ---------------------------------------------------------------

    def skip_inline_whitespace(self) -> None:
        """Skip spaces, tabs, comments and backtick line continuations."""
        while not self.at_end():
            char = self.peek()
            if char in (" ", "\t", "\f", "\v"):
                self.advance()
            elif char == "`" and self.peek(1) == "\n":
                self.advance(2)
            elif char == "#":
                self.skip_line_comment()
            elif char == "<" and self.peek(1) == "#":
                self.skip_block_comment()
            else:
                break

    def skip_whitespace(self) -> None:
        """Like :meth:`skip_inline_whitespace` but also crosses newlines."""
        while True:
            self.skip_inline_whitespace()
            if self.peek() == "\n":
                self.advance()
                continue
            break

    def skip_line_comment(self) -> None:
        while not self.at_end() and self.peek() != "\n":
            self.advance()

    def skip_block_comment(self) -> None:
        start = self.pos
        end = self.source.find("#>", self.pos + 2)
        if end < 0:
            raise self.error("Missing end of comment '#>'.", start)
        self.pos = end + 2

    # -- literals -------------------------------------------------------------

    def read_single_quoted(self) -> str:
        """Read ``'...'``; a doubled quote stands for one quote."""
        start = self.pos
        self.advance()
        chars: List[str] = []
        while True:
            char = self.peek()
            if char is None:
                raise self.error("The string is missing the terminator: '.", start)
            self.advance()
            if char == "'":
                if self.peek() == "'":
                    self.advance()
                    chars.append("'")
                    continue
                break
            chars.append(char)
        return "".join(chars)

    def read_double_quoted(self) -> str:
        """Read ``"..."`` and return the raw body between the quotes."""
        start = self.pos
        self.advance()
        body_start = self.pos
        while True:
            char = self.peek()
            if char is None:
                raise self.error('The string is missing the terminator: ".', start)
            if char == "`":
                self.advance(2)
                continue
            if char == "$" and self.peek(1) == "(":
                self.advance()
                self.read_balanced()
                continue
            if char == '"':
                if self.peek(1) == '"':
                    self.advance(2)
                    continue
                body = self.source[body_start:self.pos]
                self.advance()
                return body
            self.advance()

    def at_here_string(self) -> bool:
        if self.peek() != "@" or self.peek(1) not in ("'", '"'):
            return False
        offset = 2
        while self.peek(offset) in (" ", "\t"):
            offset += 1
        return self.peek(offset) == "\n"

    def read_here_string(self) -> tuple[str, str]:
        """Read ``@'...'@`` or ``@"..."@``; returns ``(quote, body)``."""
        start = self.pos
        quote = self.source[self.pos + 1]
        line_end = self.source.index("\n", self.pos)
        body_start = line_end + 1
        terminator = "\n" + quote + "@"
        if self.source.startswith(quote + "@", body_start):
            self.pos = body_start + 2
            return quote, ""
        end = self.source.find(terminator, line_end)
        if end < 0:
            raise self.error(f"The string is missing the terminator: {quote}@.", start)
        self.pos = end + len(terminator)
        return quote, self.source[body_start:end]

    def read_identifier(self) -> str:
        start = self.pos
        while is_identifier_char(self.peek()):
            self.advance()
        return self.text_from(start)

    # -- groups ---------------------------------------------------------------

    def read_balanced(self) -> str:
        """
        Consume a bracketed group starting at ``(``, ``{`` or ``[``.

        Nested groups, strings and comments are skipped so that a closer
        inside a string does not end the group.  Returns the full text
        including the delimiters.
        """
        start = self.pos
        stack = [(_CLOSERS[self.advance()], start)]
        while stack:
            char = self.peek()
            if char is None:
                closer, opened_at = stack[-1]
                raise self.error(f"Missing closing '{closer}'.", opened_at)
            if char in _CLOSERS:
                stack.append((_CLOSERS[char], self.pos))
                self.advance()
            elif char in ")}]":
                if char != stack[-1][0]:
                    raise self.error(f"Unexpected token '{char}'.")
                stack.pop()
                self.advance()
            elif char == "'":
                self.read_single_quoted()
            elif char == '"':
                self.read_double_quoted()
            elif self.at_here_string():
                self.read_here_string()
            elif char == "#" or (char == "<" and self.peek(1) == "#"):
                self.skip_inline_whitespace()
            elif char == "`":
                self.advance(2)
            else:
                self.advance()
        return self.text_from(start)
