"""Recursive-descent parser for the PowerShell subset.

The parser only needs to be precise about the statements the compiler
looks at: assignments, single commands with their parameters, splats and
hashtable literals.  Everything else (pipelines, keyword statements,
sub-expressions, script blocks) is recognised well enough to be skipped
and is kept as raw text.

Errors never escape :meth:`ScriptParser.parse`; each one is recorded as a
:class:`ParseDiagnostic` and the parser resumes at the next line.
"""

from __future__ import annotations

import re
from typing import List, Optional

from pwshc.ast import (
    Assignment,
    CommandElement,
    CommandInvocation,
    CommandParameter,
    ExpandableString,
    Expression,
    HashtableEntry,
    HashtableLiteral,
    NumberConstant,
    OtherStatement,
    RawExpression,
    ScriptTree,
    SourceLocation,
    Statement,
    StringConstant,
    VariableExpression,
)
from pwshc.errors import PwshcSyntaxError

from .diagnostics import ParseDiagnostic, ParseResult
from .scanner import Scanner, is_identifier_char, is_identifier_start

__all__ = ["ScriptParser", "parse_script", "KEYWORDS"]

KEYWORDS = frozenset({
    "begin", "break", "catch", "class", "continue", "data", "do",
    "dynamicparam", "else", "elseif", "end", "enum", "exit", "filter",
    "finally", "for", "foreach", "function", "if", "param", "process",
    "return", "switch", "throw", "trap", "try", "until", "using", "while",
    "workflow",
})

# Clause keywords that continue the keyword statement on the previous line.
_CONTINUATION_KEYWORDS = frozenset({"else", "elseif", "catch", "finally", "until"})

ASSIGNMENT_OPERATORS = ("??=", "+=", "-=", "*=", "/=", "%=", "=")

_NUMBER_RE = re.compile(
    r"[+-]?(?:0x[0-9a-f]+|(?:\d+(?:\.\d*)?|\.\d+)(?:e[+-]?\d+)?)",
    re.IGNORECASE,
)

_BAREWORD_END = " \t\n;|(){},"
_ELEMENT_END = "\n;|)}"
_STATEMENT_END = "\n;"


def parse_number(text: str) -> int | float:
    sign = -1 if text.startswith("-") else 1
    digits = text.lstrip("+-")
    if digits[:2].lower() == "0x":
        return sign * int(digits[2:], 16)
    if any(marker in digits.lower() for marker in (".", "e")):
        return sign * float(digits)
    return sign * int(digits)


class ScriptParser:
    """Parser for one script block."""

    def __init__(self, source: str, path: str = "<script>", block: Optional[int] = None):
        self.scanner = Scanner(source, path, block)
        self.diagnostics: List[ParseDiagnostic] = []

    # -- entry point ------------------------------------------------------

    def parse(self) -> ParseResult:
        s = self.scanner
        statements: List[Statement] = []
        while True:
            self._skip_separators()
            if s.at_end():
                break
            start = s.pos
            try:
                statements.append(self.parse_statement())
            except PwshcSyntaxError as exc:
                self.diagnostics.append(ParseDiagnostic.from_error(exc))
                self._recover(start)
        tree = ScriptTree(text=s.source, statements=statements)
        return ParseResult(tree=tree, diagnostics=list(self.diagnostics))

    def _skip_separators(self) -> None:
        s = self.scanner
        while True:
            try:
                s.skip_whitespace()
            except PwshcSyntaxError as exc:
                self.diagnostics.append(ParseDiagnostic.from_error(exc))
                s.pos = len(s.source)
                return
            if s.peek() == ";":
                s.advance()
                continue
            return

    def _recover(self, start: int) -> None:
        s = self.scanner
        resume = s.source.find("\n", max(s.pos, start + 1))
        s.pos = len(s.source) if resume < 0 else resume + 1

    # -- statements -------------------------------------------------------

    def parse_statement(self) -> Statement:
        s = self.scanner
        start = s.pos
        char = s.peek()
        if char in (")", "}", "]"):
            raise s.error(f"Unexpected token '{char}' in expression or statement.")
        if is_identifier_start(char) and self._peek_word().casefold() in KEYWORDS:
            return self._parse_keyword_statement(start)
        if char == "$" and (is_identifier_char(s.peek(1)) or s.peek(1) == "{"):
            assignment = self._try_parse_assignment(start)
            if assignment is not None:
                return assignment
        statement = self._parse_pipeline(start)
        self._expect_statement_end()
        return statement

    def _try_parse_assignment(self, start: int) -> Optional[Assignment]:
        s = self.scanner
        location = s.location()
        target: Expression = self._parse_variable()
        target = self._parse_member_suffix(start, target, location)
        s.skip_inline_whitespace()
        operator = next((op for op in ASSIGNMENT_OPERATORS if s.startswith(op)), None)
        if operator is None or (operator == "=" and s.peek(1) == "="):
            s.pos = start
            return None
        s.advance(len(operator))
        s.skip_whitespace()
        if s.at_end() or s.peek() in ";)}":
            raise s.error(
                f"You must provide a value expression following the '{operator}' operator."
            )
        value = self._parse_assignment_value()
        self._expect_statement_end()
        return Assignment(
            text=s.text_from(start).rstrip(),
            target=target,
            operator=operator,
            value=value,
            location=location,
        )

    def _parse_assignment_value(self) -> Expression:
        s = self.scanner
        start = s.pos
        location = s.location()
        if self._starts_command(s.peek()):
            self._parse_pipeline(start)
            return RawExpression(text=s.text_from(start).rstrip(), kind="pipeline", location=location)
        value = self.parse_expression(_ELEMENT_END)
        checkpoint = s.pos
        s.skip_inline_whitespace()
        if s.peek() == "|":
            s.pos = start
            self._parse_pipeline(start)
            return RawExpression(text=s.text_from(start).rstrip(), kind="pipeline", location=location)
        s.pos = checkpoint
        return value

    def _parse_keyword_statement(self, start: int) -> OtherStatement:
        s = self.scanner
        location = s.location()
        while True:
            self._consume_raw_until(_STATEMENT_END)
            checkpoint = s.pos
            s.skip_whitespace()
            if s.peek() == "{" or self._peek_word().casefold() in _CONTINUATION_KEYWORDS:
                continue
            s.pos = checkpoint
            break
        return OtherStatement(text=s.text_from(start).rstrip(), kind="keyword", location=location)

    def _expect_statement_end(self) -> None:
        s = self.scanner
        s.skip_inline_whitespace()
        if s.at_end() or s.peek() in _STATEMENT_END:
            return
        raise s.error(f"Unexpected token '{s.peek()}' in expression or statement.")

    # -- pipelines and commands ---------------------------------------------

    def _parse_pipeline(self, start: int) -> Statement:
        s = self.scanner
        location = s.location()
        elements: List[object] = [self._parse_pipeline_element()]
        while True:
            s.skip_inline_whitespace()
            if s.startswith("||") or s.startswith("&&"):
                s.advance(2)
                s.skip_whitespace()
                self._consume_raw_until(_STATEMENT_END)
                return OtherStatement(text=s.text_from(start).rstrip(), kind="chain", location=location)
            if s.peek() != "|":
                break
            s.advance()
            s.skip_whitespace()
            if s.at_end() or s.peek() in ";|)}":
                raise s.error("An empty pipe element is not allowed.")
            elements.append(self._parse_pipeline_element())

        if len(elements) == 1 and isinstance(elements[0], CommandInvocation):
            return elements[0]
        kind = "pipeline" if len(elements) > 1 else "expression"
        return OtherStatement(text=s.text_from(start).rstrip(), kind=kind, location=location)

    def _parse_pipeline_element(self) -> object:
        s = self.scanner
        start = s.pos
        char = s.peek()
        if char == "&" or (char == "." and s.peek(1) in (" ", "\t")):
            location = s.location()
            s.advance()
            s.skip_inline_whitespace()
            self._consume_raw_until(_ELEMENT_END)
            return RawExpression(text=s.text_from(start).rstrip(), kind="invocation", location=location)
        if self._starts_command(char):
            return self._parse_command(start)
        return self.parse_expression(_ELEMENT_END)

    @staticmethod
    def _starts_command(char: Optional[str]) -> bool:
        if char is None or char in "'\"$@([{-+!,;|)}\n" or char.isdigit():
            return False
        return True

    def _parse_command(self, start: int) -> CommandInvocation:
        s = self.scanner
        location = s.location()
        name = self._read_bareword_text()
        elements: List[CommandElement] = []
        while True:
            s.skip_inline_whitespace()
            if self._at_element_end():
                break
            elements.append(self._parse_command_element())
        return CommandInvocation(
            text=s.text_from(start).rstrip(),
            name=name,
            elements=elements,
            location=location,
        )

    def _at_element_end(self) -> bool:
        s = self.scanner
        return s.at_end() or s.peek() in _ELEMENT_END

    def _parse_command_element(self) -> CommandElement:
        s = self.scanner
        start = s.pos
        location = s.location()
        if s.peek() == "-" and (is_identifier_start(s.peek(1)) or s.peek(1) == "?"):
            s.advance()
            name_start = s.pos
            while not s.at_end() and s.peek() not in _BAREWORD_END and s.peek() != ":":
                s.advance()
            name = s.text_from(name_start)
            argument: Optional[Expression] = None
            if s.peek() == ":":
                s.advance()
                s.skip_inline_whitespace()
                if self._at_element_end():
                    raise s.error(f"Missing an argument for parameter '{name}'.")
                argument = self._parse_argument()
            return CommandParameter(
                text=s.text_from(start),
                name=name,
                argument=argument,
                location=location,
            )

        value = self._parse_argument()
        checkpoint = s.pos
        s.skip_inline_whitespace()
        if s.peek() != ",":
            s.pos = checkpoint
            return value
        while s.peek() == ",":
            s.advance()
            s.skip_whitespace()
            if self._at_element_end():
                raise s.error("Missing expression after ','.")
            self._parse_argument()
            checkpoint = s.pos
            s.skip_inline_whitespace()
        s.pos = checkpoint
        return RawExpression(text=s.text_from(start), kind="list", location=location)

    # -- expressions --------------------------------------------------------

    def _parse_argument(self) -> Expression:
        """Parse one command argument (argument mode)."""
        s = self.scanner
        start = s.pos
        location = s.location()
        primary = self._parse_quoted_or_grouped(start, location)
        if primary is not None:
            return primary
        return self._bareword_expression(self._read_bareword_text(), location)

    def parse_expression(self, terminators: str) -> Expression:
        """
        Parse a value in expression mode.

        Anything following the first primary expression up to one of
        ``terminators`` (operators, method calls, ...) turns the whole
        value into a :class:`RawExpression`.
        """
        s = self.scanner
        start = s.pos
        location = s.location()
        primary = self._parse_quoted_or_grouped(start, location)
        if primary is None:
            char = s.peek()
            number = _NUMBER_RE.match(s.source, s.pos)
            if number is not None and (char.isdigit() or char in "+-."):
                s.advance(len(number.group(0)))
                primary = NumberConstant(text=number.group(0), value=parse_number(number.group(0)), location=location)
            elif self._starts_command(char):
                self._parse_command(start)
                primary = RawExpression(text=s.text_from(start).rstrip(), kind="pipeline", location=location)
            elif char is not None and char in "-+!,":
                # unary operators: -not, !, leading comma
                self._consume_raw_until(terminators)
                return RawExpression(text=s.text_from(start).rstrip(), kind="expression", location=location)
            else:
                raise s.error(f"Unexpected token '{char}' in expression or statement.")

        checkpoint = s.pos
        s.skip_inline_whitespace()
        if s.at_end() or s.peek() in terminators:
            s.pos = checkpoint
            return primary
        self._consume_raw_until(terminators)
        return RawExpression(text=s.text_from(start).rstrip(), kind="expression", location=location)

    def _parse_quoted_or_grouped(self, start: int, location: SourceLocation) -> Optional[Expression]:
        s = self.scanner
        char = s.peek()
        if char == "'":
            value = s.read_single_quoted()
            return StringConstant(text=s.text_from(start), value=value, quote="single", location=location)
        if char == '"':
            body = s.read_double_quoted()
            return ExpandableString(text=s.text_from(start), body=body, location=location)
        if s.at_here_string():
            quote, body = s.read_here_string()
            if quote == "'":
                return StringConstant(text=s.text_from(start), value=body, quote="here", location=location)
            return ExpandableString(text=s.text_from(start), body=body, location=location)
        if char == "@":
            return self._parse_at_expression(start, location)
        if char == "$":
            if s.peek(1) == "(":
                s.advance()
                s.read_balanced()
                expr: Expression = RawExpression(text=s.text_from(start), kind="subexpression", location=location)
            else:
                expr = self._parse_variable()
            return self._parse_member_suffix(start, expr, location)
        if char in ("(", "{", "["):
            s.read_balanced()
            kind = {"(": "paren", "{": "scriptblock", "[": "type"}[char]
            return RawExpression(text=s.text_from(start), kind=kind, location=location)
        return None

    def _parse_at_expression(self, start: int, location: SourceLocation) -> Expression:
        s = self.scanner
        following = s.peek(1)
        if following == "{":
            return self._parse_hashtable()
        if following == "(":
            s.advance()
            s.read_balanced()
            return RawExpression(text=s.text_from(start), kind="array", location=location)
        if is_identifier_char(following):
            s.advance()
            name = s.read_identifier()
            return VariableExpression(text=s.text_from(start), name=name, splatted=True, location=location)
        raise s.error("Unrecognized token in source text.")

    def _parse_variable(self) -> Expression:
        s = self.scanner
        start = s.pos
        location = s.location()
        s.advance()
        drive: Optional[str] = None
        if s.peek() == "{":
            close = s.source.find("}", s.pos)
            if close < 0:
                raise s.error("Missing closing '}' in variable name.", start)
            inner = s.source[s.pos + 1:close]
            s.pos = close + 1
            prefix, sep, rest = inner.partition(":")
            if sep and prefix and all(is_identifier_char(c) for c in prefix):
                drive, name = prefix, rest
            else:
                name = inner
        elif s.peek() in ("$", "^") or (s.peek() == "?" and not is_identifier_char(s.peek(1))):
            name = s.advance()
        elif is_identifier_char(s.peek()):
            name = s.read_identifier()
            if s.peek() == ":" and is_identifier_char(s.peek(1)):
                s.advance()
                drive, name = name, s.read_identifier()
        else:
            return StringConstant(text="$", value="$", quote="bare", location=location)
        return VariableExpression(text=s.text_from(start), name=name, drive=drive, location=location)

    def _parse_member_suffix(self, start: int, expr: Expression, location: SourceLocation) -> Expression:
        s = self.scanner
        consumed = False
        while True:
            if s.peek() == "." and is_identifier_start(s.peek(1)):
                s.advance()
                s.read_identifier()
                if s.peek() == "(":
                    s.read_balanced()
                consumed = True
            elif s.peek() == "[":
                s.read_balanced()
                consumed = True
            else:
                break
        if consumed:
            return RawExpression(text=s.text_from(start), kind="member", location=location)
        return expr

    def _parse_hashtable(self) -> HashtableLiteral:
        s = self.scanner
        start = s.pos
        location = s.location()
        s.advance(2)
        entries: List[HashtableEntry] = []
        while True:
            s.skip_whitespace()
            if s.peek() == ";":
                s.advance()
                continue
            if s.at_end():
                raise s.error("Missing closing '}' in statement block or type definition.", start)
            if s.peek() == "}":
                s.advance()
                break
            key = self._parse_hashtable_key()
            s.skip_inline_whitespace()
            if s.peek() != "=":
                raise s.error("Missing '=' operator after key in hash literal.")
            s.advance()
            s.skip_whitespace()
            if s.at_end() or s.peek() in ";}":
                raise s.error("Missing statement after '=' in hash literal.")
            value = self.parse_expression("\n;}")
            entries.append(HashtableEntry(key=key, value=value))
        return HashtableLiteral(text=s.text_from(start), entries=entries, location=location)

    def _parse_hashtable_key(self) -> Expression:
        s = self.scanner
        start = s.pos
        location = s.location()
        primary = self._parse_quoted_or_grouped(start, location)
        if primary is not None:
            return primary
        while not s.at_end() and s.peek() not in " \t\n=;}":
            s.advance()
        word = s.text_from(start)
        if not word:
            raise s.error("Missing key before '=' in hash literal.")
        return self._bareword_expression(word, location)

    # -- raw text helpers ---------------------------------------------------

    def _read_bareword_text(self) -> str:
        s = self.scanner
        start = s.pos
        while not s.at_end() and s.peek() not in _BAREWORD_END:
            if s.peek() == "`":
                if s.peek(1) == "\n":
                    break
                s.advance(2)
                continue
            s.advance()
        word = s.text_from(start)
        if not word:
            raise s.error(f"Unexpected token '{s.peek()}' in expression or statement.")
        return word

    @staticmethod
    def _bareword_expression(word: str, location: SourceLocation) -> Expression:
        if _NUMBER_RE.fullmatch(word):
            return NumberConstant(text=word, value=parse_number(word), location=location)
        if "$" in word:
            return ExpandableString(text=word, body=word, location=location)
        return StringConstant(text=word, value=word, quote="bare", location=location)

    def _consume_raw_until(self, terminators: str) -> None:
        s = self.scanner
        while not s.at_end() and s.peek() not in terminators:
            char = s.peek()
            if char in ("(", "{", "["):
                s.read_balanced()
            elif char in (")", "}", "]"):
                raise s.error(f"Unexpected token '{char}' in expression or statement.")
            elif char == "'":
                s.read_single_quoted()
            elif char == '"':
                s.read_double_quoted()
            elif s.at_here_string():
                s.read_here_string()
            elif char in (" ", "\t", "#") or (char == "<" and s.peek(1) == "#"):
                s.skip_inline_whitespace()
            elif char == "`":
                s.advance(2)
            else:
                s.advance()

    def _peek_word(self) -> str:
        s = self.scanner
        offset = 0
        while True:
            char = s.peek(offset)
            if char is None or not (char.isalnum() or char in "_-"):
                break
            offset += 1
        return s.source[s.pos:s.pos + offset]


def parse_script(source: str, path: str = "<script>", *, block: Optional[int] = None) -> ParseResult:
    """Parse one script block into a tree plus diagnostics."""
    return ScriptParser(source, path, block).parse()
