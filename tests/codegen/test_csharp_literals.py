import pytest

from pwshc.codegen.csharp import csharp_string_literal


@pytest.mark.parametrize(
    "value, expected",
    [
        ("hello", '"hello"'),
        ('say "hi"', r'"say \"hi\""'),
        ("C:\\temp", r'"C:\\temp"'),
        ("a\nb\r\tc", r'"a\nb\r\tc"'),
        ("\0\a\b\f\v", r'"\0\a\b\f\v"'),
        ("\x1b[0m", r'"\u001b[0m"'),
        ("line\u2028sep", r'"line\u2028sep"'),
        ("café ☕", '"café ☕"'),
        ("{braces}", '"{braces}"'),
    ],
)
def test_string_literal(value, expected):
    assert csharp_string_literal(value) == expected
