import logging

from pwshc.compiler import PowerShellCompiler, compile_html
from pwshc.config import CompilerConfig
from pwshc.ir import EmitText


def _page(*blocks: str) -> str:
    scripts = "\n".join(f'<script type="pwsh">\n{body}\n</script>' for body in blocks)
    return f"<html><body>\n{scripts}\n</body></html>"


def test_compilation_is_idempotent():
    html = _page(
        "Write-Output 'a'",
        "$p = @{ AccountName = 'acct'; DatabaseName = 'db'; ContainerName = 'c'; AccountKey = $env:KEY }\n"
        "Read-AzCosmosItems @p",
    )
    compiler = PowerShellCompiler(environ={})

    first = compiler.compile_markup(html)
    second = compiler.compile_markup(html)
    assert first == second
    assert PowerShellCompiler(environ={}).compile_markup(html) == first


def test_recognized_and_unrecognized_commands():
    html = _page("Write-Output 'a'\nGet-Date\nWrite-Output 'b'\nStart-Sleep 1\nNew-Item x")
    plan = PowerShellCompiler(environ={}).plan_markup(html)

    assert len(plan.blocks) == 1
    assert plan.blocks[0].operations == [EmitText("a"), EmitText("b")]


def test_block_with_parse_errors_is_skipped(caplog):
    html = _page("Write-Output 'ok'", "Write-Output 'broken", "Write-Output 'after'")

    with caplog.at_level(logging.WARNING, logger="pwshc.compiler.core"):
        plan = PowerShellCompiler(environ={}).plan_markup(html)

    assert [block.index for block in plan.blocks] == [0, 2]
    assert "Parse errors in PowerShell block 1" in caplog.text
    assert "[SYNTAX_ERROR] at index.html, block 1, line 1" in caplog.text


def test_bindings_do_not_leak_between_blocks():
    html = _page(
        "$p = @{ AccountName = 'acct'; DatabaseName = 'db'; ContainerName = 'c'; AccountKey = $env:KEY }",
        "$x = 'hidden'\nRead-AzCosmosItems @p",
        "Write-Output \"[$x]\"",
    )
    plan = PowerShellCompiler(environ={}).plan_markup(html)

    assert plan.blocks[0].operations == []
    assert plan.blocks[1].operations == [EmitText("Cosmos parameters missing.")]
    assert plan.blocks[2].operations == [EmitText("[$x]")]


def test_compile_from_html_uses_file_name(tmp_path):
    page = tmp_path / "site.html"
    page.write_text(_page("Write-Output 'hello'"), encoding="utf-8")

    code = compile_html(page)

    assert code.startswith("// Auto-generated from inline PowerShell (site.html) at build time\n#nullable enable\n")
    assert 'blockOutputs.Add("hello");' in code


def test_missing_file_still_produces_a_module(tmp_path):
    code = PowerShellCompiler(CompilerConfig(namespace="Empty.App")).compile_from_html(tmp_path / "absent.html")

    assert "namespace Empty.App;" in code
    assert "var blockOutputs" not in code
    assert 'return "No output generated.";' in code
