import re

import pytest

from pwshc.codegen.csharp import CSharpEmitter
from pwshc.config import CompilerConfig
from pwshc.errors import PwshcCompileError
from pwshc.ir import BlockPlan, EmitText, ModulePlan, ReadFirstItem, ReadFirstItemFromEnv
from pwshc.protocol import constants


def _plan(*operations) -> ModulePlan:
    return ModulePlan(source_name="index.html", blocks=[BlockPlan(index=0, operations=list(operations))])


def test_module_scaffold():
    code = CSharpEmitter().render(_plan(EmitText("hello")))

    assert code.startswith(
        "// Auto-generated from inline PowerShell (index.html) at build time\n#nullable enable\nusing System;\n"
    )
    assert "namespace PsWasmApp;\n" in code
    assert "public static partial class CompiledPowerShell\n{\n" in code
    assert "    public static async Task<string> ExecuteAsync()\n    {\n        var outputs = new List<string>();\n" in code
    assert code.endswith("}\n")
    assert code.count("ReadFirstCosmosItemViaRestAsync(string connectionString") == 1


def test_block_and_epilogue():
    code = CSharpEmitter().render(_plan(EmitText("hello"), EmitText('say "hi"')))

    expected = (
        "        // block 0\n"
        "        {\n"
        "            var blockOutputs = new List<string>();\n"
        '            blockOutputs.Add("hello");\n'
        '            blockOutputs.Add("say \\"hi\\"");\n'
        "            outputs.Add(string.Join(Environment.NewLine, blockOutputs));\n"
        "        }\n"
        "\n"
        "        if (outputs.Count == 0)\n"
        "        {\n"
        '            return "No output generated.";\n'
        "        }\n"
        "\n"
        "        return string.Join(Environment.NewLine, outputs);\n"
        "    }\n"
    )
    assert expected in code


def test_each_block_declares_its_own_outputs():
    plan = ModulePlan(
        source_name="index.html",
        blocks=[BlockPlan(0, [EmitText("a")]), BlockPlan(1, []), BlockPlan(2, [EmitText("c")])],
    )
    code = CSharpEmitter().render(plan)

    assert code.count("var blockOutputs = new List<string>();") == 3
    assert code.count("outputs.Add(string.Join(Environment.NewLine, blockOutputs));") == 3


def test_static_read():
    op = ReadFirstItem(
        connection_string="AccountEndpoint=https://acct.documents.azure.com:443/;AccountKey=abc==;",
        database="db",
        container="items",
        query="SELECT TOP 1 * FROM c",
        partition_key="",
    )
    code = CSharpEmitter().render(_plan(op))

    assert (
        '            blockOutputs.Add(await ReadFirstCosmosItemViaRestAsync(connectionString: '
        '"AccountEndpoint=https://acct.documents.azure.com:443/;AccountKey=abc==;", databaseName: "db", '
        'containerName: "items", query: "SELECT TOP 1 * FROM c", partitionKey: ""));\n'
    ) in code


def test_dynamic_read():
    op = ReadFirstItemFromEnv(
        env_var="KEY",
        endpoint="https://acct.documents.azure.com:443/",
        database="db",
        container="items",
        query="SELECT TOP 1 * FROM c",
        partition_key="pk",
    )
    code = CSharpEmitter().render(_plan(op))

    assert 'string? accountKey = Environment.GetEnvironmentVariable("KEY");' in code
    assert "accountKey = BuildSecrets.CosmosKey;" in code
    assert 'blockOutputs.Add("Environment variable KEY not set.");' in code
    assert "accountKey = accountKey.TrimStart('=');" in code
    assert 'string endpoint = "https://acct.documents.azure.com:443/";' in code
    assert 'string connectionString = $"AccountEndpoint={endpoint};AccountKey={accountKey};";' in code
    assert 'connectionString: connectionString, databaseName: "db"' in code
    assert 'partitionKey: "pk"));' in code


def test_two_dynamic_reads_are_scoped_separately():
    op = ReadFirstItemFromEnv("KEY", "https://a.documents.azure.com:443/", "db", "c", "q")
    code = CSharpEmitter().render(_plan(op, op))

    body = code.split("public static async Task<string> ExecuteAsync()")[1].split("private static async")[0]
    assert body.count("string? accountKey") == 2
    assert body.count("{") == body.count("}")


def test_configuration_is_applied():
    config = CompilerConfig(
        namespace="Site.Generated",
        class_name="Scripts",
        secret_reference="Secrets.Key",
        no_output_message="(nothing)",
        newline="\r\n",
    )
    code = CSharpEmitter(config).render(
        ModulePlan(source_name="page.html", blocks=[BlockPlan(0, [ReadFirstItemFromEnv("K", "e", "d", "c", "q")])])
    )

    assert "namespace Site.Generated;\r\n" in code
    assert "public static partial class Scripts\r\n" in code
    assert "accountKey = Secrets.Key;" in code
    assert 'return "(nothing)";' in code
    assert "\n" not in code.replace("\r\n", "")


def test_rendering_is_deterministic():
    plan = _plan(EmitText("x"), ReadFirstItem("AccountEndpoint=e;AccountKey=k;", "d", "c", "q"))
    assert CSharpEmitter().render(plan) == CSharpEmitter().render(plan)


def test_unknown_operation_is_rejected():
    with pytest.raises(PwshcCompileError):
        CSharpEmitter().render(_plan(object()))


def test_helper_carries_protocol_constants():
    helpers = CSharpEmitter().render_helpers()

    for value in (
        constants.API_VERSION,
        constants.HEADER_DATE,
        constants.HEADER_VERSION,
        constants.HEADER_IS_QUERY,
        constants.HEADER_CROSS_PARTITION,
        constants.HEADER_PARTITION_KEY,
        constants.ACCEPT_MEDIA_TYPE,
        constants.QUERY_MEDIA_TYPE,
        constants.INVALID_CONNECTION_STRING,
        constants.NO_ITEMS_FOUND,
        constants.DOCUMENTS_PROPERTY,
        constants.ENDPOINT_KEY,
        constants.ACCOUNT_KEY,
    ):
        assert f'"{value}"' in helpers, value

    assert f'BuildAuthToken("{constants.VERB}", "{constants.RESOURCE_TYPE}", resourceLink, date, key)' in helpers
    assert f"type={constants.TOKEN_TYPE}&ver={constants.TOKEN_VERSION}&sig={{signature}}" in helpers
    assert f'$"{constants.REST_ERROR_PREFIX} {{(int)response.StatusCode}}' in helpers
    assert f'$"{constants.FAILURE_PREFIX}: {{ex.Message}}"' in helpers
    assert not re.search(r"\{\{|\}\}|\{%", helpers)
