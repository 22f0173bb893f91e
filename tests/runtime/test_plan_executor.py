import os
from datetime import datetime, timezone

import pytest

from pwshc.config import CompilerConfig
from pwshc.errors import PwshcCompileError
from pwshc.ir import BlockPlan, EmitText, ModulePlan, ReadFirstItem, ReadFirstItemFromEnv
from pwshc.protocol import read_first_item_via_rest
from pwshc.runtime import PlanExecutor, run_markup

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)
ENDPOINT = "https://acct.documents.azure.com:443/"


def _request_fingerprint(request):
    return (request.method, str(request.url), sorted(request.headers.items()), request.content)


@pytest.mark.asyncio
async def test_empty_plan_yields_no_output_message():
    result = await PlanExecutor(environ={}).execute(ModulePlan(source_name="index.html"))
    assert result == "No output generated."


@pytest.mark.asyncio
async def test_blocks_and_lines_are_joined(cosmos_documents):
    plan = ModulePlan(
        source_name="index.html",
        blocks=[BlockPlan(0, [EmitText("a"), EmitText("b")]), BlockPlan(1, []), BlockPlan(2, [EmitText("c")])],
    )
    transport = cosmos_documents()

    async with transport.client() as client:
        result = await PlanExecutor(environ={}, client=client).execute(plan)

    assert result == os.linesep.join(["a" + os.linesep + "b", "", "c"])


@pytest.mark.asyncio
async def test_env_operation_matches_direct_protocol_call(master_key, cosmos_documents):
    operation = ReadFirstItemFromEnv(
        env_var="COSMOS_KEY",
        endpoint=ENDPOINT,
        database="testdb",
        container="testcoll",
        query="SELECT TOP 1 * FROM c",
        partition_key="pk",
    )
    plan = ModulePlan(source_name="index.html", blocks=[BlockPlan(0, [operation])])
    body = '{"Documents":[{"id":"1","v":[1,2]}]}'

    via_executor = cosmos_documents(body)
    async with via_executor.client() as client:
        executed = await PlanExecutor(environ={"COSMOS_KEY": "=" + master_key}, client=client, now=NOW).execute(plan)

    direct = cosmos_documents(body)
    async with direct.client() as client:
        called = await read_first_item_via_rest(
            f"AccountEndpoint={ENDPOINT};AccountKey={master_key};",
            "testdb",
            "testcoll",
            "SELECT TOP 1 * FROM c",
            "pk",
            client=client,
            now=NOW,
        )

    assert executed == called == '{"id":"1","v":[1,2]}'
    assert [_request_fingerprint(r) for r in via_executor.requests] == [
        _request_fingerprint(r) for r in direct.requests
    ]


@pytest.mark.asyncio
async def test_env_operation_falls_back_to_build_secret(master_key, cosmos_documents):
    plan = ModulePlan("index.html", [BlockPlan(0, [ReadFirstItemFromEnv("UNSET", ENDPOINT, "db", "c", "q")])])
    transport = cosmos_documents()

    async with transport.client() as client:
        executor = PlanExecutor(environ={"UNSET": "  ", "PWSHC_BUILD_SECRET": master_key}, client=client, now=NOW)
        result = await executor.execute(plan)

    assert result == "No items found."
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_env_operation_without_any_key(cosmos_documents):
    plan = ModulePlan("index.html", [BlockPlan(0, [ReadFirstItemFromEnv("COSMOS_KEY", ENDPOINT, "db", "c", "q")])])
    transport = cosmos_documents()

    async with transport.client() as client:
        result = await PlanExecutor(environ={}, client=client).execute(plan)

    assert result == "Environment variable COSMOS_KEY not set."
    assert transport.requests == []


@pytest.mark.asyncio
async def test_static_operation(master_key, cosmos_documents):
    operation = ReadFirstItem(f"AccountEndpoint={ENDPOINT};AccountKey={master_key};", "db", "c", "q")
    transport = cosmos_documents('{"Documents":[{"id":"static"}]}')

    async with transport.client() as client:
        result = await PlanExecutor(environ={}, client=client).execute(ModulePlan("index.html", [BlockPlan(0, [operation])]))

    assert result == '{"id":"static"}'


@pytest.mark.asyncio
async def test_unknown_operation_is_rejected(cosmos_documents):
    async with cosmos_documents().client() as client:
        with pytest.raises(PwshcCompileError):
            await PlanExecutor(environ={}, client=client).execute(ModulePlan("index.html", [BlockPlan(0, [object()])]))


@pytest.mark.asyncio
async def test_run_markup_compiles_and_executes(master_key, cosmos_documents):
    html = """
<script type="pwsh">
$p = @{ AccountName = 'acct'; DatabaseName = 'db'; ContainerName = 'c'; AccountKey = $env:COSMOS_KEY }
Write-Output 'before'
Read-AzCosmosItems @p
</script>
<script type="pwsh">Write-Output "done"</script>
"""
    transport = cosmos_documents('{"Documents":[{"id":"42"}]}')

    async with transport.client() as client:
        result = await run_markup(html, CompilerConfig(), environ={"COSMOS_KEY": master_key}, client=client, now=NOW)

    assert result == os.linesep.join(["before" + os.linesep + '{"id":"42"}', "done"])
    [request] = transport.requests
    assert request.url.path == "/dbs/db/colls/c/docs"
