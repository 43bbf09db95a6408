import json

import pytest
import respx
from httpx import Response

from playground.errors import ToolExecutionError, ToolNotFoundError
from playground.tools import TOOL_REGISTRY, SearchTool, ToolId, ValyuClient, build_tool, resolve_tool
from tests.fakes import FakeValyuClient


def test_every_registered_id_resolves():
    assert len(TOOL_REGISTRY) == 8
    for tool_id in ToolId:
        tool = build_tool(tool_id.value, 3)
        assert tool.name == tool_id.value


@pytest.mark.parametrize("tool_id", ["nope", "", "WebSearch", None, 7])
def test_unknown_tool_id_is_rejected(tool_id):
    with pytest.raises(ToolNotFoundError) as exc:
        resolve_tool(tool_id)
    assert exc.value.message == "Invalid tool"
    assert exc.value.status_code == 400


def test_bounded_tools_carry_result_count():
    assert build_tool("webSearch", 7).max_num_results == 7
    assert build_tool("paperSearch", 1).max_num_results == 1


def test_company_research_ignores_result_count():
    assert TOOL_REGISTRY[ToolId.COMPANY_RESEARCH].bounded is False
    assert build_tool("companyResearch", 7).max_num_results is None


def test_fresh_instance_per_build():
    first = build_tool("financeSearch", 3)
    second = build_tool("financeSearch", 3)
    assert first is not second
    first.included_sources.append("mutated")
    assert "mutated" not in second.included_sources


def test_tool_spec_shape():
    spec = build_tool("secSearch", 3).spec()
    assert spec["type"] == "function"
    assert spec["function"]["name"] == "secSearch"
    assert spec["function"]["parameters"]["required"] == ["query"]


@pytest.mark.asyncio
async def test_execute_passes_bound_and_returns_results():
    fake = FakeValyuClient()
    tool = build_tool("webSearch", 5)
    tool.client = fake

    output = await tool.execute({"query": "  data centers  "})

    assert output == {"results": fake.results}
    assert fake.calls[0]["query"] == "data centers"
    assert fake.calls[0]["max_num_results"] == 5
    assert fake.calls[0]["search_type"] == "web"


@pytest.mark.asyncio
async def test_execute_uses_global_client(fake_valyu):
    await build_tool("bioSearch", 2).execute({"query": "mRNA"})
    assert fake_valyu.calls[0]["included_sources"]


@pytest.mark.asyncio
async def test_execute_raises_on_error_response():
    tool = SearchTool(name="webSearch", description="d", client=FakeValyuClient(error={"error": "missing_api_key"}))
    with pytest.raises(ToolExecutionError, match="missing_api_key"):
        await tool.execute({"query": "x"})


@pytest.mark.asyncio
@pytest.mark.parametrize("arguments", [{}, {"query": "   "}, "not a dict"])
async def test_execute_rejects_bad_input(arguments):
    fake = FakeValyuClient()
    tool = SearchTool(name="webSearch", description="d", client=fake)
    with pytest.raises(ToolExecutionError):
        await tool.execute(arguments)
    assert fake.calls == []


@pytest.mark.asyncio
async def test_valyu_search_payload_and_headers():
    client = ValyuClient("test-key", base_url="http://valyu.test/v1")
    captured = {}
    try:
        with respx.mock(assert_all_called=True) as respx_mock:
            def handler(request):
                captured["json"] = json.loads(request.content.decode("utf-8"))
                captured["headers"] = request.headers
                return Response(200, json={"success": True, "results": []})

            respx_mock.post("http://valyu.test/v1/deepsearch").mock(side_effect=handler)
            resp = await client.search("hello", search_type="proprietary", max_num_results=4,
                                       included_sources=["valyu/valyu-arxiv"])
            assert resp == {"success": True, "results": []}
            assert captured["json"] == {
                "query": "hello",
                "search_type": "proprietary",
                "max_num_results": 4,
                "included_sources": ["valyu/valyu-arxiv"],
            }
            assert captured["headers"]["x-api-key"] == "test-key"
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_valyu_search_handles_http_error():
    client = ValyuClient("test-key", base_url="http://valyu.test/v1")
    try:
        with respx.mock(assert_all_called=True) as respx_mock:
            respx_mock.post("http://valyu.test/v1/deepsearch").mock(
                return_value=Response(500, json={"error": "boom"})
            )
            resp = await client.search("hello")
            assert resp["error"] == "http_status"
            assert resp["status_code"] == 500
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_valyu_without_key_makes_no_request():
    client = ValyuClient("", base_url="http://valyu.test/v1")
    try:
        with respx.mock(assert_all_called=False) as respx_mock:
            route = respx_mock.post("http://valyu.test/v1/deepsearch")
            resp = await client.search("hello")
            assert resp == {"error": "missing_api_key"}
            assert not route.called
    finally:
        await client.close()
