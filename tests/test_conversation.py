from datetime import date

import pytest

from playground.conversation import build_system_prompt, format_long_date, generate_conversation
from playground.models import GenerationRequest
from playground.tools import build_tool
from tests.fakes import FakeGatewayClient, FakeValyuClient, text_turn, tool_turn


def _request(model="openai/gpt-oss-120b"):
    return GenerationRequest.model_validate({
        "messages": [{"role": "user", "content": "What is X?"}],
        "tool": "webSearch",
        "model": model,
        "mode": "generate",
    })


def test_long_date_format():
    assert format_long_date(date(2024, 1, 1)) == "Monday, January 1, 2024"


def test_system_prompt_is_dated_and_asks_for_inline_citations():
    prompt = build_system_prompt(date(2024, 1, 1))
    assert prompt.startswith("Today is Monday, January 1, 2024.")
    assert '"fact [1]"' in prompt


@pytest.mark.asyncio
async def test_generate_returns_last_step_text():
    tool = build_tool("webSearch", 3)
    tool.client = FakeValyuClient()
    client = FakeGatewayClient([tool_turn(), text_turn("fact [1]")])

    assert await generate_conversation(client, _request(), tool) == {"text": "fact [1]"}
    assert client.calls[0]["messages"][0]["content"].startswith("Today is ")
    assert client.calls[0]["messages"][1] == {"role": "user", "content": "What is X?"}


@pytest.mark.asyncio
async def test_routing_only_for_low_latency_models():
    tool = build_tool("webSearch", 3)
    client = FakeGatewayClient([text_turn("a"), text_turn("b")])

    await generate_conversation(client, _request("openai/gpt-oss-120b"), tool)
    await generate_conversation(client, _request("xai/grok-4"), tool)

    assert client.calls[0]["provider_options"] == {"gateway": {"order": ["groq"]}}
    assert client.calls[1]["provider_options"] is None


@pytest.mark.asyncio
async def test_conversation_budget_is_ten_steps():
    tool = build_tool("webSearch", 3)
    tool.client = FakeValyuClient()
    client = FakeGatewayClient(default_turn=tool_turn())

    await generate_conversation(client, _request(), tool)

    assert len(client.calls) == 10
