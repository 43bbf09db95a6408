import json

import pytest

from playground.errors import InvalidModeError
from playground.models import GenerationRequest, Mode, UIMessage, first_text, parse_mode, to_model_messages


@pytest.mark.parametrize("value,expected", [
    ("stream", Mode.STREAM),
    ("streaming", Mode.STREAM),
    ("generate", Mode.GENERATE),
    ("stream-object", Mode.STREAM_OBJECT),
    ("object", Mode.OBJECT),
])
def test_parse_mode(value, expected):
    assert parse_mode(value) is expected


@pytest.mark.parametrize("value", ["Stream", "chat", "", None, "stream_object"])
def test_parse_mode_rejects_unknown(value):
    with pytest.raises(InvalidModeError):
        parse_mode(value)


def test_request_aliases_and_defaults():
    request = GenerationRequest.model_validate({
        "messages": [],
        "tool": "webSearch",
        "mode": "object",
        "schema": "z.object({})",
        "schemaPrompt": "vendors",
    })
    assert request.max_num_results == 3
    assert request.schema_text == "z.object({})"
    assert request.schema_prompt == "vendors"
    assert request.model


def test_content_message_becomes_text_part():
    message = UIMessage(role="user", content="hello")
    assert message.parts == [{"type": "text", "text": "hello"}]


def test_first_text():
    messages = [
        UIMessage(role="user", parts=[{"type": "file", "url": "x"}, {"type": "text", "text": "first"}]),
        UIMessage(role="user", parts=[{"type": "text", "text": "second"}]),
    ]
    assert first_text(messages) == "first"
    assert first_text([]) == ""
    assert first_text([UIMessage(role="user")]) == ""


def test_completed_tool_parts_are_replayed():
    messages = [
        UIMessage(role="user", content="Q"),
        UIMessage(role="assistant", parts=[
            {"type": "step-start"},
            {"type": "tool-webSearch", "toolCallId": "c1", "state": "output-available",
             "input": {"query": "q"}, "output": {"results": []}},
            {"type": "tool-webSearch", "toolCallId": "c2", "state": "input-available",
             "input": {"query": "pending"}},
            {"type": "text", "text": "A [1]"},
        ]),
        UIMessage(role="user", content="More"),
    ]

    converted = to_model_messages(messages)

    assert converted[0] == {"role": "user", "content": "Q"}
    assistant = converted[1]
    assert assistant["content"] == "A [1]"
    assert [tc["id"] for tc in assistant["tool_calls"]] == ["c1"]
    assert assistant["tool_calls"][0]["function"]["name"] == "webSearch"
    assert converted[2] == {"role": "tool", "tool_call_id": "c1", "content": json.dumps({"results": []})}
    assert converted[3] == {"role": "user", "content": "More"}
