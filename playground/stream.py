"""
UI message stream protocol.

Generation loop events are sent to the browser as SSE lines carrying
typed message parts, terminated by ``data: [DONE]``. The same parts can
be folded back into message parts for citation extraction.
"""

import json
import logging
import uuid
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional

from .errors import error_message

logger = logging.getLogger(__name__)

UI_STREAM_HEADERS = {
    "x-vercel-ai-ui-message-stream": "v1",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

SSE_DONE = "data: [DONE]\n\n"


def format_sse(part: Dict[str, Any]) -> str:
    """Format one message part as an SSE data line."""
    return f"data: {json.dumps(part)}\n\n"


def to_ui_part(event: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Drop the internal payloads the loop attaches to step/finish events."""
    event_type = event.get("type")
    if event_type == "finish-step":
        return {"type": "finish-step"}
    if event_type == "finish":
        return {"type": "finish"}
    return event


async def ui_message_stream(events: AsyncIterator[Dict[str, Any]]) -> AsyncIterator[str]:
    """
    Stream loop events as SSE.

    A failure after the stream has started cannot change the HTTP status,
    so it is sent as a final {"type": "error"} part.
    """
    yield format_sse({"type": "start", "messageId": f"msg_{uuid.uuid4().hex[:12]}"})

    try:
        async for event in events:
            part = to_ui_part(event)
            if part is not None:
                yield format_sse(part)
    except Exception as e:
        logger.error(f"Stream failed: {e}", exc_info=True)
        yield format_sse({"type": "error", "errorText": error_message(e)})

    yield SSE_DONE


def parse_sse(lines: Iterable[str]) -> List[Dict[str, Any]]:
    """Decode SSE data lines back into parts, stopping at [DONE]."""
    parts: List[Dict[str, Any]] = []
    for line in lines:
        if not line.startswith("data:"):
            continue
        data = line[5:].strip()
        if data == "[DONE]":
            break
        if data:
            parts.append(json.loads(data))
    return parts


def accumulate_parts(chunks: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Fold stream chunks into the parts of one assistant message."""
    parts: List[Dict[str, Any]] = []
    texts: Dict[str, Dict[str, Any]] = {}
    tools: Dict[str, Dict[str, Any]] = {}

    def tool_part(chunk: Dict[str, Any]) -> Dict[str, Any]:
        call_id = chunk.get("toolCallId", "")
        if call_id not in tools:
            tools[call_id] = {
                "type": f"tool-{chunk.get('toolName', '')}",
                "toolCallId": call_id,
                "state": "input-streaming",
                "input": None,
            }
            parts.append(tools[call_id])
        return tools[call_id]

    for chunk in chunks:
        chunk_type = chunk.get("type")

        if chunk_type == "start-step":
            parts.append({"type": "step-start"})

        elif chunk_type in ("text-start", "text-delta"):
            text_id = chunk.get("id", "")
            if text_id not in texts:
                texts[text_id] = {"type": "text", "text": "", "state": "streaming"}
                parts.append(texts[text_id])
            texts[text_id]["text"] += chunk.get("delta", "")

        elif chunk_type == "text-end":
            if chunk.get("id", "") in texts:
                texts[chunk["id"]]["state"] = "done"

        elif chunk_type == "tool-input-start":
            tool_part(chunk)

        elif chunk_type == "tool-input-available":
            part = tool_part(chunk)
            part["state"] = "input-available"
            part["input"] = chunk.get("input")

        elif chunk_type == "tool-output-available":
            part = tools.get(chunk.get("toolCallId", ""))
            if part is not None:
                part["state"] = "output-available"
                part["output"] = chunk.get("output")

        elif chunk_type == "tool-output-error":
            part = tools.get(chunk.get("toolCallId", ""))
            if part is not None:
                part["state"] = "output-error"
                part["errorText"] = chunk.get("errorText")

    return parts
