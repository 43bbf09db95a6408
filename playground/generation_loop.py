"""
Core generation loop with a single attached search tool.

One step is one model call plus the execution of any tool calls it
requested. The loop ends when a step requests no tools or when the
step budget is spent; running out of steps is not an error, the
caller gets whatever text the last step produced.
"""

import json
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional

from .errors import UpstreamInvocationError
from .tools import SearchTool

logger = logging.getLogger(__name__)


@dataclass
class StepRecord:
    """Outcome of one reasoning/tool-call step."""
    text: str = ""
    tool_calls: List[Dict[str, Any]] = field(default_factory=list)
    # {"toolCallId", "toolName", "input", "output"}
    tool_results: List[Dict[str, Any]] = field(default_factory=list)
    # {"toolCallId", "toolName", "input", "errorText"}
    tool_errors: List[Dict[str, Any]] = field(default_factory=list)
    finish_reason: Optional[str] = None


@dataclass
class GenerationResult:
    """Final text and the step records that produced it."""
    text: str
    steps: List[StepRecord] = field(default_factory=list)


async def _model_turn(
    client,
    stream: bool,
    model: str,
    messages: List[Dict[str, Any]],
    tools: Optional[List[Dict[str, Any]]],
    provider_options: Optional[Dict[str, Any]],
) -> AsyncIterator[Dict[str, Any]]:
    """Run one model call, yielding gateway-style chunks either way."""
    if stream:
        async for chunk in client.chat_stream(
            model=model,
            messages=messages,
            tools=tools,
            provider_options=provider_options,
        ):
            yield chunk
        return

    resp = await client.chat(
        model=model,
        messages=messages,
        tools=tools,
        provider_options=provider_options,
    )
    if resp.get("error"):
        yield {"type": "error", "error": resp["error"]}
        return
    if resp.get("content"):
        yield {"type": "content", "content": resp["content"]}
    for tc in resp.get("tool_calls") or []:
        yield {"type": "tool_call", "tool_call": tc}
    yield {"type": "done", "finish_reason": resp.get("finish_reason")}


async def run_generation_loop(
    client,
    *,
    model: str,
    system: str,
    messages: List[Dict[str, Any]],
    tool: Optional[SearchTool],
    max_steps: int,
    provider_options: Optional[Dict[str, Any]] = None,
    stream: bool = True,
) -> AsyncIterator[Dict[str, Any]]:
    """
    Run model steps until no tool is requested or the budget is spent.

    Yields UI message stream parts as they happen:
    - {"type": "start-step"} / {"type": "finish-step", "step": StepRecord}
    - {"type": "text-start" | "text-delta" | "text-end", "id", ...}
    - {"type": "tool-input-start" | "tool-input-available", "toolCallId", "toolName", ...}
    - {"type": "tool-output-available", "toolCallId", "output"}
    - {"type": "tool-output-error", "toolCallId", "errorText"}
    - {"type": "finish", "result": GenerationResult} - always last

    Raises UpstreamInvocationError when a model call fails.
    """
    history: List[Dict[str, Any]] = [{"role": "system", "content": system}, *messages]
    tool_specs = [tool.spec()] if tool else None
    steps: List[StepRecord] = []

    for step_num in range(1, max_steps + 1):
        logger.info(f"Step {step_num}/{max_steps}: model={model}")
        yield {"type": "start-step"}

        record = StepRecord()
        text_parts: List[str] = []
        text_id = f"txt_{uuid.uuid4().hex[:8]}"

        async for chunk in _model_turn(client, stream, model, history, tool_specs, provider_options):
            chunk_type = chunk.get("type")

            if chunk_type == "content":
                if not text_parts:
                    yield {"type": "text-start", "id": text_id}
                text_parts.append(chunk["content"])
                yield {"type": "text-delta", "id": text_id, "delta": chunk["content"]}

            elif chunk_type == "tool_call":
                tc = dict(chunk["tool_call"])
                if not tc.get("id"):
                    tc["id"] = f"call_{uuid.uuid4().hex[:8]}"
                record.tool_calls.append(tc)

            elif chunk_type == "error":
                logger.error(f"Model error at step {step_num}: {chunk.get('error')}")
                raise UpstreamInvocationError(chunk.get("error"))

            elif chunk_type == "done":
                record.finish_reason = chunk.get("finish_reason")

        if text_parts:
            yield {"type": "text-end", "id": text_id}
        record.text = "".join(text_parts)

        if record.tool_calls:
            history.append({
                "role": "assistant",
                "content": record.text or None,
                "tool_calls": [
                    {
                        "id": tc["id"],
                        "type": "function",
                        "function": {"name": tc["name"], "arguments": json.dumps(tc["arguments"])},
                    }
                    for tc in record.tool_calls
                ],
            })

            for tc in record.tool_calls:
                async for part in _execute_tool_call(tool, tc, record, history):
                    yield part

        steps.append(record)
        yield {"type": "finish-step", "step": record}

        if not record.tool_calls:
            break
    else:
        logger.info(f"Step budget of {max_steps} reached, stopping")

    text = steps[-1].text if steps else ""
    yield {"type": "finish", "result": GenerationResult(text=text, steps=steps)}


async def _execute_tool_call(
    tool: Optional[SearchTool],
    tc: Dict[str, Any],
    record: StepRecord,
    history: List[Dict[str, Any]],
) -> AsyncIterator[Dict[str, Any]]:
    """Execute one tool call, recording the result or the failure."""
    call_id = tc["id"]
    name = tc["name"]
    arguments = tc["arguments"]

    yield {"type": "tool-input-start", "toolCallId": call_id, "toolName": name}
    yield {"type": "tool-input-available", "toolCallId": call_id, "toolName": name, "input": arguments}

    try:
        if tool is None or name != tool.name:
            raise LookupError(f"Model tried to call unavailable tool '{name}'")
        output = await tool.execute(arguments)
    except Exception as e:
        # Tool failures are reported back to the model, not raised
        error_text = str(e) or type(e).__name__
        logger.warning(f"Tool call {name} failed: {error_text}", exc_info=True)
        record.tool_errors.append({
            "toolCallId": call_id, "toolName": name, "input": arguments, "errorText": error_text,
        })
        history.append({"role": "tool", "tool_call_id": call_id, "content": error_text})
        yield {"type": "tool-output-error", "toolCallId": call_id, "errorText": error_text}
        return

    record.tool_results.append({
        "toolCallId": call_id, "toolName": name, "input": arguments, "output": output,
    })
    history.append({"role": "tool", "tool_call_id": call_id, "content": json.dumps(output)})
    yield {"type": "tool-output-available", "toolCallId": call_id, "output": output}


async def generate_text(client, **kwargs) -> GenerationResult:
    """Run the loop without streaming and return the final result."""
    result: Optional[GenerationResult] = None
    async for part in run_generation_loop(client, stream=False, **kwargs):
        if part["type"] == "finish":
            result = part["result"]
    return result
