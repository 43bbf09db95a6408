"""Data models for the playground."""

import json
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .config import config
from .errors import InvalidModeError


# ============================================================================
# Request Models
# ============================================================================

class Mode(str, Enum):
    """Response mode for the primary endpoint."""
    STREAM = "stream"
    GENERATE = "generate"
    STREAM_OBJECT = "stream-object"
    OBJECT = "object"

    @property
    def is_object(self) -> bool:
        return self in (Mode.STREAM_OBJECT, Mode.OBJECT)

    @property
    def is_streaming(self) -> bool:
        return self in (Mode.STREAM, Mode.STREAM_OBJECT)


# Historical names accepted on input and normalised immediately
MODE_ALIASES: Dict[str, Mode] = {
    "streaming": Mode.STREAM,
}


def parse_mode(value: Any) -> Mode:
    """Match a mode string exactly against the closed set."""
    if isinstance(value, str):
        if value in MODE_ALIASES:
            return MODE_ALIASES[value]
        try:
            return Mode(value)
        except ValueError:
            pass
    raise InvalidModeError(value)


class UIMessage(BaseModel):
    """Chat message as sent by the playground UI: a role plus typed parts."""
    id: Optional[str] = None
    role: str
    parts: List[Dict[str, Any]] = Field(default_factory=list)
    content: Optional[str] = None

    @model_validator(mode="after")
    def _content_as_text_part(self):
        # OpenAI-style {"role", "content"} messages become a single text part
        if not self.parts and self.content:
            self.parts = [{"type": "text", "text": self.content}]
        return self


class GenerationRequest(BaseModel):
    """Body of POST /api/chat."""
    model_config = ConfigDict(populate_by_name=True)

    messages: List[UIMessage]
    tool: str
    model: str = Field(default_factory=lambda: config.default_model)
    max_num_results: int = Field(default_factory=lambda: config.default_max_results, alias="maxNumResults", gt=0)
    mode: str
    schema_text: Optional[str] = Field(default=None, alias="schema")
    schema_prompt: Optional[str] = Field(default=None, alias="schemaPrompt")


class SchemaDraftRequest(BaseModel):
    """Body of POST /api/generate-schema."""
    prompt: Optional[str] = None


class CitationRequest(BaseModel):
    """Body of POST /api/citations: raw parts, or a whole message."""
    parts: List[Dict[str, Any]] = Field(default_factory=list)
    message: Optional[UIMessage] = None


# ============================================================================
# Response Models
# ============================================================================

class Citation(BaseModel):
    """Numbered source reference derived from a tool result."""
    number: str
    title: str
    url: str
    description: Optional[str] = None


# ============================================================================
# Message Conversion
# ============================================================================

def is_tool_part(part: Dict[str, Any]) -> bool:
    part_type = str(part.get("type", ""))
    return part_type == "dynamic-tool" or part_type.startswith("tool-")


def tool_part_name(part: Dict[str, Any]) -> str:
    if part.get("type") == "dynamic-tool":
        return part.get("toolName", "")
    return str(part.get("type", ""))[len("tool-"):]


def _text_of(parts: List[Dict[str, Any]]) -> str:
    return "".join(p.get("text", "") for p in parts if p.get("type") == "text")


def first_text(messages: List[UIMessage]) -> str:
    """Text of the first text part of the first message, or ""."""
    if not messages:
        return ""
    for part in messages[0].parts:
        if part.get("type") == "text":
            return part.get("text") or ""
    return ""


def to_model_messages(messages: List[UIMessage]) -> List[Dict[str, Any]]:
    """
    Convert UI messages into chat-completion messages.

    Completed tool parts on assistant messages are replayed as an
    assistant ``tool_calls`` message followed by ``tool`` messages.
    Tool parts still waiting for output are dropped.
    """
    converted: List[Dict[str, Any]] = []

    for message in messages:
        if message.role != "assistant":
            converted.append({"role": message.role, "content": _text_of(message.parts)})
            continue

        text = _text_of(message.parts)
        tool_calls = []
        tool_messages = []
        for part in message.parts:
            if not is_tool_part(part):
                continue
            state = part.get("state")
            if state == "output-available":
                content = json.dumps(part.get("output"))
            elif state == "output-error":
                content = part.get("errorText") or "Tool execution failed"
            else:
                continue
            call_id = part.get("toolCallId", "")
            tool_calls.append({
                "id": call_id,
                "type": "function",
                "function": {
                    "name": tool_part_name(part),
                    "arguments": json.dumps(part.get("input") or {}),
                },
            })
            tool_messages.append({"role": "tool", "tool_call_id": call_id, "content": content})

        if tool_calls:
            converted.append({"role": "assistant", "content": text or None, "tool_calls": tool_calls})
            converted.extend(tool_messages)
        elif text:
            converted.append({"role": "assistant", "content": text})

    return converted
