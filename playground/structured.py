"""Structured generation: model output coerced to a JSON value."""

import json
import logging
import re
from typing import Any, AsyncIterator, Dict, List, Optional

from pydantic import ValidationError
from pydantic_core import from_json

from .errors import UpstreamInvocationError
from .schema import ResolvedSchema

logger = logging.getLogger(__name__)

# Some models wrap JSON output in a ```json fence despite response_format
_FENCE_OPEN_RE = re.compile(r"^\s*```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"\s*```\s*$")


def _strip_fence(text: str) -> str:
    return _FENCE_CLOSE_RE.sub("", _FENCE_OPEN_RE.sub("", text, count=1))


def _messages(system: str, prompt: str) -> List[Dict[str, Any]]:
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": prompt},
    ]


def parse_object(text: str, schema: ResolvedSchema) -> Any:
    """Parse and validate a complete model response."""
    try:
        data = json.loads(_strip_fence(text))
    except json.JSONDecodeError as e:
        raise UpstreamInvocationError(f"No object generated: could not parse the response ({e.msg})")
    try:
        return schema.validate(data)
    except ValidationError as e:
        raise UpstreamInvocationError(
            f"No object generated: response did not match schema ({e.error_count()} errors)"
        )


async def generate_object(
    client,
    *,
    model: str,
    system: str,
    prompt: str,
    schema: ResolvedSchema,
    provider_options: Optional[Dict[str, Any]] = None,
) -> Any:
    """Single structured-generation call, no tools attached."""
    resp = await client.chat(
        model=model,
        messages=_messages(system, prompt),
        provider_options=provider_options,
        response_format=schema.response_format(),
    )
    if resp.get("error"):
        raise UpstreamInvocationError(resp["error"])
    return parse_object(resp.get("content") or "", schema)


async def stream_object(
    client,
    *,
    model: str,
    system: str,
    prompt: str,
    schema: ResolvedSchema,
    provider_options: Optional[Dict[str, Any]] = None,
) -> AsyncIterator[Any]:
    """
    Stream partial object snapshots as the JSON text grows.

    Each yielded value is the most complete parse of the text so far;
    a snapshot is only yielded when it differs from the previous one.
    The last value is the complete object, validated like generate_object.

    Raises UpstreamInvocationError when the model fails or the finished
    text does not parse or match the schema.
    """
    buffer: List[str] = []
    last: Any = None

    async for chunk in client.chat_stream(
        model=model,
        messages=_messages(system, prompt),
        provider_options=provider_options,
        response_format=schema.response_format(),
    ):
        chunk_type = chunk.get("type")
        if chunk_type == "error":
            raise UpstreamInvocationError(chunk.get("error"))
        if chunk_type != "content":
            continue

        buffer.append(chunk["content"])
        text = _strip_fence("".join(buffer)).strip()
        if not text:
            continue
        try:
            snapshot = from_json(text, allow_partial=True)
        except ValueError:
            continue
        if snapshot != last:
            last = snapshot
            yield snapshot

    # Same parse and validation as generate_object
    final = parse_object("".join(buffer), schema)
    logger.debug(f"Streamed object complete after {len(buffer)} chunks")
    if final != last:
        yield final
