"""
Mode dispatch for the primary endpoint.

Request parsing, mode matching and tool resolution all happen before
any model call, so bad input never costs an invocation.
"""

import logging
from typing import Any

from fastapi import Response
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError

from .conversation import generate_conversation, stream_conversation
from .errors import InvalidRequestError, error_message
from .models import GenerationRequest, Mode, parse_mode
from .pipeline import run_pipeline
from .stream import UI_STREAM_HEADERS, ui_message_stream
from .tools import build_tool

logger = logging.getLogger(__name__)


def describe_validation_error(e: ValidationError) -> str:
    first = e.errors()[0]
    location = ".".join(str(p) for p in first.get("loc", ())) or "body"
    return f"{location}: {first.get('msg', 'invalid value')}"


def parse_request(body: Any) -> GenerationRequest:
    if not isinstance(body, dict):
        raise InvalidRequestError("Request body must be a JSON object")
    try:
        return GenerationRequest.model_validate(body)
    except ValidationError as e:
        raise InvalidRequestError(describe_validation_error(e))


def error_response(exc: BaseException, status_code: int = 500) -> JSONResponse:
    return JSONResponse({"error": error_message(exc)}, status_code=status_code)


async def dispatch(body: Any, client) -> Response:
    """
    Route one request to its strategy.

    stream         -> UI message stream (SSE)
    generate       -> {"text"}
    stream-object  -> {"object"} (final snapshot of a streamed object)
    object         -> {"object"}

    Raises ClientInputError for bad input; upstream faults become a 500.
    """
    request = parse_request(body)
    mode = parse_mode(request.mode)
    tool = build_tool(request.tool, request.max_num_results)

    logger.info(f"Dispatch: mode={mode.value}, tool={tool.name}, model={request.model}, "
                f"max_results={tool.max_num_results}")

    if mode is Mode.STREAM:
        return StreamingResponse(
            ui_message_stream(stream_conversation(client, request, tool)),
            media_type="text/event-stream",
            headers=UI_STREAM_HEADERS,
        )

    try:
        if mode is Mode.GENERATE:
            payload = await generate_conversation(client, request, tool)
        else:
            payload = await run_pipeline(client, request, tool, stream=mode is Mode.STREAM_OBJECT)
    except Exception as e:
        logger.error(f"{mode.value} request failed: {e}", exc_info=True)
        return error_response(e)

    return JSONResponse(payload)
