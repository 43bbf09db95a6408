"""
Playground API endpoints.

/api/chat is the orchestration endpoint; the rest are helpers for
the playground UI (schema drafting, citations, catalogue).
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Request
from pydantic import ValidationError

from . import catalog
from .citations import extract_citations
from .dispatcher import describe_validation_error, dispatch, error_response
from .errors import InvalidRequestError
from .gateway_client import gateway
from .models import CitationRequest, SchemaDraftRequest
from .schema_assistant import draft_schema

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


async def _json_body(request: Request) -> Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidRequestError("Invalid JSON")


@router.post("/chat")
async def chat(request: Request):
    """
    Primary orchestration endpoint.

    Body: {messages, tool, model, maxNumResults, mode, schema?, schemaPrompt?}
    """
    body = await _json_body(request)
    return await dispatch(body, gateway)


@router.post("/generate-schema")
async def generate_schema(request: Request):
    """Draft schema text from a natural-language prompt."""
    body = await _json_body(request)
    try:
        draft = SchemaDraftRequest.model_validate(body)
    except ValidationError as e:
        raise InvalidRequestError(describe_validation_error(e))

    if not draft.prompt or not draft.prompt.strip():
        raise InvalidRequestError("Prompt is required")

    try:
        schema_text = await draft_schema(gateway, draft.prompt)
    except Exception as e:
        logger.error(f"Schema generation error: {e}", exc_info=True)
        return error_response(e)

    return {"schema": schema_text}


@router.post("/citations")
async def citations(request: Request):
    """Number the sources found in a message's completed tool parts."""
    body = await _json_body(request)
    try:
        req = CitationRequest.model_validate(body)
    except ValidationError as e:
        raise InvalidRequestError(describe_validation_error(e))

    parts = req.message.parts if req.message else req.parts
    return {"citations": [c.model_dump(exclude_none=True) for c in extract_citations(parts)]}


@router.get("/tools")
async def list_tools():
    return {"tools": catalog.list_tools()}


@router.get("/models")
async def list_models():
    return {"models": catalog.list_models()}
