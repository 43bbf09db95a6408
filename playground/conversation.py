"""Conversational generation: free-text answers with inline citations."""

import logging
from datetime import date
from typing import Any, AsyncIterator, Dict, Optional

from .config import config
from .gateway_client import provider_options_for
from .generation_loop import generate_text, run_generation_loop
from .models import GenerationRequest, to_model_messages
from .tools import SearchTool

logger = logging.getLogger(__name__)


def format_long_date(day: date) -> str:
    """e.g. "Monday, January 1, 2024"."""
    return f"{day:%A}, {day:%B} {day.day}, {day.year}"


def build_system_prompt(today: Optional[date] = None) -> str:
    """System instructions, dated fresh on every call."""
    today = today or date.today()
    return (
        f"Today is {format_long_date(today)}. Answer using search results. "
        'Place citations immediately after each statement like "fact [1]" or "claim [2][3]", '
        "not grouped at the end. Citation numbers correspond to search result order. "
        "Write in well formatted MD."
    )


def _loop_kwargs(request: GenerationRequest, tool: SearchTool) -> Dict[str, Any]:
    return {
        "model": request.model,
        "system": build_system_prompt(),
        "messages": to_model_messages(request.messages),
        "tool": tool,
        "max_steps": config.max_steps,
        "provider_options": provider_options_for(request.model),
    }


def stream_conversation(client, request: GenerationRequest, tool: SearchTool) -> AsyncIterator[Dict[str, Any]]:
    """Incremental event handle for the stream mode."""
    logger.info(f"Streaming conversation: model={request.model}, tool={tool.name}")
    return run_generation_loop(client, stream=True, **_loop_kwargs(request, tool))


async def generate_conversation(client, request: GenerationRequest, tool: SearchTool) -> Dict[str, str]:
    """Blocking run for the generate mode; returns {"text"}."""
    logger.info(f"Generating conversation: model={request.model}, tool={tool.name}")
    result = await generate_text(client, **_loop_kwargs(request, tool))
    return {"text": result.text}
