"""
Search-then-structure pipeline.

Phase 1 asks the model to gather evidence with the search tool.
Phase 2 hands the raw tool output plus the model's own summary to a
structured-generation call with no tools attached. The phases run
strictly one after the other.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from .config import config
from .gateway_client import provider_options_for
from .generation_loop import StepRecord, generate_text
from .models import GenerationRequest, first_text
from .schema import ResolvedSchema, resolve_schema
from .structured import generate_object, stream_object
from .tools import SearchTool

logger = logging.getLogger(__name__)

NO_RESULTS = "No search results available."

EVIDENCE_SYSTEM = (
    "You are a research assistant. Use the available search tool to find "
    "information relevant to the user's query."
)

STRUCTURE_SYSTEM_SCHEMA = (
    "You are a data extraction assistant. Extract information from the provided "
    "search data into the requested structure.\n"
    "You MUST use the exact field names defined in the schema. Do not rename, "
    "translate, omit or add top-level fields.\n"
    "Required top-level fields: {fields}.\n"
    "Use only facts present in the search data. Use empty arrays or omit optional "
    "fields when the data is missing."
)

STRUCTURE_SYSTEM_SCHEMALESS = (
    "You are a data extraction assistant. Organize the provided search data into a "
    "well-structured JSON object that best answers the user's query. Choose clear, "
    "consistent field names. Use only facts present in the search data."
)


def tool_output(entry: Any) -> Any:
    """Bare output of a tool-result entry.

    Outputs may arrive wrapped as {"result": T}; both shapes yield T.
    """
    value = entry.get("output", entry) if isinstance(entry, dict) else entry
    if isinstance(value, dict) and set(value) == {"result"}:
        return value["result"]
    return value


def collect_tool_outputs(steps: List[StepRecord]) -> List[Any]:
    """Every tool output across every step, in order."""
    return [tool_output(entry) for step in steps for entry in step.tool_results]


def build_raw_data(outputs: List[Any], summary: str) -> str:
    if outputs:
        return json.dumps(outputs, indent=2, default=str)
    return summary or NO_RESULTS


def build_synthesis_prompt(
    raw_data: str,
    summary: str,
    query: str,
    schema_prompt: Optional[str] = None,
) -> str:
    sections = [
        "Extract structured data from the search evidence below.",
        f"## Raw Search Data\n{raw_data}",
        f"## LLM Summary\n{summary or NO_RESULTS}",
        f"## User Query\n{query}",
    ]
    if schema_prompt:
        sections.append(f"## Desired Structure\n{schema_prompt}")
    return "\n\n".join(sections)


def structure_system_prompt(schema: ResolvedSchema) -> str:
    if schema.schemaless:
        return STRUCTURE_SYSTEM_SCHEMALESS
    return STRUCTURE_SYSTEM_SCHEMA.format(fields=", ".join(schema.field_names))


async def gather_evidence(client, request: GenerationRequest, tool: SearchTool) -> Dict[str, Any]:
    """Phase 1: let the model call the tool, collect what came back."""
    query = first_text(request.messages)
    result = await generate_text(
        client,
        model=request.model,
        system=EVIDENCE_SYSTEM,
        messages=[{"role": "user", "content": query}],
        tool=tool,
        max_steps=config.evidence_max_steps,
        provider_options=provider_options_for(request.model),
    )
    outputs = collect_tool_outputs(result.steps)
    logger.info(f"Evidence gathered: {len(result.steps)} steps, {len(outputs)} tool results")
    return {
        "query": query,
        "summary": result.text,
        "raw_data": build_raw_data(outputs, result.text),
    }


async def run_pipeline(
    client,
    request: GenerationRequest,
    tool: SearchTool,
    stream: bool = False,
) -> Dict[str, Any]:
    """Run both phases and return {"object": ...}."""
    evidence = await gather_evidence(client, request, tool)

    # Only consulted when no explicit schema text was given
    schema = resolve_schema(request.schema_text)
    schema_prompt = request.schema_prompt if not request.schema_text else None

    kwargs = {
        "model": request.model,
        "system": structure_system_prompt(schema),
        "prompt": build_synthesis_prompt(
            evidence["raw_data"], evidence["summary"], evidence["query"], schema_prompt,
        ),
        "schema": schema,
        "provider_options": provider_options_for(request.model),
    }
    logger.info(f"Structuring: model={request.model}, schemaless={schema.schemaless}, stream={stream}")

    if not stream:
        return {"object": await generate_object(client, **kwargs)}

    # Partial snapshots are drained; the last one is the validated object
    final: Any = None
    async for snapshot in stream_object(client, **kwargs):
        final = snapshot
    return {"object": final}
