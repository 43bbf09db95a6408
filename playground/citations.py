"""Citation extraction from completed tool-call parts."""

import json
from typing import Any, Dict, Iterable, List, Mapping

from pydantic import BaseModel

from .config import config
from .models import Citation, is_tool_part

FALLBACK_TITLE = "Source"


def _as_dict(part: Any) -> Dict[str, Any]:
    if isinstance(part, BaseModel):
        return part.model_dump()
    return part if isinstance(part, Mapping) else {}


def _result_entries(output: Mapping) -> List[Any]:
    # "results" wins whenever it is present, even if empty
    results = output.get("results")
    if results is None:
        results = output.get("search_results")
    return results if isinstance(results, list) else []


def _snippet(content: Any) -> Any:
    if content is None:
        return None
    if not isinstance(content, str):
        content = json.dumps(content)
    return content[:config.citation_snippet_chars]


def extract_citations(parts: Iterable[Any]) -> List[Citation]:
    """
    Number every result url found in completed tool parts.

    Numbering starts at "1" on each call and follows order of
    appearance. Entries without a url are skipped and take no number;
    repeated urls are not merged.
    """
    citations: List[Citation] = []
    index = 1

    for raw in parts:
        part = _as_dict(raw)
        if not is_tool_part(part) or part.get("state") != "output-available":
            continue
        output = part.get("output")
        if not output or not isinstance(output, Mapping):
            continue

        for entry in _result_entries(output):
            if not isinstance(entry, Mapping) or not entry.get("url"):
                continue
            citations.append(Citation(
                number=str(index),
                title=str(entry.get("title") or FALLBACK_TITLE),
                url=str(entry["url"]),
                description=_snippet(entry.get("content")),
            ))
            index += 1

    return citations
