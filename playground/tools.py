"""
Search tools and the tool registry.

Each tool id maps to a constructor. A fresh tool is built for every
request so that the caller's result-count bound always applies.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import httpx

from .config import config
from .errors import ToolExecutionError, ToolNotFoundError

logger = logging.getLogger(__name__)


class ValyuClient:
    """Thin async wrapper around the Valyu DeepSearch API."""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self.api_key = api_key if api_key is not None else config.valyu_api_key
        self.base_url = (base_url or config.valyu_url).rstrip("/")
        self.client = httpx.AsyncClient(
            timeout=config.tool_timeout,
            limits=httpx.Limits(max_connections=32, max_keepalive_connections=16),
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def search(
        self,
        query: str,
        search_type: str = "all",
        max_num_results: Optional[int] = None,
        included_sources: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        if not self.enabled:
            return {"error": "missing_api_key"}
        payload: Dict[str, Any] = {"query": query, "search_type": search_type}
        if max_num_results is not None:
            payload["max_num_results"] = max_num_results
        if included_sources:
            payload["included_sources"] = list(included_sources)
        return await self._post(f"{self.base_url}/deepsearch", payload)

    async def _post(self, url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        headers = {"Content-Type": "application/json", "x-api-key": self.api_key}
        try:
            resp = await self.client.post(url, json=payload, headers=headers)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            detail: Any
            try:
                detail = e.response.json()
            except Exception:
                detail = e.response.text
            return {"error": "http_status", "status_code": e.response.status_code, "detail": detail}
        except httpx.RequestError as e:
            return {"error": "request_failed", "detail": str(e)}

    async def close(self) -> None:
        if not self.client.is_closed:
            await self.client.aclose()


# Global instance
valyu = ValyuClient()


QUERY_PARAMETERS: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "query": {"type": "string", "description": "Natural-language search query"},
    },
    "required": ["query"],
    "additionalProperties": False,
}


@dataclass
class SearchTool:
    """An invocable search capability returning {title, url, content} records."""
    name: str
    description: str
    search_type: str = "all"
    included_sources: List[str] = field(default_factory=list)
    max_num_results: Optional[int] = None
    client: Optional[ValyuClient] = None

    def spec(self) -> Dict[str, Any]:
        """OpenAI function spec for this tool."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": QUERY_PARAMETERS,
            },
        }

    async def execute(self, arguments: Any) -> Dict[str, Any]:
        if not isinstance(arguments, dict) or not str(arguments.get("query", "")).strip():
            raise ToolExecutionError(f"Invalid input for {self.name}: a non-empty 'query' is required")

        client = self.client or valyu
        query = str(arguments["query"]).strip()
        logger.info(f"Tool {self.name}: query={query[:80]!r} max_results={self.max_num_results}")

        data = await client.search(
            query,
            search_type=self.search_type,
            max_num_results=self.max_num_results,
            included_sources=self.included_sources,
        )
        if data.get("error") or data.get("success") is False:
            raise ToolExecutionError(f"{self.name} failed: {_describe_error(data)}")

        return {"results": data.get("results") or []}


def _describe_error(data: Dict[str, Any]) -> str:
    if data.get("status_code"):
        return f"HTTP {data['status_code']}"
    detail = data.get("detail") or data.get("error")
    return str(detail) if detail else "unknown error"


# ============================================================================
# Registry
# ============================================================================

class ToolId(str, Enum):
    WEB_SEARCH = "webSearch"
    FINANCE_SEARCH = "financeSearch"
    PAPER_SEARCH = "paperSearch"
    BIO_SEARCH = "bioSearch"
    PATENT_SEARCH = "patentSearch"
    SEC_SEARCH = "secSearch"
    ECONOMICS_SEARCH = "economicsSearch"
    COMPANY_RESEARCH = "companyResearch"


def _factory(
    tool_id: ToolId,
    description: str,
    search_type: str = "proprietary",
    sources: Optional[List[str]] = None,
) -> Callable[..., SearchTool]:
    def build(max_num_results: Optional[int] = None) -> SearchTool:
        return SearchTool(
            name=tool_id.value,
            description=description,
            search_type=search_type,
            included_sources=list(sources or []),
            max_num_results=max_num_results,
        )
    return build


@dataclass(frozen=True)
class ToolDescriptor:
    id: ToolId
    factory: Callable[..., SearchTool]
    bounded: bool = True

    def build(self, max_num_results: int) -> SearchTool:
        if not self.bounded:
            return self.factory()
        return self.factory(max_num_results=max_num_results)


TOOL_REGISTRY: Dict[ToolId, ToolDescriptor] = {
    ToolId.WEB_SEARCH: ToolDescriptor(ToolId.WEB_SEARCH, _factory(
        ToolId.WEB_SEARCH,
        "Search the web for current information, news and articles.",
        search_type="web",
    )),
    ToolId.FINANCE_SEARCH: ToolDescriptor(ToolId.FINANCE_SEARCH, _factory(
        ToolId.FINANCE_SEARCH,
        "Search financial data: stock prices, earnings, market data and company financials.",
        sources=["valyu/valyu-stocks-US", "valyu/valyu-earnings-US", "valyu/valyu-sec-filings"],
    )),
    ToolId.PAPER_SEARCH: ToolDescriptor(ToolId.PAPER_SEARCH, _factory(
        ToolId.PAPER_SEARCH,
        "Search academic papers and research publications.",
        sources=["valyu/valyu-arxiv", "valyu/valyu-pubmed", "valyu/valyu-biorxiv"],
    )),
    ToolId.BIO_SEARCH: ToolDescriptor(ToolId.BIO_SEARCH, _factory(
        ToolId.BIO_SEARCH,
        "Search biomedical literature, clinical trials and drug information.",
        sources=["valyu/valyu-pubmed", "valyu/valyu-clinical-trials", "valyu/valyu-drug-labels"],
    )),
    ToolId.PATENT_SEARCH: ToolDescriptor(ToolId.PATENT_SEARCH, _factory(
        ToolId.PATENT_SEARCH,
        "Search patent filings, claims and assignees.",
        sources=["valyu/valyu-patents"],
    )),
    ToolId.SEC_SEARCH: ToolDescriptor(ToolId.SEC_SEARCH, _factory(
        ToolId.SEC_SEARCH,
        "Search SEC filings such as 10-K, 10-Q and 8-K reports.",
        sources=["valyu/valyu-sec-filings"],
    )),
    ToolId.ECONOMICS_SEARCH: ToolDescriptor(ToolId.ECONOMICS_SEARCH, _factory(
        ToolId.ECONOMICS_SEARCH,
        "Search economic indicators and statistics (CPI, unemployment, GDP).",
        sources=["valyu/valyu-bls", "valyu/valyu-fred", "valyu/valyu-world-bank"],
    )),
    # Company research takes no result bound
    ToolId.COMPANY_RESEARCH: ToolDescriptor(ToolId.COMPANY_RESEARCH, _factory(
        ToolId.COMPANY_RESEARCH,
        "Research a company: profile, products, financials, leadership and competitors.",
        search_type="all",
    ), bounded=False),
}


def resolve_tool(tool_id: Any) -> ToolDescriptor:
    """Look up a tool descriptor, rejecting unknown ids."""
    try:
        return TOOL_REGISTRY[ToolId(tool_id)]
    except (ValueError, KeyError):
        raise ToolNotFoundError(tool_id)


def build_tool(tool_id: Any, max_num_results: int) -> SearchTool:
    """Resolve and construct a fresh tool instance."""
    return resolve_tool(tool_id).build(max_num_results)
