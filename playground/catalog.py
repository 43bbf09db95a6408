"""Tool and model catalogue served to the playground UI."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, List

from .config import config
from .tools import ToolId


@dataclass(frozen=True)
class ToolInfo:
    id: str
    name: str
    sample_prompt: str
    schema_name: str
    schema_description: str
    default_schema: str


TOOL_CATALOG: List[ToolInfo] = [
    ToolInfo(
        id=ToolId.WEB_SEARCH.value,
        name="Web Search",
        sample_prompt="Latest data center projects for AI inference workloads?",
        schema_name="Web Search Results",
        schema_description="Structured web search findings",
        default_schema="""z.object({
  query: z.string().describe("The search query"),
  summary: z.string().describe("Executive summary of findings"),
  results: z.array(z.object({
    title: z.string(),
    source: z.string().describe("Website or publication name"),
    url: z.string().optional(),
    keyPoints: z.array(z.string()),
    relevance: z.enum(["high", "medium", "low"]),
  })),
  conclusion: z.string(),
})""",
    ),
    ToolInfo(
        id=ToolId.FINANCE_SEARCH.value,
        name="Finance Search",
        sample_prompt="What was the stock price of Apple from the beginning of 2020 to 14th feb?",
        schema_name="Financial Data",
        schema_description="Stock prices, market data, financial metrics",
        default_schema="""z.object({
  query: z.string(),
  securities: z.array(z.object({
    ticker: z.string(),
    name: z.string(),
    prices: z.array(z.object({
      date: z.string(),
      open: z.number().optional(),
      close: z.number().optional(),
      high: z.number().optional(),
      low: z.number().optional(),
      volume: z.number().optional(),
    })),
    metrics: z.object({
      marketCap: z.string().optional(),
      peRatio: z.number().optional(),
      dividendYield: z.string().optional(),
    }).optional(),
  })),
  analysis: z.string(),
  dataSource: z.string(),
})""",
    ),
    ToolInfo(
        id=ToolId.PAPER_SEARCH.value,
        name="Paper Search",
        sample_prompt="Psilocybin effects on cellular lifespan and longevity in mice?",
        schema_name="Research Papers",
        schema_description="Academic paper summaries and citations",
        default_schema="""z.object({
  query: z.string(),
  papers: z.array(z.object({
    title: z.string(),
    authors: z.array(z.string()),
    year: z.number().optional(),
    journal: z.string().optional(),
    doi: z.string().optional(),
    abstract: z.string(),
    keyFindings: z.array(z.string()),
    methodology: z.string().optional(),
    citations: z.number().optional(),
  })),
  synthesis: z.string().describe("Overall synthesis of the research"),
  gaps: z.array(z.string()).describe("Research gaps identified"),
})""",
    ),
    ToolInfo(
        id=ToolId.BIO_SEARCH.value,
        name="Bio Search",
        sample_prompt=(
            "Summarise top completed Phase 3 metastatic melanoma trial comparing "
            "nivolumab+ipilimumab vs monotherapy"
        ),
        schema_name="Biomedical Data",
        schema_description="Clinical trials, drug info, medical research",
        default_schema="""z.object({
  query: z.string(),
  trials: z.array(z.object({
    trialId: z.string().describe("NCT number or trial identifier"),
    title: z.string(),
    phase: z.string().optional(),
    status: z.string(),
    condition: z.string(),
    intervention: z.string(),
    sponsor: z.string().optional(),
    enrollment: z.number().optional(),
    primaryOutcome: z.string().optional(),
    results: z.string().optional(),
  })),
  drugs: z.array(z.object({
    name: z.string(),
    mechanism: z.string(),
    indication: z.string(),
    efficacy: z.string().optional(),
    safetyProfile: z.string().optional(),
  })).optional(),
  summary: z.string(),
})""",
    ),
    ToolInfo(
        id=ToolId.PATENT_SEARCH.value,
        name="Patent Search",
        sample_prompt="Find patents published in 2025 for high energy laser weapon systems",
        schema_name="Patent Data",
        schema_description="Patent filings, claims, and IP analysis",
        default_schema="""z.object({
  query: z.string(),
  patents: z.array(z.object({
    patentNumber: z.string(),
    title: z.string(),
    assignee: z.string(),
    inventors: z.array(z.string()),
    filingDate: z.string(),
    publicationDate: z.string().optional(),
    status: z.string(),
    abstract: z.string(),
    claims: z.array(z.string()).describe("Key patent claims"),
    classifications: z.array(z.string()).optional(),
  })),
  landscape: z.string().describe("Patent landscape analysis"),
  keyPlayers: z.array(z.object({
    company: z.string(),
    patentCount: z.number(),
    focus: z.string(),
  })).optional(),
})""",
    ),
    ToolInfo(
        id=ToolId.SEC_SEARCH.value,
        name="SEC Search",
        sample_prompt="Summarise MD&A section of Tesla's latest 10-k filling",
        schema_name="SEC Filing Data",
        schema_description="SEC filings, financial statements, disclosures",
        default_schema="""z.object({
  query: z.string(),
  filings: z.array(z.object({
    accessionNumber: z.string(),
    formType: z.string().describe("10-K, 10-Q, 8-K, etc."),
    company: z.string(),
    cik: z.string(),
    filingDate: z.string(),
    periodOfReport: z.string().optional(),
    sections: z.array(z.object({
      name: z.string().describe("Section name like MD&A, Risk Factors"),
      summary: z.string(),
      keyPoints: z.array(z.string()),
    })),
  })),
  financialHighlights: z.object({
    revenue: z.string().optional(),
    netIncome: z.string().optional(),
    eps: z.string().optional(),
    guidance: z.string().optional(),
  }).optional(),
  riskFactors: z.array(z.string()).optional(),
  analysis: z.string(),
})""",
    ),
    ToolInfo(
        id=ToolId.ECONOMICS_SEARCH.value,
        name="Economics Search",
        sample_prompt="What is CPI vs unemployment since 2020 in the US?",
        schema_name="Economic Data",
        schema_description="Economic indicators, statistics, trends",
        default_schema="""z.object({
  query: z.string(),
  indicators: z.array(z.object({
    name: z.string().describe("CPI, GDP, Unemployment Rate, etc."),
    values: z.array(z.object({
      date: z.string(),
      value: z.number(),
      unit: z.string().optional(),
    })),
    source: z.string(),
    frequency: z.string().optional(),
    trend: z.enum(["increasing", "decreasing", "stable"]).optional(),
  })),
  analysis: z.string(),
  forecast: z.string().optional(),
  correlations: z.array(z.object({
    indicator1: z.string(),
    indicator2: z.string(),
    relationship: z.string(),
  })).optional(),
})""",
    ),
    ToolInfo(
        id=ToolId.COMPANY_RESEARCH.value,
        name="Company Research",
        sample_prompt="Research the company Holistic AI",
        schema_name="Company Profile",
        schema_description="Comprehensive company research",
        default_schema="""z.object({
  company: z.object({
    name: z.string(),
    ticker: z.string().optional(),
    industry: z.string(),
    founded: z.string().optional(),
    headquarters: z.string().optional(),
    employees: z.number().optional(),
    website: z.string().optional(),
  }),
  description: z.string(),
  products: z.array(z.string()),
  financials: z.object({
    revenue: z.string().optional(),
    valuation: z.string().optional(),
    funding: z.string().optional(),
  }).optional(),
  leadership: z.array(z.object({
    name: z.string(),
    title: z.string(),
  })).optional(),
  competitors: z.array(z.string()).optional(),
  swot: z.object({
    strengths: z.array(z.string()),
    weaknesses: z.array(z.string()),
    opportunities: z.array(z.string()),
    threats: z.array(z.string()),
  }).optional(),
})""",
    ),
]


MODELS_BY_PROVIDER: Dict[str, List[Dict[str, str]]] = {
    "google": [
        {"id": "google/gemini-3-pro-preview", "name": "Gemini 3 Pro"},
    ],
    "openai": [
        {"id": "openai/gpt-5.1-instant", "name": "GPT-5.1 Instant"},
        {"id": "openai/gpt-oss-120b", "name": "GPT OSS 120B"},
    ],
    "anthropic": [
        {"id": "anthropic/claude-opus-4.5", "name": "Claude Opus 4.5"},
    ],
    "xai": [
        {"id": "xai/grok-4", "name": "Grok 4"},
    ],
    "amazon": [
        {"id": "amazon/nova-pro", "name": "Nova Pro"},
    ],
}

PROVIDER_NAMES = {
    "google": "Google",
    "openai": "OpenAI",
    "anthropic": "Anthropic",
    "xai": "xAI",
    "amazon": "Amazon",
}


def list_tools() -> List[Dict[str, Any]]:
    return [asdict(t) for t in TOOL_CATALOG]


def list_models() -> List[Dict[str, Any]]:
    """Flat model list; low-latency models carry a routing note."""
    models = []
    for provider, entries in MODELS_BY_PROVIDER.items():
        for m in entries:
            entry = {**m, "provider": provider, "providerName": PROVIDER_NAMES[provider]}
            if m["id"] in config.low_latency_models:
                entry["note"] = f"via {', '.join(config.low_latency_order).title()}"
            models.append(entry)
    return models
