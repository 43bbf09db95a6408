"""Playground configuration."""

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _csv(value: str) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


@dataclass
class Config:
    """Configuration loaded from environment variables."""

    # Server
    host: str = field(default_factory=lambda: os.getenv("PLAYGROUND_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PLAYGROUND_PORT", "8000")))

    # Model gateway (OpenAI-compatible)
    gateway_url: str = field(default_factory=lambda: os.getenv("AI_GATEWAY_URL", "https://ai-gateway.vercel.sh/v1"))
    gateway_api_key: str = field(default_factory=lambda: os.getenv("AI_GATEWAY_API_KEY", ""))
    default_model: str = field(default_factory=lambda: os.getenv("DEFAULT_MODEL", "openai/gpt-oss-120b"))
    schema_model: str = field(default_factory=lambda: os.getenv("SCHEMA_MODEL", "openai/gpt-oss-120b"))
    model_timeout: float = field(default_factory=lambda: float(os.getenv("MODEL_TIMEOUT", "300")))

    # Models routed through the low-latency upstream
    low_latency_models: List[str] = field(default_factory=lambda:
        _csv(os.getenv("LOW_LATENCY_MODELS", "openai/gpt-oss-120b")))
    low_latency_order: List[str] = field(default_factory=lambda:
        _csv(os.getenv("LOW_LATENCY_ORDER", "groq")))

    # Valyu search
    valyu_url: str = field(default_factory=lambda: os.getenv("VALYU_API_URL", "https://api.valyu.ai/v1"))
    valyu_api_key: str = field(default_factory=lambda: os.getenv("VALYU_API_KEY", ""))
    tool_timeout: float = field(default_factory=lambda: float(os.getenv("TOOL_TIMEOUT", "60")))

    # Step budgets
    max_steps: int = field(default_factory=lambda: int(os.getenv("MAX_STEPS", "10")))
    evidence_max_steps: int = field(default_factory=lambda: int(os.getenv("EVIDENCE_MAX_STEPS", "5")))

    # Request defaults
    default_max_results: int = field(default_factory=lambda: int(os.getenv("DEFAULT_MAX_RESULTS", "3")))
    citation_snippet_chars: int = 200


# Global config instance
config = Config()
