"""
Search Playground - Main Entry Point

HTTP service that lets a user pick a search tool, a model and an output
mode, then answers with cited free text or with a structured object
built from search evidence.

Usage:
    python -m playground.main

Environment Variables:
    PLAYGROUND_HOST     - Server host (default: 0.0.0.0)
    PLAYGROUND_PORT     - Server port (default: 8000)
    AI_GATEWAY_URL      - OpenAI-compatible gateway URL
    AI_GATEWAY_API_KEY  - Gateway API key
    VALYU_API_KEY       - Valyu search API key
    DEFAULT_MODEL       - Model used when a request names none
    LOW_LATENCY_MODELS  - Comma-separated models forced through the low-latency route
    MODEL_TIMEOUT       - Per-invocation read timeout in seconds (default: 300)
"""

import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api import router as api_router
from .config import config
from .errors import PlaygroundError
from .gateway_client import gateway
from .tools import TOOL_REGISTRY, valyu

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""

    # Startup
    logger.info("=" * 60)
    logger.info("Search Playground Starting")
    logger.info("=" * 60)

    if not config.gateway_api_key:
        logger.warning("AI_GATEWAY_API_KEY not set - model calls will be rejected upstream")
    if not valyu.enabled:
        logger.warning("VALYU_API_KEY not set - every tool call will fail")

    logger.info(f"Gateway URL: {config.gateway_url}")
    logger.info(f"Default model: {config.default_model}")
    logger.info(f"Low-latency models: {config.low_latency_models} via {config.low_latency_order}")
    logger.info(f"Tools: {[t.value for t in TOOL_REGISTRY]}")
    logger.info(f"Step budgets: conversation={config.max_steps}, evidence={config.evidence_max_steps}")

    logger.info("-" * 60)
    logger.info(f"Server ready at http://{config.host}:{config.port}")
    logger.info(f"Chat endpoint: http://{config.host}:{config.port}/api/chat")
    logger.info("=" * 60)

    yield

    # Shutdown
    logger.info("Shutting down...")
    await gateway.close()
    await valyu.close()
    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Search Playground",
    description=(
        "Tool-augmented generation over Valyu search tools. "
        "Streams cited answers, generates text, or extracts structured "
        "objects from search evidence."
    ),
    version=__version__,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PlaygroundError)
async def playground_error_handler(request: Request, exc: PlaygroundError):
    if exc.status_code >= 500:
        logger.error(f"{request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.url.path} rejected: {exc.message}")
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


# Mount routers
app.include_router(api_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "gateway_url": config.gateway_url,
        "default_model": config.default_model,
        "search_enabled": valyu.enabled,
    }


@app.get("/")
async def root():
    """Root endpoint with basic info."""
    return {
        "name": "Search Playground",
        "version": __version__,
        "modes": ["stream", "generate", "stream-object", "object"],
        "endpoints": {
            "chat": "/api/chat",
            "generate_schema": "/api/generate-schema",
            "citations": "/api/citations",
            "tools": "/api/tools",
            "models": "/api/models",
            "health": "/health",
        },
    }


def main():
    """Run the playground server."""
    uvicorn.run(
        "playground.main:app",
        host=config.host,
        port=config.port,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    main()
