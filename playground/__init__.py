"""
Search Playground

Tool-augmented generation orchestrator for Valyu search tools.

Components:
- tools: Tool registry and the Valyu search client
- gateway_client: OpenAI-compatible model gateway client
- generation_loop: Step loop that runs the model and its tool calls
- conversation: Cited free-text answers (stream / generate)
- pipeline: Search-then-structure extraction (stream-object / object)
- schema: Declarative schema parser and compiler
- citations: Numbered sources from completed tool calls
- dispatcher: Mode routing for the chat endpoint
- api: HTTP endpoints
"""

__version__ = "0.1.0"

from .main import app
