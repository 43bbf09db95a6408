"""Error taxonomy for the playground.

Client input problems are rejected before any model call is made.
Upstream faults are caught once at the boundary of a strategy and
turned into an ``{"error": ...}`` payload.
"""

from typing import Optional


class PlaygroundError(Exception):
    """Base class for all playground errors."""

    status_code = 500
    default_message = "Unknown error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ClientInputError(PlaygroundError):
    """Bad request data. Never reaches a model invocation."""

    status_code = 400
    default_message = "Invalid request"


class ToolNotFoundError(ClientInputError):
    default_message = "Invalid tool"

    def __init__(self, tool_id: object = None):
        self.tool_id = tool_id
        super().__init__("Invalid tool")


class InvalidModeError(ClientInputError):
    default_message = "Invalid mode"

    def __init__(self, mode: object = None):
        self.mode = mode
        super().__init__("Invalid mode")


class InvalidRequestError(ClientInputError):
    """Missing or malformed request fields."""


class SchemaCompileError(PlaygroundError):
    """Schema description could not be parsed. Downgraded, never surfaced."""

    default_message = "Invalid schema"


class UpstreamInvocationError(PlaygroundError):
    """Model or tool invocation fault."""

    default_message = "Unknown error"


class ToolExecutionError(UpstreamInvocationError):
    default_message = "Tool execution failed"


def error_message(exc: BaseException) -> str:
    """Message safe to hand back to the caller."""
    if isinstance(exc, PlaygroundError):
        return exc.message
    return str(exc) or "Unknown error"
