"""Error hierarchy for schema compilation and runs."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Response


class SwarmError(Exception):
    """Base class for every error raised by agent_swarm."""

    def __init__(self, code: str, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.cause = cause


class SchemaGenerationError(SwarmError):
    """A tool's argument shape could not be turned into a parameter schema."""

    def __init__(self, tool_name: str, message: str, cause: Exception | None = None) -> None:
        super().__init__("SCHEMA_GENERATION", f"Error generating schema for {tool_name}: {message}", cause)
        self.tool_name = tool_name


class RunError(SwarmError):
    """A run stopped early. ``response`` holds everything accumulated so far."""

    def __init__(
        self,
        code: str,
        message: str,
        response: Response,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(code, message, cause)
        self.response = response


class ModelProviderError(RunError):
    """The model capability failed (network, auth, rate limit, malformed completion)."""

    def __init__(self, message: str, response: Response, cause: Exception | None = None) -> None:
        super().__init__("MODEL_PROVIDER", message, response, cause)


class RunCancelledError(RunError):
    """The caller asked the run to stop."""

    def __init__(self, response: Response) -> None:
        super().__init__("RUN_CANCELLED", "run cancelled", response)


class InstructionsError(RunError):
    """An agent's instructions function raised while building a request."""

    def __init__(self, agent_name: str, response: Response, cause: Exception) -> None:
        super().__init__(
            "INSTRUCTIONS",
            f"instructions for agent {agent_name} failed: {cause!r}",
            response,
            cause,
        )
        self.agent_name = agent_name
