"""Abstract LLM provider interface for the swarm engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import Any

from ..models import Message


@dataclass
class ToolCallDelta:
    """A fragment of one tool call; fragments sharing ``index`` belong together."""

    index: int
    id: str | None = None
    name: str | None = None
    arguments: str = ""


@dataclass
class StreamChunk:
    """One chunk from an LLM stream."""

    content: str = ""
    tool_calls: list[ToolCallDelta] = field(default_factory=list)
    done: bool = False


class LLMProvider(ABC):
    """
    Abstract LLM provider. Implement this to plug in any backend (OpenAI, Ollama, etc.).

    The engine only depends on this interface. Any exception raised here is
    treated as a failure of the model capability and aborts the run.
    """

    name: str = "provider"

    @abstractmethod
    async def chat(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> Message:
        """Non-streaming chat. Returns one complete assistant message."""
        ...

    @abstractmethod
    def stream_chat(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> AsyncGenerator[StreamChunk, None]:
        """Stream chat as an async generator; yields content and tool-call fragments in order.

        The engine closes the generator after the ``done`` chunk.
        """
        ...
