"""Scripted LLM provider used by the engine and API tests."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

from agent_swarm.models import Message, ToolCall, ToolCallFunction
from agent_swarm.providers import LLMProvider, StreamChunk, ToolCallDelta


def assistant(content: str = "", *calls: tuple[str, str, str]) -> Message:
    """Assistant message with tool calls given as (id, name, arguments)."""
    tool_calls = [ToolCall(id=cid, function=ToolCallFunction(name=name, arguments=args)) for cid, name, args in calls]
    return Message(role="assistant", content=content, tool_calls=tool_calls or None)


def fragment(message: Message) -> list[StreamChunk]:
    """Split a complete message into small content and argument fragments."""
    chunks: list[StreamChunk] = []
    content = message.content
    for i in range(0, len(content), 3):
        chunks.append(StreamChunk(content=content[i : i + 3]))
    for index, tc in enumerate(message.tool_calls or []):
        chunks.append(StreamChunk(tool_calls=[ToolCallDelta(index=index, id=tc.id, name=tc.function.name)]))
        args = tc.function.arguments
        for i in range(0, len(args), 2):
            chunks.append(StreamChunk(tool_calls=[ToolCallDelta(index=index, arguments=args[i : i + 2])]))
    chunks.append(StreamChunk(done=True))
    return chunks


class ScriptedProvider(LLMProvider):
    """Replays queued replies; an Exception in the queue is raised instead."""

    name = "scripted"

    def __init__(self, *replies: Message | Exception, repeat_last: bool = False) -> None:
        self.replies = list(replies)
        self.repeat_last = repeat_last
        self.requests: list[dict[str, Any]] = []

    def _next(self, messages: list[Message], model: str | None, tools: list[dict[str, Any]] | None) -> Message:
        self.requests.append({"messages": list(messages), "model": model, "tools": tools})
        if not self.replies:
            raise AssertionError("no scripted reply left")
        reply = self.replies[0] if self.repeat_last and len(self.replies) == 1 else self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def chat(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> Message:
        return self._next(messages, model, tools)

    async def stream_chat(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> AsyncIterator[StreamChunk]:
        reply = self._next(messages, model, tools)
        for chunk in fragment(reply):
            yield chunk
