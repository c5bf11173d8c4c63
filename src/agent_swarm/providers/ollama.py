"""Ollama LLM provider implementation."""

from __future__ import annotations

import json
import os
import uuid
from collections.abc import AsyncIterator
from typing import Any

from ollama import AsyncClient

from ..models import ROLE_ASSISTANT, ROLE_TOOL, Message, ToolCall, ToolCallFunction
from .base import LLMProvider, StreamChunk, ToolCallDelta


def _message_to_chat(m: Message) -> dict[str, Any]:
    """Convert our Message to Ollama chat format."""
    if m.tool_call_id and m.role in (ROLE_ASSISTANT, ROLE_TOOL):
        return {"role": ROLE_TOOL, "content": m.content or "", "tool_name": m.name or ""}
    out: dict[str, Any] = {"role": m.role, "content": m.content or ""}
    if m.tool_calls:
        out["tool_calls"] = [
            {
                "function": {
                    "name": tc.function.name,
                    "arguments": _decode_arguments(tc.function.arguments),
                },
            }
            for tc in m.tool_calls
        ]
    return out


def _decode_arguments(raw: str) -> dict[str, Any]:
    try:
        value = json.loads(raw) if raw else {}
    except json.JSONDecodeError:
        return {}
    return value if isinstance(value, dict) else {}


def _tool_schema_to_ollama(tool: dict[str, Any]) -> dict[str, Any]:
    """Normalize tool def to Ollama/OpenAI format."""
    if "function" in tool:
        return tool
    return {
        "type": "function",
        "function": {
            "name": tool.get("name", ""),
            "description": tool.get("description", ""),
            "parameters": tool.get("parameters", {"type": "object", "properties": {}}),
        },
    }


class OllamaProvider(LLMProvider):
    """Ollama-backed LLM provider.

    Ollama returns tool calls whole rather than as argument fragments, so each
    call is emitted as a single fragment carrying its complete arguments.
    """

    name = "ollama"

    def __init__(self, default_model: str = "llama3.2", base_url: str | None = None):
        self.default_model = default_model
        self.base_url = base_url or os.getenv("OLLAMA_HOST") or "http://localhost:11434"

    async def chat(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> Message:
        content_parts: list[str] = []
        tool_calls: list[ToolCall] = []
        async for chunk in self.stream_chat(messages, model=model, tools=tools, **kwargs):
            if chunk.content:
                content_parts.append(chunk.content)
            for fragment in chunk.tool_calls:
                tool_calls.append(
                    ToolCall(
                        id=fragment.id or str(uuid.uuid4()),
                        function=ToolCallFunction(name=fragment.name or "", arguments=fragment.arguments),
                    )
                )
        return Message(role=ROLE_ASSISTANT, content="".join(content_parts), tool_calls=tool_calls or None)

    async def stream_chat(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> AsyncIterator[StreamChunk]:
        client = AsyncClient(host=self.base_url)
        ollama_tools = [_tool_schema_to_ollama(t) for t in tools] if tools else None
        index = 0

        stream = await client.chat(
            model=model or self.default_model,
            messages=[_message_to_chat(m) for m in messages],
            tools=ollama_tools,
            stream=True,
            **kwargs,
        )
        async for chunk in stream:
            msg = getattr(chunk, "message", None)
            if msg is None:
                continue
            fragments: list[ToolCallDelta] = []
            for tc in getattr(msg, "tool_calls", None) or []:
                fn = getattr(tc, "function", None)
                if fn is None:
                    continue
                args = getattr(fn, "arguments", None)
                if not isinstance(args, str):
                    args = json.dumps(dict(args) if args else {})
                fragments.append(
                    ToolCallDelta(
                        index=index,
                        id=str(uuid.uuid4()),
                        name=getattr(fn, "name", "") or "",
                        arguments=args,
                    )
                )
                index += 1
            delta = getattr(msg, "content", None) or ""
            if delta or fragments:
                yield StreamChunk(content=delta, tool_calls=fragments)
        yield StreamChunk(done=True)
