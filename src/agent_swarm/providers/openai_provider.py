"""OpenAI LLM provider implementation for the swarm engine."""

from __future__ import annotations

import json
import os
import re
from collections.abc import AsyncIterator
from typing import Any

from dotenv import load_dotenv
from openai import AsyncOpenAI

from ..config import DEFAULT_MODEL
from ..models import ROLE_ASSISTANT, ROLE_TOOL, Message, ToolCall, ToolCallFunction
from .base import LLMProvider, StreamChunk, ToolCallDelta

load_dotenv()

_INVALID_NAME_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def _wire_name(name: str) -> str:
    """Participant name as OpenAI accepts it: [a-zA-Z0-9_-], at most 64 chars."""
    return _INVALID_NAME_CHARS.sub("_", name)[:64]


class OpenAIProvider(LLMProvider):
    """OpenAI-backed LLM provider using the Chat Completions API.

    Also serves any OpenAI-compatible endpoint through ``base_url``.
    """

    name = "openai"

    def __init__(
        self,
        default_model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        base_url: str | None = None,
    ) -> None:
        self.default_model = default_model
        self.api_key = api_key or os.getenv("OPENAI_API_KEY") or ""
        self.base_url = base_url or os.getenv("OPENAI_BASE_URL")
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        if not self._client:
            kwargs: dict[str, Any] = {"api_key": self.api_key}
            if self.base_url:
                kwargs["base_url"] = self.base_url
            self._client = AsyncOpenAI(**kwargs)
        return self._client

    @staticmethod
    def _to_openai_messages(messages: list[Message]) -> list[dict[str, Any]]:
        """Convert internal Message objects into OpenAI chat message dicts.

        Tool results are kept as assistant messages in history; on the wire
        they become ``tool`` messages answering their call id.
        """
        out: list[dict[str, Any]] = []
        for m in messages:
            if m.tool_call_id and m.role in (ROLE_ASSISTANT, ROLE_TOOL):
                out.append({"role": ROLE_TOOL, "tool_call_id": m.tool_call_id, "content": m.content or ""})
                continue
            base: dict[str, Any] = {"role": m.role, "content": m.content or ""}
            if m.name and m.role != ROLE_TOOL:
                base["name"] = _wire_name(m.name)
            if m.role == ROLE_ASSISTANT and m.tool_calls:
                base["tool_calls"] = [
                    {
                        "id": tc.id,
                        "type": "function",
                        "function": {"name": tc.function.name, "arguments": tc.function.arguments or "{}"},
                    }
                    for tc in m.tool_calls
                ]
            out.append(base)
        return out

    @staticmethod
    def _parse_tool_calls(choice_message: Any) -> list[ToolCall]:
        """Map OpenAI tool_calls onto ToolCall models, keeping raw argument text."""
        tool_calls: list[ToolCall] = []
        for tc in getattr(choice_message, "tool_calls", None) or []:
            fn = getattr(tc, "function", None)
            name = getattr(fn, "name", "") if fn is not None else ""
            raw_args = getattr(fn, "arguments", "") if fn is not None else ""
            if not isinstance(raw_args, str):
                raw_args = json.dumps(raw_args)
            tool_calls.append(
                ToolCall(
                    id=getattr(tc, "id", "") or "",
                    function=ToolCallFunction(name=name or "", arguments=raw_args),
                )
            )
        return tool_calls

    async def chat(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> Message:
        """Non-streaming chat using OpenAI Chat Completions."""
        client = self._get_client()
        params: dict[str, Any] = {
            "model": model or self.default_model,
            "messages": self._to_openai_messages(messages),
            **kwargs,
        }
        if tools:
            params["tools"] = tools

        resp = await client.chat.completions.create(**params)
        if not resp.choices:
            raise ValueError("completion returned no choices")

        choice = resp.choices[0].message
        content = choice.content or ""
        if isinstance(content, list):
            # Multi-part content; join text fragments
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            )
        tool_calls = self._parse_tool_calls(choice)
        return Message(role=ROLE_ASSISTANT, content=content, tool_calls=tool_calls or None)

    async def stream_chat(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> AsyncIterator[StreamChunk]:
        """Streaming chat; yields content and tool-call fragments as they arrive."""
        client = self._get_client()
        params: dict[str, Any] = {
            "model": model or self.default_model,
            "messages": self._to_openai_messages(messages),
            "stream": True,
            **kwargs,
        }
        if tools:
            params["tools"] = tools

        stream = await client.chat.completions.create(**params)
        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = getattr(chunk.choices[0], "delta", None)
            if delta is None:
                continue
            fragments: list[ToolCallDelta] = []
            for tc in getattr(delta, "tool_calls", None) or []:
                fn = getattr(tc, "function", None)
                fragments.append(
                    ToolCallDelta(
                        index=getattr(tc, "index", 0) or 0,
                        id=getattr(tc, "id", None),
                        name=getattr(fn, "name", None) if fn is not None else None,
                        arguments=(getattr(fn, "arguments", None) or "") if fn is not None else "",
                    )
                )
            text = getattr(delta, "content", None) or ""
            if text or fragments:
                yield StreamChunk(content=text, tool_calls=fragments)
        yield StreamChunk(done=True)
