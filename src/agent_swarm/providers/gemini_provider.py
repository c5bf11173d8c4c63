"""Google Gemini LLM provider implementation for the swarm engine."""

from __future__ import annotations

import json
import os
from collections.abc import AsyncIterator
from typing import Any

from dotenv import load_dotenv
from google import genai
from google.genai import types as genai_types

from ..models import ROLE_ASSISTANT, ROLE_SYSTEM, ROLE_TOOL, Message, ToolCall, ToolCallFunction
from .base import LLMProvider, StreamChunk, ToolCallDelta

load_dotenv()


class GeminiProvider(LLMProvider):
    """Gemini provider using the google-genai SDK."""

    name = "gemini"

    def __init__(
        self,
        default_model: str = "gemini-2.5-flash",
        api_key: str | None = None,
    ) -> None:
        self.default_model = default_model
        self.api_key = api_key or os.getenv("GOOGLE_API_KEY") or os.getenv(
            "GEMINI_API_KEY",
            "",
        )
        self._client: genai.Client | None = None

    def _get_client(self) -> genai.Client:
        if not self._client:
            self._client = genai.Client(
                api_key=self.api_key,
                http_options={"api_version": "v1beta"},
            )
        return self._client

    @staticmethod
    def _to_gemini_contents(messages: list[Message]) -> tuple[list[genai_types.Content], str | None]:
        """Convert internal Message objects into Gemini contents and system instruction."""
        contents: list[genai_types.Content] = []
        system_instruction: str | None = None

        for m in messages:
            if m.role == ROLE_SYSTEM:
                system_instruction = (m.content or "").strip() or system_instruction
                continue
            if m.tool_call_id and m.role in (ROLE_ASSISTANT, ROLE_TOOL):
                part = genai_types.Part.from_function_response(
                    name=m.name or "",
                    response={"result": m.content or ""},
                )
                contents.append(genai_types.Content(role="user", parts=[part]))
                continue
            role = "model" if m.role == ROLE_ASSISTANT else "user"
            parts: list[genai_types.Part] = []
            if m.content:
                parts.append(genai_types.Part(text=m.content))
            for tc in m.tool_calls or []:
                try:
                    args = json.loads(tc.function.arguments or "{}")
                except json.JSONDecodeError:
                    args = {}
                parts.append(genai_types.Part.from_function_call(name=tc.function.name, args=args))
            if parts:
                contents.append(genai_types.Content(role=role, parts=parts))

        return contents, system_instruction

    @staticmethod
    def _to_gemini_tools(tools: list[dict[str, Any]] | None) -> list[genai_types.Tool] | None:
        """Convert function tools into Gemini Tool declarations."""
        if not tools:
            return None
        function_declarations: list[genai_types.FunctionDeclaration] = []
        for t in tools:
            fn = t.get("function") if "function" in t else t
            name = fn.get("name")
            if not name:
                continue
            function_declarations.append(
                genai_types.FunctionDeclaration(
                    name=name,
                    description=fn.get("description", ""),
                    parameters_json_schema=fn.get("parameters") or {},
                )
            )
        if not function_declarations:
            return None
        return [genai_types.Tool(function_declarations=function_declarations)]

    def _build_config(
        self,
        system_instruction: str | None,
        tools: list[dict[str, Any]] | None,
    ) -> genai_types.GenerateContentConfig:
        config_args: dict[str, Any] = {}
        gemini_tools = self._to_gemini_tools(tools)
        if gemini_tools:
            config_args["tools"] = gemini_tools
            config_args["tool_config"] = genai_types.ToolConfig(
                function_calling_config=genai_types.FunctionCallingConfig(
                    mode=genai_types.FunctionCallingConfigMode.AUTO
                )
            )
        if system_instruction:
            config_args["system_instruction"] = system_instruction
        return genai_types.GenerateContentConfig(**config_args)

    @staticmethod
    def _function_calls(response: Any) -> list[Any]:
        calls: list[Any] = []
        for cand in getattr(response, "candidates", None) or []:
            content = getattr(cand, "content", None)
            for part in getattr(content, "parts", None) or []:
                fc = getattr(part, "function_call", None)
                if fc:
                    calls.append(fc)
        return calls

    async def chat(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> Message:
        """Non-streaming chat using Gemini generate_content."""
        client = self._get_client()
        contents, system_instruction = self._to_gemini_contents(messages)
        resp = await client.aio.models.generate_content(
            model=model or self.default_model,
            contents=contents,
            config=self._build_config(system_instruction, tools),
        )
        tool_calls = [
            ToolCall(
                id=getattr(fc, "id", None) or f"call_{fc.name}_{i}",
                function=ToolCallFunction(name=fc.name, arguments=json.dumps(dict(fc.args) if fc.args else {})),
            )
            for i, fc in enumerate(self._function_calls(resp))
        ]
        text = "".join(
            part.text
            for cand in getattr(resp, "candidates", None) or []
            for part in getattr(getattr(cand, "content", None), "parts", None) or []
            if getattr(part, "text", None)
        )
        return Message(role=ROLE_ASSISTANT, content=text, tool_calls=tool_calls or None)

    async def stream_chat(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> AsyncIterator[StreamChunk]:
        """Streaming chat for Gemini; function calls arrive whole, one fragment each."""
        client = self._get_client()
        contents, system_instruction = self._to_gemini_contents(messages)
        stream = await client.aio.models.generate_content_stream(
            model=model or self.default_model,
            contents=contents,
            config=self._build_config(system_instruction, tools),
        )
        index = 0
        async for chunk in stream:
            fragments: list[ToolCallDelta] = []
            text_parts: list[str] = []
            for cand in getattr(chunk, "candidates", None) or []:
                for part in getattr(getattr(cand, "content", None), "parts", None) or []:
                    if getattr(part, "text", None):
                        text_parts.append(part.text)
            for fc in self._function_calls(chunk):
                fragments.append(
                    ToolCallDelta(
                        index=index,
                        id=getattr(fc, "id", None) or f"call_{fc.name}_{index}",
                        name=fc.name,
                        arguments=json.dumps(dict(fc.args) if fc.args else {}),
                    )
                )
                index += 1
            if text_parts or fragments:
                yield StreamChunk(content="".join(text_parts), tool_calls=fragments)
        yield StreamChunk(done=True)
