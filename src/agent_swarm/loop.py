"""Conversation engine: the model / tool-dispatch turn loop."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator, Sequence
from contextlib import aclosing
from typing import Any

from .agent import Agent
from .config import DEFAULT_SWARM_CONFIG, SwarmConfig
from .dispatcher import ToolCallOutcome, handle_tool_call
from .errors import InstructionsError, ModelProviderError, RunCancelledError
from .llm import create_provider, get_default_provider
from .memory import MemoryEntry
from .models import (
    ROLE_ASSISTANT,
    ROLE_SYSTEM,
    ContextVariables,
    Message,
    Response,
    ToolCall,
    ToolCallFunction,
    copy_context_variables,
    merge_context_variables,
    validate_context_variables,
)
from .providers import LLMProvider, StreamChunk

logger = logging.getLogger(__name__)


async def accumulate_stream(chunks: AsyncGenerator[StreamChunk, None]) -> Message:
    """Fold a provider stream into one complete assistant message.

    Content deltas are concatenated; tool-call fragments are grouped by index,
    their argument text concatenated, and ordered by index. The stream is
    closed once a ``done`` chunk arrives or it runs out.
    """
    content_parts: list[str] = []
    buffers: dict[int, dict[str, Any]] = {}
    async with aclosing(chunks) as stream:
        async for chunk in stream:
            if chunk.content:
                content_parts.append(chunk.content)
            for fragment in chunk.tool_calls:
                buf = buffers.setdefault(fragment.index, {"id": "", "name": "", "arguments": []})
                if fragment.id and not buf["id"]:
                    buf["id"] = fragment.id
                if fragment.name and not buf["name"]:
                    buf["name"] = fragment.name
                if fragment.arguments:
                    buf["arguments"].append(fragment.arguments)
            if chunk.done:
                break

    tool_calls = [
        ToolCall(
            id=buf["id"] or f"call_{index}",
            function=ToolCallFunction(name=buf["name"], arguments="".join(buf["arguments"])),
        )
        for index, buf in sorted(buffers.items())
    ]
    return Message(role=ROLE_ASSISTANT, content="".join(content_parts), tool_calls=tool_calls or None)


def _as_message(value: Message | dict[str, Any]) -> Message:
    return value if isinstance(value, Message) else Message.model_validate(value)


class Swarm:
    """Runs conversations between a user and one or more agents.

    ``client`` is the model capability used for agents that carry no provider
    of their own; without either, the process default from
    :func:`agent_swarm.llm.get_default_provider` is used.
    """

    def __init__(self, client: LLMProvider | None = None, config: SwarmConfig | None = None) -> None:
        self.client = client
        self.config = config or DEFAULT_SWARM_CONFIG

    @classmethod
    def from_api_key(cls, api_key: str, provider: str = "openai", base_url: str | None = None) -> Swarm:
        """Swarm backed by a named provider authenticated with ``api_key``."""
        return cls(client=create_provider(provider, api_key=api_key, base_url=base_url))

    def _provider_for(self, agent: Agent) -> LLMProvider:
        return agent.provider or self.client or get_default_provider()

    async def get_chat_completion(
        self,
        agent: Agent,
        history: Sequence[Message],
        context_variables: ContextVariables,
        model_override: str | None = None,
        stream: bool = False,
        debug: bool = False,
        instructions: str | None = None,
    ) -> Message:
        """One model call: instructions as a leading system message, then history and tools.

        ``instructions`` are resolved from the agent when not given.
        """
        if instructions is None:
            instructions = agent.resolve_instructions(context_variables)
        request: list[Message] = []
        if instructions:
            request.append(Message(role=ROLE_SYSTEM, content=instructions))
        request.extend(history)
        tools = agent.tools.tool_schemas() or None
        model = model_override or agent.model or self.config.default_model
        provider = self._provider_for(agent)

        if debug:
            logger.debug(
                "Requesting completion from %s for agent %s (model=%s, %d messages, %d tools)",
                provider.name,
                agent.name,
                model,
                len(request),
                len(tools or []),
            )
        if stream:
            message = await accumulate_stream(provider.stream_chat(request, model=model, tools=tools))
        else:
            message = await provider.chat(request, model=model, tools=tools)
        if not isinstance(message, Message):
            raise TypeError(f"provider {provider.name} returned {type(message).__name__}, expected Message")
        return message.model_copy(update={"role": ROLE_ASSISTANT, "name": agent.name})

    async def _dispatch_turn(
        self,
        tool_calls: list[ToolCall],
        agent: Agent,
        context_variables: ContextVariables,
        parallel: bool,
        execute_tools: bool,
        debug: bool,
    ) -> tuple[list[ToolCallOutcome], ContextVariables]:
        if parallel and len(tool_calls) > 1:
            # Every call sees the turn-start snapshot; updates merge afterwards in request order.
            snapshot = copy_context_variables(context_variables)
            outcomes = list(
                await asyncio.gather(
                    *(handle_tool_call(tc, agent, snapshot, execute_tools, debug) for tc in tool_calls)
                )
            )
            merged = merge_context_variables(context_variables, *(o.context_update for o in outcomes))
            return outcomes, merged

        outcomes = []
        for tc in tool_calls:
            outcome = await handle_tool_call(tc, agent, context_variables, execute_tools, debug)
            context_variables = merge_context_variables(context_variables, outcome.context_update)
            outcomes.append(outcome)
        return outcomes, context_variables

    @staticmethod
    def _remember_tools(agent: Agent, outcomes: list[ToolCallOutcome]) -> None:
        if agent.memory is None:
            return
        for outcome in outcomes:
            if not outcome.succeeded:
                continue
            agent.memory.add(
                MemoryEntry(
                    content=outcome.message.content,
                    type="tool_result",
                    context={"agent": agent.name, "tool": outcome.message.name},
                    references=[outcome.message.tool_call_id or ""],
                )
            )

    async def run(
        self,
        agent: Agent,
        messages: Sequence[Message | dict[str, Any]],
        context_variables: ContextVariables | None = None,
        model_override: str | None = None,
        stream: bool = False,
        debug: bool = False,
        max_turns: int | None = None,
        execute_tools: bool = True,
        parallel_tool_calls: bool | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Response:
        """Drive the conversation until a plain answer, the turn limit, or a dry run ends it.

        Returns the messages produced by this run (the input history is not
        repeated), the agent active at the end and the final context
        variables. Provider failures raise ModelProviderError, a failing
        instructions function raises InstructionsError, and a set
        ``cancel_event`` raises RunCancelledError; all carry the partial
        response. Tool failures never raise.
        """
        limit = self.config.max_turns if max_turns is None else max_turns
        if limit < 1:
            raise ValueError("max_turns must be at least 1")

        active_agent = agent
        context = validate_context_variables(context_variables)
        history = [_as_message(m) for m in messages]
        init_len = len(history)
        turns = 0

        def partial() -> Response:
            return Response(
                messages=history[init_len:],
                agent=active_agent,
                context_variables=copy_context_variables(context),
            )

        def check_cancelled() -> None:
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Run cancelled after %d turns (agent=%s)", turns, active_agent.name)
                raise RunCancelledError(partial())

        logger.info("Starting run with agent %s (max_turns=%d, stream=%s)", active_agent.name, limit, stream)
        while True:
            check_cancelled()
            try:
                instructions = active_agent.resolve_instructions(context)
            except Exception as exc:
                logger.error("Instructions failed for agent %s: %r", active_agent.name, exc)
                raise InstructionsError(active_agent.name, partial(), exc) from exc
            try:
                message = await self.get_chat_completion(
                    active_agent,
                    history,
                    context,
                    model_override=model_override,
                    stream=stream,
                    debug=debug,
                    instructions=instructions,
                )
            except Exception as exc:
                logger.error("Model call failed for agent %s: %s", active_agent.name, exc)
                raise ModelProviderError(str(exc), partial(), exc) from exc
            history.append(message)

            if not message.tool_calls:
                break

            turns += 1
            if turns >= limit:
                logger.info("Turn limit %d reached; leaving %d tool calls unexecuted", limit, len(message.tool_calls))
                break

            check_cancelled()
            parallel = active_agent.parallel_tool_calls if parallel_tool_calls is None else parallel_tool_calls
            outcomes, context = await self._dispatch_turn(
                message.tool_calls,
                active_agent,
                context,
                parallel,
                execute_tools,
                debug,
            )
            history.extend(o.message for o in outcomes)
            self._remember_tools(active_agent, outcomes)

            if not execute_tools:
                break

            handoffs = [o.agent for o in outcomes if o.agent is not None]
            if handoffs:
                logger.info("Handoff from %s to %s", active_agent.name, handoffs[-1].name)
                active_agent = handoffs[-1]

        final = history[-1] if len(history) > init_len else None
        if final is not None and not final.tool_calls and final.content and active_agent.memory is not None:
            active_agent.memory.add(
                MemoryEntry(content=final.content, type="conversation", context={"agent": active_agent.name})
            )
        logger.info("Run finished with agent %s after %d tool turns", active_agent.name, turns)
        return partial()
