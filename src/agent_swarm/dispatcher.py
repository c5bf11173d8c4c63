"""Resolve and safely invoke a single requested tool call."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from .models import (
    ROLE_ASSISTANT,
    ContextVariables,
    Message,
    Result,
    ToolCall,
    copy_context_variables,
    merge_context_variables,
    validate_context_variables,
)

if TYPE_CHECKING:
    from .agent import Agent

logger = logging.getLogger(__name__)


@dataclass
class ToolCallOutcome:
    """What one dispatch produced: exactly one message, the resulting context and an optional handoff."""

    message: Message
    context_variables: ContextVariables
    agent: Agent | None = None
    result: Result | None = None
    context_update: ContextVariables = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.result is not None and self.result.success and self.result.error is None


def stringify_data(data: Any) -> str:
    """String form of a tool result's payload as shown to the model."""
    if data is None:
        return ""
    if isinstance(data, str):
        return data
    if isinstance(data, BaseModel):
        return data.model_dump_json()
    if isinstance(data, (dict, list, tuple)):
        return json.dumps(data, default=str)
    return str(data)


def _tool_message(call: ToolCall, content: str) -> Message:
    return Message(
        role=ROLE_ASSISTANT,
        content=content,
        name=call.function.name,
        tool_call_id=call.id,
    )


def _parse_arguments(raw: str) -> dict[str, Any]:
    if not raw or not raw.strip():
        return {}
    value = json.loads(raw)
    if not isinstance(value, dict):
        raise ValueError(f"expected a JSON object, got {type(value).__name__}")
    return value


async def handle_tool_call(
    call: ToolCall,
    agent: Agent,
    context_variables: ContextVariables,
    execute: bool = True,
    debug: bool = False,
) -> ToolCallOutcome:
    """Dispatch one tool call against ``agent``'s registry.

    Every failure here is recovered: it becomes the content of the single
    returned message and the run carries on. ``context_variables`` is never
    mutated; the outcome holds a merged copy.
    """
    name = call.function.name
    untouched = copy_context_variables(context_variables)
    if not execute:
        content = f"Tool call {name} with arguments {call.function.arguments or '{}'} was not executed."
        return ToolCallOutcome(_tool_message(call, content), untouched)

    function = agent.tools.resolve(name)
    if function is None:
        logger.warning("Agent %s has no tool %s", agent.name, name)
        return ToolCallOutcome(_tool_message(call, f"Error: Tool {name} not found."), untouched)

    try:
        args = _parse_arguments(call.function.arguments)
    except ValueError as exc:
        logger.warning("Invalid arguments for tool %s: %s", name, exc)
        return ToolCallOutcome(
            _tool_message(call, f"Error: invalid arguments for tool {name}: {exc}"),
            untouched,
        )

    if debug:
        logger.debug("Calling tool %s (call %s) with %s", name, call.id, args)
    try:
        result = await function.execute(args, copy_context_variables(context_variables))
    except Exception as e:
        logger.warning("Tool %s raised: %s", name, e, exc_info=debug)
        result = Result(success=False, error=str(e) or type(e).__name__)

    if not result.success or result.error is not None:
        error = result.error or "tool reported failure"
        logger.warning("Tool %s failed: %s", name, error)
        return ToolCallOutcome(_tool_message(call, f"Error: {error}"), untouched, result=result)

    try:
        update = validate_context_variables(result.context_variables)
    except TypeError as exc:
        logger.warning("Tool %s returned invalid context variables: %s", name, exc)
        return ToolCallOutcome(_tool_message(call, f"Error: {exc}"), untouched)

    content = stringify_data(result.data)
    if debug:
        logger.debug("Tool %s returned %s", name, content)
    return ToolCallOutcome(
        _tool_message(call, content),
        merge_context_variables(context_variables, update),
        agent=result.agent,
        result=result,
        context_update=update,
    )
