"""Data models for messages, tool calls, results and run responses."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from .agent import Agent

ROLE_SYSTEM = "system"
ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLE_TOOL = "tool"

ContextVariables = dict[str, Any]

_SCALAR_KINDS = (str, int, float, bool)


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class ToolCallFunction(BaseModel):
    """Function name and raw JSON arguments requested by the model."""

    name: str
    arguments: str = ""


class ToolCall(BaseModel):
    """A model-issued request to invoke one tool."""

    id: str
    type: Literal["function"] = "function"
    function: ToolCallFunction


class Message(BaseModel):
    """A single message in a conversation."""

    role: str  # "system" | "user" | "assistant" | "tool"
    content: str = ""
    name: str | None = None
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None

    def to_chat_dict(self) -> dict[str, Any]:
        """Format for OpenAI-style chat APIs."""
        out: dict[str, Any] = {"role": self.role, "content": self.content or ""}
        if self.tool_calls:
            out["tool_calls"] = [tc.model_dump() for tc in self.tool_calls]
        if self.tool_call_id is not None:
            out["tool_call_id"] = self.tool_call_id
        if self.name is not None:
            out["name"] = self.name
        return out


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


class ToolDef(BaseModel):
    """Tool definition presented to the model."""

    name: str
    description: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)  # JSON Schema

    def to_tool_schema(self) -> dict[str, Any]:
        """Standard function-calling schema (OpenAI-style) for any LLM provider."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


@dataclass
class Result:
    """Outcome of one tool execution.

    ``data`` is stringified into the tool message. ``agent`` requests a handoff
    and ``context_variables`` is merged into the run's working set.
    """

    success: bool
    data: Any = None
    error: str | None = None
    agent: Agent | None = None
    context_variables: ContextVariables | None = None


# ---------------------------------------------------------------------------
# Runs
# ---------------------------------------------------------------------------


@dataclass
class Response:
    """Messages produced by a run, the agent active at the end and the final context."""

    messages: list[Message] = field(default_factory=list)
    agent: Agent | None = None
    context_variables: ContextVariables = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Context variables
# ---------------------------------------------------------------------------


def _check_value(path: str, value: Any) -> None:
    if value is None or isinstance(value, _SCALAR_KINDS):
        return
    if isinstance(value, dict):
        for key, inner in value.items():
            if not isinstance(key, str):
                raise TypeError(f"context variable {path!r} has a non-string key {key!r}")
            _check_value(f"{path}.{key}", inner)
        return
    raise TypeError(
        f"context variable {path!r} has unsupported type {type(value).__name__}; "
        "expected str, int, float, bool, None or a nested dict"
    )


def validate_context_variables(values: ContextVariables | None) -> ContextVariables:
    """Return a deep copy of ``values`` after checking every value kind."""
    if not values:
        return {}
    for key, value in values.items():
        if not isinstance(key, str):
            raise TypeError(f"context variable key {key!r} is not a string")
        _check_value(key, value)
    return copy_context_variables(values)


def copy_context_variables(values: ContextVariables) -> ContextVariables:
    """Independent copy; nested maps are never shared between holders."""
    return copy.deepcopy(dict(values))


def merge_context_variables(base: ContextVariables, *updates: ContextVariables | None) -> ContextVariables:
    """Apply updates in order onto a copy of ``base``; the last writer wins per key."""
    merged = copy_context_variables(base)
    for update in updates:
        if update:
            merged.update(update)
    return merged
