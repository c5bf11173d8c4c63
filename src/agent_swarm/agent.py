"""Agent configuration."""

from __future__ import annotations

from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field

from .config import DEFAULT_MODEL, DEFAULT_SWARM_CONFIG
from .functions import AgentFunction, ToolRegistry
from .memory import MemoryStore
from .models import ContextVariables, copy_context_variables
from .providers.base import LLMProvider

InstructionsFunc = Callable[[ContextVariables], str]


class Agent(BaseModel):
    """A named persona with a model target, instructions and a tool registry.

    Agents are frozen: the ``with_*`` builders return a modified copy, so runs
    sharing a base agent never observe each other's handoffs.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    model: str = DEFAULT_MODEL
    provider: LLMProvider | None = None
    instructions: str = ""
    instructions_func: InstructionsFunc | None = None
    tools: ToolRegistry = Field(default_factory=ToolRegistry)
    memory: MemoryStore | None = None
    parallel_tool_calls: bool = False

    @classmethod
    def create(cls, name: str, model: str = DEFAULT_MODEL, provider: LLMProvider | None = None) -> Agent:
        """New agent with a fresh memory store of the configured capacity."""
        return cls(
            name=name,
            model=model,
            provider=provider,
            memory=MemoryStore(DEFAULT_SWARM_CONFIG.memory_capacity),
        )

    @property
    def functions(self) -> list[AgentFunction]:
        return list(self.tools)

    def resolve_instructions(self, context_variables: ContextVariables) -> str:
        """Dynamic instructions win over static ones when both are set."""
        if self.instructions_func is not None:
            return self.instructions_func(copy_context_variables(context_variables))
        return self.instructions

    def with_functions(self, *functions: AgentFunction) -> Agent:
        return self.model_copy(update={"tools": self.tools.register(*functions)})

    def with_instructions(self, instructions: str) -> Agent:
        return self.model_copy(update={"instructions": instructions})

    def with_instructions_func(self, func: InstructionsFunc) -> Agent:
        return self.model_copy(update={"instructions_func": func})

    def with_parallel_tool_calls(self, enabled: bool) -> Agent:
        return self.model_copy(update={"parallel_tool_calls": enabled})

    def with_provider(self, provider: LLMProvider) -> Agent:
        return self.model_copy(update={"provider": provider})

    def with_memory(self, memory: MemoryStore | None) -> Agent:
        return self.model_copy(update={"memory": memory})
