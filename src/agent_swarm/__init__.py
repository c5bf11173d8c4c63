"""agent_swarm: multi-agent LLM conversations with typed tools and handoffs."""

from .agent import Agent
from .dispatcher import ToolCallOutcome, handle_tool_call
from .errors import (
    InstructionsError,
    ModelProviderError,
    RunCancelledError,
    RunError,
    SchemaGenerationError,
    SwarmError,
)
from .functions import (
    AgentFunction,
    ToolRegistry,
    agent_function,
    function_to_definition,
    new_agent_function,
)
from .llm import create_provider, get_default_provider, set_default_provider
from .loop import Swarm, accumulate_stream
from .memory import MemoryEntry, MemoryStore
from .models import (
    ContextVariables,
    Message,
    Response,
    Result,
    ToolCall,
    ToolCallFunction,
    ToolDef,
)
from .presentation import process_and_print_response
from .providers import LLMProvider, StreamChunk, ToolCallDelta
from .schema import compile_parameters, required_field

__all__ = [
    "Agent",
    "AgentFunction",
    "ContextVariables",
    "InstructionsError",
    "LLMProvider",
    "MemoryEntry",
    "MemoryStore",
    "Message",
    "ModelProviderError",
    "Response",
    "Result",
    "RunCancelledError",
    "RunError",
    "SchemaGenerationError",
    "StreamChunk",
    "Swarm",
    "SwarmError",
    "ToolCall",
    "ToolCallDelta",
    "ToolCallFunction",
    "ToolCallOutcome",
    "ToolDef",
    "ToolRegistry",
    "accumulate_stream",
    "agent_function",
    "compile_parameters",
    "create_provider",
    "function_to_definition",
    "get_default_provider",
    "handle_tool_call",
    "new_agent_function",
    "process_and_print_response",
    "required_field",
    "set_default_provider",
]
