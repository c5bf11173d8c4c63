"""LLM providers: pluggable model backends for the swarm engine."""

from .base import LLMProvider, StreamChunk, ToolCallDelta
from .gemini_provider import GeminiProvider
from .ollama import OllamaProvider
from .openai_provider import OpenAIProvider

__all__ = [
    "LLMProvider",
    "StreamChunk",
    "ToolCallDelta",
    "OllamaProvider",
    "OpenAIProvider",
    "GeminiProvider",
]
