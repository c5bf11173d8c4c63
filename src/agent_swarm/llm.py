"""Provider factory and the process-wide default provider."""

from __future__ import annotations

from .config import DEFAULT_SWARM_CONFIG
from .providers import GeminiProvider, LLMProvider, OllamaProvider, OpenAIProvider

_default_provider: LLMProvider | None = None


def create_provider(
    name: str,
    api_key: str | None = None,
    base_url: str | None = None,
) -> LLMProvider:
    """Build a provider by name: ``openai``, ``ollama``, ``gemini`` (alias ``google``).

    ``base_url`` points OpenAI at a compatible host or Ollama at a server;
    Gemini ignores it.
    """
    provider_name = (name or "").strip().lower()
    if provider_name == "openai":
        return OpenAIProvider(api_key=api_key, base_url=base_url)
    if provider_name in ("gemini", "google"):
        return GeminiProvider(api_key=api_key)
    if provider_name == "ollama":
        return OllamaProvider(base_url=base_url)
    raise ValueError(f"Unknown LLM provider: {name!r}")


def get_default_provider() -> LLMProvider:
    """Return the default LLM provider, built from configuration on first use."""
    global _default_provider
    if _default_provider is None:
        _default_provider = create_provider(DEFAULT_SWARM_CONFIG.default_provider)
    return _default_provider


def set_default_provider(provider: LLMProvider | None) -> None:
    """Set the provider used when neither the agent nor the swarm has one."""
    global _default_provider
    _default_provider = provider
