"""Swarm configuration: defaults and environment overrides."""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

DEFAULT_MODEL = "gpt-4.1-nano"
DEFAULT_PROVIDER = "openai"
DEFAULT_MAX_TURNS = 10
DEFAULT_MEMORY_CAPACITY = 100

ENV_PREFIX = "AGENT_SWARM_"


class SwarmConfig(BaseModel):
    """Runtime defaults for a swarm, overridable from the environment."""

    default_model: str = Field(
        default=DEFAULT_MODEL,
        description="Model used when neither the agent nor the run names one.",
    )
    default_provider: str = Field(
        default=DEFAULT_PROVIDER,
        description="Provider name used when no provider is configured (openai, ollama, gemini).",
    )
    max_turns: int = Field(
        default=DEFAULT_MAX_TURNS,
        ge=1,
        description="Upper bound on model calls per run.",
    )
    memory_capacity: int = Field(
        default=DEFAULT_MEMORY_CAPACITY,
        ge=1,
        description="Number of entries a new agent memory store keeps.",
    )

    @classmethod
    def from_env(cls) -> SwarmConfig:
        """Build a config from AGENT_SWARM_* variables, falling back to defaults."""
        values: dict[str, str] = {}
        for name in cls.model_fields:
            raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
            if raw:
                values[name] = raw
        return cls.model_validate(values)


DEFAULT_SWARM_CONFIG = SwarmConfig.from_env()
