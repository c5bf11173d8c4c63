"""FastAPI router exposing a swarm run."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from .agent import Agent
from .errors import InstructionsError, ModelProviderError
from .loop import Swarm
from .models import ROLE_ASSISTANT, Message, Response


class ChatRequest(BaseModel):
    """Request body for POST /chat."""

    messages: list[Message] = Field(..., description="Conversation history to continue")
    context_variables: dict[str, Any] = Field(default_factory=dict, description="Initial context variables")
    model: str | None = Field(None, description="Optional model override for every turn")
    max_turns: int | None = Field(None, ge=1, description="Optional turn limit")
    stream: bool = Field(False, description="Use the provider's streaming API internally")


class ChatResponse(BaseModel):
    """Response for POST /chat."""

    agent: str
    reply: str = ""
    messages: list[Message] = Field(default_factory=list)
    context_variables: dict[str, Any] = Field(default_factory=dict)


def final_reply(response: Response) -> str:
    """Content of the last plain assistant answer, or "" when the run ended on tool calls."""
    for m in reversed(response.messages):
        if m.role != ROLE_ASSISTANT or m.tool_calls or m.tool_call_id:
            continue
        if not (m.content or "").strip():
            continue
        return m.content
    return ""


def create_router(swarm: Swarm, agent: Agent) -> APIRouter:
    """Router with ``POST /chat`` running ``agent`` on ``swarm``."""
    router = APIRouter(prefix="/chat", tags=["chat"])

    @router.post("", response_model=ChatResponse)
    async def chat(request: ChatRequest) -> ChatResponse:
        """Run the agent loop and return the produced messages."""
        try:
            response = await swarm.run(
                agent,
                request.messages,
                context_variables=request.context_variables,
                model_override=request.model,
                stream=request.stream,
                max_turns=request.max_turns,
            )
        except ModelProviderError as e:
            raise HTTPException(status_code=502, detail=str(e)) from e
        except InstructionsError as e:
            raise HTTPException(status_code=500, detail=str(e)) from e
        except TypeError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        return ChatResponse(
            agent=response.agent.name if response.agent is not None else agent.name,
            reply=final_reply(response),
            messages=response.messages,
            context_variables=response.context_variables,
        )

    return router
