"""Run a demo triage swarm behind FastAPI."""

from __future__ import annotations

import uvicorn
from fastapi import FastAPI
from pydantic import BaseModel

from agent_swarm import Agent, Result, Swarm, agent_function, required_field
from agent_swarm.api import create_router


class WeatherArgs(BaseModel):
    location: str = required_field("City to look up")


class TransferArgs(BaseModel):
    pass


@agent_function(description="Get the current weather for a city.")
def get_weather(args: WeatherArgs, context_variables: dict) -> Result:
    unit = context_variables.get("unit", "celsius")
    return Result(success=True, data=f"It is 21 degrees {unit} and sunny in {args.location}.")


weather_agent = Agent(
    name="WeatherAgent",
    instructions="You answer weather questions using the get_weather tool.",
).with_functions(get_weather)


@agent_function(description="Hand the conversation to the weather specialist.")
def transfer_to_weather(args: TransferArgs, context_variables: dict) -> Result:
    return Result(success=True, data="Transferred to WeatherAgent.", agent=weather_agent)


triage_agent = Agent(
    name="TriageAgent",
    instructions="Route weather questions to the weather specialist; answer everything else yourself.",
).with_functions(transfer_to_weather)


app = FastAPI(title="Agent Swarm", version="0.1.0")
app.include_router(create_router(Swarm(), triage_agent))


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
