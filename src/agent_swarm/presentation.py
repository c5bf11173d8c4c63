"""Human-readable rendering of a finished run."""

from __future__ import annotations

from typing import TextIO

from .models import ROLE_ASSISTANT, Response

_BLUE = "\033[94m"
_PURPLE = "\033[95m"
_RESET = "\033[0m"


def process_and_print_response(response: Response, sink: TextIO, color: bool = True) -> None:
    """Write each assistant turn of ``response`` to ``sink``.

    Assistant content is prefixed with the speaker's name; requested tool
    calls are listed as ``name(arguments)`` beneath it.
    """
    blue, purple, reset = (_BLUE, _PURPLE, _RESET) if color else ("", "", "")
    for message in response.messages:
        if message.role != ROLE_ASSISTANT:
            continue
        speaker = message.name or ROLE_ASSISTANT
        if message.content:
            sink.write(f"{blue}{speaker}{reset}: {message.content}\n")
        for tc in message.tool_calls or []:
            sink.write(f"{purple}{tc.function.name}{reset}({tc.function.arguments})\n")
    if response.agent is not None:
        sink.write(f"Active agent: {response.agent.name}\n")
    sink.flush()
