"""Tests for rendering a run to a text sink."""
from __future__ import annotations

import io
import unittest

from agent_swarm import Agent, Response, process_and_print_response
from agent_swarm.models import Message

from scripted_provider import assistant


class TestProcessAndPrintResponse(unittest.TestCase):
    def test_renders_speakers_and_tool_calls(self) -> None:
        call = assistant("", ("call_1", "testFunction", '{"arg1": "value1"}')).model_copy(update={"name": "TestAgent"})
        response = Response(
            messages=[
                call,
                Message(role="assistant", name="testFunction", content="ok", tool_call_id="call_1"),
                Message(role="assistant", name="TestAgent", content="Here is the result of the function."),
            ],
            agent=Agent(name="TestAgent"),
        )
        sink = io.StringIO()
        process_and_print_response(response, sink, color=False)
        self.assertEqual(
            sink.getvalue(),
            'testFunction({"arg1": "value1"})\n'
            "testFunction: ok\n"
            "TestAgent: Here is the result of the function.\n"
            "Active agent: TestAgent\n",
        )

    def test_color_codes(self) -> None:
        sink = io.StringIO()
        response = Response(messages=[Message(role="assistant", name="A", content="hi")])
        process_and_print_response(response, sink)
        self.assertIn("\033[94mA\033[0m: hi", sink.getvalue())

    def test_skips_non_assistant_messages(self) -> None:
        sink = io.StringIO()
        response = Response(messages=[Message(role="user", content="hello")])
        process_and_print_response(response, sink, color=False)
        self.assertEqual(sink.getvalue(), "")


if __name__ == "__main__":
    unittest.main()
