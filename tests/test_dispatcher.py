"""Unit tests for single tool-call dispatch."""
from __future__ import annotations

import unittest

from pydantic import BaseModel

from agent_swarm import Agent, Result, handle_tool_call, new_agent_function
from agent_swarm.dispatcher import stringify_data
from agent_swarm.models import ToolCall, ToolCallFunction


class FunctionArgs(BaseModel):
    arg1: int = 0


class Payload(BaseModel):
    city: str
    degrees: int


def _call(name: str, arguments: str = "{}", call_id: str = "call_1") -> ToolCall:
    return ToolCall(id=call_id, function=ToolCallFunction(name=name, arguments=arguments))


def _agent(*functions) -> Agent:
    return Agent(name="Dispatcher").with_functions(*functions)


class TestHandleToolCall(unittest.IsolatedAsyncioTestCase):
    async def test_successful_call(self) -> None:
        fn = new_agent_function("addOne", "adds one", lambda a, cv: Result(success=True, data=a.arg1 + 1), FunctionArgs)
        outcome = await handle_tool_call(_call("addOne", '{"arg1": 123}'), _agent(fn), {})
        self.assertEqual(outcome.message.role, "assistant")
        self.assertEqual(outcome.message.content, "124")
        self.assertEqual(outcome.message.name, "addOne")
        self.assertEqual(outcome.message.tool_call_id, "call_1")
        self.assertTrue(outcome.succeeded)
        self.assertIsNone(outcome.agent)

    async def test_unknown_tool(self) -> None:
        outcome = await handle_tool_call(_call("missing"), _agent(), {"k": 1})
        self.assertEqual(outcome.message.content, "Error: Tool missing not found.")
        self.assertEqual(outcome.message.tool_call_id, "call_1")
        self.assertEqual(outcome.context_variables, {"k": 1})
        self.assertFalse(outcome.succeeded)

    async def test_tool_reported_failure(self) -> None:
        fn = new_agent_function("fails", "fails", lambda a, cv: Result(success=False, error="boom"), dict)
        outcome = await handle_tool_call(_call("fails"), _agent(fn), {})
        self.assertEqual(outcome.message.content, "Error: boom")
        self.assertFalse(outcome.succeeded)

    async def test_tool_exception_is_recovered(self) -> None:
        def explode(args: dict, context_variables: dict) -> Result:
            raise RuntimeError("kaput")

        fn = new_agent_function("explode", "explodes", explode)
        outcome = await handle_tool_call(_call("explode"), _agent(fn), {})
        self.assertEqual(outcome.message.content, "Error: kaput")

    async def test_invalid_json_arguments(self) -> None:
        fn = new_agent_function("addOne", "adds one", lambda a, cv: Result(success=True), FunctionArgs)
        outcome = await handle_tool_call(_call("addOne", '{"arg1": '), _agent(fn), {})
        self.assertTrue(outcome.message.content.startswith("Error: invalid arguments for tool addOne:"))

    async def test_non_object_arguments(self) -> None:
        fn = new_agent_function("addOne", "adds one", lambda a, cv: Result(success=True), FunctionArgs)
        outcome = await handle_tool_call(_call("addOne", "[1, 2]"), _agent(fn), {})
        self.assertIn("expected a JSON object", outcome.message.content)

    async def test_empty_arguments_mean_empty_object(self) -> None:
        fn = new_agent_function("addOne", "adds one", lambda a, cv: Result(success=True, data=a.arg1), FunctionArgs)
        outcome = await handle_tool_call(_call("addOne", ""), _agent(fn), {})
        self.assertEqual(outcome.message.content, "0")

    async def test_context_update_is_merged_into_copy(self) -> None:
        fn = new_agent_function(
            "remember",
            "remembers",
            lambda a, cv: Result(success=True, data="ok", context_variables={"user": "Ada"}),
            dict,
        )
        original = {"user": "Bob", "lang": "en"}
        outcome = await handle_tool_call(_call("remember"), _agent(fn), original)
        self.assertEqual(outcome.context_variables, {"user": "Ada", "lang": "en"})
        self.assertEqual(outcome.context_update, {"user": "Ada"})
        self.assertEqual(original, {"user": "Bob", "lang": "en"})

    async def test_in_place_nested_change_stays_with_the_tool(self) -> None:
        def meddle(args: dict, context_variables: dict) -> Result:
            context_variables["prefs"]["lang"] = "fr"
            return Result(success=True, data="ok")

        original = {"prefs": {"lang": "en"}}
        outcome = await handle_tool_call(_call("meddle"), _agent(new_agent_function("meddle", "", meddle)), original)
        self.assertEqual(original, {"prefs": {"lang": "en"}})
        self.assertEqual(outcome.context_variables, {"prefs": {"lang": "en"}})

    async def test_tool_sees_context_variables(self) -> None:
        fn = new_agent_function("greet", "greets", lambda a, cv: Result(success=True, data=f"hi {cv['user']}"), dict)
        outcome = await handle_tool_call(_call("greet"), _agent(fn), {"user": "Ada"})
        self.assertEqual(outcome.message.content, "hi Ada")

    async def test_invalid_context_update_is_recovered(self) -> None:
        fn = new_agent_function(
            "bad",
            "bad",
            lambda a, cv: Result(success=True, data="ok", context_variables={"handle": object()}),
            dict,
        )
        outcome = await handle_tool_call(_call("bad"), _agent(fn), {"k": "v"})
        self.assertTrue(outcome.message.content.startswith("Error: context variable 'handle'"))
        self.assertEqual(outcome.context_variables, {"k": "v"})
        self.assertEqual(outcome.context_update, {})

    async def test_handoff(self) -> None:
        other = Agent(name="Specialist")
        fn = new_agent_function("transfer", "transfer", lambda a, cv: Result(success=True, data="moved", agent=other), dict)
        outcome = await handle_tool_call(_call("transfer"), _agent(fn), {})
        self.assertIs(outcome.agent, other)
        self.assertEqual(outcome.message.content, "moved")

    async def test_returning_agent_is_a_handoff(self) -> None:
        other = Agent(name="Specialist")
        fn = new_agent_function("transfer", "transfer", lambda a, cv: other, dict)
        outcome = await handle_tool_call(_call("transfer"), _agent(fn), {})
        self.assertIs(outcome.agent, other)

    async def test_dry_run_does_not_execute(self) -> None:
        calls: list[dict] = []
        fn = new_agent_function("record", "records", lambda a, cv: calls.append(a) or Result(success=True), dict)
        outcome = await handle_tool_call(_call("record", '{"x": 1}'), _agent(fn), {}, execute=False)
        self.assertEqual(outcome.message.content, 'Tool call record with arguments {"x": 1} was not executed.')
        self.assertEqual(calls, [])


class TestStringifyData(unittest.TestCase):
    def test_kinds(self) -> None:
        self.assertEqual(stringify_data(None), "")
        self.assertEqual(stringify_data("plain"), "plain")
        self.assertEqual(stringify_data(42), "42")
        self.assertEqual(stringify_data({"a": 1}), '{"a": 1}')
        self.assertEqual(stringify_data([1, "b"]), '[1, "b"]')
        self.assertEqual(stringify_data(Payload(city="Oslo", degrees=3)), '{"city":"Oslo","degrees":3}')


if __name__ == "__main__":
    unittest.main()
