"""Tests for turning model tool calls into tool messages."""

import asyncio
import json
from unittest.mock import MagicMock

from coach.agent.dispatch import run_tool_call, run_tool_calls
from coach.agent.tools import ToolName, ToolRegistry
from coach.schemas.requests import GetExerciseInfoRequest


def _call(name, args, call_id="call_1"):
    return {"id": call_id, "type": "function", "function": {"name": name, "arguments": json.dumps(args)}}


class TestRunToolCall:
    def test_success_is_json_encoded(self, registry):
        msg = asyncio.run(run_tool_call(registry, _call("getExerciseInfo", {"exerciseName": "Deadlift"})))

        assert msg["role"] == "tool"
        assert msg["tool_call_id"] == "call_1"
        assert json.loads(msg["content"])["exercise"]["name"] == "Deadlift"

    def test_flat_call_shape(self, registry):
        call = {"id": "c9", "name": "searchExercises", "arguments": '{"query": "squat", "limit": 2}'}
        msg = asyncio.run(run_tool_call(registry, call))

        assert msg["tool_call_id"] == "c9"
        assert json.loads(msg["content"])["count"] == 2

    def test_unknown_tool(self, registry):
        msg = asyncio.run(run_tool_call(registry, _call("bookFlight", {})))
        assert msg["content"] == "Error: Unknown tool 'bookFlight'"

    def test_invalid_arguments(self, registry):
        msg = asyncio.run(run_tool_call(registry, _call("getExerciseInfo", {})))
        assert msg["content"].startswith("Error: invalid arguments for getExerciseInfo")

    def test_bad_json_arguments_are_treated_as_empty(self, registry):
        call = {"id": "c1", "function": {"name": "getExerciseInfo", "arguments": "{not json"}}
        msg = asyncio.run(run_tool_call(registry, call))
        assert msg["content"].startswith("Error: invalid arguments")

    def test_engine_error_message(self, registry):
        msg = asyncio.run(run_tool_call(registry, _call("getExerciseInfo", {"exerciseName": "Moon Press"})))
        assert msg["content"] == "Error: Exercise 'Moon Press' not found"

    def test_unexpected_error(self):
        registry = ToolRegistry()
        registry.register(
            ToolName.GET_EXERCISE_INFO, GetExerciseInfoRequest, MagicMock(side_effect=RuntimeError("boom"))
        )
        msg = asyncio.run(run_tool_call(registry, _call("getExerciseInfo", {"exerciseName": "x"})))
        assert msg["content"] == "Tool error: boom"

    def test_string_results_pass_through(self):
        registry = ToolRegistry()
        registry.register(ToolName.GET_EXERCISE_INFO, GetExerciseInfoRequest, lambda r: "plain text")
        msg = asyncio.run(run_tool_call(registry, _call("getExerciseInfo", {"exerciseName": "x"})))
        assert msg["content"] == "plain text"


class TestRunToolCalls:
    def test_order_is_preserved(self, registry):
        calls = [
            _call("getExerciseInfo", {"exerciseName": "Back Squat"}, "a"),
            _call("nope", {}, "b"),
            _call("searchExercises", {"query": "row"}, "c"),
        ]
        messages = asyncio.run(run_tool_calls(registry, calls))

        assert [m["tool_call_id"] for m in messages] == ["a", "b", "c"]
        assert messages[1]["content"].startswith("Error: Unknown tool")
