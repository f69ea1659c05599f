"""Tests for the HTTP surface."""

import pytest
from fastapi.testclient import TestClient

from coach.agent.tools import ToolName, ToolRegistry
from coach.errors import ValidationFailed
from coach.main import create_app
from coach.schemas.requests import GenerateWorkoutPlanRequest


@pytest.fixture
def client(registry):
    return TestClient(create_app(registry))


class TestMeta:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "tools": 18}

    def test_tools(self, client):
        tools = client.get("/tools").json()
        assert len(tools) == 18
        assert tools[0]["function"]["name"] == "generateWorkoutPlan"


class TestExecuteTool:
    def test_success(self, client):
        response = client.post("/tools/searchExercises", json={"query": "lunge"})
        assert response.status_code == 200
        assert response.json()["exercises"][0]["name"] == "Walking Lunge"

    def test_unknown_tool_is_404(self, client):
        assert client.post("/tools/bookFlight", json={}).status_code == 404

    def test_unknown_exercise_is_404(self, client):
        response = client.post("/tools/getExerciseInfo", json={"exerciseName": "Moon Press"})
        assert response.status_code == 404
        assert response.json()["detail"] == "Exercise 'Moon Press' not found"

    def test_bad_arguments_are_422(self, client):
        response = client.post("/tools/generateWorkoutProgram", json={"days": 12})
        assert response.status_code == 422
        assert response.json()["detail"][0]["loc"] == ["days"]

    def test_engine_error_is_400(self, client):
        response = client.post("/tools/analyzeExerciseProgression", json={"userId": "u1", "exerciseName": "squat"})
        assert response.status_code == 400
        assert response.json()["detail"].startswith("Not enough data for squat")

    def test_validation_failure_lists_offenders(self):
        def reject(request):
            raise ValidationFailed("push", ["Barbell Row"], ["Barbell Row is pull, not push"])

        registry = ToolRegistry()
        registry.register(ToolName.GENERATE_WORKOUT_PLAN, GenerateWorkoutPlanRequest, reject)
        client = TestClient(create_app(registry))

        response = client.post("/workouts/plan", json={"muscleGroups": ["push"]})
        assert response.status_code == 422
        assert response.json()["detail"]["offending"] == ["Barbell Row"]


class TestWorkouts:
    def test_plan(self, client):
        response = client.post("/workouts/plan", json={"muscleGroups": ["pull"], "goal": "strength"})
        workout = response.json()["workout"]
        assert response.status_code == 200
        assert workout["category"] == "pull"
        assert workout["totalExercises"] == 6

    def test_plan_requires_muscle_groups(self, client):
        assert client.post("/workouts/plan", json={"muscleGroups": []}).status_code == 422

    def test_program(self, client):
        response = client.post("/workouts/program", json={"days": 3})
        days = response.json()["program"]["workouts"]
        assert [d["name"] for d in days] == ["Push", "Pull", "Legs"]


class TestToolCalls:
    def test_messages(self, client):
        body = {
            "tool_calls": [
                {"id": "t1", "function": {"name": "checkDeloadStatus", "arguments": '{"userId": "u1"}'}},
                {"id": "t2", "function": {"name": "nope", "arguments": "{}"}},
            ]
        }
        messages = client.post("/tool-calls", json=body).json()["messages"]

        assert [m["tool_call_id"] for m in messages] == ["t1", "t2"]
        assert "No workout history found" in messages[0]["content"]
        assert messages[1]["content"] == "Error: Unknown tool 'nope'"
