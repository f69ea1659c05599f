from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from coach.schemas.history import ExerciseLog, SetRecord, WorkoutRecord
from coach.training.catalog import load_exercises

NOW = datetime(2025, 6, 16, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def catalog():
    return load_exercises()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def exercise_log():
    def make(name, muscles=("Chest",), sets=((135, 10, 8),), equipment="Barbell", **kwargs):
        return ExerciseLog(
            name=name,
            equipment=equipment,
            primaryMuscles=list(muscles),
            completedSets=[SetRecord(weight=w, reps=r, rpe=rpe) for w, r, rpe in sets],
            **kwargs,
        )

    return make


@pytest.fixture
def workout():
    def make(days_ago, exercises=(), title=None, is_deload=False):
        return WorkoutRecord(
            id=f"w{days_ago}",
            date=NOW - timedelta(days=days_ago),
            title=title,
            exercises=list(exercises),
            isDeload=is_deload,
        )

    return make


@pytest.fixture
def history(clock):
    from coach.providers import InMemoryHistory

    return InMemoryHistory(clock=clock)


@pytest.fixture
def registry(history, catalog, clock):
    from coach.agent.handlers import CoachTools, init_registry
    from coach.agent.tools import ToolRegistry

    return init_registry(ToolRegistry(), CoachTools(history, catalog, clock))
