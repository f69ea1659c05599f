"""Exercise reference catalog.

The bundled ``coach/data/exercises.json`` is read once on first use.
Set ``EXERCISE_CATALOG_PATH`` to load a different file.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from ..errors import ExerciseNotFound
from ..schemas.exercise import Exercise

logger = logging.getLogger(__name__)

_DEFAULT_PATH = Path(__file__).resolve().parent.parent / "data" / "exercises.json"

_EXERCISES: tuple[Exercise, ...] | None = None


def _catalog_path() -> Path:
    override = os.getenv("EXERCISE_CATALOG_PATH")
    return Path(override) if override else _DEFAULT_PATH


def load_exercises(path: str | Path | None = None) -> tuple[Exercise, ...]:
    """Parse a catalog file into frozen ``Exercise`` entries."""
    path = Path(path) if path else _catalog_path()
    raw = json.loads(path.read_text())
    exercises = tuple(Exercise.model_validate(item) for item in raw)
    logger.info("Loaded %d exercises from %s", len(exercises), path)
    return exercises


def get_all_exercises() -> tuple[Exercise, ...]:
    global _EXERCISES
    if _EXERCISES is None:
        _EXERCISES = load_exercises()
    return _EXERCISES


def find_exercise(name: str, exercises: tuple[Exercise, ...] | list[Exercise] | None = None) -> Exercise:
    """Case-insensitive exact lookup by name.

    Raises:
        ExerciseNotFound: if no catalog entry has that name.
    """
    pool = exercises if exercises is not None else get_all_exercises()
    key = name.strip().lower()
    for exercise in pool:
        if exercise.name.lower() == key:
            return exercise
    raise ExerciseNotFound(name)


def search(
    exercises: tuple[Exercise, ...] | list[Exercise],
    query: str | None = None,
    muscle_group: str | None = None,
    equipment: str | None = None,
    difficulty: str | None = None,
    limit: int = 10,
) -> list[Exercise]:
    """Filter the catalog. Every given criterion must match (substring, case-insensitive)."""
    results = []
    for ex in exercises:
        muscles = " ".join([*ex.all_muscles(), ex.muscleGroup or ""]).lower()
        if query:
            haystack = f"{ex.name} {muscles} {ex.equipment}".lower()
            if query.lower() not in haystack:
                continue
        if muscle_group and muscle_group.lower() not in muscles:
            continue
        if equipment and equipment.lower() not in ex.equipment.lower():
            continue
        if difficulty and (ex.difficulty or "").lower() != difficulty.lower():
            continue
        results.append(ex)
        if len(results) >= limit:
            break
    return results
