"""Push / pull / legs classification of exercises.

Classification runs in three stages and never raises:

1. exact name match against each split's exercise list (push, pull, legs)
2. substring name match against the same lists, same order
3. muscle-tag overlap with each split's primary muscles, skipping a split
   whose exclusion terms appear in the exercise name

An exercise that only matches through muscle tags resolves to the first
split in push, pull, legs order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal

from ..schemas.exercise import Exercise

Category = Literal["push", "pull", "legs", "unknown"]

CATEGORY_ORDER: tuple[str, ...] = ("push", "pull", "legs")


@dataclass(frozen=True)
class TrainingSplit:
    primary_muscles: tuple[str, ...]
    exercises: tuple[str, ...]
    excluded: tuple[str, ...]


TRAINING_SPLITS: dict[str, TrainingSplit] = {
    "push": TrainingSplit(
        primary_muscles=("Chest", "Shoulders", "Triceps", "Front Deltoids", "Side Deltoids"),
        exercises=(
            "Bench Press", "Incline Press", "Decline Press", "Dumbbell Press",
            "Overhead Press", "Military Press", "Arnold Press", "Shoulder Press",
            "Chest Flyes", "Cable Flyes", "Cable Fly", "Pec Deck",
            "Lateral Raise", "Front Raise",
            "Tricep Pushdown", "Skull Crusher", "Dips", "Close Grip Bench",
            "Tricep Extension", "Tricep Kickback",
        ),
        excluded=("Deadlift", "Squat", "Row", "Pull-up", "Chin-up", "Curl"),
    ),
    "pull": TrainingSplit(
        primary_muscles=("Back", "Lats", "Traps", "Rhomboids", "Biceps", "Rear Deltoids"),
        exercises=(
            "Pull-up", "Chin-up", "Lat Pulldown",
            "Barbell Row", "Dumbbell Row", "Cable Row", "T-Bar Row", "Seated Row",
            "Face Pull", "Reverse Flyes",
            "Shrug", "Upright Row",
            "Bicep Curl", "Hammer Curl", "Preacher Curl", "Cable Curl",
            # reached before the legs list, so only exact legs names such as
            # "Romanian Deadlift" stay on legs; other deadlift variants are pull
            "Deadlift",
        ),
        excluded=("Squat", "Leg Press", "Leg Extension", "Leg Curl", "Bench Press", "Overhead Press"),
    ),
    "legs": TrainingSplit(
        primary_muscles=("Quadriceps", "Hamstrings", "Glutes", "Calves", "Hip Flexors"),
        exercises=(
            "Squat", "Front Squat", "Back Squat", "Goblet Squat", "Bulgarian Split Squat",
            "Deadlift", "Romanian Deadlift", "Sumo Deadlift", "Trap Bar Deadlift",
            "Leg Press", "Hack Squat",
            "Lunge", "Walking Lunge", "Reverse Lunge",
            "Leg Extension", "Leg Curl", "Hamstring Curl",
            "Hip Thrust", "Glute Bridge", "Good Morning", "Step Up",
            "Calf Raise", "Seated Calf Raise", "Standing Calf Raise",
        ),
        excluded=("Bench Press", "Row", "Pull-up", "Overhead Press", "Curl"),
    ),
}

# "upper" and "lower" are accepted as plan categories and map onto the splits
PLAN_CATEGORIES: dict[str, frozenset[str]] = {
    "push": frozenset({"push"}),
    "pull": frozenset({"pull"}),
    "legs": frozenset({"legs"}),
    "upper": frozenset({"push", "pull"}),
    "lower": frozenset({"legs"}),
}

_MUSCLE_TERMS: dict[str, list[str]] = {
    "chest": ["Chest"],
    "back": ["Back", "Lats", "Traps"],
    "shoulders": ["Shoulders", "Front Deltoids", "Side Deltoids", "Rear Deltoids"],
    "arms": ["Biceps", "Triceps"],
    "biceps": ["Biceps"],
    "triceps": ["Triceps"],
    "legs": ["Quadriceps", "Hamstrings", "Glutes", "Calves"],
    "quads": ["Quadriceps"],
    "hamstrings": ["Hamstrings"],
    "glutes": ["Glutes"],
    "calves": ["Calves"],
    "core": ["Core", "Abs"],
}


def normalize(name: str) -> str:
    return name.lower().replace("-", " ").strip()


def _name_stage(name: str, exact: bool) -> str | None:
    for category in CATEGORY_ORDER:
        for listed in TRAINING_SPLITS[category].exercises:
            key = normalize(listed)
            if (name == key) if exact else (key in name):
                return category
    return None


def classify(exercise: Exercise) -> Category:
    name = normalize(exercise.name)

    category = _name_stage(name, exact=True) or _name_stage(name, exact=False)
    if category:
        return category  # type: ignore[return-value]

    muscles = [m.lower() for m in exercise.all_muscles()]
    for category in CATEGORY_ORDER:
        split = TRAINING_SPLITS[category]
        if any(normalize(term) in name for term in split.excluded):
            continue
        if any(target.lower() in m for target in split.primary_muscles for m in muscles):
            return category  # type: ignore[return-value]
    return "unknown"


def map_user_term(term: str) -> list[str]:
    """Expand a user-facing term ("push", "upper", "chest") into canonical muscles.

    Unknown terms pass through unchanged.
    """
    lowered = term.lower()
    if "push" in lowered:
        return list(TRAINING_SPLITS["push"].primary_muscles)
    if "pull" in lowered:
        return list(TRAINING_SPLITS["pull"].primary_muscles)
    if "leg" in lowered:
        return list(TRAINING_SPLITS["legs"].primary_muscles)
    if "upper" in lowered:
        return [*TRAINING_SPLITS["push"].primary_muscles, *TRAINING_SPLITS["pull"].primary_muscles]
    if "lower" in lowered:
        return list(TRAINING_SPLITS["legs"].primary_muscles)

    for key, muscles in _MUSCLE_TERMS.items():
        if key in lowered:
            return list(muscles)
    return [term]


def plan_category(term: str | None) -> str | None:
    """Return the split a request term names, or None for muscle-level requests."""
    if not term:
        return None
    lowered = term.lower()
    if "push" in lowered:
        return "push"
    if "pull" in lowered:
        return "pull"
    if "leg" in lowered:
        return "legs"
    if "upper" in lowered:
        return "upper"
    if "lower" in lowered:
        return "lower"
    return None


def validate_workout(exercises: Iterable[Exercise], category: str) -> list[str]:
    """Re-classify every exercise and describe any that fall outside ``category``.

    Returns an empty list when the workout is valid.
    """
    allowed = PLAN_CATEGORIES.get(category)
    if allowed is None:
        return []

    wrong = [ex.name for ex in exercises if classify(ex) not in allowed]
    if not wrong:
        return []

    label = {"push": "Push", "pull": "Pull", "legs": "Leg", "upper": "Upper", "lower": "Lower"}[category]
    noun = {"push": "non-push", "pull": "non-pull", "legs": "non-leg", "upper": "non-upper", "lower": "non-lower"}[category]
    return [f"{label} workout contains {noun} exercises: {', '.join(wrong)}"]
