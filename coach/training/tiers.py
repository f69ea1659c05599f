"""Exercise quality tiers and ordering.

Tiers only order exercises; they never exclude one. Two tables live here:
``EXERCISE_TIERS`` ranks exercises inside a push/pull/legs split, and
``MUSCLE_HIERARCHY`` ranks them per target muscle with explicit priorities.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Literal, Sequence, TypeVar

from ..schemas.exercise import Exercise
from .taxonomy import normalize

Tier = Literal["S", "A", "B"]

TIER_ORDER: tuple[str, ...] = ("S", "A", "B")

E = TypeVar("E", bound=Exercise)

EXERCISE_TIERS: dict[str, dict[str, tuple[str, ...]]] = {
    "push": {
        "S": (
            "Bench Press", "Barbell Bench Press", "Flat Bench Press",
            "Overhead Press", "Military Press", "Shoulder Press",
            "Incline Bench Press", "Incline Press",
            "Dips", "Weighted Dips",
        ),
        "A": (
            "Dumbbell Bench Press", "DB Bench Press",
            "Dumbbell Shoulder Press", "DB Shoulder Press",
            "Close Grip Bench Press", "CGBP",
            "Decline Bench Press",
            "Incline Dumbbell Press",
            "Chest Press Machine",
        ),
        "B": (
            "Cable Fly", "Cable Flyes", "Chest Flyes",
            "Lateral Raise", "Dumbbell Lateral Raise",
            "Tricep Pushdown", "Cable Tricep Pushdown",
            "Overhead Tricep Extension",
            "Skull Crusher", "Lying Tricep Extension",
            "Front Raise",
        ),
    },
    "pull": {
        "S": (
            "Pull-up", "Weighted Pull-up", "Chin-up",
            "Barbell Row", "Bent Over Row", "Pendlay Row",
            "Deadlift", "Conventional Deadlift",
            "Lat Pulldown", "Wide Grip Lat Pulldown",
        ),
        "A": (
            "T-Bar Row",
            "Cable Row", "Seated Cable Row",
            "Dumbbell Row", "Single Arm Dumbbell Row",
            "Face Pull", "Cable Face Pull",
            "Chest Supported Row",
            "Shrug", "Barbell Shrug",
        ),
        "B": (
            "Bicep Curl", "Barbell Curl", "Dumbbell Curl",
            "Hammer Curl", "Dumbbell Hammer Curl",
            "Preacher Curl",
            "Reverse Fly", "Rear Delt Fly",
            "Cable Curl",
            "Concentration Curl",
        ),
    },
    "legs": {
        "S": (
            "Squat", "Back Squat", "Barbell Squat",
            "Front Squat",
            "Deadlift", "Romanian Deadlift", "RDL",
            "Leg Press",
            "Bulgarian Split Squat", "Split Squat",
        ),
        "A": (
            "Hack Squat",
            "Sumo Deadlift",
            "Walking Lunge", "Lunge",
            "Leg Curl", "Lying Leg Curl", "Seated Leg Curl",
            "Hip Thrust", "Barbell Hip Thrust",
            "Leg Extension",
        ),
        "B": (
            "Calf Raise", "Standing Calf Raise", "Seated Calf Raise",
            "Glute Bridge",
            "Goblet Squat",
            "Step Up", "Dumbbell Step Up",
            "Good Morning",
        ),
    },
}

EQUIPMENT_PRIORITY: tuple[tuple[tuple[str, ...], int], ...] = (
    (("barbell",), 1),
    (("dumbbell",), 2),
    (("bodyweight", "body weight"), 3),
    (("cable",), 4),
    (("machine",), 5),
)

UNKNOWN_EQUIPMENT_PRIORITY = 99


def _match_tier(name: str, table: dict[str, tuple[str, ...]]) -> str | None:
    """Exact name first, then substring either way.

    A name only matches as a fragment of a longer listed name when it has at
    least two words, so "Press" or "" never borrow a listed tier.
    """
    key = normalize(name)
    if not key:
        return None
    partial = len(key.split()) > 1
    for tier in TIER_ORDER:
        if any(normalize(listed) == key for listed in table.get(tier, ())):
            return tier
    for tier in TIER_ORDER:
        for listed in table.get(tier, ()):
            other = normalize(listed)
            if other in key or (partial and key in other):
                return tier
    return None


def matched_tier(exercise_name: str, category: str) -> str | None:
    """Tier from the split table, or None when the exercise is not listed."""
    return _match_tier(exercise_name, EXERCISE_TIERS.get(category, {}))


def tier(exercise_name: str, category: str) -> Tier:
    """Tier of an exercise inside one split. Unlisted exercises are ``B``."""
    table = EXERCISE_TIERS.get(category)
    if not table:
        return "B"
    return _match_tier(exercise_name, table) or "B"  # type: ignore[return-value]


def equipment_priority(tag: str | None) -> int:
    """Lower is preferred: free weights, then bodyweight, cables, machines."""
    lowered = (tag or "").lower()
    for needles, priority in EQUIPMENT_PRIORITY:
        if any(needle in lowered for needle in needles):
            return priority
    return UNKNOWN_EQUIPMENT_PRIORITY


def prioritize(exercises: Iterable[E], category: str) -> list[E]:
    """Order by tier S, A, B, then exercises missing from the table.

    The sort is stable, so callers control ordering within a tier.
    """
    table = EXERCISE_TIERS.get(category, {})
    rank = {t: i for i, t in enumerate(TIER_ORDER)}

    def key(ex: Exercise) -> int:
        matched = _match_tier(ex.name, table)
        return rank[matched] if matched else len(TIER_ORDER)

    return sorted(exercises, key=key)


# --- per-muscle hierarchy ---------------------------------------------------


@dataclass(frozen=True)
class RankedExercise:
    name: str
    tier: str
    priority: int
    aliases: tuple[str, ...] = field(default_factory=tuple)
    movement: str | None = None

    def names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)


def _ranked(tier_name: str, priority: int, name: str, *aliases: str, movement: str | None = None):
    return RankedExercise(name=name, tier=tier_name, priority=priority, aliases=aliases, movement=movement)


MUSCLE_HIERARCHY: dict[str, tuple[RankedExercise, ...]] = {
    "chest": (
        _ranked("S", 1, "Incline Barbell Press", "Incline Bench Press", "Incline Press"),
        _ranked("S", 2, "Flat Barbell Bench Press", "Bench Press", "Barbell Bench Press"),
        _ranked("S", 3, "Dips", "Chest Dips", "Parallel Bar Dips"),
        _ranked("A", 4, "Incline Dumbbell Press", "DB Incline Press"),
        _ranked("A", 5, "Flat Dumbbell Press", "Dumbbell Bench Press", "DB Press"),
        _ranked("A", 6, "Decline Barbell Press", "Decline Bench Press"),
        _ranked("B", 7, "Cable Flyes", "Cable Fly", "Cable Chest Fly"),
        _ranked("B", 8, "Dumbbell Flyes", "DB Flyes", "Chest Flyes"),
        _ranked("B", 9, "Pec Deck", "Machine Fly", "Chest Fly Machine"),
    ),
    "triceps": (
        _ranked(
            "S", 1, "Overhead Tricep Extension", "Overhead Extension",
            "Tricep Overhead Extension", "Dumbbell Overhead Extension", "Cable Overhead Extension",
        ),
        _ranked("S", 2, "Close Grip Bench Press", "CGBP", "Close Grip Bench"),
        _ranked("S", 3, "Dips", "Tricep Dips", "Parallel Bar Dips"),
        _ranked("A", 4, "Skull Crushers", "Skull Crusher", "Lying Tricep Extension", "EZ Bar Skull Crusher"),
        _ranked("A", 5, "Bench Dips"),
        _ranked("B", 6, "Tricep Pushdown", "Cable Pushdown", "Tricep Cable Pushdown"),
        _ranked("B", 7, "Tricep Kickback", "Dumbbell Kickback"),
    ),
    "biceps": (
        _ranked("S", 1, "Bayesian Curl", "Cable Bayesian Curl", "Behind Body Cable Curl"),
        _ranked("S", 2, "Barbell Curl", "Standing Barbell Curl", "EZ Bar Curl"),
        _ranked("A", 3, "Incline Dumbbell Curl", "Incline Curl", "Incline DB Curl"),
        _ranked("A", 4, "Hammer Curl", "Dumbbell Hammer Curl", "Neutral Grip Curl"),
        _ranked("A", 5, "Cable Curl", "Cable Bicep Curl"),
        _ranked("B", 6, "Preacher Curl", "EZ Bar Preacher Curl", "Machine Preacher Curl"),
        _ranked("B", 7, "Concentration Curl", "Dumbbell Concentration Curl"),
    ),
    "back": (
        _ranked("S", 1, "Pull-up", "Pull Ups", "Wide Grip Pull-Up", "Pullup", movement="vertical"),
        _ranked("S", 2, "Barbell Row", "Bent Over Row", "Barbell Bent Over Row", "BB Row", movement="horizontal"),
        _ranked("S", 3, "Deadlift", "Conventional Deadlift", "Barbell Deadlift", movement="hinge"),
        _ranked("A", 4, "Cable Row", "Seated Cable Row", "Cable Seated Row", movement="horizontal"),
        _ranked("A", 5, "T-Bar Row", "T Bar Row", "Landmine Row", movement="horizontal"),
        _ranked("A", 6, "Dumbbell Row", "One Arm Dumbbell Row", "Single Arm DB Row", "DB Row", movement="horizontal"),
        _ranked("A", 7, "Face Pull", "Cable Face Pull", "Rope Face Pull", movement="horizontal"),
        _ranked("B", 8, "Lat Pulldown", "Lat Pull Down", "Wide Grip Lat Pulldown", movement="vertical"),
        _ranked("B", 9, "Shrugs", "Barbell Shrug", "Dumbbell Shrug", movement="isolation"),
        _ranked("B", 10, "Reverse Flyes", "Rear Delt Flyes", "Reverse Fly", movement="isolation"),
    ),
    "shoulders": (
        _ranked("S", 1, "Overhead Press", "Military Press", "Barbell Overhead Press", "OHP", "Standing Press"),
        _ranked("S", 2, "Dumbbell Shoulder Press", "DB Shoulder Press", "Seated Dumbbell Press", "Arnold Press"),
        _ranked("A", 3, "Lateral Raise", "Dumbbell Lateral Raise", "Side Raise", "DB Lateral Raise"),
        _ranked("A", 4, "Face Pull", "Cable Face Pull", "Rope Face Pull"),
        _ranked("A", 5, "Upright Row", "Barbell Upright Row", "Cable Upright Row"),
        _ranked("B", 6, "Front Raise", "Dumbbell Front Raise", "Barbell Front Raise"),
        _ranked("B", 7, "Reverse Flyes", "Rear Delt Fly", "Pec Deck Reverse"),
    ),
    "quads": (
        _ranked("S", 1, "Barbell Squat", "Back Squat", "Squat", "High Bar Squat", "Low Bar Squat"),
        _ranked("S", 2, "Front Squat", "Barbell Front Squat"),
        _ranked("S", 3, "Bulgarian Split Squat", "Split Squat", "Rear Foot Elevated Split Squat"),
        _ranked("A", 4, "Leg Press", "Machine Leg Press", "45 Degree Leg Press"),
        _ranked("A", 5, "Hack Squat", "Machine Hack Squat"),
        _ranked("A", 6, "Lunges", "Walking Lunge", "Dumbbell Lunge", "Barbell Lunge"),
        _ranked("B", 7, "Leg Extension", "Machine Leg Extension"),
    ),
    "hamstrings": (
        _ranked("S", 1, "Romanian Deadlift", "RDL", "Barbell RDL", "Dumbbell RDL"),
        _ranked("S", 2, "Conventional Deadlift", "Deadlift", "Barbell Deadlift"),
        _ranked("A", 3, "Leg Curl", "Lying Leg Curl", "Seated Leg Curl", "Machine Leg Curl"),
        _ranked("A", 4, "Good Morning", "Barbell Good Morning"),
        _ranked("B", 5, "Glute Ham Raise", "GHR", "Nordic Curl"),
    ),
    "glutes": (
        _ranked("S", 1, "Hip Thrust", "Barbell Hip Thrust", "Glute Bridge"),
        _ranked("S", 2, "Romanian Deadlift", "RDL", "Barbell RDL"),
        _ranked("A", 3, "Bulgarian Split Squat", "Split Squat", "Rear Foot Elevated Split Squat"),
        _ranked("A", 4, "Step Up", "Step-Ups", "Dumbbell Step Up", "Barbell Step Up"),
        _ranked("B", 5, "Cable Pull Through", "Cable Pull-Through"),
    ),
    "calves": (
        _ranked("A", 1, "Standing Calf Raise", "Machine Calf Raise", "Barbell Calf Raise"),
        _ranked("A", 2, "Seated Calf Raise", "Machine Seated Calf Raise"),
    ),
}

_MUSCLE_KEYS = {
    "quadriceps": "quads",
    "legs_quads": "quads",
    "legs_hamstrings": "hamstrings",
    "legs_glutes": "glutes",
}


def _lookup(exercise_name: str, muscle: str) -> RankedExercise | None:
    key = muscle.lower().strip().replace(" ", "_")
    entries = MUSCLE_HIERARCHY.get(_MUSCLE_KEYS.get(key, key), ())
    target = normalize(exercise_name)
    for entry in entries:
        if any(normalize(n) == target for n in entry.names()):
            return entry
    return None


def muscle_tier(exercise_name: str, muscle: str) -> Tier:
    """Tier from the per-muscle table. Exact name or alias only; default ``B``."""
    entry = _lookup(exercise_name, muscle)
    return entry.tier if entry else "B"  # type: ignore[return-value]


def sort_by_muscle_priority(exercises: Sequence[E], muscle: str) -> list[E]:
    """Order by the muscle's research priority, then by equipment preference."""

    def key(ex: Exercise) -> tuple[int, int]:
        entry = _lookup(ex.name, muscle)
        return (entry.priority if entry else 999, equipment_priority(ex.equipment))

    return sorted(exercises, key=key)
