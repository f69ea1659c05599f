"""Single-session workout plans and multi-day programs.

Pipeline for ``generate_plan``:

1. expand the requested terms into canonical muscles
2. build the candidate pool with the first ``FilterStrategy`` that yields
   anything (as requested, then without equipment, then broadened terms)
3. pick a duration-based number of exercises using the goal's tier mix
4. order compounds before isolation and apply per-split balance rules
5. attach the goal x experience set scheme and validate the split
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Sequence

from ..errors import NoExercisesFound, ValidationFailed
from ..schemas.exercise import Exercise
from ..schemas.requests import GenerateWorkoutPlanRequest
from ..schemas.workout import PlannedExercise, ProgramDay, WorkoutPlan, WorkoutProgram
from .catalog import find_exercise
from .deload import generate_deload_workout
from .taxonomy import PLAN_CATEGORIES, classify, map_user_term, plan_category, validate_workout
from .tiers import TIER_ORDER, equipment_priority, matched_tier, prioritize

logger = logging.getLogger(__name__)

# never generated, whatever the request
EXCLUDED_EXERCISES: tuple[str, ...] = (
    "decline bench press",
    "decline dumbbell bench press",
    "decline barbell bench press",
    "decline press",
    "decline chest press",
    "decline flyes",
    "decline dumbbell flyes",
)

BROAD_TERMS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("chest", ("chest", "pectorals", "pecs")),
    ("tricep", ("triceps", "arms")),
    ("bicep", ("biceps", "arms")),
    ("back", ("back", "lats", "traps")),
    ("shoulder", ("shoulders", "deltoids", "delts")),
    ("leg", ("legs", "quadriceps", "hamstrings", "glutes")),
)

# which split a muscle-level request term draws from
TERM_CATEGORIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("chest", ("push",)),
    ("shoulder", ("push",)),
    ("tricep", ("push",)),
    ("arms", ("push", "pull")),
    ("back", ("pull",)),
    ("lats", ("pull",)),
    ("traps", ("pull",)),
    ("bicep", ("pull",)),
    ("leg", ("legs",)),
    ("quad", ("legs",)),
    ("hamstring", ("legs",)),
    ("glute", ("legs",)),
    ("calves", ("legs",)),
)

TIER_MIX: dict[str, dict[str, float]] = {
    "strength": {"S": 0.7, "A": 0.3},
    "hypertrophy": {"S": 0.4, "A": 0.4, "B": 0.2},
    "general": {"S": 0.4, "A": 0.4, "B": 0.2},
    "endurance": {"S": 0.3, "A": 0.3, "B": 0.4},
}

SET_SCHEMES: dict[str, dict[str, tuple[int, str, int]]] = {
    "strength": {
        "beginner": (3, "5-6", 180),
        "intermediate": (4, "4-6", 180),
        "advanced": (5, "3-5", 240),
    },
    "hypertrophy": {
        "beginner": (3, "8-10", 90),
        "intermediate": (4, "8-12", 90),
        "advanced": (4, "8-12", 60),
    },
    "endurance": {
        "beginner": (2, "12-15", 60),
        "intermediate": (3, "15-20", 45),
        "advanced": (3, "20-25", 30),
    },
    "general": {
        "beginner": (3, "8-10", 90),
        "intermediate": (3, "8-12", 75),
        "advanced": (4, "8-12", 60),
    },
}

COMPOUND_TERMS = ("Squat", "Deadlift", "Bench", "Press", "Row", "Pull-up", "Pull Up", "Dip", "Lunge")
ISOLATION_TERMS = ("Curl", "Extension", "Raise", "Fly", "Flyes", "Pushdown", "Pulldown")

PRESSING_TERMS = ("bench press", "incline", "decline", "close grip", "chest press", "dumbbell press")
MAX_PRESSES = 3
VERTICAL_PULLS = ("pull-up", "chin-up", "lat pulldown", "pull up", "pull ups")
HORIZONTAL_PULLS = ("row",)
MAX_VERTICAL_PULLS = 2
MIN_HORIZONTAL_PULLS = 2
QUAD_TERMS = ("squat", "leg press", "leg extension", "front squat", "hack squat", "lunge")
HAMSTRING_TERMS = ("romanian deadlift", "rdl", "leg curl", "deadlift", "good morning", "hip thrust")

PROGRAM_SPLITS: dict[int, tuple[tuple[str, tuple[str, ...]], ...]] = {
    3: (
        ("Push", ("chest", "shoulders", "triceps")),
        ("Pull", ("back", "biceps")),
        ("Legs", ("legs",)),
    ),
    4: (
        ("Upper", ("chest", "back", "shoulders", "arms")),
        ("Lower", ("legs",)),
        ("Upper", ("chest", "back", "shoulders", "arms")),
        ("Lower", ("legs",)),
    ),
    5: (
        ("Chest", ("chest",)),
        ("Back", ("back",)),
        ("Legs", ("legs",)),
        ("Shoulders", ("shoulders",)),
        ("Arms", ("biceps", "triceps")),
    ),
    6: (
        ("Push", ("chest", "shoulders", "triceps")),
        ("Pull", ("back", "biceps")),
        ("Legs", ("legs",)),
        ("Push", ("chest", "shoulders", "triceps")),
        ("Pull", ("back", "biceps")),
        ("Legs", ("legs",)),
    ),
}
PROGRAM_DAY_MINUTES = 60


def _has(name: str, terms: Sequence[str]) -> bool:
    lowered = name.lower()
    return any(t.lower() in lowered for t in terms)


def _has_case(name: str, terms: Sequence[str]) -> bool:
    return any(t in name for t in terms)


def _is_excluded(exercise: Exercise) -> bool:
    return _has(exercise.name, EXCLUDED_EXERCISES)


def _matches_terms(exercise: Exercise, terms: Sequence[str], include_name: bool = False) -> bool:
    tags = [m.lower() for m in exercise.all_muscles()]
    tags.append((exercise.muscleGroup or "").lower())
    if include_name:
        tags.append(exercise.name.lower())
    return any(term.lower() in tag for term in terms for tag in tags if tag)


def _matches_equipment(exercise: Exercise, equipment: Sequence[str] | None) -> bool:
    if not equipment:
        return True
    owned = exercise.equipment.lower()
    return any(eq.lower() in owned for eq in equipment)


def broaden(terms: Sequence[str]) -> list[str]:
    out: list[str] = []
    for term in terms:
        lowered = term.lower()
        out.extend(next((wide for key, wide in BROAD_TERMS if key in lowered), (term,)))
    return out


@dataclass(frozen=True)
class PoolQuery:
    terms: tuple[str, ...]
    muscles: tuple[str, ...]
    category: str | None
    equipment: tuple[str, ...]

    def in_category(self, exercise: Exercise) -> bool:
        if self.category is None:
            return True
        return classify(exercise) in PLAN_CATEGORIES[self.category]


@dataclass(frozen=True)
class FilterStrategy:
    name: str
    build: Callable[[Sequence[Exercise], PoolQuery], list[Exercise]]
    applies: Callable[[PoolQuery], bool] = lambda query: True


def _as_requested(catalog: Sequence[Exercise], query: PoolQuery) -> list[Exercise]:
    return [
        ex
        for ex in catalog
        if (query.in_category(ex) if query.category else _matches_terms(ex, query.muscles))
        and _matches_equipment(ex, query.equipment)
    ]


def _without_equipment(catalog: Sequence[Exercise], query: PoolQuery) -> list[Exercise]:
    return [
        ex
        for ex in catalog
        if (query.in_category(ex) if query.category else _matches_terms(ex, query.muscles))
    ]


def _broadened(catalog: Sequence[Exercise], query: PoolQuery) -> list[Exercise]:
    terms = [*broaden(query.terms), *query.muscles]
    return [
        ex
        for ex in catalog
        if _matches_terms(ex, terms, include_name=True) and query.in_category(ex)
    ]


FALLBACK_STRATEGIES: tuple[FilterStrategy, ...] = (
    FilterStrategy("as_requested", _as_requested),
    FilterStrategy("without_equipment", _without_equipment, lambda query: bool(query.equipment)),
    FilterStrategy("broadened_terms", _broadened),
)


def build_pool(
    catalog: Sequence[Exercise],
    query: PoolQuery,
    strategies: Sequence[FilterStrategy] = FALLBACK_STRATEGIES,
) -> tuple[list[Exercise], str]:
    """Run strategies in order until one yields a non-empty pool.

    Raises:
        NoExercisesFound: when every strategy comes back empty.
    """
    for index, strategy in enumerate(strategies):
        if not strategy.applies(query):
            continue
        pool = [ex for ex in strategy.build(catalog, query) if not _is_excluded(ex)]
        if pool:
            if index:
                logger.info(
                    "No exercises for %s as requested; using fallback %s (%d candidates)",
                    ", ".join(query.terms),
                    strategy.name,
                    len(pool),
                )
            return pool, strategy.name
    raise NoExercisesFound(list(query.terms))


def exercise_count(duration: int) -> int:
    if duration <= 30:
        return 4
    if duration <= 45:
        return 5
    if duration <= 60:
        return 6
    return 7


def selection_categories(terms: Sequence[str], category: str | None) -> tuple[str, ...]:
    """Splits to draw from. More than one means the plan alternates between them."""
    if category is not None:
        return tuple(sorted(PLAN_CATEGORIES[category], key=("push", "pull", "legs").index))
    found: list[str] = []
    for term in terms:
        lowered = term.lower()
        for key, cats in TERM_CATEGORIES:
            if key in lowered:
                found.extend(c for c in cats if c not in found)
    return tuple(sorted(found, key=("push", "pull", "legs").index))


def tier_quotas(count: int, goal: str) -> dict[str, int]:
    """Split ``count`` across the goal's tier mix by largest remainder.

    Every tier gets the floor of its share; leftover slots go to the largest
    fractional parts, ties in S, A, B order.
    """
    mix = TIER_MIX.get(goal, TIER_MIX["general"])
    exact = {t: round(count * share, 9) for t, share in mix.items()}
    quotas = {t: math.floor(value) for t, value in exact.items()}
    leftover = count - sum(quotas.values())
    for t in sorted(mix, key=lambda t: exact[t] - quotas[t], reverse=True)[:leftover]:
        quotas[t] += 1
    return quotas


def select_by_tier(pool: Sequence[Exercise], category: str | None, count: int, goal: str) -> list[Exercise]:
    """Fill the goal's S/A/B quotas, then top up from the prioritized pool.

    Deterministic: ties keep the pool's order.
    """
    ordered = prioritize(pool, category or "")
    buckets: dict[str, list[Exercise]] = {t: [] for t in TIER_ORDER}
    for ex in ordered:
        t = matched_tier(ex.name, category or "")
        if t:
            buckets[t].append(ex)

    chosen: list[Exercise] = []
    for t, quota in tier_quotas(count, goal).items():
        chosen.extend(buckets[t][:quota])

    for ex in ordered:
        if len(chosen) >= count:
            break
        if ex not in chosen:
            chosen.append(ex)

    rank = {ex.name: i for i, ex in enumerate(ordered)}
    return sorted(chosen[:count], key=lambda ex: rank[ex.name])


def _split_quotas(count: int, parts: int) -> list[int]:
    head = math.ceil(count / parts)
    quotas = [head] * (parts - 1)
    quotas.append(max(0, count - head * (parts - 1)))
    return quotas


def select_exercises(
    pool: Sequence[Exercise], categories: Sequence[str], count: int, goal: str
) -> list[Exercise]:
    if len(categories) <= 1:
        return select_by_tier(pool, categories[0] if categories else None, count, goal)

    per_category = [
        select_by_tier([ex for ex in pool if classify(ex) == cat], cat, quota, goal)
        for cat, quota in zip(categories, _split_quotas(count, len(categories)))
    ]
    alternated: list[Exercise] = []
    for i in range(max((len(c) for c in per_category), default=0)):
        for chosen in per_category:
            if i < len(chosen):
                alternated.append(chosen[i])
    return alternated[:count]


def order_compound_first(exercises: Sequence[Exercise]) -> list[Exercise]:
    """Alternate compound and isolation lifts, compounds leading; others go last."""
    compounds = [ex for ex in exercises if _has_case(ex.name, COMPOUND_TERMS)]
    isolation = [ex for ex in exercises if ex not in compounds and _has_case(ex.name, ISOLATION_TERMS)]
    others = [ex for ex in exercises if ex not in compounds and ex not in isolation]

    ordered: list[Exercise] = []
    for i in range(max(len(compounds), len(isolation))):
        if i < len(compounds):
            ordered.append(compounds[i])
        if i < len(isolation):
            ordered.append(isolation[i])
    return ordered + others


def _first_unused(pool: Sequence[Exercise], chosen: Sequence[Exercise], terms: Sequence[str]) -> Exercise | None:
    names = {ex.name for ex in chosen}
    return next((ex for ex in pool if ex.name not in names and _has(ex.name, terms)), None)


def _balance_push(chosen: list[Exercise], pool: Sequence[Exercise]) -> list[Exercise]:
    presses = [i for i, ex in enumerate(chosen) if _has(ex.name, PRESSING_TERMS)]
    if len(presses) <= MAX_PRESSES:
        return chosen
    logger.info("Trimming pressing movements (%d found, max %d)", len(presses), MAX_PRESSES)
    for idx in presses[MAX_PRESSES:]:
        replacement = (
            _first_unused(pool, chosen, ("lateral raise",))
            or next(
                (
                    ex
                    for ex in pool
                    if ex.name not in {c.name for c in chosen}
                    and _has(ex.name, ("tricep",))
                    and _has(ex.name, ("pushdown", "extension"))
                ),
                None,
            )
            or _first_unused(pool, chosen, ("fly",))
        )
        if replacement:
            chosen[idx] = replacement
    return chosen


def _balance_pull(chosen: list[Exercise], pool: Sequence[Exercise]) -> list[Exercise]:
    def is_vertical(ex: Exercise) -> bool:
        return _has(ex.name, VERTICAL_PULLS)

    def is_horizontal(ex: Exercise) -> bool:
        return _has(ex.name, HORIZONTAL_PULLS)

    verticals = [i for i, ex in enumerate(chosen) if is_vertical(ex)]
    if len(verticals) > MAX_VERTICAL_PULLS:
        logger.info("Trimming vertical pulls (%d found, max %d)", len(verticals), MAX_VERTICAL_PULLS)
        for idx in verticals[MAX_VERTICAL_PULLS:]:
            replacement = _first_unused(pool, chosen, HORIZONTAL_PULLS) or _first_unused(
                pool, chosen, ("face pull", "rear delt")
            )
            if replacement:
                chosen[idx] = replacement

    if chosen and not any(is_vertical(ex) for ex in chosen):
        vertical = _first_unused(pool, chosen, VERTICAL_PULLS)
        if vertical:
            logger.info("Adding vertical pull %s", vertical.name)
            chosen[-1] = vertical

    missing = MIN_HORIZONTAL_PULLS - sum(1 for ex in chosen if is_horizontal(ex))
    for idx in range(len(chosen) - 1, -1, -1):
        if missing <= 0:
            break
        if is_vertical(chosen[idx]) or is_horizontal(chosen[idx]):
            continue
        row = _first_unused(pool, chosen, HORIZONTAL_PULLS)
        if row is None:
            break
        chosen[idx] = row
        missing -= 1
    return chosen


def _balance_legs(chosen: list[Exercise], pool: Sequence[Exercise]) -> list[Exercise]:
    for needed, keep in ((QUAD_TERMS, HAMSTRING_TERMS), (HAMSTRING_TERMS, QUAD_TERMS)):
        if not chosen or any(_has(ex.name, needed) for ex in chosen):
            continue
        addition = _first_unused(pool, chosen, needed)
        if addition is None:
            continue
        slot = next(
            (i for i in range(len(chosen) - 1, -1, -1) if not _has(chosen[i].name, keep)),
            len(chosen) - 1,
        )
        logger.info("Adding %s for quad/hamstring balance", addition.name)
        chosen[slot] = addition
    return chosen


BALANCE_RULES: dict[str, Callable[[list[Exercise], Sequence[Exercise]], list[Exercise]]] = {
    "push": _balance_push,
    "pull": _balance_pull,
    "legs": _balance_legs,
}


def _dedupe(exercises: Sequence[Exercise]) -> list[Exercise]:
    seen: set[str] = set()
    out = []
    for ex in exercises:
        if ex.name not in seen:
            seen.add(ex.name)
            out.append(ex)
    return out


def set_scheme(goal: str, experience_level: str) -> tuple[int, str, int]:
    schemes = SET_SCHEMES.get(goal, SET_SCHEMES["general"])
    return schemes.get(experience_level, schemes["intermediate"])


def plan_title(muscle_groups: Sequence[str], goal: str) -> str:
    suffix = {"strength": "Strength", "hypertrophy": "Hypertrophy", "endurance": "Endurance"}
    return f"{' + '.join(muscle_groups)} {suffix.get(goal, '')}".strip()


def short_instructions(text: str) -> str:
    first = text.split(".")[0].strip()
    return f"{first}." if first else ""


def to_planned(exercise: Exercise, sets: int, reps: str, rest: int) -> PlannedExercise:
    return PlannedExercise(
        name=exercise.name,
        equipment=exercise.equipment,
        muscleGroup=exercise.primaryMuscles[0] if exercise.primaryMuscles else "General",
        sets=sets,
        reps=reps,
        restTime=rest,
        instructions=short_instructions(exercise.instructions),
    )


def generate_plan(
    request: GenerateWorkoutPlanRequest,
    catalog: Sequence[Exercise],
    strategies: Sequence[FilterStrategy] = FALLBACK_STRATEGIES,
) -> WorkoutPlan:
    """Build one workout. ``strategies`` are tried in order to build the candidate pool.

    Raises:
        NoExercisesFound: every fallback strategy produced an empty pool.
        ValidationFailed: a split-based plan contains an exercise from another split.
    """
    terms = tuple(request.muscleGroups)
    category = plan_category(terms[0])
    muscles = tuple(m for term in terms for m in map_user_term(term))
    logger.info("Planning %s -> %s", ", ".join(terms), ", ".join(muscles))

    query = PoolQuery(
        terms=terms,
        muscles=muscles,
        category=category,
        equipment=tuple(request.equipment or ()),
    )
    pool, _ = build_pool(catalog, query, strategies)
    pool = sorted(pool, key=lambda ex: equipment_priority(ex.equipment))

    count = exercise_count(request.duration)
    chosen = select_exercises(pool, selection_categories(terms, category), count, request.goal)
    chosen = order_compound_first(chosen)
    if category in BALANCE_RULES:
        chosen = BALANCE_RULES[category](list(chosen), pool)
    chosen = _dedupe(chosen)

    if category is not None:
        errors = validate_workout(chosen, category)
        if errors:
            offending = [ex.name for ex in chosen if classify(ex) not in PLAN_CATEGORIES[category]]
            logger.warning("Workout validation failed: %s", "; ".join(errors))
            raise ValidationFailed(category, offending, errors)

    sets, reps, rest = set_scheme(request.goal, request.experienceLevel)
    plan = WorkoutPlan(
        title=plan_title(terms, request.goal),
        muscleGroups=list(terms),
        category=category,
        goal=request.goal,
        experienceLevel=request.experienceLevel,
        estimatedDuration=request.duration,
        exercises=[to_planned(ex, sets, reps, rest) for ex in chosen],
    )
    if request.deload:
        return generate_deload_workout(plan)
    return plan


def generate_program(
    days: int,
    catalog: Sequence[Exercise],
    experience_level: str = "intermediate",
    goal: str = "general",
) -> WorkoutProgram:
    """One plan per training day from a canned split; day counts without a split cycle the 4-day one."""
    split = PROGRAM_SPLITS.get(days, PROGRAM_SPLITS[4])
    workouts = []
    for i in range(days):
        name, groups = split[i % len(split)]
        plan = generate_plan(
            GenerateWorkoutPlanRequest(
                muscleGroups=list(groups),
                experienceLevel=experience_level,
                goal=goal,
                duration=PROGRAM_DAY_MINUTES,
            ),
            catalog,
        )
        workouts.append(
            ProgramDay(
                dayNumber=i + 1,
                dayName=f"Day {i + 1}: {name}",
                name=name,
                muscleGroups=list(groups),
                plan=plan,
            )
        )
    return WorkoutProgram(
        title=f"{days}-Day {goal.title()} Program",
        days=days,
        goal=goal,
        experienceLevel=experience_level,
        workouts=workouts,
    )


def find_alternatives(
    exercise_name: str,
    catalog: Sequence[Exercise],
    equipment: str | None = None,
    muscle_group: str | None = None,
    limit: int = 5,
) -> tuple[Exercise, list[Exercise]]:
    """Other exercises sharing a primary muscle with ``exercise_name``.

    Raises:
        ExerciseNotFound: if the original is not in the catalog.
    """
    original = find_exercise(exercise_name, catalog)
    targets = original.primaryMuscles or ([muscle_group] if muscle_group else [])
    alternatives = [
        ex
        for ex in catalog
        if ex.name != original.name
        and any(m in ex.primaryMuscles for m in targets)
        and (not equipment or equipment.lower() in ex.equipment.lower())
        and not _is_excluded(ex)
    ]
    return original, alternatives[:limit]
