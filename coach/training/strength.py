"""Strength maths: 1RM estimates, percentage loads, goal timelines and warm-ups.

All weights are in the user's unit (lbs in the messages). Rounding is half
up, so 92.5 becomes 93 and 2.5 becomes 3.
"""

from __future__ import annotations

import logging
import math
from typing import Callable

from ..errors import InvalidStrengthInput
from ..schemas.analysis import (
    OneRepMaxEstimate,
    PercentageLoad,
    ProgressionMilestone,
    ProgressionPrediction,
    WarmupPlan,
    WarmupSet,
)

logger = logging.getLogger(__name__)

MAX_ESTIMATE_REPS = 12

ONE_REP_MAX_FORMULAS: dict[str, Callable[[float, int], float]] = {
    "epley": lambda w, r: w * (1 + r / 30),
    "brzycki": lambda w, r: w * (36 / (37 - r)),
    "lander": lambda w, r: (100 * w) / (101.3 - 2.67123 * r),
    "lombardi": lambda w, r: w * r**0.10,
    "mayhew": lambda w, r: (100 * w) / (52.2 + 41.9 * math.exp(-0.055 * r)),
    "oconner": lambda w, r: w * (1 + r / 40),
    "wathan": lambda w, r: (100 * w) / (48.8 + 53.8 * math.exp(-0.075 * r)),
}

# (minimum percentage, what that load is for), highest first
LOAD_CONTEXTS: tuple[tuple[float, str], ...] = (
    (90, "Heavy singles/doubles for max strength"),
    (85, "Low rep strength work (3-5 reps)"),
    (75, "Medium rep hypertrophy (6-8 reps)"),
    (65, "Higher rep hypertrophy (8-12 reps)"),
    (50, "Volume/technique work (12-15 reps)"),
)
LIGHT_LOAD_CONTEXT = "Warm-up/recovery weight"

# lbs per week; order matters, the first substring found in the name wins
PROGRESSION_RATES: dict[str, tuple[tuple[str, float], ...]] = {
    "beginner": (
        ("squat", 10),
        ("deadlift", 10),
        ("bench press", 5),
        ("bench", 5),
        ("overhead press", 2.5),
        ("press", 2.5),
        ("row", 5),
    ),
    "intermediate": (
        ("squat", 5),
        ("deadlift", 5),
        ("bench press", 2.5),
        ("bench", 2.5),
        ("overhead press", 1.25),
        ("press", 1.25),
        ("row", 2.5),
    ),
    "advanced": (
        ("squat", 2.5),
        ("deadlift", 2.5),
        ("bench press", 1.25),
        ("bench", 1.25),
        ("overhead press", 0.625),
        ("press", 0.625),
        ("row", 1.25),
    ),
}
DEFAULT_RATES = {"beginner": 5, "intermediate": 2.5, "advanced": 1.25}
SESSIONS_PER_WEEK = 1.5
MILESTONES = 5

BAR_WEIGHT = 45
BARBELL_THRESHOLD = 95
EMPTY_BAR_ABOVE = 135
HEAVY_WARMUP_ABOVE = 225
HEAVY_SINGLE_FROM = 315
LOWER_BODY_TERMS = ("squat", "deadlift", "leg", "lunge", "rdl")


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _round_to_plate(value: float) -> int:
    """Nearest 5 lbs."""
    return _round_half_up(value / 5) * 5


def _fmt(value: float) -> str:
    return f"{value:g}"


def estimate_one_rep_max(weight: float, reps: int, exercise_name: str = "exercise") -> OneRepMaxEstimate:
    """Average of seven published 1RM formulas.

    A single rep is its own 1RM. Estimates above 12 reps are refused.

    Raises:
        InvalidStrengthInput: for non-positive weight or reps outside 1-12.
    """
    if weight <= 0 or reps < 1:
        raise InvalidStrengthInput("Weight and reps are required")
    if reps == 1:
        return OneRepMaxEstimate(
            exercise=exercise_name,
            oneRepMax=weight,
            inputWeight=weight,
            inputReps=reps,
            formula="Direct measurement (1 rep)",
            note="This is your actual 1RM!",
        )
    if reps > MAX_ESTIMATE_REPS:
        raise InvalidStrengthInput(
            "1RM calculation only accurate for 1-12 reps. "
            "For endurance work (15+ reps), 1RM calculation is not reliable."
        )

    results = {name: formula(weight, reps) for name, formula in ONE_REP_MAX_FORMULAS.items()}
    average = _round_half_up(sum(results.values()) / len(results))
    return OneRepMaxEstimate(
        exercise=exercise_name,
        oneRepMax=average,
        inputWeight=weight,
        inputReps=reps,
        estimates={
            "conservative": _round_half_up(min(results.values())),
            "average": average,
            "aggressive": _round_half_up(max(results.values())),
        },
        formulas={name: _round_half_up(value) for name, value in results.items()},
        note=f"Estimated 1RM: {average} lbs (based on {_fmt(weight)} lbs × {reps} reps)",
    )


def load_context(percentage: float) -> str:
    for floor, context in LOAD_CONTEXTS:
        if percentage >= floor:
            return context
    return LIGHT_LOAD_CONTEXT


def percentage_of_max(one_rep_max: float, percentage: float, exercise_name: str = "exercise") -> PercentageLoad:
    """Working weight for ``percentage`` of a known 1RM.

    Raises:
        InvalidStrengthInput: for a non-positive max or a percentage outside (0, 100].
    """
    if one_rep_max <= 0:
        raise InvalidStrengthInput("1RM and percentage are required")
    if percentage <= 0 or percentage > 100:
        raise InvalidStrengthInput("Percentage must be between 1 and 100")

    target = _round_half_up(one_rep_max * percentage / 100)
    return PercentageLoad(
        exercise=exercise_name,
        oneRepMax=one_rep_max,
        percentage=percentage,
        targetWeight=target,
        context=load_context(percentage),
        note=f"{_fmt(percentage)}% of {_fmt(one_rep_max)} lbs = {target} lbs",
    )


def weekly_rate(exercise_name: str, experience_level: str = "intermediate") -> float:
    level = experience_level if experience_level in PROGRESSION_RATES else "intermediate"
    lowered = exercise_name.lower()
    for needle, rate in PROGRESSION_RATES[level]:
        if needle in lowered:
            return rate
    return DEFAULT_RATES[level]


def predict_progression(
    current_weight: float,
    current_reps: int,
    target_weight: float,
    exercise_name: str = "exercise",
    experience_level: str = "intermediate",
) -> ProgressionPrediction:
    """Weeks of linear progression from the current estimated 1RM to ``target_weight``.

    Raises:
        InvalidStrengthInput: when the target is not above the current weight,
            or the current set cannot be turned into a 1RM estimate.
    """
    if target_weight <= current_weight:
        raise InvalidStrengthInput("Target weight must be higher than current weight")

    current_max = estimate_one_rep_max(current_weight, current_reps, exercise_name).oneRepMax
    rate = weekly_rate(exercise_name, experience_level)
    difference = target_weight - current_max
    prediction = dict(
        exercise=exercise_name,
        currentWeight=current_weight,
        currentReps=current_reps,
        estimated1RM=current_max,
        targetWeight=target_weight,
        progressionRate=f"+{_fmt(rate)} lbs/week",
        experienceLevel=experience_level,
    )

    if difference <= 0:
        return ProgressionPrediction(
            **prediction,
            weeksNeeded=0,
            workoutsNeeded=0,
            note=(
                f"Your estimated 1RM of {_fmt(current_max)} lbs already meets "
                f"{_fmt(target_weight)} lbs. Test it with a heavy single."
            ),
        )

    weeks = math.ceil(difference / rate)
    workouts = math.ceil(weeks * SESSIONS_PER_WEEK)
    milestones = []
    for i in range(1, MILESTONES + 1):
        gain = difference * i / MILESTONES
        milestones.append(
            ProgressionMilestone(
                weight=_round_half_up(current_max + gain),
                weeks=math.ceil(gain / rate),
                percentage=_round_half_up(i / MILESTONES * 100),
            )
        )
    logger.debug("%s: %s -> %s in %d weeks", exercise_name, current_max, target_weight, weeks)
    return ProgressionPrediction(
        **prediction,
        weeksNeeded=weeks,
        workoutsNeeded=workouts,
        milestones=milestones,
        note=(
            f"At {_fmt(rate)} lbs/week, you'll reach {_fmt(target_weight)} lbs in approximately "
            f"{weeks} weeks ({workouts} workouts)."
        ),
    )


def is_lower_body(exercise_name: str) -> bool:
    lowered = exercise_name.lower()
    return any(term in lowered for term in LOWER_BODY_TERMS)


def generate_warmup_sets(
    working_weight: float, working_reps: int = 5, exercise_name: str = "exercise"
) -> WarmupPlan:
    """Ramp-up sets before the working weight.

    Loads of 95 and up are treated as barbell work: an empty-bar set above
    135, then 50/75% (or 40/60/80% above 225) rounded to 5 lbs, and a 90%
    single from 315. Lighter loads get a 50% and a 75% set.
    """
    if working_weight <= 0:
        raise InvalidStrengthInput("Working weight is required")

    bar = BAR_WEIGHT if working_weight >= BARBELL_THRESHOLD else 0
    sets: list[WarmupSet] = []

    if bar and working_weight > bar:
        if working_weight > EMPTY_BAR_ABOVE:
            sets.append(
                WarmupSet(
                    set=1,
                    weight=bar,
                    reps=10,
                    percentage=_round_half_up(bar / working_weight * 100),
                    notes="Empty bar - focus on form and activation",
                )
            )
        percentages = (40, 60, 80) if working_weight > HEAVY_WARMUP_ABOVE else (50, 75)
        for index, pct in enumerate(percentages):
            reps = 8 if pct <= 50 else 5 if pct <= 70 else 3
            last = index == len(percentages) - 1
            sets.append(
                WarmupSet(
                    set=len(sets) + 1,
                    weight=_round_to_plate(_round_half_up(working_weight * pct / 100)),
                    reps=reps,
                    percentage=pct,
                    notes="Final warm-up - should feel moderately heavy" if last else "Progressive warm-up",
                )
            )
        if working_weight >= HEAVY_SINGLE_FROM:
            sets.append(
                WarmupSet(
                    set=len(sets) + 1,
                    weight=_round_to_plate(working_weight * 0.9),
                    reps=1,
                    percentage=90,
                    notes="Heavy single - get feel for the weight",
                )
            )
    else:
        sets = [
            WarmupSet(set=1, weight=_round_to_plate(working_weight * 0.5), reps=10, percentage=50, notes="Light warm-up"),
            WarmupSet(set=2, weight=_round_to_plate(working_weight * 0.75), reps=5, percentage=75, notes="Final warm-up"),
        ]

    return WarmupPlan(
        exercise=exercise_name,
        workingWeight=working_weight,
        workingReps=working_reps,
        warmupSets=sets,
        totalWarmupSets=len(sets),
        estimatedWarmupTime=f"{len(sets) * 2}-{len(sets) * 3} minutes",
        notes=[
            "Rest 30-60 seconds between warm-up sets",
            "Focus on perfect form and muscle activation",
            "Don't rush - proper warm-up prevents injury",
            "Lower body needs more warm-up volume"
            if is_lower_body(exercise_name)
            else "Upper body can warm up faster",
        ],
    )
