"""Summaries of logged workouts and the "what should I train today" rules."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Sequence

from ..schemas.analysis import (
    ExerciseStats,
    HistoryAnalysis,
    MuscleBalance,
    RecommendationContext,
    WorkoutRecommendation,
)
from ..schemas.history import ExerciseLog, WorkoutRecord, as_utc

logger = logging.getLogger(__name__)

PUSH_MUSCLES = ("chest", "pectorals", "pecs", "shoulders", "deltoids", "delts", "triceps")
PULL_MUSCLES = ("back", "lats", "traps", "rhomboids", "biceps", "rear deltoids")
LEG_MUSCLES = ("legs", "quadriceps", "quads", "hamstrings", "glutes", "calves")

DAY_GROUPS: dict[str, list[str]] = {
    "Push": ["chest", "shoulders", "triceps"],
    "Pull": ["back", "biceps"],
    "Legs": ["legs"],
}
FULL_BODY = ["chest", "back", "legs"]
UPPER_BODY = ["chest", "back", "shoulders", "arms"]

REST_DAY_WORKOUTS = 6
NEGLECT_SHARE = 0.1
IMBALANCE_SHARE = 0.4
BALANCE_WINDOW_DAYS = 30
NO_HISTORY_DAYS = 999


def _primary_muscle(ex: ExerciseLog) -> str:
    if ex.primaryMuscles:
        return ex.primaryMuscles[0]
    return ex.muscleGroup or "Unknown"


def _muscles(ex: ExerciseLog) -> list[str]:
    muscles = ex.primaryMuscles or ([ex.muscleGroup] if ex.muscleGroup else [])
    return [m.lower() for m in muscles if m]


def _since(workouts: Sequence[WorkoutRecord], now: datetime, days: int) -> list[WorkoutRecord]:
    cutoff = as_utc(now) - timedelta(days=days)
    return [w for w in workouts if w.date >= cutoff]


def analyze_workout_history(
    workouts: Sequence[WorkoutRecord], days: int = 30, now: datetime | None = None
) -> HistoryAnalysis:
    """Totals, tonnage and per-muscle exercise counts over the last ``days`` days.

    ``now`` defaults to the newest workout so the result only depends on the input.
    """
    if not workouts:
        return HistoryAnalysis(totalWorkouts=0, message="No workout history found")

    reference = now or max(w.date for w in workouts)
    recent = _since(workouts, reference, days)

    volume = sum(
        s.weight * s.reps for w in recent for ex in w.exercises for s in ex.completedSets
    )
    breakdown = Counter(_primary_muscle(ex) for w in recent for ex in w.exercises)
    ranked = breakdown.most_common()

    return HistoryAnalysis(
        totalWorkouts=len(recent),
        totalVolume=round(volume),
        avgWorkoutsPerWeek=round(len(recent) / (days / 7), 1),
        muscleGroupBreakdown=dict(breakdown),
        mostTrained=ranked[0][0] if ranked else "N/A",
        leastTrained=ranked[-1][0] if ranked else "N/A",
        frequency=len(recent) / days,
    )


def _balance_counts(workouts: Sequence[WorkoutRecord]) -> tuple[int, int, int]:
    counts = Counter(m for w in workouts for ex in w.exercises for m in _muscles(ex))
    push = pull = legs = 0
    for muscle, count in counts.items():
        if any(t in muscle for t in PUSH_MUSCLES):
            push += count
        if any(t in muscle for t in PULL_MUSCLES):
            pull += count
        if any(t in muscle for t in LEG_MUSCLES):
            legs += count
    return push, pull, legs


def _percent(part: int, total: int) -> int:
    return round(part / total * 100) if total else 0


def recommend_todays_workout(workouts: Sequence[WorkoutRecord], now: datetime) -> WorkoutRecommendation:
    """Pick today's session from recent history.

    Rules, first match wins: a neglected split (< 10 % of the last 30 days),
    rest after six workouts this week, continuing a PPL or upper/lower
    sequence from yesterday, then the weakest split. Muscle-level
    recommendations avoid whatever was trained yesterday.
    """
    if not workouts:
        return WorkoutRecommendation(
            suggested="Full Body",
            reason="No workout history found. Start with a balanced full body workout.",
            muscleGroups=list(FULL_BODY),
        )

    now = as_utc(now)
    month = _since(workouts, now, BALANCE_WINDOW_DAYS)
    week = _since(workouts, now, 7)
    yesterday_date = (now - timedelta(days=1)).date()
    yesterday = next((w for w in workouts if w.date.date() == yesterday_date), None)

    push, pull, legs = _balance_counts(month)
    total = push + pull + legs
    logger.info("Muscle balance (30 days): push %d, pull %d, legs %d", push, pull, legs)

    titles = [(w.title or "").lower() for w in week if w.title]
    is_ppl = any("push" in t or "pull" in t or "leg" in t for t in titles)
    is_upper_lower = any("upper" in t or "lower" in t for t in titles)
    program = "PPL" if is_ppl else "Upper/Lower" if is_upper_lower else "None"

    last = max(w.date for w in workouts)
    days_since = (now - last).days if last <= now else 0
    weekly = len(week)

    context = RecommendationContext(
        weeklyFrequency=weekly,
        daysSinceLastWorkout=days_since,
        muscleBalance=MuscleBalance(
            push=f"{_percent(push, total)}%",
            pull=f"{_percent(pull, total)}%",
            legs=f"{_percent(legs, total)}%",
        ),
        programDetected=program,
    )

    suggested = ""
    reason = ""
    groups: list[str] = []
    rest = False
    yesterday_title = (yesterday.title or "").lower() if yesterday else ""

    if total and legs / total < NEGLECT_SHARE:
        suggested = "Legs"
        reason = (
            f"Muscle imbalance detected: Legs only {_percent(legs, total)}% vs Push "
            f"{_percent(push, total)}%. Train Legs to balance."
        )
        groups = ["legs", "quadriceps", "hamstrings", "glutes"]
    elif total and pull / total < NEGLECT_SHARE:
        suggested = "Pull"
        reason = (
            f"Muscle imbalance detected: Pull only {_percent(pull, total)}% vs Push "
            f"{_percent(push, total)}%. Train Pull to balance."
        )
        groups = list(DAY_GROUPS["Pull"])
    elif total and push / total < NEGLECT_SHARE:
        suggested = "Push"
        reason = (
            f"Muscle imbalance detected: Push only {_percent(push, total)}% vs Pull "
            f"{_percent(pull, total)}%. Train Push to balance."
        )
        groups = list(DAY_GROUPS["Push"])
    elif weekly >= REST_DAY_WORKOUTS:
        return WorkoutRecommendation(
            suggested="Rest Day",
            reason=f"You've trained {weekly} times this week. Take a rest day for recovery.",
            restDayRecommended=True,
            alternativeWorkout="Light cardio or stretching",
            analysis=context,
        )
    elif is_ppl and yesterday:
        if "push" in yesterday_title:
            suggested, groups = "Pull", list(DAY_GROUPS["Pull"])
            reason = "You did Push yesterday. Following PPL sequence, today is Pull day."
        elif "pull" in yesterday_title:
            suggested, groups = "Legs", list(DAY_GROUPS["Legs"])
            reason = "You did Pull yesterday. Following PPL sequence, today is Leg day."
        elif "leg" in yesterday_title:
            if weekly >= 5:
                suggested, rest = "Rest Day", True
                reason = (
                    "You did Legs yesterday and trained 5+ times this week. Rest day "
                    "recommended, or start new PPL cycle with Push tomorrow."
                )
            else:
                suggested, groups = "Push", list(DAY_GROUPS["Push"])
                reason = "You did Legs yesterday. Starting new PPL cycle with Push day."
    elif is_upper_lower and yesterday:
        if "upper" in yesterday_title:
            suggested, groups = "Lower", ["legs"]
            reason = "You did Upper yesterday. Following Upper/Lower split, today is Lower day."
        elif "lower" in yesterday_title:
            suggested, groups = "Upper", list(UPPER_BODY)
            reason = "You did Lower yesterday. Following Upper/Lower split, today is Upper day."
    elif not total:
        suggested, groups = "Full Body", list(FULL_BODY)
        reason = "Start with a balanced full body workout to assess your baseline."
    else:
        balance = sorted((("Push", push), ("Pull", pull), ("Legs", legs)), key=lambda b: b[1])
        (weakest, low), (strongest, high) = balance[0], balance[-1]
        if high - low >= total * IMBALANCE_SHARE:
            suggested, groups = weakest, list(DAY_GROUPS[weakest])
            reason = (
                f"Muscle imbalance detected: {weakest} only {_percent(low, total)}% vs "
                f"{strongest} {_percent(high, total)}%. Train {weakest} to balance."
            )
        elif days_since >= 2:
            suggested, groups = "Full Body", list(FULL_BODY)
            reason = f"{days_since} days since last workout. Jump back in with a full body session."
        elif days_since == 1:
            suggested, groups = weakest, list(DAY_GROUPS[weakest])
            summary = ", ".join(f"{name} {_percent(count, total)}%" for name, count in balance)
            reason = f"Muscle balance: {summary}. Train {weakest} today."
        else:
            suggested, rest = "Rest Day", True
            reason = "You already trained today. Rest and recover."

    # program detected but yesterday's title names no split
    if not suggested:
        suggested, groups = "Full Body", list(FULL_BODY)
        reason = "Keep the week balanced with a full body session."

    if yesterday and not is_ppl and not is_upper_lower and not rest:
        trained = [m for ex in yesterday.exercises for m in _muscles(ex)]
        if any(g in m or m in g for g in groups for m in trained):
            for name, muscles in DAY_GROUPS.items():
                if not any(m in trained for m in muscles):
                    suggested, groups = name, list(muscles)
                    reason = f"You trained similar muscles yesterday. Switch to {name} for recovery."
                    break

    if weekly >= REST_DAY_WORKOUTS and suggested and suggested != "Rest Day":
        reason += (
            f" Note: You've trained {weekly} times this week - consider keeping this "
            "session light or taking a rest day after."
        )

    return WorkoutRecommendation(
        suggested=suggested,
        reason=reason,
        muscleGroups=groups,
        restDayRecommended=rest,
        analysis=context,
    )


def _logged(workout: WorkoutRecord, needle: str) -> ExerciseLog | None:
    return next((ex for ex in workout.exercises if ex.name.lower() == needle), None)


def exercise_stats(workouts: Sequence[WorkoutRecord], exercise_name: str) -> ExerciseStats:
    """Lifetime bests and totals for one exercise, matched by exact name.

    ``trend`` compares the top set of the newest session with the oldest of
    the last five; it is "increasing" only when the newest is heavier.
    """
    if not workouts:
        return ExerciseStats(exerciseName=exercise_name, message="No workout history found")

    needle = exercise_name.lower()
    logs: list[tuple[WorkoutRecord, ExerciseLog]] = []
    for workout in sorted(workouts, key=lambda w: w.date, reverse=True):
        ex = _logged(workout, needle)
        if ex is not None:
            logs.append((workout, ex))
    if not logs:
        return ExerciseStats(exerciseName=exercise_name, message=f"No history found for {exercise_name}")

    sets = [s for _, ex in logs for s in ex.completedSets]
    recent = [max((s.weight for s in ex.completedSets), default=0) for _, ex in logs[:5]]
    return ExerciseStats(
        exerciseName=exercise_name,
        totalSessions=len(logs),
        totalSets=len(sets),
        totalVolume=round(sum(s.weight * s.reps for s in sets)),
        maxWeight=max((s.weight for s in sets), default=0),
        maxReps=max((s.reps for s in sets), default=0),
        maxVolume=max((s.weight * s.reps for s in sets), default=0),
        trend="increasing" if len(recent) >= 2 and recent[0] > recent[-1] else "stable",
        lastPerformed=logs[0][0].date,
        recentWeights=recent,
    )
