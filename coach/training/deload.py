"""Deload detection and deload-week plans."""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Sequence

from ..schemas.analysis import DeloadStatus
from ..schemas.history import WorkoutRecord, as_utc
from ..schemas.workout import WorkoutPlan

SCHEDULED_DELOAD_WEEKS = (4, 6)
FATIGUE_WINDOW = 6
FATIGUE_RPE = 9
RECENT_DELOAD_DAYS = 14

DELOAD_FORMAT_NOTES = (
    "DELOAD WEEK: Reduce volume by 50% (half the sets), but keep weight and RPE the same. "
    "This allows your body to recover and supercompensate."
)


def needs_deload_week(history: Sequence[WorkoutRecord], weeks_of_training: int) -> DeloadStatus:
    """Calendar trigger first, then a fatigue trigger on the last six workouts."""
    low, high = SCHEDULED_DELOAD_WEEKS
    if low <= weeks_of_training <= high:
        return DeloadStatus(
            needsDeload=True,
            reason=(
                f"You've trained for {weeks_of_training} weeks straight. "
                "Time for a planned deload week."
            ),
            deloadType="scheduled",
            priority="high",
        )
    if weeks_of_training > high:
        return DeloadStatus(
            needsDeload=True,
            reason=(
                f"You've trained for {weeks_of_training} weeks without a deload. "
                "OVERDUE for deload week!"
            ),
            deloadType="overdue",
            priority="critical",
        )

    if len(history) < FATIGUE_WINDOW:
        return DeloadStatus(
            needsDeload=False,
            reason="Not enough training history to assess deload need.",
        )

    recent = sorted(history, key=lambda w: w.date)[-FATIGUE_WINDOW:]
    per_workout = [
        sum(ex.avg_rpe() for ex in w.exercises) / len(w.exercises) if w.exercises else 8
        for w in recent
    ]
    avg_rpe = sum(per_workout) / len(per_workout)
    if avg_rpe >= FATIGUE_RPE:
        return DeloadStatus(
            needsDeload=True,
            reason=f"Average RPE is {avg_rpe:.1f} (very high). Your body needs recovery.",
            deloadType="fatigue_based",
            priority="high",
        )

    return DeloadStatus(
        needsDeload=False,
        reason=(
            f"Training for {weeks_of_training} weeks. "
            f"Continue until week {low} for scheduled deload."
        ),
    )


def calculate_training_weeks(history: Sequence[WorkoutRecord]) -> int:
    """Whole weeks (rounded up) from the last deload, or the first workout, to the latest one."""
    if not history:
        return 0
    ordered = sorted(history, key=lambda w: w.date)
    deloads = [w for w in ordered if w.isDeload]
    start = deloads[-1].date if deloads else ordered[0].date
    span = ordered[-1].date - start
    return math.ceil(span / timedelta(weeks=1))


def has_deloaded_recently(history: Sequence[WorkoutRecord], now: datetime) -> bool:
    cutoff = as_utc(now) - timedelta(days=RECENT_DELOAD_DAYS)
    return any(w.isDeload and w.date >= cutoff for w in history)


def generate_deload_workout(plan: WorkoutPlan) -> WorkoutPlan:
    """Halve sets (rounding up); reps, rest and intensity stay as planned."""
    exercises = []
    for ex in plan.exercises:
        sets = math.ceil(ex.sets / 2)
        exercises.append(
            ex.model_copy(
                update={
                    "sets": sets,
                    "deloadNote": (
                        f"Deload: {sets} sets (normally {ex.sets} sets). Same weight and RPE."
                    ),
                }
            )
        )
    return plan.model_copy(
        update={
            "title": f"{plan.title} (DELOAD WEEK)",
            "exercises": exercises,
            "isDeload": True,
            "formatNotes": DELOAD_FORMAT_NOTES,
        }
    )
