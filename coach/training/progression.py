"""Progressive overload: next-session prescription, trend and plateau checks.

``recommend_next`` is a rule table over the last session's RPE and reps:

    RPE <= 7               add weight (bodyweight: add a rep)
    RPE 8-9, reps < top    add a rep (double progression)
    RPE 8-9, reps >= top   add weight, drop to the bottom of the range
    RPE 10                 hold weight, add a rep, warn about failure
    otherwise              maintain
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Sequence

from ..errors import InsufficientHistory
from ..schemas.analysis import (
    PlateauAnalysis,
    ProgressionRecommendation,
    ProgressionReport,
    TrendAnalysis,
)
from ..schemas.history import Session, WorkoutRecord

logger = logging.getLogger(__name__)

DEFAULT_REP_RANGE = "8-12"
DEFAULT_RPE = 8

# order matters: the first matching substring wins
PROGRESSION_INCREMENTS: tuple[tuple[str, float], ...] = (
    ("barbell", 5),
    ("dumbbell", 2.5),
    ("cable", 5),
    ("machine", 5),
    ("plate", 2.5),
)
DEFAULT_INCREMENT = 5

FAILURE_WARNING = "Try to stop at RPE 8-9 (1-2 reps shy of failure) for optimal hypertrophy."

MIN_TREND_SESSIONS = 2
MIN_PLATEAU_SESSIONS = 3


def _fmt(value: float) -> str:
    """185.0 -> "185", 187.5 -> "187.5"."""
    return f"{value:g}"


def is_bodyweight(equipment: str | None) -> bool:
    lowered = (equipment or "").lower()
    return "bodyweight" in lowered or "body weight" in lowered


def progression_increment(equipment: str | None) -> float:
    lowered = (equipment or "").lower()
    for needle, increment in PROGRESSION_INCREMENTS:
        if needle in lowered:
            return increment
    return DEFAULT_INCREMENT


def parse_rep_range(spec: str | None) -> tuple[int, int]:
    """"8-12" -> (8, 12). A single number is both ends; junk falls back to 8-12."""
    try:
        parts = [int(p.strip()) for p in (spec or DEFAULT_REP_RANGE).split("-")]
    except ValueError:
        parts = [8, 12]
    if len(parts) == 1:
        return parts[0], parts[0]
    return parts[0], parts[-1]


def recommend_next(session: Session, target_rep_range: str | None = None) -> ProgressionRecommendation:
    weight, reps, sets, rpe = session.weight, session.reps, session.sets, session.rpe
    min_reps, max_reps = parse_rep_range(target_rep_range or session.targetRepRange)
    increment = progression_increment(session.equipment)
    bodyweight = is_bodyweight(session.equipment)
    last = f"Last session: {_fmt(weight)} lbs × {reps} reps"

    if rpe is None or not 1 <= rpe <= 10:
        return ProgressionRecommendation(
            nextWeight=weight,
            nextReps=reps,
            nextSets=sets,
            reason=f"Maintain {_fmt(weight)} lbs × {reps} reps until RPE drops below 8.",
            progressionType="maintain",
            changeAmount="No change",
        )

    if rpe <= 7:
        reason = f"{last} @ RPE {_fmt(rpe)}. You had 3+ reps left in the tank."
        if bodyweight:
            return ProgressionRecommendation(
                nextWeight=weight,
                nextReps=reps + 1,
                nextSets=sets,
                reason=f"{reason} Add a rep next session.",
                progressionType="rep_increase",
                changeAmount="+1 rep",
            )
        return ProgressionRecommendation(
            nextWeight=weight + increment,
            nextReps=reps,
            nextSets=sets,
            reason=f"{reason} Time to increase weight!",
            progressionType="weight_increase",
            changeAmount=f"+{_fmt(increment)} lbs",
        )

    if rpe < 10 and reps < max_reps:
        return ProgressionRecommendation(
            nextWeight=weight,
            nextReps=reps + 1,
            nextSets=sets,
            reason=(
                f"{last} @ RPE {_fmt(rpe)}. Try {reps + 1} reps with same weight "
                "(double progression)."
            ),
            progressionType="rep_increase",
            changeAmount="+1 rep",
        )

    if rpe < 10:
        if bodyweight:
            return ProgressionRecommendation(
                nextWeight=weight,
                nextReps=reps + 1,
                nextSets=sets,
                reason=f"{last} @ RPE {_fmt(rpe)}. You hit max reps! Keep adding reps or add load.",
                progressionType="rep_increase",
                changeAmount="+1 rep",
            )
        return ProgressionRecommendation(
            nextWeight=weight + increment,
            nextReps=min_reps,
            nextSets=sets,
            reason=(
                f"{last} @ RPE {_fmt(rpe)}. You hit max reps! Add weight and start "
                f"fresh at {min_reps} reps."
            ),
            progressionType="weight_increase_with_rep_drop",
            changeAmount=f"+{_fmt(increment)} lbs",
        )

    return ProgressionRecommendation(
        nextWeight=weight,
        nextReps=reps + 1,
        nextSets=sets,
        reason=(
            f"{last} @ RPE 10 (failure). Maintain weight and push for {reps + 1} reps "
            "without hitting failure."
        ),
        progressionType="rep_increase",
        changeAmount="+1 rep",
        warning=FAILURE_WARNING,
    )


def session_volume(session: Session) -> float:
    return (session.sets or 1) * session.weight * session.reps


def _chronological(sessions: Iterable[Session]) -> list[Session]:
    dated = [s for s in sessions if s.date is not None]
    undated = [s for s in sessions if s.date is None]
    return undated + sorted(dated, key=lambda s: s.date)  # type: ignore[arg-type, return-value]


def analyze_progression_trend(sessions: Sequence[Session]) -> TrendAnalysis:
    """Volume trend from first to last session.

    Fewer than two sessions is ``neutral``; callers that need a hard failure
    raise ``InsufficientHistory`` themselves.
    """
    n = len(sessions)
    if n < MIN_TREND_SESSIONS:
        return TrendAnalysis(
            trend="neutral",
            message="Need at least 2 sessions to analyze progression",
            sessions=n,
        )

    volumes = [session_volume(s) for s in _chronological(sessions)]
    first, last = volumes[0], volumes[-1]
    percent = ((last - first) / first * 100) if first else 0.0
    recent = volumes[-3:]
    stagnant = n >= 3 and all(abs(v - recent[0]) <= recent[0] * 0.10 for v in recent)

    if percent > 10:
        return TrendAnalysis(
            trend="progressing",
            message=f"Great progress! Volume increased by {percent:.1f}% over {n} sessions.",
            percentChange=round(percent, 1),
            recommendation="Keep up the progressive overload. You're on the right track!",
            sessions=n,
        )
    if percent > 0:
        return TrendAnalysis(
            trend="slow_progress",
            message=f"Modest progress: Volume increased by {percent:.1f}% over {n} sessions.",
            percentChange=round(percent, 1),
            recommendation=(
                "Progress is happening but slow. Ensure you're pushing to RPE 7-8 "
                "and adding weight/reps consistently."
            ),
            sessions=n,
        )
    if stagnant:
        return TrendAnalysis(
            trend="stagnant",
            message=f"No progress in last 3 sessions. Volume has plateaued at {last:.0f}.",
            recommendation=(
                "PLATEAU DETECTED. Try: 1) Increase training frequency, 2) Add 1-2 sets, "
                "3) Change rep range, or 4) Take a deload week."
            ),
            sessions=n,
        )
    if percent < 0:
        return TrendAnalysis(
            trend="regressing",
            message=f"Volume decreased by {abs(percent):.1f}% over {n} sessions.",
            percentChange=round(percent, 1),
            recommendation=(
                "REGRESSION DETECTED. Possible overtraining or inadequate recovery. "
                "Consider: 1) Deload week, 2) Check sleep/nutrition, 3) Reduce volume."
            ),
            sessions=n,
        )
    return TrendAnalysis(
        trend="neutral",
        message=f"Volume stable around {last:.0f}.",
        recommendation="Focus on consistent progressive overload (add weight or reps each session).",
        sessions=n,
    )


def extract_sessions(workouts: Iterable[WorkoutRecord], exercise_name: str) -> list[Session]:
    """Collapse each matching logged exercise into one averaged ``Session``.

    Matching is a case-insensitive substring on the logged name. Logs without
    completed sets are skipped. Sessions come back oldest first.
    """
    needle = exercise_name.lower()
    sessions: list[Session] = []
    for workout in workouts:
        for ex in workout.exercises:
            if needle not in ex.name.lower() or not ex.completedSets:
                continue
            sets = ex.completedSets
            sessions.append(
                Session(
                    date=workout.date,
                    exercise=ex.name,
                    weight=sum(s.weight for s in sets) / len(sets),
                    reps=round(sum(s.reps for s in sets) / len(sets)),
                    sets=len(sets),
                    rpe=round(ex.avg_rpe(DEFAULT_RPE), 1),
                    equipment=ex.equipment or "barbell",
                    targetRepRange=ex.targetRepRange or DEFAULT_REP_RANGE,
                )
            )
    return _chronological(sessions)


def progression_report(exercise_name: str, sessions: Sequence[Session]) -> ProgressionReport:
    """Next prescription plus trend for one exercise.

    Raises:
        InsufficientHistory: when there are fewer than two sessions.
    """
    if len(sessions) < MIN_TREND_SESSIONS:
        raise InsufficientHistory(MIN_TREND_SESSIONS, len(sessions), exercise_name)

    ordered = _chronological(sessions)
    last = ordered[-1]
    return ProgressionReport(
        exercise=exercise_name,
        totalSessions=len(ordered),
        lastSession={
            "date": last.date.isoformat() if last.date else None,
            "weight": last.weight,
            "reps": last.reps,
            "sets": last.sets,
            "rpe": last.rpe,
        },
        nextRecommendation=recommend_next(last, last.targetRepRange),
        trend=analyze_progression_trend(ordered),
    )


def _max_completed_weight(workout: WorkoutRecord, exercise_name: str | None = None) -> dict[str, float]:
    best: dict[str, float] = {}
    for ex in workout.exercises:
        if exercise_name and exercise_name.lower() not in ex.name.lower():
            continue
        weights = [s.weight for s in ex.completedSets if s.completed and s.weight]
        if weights and max(weights) > 0:
            best[ex.name] = max(best.get(ex.name, 0), max(weights))
    return best


def detect_plateau(workouts: Sequence[WorkoutRecord], exercise_name: str) -> PlateauAnalysis:
    """Plateau check on per-session top working weight for one exercise.

    A plateau is a spread under 10% of the average with the second half of
    the window within 2.5 lbs of the first half.

    Raises:
        InsufficientHistory: with fewer than three sessions.
    """
    ordered = sorted(workouts, key=lambda w: w.date)
    values: list[float] = []
    for workout in ordered:
        best = _max_completed_weight(workout, exercise_name)
        if best:
            values.append(max(best.values()))

    if len(values) < MIN_PLATEAU_SESSIONS:
        raise InsufficientHistory(MIN_PLATEAU_SESSIONS, len(values), exercise_name)

    avg = sum(values) / len(values)
    lo, hi = min(values), max(values)
    half = len(values) // 2
    first, second = values[:half], values[half:]
    trend = sum(second) / len(second) - sum(first) / len(first)
    is_plateau = (hi - lo) < avg * 0.1 and abs(trend) < 2.5

    if is_plateau:
        logger.info("Plateau detected for %s over %d sessions", exercise_name, len(values))

    return PlateauAnalysis(
        exercise=exercise_name,
        sessions=len(values),
        average=round(avg, 1),
        minimum=lo,
        maximum=hi,
        range=hi - lo,
        trend=round(trend, 1),
        isPlateau=is_plateau,
    )


def scan_plateaus(workouts: Sequence[WorkoutRecord]) -> list[dict]:
    """Every exercise whose top weight barely moves (std-dev under 5% of mean)."""
    history: dict[str, list[float]] = {}
    for workout in sorted(workouts, key=lambda w: w.date):
        for name, weight in _max_completed_weight(workout).items():
            history.setdefault(name, []).append(weight)

    plateaus = []
    for name, values in history.items():
        if len(values) < MIN_PLATEAU_SESSIONS:
            continue
        avg = sum(values) / len(values)
        std = math.sqrt(sum((v - avg) ** 2 for v in values) / len(values))
        if std < avg * 0.05:
            plateaus.append(
                {
                    "exercise": name,
                    "avgWeight": round(avg),
                    "stdDev": round(std, 2),
                    "sessions": len(values),
                }
            )
    return plateaus
