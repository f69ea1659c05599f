"""Weekly set volume and training frequency against per-muscle landmarks.

Landmarks are sets per muscle per week: a growth ``minimum``, an
``optimal`` band, a ``maximum`` recoverable volume and an ``advanced``
ceiling. Everything here is a pure function of the workouts passed in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from ..schemas.analysis import (
    FrequencyStatus,
    Imbalance,
    MuscleVolume,
    VolumeReport,
    VolumeStatus,
)
from ..schemas.history import ExerciseLog, WorkoutRecord


@dataclass(frozen=True)
class VolumeLandmarks:
    minimum: int
    optimal_low: int
    optimal_high: int
    maximum: int
    advanced: int


VOLUME_LANDMARKS: dict[str, VolumeLandmarks] = {
    "chest": VolumeLandmarks(4, 8, 18, 22, 40),
    "back": VolumeLandmarks(4, 10, 20, 25, 45),
    "shoulders": VolumeLandmarks(4, 8, 16, 20, 35),
    "triceps": VolumeLandmarks(4, 6, 14, 18, 30),
    "biceps": VolumeLandmarks(4, 6, 14, 20, 30),
    "quads": VolumeLandmarks(4, 6, 14, 20, 35),
    "hamstrings": VolumeLandmarks(4, 6, 12, 18, 30),
    "glutes": VolumeLandmarks(4, 6, 14, 20, 35),
    "calves": VolumeLandmarks(6, 8, 16, 20, 35),
}

# least to most severe; "unknown" sits outside the scale
VOLUME_SEVERITY: tuple[str, ...] = (
    "suboptimal",
    "below_optimal",
    "optimal",
    "high",
    "very_high",
    "excessive",
)


@dataclass(frozen=True)
class FrequencyTarget:
    optimal: int
    minimum: int
    explanation: str


FREQUENCY_TARGETS: dict[str, FrequencyTarget] = {
    "strength": FrequencyTarget(
        4, 2, "High-frequency training improves maximal strength more than low frequency."
    ),
    "hypertrophy": FrequencyTarget(
        2, 1, "Frequency matters less when volume is equated, but 2x/week spreads volume better."
    ),
    "general": FrequencyTarget(2, 1, "Train each muscle 2x/week for optimal results."),
}

# the logged tag a muscle is recorded under can differ from the landmark key
MUSCLE_ALIASES: dict[str, tuple[str, ...]] = {
    "back": ("back", "lats", "traps", "rhomboids"),
    "shoulders": ("shoulders", "deltoids"),
    "quads": ("quads", "quadriceps"),
    "legs": ("legs", "quadriceps", "hamstrings", "glutes", "calves"),
}

REPORT_MUSCLES: tuple[str, ...] = (
    "chest",
    "back",
    "shoulders",
    "triceps",
    "biceps",
    "quads",
    "hamstrings",
    "glutes",
)


def severity(status: str) -> int:
    """Position on the severity scale, -1 for ``unknown``."""
    try:
        return VOLUME_SEVERITY.index(status)
    except ValueError:
        return -1


def _terms(muscle_group: str) -> tuple[str, ...]:
    key = muscle_group.lower().strip()
    return MUSCLE_ALIASES.get(key, (key,))


def targets_muscle(exercise: ExerciseLog, muscle_group: str) -> bool:
    tags = [m.lower() for m in (*exercise.primaryMuscles, *exercise.secondaryMuscles)]
    if exercise.muscleGroup:
        tags.append(exercise.muscleGroup.lower())
    return any(term in tag for term in _terms(muscle_group) for tag in tags)


def weekly_volume(workouts: Iterable[WorkoutRecord], muscle_group: str) -> int:
    """Completed sets that hit ``muscle_group`` across the given workouts."""
    return sum(
        ex.set_count()
        for workout in workouts
        for ex in workout.exercises
        if targets_muscle(ex, muscle_group)
    )


def volume_status(weekly_sets: int, muscle_group: str) -> VolumeStatus:
    landmarks = VOLUME_LANDMARKS.get(muscle_group.lower().strip())
    if landmarks is None:
        return VolumeStatus(status="unknown", message=f"No volume data for {muscle_group}")

    v = weekly_sets
    low, high = landmarks.optimal_low, landmarks.optimal_high

    if v < landmarks.minimum:
        return VolumeStatus(
            status="suboptimal",
            message=f"{v} sets/week is below minimum ({landmarks.minimum} sets) for muscle growth",
            recommendation=(
                f"Increase to at least {landmarks.minimum} sets/week. "
                f"Optimal is {low}-{high} sets/week."
            ),
            adjustment=landmarks.minimum - v,
        )
    if v < low:
        return VolumeStatus(
            status="below_optimal",
            message=f"{v} sets/week will stimulate growth, but below optimal range",
            recommendation=f"Increase to {low}-{high} sets/week for optimal results.",
            adjustment=low - v,
        )
    if v <= high:
        return VolumeStatus(
            status="optimal",
            message=f"{v} sets/week is in the optimal range ({low}-{high})",
            recommendation="You're in the sweet spot! Maintain this volume.",
        )
    if v <= landmarks.maximum:
        return VolumeStatus(
            status="high",
            message=f"{v} sets/week is high but recoverable for most people",
            recommendation=(
                "Monitor for signs of overtraining. Consider a deload if fatigue accumulates."
            ),
        )
    if v <= landmarks.advanced:
        return VolumeStatus(
            status="very_high",
            message=f"{v} sets/week is very high. Only advanced lifters can recover from this.",
            recommendation=(
                f"Reduce volume to {high} sets/week unless you're an advanced lifter "
                "with confirmed recovery capacity."
            ),
            adjustment=-(v - high),
        )
    return VolumeStatus(
        status="excessive",
        message=f"{v} sets/week is excessive. Risk of overtraining is high.",
        recommendation=(
            f"REDUCE to {high} sets/week immediately. Even advanced lifters see "
            f"diminishing returns beyond {landmarks.advanced} sets."
        ),
        adjustment=-(v - high),
    )


def frequency_status(
    workouts: Sequence[WorkoutRecord], muscle_group: str, goal: str = "hypertrophy"
) -> FrequencyStatus:
    """How many of the given workouts trained ``muscle_group``, against the goal's target."""
    frequency = sum(
        1 for w in workouts if any(targets_muscle(ex, muscle_group) for ex in w.exercises)
    )
    target = FREQUENCY_TARGETS.get(goal, FREQUENCY_TARGETS["general"])

    if frequency < target.optimal:
        if frequency < target.minimum:
            message = f"Training {muscle_group} only {frequency}x/week"
        else:
            message = f"Training {muscle_group} {frequency}x/week, below the {target.optimal}x/week target"
        return FrequencyStatus(
            status="too_low",
            frequency=frequency,
            message=message,
            recommendation=f"Increase to {target.optimal}x/week. {target.explanation}",
        )
    if frequency == target.optimal:
        return FrequencyStatus(
            status="optimal",
            frequency=frequency,
            message=f"Training {muscle_group} {frequency}x/week (optimal)",
            recommendation="Perfect frequency! Maintain this.",
        )
    return FrequencyStatus(
        status="high",
        frequency=frequency,
        message=f"Training {muscle_group} {frequency}x/week",
        recommendation=(
            "High frequency. Ensure you're recovering adequately between sessions (48-72hr rest)."
        ),
    )


def volume_recommendation(current_sets: int, muscle_group: str) -> dict:
    """Sets to add or remove to land in the optimal band."""
    status = volume_status(current_sets, muscle_group)

    if status.status in ("suboptimal", "below_optimal"):
        return {
            "shouldAddVolume": True,
            "setsToAdd": status.adjustment or 2,
            "reason": status.recommendation,
        }
    if status.status == "optimal":
        return {
            "shouldAddVolume": False,
            "setsToAdd": 0,
            "reason": (
                "Current volume is optimal. Focus on progressive overload "
                "instead of adding more volume."
            ),
        }
    if status.status in ("high", "very_high", "excessive"):
        return {
            "shouldAddVolume": False,
            "setsToAdd": 0,
            "shouldReduceVolume": True,
            "setsToRemove": -status.adjustment or 2,
            "reason": "Current volume is too high. Consider reducing volume or taking a deload week.",
        }
    return {"shouldAddVolume": False, "setsToAdd": 0, "reason": "Unable to determine volume needs"}


def detect_imbalances(volumes: dict[str, int]) -> list[Imbalance]:
    """Push/pull and upper/lower ratios plus low-volume muscles, most severe first."""
    imbalances: list[Imbalance] = []
    chest = volumes.get("chest", 0)
    back = volumes.get("back", 0)
    shoulders = volumes.get("shoulders", 0)
    legs = sum(volumes.get(m, 0) for m in ("quads", "hamstrings", "glutes", "calves"))
    upper = chest + back + shoulders

    if chest > back * 1.5 and chest >= 10:
        imbalances.append(
            Imbalance(
                type="PUSH_PULL_IMBALANCE",
                severity="HIGH",
                message=f"Chest volume ({chest} sets) is much higher than back ({back} sets)",
                recommendation="Add more pulling exercises (rows, pull-ups, face pulls)",
                musclesAffected=["chest", "back"],
            )
        )

    if upper > legs * 2 and upper >= 20:
        imbalances.append(
            Imbalance(
                type="LEG_NEGLECT",
                severity="MEDIUM",
                message=f"Upper body ({upper} sets) getting 2x more volume than legs ({legs} sets)",
                recommendation="Add at least 1 more leg session this week",
                musclesAffected=["legs"],
            )
        )

    for muscle, sets in volumes.items():
        if 0 < sets < 5:
            imbalances.append(
                Imbalance(
                    type="LOW_VOLUME",
                    severity="LOW",
                    message=f"{muscle.capitalize()} only has {sets} sets this week",
                    recommendation=f"Add {10 - sets} more sets to hit minimum effective volume",
                    musclesAffected=[muscle],
                )
            )

    order = {"HIGH": 0, "MEDIUM": 1, "LOW": 2}
    return sorted(imbalances, key=lambda i: order[i.severity])


def volume_report(workouts: Sequence[WorkoutRecord], goal: str = "hypertrophy") -> VolumeReport:
    analysis: dict[str, MuscleVolume] = {}
    warnings: list[str] = []
    recommendations: list[str] = []

    for muscle in REPORT_MUSCLES:
        sets = weekly_volume(workouts, muscle)
        vstatus = volume_status(sets, muscle)
        fstatus = frequency_status(workouts, muscle, goal)
        analysis[muscle] = MuscleVolume(weeklyVolume=sets, volumeStatus=vstatus, frequencyStatus=fstatus)

        label = muscle.upper()
        if vstatus.status in ("suboptimal", "below_optimal", "very_high", "excessive"):
            warnings.append(f"{label}: {vstatus.message}")
            recommendations.append(f"{label}: {vstatus.recommendation}")
        if fstatus.status == "too_low":
            warnings.append(f"{label}: {fstatus.message}")
            recommendations.append(f"{label}: {fstatus.recommendation}")

    statuses = {m.volumeStatus.status for m in analysis.values()}
    if "excessive" in statuses:
        overall = "overtraining_risk"
    elif statuses & {"suboptimal", "below_optimal"}:
        overall = "undertraining"
    elif "optimal" in statuses:
        overall = "optimal"
    else:
        overall = "unknown"

    volumes = {m: v.weeklyVolume for m, v in analysis.items()}
    volumes["calves"] = weekly_volume(workouts, "calves")

    return VolumeReport(
        totalWorkouts=len(workouts),
        overallStatus=overall,
        muscleAnalysis=analysis,
        warnings=warnings,
        recommendations=recommendations,
        imbalances=detect_imbalances(volumes),
    )
