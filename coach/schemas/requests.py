"""Typed request payloads, one per tool.

Field names and descriptions are part of the parameter schema advertised to
the calling agent, so renaming a field is a breaking change.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from .workout import ExperienceLevel, Goal

VolumeMuscle = Literal[
    "chest",
    "back",
    "shoulders",
    "biceps",
    "triceps",
    "quads",
    "hamstrings",
    "glutes",
    "calves",
    "legs",
    "all",
]


class GenerateWorkoutPlanRequest(BaseModel):
    muscleGroups: list[str] = Field(
        min_length=1,
        description=(
            "Muscle groups or split to train, e.g. ['push'], ['legs'], ['upper'], "
            "['chest', 'triceps']."
        ),
    )
    experienceLevel: ExperienceLevel = "intermediate"
    duration: int = Field(default=60, ge=10, le=180, description="Session length in minutes.")
    goal: Goal = "general"
    equipment: list[str] | None = Field(
        default=None, description="Available equipment, e.g. ['dumbbell', 'cable']."
    )
    deload: bool = Field(default=False, description="Return the deload-week variant of the plan.")


class GenerateWorkoutProgramRequest(BaseModel):
    days: int = Field(default=4, ge=1, le=7, description="Training days per week.")
    experienceLevel: ExperienceLevel = "intermediate"
    goal: Goal = "general"


class FindExerciseAlternativesRequest(BaseModel):
    exerciseName: str = Field(description="Exercise to replace, e.g. 'Barbell Bench Press'.")
    equipment: str | None = Field(default=None, description="Restrict alternatives to this equipment.")
    muscleGroup: str | None = None


class SearchExercisesRequest(BaseModel):
    query: str | None = Field(default=None, description="Free-text match on name, muscles or equipment.")
    muscleGroup: str | None = None
    equipment: str | None = None
    difficulty: Literal["beginner", "intermediate", "advanced"] | None = None
    limit: int = Field(default=10, ge=1, le=50)


class GetExerciseInfoRequest(BaseModel):
    exerciseName: str


class GetRecentWorkoutsRequest(BaseModel):
    userId: str
    days: int = Field(default=14, ge=1, le=365)
    limit: int = Field(default=10, ge=1, le=100)


class AnalyzeWorkoutHistoryRequest(BaseModel):
    userId: str
    days: int = Field(default=30, ge=1, le=365)


class RecommendTodaysWorkoutRequest(BaseModel):
    userId: str


class AnalyzeWeeklyVolumeRequest(BaseModel):
    userId: str
    muscleGroup: VolumeMuscle = Field(
        description="Muscle group to analyze. Use 'all' for a full-body report."
    )
    timeframe: int = Field(default=7, ge=1, le=90, description="Days to analyze.")
    goal: Goal = "hypertrophy"


class GetProgressiveOverloadAdviceRequest(BaseModel):
    userId: str
    exerciseName: str = Field(description="Exercise name, e.g. 'Bench Press'.")
    muscleGroup: str | None = None


class CheckDeloadStatusRequest(BaseModel):
    userId: str


class AnalyzeExerciseProgressionRequest(BaseModel):
    userId: str
    exerciseName: str


class DetectProgressPlateauRequest(BaseModel):
    userId: str
    exerciseName: str | None = Field(
        default=None, description="Exercise to check. Omit to scan every logged exercise."
    )
    timeframe: int = Field(default=30, ge=7, le=365, description="Days to analyze.")


class GetExerciseStatsRequest(BaseModel):
    userId: str
    exerciseName: str = Field(description="Exact exercise name as logged, e.g. 'Barbell Bench Press'.")
    days: int = Field(default=90, ge=1, le=365)


class Calculate1RMRequest(BaseModel):
    weight: float = Field(gt=0, description="Weight lifted (in lbs or kg).")
    reps: int = Field(ge=1, description="Number of reps completed (1-12 for accuracy).")
    exerciseName: str = Field(default="exercise", description="Exercise name, e.g. 'Bench Press'.")


class CalculatePercentage1RMRequest(BaseModel):
    oneRepMax: float = Field(gt=0, description="1 rep max (can calculate first if not known).")
    percentage: float = Field(gt=0, le=100, description="Percentage of 1RM, e.g. 70, 85, 90.")
    exerciseName: str = "exercise"


class PredictProgressionRequest(BaseModel):
    currentWeight: float = Field(gt=0, description="Current weight being lifted.")
    currentReps: int = Field(ge=1, description="Reps at current weight.")
    targetWeight: float = Field(gt=0, description="Goal 1RM to reach.")
    exerciseName: str = Field(default="exercise", description="Exercise name (affects progression rate).")
    experienceLevel: ExperienceLevel = "intermediate"


class GenerateWarmupSetsRequest(BaseModel):
    workingWeight: float = Field(gt=0, description="The weight for working sets.")
    workingReps: int = Field(default=5, ge=1, description="Reps planned for working sets.")
    exerciseName: str = "exercise"
