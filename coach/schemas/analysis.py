"""Derived results of the volume and progression engines."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

ProgressionType = Literal[
    "weight_increase", "rep_increase", "weight_increase_with_rep_drop", "maintain"
]
TrendStatus = Literal["progressing", "slow_progress", "stagnant", "regressing", "neutral"]


class ProgressionRecommendation(BaseModel):
    nextWeight: float
    nextReps: int
    nextSets: int
    reason: str
    progressionType: ProgressionType
    changeAmount: str
    warning: str | None = None


class TrendAnalysis(BaseModel):
    trend: TrendStatus
    message: str
    percentChange: float = 0.0
    recommendation: str | None = None
    sessions: int = 0


class ProgressionReport(BaseModel):
    exercise: str
    totalSessions: int
    lastSession: dict
    nextRecommendation: ProgressionRecommendation
    trend: TrendAnalysis


class DeloadStatus(BaseModel):
    needsDeload: bool
    reason: str
    deloadType: Literal["scheduled", "overdue", "fatigue_based"] | None = None
    priority: Literal["none", "high", "critical"] = "none"


class PlateauAnalysis(BaseModel):
    exercise: str
    sessions: int
    average: float
    minimum: float
    maximum: float
    range: float
    trend: float
    isPlateau: bool


class VolumeStatus(BaseModel):
    status: Literal[
        "suboptimal", "below_optimal", "optimal", "high", "very_high", "excessive", "unknown"
    ]
    message: str
    recommendation: str | None = None
    # positive: sets to add, negative: sets to remove
    adjustment: int = 0


class FrequencyStatus(BaseModel):
    status: Literal["too_low", "optimal", "high", "unknown"]
    frequency: int
    message: str
    recommendation: str | None = None


class Imbalance(BaseModel):
    type: Literal["PUSH_PULL_IMBALANCE", "LEG_NEGLECT", "LOW_VOLUME"]
    severity: Literal["HIGH", "MEDIUM", "LOW"]
    message: str
    recommendation: str
    musclesAffected: list[str]


class MuscleVolume(BaseModel):
    weeklyVolume: int
    volumeStatus: VolumeStatus
    frequencyStatus: FrequencyStatus


class VolumeReport(BaseModel):
    totalWorkouts: int
    overallStatus: Literal["overtraining_risk", "undertraining", "optimal", "unknown"] = "unknown"
    muscleAnalysis: dict[str, MuscleVolume] = {}
    warnings: list[str] = []
    recommendations: list[str] = []
    imbalances: list[Imbalance] = []


class HistoryAnalysis(BaseModel):
    totalWorkouts: int
    totalVolume: int = 0
    avgWorkoutsPerWeek: float = 0.0
    muscleGroupBreakdown: dict[str, int] = {}
    mostTrained: str = "N/A"
    leastTrained: str = "N/A"
    frequency: float = 0.0
    message: str | None = None


class MuscleBalance(BaseModel):
    push: str
    pull: str
    legs: str


class RecommendationContext(BaseModel):
    weeklyFrequency: int
    daysSinceLastWorkout: int
    muscleBalance: MuscleBalance
    programDetected: Literal["PPL", "Upper/Lower", "None"]


class WorkoutRecommendation(BaseModel):
    suggested: str
    reason: str
    muscleGroups: list[str] = []
    restDayRecommended: bool = False
    alternativeWorkout: str | None = None
    analysis: RecommendationContext | None = None


class OneRepMaxEstimate(BaseModel):
    exercise: str
    oneRepMax: float
    inputWeight: float
    inputReps: int
    formula: str | None = None
    # conservative, average and aggressive
    estimates: dict[str, float] = {}
    formulas: dict[str, int] = {}
    note: str


class PercentageLoad(BaseModel):
    exercise: str
    oneRepMax: float
    percentage: float
    targetWeight: int
    context: str
    note: str


class ProgressionMilestone(BaseModel):
    weight: int
    weeks: int
    percentage: int


class ProgressionPrediction(BaseModel):
    exercise: str
    currentWeight: float
    currentReps: int
    estimated1RM: float
    targetWeight: float
    weeksNeeded: int
    workoutsNeeded: int
    progressionRate: str
    experienceLevel: str
    milestones: list[ProgressionMilestone] = []
    note: str


class WarmupSet(BaseModel):
    set: int
    weight: int
    reps: int
    percentage: int
    notes: str


class WarmupPlan(BaseModel):
    exercise: str
    workingWeight: float
    workingReps: int
    warmupSets: list[WarmupSet]
    totalWarmupSets: int
    estimatedWarmupTime: str
    notes: list[str]


class ExerciseStats(BaseModel):
    exerciseName: str
    totalSessions: int = 0
    totalSets: int = 0
    totalVolume: int = 0
    maxWeight: float = 0
    maxReps: int = 0
    maxVolume: float = 0
    trend: Literal["increasing", "stable"] = "stable"
    lastPerformed: datetime | None = None
    recentWeights: list[float] = []
    message: str | None = None
