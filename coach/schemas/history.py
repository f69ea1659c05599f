"""Workout history as supplied by the external logging service."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SetRecord(BaseModel):
    weight: float = 0
    reps: int = Field(default=0, ge=0)
    rpe: float | None = None
    completed: bool = True


class ExerciseLog(BaseModel):
    name: str
    equipment: str | None = None
    muscleGroup: str | None = None
    primaryMuscles: list[str] = []
    secondaryMuscles: list[str] = []
    sets: int | None = None
    completedSets: list[SetRecord] = []
    targetRepRange: str | None = None

    def set_count(self) -> int:
        if self.completedSets:
            return len(self.completedSets)
        return self.sets or 0

    def avg_rpe(self, default: float = 8) -> float:
        if not self.completedSets:
            return default
        return sum(s.rpe if s.rpe is not None else default for s in self.completedSets) / len(
            self.completedSets
        )


class WorkoutRecord(BaseModel):
    id: str | None = None
    date: datetime
    title: str | None = None
    exercises: list[ExerciseLog] = []
    isDeload: bool = False

    @field_validator("date")
    @classmethod
    def _normalize_date(cls, value: datetime) -> datetime:
        return as_utc(value)


class Session(BaseModel):
    """One performed instance of one exercise, aggregated over its sets."""

    date: datetime | None = None
    exercise: str = ""
    weight: float
    reps: int = Field(ge=0)
    sets: int = 1
    rpe: float | None = None
    targetRepRange: str | None = None
    equipment: str | None = None

    @field_validator("date")
    @classmethod
    def _normalize_date(cls, value: datetime | None) -> datetime | None:
        return as_utc(value) if value is not None else None
