from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

Goal = Literal["strength", "hypertrophy", "endurance", "general"]
ExperienceLevel = Literal["beginner", "intermediate", "advanced"]


class PlannedExercise(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    equipment: str
    muscleGroup: str
    sets: int
    reps: str
    restTime: int
    instructions: str = ""
    deloadNote: str | None = None


class WorkoutPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    muscleGroups: list[str]
    category: str | None = None
    goal: Goal
    experienceLevel: ExperienceLevel = "intermediate"
    estimatedDuration: int
    exercises: list[PlannedExercise]
    isDeload: bool = False
    formatNotes: str = ""

    @property
    def totalExercises(self) -> int:
        return len(self.exercises)


class ProgramDay(BaseModel):
    dayNumber: int
    dayName: str
    name: str
    muscleGroups: list[str]
    plan: WorkoutPlan


class WorkoutProgram(BaseModel):
    title: str
    days: int
    goal: Goal
    experienceLevel: ExperienceLevel
    workouts: list[ProgramDay]
