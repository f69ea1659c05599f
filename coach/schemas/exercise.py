from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Exercise(BaseModel):
    """Reference catalog entry. Loaded once and never mutated."""

    model_config = ConfigDict(frozen=True)

    name: str
    muscleGroup: str | None = None
    primaryMuscles: list[str] = []
    secondaryMuscles: list[str] = []
    equipment: str = ""
    difficulty: str | None = None
    instructions: str = ""

    def all_muscles(self) -> list[str]:
        return [*self.primaryMuscles, *self.secondaryMuscles]
