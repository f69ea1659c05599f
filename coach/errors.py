"""Typed failures raised by the training engines and the tool registry.

Every error carries a ``user_message`` that is safe to show in the chat UI.
"""

from __future__ import annotations


class CoachError(Exception):
    """Base class for recoverable engine failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.user_message = message


class NoExercisesFound(CoachError):
    def __init__(self, muscle_groups: list[str]):
        self.muscle_groups = list(muscle_groups)
        super().__init__(
            f"No exercises found for muscle groups: {', '.join(muscle_groups)}. "
            "Try different muscle groups or equipment."
        )


class ValidationFailed(CoachError):
    """A generated plan contains exercises outside the requested category."""

    def __init__(self, category: str, offending: list[str], errors: list[str] | None = None):
        self.category = category
        self.offending = list(offending)
        self.errors = list(errors or [])
        detail = "; ".join(self.errors) or ", ".join(self.offending)
        super().__init__(f"Workout validation failed: {detail}")


class ToolNotFoundError(CoachError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Tool '{name}' not found in registry")


class InsufficientHistory(CoachError):
    def __init__(self, required: int, found: int, subject: str = ""):
        self.required = required
        self.found = found
        self.subject = subject
        target = f" for {subject}" if subject else ""
        super().__init__(
            f"Not enough data{target}. Need at least {required} sessions, found {found}."
        )


class ExerciseNotFound(CoachError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Exercise '{name}' not found")


class InvalidStrengthInput(CoachError):
    """Inputs outside the range a strength estimate is reliable for."""
