"""Sources of logged workout history."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Protocol

from ..schemas.history import WorkoutRecord, as_utc


class HistoryProvider(Protocol):
    async def get_workouts(self, user_id: str, days: int) -> list[WorkoutRecord]: ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryHistory:
    """History held in process, keyed by user id. Used for tests and local runs."""

    def __init__(
        self,
        workouts: dict[str, Iterable[WorkoutRecord]] | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._workouts = {user: list(items) for user, items in (workouts or {}).items()}
        self._clock = clock

    def add(self, user_id: str, workout: WorkoutRecord) -> None:
        self._workouts.setdefault(user_id, []).append(workout)

    async def get_workouts(self, user_id: str, days: int) -> list[WorkoutRecord]:
        """Workouts from the last ``days`` days, newest first."""
        cutoff = as_utc(self._clock()) - timedelta(days=days)
        recent = [w for w in self._workouts.get(user_id, []) if w.date >= cutoff]
        return sorted(recent, key=lambda w: w.date, reverse=True)
