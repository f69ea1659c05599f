"""Convex-backed workout history."""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime, timezone

from convex import ConvexClient

from ..schemas.history import WorkoutRecord

logger = logging.getLogger(__name__)

RECENT_WORKOUTS_QUERY = "workouts:getRecent"

_client: ConvexClient | None = None


def get_convex_client() -> ConvexClient:
    """Get or create the Convex client.

    Uses CONVEX_URL env var (e.g., https://happy-otter-123.convex.cloud).
    """
    global _client
    if _client is None:
        url = os.getenv("CONVEX_URL")
        if not url:
            raise ValueError(
                "CONVEX_URL must be set (e.g., https://happy-otter-123.convex.cloud)"
            )
        _client = ConvexClient(url)
    return _client


class ConvexHistory:
    """Reads logged workouts through the ``workouts:getRecent`` query."""

    def __init__(self, client: ConvexClient | None = None):
        self._client = client

    @property
    def client(self) -> ConvexClient:
        if self._client is None:
            self._client = get_convex_client()
        return self._client

    async def get_workouts(self, user_id: str, days: int) -> list[WorkoutRecord]:
        rows = await asyncio.to_thread(
            self.client.query, RECENT_WORKOUTS_QUERY, {"userId": user_id, "days": days}
        )
        workouts = [WorkoutRecord.model_validate(_from_convex(row)) for row in rows or []]
        logger.info("Fetched %d workouts for %s (last %d days)", len(workouts), user_id, days)
        return workouts


def _from_convex(row: dict) -> dict:
    # Convex stores dates as epoch milliseconds
    date = row.get("date")
    if isinstance(date, (int, float)):
        row = {**row, "date": datetime.fromtimestamp(date / 1000, tz=timezone.utc)}
    if "_id" in row and "id" not in row:
        row = {**row, "id": str(row["_id"])}
    return row
