"""
Goal progress history repository (append-only).
"""

from datetime import datetime
from typing import Optional, List, Sequence
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from okr_backend.core.config import settings
from okr_backend.db.repositories.base_repository import BaseRepository
from okr_backend.models.goal import GoalProgressHistory
from okr_backend.utils.dates import chunk, now_local


class ProgressHistoryRepository(BaseRepository[GoalProgressHistory]):
    """Repository for progress snapshots."""

    def __init__(self, session: AsyncSession):
        super().__init__(GoalProgressHistory, session)

    async def append(
        self,
        goal_id: UUID,
        progress: int,
        recorded_at: Optional[datetime] = None,
    ) -> GoalProgressHistory:
        """Record a progress snapshot."""
        return await self.create(
            goal_id=goal_id,
            progress=progress,
            recorded_at=recorded_at or now_local(),
        )

    async def list_for_goals(
        self,
        goal_ids: Sequence[UUID],
        since: datetime,
        until: datetime,
    ) -> List[GoalProgressHistory]:
        """Snapshots for many goals recorded within [since, until], newest first."""
        rows: List[GoalProgressHistory] = []
        for batch in chunk(list(goal_ids), settings.GATEWAY_CHUNK_SIZE):
            result = await self.session.execute(
                select(GoalProgressHistory)
                .where(
                    GoalProgressHistory.goal_id.in_(batch),
                    GoalProgressHistory.recorded_at >= since,
                    GoalProgressHistory.recorded_at <= until,
                )
            )
            rows.extend(result.scalars().all())
        rows.sort(key=lambda row: row.recorded_at, reverse=True)
        return rows
