"""
Weekly report repository for database operations.
"""

from datetime import date
from typing import Optional, List, Sequence
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from okr_backend.core.config import settings
from okr_backend.db.repositories.base_repository import BaseRepository
from okr_backend.models.action_plan import ActionPlan
from okr_backend.models.goal import Goal
from okr_backend.models.weekly_report import WeeklyReport
from okr_backend.utils.dates import chunk


class WeeklyReportRepository(BaseRepository[WeeklyReport]):
    """Repository for weekly report operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(WeeklyReport, session)

    async def get_with_plan(self, id: UUID) -> Optional[WeeklyReport]:
        """Get report with its action plan and goal."""
        result = await self.session.execute(
            select(WeeklyReport)
            .options(selectinload(WeeklyReport.action_plan).selectinload(ActionPlan.goal))
            .where(WeeklyReport.id == id)
        )
        return result.scalar_one_or_none()

    async def list_for_plan(self, action_plan_id: UUID, skip: int = 0, limit: int = 20) -> List[WeeklyReport]:
        """Reports of one plan, newest first."""
        result = await self.session.execute(
            select(WeeklyReport)
            .where(WeeklyReport.action_plan_id == action_plan_id)
            .order_by(WeeklyReport.date.desc(), WeeklyReport.created_at.desc(), WeeklyReport.id)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_for_goals_in_range(
        self,
        goal_ids: Sequence[UUID],
        date_from: date,
        date_to: date,
    ) -> List[WeeklyReport]:
        """Reports for many goals within [date_from, date_to], fetched in chunks."""
        rows: List[WeeklyReport] = []
        for batch in chunk(list(goal_ids), settings.GATEWAY_CHUNK_SIZE):
            result = await self.session.execute(
                select(WeeklyReport)
                .where(
                    WeeklyReport.goal_id.in_(batch),
                    WeeklyReport.date >= date_from,
                    WeeklyReport.date <= date_to,
                )
                .order_by(WeeklyReport.created_at, WeeklyReport.id)
            )
            rows.extend(result.scalars().all())
        return rows

    async def list_with_owner_for_users_in_range(
        self,
        user_ids: Sequence[UUID],
        year: int,
        date_from: date,
        date_to: date,
    ) -> List[tuple]:
        """(WeeklyReport, owner user_id) pairs for goals of the given users and year, chunked by user."""
        rows: List[tuple] = []
        for batch in chunk(list(user_ids), settings.GATEWAY_CHUNK_SIZE):
            result = await self.session.execute(
                select(WeeklyReport, Goal.user_id)
                .join(Goal, WeeklyReport.goal_id == Goal.id)
                .where(
                    Goal.user_id.in_(batch),
                    Goal.year == year,
                    WeeklyReport.date >= date_from,
                    WeeklyReport.date <= date_to,
                )
            )
            rows.extend(tuple(row) for row in result.all())
        return rows

    async def list_dates_for_plans(self, action_plan_ids: Sequence[UUID]) -> List[tuple]:
        """(action_plan_id, date) pairs for many plans, fetched in chunks."""
        rows: List[tuple] = []
        for batch in chunk(list(action_plan_ids), settings.GATEWAY_CHUNK_SIZE):
            result = await self.session.execute(
                select(WeeklyReport.action_plan_id, WeeklyReport.date)
                .where(WeeklyReport.action_plan_id.in_(batch))
            )
            rows.extend(tuple(row) for row in result.all())
        return rows
