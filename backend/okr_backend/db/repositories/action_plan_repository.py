"""
Action plan repository for database operations.
"""

from typing import Optional, List, Sequence
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from okr_backend.core.config import settings
from okr_backend.db.repositories.base_repository import BaseRepository
from okr_backend.models.action_plan import ActionPlan, ActionPlanStatus
from okr_backend.models.goal import Goal, GoalStatus
from okr_backend.models.user import User
from okr_backend.utils.dates import chunk


class ActionPlanRepository(BaseRepository[ActionPlan]):
    """Repository for action plan operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(ActionPlan, session)

    async def get_with_goal(self, id: UUID) -> Optional[ActionPlan]:
        """Get action plan with its goal."""
        result = await self.session.execute(
            select(ActionPlan)
            .options(selectinload(ActionPlan.goal))
            .where(ActionPlan.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def has_any_for_goal(self, goal_id: UUID) -> bool:
        """True when at least one action plan exists under the goal."""
        result = await self.session.execute(
            select(ActionPlan.id).where(ActionPlan.goal_id == goal_id).limit(1)
        )
        return result.first() is not None

    async def list_with_owner_for_users(self, user_ids: Sequence[UUID], year: int) -> List[tuple]:
        """(ActionPlan, owner user_id) pairs for goals of the given users and year, chunked by user."""
        rows: List[tuple] = []
        for batch in chunk(list(user_ids), settings.GATEWAY_CHUNK_SIZE):
            result = await self.session.execute(
                select(ActionPlan, Goal.user_id)
                .join(Goal, ActionPlan.goal_id == Goal.id)
                .where(Goal.user_id.in_(batch), Goal.year == year)
            )
            rows.extend(tuple(row) for row in result.all())
        return rows

    async def list_with_owner_for_year(self, year: int) -> List[tuple]:
        """(ActionPlan, owner user_id) pairs for every goal of the year."""
        result = await self.session.execute(
            select(ActionPlan, Goal.user_id)
            .join(Goal, ActionPlan.goal_id == Goal.id)
            .where(Goal.year == year)
        )
        return [tuple(row) for row in result.all()]

    async def list_reportable(
        self,
        team_id: UUID,
        year: int,
        user_id: Optional[UUID] = None,
    ) -> List[ActionPlan]:
        """
        Plans that are expected to receive weekly reports: plan In Progress or Blocked
        under a goal In Progress, owned by a member of the team.
        """
        query = (
            select(ActionPlan)
            .join(Goal, ActionPlan.goal_id == Goal.id)
            .join(User, Goal.user_id == User.id)
            .where(
                ActionPlan.status.in_([ActionPlanStatus.IN_PROGRESS.value, ActionPlanStatus.BLOCKED.value]),
                Goal.status == GoalStatus.IN_PROGRESS.value,
                Goal.year == year,
                User.team_id == team_id,
            )
        )
        if user_id is not None:
            query = query.where(Goal.user_id == user_id)
        result = await self.session.execute(query.order_by(ActionPlan.created_at, ActionPlan.id))
        return list(result.scalars().all())
