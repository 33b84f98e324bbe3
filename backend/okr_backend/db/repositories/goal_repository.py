"""
Goal repository for database operations.
"""

from typing import Optional, List, Sequence
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from okr_backend.db.repositories.base_repository import BaseRepository
from okr_backend.models.goal import Goal
from okr_backend.models.user import User


class GoalRepository(BaseRepository[Goal]):
    """Repository for goal operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Goal, session)

    async def get_with_owner(self, id: UUID) -> Optional[Goal]:
        """Get goal with its owner and the owner's team in one round trip."""
        result = await self.session.execute(
            select(Goal)
            .options(selectinload(Goal.user).selectinload(User.team))
            .where(Goal.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_by_user(self, user_id: UUID, year: Optional[int] = None) -> List[Goal]:
        """Goals owned by a user, oldest first."""
        query = select(Goal).where(Goal.user_id == user_id)
        if year is not None:
            query = query.where(Goal.year == year)
        result = await self.session.execute(query.order_by(Goal.created_at, Goal.id))
        return list(result.scalars().all())

    async def list_with_action_plans(self, user_id: UUID, year: int) -> List[Goal]:
        """Goals of a user for one year with nested action plans."""
        result = await self.session.execute(
            select(Goal)
            .options(selectinload(Goal.action_plans))
            .where(Goal.user_id == user_id, Goal.year == year)
            .order_by(Goal.created_at, Goal.id)
        )
        return list(result.scalars().all())

    async def list_team_goals(
        self,
        team_id: UUID,
        year: Optional[int] = None,
        user_id: Optional[UUID] = None,
        skip: int = 0,
        limit: int = 200,
    ) -> List[Goal]:
        """Page of goals owned by members of a team, with plans, owner and team loaded."""
        query = (
            select(Goal)
            .join(User, Goal.user_id == User.id)
            .options(
                selectinload(Goal.action_plans),
                selectinload(Goal.user).selectinload(User.team),
            )
            .where(User.team_id == team_id)
        )
        if year is not None:
            query = query.where(Goal.year == year)
        if user_id is not None:
            query = query.where(Goal.user_id == user_id)
        query = query.order_by(Goal.created_at.desc(), Goal.id).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def summary_page(
        self,
        team_id: UUID,
        year: int,
        user_id: Optional[UUID] = None,
        skip: int = 0,
        limit: int = 500,
    ) -> List[tuple]:
        """One page of (progress, review_status) rows for a team's goals."""
        query = (
            select(Goal.progress, Goal.review_status)
            .join(User, Goal.user_id == User.id)
            .where(User.team_id == team_id, Goal.year == year)
        )
        if user_id is not None:
            query = query.where(Goal.user_id == user_id)
        query = query.order_by(Goal.id).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return [tuple(row) for row in result.all()]

    async def list_for_users(self, user_ids: Sequence[UUID], year: int) -> List[Goal]:
        """Goals of many users for one year, fetched in chunks."""
        return await self.list_in("user_id", user_ids, year=year)

    async def list_for_year(self, year: int, team_id: Optional[UUID] = None) -> List[Goal]:
        """Every goal of a year, optionally restricted to owners in one team."""
        query = select(Goal).where(Goal.year == year)
        if team_id is not None:
            query = query.join(User, Goal.user_id == User.id).where(User.team_id == team_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())
