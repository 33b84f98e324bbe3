"""
User and team repositories.
"""

from typing import Optional, List
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from sqlalchemy.orm import selectinload

from okr_backend.db.repositories.base_repository import BaseRepository
from okr_backend.models.user import User, Team


class UserRepository(BaseRepository[User]):
    """Repository for user operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_with_team(self, user_id: UUID) -> Optional[User]:
        """Get user by ID with team loaded."""
        result = await self.session.execute(
            select(User)
            .options(selectinload(User.team))
            .where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def list_users(
        self,
        team_id: Optional[UUID] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 200,
    ) -> List[User]:
        """List users ordered by name, optionally restricted to a team and a name/email search."""
        query = select(User).options(selectinload(User.team))
        if team_id is not None:
            query = query.where(User.team_id == team_id)
        if search:
            needle = f"%{search}%"
            query = query.where(or_(User.name.ilike(needle), User.email.ilike(needle)))
        query = query.order_by(User.name.asc().nulls_last(), User.id).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_by_team(self, team_id: UUID) -> List[User]:
        """All members of a team, ordered by name."""
        result = await self.session.execute(
            select(User)
            .options(selectinload(User.team))
            .where(User.team_id == team_id)
            .order_by(User.name.asc().nulls_last(), User.id)
        )
        return list(result.scalars().all())

    async def list_all(self, team_id: Optional[UUID] = None) -> List[User]:
        """All users, optionally restricted to one team."""
        query = select(User)
        if team_id is not None:
            query = query.where(User.team_id == team_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def is_member_of_team(self, user_id: UUID, team_id: UUID) -> bool:
        """True when the user exists and belongs to the team."""
        result = await self.session.execute(
            select(User.id).where(User.id == user_id, User.team_id == team_id)
        )
        return result.scalar_one_or_none() is not None


class TeamRepository(BaseRepository[Team]):
    """Repository for team operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Team, session)

    async def list_teams(self, team_id: Optional[UUID] = None) -> List[Team]:
        """Teams ordered by name; a team_id narrows the list to that team."""
        query = select(Team)
        if team_id is not None:
            query = query.where(Team.id == team_id)
        result = await self.session.execute(query.order_by(Team.name.asc()))
        return list(result.scalars().all())
