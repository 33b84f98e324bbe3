"""
Verification request repository for database operations.
"""

from typing import Optional, List, Sequence, Dict
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from okr_backend.core.config import settings
from okr_backend.db.repositories.base_repository import BaseRepository
from okr_backend.models.goal import Goal
from okr_backend.models.user import User
from okr_backend.models.verification import VerificationRequest
from okr_backend.utils.dates import chunk


class VerificationRequestRepository(BaseRepository[VerificationRequest]):
    """Repository for verification requests."""

    def __init__(self, session: AsyncSession):
        super().__init__(VerificationRequest, session)

    def _detail_options(self):
        return (
            selectinload(VerificationRequest.goal),
            selectinload(VerificationRequest.requester).selectinload(User.team),
            selectinload(VerificationRequest.review),
        )

    async def get_detail(self, id: UUID) -> Optional[VerificationRequest]:
        """Get request with goal, requester (and team) and review loaded."""
        result = await self.session.execute(
            select(VerificationRequest)
            .options(*self._detail_options())
            .where(VerificationRequest.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_requests(
        self,
        requester_id: Optional[UUID] = None,
        team_id: Optional[UUID] = None,
        status: Optional[str] = None,
        year: Optional[int] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[VerificationRequest]:
        """Newest-first page of requests filtered by requester, requester team, status and goal year."""
        query = (
            select(VerificationRequest)
            .join(Goal, VerificationRequest.goal_id == Goal.id)
            .join(User, VerificationRequest.requester_id == User.id)
            .options(*self._detail_options())
        )
        if requester_id is not None:
            query = query.where(VerificationRequest.requester_id == requester_id)
        if team_id is not None:
            query = query.where(User.team_id == team_id)
        if status:
            query = query.where(VerificationRequest.status == status)
        if year is not None:
            query = query.where(Goal.year == year)
        query = (
            query.order_by(VerificationRequest.created_at.desc(), VerificationRequest.id)
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def latest_by_goal_ids(self, goal_ids: Sequence[UUID]) -> Dict[UUID, VerificationRequest]:
        """Most recent request per goal (with its review), fetched in chunks."""
        latest: Dict[UUID, VerificationRequest] = {}
        for batch in chunk(list(goal_ids), settings.GATEWAY_CHUNK_SIZE):
            result = await self.session.execute(
                select(VerificationRequest)
                .options(selectinload(VerificationRequest.review))
                .where(VerificationRequest.goal_id.in_(batch))
                .order_by(VerificationRequest.created_at.desc(), VerificationRequest.id)
            )
            for request in result.scalars().all():
                latest.setdefault(request.goal_id, request)
        return latest

    async def list_status_with_owner(
        self,
        year: int,
        user_ids: Optional[Sequence[UUID]] = None,
    ) -> List[tuple]:
        """(status, goal owner user_id) pairs for requests on goals of the year."""
        base = (
            select(VerificationRequest.status, Goal.user_id)
            .join(Goal, VerificationRequest.goal_id == Goal.id)
            .where(Goal.year == year)
        )
        if user_ids is None:
            result = await self.session.execute(base)
            return [tuple(row) for row in result.all()]

        rows: List[tuple] = []
        for batch in chunk(list(user_ids), settings.GATEWAY_CHUNK_SIZE):
            result = await self.session.execute(base.where(Goal.user_id.in_(batch)))
            rows.extend(tuple(row) for row in result.all())
        return rows
