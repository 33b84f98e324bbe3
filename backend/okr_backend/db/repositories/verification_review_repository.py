"""
Verification review repository. One review per request.
"""

from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from okr_backend.db.repositories.base_repository import BaseRepository
from okr_backend.models.verification import VerificationReview
from okr_backend.utils.dates import now_local


class VerificationReviewRepository(BaseRepository[VerificationReview]):
    """Repository for verification reviews."""

    def __init__(self, session: AsyncSession):
        super().__init__(VerificationReview, session)

    async def get_by_request(self, request_id: UUID) -> Optional[VerificationReview]:
        result = await self.session.execute(
            select(VerificationReview)
            .where(VerificationReview.request_id == request_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def upsert_for_request(self, request_id: UUID, **values) -> VerificationReview:
        """Insert the review for a request, or overwrite the existing one."""
        existing = await self.get_by_request(request_id)
        if existing is None:
            return await self.create(request_id=request_id, reviewed_at=now_local(), **values)
        return await self.update(existing.id, reviewed_at=now_local(), **values)
