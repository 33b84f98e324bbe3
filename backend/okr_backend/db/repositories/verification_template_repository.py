"""
Verification template repository.
"""

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from okr_backend.db.repositories.base_repository import BaseRepository
from okr_backend.models.verification import VerificationTemplate


class VerificationTemplateRepository(BaseRepository[VerificationTemplate]):
    """Repository for verification templates."""

    def __init__(self, session: AsyncSession):
        super().__init__(VerificationTemplate, session)

    async def list_templates(self) -> List[VerificationTemplate]:
        """All templates ordered by name."""
        result = await self.session.execute(
            select(VerificationTemplate).order_by(VerificationTemplate.name.asc())
        )
        return list(result.scalars().all())
