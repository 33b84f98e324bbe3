"""
Verification controller.
"""

from typing import List, Optional, Union
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from okr_backend.controllers.base_controller import BaseController
from okr_backend.core.security import Identity
from okr_backend.schemas.common import DataResponse, PageResponse
from okr_backend.schemas.verification import (
    VerificationRequestCreate,
    VerificationRequestResponse,
    VerificationReviewCreate,
    VerificationReviewResult,
    VerificationTemplateCreate,
    VerificationTemplateResponse,
)
from okr_backend.services.verification_service import VerificationService
from okr_backend.utils.dates import clamp_page, parse_optional_year

REQUESTS_DEFAULT_LIMIT = 50
REQUESTS_MAX_LIMIT = 200


class VerificationController(BaseController):
    """Controller for verification templates, requests and reviews."""

    def __init__(self, session: AsyncSession):
        self.verification_service = VerificationService(session)

    async def list_templates(self) -> DataResponse[List[VerificationTemplateResponse]]:
        return DataResponse(data=await self.verification_service.list_templates())

    async def create_template(
        self,
        identity: Identity,
        template_data: VerificationTemplateCreate,
    ) -> DataResponse[VerificationTemplateResponse]:
        return DataResponse(data=await self.verification_service.create_template(identity, template_data))

    async def create_request(
        self,
        identity: Identity,
        request_data: VerificationRequestCreate,
    ) -> DataResponse[VerificationRequestResponse]:
        return DataResponse(data=await self.verification_service.create_request(identity, request_data))

    async def list_requests(
        self,
        identity: Identity,
        status: Optional[str] = None,
        year: Union[None, str, int] = None,
        user_id: Optional[UUID] = None,
        team_id: Optional[UUID] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> PageResponse[VerificationRequestResponse]:
        limit, offset = clamp_page(limit, offset, REQUESTS_DEFAULT_LIMIT, REQUESTS_MAX_LIMIT)
        data, page = await self.verification_service.list_requests(
            identity,
            status=status,
            year=parse_optional_year(year),
            user_id=user_id,
            team_id=team_id,
            limit=limit,
            offset=offset,
        )
        return PageResponse(data=data, page=page)

    async def get_request(self, identity: Identity, request_id: UUID) -> DataResponse[VerificationRequestResponse]:
        return DataResponse(data=await self.verification_service.get_request(identity, request_id))

    async def review_request(
        self,
        identity: Identity,
        request_id: UUID,
        review_data: VerificationReviewCreate,
    ) -> DataResponse[VerificationReviewResult]:
        return DataResponse(data=await self.verification_service.review_request(identity, request_id, review_data))
