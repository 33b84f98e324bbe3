"""
Verification API endpoints.
"""

from typing import List, Optional
from fastapi import Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from okr_backend.api.v1.middleware import get_current_identity, require_leader
from okr_backend.api.v1.router_config import create_protected_router
from okr_backend.controllers.verification_controller import VerificationController
from okr_backend.core.security import Identity
from okr_backend.db.session import get_db
from okr_backend.schemas.common import DataResponse, PageResponse
from okr_backend.schemas.verification import (
    VerificationRequestCreate,
    VerificationRequestResponse,
    VerificationReviewCreate,
    VerificationReviewResult,
    VerificationTemplateCreate,
    VerificationTemplateResponse,
)

router = create_protected_router()


@router.get("/verification-templates", response_model=DataResponse[List[VerificationTemplateResponse]])
async def list_templates(
    db: AsyncSession = Depends(get_db),
) -> DataResponse[List[VerificationTemplateResponse]]:
    controller = VerificationController(db)
    return await controller.list_templates()


@router.post(
    "/verification-templates",
    response_model=DataResponse[VerificationTemplateResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_template(
    template_data: VerificationTemplateCreate,
    identity: Identity = Depends(require_leader),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[VerificationTemplateResponse]:
    controller = VerificationController(db)
    return await controller.create_template(identity, template_data)


@router.post(
    "/verification-requests",
    response_model=DataResponse[VerificationRequestResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_request(
    request_data: VerificationRequestCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[VerificationRequestResponse]:
    """Raise a verification request on an owned goal."""
    controller = VerificationController(db)
    return await controller.create_request(identity, request_data)


@router.get("/verification-requests", response_model=PageResponse[VerificationRequestResponse])
async def list_requests(
    status_filter: Optional[str] = Query(None, alias="status"),
    year: Optional[str] = Query(None),
    user_id: Optional[UUID] = Query(None),
    team_id: Optional[UUID] = Query(None),
    limit: Optional[int] = Query(None),
    offset: Optional[int] = Query(None),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> PageResponse[VerificationRequestResponse]:
    """Own requests, or the team queue for a leader."""
    controller = VerificationController(db)
    return await controller.list_requests(
        identity,
        status=status_filter,
        year=year,
        user_id=user_id,
        team_id=team_id,
        limit=limit,
        offset=offset,
    )


@router.get("/verification-requests/{request_id}", response_model=DataResponse[VerificationRequestResponse])
async def get_request(
    request_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[VerificationRequestResponse]:
    controller = VerificationController(db)
    return await controller.get_request(identity, request_id)


@router.post("/verification-requests/{request_id}/review", response_model=DataResponse[VerificationReviewResult])
async def review_request(
    request_id: UUID,
    review_data: VerificationReviewCreate,
    identity: Identity = Depends(require_leader),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[VerificationReviewResult]:
    """Grade a request from the leader's team."""
    controller = VerificationController(db)
    return await controller.review_request(identity, request_id, review_data)
