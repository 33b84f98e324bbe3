"""
Verification service.

Verification is an evidence check graded by a leader, separate from the approval
review: members raise requests on their own goals and leaders of the requester's
team record one review per request.
"""

from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from okr_backend.core.exceptions import AuthorizationError, NotFoundError
from okr_backend.core.logging import get_logger
from okr_backend.core.security import Identity
from okr_backend.db.repositories.verification_request_repository import VerificationRequestRepository
from okr_backend.db.repositories.verification_review_repository import VerificationReviewRepository
from okr_backend.db.repositories.verification_template_repository import VerificationTemplateRepository
from okr_backend.models.verification import VerificationRequest, VerificationStatus
from okr_backend.schemas.common import PageInfo
from okr_backend.schemas.verification import (
    VerificationGoalInfo,
    VerificationRequestCreate,
    VerificationRequestResponse,
    VerificationReviewCreate,
    VerificationReviewResponse,
    VerificationReviewResult,
    VerificationTemplateCreate,
    VerificationTemplateResponse,
)
from okr_backend.services.access_guard import AccessGuard
from okr_backend.services.base_service import BaseService
from okr_backend.services.user_service import UserService

logger = get_logger(__name__)


def to_request_response(request: VerificationRequest) -> VerificationRequestResponse:
    """Flatten requester and team onto the request."""
    requester = request.requester
    team = requester.team if requester else None
    return VerificationRequestResponse(
        id=request.id,
        requester_id=request.requester_id,
        goal_id=request.goal_id,
        action_plan_id=request.action_plan_id,
        template_id=request.template_id,
        scope=request.scope,
        evidence_links=request.evidence_links or [],
        rubric_snapshot=request.rubric_snapshot or {},
        member_notes=request.member_notes,
        status=request.status,
        created_at=request.created_at,
        updated_at=request.updated_at,
        member_name=requester.name if requester else None,
        member_email=requester.email if requester else None,
        team_id=requester.team_id if requester else None,
        team_name=team.name if team else None,
        goal=VerificationGoalInfo.model_validate(request.goal) if request.goal else None,
        review=VerificationReviewResponse.model_validate(request.review) if request.review else None,
    )


class VerificationService(BaseService):
    """Service for verification templates, requests and reviews."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.template_repo = VerificationTemplateRepository(session)
        self.request_repo = VerificationRequestRepository(session)
        self.review_repo = VerificationReviewRepository(session)
        self.guard = AccessGuard(session)
        self.user_service = UserService(session)

    async def list_templates(self) -> List[VerificationTemplateResponse]:
        templates = await self.template_repo.list_templates()
        return [VerificationTemplateResponse.model_validate(t) for t in templates]

    async def create_template(
        self,
        identity: Identity,
        template_data: VerificationTemplateCreate,
    ) -> VerificationTemplateResponse:
        template = await self.template_repo.create(created_by=identity.user_id, **template_data.model_dump())
        logger.info("Verification template created", extra={"template_id": str(template.id)})
        return VerificationTemplateResponse.model_validate(template)

    async def create_request(
        self,
        identity: Identity,
        request_data: VerificationRequestCreate,
    ) -> VerificationRequestResponse:
        """Raise a verification request on a goal the caller owns."""
        self.ensure(await self.guard.can_access_goal(identity, request_data.goal_id, owner_only=True))

        created = await self.request_repo.create(
            requester_id=identity.user_id,
            status=VerificationStatus.PENDING.value,
            **request_data.model_dump(),
        )
        logger.info(
            "Verification requested",
            extra={"request_id": str(created.id), "goal_id": str(request_data.goal_id)},
        )
        return to_request_response(await self.request_repo.get_detail(created.id))

    async def list_requests(
        self,
        identity: Identity,
        status: Optional[str] = None,
        year: Optional[int] = None,
        user_id: Optional[UUID] = None,
        team_id: Optional[UUID] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[VerificationRequestResponse], PageInfo]:
        """Leaders see their team queue; everyone else sees their own requests."""
        if identity.is_leader:
            scope = await self.user_service.resolve_leader_scope(identity, team_id)
            requests = await self.request_repo.list_requests(
                requester_id=user_id,
                team_id=scope.team_id,
                status=status,
                year=year,
                skip=offset,
                limit=limit,
            )
        else:
            requests = await self.request_repo.list_requests(
                requester_id=identity.user_id,
                status=status,
                year=year,
                skip=offset,
                limit=limit,
            )
        data = [to_request_response(request) for request in requests]
        return data, PageInfo(limit=limit, offset=offset, returned=len(data))

    async def get_request(self, identity: Identity, request_id: UUID) -> VerificationRequestResponse:
        request = await self._visible_request(identity, request_id)
        return to_request_response(request)

    async def review_request(
        self,
        identity: Identity,
        request_id: UUID,
        review_data: VerificationReviewCreate,
    ) -> VerificationReviewResult:
        """Record (or overwrite) the leader's review and mark the request Reviewed."""
        request = await self.request_repo.get_detail(request_id)
        if request is None:
            raise NotFoundError("Not found")
        await self._ensure_team_leader(identity, request)

        review = await self.review_repo.upsert_for_request(
            request.id,
            leader_id=identity.user_id,
            **review_data.model_dump(),
        )
        await self.request_repo.update(request.id, status=VerificationStatus.REVIEWED.value)
        logger.info(
            "Verification reviewed",
            extra={"request_id": str(request.id), "result": review.result, "leader_id": str(identity.user_id)},
        )
        return VerificationReviewResult(review=VerificationReviewResponse.model_validate(review))

    async def _visible_request(self, identity: Identity, request_id: UUID) -> VerificationRequest:
        request = await self.request_repo.get_detail(request_id)
        if request is None:
            raise NotFoundError("Not found")
        if request.requester_id == identity.user_id:
            return request
        if not identity.is_leader:
            raise AuthorizationError("Forbidden")
        await self._ensure_team_leader(identity, request)
        return request

    async def _ensure_team_leader(self, identity: Identity, request: VerificationRequest) -> None:
        scope = await self.user_service.resolve_leader_scope(identity)
        requester = request.requester
        if requester is None or requester.team_id != scope.team_id:
            raise AuthorizationError("Forbidden (team scope)")
