"""
Goal service for member and leader goal operations.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from okr_backend.core.logging import get_logger
from okr_backend.core.security import Identity
from okr_backend.db.repositories.action_plan_repository import ActionPlanRepository
from okr_backend.db.repositories.goal_repository import GoalRepository
from okr_backend.db.repositories.progress_history_repository import ProgressHistoryRepository
from okr_backend.db.repositories.verification_request_repository import VerificationRequestRepository
from okr_backend.models.goal import Goal, GoalStatus
from okr_backend.models.verification import VerificationRequest
from okr_backend.schemas.action_plan import ActionPlanResponse
from okr_backend.schemas.common import PageInfo
from okr_backend.schemas.goal import (
    GoalCreate,
    GoalResponse,
    GoalWithVerificationResponse,
    LeaderGoalResponse,
    LeaderGoalUpdate,
    MemberGoalUpdate,
    ReviewDecisionRequest,
    VerificationSummary,
)
from okr_backend.services import review_state_machine as rsm
from okr_backend.services.access_guard import AccessGuard
from okr_backend.services.base_service import BaseService, drop_required_nulls
from okr_backend.services.user_service import LeaderScope, UserService
from okr_backend.utils.dates import now_local

logger = get_logger(__name__)

# Columns that may not be written as NULL; an explicit null in a payload is ignored.
REQUIRED_GOAL_FIELDS = ("year", "name", "progress", "status")


def verification_summary(request: Optional[VerificationRequest]) -> VerificationSummary:
    """Latest verification request of a goal, or the NotRequested placeholder."""
    if request is None:
        return VerificationSummary()
    review = request.review
    return VerificationSummary(
        verification_request_id=request.id,
        verification_status=request.status,
        verification_requested_at=request.created_at,
        verification_result=review.result if review else None,
        verification_reviewed_at=review.reviewed_at if review else None,
    )


class GoalService(BaseService):
    """Service for goal operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.goal_repo = GoalRepository(session)
        self.plan_repo = ActionPlanRepository(session)
        self.history_repo = ProgressHistoryRepository(session)
        self.verification_repo = VerificationRequestRepository(session)
        self.guard = AccessGuard(session)
        self.user_service = UserService(session)

    async def create_goal(self, identity: Identity, goal_data: GoalCreate) -> GoalResponse:
        """Create a goal owned by the caller and record its first progress snapshot."""
        values = drop_required_nulls(goal_data.model_dump(), REQUIRED_GOAL_FIELDS)
        values = rsm.normalize_progress(values)
        values.setdefault("progress", 0)
        values.setdefault("status", GoalStatus.NOT_STARTED.value)

        goal = await self.goal_repo.create(user_id=identity.user_id, **values)
        await self.history_repo.append(goal.id, goal.progress)
        logger.info("Goal created", extra={"goal_id": str(goal.id), "user_id": str(identity.user_id)})
        return GoalResponse.model_validate(goal)

    async def list_goals(self, identity: Identity) -> List[GoalWithVerificationResponse]:
        """Caller's goals, each annotated with its latest verification request."""
        goals = await self.goal_repo.list_by_user(identity.user_id)
        summaries = await self.verification_summaries([goal.id for goal in goals])
        return [
            GoalWithVerificationResponse(
                **GoalResponse.model_validate(goal).model_dump(),
                **summaries[goal.id].model_dump(),
            )
            for goal in goals
        ]

    async def verification_summaries(self, goal_ids: List[UUID]) -> Dict[UUID, VerificationSummary]:
        latest = await self.verification_repo.latest_by_goal_ids(goal_ids)
        return {goal_id: verification_summary(latest.get(goal_id)) for goal_id in goal_ids}

    async def update_goal(self, identity: Identity, goal_id: UUID, goal_data: MemberGoalUpdate) -> GoalResponse:
        """Owner edit, subject to the review lock."""
        access = await self.guard.can_access_goal(identity, goal_id, owner_only=True)
        self.ensure(access)
        goal: Goal = access.resource

        unknown_keys = set(goal_data.model_extra or {})
        changes = {
            key: value
            for key, value in goal_data.model_dump(exclude_unset=True).items()
            if key not in unknown_keys
        }
        changes = drop_required_nulls(changes, REQUIRED_GOAL_FIELDS)
        outcome = rsm.member_goal_edit(rsm.GoalSnapshot.of(goal), changes, unknown_keys)
        self.ensure(outcome)
        return GoalResponse.model_validate(await self._apply(goal, outcome.values))

    async def delete_goal(self, identity: Identity, goal_id: UUID) -> None:
        access = await self.guard.can_access_goal(identity, goal_id, owner_only=True)
        self.ensure(access)
        self.ensure(rsm.goal_delete(rsm.GoalSnapshot.of(access.resource)))
        await self.goal_repo.delete(goal_id)
        logger.info("Goal deleted", extra={"goal_id": str(goal_id)})

    async def request_review(self, identity: Identity, goal_id: UUID) -> GoalResponse:
        """Lock the goal as Pending; requires at least one action plan."""
        access = await self.guard.can_access_goal(identity, goal_id, owner_only=True)
        self.ensure(access)
        goal: Goal = access.resource

        has_plans = await self.plan_repo.has_any_for_goal(goal.id)
        outcome = rsm.request_goal_review(rsm.GoalSnapshot.of(goal), has_plans)
        self.ensure(outcome)
        updated = await self.goal_repo.update(goal.id, **outcome.values)
        logger.info("Goal review requested", extra={"goal_id": str(goal.id)})
        return GoalResponse.model_validate(updated)

    async def cancel_review(self, identity: Identity, goal_id: UUID) -> GoalResponse:
        access = await self.guard.can_access_goal(identity, goal_id, owner_only=True)
        self.ensure(access)
        goal: Goal = access.resource

        outcome = rsm.cancel_goal_review(rsm.GoalSnapshot.of(goal))
        self.ensure(outcome)
        updated = await self.goal_repo.update(goal.id, **outcome.values)
        logger.info("Goal review cancelled", extra={"goal_id": str(goal.id)})
        return GoalResponse.model_validate(updated)

    async def leader_update_goal(
        self,
        identity: Identity,
        goal_id: UUID,
        goal_data: LeaderGoalUpdate,
    ) -> GoalResponse:
        """Leader edit of a team member's goal; only progress is normalized."""
        access = await self.guard.can_access_goal(identity, goal_id, enforce_team_scope=True)
        self.ensure(access)
        changes = drop_required_nulls(goal_data.model_dump(exclude_unset=True), REQUIRED_GOAL_FIELDS)
        transition = rsm.leader_goal_edit(changes)
        return GoalResponse.model_validate(await self._apply(access.resource, transition.values))

    async def leader_review_goal(
        self,
        identity: Identity,
        goal_id: UUID,
        decision: ReviewDecisionRequest,
    ) -> GoalResponse:
        """Record a leader decision on a goal of the leader's team."""
        access = await self.guard.can_access_goal(identity, goal_id, enforce_team_scope=True)
        self.ensure(access)
        goal: Goal = access.resource

        reviewer = await self.user_service.reviewer(identity)
        transition = rsm.leader_goal_decision(
            rsm.GoalSnapshot.of(goal),
            decision.status,
            decision.comment,
            reviewer,
            now_local(),
        )
        updated = await self.persist_transition(self.goal_repo, goal.id, transition)
        logger.info(
            "Goal reviewed",
            extra={
                "goal_id": str(goal_id),
                "review_status": transition.values["review_status"],
                "reviewer_id": str(identity.user_id),
            },
        )
        return GoalResponse.model_validate(updated)

    async def list_team_goals(
        self,
        scope: LeaderScope,
        year: Optional[int] = None,
        user_id: Optional[UUID] = None,
        limit: int = 200,
        offset: int = 0,
    ) -> tuple:
        """Page of team goals with plans, owner and verification summary."""
        goals = await self.goal_repo.list_team_goals(
            scope.team_id, year=year, user_id=user_id, skip=offset, limit=limit
        )
        summaries = await self.verification_summaries([goal.id for goal in goals])

        data = []
        for goal in goals:
            owner = goal.user
            team = owner.team if owner else None
            data.append(LeaderGoalResponse(
                **GoalResponse.model_validate(goal).model_dump(),
                **summaries[goal.id].model_dump(),
                action_plans=[ActionPlanResponse.model_validate(plan) for plan in goal.action_plans],
                user_name=owner.name if owner else None,
                user_email=owner.email if owner else None,
                team_id=owner.team_id if owner else None,
                team=team.name if team else None,
            ))
        return data, PageInfo(limit=limit, offset=offset, returned=len(data))

    async def _apply(self, goal: Goal, values: Dict[str, Any]) -> Goal:
        """Write goal values and append a progress snapshot when progress changed."""
        previous_progress = goal.progress
        updated = await self.goal_repo.update(goal.id, **values)
        if "progress" in values and updated.progress != previous_progress:
            await self.history_repo.append(updated.id, updated.progress)
        return updated
