"""
Action plan service.

Members edit their own plans through the review state machine, including the
deadline change quota; leaders and managers write plan fields directly.
"""

from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from okr_backend.core.exceptions import AuthorizationError
from okr_backend.core.logging import get_logger
from okr_backend.core.security import Identity
from okr_backend.db.repositories.action_plan_repository import ActionPlanRepository
from okr_backend.db.repositories.goal_repository import GoalRepository
from okr_backend.models.action_plan import ActionPlan
from okr_backend.schemas.action_plan import ActionPlanCreate, ActionPlanResponse, ActionPlanUpdate
from okr_backend.schemas.goal import GoalWithActionPlansResponse, ReviewDecisionRequest
from okr_backend.services import review_state_machine as rsm
from okr_backend.services.access_guard import AccessGuard
from okr_backend.services.base_service import BaseService, drop_required_nulls
from okr_backend.services.user_service import UserService
from okr_backend.utils.dates import now_local

logger = get_logger(__name__)

REQUIRED_PLAN_FIELDS = ("title", "status")


class ActionPlanService(BaseService):
    """Service for action plan operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.plan_repo = ActionPlanRepository(session)
        self.goal_repo = GoalRepository(session)
        self.guard = AccessGuard(session)
        self.user_service = UserService(session)

    async def list_by_year(self, identity: Identity, year: int) -> List[GoalWithActionPlansResponse]:
        """Caller's goals of one year with their action plans nested."""
        goals = await self.goal_repo.list_with_action_plans(identity.user_id, year)
        return [GoalWithActionPlansResponse.model_validate(goal) for goal in goals]

    async def create_plan(
        self,
        identity: Identity,
        goal_id: UUID,
        plan_data: ActionPlanCreate,
    ) -> ActionPlanResponse:
        """Add a plan under a goal; members only while the goal is unlocked and not started."""
        access = await self.guard.can_access_goal(identity, goal_id)
        self.ensure(access)
        if not identity.is_privileged:
            self.ensure(rsm.action_plan_creation(rsm.GoalSnapshot.of(access.resource)))

        plan = await self.plan_repo.create(goal_id=goal_id, **plan_data.model_dump())
        logger.info("Action plan created", extra={"action_plan_id": str(plan.id), "goal_id": str(goal_id)})
        return ActionPlanResponse.model_validate(plan)

    async def update_plan(
        self,
        identity: Identity,
        plan_id: UUID,
        plan_data: ActionPlanUpdate,
    ) -> ActionPlanResponse:
        access = await self.guard.can_access_action_plan(identity, plan_id)
        self.ensure(access)
        plan: ActionPlan = access.resource

        changes = drop_required_nulls(plan_data.model_dump(exclude_unset=True), REQUIRED_PLAN_FIELDS)
        if identity.is_privileged:
            values = changes
        else:
            outcome = rsm.member_plan_edit(rsm.PlanSnapshot.of(plan), changes)
            self.ensure(outcome)
            values = outcome.values
            if outcome.intent == rsm.DEADLINE_CHANGE_REQUEST:
                logger.info(
                    "Deadline change requested",
                    extra={
                        "action_plan_id": str(plan.id),
                        "requested": str(values["request_deadline_date"]),
                        "change_count": values["deadline_change_count"],
                    },
                )

        updated = await self.plan_repo.update(plan.id, **values)
        return ActionPlanResponse.model_validate(updated)

    async def delete_plan(self, identity: Identity, plan_id: UUID) -> None:
        access = await self.guard.can_access_action_plan(identity, plan_id)
        self.ensure(access)
        if not identity.is_privileged:
            self.ensure(rsm.plan_delete(rsm.PlanSnapshot.of(access.resource)))
        await self.plan_repo.delete(plan_id)
        logger.info("Action plan deleted", extra={"action_plan_id": str(plan_id)})

    async def request_review(self, identity: Identity, plan_id: UUID) -> ActionPlanResponse:
        plan = await self._member_plan(identity, plan_id)
        outcome = rsm.request_plan_review(rsm.PlanSnapshot.of(plan))
        self.ensure(outcome)
        updated = await self.plan_repo.update(plan.id, **outcome.values)
        logger.info("Action plan review requested", extra={"action_plan_id": str(plan.id)})
        return ActionPlanResponse.model_validate(updated)

    async def cancel_review(self, identity: Identity, plan_id: UUID) -> ActionPlanResponse:
        plan = await self._member_plan(identity, plan_id)
        outcome = rsm.cancel_plan_review(rsm.PlanSnapshot.of(plan))
        self.ensure(outcome)
        updated = await self.plan_repo.update(plan.id, **outcome.values)
        logger.info("Action plan review cancelled", extra={"action_plan_id": str(plan.id)})
        return ActionPlanResponse.model_validate(updated)

    async def leader_review_plan(
        self,
        identity: Identity,
        plan_id: UUID,
        decision: ReviewDecisionRequest,
    ) -> ActionPlanResponse:
        """Record a leader decision; approval applies a pending deadline request."""
        access = await self.guard.can_access_action_plan(identity, plan_id, enforce_team_scope=True)
        self.ensure(access)
        plan: ActionPlan = access.resource

        reviewer = await self.user_service.reviewer(identity)
        transition = rsm.leader_plan_decision(
            rsm.PlanSnapshot.of(plan),
            decision.status,
            decision.comment,
            reviewer,
            now_local(),
        )
        updated = await self.persist_transition(self.plan_repo, plan.id, transition)
        logger.info(
            "Action plan reviewed",
            extra={
                "action_plan_id": str(plan.id),
                "review_status": transition.values["review_status"],
                "reviewer_id": str(identity.user_id),
            },
        )
        return ActionPlanResponse.model_validate(updated)

    async def _member_plan(self, identity: Identity, plan_id: UUID) -> ActionPlan:
        """Review requests are a member action on an owned plan."""
        if identity.is_privileged:
            raise AuthorizationError("Forbidden")
        access = await self.guard.can_access_action_plan(identity, plan_id, owner_only=True)
        self.ensure(access)
        return access.resource
