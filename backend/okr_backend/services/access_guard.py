"""
Access control guard.

Decides whether a caller may act on a goal, action plan or weekly report. Members must
own the goal (walking report -> plan -> goal); leaders and managers pass ownership
checks, and leaders can additionally be held to their own team.
"""

from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from okr_backend.core.logging import get_logger
from okr_backend.core.security import Identity
from okr_backend.db.repositories.action_plan_repository import ActionPlanRepository
from okr_backend.db.repositories.goal_repository import GoalRepository
from okr_backend.db.repositories.user_repository import UserRepository
from okr_backend.db.repositories.weekly_report_repository import WeeklyReportRepository
from okr_backend.models.goal import Goal

logger = get_logger(__name__)


@dataclass(frozen=True)
class AccessResult:
    """Outcome of an access check; `resource` is the loaded row when allowed."""
    allowed: bool
    resource: Any = None
    status_code: int = 200
    message: str = ""

    @classmethod
    def granted(cls, resource: Any) -> "AccessResult":
        return cls(allowed=True, resource=resource)

    @classmethod
    def denied(cls, status_code: int, message: str) -> "AccessResult":
        return cls(allowed=False, status_code=status_code, message=message)


class AccessGuard:
    """Read-only ownership and team scope checks."""

    def __init__(self, session: AsyncSession):
        self.goal_repo = GoalRepository(session)
        self.plan_repo = ActionPlanRepository(session)
        self.report_repo = WeeklyReportRepository(session)
        self.user_repo = UserRepository(session)

    async def can_access_goal(
        self,
        identity: Identity,
        goal_id: UUID,
        owner_only: bool = False,
        enforce_team_scope: bool = False,
    ) -> AccessResult:
        """
        Check access to a goal.

        Args:
            identity: Caller
            goal_id: Goal to check
            owner_only: Refuse privileged callers that do not own the goal
            enforce_team_scope: Hold leaders to goals owned by members of their team

        Returns:
            AccessResult carrying the Goal when allowed
        """
        goal = await self.goal_repo.get(goal_id)
        if goal is None:
            return AccessResult.denied(404, "Goal not found")
        return await self._check_goal(identity, goal, goal, owner_only, enforce_team_scope)

    async def can_access_action_plan(
        self,
        identity: Identity,
        action_plan_id: UUID,
        owner_only: bool = False,
        enforce_team_scope: bool = False,
    ) -> AccessResult:
        """Check access to an action plan through its goal."""
        plan = await self.plan_repo.get_with_goal(action_plan_id)
        if plan is None:
            return AccessResult.denied(404, "Action plan not found")
        if plan.goal is None:
            return AccessResult.denied(404, "Goal not found")
        return await self._check_goal(identity, plan.goal, plan, owner_only, enforce_team_scope)

    async def can_access_weekly_report(
        self,
        identity: Identity,
        weekly_report_id: UUID,
    ) -> AccessResult:
        """Check access to a weekly report through its plan and goal."""
        report = await self.report_repo.get_with_plan(weekly_report_id)
        if report is None:
            return AccessResult.denied(404, "Weekly report not found")
        plan = report.action_plan
        if plan is None:
            return AccessResult.denied(404, "Action plan not found")
        if plan.goal is None:
            return AccessResult.denied(404, "Goal not found")
        return await self._check_goal(identity, plan.goal, report, False, False)

    async def _check_goal(
        self,
        identity: Identity,
        goal: Goal,
        resource: Any,
        owner_only: bool,
        enforce_team_scope: bool,
    ) -> AccessResult:
        if goal.user_id == identity.user_id:
            return AccessResult.granted(resource)

        if not identity.is_privileged or owner_only:
            return AccessResult.denied(403, "Forbidden")

        if enforce_team_scope and identity.is_leader and not identity.is_manager:
            scope = await self.leader_team_denial(identity, goal.user_id)
            if scope is not None:
                return scope

        return AccessResult.granted(resource)

    async def leader_team_denial(self, identity: Identity, owner_id: Optional[UUID]) -> Optional[AccessResult]:
        """Return a denial when `owner_id` is outside the leader's team, else None."""
        leader = await self.user_repo.get(identity.user_id)
        if leader is None:
            return AccessResult.denied(403, "Leader team scope not found")
        if leader.team_id is None:
            return AccessResult.denied(403, "Leader is not assigned to a team")
        if owner_id is None or not await self.user_repo.is_member_of_team(owner_id, leader.team_id):
            logger.info(
                "Team scope violation",
                extra={"leader_id": str(identity.user_id), "owner_id": str(owner_id)},
            )
            return AccessResult.denied(403, "Forbidden (team scope)")
        return None
