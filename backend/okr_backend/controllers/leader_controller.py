"""
Leader controller.
Every operation is confined to the team of the calling leader.
"""

from typing import Any, List, Optional, Union
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from okr_backend.controllers.base_controller import BaseController
from okr_backend.core.exceptions import ValidationError
from okr_backend.core.security import Identity
from okr_backend.schemas.action_plan import ActionPlanResponse
from okr_backend.schemas.analytics import GoalsSummary, MemberInsights, WeeklyReportStatsResponse
from okr_backend.schemas.common import DataResponse, PageResponse
from okr_backend.schemas.goal import GoalResponse, LeaderGoalResponse, LeaderGoalUpdate, ReviewDecisionRequest
from okr_backend.schemas.user import TeamResponse, UserResponse
from okr_backend.services.action_plan_service import ActionPlanService
from okr_backend.services.analytics_service import AnalyticsService
from okr_backend.services.goal_service import GoalService
from okr_backend.services.user_service import UserService
from okr_backend.utils.dates import clamp_page, parse_date_only, parse_optional_year, parse_year

GOALS_DEFAULT_LIMIT = 200
GOALS_MAX_LIMIT = 500
USERS_DEFAULT_LIMIT = 200
USERS_MAX_LIMIT = 500


def require_user_id(user_id: Optional[UUID]) -> UUID:
    if user_id is None:
        raise ValidationError('Query param "user_id" is required')
    return user_id


class LeaderController(BaseController):
    """Controller for the leader dashboard and review actions."""

    def __init__(self, session: AsyncSession):
        self.user_service = UserService(session)
        self.goal_service = GoalService(session)
        self.action_plan_service = ActionPlanService(session)
        self.analytics_service = AnalyticsService(session)

    async def list_goals(
        self,
        identity: Identity,
        year: Union[None, str, int] = None,
        user_id: Optional[UUID] = None,
        team_id: Optional[UUID] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> PageResponse[LeaderGoalResponse]:
        scope = await self.user_service.resolve_leader_scope(identity, team_id)
        limit, offset = clamp_page(limit, offset, GOALS_DEFAULT_LIMIT, GOALS_MAX_LIMIT)
        data, page = await self.goal_service.list_team_goals(
            scope, year=parse_optional_year(year), user_id=user_id, limit=limit, offset=offset
        )
        return PageResponse(data=data, page=page)

    async def goals_summary(
        self,
        identity: Identity,
        year: Union[None, str, int],
        user_id: Optional[UUID] = None,
        team_id: Optional[UUID] = None,
    ) -> DataResponse[GoalsSummary]:
        parsed_year = parse_year(year)
        scope = await self.user_service.resolve_leader_scope(identity, team_id)
        summary = await self.analytics_service.goals_summary(scope, parsed_year, user_id=user_id)
        return DataResponse(data=summary)

    async def list_users(
        self,
        identity: Identity,
        q: Optional[str] = None,
        team_id: Optional[UUID] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> PageResponse[UserResponse]:
        scope = await self.user_service.resolve_leader_scope(identity, team_id)
        limit, offset = clamp_page(limit, offset, USERS_DEFAULT_LIMIT, USERS_MAX_LIMIT)
        data, page = await self.user_service.list_users(scope.team_id, search=q, limit=limit, offset=offset)
        return PageResponse(data=data, page=page)

    async def list_teams(self, identity: Identity) -> DataResponse[List[TeamResponse]]:
        scope = await self.user_service.resolve_leader_scope(identity)
        return DataResponse(data=await self.user_service.list_teams(scope.team_id))

    async def member_insights(
        self,
        identity: Identity,
        year: Union[None, str, int],
        user_id: Optional[UUID],
        weeks: Any = None,
        team_id: Optional[UUID] = None,
    ) -> DataResponse[MemberInsights]:
        parsed_year = parse_year(year)
        member_id = require_user_id(user_id)
        scope = await self.user_service.resolve_leader_scope(identity, team_id)
        await self.user_service.ensure_in_scope(scope, member_id)
        return DataResponse(data=await self.analytics_service.member_insights(parsed_year, member_id, weeks))

    async def weekly_report_stats(
        self,
        identity: Identity,
        year: Union[None, str, int],
        date_from: Optional[str],
        date_to: Optional[str],
        user_id: Optional[UUID] = None,
        team_id: Optional[UUID] = None,
    ) -> WeeklyReportStatsResponse:
        """Report freshness for every plan that should be receiving weekly reports."""
        parsed_year = parse_year(year)
        start, end = parse_date_only(date_from), parse_date_only(date_to)
        if start is None or end is None:
            raise ValidationError('Query params "from" and "to" (YYYY-MM-DD) are required')

        scope = await self.user_service.resolve_leader_scope(identity, team_id)
        if user_id is not None:
            await self.user_service.ensure_in_scope(scope, user_id)
        stats = await self.analytics_service.weekly_report_stats(scope, parsed_year, start, end, user_id=user_id)
        return WeeklyReportStatsResponse.model_validate(stats)

    async def update_goal(
        self,
        identity: Identity,
        goal_id: UUID,
        goal_data: LeaderGoalUpdate,
    ) -> DataResponse[GoalResponse]:
        return DataResponse(data=await self.goal_service.leader_update_goal(identity, goal_id, goal_data))

    async def review_goal(
        self,
        identity: Identity,
        goal_id: UUID,
        decision: ReviewDecisionRequest,
    ) -> DataResponse[GoalResponse]:
        return DataResponse(data=await self.goal_service.leader_review_goal(identity, goal_id, decision))

    async def review_action_plan(
        self,
        identity: Identity,
        plan_id: UUID,
        decision: ReviewDecisionRequest,
    ) -> DataResponse[ActionPlanResponse]:
        return DataResponse(data=await self.action_plan_service.leader_review_plan(identity, plan_id, decision))
