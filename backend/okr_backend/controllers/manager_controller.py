"""
Manager controller.
Read-only, organisation-wide views.
"""

from typing import Any, List, Optional, Union
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from okr_backend.controllers.base_controller import BaseController
from okr_backend.controllers.leader_controller import require_user_id
from okr_backend.core.exceptions import ValidationError
from okr_backend.schemas.analytics import MemberInsights, OrgOverview, TeamMembersSummary, TeamMembersTrends
from okr_backend.schemas.common import DataResponse, PageResponse
from okr_backend.schemas.user import TeamResponse, UserResponse
from okr_backend.services.analytics_service import AnalyticsService
from okr_backend.services.user_service import UserService
from okr_backend.utils.dates import clamp_page, parse_year

USERS_DEFAULT_LIMIT = 500
USERS_MAX_LIMIT = 1000


def require_team_id(team_id: Optional[UUID]) -> UUID:
    if team_id is None:
        raise ValidationError('Query param "team_id" is required')
    return team_id


class ManagerController(BaseController):
    """Controller for the manager dashboard."""

    def __init__(self, session: AsyncSession):
        self.user_service = UserService(session)
        self.analytics_service = AnalyticsService(session)

    async def list_teams(self) -> DataResponse[List[TeamResponse]]:
        return DataResponse(data=await self.user_service.list_teams())

    async def list_users(
        self,
        team_id: Optional[UUID] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> PageResponse[UserResponse]:
        limit, offset = clamp_page(limit, offset, USERS_DEFAULT_LIMIT, USERS_MAX_LIMIT)
        data, page = await self.user_service.list_users(team_id, limit=limit, offset=offset)
        return PageResponse(data=data, page=page)

    async def member_insights(
        self,
        year: Union[None, str, int],
        user_id: Optional[UUID],
        weeks: Any = None,
    ) -> DataResponse[MemberInsights]:
        parsed_year = parse_year(year)
        member_id = require_user_id(user_id)
        return DataResponse(data=await self.analytics_service.member_insights(parsed_year, member_id, weeks))

    async def overview(
        self,
        year: Union[None, str, int],
        team_id: Optional[UUID] = None,
        weeks: Any = None,
    ) -> DataResponse[OrgOverview]:
        parsed_year = parse_year(year)
        return DataResponse(data=await self.analytics_service.overview(parsed_year, team_id, weeks))

    async def team_members_summary(
        self,
        year: Union[None, str, int],
        team_id: Optional[UUID],
        weeks: Any = None,
    ) -> DataResponse[TeamMembersSummary]:
        parsed_year = parse_year(year)
        team = require_team_id(team_id)
        return DataResponse(data=await self.analytics_service.team_members_summary(parsed_year, team, weeks))

    async def team_members_trends(
        self,
        year: Union[None, str, int],
        team_id: Optional[UUID],
        weeks: Any = None,
    ) -> DataResponse[TeamMembersTrends]:
        parsed_year = parse_year(year)
        team = require_team_id(team_id)
        return DataResponse(data=await self.analytics_service.team_members_trends(parsed_year, team, weeks))
