"""
Manager API endpoints.
Organisation-wide, read-only dashboards.
"""

from typing import List, Optional
from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from okr_backend.api.v1.middleware import require_manager
from okr_backend.api.v1.router_config import create_protected_router
from okr_backend.controllers.manager_controller import ManagerController
from okr_backend.db.session import get_db
from okr_backend.schemas.analytics import MemberInsights, OrgOverview, TeamMembersSummary, TeamMembersTrends
from okr_backend.schemas.common import DataResponse, PageResponse
from okr_backend.schemas.user import TeamResponse, UserResponse

router = create_protected_router(dependencies=[Depends(require_manager)])


@router.get("/teams", response_model=DataResponse[List[TeamResponse]])
async def list_teams(
    db: AsyncSession = Depends(get_db),
) -> DataResponse[List[TeamResponse]]:
    controller = ManagerController(db)
    return await controller.list_teams()


@router.get("/users", response_model=PageResponse[UserResponse])
async def list_users(
    team_id: Optional[UUID] = Query(None),
    limit: Optional[int] = Query(None),
    offset: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> PageResponse[UserResponse]:
    controller = ManagerController(db)
    return await controller.list_users(team_id=team_id, limit=limit, offset=offset)


@router.get("/member-insights", response_model=DataResponse[MemberInsights])
async def member_insights(
    year: Optional[str] = Query(None),
    user_id: Optional[UUID] = Query(None),
    weeks: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[MemberInsights]:
    controller = ManagerController(db)
    return await controller.member_insights(year, user_id, weeks=weeks)


@router.get("/overview", response_model=DataResponse[OrgOverview])
async def overview(
    year: Optional[str] = Query(None),
    team_id: Optional[UUID] = Query(None),
    weeks: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[OrgOverview]:
    """Organisation rollup, per-team rollups and the weekly active-member trend."""
    controller = ManagerController(db)
    return await controller.overview(year, team_id=team_id, weeks=weeks)


@router.get("/team-members/summary", response_model=DataResponse[TeamMembersSummary])
async def team_members_summary(
    year: Optional[str] = Query(None),
    team_id: Optional[UUID] = Query(None),
    weeks: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[TeamMembersSummary]:
    controller = ManagerController(db)
    return await controller.team_members_summary(year, team_id, weeks=weeks)


@router.get("/team-members/trends", response_model=DataResponse[TeamMembersTrends])
async def team_members_trends(
    year: Optional[str] = Query(None),
    team_id: Optional[UUID] = Query(None),
    weeks: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[TeamMembersTrends]:
    controller = ManagerController(db)
    return await controller.team_members_trends(year, team_id, weeks=weeks)
