"""
Leader API endpoints.
All routes require the leader group and are confined to the leader's team.
"""

from typing import List, Optional
from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from okr_backend.api.v1.middleware import require_leader
from okr_backend.api.v1.router_config import create_protected_router
from okr_backend.controllers.leader_controller import LeaderController
from okr_backend.core.security import Identity
from okr_backend.db.session import get_db
from okr_backend.schemas.action_plan import ActionPlanResponse
from okr_backend.schemas.analytics import GoalsSummary, MemberInsights, WeeklyReportStatsResponse
from okr_backend.schemas.common import DataResponse, PageResponse
from okr_backend.schemas.goal import GoalResponse, LeaderGoalResponse, LeaderGoalUpdate, ReviewDecisionRequest
from okr_backend.schemas.user import TeamResponse, UserResponse

router = create_protected_router(dependencies=[Depends(require_leader)])


@router.get("/goals", response_model=PageResponse[LeaderGoalResponse])
async def list_team_goals(
    year: Optional[str] = Query(None),
    user_id: Optional[UUID] = Query(None),
    team_id: Optional[UUID] = Query(None),
    limit: Optional[int] = Query(None),
    offset: Optional[int] = Query(None),
    identity: Identity = Depends(require_leader),
    db: AsyncSession = Depends(get_db),
) -> PageResponse[LeaderGoalResponse]:
    """Goals of team members with nested action plans."""
    controller = LeaderController(db)
    return await controller.list_goals(identity, year=year, user_id=user_id, team_id=team_id, limit=limit, offset=offset)


@router.get("/goals/summary", response_model=DataResponse[GoalsSummary])
async def goals_summary(
    year: Optional[str] = Query(None),
    user_id: Optional[UUID] = Query(None),
    team_id: Optional[UUID] = Query(None),
    identity: Identity = Depends(require_leader),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[GoalsSummary]:
    controller = LeaderController(db)
    return await controller.goals_summary(identity, year, user_id=user_id, team_id=team_id)


@router.get("/users", response_model=PageResponse[UserResponse])
async def list_team_users(
    q: Optional[str] = Query(None),
    team_id: Optional[UUID] = Query(None),
    limit: Optional[int] = Query(None),
    offset: Optional[int] = Query(None),
    identity: Identity = Depends(require_leader),
    db: AsyncSession = Depends(get_db),
) -> PageResponse[UserResponse]:
    """Members of the leader's team, searchable by name or email."""
    controller = LeaderController(db)
    return await controller.list_users(identity, q=q, team_id=team_id, limit=limit, offset=offset)


@router.get("/teams", response_model=DataResponse[List[TeamResponse]])
async def list_teams(
    identity: Identity = Depends(require_leader),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[List[TeamResponse]]:
    controller = LeaderController(db)
    return await controller.list_teams(identity)


@router.get("/member-insights", response_model=DataResponse[MemberInsights])
async def member_insights(
    year: Optional[str] = Query(None),
    user_id: Optional[UUID] = Query(None),
    weeks: Optional[str] = Query(None),
    team_id: Optional[UUID] = Query(None),
    identity: Identity = Depends(require_leader),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[MemberInsights]:
    """Growth metrics for one team member."""
    controller = LeaderController(db)
    return await controller.member_insights(identity, year, user_id, weeks=weeks, team_id=team_id)


@router.get("/action-plans/weekly-report-stats", response_model=WeeklyReportStatsResponse)
async def weekly_report_stats(
    year: Optional[str] = Query(None),
    user_id: Optional[UUID] = Query(None),
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    team_id: Optional[UUID] = Query(None),
    identity: Identity = Depends(require_leader),
    db: AsyncSession = Depends(get_db),
) -> WeeklyReportStatsResponse:
    """Latest report date per reportable plan and whether it reported within the range."""
    controller = LeaderController(db)
    return await controller.weekly_report_stats(
        identity, year, date_from, date_to, user_id=user_id, team_id=team_id
    )


@router.put("/goals/{goal_id}", response_model=DataResponse[GoalResponse])
async def update_goal(
    goal_id: UUID,
    goal_data: LeaderGoalUpdate,
    identity: Identity = Depends(require_leader),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[GoalResponse]:
    controller = LeaderController(db)
    return await controller.update_goal(identity, goal_id, goal_data)


@router.put("/goals/{goal_id}/review", response_model=DataResponse[GoalResponse])
async def review_goal(
    goal_id: UUID,
    decision: ReviewDecisionRequest,
    identity: Identity = Depends(require_leader),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[GoalResponse]:
    """Approve, reject or cancel a goal review."""
    controller = LeaderController(db)
    return await controller.review_goal(identity, goal_id, decision)


@router.put("/action-plans/{plan_id}/review", response_model=DataResponse[ActionPlanResponse])
async def review_action_plan(
    plan_id: UUID,
    decision: ReviewDecisionRequest,
    identity: Identity = Depends(require_leader),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[ActionPlanResponse]:
    """Decide on an action plan review, including any pending deadline change."""
    controller = LeaderController(db)
    return await controller.review_action_plan(identity, plan_id, decision)
