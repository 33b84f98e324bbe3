"""
Action plan and weekly report API endpoints.
"""

from typing import List, Optional
from fastapi import Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from okr_backend.api.v1.middleware import get_current_identity
from okr_backend.api.v1.router_config import create_protected_router
from okr_backend.controllers.action_plan_controller import ActionPlanController, WeeklyReportController
from okr_backend.core.security import Identity
from okr_backend.db.session import get_db
from okr_backend.schemas.action_plan import ActionPlanCreate, ActionPlanResponse, ActionPlanUpdate
from okr_backend.schemas.common import DataResponse, PageResponse, SuccessResponse
from okr_backend.schemas.goal import GoalWithActionPlansResponse
from okr_backend.schemas.weekly_report import WeeklyReportCreate, WeeklyReportResponse, WeeklyReportUpdate

router = create_protected_router()


@router.get("/action-plans", response_model=DataResponse[List[GoalWithActionPlansResponse]])
async def list_action_plans(
    year: Optional[str] = Query(None),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[List[GoalWithActionPlansResponse]]:
    """The caller's goals of a year with their action plans."""
    controller = ActionPlanController(db)
    return await controller.list_by_year(identity, year)


@router.post(
    "/goals/{goal_id}/action-plans",
    response_model=DataResponse[ActionPlanResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_action_plan(
    goal_id: UUID,
    plan_data: ActionPlanCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[ActionPlanResponse]:
    controller = ActionPlanController(db)
    return await controller.create_plan(identity, goal_id, plan_data)


@router.put("/action-plans/{plan_id}", response_model=DataResponse[ActionPlanResponse])
async def update_action_plan(
    plan_id: UUID,
    plan_data: ActionPlanUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[ActionPlanResponse]:
    """Update a plan; a member's new end_date becomes a deadline change request."""
    controller = ActionPlanController(db)
    return await controller.update_plan(identity, plan_id, plan_data)


@router.delete("/action-plans/{plan_id}", response_model=SuccessResponse)
async def delete_action_plan(
    plan_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    controller = ActionPlanController(db)
    return await controller.delete_plan(identity, plan_id)


@router.post("/action-plans/{plan_id}/request-review", response_model=DataResponse[ActionPlanResponse])
async def request_action_plan_review(
    plan_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[ActionPlanResponse]:
    controller = ActionPlanController(db)
    return await controller.request_review(identity, plan_id)


@router.post("/action-plans/{plan_id}/cancel-review", response_model=DataResponse[ActionPlanResponse])
async def cancel_action_plan_review(
    plan_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[ActionPlanResponse]:
    controller = ActionPlanController(db)
    return await controller.cancel_review(identity, plan_id)


@router.get("/action-plans/{plan_id}/weekly-reports", response_model=PageResponse[WeeklyReportResponse])
async def list_weekly_reports(
    plan_id: UUID,
    limit: Optional[int] = Query(None),
    offset: Optional[int] = Query(None),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> PageResponse[WeeklyReportResponse]:
    """Reports of a plan, newest first."""
    controller = WeeklyReportController(db)
    return await controller.list_reports(identity, plan_id, limit=limit, offset=offset)


@router.post(
    "/action-plans/{plan_id}/weekly-reports",
    response_model=DataResponse[WeeklyReportResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_weekly_report(
    plan_id: UUID,
    report_data: WeeklyReportCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[WeeklyReportResponse]:
    controller = WeeklyReportController(db)
    return await controller.create_report(identity, plan_id, report_data)


@router.put("/weekly-reports/{report_id}", response_model=DataResponse[WeeklyReportResponse])
async def update_weekly_report(
    report_id: UUID,
    report_data: WeeklyReportUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[WeeklyReportResponse]:
    controller = WeeklyReportController(db)
    return await controller.update_report(identity, report_id, report_data)


@router.delete("/weekly-reports/{report_id}", response_model=SuccessResponse)
async def delete_weekly_report(
    report_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    controller = WeeklyReportController(db)
    return await controller.delete_report(identity, report_id)
