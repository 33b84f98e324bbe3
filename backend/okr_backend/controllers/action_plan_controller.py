"""
Action plan and weekly report controllers.
"""

from typing import List, Optional, Union
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from okr_backend.controllers.base_controller import BaseController
from okr_backend.core.security import Identity
from okr_backend.schemas.action_plan import ActionPlanCreate, ActionPlanResponse, ActionPlanUpdate
from okr_backend.schemas.common import DataResponse, PageResponse, SuccessResponse
from okr_backend.schemas.goal import GoalWithActionPlansResponse
from okr_backend.schemas.weekly_report import WeeklyReportCreate, WeeklyReportResponse, WeeklyReportUpdate
from okr_backend.services.action_plan_service import ActionPlanService
from okr_backend.services.weekly_report_service import WeeklyReportService
from okr_backend.utils.dates import clamp_page, parse_year

WEEKLY_REPORTS_DEFAULT_LIMIT = 20
WEEKLY_REPORTS_MAX_LIMIT = 100


class ActionPlanController(BaseController):
    """Controller for action plan operations."""

    def __init__(self, session: AsyncSession):
        self.action_plan_service = ActionPlanService(session)

    async def list_by_year(
        self,
        identity: Identity,
        year: Union[None, str, int],
    ) -> DataResponse[List[GoalWithActionPlansResponse]]:
        """Caller's goals of a year with nested plans."""
        return DataResponse(data=await self.action_plan_service.list_by_year(identity, parse_year(year)))

    async def create_plan(
        self,
        identity: Identity,
        goal_id: UUID,
        plan_data: ActionPlanCreate,
    ) -> DataResponse[ActionPlanResponse]:
        return DataResponse(data=await self.action_plan_service.create_plan(identity, goal_id, plan_data))

    async def update_plan(
        self,
        identity: Identity,
        plan_id: UUID,
        plan_data: ActionPlanUpdate,
    ) -> DataResponse[ActionPlanResponse]:
        return DataResponse(data=await self.action_plan_service.update_plan(identity, plan_id, plan_data))

    async def delete_plan(self, identity: Identity, plan_id: UUID) -> SuccessResponse:
        await self.action_plan_service.delete_plan(identity, plan_id)
        return SuccessResponse()

    async def request_review(self, identity: Identity, plan_id: UUID) -> DataResponse[ActionPlanResponse]:
        return DataResponse(data=await self.action_plan_service.request_review(identity, plan_id))

    async def cancel_review(self, identity: Identity, plan_id: UUID) -> DataResponse[ActionPlanResponse]:
        return DataResponse(data=await self.action_plan_service.cancel_review(identity, plan_id))


class WeeklyReportController(BaseController):
    """Controller for weekly report operations."""

    def __init__(self, session: AsyncSession):
        self.weekly_report_service = WeeklyReportService(session)

    async def list_reports(
        self,
        identity: Identity,
        plan_id: UUID,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> PageResponse[WeeklyReportResponse]:
        limit, offset = clamp_page(limit, offset, WEEKLY_REPORTS_DEFAULT_LIMIT, WEEKLY_REPORTS_MAX_LIMIT)
        data, page = await self.weekly_report_service.list_reports(identity, plan_id, limit=limit, offset=offset)
        return PageResponse(data=data, page=page)

    async def create_report(
        self,
        identity: Identity,
        plan_id: UUID,
        report_data: WeeklyReportCreate,
    ) -> DataResponse[WeeklyReportResponse]:
        return DataResponse(data=await self.weekly_report_service.create_report(identity, plan_id, report_data))

    async def update_report(
        self,
        identity: Identity,
        report_id: UUID,
        report_data: WeeklyReportUpdate,
    ) -> DataResponse[WeeklyReportResponse]:
        return DataResponse(data=await self.weekly_report_service.update_report(identity, report_id, report_data))

    async def delete_report(self, identity: Identity, report_id: UUID) -> SuccessResponse:
        await self.weekly_report_service.delete_report(identity, report_id)
        return SuccessResponse()
