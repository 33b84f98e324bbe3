"""
Weekly report service.
"""

from typing import List, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from okr_backend.core.logging import get_logger
from okr_backend.core.security import Identity
from okr_backend.db.repositories.weekly_report_repository import WeeklyReportRepository
from okr_backend.models.action_plan import ActionPlan
from okr_backend.schemas.common import PageInfo
from okr_backend.schemas.weekly_report import WeeklyReportCreate, WeeklyReportResponse, WeeklyReportUpdate
from okr_backend.services import review_state_machine as rsm
from okr_backend.services.access_guard import AccessGuard
from okr_backend.services.base_service import BaseService, drop_required_nulls

logger = get_logger(__name__)


class WeeklyReportService(BaseService):
    """Service for weekly report operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.report_repo = WeeklyReportRepository(session)
        self.guard = AccessGuard(session)

    async def list_reports(
        self,
        identity: Identity,
        plan_id: UUID,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[WeeklyReportResponse], PageInfo]:
        """Reports of a plan, newest first."""
        self.ensure(await self.guard.can_access_action_plan(identity, plan_id))
        reports = await self.report_repo.list_for_plan(plan_id, skip=offset, limit=limit)
        data = [WeeklyReportResponse.model_validate(report) for report in reports]
        return data, PageInfo(limit=limit, offset=offset, returned=len(data))

    async def create_report(
        self,
        identity: Identity,
        plan_id: UUID,
        report_data: WeeklyReportCreate,
    ) -> WeeklyReportResponse:
        """
        Add a report under a plan. The goal id is copied from the plan.

        Members may only report while the goal is In Progress and the plan is
        In Progress or Blocked.
        """
        access = await self.guard.can_access_action_plan(identity, plan_id)
        self.ensure(access)
        plan: ActionPlan = access.resource

        if not identity.is_leader:
            self.ensure(rsm.weekly_report_creation(plan.goal.status, plan.status))

        values = report_data.model_dump(exclude_unset=True)
        self.ensure(rsm.weekly_report_edit(values, identity.is_leader))

        report = await self.report_repo.create(action_plan_id=plan.id, goal_id=plan.goal_id, **values)
        logger.info(
            "Weekly report created",
            extra={"weekly_report_id": str(report.id), "action_plan_id": str(plan.id)},
        )
        return WeeklyReportResponse.model_validate(report)

    async def update_report(
        self,
        identity: Identity,
        report_id: UUID,
        report_data: WeeklyReportUpdate,
    ) -> WeeklyReportResponse:
        self.ensure(await self.guard.can_access_weekly_report(identity, report_id))

        changes = drop_required_nulls(report_data.model_dump(exclude_unset=True), ("date",))
        outcome = rsm.weekly_report_edit(changes, identity.is_leader)
        self.ensure(outcome)

        updated = await self.report_repo.update(report_id, **outcome.values)
        return WeeklyReportResponse.model_validate(updated)

    async def delete_report(self, identity: Identity, report_id: UUID) -> None:
        self.ensure(await self.guard.can_access_weekly_report(identity, report_id))
        await self.report_repo.delete(report_id)
        logger.info("Weekly report deleted", extra={"weekly_report_id": str(report_id)})
