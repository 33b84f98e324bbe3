"""
Analytics service.

Fetches access-filtered rows through the repositories, maps them onto the plain row
types of the aggregator and returns its rollups. All computation lives in
analytics_aggregator; this module only decides which rows are in scope.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from okr_backend.core.config import settings
from okr_backend.core.logging import get_logger
from okr_backend.db.repositories.action_plan_repository import ActionPlanRepository
from okr_backend.db.repositories.goal_repository import GoalRepository
from okr_backend.db.repositories.progress_history_repository import ProgressHistoryRepository
from okr_backend.db.repositories.user_repository import TeamRepository, UserRepository
from okr_backend.db.repositories.verification_request_repository import VerificationRequestRepository
from okr_backend.db.repositories.weekly_report_repository import WeeklyReportRepository
from okr_backend.models.goal import Goal
from okr_backend.models.user import Team, User
from okr_backend.services import analytics_aggregator as agg
from okr_backend.services.base_service import BaseService
from okr_backend.services.user_service import LeaderScope

logger = get_logger(__name__)


def goal_row(goal: Goal) -> agg.GoalRow:
    return agg.GoalRow(
        id=goal.id,
        user_id=goal.user_id,
        progress=goal.progress or 0,
        status=goal.status,
        review_status=goal.review_status,
        start_date=goal.start_date,
        time_bound=goal.time_bound,
    )


def plan_row(plan: Any, user_id: UUID) -> agg.PlanRow:
    return agg.PlanRow(
        id=plan.id,
        goal_id=plan.goal_id,
        user_id=user_id,
        status=plan.status,
        end_date=plan.end_date,
        evidence_link=plan.evidence_link,
    )


def report_row(report: Any, user_id: Optional[UUID]) -> agg.ReportRow:
    return agg.ReportRow(
        goal_id=report.goal_id,
        user_id=user_id,
        date=report.date,
        blockers_challenges=report.blockers_challenges,
    )


def member_row(user: User) -> agg.MemberRow:
    return agg.MemberRow(user_id=user.id, name=user.name, email=user.email, team_id=user.team_id)


def team_row(team: Team) -> agg.TeamRow:
    return agg.TeamRow(id=team.id, name=team.name)


class AnalyticsService(BaseService):
    """Service for leader and manager dashboards."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.goal_repo = GoalRepository(session)
        self.plan_repo = ActionPlanRepository(session)
        self.report_repo = WeeklyReportRepository(session)
        self.history_repo = ProgressHistoryRepository(session)
        self.verification_repo = VerificationRequestRepository(session)
        self.user_repo = UserRepository(session)
        self.team_repo = TeamRepository(session)

    async def member_insights(self, year: int, user_id: UUID, weeks: Optional[Any] = None) -> Dict[str, Any]:
        """Growth metrics for one member."""
        window = agg.AnalyticsWindow.build(weeks)
        goals = [goal_row(goal) for goal in await self.goal_repo.list_by_user(user_id, year)]
        goal_ids = [goal.id for goal in goals]

        plans = [
            plan_row(plan, owner_id)
            for plan, owner_id in await self.plan_repo.list_with_owner_for_users([user_id], year)
        ]
        reports = [
            report_row(report, user_id)
            for report in await self.report_repo.list_for_goals_in_range(goal_ids, window.date_from, window.date_to)
        ]
        snapshots = await self._snapshots(goal_ids, window)

        logger.info(
            "Member insights computed",
            extra={"user_id": str(user_id), "year": year, "goals": len(goals), "reports": len(reports)},
        )
        return agg.member_insights(user_id, year, window, goals, plans, reports, snapshots)

    async def overview(
        self,
        year: int,
        team_id: Optional[UUID] = None,
        weeks: Optional[Any] = None,
    ) -> Dict[str, Any]:
        """Organisation overview, or a single team when team_id is given."""
        window = agg.AnalyticsWindow.build(weeks)
        teams = [team_row(team) for team in await self.team_repo.list_teams(team_id)]
        members = [member_row(user) for user in await self.user_repo.list_all(team_id)]
        member_ids = [member.user_id for member in members]

        goals = [goal_row(goal) for goal in await self.goal_repo.list_for_year(year, team_id)]
        if team_id is None:
            plan_pairs = await self.plan_repo.list_with_owner_for_year(year)
            verification_pairs = await self.verification_repo.list_status_with_owner(year)
        else:
            plan_pairs = await self.plan_repo.list_with_owner_for_users(member_ids, year)
            verification_pairs = await self.verification_repo.list_status_with_owner(year, member_ids)

        plans = [plan_row(plan, owner_id) for plan, owner_id in plan_pairs]
        reports = await self._reports_for_members(member_ids, year, window)
        verifications = [agg.VerificationRow(status=status, user_id=owner_id) for status, owner_id in verification_pairs]
        snapshots = await self._snapshots([goal.id for goal in goals], window)

        return agg.org_overview(year, team_id, window, teams, members, goals, plans, reports, verifications, snapshots)

    async def team_members_summary(self, year: int, team_id: UUID, weeks: Optional[Any] = None) -> Dict[str, Any]:
        """Per-member metrics for one team with top and bottom lists."""
        window = agg.AnalyticsWindow.build(weeks)
        team_name = await self._team_name(team_id)
        members = [member_row(user) for user in await self.user_repo.list_by_team(team_id)]
        member_ids = [member.user_id for member in members]

        goals = [goal_row(goal) for goal in await self.goal_repo.list_for_users(member_ids, year)]
        plans = [
            plan_row(plan, owner_id)
            for plan, owner_id in await self.plan_repo.list_with_owner_for_users(member_ids, year)
        ]
        reports = await self._reports_for_members(member_ids, year, window)
        verifications = [
            agg.VerificationRow(status=status, user_id=owner_id)
            for status, owner_id in await self.verification_repo.list_status_with_owner(year, member_ids)
        ]
        snapshots = await self._snapshots([goal.id for goal in goals], window)

        return agg.team_members_summary(
            year, team_id, team_name, window, members, goals, plans, reports, verifications, snapshots
        )

    async def team_members_trends(self, year: int, team_id: UUID, weeks: Optional[Any] = None) -> Dict[str, Any]:
        """Reports per member per week for one team."""
        window = agg.AnalyticsWindow.build(weeks)
        team_name = await self._team_name(team_id)
        members = [member_row(user) for user in await self.user_repo.list_by_team(team_id)]
        reports = await self._reports_for_members([member.user_id for member in members], year, window)
        return agg.team_members_trends(year, team_id, team_name, window, members, reports)

    async def weekly_report_stats(
        self,
        scope: LeaderScope,
        year: int,
        date_from: date,
        date_to: date,
        user_id: Optional[UUID] = None,
    ) -> Dict[str, Any]:
        """Latest report date and in-range flag for every reportable plan of the team."""
        plans = await self.plan_repo.list_reportable(scope.team_id, year, user_id)
        plan_ids = [plan.id for plan in plans]
        report_dates = await self.report_repo.list_dates_for_plans(plan_ids)
        return {
            "data": agg.weekly_report_stats(plan_ids, report_dates, date_from, date_to),
            "meta": {
                "year": year,
                "user_id": user_id,
                "from": date_from.isoformat(),
                "to": date_to.isoformat(),
                "plans": len(plan_ids),
                "reports": len(report_dates),
            },
        }

    async def goals_summary(self, scope: LeaderScope, year: int, user_id: Optional[UUID] = None) -> Dict[str, Any]:
        """
        Totals over every team goal of the year.

        Reads in fixed-size pages and stops after SUMMARY_MAX_PAGES even if rows remain.
        """
        accumulator = agg.GoalsSummaryAccumulator()
        page_size = settings.SUMMARY_PAGE_SIZE
        for page in range(settings.SUMMARY_MAX_PAGES):
            rows = await self.goal_repo.summary_page(
                scope.team_id, year, user_id=user_id, skip=page * page_size, limit=page_size
            )
            accumulator.add(rows)
            if len(rows) < page_size:
                break
        else:
            logger.warning(
                "Goals summary stopped at page ceiling",
                extra={"team_id": str(scope.team_id), "year": year, "pages": settings.SUMMARY_MAX_PAGES},
            )
        return accumulator.result()

    async def _team_name(self, team_id: UUID) -> Optional[str]:
        team = await self.team_repo.get(team_id)
        return team.name if team else None

    async def _reports_for_members(
        self,
        member_ids: Sequence[UUID],
        year: int,
        window: agg.AnalyticsWindow,
    ) -> List[agg.ReportRow]:
        pairs = await self.report_repo.list_with_owner_for_users_in_range(
            member_ids, year, window.date_from, window.date_to
        )
        return [report_row(report, owner_id) for report, owner_id in pairs]

    async def _snapshots(self, goal_ids: Sequence[UUID], window: agg.AnalyticsWindow) -> List[agg.SnapshotRow]:
        rows = await self.history_repo.list_for_goals(goal_ids, window.history_since, window.now)
        return [
            agg.SnapshotRow(goal_id=row.goal_id, progress=row.progress, recorded_at=row.recorded_at)
            for row in rows
        ]
