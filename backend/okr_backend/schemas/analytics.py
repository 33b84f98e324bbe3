"""
Analytics response schemas for leader and manager dashboards.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from uuid import UUID


class WindowInfo(BaseModel):
    """Lookback window echoed back to the client."""
    date_from: str = Field(..., alias="from")
    to: str
    weeks: int

    class Config:
        populate_by_name = True


class GoalHealth(BaseModel):
    onTrack: int = 0
    atRisk: int = 0
    highRisk: int = 0
    stagnant: int = 0


class ReviewCounts(BaseModel):
    approved: int = 0
    pending: int = 0


class MemberGoalStats(ReviewCounts):
    total: int = 0
    health: GoalHealth


class ActionPlanStats(BaseModel):
    total: int = 0
    overdue: int = 0
    completed: int = 0
    completed_with_evidence: int = 0
    evidence_rate: float = 0


class BlockerCount(BaseModel):
    text: str
    count: int


class MemberActivity(BaseModel):
    reports_in_window: int = 0
    weeks_with_activity: int = 0
    streak_weeks: int = 0


class MemberActivityWithBlockers(MemberActivity):
    top_blockers: List[BlockerCount] = []


class MemberInsights(BaseModel):
    """Growth metrics for one member."""
    user_id: UUID
    year: int
    window: WindowInfo
    goals: MemberGoalStats
    action_plans: ActionPlanStats
    weekly_reports: MemberActivityWithBlockers
    progress_delta: Optional[float] = None


class TeamActivity(BaseModel):
    reports_in_window: int = 0
    active_members_this_week: int = 0
    active_rate_this_week: float = 0


class VerificationCounts(BaseModel):
    pending: int = 0
    reviewed: int = 0


class Rollup(BaseModel):
    """Team or organisation rollup."""
    members_total: int = 0
    members_with_goal: int = 0
    goals_total: int = 0
    goals_review: ReviewCounts
    progress_avg: float = 0
    progress_buckets: Dict[str, int]
    action_plans: ActionPlanStats
    weekly_reports: TeamActivity
    verifications: VerificationCounts
    progress_delta: Optional[float] = None


class TeamRollup(Rollup):
    team_id: UUID
    team_name: Optional[str] = None


class TrendPoint(BaseModel):
    week: str
    active_members: int
    active_rate: float


class TrendSeries(BaseModel):
    weeks: List[TrendPoint]


class OrgOverview(BaseModel):
    """Organisation (or single team) overview."""
    year: int
    team_id: Optional[UUID] = None
    window: WindowInfo
    org: Rollup
    per_team: List[TeamRollup]
    trends: TrendSeries


class MemberGoalSummary(ReviewCounts):
    total: int = 0
    progress_avg: float = 0
    progress_sum: float = 0


class MemberSummary(BaseModel):
    user_id: UUID
    name: Optional[str] = None
    email: Optional[str] = None
    team_id: UUID
    team_name: Optional[str] = None
    goals: MemberGoalSummary
    progress_delta: Optional[float] = None
    action_plans: ActionPlanStats
    weekly_reports: MemberActivity
    verifications: VerificationCounts


class TopMembers(BaseModel):
    progress_delta: List[MemberSummary] = []
    evidence_rate: List[MemberSummary] = []
    overdue_plans: List[MemberSummary] = []
    activity_streak: List[MemberSummary] = []


class BottomMembers(BaseModel):
    progress_delta: List[MemberSummary] = []


class TeamMembersSummary(BaseModel):
    """Per-member metrics for one team."""
    year: int
    team_id: UUID
    team_name: Optional[str] = None
    window: WindowInfo
    members: List[MemberSummary]
    top: TopMembers
    bottom: BottomMembers


class MemberTrend(BaseModel):
    user_id: UUID
    name: Optional[str] = None
    email: Optional[str] = None
    reports_by_week: List[int]


class TeamMembersTrends(BaseModel):
    """Weekly report counts per member, oldest week first."""
    year: int
    team_id: UUID
    team_name: Optional[str] = None
    window: WindowInfo
    weeks: List[str]
    members: List[MemberTrend]


class GoalsSummary(BaseModel):
    total: int = 0
    approved: int = 0
    pending: int = 0
    avgProgress: float = 0


class PlanReportStat(BaseModel):
    lastReportDate: Optional[str] = None
    hasReportInRange: bool = False


class WeeklyReportStatsMeta(BaseModel):
    year: int
    user_id: Optional[UUID] = None
    date_from: str = Field(..., alias="from")
    to: str
    plans: int
    reports: int

    class Config:
        populate_by_name = True


class WeeklyReportStatsResponse(BaseModel):
    data: Dict[str, PlanReportStat]
    meta: WeeklyReportStatsMeta
