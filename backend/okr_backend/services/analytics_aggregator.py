"""
Analytics aggregator.

Pure reducers that turn raw, already access-filtered rows into dashboard rollups:
goal health, evidence rates, overdue plans, weekly activity streaks, top blockers,
progress deltas and progress histograms, at member, team and organisation scope.
Nothing here touches the database.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple
from uuid import UUID

from okr_backend.core.config import settings
from okr_backend.models.action_plan import ActionPlanStatus
from okr_backend.models.review import ReviewStatus
from okr_backend.models.verification import VerificationStatus
from okr_backend.utils.dates import (
    now_local,
    round_half_up,
    round_to,
    week_key,
    week_keys,
    week_start_monday,
)

COMPLETED = ActionPlanStatus.COMPLETED.value
STAGNANT_AFTER_DAYS = 10
TOP_N = 5
PROGRESS_BUCKETS = ("0_24", "25_49", "50_74", "75_99", "100")


@dataclass(frozen=True)
class GoalRow:
    id: UUID
    user_id: UUID
    progress: int = 0
    status: Optional[str] = None
    review_status: Optional[str] = None
    start_date: Optional[date] = None
    time_bound: Optional[date] = None


@dataclass(frozen=True)
class PlanRow:
    id: UUID
    goal_id: UUID
    user_id: UUID
    status: Optional[str] = None
    end_date: Optional[date] = None
    evidence_link: Optional[str] = None


@dataclass(frozen=True)
class ReportRow:
    goal_id: Optional[UUID]
    user_id: Optional[UUID]
    date: Optional[date]
    blockers_challenges: Optional[str] = None


@dataclass(frozen=True)
class SnapshotRow:
    goal_id: UUID
    progress: int
    recorded_at: datetime


@dataclass(frozen=True)
class VerificationRow:
    status: Optional[str]
    user_id: Optional[UUID]


@dataclass(frozen=True)
class MemberRow:
    user_id: UUID
    name: Optional[str] = None
    email: Optional[str] = None
    team_id: Optional[UUID] = None


@dataclass(frozen=True)
class TeamRow:
    id: UUID
    name: Optional[str] = None


def clamp_weeks(raw: Optional[Any]) -> int:
    """Lookback weeks in [1, max]; missing, zero or unparseable input means the default."""
    try:
        weeks = int(float(raw)) if raw not in (None, "") else 0
    except (TypeError, ValueError):
        weeks = 0
    if not weeks:
        weeks = settings.ANALYTICS_DEFAULT_WEEKS
    return max(1, min(settings.ANALYTICS_MAX_WEEKS, weeks))


@dataclass(frozen=True)
class AnalyticsWindow:
    """A lookback of whole weeks ending now; weeks start Monday 00:00 local."""
    weeks: int
    now: datetime

    @classmethod
    def build(cls, weeks: Optional[Any] = None, now: Optional[datetime] = None) -> "AnalyticsWindow":
        return cls(weeks=clamp_weeks(weeks), now=now or now_local())

    @property
    def this_week_start(self) -> datetime:
        return week_start_monday(self.now)

    @property
    def today(self) -> date:
        return self.now.date()

    @property
    def date_from(self) -> date:
        return (self.this_week_start - timedelta(days=7 * (self.weeks - 1))).date()

    @property
    def date_to(self) -> date:
        return self.today

    @property
    def week_keys(self) -> List[str]:
        """Oldest to newest, ending with the current week."""
        return week_keys(self.this_week_start, self.weeks)

    @property
    def previous_cutoff(self) -> datetime:
        """The last instant of the previous week."""
        return self.this_week_start - timedelta(microseconds=1)

    @property
    def history_since(self) -> datetime:
        return self.previous_cutoff - timedelta(days=max(14, self.weeks * 7))

    def as_dict(self) -> Dict[str, Any]:
        return {"from": self.date_from.isoformat(), "to": self.date_to.isoformat(), "weeks": self.weeks}


# Goal-level reducers


def is_pending_review(review_status: Optional[str]) -> bool:
    """Goals that were never submitted count as pending, as do submitted ones."""
    return not review_status or review_status == ReviewStatus.PENDING.value


def review_counts(goals: Iterable[GoalRow]) -> Dict[str, int]:
    approved = pending = 0
    for goal in goals:
        if goal.review_status == ReviewStatus.APPROVED.value:
            approved += 1
        if is_pending_review(goal.review_status):
            pending += 1
    return {"approved": approved, "pending": pending}


def _midnight(day: date) -> datetime:
    return datetime.combine(day, time())


def goal_health(goals: Iterable[GoalRow], now: datetime) -> Dict[str, int]:
    """
    Bucket goals by schedule risk.

    A goal with both dates and a positive duration is compared against the
    expected progress at `now`; approved goals still at zero more than ten days
    after their start are additionally counted as stagnant.
    """
    health = {"onTrack": 0, "atRisk": 0, "highRisk": 0, "stagnant": 0}
    for goal in goals:
        progress = goal.progress or 0
        start = _midnight(goal.start_date) if goal.start_date else None
        end = _midnight(goal.time_bound) if goal.time_bound else None

        if goal.review_status == ReviewStatus.APPROVED.value and progress <= 0 and start is not None:
            if (now - start).days > STAGNANT_AFTER_DAYS:
                health["stagnant"] += 1

        if start is None or end is None:
            continue
        total = (end - start).total_seconds()
        if total <= 0:
            continue
        elapsed = (now - start).total_seconds()
        expected = min(100, round_half_up(elapsed / total * 100))

        if progress < expected - 20:
            health["highRisk"] += 1
        elif progress < expected - 10:
            health["atRisk"] += 1
        else:
            health["onTrack"] += 1
    return health


def progress_bucket(progress: Any) -> str:
    value = max(0.0, min(100.0, float(progress or 0)))
    if value < 25:
        return "0_24"
    if value < 50:
        return "25_49"
    if value < 75:
        return "50_74"
    if value < 100:
        return "75_99"
    return "100"


def progress_histogram(goals: Iterable[GoalRow]) -> Dict[str, int]:
    histogram = {key: 0 for key in PROGRESS_BUCKETS}
    for goal in goals:
        histogram[progress_bucket(goal.progress)] += 1
    return histogram


# Action plan reducers


def has_evidence(plan: PlanRow) -> bool:
    return bool((plan.evidence_link or "").strip())


def is_overdue(plan: PlanRow, today: date) -> bool:
    return plan.end_date is not None and plan.status != COMPLETED and plan.end_date < today


def action_plan_stats(
    plans: Iterable[PlanRow],
    today: date,
    rate_digits: Optional[int] = None,
) -> Dict[str, Any]:
    """Counts plus the share of completed plans that carry an evidence link."""
    total = overdue = completed = with_evidence = 0
    for plan in plans:
        total += 1
        if plan.status == COMPLETED:
            completed += 1
            if has_evidence(plan):
                with_evidence += 1
        if is_overdue(plan, today):
            overdue += 1
    return {
        "total": total,
        "overdue": overdue,
        "completed": completed,
        "completed_with_evidence": with_evidence,
        "evidence_rate": evidence_rate(with_evidence, completed, rate_digits),
    }


def evidence_rate(with_evidence: int, completed: int, digits: Optional[int] = None) -> float:
    if completed <= 0:
        return 0
    rate = with_evidence / completed
    return round_to(rate, digits) if digits is not None else rate


# Weekly report reducers


def activity_weeks(reports: Iterable[ReportRow]) -> Set[str]:
    return {week_key(report.date) for report in reports if report.date is not None}


def streak_weeks(weeks_with_activity: Set[str], window: AnalyticsWindow) -> int:
    """Consecutive active weeks counted backward from the current week; stops at the first gap."""
    streak = 0
    for key in reversed(window.week_keys):
        if key not in weeks_with_activity:
            break
        streak += 1
    return streak


def top_blockers(reports: Iterable[ReportRow], limit: int = TOP_N) -> List[Dict[str, Any]]:
    """Most frequent non-empty blocker texts; ties keep first-seen order."""
    counts: Counter = Counter()
    for report in reports:
        if report.date is None:
            continue
        text = (report.blockers_challenges or "").strip()
        if text:
            counts[text] += 1
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [{"text": text, "count": count} for text, count in ranked[:limit]]


def weekly_activity(reports: Sequence[ReportRow], window: AnalyticsWindow) -> Dict[str, Any]:
    dated = [report for report in reports if report.date is not None]
    weeks = activity_weeks(dated)
    return {
        "reports_in_window": len(reports),
        "weeks_with_activity": len(weeks),
        "streak_weeks": streak_weeks(weeks, window),
        "top_blockers": top_blockers(dated),
    }


# Progress deltas


def progress_pairs(
    goals: Sequence[GoalRow],
    snapshots: Iterable[SnapshotRow],
    window: AnalyticsWindow,
) -> Dict[UUID, Tuple[int, int]]:
    """
    (current, previous) progress per goal.

    Current is the latest snapshot at or before now, previous the latest at or
    before the end of last week. Goals without history use their live progress for
    both, so they contribute a zero delta.
    """
    current: Dict[UUID, int] = {}
    previous: Dict[UUID, int] = {}
    ordered = sorted(
        (s for s in snapshots if window.history_since <= s.recorded_at <= window.now),
        key=lambda s: s.recorded_at,
        reverse=True,
    )
    for snapshot in ordered:
        current.setdefault(snapshot.goal_id, snapshot.progress)
        if snapshot.recorded_at <= window.previous_cutoff:
            previous.setdefault(snapshot.goal_id, snapshot.progress)

    pairs: Dict[UUID, Tuple[int, int]] = {}
    for goal in goals:
        cur = current.get(goal.id, goal.progress or 0)
        prev = previous.get(goal.id, cur)
        pairs[goal.id] = (cur, prev)
    return pairs


def average_delta(pairs: Iterable[Tuple[int, int]]) -> Optional[float]:
    """Mean of current - previous rounded to 2 decimals; None when there are no goals."""
    deltas = [cur - prev for cur, prev in pairs]
    if not deltas:
        return None
    return round_to(sum(deltas) / len(deltas), 2)


def progress_delta(
    goals: Sequence[GoalRow],
    snapshots: Iterable[SnapshotRow],
    window: AnalyticsWindow,
) -> Optional[float]:
    return average_delta(progress_pairs(goals, snapshots, window).values())


# Member scope


def member_insights(
    user_id: UUID,
    year: int,
    window: AnalyticsWindow,
    goals: Sequence[GoalRow],
    plans: Sequence[PlanRow],
    reports: Sequence[ReportRow],
    snapshots: Sequence[SnapshotRow],
) -> Dict[str, Any]:
    """Growth metrics for one member and year."""
    counts = review_counts(goals)
    return {
        "user_id": user_id,
        "year": year,
        "window": window.as_dict(),
        "goals": {
            "total": len(goals),
            "approved": counts["approved"],
            "pending": counts["pending"],
            "health": goal_health(goals, window.now),
        },
        "action_plans": action_plan_stats(plans, window.today),
        "weekly_reports": weekly_activity(reports, window),
        "progress_delta": progress_delta(goals, snapshots, window),
    }


# Team and organisation scope


def _empty_rollup() -> Dict[str, Any]:
    return {
        "members_total": 0,
        "members_with_goal": 0,
        "goals_total": 0,
        "goals_review": {"approved": 0, "pending": 0},
        "progress_avg": 0,
        "progress_buckets": {key: 0 for key in PROGRESS_BUCKETS},
        "action_plans": {
            "total": 0,
            "overdue": 0,
            "completed": 0,
            "completed_with_evidence": 0,
            "evidence_rate": 0,
        },
        "weekly_reports": {"reports_in_window": 0, "active_members_this_week": 0, "active_rate_this_week": 0},
        "verifications": {"pending": 0, "reviewed": 0},
        "progress_delta": None,
    }


def _rate(numerator: int, denominator: int) -> float:
    return round_to(numerator / denominator, 4) if denominator > 0 else 0


def _verification_counts(rows: Iterable[VerificationRow]) -> Dict[str, int]:
    counts = {"pending": 0, "reviewed": 0}
    for row in rows:
        if row.status == VerificationStatus.REVIEWED.value:
            counts["reviewed"] += 1
        else:
            counts["pending"] += 1
    return counts


def _group(rows: Iterable[Any], key_of) -> Dict[Any, List[Any]]:
    grouped: Dict[Any, List[Any]] = {}
    for row in rows:
        key = key_of(row)
        if key is None:
            continue
        grouped.setdefault(key, []).append(row)
    return grouped


def _team_rollup(
    window: AnalyticsWindow,
    members: Sequence[MemberRow],
    goals: Sequence[GoalRow],
    plans: Sequence[PlanRow],
    reports: Sequence[ReportRow],
    verifications: Sequence[VerificationRow],
    snapshots: Sequence[SnapshotRow],
) -> Tuple[Dict[str, Any], Dict[str, Set[UUID]]]:
    """One team's rollup plus the set of active members per week key."""
    rollup = _empty_rollup()
    rollup["members_total"] = len(members)
    rollup["members_with_goal"] = len({goal.user_id for goal in goals})
    rollup["goals_total"] = len(goals)
    rollup["goals_review"] = review_counts(goals)
    rollup["progress_buckets"] = progress_histogram(goals)
    if goals:
        rollup["progress_avg"] = round_to(sum(goal.progress or 0 for goal in goals) / len(goals), 2)
        rollup["progress_delta"] = progress_delta(goals, snapshots, window)

    rollup["action_plans"] = action_plan_stats(plans, window.today, rate_digits=4)

    this_week = window.this_week_start.date()
    active_this_week: Set[UUID] = set()
    active_by_week: Dict[str, Set[UUID]] = {}
    dated = [report for report in reports if report.date is not None and report.user_id is not None]
    for report in dated:
        if report.date >= this_week:
            active_this_week.add(report.user_id)
        active_by_week.setdefault(week_key(report.date), set()).add(report.user_id)

    rollup["weekly_reports"] = {
        "reports_in_window": len(dated),
        "active_members_this_week": len(active_this_week),
        "active_rate_this_week": _rate(len(active_this_week), len(members)),
    }
    rollup["verifications"] = _verification_counts(verifications)
    return rollup, active_by_week


def org_overview(
    year: int,
    team_id: Optional[UUID],
    window: AnalyticsWindow,
    teams: Sequence[TeamRow],
    members: Sequence[MemberRow],
    goals: Sequence[GoalRow],
    plans: Sequence[PlanRow],
    reports: Sequence[ReportRow],
    verifications: Sequence[VerificationRow],
    snapshots: Sequence[SnapshotRow],
) -> Dict[str, Any]:
    """
    Organisation overview: per-team rollups, their sum and the weekly active-member trend.

    Rows are attributed to teams through the owner's current team, so a member who
    moves team takes their history along.
    """
    user_team = {member.user_id: member.team_id for member in members}

    def team_of(row: Any) -> Optional[UUID]:
        return user_team.get(row.user_id)

    scoped_teams = [team for team in teams if team_id is None or team.id == team_id]
    members_by_team = _group(members, lambda m: m.team_id)
    goals_by_team = _group(goals, team_of)
    plans_by_team = _group(plans, team_of)
    reports_by_team = _group(reports, team_of)
    verifications_by_team = _group(verifications, team_of)

    per_team: List[Dict[str, Any]] = []
    activity: Dict[UUID, Dict[str, Set[UUID]]] = {}
    for team in scoped_teams:
        team_goals = goals_by_team.get(team.id, [])
        team_goal_ids = {goal.id for goal in team_goals}
        rollup, active_by_week = _team_rollup(
            window,
            members_by_team.get(team.id, []),
            team_goals,
            plans_by_team.get(team.id, []),
            reports_by_team.get(team.id, []),
            verifications_by_team.get(team.id, []),
            [s for s in snapshots if s.goal_id in team_goal_ids],
        )
        activity[team.id] = active_by_week
        per_team.append({"team_id": team.id, "team_name": team.name, **rollup})

    org = _sum_rollups(per_team)
    scoped_goals = [goal for team in scoped_teams for goal in goals_by_team.get(team.id, [])]
    org["progress_delta"] = progress_delta(scoped_goals, snapshots, window)

    trend = []
    for key in window.week_keys:
        active = sum(len(activity[team.id].get(key, ())) for team in scoped_teams)
        trend.append({"week": key, "active_members": active, "active_rate": _rate(active, org["members_total"])})

    return {
        "year": year,
        "team_id": team_id,
        "window": window.as_dict(),
        "org": org,
        "per_team": per_team,
        "trends": {"weeks": trend},
    }


def _sum_rollups(rows: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    """Sum team rollups; progress_avg is weighted by each team's goal count."""
    org = _empty_rollup()
    weighted_progress = 0.0
    for row in rows:
        for key in ("members_total", "members_with_goal", "goals_total"):
            org[key] += row[key]
        for key in ("approved", "pending"):
            org["goals_review"][key] += row["goals_review"][key]
        for key in PROGRESS_BUCKETS:
            org["progress_buckets"][key] += row["progress_buckets"][key]
        for key in ("total", "overdue", "completed", "completed_with_evidence"):
            org["action_plans"][key] += row["action_plans"][key]
        for key in ("reports_in_window", "active_members_this_week"):
            org["weekly_reports"][key] += row["weekly_reports"][key]
        for key in ("pending", "reviewed"):
            org["verifications"][key] += row["verifications"][key]
        weighted_progress += (row["progress_avg"] or 0) * row["goals_total"]

    if org["goals_total"]:
        org["progress_avg"] = round_to(weighted_progress / org["goals_total"], 2)
    plans = org["action_plans"]
    plans["evidence_rate"] = evidence_rate(plans["completed_with_evidence"], plans["completed"], 4)
    org["weekly_reports"]["active_rate_this_week"] = _rate(
        org["weekly_reports"]["active_members_this_week"], org["members_total"]
    )
    return org


def _top(members: Sequence[Dict[str, Any]], value_of, descending: bool = True) -> List[Dict[str, Any]]:
    """First five members by a metric; missing values sort last, ties keep input order."""
    missing = float("-inf") if descending else float("inf")

    def key(member: Dict[str, Any]) -> float:
        value = value_of(member)
        value = missing if value is None else value
        return -value if descending else value

    return sorted(members, key=key)[:TOP_N]


def team_members_summary(
    year: int,
    team_id: UUID,
    team_name: Optional[str],
    window: AnalyticsWindow,
    members: Sequence[MemberRow],
    goals: Sequence[GoalRow],
    plans: Sequence[PlanRow],
    reports: Sequence[ReportRow],
    verifications: Sequence[VerificationRow],
    snapshots: Sequence[SnapshotRow],
) -> Dict[str, Any]:
    """Per-member metrics for a team plus top and bottom lists."""
    goals_by_user = _group(goals, lambda g: g.user_id)
    plans_by_user = _group(plans, lambda p: p.user_id)
    reports_by_user = _group(
        (r for r in reports if r.date is not None), lambda r: r.user_id
    )
    verifications_by_user = _group(verifications, lambda v: v.user_id)
    pairs = progress_pairs(goals, snapshots, window)

    summaries = []
    for member in members:
        member_goals = goals_by_user.get(member.user_id, [])
        member_reports = reports_by_user.get(member.user_id, [])
        weeks = activity_weeks(member_reports)
        progress_sum = sum(goal.progress or 0 for goal in member_goals)
        counts = review_counts(member_goals)
        summaries.append({
            "user_id": member.user_id,
            "name": member.name,
            "email": member.email,
            "team_id": team_id,
            "team_name": team_name,
            "goals": {
                "total": len(member_goals),
                "approved": counts["approved"],
                "pending": counts["pending"],
                "progress_avg": round_to(progress_sum / len(member_goals), 2) if member_goals else 0,
                "progress_sum": progress_sum,
            },
            "progress_delta": average_delta(pairs[goal.id] for goal in member_goals),
            "action_plans": action_plan_stats(plans_by_user.get(member.user_id, []), window.today, rate_digits=4),
            "weekly_reports": {
                "reports_in_window": len(member_reports),
                "weeks_with_activity": len(weeks),
                "streak_weeks": streak_weeks(weeks, window),
            },
            "verifications": _verification_counts(verifications_by_user.get(member.user_id, [])),
        })

    return {
        "year": year,
        "team_id": team_id,
        "team_name": team_name,
        "window": window.as_dict(),
        "members": summaries,
        "top": {
            "progress_delta": _top(summaries, lambda m: m["progress_delta"]),
            "evidence_rate": _top(summaries, lambda m: m["action_plans"]["evidence_rate"]),
            "overdue_plans": _top(summaries, lambda m: m["action_plans"]["overdue"]),
            "activity_streak": _top(summaries, lambda m: m["weekly_reports"]["streak_weeks"]),
        },
        "bottom": {
            "progress_delta": _top(summaries, lambda m: m["progress_delta"], descending=False),
        },
    }


def team_members_trends(
    year: int,
    team_id: UUID,
    team_name: Optional[str],
    window: AnalyticsWindow,
    members: Sequence[MemberRow],
    reports: Sequence[ReportRow],
) -> Dict[str, Any]:
    """Reports per member per week, on an oldest-to-newest week axis."""
    axis = window.week_keys
    index = {key: position for position, key in enumerate(axis)}
    series = {
        member.user_id: {
            "user_id": member.user_id,
            "name": member.name,
            "email": member.email,
            "reports_by_week": [0] * len(axis),
        }
        for member in members
    }
    for report in reports:
        if report.date is None or report.user_id not in series:
            continue
        position = index.get(week_key(report.date))
        if position is None:
            continue
        series[report.user_id]["reports_by_week"][position] += 1

    return {
        "year": year,
        "team_id": team_id,
        "team_name": team_name,
        "window": window.as_dict(),
        "weeks": axis,
        "members": list(series.values()),
    }


# Leader helpers


def weekly_report_stats(
    plan_ids: Sequence[UUID],
    report_dates: Iterable[Tuple[UUID, Optional[date]]],
    date_from: date,
    date_to: date,
) -> Dict[str, Dict[str, Any]]:
    """Per plan: the latest report date and whether any report falls within [date_from, date_to]."""
    stats: Dict[str, Dict[str, Any]] = {
        str(plan_id): {"lastReportDate": None, "hasReportInRange": False} for plan_id in plan_ids
    }
    latest: Dict[str, date] = {}
    for plan_id, day in report_dates:
        if plan_id is None or day is None:
            continue
        key = str(plan_id)
        entry = stats.setdefault(key, {"lastReportDate": None, "hasReportInRange": False})
        if key not in latest or day > latest[key]:
            latest[key] = day
            entry["lastReportDate"] = day.isoformat()
        if date_from <= day <= date_to:
            entry["hasReportInRange"] = True
    return stats


class GoalsSummaryAccumulator:
    """Folds pages of (progress, review_status) rows into {total, approved, pending, avgProgress}."""

    def __init__(self):
        self.total = 0
        self.approved = 0
        self.pending = 0
        self.progress_sum = 0

    def add(self, rows: Iterable[Tuple[Any, Optional[str]]]) -> None:
        for progress, review_status in rows:
            self.total += 1
            if review_status == ReviewStatus.APPROVED.value:
                self.approved += 1
            if is_pending_review(review_status):
                self.pending += 1
            self.progress_sum += progress or 0

    def result(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "approved": self.approved,
            "pending": self.pending,
            "avgProgress": self.progress_sum / self.total if self.total else 0,
        }
