"""
Review and lock rules for goals and action plans.

Every function here is pure: it takes a snapshot of the entity plus the caller's
requested change and returns either a Transition (the column values to write) or a
Rejection (the HTTP status and message to surface). Services persist transitions and
raise for rejections.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, Mapping, Optional, Union
from uuid import UUID

from okr_backend.core.exceptions import HTTP_423_LOCKED
from okr_backend.models.action_plan import ActionPlanStatus, MAX_DEADLINE_CHANGES
from okr_backend.models.goal import GoalStatus
from okr_backend.models.review import ReviewStatus

HTTP_403_FORBIDDEN = 403
HTTP_409_CONFLICT = 409

APPROVED = ReviewStatus.APPROVED.value
PENDING = ReviewStatus.PENDING.value
REJECTED = ReviewStatus.REJECTED.value
CANCELLED = ReviewStatus.CANCELLED.value

# Decisions that release the lock; anything else keeps the entity locked as Pending.
UNLOCKING_DECISIONS = frozenset([APPROVED, REJECTED, CANCELLED])

# Goal status values that auto-advance to In Progress on approval.
PRE_START_GOAL_STATUSES = frozenset([GoalStatus.NOT_STARTED.value, GoalStatus.DRAFT.value])

APPROVED_GOAL_EDITABLE_FIELDS = frozenset(["progress", "status"])
PENDING_PLAN_EDITABLE_FIELDS = frozenset(["end_date"])
REPORTABLE_PLAN_STATUSES = frozenset([ActionPlanStatus.IN_PROGRESS.value, ActionPlanStatus.BLOCKED.value])


# Update intents
MEMBER_FULL_UPDATE = "member_full_update"
MEMBER_PROGRESS_UPDATE = "member_progress_update"
LEADER_UPDATE = "leader_update"
REVIEW_REQUEST = "review_request"
REVIEW_CANCEL = "review_cancel"
LEADER_REVIEW_DECISION = "leader_review_decision"
DEADLINE_CHANGE_REQUEST = "deadline_change_request"


@dataclass(frozen=True)
class Transition:
    """Accepted change: `values` must be written, `audit` may be dropped if unsupported."""
    intent: str
    values: Dict[str, Any] = field(default_factory=dict)
    audit: Dict[str, Any] = field(default_factory=dict)

    allowed = True


@dataclass(frozen=True)
class Rejection:
    """Refused change."""
    status_code: int
    message: str

    allowed = False


Outcome = Union[Transition, Rejection]


@dataclass(frozen=True)
class GoalSnapshot:
    status: Optional[str]
    review_status: Optional[str]
    is_locked: bool

    @classmethod
    def of(cls, goal: Any) -> "GoalSnapshot":
        return cls(
            status=goal.status,
            review_status=goal.review_status,
            is_locked=bool(goal.is_locked),
        )


@dataclass(frozen=True)
class PlanSnapshot:
    status: Optional[str]
    review_status: Optional[str]
    is_locked: bool
    end_date: Optional[date] = None
    request_deadline_date: Optional[date] = None
    deadline_change_count: int = 0

    @classmethod
    def of(cls, plan: Any) -> "PlanSnapshot":
        return cls(
            status=plan.status,
            review_status=plan.review_status,
            is_locked=bool(plan.is_locked),
            end_date=plan.end_date,
            request_deadline_date=plan.request_deadline_date,
            deadline_change_count=int(plan.deadline_change_count or 0),
        )

    @property
    def effective_deadline(self) -> Optional[date]:
        """The outstanding proposal if there is one, otherwise the approved deadline."""
        return self.request_deadline_date or self.end_date


@dataclass(frozen=True)
class Reviewer:
    """Who made a review decision, for the audit columns."""
    user_id: Optional[UUID]
    email: Optional[str] = None
    name: Optional[str] = None


def clamp_progress(value: Any) -> Optional[int]:
    """Clamp a progress value into [0, 100]; non-numeric input yields None."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number:  # NaN
        return None
    return int(max(0.0, min(100.0, number)))


def normalize_progress(changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Clamp progress and force status Completed once progress reaches 100."""
    values = dict(changes)
    if "progress" in values and values["progress"] is not None:
        clamped = clamp_progress(values["progress"])
        if clamped is None:
            values.pop("progress")
        else:
            values["progress"] = clamped
            if clamped >= 100:
                values["status"] = GoalStatus.COMPLETED.value
    return values


def normalize_decision(decision: Optional[str]) -> str:
    """Unknown or missing decisions are treated as Pending."""
    if decision in UNLOCKING_DECISIONS:
        return decision
    return PENDING


def decision_locks(decision: Optional[str]) -> bool:
    return normalize_decision(decision) not in UNLOCKING_DECISIONS


def review_audit(decision: str, reviewer: Reviewer, now: datetime) -> Dict[str, Any]:
    return {
        "reviewed_by": reviewer.user_id,
        "reviewed_by_email": reviewer.email,
        "reviewed_by_name": reviewer.name,
        "reviewed_at": now,
        "approved_at": now if decision == APPROVED else None,
        "rejected_at": now if decision == REJECTED else None,
    }


# Goals


def member_goal_edit(
    state: GoalSnapshot,
    changes: Mapping[str, Any],
    unknown_keys: Iterable[str] = (),
) -> Outcome:
    """
    Owner edit of a goal.

    Approved goals accept only progress/status, so any other key in the payload,
    including ones that are never written (unknown_keys), is refused. Any other
    lock (e.g. Pending) refuses every edit.
    """
    if state.review_status == APPROVED:
        disallowed = (set(changes) | set(unknown_keys)) - APPROVED_GOAL_EDITABLE_FIELDS
        if disallowed:
            return Rejection(HTTP_423_LOCKED, "Goal is locked (only status/progress updates are allowed)")
        return Transition(MEMBER_PROGRESS_UPDATE, normalize_progress(changes))

    if state.is_locked:
        return Rejection(HTTP_423_LOCKED, "Goal is locked for review")

    return Transition(MEMBER_FULL_UPDATE, normalize_progress(changes))


def leader_goal_edit(changes: Mapping[str, Any]) -> Transition:
    return Transition(LEADER_UPDATE, normalize_progress(changes))


def goal_delete(state: GoalSnapshot) -> Optional[Rejection]:
    if state.is_locked:
        return Rejection(HTTP_423_LOCKED, "Goal is locked for review")
    return None


def request_goal_review(state: GoalSnapshot, has_action_plans: bool) -> Outcome:
    if state.review_status == APPROVED:
        return Rejection(HTTP_409_CONFLICT, "Goal already approved")
    if state.review_status == PENDING:
        return Rejection(HTTP_409_CONFLICT, "Goal is already pending review")
    if not has_action_plans:
        return Rejection(
            HTTP_409_CONFLICT,
            "You must create at least one action plan before requesting leader review",
        )
    return Transition(REVIEW_REQUEST, {"review_status": PENDING, "is_locked": True})


def cancel_goal_review(state: GoalSnapshot) -> Outcome:
    if state.review_status == APPROVED:
        return Rejection(HTTP_409_CONFLICT, "Goal already approved")
    return Transition(REVIEW_CANCEL, {"review_status": CANCELLED, "is_locked": False})


def leader_goal_decision(
    state: GoalSnapshot,
    decision: Optional[str],
    comment: Optional[str],
    reviewer: Reviewer,
    now: datetime,
) -> Transition:
    """Apply a leader decision; approval of a not-yet-started goal starts it."""
    decision = normalize_decision(decision)
    next_status = state.status
    if decision == APPROVED and state.status in PRE_START_GOAL_STATUSES:
        next_status = GoalStatus.IN_PROGRESS.value

    values = {
        "review_status": decision,
        "leader_review_notes": comment,
        "is_locked": decision_locks(decision),
        "status": next_status,
    }
    return Transition(LEADER_REVIEW_DECISION, values, review_audit(decision, reviewer, now))


# Action plans


def action_plan_creation(goal: GoalSnapshot) -> Optional[Rejection]:
    """Members may only add plans to an unlocked goal that has not started yet."""
    if goal.is_locked:
        return Rejection(HTTP_423_LOCKED, "Goal is locked for review")
    if goal.status != GoalStatus.NOT_STARTED.value:
        return Rejection(HTTP_409_CONFLICT, "Cannot add action plans after goal has started")
    return None


def member_plan_edit(state: PlanSnapshot, changes: Mapping[str, Any]) -> Outcome:
    """
    Owner edit of an action plan.

    A new end_date is never written directly. It becomes a deadline change request
    that counts against the quota and puts the plan back under review.
    """
    pending = state.review_status == PENDING

    if state.is_locked and pending:
        disallowed = set(changes) - PENDING_PLAN_EDITABLE_FIELDS
        if disallowed:
            return Rejection(
                HTTP_423_LOCKED,
                "Action plan is locked for review (deadline-only changes allowed)",
            )

    if pending and "status" in changes and changes["status"] != state.status:
        return Rejection(HTTP_409_CONFLICT, "Cannot change status while action plan is pending review")

    values = dict(changes)
    intent = MEMBER_FULL_UPDATE
    if "end_date" in values:
        desired = values.pop("end_date")
        if desired is not None and desired != state.effective_deadline:
            if state.deadline_change_count >= MAX_DEADLINE_CHANGES:
                return Rejection(
                    HTTP_409_CONFLICT,
                    f"Deadline can only be changed {MAX_DEADLINE_CHANGES} times",
                )
            intent = DEADLINE_CHANGE_REQUEST
            values.update(
                request_deadline_date=desired,
                deadline_change_count=state.deadline_change_count + 1,
                review_status=PENDING,
                is_locked=True,
                leader_review_notes=None,
            )

    return Transition(intent, values)


def plan_delete(state: PlanSnapshot) -> Optional[Rejection]:
    if state.is_locked:
        return Rejection(HTTP_423_LOCKED, "Action plan is locked for review")
    return None


def request_plan_review(state: PlanSnapshot) -> Outcome:
    if state.review_status == APPROVED:
        return Rejection(HTTP_409_CONFLICT, "Action plan already approved")
    if state.review_status == PENDING:
        return Rejection(HTTP_409_CONFLICT, "Action plan is already pending review")
    return Transition(REVIEW_REQUEST, {"review_status": PENDING, "is_locked": True})


def cancel_plan_review(state: PlanSnapshot) -> Outcome:
    """Withdraw a review request; the deadline change counter is never refunded."""
    if state.review_status == APPROVED:
        return Rejection(HTTP_409_CONFLICT, "Action plan already approved")
    return Transition(
        REVIEW_CANCEL,
        {"review_status": None, "is_locked": False, "request_deadline_date": None},
    )


def leader_plan_decision(
    state: PlanSnapshot,
    decision: Optional[str],
    comment: Optional[str],
    reviewer: Reviewer,
    now: datetime,
) -> Transition:
    """Approval applies an outstanding deadline request; rejection discards it."""
    decision = normalize_decision(decision)
    values: Dict[str, Any] = {
        "review_status": decision,
        "leader_review_notes": comment,
        "is_locked": decision_locks(decision),
    }
    if decision == APPROVED and state.request_deadline_date:
        values["end_date"] = state.request_deadline_date
        values["request_deadline_date"] = None
    if decision == REJECTED:
        values["request_deadline_date"] = None
    return Transition(LEADER_REVIEW_DECISION, values, review_audit(decision, reviewer, now))


# Weekly reports


def weekly_report_creation(goal_status: Optional[str], plan_status: Optional[str]) -> Optional[Rejection]:
    """Members report only while the goal is In Progress and the plan is In Progress or Blocked."""
    plan_status = plan_status or ActionPlanStatus.NOT_STARTED.value
    if goal_status == GoalStatus.IN_PROGRESS.value and plan_status in REPORTABLE_PLAN_STATUSES:
        return None
    return Rejection(
        HTTP_409_CONFLICT,
        "Weekly reports can only be added when goal is In Progress and action plan is In Progress/Blocked",
    )


def weekly_report_edit(changes: Mapping[str, Any], is_leader: bool) -> Outcome:
    if "lead_feedback" in changes and not is_leader:
        return Rejection(HTTP_403_FORBIDDEN, "Forbidden (leader feedback is leader-only)")
    return Transition(LEADER_UPDATE if is_leader else MEMBER_FULL_UPDATE, dict(changes))
