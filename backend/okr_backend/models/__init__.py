"""
Database models.
Import all models here to ensure they're registered with Base.
"""

from okr_backend.models.user import Team, User
from okr_backend.models.review import ReviewStatus, ReviewAuditMixin, AUDIT_FIELDS
from okr_backend.models.goal import Goal, GoalProgressHistory, GoalStatus
from okr_backend.models.action_plan import ActionPlan, ActionPlanStatus, MAX_DEADLINE_CHANGES
from okr_backend.models.weekly_report import WeeklyReport
from okr_backend.models.verification import (
    VerificationTemplate,
    VerificationRequest,
    VerificationReview,
    VerificationStatus,
    VerificationResult,
)

__all__ = [
    "Team",
    "User",
    "ReviewStatus",
    "ReviewAuditMixin",
    "AUDIT_FIELDS",
    "Goal",
    "GoalProgressHistory",
    "GoalStatus",
    "ActionPlan",
    "ActionPlanStatus",
    "MAX_DEADLINE_CHANGES",
    "WeeklyReport",
    "VerificationTemplate",
    "VerificationRequest",
    "VerificationReview",
    "VerificationStatus",
    "VerificationResult",
]
