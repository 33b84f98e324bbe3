"""
Goal Pydantic schemas for request/response validation.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from uuid import UUID

from okr_backend.schemas.action_plan import ActionPlanResponse


class GoalBase(BaseModel):
    """Base goal schema with the SMART fields."""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    specific: Optional[str] = None
    measurable: Optional[str] = None
    achievable: Optional[str] = None
    relevant: Optional[str] = None
    start_date: Optional[date] = None
    time_bound: Optional[date] = None


class GoalCreate(GoalBase):
    """Schema for creating a goal. The owner is always the caller."""
    year: int
    progress: Optional[float] = 0
    status: Optional[str] = Field(None, max_length=50)


class MemberGoalUpdate(BaseModel):
    """
    Owner update.

    Keys not listed here (e.g. user_id, is_locked) are never written, but they are
    kept in model_extra so an approved goal can refuse them.
    """
    model_config = {"extra": "allow"}

    year: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    specific: Optional[str] = None
    measurable: Optional[str] = None
    achievable: Optional[str] = None
    relevant: Optional[str] = None
    start_date: Optional[date] = None
    time_bound: Optional[date] = None
    progress: Optional[float] = None
    status: Optional[str] = Field(None, max_length=50)


class LeaderGoalUpdate(MemberGoalUpdate):
    """Leader update; may also set review notes."""
    model_config = {"extra": "ignore"}

    leader_review_notes: Optional[str] = None


class ReviewDecisionRequest(BaseModel):
    """Leader review decision body."""
    status: Optional[str] = None
    comment: Optional[str] = None


class GoalResponse(BaseModel):
    """Schema for goal response."""
    id: UUID
    user_id: UUID
    year: int
    name: str
    description: Optional[str] = None
    specific: Optional[str] = None
    measurable: Optional[str] = None
    achievable: Optional[str] = None
    relevant: Optional[str] = None
    start_date: Optional[date] = None
    time_bound: Optional[date] = None
    progress: int = 0
    status: str
    review_status: Optional[str] = None
    is_locked: bool = False
    leader_review_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VerificationSummary(BaseModel):
    """Latest verification request of a goal."""
    verification_request_id: Optional[UUID] = None
    verification_status: str = "NotRequested"
    verification_requested_at: Optional[datetime] = None
    verification_result: Optional[str] = None
    verification_reviewed_at: Optional[datetime] = None


class GoalWithVerificationResponse(GoalResponse, VerificationSummary):
    """Goal annotated with its latest verification request."""
    pass


class GoalWithActionPlansResponse(GoalResponse):
    """Goal with nested action plans."""
    action_plans: List[ActionPlanResponse] = []


class LeaderGoalResponse(GoalWithVerificationResponse):
    """Goal as seen by a leader: nested plans, owner and projected team."""
    action_plans: List[ActionPlanResponse] = []
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    team_id: Optional[UUID] = None
    team: Optional[str] = None
