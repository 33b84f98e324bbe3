"""
Action plan Pydantic schemas for request/response validation.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from uuid import UUID
from enum import Enum


class ActionPlanStatusEnum(str, Enum):
    """Action plan status values."""
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    BLOCKED = "Blocked"
    COMPLETED = "Completed"


class ActionPlanCreate(BaseModel):
    """Schema for creating an action plan."""
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    status: ActionPlanStatusEnum = ActionPlanStatusEnum.NOT_STARTED
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    evidence_link: Optional[str] = None

    class Config:
        use_enum_values = True


class ActionPlanUpdate(BaseModel):
    """Schema for updating an action plan. Only supplied fields are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[ActionPlanStatusEnum] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    evidence_link: Optional[str] = None

    class Config:
        use_enum_values = True


class ActionPlanResponse(BaseModel):
    """Schema for action plan response."""
    id: UUID
    goal_id: UUID
    title: str
    description: Optional[str] = None
    status: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    request_deadline_date: Optional[date] = None
    deadline_change_count: int = 0
    evidence_link: Optional[str] = None
    review_status: Optional[str] = None
    is_locked: bool = False
    leader_review_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
