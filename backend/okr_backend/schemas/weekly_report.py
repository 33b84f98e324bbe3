"""
Weekly report Pydantic schemas for request/response validation.
"""

from pydantic import BaseModel
from typing import Optional
from datetime import date as Date, datetime
from uuid import UUID


class WeeklyReportCreate(BaseModel):
    """Schema for creating a weekly report."""
    date: Date
    work_done: Optional[str] = None
    blockers_challenges: Optional[str] = None
    next_week_plan: Optional[str] = None
    lead_feedback: Optional[str] = None


class WeeklyReportUpdate(BaseModel):
    """Schema for updating a weekly report."""
    date: Optional[Date] = None
    work_done: Optional[str] = None
    blockers_challenges: Optional[str] = None
    next_week_plan: Optional[str] = None
    lead_feedback: Optional[str] = None


class WeeklyReportResponse(BaseModel):
    """Schema for weekly report response."""
    id: UUID
    action_plan_id: UUID
    goal_id: UUID
    date: Date
    work_done: Optional[str] = None
    blockers_challenges: Optional[str] = None
    next_week_plan: Optional[str] = None
    lead_feedback: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
