"""
Weekly report model - periodic progress notes against an action plan.
"""

from sqlalchemy import Column, Date, DateTime, Text, ForeignKey, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid

from okr_backend.db.base import Base


class WeeklyReport(Base):
    """Weekly report; goal_id is copied from the parent action plan on insert."""

    __tablename__ = "weekly_reports"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    action_plan_id = Column(UUID(as_uuid=True), ForeignKey("action_plans.id", ondelete="CASCADE"), nullable=False, index=True)
    goal_id = Column(UUID(as_uuid=True), ForeignKey("goals.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    work_done = Column(Text, nullable=True)
    blockers_challenges = Column(Text, nullable=True)
    next_week_plan = Column(Text, nullable=True)
    lead_feedback = Column(Text, nullable=True)  # leader-only
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    action_plan = relationship("ActionPlan", back_populates="weekly_reports")
