"""
Action plan model - concrete tasks with deadlines under a goal.
"""

from sqlalchemy import Column, String, Integer, Boolean, Date, DateTime, Text, ForeignKey, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
import enum

from okr_backend.db.base import Base
from okr_backend.models.review import ReviewAuditMixin

MAX_DEADLINE_CHANGES = 3


class ActionPlanStatus(str, enum.Enum):
    """Action plan status enumeration."""
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    BLOCKED = "Blocked"
    COMPLETED = "Completed"


class ActionPlan(ReviewAuditMixin, Base):
    """Action plan model."""

    __tablename__ = "action_plans"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    goal_id = Column(UUID(as_uuid=True), ForeignKey("goals.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=ActionPlanStatus.NOT_STARTED.value, index=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)  # approved deadline
    request_deadline_date = Column(Date, nullable=True)  # proposed deadline awaiting approval
    deadline_change_count = Column(Integer, nullable=False, default=0)
    evidence_link = Column(Text, nullable=True)
    review_status = Column(String(20), nullable=True)
    is_locked = Column(Boolean, nullable=False, default=False)
    leader_review_notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    goal = relationship("Goal", back_populates="action_plans")
    weekly_reports = relationship(
        "WeeklyReport",
        back_populates="action_plan",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
