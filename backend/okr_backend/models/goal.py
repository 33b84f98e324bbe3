"""
Goal models: yearly objectives and their progress history.
"""

from datetime import datetime
from sqlalchemy import Column, String, Integer, Boolean, Date, DateTime, Text, ForeignKey, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
import enum

from okr_backend.db.base import Base
from okr_backend.models.review import ReviewAuditMixin


class GoalStatus(str, enum.Enum):
    """Well-known goal status labels (the column itself is free-form)."""
    DRAFT = "Draft"
    NOT_STARTED = "Not started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class Goal(ReviewAuditMixin, Base):
    """Goal model - owned by exactly one user, scoped to a year."""

    __tablename__ = "goals"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    specific = Column(Text, nullable=True)
    measurable = Column(Text, nullable=True)
    achievable = Column(Text, nullable=True)
    relevant = Column(Text, nullable=True)
    start_date = Column(Date, nullable=True)
    time_bound = Column(Date, nullable=True)  # target end date
    progress = Column(Integer, nullable=False, default=0)
    status = Column(String(50), nullable=False, default=GoalStatus.NOT_STARTED.value)
    review_status = Column(String(20), nullable=True, index=True)
    is_locked = Column(Boolean, nullable=False, default=False)
    leader_review_notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="goals")
    action_plans = relationship(
        "ActionPlan",
        back_populates="goal",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ActionPlan.created_at",
    )
    progress_history = relationship(
        "GoalProgressHistory",
        back_populates="goal",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class GoalProgressHistory(Base):
    """Append-only progress snapshots."""

    __tablename__ = "goal_progress_history"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    goal_id = Column(UUID(as_uuid=True), ForeignKey("goals.id", ondelete="CASCADE"), nullable=False, index=True)
    progress = Column(Integer, nullable=False)
    recorded_at = Column(DateTime, nullable=False, default=datetime.now, index=True)

    # Relationships
    goal = relationship("Goal", back_populates="progress_history")
