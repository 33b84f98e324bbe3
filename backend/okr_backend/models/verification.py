"""
Verification models: templates, member requests and the leader review of each request.
"""

from sqlalchemy import Column, String, DateTime, Text, JSON, ForeignKey, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
import enum

from okr_backend.db.base import Base


class VerificationStatus(str, enum.Enum):
    """Verification request status."""
    PENDING = "Pending"
    REVIEWED = "Reviewed"


class VerificationResult(str, enum.Enum):
    """Leader verdict on a verification request."""
    PASS = "Pass"
    NEEDS_WORK = "NeedsWork"
    FAIL = "Fail"


class VerificationTemplate(Base):
    """Reusable rubric for verification requests."""

    __tablename__ = "verification_templates"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True)
    scoring_type = Column(String(50), nullable=False, default="rubric")
    criteria = Column(JSON, nullable=False, default=list)
    required_evidence = Column(JSON, nullable=False, default=list)
    minimum_bar = Column(JSON, nullable=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())


class VerificationRequest(Base):
    """Evidence-check request raised by a goal owner."""

    __tablename__ = "verification_requests"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    requester_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    goal_id = Column(UUID(as_uuid=True), ForeignKey("goals.id", ondelete="CASCADE"), nullable=False, index=True)
    action_plan_id = Column(UUID(as_uuid=True), ForeignKey("action_plans.id", ondelete="SET NULL"), nullable=True)
    template_id = Column(UUID(as_uuid=True), ForeignKey("verification_templates.id", ondelete="SET NULL"), nullable=True)
    scope = Column(Text, nullable=False)
    evidence_links = Column(JSON, nullable=False, default=list)
    rubric_snapshot = Column(JSON, nullable=False, default=dict)
    member_notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=VerificationStatus.PENDING.value, index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    goal = relationship("Goal")
    requester = relationship("User")
    review = relationship(
        "VerificationReview",
        back_populates="request",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class VerificationReview(Base):
    """At most one review per request."""

    __tablename__ = "verification_reviews"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    request_id = Column(UUID(as_uuid=True), ForeignKey("verification_requests.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    leader_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    result = Column(String(20), nullable=False)
    scores = Column(JSON, nullable=False, default=dict)
    leader_feedback = Column(Text, nullable=True)
    reviewed_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    request = relationship("VerificationRequest", back_populates="review")
