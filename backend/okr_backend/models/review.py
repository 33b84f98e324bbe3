"""
Review workflow vocabulary shared by goals and action plans.
"""

from datetime import datetime
from typing import Optional
import enum
import uuid

from sqlalchemy import DateTime, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column


class ReviewStatus(str, enum.Enum):
    """Leader review status. NULL in the database means review was never requested."""
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


# Optional audit columns; older databases may not have them.
AUDIT_FIELDS = (
    "reviewed_by",
    "reviewed_by_email",
    "reviewed_by_name",
    "reviewed_at",
    "approved_at",
    "rejected_at",
)


class ReviewAuditMixin:
    """
    Reviewer audit columns, deferred so that plain reads never select them.
    """
    reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True, deferred=True)
    reviewed_by_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, deferred=True)
    reviewed_by_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, deferred=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, deferred=True)
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, deferred=True)
    rejected_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, deferred=True)
