"""
Team and user models.
A user's id is the identity provider subject; team membership is the only scope a leader has.
"""

from sqlalchemy import Column, String, ForeignKey, DateTime, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid

from okr_backend.db.base import Base


class Team(Base):
    """Team model."""

    __tablename__ = "teams"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    # Relationships
    users = relationship("User", back_populates="team")


class User(Base):
    """User model - one row per identity provider subject."""

    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, index=True)
    email = Column(String(255), nullable=True, index=True)
    name = Column(String(255), nullable=True)
    role = Column(String(50), nullable=True)
    team_id = Column(UUID(as_uuid=True), ForeignKey("teams.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    # Relationships
    team = relationship("Team", back_populates="users")
    goals = relationship("Goal", back_populates="user")
