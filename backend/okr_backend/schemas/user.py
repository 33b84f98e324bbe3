"""
User and team schemas.
"""

from pydantic import BaseModel
from typing import Optional
from uuid import UUID


class TeamResponse(BaseModel):
    """Team as listed in dropdown filters."""
    id: UUID
    name: str

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    """User with the team name flattened in."""
    id: UUID
    email: Optional[str] = None
    name: Optional[str] = None
    team_id: Optional[UUID] = None
    team_name: Optional[str] = None
    role: Optional[str] = None
