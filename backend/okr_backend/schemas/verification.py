"""
Verification Pydantic schemas for request/response validation.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Any, Dict
from datetime import datetime
from uuid import UUID
from enum import Enum


class VerificationResultEnum(str, Enum):
    """Leader verdict values."""
    PASS = "Pass"
    NEEDS_WORK = "NeedsWork"
    FAIL = "Fail"


class VerificationTemplateCreate(BaseModel):
    """Schema for creating a verification template."""
    name: str = Field(..., min_length=1, max_length=255)
    category: Optional[str] = None
    scoring_type: str = "rubric"
    criteria: List[Any] = []
    required_evidence: List[Any] = []
    minimum_bar: Optional[Dict[str, Any]] = None


class VerificationTemplateResponse(BaseModel):
    """Schema for verification template response."""
    id: UUID
    name: str
    category: Optional[str] = None
    scoring_type: str
    criteria: List[Any] = []
    required_evidence: List[Any] = []
    minimum_bar: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class VerificationRequestCreate(BaseModel):
    """Schema for raising a verification request on an owned goal."""
    goal_id: UUID
    scope: str = Field(..., min_length=1)
    action_plan_id: Optional[UUID] = None
    template_id: Optional[UUID] = None
    evidence_links: List[Any] = []
    rubric_snapshot: Dict[str, Any] = {}
    member_notes: Optional[str] = None


class VerificationReviewCreate(BaseModel):
    """Schema for a leader review of a verification request."""
    result: VerificationResultEnum
    scores: Dict[str, Any] = {}
    leader_feedback: Optional[str] = None

    class Config:
        use_enum_values = True


class VerificationReviewResponse(BaseModel):
    """Schema for verification review response."""
    id: UUID
    request_id: UUID
    leader_id: Optional[UUID] = None
    result: str
    scores: Dict[str, Any] = {}
    leader_feedback: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VerificationGoalInfo(BaseModel):
    """Goal fields embedded in a verification request."""
    id: UUID
    name: str
    year: int
    user_id: UUID

    class Config:
        from_attributes = True


class VerificationRequestResponse(BaseModel):
    """Schema for verification request response."""
    id: UUID
    requester_id: UUID
    goal_id: UUID
    action_plan_id: Optional[UUID] = None
    template_id: Optional[UUID] = None
    scope: str
    evidence_links: List[Any] = []
    rubric_snapshot: Dict[str, Any] = {}
    member_notes: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    member_name: Optional[str] = None
    member_email: Optional[str] = None
    team_id: Optional[UUID] = None
    team_name: Optional[str] = None
    goal: Optional[VerificationGoalInfo] = None
    review: Optional[VerificationReviewResponse] = None


class VerificationReviewResult(BaseModel):
    """Body of the review endpoint response."""
    review: VerificationReviewResponse
