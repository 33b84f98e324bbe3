"""
Health check response schemas.
"""

from pydantic import BaseModel
from typing import Dict, Any


class HealthResponse(BaseModel):
    """Health check response schema."""
    status: str
    uptime: str
    checks: Dict[str, Any] = {}


class LivenessResponse(BaseModel):
    """Process liveness; never touches the database."""
    ok: bool = True
    service: str
    ts: str
