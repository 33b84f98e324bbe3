"""
API v1 router that aggregates all endpoint routers.
All routes require a bearer token except health.
"""

from fastapi import APIRouter

from okr_backend.api.v1.endpoints import (
    health,
    goals,
    action_plans,
    verifications,
    leader,
    manager,
)

api_router = APIRouter()

# Public routes (no authentication required)
api_router.include_router(health.router, tags=["health"])

# Protected routes; each router carries its own identity and role dependencies
api_router.include_router(goals.router, prefix="/goals", tags=["goals"])
api_router.include_router(action_plans.router, tags=["action-plans"])
api_router.include_router(verifications.router, tags=["verification"])
api_router.include_router(leader.router, prefix="/leader", tags=["leader"])
api_router.include_router(manager.router, prefix="/manager", tags=["manager"])
