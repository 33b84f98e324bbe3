"""
Goal API endpoints for the owning member.
"""

from typing import List
from fastapi import Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from okr_backend.api.v1.middleware import get_current_identity
from okr_backend.api.v1.router_config import create_protected_router
from okr_backend.controllers.goal_controller import GoalController
from okr_backend.core.security import Identity
from okr_backend.db.session import get_db
from okr_backend.schemas.common import DataResponse, MessageResponse
from okr_backend.schemas.goal import (
    GoalCreate,
    GoalResponse,
    GoalWithVerificationResponse,
    MemberGoalUpdate,
)

router = create_protected_router()


@router.post("", response_model=DataResponse[GoalResponse], status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal_data: GoalCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[GoalResponse]:
    """Create a goal owned by the caller."""
    controller = GoalController(db)
    return await controller.create_goal(identity, goal_data)


@router.get("", response_model=DataResponse[List[GoalWithVerificationResponse]])
async def list_goals(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[List[GoalWithVerificationResponse]]:
    """List the caller's goals with their latest verification status."""
    controller = GoalController(db)
    return await controller.list_goals(identity)


@router.put("/{goal_id}", response_model=DataResponse[GoalResponse])
async def update_goal(
    goal_id: UUID,
    goal_data: MemberGoalUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[GoalResponse]:
    """Update an owned goal."""
    controller = GoalController(db)
    return await controller.update_goal(identity, goal_id, goal_data)


@router.delete("/{goal_id}", response_model=MessageResponse)
async def delete_goal(
    goal_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Delete an owned, unlocked goal."""
    controller = GoalController(db)
    return await controller.delete_goal(identity, goal_id)


@router.post("/{goal_id}/request-review", response_model=DataResponse[GoalResponse])
async def request_goal_review(
    goal_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[GoalResponse]:
    """Submit a goal for leader review."""
    controller = GoalController(db)
    return await controller.request_review(identity, goal_id)


@router.post("/{goal_id}/cancel-review", response_model=DataResponse[GoalResponse])
async def cancel_goal_review(
    goal_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[GoalResponse]:
    """Withdraw a pending review request."""
    controller = GoalController(db)
    return await controller.cancel_review(identity, goal_id)
