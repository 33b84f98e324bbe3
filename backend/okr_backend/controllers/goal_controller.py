"""
Goal controller.
"""

from typing import List
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from okr_backend.controllers.base_controller import BaseController
from okr_backend.core.security import Identity
from okr_backend.schemas.common import DataResponse, MessageResponse
from okr_backend.schemas.goal import (
    GoalCreate,
    GoalResponse,
    GoalWithVerificationResponse,
    MemberGoalUpdate,
)
from okr_backend.services.goal_service import GoalService


class GoalController(BaseController):
    """Controller for member goal operations."""

    def __init__(self, session: AsyncSession):
        self.goal_service = GoalService(session)

    async def create_goal(self, identity: Identity, goal_data: GoalCreate) -> DataResponse[GoalResponse]:
        return DataResponse(data=await self.goal_service.create_goal(identity, goal_data))

    async def list_goals(self, identity: Identity) -> DataResponse[List[GoalWithVerificationResponse]]:
        return DataResponse(data=await self.goal_service.list_goals(identity))

    async def update_goal(
        self,
        identity: Identity,
        goal_id: UUID,
        goal_data: MemberGoalUpdate,
    ) -> DataResponse[GoalResponse]:
        return DataResponse(data=await self.goal_service.update_goal(identity, goal_id, goal_data))

    async def delete_goal(self, identity: Identity, goal_id: UUID) -> MessageResponse:
        await self.goal_service.delete_goal(identity, goal_id)
        return MessageResponse(message="Goal deleted successfully")

    async def request_review(self, identity: Identity, goal_id: UUID) -> DataResponse[GoalResponse]:
        return DataResponse(data=await self.goal_service.request_review(identity, goal_id))

    async def cancel_review(self, identity: Identity, goal_id: UUID) -> DataResponse[GoalResponse]:
        return DataResponse(data=await self.goal_service.cancel_review(identity, goal_id))
