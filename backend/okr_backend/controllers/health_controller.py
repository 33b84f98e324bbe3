"""
Health controller.
Coordinates health service to return health status.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from okr_backend.controllers.base_controller import BaseController
from okr_backend.schemas.health import HealthResponse, LivenessResponse
from okr_backend.services.health_service import HealthService


class HealthController(BaseController):
    """Controller for health check operations."""

    def __init__(self, health_service: HealthService = None):
        self.health_service = health_service or HealthService()

    def get_liveness(self) -> LivenessResponse:
        return self.health_service.get_liveness()

    async def get_health(self, session: AsyncSession) -> HealthResponse:
        """
        Get system health status.

        Returns:
            HealthResponse with status, uptime, and checks
        """
        return await self.health_service.get_health(session)
