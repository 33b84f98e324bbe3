"""
Health service.
Provides health check functionality.
"""

import time
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from okr_backend.core.config import settings
from okr_backend.db.repositories.health_repository import HealthRepository
from okr_backend.schemas.health import HealthResponse, LivenessResponse
from okr_backend.services.base_service import BaseService


class HealthService(BaseService):
    """Service for health check operations."""

    def __init__(self):
        self.start_time = time.time()

    def get_liveness(self) -> LivenessResponse:
        """Process liveness; never touches the database."""
        return LivenessResponse(
            ok=True,
            service=settings.SERVICE_NAME,
            ts=datetime.now(timezone.utc).isoformat(),
        )

    async def get_health(self, session: AsyncSession) -> HealthResponse:
        """
        Get system health status.

        Returns:
            HealthResponse with status, uptime, and checks
        """
        uptime_seconds = int(time.time() - self.start_time)
        uptime_str = f"PT{uptime_seconds}S"  # ISO 8601 duration format

        checks = {}
        db_status = await HealthRepository(session).check_database()
        checks["database"] = "ok" if db_status else "error"

        status = "ok" if all(check == "ok" for check in checks.values()) else "degraded"

        return HealthResponse(
            status=status,
            uptime=uptime_str,
            checks=checks,
        )
