"""
Health check endpoint.
Returns system status and uptime information.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from okr_backend.api.v1.router_config import create_public_router
from okr_backend.db.session import get_db
from okr_backend.deps.di_container import get_container
from okr_backend.schemas.health import HealthResponse

router = create_public_router()


@router.get("/health", response_model=HealthResponse)
async def get_health(
    db: AsyncSession = Depends(get_db),
) -> HealthResponse:
    """
    Health check endpoint.
    Returns system status, uptime, and a database probe.
    """
    container = get_container()
    controller = container.health_controller()
    return await controller.get_health(db)
