"""
Database bootstrapping for local development.
Production schemas are managed outside the service.
"""

from okr_backend.db.base import Base
from okr_backend.db import session as db_session
from okr_backend.core.config import settings
from okr_backend.core.logging import get_logger

import okr_backend.models  # noqa: F401  (registers every table on Base.metadata)

logger = get_logger(__name__)


async def create_tables() -> None:
    """Create all tables when DB_AUTO_CREATE is enabled."""
    if not settings.DB_AUTO_CREATE:
        logger.info("Tables creation skipped (DB_AUTO_CREATE disabled)")
        return

    async with db_session.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables initialized", extra={"tables": len(Base.metadata.tables)})
