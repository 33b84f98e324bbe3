"""
Observability hooks.
Exceptions that reach the global handlers are reported here.
"""

from fastapi import Request
import logging

from okr_backend.core.config import settings

logger = logging.getLogger(__name__)


def setup_observability() -> None:
    """Announce the service identity used in exception reports."""
    logger.info(
        "Setting up observability",
        extra={
            "service_name": settings.SERVICE_NAME,
            "version": settings.VERSION,
        },
    )


def record_exception(exc: Exception, request: Request) -> None:
    """
    Record an exception that escaped to the handler boundary.

    Args:
        exc: The exception that occurred
        request: The FastAPI request object
    """
    logger.error(
        f"Exception recorded: {type(exc).__name__}",
        extra={
            "exception_message": str(exc),
            "path": request.url.path,
            "method": request.method,
        },
    )
