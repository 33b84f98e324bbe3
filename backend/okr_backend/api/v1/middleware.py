"""
API middleware for authentication and common concerns.
Centralized identity and role enforcement for all protected routes.
"""

import time

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from okr_backend.core.config import settings
from okr_backend.core.logging import get_logger
from okr_backend.core.security import Identity, InvalidTokenError, decode_access_token, identity_from_claims

logger = get_logger(__name__)

security = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Identity:
    """
    Centralized authentication dependency.

    Usage:
        @router.get("/endpoint")
        async def my_endpoint(
            identity: Identity = Depends(get_current_identity)
        ):
            ...

    Returns:
        Identity of the caller

    Raises:
        HTTPException: 401 if the bearer token is missing or invalid
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        claims = await decode_access_token(credentials.credentials)
        return identity_from_claims(claims)
    except InvalidTokenError as e:
        logger.info("Rejected bearer token", extra={"reason": str(e)})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def require_leader(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_leader:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden (Leader only)")
    return identity


async def require_manager(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_manager:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden (Manager only)")
    return identity


async def require_leader_or_manager(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_privileged:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden (Leader or Manager only)")
    return identity


async def log_request_timing(request: Request, call_next):
    """Log METHOD path -> status (ms); slow requests are logged at WARNING."""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000.0

    line = f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.0f}ms)"
    extra = {"method": request.method, "path": request.url.path, "status_code": response.status_code, "ms": round(elapsed_ms, 1)}
    if elapsed_ms >= settings.SLOW_MS:
        logger.warning(f"[SLOW] {line}", extra=extra)
    else:
        logger.info(f"[REQ] {line}", extra=extra)
    return response
