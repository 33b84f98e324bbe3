"""
Caller identity and bearer token verification against the Cognito user pool.
Only {user_id, groups} flows past this module; the rest of the code never sees tokens.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Optional, Union
from uuid import UUID

import httpx
from jose import jwt, JWTError

from okr_backend.core.config import settings
from okr_backend.core.logging import get_logger

logger = get_logger(__name__)

GROUP_MEMBER = "member"
GROUP_LEADER = "leader"
GROUP_MANAGER = "manager"


@dataclass(frozen=True)
class Identity:
    """Authenticated caller."""
    user_id: UUID
    groups: FrozenSet[str] = field(default_factory=frozenset)
    email: Optional[str] = None

    @property
    def is_leader(self) -> bool:
        return GROUP_LEADER in self.groups

    @property
    def is_manager(self) -> bool:
        return GROUP_MANAGER in self.groups

    @property
    def is_privileged(self) -> bool:
        """Leaders and managers bypass ownership checks."""
        return self.is_leader or self.is_manager


def normalize_groups(raw: Union[None, str, Iterable[str]]) -> FrozenSet[str]:
    """Accept the groups claim as a list or a single string."""
    if raw is None:
        return frozenset()
    if isinstance(raw, str):
        return frozenset([raw])
    return frozenset(str(g) for g in raw)


class InvalidTokenError(Exception):
    """Token could not be verified."""


# JWKS cache: (fetched_at, keys)
_jwks_cache: Optional[tuple] = None


async def _get_jwks() -> Dict[str, Any]:
    """Fetch the user pool signing keys, reusing them for JWKS_CACHE_SECONDS."""
    global _jwks_cache
    if _jwks_cache is not None and time.monotonic() - _jwks_cache[0] < settings.JWKS_CACHE_SECONDS:
        return _jwks_cache[1]

    async with httpx.AsyncClient(timeout=10.0) as client:
        response = await client.get(settings.COGNITO_JWKS_URL)
        response.raise_for_status()
        jwks = response.json()

    _jwks_cache = (time.monotonic(), jwks)
    logger.info("JWKS refreshed", extra={"keys": len(jwks.get("keys", []))})
    return jwks


async def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify an RS256 token issued by the configured user pool.

    Args:
        token: Raw bearer token

    Returns:
        Verified claims

    Raises:
        InvalidTokenError: If the signature, issuer or audience check fails
    """
    try:
        header = jwt.get_unverified_header(token)
    except JWTError as e:
        raise InvalidTokenError(str(e)) from e

    try:
        jwks = await _get_jwks()
    except httpx.HTTPError as e:
        logger.error("JWKS fetch failed", extra={"error": str(e)})
        raise InvalidTokenError("JWKS unavailable") from e

    key = next((k for k in jwks.get("keys", []) if k.get("kid") == header.get("kid")), None)
    if key is None:
        raise InvalidTokenError("JWKS signing key not found")

    try:
        claims = jwt.decode(
            token,
            key,
            algorithms=["RS256"],
            issuer=settings.COGNITO_ISSUER,
            options={"verify_aud": False},
        )
    except JWTError as e:
        raise InvalidTokenError(str(e)) from e

    if settings.COGNITO_APP_CLIENT_ID:
        audience = claims.get("aud") or claims.get("client_id")
        if audience != settings.COGNITO_APP_CLIENT_ID:
            raise InvalidTokenError("Token audience mismatch")

    return claims


def identity_from_claims(claims: Dict[str, Any]) -> Identity:
    """Build an Identity from verified claims."""
    subject = claims.get("sub")
    if not subject:
        raise InvalidTokenError("Token missing subject")
    try:
        user_id = UUID(str(subject))
    except ValueError as e:
        raise InvalidTokenError("Invalid subject in token") from e

    return Identity(
        user_id=user_id,
        groups=normalize_groups(claims.get("cognito:groups")),
        email=claims.get("email"),
    )
