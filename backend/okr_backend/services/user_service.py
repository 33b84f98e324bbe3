"""
User service - leader team scope, reviewer identity and user/team listings.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from okr_backend.core.exceptions import AuthenticationError, AuthorizationError
from okr_backend.core.logging import get_logger
from okr_backend.core.security import Identity
from okr_backend.db.repositories.user_repository import UserRepository, TeamRepository
from okr_backend.models.user import User
from okr_backend.schemas.common import PageInfo
from okr_backend.schemas.user import TeamResponse, UserResponse
from okr_backend.services.base_service import BaseService
from okr_backend.services.review_state_machine import Reviewer

logger = get_logger(__name__)


@dataclass(frozen=True)
class LeaderScope:
    """The single team a leader may read and act on."""
    leader_id: UUID
    team_id: UUID
    team_name: Optional[str] = None


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        team_id=user.team_id,
        team_name=user.team.name if user.team else None,
        role=user.role,
    )


class UserService(BaseService):
    """Service for users, teams and leader scope."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)
        self.team_repo = TeamRepository(session)

    async def resolve_leader_scope(
        self,
        identity: Optional[Identity],
        requested_team_id: Optional[UUID] = None,
    ) -> LeaderScope:
        """
        Load the leader's team.

        Raises:
            AuthenticationError: No identity
            AuthorizationError: Leader row or team missing, or another team requested
        """
        if identity is None:
            raise AuthenticationError("Missing leader identity")

        leader = await self.user_repo.get_with_team(identity.user_id)
        if leader is None:
            raise AuthorizationError("Leader team scope not found")
        if leader.team_id is None:
            raise AuthorizationError("Leader is not assigned to a team")
        if requested_team_id is not None and requested_team_id != leader.team_id:
            logger.info(
                "Leader requested another team",
                extra={"leader_id": str(identity.user_id), "team_id": str(requested_team_id)},
            )
            raise AuthorizationError("Forbidden (team scope)")

        return LeaderScope(
            leader_id=leader.id,
            team_id=leader.team_id,
            team_name=leader.team.name if leader.team else None,
        )

    async def ensure_in_scope(self, scope: LeaderScope, user_id: UUID) -> None:
        """Refuse member lookups outside the leader's team."""
        if not await self.user_repo.is_member_of_team(user_id, scope.team_id):
            raise AuthorizationError("Forbidden (team scope)")

    async def reviewer(self, identity: Identity) -> Reviewer:
        """Reviewer identity for audit columns; falls back to token claims."""
        user = await self.user_repo.get(identity.user_id)
        if user is None:
            return Reviewer(user_id=identity.user_id, email=identity.email)
        return Reviewer(user_id=user.id, email=user.email or identity.email, name=user.name)

    async def list_users(
        self,
        team_id: Optional[UUID] = None,
        search: Optional[str] = None,
        limit: int = 200,
        offset: int = 0,
    ) -> Tuple[List[UserResponse], PageInfo]:
        users = await self.user_repo.list_users(team_id=team_id, search=search, skip=offset, limit=limit)
        data = [to_user_response(user) for user in users]
        return data, PageInfo(limit=limit, offset=offset, returned=len(data))

    async def list_teams(self, team_id: Optional[UUID] = None) -> List[TeamResponse]:
        teams = await self.team_repo.list_teams(team_id=team_id)
        return [TeamResponse.model_validate(team) for team in teams]
