"""
Base service class.
Services contain business logic and coordinate repositories.
"""

from abc import ABC
from typing import Any, Dict, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from okr_backend.core.exceptions import SchemaCompatibilityError, error_for_status
from okr_backend.core.logging import get_logger
from okr_backend.db.repositories.base_repository import BaseRepository

logger = get_logger(__name__)


def raise_for_outcome(outcome: Optional[Any]) -> None:
    """
    Raise the matching AppException for a refused guard or state machine outcome.

    Accepts anything with `allowed`, `status_code` and `message`; None and allowed
    outcomes pass through.
    """
    if outcome is None or outcome.allowed:
        return
    raise error_for_status(outcome.status_code, outcome.message)


class BaseService(ABC):
    """Base service class for all services."""

    session: AsyncSession

    def ensure(self, outcome: Optional[Any]) -> None:
        raise_for_outcome(outcome)

    async def persist_transition(self, repo: BaseRepository, entity_id: UUID, transition: Any) -> Any:
        """
        Write a review transition.

        Audit columns are optional: when the table lacks them the unit of work is
        rolled back and the update is retried once with the base fields only.
        """
        if not transition.audit:
            return await repo.update(entity_id, **transition.values)
        try:
            return await repo.update_with_audit(entity_id, transition.values, transition.audit)
        except SchemaCompatibilityError as e:
            logger.warning(
                "Review audit columns unavailable, retrying without them",
                extra={"table": e.table, "entity_id": str(entity_id), "error": e.message},
            )
            await self.session.rollback()
            return await repo.update(entity_id, **transition.values)


def drop_required_nulls(changes: Dict[str, Any], required: Tuple[str, ...]) -> Dict[str, Any]:
    """Ignore explicit nulls for NOT NULL columns in a partial update."""
    return {key: value for key, value in changes.items() if not (key in required and value is None)}
