"""CRUD operations for the ChargeEvent model."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pagemeter.crud._base import CRUDBase
from pagemeter.models.charge_event import ChargeEvent


class CRUDChargeEvent(CRUDBase[ChargeEvent]):
    """CRUD operations for the ChargeEvent model.

    Events are append-only; there is no update or delete.
    """

    def _filtered(self, query, *, user_id: UUID, action: Optional[str], since: Optional[datetime]):
        query = query.where(ChargeEvent.user_id == user_id)
        if action is not None:
            query = query.where(ChargeEvent.action == action)
        if since is not None:
            query = query.where(ChargeEvent.created_at >= since)
        return query

    async def get_page(
        self,
        db: AsyncSession,
        *,
        user_id: UUID,
        offset: int,
        limit: int,
        action: Optional[str] = None,
    ) -> list[ChargeEvent]:
        """Get events for a user, newest commit first.

        Args:
            db: Database session
            user_id: Owner of the events
            offset: Rows to skip
            limit: Maximum rows to return
            action: Optional action filter

        Returns:
            Events ordered by sequence descending
        """
        query = self._filtered(select(ChargeEvent), user_id=user_id, action=action, since=None)
        query = query.order_by(ChargeEvent.sequence.desc()).offset(offset).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def count(
        self,
        db: AsyncSession,
        *,
        user_id: UUID,
        action: Optional[str] = None,
        since: Optional[datetime] = None,
    ) -> int:
        """Count events for a user."""
        query = self._filtered(
            select(func.count()).select_from(ChargeEvent),
            user_id=user_id,
            action=action,
            since=since,
        )
        result = await db.execute(query)
        return int(result.scalar_one())


charge_event = CRUDChargeEvent(ChargeEvent)
