"""CRUD operations for the UserLedger model."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pagemeter.crud._base import CRUDBase
from pagemeter.models.user_ledger import UserLedger


class CRUDUserLedger(CRUDBase[UserLedger]):
    """CRUD operations for the UserLedger model."""

    async def get_for_update(self, db: AsyncSession, *, user_id: UUID) -> Optional[UserLedger]:
        """Read a ledger row and hold its row lock until the transaction ends.

        Concurrent charges for the same user queue on this lock; other users
        are unaffected.
        """
        query = select(UserLedger).where(UserLedger.user_id == user_id).with_for_update()
        return await self._first(db, query)

    async def apply_balances(
        self,
        db: AsyncSession,
        *,
        db_obj: UserLedger,
        free_pages_remaining: int,
        credit_balance,
        pages_used_total: int,
    ) -> UserLedger:
        """Write new balance values onto a locked row."""
        db_obj.free_pages_remaining = free_pages_remaining
        db_obj.credit_balance = credit_balance
        db_obj.pages_used_total = pages_used_total
        await db.flush()
        return db_obj


user_ledger = CRUDUserLedger(UserLedger)
