"""SQL-backed usage stores wrapping crud.user_ledger and crud.charge_event.

Each method opens its own session from the injected factory. Database and
network failures surface as StoreUnavailableError; nothing here retries.
"""

import asyncio
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pagemeter import crud
from pagemeter.core.logging import logger
from pagemeter.domains.usage.exceptions import LedgerNotFoundError, StoreUnavailableError
from pagemeter.domains.usage.protocols import (
    ChargeEventStoreProtocol,
    ChargePlan,
    LedgerStoreProtocol,
)
from pagemeter.domains.usage.types import (
    ChargeEventRecord,
    ChargePlanOutcome,
    LedgerSnapshot,
    LedgerUpdate,
    TransactionAbort,
    UsageAction,
)
from pagemeter.models.charge_event import ChargeEvent
from pagemeter.models.user_ledger import UserLedger

_STORE_ERRORS = (SQLAlchemyError, OSError)


def _to_snapshot(row: UserLedger) -> LedgerSnapshot:
    return LedgerSnapshot(
        user_id=row.user_id,
        free_pages_remaining=row.free_pages_remaining,
        credit_balance=Decimal(row.credit_balance),
        pages_used_total=row.pages_used_total,
        subscription_type=row.subscription_type,
    )


def _event_values(event: ChargeEventRecord) -> dict:
    return {
        "id": event.id,
        "user_id": event.user_id,
        "action": event.action.value,
        "pages_charged": event.pages_charged,
        "free_pages_consumed": event.free_pages_consumed,
        "credits_charged": event.credits_charged,
        "pages_before": event.pages_before,
        "pages_after": event.pages_after,
        "processing_record_id": event.processing_record_id,
        "client_ip": event.client_ip,
        "client_user_agent": event.client_user_agent,
        "event_metadata": dict(event.metadata),
    }


def _to_record(row: ChargeEvent) -> ChargeEventRecord:
    return ChargeEventRecord(
        id=row.id,
        user_id=row.user_id,
        action=UsageAction(row.action),
        pages_charged=row.pages_charged,
        free_pages_consumed=row.free_pages_consumed,
        credits_charged=Decimal(row.credits_charged),
        pages_before=row.pages_before,
        pages_after=row.pages_after,
        processing_record_id=row.processing_record_id,
        client_ip=str(row.client_ip) if row.client_ip is not None else None,
        client_user_agent=row.client_user_agent,
        metadata=dict(row.event_metadata or {}),
        sequence=row.sequence,
        created_at=row.created_at,
    )


class _RollbackSignal(Exception):
    """Raised inside ``session.begin()`` to roll back and hand back the abort."""

    def __init__(self, outcome: TransactionAbort):
        self.outcome = outcome
        super().__init__(outcome.reason)


class SqlLedgerStore(LedgerStoreProtocol):
    """Ledger store on PostgreSQL.

    Charges lock the ledger row with SELECT ... FOR UPDATE under READ
    COMMITTED, so concurrent charges for one user serialize while other
    users proceed in parallel.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        transaction_timeout: float,
        free_trial_pages: int,
    ) -> None:
        """Initialize with a session factory and the charge deadline in seconds."""
        self._session_factory = session_factory
        self._timeout = transaction_timeout
        self._free_trial_pages = free_trial_pages

    async def read_ledger(self, user_id: UUID) -> LedgerSnapshot:
        """Read the current ledger without locking it."""
        try:
            async with self._session_factory() as db:
                row = await crud.user_ledger.get(db, user_id)
        except _STORE_ERRORS as e:
            logger.error(f"Ledger read failed for user {user_id}: {e}")
            raise StoreUnavailableError() from e
        if row is None:
            raise LedgerNotFoundError(user_id)
        return _to_snapshot(row)

    async def run_charge_transaction(self, user_id: UUID, plan: ChargePlan) -> ChargePlanOutcome:
        """Lock, plan and apply in one transaction, then commit.

        The charge deadline bounds lock acquisition, the plan and the writes.
        COMMIT runs outside it, so a slow commit acknowledgement is never
        reported as a timeout. The commit is bounded by the driver's
        command timeout instead.
        """
        try:
            return await self._run_locked(user_id, plan)
        except _STORE_ERRORS as e:
            logger.error(f"Charge transaction failed for user {user_id}: {e}")
            raise StoreUnavailableError() from e

    async def _run_locked(self, user_id: UUID, plan: ChargePlan) -> ChargePlanOutcome:
        async with self._session_factory() as db:
            try:
                async with db.begin():
                    outcome = await self._plan_before_deadline(db, user_id, plan)
                    if isinstance(outcome, TransactionAbort):
                        raise _RollbackSignal(outcome)
            except _RollbackSignal as signal:
                return signal.outcome
        return outcome

    async def _plan_before_deadline(
        self, db: AsyncSession, user_id: UUID, plan: ChargePlan
    ) -> ChargePlanOutcome:
        try:
            async with asyncio.timeout(self._timeout):
                await self._set_local_timeouts(db)
                row = await crud.user_ledger.get_for_update(db, user_id=user_id)
                if row is None:
                    raise LedgerNotFoundError(user_id)

                outcome = plan(_to_snapshot(row))
                if not isinstance(outcome, TransactionAbort):
                    await self._apply(db, row, outcome)
                return outcome
        except TimeoutError as e:
            logger.warning(
                f"Charge transaction for user {user_id} exceeded {self._timeout}s, rolled back"
            )
            raise StoreUnavailableError("Charge transaction timed out") from e

    async def _set_local_timeouts(self, db: AsyncSession) -> None:
        # SET does not accept bind parameters; the value is an int we format.
        timeout_ms = max(1, int(self._timeout * 1000))
        await db.execute(text(f"SET LOCAL lock_timeout = '{timeout_ms}ms'"))
        await db.execute(text(f"SET LOCAL statement_timeout = '{timeout_ms}ms'"))

    async def _apply(self, db: AsyncSession, row: UserLedger, update: LedgerUpdate) -> None:
        await crud.user_ledger.apply_balances(
            db,
            db_obj=row,
            free_pages_remaining=update.free_pages_remaining,
            credit_balance=update.credit_balance,
            pages_used_total=update.pages_used_total,
        )
        await crud.charge_event.create(db, obj_in=_event_values(update.event))

    async def create_ledger(
        self,
        user_id: UUID,
        *,
        free_pages: Optional[int] = None,
        credit_balance: Decimal = Decimal("0"),
        subscription_type: str = "free",
    ) -> LedgerSnapshot:
        """Insert a new ledger row; an existing ledger is returned unchanged."""
        values = {
            "user_id": user_id,
            "free_pages_remaining": (
                self._free_trial_pages if free_pages is None else free_pages
            ),
            "credit_balance": credit_balance,
            "pages_used_total": 0,
            "subscription_type": subscription_type,
        }
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    row = await crud.user_ledger.create(db, obj_in=values)
                return _to_snapshot(row)
        except IntegrityError:
            logger.info(f"Ledger for user {user_id} already exists")
            return await self.read_ledger(user_id)
        except _STORE_ERRORS as e:
            logger.error(f"Ledger creation failed for user {user_id}: {e}")
            raise StoreUnavailableError() from e


class SqlChargeEventStore(ChargeEventStoreProtocol):
    """Append-only usage log on PostgreSQL."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize with a session factory."""
        self._session_factory = session_factory

    async def append_charge_event(self, event: ChargeEventRecord) -> ChargeEventRecord:
        """Insert one event in its own transaction."""
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    row = await crud.charge_event.create(db, obj_in=_event_values(event))
                return _to_record(row)
        except _STORE_ERRORS as e:
            logger.error(f"Appending {event.action.value} event for user {event.user_id} failed")
            raise StoreUnavailableError() from e

    async def query_charge_events(
        self,
        user_id: UUID,
        *,
        offset: int,
        limit: int,
        action: Optional[UsageAction] = None,
    ) -> list[ChargeEventRecord]:
        """Read one window of events, newest first."""
        try:
            async with self._session_factory() as db:
                rows = await crud.charge_event.get_page(
                    db,
                    user_id=user_id,
                    offset=offset,
                    limit=limit,
                    action=action.value if action else None,
                )
        except _STORE_ERRORS as e:
            raise StoreUnavailableError() from e
        return [_to_record(row) for row in rows]

    async def count_charge_events(
        self,
        user_id: UUID,
        *,
        action: Optional[UsageAction] = None,
        since: Optional[datetime] = None,
    ) -> int:
        """Count events for a user."""
        try:
            async with self._session_factory() as db:
                return await crud.charge_event.count(
                    db,
                    user_id=user_id,
                    action=action.value if action else None,
                    since=since,
                )
        except _STORE_ERRORS as e:
            raise StoreUnavailableError() from e
