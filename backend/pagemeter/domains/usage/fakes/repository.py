"""In-memory fakes for the usage stores."""

import asyncio
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pagemeter.domains.usage.exceptions import LedgerNotFoundError, StoreUnavailableError
from pagemeter.domains.usage.protocols import ChargePlan
from pagemeter.domains.usage.types import (
    ChargeEventRecord,
    ChargePlanOutcome,
    LedgerSnapshot,
    TransactionAbort,
    UsageAction,
)


class FakeChargeEventStore:
    """In-memory fake for ChargeEventStoreProtocol.

    Assigns ``sequence`` and ``created_at`` on insert like the database does.
    """

    def __init__(self) -> None:
        """Initialize an empty log."""
        self._events: list[ChargeEventRecord] = []
        self._next_sequence = 1
        self.fail_appends: Optional[Exception] = None
        self._calls: list[tuple] = []

    def insert(
        self, event: ChargeEventRecord, created_at: Optional[datetime] = None
    ) -> ChargeEventRecord:
        """Store an event synchronously (used by FakeLedgerStore at commit)."""
        stored = replace(
            event,
            sequence=self._next_sequence,
            created_at=created_at or event.created_at or datetime.now(timezone.utc),
        )
        self._next_sequence += 1
        self._events.append(stored)
        return stored

    @property
    def events(self) -> list[ChargeEventRecord]:
        """All stored events in commit order."""
        return list(self._events)

    def call_count(self, method: str) -> int:
        """Return the number of times a method was called."""
        return sum(1 for name, *_ in self._calls if name == method)

    async def append_charge_event(self, event: ChargeEventRecord) -> ChargeEventRecord:
        """Append one event (fake)."""
        self._calls.append(("append_charge_event", event))
        if self.fail_appends is not None:
            raise self.fail_appends
        return self.insert(event)

    def _matching(
        self,
        user_id: UUID,
        action: Optional[UsageAction],
        since: Optional[datetime] = None,
    ) -> list[ChargeEventRecord]:
        return [
            e
            for e in self._events
            if e.user_id == user_id
            and (action is None or e.action == action)
            and (since is None or (e.created_at is not None and e.created_at >= since))
        ]

    async def query_charge_events(
        self,
        user_id: UUID,
        *,
        offset: int,
        limit: int,
        action: Optional[UsageAction] = None,
    ) -> list[ChargeEventRecord]:
        """Return events newest first (fake)."""
        self._calls.append(("query_charge_events", user_id, offset, limit, action))
        rows = sorted(self._matching(user_id, action), key=lambda e: e.sequence, reverse=True)
        return rows[offset : offset + limit]

    async def count_charge_events(
        self,
        user_id: UUID,
        *,
        action: Optional[UsageAction] = None,
        since: Optional[datetime] = None,
    ) -> int:
        """Count events (fake)."""
        self._calls.append(("count_charge_events", user_id, action, since))
        return len(self._matching(user_id, action, since))


class FakeLedgerStore:
    """In-memory fake for LedgerStoreProtocol.

    One asyncio.Lock per user stands in for the row lock. A plan's ledger
    update and event become visible together, and only once the simulated
    transaction reaches commit. ``commit_delay`` holds the lock before
    commit so tests can cancel or time out an in-flight charge.
    """

    def __init__(
        self,
        event_store: Optional[FakeChargeEventStore] = None,
        *,
        free_trial_pages: int = 5,
        transaction_timeout: Optional[float] = None,
    ) -> None:
        """Initialize an empty store, optionally sharing an event store."""
        self.event_store = event_store or FakeChargeEventStore()
        self._ledgers: dict[UUID, LedgerSnapshot] = {}
        self._locks: dict[UUID, asyncio.Lock] = {}
        self._free_trial_pages = free_trial_pages
        self._timeout = transaction_timeout
        self.commit_delay: float = 0.0
        self.fail_with: Optional[Exception] = None
        self.commits = 0
        self.rollbacks = 0

    def seed(
        self,
        user_id: UUID,
        *,
        free_pages_remaining: int = 5,
        credit_balance: Decimal = Decimal("0"),
        pages_used_total: int = 0,
        subscription_type: str = "free",
    ) -> LedgerSnapshot:
        """Place a ledger in the store."""
        snapshot = LedgerSnapshot(
            user_id=user_id,
            free_pages_remaining=free_pages_remaining,
            credit_balance=Decimal(credit_balance),
            pages_used_total=pages_used_total,
            subscription_type=subscription_type,
        )
        self._ledgers[user_id] = snapshot
        return snapshot

    def get(self, user_id: UUID) -> Optional[LedgerSnapshot]:
        """Current committed ledger, without going through the protocol."""
        return self._ledgers.get(user_id)

    def _lock_for(self, user_id: UUID) -> asyncio.Lock:
        if user_id not in self._locks:
            self._locks[user_id] = asyncio.Lock()
        return self._locks[user_id]

    async def read_ledger(self, user_id: UUID) -> LedgerSnapshot:
        """Read the committed ledger (fake)."""
        if self.fail_with is not None:
            raise self.fail_with
        snapshot = self._ledgers.get(user_id)
        if snapshot is None:
            raise LedgerNotFoundError(user_id)
        return snapshot

    async def run_charge_transaction(self, user_id: UUID, plan: ChargePlan) -> ChargePlanOutcome:
        """Run ``plan`` under the per-user lock and commit atomically (fake)."""
        if self._timeout is None:
            return await self._run_locked(user_id, plan)
        try:
            async with asyncio.timeout(self._timeout):
                return await self._run_locked(user_id, plan)
        except TimeoutError as e:
            raise StoreUnavailableError("Charge transaction timed out") from e

    async def _run_locked(self, user_id: UUID, plan: ChargePlan) -> ChargePlanOutcome:
        async with self._lock_for(user_id):
            if self.fail_with is not None:
                raise self.fail_with
            snapshot = self._ledgers.get(user_id)
            if snapshot is None:
                raise LedgerNotFoundError(user_id)

            outcome = plan(snapshot)
            if isinstance(outcome, TransactionAbort):
                self.rollbacks += 1
                return outcome

            try:
                if self.commit_delay:
                    await asyncio.sleep(self.commit_delay)
            except BaseException:
                self.rollbacks += 1
                raise

            self._ledgers[user_id] = replace(
                snapshot,
                free_pages_remaining=outcome.free_pages_remaining,
                credit_balance=outcome.credit_balance,
                pages_used_total=outcome.pages_used_total,
            )
            self.event_store.insert(outcome.event)
            self.commits += 1
            return outcome

    async def create_ledger(
        self,
        user_id: UUID,
        *,
        free_pages: Optional[int] = None,
        credit_balance: Decimal = Decimal("0"),
        subscription_type: str = "free",
    ) -> LedgerSnapshot:
        """Provision a ledger; an existing one is returned unchanged (fake)."""
        existing = self._ledgers.get(user_id)
        if existing is not None:
            return existing
        return self.seed(
            user_id,
            free_pages_remaining=self._free_trial_pages if free_pages is None else free_pages,
            credit_balance=credit_balance,
            subscription_type=subscription_type,
        )
