"""Usage domain protocols.

LedgerStoreProtocol: transactional accessor for user ledgers (the only write path).
ChargeEventStoreProtocol: append-only usage log with paginated reads.
ChargeExecutorProtocol: the atomic check-and-debit operation.
UsageHistoryReaderProtocol: read model over the usage log and balances.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional, Protocol, runtime_checkable
from uuid import UUID

from pagemeter.domains.usage.types import (
    ChargeEventRecord,
    ChargePlanOutcome,
    ChargeResult,
    HistoryPage,
    LedgerSnapshot,
    RequestMetadata,
    UsageAction,
    UsageSummary,
)

ChargePlan = Callable[[LedgerSnapshot], ChargePlanOutcome]


@runtime_checkable
class LedgerStoreProtocol(Protocol):
    """Durable per-user ledger.

    Implementations own their sessions; callers never pass one.
    """

    async def read_ledger(self, user_id: UUID) -> LedgerSnapshot:
        """Read the current ledger.

        Raises LedgerNotFoundError if the user has none and
        StoreUnavailableError if the store fails.
        """
        ...

    async def run_charge_transaction(self, user_id: UUID, plan: ChargePlan) -> ChargePlanOutcome:
        """Run ``plan`` against a freshly locked ledger inside one transaction.

        If ``plan`` returns a LedgerUpdate, the new balances and its event are
        committed together. If it returns a TransactionAbort, nothing is
        written. Either way the plan's return value is returned.

        Raises LedgerNotFoundError or StoreUnavailableError. A timeout or
        cancellation before commit rolls everything back.
        """
        ...

    async def create_ledger(
        self,
        user_id: UUID,
        *,
        free_pages: Optional[int] = None,
        credit_balance: Decimal = Decimal("0"),
        subscription_type: str = "free",
    ) -> LedgerSnapshot:
        """Provision a ledger for a new account (trial allowance by default)."""
        ...


@runtime_checkable
class ChargeEventStoreProtocol(Protocol):
    """Append-only usage log."""

    async def append_charge_event(self, event: ChargeEventRecord) -> ChargeEventRecord:
        """Persist one event in its own transaction and return it as stored."""
        ...

    async def query_charge_events(
        self,
        user_id: UUID,
        *,
        offset: int,
        limit: int,
        action: Optional[UsageAction] = None,
    ) -> list[ChargeEventRecord]:
        """Return events newest first (commit order), sliced by offset/limit."""
        ...

    async def count_charge_events(
        self,
        user_id: UUID,
        *,
        action: Optional[UsageAction] = None,
        since: Optional[datetime] = None,
    ) -> int:
        """Count events for a user, optionally filtered."""
        ...


@runtime_checkable
class ChargeExecutorProtocol(Protocol):
    """Atomic check-and-debit of page usage."""

    async def charge(
        self,
        user_id: UUID,
        pages_requested: int,
        *,
        processing_record_id: Optional[str] = None,
        request_metadata: Optional[RequestMetadata] = None,
        cost_per_page: Optional[Decimal] = None,
    ) -> ChargeResult:
        """Charge ``pages_requested`` pages, free allowance first.

        Raises InsufficientCreditsError, LedgerNotFoundError or
        StoreUnavailableError.
        """
        ...


@runtime_checkable
class UsageHistoryReaderProtocol(Protocol):
    """Read-only access to usage history and balances."""

    async def get_history(
        self,
        user_id: UUID,
        *,
        page: object = 0,
        limit: object = 20,
        action: object = None,
    ) -> HistoryPage:
        """Return one page of the usage log; out-of-range input is clamped."""
        ...

    async def get_summary(self, user_id: UUID) -> UsageSummary:
        """Return balances and recent activity."""
        ...
