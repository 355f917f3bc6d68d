"""Usage history reader: paginated usage log and balance summary."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pagemeter.domains.usage.protocols import (
    ChargeEventStoreProtocol,
    LedgerStoreProtocol,
    UsageHistoryReaderProtocol,
)
from pagemeter.domains.usage.types import (
    HISTORY_DEFAULT_LIMIT,
    HISTORY_DEFAULT_PAGE,
    RECENT_ACTIVITY_WINDOW,
    HistoryPage,
    UsageAction,
    UsageSummary,
    as_decimal,
    clamp_history_window,
    pages_affordable,
    parse_action_filter,
)


class UsageHistoryReader(UsageHistoryReaderProtocol):
    """Read-only view over the usage log and ledger balances."""

    def __init__(
        self,
        ledger_store: LedgerStoreProtocol,
        event_store: ChargeEventStoreProtocol,
        cost_per_page: Decimal,
    ) -> None:
        """Initialize with stores and the processing tariff used for affordability."""
        self._ledger_store = ledger_store
        self._event_store = event_store
        self._cost_per_page = as_decimal(cost_per_page)

    async def get_history(
        self,
        user_id: UUID,
        *,
        page: object = HISTORY_DEFAULT_PAGE,
        limit: object = HISTORY_DEFAULT_LIMIT,
        action: object = None,
    ) -> HistoryPage:
        """Return one page of events, newest first.

        ``page`` and ``limit`` are clamped rather than rejected; an unknown
        ``action`` is treated as no filter.
        """
        page_num, limit_num = clamp_history_window(page, limit)
        action_filter: Optional[UsageAction] = parse_action_filter(action)

        events = await self._event_store.query_charge_events(
            user_id, offset=page_num * limit_num, limit=limit_num, action=action_filter
        )
        total = await self._event_store.count_charge_events(user_id, action=action_filter)
        return HistoryPage(
            events=events,
            total_count=total,
            page=page_num,
            limit=limit_num,
            action=action_filter,
        )

    async def get_summary(self, user_id: UUID, *, now: Optional[datetime] = None) -> UsageSummary:
        """Return current balances and the count of charges in the last 30 days."""
        snapshot = await self._ledger_store.read_ledger(user_id)
        since = (now or datetime.now(timezone.utc)) - RECENT_ACTIVITY_WINDOW
        recent = await self._event_store.count_charge_events(
            user_id, action=UsageAction.PAGE_PROCESSED, since=since
        )
        return UsageSummary(
            user_id=user_id,
            subscription_type=snapshot.subscription_type,
            pages_used_total=snapshot.pages_used_total,
            free_pages_remaining=snapshot.free_pages_remaining,
            credit_balance=snapshot.credit_balance,
            pages_affordable=pages_affordable(snapshot, self._cost_per_page),
            recent_charges_30_days=recent,
        )
