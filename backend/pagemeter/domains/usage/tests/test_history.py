"""Unit tests for UsageHistoryReader."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from pagemeter.domains.usage.exceptions import LedgerNotFoundError
from pagemeter.domains.usage.tests.conftest import (
    DEFAULT_USER_ID,
    OTHER_USER_ID,
    _make_executor,
    _make_reader,
)
from pagemeter.domains.usage.types import ChargeEventRecord, UsageAction


async def _charge_n(executor, user_id, n: int) -> None:
    for _ in range(n):
        await executor.charge(user_id, 1)


class TestGetHistory:
    @pytest.mark.asyncio
    async def test_newest_first_with_pagination(self):
        executor, ledgers, _, _ = _make_executor()
        ledgers.seed(DEFAULT_USER_ID, free_pages_remaining=0, credit_balance=Decimal("100"))
        await _charge_n(executor, DEFAULT_USER_ID, 5)
        reader = _make_reader(ledgers)

        first = await reader.get_history(DEFAULT_USER_ID, page=0, limit=2)
        last = await reader.get_history(DEFAULT_USER_ID, page=2, limit=2)

        assert [e.pages_after for e in first.events] == [5, 4]
        assert first.total_count == 5
        assert first.has_more is True
        assert [e.pages_after for e in last.events] == [1]
        assert last.has_more is False
        assert last.offset == 4

    @pytest.mark.asyncio
    async def test_only_own_events(self):
        executor, ledgers, _, _ = _make_executor()
        ledgers.seed(DEFAULT_USER_ID, free_pages_remaining=2)
        ledgers.seed(OTHER_USER_ID, free_pages_remaining=3)
        await _charge_n(executor, DEFAULT_USER_ID, 2)
        await _charge_n(executor, OTHER_USER_ID, 3)

        page = await _make_reader(ledgers).get_history(OTHER_USER_ID)

        assert page.total_count == 3
        assert {e.user_id for e in page.events} == {OTHER_USER_ID}

    @pytest.mark.asyncio
    async def test_action_filter(self):
        executor, ledgers, events, _ = _make_executor()
        ledgers.seed(DEFAULT_USER_ID, free_pages_remaining=1, credit_balance=Decimal("0"))
        await executor.charge(DEFAULT_USER_ID, 1)
        events.insert(
            ChargeEventRecord(
                id=uuid4(), user_id=DEFAULT_USER_ID, action=UsageAction.LIMIT_EXCEEDED
            )
        )
        reader = _make_reader(ledgers)

        filtered = await reader.get_history(DEFAULT_USER_ID, action="limit_exceeded")
        unfiltered = await reader.get_history(DEFAULT_USER_ID, action="not-an-action")

        assert filtered.action == UsageAction.LIMIT_EXCEEDED
        assert [e.action for e in filtered.events] == [UsageAction.LIMIT_EXCEEDED]
        assert unfiltered.action is None
        assert unfiltered.total_count == 2

    @pytest.mark.asyncio
    async def test_out_of_range_window_is_clamped(self):
        executor, ledgers, _, _ = _make_executor()
        ledgers.seed(DEFAULT_USER_ID, free_pages_remaining=3)
        await _charge_n(executor, DEFAULT_USER_ID, 3)
        reader = _make_reader(ledgers)

        page = await reader.get_history(DEFAULT_USER_ID, page=-4, limit=0)
        big = await reader.get_history(DEFAULT_USER_ID, page="x", limit=5000)

        assert (page.page, page.limit) == (0, 1)
        assert len(page.events) == 1
        assert (big.page, big.limit) == (0, 100)
        assert len(big.events) == 3

    @pytest.mark.asyncio
    async def test_empty_history(self):
        _, ledgers, _, _ = _make_executor()
        page = await _make_reader(ledgers).get_history(DEFAULT_USER_ID)
        assert page.events == []
        assert page.total_count == 0
        assert page.has_more is False


class TestGetSummary:
    @pytest.mark.asyncio
    async def test_balances_and_recent_activity(self):
        executor, ledgers, events, _ = _make_executor()
        ledgers.seed(
            DEFAULT_USER_ID,
            free_pages_remaining=5,
            credit_balance=Decimal("10"),
            subscription_type="pro",
        )
        await executor.charge(DEFAULT_USER_ID, 8)
        events.insert(
            ChargeEventRecord(
                id=uuid4(),
                user_id=DEFAULT_USER_ID,
                action=UsageAction.PAGE_PROCESSED,
                pages_charged=1,
            ),
            created_at=datetime.now(timezone.utc) - timedelta(days=45),
        )
        events.insert(
            ChargeEventRecord(
                id=uuid4(), user_id=DEFAULT_USER_ID, action=UsageAction.LIMIT_EXCEEDED
            )
        )

        summary = await _make_reader(ledgers).get_summary(DEFAULT_USER_ID)

        assert summary.subscription_type == "pro"
        assert summary.pages_used_total == 8
        assert summary.free_pages_remaining == 0
        assert summary.credit_balance == Decimal("6.4")
        assert summary.pages_affordable == 5
        assert summary.recent_charges_30_days == 1

    @pytest.mark.asyncio
    async def test_unknown_user(self):
        _, ledgers, _, _ = _make_executor()
        with pytest.raises(LedgerNotFoundError):
            await _make_reader(ledgers).get_summary(DEFAULT_USER_ID)
