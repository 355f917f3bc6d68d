"""Usage domain test fixtures and helpers."""

from decimal import Decimal
from typing import Optional
from uuid import UUID

import pytest

from pagemeter.adapters.metrics import FakeChargeMetrics
from pagemeter.domains.usage.charge_executor import ChargeExecutor
from pagemeter.domains.usage.fakes.repository import FakeChargeEventStore, FakeLedgerStore
from pagemeter.domains.usage.history import UsageHistoryReader

DEFAULT_USER_ID = UUID("00000000-0000-0000-0000-0000000000aa")
OTHER_USER_ID = UUID("00000000-0000-0000-0000-0000000000bb")
COST_PER_PAGE = Decimal("1.2")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_stores(
    *,
    transaction_timeout: Optional[float] = None,
) -> tuple[FakeLedgerStore, FakeChargeEventStore]:
    events = FakeChargeEventStore()
    ledgers = FakeLedgerStore(events, transaction_timeout=transaction_timeout)
    return ledgers, events


def _make_executor(
    *,
    ledger_store: Optional[FakeLedgerStore] = None,
    metrics: Optional[FakeChargeMetrics] = None,
    cost_per_page: Decimal = COST_PER_PAGE,
) -> tuple[ChargeExecutor, FakeLedgerStore, FakeChargeEventStore, FakeChargeMetrics]:
    """Build a ChargeExecutor wired to fakes. Returns (executor, ledgers, events, metrics)."""
    ledgers = ledger_store or _make_stores()[0]
    m = metrics or FakeChargeMetrics()
    executor = ChargeExecutor(
        ledger_store=ledgers,
        event_store=ledgers.event_store,
        metrics=m,
        cost_per_page=cost_per_page,
    )
    return executor, ledgers, ledgers.event_store, m


def _make_reader(
    ledger_store: FakeLedgerStore, cost_per_page: Decimal = COST_PER_PAGE
) -> UsageHistoryReader:
    return UsageHistoryReader(
        ledger_store=ledger_store,
        event_store=ledger_store.event_store,
        cost_per_page=cost_per_page,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def ledger_store():
    return _make_stores()[0]


@pytest.fixture
def charge_metrics():
    return FakeChargeMetrics()


@pytest.fixture
def executor(ledger_store, charge_metrics):
    return _make_executor(ledger_store=ledger_store, metrics=charge_metrics)[0]
