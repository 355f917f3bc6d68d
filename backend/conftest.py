"""Root conftest for pytest configuration and shared fixtures.

Loaded before the colocated tests under pagemeter/, so environment defaults
are in place before any pagemeter module reads settings.
"""

import os
from decimal import Decimal

import pytest

# Register pytest-asyncio plugin at the root level
pytest_plugins = ("pytest_asyncio",)

# ---------------------------------------------------------------------------
# Environment variables: must be set before any pagemeter module import.
# Uses setdefault so real env vars (CI, e2e) are never overridden.
# ---------------------------------------------------------------------------
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_USER", "test_user")
os.environ.setdefault("POSTGRES_PASSWORD", "test_password")
os.environ.setdefault("POSTGRES_DB", "test_db")
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("AUTH_ENABLED", "false")

TEST_COST_PER_PAGE = Decimal("1.2")
TEST_DISPLAY_COST_PER_PAGE_USD = Decimal("0.012")


# ---------------------------------------------------------------------------
# Shared fake fixtures: individual protocol fakes
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_charge_event_store():
    """Fake ChargeEventStore holding events in memory."""
    from pagemeter.domains.usage.fakes.repository import FakeChargeEventStore

    return FakeChargeEventStore()


@pytest.fixture
def fake_ledger_store(fake_charge_event_store):
    """Fake LedgerStore that writes charge events into fake_charge_event_store."""
    from pagemeter.domains.usage.fakes.repository import FakeLedgerStore

    return FakeLedgerStore(fake_charge_event_store)


@pytest.fixture
def fake_batch_job_repo():
    """Fake BatchJobRepository that records created jobs."""
    from pagemeter.domains.batch.fakes.repository import FakeBatchJobRepository

    return FakeBatchJobRepository()


@pytest.fixture
def fake_auth_verifier():
    """Fake AuthVerifier accepting only registered tokens."""
    from pagemeter.adapters.auth import FakeAuthVerifier

    return FakeAuthVerifier()


@pytest.fixture
def fake_charge_metrics():
    """Fake ChargeMetrics that records observed charges."""
    from pagemeter.adapters.metrics import FakeChargeMetrics

    return FakeChargeMetrics()


@pytest.fixture
def fake_http_metrics():
    """Fake HttpMetrics that records observed requests."""
    from pagemeter.adapters.metrics import FakeHttpMetrics

    return FakeHttpMetrics()


@pytest.fixture
def fake_metrics_renderer():
    """Fake MetricsRenderer returning canned output."""
    from pagemeter.adapters.metrics import FakeMetricsRenderer

    return FakeMetricsRenderer()


# ---------------------------------------------------------------------------
# Test container: fakes at the IO edges, real domain services in between
# ---------------------------------------------------------------------------


@pytest.fixture
def test_container(
    fake_auth_verifier,
    fake_ledger_store,
    fake_charge_event_store,
    fake_batch_job_repo,
    fake_charge_metrics,
    fake_http_metrics,
    fake_metrics_renderer,
):
    """A Container whose stores, auth and metrics are fakes.

    The domain services are the real ones wired over the fakes, so tests
    exercise actual charging rules without a database.

    For partial overrides, use container.replace():
        other = test_container.replace(auth_verifier=StaticAuthVerifier(user_id))
    """
    from pagemeter.core.container import Container
    from pagemeter.domains.batch.service import BatchJobService
    from pagemeter.domains.usage.charge_executor import ChargeExecutor
    from pagemeter.domains.usage.eligibility import EligibilityEvaluator
    from pagemeter.domains.usage.history import UsageHistoryReader

    evaluator = EligibilityEvaluator(TEST_COST_PER_PAGE)
    return Container(
        auth_verifier=fake_auth_verifier,
        ledger_store=fake_ledger_store,
        charge_event_store=fake_charge_event_store,
        eligibility_evaluator=evaluator,
        charge_executor=ChargeExecutor(
            ledger_store=fake_ledger_store,
            event_store=fake_charge_event_store,
            metrics=fake_charge_metrics,
            cost_per_page=TEST_COST_PER_PAGE,
        ),
        usage_history=UsageHistoryReader(
            ledger_store=fake_ledger_store,
            event_store=fake_charge_event_store,
            cost_per_page=TEST_COST_PER_PAGE,
        ),
        batch_job_repo=fake_batch_job_repo,
        batch_job_service=BatchJobService(
            ledger_store=fake_ledger_store,
            repository=fake_batch_job_repo,
            evaluator=evaluator,
            display_cost_per_page_usd=TEST_DISPLAY_COST_PER_PAGE_USD,
        ),
        charge_metrics=fake_charge_metrics,
        http_metrics=fake_http_metrics,
        metrics_renderer=fake_metrics_renderer,
    )
