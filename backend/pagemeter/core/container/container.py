"""Dependency Injection Container.

The container is an immutable dataclass that holds protocol implementations.
It has no construction logic; that belongs in the factory.
"""

from dataclasses import dataclass, replace
from typing import Any

from pagemeter.core.protocols import AuthVerifier, ChargeMetrics, HttpMetrics, MetricsRenderer
from pagemeter.domains.batch.protocols import (
    BatchJobRepositoryProtocol,
    BatchJobServiceProtocol,
)
from pagemeter.domains.usage.eligibility import EligibilityEvaluator
from pagemeter.domains.usage.protocols import (
    ChargeEventStoreProtocol,
    ChargeExecutorProtocol,
    LedgerStoreProtocol,
    UsageHistoryReaderProtocol,
)


@dataclass(frozen=True)
class Container:
    """Immutable container holding all protocol implementations.

    Usage:
        # FastAPI endpoints: use Inject() to pull individual protocols
        from pagemeter.api.deps import Inject

        async def charge(executor: ChargeExecutorProtocol = Inject(ChargeExecutorProtocol)):
            ...

        # Testing: construct directly with fakes
        test_container = Container(ledger_store=FakeLedgerStore(), ...)
    """

    # Identity provider token verification
    auth_verifier: AuthVerifier

    # Usage domain: stores (thin wrappers around crud singletons)
    ledger_store: LedgerStoreProtocol
    charge_event_store: ChargeEventStoreProtocol

    # Usage domain: services
    eligibility_evaluator: EligibilityEvaluator
    charge_executor: ChargeExecutorProtocol
    usage_history: UsageHistoryReaderProtocol

    # Batch domain
    batch_job_repo: BatchJobRepositoryProtocol
    batch_job_service: BatchJobServiceProtocol

    # Metrics (shared CollectorRegistry, rendered at /metrics)
    charge_metrics: ChargeMetrics
    http_metrics: HttpMetrics
    metrics_renderer: MetricsRenderer

    def replace(self, **changes: Any) -> "Container":
        """Create a new container with some dependencies replaced.

        Useful for partial overrides in tests:

            modified = container.replace(auth_verifier=FakeAuthVerifier())
        """
        return replace(self, **changes)
