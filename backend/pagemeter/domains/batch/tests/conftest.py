"""Batch domain test fixtures and helpers."""

from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from pagemeter.domains.batch.fakes.repository import FakeBatchJobRepository
from pagemeter.domains.batch.service import BatchJobService
from pagemeter.domains.batch.types import BatchFileInput, BatchJobRequest
from pagemeter.domains.usage.eligibility import EligibilityEvaluator
from pagemeter.domains.usage.fakes.repository import FakeLedgerStore

DEFAULT_USER_ID = UUID("00000000-0000-0000-0000-0000000000cc")
KIB = 1024
MIB = 1024 * 1024


def _make_request(**overrides: Any) -> BatchJobRequest:
    defaults: dict[str, Any] = dict(
        name="Quarterly reports",
        files=[BatchFileInput(name="q1.pdf", size=120 * KIB)],
    )
    defaults.update(overrides)
    return BatchJobRequest(**defaults)


def _make_service(
    *,
    ledger_store: Optional[FakeLedgerStore] = None,
    repository: Optional[FakeBatchJobRepository] = None,
) -> tuple[BatchJobService, FakeLedgerStore, FakeBatchJobRepository]:
    """Build a BatchJobService wired to fakes. Returns (service, ledgers, repo)."""
    ledgers = ledger_store or FakeLedgerStore()
    repo = repository or FakeBatchJobRepository()
    service = BatchJobService(
        ledger_store=ledgers,
        repository=repo,
        evaluator=EligibilityEvaluator(Decimal("1.2")),
        display_cost_per_page_usd=Decimal("0.012"),
    )
    return service, ledgers, repo
