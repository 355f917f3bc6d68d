"""Batch job service: validate, check credits, persist, estimate cost."""

from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from pagemeter.core.logging import logger
from pagemeter.domains.batch.protocols import (
    BatchJobRepositoryProtocol,
    BatchJobServiceProtocol,
)
from pagemeter.domains.batch.types import BatchJobCreated, BatchJobRequest, CostEstimate
from pagemeter.domains.batch.validator import validate_batch
from pagemeter.domains.usage.eligibility import EligibilityEvaluator
from pagemeter.domains.usage.exceptions import InsufficientCreditsError
from pagemeter.domains.usage.protocols import LedgerStoreProtocol
from pagemeter.domains.usage.types import as_decimal, pages_affordable

_USD_QUANTUM = Decimal("0.0001")


class BatchJobService(BatchJobServiceProtocol):
    """Creates batch jobs.

    The credit check here is advisory. Nothing is debited at creation time;
    pages are charged by the ChargeExecutor when they are processed.
    """

    def __init__(
        self,
        ledger_store: LedgerStoreProtocol,
        repository: BatchJobRepositoryProtocol,
        evaluator: EligibilityEvaluator,
        display_cost_per_page_usd: Decimal,
    ) -> None:
        """Initialize with the ledger store, job repository and tariffs."""
        self._ledger_store = ledger_store
        self._repository = repository
        self._evaluator = evaluator
        self._display_cost = as_decimal(display_cost_per_page_usd)

    async def create_job(self, user_id: UUID, request: BatchJobRequest) -> BatchJobCreated:
        """Validate, check the ledger, then persist the job and its files."""
        log = logger.with_context(user_id=str(user_id))
        batch = validate_batch(request)
        total_pages = batch.total_estimated_pages

        snapshot = await self._ledger_store.read_ledger(user_id)
        eligibility = self._evaluator.evaluate(snapshot, total_pages)
        if not eligibility.eligible:
            log.info(f"Batch job '{batch.name}' rejected: {total_pages} pages not affordable")
            raise InsufficientCreditsError(
                eligibility, message="Insufficient credits for this batch job"
            )

        job = await self._repository.create_job(user_id, batch)
        log.info(f"Created batch job {job.id} with {job.total_files} files, {total_pages} pages")

        return BatchJobCreated(
            batch_job=job,
            cost_estimate=CostEstimate(
                estimated_pages=total_pages,
                estimated_cost_usd=(total_pages * self._display_cost).quantize(
                    _USD_QUANTUM, rounding=ROUND_HALF_UP
                ),
                current_usage=snapshot.pages_used_total,
                pages_remaining=pages_affordable(snapshot, self._evaluator.cost_per_page),
                subscription_type=snapshot.subscription_type,
            ),
        )
