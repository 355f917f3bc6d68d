"""Charge executor: atomic check-and-debit of page usage.

The eligibility decision and the debit happen in one ledger transaction,
against values read under the row lock. An advisory check made earlier by a
caller is never trusted.
"""

import time
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from pagemeter.core.logging import logger
from pagemeter.core.protocols.metrics import ChargeMetrics
from pagemeter.domains.usage.eligibility import validate_pages_requested
from pagemeter.domains.usage.exceptions import (
    InsufficientCreditsError,
    LedgerNotFoundError,
    StoreUnavailableError,
)
from pagemeter.domains.usage.protocols import (
    ChargeEventStoreProtocol,
    ChargeExecutorProtocol,
    LedgerStoreProtocol,
)
from pagemeter.domains.usage.types import (
    ChargeEventRecord,
    ChargePlanOutcome,
    ChargeResult,
    EligibilityResult,
    LedgerSnapshot,
    LedgerUpdate,
    RequestMetadata,
    TransactionAbort,
    UsageAction,
    as_decimal,
    evaluate_eligibility,
)

_ABORT_INSUFFICIENT = "insufficient_credits"


class ChargeExecutor(ChargeExecutorProtocol):
    """Charges pages against a user's ledger, free allowance first.

    Concurrent charges for one user serialize in the ledger store; at most
    as many succeed as the balance covers.
    """

    def __init__(
        self,
        ledger_store: LedgerStoreProtocol,
        event_store: ChargeEventStoreProtocol,
        metrics: ChargeMetrics,
        cost_per_page: Decimal,
    ) -> None:
        """Initialize with stores, metrics and the default processing tariff."""
        self._ledger_store = ledger_store
        self._event_store = event_store
        self._metrics = metrics
        self._cost_per_page = as_decimal(cost_per_page)

    async def charge(
        self,
        user_id: UUID,
        pages_requested: int,
        *,
        processing_record_id: Optional[str] = None,
        request_metadata: Optional[RequestMetadata] = None,
        cost_per_page: Optional[Decimal] = None,
    ) -> ChargeResult:
        """Charge ``pages_requested`` pages in a single ledger transaction."""
        pages = validate_pages_requested(pages_requested)
        cost = self._cost_per_page if cost_per_page is None else as_decimal(cost_per_page)
        meta = request_metadata or RequestMetadata()
        log = logger.with_context(user_id=str(user_id), pages_requested=pages)

        plan = _ChargePlan(user_id, pages, cost, processing_record_id, meta)
        start = time.perf_counter()
        try:
            outcome = await self._ledger_store.run_charge_transaction(user_id, plan)
        except LedgerNotFoundError:
            self._metrics.observe_charge("not_found", duration=time.perf_counter() - start)
            log.warning("Charge rejected: user has no ledger")
            raise
        except StoreUnavailableError:
            self._metrics.observe_charge("store_unavailable", duration=time.perf_counter() - start)
            log.error("Charge failed: ledger store unavailable")
            raise
        duration = time.perf_counter() - start

        if isinstance(outcome, TransactionAbort):
            eligibility: EligibilityResult = outcome.payload
            self._metrics.observe_charge("insufficient_credits", duration=duration)
            log.info(
                f"Charge rejected: {eligibility.required_credits} credits required, "
                f"balance {eligibility.credit_balance}"
            )
            await self._record_limit_exceeded(user_id, eligibility, processing_record_id, meta)
            raise InsufficientCreditsError(eligibility)

        event = outcome.event
        self._metrics.observe_charge(
            "charged",
            pages=pages,
            free_pages=event.free_pages_consumed,
            credits=event.credits_charged,
            duration=duration,
        )
        log.info(
            f"Charged {pages} pages ({event.free_pages_consumed} free), "
            f"{event.credits_charged} credits, balance now {outcome.credit_balance}"
        )
        return ChargeResult(
            user_id=user_id,
            pages_charged=pages,
            free_pages_used=event.free_pages_consumed,
            credits_charged=event.credits_charged,
            new_balance=outcome.credit_balance,
            free_pages_remaining=outcome.free_pages_remaining,
            pages_used_total=outcome.pages_used_total,
            event_id=event.id,
        )

    async def _record_limit_exceeded(
        self,
        user_id: UUID,
        eligibility: EligibilityResult,
        processing_record_id: Optional[str],
        meta: RequestMetadata,
    ) -> None:
        """Append a limit_exceeded audit event; failure here never masks the rejection."""
        event = ChargeEventRecord(
            id=uuid4(),
            user_id=user_id,
            action=UsageAction.LIMIT_EXCEEDED,
            processing_record_id=processing_record_id,
            client_ip=meta.client_ip,
            client_user_agent=meta.client_user_agent,
            metadata=eligibility.to_breakdown(),
        )
        try:
            await self._event_store.append_charge_event(event)
        except StoreUnavailableError:
            logger.with_context(user_id=str(user_id)).error(
                "Could not record limit_exceeded event", exc_info=True
            )


class _ChargePlan:
    """Pure decision function run by the ledger store under the row lock."""

    def __init__(
        self,
        user_id: UUID,
        pages: int,
        cost_per_page: Decimal,
        processing_record_id: Optional[str],
        meta: RequestMetadata,
    ) -> None:
        self._user_id = user_id
        self._pages = pages
        self._cost = cost_per_page
        self._processing_record_id = processing_record_id
        self._meta = meta

    def __call__(self, snapshot: LedgerSnapshot) -> ChargePlanOutcome:
        eligibility = evaluate_eligibility(
            self._pages,
            snapshot.free_pages_remaining,
            snapshot.credit_balance,
            self._cost,
        )
        if not eligibility.eligible:
            return TransactionAbort(reason=_ABORT_INSUFFICIENT, payload=eligibility)

        new_balance = snapshot.credit_balance - eligibility.required_credits
        pages_after = snapshot.pages_used_total + self._pages
        event = ChargeEventRecord(
            id=uuid4(),
            user_id=self._user_id,
            action=UsageAction.PAGE_PROCESSED,
            pages_charged=self._pages,
            free_pages_consumed=eligibility.free_pages_consumed,
            credits_charged=eligibility.required_credits,
            pages_before=snapshot.pages_used_total,
            pages_after=pages_after,
            processing_record_id=self._processing_record_id,
            client_ip=self._meta.client_ip,
            client_user_agent=self._meta.client_user_agent,
            metadata={"new_balance": str(new_balance), "cost_per_page": str(self._cost)},
        )
        return LedgerUpdate(
            free_pages_remaining=snapshot.free_pages_remaining - eligibility.free_pages_consumed,
            credit_balance=new_balance,
            pages_used_total=pages_after,
            event=event,
        )
