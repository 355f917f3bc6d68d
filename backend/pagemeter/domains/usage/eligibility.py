"""Eligibility evaluator: advisory check of a page request against a ledger snapshot."""

from decimal import Decimal
from typing import Union

from pagemeter.domains.usage.exceptions import InvalidUsageRequestError
from pagemeter.domains.usage.types import (
    MAX_PAGES_PER_REQUEST,
    EligibilityResult,
    LedgerSnapshot,
    as_decimal,
    evaluate_eligibility,
)


def validate_pages_requested(pages_requested: object) -> int:
    """Return ``pages_requested`` if it is an int in [1, MAX_PAGES_PER_REQUEST], else raise."""
    if isinstance(pages_requested, bool) or not isinstance(pages_requested, int):
        raise InvalidUsageRequestError("pages_requested must be an integer")
    if pages_requested <= 0:
        raise InvalidUsageRequestError("pages_requested must be positive")
    if pages_requested > MAX_PAGES_PER_REQUEST:
        raise InvalidUsageRequestError(
            f"pages_requested must not exceed {MAX_PAGES_PER_REQUEST}"
        )
    return pages_requested


class EligibilityEvaluator:
    """Evaluate page requests at a fixed tariff.

    Never mutates anything; the ChargeExecutor re-evaluates against fresh
    values inside its transaction before any debit.
    """

    def __init__(self, cost_per_page: Union[Decimal, int, float, str]) -> None:
        """Initialize with the credit cost of one payable page."""
        self._cost_per_page = as_decimal(cost_per_page)

    @property
    def cost_per_page(self) -> Decimal:
        """Credit units per payable page."""
        return self._cost_per_page

    def evaluate(self, snapshot: LedgerSnapshot, pages_requested: int) -> EligibilityResult:
        """Evaluate ``pages_requested`` against ``snapshot``."""
        pages = validate_pages_requested(pages_requested)
        return evaluate_eligibility(
            pages,
            snapshot.free_pages_remaining,
            snapshot.credit_balance,
            self._cost_per_page,
        )
