"""Usage domain exceptions."""

from typing import Any, Optional
from uuid import UUID

from pagemeter.core.exceptions import (
    BadRequestError,
    ExternalServiceError,
    InvalidStateError,
    NotFoundException,
)
from pagemeter.domains.usage.types import EligibilityResult


class InvalidUsageRequestError(BadRequestError):
    """Raised when a usage request is malformed (e.g. non-positive page count)."""

    def __init__(self, message: str = "Invalid usage request"):
        """Initialize with default message."""
        super().__init__(message)


class LedgerNotFoundError(NotFoundException):
    """Raised when an authenticated user has no ledger row."""

    def __init__(self, user_id: UUID, message: Optional[str] = None):
        """Initialize with the user whose ledger is missing."""
        self.user_id = user_id
        super().__init__(message or f"No usage ledger for user {user_id}")


class InsufficientCreditsError(InvalidStateError):
    """Raised when free pages plus credits do not cover a request.

    Carries the eligibility breakdown computed from the balances that were
    current when the decision was made, so callers can render how many
    pages or credits are missing.
    """

    def __init__(self, eligibility: EligibilityResult, message: Optional[str] = None):
        """Initialize with the eligibility breakdown."""
        if message is None:
            message = (
                f"Insufficient credits: {eligibility.pages_requested} pages need "
                f"{eligibility.required_credits} credits, balance is {eligibility.credit_balance}"
            )
        self.eligibility = eligibility
        super().__init__(message)

    @property
    def details(self) -> dict[str, Any]:
        """Structured breakdown for API responses."""
        return self.eligibility.to_breakdown()


class StoreUnavailableError(ExternalServiceError):
    """Raised when the ledger store fails or a charge transaction times out.

    The transaction never partially applies, so retrying the whole
    validate, evaluate and charge sequence is safe for failures before
    COMMIT. Retrying is left to the caller.
    """

    def __init__(self, message: str = "Ledger store unavailable"):
        """Initialize with default message."""
        super().__init__(service_name="LedgerStore", message=message)
