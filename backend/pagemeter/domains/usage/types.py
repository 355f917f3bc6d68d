"""Usage domain types and pure business logic.

Constants, enums, value objects, and the pure functions that decide how a
page request is paid for. No IO; everything here is deterministic.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union
from uuid import UUID

HISTORY_DEFAULT_PAGE = 0
HISTORY_DEFAULT_LIMIT = 20
HISTORY_MAX_LIMIT = 100

RECENT_ACTIVITY_WINDOW = timedelta(days=30)

# Upper bound on pages in one charge; the ledger counters are INT4.
MAX_PAGES_PER_REQUEST = 1_000_000

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class UsageAction(str, Enum):
    """Kinds of events recorded in the usage log."""

    PAGE_PROCESSED = "page_processed"
    LIMIT_EXCEEDED = "limit_exceeded"
    SUBSCRIPTION_CHANGED = "subscription_changed"


# ---------------------------------------------------------------------------
# Ledger values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerSnapshot:
    """Point-in-time read of one user's ledger row."""

    user_id: UUID
    free_pages_remaining: int
    credit_balance: Decimal
    pages_used_total: int
    subscription_type: str = "free"


@dataclass(frozen=True)
class RequestMetadata:
    """Client details stored alongside a charge for auditing."""

    client_ip: Optional[str] = None
    client_user_agent: Optional[str] = None


@dataclass(frozen=True)
class ChargeEventRecord:
    """An immutable usage event, as written to and read from the history store.

    ``sequence`` and ``created_at`` are assigned by the store on insert.
    """

    id: UUID
    user_id: UUID
    action: UsageAction
    pages_charged: int = 0
    free_pages_consumed: int = 0
    credits_charged: Decimal = Decimal("0")
    pages_before: int = 0
    pages_after: int = 0
    processing_record_id: Optional[str] = None
    client_ip: Optional[str] = None
    client_user_agent: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    sequence: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class LedgerUpdate:
    """New ledger values plus the event to persist in the same transaction."""

    free_pages_remaining: int
    credit_balance: Decimal
    pages_used_total: int
    event: ChargeEventRecord


@dataclass(frozen=True)
class TransactionAbort:
    """Signal returned by a charge plan to roll the transaction back."""

    reason: str
    payload: Any = None


ChargePlanOutcome = Union[LedgerUpdate, TransactionAbort]


# ---------------------------------------------------------------------------
# Eligibility
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PageSplit:
    """How a request's pages divide between free allowance and paid pages."""

    free_pages: int
    payable_pages: int


def split_pages(pages_requested: int, free_pages_remaining: int) -> PageSplit:
    """Consumption policy: free allowance first, then paid pages."""
    free = min(pages_requested, max(0, free_pages_remaining))
    return PageSplit(free_pages=free, payable_pages=pages_requested - free)


def as_decimal(value: Union[Decimal, int, float, str]) -> Decimal:
    """Convert a tariff or balance to Decimal without binary float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class EligibilityResult:
    """Outcome of an eligibility check, with the breakdown behind it."""

    eligible: bool
    pages_requested: int
    payable_pages: int
    free_pages_consumed: int
    required_credits: Decimal
    free_pages_remaining: int
    credit_balance: Decimal
    cost_per_page: Decimal

    @property
    def shortfall(self) -> Decimal:
        """Credits missing to cover the request (0 when eligible)."""
        return max(Decimal("0"), self.required_credits - self.credit_balance)

    def to_breakdown(self) -> dict[str, Any]:
        """JSON-friendly breakdown for rejection messages."""
        return {
            "pages_requested": self.pages_requested,
            "payable_pages": self.payable_pages,
            "required_credits": float(self.required_credits),
            "free_pages_remaining": self.free_pages_remaining,
            "credit_balance": float(self.credit_balance),
            "cost_per_page": float(self.cost_per_page),
        }


def evaluate_eligibility(
    pages_requested: int,
    free_pages_remaining: int,
    credit_balance: Union[Decimal, int, float, str],
    cost_per_page: Union[Decimal, int, float, str],
) -> EligibilityResult:
    """Decide whether free pages plus credits cover ``pages_requested``.

    Pure and read-only; the same inputs always give the same result.
    """
    balance = as_decimal(credit_balance)
    cost = as_decimal(cost_per_page)
    split = split_pages(pages_requested, free_pages_remaining)
    required = split.payable_pages * cost
    return EligibilityResult(
        eligible=balance >= required,
        pages_requested=pages_requested,
        payable_pages=split.payable_pages,
        free_pages_consumed=split.free_pages,
        required_credits=required,
        free_pages_remaining=free_pages_remaining,
        credit_balance=balance,
        cost_per_page=cost,
    )


def pages_affordable(snapshot: LedgerSnapshot, cost_per_page: Decimal) -> int:
    """Pages the user could process right now: free allowance plus whole paid pages."""
    if cost_per_page <= 0 or snapshot.credit_balance <= 0:
        return snapshot.free_pages_remaining
    return snapshot.free_pages_remaining + int(snapshot.credit_balance // cost_per_page)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChargeResult:
    """Outcome of a committed charge."""

    user_id: UUID
    pages_charged: int
    free_pages_used: int
    credits_charged: Decimal
    new_balance: Decimal
    free_pages_remaining: int
    pages_used_total: int
    event_id: UUID


@dataclass(frozen=True)
class HistoryPage:
    """One page of the usage log, newest first."""

    events: list[ChargeEventRecord]
    total_count: int
    page: int
    limit: int
    action: Optional[UsageAction] = None

    @property
    def offset(self) -> int:
        """Row offset this page starts at."""
        return self.page * self.limit

    @property
    def has_more(self) -> bool:
        """Whether rows exist beyond this page."""
        return self.total_count > self.offset + self.limit


@dataclass(frozen=True)
class UsageSummary:
    """Current balances plus recent activity for one user."""

    user_id: UUID
    subscription_type: str
    pages_used_total: int
    free_pages_remaining: int
    credit_balance: Decimal
    pages_affordable: int
    recent_charges_30_days: int


# ---------------------------------------------------------------------------
# History request normalisation
# ---------------------------------------------------------------------------


def coerce_int(value: Any, default: int) -> int:
    """Parse an int leniently from its leading digits.

    ``"12abc"`` gives 12 and ``"2.5"`` gives 2. Input without leading digits
    yields ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(str(value))
    if match is None:
        return default
    return int(match.group(1))


def clamp_history_window(page: Any, limit: Any) -> tuple[int, int]:
    """Clamp page to >= 0 and limit to [1, HISTORY_MAX_LIMIT]."""
    page_num = max(0, coerce_int(page, HISTORY_DEFAULT_PAGE))
    limit_num = coerce_int(limit, HISTORY_DEFAULT_LIMIT)
    return page_num, min(HISTORY_MAX_LIMIT, max(1, limit_num))


def parse_action_filter(value: Any) -> Optional[UsageAction]:
    """Map a filter value onto UsageAction; unknown values mean "no filter"."""
    if value is None:
        return None
    if isinstance(value, UsageAction):
        return value
    try:
        return UsageAction(str(value))
    except ValueError:
        return None
