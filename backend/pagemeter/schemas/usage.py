"""Usage schemas: charges, history and stats."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import Field

from pagemeter.domains.usage.types import (
    ChargeEventRecord,
    ChargeResult,
    EligibilityResult,
    HistoryPage,
    UsageSummary,
)
from pagemeter.schemas._base import CamelModel
from pagemeter.schemas.response import SuccessResponse


class ChargeRequest(CamelModel):
    """Request body for POST /usage/charge."""

    pages: Any = Field(..., description="Pages to charge; must be a positive integer")
    processing_record_id: Optional[str] = Field(None, max_length=64)


class ChargeResultOut(CamelModel):
    """A committed charge."""

    pages_charged: int
    free_pages_used: int
    credits_charged: float
    new_balance: float
    free_pages_remaining: int
    pages_used_total: int
    event_id: UUID

    @classmethod
    def from_domain(cls, result: ChargeResult) -> "ChargeResultOut":
        """Build from the executor result."""
        return cls(
            pages_charged=result.pages_charged,
            free_pages_used=result.free_pages_used,
            credits_charged=float(result.credits_charged),
            new_balance=float(result.new_balance),
            free_pages_remaining=result.free_pages_remaining,
            pages_used_total=result.pages_used_total,
            event_id=result.event_id,
        )


class CreditBreakdownOut(CamelModel):
    """Cost breakdown returned in the details of a 402 response."""

    pages_requested: int
    payable_pages: int
    required_credits: float
    free_pages_remaining: int
    credit_balance: float
    cost_per_page: float

    @classmethod
    def from_domain(cls, eligibility: EligibilityResult) -> "CreditBreakdownOut":
        """Build from an eligibility evaluation."""
        return cls(
            pages_requested=eligibility.pages_requested,
            payable_pages=eligibility.payable_pages,
            required_credits=float(eligibility.required_credits),
            free_pages_remaining=eligibility.free_pages_remaining,
            credit_balance=float(eligibility.credit_balance),
            cost_per_page=float(eligibility.cost_per_page),
        )


class ChargeEventOut(CamelModel):
    """One usage log entry."""

    id: UUID
    action: str
    pages_charged: int
    free_pages_consumed: int
    credits_charged: float
    pages_before: int
    pages_after: int
    processing_record_id: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, event: ChargeEventRecord) -> "ChargeEventOut":
        """Build from a stored event. Client IP and user agent are not exposed."""
        return cls(
            id=event.id,
            action=event.action.value,
            pages_charged=event.pages_charged,
            free_pages_consumed=event.free_pages_consumed,
            credits_charged=float(event.credits_charged),
            pages_before=event.pages_before,
            pages_after=event.pages_after,
            processing_record_id=event.processing_record_id,
            metadata=event.metadata,
            created_at=event.created_at,
        )


class PaginationOut(CamelModel):
    """Pagination block of a history response."""

    page: int
    limit: int
    total_count: int
    has_more: bool


class UsageHistoryResponse(SuccessResponse[list[ChargeEventOut]]):
    """Response for GET /usage/history."""

    pagination: PaginationOut

    @classmethod
    def from_domain(cls, page: HistoryPage) -> "UsageHistoryResponse":
        """Build from a history page."""
        return cls(
            data=[ChargeEventOut.from_domain(e) for e in page.events],
            pagination=PaginationOut(
                page=page.page,
                limit=page.limit,
                total_count=page.total_count,
                has_more=page.has_more,
            ),
        )


class UsageStatsOut(CamelModel):
    """Balances and recent activity."""

    subscription_type: str
    pages_used_total: int
    free_pages_remaining: int
    credit_balance: float
    pages_affordable: int
    recent_charges_30_days: int = Field(..., alias="recentCharges30Days")

    @classmethod
    def from_domain(cls, summary: UsageSummary) -> "UsageStatsOut":
        """Build from a usage summary."""
        return cls(
            subscription_type=summary.subscription_type,
            pages_used_total=summary.pages_used_total,
            free_pages_remaining=summary.free_pages_remaining,
            credit_balance=float(summary.credit_balance),
            pages_affordable=summary.pages_affordable,
            recent_charges_30_days=summary.recent_charges_30_days,
        )
