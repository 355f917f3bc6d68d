"""Metrics protocols for dependency injection.

- ChargeMetrics: outcomes of charge attempts (count, pages, credits)
- HttpMetrics: HTTP request/response instrumentation
- MetricsRenderer: metrics serialization for scraping
"""

from decimal import Decimal
from typing import Protocol, runtime_checkable

# ---------------------------------------------------------------------------
# ChargeMetrics
# ---------------------------------------------------------------------------


@runtime_checkable
class ChargeMetrics(Protocol):
    """Protocol for charge outcome metrics."""

    def observe_charge(
        self,
        outcome: str,
        *,
        pages: int = 0,
        free_pages: int = 0,
        credits: Decimal = Decimal("0"),
        duration: float = 0.0,
    ) -> None:
        """Record one charge attempt.

        Args:
            outcome: ``charged``, ``insufficient_credits``, ``not_found`` or
                ``store_unavailable``.
            pages: Pages charged (0 unless ``outcome == "charged"``).
            free_pages: Of those, pages covered by the free allowance.
            credits: Credit units debited.
            duration: Seconds spent in the charge transaction.
        """
        ...


# ---------------------------------------------------------------------------
# HttpMetrics
# ---------------------------------------------------------------------------


@runtime_checkable
class HttpMetrics(Protocol):
    """Protocol for HTTP request/response metrics collection."""

    def inc_in_progress(self, method: str) -> None:
        """Increment the in-progress gauge for the given HTTP method."""
        ...

    def dec_in_progress(self, method: str) -> None:
        """Decrement the in-progress gauge for the given HTTP method."""
        ...

    def observe_request(
        self,
        method: str,
        endpoint: str,
        status_code: str,
        duration: float,
    ) -> None:
        """Record a completed request (count + latency)."""
        ...


# ---------------------------------------------------------------------------
# MetricsRenderer
# ---------------------------------------------------------------------------


@runtime_checkable
class MetricsRenderer(Protocol):
    """Protocol for rendering collected metrics into a scrapeable format."""

    @property
    def content_type(self) -> str:
        """MIME type for the serialized metrics output."""
        ...

    def generate(self) -> bytes:
        """Serialize all collected metrics into the wire format."""
        ...
