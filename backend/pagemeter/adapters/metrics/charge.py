"""Charge metrics adapters (Prometheus + Fake)."""

from dataclasses import dataclass
from decimal import Decimal

from prometheus_client import CollectorRegistry, Counter, Histogram

from pagemeter.core.protocols.metrics import ChargeMetrics


class PrometheusChargeMetrics(ChargeMetrics):
    """Prometheus-backed charge metrics collection."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

        self._charges_total = Counter(
            "pagemeter_charges_total",
            "Charge attempts by outcome",
            ["outcome"],
            registry=self._registry,
        )

        self._pages_total = Counter(
            "pagemeter_pages_charged_total",
            "Pages charged, split by free allowance and paid",
            ["kind"],
            registry=self._registry,
        )

        self._credits_total = Counter(
            "pagemeter_credits_charged_total",
            "Credit units debited by charges",
            registry=self._registry,
        )

        self._duration = Histogram(
            "pagemeter_charge_duration_seconds",
            "Charge transaction duration in seconds",
            ["outcome"],
            registry=self._registry,
        )

    def observe_charge(
        self,
        outcome: str,
        *,
        pages: int = 0,
        free_pages: int = 0,
        credits: Decimal = Decimal("0"),
        duration: float = 0.0,
    ) -> None:
        self._charges_total.labels(outcome=outcome).inc()
        self._duration.labels(outcome=outcome).observe(duration)
        if pages:
            self._pages_total.labels(kind="free").inc(free_pages)
            self._pages_total.labels(kind="paid").inc(pages - free_pages)
        if credits:
            self._credits_total.inc(float(credits))


# ---------------------------------------------------------------------------
# Fake
# ---------------------------------------------------------------------------


@dataclass
class ChargeRecord:
    """Single observed charge attempt."""

    outcome: str
    pages: int
    free_pages: int
    credits: Decimal
    duration: float


class FakeChargeMetrics(ChargeMetrics):
    """In-memory spy implementing the ChargeMetrics protocol."""

    def __init__(self) -> None:
        self.charges: list[ChargeRecord] = []

    def observe_charge(
        self,
        outcome: str,
        *,
        pages: int = 0,
        free_pages: int = 0,
        credits: Decimal = Decimal("0"),
        duration: float = 0.0,
    ) -> None:
        self.charges.append(ChargeRecord(outcome, pages, free_pages, credits, duration))

    # -- test helpers --

    def outcomes(self) -> list[str]:
        """Outcomes in the order they were recorded."""
        return [c.outcome for c in self.charges]

    def clear(self) -> None:
        """Reset all recorded state."""
        self.charges.clear()
