"""HTTP metrics adapters (Prometheus + Fake).

Prometheus implementation registers on the shared CollectorRegistry built
by the container factory, not on the default global registry.
"""

from dataclasses import dataclass

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

from pagemeter.core.protocols.metrics import HttpMetrics


class PrometheusHttpMetrics(HttpMetrics):
    """Prometheus-backed HTTP metrics collection."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

        self._requests_total = Counter(
            "pagemeter_http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self._registry,
        )

        self._request_duration = Histogram(
            "pagemeter_http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self._registry,
        )

        self._in_progress = Gauge(
            "pagemeter_http_requests_in_progress",
            "Number of HTTP requests currently in progress",
            ["method"],
            registry=self._registry,
        )

    def inc_in_progress(self, method: str) -> None:
        self._in_progress.labels(method=method).inc()

    def dec_in_progress(self, method: str) -> None:
        self._in_progress.labels(method=method).dec()

    def observe_request(
        self,
        method: str,
        endpoint: str,
        status_code: str,
        duration: float,
    ) -> None:
        self._requests_total.labels(
            method=method,
            endpoint=endpoint,
            status_code=status_code,
        ).inc()
        self._request_duration.labels(method=method, endpoint=endpoint).observe(duration)


# ---------------------------------------------------------------------------
# Fake
# ---------------------------------------------------------------------------


@dataclass
class RequestRecord:
    """Single observed request."""

    method: str
    endpoint: str
    status_code: str
    duration: float


class FakeHttpMetrics(HttpMetrics):
    """In-memory spy implementing the HttpMetrics protocol."""

    def __init__(self) -> None:
        self.in_progress: dict[str, int] = {}
        self.requests: list[RequestRecord] = []

    def inc_in_progress(self, method: str) -> None:
        self.in_progress[method] = self.in_progress.get(method, 0) + 1

    def dec_in_progress(self, method: str) -> None:
        self.in_progress[method] = self.in_progress.get(method, 0) - 1

    def observe_request(
        self,
        method: str,
        endpoint: str,
        status_code: str,
        duration: float,
    ) -> None:
        self.requests.append(RequestRecord(method, endpoint, status_code, duration))
