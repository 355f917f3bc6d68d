"""Metrics adapters: Prometheus and Fake implementations."""

from pagemeter.adapters.metrics.charge import (
    ChargeRecord,
    FakeChargeMetrics,
    PrometheusChargeMetrics,
)
from pagemeter.adapters.metrics.http import FakeHttpMetrics, PrometheusHttpMetrics, RequestRecord
from pagemeter.adapters.metrics.renderer import FakeMetricsRenderer, PrometheusMetricsRenderer

__all__ = [
    "ChargeRecord",
    "FakeChargeMetrics",
    "FakeHttpMetrics",
    "FakeMetricsRenderer",
    "PrometheusChargeMetrics",
    "PrometheusHttpMetrics",
    "PrometheusMetricsRenderer",
    "RequestRecord",
]
