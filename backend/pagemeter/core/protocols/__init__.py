"""Core protocols for dependency injection."""

from pagemeter.core.protocols.auth import AuthenticatedUser, AuthVerifier
from pagemeter.core.protocols.metrics import ChargeMetrics, HttpMetrics, MetricsRenderer

__all__ = [
    "AuthVerifier",
    "AuthenticatedUser",
    "ChargeMetrics",
    "HttpMetrics",
    "MetricsRenderer",
]
