"""Unit tests for container wiring in create_container."""

from decimal import Decimal
from unittest.mock import MagicMock
from uuid import UUID

import pytest

from pagemeter.adapters.auth import StaticAuthVerifier, SupabaseJwtVerifier
from pagemeter.adapters.metrics import PrometheusChargeMetrics
from pagemeter.api.deps import _resolve_field_name
from pagemeter.core.config import Settings
from pagemeter.core.container import create_container
from pagemeter.core.protocols import AuthVerifier
from pagemeter.domains.usage.charge_executor import ChargeExecutor
from pagemeter.domains.usage.protocols import ChargeExecutorProtocol, UsageHistoryReaderProtocol
from pagemeter.domains.usage.repository import SqlLedgerStore

SYSTEM_USER = UUID("00000000-0000-0000-0000-00000000dead")


def _settings(**overrides) -> Settings:
    values = dict(
        AUTH_ENABLED=False,
        FIRST_SUPERUSER_ID=SYSTEM_USER,
        PROCESSING_COST_PER_PAGE=Decimal("1.2"),
    )
    values.update(overrides)
    return Settings(**values)


class TestCreateContainer:
    def test_wires_sql_stores_and_real_services(self):
        container = create_container(_settings(), session_factory=MagicMock())

        assert isinstance(container.ledger_store, SqlLedgerStore)
        assert isinstance(container.charge_executor, ChargeExecutor)
        assert isinstance(container.charge_metrics, PrometheusChargeMetrics)
        assert container.eligibility_evaluator.cost_per_page == Decimal("1.2")

    def test_metrics_share_one_registry(self):
        container = create_container(_settings(), session_factory=MagicMock())

        container.charge_metrics.observe_charge("charged", pages=3, credits=Decimal("3.6"))
        output = container.metrics_renderer.generate().decode()

        assert 'pagemeter_charges_total{outcome="charged"} 1.0' in output

    def test_auth_disabled_uses_system_user(self):
        container = create_container(_settings(), session_factory=MagicMock())

        assert isinstance(container.auth_verifier, StaticAuthVerifier)
        assert container.auth_verifier.verify(None).user_id == SYSTEM_USER

    def test_auth_enabled_uses_supabase_verifier(self):
        container = create_container(
            _settings(AUTH_ENABLED=True, SUPABASE_JWT_SECRET="s3cret-for-tests"),
            session_factory=MagicMock(),
        )

        assert isinstance(container.auth_verifier, SupabaseJwtVerifier)

    def test_auth_enabled_without_secret_fails_fast(self):
        with pytest.raises(ValueError):
            create_container(
                _settings(AUTH_ENABLED=True, SUPABASE_JWT_SECRET=None),
                session_factory=MagicMock(),
            )


class TestInjectResolution:
    def test_protocols_map_to_container_fields(self):
        assert _resolve_field_name(ChargeExecutorProtocol) == "charge_executor"
        assert _resolve_field_name(UsageHistoryReaderProtocol) == "usage_history"
        assert _resolve_field_name(AuthVerifier) == "auth_verifier"

    def test_unknown_type_raises(self):
        with pytest.raises(TypeError):
            _resolve_field_name(dict)
