"""Container Factory.

All construction logic lives here. The factory reads settings and builds
the container with environment-appropriate implementations.
"""

from prometheus_client import CollectorRegistry
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pagemeter.adapters.auth import StaticAuthVerifier, SupabaseJwtVerifier
from pagemeter.adapters.metrics import (
    PrometheusChargeMetrics,
    PrometheusHttpMetrics,
    PrometheusMetricsRenderer,
)
from pagemeter.core.config import Settings
from pagemeter.core.container.container import Container
from pagemeter.core.logging import logger
from pagemeter.core.protocols import AuthVerifier
from pagemeter.domains.batch.repository import SqlBatchJobRepository
from pagemeter.domains.batch.service import BatchJobService
from pagemeter.domains.usage.charge_executor import ChargeExecutor
from pagemeter.domains.usage.eligibility import EligibilityEvaluator
from pagemeter.domains.usage.history import UsageHistoryReader
from pagemeter.domains.usage.repository import SqlChargeEventStore, SqlLedgerStore


def create_container(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> Container:
    """Build container with environment-appropriate implementations.

    This is the single source of truth for dependency wiring.

    Args:
        settings: Application settings (from core/config)
        session_factory: Session factory for the SQL stores. Defaults to the
            application's AsyncSessionLocal.

    Returns:
        Fully constructed Container ready for use
    """
    if session_factory is None:
        from pagemeter.db.session import AsyncSessionLocal

        session_factory = AsyncSessionLocal

    # -----------------------------------------------------------------
    # Metrics: one registry shared by every adapter and the renderer
    # -----------------------------------------------------------------
    registry = CollectorRegistry()
    charge_metrics = PrometheusChargeMetrics(registry=registry)
    http_metrics = PrometheusHttpMetrics(registry=registry)
    renderer = PrometheusMetricsRenderer(registry=registry)

    # -----------------------------------------------------------------
    # Usage domain
    # -----------------------------------------------------------------
    ledger_store = SqlLedgerStore(
        session_factory,
        transaction_timeout=settings.CHARGE_TRANSACTION_TIMEOUT_SECONDS,
        free_trial_pages=settings.FREE_TRIAL_PAGES,
    )
    charge_event_store = SqlChargeEventStore(session_factory)
    evaluator = EligibilityEvaluator(settings.PROCESSING_COST_PER_PAGE)
    charge_executor = ChargeExecutor(
        ledger_store=ledger_store,
        event_store=charge_event_store,
        metrics=charge_metrics,
        cost_per_page=settings.PROCESSING_COST_PER_PAGE,
    )
    usage_history = UsageHistoryReader(
        ledger_store=ledger_store,
        event_store=charge_event_store,
        cost_per_page=settings.PROCESSING_COST_PER_PAGE,
    )

    # -----------------------------------------------------------------
    # Batch domain
    # -----------------------------------------------------------------
    batch_job_repo = SqlBatchJobRepository(session_factory)
    batch_job_service = BatchJobService(
        ledger_store=ledger_store,
        repository=batch_job_repo,
        evaluator=evaluator,
        display_cost_per_page_usd=settings.DISPLAY_COST_PER_PAGE_USD,
    )

    return Container(
        auth_verifier=_create_auth_verifier(settings),
        ledger_store=ledger_store,
        charge_event_store=charge_event_store,
        eligibility_evaluator=evaluator,
        charge_executor=charge_executor,
        usage_history=usage_history,
        batch_job_repo=batch_job_repo,
        batch_job_service=batch_job_service,
        charge_metrics=charge_metrics,
        http_metrics=http_metrics,
        metrics_renderer=renderer,
    )


def _create_auth_verifier(settings: Settings) -> AuthVerifier:
    """Supabase JWT verification, or a static system user when auth is off."""
    if not settings.AUTH_ENABLED:
        logger.warning("AUTH_ENABLED is false: all requests act as FIRST_SUPERUSER_ID")
        return StaticAuthVerifier(settings.FIRST_SUPERUSER_ID)
    return SupabaseJwtVerifier(
        secret=settings.SUPABASE_JWT_SECRET or "",
        audience=settings.SUPABASE_JWT_AUDIENCE,
    )
