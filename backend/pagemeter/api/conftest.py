"""API test fixtures.

Provides an async HTTP client wired to the FastAPI app with the DI container
overridden to use fakes. Available to all colocated API tests under api/.

Pattern:
    1. Override get_container -> returns test_container (fakes at the edges)
    2. Override get_context  -> returns a fixed ApiContext for TEST_USER_ID
    3. Test hits the endpoint, asserts on HTTP response + fake state
"""

from uuid import UUID

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from pagemeter.api.context import ApiContext
from pagemeter.api.deps import get_container, get_context
from pagemeter.core.logging import logger

TEST_USER_ID = UUID("00000000-0000-0000-0000-0000000000aa")
TEST_REQUEST_ID = "test-request-00000000"
TEST_CLIENT_IP = "203.0.113.7"
TEST_USER_AGENT = "pagemeter-tests/1.0"


def _make_fake_context() -> ApiContext:
    """Build a minimal ApiContext for API tests."""
    return ApiContext(
        request_id=TEST_REQUEST_ID,
        user_id=TEST_USER_ID,
        client_ip=TEST_CLIENT_IP,
        user_agent=TEST_USER_AGENT,
        auth_metadata={"test": True},
        logger=logger.with_context(request_id=TEST_REQUEST_ID),
    )


@pytest_asyncio.fixture
async def client(test_container):
    """Async HTTP client with faked DI container and auth context."""
    from pagemeter.main import app

    fake_ctx = _make_fake_context()

    app.dependency_overrides[get_container] = lambda: test_container
    app.dependency_overrides[get_context] = lambda: fake_ctx

    app.state.http_metrics = test_container.http_metrics

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def unauthenticated_client(test_container):
    """Async HTTP client with faked container but real token verification."""
    from pagemeter.main import app

    app.dependency_overrides[get_container] = lambda: test_container
    app.state.http_metrics = test_container.http_metrics

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
