"""API tests for the health endpoint and metrics exposition."""

import pytest


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_metrics_served_from_renderer(client, fake_metrics_renderer):
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert response.text == "# fake metrics\n"
    assert fake_metrics_renderer.generate_calls == 1


@pytest.mark.asyncio
async def test_health_and_metrics_not_measured(client, fake_http_metrics):
    await client.get("/health")
    await client.get("/metrics")
    assert fake_http_metrics.requests == []
