"""Tests for the HTTP metrics middleware."""

from types import SimpleNamespace

import pytest
from fastapi.routing import APIRoute

from pagemeter.api.conftest import TEST_USER_ID
from pagemeter.api.middleware import _build_endpoint_name


@pytest.mark.asyncio
async def test_request_recorded_with_route_template(client, fake_http_metrics, fake_ledger_store):
    fake_ledger_store.seed(TEST_USER_ID)

    response = await client.get("/usage/stats")

    assert response.status_code == 200
    [record] = fake_http_metrics.requests
    assert record.method == "GET"
    assert record.endpoint == "/usage/stats"
    assert record.status_code == "200"
    assert record.duration >= 0
    assert fake_http_metrics.in_progress == {"GET": 0}


@pytest.mark.asyncio
async def test_error_status_recorded(client, fake_http_metrics):
    await client.get("/usage/stats")

    [record] = fake_http_metrics.requests
    assert record.status_code == "404"


@pytest.mark.asyncio
async def test_unknown_path_collapsed_to_unmatched(client, fake_http_metrics):
    await client.get("/no/such/route")

    [record] = fake_http_metrics.requests
    assert record.endpoint == "unmatched"


class TestBuildEndpointName:
    """Route templates are reported with their router prefix."""

    def _request(self, route, path):
        return SimpleNamespace(scope={"route": route}, url=SimpleNamespace(path=path))

    def test_prefix_restored_for_router_relative_template(self):
        route = APIRoute("/stats", lambda: None)

        name = _build_endpoint_name(self._request(route, "/usage/stats"), fallback="unmatched")

        assert name == "/usage/stats"

    def test_full_template_kept(self):
        route = APIRoute("/usage/stats", lambda: None)

        name = _build_endpoint_name(self._request(route, "/usage/stats"), fallback="unmatched")

        assert name == "/usage/stats"

    def test_path_parameters_stay_templated(self):
        route = APIRoute("/jobs/{job_id}", lambda job_id: None)

        name = _build_endpoint_name(
            self._request(route, "/batch/jobs/3f2a"), fallback="unmatched"
        )

        assert name == "/batch/jobs/{job_id}"

    def test_no_route_uses_fallback(self):
        request = SimpleNamespace(scope={}, url=SimpleNamespace(path="/no/such/route"))

        assert _build_endpoint_name(request, fallback="unmatched") == "unmatched"
