"""Tests for request context construction in deps.py.

Uses the real get_context with a FakeAuthVerifier in the container.
"""

from decimal import Decimal
from types import SimpleNamespace
from uuid import UUID

import pytest

from pagemeter.api.deps import _extract_bearer_token, _extract_client_ip
from pagemeter.core.exceptions import UnauthorizedException

USER_ID = UUID("00000000-0000-0000-0000-0000000000bb")


def _request(headers: dict, host: str | None = "10.1.2.3"):
    return SimpleNamespace(
        headers=headers,
        client=SimpleNamespace(host=host) if host else None,
    )


class TestExtractClientIp:
    def test_first_forwarded_hop_wins(self):
        request = _request({"X-Forwarded-For": "198.51.100.4, 10.0.0.1"})
        assert _extract_client_ip(request) == "198.51.100.4"

    def test_falls_back_to_peer_address(self):
        assert _extract_client_ip(_request({})) == "10.1.2.3"

    def test_none_without_peer(self):
        assert _extract_client_ip(_request({}, host=None)) is None


class TestExtractBearerToken:
    def test_missing_header(self):
        assert _extract_bearer_token(None) is None

    def test_scheme_is_case_insensitive(self):
        assert _extract_bearer_token("bearer abc") == "abc"
        assert _extract_bearer_token("Bearer abc") == "abc"

    def test_other_scheme_rejected(self):
        with pytest.raises(UnauthorizedException):
            _extract_bearer_token("Basic dXNlcjpwYXNz")


class TestGetContext:
    @pytest.mark.asyncio
    async def test_missing_token_returns_401(self, unauthenticated_client):
        response = await unauthenticated_client.get("/usage/stats")

        assert response.status_code == 401
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_unknown_token_returns_401(self, unauthenticated_client):
        response = await unauthenticated_client.get(
            "/usage/stats", headers={"Authorization": "Bearer nope"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_verified_token_acts_as_user(
        self, unauthenticated_client, fake_auth_verifier, fake_ledger_store
    ):
        fake_auth_verifier.register("good-token", USER_ID)
        fake_ledger_store.seed(USER_ID, free_pages_remaining=3, credit_balance=Decimal("0"))

        response = await unauthenticated_client.get(
            "/usage/stats", headers={"Authorization": "Bearer good-token"}
        )

        assert response.status_code == 200
        assert response.json()["data"]["freePagesRemaining"] == 3
        assert fake_auth_verifier.verified == ["good-token"]

    @pytest.mark.asyncio
    async def test_forwarded_ip_and_user_agent_reach_event(
        self,
        unauthenticated_client,
        fake_auth_verifier,
        fake_ledger_store,
        fake_charge_event_store,
    ):
        fake_auth_verifier.register("good-token", USER_ID)
        fake_ledger_store.seed(USER_ID, free_pages_remaining=3)

        response = await unauthenticated_client.post(
            "/usage/charge",
            json={"pages": 1},
            headers={
                "Authorization": "Bearer good-token",
                "X-Forwarded-For": "198.51.100.4, 10.0.0.1",
                "User-Agent": "pdf-uploader/2.3",
            },
        )

        assert response.status_code == 200
        [event] = fake_charge_event_store.events
        assert event.client_ip == "198.51.100.4"
        assert event.client_user_agent == "pdf-uploader/2.3"

    @pytest.mark.asyncio
    async def test_first_request_provisions_trial_ledger(
        self, unauthenticated_client, fake_auth_verifier, fake_ledger_store
    ):
        fake_auth_verifier.register("new-user-token", USER_ID)
        headers = {"Authorization": "Bearer new-user-token"}

        stats = await unauthenticated_client.get("/usage/stats", headers=headers)

        assert stats.status_code == 200
        assert stats.json()["data"]["freePagesRemaining"] == 5
        assert fake_ledger_store.get(USER_ID).credit_balance == Decimal("0")

        charge = await unauthenticated_client.post(
            "/usage/charge", json={"pages": 2}, headers=headers
        )

        assert charge.status_code == 200
        assert charge.json()["data"]["freePagesRemaining"] == 3

    @pytest.mark.asyncio
    async def test_existing_ledger_not_reset_by_provisioning(
        self, unauthenticated_client, fake_auth_verifier, fake_ledger_store
    ):
        fake_auth_verifier.register("good-token", USER_ID)
        fake_ledger_store.seed(USER_ID, free_pages_remaining=0, credit_balance=Decimal("7"))

        await unauthenticated_client.get(
            "/usage/stats", headers={"Authorization": "Bearer good-token"}
        )

        ledger = fake_ledger_store.get(USER_ID)
        assert ledger.free_pages_remaining == 0
        assert ledger.credit_balance == Decimal("7")

    @pytest.mark.asyncio
    async def test_unknown_token_does_not_provision(
        self, unauthenticated_client, fake_ledger_store
    ):
        await unauthenticated_client.get("/usage/stats", headers={"Authorization": "Bearer nope"})

        assert fake_ledger_store.get(USER_ID) is None
