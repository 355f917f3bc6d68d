"""Unit tests for exception handlers in middleware.py.

Calls handlers directly to cover mappings that no endpoint currently triggers.
"""

import json
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from pagemeter.api.middleware import pagemeter_exception_handler
from pagemeter.core.exceptions import (
    ExternalServiceError,
    InvalidStateError,
    PageMeterException,
    UnauthorizedException,
)
from pagemeter.domains.usage.exceptions import InsufficientCreditsError
from pagemeter.domains.usage.types import evaluate_eligibility


def _body(response) -> dict:
    return json.loads(response.body)


@pytest.mark.asyncio
async def test_unauthorized_returns_401():
    response = await pagemeter_exception_handler(MagicMock(), UnauthorizedException("expired"))
    assert response.status_code == 401
    assert _body(response) == {"success": False, "error": "expired"}


@pytest.mark.asyncio
async def test_insufficient_credits_is_402_not_409():
    eligibility = evaluate_eligibility(8, 0, Decimal("6.4"), Decimal("1.2"))
    response = await pagemeter_exception_handler(
        MagicMock(), InsufficientCreditsError(eligibility)
    )
    assert response.status_code == 402
    assert _body(response)["details"]["requiredCredits"] == pytest.approx(9.6)


@pytest.mark.asyncio
async def test_insufficient_credits_details_are_camel_case():
    eligibility = evaluate_eligibility(8, 0, Decimal("6.4"), Decimal("1.2"))
    response = await pagemeter_exception_handler(
        MagicMock(), InsufficientCreditsError(eligibility)
    )
    assert _body(response)["details"] == {
        "pagesRequested": 8,
        "payablePages": 8,
        "requiredCredits": pytest.approx(9.6),
        "freePagesRemaining": 0,
        "creditBalance": pytest.approx(6.4),
        "costPerPage": pytest.approx(1.2),
    }


@pytest.mark.asyncio
async def test_other_invalid_state_returns_409():
    response = await pagemeter_exception_handler(MagicMock(), InvalidStateError("locked"))
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_external_service_error_hides_cause():
    exc = ExternalServiceError("LedgerStore", "password authentication failed for user x")
    response = await pagemeter_exception_handler(MagicMock(), exc)
    assert response.status_code == 503
    assert b"password" not in response.body


@pytest.mark.asyncio
async def test_unmapped_exception_returns_500():
    response = await pagemeter_exception_handler(MagicMock(), PageMeterException("unexpected"))
    assert response.status_code == 500
    assert _body(response)["error"] == "unexpected"
