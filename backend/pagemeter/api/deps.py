"""Dependencies that are used in the API endpoints."""

import uuid
from typing import Optional, get_type_hints

from fastapi import Depends, Header, Request

from pagemeter.api.context import ApiContext
from pagemeter.core import container as container_mod
from pagemeter.core.container import Container
from pagemeter.core.exceptions import UnauthorizedException
from pagemeter.core.logging import logger
from pagemeter.core.protocols import AuthVerifier
from pagemeter.domains.usage.exceptions import LedgerNotFoundError
from pagemeter.domains.usage.protocols import LedgerStoreProtocol

_BEARER_PREFIX = "bearer "


def _extract_client_ip(request: Request) -> Optional[str]:
    """Extract client IP from request headers.

    Checks X-Forwarded-For header first (for proxied requests),
    then falls back to the direct peer address.

    Args:
    ----
        request (Request): FastAPI request object

    Returns:
    -------
        Optional[str]: Client IP address, or None if not available

    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For can be a comma-separated list, take the first one (original client)
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    return request.client.host if request.client else None


def _extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    if not authorization.lower().startswith(_BEARER_PREFIX):
        raise UnauthorizedException("Authorization header must use the Bearer scheme")
    token = authorization[len(_BEARER_PREFIX) :].strip()
    return token or None


# ---------------------------------------------------------------------------
# Container
# ---------------------------------------------------------------------------


def get_container() -> Container:
    """Get the DI container. Initialized at startup."""
    c = container_mod.container
    if c is None:
        raise RuntimeError("Container not initialized. Call initialize_container() first.")
    return c


# ---------------------------------------------------------------------------
# Protocol Injection
# ---------------------------------------------------------------------------

# Cache of protocol_type → Container field name, built once at first call.
_INJECT_CACHE: dict[type, str] = {}


def _resolve_field_name(protocol_type: type) -> str:
    """Find which Container field matches the given protocol type.

    Uses get_type_hints() to introspect the Container dataclass.
    Result is cached so the lookup happens at most once per protocol type.
    """
    if not _INJECT_CACHE:
        for name, hint in get_type_hints(Container).items():
            _INJECT_CACHE[hint] = name

    field_name = _INJECT_CACHE.get(protocol_type)
    if field_name is None:
        available = list(_INJECT_CACHE.values())
        raise TypeError(
            f"No binding for {protocol_type.__name__} in Container. Available fields: {available}"
        )
    return field_name


def Inject(protocol_type: type):  # noqa: N802
    """Resolve a protocol implementation from the DI container.

    Works like ``Depends()`` but looks up the implementation by protocol type
    instead of requiring the caller to know about the Container internals.

    Usage in FastAPI endpoints::

        from pagemeter.api.deps import Inject
        from pagemeter.domains.usage.protocols import ChargeExecutorProtocol


        @router.post("/charge")
        async def charge(
            executor: ChargeExecutorProtocol = Inject(ChargeExecutorProtocol),
        ):
            await executor.charge(...)
    """
    field_name = _resolve_field_name(protocol_type)

    def _resolve(c: Container = Depends(get_container)):
        return getattr(c, field_name)

    return Depends(_resolve)


# ---------------------------------------------------------------------------
# Request context
# ---------------------------------------------------------------------------


async def _ensure_ledger(ledger_store: LedgerStoreProtocol, user_id: uuid.UUID) -> None:
    """Provision the trial ledger on a user's first authenticated request."""
    try:
        await ledger_store.read_ledger(user_id)
    except LedgerNotFoundError:
        logger.info(f"Provisioning ledger for new user {user_id}")
        await ledger_store.create_ledger(user_id)


async def get_context(
    request: Request,
    authorization: Optional[str] = Header(None),
    user_agent: Optional[str] = Header(None, alias="User-Agent"),
    auth_verifier: AuthVerifier = Inject(AuthVerifier),
    ledger_store: LedgerStoreProtocol = Inject(LedgerStoreProtocol),
) -> ApiContext:
    """Create the API context for the request.

    This is the primary dependency for all authenticated endpoints, providing:
    - Request tracking (request_id)
    - The verified user identity, with a ledger provisioned on first use
    - Client IP and user agent for the usage log
    - Pre-configured contextual logger

    Raises:
    ------
        UnauthorizedException: If the bearer token is missing or invalid.
    """
    request_id = getattr(request.state, "request_id", str(uuid.uuid4()))

    token = _extract_bearer_token(authorization)
    user = auth_verifier.verify(token)
    await _ensure_ledger(ledger_store, user.user_id)

    client_ip = _extract_client_ip(request)
    ctx = ApiContext(
        request_id=request_id,
        user_id=user.user_id,
        email=user.email,
        client_ip=client_ip,
        user_agent=user_agent,
        auth_metadata=dict(user.claims),
        logger=logger.with_context(
            request_id=request_id,
            user_id=str(user.user_id),
            context_base="api",
        ),
    )
    request.state.api_context = ctx
    return ctx
