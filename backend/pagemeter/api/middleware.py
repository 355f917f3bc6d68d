"""Middleware for the FastAPI application.

This module contains middleware that process requests and responses, and the
exception handlers that turn domain errors into ``{success: false, error}``
JSON bodies.
"""

import time
import traceback
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from pagemeter.core.config import settings
from pagemeter.core.exceptions import (
    BadRequestError,
    ExternalServiceError,
    InvalidStateError,
    NotFoundException,
    PageMeterException,
    UnauthorizedException,
    unpack_validation_error,
)
from pagemeter.core.logging import logger
from pagemeter.domains.batch.exceptions import BatchValidationError
from pagemeter.domains.usage.exceptions import InsufficientCreditsError
from pagemeter.schemas.response import ErrorResponse
from pagemeter.schemas.usage import CreditBreakdownOut

_SERVICE_UNAVAILABLE_MESSAGE = "Service temporarily unavailable, please retry"


def _error_response(status_code: int, error: str, details: dict | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def add_request_id(request: Request, call_next: callable) -> Response:
    """Middleware to generate and add a request ID to the request for tracing.

    Args:
    ----
        request (Request): The incoming request.
        call_next (callable): The next middleware in the chain.

    Returns:
    -------
        Response: The response to the incoming request.

    """
    request.state.request_id = str(uuid.uuid4())
    response = await call_next(request)
    response.headers["X-Request-ID"] = request.state.request_id
    return response


async def log_requests(request: Request, call_next: callable) -> Response:
    """Middleware to log incoming requests.

    Args:
    ----
        request (Request): The incoming request.
        call_next (callable): The next middleware in the chain.

    Returns:
    -------
        Response: The response to the incoming request.

    """
    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time
    logger.info(
        f"Handled request {request.method} {request.url.path} in {duration:.2f} seconds. "
        f"Response code: {response.status_code}"
    )
    return response


async def exception_logging_middleware(request: Request, call_next: callable) -> Response:
    """Middleware to log unhandled exceptions.

    Args:
    ----
        request (Request): The incoming request.
        call_next (callable): The next middleware in the chain.

    Returns:
    -------
        Response: The response to the incoming request.

    """
    try:
        return await call_next(request)
    except Exception as exc:
        logger.error(f"Unhandled exception: {exc}\n{traceback.format_exc()}")

        details = None
        if settings.DEBUG:
            details = {"type": exc.__class__.__name__, "trace": traceback.format_exc()}
        return _error_response(500, "Internal Server Error", details)


# ---------------------------------------------------------------------------
# HTTP metrics
# ---------------------------------------------------------------------------

_METRICS_SKIP_PREFIXES = (
    "/health",
    "/metrics",
    "/docs",
    "/openapi.json",
    "/favicon.ico",
    "/redoc",
)
_METRICS_SKIP_EXACT = frozenset(_METRICS_SKIP_PREFIXES)
_METRICS_SKIP_SLASH = tuple(p + "/" for p in _METRICS_SKIP_PREFIXES)


def _build_endpoint_name(
    request: Request, *, path: str | None = None, fallback: str | None = None
) -> str:
    """Build endpoint name from the matched route's path template.

    Depending on the FastAPI version, a route inside an included router may
    report its template relative to the router prefix (``/stats`` rather
    than ``/usage/stats``). The prefix is then recovered from the request
    path: the part before the longest suffix the route itself matches.

    ``fallback`` is returned when no route matched, which keeps label
    cardinality bounded for 404 scans.
    """
    full_path = path if path is not None else request.url.path
    route = request.scope.get("route")
    if route and hasattr(route, "path"):
        return _route_prefix(route, full_path) + route.path
    return fallback if fallback is not None else full_path.rstrip("/")


def _route_prefix(route, full_path: str) -> str:
    path_regex = getattr(route, "path_regex", None)
    if path_regex is None:
        return ""
    for i, char in enumerate(full_path):
        if char == "/" and path_regex.match(full_path[i:]):
            return full_path[:i]
    return ""


async def http_metrics_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Middleware to record HTTP metrics (counts, latency, in-flight).

    Reads the ``HttpMetrics`` implementation from ``request.app.state.http_metrics``
    so the middleware is decoupled from any concrete metrics library.
    """
    path = request.url.path
    if path in _METRICS_SKIP_EXACT or path.startswith(_METRICS_SKIP_SLASH):
        return await call_next(request)

    metrics = request.app.state.http_metrics
    method = request.method
    metrics.inc_in_progress(method)
    start = time.perf_counter()
    try:
        response = await call_next(request)
    finally:
        metrics.dec_in_progress(method)

    metrics.observe_request(
        method=method,
        endpoint=_build_endpoint_name(request, path=path, fallback="unmatched"),
        status_code=str(response.status_code),
        duration=time.perf_counter() - start,
    )
    return response


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


async def validation_exception_handler(
    request: Request, exc: RequestValidationError | ValidationError
) -> JSONResponse:
    """Exception handler for request schema validation errors.

    Returns a 422 whose ``details.errors`` lists one ``{location: message}``
    entry per failed field, e.g.::

        {
            "success": false,
            "error": "Request validation failed",
            "details": {"errors": [{"body.pages": "Field required"}]}
        }
    """
    error_messages = unpack_validation_error(exc)
    logger.warning(f"Validation error on {request.method} {request.url.path}: {error_messages}")
    return _error_response(422, "Request validation failed", error_messages)


# Ordered: the first matching base class wins, so subclasses with their own
# status must come before their parents.
_STATUS_MAP: tuple[tuple[type[PageMeterException], int], ...] = (
    (BadRequestError, 400),
    (UnauthorizedException, 401),
    (InsufficientCreditsError, 402),
    (NotFoundException, 404),
    (InvalidStateError, 409),
    (ExternalServiceError, 503),
)


def _status_for(exc: PageMeterException) -> int:
    for exc_type, code in _STATUS_MAP:
        if isinstance(exc, exc_type):
            return code
    return 500


def _details_for(exc: PageMeterException) -> dict | None:
    if isinstance(exc, InsufficientCreditsError):
        return CreditBreakdownOut.from_domain(exc.eligibility).model_dump(by_alias=True)
    if isinstance(exc, BatchValidationError):
        details = {"kind": exc.kind.value}
        if exc.file_name is not None:
            details["file"] = exc.file_name
        return details
    return None


async def pagemeter_exception_handler(request: Request, exc: PageMeterException) -> JSONResponse:
    """Generic exception handler for all PageMeterException types.

    Maps exception types to HTTP status codes by base class, so any new
    domain exception inheriting from BadRequestError, InvalidStateError, etc.
    is mapped without registering it here. Store failures return a generic
    message; their cause is logged, not exposed.
    """
    status_code = _status_for(exc)

    if status_code == 503:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return _error_response(status_code, _SERVICE_UNAVAILABLE_MESSAGE)

    if status_code == 500:
        logger.error(f"Unmapped {exc.__class__.__name__} on {request.url.path}: {exc}")

    message = getattr(exc, "message", None) or str(exc)
    return _error_response(status_code, message, _details_for(exc))
