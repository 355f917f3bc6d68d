"""Main module of the FastAPI application.

This module sets up the FastAPI application, the middleware that tags, logs
and measures requests, and the handlers that map domain errors to HTTP.
"""

import os
import subprocess
import sys
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from pagemeter.api.deps import get_container
from pagemeter.api.middleware import (
    add_request_id,
    exception_logging_middleware,
    http_metrics_middleware,
    log_requests,
    pagemeter_exception_handler,
    validation_exception_handler,
)
from pagemeter.api.v1.api import api_router
from pagemeter.core.config import settings
from pagemeter.core.container import Container
from pagemeter.core.exceptions import PageMeterException
from pagemeter.core.logging import logger
from pagemeter.db.session import async_engine


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events.

    Initializes the DI container and optionally runs alembic migrations.
    """
    from pagemeter.core import container as container_mod
    from pagemeter.core.container import initialize_container

    logger.info("Initializing dependency injection container...")
    initialize_container(settings)
    app.state.http_metrics = container_mod.container.http_metrics
    logger.info("Container initialized successfully")

    if settings.RUN_ALEMBIC_MIGRATIONS:
        logger.info("Running alembic migrations...")
        env = os.environ.copy()
        backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        env["PYTHONPATH"] = backend_dir
        subprocess.run(
            [sys.executable, "-m", "alembic", "upgrade", "heads"],
            check=True,
            cwd=backend_dir,
            env=env,
        )

    yield

    await async_engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.include_router(api_router)

# Order matters: first registered = innermost middleware.
app.middleware("http")(exception_logging_middleware)
app.middleware("http")(http_metrics_middleware)
app.middleware("http")(log_requests)
app.middleware("http")(add_request_id)

app.exception_handler(RequestValidationError)(validation_exception_handler)
app.exception_handler(ValidationError)(validation_exception_handler)
app.exception_handler(PageMeterException)(pagemeter_exception_handler)

CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]

if settings.ADDITIONAL_CORS_ORIGINS:
    if settings.is_local:
        CORS_ORIGINS.append("*")
    else:
        CORS_ORIGINS.extend(
            origin.strip() for origin in settings.ADDITIONAL_CORS_ORIGINS.split(",") if origin
        )

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.get("/metrics", include_in_schema=False)
async def metrics(c: Container = Depends(get_container)) -> Response:
    """Prometheus exposition of charge and HTTP metrics."""
    renderer = c.metrics_renderer
    return Response(content=renderer.generate(), media_type=renderer.content_type)
