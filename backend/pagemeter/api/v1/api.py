"""API routes for the FastAPI application."""

from fastapi import APIRouter

from pagemeter.api.v1.endpoints import batch, health, usage

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(batch.router, prefix="/batch", tags=["batch"])
api_router.include_router(usage.router, prefix="/usage", tags=["usage"])
