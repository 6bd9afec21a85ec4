"""Mounts every router under ``/api``."""
from fastapi import APIRouter, FastAPI

from proposal_registry.api.routes import auth, health, proposals


def register_routes(application: FastAPI) -> None:
    api = APIRouter(prefix="/api")
    api.include_router(health.router, tags=["health"])
    api.include_router(auth.router, prefix="/auth", tags=["auth"])
    api.include_router(proposals.router, tags=["proposals"])
    application.include_router(api)


__all__ = ["register_routes"]
