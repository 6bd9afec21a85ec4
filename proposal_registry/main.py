"""ASGI application for the proposal registry and the ``proposal-registry`` command."""
from __future__ import annotations

import uvicorn
from fastapi import FastAPI

from proposal_registry.api.routes import register_routes
from proposal_registry.core.config import Settings, get_settings
from proposal_registry.core.logging import configure_logging
from proposal_registry.obs import (
    AuditMiddleware,
    PrometheusMiddleware,
    initialise_tracing,
    instrument_fastapi_app,
    metrics_router,
)


def _add_observability(application: FastAPI, settings: Settings) -> None:
    if settings.enable_audit_log:
        application.add_middleware(AuditMiddleware)
    if settings.enable_metrics:
        application.add_middleware(PrometheusMiddleware)
        application.include_router(metrics_router)
    if settings.enable_tracing:
        instrument_fastapi_app(application)


def create_application(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI app: routes under ``/api`` plus the enabled observability layers."""
    configure_logging()
    settings = settings or get_settings()
    if settings.enable_tracing:
        initialise_tracing(service_name=settings.app_name, endpoint=settings.otel_exporter_endpoint)

    application = FastAPI(
        title=settings.app_name,
        version=settings.version,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
    )
    register_routes(application)
    _add_observability(application, settings)
    return application


app = create_application()


def run() -> None:
    """Serve ``app`` with uvicorn on the configured ``HOST`` and ``PORT``."""
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
