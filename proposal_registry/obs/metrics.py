"""Prometheus metrics for HTTP traffic and registry outcomes."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

_HTTP_LABELS = ("method", "path", "status")

REQUEST_COUNTER = Counter("http_requests_total", "HTTP requests served.", _HTTP_LABELS)
REQUEST_ERROR_COUNTER = Counter(
    "http_request_errors_total", "HTTP requests that ended in a 5xx or an exception.", _HTTP_LABELS
)
REQUEST_LATENCY_SECONDS = Histogram(
    "http_request_latency_seconds", "Wall time spent serving a request.", ("method", "path")
)
PROPOSAL_OPERATIONS_COUNTER = Counter(
    "proposal_operations_total",
    "Registry operations by name and outcome.",
    ("operation", "outcome"),
)


def _route_path(request: Request) -> str:
    # The matched template (``/api/proposals/{proposal_id}``) keeps ids out of labels.
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Count and time every request by method, route template and status."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:  # type: ignore[override]
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            # Routing has run by now, so the template is available even on errors.
            path = _route_path(request)
            labels = {"method": request.method, "path": path, "status": str(status_code)}
            REQUEST_COUNTER.labels(**labels).inc()
            if status_code >= 500:
                REQUEST_ERROR_COUNTER.labels(**labels).inc()
            REQUEST_LATENCY_SECONDS.labels(method=request.method, path=path).observe(
                time.perf_counter() - started
            )


def record_operation(operation: str, outcome: str) -> None:
    """Count a registry operation; ``outcome`` is ``ok`` or the error class name."""
    PROPOSAL_OPERATIONS_COUNTER.labels(operation=operation, outcome=outcome).inc()


metrics_router = APIRouter(tags=["observability"])


@metrics_router.get("/metrics", include_in_schema=False)
def metrics_endpoint() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "PROPOSAL_OPERATIONS_COUNTER",
    "PrometheusMiddleware",
    "REQUEST_COUNTER",
    "REQUEST_ERROR_COUNTER",
    "REQUEST_LATENCY_SECONDS",
    "metrics_endpoint",
    "metrics_router",
    "record_operation",
]
