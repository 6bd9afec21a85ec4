"""Metrics, tracing and audit logging for the proposal registry."""

from .audit import AuditLogRecord, AuditMiddleware, mask_credentials
from .metrics import (
    PROPOSAL_OPERATIONS_COUNTER,
    REQUEST_COUNTER,
    REQUEST_ERROR_COUNTER,
    REQUEST_LATENCY_SECONDS,
    PrometheusMiddleware,
    metrics_router,
    record_operation,
)
from .tracing import (
    initialise_tracing,
    instrument_fastapi_app,
    instrument_sqlalchemy_engine,
    operation_span,
)

__all__ = [
    "AuditLogRecord",
    "AuditMiddleware",
    "PROPOSAL_OPERATIONS_COUNTER",
    "PrometheusMiddleware",
    "REQUEST_COUNTER",
    "REQUEST_ERROR_COUNTER",
    "REQUEST_LATENCY_SECONDS",
    "initialise_tracing",
    "instrument_fastapi_app",
    "instrument_sqlalchemy_engine",
    "mask_credentials",
    "metrics_router",
    "operation_span",
    "record_operation",
]
