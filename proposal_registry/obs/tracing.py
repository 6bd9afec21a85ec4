"""OpenTelemetry spans around registry calls and the HTTP and SQL layers under them."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)
from opentelemetry.trace import Span
from sqlalchemy.engine import Engine

SPAN_PREFIX = "proposals"


def _span_processor(endpoint: str | None) -> SpanProcessor:
    # No collector configured: print spans so local runs still show them.
    if not endpoint:
        return SimpleSpanProcessor(ConsoleSpanExporter())
    return BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True))


def _provider_for(service_name: str) -> TracerProvider | None:
    provider = trace.get_tracer_provider()
    if isinstance(provider, TracerProvider) and provider.resource.attributes.get(SERVICE_NAME) == service_name:
        return provider
    return None


def initialise_tracing(*, service_name: str, endpoint: str | None = None) -> None:
    """Install the global tracer provider for ``service_name``.

    Spans go to the OTLP collector at ``endpoint`` when one is given and to the
    console otherwise. Calling this again for the same service is a no-op, so the
    application factory can run more than once in a process.
    """

    if _provider_for(service_name) is not None:
        return

    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: service_name}))
    provider.add_span_processor(_span_processor(endpoint))
    trace.set_tracer_provider(provider)


def instrument_fastapi_app(app: FastAPI) -> None:
    FastAPIInstrumentor().instrument_app(app)


def instrument_sqlalchemy_engine(engine: Engine) -> None:
    SQLAlchemyInstrumentor().instrument(engine=engine)


@contextmanager
def operation_span(operation: str, **attributes: Any) -> Iterator[Span]:
    """Open ``proposals.<operation>``, tagging it with the attributes that are set."""

    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(f"{SPAN_PREFIX}.{operation}") as span:
        span.set_attributes({key: value for key, value in attributes.items() if value is not None})
        yield span


__all__ = [
    "SPAN_PREFIX",
    "initialise_tracing",
    "instrument_fastapi_app",
    "instrument_sqlalchemy_engine",
    "operation_span",
]
