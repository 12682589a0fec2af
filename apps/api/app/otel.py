from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import Span

from app.context import get_request_identity
from app.middleware.correlation_id import CORRELATION_HEADER

_provider: TracerProvider | None = None
_exporters_installed = False


def tracer_provider(service_name: str) -> TracerProvider:
    """Return the process-wide provider, installing it globally on first use."""

    global _provider

    if _provider is None:
        resource = Resource.create(
            {
                "service.name": service_name,
                "service.version": os.getenv("APP_VERSION", "0.1.0"),
                "deployment.environment": os.getenv("APP_ENV", "local"),
            }
        )
        _provider = TracerProvider(resource=resource)
        trace.set_tracer_provider(_provider)
    return _provider


def _exporter_processors() -> list[SpanProcessor]:
    processors: list[SpanProcessor] = []
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if endpoint:
        processors.append(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
    if os.getenv("OTEL_CONSOLE_EXPORTER", "false").lower() == "true":
        processors.append(SimpleSpanProcessor(ConsoleSpanExporter()))
    return processors


def setup_otel(service_name: str, enable: bool) -> TracerProvider | None:
    global _exporters_installed

    if not enable:
        return None

    provider = tracer_provider(service_name)
    if not _exporters_installed:
        for processor in _exporter_processors():
            provider.add_span_processor(processor)
        _exporters_installed = True
    return provider


def setup_inmemory_otel(service_name: str = "api") -> InMemorySpanExporter:
    exporter = InMemorySpanExporter()
    tracer_provider(service_name).add_span_processor(SimpleSpanProcessor(exporter))
    return exporter


def annotate_request_identity(span: Span, identity: Mapping[str, str | None] | None = None) -> None:
    """Copy the correlation id, principal and resolved scope of the request onto ``span``."""

    if not span.is_recording():
        return
    for key, value in (identity if identity is not None else get_request_identity()).items():
        if value:
            span.set_attribute(key, value)


def get_fastapi_server_request_hook() -> Callable[[Span | None, dict[str, Any]], None]:
    correlation_header = CORRELATION_HEADER.encode("latin-1")

    def server_request_hook(span: Span | None, scope: dict[str, Any]) -> None:
        if span is None or not span.is_recording():
            return
        headers = dict(scope.get("headers", []))
        correlation_raw = headers.get(correlation_header)
        if correlation_raw:
            span.set_attribute("correlation_id", correlation_raw.decode("latin-1"))
        span.set_attribute("auth.credentials_present", b"authorization" in headers)

    return server_request_hook
