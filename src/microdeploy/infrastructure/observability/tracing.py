"""OpenTelemetry tracing configuration."""

from __future__ import annotations

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)

from microdeploy.config import ObservabilitySettings


def setup_tracing(
    settings: ObservabilitySettings, exporter: SpanExporter | None = None
) -> TracerProvider | None:
    """Install a tracer provider; teardown phases are recorded as spans."""
    if not settings.tracing_enabled:
        return None

    resource = Resource.create({
        "service.name": settings.service_name,
        "service.version": "0.1.0",
    })
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(exporter or ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)
    return provider
