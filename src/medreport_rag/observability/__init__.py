"""
Observability Module - OpenTelemetry tracing

USAGE:
------
# At application startup:
from medreport_rag.observability import init_tracing

init_tracing()  # Installs a tracer provider if TRACING_ENABLED=true

# In code that needs tracing:
from medreport_rag.observability import get_tracer

tracer = get_tracer()
with tracer.start_span("my_operation", attributes={"key": "value"}) as span:
    # ... do work ...
    span.set_attribute("result", "success")
"""

from __future__ import annotations

import logging

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from medreport_rag.observability.config import (
    TracingConfig,
    get_config,
    reset_config,
)
from medreport_rag.observability.instrumentation import register_instrumentors, uninstrument
from medreport_rag.observability.tracer import (
    TracerProtocol,
    SpanProtocol,
    NoOpTracer,
    NoOpSpan,
    get_tracer,
    reset_tracer,
)
from medreport_rag.observability.attributes import (
    GEN_AI_SYSTEM,
    GEN_AI_REQUEST_MODEL,
    REPORT_ID,
    REPORT_CATEGORY,
    REPORT_STATUS,
    INGEST_CHUNKS_PROCESSED,
    INGEST_RAG_ENABLED,
    SUMMARY_GENERATION_MODE,
    SUMMARY_SUCCESS,
    summary_run_attributes,
)

logger = logging.getLogger(__name__)

_tracing_initialized = False


def init_tracing(config: TracingConfig | None = None) -> bool:
    """
    Initialize OpenTelemetry tracing.

    This should be called once at application startup.

    Args:
        config: Optional config (uses env vars if not provided)

    Returns:
        True if tracing was initialized, False if disabled
    """
    global _tracing_initialized
    if _tracing_initialized:
        return True

    config = config or get_config()

    if not config.enabled:
        logger.debug("Tracing disabled")
        return False

    if config.collector_endpoint:
        exporter = OTLPSpanExporter(endpoint=config.collector_endpoint)
        logger.info(f"Exporting traces to: {config.collector_endpoint}")
    else:
        exporter = ConsoleSpanExporter()
        logger.info("Exporting traces to console")

    provider = TracerProvider(
        resource=Resource.create({"service.name": config.service_name})
    )
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    register_instrumentors(provider, capture_content=config.capture_content)

    reset_tracer()
    _tracing_initialized = True
    return True


def shutdown_tracing() -> None:
    """Flush spans and shut the provider down."""
    global _tracing_initialized

    if not _tracing_initialized:
        return

    uninstrument()
    provider = trace.get_tracer_provider()
    if isinstance(provider, TracerProvider):
        provider.shutdown()

    reset_tracer()
    reset_config()
    _tracing_initialized = False


__all__ = [
    # Initialization
    "init_tracing",
    "shutdown_tracing",
    # Config
    "TracingConfig",
    "get_config",
    "reset_config",
    # Tracer
    "TracerProtocol",
    "SpanProtocol",
    "NoOpTracer",
    "NoOpSpan",
    "get_tracer",
    "reset_tracer",
    # Attributes
    "GEN_AI_SYSTEM",
    "GEN_AI_REQUEST_MODEL",
    "REPORT_ID",
    "REPORT_CATEGORY",
    "REPORT_STATUS",
    "INGEST_CHUNKS_PROCESSED",
    "INGEST_RAG_ENABLED",
    "SUMMARY_GENERATION_MODE",
    "SUMMARY_SUCCESS",
    "summary_run_attributes",
]
