"""
Tracer Factory and NoOp Implementations

get_tracer() returns an OTelTracer once init_tracing() has installed a
provider, and a NoOpTracer otherwise.

Report text and model output are patient data. Spans therefore take them
through set_content(), which records nothing unless
TRACING_CAPTURE_CONTENT is on.
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator, Mapping, Protocol

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import StatusCode

# Captured prompts and completions are cut to this many characters
MAX_CONTENT_CHARS = 4000


# ---------------------------------------------------------------------------
# PROTOCOLS
# ---------------------------------------------------------------------------


class SpanProtocol(Protocol):
    """Protocol for span operations."""

    def set_attribute(self, key: str, value: Any) -> None:
        """Set one attribute (see observability.attributes for keys)."""
        ...

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        ...

    def set_content(self, key: str, text: str) -> None:
        """Attach prompt or completion text, if content capture is on."""
        ...

    def set_status(self, status: str, description: str | None = None) -> None:
        """Set span status ("ok" or "error")."""
        ...

    def record_exception(self, exception: Exception) -> None:
        ...


class TracerProtocol(Protocol):
    """Protocol for tracer operations."""

    @contextmanager
    def start_span(
        self, name: str, attributes: Mapping[str, Any] | None = None
    ) -> Iterator[SpanProtocol]:
        ...


def _attribute_value(value: Any) -> Any:
    """OTel accepts primitives only: enums (status, category) become values."""
    if isinstance(value, Enum):
        return value.value
    return value


def _clean(attributes: Mapping[str, Any] | None) -> dict[str, Any]:
    return {
        key: _attribute_value(value)
        for key, value in (attributes or {}).items()
        if value is not None
    }


# ---------------------------------------------------------------------------
# NOOP IMPLEMENTATIONS (tracing disabled)
# ---------------------------------------------------------------------------


class NoOpSpan:
    """No-op span that does nothing."""

    def set_attribute(self, key: str, value: Any) -> None:
        pass

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        pass

    def set_content(self, key: str, text: str) -> None:
        pass

    def set_status(self, status: str, description: str | None = None) -> None:
        pass

    def record_exception(self, exception: Exception) -> None:
        pass


class NoOpTracer:
    """No-op tracer that creates no-op spans."""

    @contextmanager
    def start_span(
        self, name: str, attributes: Mapping[str, Any] | None = None
    ) -> Iterator[NoOpSpan]:
        yield NoOpSpan()


# ---------------------------------------------------------------------------
# REAL OTEL TRACER
# ---------------------------------------------------------------------------


class OTelSpan:
    """OTel span restricted to primitive attributes and gated content."""

    def __init__(self, span: Any, capture_content: bool = False):
        self._span = span
        self._capture_content = capture_content

    def set_attribute(self, key: str, value: Any) -> None:
        if value is not None:
            self._span.set_attribute(key, _attribute_value(value))

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        self._span.set_attributes(_clean(attributes))

    def set_content(self, key: str, text: str) -> None:
        if self._capture_content and text:
            self._span.set_attribute(key, text[:MAX_CONTENT_CHARS])

    def set_status(self, status: str, description: str | None = None) -> None:
        if status == "ok":
            self._span.set_status(StatusCode.OK)
        else:
            self._span.set_status(StatusCode.ERROR, description)

    def record_exception(self, exception: Exception) -> None:
        self._span.record_exception(exception)


class OTelTracer:
    """Wraps an OTel tracer; spans inherit the content-capture setting."""

    def __init__(self, tracer: Any, capture_content: bool = False):
        self._tracer = tracer
        self._capture_content = capture_content

    @contextmanager
    def start_span(
        self, name: str, attributes: Mapping[str, Any] | None = None
    ) -> Iterator[OTelSpan]:
        with self._tracer.start_as_current_span(name, attributes=_clean(attributes)) as span:
            yield OTelSpan(span, self._capture_content)


# ---------------------------------------------------------------------------
# FACTORY
# ---------------------------------------------------------------------------

_tracer: TracerProtocol | None = None


def get_tracer(service_name: str = "medreport-rag") -> TracerProtocol:
    """
    Get the global tracer instance.

    Args:
        service_name: Instrumentation scope name (used on first call only)
    """
    global _tracer
    if _tracer is not None:
        return _tracer

    from medreport_rag.observability.config import get_config

    config = get_config()

    if not config.enabled or not isinstance(trace.get_tracer_provider(), TracerProvider):
        # Disabled, or init_tracing() has not installed a provider yet
        _tracer = NoOpTracer()
        return _tracer

    _tracer = OTelTracer(trace.get_tracer(service_name), config.capture_content)
    return _tracer


def reset_tracer() -> None:
    """Reset tracer (useful for testing)."""
    global _tracer
    _tracer = None
