"""
OpenInference Auto-Instrumentation

Registers auto-instrumentors for OpenAI (embeddings) and LangChain
(generation). Model calls are traced without code changes.

Prompt and response bodies carry patient data, so they are hidden unless
TRACING_CAPTURE_CONTENT is set.
"""

from __future__ import annotations

import logging

from openinference.instrumentation import TraceConfig
from openinference.instrumentation.langchain import LangChainInstrumentor
from openinference.instrumentation.openai import OpenAIInstrumentor
from opentelemetry.trace import TracerProvider

logger = logging.getLogger(__name__)

_instrumented = False


def register_instrumentors(
    tracer_provider: TracerProvider | None = None,
    capture_content: bool = False,
) -> bool:
    """
    Register OpenInference auto-instrumentors.

    This should be called once at startup, before any model calls.

    Args:
        tracer_provider: Provider the instrumentors export through
        capture_content: Record prompts and completions on spans

    Returns:
        True if any instrumentors were registered, False otherwise
    """
    global _instrumented
    if _instrumented:
        return True

    trace_config = TraceConfig(
        hide_inputs=not capture_content,
        hide_outputs=not capture_content,
    )
    registered = []

    for name, instrumentor in (
        ("openai", OpenAIInstrumentor()),
        ("langchain", LangChainInstrumentor()),
    ):
        try:
            instrumentor.instrument(tracer_provider=tracer_provider, config=trace_config)
            registered.append(name)
        except Exception as e:
            logger.warning(f"Failed to instrument {name}: {e}")

    if registered:
        logger.info(f"Registered instrumentors: {', '.join(registered)}")
        _instrumented = True
        return True

    return False


def uninstrument() -> None:
    """Remove all instrumentors (used on shutdown)."""
    global _instrumented
    if not _instrumented:
        return

    OpenAIInstrumentor().uninstrument()
    LangChainInstrumentor().uninstrument()
    _instrumented = False
