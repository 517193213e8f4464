"""
Summarization state definition - the data flowing through the LangGraph.

Separated because the state schema changes for different reasons than
node logic or graph structure.

Input fields are set at invocation time, everything else is written by
exactly one node. Best-effort nodes always write their key, with "" or
None when their stage degraded.
"""

from __future__ import annotations

from typing import Any, TypedDict

from medreport_rag.core.protocols import Document
from medreport_rag.schemas.summary import SummaryPayload
from medreport_rag.summarization.generator import GenerationResult
from medreport_rag.summarization.prompts import PromptParts


class SummaryState(TypedDict):
    """State that flows through the summarization graph."""

    # -------------------------------------------------------------------------
    # INPUT (set at invocation)
    # -------------------------------------------------------------------------
    document: Document

    # -------------------------------------------------------------------------
    # INTERMEDIATE (populated by nodes)
    # -------------------------------------------------------------------------
    content: str
    content_is_placeholder: bool
    retrieved_context: str
    domain_insights: Any | None
    prompt: PromptParts | None
    generation: GenerationResult | None

    # -------------------------------------------------------------------------
    # OUTPUT (final result)
    # -------------------------------------------------------------------------
    payload: SummaryPayload | None

    # -------------------------------------------------------------------------
    # METRICS
    # -------------------------------------------------------------------------
    retrieval_latency_ms: float
    generation_latency_ms: float


def create_initial_state(document: Document) -> SummaryState:
    """Initial state for one summarization request."""
    return SummaryState(
        document=document,
        content="",
        content_is_placeholder=False,
        retrieved_context="",
        domain_insights=None,
        prompt=None,
        generation=None,
        payload=None,
        retrieval_latency_ms=0,
        generation_latency_ms=0,
    )
