"""
Summarization orchestrator - the generate-summary entry point.

Request state machine:

    start -> load -> processing -> [graph] -> persist -> completed
                          \\______________________________/
                                        failed

The graph (fetch, retrieve, augment, prompt, generate, parse) degrades
its best-effort stages locally; anything it raises is fatal. A missing
report fails before any status mutation. Every other fatal error leaves
the report "failed", never stuck in "processing".

INTERVIEW TALKING POINT:
------------------------
"Regeneration is the same call again. The summary write is an upsert
keyed by report id, so re-running, or running twice at once, converges
on one summary row without any locking."
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from medreport_rag.core.errors import (
    ConfigurationError,
    DocumentNotFoundError,
    MedReportRAGError,
)
from medreport_rag.core.protocols import (
    ContentStore,
    DocumentRepository,
    DocumentStatus,
    InsightAugmenter,
    SummaryStore,
)
from medreport_rag.observability.attributes import (
    GEN_AI_COMPLETION,
    GEN_AI_SYSTEM,
    REPORT_CATEGORY,
    REPORT_STATUS,
    SUMMARY_CONTENT_PLACEHOLDER,
    SUMMARY_CONTEXT_CHARS,
    SUMMARY_ERROR_TYPE,
    SUMMARY_HAS_INSIGHTS,
    SUMMARY_SUCCESS,
    summary_run_attributes,
)
from medreport_rag.observability.tracer import get_tracer
from medreport_rag.retrieval.retriever import Retriever
from medreport_rag.schemas.summary import ReportSummary
from medreport_rag.summarization.generator import ReportGenerator
from medreport_rag.summarization.graph import build_summary_graph
from medreport_rag.summarization.state import create_initial_state

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# RESULT TYPES
# ---------------------------------------------------------------------------


@dataclass
class SummarizationResult:
    """A completed summarization."""

    summary: ReportSummary
    rag_context_used: bool
    domain_insights_used: bool
    content_placeholder: bool
    generation_mode: str
    retrieval_latency_ms: float
    generation_latency_ms: float
    total_latency_ms: float

    @property
    def document_id(self) -> str:
        return self.summary.document_id

    def to_dict(self) -> dict:
        return {
            "success": True,
            "summary": self.summary.model_dump(),
            "rag_context_used": self.rag_context_used,
            "domain_insights_used": self.domain_insights_used,
            "content_placeholder": self.content_placeholder,
            "generation_mode": self.generation_mode,
        }


@dataclass
class SummarizationError:
    """A failed summarization, reportable to the caller."""

    document_id: str
    error_type: str
    error_message: str

    def to_dict(self) -> dict:
        return {
            "success": False,
            "document_id": self.document_id,
            "error_type": self.error_type,
            "error": self.error_message,
        }


# ---------------------------------------------------------------------------
# ORCHESTRATOR
# ---------------------------------------------------------------------------


class SummarizationOrchestrator:
    """
    Coordinates one summarization request end to end.

    Dependencies are INJECTED. generator=None means no generation
    credential is configured: requests fail with a ConfigurationError
    (and the report is marked failed) rather than hanging.
    """

    def __init__(
        self,
        documents: DocumentRepository,
        summaries: SummaryStore,
        content: ContentStore,
        generator: ReportGenerator | None,
        retriever: Retriever | None = None,
        augmenter: InsightAugmenter | None = None,
    ):
        self._documents = documents
        self._summaries = summaries
        self._generator = generator
        self._graph = (
            build_summary_graph(content, generator, retriever=retriever, augmenter=augmenter)
            if generator is not None
            else None
        )

    async def generate_summary(
        self, document_id: str
    ) -> SummarizationResult | SummarizationError:
        """Summarize (or re-summarize) one report."""
        mode = self._generator.mode if self._generator else "disabled"
        model = self._generator.model_name if self._generator else "none"

        tracer = get_tracer()
        with tracer.start_span(
            "summarize.generate_summary",
            attributes=summary_run_attributes(document_id, mode, model),
        ) as span:
            span.set_attribute(GEN_AI_SYSTEM, "openai")
            outcome = await self._run(document_id, span)

            if isinstance(outcome, SummarizationResult):
                span.set_attributes({
                    SUMMARY_SUCCESS: True,
                    REPORT_STATUS: DocumentStatus.COMPLETED,
                    SUMMARY_CONTENT_PLACEHOLDER: outcome.content_placeholder,
                    SUMMARY_HAS_INSIGHTS: outcome.domain_insights_used,
                })
                span.set_content(GEN_AI_COMPLETION, outcome.summary.full_summary)
                span.set_status("ok")
            else:
                span.set_attributes({
                    SUMMARY_SUCCESS: False,
                    SUMMARY_ERROR_TYPE: outcome.error_type,
                })
                span.set_status("error", outcome.error_message)
            return outcome

    async def _run(self, document_id: str, span) -> SummarizationResult | SummarizationError:
        start = time.time()

        # 1. Load. Nothing has been mutated yet, so failures here stop at once.
        try:
            document = await self._documents.get(document_id)
            if document is None:
                raise DocumentNotFoundError(document_id)
        except MedReportRAGError as e:
            logger.error(f"Could not load report {document_id}: {e}")
            return SummarizationError(document_id, type(e).__name__, str(e))
        span.set_attribute(REPORT_CATEGORY, document.category)

        # 2. Processing
        try:
            await self._documents.set_status(document_id, DocumentStatus.PROCESSING)
        except MedReportRAGError as e:
            logger.error(f"Could not mark report {document_id} processing: {e}")
            return SummarizationError(document_id, type(e).__name__, str(e))

        # 3-9. Graph, persist, complete
        try:
            if self._graph is None:
                raise ConfigurationError("No generation credential configured")

            state = await self._graph.ainvoke(create_initial_state(document))
            span.set_attribute(SUMMARY_CONTEXT_CHARS, len(state["retrieved_context"]))

            summary = ReportSummary.from_payload(document_id, state["payload"])
            await self._summaries.upsert(summary)
            await self._documents.set_status(
                document_id,
                DocumentStatus.COMPLETED,
                processed_at=datetime.now(timezone.utc),
            )
        except Exception as e:
            logger.exception(f"Summarization failed for {document_id}")
            await self._mark_failed(document_id)
            return SummarizationError(document_id, type(e).__name__, str(e))

        logger.info(f"Summary stored for {document_id}")
        return SummarizationResult(
            summary=summary,
            rag_context_used=bool(state["retrieved_context"]),
            domain_insights_used=state["domain_insights"] is not None,
            content_placeholder=state["content_is_placeholder"],
            generation_mode=self._generator.mode,
            retrieval_latency_ms=state["retrieval_latency_ms"],
            generation_latency_ms=state["generation_latency_ms"],
            total_latency_ms=(time.time() - start) * 1000,
        )

    async def _mark_failed(self, document_id: str) -> None:
        try:
            await self._documents.set_status(document_id, DocumentStatus.FAILED)
        except MedReportRAGError as e:
            logger.error(f"Could not mark report {document_id} failed: {e}")
