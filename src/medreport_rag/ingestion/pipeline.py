"""
Ingestion pipeline - chunk → embed → persist, once per uploaded report.

All fragments are embedded before anything is written, and the write
replaces the report's whole fragment set in one step. A failed or
abandoned run therefore never leaves a partial index range behind, and
re-ingestion supersedes rather than appends.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace

from medreport_rag.core.errors import (
    ConfigurationError,
    DocumentNotFoundError,
    PersistenceError,
    ProviderError,
)
from medreport_rag.core.protocols import (
    ContentStore,
    DocumentRepository,
    EmbeddingProvider,
    VectorStore,
)
from medreport_rag.ingestion.chunker import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    chunk_text,
)
from medreport_rag.observability.attributes import (
    INGEST_CHUNKS_PROCESSED,
    INGEST_RAG_ENABLED,
    REPORT_ID,
)
from medreport_rag.observability.tracer import get_tracer
from medreport_rag.retrieval.fragment import Fragment
from medreport_rag.storage.content import placeholder_content

logger = logging.getLogger(__name__)


@dataclass
class IngestionReport:
    """Outcome of one ingestion run, as reported to the caller."""

    success: bool
    chunks_processed: int
    rag_enabled: bool
    message: str

    def to_dict(self) -> dict:
        return asdict(self)


class IngestionPipeline:
    """
    Turns a report into embedded fragments.

    Dependencies are INJECTED. embeddings=None is the supported
    "no embedding credential" mode: nothing is stored and the caller is
    told RAG is disabled.
    """

    def __init__(
        self,
        documents: DocumentRepository,
        content: ContentStore,
        store: VectorStore,
        embeddings: EmbeddingProvider | None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
    ):
        self._documents = documents
        self._content = content
        self._store = store
        self._embeddings = embeddings
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    async def process_document(self, document_id: str) -> IngestionReport:
        """Ingest one report. Never raises; the report says what happened."""
        tracer = get_tracer()
        with tracer.start_span("ingest.process_document", attributes={
            REPORT_ID: document_id,
        }) as span:
            report = await self._process(document_id)
            span.set_attributes({
                INGEST_CHUNKS_PROCESSED: report.chunks_processed,
                INGEST_RAG_ENABLED: report.rag_enabled,
            })
            span.set_status("ok" if report.success else "error", report.message)
            return report

    async def _process(self, document_id: str) -> IngestionReport:
        if self._embeddings is None:
            logger.info("Embeddings disabled: no embedding credential configured")
            return IngestionReport(
                success=True,
                chunks_processed=0,
                rag_enabled=False,
                message="Document received - RAG disabled (no embedding credential configured)",
            )

        try:
            document = await self._documents.get(document_id)
            if document is None:
                raise DocumentNotFoundError(document_id)
        except (PersistenceError, DocumentNotFoundError) as e:
            logger.error(f"Could not load report {document_id}: {e}")
            return self._failed(f"Could not load report: {e}")

        try:
            text = await self._content.fetch_text(document.file_url)
        except Exception as e:
            logger.warning(f"Content fetch failed for {document_id}, using placeholder: {e}")
            text = placeholder_content(document)

        # Whitespace-only windows trim to "" and embedding APIs reject empty input
        windows = [
            draft
            for draft in chunk_text(text, self.chunk_size, self.chunk_overlap)
            if draft.content
        ]
        drafts = [replace(draft, index=i) for i, draft in enumerate(windows)]
        logger.info(f"Created {len(drafts)} chunks for {document_id}")

        try:
            vectors = await self._embeddings.embed_batch([d.content for d in drafts])
        except ProviderError as e:
            logger.error(f"Embedding failed for {document_id}: {e}")
            return self._failed(f"RAG failed: embedding provider error ({e})")

        fragments = [
            Fragment.from_draft(document_id, draft, vector)
            for draft, vector in zip(drafts, vectors)
        ]

        try:
            await self._store.replace_fragments(document_id, fragments)
        except (PersistenceError, ConfigurationError) as e:
            logger.error(f"Persisting fragments failed for {document_id}: {e}")
            return self._failed(f"RAG failed: could not store fragments ({e})")

        logger.info(f"All {len(fragments)} chunks stored for {document_id}")
        return IngestionReport(
            success=True,
            chunks_processed=len(fragments),
            rag_enabled=True,
            message="Document processed with RAG embeddings",
        )

    def _failed(self, message: str) -> IngestionReport:
        return IngestionReport(
            success=False,
            chunks_processed=0,
            rag_enabled=False,
            message=message,
        )
