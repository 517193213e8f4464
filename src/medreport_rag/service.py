"""
Service entry points - what the outer application calls.

Two operations are exposed, mirroring the two serverless functions of the
web application:
- process_document(report_id): ingestion (chunk -> embed -> store)
- generate_summary(report_id): summarization (and regeneration)

MedReportService wires every component from one PipelineConfig. With
Postgres enabled all stores share a single async connection per service
instance; nothing is shared between instances, so each invocation can
build its own service.

Example:
    service = await MedReportService.from_config(PipelineConfig.from_env())
    async with service:
        await service.process_document("report-123")
        result = await service.generate_summary("report-123")
"""

from __future__ import annotations

import logging
from typing import Any

import psycopg
from pgvector.psycopg import register_vector_async

from medreport_rag.config import PipelineConfig
from medreport_rag.core.errors import PersistenceError
from medreport_rag.core.protocols import (
    ContentStore,
    DocumentRepository,
    EmbeddingProvider,
    InsightAugmenter,
    SummaryStore,
    VectorStore,
)
from medreport_rag.embeddings import get_embedding_provider
from medreport_rag.ingestion.pipeline import IngestionPipeline, IngestionReport
from medreport_rag.insights import get_insight_augmenter
from medreport_rag.retrieval.retriever import Retriever
from medreport_rag.retrieval.store import get_vector_store
from medreport_rag.storage.content import get_content_store
from medreport_rag.storage.documents import (
    InMemoryDocumentRepository,
    PgDocumentRepository,
)
from medreport_rag.storage.summaries import InMemorySummaryStore, PgSummaryStore
from medreport_rag.summarization.generator import ReportGenerator, get_report_generator
from medreport_rag.summarization.orchestrator import (
    SummarizationError,
    SummarizationOrchestrator,
    SummarizationResult,
)

logger = logging.getLogger(__name__)


class MedReportService:
    """Ingestion and summarization over one set of stores."""

    def __init__(
        self,
        config: PipelineConfig,
        documents: DocumentRepository,
        summaries: SummaryStore,
        store: VectorStore,
        content: ContentStore,
        embeddings: EmbeddingProvider | None = None,
        generator: ReportGenerator | None = None,
        augmenter: InsightAugmenter | None = None,
        connection: psycopg.AsyncConnection | None = None,
    ):
        self.config = config
        self.documents = documents
        self.summaries = summaries
        self.store = store
        self._connection = connection

        retriever = (
            Retriever(
                embeddings,
                store,
                similarity_floor=config.similarity_floor,
                limit=config.match_count,
            )
            if embeddings is not None
            else None
        )

        self.ingestion = IngestionPipeline(
            documents,
            content,
            store,
            embeddings,
            chunk_size=config.chunk_size,
            chunk_overlap=config.chunk_overlap,
        )
        self.orchestrator = SummarizationOrchestrator(
            documents,
            summaries,
            content,
            generator,
            retriever=retriever,
            augmenter=augmenter,
        )

    @classmethod
    async def from_config(cls, config: PipelineConfig) -> "MedReportService":
        """
        Build a service from configuration.

        Missing embedding / insight credentials are supported modes; the
        corresponding components are simply left out.
        """
        connection = None
        if config.use_postgres:
            try:
                connection = await psycopg.AsyncConnection.connect(
                    config.database_url, autocommit=True
                )
                await connection.execute("CREATE EXTENSION IF NOT EXISTS vector")
                await register_vector_async(connection)
            except psycopg.Error as e:
                raise PersistenceError(f"Could not connect to database: {e}") from e

            documents = PgDocumentRepository(config.database_url, connection=connection)
            summaries = PgSummaryStore(config.database_url, connection=connection)
        else:
            documents = InMemoryDocumentRepository()
            summaries = InMemorySummaryStore()

        embeddings = get_embedding_provider(config)
        if embeddings is None:
            logger.warning("No embedding credential configured - RAG disabled")

        return cls(
            config,
            documents=documents,
            summaries=summaries,
            store=get_vector_store(config, connection=connection),
            content=get_content_store(config.content_root),
            embeddings=embeddings,
            generator=get_report_generator(config),
            augmenter=get_insight_augmenter(config),
            connection=connection,
        )

    async def __aenter__(self) -> "MedReportService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    async def init_db(self) -> None:
        """Create tables and indexes. Reports first: the others reference it."""
        for component in (self.documents, self.store, self.summaries):
            await component.create_schema()

    async def process_document(self, document_id: str) -> IngestionReport:
        return await self.ingestion.process_document(document_id)

    async def generate_summary(
        self, document_id: str
    ) -> SummarizationResult | SummarizationError:
        return await self.orchestrator.generate_summary(document_id)
