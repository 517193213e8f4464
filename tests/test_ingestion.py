"""
Unit Tests for the Ingestion Pipeline

Runs chunk -> embed -> store against in-memory stores and keyword
embeddings, so every outcome is checked through the stored fragments.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from medreport_rag.core.errors import PersistenceError
from medreport_rag.ingestion.pipeline import IngestionPipeline, IngestionReport
from medreport_rag.storage.content import InMemoryContentStore


LONG_REPORT = ("CT chest shows a 6 mm nodule. " * 80)[:2400]


@pytest.fixture
def long_content(sample_document) -> InMemoryContentStore:
    return InMemoryContentStore({sample_document.file_url: LONG_REPORT})


def _pipeline(documents, content, store, embeddings, **kwargs) -> IngestionPipeline:
    return IngestionPipeline(documents, content, store, embeddings, **kwargs)


class TestIngestion:

    @pytest.mark.asyncio
    async def test_chunks_embeds_and_stores(
        self, documents, long_content, vector_store, keyword_embeddings
    ):
        pipeline = _pipeline(documents, long_content, vector_store, keyword_embeddings)

        report = await pipeline.process_document("report-1")

        assert report == IngestionReport(
            success=True,
            chunks_processed=3,
            rag_enabled=True,
            message="Document processed with RAG embeddings",
        )
        stored = vector_store.fragments_for("report-1")
        assert [f.index for f in stored] == [0, 1, 2]
        assert [(f.metadata["start_char"], f.metadata["end_char"]) for f in stored] == [
            (0, 1000),
            (800, 1800),
            (1600, 2400),
        ]

    @pytest.mark.asyncio
    async def test_no_embedding_credential_is_supported_mode(
        self, documents, long_content, vector_store
    ):
        pipeline = _pipeline(documents, long_content, vector_store, None)

        report = await pipeline.process_document("report-1")

        assert report.success is True
        assert report.chunks_processed == 0
        assert report.rag_enabled is False
        assert await vector_store.count_fragments("report-1") == 0

    @pytest.mark.asyncio
    async def test_missing_document(self, documents, long_content, vector_store, keyword_embeddings):
        pipeline = _pipeline(documents, long_content, vector_store, keyword_embeddings)

        report = await pipeline.process_document("nope")

        assert report.success is False
        assert "not found" in report.message

    @pytest.mark.asyncio
    async def test_content_failure_indexes_placeholder(
        self, documents, vector_store, keyword_embeddings
    ):
        pipeline = _pipeline(documents, InMemoryContentStore(), vector_store, keyword_embeddings)

        report = await pipeline.process_document("report-1")

        assert report.success is True
        assert "Jane Doe" in vector_store.fragments_for("report-1")[0].content

    @pytest.mark.asyncio
    async def test_embedding_failure_persists_nothing(
        self, documents, long_content, vector_store, failing_embeddings
    ):
        pipeline = _pipeline(documents, long_content, vector_store, failing_embeddings)

        report = await pipeline.process_document("report-1")

        assert report.success is False
        assert report.rag_enabled is False
        assert report.chunks_processed == 0
        assert "RAG failed" in report.message
        assert await vector_store.count_fragments("report-1") == 0

    @pytest.mark.asyncio
    async def test_persistence_failure_reported(self, documents, long_content, keyword_embeddings):
        store = MagicMock()
        store.replace_fragments = AsyncMock(side_effect=PersistenceError("unique violation"))
        pipeline = _pipeline(documents, long_content, store, keyword_embeddings)

        report = await pipeline.process_document("report-1")

        assert report.success is False
        assert "could not store fragments" in report.message

    @pytest.mark.asyncio
    async def test_reingestion_replaces_fragment_set(
        self, documents, sample_document, vector_store, keyword_embeddings
    ):
        content = InMemoryContentStore({sample_document.file_url: LONG_REPORT})
        pipeline = _pipeline(documents, content, vector_store, keyword_embeddings)
        await pipeline.process_document("report-1")

        content._contents[sample_document.file_url] = "Short addendum: nodule stable."
        report = await pipeline.process_document("report-1")

        assert report.chunks_processed == 1
        stored = vector_store.fragments_for("report-1")
        assert [f.index for f in stored] == [0]
        assert stored[0].content == "Short addendum: nodule stable."

    @pytest.mark.asyncio
    async def test_custom_chunking(self, documents, long_content, vector_store, keyword_embeddings):
        pipeline = _pipeline(
            documents, long_content, vector_store, keyword_embeddings,
            chunk_size=500, chunk_overlap=100,
        )

        report = await pipeline.process_document("report-1")

        # ceil((2400 - 100) / 400)
        assert report.chunks_processed == 6

    @pytest.mark.asyncio
    async def test_whitespace_windows_skipped(
        self, documents, sample_document, vector_store, keyword_embeddings
    ):
        """Windows at [160,260) and [240,340) are blank and never embedded."""
        text = "x" * 100 + " " * 300 + "y" * 100
        content = InMemoryContentStore({sample_document.file_url: text})
        pipeline = _pipeline(
            documents, content, vector_store, keyword_embeddings,
            chunk_size=100, chunk_overlap=20,
        )

        report = await pipeline.process_document("report-1")

        assert report.success is True
        assert report.chunks_processed == 4
        stored = vector_store.fragments_for("report-1")
        assert [f.index for f in stored] == [0, 1, 2, 3]
        assert [f.metadata["start_char"] for f in stored] == [0, 80, 320, 400]
        assert all(f.content for f in stored)

    def test_report_to_dict(self):
        report = IngestionReport(True, 3, True, "ok")

        assert report.to_dict() == {
            "success": True,
            "chunks_processed": 3,
            "rag_enabled": True,
            "message": "ok",
        }
