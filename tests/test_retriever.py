"""
Unit Tests for the Retriever

The retriever is best-effort: these tests pin the context format and
check that every failure degrades to an empty string.
"""

from unittest.mock import AsyncMock, MagicMock

import numpy as np
import pytest

from medreport_rag.core.errors import PersistenceError, ProviderError
from medreport_rag.core.protocols import SimilarFragment
from medreport_rag.retrieval.retriever import Retriever, format_context


def _hit(index: int, similarity: float, content: str) -> SimilarFragment:
    return SimilarFragment(
        id=f"doc:{index}", document_id="doc", content=content, index=index, similarity=similarity
    )


# ---------------------------------------------------------------------------
# FORMATTING
# ---------------------------------------------------------------------------


class TestFormatContext:

    def test_labeled_blocks_in_given_order(self):
        context = format_context([_hit(3, 0.923, "Nodule 6 mm."), _hit(0, 0.81, "No effusion.")])

        assert context == (
            "[Chunk 1 - Relevance: 92.3%]\nNodule 6 mm.\n\n"
            "[Chunk 2 - Relevance: 81.0%]\nNo effusion."
        )

    def test_empty(self):
        assert format_context([]) == ""


# ---------------------------------------------------------------------------
# RETRIEVE
# ---------------------------------------------------------------------------


class TestRetriever:

    @pytest.mark.asyncio
    async def test_retrieves_scoped_context(self, vector_store, keyword_embeddings):
        await vector_store.upsert_fragment(
            "report-1", 0, "6 mm nodule right upper lobe", np.array([1.0, 0.0, 0.0])
        )
        await vector_store.upsert_fragment(
            "report-1", 1, "cholesterol panel", np.array([0.0, 1.0, 0.0])
        )
        await vector_store.upsert_fragment(
            "report-2", 0, "other patient nodule", np.array([1.0, 0.0, 0.0])
        )
        retriever = Retriever(keyword_embeddings, vector_store)

        context = await retriever.retrieve("report-1", "Analyze ct scan report findings")

        assert context == "[Chunk 1 - Relevance: 100.0%]\n6 mm nodule right upper lobe"

    @pytest.mark.asyncio
    async def test_no_relevant_fragments_returns_empty(self, vector_store, keyword_embeddings):
        await vector_store.upsert_fragment(
            "report-1", 0, "cholesterol panel", np.array([0.0, 1.0, 0.0])
        )
        retriever = Retriever(keyword_embeddings, vector_store)

        assert await retriever.retrieve("report-1", "nodule") == ""

    @pytest.mark.asyncio
    async def test_embedding_failure_returns_empty(self, vector_store, failing_embeddings):
        retriever = Retriever(failing_embeddings, vector_store)

        assert await retriever.retrieve("report-1", "nodule") == ""

    @pytest.mark.asyncio
    async def test_store_failure_returns_empty(self, keyword_embeddings):
        store = MagicMock()
        store.query_similar = AsyncMock(side_effect=PersistenceError("db down"))
        retriever = Retriever(keyword_embeddings, store)

        assert await retriever.retrieve("report-1", "nodule") == ""

    @pytest.mark.asyncio
    async def test_passes_floor_and_limit(self, keyword_embeddings):
        store = MagicMock()
        store.query_similar = AsyncMock(return_value=[])
        retriever = Retriever(keyword_embeddings, store, similarity_floor=0.5, limit=3)

        await retriever.retrieve("report-1", "nodule")
        await retriever.retrieve("report-1", "nodule", similarity_floor=0.9, limit=1)

        first, second = store.query_similar.await_args_list
        assert first.kwargs == {"document_id": "report-1", "similarity_floor": 0.5, "limit": 3}
        assert second.kwargs == {"document_id": "report-1", "similarity_floor": 0.9, "limit": 1}

    @pytest.mark.asyncio
    async def test_search_propagates_errors(self, vector_store, failing_embeddings):
        """search() is the raw path; only retrieve() swallows failures."""
        retriever = Retriever(failing_embeddings, vector_store)

        with pytest.raises(ProviderError):
            await retriever.search("report-1", "nodule")
