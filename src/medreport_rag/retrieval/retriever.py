"""
Retriever - turns a query into a ranked context blob for the prompt.

Retrieval is best-effort relative to summarization: the embedding call or
the similarity query may fail, and the result is then simply "no context".
Nothing raised here may abort the parent summarization request.
"""

from __future__ import annotations

import logging

from medreport_rag.core.protocols import EmbeddingProvider, SimilarFragment, VectorStore

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_FLOOR = 0.7
DEFAULT_MATCH_COUNT = 5


def format_context(results: list[SimilarFragment]) -> str:
    """
    Render results as labeled blocks, keeping their order.

    This is a PURE FUNCTION - the block numbering follows the
    descending-similarity order the store returned.
    """
    return "\n\n".join(
        f"[Chunk {n} - Relevance: {result.similarity * 100:.1f}%]\n{result.content}"
        for n, result in enumerate(results, start=1)
    )


class Retriever:
    """
    RAG orchestrator: embed the query, search one document, format the hits.

    Dependencies are INJECTED so tests can pass an in-memory store and
    mock embeddings.
    """

    def __init__(
        self,
        embeddings: EmbeddingProvider,
        store: VectorStore,
        similarity_floor: float = DEFAULT_SIMILARITY_FLOOR,
        limit: int = DEFAULT_MATCH_COUNT,
    ):
        self._embeddings = embeddings
        self._store = store
        self.similarity_floor = similarity_floor
        self.limit = limit

    async def search(
        self,
        document_id: str,
        query_text: str,
        similarity_floor: float | None = None,
        limit: int | None = None,
    ) -> list[SimilarFragment]:
        """Ranked fragments for the query. Errors propagate."""
        query_vector = await self._embeddings.embed(query_text)
        return await self._store.query_similar(
            query_vector,
            document_id=document_id,
            similarity_floor=(
                self.similarity_floor if similarity_floor is None else similarity_floor
            ),
            limit=self.limit if limit is None else limit,
        )

    async def retrieve(
        self,
        document_id: str,
        query_text: str,
        similarity_floor: float | None = None,
        limit: int | None = None,
    ) -> str:
        """
        Context blob for the query, or "" when nothing relevant is found.

        Any embedding or store failure is logged and converted to "".
        """
        try:
            results = await self.search(
                document_id, query_text, similarity_floor=similarity_floor, limit=limit
            )
        except Exception as e:
            logger.warning(f"Retrieval failed for {document_id}, continuing without context: {e}")
            return ""

        if not results:
            logger.info(f"No fragments above the similarity floor for {document_id}")
            return ""

        logger.info(f"Retrieved {len(results)} fragments for {document_id}")
        return format_context(results)
