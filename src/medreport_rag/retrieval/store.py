"""
Vector store implementations.

Pattern: Protocol → Production impl → Test double → Factory

This module contains:
1. VectorStoreConfig - Configuration dataclass
2. PgVectorStore - PostgreSQL with pgvector (production)
3. InMemoryVectorStore - In-memory store (testing/development)
4. get_vector_store() - Factory function

INTERVIEW TALKING POINT:
------------------------
"The store never embeds anything itself. Ingestion hands it finished
vectors and the retriever hands it a query vector, so the store is pure
persistence plus one similarity primitive. Both implementations share the
same contract: similarity is 1 - cosine distance, strictly above the floor,
sorted descending, optionally scoped to one document."
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
import psycopg
from psycopg.types.json import Jsonb

from medreport_rag.config import PipelineConfig
from medreport_rag.core.errors import ConfigurationError
from medreport_rag.core.protocols import SimilarFragment
from medreport_rag.retrieval.fragment import Fragment
from medreport_rag.storage.database import PgConnectionOwner


# ---------------------------------------------------------------------------
# CONFIGURATION
# ---------------------------------------------------------------------------


@dataclass
class VectorStoreConfig:
    """Configuration for the vector store."""

    connection_string: str = "postgresql://localhost/medreport_rag"
    embedding_dim: int = 1536
    table_name: str = "report_chunks"
    documents_table: str = "reports"
    index_type: str = "ivfflat"  # or "hnsw"
    ivfflat_lists: int = 100

    @classmethod
    def from_pipeline_config(cls, config: PipelineConfig) -> "VectorStoreConfig":
        return cls(
            connection_string=config.database_url,
            embedding_dim=config.embedding_dim,
        )


def _check_dimensions(vector: np.ndarray, expected: int | None) -> None:
    """A vector of the wrong size means the provider and store disagree."""
    if expected is not None and len(vector) != expected:
        raise ConfigurationError(
            f"Embedding dimensionality mismatch: store expects {expected}, "
            f"got {len(vector)}"
        )


# ---------------------------------------------------------------------------
# PGVECTOR STORE (Production)
# ---------------------------------------------------------------------------


class PgVectorStore(PgConnectionOwner):
    """
    PostgreSQL fragment store using pgvector.

    WHY PGVECTOR:
    - POSTGRES: Fragments live next to the reports they belong to
    - CASCADE: Deleting a report deletes its fragments
    - IVFFLAT INDEX: Sub-linear approximate nearest neighbor search
    - UNIQUE (report_id, chunk_index): Concurrent re-ingestion cannot duplicate
    """

    def __init__(
        self,
        config: VectorStoreConfig,
        connection: psycopg.AsyncConnection | None = None,
    ):
        super().__init__(config.connection_string, connection)
        self.config = config

    async def create_schema(self) -> None:
        """Create the fragments table and indexes."""
        conn = await self._connection()
        table = self.config.table_name

        if self.config.index_type == "hnsw":
            index_sql = "USING hnsw (embedding vector_cosine_ops) WITH (m = 16, ef_construction = 64)"
        else:
            index_sql = (
                "USING ivfflat (embedding vector_cosine_ops) "
                f"WITH (lists = {self.config.ivfflat_lists})"
            )

        async with self._guard("creating fragment schema"):
            await conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {table} (
                    id BIGSERIAL PRIMARY KEY,
                    report_id TEXT NOT NULL
                        REFERENCES {self.config.documents_table}(id) ON DELETE CASCADE,
                    chunk_index INTEGER NOT NULL,
                    content TEXT NOT NULL,
                    embedding vector({self.config.embedding_dim}),
                    metadata JSONB,
                    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                    UNIQUE (report_id, chunk_index)
                )
                """
            )
            await conn.execute(
                f"""
                CREATE INDEX IF NOT EXISTS {table}_embedding_idx
                ON {table} {index_sql}
                """
            )
            await conn.execute(
                f"""
                CREATE INDEX IF NOT EXISTS {table}_report_id_idx
                ON {table} (report_id)
                """
            )

    def _upsert_sql(self) -> str:
        return f"""
            INSERT INTO {self.config.table_name}
                (report_id, chunk_index, content, embedding, metadata)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT (report_id, chunk_index) DO UPDATE SET
                content = EXCLUDED.content,
                embedding = EXCLUDED.embedding,
                metadata = EXCLUDED.metadata
        """

    async def upsert_fragment(
        self,
        document_id: str,
        index: int,
        content: str,
        vector: np.ndarray,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Insert a fragment, replacing any fragment at the same index."""
        _check_dimensions(vector, self.config.embedding_dim)
        conn = await self._connection()

        async with self._guard(f"writing fragment {index} of {document_id}"):
            await conn.execute(
                self._upsert_sql(),
                (document_id, index, content, vector, Jsonb(metadata or {})),
            )

    async def replace_fragments(
        self,
        document_id: str,
        fragments: list[Fragment],
    ) -> None:
        """Delete and rewrite the document's fragments in one transaction."""
        for fragment in fragments:
            _check_dimensions(fragment.embedding, self.config.embedding_dim)

        conn = await self._connection()
        async with self._guard(f"replacing fragments of {document_id}"):
            async with conn.transaction():
                await conn.execute(
                    f"DELETE FROM {self.config.table_name} WHERE report_id = %s",
                    (document_id,),
                )
                async with conn.cursor() as cur:
                    await cur.executemany(
                        self._upsert_sql(),
                        [
                            (
                                document_id,
                                f.index,
                                f.content,
                                f.embedding,
                                Jsonb(f.metadata),
                            )
                            for f in fragments
                        ],
                    )

    async def delete_fragments(self, document_id: str) -> int:
        conn = await self._connection()
        async with self._guard(f"deleting fragments of {document_id}"):
            cur = await conn.execute(
                f"DELETE FROM {self.config.table_name} WHERE report_id = %s",
                (document_id,),
            )
            return cur.rowcount

    async def count_fragments(self, document_id: str) -> int:
        conn = await self._connection()
        async with self._guard(f"counting fragments of {document_id}"):
            cur = await conn.execute(
                f"SELECT count(*) FROM {self.config.table_name} WHERE report_id = %s",
                (document_id,),
            )
            row = await cur.fetchone()
        return row[0]

    async def query_similar(
        self,
        query_vector: np.ndarray,
        document_id: str | None = None,
        similarity_floor: float = 0.7,
        limit: int = 5,
    ) -> list[SimilarFragment]:
        """Search for fragments similar to the query vector."""
        _check_dimensions(query_vector, self.config.embedding_dim)
        conn = await self._connection()
        table = self.config.table_name

        params = {
            "query": query_vector,
            "floor": similarity_floor,
            "limit": limit,
            "document_id": document_id,
        }
        scope = "report_id = %(document_id)s AND " if document_id is not None else ""

        async with self._guard("querying similar fragments"):
            cur = await conn.execute(
                f"""
                SELECT id, report_id, content, chunk_index, metadata,
                       1 - (embedding <=> %(query)s) AS similarity
                FROM {table}
                WHERE {scope}1 - (embedding <=> %(query)s) > %(floor)s
                ORDER BY embedding <=> %(query)s
                LIMIT %(limit)s
                """,
                params,
            )
            rows = await cur.fetchall()

        return [
            SimilarFragment(
                id=str(row[0]),
                document_id=row[1],
                content=row[2],
                index=row[3],
                metadata=row[4] or {},
                similarity=float(row[5]),
            )
            for row in rows
        ]


# ---------------------------------------------------------------------------
# IN-MEMORY STORE (Testing/Development)
# ---------------------------------------------------------------------------


class InMemoryVectorStore:
    """
    In-memory fragment store for development/testing.

    Implements the same interface as PgVectorStore but doesn't require Postgres.
    Uses exact cosine similarity over every stored fragment.
    """

    def __init__(self, embedding_dim: int | None = None):
        self.embedding_dim = embedding_dim
        self._fragments: dict[tuple[str, int], Fragment] = {}

    async def connect(self) -> None:
        """No-op for in-memory store."""
        pass

    async def close(self) -> None:
        """No-op for in-memory store."""
        pass

    async def create_schema(self) -> None:
        """No-op for in-memory store."""
        pass

    async def upsert_fragment(
        self,
        document_id: str,
        index: int,
        content: str,
        vector: np.ndarray,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        _check_dimensions(vector, self.embedding_dim)
        self._fragments[(document_id, index)] = Fragment(
            document_id=document_id,
            index=index,
            content=content,
            embedding=np.asarray(vector, dtype=np.float32),
            metadata=dict(metadata or {}),
        )

    async def replace_fragments(
        self,
        document_id: str,
        fragments: list[Fragment],
    ) -> None:
        for fragment in fragments:
            _check_dimensions(fragment.embedding, self.embedding_dim)
        # No await between delete and insert, so no other task sees a partial set
        for key in [k for k in self._fragments if k[0] == document_id]:
            del self._fragments[key]
        for fragment in fragments:
            self._fragments[(document_id, fragment.index)] = fragment

    async def delete_fragments(self, document_id: str) -> int:
        keys = [k for k in self._fragments if k[0] == document_id]
        for key in keys:
            del self._fragments[key]
        return len(keys)

    async def count_fragments(self, document_id: str) -> int:
        return sum(1 for k in self._fragments if k[0] == document_id)

    def fragments_for(self, document_id: str) -> list[Fragment]:
        """Stored fragments of a document in index order."""
        return sorted(
            (f for (doc, _), f in self._fragments.items() if doc == document_id),
            key=lambda f: f.index,
        )

    def _cosine_similarity(self, a: np.ndarray, b: np.ndarray) -> float:
        """Calculate cosine similarity between two vectors."""
        denom = np.linalg.norm(a) * np.linalg.norm(b)
        if denom == 0:
            return 0.0
        return float(np.dot(a, b) / denom)

    async def query_similar(
        self,
        query_vector: np.ndarray,
        document_id: str | None = None,
        similarity_floor: float = 0.7,
        limit: int = 5,
    ) -> list[SimilarFragment]:
        """Search using cosine similarity."""
        _check_dimensions(query_vector, self.embedding_dim)

        scored = []
        for (doc_id, index), fragment in self._fragments.items():
            if document_id is not None and doc_id != document_id:
                continue
            score = self._cosine_similarity(query_vector, fragment.embedding)
            if score > similarity_floor:
                scored.append((fragment, score))

        # Sort by score descending, index breaks ties
        scored.sort(key=lambda x: (-x[1], x[0].index))

        return [
            SimilarFragment(
                id=f"{fragment.document_id}:{fragment.index}",
                document_id=fragment.document_id,
                content=fragment.content,
                index=fragment.index,
                similarity=score,
                metadata=fragment.metadata,
            )
            for fragment, score in scored[:limit]
        ]


# ---------------------------------------------------------------------------
# FACTORY FUNCTION
# ---------------------------------------------------------------------------


def get_vector_store(
    config: PipelineConfig,
    connection: psycopg.AsyncConnection | None = None,
) -> PgVectorStore | InMemoryVectorStore:
    """
    Factory function to get the appropriate vector store.

    Args:
        config: Pipeline configuration (use_postgres selects the backend)
        connection: Optional shared connection for the Postgres store

    Returns:
        VectorStore implementation
    """
    if config.use_postgres:
        return PgVectorStore(
            VectorStoreConfig.from_pipeline_config(config),
            connection=connection,
        )
    return InMemoryVectorStore(embedding_dim=config.embedding_dim)
