"""
Core protocols defining contracts for the entire system.

All infrastructure components implement these protocols,
enabling dependency injection and easy testing.

PATTERN: This follows the same structure as embeddings/openai_embeddings.py
- Protocol defines the contract
- Multiple implementations possible (Postgres, in-memory)
- Factory functions for instantiation
- Test doubles for fast unit tests

Every infrastructure call is async: embedding requests, storage reads and
vector store writes are all suspension points of a single request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import numpy as np

if TYPE_CHECKING:
    from medreport_rag.retrieval.fragment import Fragment
    from medreport_rag.schemas.summary import ReportSummary


# ---------------------------------------------------------------------------
# DOCUMENT MODEL
# ---------------------------------------------------------------------------


class DocumentStatus(str, Enum):
    """Processing status of an uploaded report."""

    UPLOADED = "uploaded"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ReportCategory(str, Enum):
    """Declared category of a report."""

    RADIOLOGY = "radiology"
    PATHOLOGY = "pathology"
    MRI = "mri"
    CT_SCAN = "ct_scan"
    LAB_REPORT = "lab_report"
    OTHER = "other"


@dataclass
class Document:
    """
    An uploaded report. Immutable once ingested, apart from its status.

    file_url is the raw-content locator (local path, file:// or http(s) URL).
    """

    id: str
    owner_id: str
    file_url: str
    file_name: str
    category: ReportCategory
    patient_name: str
    patient_id: str | None = None
    status: DocumentStatus = DocumentStatus.UPLOADED
    uploaded_at: datetime | None = None
    processed_at: datetime | None = None


# ---------------------------------------------------------------------------
# EMBEDDING PROVIDER PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class EmbeddingProvider(Protocol):
    """
    Contract for embedding generation.

    Implementations:
    - OpenAIEmbeddings (production)
    - GeminiEmbeddings (production, 768 dimensions)
    - MockEmbeddings (testing)
    """

    @property
    def dimensions(self) -> int:
        """Fixed dimensionality of every vector this provider returns."""
        ...

    async def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        ...

    async def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Generate embeddings for multiple texts."""
        ...


# ---------------------------------------------------------------------------
# VECTOR STORE PROTOCOL
# ---------------------------------------------------------------------------


@dataclass
class SimilarFragment:
    """A retrieved fragment with its similarity to the query vector."""

    id: str
    document_id: str
    content: str
    index: int
    similarity: float
    metadata: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class VectorStore(Protocol):
    """
    Contract for fragment persistence and vector similarity search.

    Implementations:
    - PgVectorStore (production with PostgreSQL + pgvector)
    - InMemoryVectorStore (testing/development)
    """

    async def connect(self) -> None:
        """Establish connection to the store."""
        ...

    async def close(self) -> None:
        """Close connection to the store."""
        ...

    async def upsert_fragment(
        self,
        document_id: str,
        index: int,
        content: str,
        vector: np.ndarray,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Write one fragment, replacing any fragment at the same index."""
        ...

    async def replace_fragments(
        self,
        document_id: str,
        fragments: list[Fragment],
    ) -> None:
        """Atomically replace the full fragment set of a document."""
        ...

    async def delete_fragments(self, document_id: str) -> int:
        """Delete every fragment of a document. Returns the count removed."""
        ...

    async def count_fragments(self, document_id: str) -> int:
        """Number of fragments stored for a document."""
        ...

    async def query_similar(
        self,
        query_vector: np.ndarray,
        document_id: str | None = None,
        similarity_floor: float = 0.7,
        limit: int = 5,
    ) -> list[SimilarFragment]:
        """Top-K fragments with similarity strictly above the floor."""
        ...


# ---------------------------------------------------------------------------
# DOCUMENT / SUMMARY / CONTENT STORES
# ---------------------------------------------------------------------------


@runtime_checkable
class DocumentRepository(Protocol):
    """
    Contract for the documents (reports) table.

    Implementations:
    - PgDocumentRepository
    - InMemoryDocumentRepository
    """

    async def get(self, document_id: str) -> Document | None:
        """Load a document, or None when it does not exist."""
        ...

    async def set_status(
        self,
        document_id: str,
        status: DocumentStatus,
        processed_at: datetime | None = None,
    ) -> None:
        """Update the processing status of a document."""
        ...


@runtime_checkable
class SummaryStore(Protocol):
    """
    Contract for summary persistence. One summary per document.

    Implementations:
    - PgSummaryStore
    - InMemorySummaryStore
    """

    async def upsert(self, summary: ReportSummary) -> None:
        """Insert or overwrite the summary keyed by its document id."""
        ...

    async def get(self, document_id: str) -> ReportSummary | None:
        """Load the summary of a document, or None."""
        ...


@runtime_checkable
class ContentStore(Protocol):
    """Contract for fetching the raw text behind a content locator."""

    async def fetch_text(self, locator: str) -> str:
        """Return the document text. Raises ContentFetchError on failure."""
        ...


@runtime_checkable
class InsightAugmenter(Protocol):
    """Contract for the advisory domain-insight side channel."""

    async def augment(self, text: str) -> Any | None:
        """Structured signal for the text, or None on any failure."""
        ...
