"""
Shared fixtures: in-memory stores, sample reports and a vector-controlled
embedding double.
"""

import numpy as np
import pytest

from medreport_rag.core.errors import ProviderError
from medreport_rag.core.protocols import Document, ReportCategory
from medreport_rag.retrieval.store import InMemoryVectorStore
from medreport_rag.storage.content import InMemoryContentStore
from medreport_rag.storage.documents import InMemoryDocumentRepository
from medreport_rag.storage.summaries import InMemorySummaryStore


REPORT_TEXT = (
    "CT CHEST WITH CONTRAST\n"
    "Findings: A 6 mm nodule is seen in the right upper lobe. "
    "No pleural effusion. Heart size is normal.\n"
    "Impression: Small pulmonary nodule, follow-up CT recommended."
)


class KeywordEmbeddings:
    """
    Three-dimensional embeddings keyed on keywords, so tests control
    exactly which fragments are similar to which queries.
    """

    def __init__(self, fail: Exception | None = None):
        self.fail = fail
        self.calls: list[str] = []

    @property
    def dimensions(self) -> int:
        return 3

    def _vector(self, text: str) -> np.ndarray:
        lowered = text.lower()
        if "nodule" in lowered or "ct" in lowered:
            return np.array([1.0, 0.0, 0.0], dtype=np.float32)
        if "cholesterol" in lowered:
            return np.array([0.0, 1.0, 0.0], dtype=np.float32)
        return np.array([0.0, 0.0, 1.0], dtype=np.float32)

    async def embed(self, text: str) -> np.ndarray:
        self.calls.append(text)
        if self.fail is not None:
            raise self.fail
        return self._vector(text)

    async def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        return [await self.embed(text) for text in texts]


@pytest.fixture
def sample_document() -> Document:
    return Document(
        id="report-1",
        owner_id="user-1",
        file_url="reports/report-1.txt",
        file_name="report-1.txt",
        category=ReportCategory.CT_SCAN,
        patient_name="Jane Doe",
        patient_id="P-001",
    )


@pytest.fixture
def documents(sample_document) -> InMemoryDocumentRepository:
    return InMemoryDocumentRepository([sample_document])


@pytest.fixture
def summaries() -> InMemorySummaryStore:
    return InMemorySummaryStore()


@pytest.fixture
def content(sample_document) -> InMemoryContentStore:
    return InMemoryContentStore({sample_document.file_url: REPORT_TEXT})


@pytest.fixture
def vector_store() -> InMemoryVectorStore:
    return InMemoryVectorStore(embedding_dim=3)


@pytest.fixture
def keyword_embeddings() -> KeywordEmbeddings:
    return KeywordEmbeddings()


@pytest.fixture
def failing_embeddings() -> KeywordEmbeddings:
    """Embeddings whose every call fails like an unreachable provider."""
    return KeywordEmbeddings(fail=ProviderError("connection refused"))
