"""
Error taxonomy for the RAG summarization pipeline.

Stages decide locally whether an error is fatal or degradable:
- ProviderError: fatal for generation, degradable for retrieval/insights
- PersistenceError: fatal for ingestion and summary upsert
- ContentFetchError: always degradable (placeholder content is used)
- ParseError: never escapes normalization
"""

from __future__ import annotations


class MedReportRAGError(Exception):
    """Base exception for all pipeline errors."""


class ProviderError(MedReportRAGError):
    """An external model call returned a non-success response."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        base = super().__str__()
        if self.status_code is None:
            return base
        return f"{base} (status={self.status_code})"


class PersistenceError(MedReportRAGError):
    """The data store rejected a read or write."""


class ContentFetchError(MedReportRAGError):
    """The raw content of a document could not be retrieved."""


class ParseError(MedReportRAGError):
    """A model response could not be mapped to the summary shape."""


class ConfigurationError(MedReportRAGError):
    """Configuration is invalid or a required credential is missing."""


class DocumentNotFoundError(MedReportRAGError):
    """The requested document does not exist."""

    def __init__(self, document_id: str):
        super().__init__(f"Report not found: {document_id}")
        self.document_id = document_id
