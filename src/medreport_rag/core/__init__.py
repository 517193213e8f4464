"""
Core module - shared protocols, types and errors for the entire system.

This module provides the foundational contracts that enable:
- Dependency injection throughout the codebase
- Easy testing with in-memory implementations
- Clear separation of concerns

USAGE:
------
from medreport_rag.core import VectorStore, EmbeddingProvider

class MyVectorStore:
    '''Implements VectorStore protocol.'''
    ...
"""

from medreport_rag.core.errors import (
    MedReportRAGError,
    ProviderError,
    PersistenceError,
    ContentFetchError,
    ParseError,
    ConfigurationError,
    DocumentNotFoundError,
)
from medreport_rag.core.protocols import (
    # Protocols
    EmbeddingProvider,
    VectorStore,
    DocumentRepository,
    SummaryStore,
    ContentStore,
    InsightAugmenter,
    # Data classes
    Document,
    DocumentStatus,
    ReportCategory,
    SimilarFragment,
)

__all__ = [
    # Errors
    "MedReportRAGError",
    "ProviderError",
    "PersistenceError",
    "ContentFetchError",
    "ParseError",
    "ConfigurationError",
    "DocumentNotFoundError",
    # Protocols
    "EmbeddingProvider",
    "VectorStore",
    "DocumentRepository",
    "SummaryStore",
    "ContentStore",
    "InsightAugmenter",
    # Data classes
    "Document",
    "DocumentStatus",
    "ReportCategory",
    "SimilarFragment",
]
