"""
Retrieval module - fragment persistence and vector similarity search for RAG.

This module provides:
- Fragment: The stored fragment model
- VectorStoreConfig: Configuration for stores
- PgVectorStore: PostgreSQL production store
- InMemoryVectorStore: Testing/development store
- get_vector_store(): Factory function
- Retriever: Query embedding + scoped search + context formatting

ARCHITECTURE:
-------------
1. Protocol defines the contract (in core.protocols)
2. Multiple implementations (PgVectorStore, InMemoryVectorStore)
3. Factory function for instantiation
4. Test doubles for fast unit tests
"""

from medreport_rag.retrieval.fragment import Fragment
from medreport_rag.retrieval.store import (
    VectorStoreConfig,
    PgVectorStore,
    InMemoryVectorStore,
    get_vector_store,
)
from medreport_rag.retrieval.retriever import Retriever, format_context

__all__ = [
    # Fragment
    "Fragment",
    # Config
    "VectorStoreConfig",
    # Implementations
    "PgVectorStore",
    "InMemoryVectorStore",
    # Factory
    "get_vector_store",
    # Retriever
    "Retriever",
    "format_context",
]
