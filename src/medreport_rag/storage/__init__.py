"""
Storage module - reports, summaries and raw content.

Same pattern as the retrieval module: each store has a Postgres
implementation and an in-memory test double behind a core protocol.
"""

from medreport_rag.storage.database import PgConnectionOwner
from medreport_rag.storage.documents import (
    PgDocumentRepository,
    InMemoryDocumentRepository,
)
from medreport_rag.storage.summaries import PgSummaryStore, InMemorySummaryStore
from medreport_rag.storage.content import (
    LocalContentStore,
    HttpContentStore,
    LocatorContentStore,
    InMemoryContentStore,
    get_content_store,
    placeholder_content,
)

__all__ = [
    "PgConnectionOwner",
    "PgDocumentRepository",
    "InMemoryDocumentRepository",
    "PgSummaryStore",
    "InMemorySummaryStore",
    "LocalContentStore",
    "HttpContentStore",
    "LocatorContentStore",
    "InMemoryContentStore",
    "get_content_store",
    "placeholder_content",
]
