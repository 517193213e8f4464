"""
Fragment model for the retrieval system.

Single responsibility: Define the structure of fragments
stored in vector stores.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np

if TYPE_CHECKING:
    from medreport_rag.ingestion.chunker import FragmentDraft


@dataclass
class Fragment:
    """
    A chunk of a document's text together with its embedding.

    This is the internal representation written by the ingestion pipeline.
    Query results are returned as SimilarFragment (defined in core.protocols).
    """
    document_id: str
    index: int
    content: str
    embedding: np.ndarray
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_draft(
        cls,
        document_id: str,
        draft: FragmentDraft,
        embedding: np.ndarray,
    ) -> "Fragment":
        return cls(
            document_id=document_id,
            index=draft.index,
            content=draft.content,
            embedding=embedding,
            metadata=dict(draft.metadata),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "document_id": self.document_id,
            "index": self.index,
            "content": self.content,
            "metadata": self.metadata,
        }
