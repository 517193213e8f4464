"""
Ingestion module - splits reports into fragments and indexes them.

- chunk_text(): pure overlapping-window chunker
- IngestionPipeline: chunk → embed → atomic fragment replace
"""

from medreport_rag.ingestion.chunker import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    FragmentDraft,
    chunk_text,
    expected_fragment_count,
)
from medreport_rag.ingestion.pipeline import IngestionPipeline, IngestionReport

__all__ = [
    "DEFAULT_CHUNK_OVERLAP",
    "DEFAULT_CHUNK_SIZE",
    "FragmentDraft",
    "chunk_text",
    "expected_fragment_count",
    "IngestionPipeline",
    "IngestionReport",
]
