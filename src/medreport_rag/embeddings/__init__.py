"""
Embeddings module - text embedding generation.

1. Protocol (EmbeddingProvider, in core.protocols) defines the interface
2. Production implementations (OpenAIEmbeddings, GeminiEmbeddings)
3. Test double (MockEmbeddings) for fast testing
4. Factory function (get_embedding_provider)
"""

from __future__ import annotations

from medreport_rag.config import PipelineConfig
from medreport_rag.core.protocols import EmbeddingProvider
from medreport_rag.embeddings.gemini_embeddings import GeminiEmbeddings
from medreport_rag.embeddings.openai_embeddings import MockEmbeddings, OpenAIEmbeddings


def get_embedding_provider(
    config: PipelineConfig,
    use_mock: bool = False,
) -> EmbeddingProvider | None:
    """
    Factory function to get the appropriate embedding provider.

    Returns None when the configured provider has no credential. That is a
    supported mode: ingestion stores nothing and summarization runs
    without retrieved context.

    Args:
        config: Pipeline configuration
        use_mock: If True, return MockEmbeddings (for testing)
    """
    if use_mock:
        return MockEmbeddings(dimensions=config.embedding_dim)

    api_key = config.embedding_api_key
    if not api_key:
        return None

    if config.embedding_provider == "gemini":
        return GeminiEmbeddings(
            api_key=api_key,
            model=config.embedding_model,
            dimensions=config.embedding_dim,
        )
    return OpenAIEmbeddings(model=config.embedding_model, api_key=api_key)


__all__ = [
    "EmbeddingProvider",
    "OpenAIEmbeddings",
    "GeminiEmbeddings",
    "MockEmbeddings",
    "get_embedding_provider",
]
