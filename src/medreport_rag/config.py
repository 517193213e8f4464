"""
Pipeline configuration.

Loads every tunable of the pipeline from environment variables. The
generation mode is a single injected value selected at startup; call sites
never hardcode which generation strategy is active.

Environment Variables:
    DATABASE_URL: Postgres connection string
    USE_POSTGRES: Use Postgres-backed stores (default: true)
    OPENAI_API_KEY: Credential for OpenAI embeddings and generation
    GEMINI_API_KEY: Credential for Gemini embeddings
    HUGGINGFACE_API_KEY: Credential for the domain insight model (optional)
    EMBEDDING_PROVIDER: "openai" or "gemini" (default: openai)
    EMBEDDING_MODEL: Embedding model name (provider default if empty)
    EMBEDDING_DIM: Vector dimensionality (provider default if empty)
    GENERATION_MODE: "structured" or "free_text" (default: free_text)
    GENERATION_MODEL: Chat model name (default: gpt-4o-mini)
    GENERATION_BASE_URL: OpenAI-compatible endpoint override (optional)
    GENERATION_API_KEY: Credential for the generation endpoint (default: OPENAI_API_KEY)
    CHUNK_SIZE / CHUNK_OVERLAP: Chunker window (default: 1000 / 200)
    SIMILARITY_FLOOR / MATCH_COUNT: Retrieval bounds (default: 0.7 / 5)
    INSIGHT_MODEL / INSIGHT_MAX_CHARS: Domain insight model and input cap
    CONTENT_ROOT: Base directory for relative content locators
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

from medreport_rag.core.errors import ConfigurationError

GenerationMode = Literal["structured", "free_text"]
EmbeddingProviderName = Literal["openai", "gemini"]

DEFAULT_EMBEDDING_MODELS = {
    "openai": "text-embedding-3-small",
    "gemini": "text-embedding-004",
}

EMBEDDING_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
    "text-embedding-004": 768,
}


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


@dataclass
class PipelineConfig:
    """Configuration shared by the ingestion and summarization pipelines."""

    database_url: str = "postgresql://localhost/medreport_rag"
    use_postgres: bool = True

    openai_api_key: str | None = None
    gemini_api_key: str | None = None
    huggingface_api_key: str | None = None

    embedding_provider: EmbeddingProviderName = "openai"
    embedding_model: str = "text-embedding-3-small"
    embedding_dim: int = 1536

    generation_mode: GenerationMode = "free_text"
    generation_model: str = "gpt-4o-mini"
    generation_base_url: str | None = None
    generation_api_key: str | None = None
    temperature: float = 0.7
    max_output_tokens: int = 2048

    chunk_size: int = 1000
    chunk_overlap: int = 200
    similarity_floor: float = 0.7
    match_count: int = 5

    insight_model: str = "d4data/biomedical-ner-all"
    insight_max_chars: int = 2000

    content_root: str | None = None

    def __post_init__(self) -> None:
        if self.generation_mode not in ("structured", "free_text"):
            raise ConfigurationError(
                f"Unknown generation mode: {self.generation_mode}. "
                "Use 'structured' or 'free_text'"
            )
        if self.embedding_provider not in DEFAULT_EMBEDDING_MODELS:
            raise ConfigurationError(
                f"Unknown embedding provider: {self.embedding_provider}. "
                "Use 'openai' or 'gemini'"
            )
        if not 0 < self.chunk_overlap < self.chunk_size:
            raise ConfigurationError(
                f"Chunk overlap must satisfy 0 < overlap < size "
                f"(got size={self.chunk_size}, overlap={self.chunk_overlap})"
            )

    @property
    def embedding_api_key(self) -> str | None:
        """The credential that enables retrieval for the chosen provider."""
        if self.embedding_provider == "gemini":
            return self.gemini_api_key
        return self.openai_api_key

    @property
    def rag_enabled(self) -> bool:
        return bool(self.embedding_api_key)

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Load config from environment variables."""
        provider = os.environ.get("EMBEDDING_PROVIDER", "openai").lower()
        model = os.environ.get("EMBEDDING_MODEL") or DEFAULT_EMBEDDING_MODELS.get(
            provider, "text-embedding-3-small"
        )
        dim_env = os.environ.get("EMBEDDING_DIM")
        dim = int(dim_env) if dim_env else EMBEDDING_DIMENSIONS.get(model, 1536)

        return cls(
            database_url=os.environ.get(
                "DATABASE_URL", "postgresql://localhost/medreport_rag"
            ),
            use_postgres=_env_bool("USE_POSTGRES", "true"),
            openai_api_key=os.environ.get("OPENAI_API_KEY") or None,
            gemini_api_key=os.environ.get("GEMINI_API_KEY") or None,
            huggingface_api_key=os.environ.get("HUGGINGFACE_API_KEY") or None,
            embedding_provider=provider,
            embedding_model=model,
            embedding_dim=dim,
            generation_mode=os.environ.get("GENERATION_MODE", "free_text").lower(),
            generation_model=os.environ.get("GENERATION_MODEL", "gpt-4o-mini"),
            generation_base_url=os.environ.get("GENERATION_BASE_URL") or None,
            generation_api_key=(
                os.environ.get("GENERATION_API_KEY")
                or os.environ.get("OPENAI_API_KEY")
                or None
            ),
            temperature=float(os.environ.get("GENERATION_TEMPERATURE", "0.7")),
            max_output_tokens=int(os.environ.get("GENERATION_MAX_TOKENS", "2048")),
            chunk_size=int(os.environ.get("CHUNK_SIZE", "1000")),
            chunk_overlap=int(os.environ.get("CHUNK_OVERLAP", "200")),
            similarity_floor=float(os.environ.get("SIMILARITY_FLOOR", "0.7")),
            match_count=int(os.environ.get("MATCH_COUNT", "5")),
            insight_model=os.environ.get("INSIGHT_MODEL", "d4data/biomedical-ner-all"),
            insight_max_chars=int(os.environ.get("INSIGHT_MAX_CHARS", "2000")),
            content_root=os.environ.get("CONTENT_ROOT") or None,
        )
