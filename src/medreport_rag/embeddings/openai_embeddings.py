"""
Embeddings Module - Single Responsibility: Generate text embeddings.

It has ONE job: convert text to vector embeddings.

- No database logic, no chunking
- Easy to swap for different embedding providers
- No silent truncation: callers bound their own inputs
"""

from __future__ import annotations

import hashlib

import numpy as np
from openai import APIConnectionError, APIStatusError, AsyncOpenAI

from medreport_rag.core.errors import ProviderError


class OpenAIEmbeddings:
    """
    OpenAI-based embedding provider.

    Uses text-embedding-3-small by default (1536 dimensions).
    """

    MODEL_DIMENSIONS = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-embedding-ada-002": 1536,
    }

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: str | None = None,
        client: AsyncOpenAI | None = None,
    ):
        self.model = model
        self._client = client or AsyncOpenAI(api_key=api_key)

    @property
    def dimensions(self) -> int:
        """Return embedding dimensions for the model."""
        return self.MODEL_DIMENSIONS.get(self.model, 1536)

    async def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        vectors = await self._create([text])
        return vectors[0]

    async def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Generate embeddings for multiple texts in one request."""
        if not texts:
            return []
        return await self._create(texts)

    async def _create(self, texts: list[str]) -> list[np.ndarray]:
        try:
            response = await self._client.embeddings.create(
                input=texts,
                model=self.model,
            )
        except APIStatusError as e:
            raise ProviderError(
                f"OpenAI embeddings error: {e.status_code}",
                status_code=e.status_code,
                body=e.response.text,
            ) from e
        except APIConnectionError as e:
            raise ProviderError(f"OpenAI embeddings unreachable: {e}") from e

        return [
            np.array(item.embedding, dtype=np.float32)
            for item in sorted(response.data, key=lambda d: d.index)
        ]


class MockEmbeddings:
    """
    Mock embedding provider for testing without API calls.

    Generates deterministic pseudo-embeddings from text hashes.
    NOT for production use - only for testing/development.
    """

    def __init__(self, dimensions: int = 1536):
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _vector(self, text: str) -> np.ndarray:
        h = hashlib.sha256(text.encode()).digest()
        # Seeded from the hash so every component is a finite float
        rng = np.random.default_rng(int.from_bytes(h[:8], "big"))
        return rng.standard_normal(self._dimensions).astype(np.float32)

    async def embed(self, text: str) -> np.ndarray:
        """Generate deterministic pseudo-embedding from text hash."""
        return self._vector(text)

    async def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Generate embeddings for multiple texts."""
        return [self._vector(text) for text in texts]
