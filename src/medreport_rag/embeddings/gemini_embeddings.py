"""
Gemini embedding provider.

Calls the Generative Language API embedContent endpoint directly over
HTTP. text-embedding-004 returns 768-dimensional vectors.
"""

from __future__ import annotations

import asyncio
import logging

import httpx
import numpy as np

from medreport_rag.core.errors import ProviderError

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiEmbeddings:
    """Gemini text-embedding-004 provider (768 dimensions)."""

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-004",
        dimensions: int = 768,
        base_url: str = GEMINI_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.model = model
        self._api_key = api_key
        self._dimensions = dimensions
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            return await self._embed_one(client, text)

    async def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Embed texts concurrently over one connection pool; order is kept."""
        if not texts:
            return []
        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            return list(
                await asyncio.gather(*(self._embed_one(client, t) for t in texts))
            )

    async def _embed_one(self, client: httpx.AsyncClient, text: str) -> np.ndarray:
        url = f"{self._base_url}/models/{self.model}:embedContent"
        payload = {
            "model": f"models/{self.model}",
            "content": {"parts": [{"text": text}]},
        }

        try:
            response = await client.post(url, params={"key": self._api_key}, json=payload)
        except httpx.HTTPError as e:
            raise ProviderError(f"Gemini embeddings unreachable: {e}") from e

        if response.is_error:
            logger.warning(f"Gemini embeddings error {response.status_code}")
            raise ProviderError(
                f"Gemini API error: {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            values = response.json()["embedding"]["values"]
        except (ValueError, KeyError, TypeError) as e:
            raise ProviderError(
                "Gemini API returned no embedding values",
                status_code=response.status_code,
                body=response.text,
            ) from e

        return np.array(values, dtype=np.float32)
