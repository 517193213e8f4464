"""
Domain insight augmenter - advisory side channel.

Sends report text to a biomedical model on the Hugging Face Inference API
and returns whatever structured signal comes back (for the default NER
model, a list of recognized clinical entities). The result is only extra
prompt material, so every failure collapses to None.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from medreport_rag.config import PipelineConfig

logger = logging.getLogger(__name__)

HF_INFERENCE_URL = "https://api-inference.huggingface.co/models"


class HuggingFaceInsightAugmenter:
    """Biomedical classification/encoding model behind the HF Inference API."""

    def __init__(
        self,
        api_key: str,
        model: str = "d4data/biomedical-ner-all",
        max_input_chars: int = 2000,
        base_url: str = HF_INFERENCE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.model = model
        self.max_input_chars = max_input_chars
        self._api_key = api_key
        self._url = f"{base_url.rstrip('/')}/{model}"
        self._timeout = timeout
        self._transport = transport

    def truncate(self, text: str) -> str:
        """Cut text to the model's maximum accepted input."""
        return text[: self.max_input_chars]

    async def augment(self, text: str) -> Any | None:
        """Structured model output for the text, or None on any failure."""
        if not text:
            return None

        payload = {
            "inputs": self.truncate(text),
            "options": {"wait_for_model": True},
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(self._url, json=payload, headers=headers)
            if response.is_error:
                logger.warning(
                    f"Insight model {self.model} returned {response.status_code}, skipping"
                )
                return None
            result = response.json()
        except Exception as e:
            logger.warning(f"Insight model {self.model} unavailable, skipping: {e}")
            return None

        # The Inference API reports some failures in a 200 body
        if isinstance(result, dict) and "error" in result:
            logger.warning(f"Insight model {self.model} error: {result['error']}")
            return None
        if not result:
            return None

        return result


def get_insight_augmenter(config: PipelineConfig) -> HuggingFaceInsightAugmenter | None:
    """
    Factory for the augmenter.

    No credential is a normal operating mode: the pipeline runs without
    domain insights.
    """
    if not config.huggingface_api_key:
        logger.debug("Domain insights disabled: no Hugging Face credential")
        return None
    return HuggingFaceInsightAugmenter(
        api_key=config.huggingface_api_key,
        model=config.insight_model,
        max_input_chars=config.insight_max_chars,
    )
