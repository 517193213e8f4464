"""
Unit Tests for the Domain Insight Augmenter

Every failure mode must collapse to None without raising.
"""

import json

import httpx
import pytest

from medreport_rag.config import PipelineConfig
from medreport_rag.insights import HuggingFaceInsightAugmenter, get_insight_augmenter


ENTITIES = [
    {"entity_group": "Sign_symptom", "word": "nodule", "score": 0.98},
    {"entity_group": "Biological_structure", "word": "right upper lobe", "score": 0.95},
]


def _augmenter(handler, **kwargs) -> HuggingFaceInsightAugmenter:
    return HuggingFaceInsightAugmenter(
        api_key="hf_test", transport=httpx.MockTransport(handler), **kwargs
    )


class TestAugment:

    @pytest.mark.asyncio
    async def test_returns_model_output(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["Authorization"]
            seen["url"] = str(request.url)
            return httpx.Response(200, json=ENTITIES)

        result = await _augmenter(handler).augment("6 mm nodule in right upper lobe")

        assert result == ENTITIES
        assert seen["auth"] == "Bearer hf_test"
        assert seen["url"].endswith("/d4data/biomedical-ner-all")

    @pytest.mark.asyncio
    async def test_input_truncated_to_model_limit(self):
        sent = []

        def handler(request):
            sent.append(json.loads(request.content)["inputs"])
            return httpx.Response(200, json=ENTITIES)

        await _augmenter(handler, max_input_chars=100).augment("x" * 5000)

        assert sent == ["x" * 100]

    @pytest.mark.asyncio
    async def test_non_success_returns_none(self):
        result = await _augmenter(lambda r: httpx.Response(503, text="loading")).augment("text")
        assert result is None

    @pytest.mark.asyncio
    async def test_network_failure_returns_none(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        assert await _augmenter(handler).augment("text") is None

    @pytest.mark.asyncio
    async def test_malformed_body_returns_none(self):
        result = await _augmenter(lambda r: httpx.Response(200, text="<html>")).augment("text")
        assert result is None

    @pytest.mark.asyncio
    async def test_error_in_success_body_returns_none(self):
        result = await _augmenter(
            lambda r: httpx.Response(200, json={"error": "Model is loading"})
        ).augment("text")
        assert result is None

    @pytest.mark.asyncio
    async def test_empty_text_skips_call(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=ENTITIES)

        assert await _augmenter(handler).augment("") is None
        assert calls == []


class TestGetInsightAugmenter:

    def test_absent_credential_disables(self):
        assert get_insight_augmenter(PipelineConfig(huggingface_api_key=None)) is None

    def test_configured(self):
        augmenter = get_insight_augmenter(
            PipelineConfig(huggingface_api_key="hf", insight_max_chars=512)
        )

        assert isinstance(augmenter, HuggingFaceInsightAugmenter)
        assert augmenter.max_input_chars == 512
