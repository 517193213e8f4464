"""
Unit Tests for Generation and Normalization

Both response shapes go through normalize_generation(); the chat model
is a fake, so no API calls are made.
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from openai import APIStatusError

from medreport_rag.config import PipelineConfig
from medreport_rag.core.errors import ProviderError
from medreport_rag.schemas.summary import (
    PLACEHOLDER_FINDING,
    PLACEHOLDER_REASONING,
    PLACEHOLDER_RECOMMENDATION,
    SUMMARY_FUNCTION_SCHEMA,
)
from medreport_rag.summarization.generator import (
    FreeTextGeneration,
    ReportGenerator,
    StructuredGeneration,
    get_report_generator,
    normalize_generation,
)
from medreport_rag.summarization.prompts import PromptParts


PROMPT = PromptParts(system="You are a radiologist.", user="Analyze this report.")

FIELDS = {
    "key_findings": ["6 mm nodule", "No effusion"],
    "reasoning_steps": {"Step 1": "Reviewed lungs", "Step 2": "Applied guidelines"},
    "recommendations": ["Follow-up CT"],
    "full_summary": "Small nodule; follow-up advised.",
}


# ---------------------------------------------------------------------------
# NORMALIZATION
# ---------------------------------------------------------------------------


class TestNormalizeStructured:

    def test_complete_payload(self):
        payload = normalize_generation(StructuredGeneration(fields=FIELDS))

        assert payload.key_findings == FIELDS["key_findings"]
        assert payload.reasoning_steps == FIELDS["reasoning_steps"]
        assert payload.recommendations == FIELDS["recommendations"]
        assert payload.full_summary == FIELDS["full_summary"]

    def test_missing_fields_get_placeholders(self):
        payload = normalize_generation(StructuredGeneration(fields={"full_summary": "Only prose."}))

        assert payload.key_findings == [PLACEHOLDER_FINDING]
        assert payload.reasoning_steps == PLACEHOLDER_REASONING
        assert payload.recommendations == [PLACEHOLDER_RECOMMENDATION]
        assert payload.full_summary == "Only prose."

    def test_missing_summary_rendered_from_sections(self):
        fields = {k: v for k, v in FIELDS.items() if k != "full_summary"}

        payload = normalize_generation(StructuredGeneration(fields=fields))

        assert payload.full_summary.startswith("Key Findings:\n- 6 mm nodule")
        assert "- Step 2: Applied guidelines" in payload.full_summary

    def test_reasoning_list_gets_labels(self):
        fields = dict(FIELDS, reasoning_steps=["Reviewed lungs", "Applied guidelines"])

        payload = normalize_generation(StructuredGeneration(fields=fields))

        assert payload.reasoning_steps == FIELDS["reasoning_steps"]

    def test_malformed_payload_never_raises(self):
        fields = {"key_findings": 42, "reasoning_steps": 3.5, "full_summary": "text"}

        payload = normalize_generation(StructuredGeneration(fields=fields))

        assert payload.key_findings == [PLACEHOLDER_FINDING]
        assert payload.full_summary == "text"

    def test_malformed_field_keeps_well_formed_ones(self):
        fields = dict(FIELDS, key_findings={"nodule": "6 mm"})

        payload = normalize_generation(StructuredGeneration(fields=fields))

        assert payload.key_findings == [PLACEHOLDER_FINDING]
        assert payload.reasoning_steps == FIELDS["reasoning_steps"]
        assert payload.recommendations == FIELDS["recommendations"]

    def test_empty_structured_payload(self):
        payload = normalize_generation(StructuredGeneration())

        assert payload.key_findings == [PLACEHOLDER_FINDING]
        assert payload.full_summary


class TestNormalizeFreeText:

    def test_free_text_parsed(self):
        raw = "Key Findings:\n- A\nRecommendations:\n- C"

        payload = normalize_generation(FreeTextGeneration(raw=raw))

        assert payload.key_findings == ["A"]
        assert payload.recommendations == ["C"]
        assert payload.full_summary == raw


# ---------------------------------------------------------------------------
# GENERATOR
# ---------------------------------------------------------------------------


class TestReportGenerator:

    @pytest.mark.asyncio
    async def test_free_text_mode(self):
        model = FakeListChatModel(responses=["Key Findings:\n- A"])
        generator = ReportGenerator(model, mode="free_text")

        result = await generator.generate(PROMPT)

        assert result == FreeTextGeneration(raw="Key Findings:\n- A")

    @pytest.mark.asyncio
    async def test_free_text_sends_single_prompt(self):
        model = MagicMock()
        model.ainvoke = AsyncMock(return_value=MagicMock(content="prose"))
        generator = ReportGenerator(model, mode="free_text")

        await generator.generate(PROMPT)

        model.ainvoke.assert_awaited_once_with(
            "You are a radiologist.\n\nAnalyze this report."
        )

    @pytest.mark.asyncio
    async def test_structured_mode(self):
        model = MagicMock()
        structured = model.with_structured_output.return_value
        structured.ainvoke = AsyncMock(return_value=FIELDS)
        generator = ReportGenerator(model, mode="structured")

        result = await generator.generate(PROMPT)

        assert result == StructuredGeneration(fields=FIELDS)
        model.with_structured_output.assert_called_once_with(
            SUMMARY_FUNCTION_SCHEMA, method="function_calling"
        )
        messages = structured.ainvoke.await_args.args[0]
        assert messages == [("system", PROMPT.system), ("human", PROMPT.user)]

    @pytest.mark.asyncio
    async def test_structured_mode_without_payload(self):
        model = MagicMock()
        model.with_structured_output.return_value.ainvoke = AsyncMock(return_value=None)
        generator = ReportGenerator(model, mode="structured")

        assert await generator.generate(PROMPT) == StructuredGeneration(fields={})

    @pytest.mark.asyncio
    async def test_api_error_becomes_provider_error(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        response = httpx.Response(500, request=request, text="upstream error")
        model = MagicMock()
        model.ainvoke = AsyncMock(
            side_effect=APIStatusError("server error", response=response, body=None)
        )
        generator = ReportGenerator(model, mode="free_text")

        with pytest.raises(ProviderError) as exc_info:
            await generator.generate(PROMPT)

        assert exc_info.value.status_code == 500


class TestGetReportGenerator:

    def test_no_credential(self):
        assert get_report_generator(PipelineConfig(generation_api_key=None)) is None

    def test_mode_from_config(self):
        generator = get_report_generator(
            PipelineConfig(generation_api_key="sk-test", generation_mode="structured")
        )

        assert generator.mode == "structured"
        assert generator.model_name == "gpt-4o-mini"
