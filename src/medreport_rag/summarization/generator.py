"""
Generative model call and response normalization.

Two response shapes exist for one logical operation:
- StructuredGeneration: a function-call payload with the four summary fields
- FreeTextGeneration: unstructured prose

Both are normalized by normalize_generation() into a SummaryPayload, so
nothing downstream branches on the response shape. Which shape is requested
is decided once, by configuration (GENERATION_MODE).

INTERVIEW TALKING POINT:
------------------------
"The generator returns a tagged union instead of a half-parsed dict. The
structured path trusts the tool-call schema but still backfills missing
fields; the free-text path runs the line-classifier parser. Either way the
full model text survives verbatim in full_summary."
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Union

from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI
from openai import APIConnectionError, APIStatusError

from medreport_rag.config import GenerationMode, PipelineConfig
from medreport_rag.core.errors import ParseError, ProviderError
from medreport_rag.schemas.summary import SUMMARY_FUNCTION_SCHEMA, SummaryPayload
from medreport_rag.summarization.parser import label_steps, parse_free_text
from medreport_rag.summarization.prompts import PromptParts

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# GENERATION RESULT (tagged union)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StructuredGeneration:
    """Function-call payload returned by the structured mode."""

    fields: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FreeTextGeneration:
    """Prose returned by the free-text mode."""

    raw: str


GenerationResult = Union[StructuredGeneration, FreeTextGeneration]


# ---------------------------------------------------------------------------
# NORMALIZATION
# ---------------------------------------------------------------------------


def _as_list(value: Any, name: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [line for line in value.splitlines() if line.strip()]
    if isinstance(value, list):
        return [str(item) for item in value if item is not None]
    raise ParseError(f"{name} is not a list: {type(value).__name__}")


def _as_steps(value: Any, name: str) -> dict[str, str]:
    if value is None:
        return {}
    if isinstance(value, dict):
        return {str(k): str(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, str)):
        return label_steps(_as_list(value, name))
    raise ParseError(f"{name} is not a mapping: {type(value).__name__}")


def render_summary_text(payload: SummaryPayload) -> str:
    """Narrative text assembled from the sections, for payloads without one."""
    lines = ["Key Findings:"]
    lines += [f"- {item}" for item in payload.key_findings]
    lines += ["", "Step-by-Step Reasoning:"]
    lines += [f"- {label}: {text}" for label, text in payload.reasoning_steps.items()]
    lines += ["", "Recommendations:"]
    lines += [f"- {item}" for item in payload.recommendations]
    return "\n".join(lines)


def _field(fields: dict[str, Any], name: str, convert):
    """One converted field; a malformed field is emptied so it gets its placeholder."""
    try:
        return convert(fields.get(name), name)
    except ParseError as e:
        logger.warning(f"Structured field malformed, using placeholder: {e}")
        return convert(None, name)


def _normalize_structured(fields: dict[str, Any]) -> SummaryPayload:
    payload = SummaryPayload(
        key_findings=_field(fields, "key_findings", _as_list),
        reasoning_steps=_field(fields, "reasoning_steps", _as_steps),
        recommendations=_field(fields, "recommendations", _as_list),
        full_summary=str(fields.get("full_summary") or ""),
    )

    if not payload.full_summary.strip():
        payload.full_summary = render_summary_text(payload)
    return payload


def normalize_generation(result: GenerationResult) -> SummaryPayload:
    """
    Convert either generation shape into the canonical summary payload.

    Never raises on malformed model output.
    """
    if isinstance(result, FreeTextGeneration):
        return parse_free_text(result.raw)
    return _normalize_structured(result.fields or {})


# ---------------------------------------------------------------------------
# GENERATOR
# ---------------------------------------------------------------------------


class ReportGenerator:
    """
    Calls the chat model in the configured mode.

    The model is injectable; tests pass a fake chat model.
    """

    def __init__(
        self,
        model: BaseChatModel,
        mode: GenerationMode = "free_text",
    ):
        self._model = model
        self.mode = mode

    @property
    def model_name(self) -> str:
        return getattr(self._model, "model_name", None) or type(self._model).__name__

    async def generate(self, prompt: PromptParts) -> GenerationResult:
        """Run one generation. Provider failures raise ProviderError."""
        try:
            if self.mode == "structured":
                return await self._generate_structured(prompt)
            return await self._generate_free_text(prompt)
        except APIStatusError as e:
            raise ProviderError(
                f"Generation failed: {e.status_code}",
                status_code=e.status_code,
                body=e.response.text,
            ) from e
        except APIConnectionError as e:
            raise ProviderError(f"Generation endpoint unreachable: {e}") from e

    async def _generate_structured(self, prompt: PromptParts) -> StructuredGeneration:
        structured = self._model.with_structured_output(
            SUMMARY_FUNCTION_SCHEMA, method="function_calling"
        )
        fields = await structured.ainvoke(
            [("system", prompt.system), ("human", prompt.user)]
        )
        if not isinstance(fields, dict):
            logger.warning("Model returned no function-call payload")
            fields = {}
        return StructuredGeneration(fields=fields)

    async def _generate_free_text(self, prompt: PromptParts) -> FreeTextGeneration:
        message = await self._model.ainvoke(prompt.combined)
        content = message.content
        if isinstance(content, list):
            # Content blocks: keep the text parts in order
            content = "".join(
                block if isinstance(block, str) else block.get("text", "")
                for block in content
            )
        return FreeTextGeneration(raw=content or "")


def get_report_generator(config: PipelineConfig) -> ReportGenerator | None:
    """
    Factory for the generator. Returns None without a generation credential;
    summarization then fails with a configuration error instead of hanging.
    """
    if not config.generation_api_key:
        return None

    model = ChatOpenAI(
        model=config.generation_model,
        temperature=config.temperature,
        max_tokens=config.max_output_tokens,
        api_key=config.generation_api_key,
        base_url=config.generation_base_url,
    )
    return ReportGenerator(model, mode=config.generation_mode)
