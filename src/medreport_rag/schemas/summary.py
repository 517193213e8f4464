"""
Structured Output Schemas

These Pydantic models define the OUTPUT CONTRACT for report summaries.
Every summary persisted by the orchestrator validates against them,
whichever generation mode produced it.

WHY THIS MATTERS:
-----------------
1. PREDICTABILITY: The UI renders findings, reasoning steps and
   recommendations without checking whether they exist.

2. NEVER EMPTY: Lists and the reasoning map always hold at least one
   entry; missing sections get a single placeholder instead.

3. LOSSLESS: full_summary always carries the complete model text, so a
   weak parse never loses information.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

# Placeholders used when a section is missing from the model output
PLACEHOLDER_FINDING = "Analysis completed - see full summary"
PLACEHOLDER_REASONING = {"Step 1": "Analysis performed"}
PLACEHOLDER_RECOMMENDATION = "Further clinical correlation recommended"


class SummaryPayload(BaseModel):
    """
    The four fields a generation produces, before it is tied to a document.
    """

    key_findings: list[str] = Field(
        description="3-5 most important diagnostic findings"
    )

    reasoning_steps: dict[str, str] = Field(
        description="Labeled step-by-step reasoning, e.g. {'Step 1': '...'}"
    )
    # dicts keep insertion order, so the step sequence survives round-trips

    recommendations: list[str] = Field(
        description="3-5 actionable clinical recommendations"
    )

    full_summary: str = Field(
        description="Complete narrative analysis"
    )

    @field_validator("key_findings", "recommendations")
    @classmethod
    def _strip_items(cls, value: list[str]) -> list[str]:
        return [item.strip() for item in value if item and item.strip()]

    @field_validator("key_findings")
    @classmethod
    def _findings_not_empty(cls, value: list[str]) -> list[str]:
        return value or [PLACEHOLDER_FINDING]

    @field_validator("recommendations")
    @classmethod
    def _recommendations_not_empty(cls, value: list[str]) -> list[str]:
        return value or [PLACEHOLDER_RECOMMENDATION]

    @field_validator("reasoning_steps")
    @classmethod
    def _reasoning_not_empty(cls, value: dict[str, str]) -> dict[str, str]:
        cleaned = {
            label.strip(): text.strip()
            for label, text in value.items()
            if label and text and text.strip()
        }
        return cleaned or dict(PLACEHOLDER_REASONING)


class ReportSummary(SummaryPayload):
    """
    The persisted summary of one report. One row per document (upsert).
    """

    document_id: str = Field(
        description="Identifier of the summarized report"
    )

    @classmethod
    def from_payload(cls, document_id: str, payload: SummaryPayload) -> "ReportSummary":
        return cls(document_id=document_id, **payload.model_dump())


# JSON schema for the structured (function-call) generation mode.
# All four fields are required; normalization still backfills any the
# model leaves out.
SUMMARY_FUNCTION_SCHEMA = {
    "name": "record_report_analysis",
    "description": "Record the structured analysis of a medical report.",
    "parameters": {
        "type": "object",
        "properties": {
            "key_findings": {
                "type": "array",
                "items": {"type": "string"},
                "description": "3-5 key clinical findings",
            },
            "reasoning_steps": {
                "type": "object",
                "additionalProperties": {"type": "string"},
                "description": "Step-by-step reasoning keyed 'Step 1', 'Step 2', ...",
            },
            "recommendations": {
                "type": "array",
                "items": {"type": "string"},
                "description": "3-5 actionable clinical recommendations",
            },
            "full_summary": {
                "type": "string",
                "description": "Complete narrative analysis of the report",
            },
        },
        "required": ["key_findings", "reasoning_steps", "recommendations", "full_summary"],
    },
}
