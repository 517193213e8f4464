"""
Prompt construction for report summarization.

Everything here is a PURE FUNCTION - same inputs always produce the same
prompt, so prompt changes can be tested without any model call.

Layering, in order:
1. System instructions (role + required output structure)
2. Report identification header
3. Report content block
4. Retrieved context block (only when retrieval found something)
5. Domain insight block (only when the side channel answered)
6. Output-format directive
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from medreport_rag.core.protocols import Document

SYSTEM_PROMPT = """You are an expert medical AI assistant specialized in analyzing diagnostic reports.
Your task is to provide a comprehensive analysis with clear Chain-of-Thought reasoning.

Analyze the medical report and provide:
1. Key Findings: Extract and list the most important diagnostic findings
2. Step-by-Step Reasoning: Show your analytical process step by step
3. Recommendations: Provide actionable clinical recommendations

Be thorough, precise, and maintain medical accuracy."""

OUTPUT_DIRECTIVE = """Provide a comprehensive analysis with:
- Key clinical findings (3-5 bullet points)
- Step-by-step reasoning process (explain your analytical steps)
- Clinical recommendations (3-5 actionable items)

Format your answer with the section headers "Key Findings:", "Step-by-Step Reasoning:"
and "Recommendations:", and start every item on its own line with "- "."""

INSIGHTS_MAX_CHARS = 4000


@dataclass(frozen=True)
class PromptParts:
    """The assembled prompt, kept in two parts for chat-style models."""

    system: str
    user: str

    @property
    def combined(self) -> str:
        """Single concatenated prompt string for free-text generation."""
        return f"{self.system}\n\n{self.user}"


def category_label(document: Document) -> str:
    """Human-readable report category, e.g. 'lab report'."""
    return document.category.value.replace("_", " ")


def retrieval_query(document: Document) -> str:
    """The query used to pull grounding fragments for a report."""
    return (
        f"Analyze {category_label(document)} report findings, "
        "key observations, and clinical significance"
    )


def format_insights(insights: Any) -> str:
    """Serialize the domain insight payload for the prompt."""
    text = json.dumps(insights, indent=2, ensure_ascii=False, default=str)
    if len(text) > INSIGHTS_MAX_CHARS:
        text = text[:INSIGHTS_MAX_CHARS] + "\n... (truncated)"
    return text


def build_summary_prompt(
    document: Document,
    content: str,
    retrieved_context: str = "",
    domain_insights: Any | None = None,
) -> PromptParts:
    """
    Assemble the layered summarization prompt.

    Args:
        document: The report being summarized
        content: Report text (or the metadata placeholder)
        retrieved_context: Context blob from the retriever, "" for none
        domain_insights: Structured side-channel output, None for none

    Returns:
        PromptParts with system instructions and the user message
    """
    sections = [
        f"Analyze this {category_label(document)} report for patient {document.patient_name}.\n"
        f"File: {document.file_name}"
    ]

    if content:
        sections.append(
            f"=== MEDICAL REPORT CONTENT ===\n{content}\n=== END REPORT ==="
        )

    if retrieved_context:
        sections.append(
            f"=== ADDITIONAL CONTEXT (via RAG) ===\n{retrieved_context}\n=== END CONTEXT ==="
        )

    if domain_insights is not None:
        sections.append(
            "=== DOMAIN INSIGHTS (biomedical model) ===\n"
            f"{format_insights(domain_insights)}\n=== END INSIGHTS ==="
        )

    sections.append(OUTPUT_DIRECTIVE)

    return PromptParts(system=SYSTEM_PROMPT, user="\n\n".join(sections))
