"""Output schemas for report summaries."""

from medreport_rag.schemas.summary import (
    PLACEHOLDER_FINDING,
    PLACEHOLDER_REASONING,
    PLACEHOLDER_RECOMMENDATION,
    SUMMARY_FUNCTION_SCHEMA,
    ReportSummary,
    SummaryPayload,
)

__all__ = [
    "PLACEHOLDER_FINDING",
    "PLACEHOLDER_REASONING",
    "PLACEHOLDER_RECOMMENDATION",
    "SUMMARY_FUNCTION_SCHEMA",
    "ReportSummary",
    "SummaryPayload",
]
