"""
Semantic Conventions for Span Attributes

Defines attribute keys following OpenTelemetry GenAI conventions
plus custom namespaces for ingestion, retrieval and summarization.

Reference: https://opentelemetry.io/docs/specs/semconv/gen-ai/
"""

# ---------------------------------------------------------------------------
# GENAI NAMESPACE (OTel standard)
# ---------------------------------------------------------------------------

GEN_AI_SYSTEM = "gen_ai.system"  # "openai", "gemini", etc.
GEN_AI_REQUEST_MODEL = "gen_ai.request.model"  # "gpt-4o-mini"

# Request/Response (optional, controlled by TRACING_CAPTURE_CONTENT)
GEN_AI_PROMPT = "gen_ai.prompt"
GEN_AI_COMPLETION = "gen_ai.completion"


# ---------------------------------------------------------------------------
# REPORT NAMESPACE (custom)
# ---------------------------------------------------------------------------

REPORT_ID = "report.id"
REPORT_CATEGORY = "report.category"  # "radiology", "lab_report", ...
REPORT_STATUS = "report.status"  # final status after the request


# ---------------------------------------------------------------------------
# INGESTION NAMESPACE (custom)
# ---------------------------------------------------------------------------

INGEST_CHUNKS_PROCESSED = "ingest.chunks_processed"
INGEST_RAG_ENABLED = "ingest.rag_enabled"


# ---------------------------------------------------------------------------
# SUMMARIZATION NAMESPACE (custom)
# ---------------------------------------------------------------------------

SUMMARY_GENERATION_MODE = "summary.generation_mode"  # "structured", "free_text"
SUMMARY_CONTENT_PLACEHOLDER = "summary.content_placeholder"  # bool
SUMMARY_CONTEXT_CHARS = "summary.retrieved_context_chars"
SUMMARY_HAS_INSIGHTS = "summary.has_domain_insights"
SUMMARY_SUCCESS = "summary.success"
SUMMARY_ERROR_TYPE = "summary.error_type"


def summary_run_attributes(
    report_id: str,
    generation_mode: str,
    model: str,
) -> dict:
    """Attributes for a summarization span."""
    return {
        REPORT_ID: report_id,
        SUMMARY_GENERATION_MODE: generation_mode,
        GEN_AI_REQUEST_MODEL: model,
    }
