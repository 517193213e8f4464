"""
Summarization module - the generate-summary entry point.

- prompts: layered prompt construction (pure)
- parser: free-text line-classifier parser (pure)
- generator: chat model call, GenerationResult union, normalization
- nodes / graph: LangGraph wiring of the per-request pipeline
- orchestrator: status transitions, persistence, error reporting
"""

from medreport_rag.summarization.generator import (
    FreeTextGeneration,
    GenerationResult,
    ReportGenerator,
    StructuredGeneration,
    get_report_generator,
    normalize_generation,
)
from medreport_rag.summarization.graph import build_summary_graph
from medreport_rag.summarization.orchestrator import (
    SummarizationError,
    SummarizationOrchestrator,
    SummarizationResult,
)
from medreport_rag.summarization.parser import parse_free_text
from medreport_rag.summarization.prompts import (
    PromptParts,
    build_summary_prompt,
    retrieval_query,
)
from medreport_rag.summarization.state import SummaryState, create_initial_state

__all__ = [
    # Generation
    "FreeTextGeneration",
    "GenerationResult",
    "ReportGenerator",
    "StructuredGeneration",
    "get_report_generator",
    "normalize_generation",
    # Parsing
    "parse_free_text",
    # Prompts
    "PromptParts",
    "build_summary_prompt",
    "retrieval_query",
    # Graph
    "SummaryState",
    "create_initial_state",
    "build_summary_graph",
    # Orchestrator
    "SummarizationOrchestrator",
    "SummarizationResult",
    "SummarizationError",
]
