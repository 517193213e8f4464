"""
Graph construction with dependency injection.

The graph is just WIRING - all logic lives in nodes. Status transitions
and persistence are not graph nodes: the orchestrator owns them, so a
failure anywhere in the graph maps onto one "failed" edge.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from langgraph.graph import END, StateGraph

from medreport_rag.summarization.nodes import (
    build_prompt,
    create_augment_node,
    create_fetch_content_node,
    create_generate_node,
    create_retrieve_node,
    parse_response,
)
from medreport_rag.summarization.state import SummaryState

if TYPE_CHECKING:
    from medreport_rag.core.protocols import ContentStore, InsightAugmenter
    from medreport_rag.retrieval.retriever import Retriever
    from medreport_rag.summarization.generator import ReportGenerator


def build_summary_graph(
    content: ContentStore,
    generator: ReportGenerator,
    retriever: Retriever | None = None,
    augmenter: InsightAugmenter | None = None,
):
    """
    Build the summarization workflow with injected dependencies.

    Graph structure:
    START -> fetch_content -> retrieve_context -> augment_insights
          -> build_prompt -> generate -> parse_response -> END

    Args:
        content: ContentStore resolving the report's locator
        generator: ReportGenerator in the configured mode
        retriever: Optional Retriever (None disables RAG context)
        augmenter: Optional domain insight augmenter

    Returns:
        Compiled StateGraph ready for ainvoke()

    Example:
        # Testing
        graph = build_summary_graph(
            InMemoryContentStore({"r1.txt": "..."}),
            ReportGenerator(FakeChatModel(), mode="free_text"),
        )
        state = await graph.ainvoke(create_initial_state(document))
    """
    workflow = StateGraph(SummaryState)

    workflow.add_node("fetch_content", create_fetch_content_node(content))
    workflow.add_node("retrieve_context", create_retrieve_node(retriever))
    workflow.add_node("augment_insights", create_augment_node(augmenter))
    workflow.add_node("build_prompt", build_prompt)  # Pure, no deps needed
    workflow.add_node("generate", create_generate_node(generator))
    workflow.add_node("parse_response", parse_response)

    workflow.set_entry_point("fetch_content")
    workflow.add_edge("fetch_content", "retrieve_context")
    workflow.add_edge("retrieve_context", "augment_insights")
    workflow.add_edge("augment_insights", "build_prompt")
    workflow.add_edge("build_prompt", "generate")
    workflow.add_edge("generate", "parse_response")
    workflow.add_edge("parse_response", END)

    return workflow.compile()
