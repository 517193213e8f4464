"""
Summarization graph nodes - isolated, testable functions.

PATTERN:
--------
1. Pure nodes (no dependencies) are simple functions
2. Nodes with dependencies use factory pattern: create_X_node(deps) -> node_fn

Best-effort nodes (content fetch, retrieval, insights) never raise: they
log and write a degraded value. Only generation can fail the request.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Awaitable, Callable

from medreport_rag.storage.content import placeholder_content
from medreport_rag.summarization.generator import normalize_generation
from medreport_rag.summarization.prompts import build_summary_prompt, retrieval_query

if TYPE_CHECKING:
    from medreport_rag.core.protocols import ContentStore, InsightAugmenter
    from medreport_rag.retrieval.retriever import Retriever
    from medreport_rag.summarization.generator import ReportGenerator
    from medreport_rag.summarization.state import SummaryState

logger = logging.getLogger(__name__)

AsyncNode = Callable[["SummaryState"], Awaitable[dict]]


def create_fetch_content_node(content: ContentStore) -> AsyncNode:
    """Factory for the content fetch node."""

    async def fetch_content(state: SummaryState) -> dict:
        """
        Reads from state: document
        Writes to state: content, content_is_placeholder
        """
        document = state["document"]
        try:
            text = await content.fetch_text(document.file_url)
        except Exception as e:
            logger.warning(f"Content fetch failed for {document.id}, using placeholder: {e}")
            return {
                "content": placeholder_content(document),
                "content_is_placeholder": True,
            }

        logger.info(f"Fetched {len(text)} characters of content for {document.id}")
        return {"content": text, "content_is_placeholder": False}

    return fetch_content


def create_retrieve_node(retriever: Retriever | None) -> AsyncNode:
    """
    Factory for the retrieval node.

    retriever=None is the "no embedding credential" mode and always
    yields an empty context.
    """

    async def retrieve_context(state: SummaryState) -> dict:
        """
        Reads from state: document
        Writes to state: retrieved_context, retrieval_latency_ms
        """
        if retriever is None:
            return {"retrieved_context": "", "retrieval_latency_ms": 0}

        document = state["document"]
        start = time.time()
        # Retriever.retrieve converts every failure to ""
        context = await retriever.retrieve(document.id, retrieval_query(document))
        return {
            "retrieved_context": context,
            "retrieval_latency_ms": (time.time() - start) * 1000,
        }

    return retrieve_context


def create_augment_node(augmenter: InsightAugmenter | None) -> AsyncNode:
    """Factory for the domain insight node."""

    async def augment_insights(state: SummaryState) -> dict:
        """
        Reads from state: content, content_is_placeholder
        Writes to state: domain_insights
        """
        # Insights about the placeholder text would be insights about nothing
        if augmenter is None or state["content_is_placeholder"] or not state["content"]:
            return {"domain_insights": None}

        try:
            insights = await augmenter.augment(state["content"])
        except Exception as e:
            logger.warning(f"Domain insights failed, continuing without: {e}")
            insights = None
        return {"domain_insights": insights}

    return augment_insights


async def build_prompt(state: SummaryState) -> dict:
    """
    Assemble the layered prompt. Pure apart from reading state.

    Reads from state: document, content, retrieved_context, domain_insights
    Writes to state: prompt
    """
    return {
        "prompt": build_summary_prompt(
            state["document"],
            state["content"],
            retrieved_context=state["retrieved_context"],
            domain_insights=state["domain_insights"],
        )
    }


def create_generate_node(generator: ReportGenerator) -> AsyncNode:
    """Factory for the generation node. ProviderError propagates."""

    async def generate(state: SummaryState) -> dict:
        """
        Reads from state: prompt
        Writes to state: generation, generation_latency_ms
        """
        start = time.time()
        result = await generator.generate(state["prompt"])
        latency = (time.time() - start) * 1000
        logger.info(f"Generation ({generator.mode}) finished in {latency:.0f}ms")
        return {"generation": result, "generation_latency_ms": latency}

    return generate


async def parse_response(state: SummaryState) -> dict:
    """
    Normalize whichever response shape came back.

    Reads from state: generation
    Writes to state: payload
    """
    return {"payload": normalize_generation(state["generation"])}
