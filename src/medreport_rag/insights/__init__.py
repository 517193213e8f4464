"""Domain insight side channel for summarization prompts."""

from medreport_rag.insights.augmenter import (
    HuggingFaceInsightAugmenter,
    get_insight_augmenter,
)

__all__ = [
    "HuggingFaceInsightAugmenter",
    "get_insight_augmenter",
]
