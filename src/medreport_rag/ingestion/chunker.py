"""
Text chunker - splits report text into overlapping fixed-size fragments.

This is a PURE FUNCTION - same inputs always produce same output.

The window advances by size - overlap characters, so consecutive fragments
share exactly `overlap` characters. Chunking stops at the first window that
reaches the end of the text, so the last fragment always ends at len(text)
and no trailing fragment is wholly contained in its predecessor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_CHUNK_OVERLAP = 200


@dataclass(frozen=True)
class FragmentDraft:
    """A chunk of text before it is embedded and persisted."""

    content: str
    index: int
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def start_char(self) -> int:
        return self.metadata["start_char"]

    @property
    def end_char(self) -> int:
        return self.metadata["end_char"]


def chunk_text(
    text: str,
    size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> list[FragmentDraft]:
    """
    Split text into overlapping windows.

    Args:
        text: Raw document text
        size: Window size in characters
        overlap: Characters shared by consecutive windows (0 < overlap < size)

    Returns:
        Fragments in source order. Offsets in metadata are untrimmed;
        "length" is the length of the trimmed content.
    """
    if not 0 < overlap < size:
        raise ValueError(
            f"Chunk overlap must satisfy 0 < overlap < size "
            f"(got size={size}, overlap={overlap})"
        )

    step = size - overlap
    fragments: list[FragmentDraft] = []
    start = 0

    while start < len(text):
        end = min(start + size, len(text))
        content = text[start:end].strip()
        fragments.append(
            FragmentDraft(
                content=content,
                index=len(fragments),
                metadata={
                    "start_char": start,
                    "end_char": end,
                    "length": len(content),
                },
            )
        )
        if end == len(text):
            break
        start += step

    return fragments


def expected_fragment_count(length: int, size: int, overlap: int) -> int:
    """Number of fragments chunk_text produces for a text of this length."""
    if length <= 0:
        return 0
    step = size - overlap
    return max(1, -(-(length - overlap) // step))
