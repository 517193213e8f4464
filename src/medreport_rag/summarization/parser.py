"""
Free-text response parser.

Model prose is split into lines and each line is classified as a section
header, a bullet item or plain text. A header switches the current
section; bullets are collected into it; plain lines are ignored. Sections
with no bullets fall back to placeholders (see schemas.summary), and the
untouched response text is always kept as full_summary.

Recognized header keywords (case-insensitive). A plain line containing a
keyword is a header ("Summary of Key Findings:"). A bullet-shaped line is
a header only when the keyword is all it says ("1. Key Findings:").
- "Key Findings" / "Key Clinical Findings"      -> key_findings
- "Step-by-Step ..." / "Reasoning ..."          -> reasoning_steps
- "Recommendations" / "Clinical Recommendations" -> recommendations

Bullet markers: "-", "•", "*", or a number followed by "." or ")".
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from medreport_rag.schemas.summary import SummaryPayload


class Section(str, Enum):
    FINDINGS = "key_findings"
    REASONING = "reasoning_steps"
    RECOMMENDATIONS = "recommendations"


class LineKind(str, Enum):
    HEADER = "header"
    BULLET = "bullet"
    PLAIN = "plain"


_HEADERS = (
    (Section.FINDINGS, r"key\s+(?:clinical\s+)?findings?"),
    (
        Section.REASONING,
        r"(?:step[\s-]*by[\s-]*step(?:\s+(?:clinical\s+)?(?:reasoning|analysis))?"
        r"|(?:clinical\s+)?reasoning)(?:\s+(?:steps?|process))?",
    ),
    (Section.RECOMMENDATIONS, r"(?:clinical\s+)?recommendations?"),
)

_HEADER_PATTERNS = [
    (
        section,
        re.compile(rf"^{phrase}\s*(?:\([^)]*\))?\s*:?$", re.IGNORECASE),
        re.compile(rf"\b{phrase}\b", re.IGNORECASE),
    )
    for section, phrase in _HEADERS
]

_BULLET = re.compile(r"^(?:[-•*]|\d+[.)])\s*")
_EMPHASIS = re.compile(r"\*\*|__")
_STEP_LABEL = re.compile(r"^step\s*\d+\s*[:.)-]\s*", re.IGNORECASE)


@dataclass(frozen=True)
class ClassifiedLine:
    kind: LineKind
    text: str
    section: Section | None = None


def _bare(line: str) -> str:
    """Line text without heading marks, bullet marker, emphasis or edge colons."""
    text = _EMPHASIS.sub("", line.strip().lstrip("#")).strip()
    return _BULLET.sub("", text, count=1).strip()


def classify_line(line: str) -> ClassifiedLine:
    """
    Classify one response line.

    Header detection runs first so numbered headers such as
    "1. Key Findings:" switch sections instead of becoming items.
    """
    stripped = line.strip()
    if not stripped:
        return ClassifiedLine(LineKind.PLAIN, "")

    bare = _bare(stripped)
    for section, full, _ in _HEADER_PATTERNS:
        if full.match(bare):
            return ClassifiedLine(LineKind.HEADER, bare, section)

    if _BULLET.match(_EMPHASIS.sub("", stripped.lstrip("#")).strip()):
        return ClassifiedLine(LineKind.BULLET, bare)

    # Earliest keyword wins: "Recommendations based on key findings"
    found = []
    for section, _, keyword in _HEADER_PATTERNS:
        match = keyword.search(bare)
        if match:
            found.append((match.start(), section))
    if found:
        return ClassifiedLine(LineKind.HEADER, bare, min(found)[1])

    return ClassifiedLine(LineKind.PLAIN, stripped)


def extract_sections(text: str) -> dict[Section, list[str]]:
    """Run the line classifier over the text and collect bullets per section."""
    sections: dict[Section, list[str]] = {section: [] for section in Section}
    current: Section | None = None

    for line in text.splitlines():
        classified = classify_line(line)
        if classified.kind is LineKind.HEADER:
            current = classified.section
        elif classified.kind is LineKind.BULLET and current is not None:
            # Rules such as "---" look like bullets but carry no text
            if any(ch.isalnum() for ch in classified.text):
                sections[current].append(classified.text)

    return sections


def label_steps(items: list[str]) -> dict[str, str]:
    """Assign sequential "Step N" labels, dropping any label the model wrote."""
    steps = {}
    for item in items:
        cleaned = _STEP_LABEL.sub("", item).strip()
        if cleaned:
            steps[f"Step {len(steps) + 1}"] = cleaned
    return steps


def parse_free_text(text: str) -> SummaryPayload:
    """
    Best-effort structure from unstructured model prose.

    Never fails: missing sections become placeholder entries and
    full_summary is the exact input text.
    """
    sections = extract_sections(text or "")
    return SummaryPayload(
        key_findings=sections[Section.FINDINGS],
        reasoning_steps=label_steps(sections[Section.REASONING]),
        recommendations=sections[Section.RECOMMENDATIONS],
        full_summary=text,
    )
