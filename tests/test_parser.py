"""
Unit Tests for the Free-Text Parser

The parser is heuristic, so these tests pin exact outputs for a fixed set
of sample model responses.
"""

import pytest

from medreport_rag.schemas.summary import (
    PLACEHOLDER_FINDING,
    PLACEHOLDER_REASONING,
    PLACEHOLDER_RECOMMENDATION,
)
from medreport_rag.summarization.parser import (
    LineKind,
    Section,
    classify_line,
    label_steps,
    parse_free_text,
)


MARKDOWN_RESPONSE = """## Key Findings:
1. **6 mm nodule** in the right upper lobe
2. No pleural effusion

### Step-by-Step Reasoning
- Step 1: Reviewed the lung fields for focal lesions
- Step 2: Compared nodule size against follow-up guidelines
- Assessed the pleura and heart

**Recommendations:**
• Follow-up CT in 6-12 months
• Correlate with smoking history
"""


# ---------------------------------------------------------------------------
# LINE CLASSIFIER
# ---------------------------------------------------------------------------


class TestClassifyLine:

    @pytest.mark.parametrize(
        "line,section",
        [
            ("Key Findings:", Section.FINDINGS),
            ("KEY CLINICAL FINDINGS", Section.FINDINGS),
            ("1. Key Findings:", Section.FINDINGS),
            ("**Key Findings:**", Section.FINDINGS),
            ("## Step-by-Step Reasoning", Section.REASONING),
            ("Reasoning:", Section.REASONING),
            ("Step by step analysis:", Section.REASONING),
            ("Recommendations", Section.RECOMMENDATIONS),
            ("3. Clinical Recommendations (3-5):", Section.RECOMMENDATIONS),
            ("Summary of Key Findings:", Section.FINDINGS),
            ("Key Findings and Observations:", Section.FINDINGS),
            ("Recommendations for follow-up:", Section.RECOMMENDATIONS),
            ("**Clinical Reasoning Process**", Section.REASONING),
            ("Recommendations based on key findings:", Section.RECOMMENDATIONS),
        ],
    )
    def test_headers(self, line, section):
        classified = classify_line(line)

        assert classified.kind is LineKind.HEADER
        assert classified.section is section

    @pytest.mark.parametrize(
        "line,text",
        [
            ("- A", "A"),
            ("• Follow-up", "Follow-up"),
            ("* item", "item"),
            ("2. second", "second"),
            ("  - indented", "indented"),
        ],
    )
    def test_bullets(self, line, text):
        classified = classify_line(line)

        assert classified.kind is LineKind.BULLET
        assert classified.text == text

    @pytest.mark.parametrize(
        "line",
        ["", "The findings are consistent with a benign process.", "No acute abnormality."],
    )
    def test_plain(self, line):
        assert classify_line(line).kind is LineKind.PLAIN

    @pytest.mark.parametrize(
        "line",
        ["- Follow recommendations of the radiologist", "2. Key findings reviewed twice"],
    )
    def test_bullet_mentioning_keyword_stays_bullet(self, line):
        assert classify_line(line).kind is LineKind.BULLET


# ---------------------------------------------------------------------------
# PARSE
# ---------------------------------------------------------------------------


class TestParseFreeText:

    def test_findings_and_recommendations_without_reasoning(self):
        text = "Key Findings:\n- A\n- B\nRecommendations:\n- C"

        payload = parse_free_text(text)

        assert payload.key_findings == ["A", "B"]
        assert payload.reasoning_steps == {"Step 1": PLACEHOLDER_REASONING["Step 1"]}
        assert payload.recommendations == ["C"]
        assert payload.full_summary == text

    def test_no_headers_gives_placeholders_and_verbatim_text(self):
        text = "The scan shows a small nodule.\n- it is probably benign\nNothing else."

        payload = parse_free_text(text)

        assert payload.key_findings == [PLACEHOLDER_FINDING]
        assert payload.reasoning_steps == PLACEHOLDER_REASONING
        assert payload.recommendations == [PLACEHOLDER_RECOMMENDATION]
        assert payload.full_summary == text

    def test_empty_response(self):
        payload = parse_free_text("")

        assert payload.key_findings == [PLACEHOLDER_FINDING]
        assert payload.full_summary == ""

    def test_markdown_response(self):
        payload = parse_free_text(MARKDOWN_RESPONSE)

        assert payload.key_findings == [
            "6 mm nodule in the right upper lobe",
            "No pleural effusion",
        ]
        assert payload.reasoning_steps == {
            "Step 1": "Reviewed the lung fields for focal lesions",
            "Step 2": "Compared nodule size against follow-up guidelines",
            "Step 3": "Assessed the pleura and heart",
        }
        assert list(payload.reasoning_steps) == ["Step 1", "Step 2", "Step 3"]
        assert payload.recommendations == [
            "Follow-up CT in 6-12 months",
            "Correlate with smoking history",
        ]
        assert payload.full_summary == MARKDOWN_RESPONSE

    def test_header_without_bullets_falls_back(self):
        text = "Key Findings:\nA nodule is present.\nRecommendations:\n- Follow-up CT"

        payload = parse_free_text(text)

        assert payload.key_findings == [PLACEHOLDER_FINDING]
        assert payload.recommendations == ["Follow-up CT"]

    def test_bullets_before_any_header_ignored(self):
        payload = parse_free_text("- stray\nKey Findings:\n- real")

        assert payload.key_findings == ["real"]

    @pytest.mark.parametrize(
        "findings_header",
        ["Summary of Key Findings:", "Key Findings and Observations:"],
    )
    def test_descriptive_headers(self, findings_header):
        text = (
            f"{findings_header}\n- 6 mm nodule\n- No effusion\n"
            "Recommendations for follow-up:\n- CT in 6 months"
        )

        payload = parse_free_text(text)

        assert payload.key_findings == ["6 mm nodule", "No effusion"]
        assert payload.recommendations == ["CT in 6 months"]

    def test_horizontal_rule_not_an_item(self):
        payload = parse_free_text("Key Findings:\n- A\n---\nRecommendations:\n- C")

        assert payload.key_findings == ["A"]


class TestLabelSteps:

    def test_sequential_labels(self):
        assert label_steps(["first", "Step 7: second"]) == {"Step 1": "first", "Step 2": "second"}

    def test_empty_items_skipped(self):
        assert label_steps(["Step 1:", "real"]) == {"Step 1": "real"}
