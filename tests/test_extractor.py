"""Tests for extraction.extractor: locate, repair, parse, validate."""

import json

import pytest

from exceptions import ExtractionFailure, ExtractionFailureReason
from extraction.extractor import StructuredExtractor
from extraction.schema import ChatPayload, NotesAnalysis


CHAT_JSON = (
    '{"content": "Take a slow breath.", "metadata": {"emotionsDetected": ["anxiety"], '
    '"triggersDetected": ["work"], "strategiesSuggested": ["breathing"], '
    '"urgency": "medium", "therapeuticReferences": ["CBT"]}}'
)

NOTES_JSON = (
    '{"summary": "Steady progress.", "mainThemes": ["anxiety"], "progressMarkers": ["coping"], '
    '"recommendations": ["keep journaling"], "wellnessScore": 72, '
    '"attentionAreas": [], "strategies": ["breathing"]}'
)


def _reason(exc_info) -> ExtractionFailureReason:
    return exc_info.value.reason


# ── candidate location ─────────────────────────────────────────


def test_locates_object_inside_prose():
    raw = "Sure! Here is the JSON you asked for:\n" + CHAT_JSON + "\nLet me know if you need more."
    assert StructuredExtractor().locate_candidate(raw) == CHAT_JSON


def test_locates_first_balanced_span_with_braces_in_strings():
    raw = 'prefix {"content": "use {curly} and }", "metadata": {}} suffix {"other": 1}'
    assert StructuredExtractor().locate_candidate(raw) == '{"content": "use {curly} and }", "metadata": {}}'


def test_skips_think_block():
    raw = '<think>{"draft": true}</think>' + CHAT_JSON
    assert StructuredExtractor().locate_candidate(raw) == CHAT_JSON


def test_no_candidate():
    with pytest.raises(ExtractionFailure) as exc_info:
        StructuredExtractor().extract("I'm sorry, I can't help with that.", ChatPayload)
    assert _reason(exc_info) is ExtractionFailureReason.NO_CANDIDATE_FOUND


def test_unbalanced_object_is_no_candidate():
    with pytest.raises(ExtractionFailure) as exc_info:
        StructuredExtractor().extract('{"content": "cut off mid', ChatPayload)
    assert _reason(exc_info) is ExtractionFailureReason.NO_CANDIDATE_FOUND


# ── parsing and validation ─────────────────────────────────────


def test_extracts_chat_payload():
    payload = StructuredExtractor().extract(CHAT_JSON, ChatPayload)
    assert isinstance(payload, ChatPayload)
    assert payload.content == "Take a slow breath."
    assert payload.metadata.emotions_detected == ["anxiety"]
    assert payload.metadata.urgency == "medium"


def test_fenced_output_with_unescaped_internal_quote():
    raw = (
        "```json\n"
        '{"content": "Remember what we said: "this too shall pass".", '
        '"metadata": {"emotionsDetected": ["sadness"], "urgency": "low"}}\n'
        "```"
    )
    payload = StructuredExtractor().extract(raw, ChatPayload)
    assert payload.content == 'Remember what we said: "this too shall pass".'
    assert payload.metadata.emotions_detected == ["sadness"]


def test_odd_number_of_internal_quotes():
    raw = '{"content": "I am 5\'11" and still feel small", "metadata": {"urgency": "low"}}'
    payload = StructuredExtractor().extract(raw, ChatPayload)
    assert payload.content == "I am 5'11\" and still feel small"


def test_extracts_notes_analysis_and_clamps_score():
    raw = NOTES_JSON.replace("72", "140")
    analysis = StructuredExtractor().extract(raw, NotesAnalysis)
    assert analysis.wellness_score == 100
    assert analysis.main_themes == ["anxiety"]


def test_unparseable_candidate_is_sanitize_failed():
    with pytest.raises(ExtractionFailure) as exc_info:
        StructuredExtractor().extract('{"content": "hi" "metadata" {}}', ChatPayload)
    assert _reason(exc_info) is ExtractionFailureReason.SANITIZE_FAILED


def test_markdown_block_in_content_survives():
    raw = json.dumps({"content": "Try this:\n```\nbreathe in 4\n```", "metadata": {}})
    payload = StructuredExtractor().extract(raw, ChatPayload)
    assert payload.content == "Try this:\n```\nbreathe in 4\n```"


def test_deeply_nested_candidate_is_sanitize_failed():
    raw = '{"a":' + "[" * 100000 + "]" * 100000 + "}"
    with pytest.raises(ExtractionFailure) as exc_info:
        StructuredExtractor().extract(raw, ChatPayload)
    assert _reason(exc_info) is ExtractionFailureReason.SANITIZE_FAILED



def test_missing_metadata_is_schema_mismatch():
    with pytest.raises(ExtractionFailure) as exc_info:
        StructuredExtractor().extract('{"content": "hello"}', ChatPayload)
    assert _reason(exc_info) is ExtractionFailureReason.SCHEMA_MISMATCH
    assert "metadata" in str(exc_info.value)


def test_notes_missing_field_is_schema_mismatch():
    raw = NOTES_JSON.replace('"strategies": ["breathing"]', '"other": []')
    with pytest.raises(ExtractionFailure) as exc_info:
        StructuredExtractor().extract(raw, NotesAnalysis)
    assert _reason(exc_info) is ExtractionFailureReason.SCHEMA_MISMATCH


def test_wrong_types_are_schema_mismatch():
    with pytest.raises(ExtractionFailure) as exc_info:
        StructuredExtractor().extract('{"content": "hi", "metadata": "none"}', ChatPayload)
    assert _reason(exc_info) is ExtractionFailureReason.SCHEMA_MISMATCH

    with pytest.raises(ExtractionFailure) as exc_info:
        StructuredExtractor().extract(NOTES_JSON.replace("72", '"great"'), NotesAnalysis)
    assert _reason(exc_info) is ExtractionFailureReason.SCHEMA_MISMATCH


def test_blank_content_is_schema_mismatch():
    with pytest.raises(ExtractionFailure) as exc_info:
        StructuredExtractor().extract('{"content": "  ", "metadata": {}}', ChatPayload)
    assert _reason(exc_info) is ExtractionFailureReason.SCHEMA_MISMATCH


def test_extracted_object_validates_against_its_schema():
    payload = StructuredExtractor().extract(CHAT_JSON, ChatPayload)
    assert ChatPayload.model_validate(payload.to_dict()) == payload

    analysis = StructuredExtractor().extract(NOTES_JSON, NotesAnalysis)
    assert NotesAnalysis.model_validate(analysis.to_dict()) == analysis


# ── plain text ─────────────────────────────────────────────────


def test_extract_text_strips_fences():
    assert StructuredExtractor().extract_text("```\nAll good.\n```") == "All good."


def test_extract_text_empty_fails():
    with pytest.raises(ExtractionFailure) as exc_info:
        StructuredExtractor().extract_text("```\n\n```")
    assert _reason(exc_info) is ExtractionFailureReason.NO_CANDIDATE_FOUND
