"""Tests for extraction.sanitizer: best-effort JSON repair."""

import json

from extraction.sanitizer import (
    ResponseSanitizer,
    escape_raw_whitespace,
    quote_bare_keys,
    remove_trailing_commas,
    repair_quotes,
    replace_control_chars,
    strip_code_fences,
)


def _parse(raw: str):
    return json.loads(ResponseSanitizer().sanitize(raw))


# ── individual passes ──────────────────────────────────────────


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```').strip() == '{"a": 1}'
    assert strip_code_fences('```\n{"a": 1}\n```').strip() == '{"a": 1}'


def test_replace_control_chars_keeps_line_breaks():
    assert replace_control_chars("a\x00b\x07c\x7fd") == "a b c d"
    assert replace_control_chars("a\nb\tc\rd") == "a\nb\tc\rd"


def test_escape_raw_whitespace_only_inside_strings():
    raw = '{\n  "content": "line one\nline two\tend"\n}'
    fixed = escape_raw_whitespace(raw)
    assert fixed == '{\n  "content": "line one\\nline two\\tend"\n}'


def test_repair_quotes_escapes_internal_quotes():
    raw = '{"content": "She told me "relax" today", "n": 1}'
    assert json.loads(repair_quotes(raw)) == {"content": 'She told me "relax" today', "n": 1}


def test_repair_quotes_single_internal_quote():
    raw = '{"content": "I am 5\'11" tall", "n": 1}'
    assert json.loads(repair_quotes(raw))["content"] == "I am 5'11\" tall"


def test_repair_quotes_unescapes_over_escaped_object():
    raw = '{\\"content\\": \\"hi\\", \\"tags\\": [\\"a\\", \\"b\\"]}'
    assert json.loads(repair_quotes(raw)) == {"content": "hi", "tags": ["a", "b"]}


def test_repair_quotes_fixes_invalid_escapes():
    raw = '{"content": "it\\\'s C:\\\\temp and \\d"}'
    assert json.loads(repair_quotes(raw))["content"] == "it's C:\\temp and \\d"


def test_remove_trailing_commas_outside_strings_only():
    raw = '{"a": [1, 2,], "b": "x,}",}'
    assert remove_trailing_commas(raw) == '{"a": [1, 2], "b": "x,}"}'


def test_quote_bare_keys():
    raw = '{content: "hi", metadata: {urgency: "low"}}'
    assert json.loads(quote_bare_keys(raw)) == {"content": "hi", "metadata": {"urgency": "low"}}


def test_quote_bare_keys_ignores_string_content():
    raw = '{"content": "note, time: now"}'
    assert quote_bare_keys(raw) == raw


# ── full pipeline ──────────────────────────────────────────────


def test_valid_json_survives_unchanged():
    original = {
        "content": 'He said "ok", then left.\nNew line',
        "metadata": {"emotionsDetected": ["anxiety", "stress"], "urgency": "medium", "score": -3},
        "flags": [True, False, None],
        "empty": "",
    }
    raw = json.dumps(original, indent=2)
    assert _parse(raw) == original


def test_fences_inside_string_values_are_kept():
    original = {"content": "Try this:\n```\nbreathe in 4\n```", "metadata": {}}
    assert _parse(json.dumps(original)) == original
    assert _parse("```json\n" + json.dumps(original) + "\n```") == original



def test_newline_trailing_comma_and_bare_key_together():
    raw = '{"content": "line one\nline two", mood: "ok",}'
    assert _parse(raw) == {"content": "line one\nline two", "mood": "ok"}


def test_fenced_output_with_control_bytes():
    raw = '```json\n{"content": "hello\x00world", "n": [1, 2,]}\n```'
    assert _parse(raw) == {"content": "hello world", "n": [1, 2]}


def test_never_raises_on_garbage():
    sanitizer = ResponseSanitizer()
    for raw in ["", "\\", '"', '{"a": "\\', "```", "{{{{", None, '{"a": "\\u12"}']:
        assert isinstance(sanitizer.sanitize(raw), str)
