"""
Best-effort repair of JSON-like text produced by the upstream service.

The passes target the failure modes seen in practice: fenced output, stray
control bytes, raw newlines inside string values, unescaped or over-escaped
quotes, trailing commas and unquoted keys. This is not a grammar parser and
does not try to be correct for arbitrary malformed text.
"""
from typing import Callable, Tuple
import logging
import re

logger = logging.getLogger(__name__)


_FENCE_RE = re.compile(r"```(?:json5?|javascript|js)?", re.IGNORECASE)

# TAB, LF and CR are kept for the string-escaping pass
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

_RAW_WHITESPACE = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}

_VALID_ESCAPES = set('"\\/bfnrtu')

_HEX4_RE = re.compile(r"[0-9a-fA-F]{4}")

# What may legitimately follow a quote that closes a string
_CONTINUATION_RE = re.compile(
    r"""\s*(?:
        $
        | [}\]:]
        | ,\s*(?:
            $
            | \\?"
            | [{\[\]}\-\d]
            | true\b | false\b | null\b
            | [A-Za-z_][\w-]*\s*:
        )
    )""",
    re.VERBOSE,
)

_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")

_BARE_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z_][\w-]*)(\s*:)")


def _closes_string(text: str, quote_end: int) -> bool:
    """True when the text after a quote reads like the end of a JSON string."""
    return _CONTINUATION_RE.match(text, quote_end) is not None


def strip_fence_markers(text: str) -> str:
    return _FENCE_RE.sub("", text)


def strip_code_fences(text: str) -> str:
    """Drop ``` markers that sit outside string literals."""
    return _map_outside_strings(text, strip_fence_markers)



def replace_control_chars(text: str) -> str:
    return _CONTROL_RE.sub(" ", text)


def escape_raw_whitespace(text: str) -> str:
    """Escape literal LF / CR / TAB that sit inside string literals."""
    out = []
    in_string = False
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if in_string:
            if ch == "\\" and i + 1 < n and text[i + 1] not in _RAW_WHITESPACE:
                out.append(text[i:i + 2])
                i += 2
                continue
            if ch == '"' and _closes_string(text, i + 1):
                in_string = False
            elif ch in _RAW_WHITESPACE:
                ch = _RAW_WHITESPACE[ch]
        elif ch == '"':
            in_string = True
        out.append(ch)
        i += 1
    return "".join(out)


def repair_quotes(text: str) -> str:
    """
    Normalize quote escaping.

    Inside a string, a bare quote that is not followed by a structural
    continuation is escaped. Outside strings, `\\"` is treated as an
    over-escaped structural quote and unescaped, together with its closing
    partner. Invalid backslash escapes are repaired.
    """
    out = []
    in_string = False
    over_escaped = False
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < n else ""

        if not in_string:
            if ch == "\\" and nxt == '"':
                in_string = True
                over_escaped = True
                out.append('"')
                i += 2
                continue
            if ch == '"':
                in_string = True
                over_escaped = False
            out.append(ch)
            i += 1
            continue

        if ch == "\\":
            if nxt == '"' and over_escaped and _closes_string(text, i + 2):
                in_string = False
                out.append('"')
                i += 2
            elif nxt == "u" and not _HEX4_RE.match(text, i + 2):
                out.append("\\\\")
                i += 1
            elif nxt in _VALID_ESCAPES and nxt:
                out.append(ch + nxt)
                i += 2
            elif nxt == "'":
                out.append("'")
                i += 2
            else:
                out.append("\\\\")
                i += 1
            continue

        if ch == '"':
            if _closes_string(text, i + 1):
                in_string = False
                out.append(ch)
            else:
                out.append('\\"')
            i += 1
            continue

        out.append(ch)
        i += 1
    return "".join(out)


def _map_outside_strings(text: str, fn: Callable[[str], str]) -> str:
    """Apply `fn` to every span of `text` that is not a string literal."""
    parts = []
    seg_start = 0
    in_string = False
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if in_string:
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                in_string = False
                parts.append(text[seg_start:i + 1])
                seg_start = i + 1
        elif ch == '"':
            parts.append(fn(text[seg_start:i]))
            seg_start = i
            in_string = True
        i += 1
    tail = text[seg_start:]
    parts.append(tail if in_string else fn(tail))
    return "".join(parts)


def remove_trailing_commas(text: str) -> str:
    return _map_outside_strings(text, lambda segment: _TRAILING_COMMA_RE.sub(r"\1", segment))


def quote_bare_keys(text: str) -> str:
    return _map_outside_strings(text, lambda segment: _BARE_KEY_RE.sub(r'\1"\2"\3', segment))


class ResponseSanitizer:
    """
    Repairs raw upstream text into parseable JSON text.

    The passes run in a fixed order; each one assumes the previous ones ran.
    """

    steps: Tuple[Callable[[str], str], ...] = (
        strip_code_fences,
        replace_control_chars,
        escape_raw_whitespace,
        repair_quotes,
        remove_trailing_commas,
        quote_bare_keys,
    )

    def sanitize(self, raw: str) -> str:
        if not isinstance(raw, str):
            return ""
        text = raw
        for step in self.steps:
            text = step(text)
        if text != raw:
            logger.debug(f"Sanitized candidate ({len(raw)} -> {len(text)} chars)")
        return text.strip()
