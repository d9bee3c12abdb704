"""
Structured payload extraction from free-form upstream output.
"""
from typing import Any, Dict, List, Optional, Type, TypeVar
import json
import logging
import re

from pydantic import BaseModel, ValidationError

from .sanitizer import ResponseSanitizer, strip_fence_markers
from exceptions import ExtractionFailure, ExtractionFailureReason

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_THINK_RE = re.compile(r"<think>.*?</think>", re.IGNORECASE | re.DOTALL)


def _balanced_span(text: str, start: int, string_aware: bool) -> Optional[str]:
    """Return the `{...}` span opening at `start`, or None if it never closes."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if string_aware and ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


class StructuredExtractor:
    """
    Locates, repairs, parses and validates a JSON object in upstream output.

    Features:
    - Balanced-brace candidate search with a line-by-line fallback
    - Sanitization isolated in ResponseSanitizer
    - Typed failures (ExtractionFailure) instead of silent empty results

    Example:
        >>> extractor = StructuredExtractor()
        >>> payload = extractor.extract(raw_text, ChatPayload)
    """

    def __init__(self, sanitizer: Optional[ResponseSanitizer] = None):
        self.sanitizer = sanitizer or ResponseSanitizer()

    def locate_candidate(self, raw: str) -> Optional[str]:
        """
        Find the first balanced `{...}` span in raw output.

        Each opening brace is tried in order, first with a string-aware scan
        and then with a plain brace count (which survives an odd number of
        unescaped quotes). If nothing balances, the first line that is
        itself a complete object is used.
        """
        if not raw:
            return None

        text = _THINK_RE.sub("", raw)
        start = text.find("{")
        while start != -1:
            span = _balanced_span(text, start, string_aware=True)
            if span is None:
                span = _balanced_span(text, start, string_aware=False)
            if span is not None:
                return span
            start = text.find("{", start + 1)

        for line in text.splitlines():
            stripped = line.strip()
            if stripped.startswith("{") and stripped.endswith("}"):
                return stripped
        return None

    def extract(self, raw: str, schema: Type[T]) -> T:
        """
        Extract an instance of `schema` from raw upstream text.

        Args:
            raw: Raw upstream output
            schema: pydantic model the payload must validate against

        Returns:
            Validated schema instance

        Raises:
            ExtractionFailure: no-candidate-found, sanitize-failed or schema-mismatch
        """
        candidate = self.locate_candidate(raw)
        if candidate is None:
            logger.debug(f"No JSON candidate in output: {(raw or '')[:200]!r}")
            raise ExtractionFailure(ExtractionFailureReason.NO_CANDIDATE_FOUND)

        cleaned = self.sanitizer.sanitize(candidate)
        try:
            data = json.loads(cleaned)
        except (json.JSONDecodeError, RecursionError) as e:
            logger.debug(f"Unparseable candidate after sanitizing: {cleaned[:200]!r}")
            raise ExtractionFailure(ExtractionFailureReason.SANITIZE_FAILED, str(e)) from e

        if not isinstance(data, dict):
            raise ExtractionFailure(
                ExtractionFailureReason.SANITIZE_FAILED,
                f"expected an object, got {type(data).__name__}",
            )

        missing = self._missing_fields(data, schema)
        if missing:
            raise ExtractionFailure(
                ExtractionFailureReason.SCHEMA_MISMATCH,
                f"missing fields: {', '.join(missing)}",
            )

        try:
            return schema.model_validate(data)
        except ValidationError as e:
            raise ExtractionFailure(
                ExtractionFailureReason.SCHEMA_MISMATCH,
                f"{e.error_count()} validation error(s)",
            ) from e

    def extract_text(self, raw: str) -> str:
        """
        Extract a plain-text payload.

        Raises:
            ExtractionFailure: If nothing but fences and whitespace remain
        """
        text = strip_fence_markers(_THINK_RE.sub("", raw or "")).strip()
        if not text:
            raise ExtractionFailure(ExtractionFailureReason.NO_CANDIDATE_FOUND, "empty text")
        return text

    @staticmethod
    def _missing_fields(data: Dict[str, Any], schema: Type[BaseModel]) -> List[str]:
        missing = []
        for name, field in schema.model_fields.items():
            if not field.is_required():
                continue
            alias = field.alias or name
            if alias not in data and name not in data:
                missing.append(alias)
        return missing
