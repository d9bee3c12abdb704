"""
Custom exceptions for the response engine.
"""
from enum import Enum
from typing import Optional


class EngineError(Exception):
    """Base exception for all engine errors."""
    pass

class ConfigurationMissing(EngineError):
    """Upstream credential is absent or still a placeholder."""
    pass

class UpstreamUnavailable(EngineError):
    """Upstream text service call failed."""
    pass

class NoteRetrievalError(EngineError):
    """Note store lookup failed."""
    pass

class NoteLoadError(EngineError):
    """Failed to load or validate a notes file."""
    pass


class ExtractionFailureReason(str, Enum):
    NO_CANDIDATE_FOUND = "no-candidate-found"
    SANITIZE_FAILED = "sanitize-failed"
    SCHEMA_MISMATCH = "schema-mismatch"


class ExtractionFailure(EngineError):
    """No schema-conformant payload could be extracted from upstream output."""

    def __init__(self, reason: ExtractionFailureReason, detail: Optional[str] = None):
        self.reason = ExtractionFailureReason(reason)
        self.detail = detail
        message = self.reason.value if not detail else f"{self.reason.value}: {detail}"
        super().__init__(message)
