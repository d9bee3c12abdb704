"""Extraction module."""
from .schema import ChatMetadata, ChatPayload, ChatReply, NotesAnalysis
from .kinds import KIND_SPECS, KindSpec, RequestKind, spec_for
from .sanitizer import ResponseSanitizer
from .extractor import StructuredExtractor

__all__ = [
    'ChatMetadata', 'ChatPayload', 'ChatReply', 'NotesAnalysis',
    'KIND_SPECS', 'KindSpec', 'RequestKind', 'spec_for',
    'ResponseSanitizer', 'StructuredExtractor',
]
