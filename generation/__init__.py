"""Generation module."""
from .prompts import PromptComposer
from .upstream import UpstreamClient

__all__ = ['PromptComposer', 'UpstreamClient']
