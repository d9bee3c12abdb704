"""Configuration module."""
from .settings import Settings, is_placeholder_key

__all__ = ['Settings', 'is_placeholder_key']
