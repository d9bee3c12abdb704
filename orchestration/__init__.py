"""Orchestration module."""
from .orchestrator import ResponseOrchestrator

__all__ = ['ResponseOrchestrator']
