"""Retrieval module."""
from .notes import InMemoryNoteStore, Note, NoteRetriever, NoteStore, load_notes_file

__all__ = ['InMemoryNoteStore', 'Note', 'NoteRetriever', 'NoteStore', 'load_notes_file']
