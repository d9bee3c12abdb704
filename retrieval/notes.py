"""
Therapy note retrieval.

The engine never owns note persistence; it reads through a NoteStore and
degrades to "no notes" when the store fails.
"""
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Sequence
import json
import logging

from exceptions import NoteLoadError, NoteRetrievalError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Note:
    """A clinical note as returned by the note store."""
    content: str
    created_at: datetime
    id: Optional[str] = None


class NoteStore(Protocol):
    def fetch_notes(
        self,
        client_id: str,
        note_ids: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
        since: Optional[datetime] = None,
    ) -> List[Note]: ...


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class InMemoryNoteStore:
    """
    Note store backed by a dict, most recent note first on every read.

    Example:
        >>> store = InMemoryNoteStore()
        >>> store.add("client-1", Note("Slept better this week", datetime.now(timezone.utc)))
        >>> len(store.fetch_notes("client-1"))
        1
    """

    def __init__(self, notes: Optional[Dict[str, Iterable[Note]]] = None):
        self._notes: Dict[str, List[Note]] = defaultdict(list)
        for client_id, client_notes in (notes or {}).items():
            self._notes[client_id].extend(client_notes)

    def add(self, client_id: str, note: Note) -> None:
        self._notes[client_id].append(note)

    def fetch_notes(
        self,
        client_id: str,
        note_ids: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
        since: Optional[datetime] = None,
    ) -> List[Note]:
        notes = list(self._notes.get(client_id, []))
        if note_ids:
            wanted = set(note_ids)
            notes = [note for note in notes if note.id in wanted]
        if since is not None:
            cutoff = _as_utc(since)
            notes = [note for note in notes if _as_utc(note.created_at) >= cutoff]
        notes.sort(key=lambda note: _as_utc(note.created_at), reverse=True)
        if limit is not None:
            notes = notes[:limit]
        return notes


def _parse_timestamp(value) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing Z for UTC."""
    text = str(value).strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def load_notes_file(path: str) -> InMemoryNoteStore:
    """
    Load notes from a JSON file shaped as {client_id: [{content, created_at, id?}]}.

    Args:
        path: Path to the JSON file

    Returns:
        InMemoryNoteStore with every valid note

    Raises:
        NoteLoadError: If the file is missing, unreadable or malformed
    """
    file_path = Path(path)
    if not file_path.exists():
        raise NoteLoadError(f"Notes file not found: {path}")

    try:
        raw = json.loads(file_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise NoteLoadError(f"Failed to read notes file: {e}") from e

    if not isinstance(raw, dict):
        raise NoteLoadError("Notes file must contain an object keyed by client id")

    store = InMemoryNoteStore()
    skipped = 0
    for client_id, entries in raw.items():
        if not isinstance(entries, list):
            raise NoteLoadError(f"Notes for client {client_id} must be a list")
        for entry in entries:
            try:
                content = str(entry["content"]).strip()
                created_at = _parse_timestamp(entry["created_at"])
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed note for client {client_id}: {e}")
                skipped += 1
                continue
            if not content:
                skipped += 1
                continue
            note_id = entry.get("id")
            store.add(str(client_id), Note(content, created_at, str(note_id) if note_id is not None else None))

    if skipped:
        logger.info(f"Skipped {skipped} empty or malformed notes")
    return store


class NoteRetriever:
    """
    Reads notes for the orchestrator and never lets a store failure abort a request.
    """

    def __init__(self, store: Optional[NoteStore] = None, default_limit: int = 10):
        self.store = store
        self.default_limit = default_limit

    def fetch(
        self,
        client_id: str,
        note_ids: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
        since: Optional[datetime] = None,
    ) -> List[Note]:
        """
        Fetch notes, most recent first.

        Without explicit ids the result is capped at `limit` (or the default
        limit). With explicit ids every requested note is returned.

        Raises:
            NoteRetrievalError: If the underlying store fails
        """
        if self.store is None or not client_id:
            return []

        if note_ids:
            limit = None
        elif limit is None:
            limit = self.default_limit

        try:
            notes = self.store.fetch_notes(client_id, note_ids=note_ids, limit=limit, since=since)
        except Exception as e:
            raise NoteRetrievalError(f"Failed to fetch notes for client {client_id}: {e}") from e
        return [note for note in notes if note.content and note.content.strip()]

    def fetch_or_empty(
        self,
        client_id: str,
        note_ids: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
        days: Optional[int] = None,
    ) -> List[Note]:
        """Like fetch(), but a failing store yields an empty list."""
        since = None
        if days is not None:
            since = datetime.now(timezone.utc) - timedelta(days=days)
        try:
            return self.fetch(client_id, note_ids=note_ids, limit=limit, since=since)
        except NoteRetrievalError as e:
            logger.warning(f"{e}; continuing without notes")
            return []
