"""
Response orchestration: upstream first, deterministic fallback always.
"""
from typing import Callable, List, Optional, Sequence, TypeVar
import logging
import time

from analysis.classifier import EmotionContextClassifier, EmotionalContext
from analysis.fallback import FallbackAnalyzer
from config.settings import Settings
from extraction.extractor import StructuredExtractor
from extraction.kinds import RequestKind, spec_for
from extraction.schema import ChatReply, NotesAnalysis
from generation.prompts import PromptComposer
from generation.upstream import UpstreamClient
from retrieval.notes import Note, NoteRetriever, NoteStore
from exceptions import ConfigurationMissing, ExtractionFailure, UpstreamUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResponseOrchestrator:
    """
    Façade returning ChatReply / NotesAnalysis / summary text for every call.

    Per call: classify, retrieve notes, then either run the upstream path
    (compose, call, extract) or, when the service is unconfigured or any
    stage fails, the FallbackAnalyzer. Nothing raised on the upstream path
    reaches the caller.

    Example:
        >>> orchestrator = ResponseOrchestrator(Settings())
        >>> reply = orchestrator.get_chat_reply("I feel anxious about my presentation")
        >>> reply.urgency
        'medium'
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        upstream: Optional[UpstreamClient] = None,
        note_store: Optional[NoteStore] = None,
        classifier: Optional[EmotionContextClassifier] = None,
        composer: Optional[PromptComposer] = None,
        extractor: Optional[StructuredExtractor] = None,
        fallback: Optional[FallbackAnalyzer] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.settings = settings or Settings()
        self.upstream = upstream or UpstreamClient.from_settings(self.settings)
        self.notes = NoteRetriever(note_store, default_limit=self.settings.notes_analysis_limit)
        self.classifier = classifier or EmotionContextClassifier()
        self.composer = composer or PromptComposer()
        self.extractor = extractor or StructuredExtractor()
        self.fallback = fallback or FallbackAnalyzer()
        self._sleep = sleep

    def get_chat_reply(
        self,
        text: str,
        client_id: Optional[str] = None,
        use_notes: bool = False
    ) -> ChatReply:
        """
        Generate a chat reply for one user message.

        Args:
            text: User message
            client_id: Client whose notes may be used as context
            use_notes: Whether to include the client's recent notes

        Returns:
            ChatReply from the upstream service or the fallback analyzer
        """
        context = self._classify(text)
        notes: List[Note] = []
        if client_id and use_notes and self.settings.chat_notes_limit > 0:
            notes = self.notes.fetch_or_empty(client_id, limit=self.settings.chat_notes_limit)
            logger.info(f"Relevant notes found: {len(notes)}")

        def upstream_path() -> ChatReply:
            prompt = self.composer.compose(RequestKind.CHAT, text=text, context=context, notes=notes)
            payload = self._call_structured(RequestKind.CHAT, prompt)
            return ChatReply.from_payload(payload)

        return self._resolve(
            RequestKind.CHAT,
            upstream_path,
            lambda: self.fallback.fallback_chat_reply(text, context),
        )

    def get_notes_analysis(
        self,
        client_id: str,
        note_ids: Optional[Sequence[str]] = None
    ) -> NotesAnalysis:
        """
        Analyze a client's therapy notes.

        Args:
            client_id: Client identifier
            note_ids: Explicit notes to analyze; defaults to the most recent ones

        Returns:
            NotesAnalysis; the baseline analysis when there are no notes
        """
        notes = self.notes.fetch_or_empty(client_id, note_ids=note_ids)
        logger.info(f"Starting notes analysis for client {client_id}: {len(notes)} notes")
        if not notes:
            return self.fallback.baseline_analysis()

        def upstream_path() -> NotesAnalysis:
            prompt = self.composer.compose(RequestKind.NOTES, notes=notes)
            return self._call_structured(RequestKind.NOTES, prompt)

        return self._resolve(
            RequestKind.NOTES,
            upstream_path,
            lambda: self.fallback.fallback_notes_analysis(notes),
        )

    def get_progress_summary(self, client_id: str, days: Optional[int] = None) -> str:
        """
        Generate a plain-text progress summary over the last `days` days.
        """
        days = days or self.settings.summary_days
        notes = self.notes.fetch_or_empty(client_id, days=days)
        logger.info(f"Generating {days}-day progress summary for client {client_id}: {len(notes)} notes")

        def upstream_path() -> str:
            prompt = self.composer.compose(RequestKind.SUMMARY, notes=notes, period_days=days)
            return self._call_with_retry(
                RequestKind.SUMMARY,
                lambda: self.extractor.extract_text(self.upstream.generate(prompt)),
            )

        return self._resolve(
            RequestKind.SUMMARY,
            upstream_path,
            lambda: self.fallback.fallback_progress_summary(notes, days),
        )

    def _classify(self, text: str) -> EmotionalContext:
        try:
            context = self.classifier.classify(text)
        except Exception as e:
            logger.error(f"Classifier failed, using neutral context: {e}")
            return EmotionalContext.neutral()
        logger.info(f"Emotional context: {context}")
        return context

    def _call_structured(self, kind: RequestKind, prompt: str):
        schema = spec_for(kind).schema
        return self._call_with_retry(
            kind,
            lambda: self.extractor.extract(self.upstream.generate(prompt), schema),
        )

    def _call_with_retry(self, kind: RequestKind, attempt_fn: Callable[[], T]) -> T:
        """
        Run one upstream attempt plus `upstream_retries` retries.

        Configuration errors are never retried; the last failure is re-raised.
        """
        attempts = 1 + self.settings.upstream_retries
        for attempt in range(1, attempts + 1):
            try:
                return attempt_fn()
            except (UpstreamUnavailable, ExtractionFailure) as e:
                if attempt >= attempts:
                    raise
                wait_time = self.settings.retry_backoff * attempt
                logger.warning(
                    f"{kind.value} attempt {attempt}/{attempts} failed ({e}). "
                    f"Retrying in {wait_time:.1f}s..."
                )
                self._sleep(wait_time)

    def _resolve(self, kind: RequestKind, upstream_path: Callable[[], T], fallback_path: Callable[[], T]) -> T:
        if not self.upstream.configured:
            logger.warning(f"Upstream not configured; fallback used for {kind.value}")
            return fallback_path()

        try:
            result = upstream_path()
        except ConfigurationMissing as e:
            logger.warning(f"Fallback used for {kind.value}: configuration missing ({e})")
        except UpstreamUnavailable as e:
            logger.error(f"Fallback used for {kind.value}: upstream unavailable ({e})")
        except ExtractionFailure as e:
            logger.error(f"Fallback used for {kind.value}: extraction failed ({e.reason.value})")
        except Exception as e:
            logger.error(f"Fallback used for {kind.value}: unexpected error: {e}", exc_info=True)
        else:
            logger.info(f"Upstream {kind.value} response parsed successfully")
            return result

        return fallback_path()
