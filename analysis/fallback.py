"""
Deterministic, network-free replacements for every upstream request kind.
"""
from typing import List, Optional, Sequence
import logging

from .classifier import EmotionalContext
from .profile import DEFAULT_FALLBACK_PROFILE, FallbackProfile
from extraction.schema import ChatReply, NotesAnalysis
from retrieval.notes import Note

logger = logging.getLogger(__name__)


class FallbackAnalyzer:
    """
    Keyword-driven analyzer producing the same shapes as the upstream path.

    All entry points are total: they never raise and never call out.
    """

    def __init__(self, profile: FallbackProfile = DEFAULT_FALLBACK_PROFILE):
        self.profile = profile

    def fallback_chat_reply(self, text: Optional[str], context: Optional[EmotionalContext] = None) -> ChatReply:
        """
        Pick the first matching template family; unmatched text gets the supportive template.
        """
        context = context or EmotionalContext.neutral()
        lowered = text.lower() if isinstance(text, str) else ""

        template = self.profile.default_template
        for candidate in self.profile.chat_templates:
            if candidate.matches(lowered):
                template = candidate
                break

        logger.debug(f"Fallback chat template: {template.family}")
        return ChatReply(
            content=template.content,
            emotions_detected=list(context.emotions),
            triggers_detected=list(context.triggers),
            strategies_suggested=list(template.strategies),
            urgency=template.urgency,
            therapeutic_references=list(template.references),
        )

    def baseline_analysis(self) -> NotesAnalysis:
        baseline = self.profile.baseline
        return NotesAnalysis(
            summary=baseline.summary,
            main_themes=list(baseline.main_themes),
            progress_markers=list(baseline.progress_markers),
            recommendations=list(baseline.recommendations),
            wellness_score=baseline.wellness_score,
            attention_areas=list(baseline.attention_areas),
            strategies=list(baseline.strategies),
        )

    def fallback_notes_analysis(self, notes: Optional[Sequence[Note]]) -> NotesAnalysis:
        """
        Analyze notes with independent keyword scans.

        Zero usable notes yield the baseline analysis.
        """
        bodies = [note.content for note in (notes or []) if note.content and note.content.strip()]
        if not bodies:
            return self.baseline_analysis()

        text = " ".join(bodies).lower()
        themes = self.extract_themes(text)

        if themes:
            focus = " and ".join(themes[:2])
            summary = f"Analyzed {len(bodies)} therapy sessions. Themes related to {focus} emerge."
        else:
            summary = f"Analyzed {len(bodies)} therapy sessions. No recurring themes were identified."

        return NotesAnalysis(
            summary=summary,
            main_themes=themes,
            progress_markers=self.detect_progress(text),
            recommendations=list(self.profile.recommendations),
            wellness_score=self.wellness_score(text),
            attention_areas=self.attention_areas(text),
            strategies=self.extract_strategies(text),
        )

    def fallback_progress_summary(self, notes: Optional[Sequence[Note]], period_days: int) -> str:
        """Plain-text progress report for the last `period_days` days."""
        notes = list(notes or [])
        analysis = self.fallback_notes_analysis(notes)
        engagement = "good" if notes else "in need of improvement"

        lines = [
            f"**Progress Summary - Last {period_days} days**",
            "",
            f"In the analyzed period, {len(notes)} therapy sessions were recorded.",
            "",
            "**General Observations:**",
            f"The client's commitment to the therapeutic process is {engagement} "
            f"considering the frequency of sessions.",
        ]
        if notes:
            lines.append(f"Main themes: {', '.join(analysis.main_themes) or 'none identified'}.")
            lines.append(f"Estimated wellness score: {analysis.wellness_score}/100.")
        lines += [
            "",
            "**Recommendations:**",
            "- Maintain regularity of therapy sessions",
            "- Continue daily mood monitoring",
            "- Implement coping strategies discussed in sessions",
            "",
            "*Summary generated automatically - for detailed analysis, consult the complete notes.*",
        ]
        return "\n".join(lines)

    def extract_themes(self, text: str) -> List[str]:
        themes = [group.label for group in self.profile.themes if group.matches(text)]
        return themes[:self.profile.theme_limit]

    def detect_progress(self, text: str) -> List[str]:
        markers = [group.label for group in self.profile.progress_markers if group.matches(text)]
        return markers or [self.profile.default_progress]

    def attention_areas(self, text: str) -> List[str]:
        return [rule.label for rule in self.profile.attention_rules if rule.matches(text)]

    def extract_strategies(self, text: str) -> List[str]:
        strategies = [group.label for group in self.profile.strategies if group.matches(text)]
        return strategies or [self.profile.default_strategy]

    def wellness_score(self, text: str) -> int:
        score = self.profile.base_score
        for keyword, weight in self.profile.score_weights:
            if keyword in text:
                score += weight
        return max(0, min(100, score))
