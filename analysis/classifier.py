"""
Keyword-based emotional context classification.
"""
from dataclasses import dataclass
from typing import Optional, Tuple
import logging

from .profile import ClassifierProfile, DEFAULT_CLASSIFIER_PROFILE

logger = logging.getLogger(__name__)


INTENSITY_LEVELS = ("low", "medium", "high")


@dataclass(frozen=True)
class EmotionalContext:
    """
    Emotions, triggers and intensity detected in one message.

    Labels are unique and kept in profile order.
    """
    emotions: Tuple[str, ...] = ()
    triggers: Tuple[str, ...] = ()
    intensity: str = "low"

    @classmethod
    def neutral(cls) -> "EmotionalContext":
        return cls()


class EmotionContextClassifier:
    """
    Maps free text to an EmotionalContext without any model call.

    Every matching emotion and trigger group is reported. Intensity is
    "high" when an amplifier is present, otherwise "medium" when a moderating
    qualifier is present, otherwise "low".

    Example:
        >>> classifier = EmotionContextClassifier()
        >>> classifier.classify("I am very anxious about work").intensity
        'high'
    """

    def __init__(self, profile: ClassifierProfile = DEFAULT_CLASSIFIER_PROFILE):
        self.profile = profile

    def classify(self, text: Optional[str]) -> EmotionalContext:
        if not isinstance(text, str) or not text.strip():
            return EmotionalContext.neutral()

        lowered = text.lower()
        emotions = tuple(group.label for group in self.profile.emotions if group.matches(lowered))
        triggers = tuple(group.label for group in self.profile.triggers if group.matches(lowered))

        intensity = "low"
        if any(word in lowered for word in self.profile.moderators):
            intensity = "medium"
        if any(word in lowered for word in self.profile.amplifiers):
            intensity = "high"

        context = EmotionalContext(emotions=emotions, triggers=triggers, intensity=intensity)
        logger.debug(f"Classified context: {context}")
        return context
