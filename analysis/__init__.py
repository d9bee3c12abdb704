"""Analysis module."""
from .profile import (
    DEFAULT_CLASSIFIER_PROFILE,
    DEFAULT_FALLBACK_PROFILE,
    ClassifierProfile,
    FallbackProfile,
)
from .classifier import EmotionalContext, EmotionContextClassifier
from .fallback import FallbackAnalyzer

__all__ = [
    'DEFAULT_CLASSIFIER_PROFILE', 'DEFAULT_FALLBACK_PROFILE', 'ClassifierProfile', 'FallbackProfile',
    'EmotionalContext', 'EmotionContextClassifier', 'FallbackAnalyzer',
]
