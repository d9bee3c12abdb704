"""
Immutable keyword profiles for the classifier and the fallback analyzer.

Profiles are plain frozen data. A classifier or analyzer receives one at
construction time, so several profiles (e.g. per locale) can be used side by
side in the same process.
"""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class KeywordGroup:
    """A label that matches when any of its keywords occurs in the text."""
    label: str
    keywords: Tuple[str, ...]

    def matches(self, lowered: str) -> bool:
        return any(keyword in lowered for keyword in self.keywords)


@dataclass(frozen=True)
class KeywordRule:
    """A label that matches only when all of its keywords occur in the text."""
    label: str
    required: Tuple[str, ...]

    def matches(self, lowered: str) -> bool:
        return all(keyword in lowered for keyword in self.required)


@dataclass(frozen=True)
class ChatTemplate:
    """Templated fallback reply for one keyword family."""
    family: str
    keywords: Tuple[str, ...]
    content: str
    urgency: str = "low"
    strategies: Tuple[str, ...] = ("breathing", "mindfulness")
    references: Tuple[str, ...] = ("CBT techniques", "stress management")

    def matches(self, lowered: str) -> bool:
        return any(keyword in lowered for keyword in self.keywords)


@dataclass(frozen=True)
class ClassifierProfile:
    emotions: Tuple[KeywordGroup, ...]
    triggers: Tuple[KeywordGroup, ...]
    amplifiers: Tuple[str, ...]
    moderators: Tuple[str, ...]


@dataclass(frozen=True)
class BaselineAnalysis:
    summary: str
    main_themes: Tuple[str, ...]
    progress_markers: Tuple[str, ...]
    recommendations: Tuple[str, ...]
    wellness_score: int
    attention_areas: Tuple[str, ...]
    strategies: Tuple[str, ...]


@dataclass(frozen=True)
class FallbackProfile:
    # Chat path: checked in order, first match wins
    chat_templates: Tuple[ChatTemplate, ...]
    default_template: ChatTemplate

    # Notes path: each scan is independent
    themes: Tuple[KeywordGroup, ...]
    progress_markers: Tuple[KeywordGroup, ...]
    attention_rules: Tuple[KeywordRule, ...]
    strategies: Tuple[KeywordGroup, ...]
    score_weights: Tuple[Tuple[str, int], ...]
    recommendations: Tuple[str, ...]
    baseline: BaselineAnalysis
    base_score: int = 50
    theme_limit: int = 5
    default_progress: str = "Progress under evaluation"
    default_strategy: str = "Personalized strategies in development"


DEFAULT_CLASSIFIER_PROFILE = ClassifierProfile(
    emotions=(
        KeywordGroup("anxiety", ("anxiety", "anxious", "ansia", "ansioso", "ansiosa")),
        KeywordGroup("sadness", ("sad", "sadness", "triste", "tristezza")),
        KeywordGroup("anger", ("angry", "anger", "arrabbiato", "arrabbiata", "rabbia")),
        KeywordGroup("stress", ("stress", "stressed", "stressato", "stressata", "stressante")),
        KeywordGroup("panic", ("panic", "panico")),
        KeywordGroup("depression", ("depressed", "depression", "depresso", "depressa", "depressione")),
    ),
    triggers=(
        KeywordGroup("work", ("work", "office", "job", "lavoro", "ufficio")),
        KeywordGroup("family", ("family", "parents", "famiglia", "genitori")),
        KeywordGroup("relationship", ("relationship", "partner", "relazione", "fidanzato", "fidanzata")),
        KeywordGroup("money", ("money", "financial", "soldi", "denaro")),
        KeywordGroup("health", ("health", "illness", "salute", "malattia")),
    ),
    amplifiers=("very", "extremely", "molto", "estremamente"),
    moderators=("somewhat", "fairly", "abbastanza", "piuttosto"),
)


DEFAULT_FALLBACK_PROFILE = FallbackProfile(
    chat_templates=(
        ChatTemplate(
            family="anxiety",
            keywords=("anxiety", "anxious", "panic", "ansia", "ansioso", "ansiosa", "panico"),
            content=(
                "I hear you are going through a moment of anxiety. Remember that these "
                "feelings are temporary. Try the 4-7-8 breathing technique we practiced together."
            ),
            urgency="medium",
            strategies=("4-7-8 breathing", "grounding"),
            references=("CBT techniques", "anxiety management"),
        ),
        ChatTemplate(
            family="sadness",
            keywords=("sad", "depressed", "triste", "depresso", "depressa"),
            content=(
                "I understand you are feeling down. It is important to acknowledge these "
                "feelings without judgment. Have you tried any of the grounding techniques we discussed?"
            ),
            urgency="medium",
            strategies=("grounding", "self-compassion"),
            references=("CBT techniques", "behavioral activation"),
        ),
        ChatTemplate(
            family="stress",
            keywords=("stress", "stressed", "stressato", "stressata"),
            content=(
                "Stress can be really tough. Remember to take breaks and use the stress "
                "management strategies we are developing together."
            ),
            urgency="low",
            strategies=("breathing", "taking breaks"),
            references=("stress management",),
        ),
    ),
    default_template=ChatTemplate(
        family="supportive",
        keywords=(),
        content=(
            "Thank you for sharing your thoughts with me. I am here to support you. "
            "How can I best help you right now?"
        ),
    ),
    themes=(
        KeywordGroup("anxiety", ("anxiety",)),
        KeywordGroup("depression", ("depression",)),
        KeywordGroup("stress management", ("stress",)),
        KeywordGroup("interpersonal relationships", ("relationship",)),
        KeywordGroup("work stress", ("work",)),
        KeywordGroup("family dynamics", ("family",)),
        KeywordGroup("self-esteem", ("self-esteem",)),
        KeywordGroup("sleep disturbances", ("sleep",)),
    ),
    progress_markers=(
        KeywordGroup("General improvements observed", ("improvement",)),
        KeywordGroup("Progress in therapeutic strategies", ("progress",)),
        KeywordGroup("Development of effective coping strategies", ("coping",)),
        KeywordGroup("Increased emotional awareness", ("awareness",)),
    ),
    attention_rules=(
        KeywordRule("High levels of anxiety", ("anxiety", "high")),
        KeywordRule("Sleep disturbances", ("sleep", "problem")),
        KeywordRule("Tendency to social isolation", ("isolation",)),
        KeywordRule("Excessive work stress", ("work", "stress")),
    ),
    strategies=(
        KeywordGroup("Breathing techniques", ("breathing",)),
        KeywordGroup("Mindfulness practices", ("mindfulness",)),
        KeywordGroup("Grounding exercises", ("grounding",)),
        KeywordGroup("Cognitive-behavioral techniques", ("cbt",)),
        KeywordGroup("Relaxation techniques", ("relaxation",)),
    ),
    score_weights=(
        ("improvement", 15),
        ("progress", 10),
        ("positive", 10),
        ("good", 5),
        ("worsening", -15),
        ("crisis", -20),
        ("difficulty", -10),
    ),
    recommendations=(
        "Continue with practiced coping techniques",
        "Monitor identified triggers",
        "Maintain self-observation routine",
    ),
    baseline=BaselineAnalysis(
        summary=(
            "No therapy notes available for analysis. Continue regular monitoring "
            "and therapeutic activities."
        ),
        main_themes=("Initial assessment", "Baseline establishment"),
        progress_markers=("Started mental health monitoring", "Engaged with digital therapy tools"),
        recommendations=(
            "Continue regular monitoring",
            "Schedule therapy sessions",
            "Complete initial assessments",
        ),
        wellness_score=50,
        attention_areas=("Assessment completion", "Regular engagement"),
        strategies=("Daily check-ins", "Mood tracking", "Coping skills practice"),
    ),
)
