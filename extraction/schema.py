"""
Schema definitions for structured payloads.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Literal


Urgency = Literal["low", "medium", "high"]

URGENCY_SYNONYMS = {
    "low": "low",
    "none": "low",
    "minimal": "low",
    "bassa": "low",
    "medium": "medium",
    "moderate": "medium",
    "elevated": "medium",
    "media": "medium",
    "high": "high",
    "urgent": "high",
    "critical": "high",
    "severe": "high",
    "alta": "high",
}


def normalize_urgency(value: Any) -> str:
    """Map any urgency value onto exactly one of low / medium / high."""
    if isinstance(value, str):
        return URGENCY_SYNONYMS.get(value.strip().lower(), "low")
    return "low"


def coerce_str_list(value: Any) -> List[str]:
    """Turn None, a single string or a list of scalars into a list of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.strip()
        return [value] if value else []
    if isinstance(value, (list, tuple, set, frozenset)):
        items = []
        for item in value:
            if item is None or isinstance(item, (dict, list)):
                continue
            text = str(item).strip()
            if text:
                items.append(text)
        return items
    raise ValueError(f"Expected a list of strings, got {type(value).__name__}")


class _Payload(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ChatMetadata(_Payload):
    """Metadata block of an upstream chat payload."""
    emotions_detected: List[str] = Field(default_factory=list)
    triggers_detected: List[str] = Field(default_factory=list)
    strategies_suggested: List[str] = Field(default_factory=list)
    urgency: Urgency = "low"
    therapeutic_references: List[str] = Field(default_factory=list)

    @field_validator(
        "emotions_detected", "triggers_detected", "strategies_suggested", "therapeutic_references",
        mode="before",
    )
    @classmethod
    def _lists(cls, v):
        return coerce_str_list(v)

    @field_validator("urgency", mode="before")
    @classmethod
    def _urgency(cls, v):
        return normalize_urgency(v)


class ChatPayload(_Payload):
    """Chat turn as the upstream service returns it."""
    content: str
    metadata: ChatMetadata

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("content must not be empty")
        return v


class ChatReply(ChatMetadata):
    """Caller-facing chat turn; the same shape whichever path produced it."""
    content: str

    @classmethod
    def from_payload(cls, payload: ChatPayload) -> "ChatReply":
        return cls(content=payload.content, **payload.metadata.model_dump())


class NotesAnalysis(_Payload):
    """Caller-facing analysis of a client's therapy notes."""
    summary: str
    main_themes: List[str]
    progress_markers: List[str]
    recommendations: List[str]
    wellness_score: int
    attention_areas: List[str]
    strategies: List[str]

    @field_validator(
        "main_themes", "progress_markers", "recommendations", "attention_areas", "strategies",
        mode="before",
    )
    @classmethod
    def _lists(cls, v):
        return coerce_str_list(v)

    @field_validator("wellness_score", mode="before")
    @classmethod
    def _clamp_score(cls, v):
        if isinstance(v, bool):
            raise ValueError("wellness_score must be a number")
        try:
            score = int(round(float(v)))
        except (TypeError, ValueError, OverflowError) as e:
            raise ValueError(f"wellness_score must be a number, got {v!r}") from e
        return max(0, min(100, score))
