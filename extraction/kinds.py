"""
Request kinds and the output contract each one expects from the upstream service.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Type

from pydantic import BaseModel

from .schema import ChatPayload, NotesAnalysis


class RequestKind(str, Enum):
    CHAT = "chat"
    NOTES = "notes"
    SUMMARY = "summary"


@dataclass(frozen=True)
class KindSpec:
    """
    Output contract for one request kind.

    `schema` is the pydantic model the upstream JSON must validate against;
    None means the kind produces plain text. `output_format` is the literal
    description pasted into the prompt.
    """
    kind: RequestKind
    schema: Optional[Type[BaseModel]]
    output_format: str

    @property
    def structured(self) -> bool:
        return self.schema is not None


CHAT_OUTPUT_FORMAT = """{
  "content": "Your therapeutic response as a single string, use \\" for any quotes",
  "metadata": {
    "emotionsDetected": ["emotion1", "emotion2"],
    "triggersDetected": ["trigger1", "trigger2"],
    "strategiesSuggested": ["strategy1", "strategy2"],
    "urgency": "low",
    "therapeuticReferences": ["reference1", "reference2"]
  }
}"""

NOTES_OUTPUT_FORMAT = """{
  "summary": "Complete summary in 2-3 sentences",
  "mainThemes": ["theme1", "theme2", "theme3"],
  "progressMarkers": ["progress1", "progress2"],
  "recommendations": ["recommendation1", "recommendation2"],
  "wellnessScore": 75,
  "attentionAreas": ["area1", "area2"],
  "strategies": ["strategy1", "strategy2"]
}"""

SUMMARY_OUTPUT_FORMAT = """Plain text, 3-4 paragraphs, covering:
1. General overview of progress
2. Significant changes in symptoms or mood
3. Effectiveness of therapeutic strategies
4. Recommendations for next steps"""


KIND_SPECS: Mapping[RequestKind, KindSpec] = {
    RequestKind.CHAT: KindSpec(RequestKind.CHAT, ChatPayload, CHAT_OUTPUT_FORMAT),
    RequestKind.NOTES: KindSpec(RequestKind.NOTES, NotesAnalysis, NOTES_OUTPUT_FORMAT),
    RequestKind.SUMMARY: KindSpec(RequestKind.SUMMARY, None, SUMMARY_OUTPUT_FORMAT),
}


def spec_for(kind: RequestKind) -> KindSpec:
    return KIND_SPECS[RequestKind(kind)]
