"""Capability interfaces the core consumes.

The OpenAI-backed implementations live in `services.openai`; tests swap in
fakes that satisfy the same protocols.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from models.answer_models import SpeakerSplit
from models.fact_models import Evidence, Fact


@dataclass
class OcrMessage:
    text: str
    side: str
    order: int


@dataclass
class OcrResult:
    """Normalized vision output for one image."""

    messages: List[OcrMessage] = field(default_factory=list)
    transcript_lines: List[str] = field(default_factory=list)
    entities: List[str] = field(default_factory=list)
    emotion_cues: List[str] = field(default_factory=list)
    risk_points: List[str] = field(default_factory=list)
    model: Optional[str] = None

    @property
    def empty(self) -> bool:
        return not (self.messages or self.entities or self.emotion_cues)


@dataclass
class PromptContext:
    """Everything the reasoning provider is told about one chat turn."""

    question: str
    relevant_facts: List[Fact]
    total_facts: int
    speaker_split: SpeakerSplit
    mode: str = "hq_reply"


class VisionProvider(Protocol):
    model: str

    async def extract(self, image_b64: str, mime_type: str) -> OcrResult:
        ...


class ReasoningProvider(Protocol):
    model: str

    async def complete(self, context: PromptContext) -> Dict[str, Any]:
        ...


class FactRepository(Protocol):
    def replace_facts(
        self, session_id: str, facts: Sequence[Fact], image_ids: Optional[Sequence[str]] = None
    ) -> None:
        ...

    def get_facts(self, session_id: str, image_ids: Optional[Sequence[str]] = None) -> List[Fact]:
        ...


class EvidenceRepository(Protocol):
    def put_evidence(self, evidence: Evidence) -> None:
        ...

    def get_evidence(self, evidence_id: str) -> Optional[Evidence]:
        ...
