"""Fact, evidence, and citation records."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict

ROLE_OTHER = "other"
ROLE_SELF = "self"
ROLE_UNKNOWN = "unknown"

# Text of the fact emitted when an image yields nothing readable.
NO_READABLE_CONTENT = "未能提取到可读聊天文本"


@dataclass(frozen=True)
class BoundingBox:
    """Relative position of a fact inside its screenshot (all values in [0, 1])."""

    x: float
    y: float
    w: float
    h: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class Fact:
    id: str
    session_id: str
    image_id: str
    type: str
    text: str
    bbox: BoundingBox
    confidence: float
    speaker_role: str = ROLE_UNKNOWN
    order: int = 0
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_placeholder(self) -> bool:
        return NO_READABLE_CONTENT in self.text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "image_id": self.image_id,
            "type": self.type,
            "text": self.text,
            "bbox": self.bbox.to_dict(),
            "confidence": self.confidence,
            "speaker_role": self.speaker_role,
            "order": self.order,
        }


@dataclass(frozen=True)
class Evidence:
    """Persisted, citable binding of a fact to its excerpt and bounding box."""

    id: str
    session_id: str
    image_id: str
    fact_id: str
    bbox: BoundingBox
    excerpt: str
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "image_id": self.image_id,
            "bbox": self.bbox.to_dict(),
            "excerpt": self.excerpt,
            "fact_id": self.fact_id,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class Citation:
    id: str
    evidence_id: str
    fact_id: str
    reasoning_role: str
    score: float

    def to_dict(self) -> Dict[str, Any]:
        # The mobile client decodes citations with camelCase keys.
        return {
            "id": self.id,
            "evidenceId": self.evidence_id,
            "factId": self.fact_id,
            "reasoningRole": self.reasoning_role,
            "score": self.score,
        }
