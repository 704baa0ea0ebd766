"""Structured answer returned for every chat turn."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

MAPPING_RULE = "left_other_right_self"


@dataclass
class SpeakerSplit:
    other_lines: List[str] = field(default_factory=list)
    self_lines: List[str] = field(default_factory=list)
    mapping_rule: str = MAPPING_RULE
    confidence: float = 0.0
    low_confidence_reason: Optional[str] = None

    @property
    def empty(self) -> bool:
        return not self.other_lines and not self.self_lines

    def to_dict(self) -> Dict[str, Any]:
        return {
            "other_lines": list(self.other_lines),
            "self_lines": list(self.self_lines),
            "mapping_rule": self.mapping_rule,
            "confidence": self.confidence,
            "low_confidence_reason": self.low_confidence_reason,
        }


@dataclass
class ConversationIntent:
    other_intent: str = ""
    self_intent: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"other_intent": self.other_intent, "self_intent": self.self_intent}


@dataclass
class ConversationAnalysis:
    emotion: str = ""
    core_need: str = ""
    risk_point: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"emotion": self.emotion, "core_need": self.core_need, "risk_point": self.risk_point}


@dataclass
class ReplyOption:
    style: str
    text: str

    def to_dict(self) -> Dict[str, str]:
        return {"style": self.style, "text": self.text}


@dataclass
class StructuredAnswer:
    """Machine-readable output of a chat turn.

    Serializes with the snake_case keys used at the provider and API
    boundary so a provider payload round-trips through normalization.
    """

    analysis: ConversationAnalysis = field(default_factory=ConversationAnalysis)
    reply_options: List[ReplyOption] = field(default_factory=list)
    best_reply: str = ""
    why: str = ""
    followups: List[str] = field(default_factory=list)
    confidence: float = 0.0
    is_speculative: bool = True
    analysis_steps: List[str] = field(default_factory=list)
    speaker_split: SpeakerSplit = field(default_factory=SpeakerSplit)
    intent: ConversationIntent = field(default_factory=ConversationIntent)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "analysis": self.analysis.to_dict(),
            "reply_options": [option.to_dict() for option in self.reply_options],
            "best_reply": self.best_reply,
            "why": self.why,
            "followups": list(self.followups),
            "confidence": self.confidence,
            "is_speculative": self.is_speculative,
            "analysis_steps": list(self.analysis_steps),
            "speaker_split": self.speaker_split.to_dict(),
            "intent": self.intent.to_dict(),
        }
