"""Pydantic decode models for raw provider JSON.

Providers return loosely-typed JSON. Decoding turns it into typed payloads
with every field coerced to its expected type (or a safe default); any
semantic defaulting that depends on session state happens later, in the
named normalization passes of the services that consume these payloads.
"""

from __future__ import annotations

import math
from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from models.errors import ProviderInvalidOutput

PayloadT = TypeVar("PayloadT", bound=BaseModel)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _as_text_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    items = (_as_text(item).strip() for item in value if item is not None)
    return [item for item in items if item]


def _as_dict_list(value: Any) -> List[dict]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _as_finite_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if math.isfinite(value) else None


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore")


class OcrMessagePayload(_Lenient):
    text: str = ""
    side: str = "unknown"
    order: Optional[int] = None

    @field_validator("text", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _as_text(value).strip()

    @field_validator("side", mode="before")
    @classmethod
    def _side(cls, value: Any) -> str:
        return _as_text(value).strip().lower() or "unknown"

    @field_validator("order", mode="before")
    @classmethod
    def _order(cls, value: Any) -> Optional[int]:
        number = _as_finite_float(value)
        if number is None and isinstance(value, str):
            try:
                number = float(value.strip())
            except ValueError:
                return None
        return int(number) if number is not None and math.isfinite(number) else None


class OcrPayload(_Lenient):
    """Vision extraction payload: `{messages, transcript_lines, entities, emotion_cues, risk_points}`."""

    messages: List[OcrMessagePayload] = []
    transcript_lines: List[str] = []
    entities: List[str] = []
    emotion_cues: List[str] = []
    risk_points: List[str] = []

    @field_validator("messages", mode="before")
    @classmethod
    def _messages(cls, value: Any) -> List[dict]:
        return _as_dict_list(value)

    @field_validator("transcript_lines", "entities", "emotion_cues", "risk_points", mode="before")
    @classmethod
    def _text_lists(cls, value: Any) -> List[str]:
        return _as_text_list(value)


class AnalysisPayload(_Lenient):
    emotion: str = ""
    core_need: str = ""
    risk_point: str = ""

    @field_validator("emotion", "core_need", "risk_point", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _as_text(value).strip()


class ReplyOptionPayload(_Lenient):
    style: str = ""
    text: str = ""

    @field_validator("style", "text", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _as_text(value).strip()


class SpeakerSplitPayload(_Lenient):
    other_lines: List[str] = []
    self_lines: List[str] = []
    mapping_rule: str = ""
    confidence: Optional[float] = None
    low_confidence_reason: str = ""

    @field_validator("other_lines", "self_lines", mode="before")
    @classmethod
    def _lines(cls, value: Any) -> List[str]:
        return _as_text_list(value)

    @field_validator("mapping_rule", "low_confidence_reason", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _as_text(value).strip()

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, value: Any) -> Optional[float]:
        return _as_finite_float(value)


class IntentPayload(_Lenient):
    other_intent: str = ""
    self_intent: str = ""

    @field_validator("other_intent", "self_intent", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _as_text(value).strip()


class AnswerPayload(_Lenient):
    """Reasoning payload in the structured answer shape plus the echo fields."""

    analysis: AnalysisPayload = Field(default_factory=AnalysisPayload)
    reply_options: List[ReplyOptionPayload] = []
    best_reply: str = ""
    why: str = ""
    followups: List[str] = []
    confidence: Optional[float] = None
    is_speculative: bool = False
    analysis_steps: List[str] = []
    speaker_split: Optional[SpeakerSplitPayload] = None
    intent: Optional[IntentPayload] = None

    @field_validator("analysis", mode="before")
    @classmethod
    def _analysis(cls, value: Any) -> dict:
        return value if isinstance(value, dict) else {}

    @field_validator("reply_options", mode="before")
    @classmethod
    def _reply_options(cls, value: Any) -> List[dict]:
        return _as_dict_list(value)

    @field_validator("best_reply", "why", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _as_text(value).strip()

    @field_validator("followups", "analysis_steps", mode="before")
    @classmethod
    def _text_lists(cls, value: Any) -> List[str]:
        return _as_text_list(value)

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, value: Any) -> Optional[float]:
        return _as_finite_float(value)

    @field_validator("is_speculative", mode="before")
    @classmethod
    def _speculative(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes")
        if isinstance(value, (bool, int, float)):
            return bool(value)
        return False

    @field_validator("speaker_split", "intent", mode="before")
    @classmethod
    def _optional_object(cls, value: Any) -> Optional[dict]:
        return value if isinstance(value, dict) else None


def decode_payload(raw: Any, model: Type[PayloadT]) -> PayloadT:
    """Decode a parsed JSON object into `model` or raise ProviderInvalidOutput."""
    if not isinstance(raw, dict):
        raise ProviderInvalidOutput("provider output is not a JSON object")
    try:
        return model.model_validate(raw)
    except PydanticValidationError as exc:
        raise ProviderInvalidOutput(f"provider output failed to decode: {exc}") from exc
