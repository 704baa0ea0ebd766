"""Turn normalized vision output into typed facts."""

from __future__ import annotations

from typing import List, Optional
from uuid import uuid4

from models.fact_models import (
    NO_READABLE_CONTENT,
    ROLE_OTHER,
    ROLE_SELF,
    ROLE_UNKNOWN,
    BoundingBox,
    Fact,
)
from services.providers import OcrResult

MAX_MESSAGE_FACTS = 30
MAX_ENTITY_FACTS = 8
MAX_EMOTION_FACTS = 6

MESSAGE_CONFIDENCE = 0.9
ENTITY_CONFIDENCE = 0.78
EMOTION_CONFIDENCE = 0.74
PLACEHOLDER_CONFIDENCE = 0.3

EMOTION_PREFIX = "情绪线索: "

SIDE_TO_ROLE = {"left": ROLE_OTHER, "right": ROLE_SELF, "unknown": ROLE_UNKNOWN}


def _message_bbox(index: int, side: str) -> BoundingBox:
    y = min(0.9, 0.05 + index * 0.03)
    if side == "left":
        return BoundingBox(x=0.05, y=y, w=0.6, h=0.028)
    if side == "right":
        return BoundingBox(x=0.35, y=y, w=0.6, h=0.028)
    return BoundingBox(x=0.05, y=y, w=0.9, h=0.028)


def build_facts(session_id: str, image_id: str, ocr: Optional[OcrResult]) -> List[Fact]:
    """Return the facts for one image, or the single placeholder when nothing was read."""
    if ocr is None or ocr.empty:
        return placeholder_facts(session_id, image_id)

    raw = {"model": ocr.model} if ocr.model else {}
    facts: List[Fact] = []
    for index, message in enumerate(ocr.messages[:MAX_MESSAGE_FACTS]):
        facts.append(
            Fact(
                id=uuid4().hex,
                session_id=session_id,
                image_id=image_id,
                type="paragraph",
                text=message.text,
                bbox=_message_bbox(index, message.side),
                confidence=MESSAGE_CONFIDENCE,
                speaker_role=SIDE_TO_ROLE.get(message.side, ROLE_UNKNOWN),
                order=message.order,
                raw=dict(raw),
            )
        )

    next_order = max((fact.order for fact in facts), default=-1) + 1
    for entity in ocr.entities[:MAX_ENTITY_FACTS]:
        facts.append(
            Fact(
                id=uuid4().hex,
                session_id=session_id,
                image_id=image_id,
                type="entity",
                text=entity,
                bbox=BoundingBox(x=0.06, y=0.88, w=0.5, h=0.04),
                confidence=ENTITY_CONFIDENCE,
                order=next_order,
                raw=dict(raw),
            )
        )
        next_order += 1

    for cue in ocr.emotion_cues[:MAX_EMOTION_FACTS]:
        facts.append(
            Fact(
                id=uuid4().hex,
                session_id=session_id,
                image_id=image_id,
                type="entity",
                text=f"{EMOTION_PREFIX}{cue}",
                bbox=BoundingBox(x=0.06, y=0.92, w=0.5, h=0.04),
                confidence=EMOTION_CONFIDENCE,
                order=next_order,
                raw=dict(raw),
            )
        )
        next_order += 1

    return facts


def placeholder_facts(session_id: str, image_id: str) -> List[Fact]:
    """Return the low-confidence "no readable content" fact for an image."""
    return [
        Fact(
            id=uuid4().hex,
            session_id=session_id,
            image_id=image_id,
            type="paragraph",
            text=NO_READABLE_CONTENT,
            bbox=BoundingBox(x=0.1, y=0.1, w=0.8, h=0.1),
            confidence=PLACEHOLDER_CONFIDENCE,
            raw={"source": "placeholder"},
        )
    ]
