"""Normalization pass from decoded vision payloads to ordered OCR results."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from models.provider_payloads import OcrPayload
from services.providers import OcrMessage, OcrResult

SIDES = ("left", "right", "unknown")


def normalize_ocr(payload: OcrPayload, model: Optional[str] = None) -> OcrResult:
    """Return an `OcrResult` with ordered, speaker-tagged messages.

    - messages with empty text are dropped
    - unrecognised sides become `unknown`
    - a missing order falls back to the message's list index
    - when no message survives but transcript lines exist, every line becomes
      an `unknown`-side message ordered by line index
    """
    messages: List[OcrMessage] = []
    for index, item in enumerate(payload.messages):
        if not item.text:
            continue
        side = item.side if item.side in SIDES else "unknown"
        order = item.order if item.order is not None else index
        messages.append(OcrMessage(text=item.text, side=side, order=order))
    messages.sort(key=lambda message: message.order)

    if not messages and payload.transcript_lines:
        messages = [
            OcrMessage(text=line, side="unknown", order=index)
            for index, line in enumerate(payload.transcript_lines)
        ]

    return OcrResult(
        messages=messages,
        transcript_lines=list(payload.transcript_lines),
        entities=list(payload.entities),
        emotion_cues=list(payload.emotion_cues),
        risk_points=list(payload.risk_points),
        model=model,
    )


def _unique(items: Iterable[str]) -> List[str]:
    seen = set()
    kept = []
    for item in items:
        if item not in seen:
            seen.add(item)
            kept.append(item)
    return kept


def merge_ocr_results(parts: Sequence[OcrResult]) -> OcrResult:
    """Join the results of consecutive requests for one long screenshot.

    Message order continues across parts: each part's orders are shifted past
    the highest order seen so far. Entity, cue, and risk lists keep their
    first occurrence only.
    """
    if len(parts) == 1:
        return parts[0]

    messages: List[OcrMessage] = []
    transcript: List[str] = []
    offset = 0
    for part in parts:
        for message in part.messages:
            messages.append(OcrMessage(text=message.text, side=message.side, order=message.order + offset))
        if messages:
            offset = max(message.order for message in messages) + 1
        transcript.extend(part.transcript_lines)

    return OcrResult(
        messages=messages,
        transcript_lines=transcript,
        entities=_unique(item for part in parts for item in part.entities),
        emotion_cues=_unique(item for part in parts for item in part.emotion_cues),
        risk_points=_unique(item for part in parts for item in part.risk_points),
        model=next((part.model for part in parts if part.model), None),
    )
