"""Normalization pass from a decoded provider answer to a StructuredAnswer."""

from __future__ import annotations

from typing import List

from models.answer_models import (
    MAPPING_RULE,
    ConversationAnalysis,
    ConversationIntent,
    ReplyOption,
    SpeakerSplit,
    StructuredAnswer,
)
from models.provider_payloads import AnswerPayload, SpeakerSplitPayload
from services.fallback_answer import REPLY_STYLES, fallback_intent

MAX_REPLY_OPTIONS = 3
DEFAULT_CONFIDENCE = 0.6


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _reply_options(payload: AnswerPayload) -> List[ReplyOption]:
    options = []
    for index, option in enumerate(payload.reply_options[:MAX_REPLY_OPTIONS]):
        if not option.text:
            continue
        style = option.style or (REPLY_STYLES[index] if index < len(REPLY_STYLES) else f"版本{index + 1}")
        options.append(ReplyOption(style=style, text=option.text))
    return options


def _speaker_split(echo: SpeakerSplitPayload | None, local: SpeakerSplit) -> SpeakerSplit:
    if echo is None or not (echo.other_lines or echo.self_lines):
        return local
    confidence = clamp(echo.confidence) if echo.confidence is not None else local.confidence
    return SpeakerSplit(
        other_lines=list(echo.other_lines),
        self_lines=list(echo.self_lines),
        mapping_rule=echo.mapping_rule or MAPPING_RULE,
        confidence=confidence,
        low_confidence_reason=echo.low_confidence_reason or None,
    )


def normalize_answer(payload: AnswerPayload, local_split: SpeakerSplit) -> StructuredAnswer:
    """Fill defaults and clamp ranges on a decoded provider answer.

    Options beyond the third, and options without text, are dropped. An
    empty echoed speaker split is replaced by `local_split`; empty intent
    fields are filled from the template intents of the split in use.
    """
    options = _reply_options(payload)
    split = _speaker_split(payload.speaker_split, local_split)

    template = fallback_intent(split)
    echoed = payload.intent
    intent = ConversationIntent(
        other_intent=(echoed.other_intent if echoed else "") or template.other_intent,
        self_intent=(echoed.self_intent if echoed else "") or template.self_intent,
    )

    confidence = payload.confidence if payload.confidence is not None else DEFAULT_CONFIDENCE
    return StructuredAnswer(
        analysis=ConversationAnalysis(
            emotion=payload.analysis.emotion,
            core_need=payload.analysis.core_need,
            risk_point=payload.analysis.risk_point,
        ),
        reply_options=options,
        best_reply=payload.best_reply or (options[0].text if options else ""),
        why=payload.why,
        followups=list(payload.followups),
        confidence=clamp(confidence),
        is_speculative=payload.is_speculative,
        analysis_steps=list(payload.analysis_steps),
        speaker_split=split,
        intent=intent,
    )
