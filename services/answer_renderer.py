"""Render a StructuredAnswer as the labelled prose stored in chat history."""

from __future__ import annotations

from typing import List

from models.answer_models import StructuredAnswer


def _lines_section(label: str, lines: List[str]) -> str:
    if not lines:
        return ""
    return "\n".join([label, *(f"- {line}" for line in lines)])


def _labelled(label: str, text: str) -> str:
    return f"{label}{text}" if text else ""


def render_answer(answer: StructuredAnswer) -> str:
    """Return the sections in reading order, skipping any without content."""
    split = answer.speaker_split
    replies = ""
    if answer.reply_options:
        replies = "\n".join(
            ["【高情商回复候选】"]
            + [f"{index}. {option.style}版：{option.text}" for index, option in enumerate(answer.reply_options, start=1)]
        )

    sections = [
        _lines_section("【对方发言】", split.other_lines),
        _lines_section("【我方发言】", split.self_lines),
        _labelled("【对方意图】", answer.intent.other_intent),
        _labelled("【我方意图】", answer.intent.self_intent),
        _labelled("【情绪判断】", answer.analysis.emotion),
        _labelled("【核心诉求】", answer.analysis.core_need),
        _labelled("【风险点】", answer.analysis.risk_point),
        replies,
        _labelled("【推荐发送】", answer.best_reply),
        _labelled("【推荐理由】", answer.why),
    ]
    return "\n\n".join(section for section in sections if section)
