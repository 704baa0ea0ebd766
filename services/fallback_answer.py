"""Deterministic rule-based answers used when no provider answer is usable."""

from __future__ import annotations

from typing import List, Sequence

from models.answer_models import (
    ConversationAnalysis,
    ConversationIntent,
    ReplyOption,
    SpeakerSplit,
    StructuredAnswer,
)
from models.fact_models import Fact

REPLY_STYLES = ("温和", "坚定", "幽默")

FALLBACK_REPLIES = (
    ReplyOption(
        style="温和",
        text="我理解你的想法，也谢谢你直接说明。我们先把重点对齐一下，我这边的考虑是……你看这样处理可行吗？",
    ),
    ReplyOption(
        style="坚定",
        text="我尊重你的意见，但这个边界我需要明确：我可以配合A和B，不会接受C。我们按这个范围推进。",
    ),
    ReplyOption(
        style="幽默",
        text="我们先别开“火力全开”模式，先开“问题解决模式”😄 我提议先定两个共识，再看分歧怎么收敛。",
    ),
)

FALLBACK_FOLLOWUPS = (
    "要我按你们关系（同事/客户/伴侣）重写一版吗？",
    "要我改成更短的一句话版吗？",
)

CONFIDENCE_WITH_EVIDENCE = 0.64
CONFIDENCE_WITHOUT_EVIDENCE = 0.35


def meaningful_facts(facts: Sequence[Fact]) -> List[Fact]:
    """Facts carrying real extracted content (the placeholder excluded)."""
    return [fact for fact in facts if not fact.is_placeholder]


def fallback_intent(split: SpeakerSplit) -> ConversationIntent:
    """Template intents built from the first two lines on each side."""
    if split.other_lines:
        other = f"对方主要在表达：{'；'.join(split.other_lines[:2])}，希望你对此给出回应。"
    else:
        other = "对方发言证据不足，暂无法判断其意图。"
    if split.self_lines:
        mine = f"你这边主要在表达：{'；'.join(split.self_lines[:2])}，希望推动对话往你期望的方向走。"
    else:
        mine = "你这边的发言证据不足，暂无法判断你的意图。"
    return ConversationIntent(other_intent=other, self_intent=mine)


def build_fallback_answer(question: str, relevant: Sequence[Fact], split: SpeakerSplit) -> StructuredAnswer:
    """Return the canned structured answer keyed on whether real evidence exists."""
    meaningful = meaningful_facts(relevant)
    has_evidence = bool(meaningful)
    joined = " | ".join(fact.text for fact in meaningful)

    if has_evidence:
        analysis = ConversationAnalysis(
            emotion="对方可能处于需要被理解或被明确回应的状态。",
            core_need="希望得到清晰回复、确认立场或推进下一步。",
            risk_point="直接反驳或情绪化表述，可能导致关系恶化。",
        )
        why = "温和版更利于先降温并建立合作语气，再推进实质问题。"
        first_step = f"已抽取证据：{joined[:80]}"
    else:
        analysis = ConversationAnalysis(
            emotion="证据不足，无法准确判断情绪。",
            core_need="建议补充更完整对话截图。",
            risk_point="在证据不足时给出确定判断，容易误导。",
        )
        why = "在信息不足时优先使用稳妥、低冲突表达。"
        first_step = "证据不足，使用保守策略"

    replies = [ReplyOption(style=option.style, text=option.text) for option in FALLBACK_REPLIES]
    return StructuredAnswer(
        analysis=analysis,
        reply_options=replies,
        best_reply=replies[0].text,
        why=why,
        followups=list(FALLBACK_FOLLOWUPS),
        confidence=CONFIDENCE_WITH_EVIDENCE if has_evidence else CONFIDENCE_WITHOUT_EVIDENCE,
        is_speculative=not has_evidence,
        analysis_steps=[
            first_step,
            f"问题目标：{(question or '')[:40]}",
            "已生成三种语气回复与推荐发送版本",
        ],
        speaker_split=split,
        intent=fallback_intent(split),
    )
