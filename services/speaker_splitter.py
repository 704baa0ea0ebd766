"""Partition a session's facts into "other" and "self" transcripts.

Left bubbles belong to the other party and right bubbles to the user. Facts
whose side could not be read are handed to whichever transcript is not
longer at that point, so an all-unknown conversation alternates between the
two sides starting with "other".
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from models.answer_models import MAPPING_RULE, SpeakerSplit
from models.fact_models import ROLE_OTHER, ROLE_SELF, Fact

LOW_CONFIDENCE_THRESHOLD = 0.5
LOW_CONFIDENCE_REASON = "较多消息无法判断左右气泡归属，已按交替规则分配，说话人划分可能不准确，建议补充更清晰的完整截图。"


def _normalize(text: str) -> str:
    return " ".join(text.split()).lower()


def collapse_repeats(lines: Iterable[str]) -> List[str]:
    """Drop a line when it matches the previously kept line (whitespace and case insensitive)."""
    kept: List[str] = []
    previous = None
    for line in lines:
        key = _normalize(line)
        if key == previous:
            continue
        kept.append(line)
        previous = key
    return kept


def split_confidence(routed_count: int, unknown_count: int) -> float:
    """Share of role information that was actually known.

    `routed_count` is the number of lines placed on either side (unknown ones
    included); `unknown_count` is how many of those had no declared role.
    """
    return 1 - unknown_count / (max(1, routed_count) + unknown_count)


def split_speakers(facts: Iterable[Fact]) -> SpeakerSplit:
    """Return the speaker split for `facts`.

    Only paragraph facts take part, minus the "no readable content"
    placeholder. Facts are walked image by image (in first-seen order) and by
    `order` inside each image.
    """
    facts = list(facts)
    image_rank: Dict[str, int] = {}
    for fact in facts:
        image_rank.setdefault(fact.image_id, len(image_rank))

    candidates = [fact for fact in facts if fact.type == "paragraph" and not fact.is_placeholder]
    candidates.sort(key=lambda fact: (image_rank[fact.image_id], fact.order))

    other_lines: List[str] = []
    self_lines: List[str] = []
    unknown_count = 0
    for fact in candidates:
        text = fact.text.strip()
        if not text:
            continue
        if fact.speaker_role == ROLE_OTHER:
            other_lines.append(text)
        elif fact.speaker_role == ROLE_SELF:
            self_lines.append(text)
        else:
            unknown_count += 1
            if len(other_lines) <= len(self_lines):
                other_lines.append(text)
            else:
                self_lines.append(text)

    confidence = split_confidence(len(other_lines) + len(self_lines), unknown_count)
    return SpeakerSplit(
        other_lines=collapse_repeats(other_lines),
        self_lines=collapse_repeats(self_lines),
        mapping_rule=MAPPING_RULE,
        confidence=confidence,
        low_confidence_reason=LOW_CONFIDENCE_REASON if confidence <= LOW_CONFIDENCE_THRESHOLD else None,
    )
