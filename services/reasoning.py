"""Structured answer synthesis with a deterministic fallback.

A synthesis run moves through `idle -> importing -> analyzing -> generating`
and ends in `ready` or `failed`. `failed` means the provider could not
deliver; the run still returns a complete answer built by the rule-based
fallback, together with the error classification for the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from models.answer_models import StructuredAnswer
from models.errors import ProviderError
from models.fact_models import Fact
from models.provider_payloads import AnswerPayload, decode_payload
from services.answer_normalizer import normalize_answer
from services.fallback_answer import build_fallback_answer
from services.providers import PromptContext, ReasoningProvider
from services.speaker_splitter import split_speakers

LOGGER = logging.getLogger(__name__)

LOCAL_MODEL = "fallback:local"


class SynthesisState(str, Enum):
    IDLE = "idle"
    IMPORTING = "importing"
    ANALYZING = "analyzing"
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


@dataclass
class SynthesisResult:
    answer: StructuredAnswer
    model: str
    llm_error: Optional[str] = None
    states: List[SynthesisState] = field(default_factory=list)

    @property
    def state(self) -> SynthesisState:
        return self.states[-1] if self.states else SynthesisState.IDLE


class ReasoningSynthesizer:
    """Produce a StructuredAnswer for a question; never raises on provider failure."""

    def __init__(self, provider: Optional[ReasoningProvider] = None) -> None:
        self.provider = provider

    async def synthesize(
        self,
        question: str,
        relevant: Sequence[Fact],
        facts: Sequence[Fact],
        mode: str = "hq_reply",
    ) -> SynthesisResult:
        """Answer `question` from the `relevant` facts and the split of all `facts`."""
        states = [SynthesisState.IDLE, SynthesisState.IMPORTING]
        relevant = list(relevant)
        facts = list(facts)

        states.append(SynthesisState.ANALYZING)
        split = split_speakers(facts)

        if self.provider is None:
            states.append(SynthesisState.READY)
            return SynthesisResult(
                answer=build_fallback_answer(question, relevant, split),
                model=LOCAL_MODEL,
                states=states,
            )

        states.append(SynthesisState.GENERATING)
        context = PromptContext(
            question=question,
            relevant_facts=relevant,
            total_facts=len(facts),
            speaker_split=split,
            mode=mode,
        )
        try:
            raw = await self.provider.complete(context)
            answer = normalize_answer(decode_payload(raw, AnswerPayload), split)
        except ProviderError as exc:
            llm_error = exc.classification
            LOGGER.warning("Reasoning provider failed (%s): %s", type(exc).__name__, exc)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            llm_error = ProviderError.classification
            LOGGER.exception("Unexpected reasoning failure: %s", exc)
        else:
            states.append(SynthesisState.READY)
            return SynthesisResult(answer=answer, model=f"openai:{self.provider.model}", states=states)

        states.append(SynthesisState.FAILED)
        return SynthesisResult(
            answer=build_fallback_answer(question, relevant, split),
            model=LOCAL_MODEL,
            llm_error=llm_error,
            states=states,
        )
