"""Answer questions about a session's screenshots."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from dal.memory_store import MemoryStore
from models.answer_models import StructuredAnswer
from models.errors import NotFound, ValidationError
from models.fact_models import Citation, Evidence
from services.answer_renderer import render_answer
from services.citations import CitationBuilder
from services.reasoning import ReasoningSynthesizer, SynthesisState
from services.relevance import RelevanceScorer, SubstringRelevanceScorer
from services.summary import build_summary

LOGGER = logging.getLogger(__name__)

MAX_QUESTION_LENGTH = 4000


@dataclass
class ChatTurn:
	answer: StructuredAnswer
	citations: List[Citation]
	text: str
	model: str
	llm_error: Optional[str] = None
	states: List[SynthesisState] = field(default_factory=list)

	def to_dict(self) -> Dict[str, Any]:
		"""Flatten into the chat response body."""
		payload = self.answer.to_dict()
		payload.update(
			{
				"answer": self.text,
				"citations": [citation.to_dict() for citation in self.citations],
				"model": self.model,
				"llm_error": self.llm_error,
			}
		)
		return payload


class ChatService:
	def __init__(
		self,
		store: MemoryStore,
		synthesizer: ReasoningSynthesizer,
		scorer: Optional[RelevanceScorer] = None,
		citations: Optional[CitationBuilder] = None,
	) -> None:
		self.store = store
		self.synthesizer = synthesizer
		self.scorer = scorer or SubstringRelevanceScorer()
		self.citations = citations or CitationBuilder(store)

	@staticmethod
	def _check_question(question: Any) -> str:
		if not isinstance(question, str):
			raise ValidationError("message must be a string")
		if len(question) > MAX_QUESTION_LENGTH:
			raise ValidationError(f"message exceeds {MAX_QUESTION_LENGTH} characters")
		return question.strip()

	async def answer_question(
		self,
		session_id: str,
		question: str,
		image_ids: Optional[Sequence[str]] = None,
		mode: str = "hq_reply",
	) -> ChatTurn:
		"""Run one chat turn and record both sides of it in the session history."""
		question = self._check_question(question)
		self.store.get_session(session_id)
		started = time.time()

		facts = self.store.get_facts(session_id, image_ids)
		relevant = self.scorer.select(facts, question)
		citations = self.citations.cite(session_id, relevant)
		result = await self.synthesizer.synthesize(question, relevant, facts, mode=mode)
		text = render_answer(result.answer)

		self.store.add_message(session_id, "user", question)
		self.store.add_message(session_id, "assistant", text)

		LOGGER.info(
			"chat_completed session_id=%s image_ids=%s model=%s latency_ms=%d llm_error=%s",
			session_id,
			list(image_ids or [])[:10],
			result.model,
			int((time.time() - started) * 1000),
			result.llm_error,
		)
		return ChatTurn(
			answer=result.answer,
			citations=citations,
			text=text,
			model=result.model,
			llm_error=result.llm_error,
			states=result.states,
		)

	def get_evidence(self, session_id: str, evidence_id: str) -> Evidence:
		self.store.get_session(session_id)
		evidence = self.store.get_evidence(evidence_id)
		if evidence is None or evidence.session_id != session_id:
			raise NotFound(f"Evidence {evidence_id} not found")
		return evidence

	def load_evidence_details(
		self, session_id: str, question: str, image_ids: Optional[Sequence[str]] = None
	) -> List[Evidence]:
		"""Persist and return the evidence rows backing an answer's detail view."""
		question = self._check_question(question)
		facts = self.store.get_facts(session_id, image_ids)
		relevant = self.scorer.select(facts, question)
		return self.citations.evidence_details(session_id, relevant)

	def get_summary(self, session_id: str) -> Dict[str, Any]:
		return build_summary(self.store.get_facts(session_id))
