"""Chat turn and evidence lookups."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import Request

from controllers.http_errors import core_errors
from services.chat_service import ChatService


def _chat_service(request: Request) -> ChatService:
	return request.app.state.chat_service


async def post_chat(
	request: Request,
	session_id: str,
	message: str,
	image_ids: Optional[List[str]] = None,
	mode: str = "hq_reply",
) -> Dict[str, Any]:
	"""Answer one question; provider trouble shows up as `llm_error`, never as an HTTP error."""
	with core_errors():
		turn = await _chat_service(request).answer_question(session_id, message, image_ids or None, mode)
	return turn.to_dict()


async def get_evidence(request: Request, session_id: str, evidence_id: str) -> Dict[str, Any]:
	with core_errors():
		evidence = _chat_service(request).get_evidence(session_id, evidence_id)
	return evidence.to_dict()


async def get_evidence_details(
	request: Request, session_id: str, message: str, image_ids: Optional[List[str]] = None
) -> Dict[str, Any]:
	with core_errors():
		evidences = _chat_service(request).load_evidence_details(session_id, message, image_ids or None)
	return {"evidences": [dict(evidence.to_dict(), id=evidence.id) for evidence in evidences]}
