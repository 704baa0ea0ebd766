"""FastAPI routes for chat turns and evidence views."""

from typing import List

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from controllers.chat_controller import get_evidence, get_evidence_details, post_chat

router = APIRouter(prefix="/v1/sessions")


class ChatContext(BaseModel):
	image_ids: List[str] = Field(default_factory=list)


class ChatPayload(BaseModel):
	message: str = ""
	context: ChatContext = Field(default_factory=ChatContext)
	mode: str = "hq_reply"


@router.post("/{session_id}/chat")
async def chat_route(request: Request, session_id: str, payload: ChatPayload):
	try:
		return await post_chat(request, session_id, payload.message, payload.context.image_ids, payload.mode)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/evidences:detail")
async def evidence_details_route(request: Request, session_id: str, payload: ChatPayload):
	try:
		return await get_evidence_details(request, session_id, payload.message, payload.context.image_ids)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{session_id}/evidences/{evidence_id}")
async def evidence_route(request: Request, session_id: str, evidence_id: str):
	try:
		return await get_evidence(request, session_id, evidence_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
