"""FastAPI routes for sessions, image intake, and session read views."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from controllers.session_controller import (
	commit_images,
	create_session,
	delete_session,
	get_summary,
	list_messages,
	presign_image,
)

router = APIRouter(prefix="/v1/sessions")


class CreateSessionPayload(BaseModel):
	device_id: Optional[str] = None


class PresignPayload(BaseModel):
	filename: Optional[str] = None
	content_type: Optional[str] = None
	size: Optional[int] = None


class CommitPayload(BaseModel):
	image_ids: List[str] = Field(default_factory=list)
	meta: List[Dict[str, Any]] = Field(default_factory=list)
	payloads: List[Dict[str, Any]] = Field(default_factory=list)


@router.post("")
async def create_session_route(request: Request, payload: CreateSessionPayload):
	try:
		return await create_session(request, payload.device_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.delete("/{session_id}")
async def delete_session_route(request: Request, session_id: str):
	try:
		return await delete_session(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/images:presign")
async def presign_image_route(request: Request, session_id: str, payload: PresignPayload):
	try:
		return await presign_image(request, session_id, payload.filename, payload.content_type, payload.size)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/images:commit")
async def commit_images_route(request: Request, session_id: str, payload: CommitPayload):
	try:
		return await commit_images(request, session_id, payload.image_ids, payload.meta, payload.payloads)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{session_id}/summary")
async def get_summary_route(request: Request, session_id: str):
	try:
		return await get_summary(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{session_id}/messages")
async def list_messages_route(request: Request, session_id: str):
	try:
		return await list_messages(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
