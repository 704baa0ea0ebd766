"""Session lifecycle, image intake, and read-side helpers."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import Request

from controllers.http_errors import core_errors
from dal.memory_store import MemoryStore
from services.chat_service import ChatService
from services.image_intake import commit_images as commit_session_images
from services.image_intake import presign_image as presign_session_image


def _store(request: Request) -> MemoryStore:
	return request.app.state.store


async def create_session(request: Request, device_id: Optional[str]) -> Dict[str, Any]:
	"""Create a new session and return its id."""
	session = _store(request).create_session(device_id=(device_id or "").strip() or "unknown")
	return {"session_id": session.id}


async def delete_session(request: Request, session_id: str) -> Dict[str, Any]:
	"""Delete a session and everything it owns."""
	with core_errors():
		_store(request).delete_session(session_id)
	return {"ok": True, "cleanup_queued": True}


async def presign_image(
	request: Request,
	session_id: str,
	filename: Optional[str],
	content_type: Optional[str],
	size: Optional[int],
) -> Dict[str, Any]:
	"""Register an upload slot for one screenshot."""
	with core_errors():
		record, upload_url = presign_session_image(_store(request), session_id, filename, content_type, size)
	return {"image_id": record.id, "upload_url": upload_url}


async def commit_images(
	request: Request,
	session_id: str,
	image_ids: List[str],
	meta: List[Dict[str, Any]],
	payloads: List[Dict[str, Any]],
) -> Dict[str, Any]:
	"""Commit presigned images, attaching any inline payloads."""
	with core_errors():
		accepted, rejected = await commit_session_images(_store(request), session_id, image_ids, meta, payloads)
	return {"accepted": accepted, "rejected": rejected}


async def get_summary(request: Request, session_id: str) -> Dict[str, Any]:
	chat_service: ChatService = request.app.state.chat_service
	with core_errors():
		return chat_service.get_summary(session_id)


async def list_messages(request: Request, session_id: str) -> Dict[str, Any]:
	with core_errors():
		messages = _store(request).get_messages(session_id)
	return {"messages": [message.to_dict() for message in messages]}
