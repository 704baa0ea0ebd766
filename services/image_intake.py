"""Presign and commit handling for uploaded screenshots."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from dal.memory_store import MemoryStore
from models.errors import NotFound, ValidationError
from models.image_record import ImageRecord
from utils.media_validation import inspect_image, normalize_mime_type

LOGGER = logging.getLogger(__name__)

UPLOAD_URL_BASE = "https://uploads.local/upload"
MAX_UPLOAD_BYTES = 20 * 1024 * 1024


def presign_image(
    store: MemoryStore,
    session_id: str,
    filename: Optional[str] = None,
    content_type: Optional[str] = None,
    size: Optional[int] = None,
) -> Tuple[ImageRecord, str]:
    """Register a pending image and return it with the URL the client uploads to."""
    mime_type = normalize_mime_type(content_type)
    if size is not None and (size < 0 or size > MAX_UPLOAD_BYTES):
        raise ValidationError(f"size must be between 0 and {MAX_UPLOAD_BYTES} bytes")
    record = store.add_image(session_id, mime_type=mime_type)
    if filename:
        LOGGER.debug("Presigned %s for %s as %s", filename, session_id, record.id)
    return record, f"{UPLOAD_URL_BASE}/{record.object_key}"


def _index_by_image_id(items: Iterable[Any]) -> Dict[str, Dict[str, Any]]:
    indexed: Dict[str, Dict[str, Any]] = {}
    for item in items or []:
        if not isinstance(item, dict):
            continue
        image_id = str(item.get("image_id") or "").strip()
        if image_id:
            indexed[image_id] = item
    return indexed


def _apply_meta(record: ImageRecord, meta: Dict[str, Any]) -> None:
    for key in ("width", "height"):
        value = meta.get(key)
        if isinstance(value, int) and value > 0 and getattr(record, key) is None:
            setattr(record, key, value)
    sha256 = meta.get("sha256")
    if isinstance(sha256, str) and sha256.strip() and record.sha256 is None:
        record.sha256 = sha256.strip().lower()


async def _apply_payload(record: ImageRecord, payload: Dict[str, Any]) -> None:
    """Attach the base64 bytes to `record` along with the decoded metadata.

    Pillow runs in a worker thread so large images do not stall the event loop.

    Raises:
        ValidationError: Unsupported MIME type, undecodable base64, or an oversized image.
    """
    image_b64 = str(payload.get("image_base64") or "").strip()
    if not image_b64:
        return
    mime_type = normalize_mime_type(payload.get("mime_type") or record.mime_type)
    width, height, sha256 = await asyncio.to_thread(inspect_image, image_b64)

    record.payload_b64 = image_b64
    record.mime_type = mime_type
    record.width = width
    record.height = height
    record.sha256 = sha256


async def commit_images(
    store: MemoryStore,
    session_id: str,
    image_ids: Iterable[str],
    meta: Optional[Iterable[Any]] = None,
    payloads: Optional[Iterable[Any]] = None,
) -> Tuple[List[str], List[str]]:
    """Mark presigned images as committed.

    Ids that do not belong to the session, or whose payload is not a usable
    image, are rejected; the rest are accepted.
    """
    store.get_session(session_id)
    meta_by_id = _index_by_image_id(meta)
    payload_by_id = _index_by_image_id(payloads)

    accepted: List[str] = []
    rejected: List[str] = []
    for image_id in image_ids:
        try:
            record = store.get_image(session_id, image_id)
        except NotFound:
            rejected.append(image_id)
            continue
        try:
            await _apply_payload(record, payload_by_id.get(image_id, {}))
        except ValidationError as exc:
            LOGGER.warning("Rejected image %s in session %s: %s", image_id, session_id, exc)
            rejected.append(image_id)
            continue
        _apply_meta(record, meta_by_id.get(image_id, {}))
        record.committed = True
        accepted.append(image_id)
    return accepted, rejected
