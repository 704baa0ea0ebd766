from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ImageRecord:
    """In-memory representation of a screenshot registered to a session.

    Attributes:
        id: Image id handed out at presign time.
        session_id: Owning session id.
        object_key: Storage key the client was told to upload to.
        mime_type: MIME type of the committed payload (defaults to JPEG).
        payload_b64: Base64 image bytes sent at commit time, if any.
        width: Pixel width, from client metadata or decoded from the payload.
        height: Pixel height, from client metadata or decoded from the payload.
        sha256: Hex digest of the raw image bytes.
        committed: True once the image has been committed by the client.
        created_at: Unix timestamp (seconds) when the image was registered.
    """

    id: str
    session_id: str
    object_key: Optional[str] = None
    mime_type: str = "image/jpeg"
    payload_b64: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    sha256: Optional[str] = None
    committed: bool = False
    created_at: float = field(default_factory=lambda: time.time())
