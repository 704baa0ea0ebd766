"""Validation helpers for committed screenshot payloads."""

import base64
import binascii
import hashlib
import io
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from models.errors import ValidationError

ALLOWED_IMAGE_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "image/heic",
    "image/gif",
    "image/bmp",
}


def normalize_mime_type(mime_type: str | None) -> str:
    """Return a lower-cased image MIME type, defaulting to JPEG."""
    mime = (mime_type or "").lower().split(";", 1)[0].strip()
    if not mime:
        return "image/jpeg"
    if mime not in ALLOWED_IMAGE_TYPES:
        raise ValidationError(f"Unsupported image content type: {mime_type}")
    return "image/jpeg" if mime == "image/jpg" else mime


def decode_base64_image(image_b64: str | bytes) -> bytes:
    """Decode base64 image data (optionally a `data:` URL) into raw bytes."""
    text = image_b64.decode("ascii") if isinstance(image_b64, bytes) else image_b64
    text = text.strip()
    if text.startswith("data:") and "," in text:
        text = text.split(",", 1)[1]
    if not text:
        raise ValidationError("Image payload is empty.")
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Image payload is not valid base64.") from exc


def inspect_image(image_b64: str | bytes) -> Tuple[Optional[int], Optional[int], str]:
    """Return `(width, height, sha256)` for base64 image data.

    Width and height are None when Pillow does not recognise the format
    (HEIC, for one); such bytes are still forwarded to the vision model.

    Raises:
        ValidationError: Undecodable base64, or a header claiming more pixels
            than Pillow's decompression-bomb limit.
    """
    raw = decode_base64_image(image_b64)
    sha256 = hashlib.sha256(raw).hexdigest()
    try:
        with Image.open(io.BytesIO(raw)) as img:
            width, height = img.size
    except Image.DecompressionBombError as exc:
        raise ValidationError(f"Image is too large to process: {exc}") from exc
    except (UnidentifiedImageError, OSError):
        return None, None, sha256
    return width, height, sha256
