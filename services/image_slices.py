"""Crop tall screenshots into base64 strips for vision requests.

Pillow decodes the screenshot and crops it in memory; each strip is
re-encoded as base64 JPEG text.
"""

from __future__ import annotations

import base64
import io
import logging
from typing import List, Tuple

from PIL import Image, UnidentifiedImageError

from services.slicer import Slice, slice_image
from utils.media_validation import decode_base64_image

LOGGER = logging.getLogger(__name__)

Strip = Tuple[str, str]


class ImageStripper:
    """Turn one screenshot into one or more `(mime_type, base64)` strips.

    Args:
        slice_height: Strip height in pixels.
        overlap_ratio: Fraction of a strip repeated at the top of the next one.
        max_strips: Most strips carried by a single vision request.
    """

    def __init__(self, slice_height: int, overlap_ratio: float, max_strips: int = 8) -> None:
        if max_strips < 1:
            raise ValueError("max_strips must be at least 1")
        self.slice_height = slice_height
        self.overlap_ratio = overlap_ratio
        self.max_strips = max_strips

    def strips(self, image_b64: str, mime_type: str) -> List[Strip]:
        """Return every strip from top to bottom, or the image unchanged when it fits in one.

        Images Pillow cannot open are passed through untouched; the vision
        provider is the authority on whether they are readable.
        """
        raw = decode_base64_image(image_b64)
        try:
            src = Image.open(io.BytesIO(raw))
            src.load()
        except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
            LOGGER.warning("Could not decode image for slicing, sending as-is: %s", exc)
            return [(mime_type, image_b64)]

        with src:
            width, height = src.size
            rects = slice_image(width, height, self.slice_height, self.overlap_ratio)
            if len(rects) == 1:
                return [(mime_type, image_b64)]
            rgb = src.convert("RGB")
            return [("image/jpeg", self._encode(rgb, rect)) for rect in rects]

    def batches(self, image_b64: str, mime_type: str) -> List[List[Strip]]:
        """Group the strips into consecutive runs of at most `max_strips`, one per request."""
        strips = self.strips(image_b64, mime_type)
        return [strips[start : start + self.max_strips] for start in range(0, len(strips), self.max_strips)]

    @staticmethod
    def _encode(img: Image.Image, rect: Slice) -> str:
        strip = img.crop((rect.x, rect.y, rect.x + rect.w, rect.y + rect.h))
        out_io = io.BytesIO()
        strip.save(out_io, format="JPEG", quality=90)
        return base64.b64encode(out_io.getvalue()).decode("utf-8")
