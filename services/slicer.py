"""Split tall screenshots into overlapping horizontal strips."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Dict, List

from models.errors import ValidationError

DEFAULT_SLICE_HEIGHT = 1800
DEFAULT_OVERLAP_RATIO = 0.15


@dataclass(frozen=True)
class Slice:
    x: int
    y: int
    w: int
    h: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def slice_image(
    width: int,
    height: int,
    slice_height: int = DEFAULT_SLICE_HEIGHT,
    overlap_ratio: float = DEFAULT_OVERLAP_RATIO,
) -> List[Slice]:
    """Return the strips covering a `width` x `height` image from top to bottom.

    Images no taller than `slice_height` come back as a single full-size
    strip. Otherwise strips of `slice_height` start every
    `slice_height - floor(slice_height * overlap_ratio)` pixels, and the last
    strip is clipped to the bottom edge.

    Raises:
        ValidationError: On non-positive dimensions or an overlap ratio outside [0, 1).
    """
    if width <= 0 or height <= 0:
        raise ValidationError(f"Image dimensions must be positive, got {width}x{height}.")
    if slice_height <= 0:
        raise ValidationError(f"slice_height must be positive, got {slice_height}.")
    if not 0 <= overlap_ratio < 1:
        raise ValidationError(f"overlap_ratio must be in [0, 1), got {overlap_ratio}.")

    if height <= slice_height:
        return [Slice(x=0, y=0, w=width, h=height)]

    overlap = math.floor(slice_height * overlap_ratio)
    step = max(1, slice_height - overlap)

    slices: List[Slice] = []
    y = 0
    while y < height:
        h = min(slice_height, height - y)
        slices.append(Slice(x=0, y=y, w=width, h=h))
        if y + h >= height:
            break
        y += step
    return slices
