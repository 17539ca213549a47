from __future__ import annotations

from typing import Literal

from ._geometry import bbox_from_outline
from .shapes import circle_outline, rect_outline

AppearStyle = Literal["collapse-to-centroid", "bbox-to-shape"]

COLLAPSE_RELATIVE_RADIUS = 0.05
COLLAPSE_MIN_RADIUS = 0.01
BBOX_CORNER_RATIO = 0.1


def collapse_outline(
    outline: str,
    relative_radius: float = COLLAPSE_RELATIVE_RADIUS,
    min_radius: float = COLLAPSE_MIN_RADIUS,
) -> str:
    """Small circle at the outline's bounding-box centre."""

    box = bbox_from_outline(outline)
    r = max(min_radius, min(box.width, box.height) * relative_radius)
    return circle_outline(box.cx, box.cy, r)


def appear_start_outline(end_outline: str, style: AppearStyle = "collapse-to-centroid") -> str:
    """Synthesize the start geometry for a shape that appears."""

    if style == "bbox-to-shape":
        box = bbox_from_outline(end_outline)
        if box.width <= 0 or box.height <= 0:
            return collapse_outline(end_outline)
        return rect_outline(box, corner_radius=min(box.width, box.height) * BBOX_CORNER_RATIO)
    return collapse_outline(end_outline)


__all__ = ["AppearStyle", "appear_start_outline", "collapse_outline"]
