from __future__ import annotations

from smartmorph.morphing import MorphConfig, Shape
from smartmorph.morphing._geometry import bbox_from_outline


def rect_path(x: float, y: float, w: float, h: float) -> str:
    return f"M{x:g} {y:g} H{x + w:g} V{y + h:g} H{x:g} Z"


def square(x: float, y: float, size: float = 10.0, **kwargs) -> Shape:
    kwargs.setdefault("fill", "#336699")
    return Shape(rect_path(x, y, size, size), **kwargs)


def center_of(outline: str) -> tuple[float, float]:
    return bbox_from_outline(outline).center


def no_stagger(**kwargs) -> MorphConfig:
    kwargs.setdefault("layer_stagger_ms", 0)
    kwargs.setdefault("intra_stagger_ms", 0)
    return MorphConfig(**kwargs)
