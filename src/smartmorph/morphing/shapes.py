from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from ._geometry import BBox, format_number

StyleKey = Literal["fs", "f", "s", "none"]


def _visible(paint: str | None) -> bool:
    return paint is not None and paint.strip().lower() not in ("", "none")


@dataclass(frozen=True, eq=False)
class Shape:
    """One immutable element of a scene, as handed over by the parsing layer.

    ``outline`` is absolute path data with transforms already applied.
    ``path_key`` fingerprints the ancestor chain (``"svg/g#body/g"``) and
    ``order`` is the draw-order index within the scene. Identity is by
    object, so two equal-looking shapes stay distinct during matching.
    """

    outline: str
    tag: str = "path"
    id: str | None = None
    name: str | None = None
    classes: tuple[str, ...] = field(default_factory=tuple)
    fill: str | None = None
    stroke: str | None = None
    stroke_width: float | None = None
    fill_opacity: float | None = None
    stroke_opacity: float | None = None
    opacity: float | None = None
    dash_array: str | None = None
    path_key: str | None = None
    order: int = 0
    orbit_ref: str | None = None
    orbit_direction: str | None = None

    def __post_init__(self) -> None:
        classes = self.classes
        if isinstance(classes, str):
            classes = classes.split()
        object.__setattr__(self, "classes", tuple(c for c in (str(c).strip() for c in classes) if c))

    @property
    def has_fill(self) -> bool:
        return _visible(self.fill)

    @property
    def has_stroke(self) -> bool:
        return _visible(self.stroke)

    @property
    def has_dash(self) -> bool:
        return _visible(self.dash_array)

    @property
    def style_key(self) -> StyleKey:
        if self.has_fill and self.has_stroke:
            return "fs"
        if self.has_fill:
            return "f"
        if self.has_stroke:
            return "s"
        return "none"

    @property
    def stable_key(self) -> str | None:
        return self.id or self.name or None

    @property
    def first_class(self) -> str | None:
        return self.classes[0] if self.classes else None

    @property
    def class_tokens(self) -> list[str]:
        return [c.lower() for c in self.classes]

    @property
    def paint(self) -> str | None:
        """The colour used for matching: fill when visible, else stroke."""

        if self.has_fill:
            return self.fill
        if self.has_stroke:
            return self.stroke
        return None

    @property
    def label(self) -> str:
        return self.stable_key or f"{self.tag}#{self.order}"


def circle_outline(cx: float, cy: float, r: float) -> str:
    """Closed two-arc circle outline starting at the leftmost point."""

    x0 = format_number(cx - r)
    x1 = format_number(cx + r)
    y = format_number(cy)
    rr = format_number(r)
    return f"M{x0} {y} A{rr} {rr} 0 1 0 {x1} {y} A{rr} {rr} 0 1 0 {x0} {y} Z"


def rect_outline(box: BBox, corner_radius: float = 0.0) -> str:
    x, y = box.min_x, box.min_y
    x2, y2 = box.max_x, box.max_y
    rx = max(0.0, min(corner_radius, box.width / 2.0, box.height / 2.0))
    f = format_number
    if rx <= 0:
        return f"M{f(x)} {f(y)} H{f(x2)} V{f(y2)} H{f(x)} Z"
    r = f(rx)
    return " ".join(
        [
            f"M{f(x + rx)} {f(y)}",
            f"H{f(x2 - rx)}",
            f"A{r} {r} 0 0 1 {f(x2)} {f(y + rx)}",
            f"V{f(y2 - rx)}",
            f"A{r} {r} 0 0 1 {f(x2 - rx)} {f(y2)}",
            f"H{f(x + rx)}",
            f"A{r} {r} 0 0 1 {f(x)} {f(y2 - rx)}",
            f"V{f(y + rx)}",
            f"A{r} {r} 0 0 1 {f(x + rx)} {f(y)}",
            "Z",
        ]
    )


__all__ = ["Shape", "StyleKey", "circle_outline", "rect_outline"]
