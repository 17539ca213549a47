"""Correspondence between the shapes of a start scene and an end scene.

Shapes are bucketed by tag and paint style, so a stroked line never pairs
with a filled blob. Inside a bucket, explicit ids/names win outright, then
class tokens that occur exactly once on both sides, and whatever remains is
solved as a minimum-cost assignment over a weighted dissimilarity.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np
from scipy.optimize import linear_sum_assignment

from ._color import Rgba, parse_color, rgba_distance
from ._geometry import BBox, bbox_from_outline, outline_length, union_bbox
from .shapes import Shape

logger = logging.getLogger(__name__)

PAD_COST = 10_000.0


@dataclass(frozen=True)
class MatchWeights:
    position: float = 1.0
    size: float = 0.35
    area: float = 0.15
    color: float = 0.3
    length: float = 0.0
    group: float = 0.25
    class_: float = 0.15

    def __post_init__(self) -> None:
        for name in ("position", "size", "area", "color", "length", "group", "class_"):
            value = float(getattr(self, name))
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"match weight {name.rstrip('_')} must be a non-negative number.")
            object.__setattr__(self, name, value)

    @classmethod
    def from_mapping(cls, values: dict[str, float] | None) -> "MatchWeights":
        if not values:
            return cls()
        kwargs = {}
        for key, value in values.items():
            name = "class_" if key == "class" else key
            if name not in cls.__dataclass_fields__:
                raise ValueError(f"Unknown match weight {key!r}.")
            kwargs[name] = value
        return cls(**kwargs)


@dataclass(frozen=True)
class MatchedPair:
    start: Shape
    end: Shape
    cost: float = 0.0


@dataclass
class MatchResult:
    pairs: list[MatchedPair] = field(default_factory=list)
    unmatched_start: list[Shape] = field(default_factory=list)
    unmatched_end: list[Shape] = field(default_factory=list)

    def extend(self, other: "MatchResult") -> None:
        self.pairs.extend(other.pairs)
        self.unmatched_start.extend(other.unmatched_start)
        self.unmatched_end.extend(other.unmatched_end)


@dataclass(frozen=True)
class _Features:
    box: BBox
    paint: Rgba | None
    path_key: str | None
    classes: frozenset[str]
    length: float


def _bucket_key(shape: Shape) -> tuple[str, str]:
    return shape.tag, shape.style_key


def _path_distance(a: str | None, b: str | None) -> float:
    if not a and not b:
        return 0.0
    if not a or not b:
        return 1.0
    parts_a = a.split("/")
    parts_b = b.split("/")
    common = 0
    for x, y in zip(parts_a, parts_b):
        if x != y:
            break
        common += 1
    return 1.0 - common / (max(len(parts_a), len(parts_b)) or 1)


def _class_distance(a: frozenset[str], b: frozenset[str]) -> float:
    if not a and not b:
        return 0.0
    if not a or not b:
        return 1.0
    return 1.0 - len(a & b) / (len(a | b) or 1)


def _features(shapes: Sequence[Shape], with_length: bool) -> list[_Features]:
    return [
        _Features(
            box=bbox_from_outline(s.outline),
            paint=parse_color(s.paint),
            path_key=s.path_key,
            classes=frozenset(s.class_tokens),
            length=outline_length(s.outline) if with_length else 0.0,
        )
        for s in shapes
    ]


def _cost(a: _Features, b: _Features, diag: float, w: MatchWeights) -> float:
    if a.box.empty or b.box.empty:
        pos = 1.0
    else:
        pos = math.hypot(a.box.cx - b.box.cx, a.box.cy - b.box.cy) / diag
    size = math.hypot(a.box.width - b.box.width, a.box.height - b.box.height) / diag
    area = abs(a.box.area - b.box.area) / max(a.box.area, b.box.area, 1.0)
    color = rgba_distance(a.paint, b.paint)
    length = abs(a.length - b.length) / max(a.length, b.length, 1.0) if w.length else 0.0
    group = _path_distance(a.path_key, b.path_key)
    cls = _class_distance(a.classes, b.classes)
    return (
        w.position * pos
        + w.size * size
        + w.area * area
        + w.color * color
        + w.length * length
        + w.group * group
        + w.class_ * cls
    )


def cost_matrix(start: Sequence[Shape], end: Sequence[Shape], weights: MatchWeights) -> np.ndarray:
    """Weighted dissimilarity of every start/end combination (rows are start shapes)."""

    with_length = weights.length > 0
    fs = _features(start, with_length)
    fe = _features(end, with_length)
    diag = max(union_bbox(f.box for f in fs).diagonal, union_bbox(f.box for f in fe).diagonal) or 1.0
    matrix = np.zeros((len(fs), len(fe)), dtype=float)
    for i, a in enumerate(fs):
        for j, b in enumerate(fe):
            matrix[i, j] = _cost(a, b, diag, weights)
    return matrix


def _pair_stable_keys(start: list[Shape], end: list[Shape], result: MatchResult) -> tuple[list[Shape], list[Shape]]:
    end_by_key: dict[str, list[Shape]] = {}
    for e in end:
        key = e.stable_key
        if key:
            end_by_key.setdefault(key, []).append(e)

    used: set[int] = set()
    remaining_start: list[Shape] = []
    for s in start:
        candidates = end_by_key.get(s.stable_key) if s.stable_key else None
        if not candidates:
            remaining_start.append(s)
            continue
        e = candidates.pop(0)
        used.add(id(e))
        result.pairs.append(MatchedPair(s, e, 0.0))
    return remaining_start, [e for e in end if id(e) not in used]


def _unique_tokens(shapes: list[Shape]) -> set[str]:
    counts: dict[str, int] = {}
    for shape in shapes:
        for token in set(shape.class_tokens):
            counts[token] = counts.get(token, 0) + 1
    return {token for token, count in counts.items() if count == 1}


def _pair_anchors(start: list[Shape], end: list[Shape], result: MatchResult) -> tuple[list[Shape], list[Shape]]:
    anchors = _unique_tokens(start) & _unique_tokens(end)
    if not anchors:
        return start, end

    # Anchor tokens occur once per side, so each maps to a single shape.
    def by_token(shapes: list[Shape]) -> dict[str, Shape]:
        return {token: shape for shape in shapes for token in shape.class_tokens if token in anchors}

    start_by_token = by_token(start)
    end_by_token = by_token(end)
    matched: set[int] = set()
    for token in sorted(anchors):
        s = start_by_token.get(token)
        e = end_by_token.get(token)
        if s is None or e is None or id(s) in matched or id(e) in matched:
            continue
        result.pairs.append(MatchedPair(s, e, 0.0))
        matched.add(id(s))
        matched.add(id(e))
    return [s for s in start if id(s) not in matched], [e for e in end if id(e) not in matched]


def _match_bucket(start: list[Shape], end: list[Shape], weights: MatchWeights) -> MatchResult:
    result = MatchResult()
    start, end = _pair_stable_keys(start, end, result)
    if start and end:
        start, end = _pair_anchors(start, end, result)

    if not start or not end:
        result.unmatched_start.extend(start)
        result.unmatched_end.extend(end)
        return result

    costs = cost_matrix(start, end, weights)
    size = max(costs.shape)
    square = np.full((size, size), PAD_COST, dtype=float)
    square[: costs.shape[0], : costs.shape[1]] = costs
    rows, cols = linear_sum_assignment(square)
    logger.debug("Assignment over %dx%d remainder", costs.shape[0], costs.shape[1])

    matched_rows: set[int] = set()
    matched_cols: set[int] = set()
    for row, col in zip(rows, cols):
        if row < len(start) and col < len(end):
            result.pairs.append(MatchedPair(start[row], end[col], float(costs[row, col])))
            matched_rows.add(int(row))
            matched_cols.add(int(col))

    result.unmatched_start.extend(s for i, s in enumerate(start) if i not in matched_rows)
    result.unmatched_end.extend(e for j, e in enumerate(end) if j not in matched_cols)
    return result


def match_shapes(
    start: Sequence[Shape],
    end: Sequence[Shape],
    weights: MatchWeights | None = None,
) -> MatchResult:
    """Pair start shapes with end shapes; every shape lands in exactly one slot of the result."""

    w = weights or MatchWeights()
    buckets: dict[tuple[str, str], tuple[list[Shape], list[Shape]]] = {}
    for s in start:
        buckets.setdefault(_bucket_key(s), ([], []))[0].append(s)
    for e in end:
        buckets.setdefault(_bucket_key(e), ([], []))[1].append(e)

    result = MatchResult()
    for key, (bucket_start, bucket_end) in buckets.items():
        logger.debug("Bucket %s: %d start, %d end", key, len(bucket_start), len(bucket_end))
        result.extend(_match_bucket(bucket_start, bucket_end, w))

    logger.debug(
        "Matched %d pairs, %d unmatched start, %d unmatched end",
        len(result.pairs),
        len(result.unmatched_start),
        len(result.unmatched_end),
    )
    return result


__all__ = ["MatchResult", "MatchWeights", "MatchedPair", "PAD_COST", "cost_matrix", "match_shapes"]
