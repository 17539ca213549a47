from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Iterable

import numpy as np
from svgpathtools import Line, Path, parse_path

logger = logging.getLogger(__name__)

MAX_RING_POINTS = 2000
_CURVE_LENGTH_SAMPLES = 32
_TOKEN = re.compile(r"[a-zA-Z]|[-+]?(?:\d*\.\d+|\d+\.?)(?:[eE][-+]?\d+)?")
_COMMAND_LETTERS = frozenset("MmLlHhVvCcSsQqTtAaZz")

# Which numbers of each absolute command are x / y coordinates, per repeat group.
_COORD_LAYOUT = {
    "M": "xy",
    "L": "xy",
    "T": "xy",
    "H": "x",
    "V": "y",
    "C": "xyxyxy",
    "S": "xyxy",
    "Q": "xyxy",
    "A": "-----xy",
}

Command = tuple[str, list[float]]


def clamp01(value: float) -> float:
    if value != value:  # NaN
        return 0.0
    return max(0.0, min(1.0, float(value)))


def lerp(a: float, b: float, t: float) -> float:
    """Linear blend that is exact at both endpoints."""

    return (1.0 - t) * a + t * b


def format_number(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def is_closed_outline(outline: str | None) -> bool:
    return bool(outline) and outline.rstrip()[-1:] in ("z", "Z")


def parse_outline(outline: str | None) -> Path | None:
    """Parse path data, returning ``None`` for empty or malformed outlines."""

    if not outline or not outline.strip():
        return None
    try:
        path = parse_path(outline)
    except Exception as exc:
        logger.debug("Unparseable outline %r: %s", outline[:60], exc)
        return None
    if len(path) == 0:
        return None
    return path


@dataclass(frozen=True)
class BBox:
    min_x: float = 0.0
    min_y: float = 0.0
    max_x: float = 0.0
    max_y: float = 0.0
    empty: bool = True

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def cx(self) -> float:
        return self.min_x + self.width / 2.0

    @property
    def cy(self) -> float:
        return self.min_y + self.height / 2.0

    @property
    def center(self) -> tuple[float, float]:
        return self.cx, self.cy

    @property
    def area(self) -> float:
        return max(0.0, self.width) * max(0.0, self.height)

    @property
    def diagonal(self) -> float:
        return math.hypot(self.width, self.height)


EMPTY_BBOX = BBox()


def bbox_from_outline(outline: str | None) -> BBox:
    """Exact bounding box of an outline; malformed input gives a zero-area box at the origin."""

    path = parse_outline(outline)
    if path is None:
        return EMPTY_BBOX
    try:
        xmin, xmax, ymin, ymax = path.bbox()
    except Exception as exc:
        logger.debug("Bounding box failed for %r: %s", outline[:60], exc)
        return EMPTY_BBOX
    values = (xmin, ymin, xmax, ymax)
    if not all(math.isfinite(v) for v in values):
        return EMPTY_BBOX
    return BBox(float(xmin), float(ymin), float(xmax), float(ymax), empty=False)


def union_bbox(boxes: Iterable[BBox]) -> BBox:
    real = [b for b in boxes if not b.empty]
    if not real:
        return EMPTY_BBOX
    return BBox(
        min(b.min_x for b in real),
        min(b.min_y for b in real),
        max(b.max_x for b in real),
        max(b.max_y for b in real),
        empty=False,
    )


def _segment_length(segment) -> float:
    if isinstance(segment, Line):
        return abs(segment.end - segment.start)
    pts = np.array([segment.point(k / _CURVE_LENGTH_SAMPLES) for k in range(_CURVE_LENGTH_SAMPLES + 1)])
    return float(np.abs(np.diff(pts)).sum())


def outline_length(outline: str | None) -> float:
    path = parse_outline(outline)
    if path is None:
        return 0.0
    total = sum(_segment_length(seg) for seg in path)
    return float(total) if math.isfinite(total) else 0.0


def outline_points(
    outline: str | None,
    max_segment_length: float = 2.0,
    max_points: int = MAX_RING_POINTS,
) -> np.ndarray:
    """Sample an outline into an (N, 2) polyline with segments no longer than ``max_segment_length``."""

    path = parse_outline(outline)
    if path is None:
        return np.zeros((0, 2), dtype=float)

    lengths = [_segment_length(seg) for seg in path]
    total = float(sum(lengths))
    step = max(float(max_segment_length), 1e-6)
    if total / step > max_points:
        step = total / max_points

    samples: list[complex] = []
    for segment, length in zip(path, lengths):
        n = max(1, int(math.ceil(length / step)))
        samples.extend(segment.point(k / n) for k in range(n))
    samples.append(path[-1].end)

    pts = np.array([[z.real, z.imag] for z in samples], dtype=float)
    return pts[np.all(np.isfinite(pts), axis=1)]


def points_to_outline(points: np.ndarray, closed: bool) -> str:
    if points.shape[0] == 0:
        return ""
    parts = [f"M{format_number(points[0, 0])} {format_number(points[0, 1])}"]
    parts.extend(f"L{format_number(x)} {format_number(y)}" for x, y in points[1:])
    if closed:
        parts.append("Z")
    return " ".join(parts)


def resample_open(points: np.ndarray, count: int) -> np.ndarray:
    """Return ``count`` samples evenly spaced by arc length, keeping both ends."""

    pts = np.asarray(points, dtype=float)
    if count < 2:
        raise ValueError("resample count must be >= 2.")
    if pts.shape[0] < 2:
        return np.tile(pts[0] if pts.shape[0] else np.zeros(2), (count, 1))

    distances = np.concatenate([[0.0], np.cumsum(np.linalg.norm(np.diff(pts, axis=0), axis=1))])
    total = distances[-1]
    if total == 0:
        return np.tile(pts[0], (count, 1))
    targets = np.linspace(0.0, total, count)
    return np.column_stack([np.interp(targets, distances, pts[:, 0]), np.interp(targets, distances, pts[:, 1])])


def resample_loop(points: np.ndarray, count: int) -> np.ndarray:
    """Resample a closed loop to ``count`` points spaced evenly along its perimeter."""

    if count < 3:
        raise ValueError("resample count must be >= 3.")
    pts = np.asarray(points, dtype=float)
    if pts.shape[0] < 2:
        raise ValueError("Loop requires at least two points.")
    if np.allclose(pts[0], pts[-1]):
        pts = pts[:-1]
    if pts.shape[0] == count:
        return pts.copy()

    closed = np.vstack([pts, pts[0]])
    seg_lengths = np.linalg.norm(np.diff(closed, axis=0), axis=1)
    total = float(seg_lengths.sum())
    if total == 0:
        return np.tile(pts[0], (count, 1))

    cumulative = np.concatenate([[0.0], np.cumsum(seg_lengths)])
    targets = np.linspace(0.0, total, count + 1)[:-1]
    return np.column_stack(
        [np.interp(targets, cumulative, closed[:, 0]), np.interp(targets, cumulative, closed[:, 1])]
    )


def signed_area(points: np.ndarray) -> float:
    if points.shape[0] < 3:
        return 0.0
    x = points[:, 0]
    y = points[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def ensure_winding(points: np.ndarray, clockwise: bool) -> np.ndarray:
    if points.shape[0] < 3:
        return points
    is_cw = signed_area(points) < 0
    if is_cw != clockwise:
        return points[::-1].copy()
    return points


def best_rotation(reference: np.ndarray, ring: np.ndarray) -> np.ndarray:
    """Roll ``ring`` so the summed squared distance to ``reference`` is minimal."""

    n = ring.shape[0]
    if n == 0 or n != reference.shape[0]:
        return ring
    best_offset = 0
    best_cost = math.inf
    for offset in range(n):
        cost = float(np.sum((reference - np.roll(ring, -offset, axis=0)) ** 2))
        if cost < best_cost:
            best_cost = cost
            best_offset = offset
    return np.roll(ring, -best_offset, axis=0)


def tokenize(outline: str) -> list[Command] | None:
    """Split path data into ``(letter, numbers)`` commands; ``None`` if it is not well formed."""

    commands: list[Command] = []
    for token in _TOKEN.findall(outline or ""):
        if token.isalpha():
            if token not in _COMMAND_LETTERS or (not commands and token not in "Mm"):
                return None
            commands.append((token, []))
        elif not commands:
            return None
        else:
            commands[-1][1].append(float(token))
    return commands or None


def format_commands(commands: list[Command]) -> str:
    return " ".join(letter + " ".join(format_number(v) for v in numbers) for letter, numbers in commands)


def translate_outline(outline: str, dx: float, dy: float) -> str:
    """Shift every absolute coordinate of an outline, keeping its commands (and ``Z``) intact.

    Relative commands move with their anchor, except a leading ``m`` whose
    first pair is absolute.
    """

    commands = tokenize(outline)
    if commands is None:
        return outline
    shift = {"x": dx, "y": dy}
    moved: list[Command] = []
    for index, (letter, numbers) in enumerate(commands):
        layout = _COORD_LAYOUT.get(letter)
        if index == 0 and letter == "m" and len(numbers) >= 2:
            numbers = [numbers[0] + dx, numbers[1] + dy, *numbers[2:]]
        elif layout is not None:
            numbers = [v + shift.get(layout[i % len(layout)], 0.0) for i, v in enumerate(numbers)]
        moved.append((letter, numbers))
    return format_commands(moved)


__all__ = [
    "BBox",
    "Command",
    "EMPTY_BBOX",
    "MAX_RING_POINTS",
    "bbox_from_outline",
    "best_rotation",
    "clamp01",
    "ensure_winding",
    "format_commands",
    "format_number",
    "is_closed_outline",
    "lerp",
    "outline_length",
    "outline_points",
    "parse_outline",
    "points_to_outline",
    "resample_loop",
    "resample_open",
    "signed_area",
    "tokenize",
    "translate_outline",
    "union_bbox",
]
