"""Arc motion along closed, stroked outlines ("orbits").

A moving shape whose start and end centres both sit on the same closed
stroked outline travels along that outline instead of cutting straight
across. Candidates are sampled densely by arc length once; every lookup
afterwards is an interpolation into that table.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Literal, Sequence

import numpy as np

from ._geometry import BBox, bbox_from_outline, is_closed_outline, outline_points, resample_loop
from .shapes import Shape

logger = logging.getLogger(__name__)

OrbitMode = Literal["off", "auto", "auto+manual"]
OrbitDirection = Literal["cw", "ccw", "shortest"]

PROJECTION_SAMPLES = 240
TABLE_POINTS = 720
RELATIVE_TOLERANCE = 0.05

Point = tuple[float, float]


@dataclass(frozen=True, eq=False)
class OrbitCandidate:
    id: str
    outline: str
    bbox: BBox
    radius: float
    arc_length: float
    points: np.ndarray
    cumulative: np.ndarray
    source: Shape | None = None

    def point_at(self, fraction: float) -> Point:
        """Point at ``fraction`` of the arc length, wrapped into [0, 1)."""

        f = fraction % 1.0
        s = f * self.arc_length
        x = float(np.interp(s, self.cumulative, self.points[:, 0]))
        y = float(np.interp(s, self.cumulative, self.points[:, 1]))
        return x, y


@dataclass(frozen=True)
class OrbitBinding:
    candidate: OrbitCandidate
    start_fraction: float
    end_fraction: float
    signed_delta: float
    start_residual: Point = (0.0, 0.0)
    end_residual: Point = (0.0, 0.0)

    @property
    def orbit_outline(self) -> str:
        return self.candidate.outline

    @property
    def arc_length(self) -> float:
        return self.candidate.arc_length


def parse_orbit_ref(raw: str | None) -> str | None:
    if not raw:
        return None
    value = raw.strip()
    if value.startswith("#"):
        value = value[1:]
    return value or None


def parse_orbit_direction(raw: str | None) -> OrbitDirection | None:
    if not raw:
        return None
    value = raw.strip().lower()
    if value in ("cw", "ccw", "shortest"):
        return value  # type: ignore[return-value]
    return None


def make_candidate(shape: Shape, candidate_id: str | None = None) -> OrbitCandidate | None:
    """Build an orbit table for a closed, stroked shape; ``None`` when unusable."""

    if not shape.has_stroke or not is_closed_outline(shape.outline):
        return None
    ring = outline_points(shape.outline, max_segment_length=1.0)
    if ring.shape[0] < 3:
        return None
    ring = resample_loop(ring, TABLE_POINTS)
    closed = np.vstack([ring, ring[0]])
    seg = np.linalg.norm(np.diff(closed, axis=0), axis=1)
    cumulative = np.concatenate([[0.0], np.cumsum(seg)])
    length = float(cumulative[-1])
    if not math.isfinite(length) or length <= 0:
        return None
    box = bbox_from_outline(shape.outline)
    return OrbitCandidate(
        id=candidate_id or shape.label,
        outline=shape.outline,
        bbox=box,
        radius=max(1.0, min(box.width, box.height) / 2.0),
        arc_length=length,
        points=closed,
        cumulative=cumulative,
        source=shape,
    )


def collect_orbit_candidates(shapes: Iterable[Shape]) -> list[OrbitCandidate]:
    """Closed, stroked shapes usable as orbits, first occurrence per id wins.

    Shapes without an id or name are always kept.
    """

    out: list[OrbitCandidate] = []
    seen: set[str] = set()
    for shape in shapes:
        key = shape.stable_key
        if key is not None and key in seen:
            continue
        candidate = make_candidate(shape)
        if candidate is None:
            continue
        if key is not None:
            seen.add(key)
        out.append(candidate)
    logger.debug("Collected %d orbit candidates", len(out))
    return out


def project(candidate: OrbitCandidate, point: Point, samples: int = PROJECTION_SAMPLES) -> tuple[float, float]:
    """Nearest sampled arc fraction to ``point`` and its distance."""

    fractions = np.linspace(0.0, 1.0, samples + 1)
    s = fractions * candidate.arc_length
    xs = np.interp(s, candidate.cumulative, candidate.points[:, 0])
    ys = np.interp(s, candidate.cumulative, candidate.points[:, 1])
    dist = np.hypot(xs - point[0], ys - point[1])
    idx = int(np.argmin(dist))
    return float(fractions[idx]) % 1.0, float(dist[idx])


def resolve_direction_delta(t0: float, t1: float, direction: OrbitDirection) -> float:
    forward = (t1 - t0) % 1.0
    backward = (t0 - t1) % 1.0
    if direction == "cw":
        return forward
    if direction == "ccw":
        return -backward
    return forward if forward <= backward else -backward


def _bind(candidate: OrbitCandidate, start: Point, end: Point, direction: OrbitDirection) -> tuple[OrbitBinding, float]:
    t0, d0 = project(candidate, start)
    t1, d1 = project(candidate, end)
    p0 = candidate.point_at(t0)
    p1 = candidate.point_at(t1)
    binding = OrbitBinding(
        candidate=candidate,
        start_fraction=t0,
        end_fraction=t1,
        signed_delta=resolve_direction_delta(t0, t1, direction),
        start_residual=(start[0] - p0[0], start[1] - p0[1]),
        end_residual=(end[0] - p1[0], end[1] - p1[1]),
    )
    return binding, d0 + d1


def resolve_orbit(
    candidates: Sequence[OrbitCandidate],
    start_center: Point,
    end_center: Point,
    mode: OrbitMode = "auto+manual",
    direction: OrbitDirection = "shortest",
    tolerance: float = 6.0,
    manual_ref: str | None = None,
) -> OrbitBinding | None:
    """Pick the orbit that best explains a move from ``start_center`` to ``end_center``."""

    if mode == "off":
        return None

    if mode == "auto+manual" and manual_ref:
        for candidate in candidates:
            if candidate.id == manual_ref:
                binding, _ = _bind(candidate, start_center, end_center, direction)
                logger.debug("Manual orbit %s bound", manual_ref)
                return binding

    best: OrbitBinding | None = None
    best_score = math.inf
    for candidate in candidates:
        tol = max(tolerance, candidate.radius * RELATIVE_TOLERANCE)
        _, d0 = project(candidate, start_center)
        _, d1 = project(candidate, end_center)
        if d0 > tol or d1 > tol:
            continue
        score = d0 + d1
        if score < best_score:
            best_score = score
            best, _ = _bind(candidate, start_center, end_center, direction)
    if best is not None:
        logger.debug("Orbit %s bound with score %.3f", best.candidate.id, best_score)
    return best


def orbit_point(binding: OrbitBinding, local: float, snap: bool = True) -> Point:
    """Centre position at ``local`` progress along the bound arc."""

    x, y = binding.candidate.point_at(binding.start_fraction + binding.signed_delta * local)
    if snap:
        return x, y
    u = 1.0 - local
    return (
        x + u * binding.start_residual[0] + local * binding.end_residual[0],
        y + u * binding.start_residual[1] + local * binding.end_residual[1],
    )


__all__ = [
    "OrbitBinding",
    "OrbitCandidate",
    "OrbitDirection",
    "OrbitMode",
    "collect_orbit_candidates",
    "make_candidate",
    "orbit_point",
    "parse_orbit_direction",
    "parse_orbit_ref",
    "project",
    "resolve_direction_delta",
    "resolve_orbit",
]
