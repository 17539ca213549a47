"""Outline interpolation.

Two engines are available. ``aligned`` blends the numbers of two outlines
that share the same command sequence token by token; it is exact and cheap.
``general`` resamples both outlines into equal-length point rings, aligns
winding and starting point, and blends the rings, which tolerates any
difference in topology. ``auto`` picks ``aligned`` whenever the command
signatures agree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal

from ._geometry import (
    Command,
    best_rotation,
    ensure_winding,
    format_number,
    is_closed_outline,
    outline_points,
    points_to_outline,
    resample_loop,
    resample_open,
    signed_area,
    tokenize,
)

logger = logging.getLogger(__name__)

EngineChoice = Literal["auto", "general", "aligned"]
Interpolator = Callable[[float], str]

DEFAULT_MAX_SEGMENT_LENGTH = 2.0
_ARC_PARAMS = 7
_ARC_FLAG_POSITIONS = (3, 4)


@dataclass(frozen=True)
class MorphOptions:
    max_segment_length: float = DEFAULT_MAX_SEGMENT_LENGTH
    closed: bool | None = None
    engine: EngineChoice = "auto"
    draw_on: bool = False


def max_segment_length_for(sample_points: int | None) -> float:
    """Map the user-facing density hint onto a maximum segment length."""

    if sample_points is None:
        return DEFAULT_MAX_SEGMENT_LENGTH
    value = 200.0 / max(8, int(sample_points))
    return max(0.5, min(10.0, value))


def signature(commands: list[Command]) -> tuple[tuple[str, int], ...]:
    return tuple((letter, len(numbers)) for letter, numbers in commands)


def aligned_compatible(from_outline: str, to_outline: str) -> bool:
    a = tokenize(from_outline)
    b = tokenize(to_outline)
    return a is not None and b is not None and signature(a) == signature(b)


def _aligned(start: list[Command], end: list[Command], from_outline: str, to_outline: str) -> Interpolator:
    def interpolate(t: float) -> str:
        if t <= 0.0:
            return from_outline
        if t >= 1.0:
            return to_outline
        u = 1.0 - t
        parts: list[str] = []
        for (letter, a_nums), (_, b_nums) in zip(start, end):
            values = []
            for idx, (a, b) in enumerate(zip(a_nums, b_nums)):
                if letter in "Aa" and idx % _ARC_PARAMS in _ARC_FLAG_POSITIONS:
                    values.append(format_number(a if t < 0.5 else b))
                else:
                    values.append(format_number(u * a + t * b))
            parts.append(letter + " ".join(values))
        return " ".join(parts)

    return interpolate


def _switch(from_outline: str, to_outline: str) -> Interpolator:
    def interpolate(t: float) -> str:
        return from_outline if t < 0.5 else to_outline

    return interpolate


def _general(from_outline: str, to_outline: str, max_segment_length: float, closed: bool) -> Interpolator:
    a = outline_points(from_outline, max_segment_length)
    b = outline_points(to_outline, max_segment_length)
    if a.shape[0] < 2 or b.shape[0] < 2:
        logger.debug("Degenerate ring; falling back to a midpoint switch")
        return _switch(from_outline, to_outline)

    if closed:
        count = max(a.shape[0], b.shape[0], 3)
        a = resample_loop(a, count)
        b = resample_loop(b, count)
        if signed_area(a) != 0.0:
            b = ensure_winding(b, clockwise=signed_area(a) < 0)
        b = best_rotation(a, b)
    else:
        count = max(a.shape[0], b.shape[0], 2)
        a = resample_open(a, count)
        b = resample_open(b, count)

    def interpolate(t: float) -> str:
        if t <= 0.0:
            return from_outline
        if t >= 1.0:
            return to_outline
        return points_to_outline((1.0 - t) * a + t * b, closed)

    return interpolate


def _constant(outline: str) -> Interpolator:
    def interpolate(t: float) -> str:
        return outline

    return interpolate


def build_interpolator(
    from_outline: str,
    to_outline: str,
    options: MorphOptions | None = None,
) -> Interpolator:
    """Return ``f(t) -> outline`` that is exact at ``t = 0`` and ``t = 1``."""

    opts = options or MorphOptions()
    if opts.draw_on:
        return _constant(to_outline)
    if from_outline == to_outline:
        return _constant(to_outline)

    if opts.engine != "general":
        start = tokenize(from_outline)
        end = tokenize(to_outline)
        if start is not None and end is not None and signature(start) == signature(end):
            logger.debug("Using aligned engine")
            return _aligned(start, end, from_outline, to_outline)
    if opts.engine == "aligned":
        logger.debug("Outlines not command-aligned; using general engine")

    closed = opts.closed
    if closed is None:
        closed = is_closed_outline(from_outline) and is_closed_outline(to_outline)
    return _general(from_outline, to_outline, opts.max_segment_length, closed)


__all__ = [
    "DEFAULT_MAX_SEGMENT_LENGTH",
    "EngineChoice",
    "Interpolator",
    "MorphOptions",
    "aligned_compatible",
    "build_interpolator",
    "max_segment_length_for",
    "signature",
    "tokenize",
]
