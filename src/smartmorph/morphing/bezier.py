"""Cubic-bezier timing curves.

``evaluate`` solves ``x(u) = fraction`` for the curve parameter with
Newton-Raphson and falls back to bisection, then returns ``y(u)``. Every
timing computation in the package (global easing, motion profiles,
per-property curves) goes through it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Mapping, Sequence, Union

NEWTON_ITERATIONS = 8
NEWTON_MIN_SLOPE = 1e-6
SUBDIVISION_PRECISION = 1e-7
SUBDIVISION_MAX_ITERATIONS = 12


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


@dataclass(frozen=True)
class BezierCurve:
    """Control points ``(x1, y1)`` and ``(x2, y2)`` of a timing curve anchored at (0,0) and (1,1)."""

    x1: float
    y1: float
    x2: float
    y2: float

    def __post_init__(self) -> None:
        for name in ("x1", "y1", "x2", "y2"):
            value = getattr(self, name)
            try:
                value = float(value)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"{name} must be a number.") from exc
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite.")
            object.__setattr__(self, name, value)

    def __call__(self, fraction: float) -> float:
        return evaluate(fraction, self)

    @classmethod
    def from_value(cls, value: "CurveLike") -> "BezierCurve":
        """Build a curve from a preset name, a 4-sequence or an ``{x1, y1, x2, y2}`` mapping."""

        if isinstance(value, BezierCurve):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            if key not in EASING_PRESETS:
                raise ValueError(f"Unknown easing preset {value!r}.")
            return EASING_PRESETS[key]
        if isinstance(value, Mapping):
            try:
                return cls(value["x1"], value["y1"], value["x2"], value["y2"])
            except KeyError as exc:
                raise ValueError(f"Bezier mapping is missing {exc.args[0]!r}.") from exc
        values = list(value)
        if len(values) != 4:
            raise ValueError("A bezier curve needs exactly four control values.")
        return cls(*values)


CurveLike = Union[BezierCurve, str, Sequence[float], Mapping[str, float]]

LINEAR = BezierCurve(0.0, 0.0, 1.0, 1.0)
EASE = BezierCurve(0.25, 0.1, 0.25, 1.0)
EASE_IN = BezierCurve(0.42, 0.0, 1.0, 1.0)
EASE_OUT = BezierCurve(0.0, 0.0, 0.58, 1.0)
EASE_IN_OUT = BezierCurve(0.42, 0.0, 0.58, 1.0)

EASING_PRESETS: dict[str, BezierCurve] = {
    "linear": LINEAR,
    "ease": EASE,
    "ease-in": EASE_IN,
    "ease-out": EASE_OUT,
    "ease-in-out": EASE_IN_OUT,
    "fast-out-slow-in": BezierCurve(0.4, 0.0, 0.2, 1.0),
    "slow-in-fast-out": BezierCurve(0.55, 0.0, 1.0, 0.45),
    "symmetric": BezierCurve(0.45, 0.0, 0.55, 1.0),
}


def _coefficients(p1: float, p2: float) -> tuple[float, float, float]:
    c = 3.0 * p1
    b = 3.0 * (p2 - p1) - c
    a = 1.0 - c - b
    return a, b, c


def _sample(u: float, a: float, b: float, c: float) -> float:
    return ((a * u + b) * u + c) * u


def _sample_derivative(u: float, a: float, b: float, c: float) -> float:
    return (3.0 * a * u + 2.0 * b) * u + c


def _solve_x(x: float, a: float, b: float, c: float) -> float:
    u = x
    for _ in range(NEWTON_ITERATIONS):
        error = _sample(u, a, b, c) - x
        if abs(error) < SUBDIVISION_PRECISION:
            return u
        slope = _sample_derivative(u, a, b, c)
        if abs(slope) < NEWTON_MIN_SLOPE:
            break
        u -= error / slope

    lo, hi = 0.0, 1.0
    u = _clamp01(u)
    for _ in range(SUBDIVISION_MAX_ITERATIONS):
        delta = _sample(u, a, b, c) - x
        if abs(delta) < SUBDIVISION_PRECISION:
            return u
        if delta > 0:
            hi = u
        else:
            lo = u
        u = (lo + hi) / 2.0
    return u


def evaluate(fraction: float, curve: BezierCurve) -> float:
    """Return the eased value of ``fraction`` on ``curve``.

    The input is clamped to [0, 1]; 0 and 1 are returned exactly without
    iterating.
    """

    x = float(fraction)
    if x != x:
        x = 0.0
    x = _clamp01(x)
    if x == 0.0 or x == 1.0:
        return x

    ax, bx, cx = _coefficients(_clamp01(curve.x1), _clamp01(curve.x2))
    ay, by, cy = _coefficients(_clamp01(curve.y1), _clamp01(curve.y2))
    u = _solve_x(x, ax, bx, cx)
    return _clamp01(_sample(u, ay, by, cy))


EasingFunction = Callable[[float], float]


def resolve_easing(value: "CurveLike | EasingFunction | None") -> EasingFunction:
    """Turn an easing option into a callable once, at build time."""

    if value is None:
        return LINEAR
    if callable(value) and not isinstance(value, BezierCurve):
        fn = value

        def custom(fraction: float) -> float:
            t = _clamp01(float(fraction))
            if t == 0.0 or t == 1.0:
                return t
            return _clamp01(float(fn(t)))

        return custom
    return BezierCurve.from_value(value)


__all__ = [
    "BezierCurve",
    "CurveLike",
    "EASE",
    "EASE_IN",
    "EASE_IN_OUT",
    "EASE_OUT",
    "EASING_PRESETS",
    "EasingFunction",
    "LINEAR",
    "evaluate",
    "resolve_easing",
]
