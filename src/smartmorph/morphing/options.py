from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Mapping

from .appear import AppearStyle
from .bezier import BezierCurve, CurveLike, EasingFunction
from .match import MatchWeights
from .morph import EngineChoice
from .orbit import OrbitDirection, OrbitMode

LayerStrategy = Literal["area", "order"]
MotionProfile = Literal["uniform", "focus-first", "detail-first"]
PropertyPreset = Literal["balanced", "shape-first", "color-lag"]
TimelineDriver = Literal["clock", "tween"]

CHANNELS = ("shape", "color", "opacity", "stroke")

_CHOICES: dict[str, dict[str, str]] = {
    "appear_style": {
        "collapse-to-centroid": "collapse-to-centroid",
        "collapse": "collapse-to-centroid",
        "centroid": "collapse-to-centroid",
        "bbox-to-shape": "bbox-to-shape",
        "bbox": "bbox-to-shape",
    },
    "morph_engine": {
        "auto": "auto",
        "general": "general",
        "flubber": "general",
        "aligned": "aligned",
        "d3": "aligned",
    },
    "layer_strategy": {"area": "area", "order": "order"},
    "orbit_mode": {"off": "off", "auto": "auto", "auto+manual": "auto+manual", "manual": "auto+manual"},
    "orbit_direction": {"cw": "cw", "ccw": "ccw", "shortest": "shortest"},
    "motion_profile": {"uniform": "uniform", "focus-first": "focus-first", "detail-first": "detail-first"},
    "property_timing": {"balanced": "balanced", "shape-first": "shape-first", "color-lag": "color-lag"},
    "timeline": {"clock": "clock", "raf": "clock", "tween": "tween", "gsap": "tween"},
}


def normalize_choice(option: str, value: Any) -> str:
    """Resolve a case-insensitive option tag (or alias) to its canonical value."""

    table = _CHOICES[option]
    key = str(value).strip().lower()
    if key not in table:
        allowed = ", ".join(sorted(set(table.values())))
        raise ValueError(f"{option} must be one of: {allowed} (got {value!r}).")
    return table[key]


@dataclass(frozen=True)
class MorphConfig:
    """Everything a morph computation can be tuned with.

    Tags are normalized once here so the rest of the package can dispatch on
    canonical values. Instances are read-only inputs and never mutated.
    """

    duration_ms: float = 600.0
    easing: CurveLike | EasingFunction | None = "linear"
    sample_points: int | None = None
    match_weights: MatchWeights = field(default_factory=MatchWeights)
    appear_style: AppearStyle = "collapse-to-centroid"
    morph_engine: EngineChoice = "auto"
    layer_strategy: LayerStrategy = "area"
    layer_stagger_ms: float = 70.0
    group_stagger_ms: float = 0.0
    intra_stagger_ms: float = 18.0
    orbit_mode: OrbitMode = "auto+manual"
    orbit_direction: OrbitDirection = "shortest"
    orbit_tolerance: float = 6.0
    orbit_snap: bool = True
    motion_profile: MotionProfile = "uniform"
    property_timing: PropertyPreset = "balanced"
    property_curves: Mapping[str, BezierCurve] = field(default_factory=dict)
    on_progress: Callable[[float], None] | None = None
    timeline: TimelineDriver = "clock"

    def __post_init__(self) -> None:
        for option in _CHOICES:
            object.__setattr__(self, option, normalize_choice(option, getattr(self, option)))

        duration = float(self.duration_ms)
        if not math.isfinite(duration) or duration <= 0:
            raise ValueError("duration_ms must be positive.")
        object.__setattr__(self, "duration_ms", duration)

        for name in ("layer_stagger_ms", "group_stagger_ms", "intra_stagger_ms", "orbit_tolerance"):
            value = float(getattr(self, name))
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be a non-negative number.")
            object.__setattr__(self, name, value)

        if self.sample_points is not None:
            points = int(self.sample_points)
            if points <= 0:
                raise ValueError("sample_points must be positive.")
            object.__setattr__(self, "sample_points", points)

        if isinstance(self.match_weights, Mapping):
            object.__setattr__(self, "match_weights", MatchWeights.from_mapping(dict(self.match_weights)))

        curves: dict[str, BezierCurve] = {}
        for channel, curve in dict(self.property_curves or {}).items():
            key = str(channel).strip().lower()
            if key not in CHANNELS:
                raise ValueError(f"Unknown property channel {channel!r}; expected one of {', '.join(CHANNELS)}.")
            curves[key] = BezierCurve.from_value(curve)
        object.__setattr__(self, "property_curves", curves)

        if isinstance(self.easing, (str, list, tuple, Mapping)):
            object.__setattr__(self, "easing", BezierCurve.from_value(self.easing))


__all__ = [
    "CHANNELS",
    "LayerStrategy",
    "MorphConfig",
    "MotionProfile",
    "PropertyPreset",
    "TimelineDriver",
    "normalize_choice",
]
