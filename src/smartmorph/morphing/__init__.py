"""Morph core: matching, interpolation engines, orbits, and timeline composition."""

from __future__ import annotations

from .bezier import BezierCurve, evaluate
from .driver import PlaybackDriver, TweenDriver, make_driver
from .match import MatchResult, MatchWeights, MatchedPair, match_shapes
from .morph import MorphOptions, build_interpolator
from .options import MorphConfig
from .orbit import OrbitBinding, orbit_point, resolve_orbit
from .runtime import Morph, build_morph
from .shapes import Shape
from .timeline import TimelineComposer, Track, TrackSample, build_tracks

__all__ = [
    "BezierCurve",
    "evaluate",
    "PlaybackDriver",
    "TweenDriver",
    "make_driver",
    "MatchResult",
    "MatchWeights",
    "MatchedPair",
    "match_shapes",
    "MorphOptions",
    "build_interpolator",
    "MorphConfig",
    "OrbitBinding",
    "orbit_point",
    "resolve_orbit",
    "Morph",
    "build_morph",
    "Shape",
    "TimelineComposer",
    "Track",
    "TrackSample",
    "build_tracks",
]
