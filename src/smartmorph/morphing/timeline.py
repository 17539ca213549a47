"""Per-shape tracks and the staggered timeline that samples them.

Tracks are built once per morph computation and never patched afterwards.
``TimelineComposer`` turns a global progress value into, per track, a local
progress (after layer, group and intra-layer delays), reshapes it with the
motion profile, splits it into the shape/colour/opacity/stroke channels and
produces a ``TrackSample``. Sampling is pure, so it can be called out of order
for scrubbing.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Literal, NamedTuple, Sequence

from ._color import lerp_color
from ._geometry import (
    bbox_from_outline,
    clamp01,
    format_number,
    is_closed_outline,
    lerp,
    outline_length,
    translate_outline,
    union_bbox,
)
from .appear import appear_start_outline, collapse_outline
from .bezier import EASE_IN, EASE_OUT, BezierCurve, resolve_easing
from .match import MatchResult, match_shapes
from .morph import Interpolator, MorphOptions, build_interpolator, max_segment_length_for
from .options import CHANNELS, MorphConfig
from .orbit import (
    OrbitBinding,
    OrbitCandidate,
    collect_orbit_candidates,
    orbit_point,
    parse_orbit_direction,
    parse_orbit_ref,
    resolve_orbit,
)
from .shapes import Shape

logger = logging.getLogger(__name__)

TrackKind = Literal["morph", "appear", "disappear"]

LAYER_AREA_THRESHOLDS = (0.35, 0.12)
LAYER_COUNT = 3

PROPERTY_PRESETS: dict[str, dict[str, tuple[float, float]]] = {
    "balanced": {
        "shape": (0.0, 1.0),
        "color": (0.0, 1.0),
        "opacity": (0.0, 1.0),
        "stroke": (0.0, 1.0),
    },
    "shape-first": {
        "shape": (0.0, 0.8),
        "color": (0.2, 1.0),
        "opacity": (0.0, 0.7),
        "stroke": (0.15, 1.0),
    },
    "color-lag": {
        "shape": (0.08, 1.0),
        "color": (0.3, 1.0),
        "opacity": (0.0, 1.0),
        "stroke": (0.08, 1.0),
    },
}


@dataclass(frozen=True, eq=False)
class Track:
    key: str
    kind: TrackKind
    start: Shape
    end: Shape
    interpolator: Interpolator
    order: int = 0
    area: float = 0.0
    importance: float = 0.0
    layer: int = 0
    layer_index: int = 0
    group_key: str = ""
    group_rank: int = 0
    delay_ms: float = 0.0
    orbit: OrbitBinding | None = None
    dash_length: float | None = None
    cost: float = 0.0

    @property
    def draw_on(self) -> bool:
        return self.dash_length is not None

    @property
    def reference(self) -> Shape:
        """The real (non-synthesized) shape that drives scheduling."""

        return self.start if self.kind == "disappear" else self.end


class ChannelProgress(NamedTuple):
    shape: float
    color: float
    opacity: float
    stroke: float


@dataclass(frozen=True)
class TrackSample:
    key: str
    kind: TrackKind
    outline: str
    fill: str | None
    stroke: str | None
    stroke_width: float | None
    fill_opacity: float | None
    stroke_opacity: float | None
    opacity: float
    dash_array: str | None = None
    dash_offset: float | None = None

    def to_attributes(self) -> dict[str, str]:
        """SVG-style presentation attributes for a downstream renderer."""

        attrs = {
            "d": self.outline,
            "fill": self.fill or "none",
            "stroke": self.stroke or "none",
            "opacity": format_number(self.opacity),
        }
        if self.stroke_width is not None:
            attrs["stroke-width"] = format_number(self.stroke_width)
        if self.fill_opacity is not None:
            attrs["fill-opacity"] = format_number(self.fill_opacity)
        if self.stroke_opacity is not None:
            attrs["stroke-opacity"] = format_number(self.stroke_opacity)
        if self.dash_array is not None:
            attrs["stroke-dasharray"] = self.dash_array
        if self.dash_offset is not None:
            attrs["stroke-dashoffset"] = format_number(self.dash_offset)
        return attrs


def _window(start: float, end: float) -> Callable[[float], float]:
    def progress(p: float) -> float:
        if p <= start:
            return 0.0
        if p >= end:
            return 1.0
        return (p - start) / (end - start)

    return progress


def channel_functions(preset: str, curves: dict[str, BezierCurve] | None = None) -> dict[str, Callable[[float], float]]:
    """One monotonic progress mapping per channel; explicit curves override the preset."""

    windows = PROPERTY_PRESETS[preset]
    curves = curves or {}
    return {channel: curves[channel] if channel in curves else _window(*windows[channel]) for channel in CHANNELS}


def _uniform(p: float, importance: float) -> float:
    return p


def _focus_first(p: float, importance: float) -> float:
    return lerp(p, EASE_OUT(p), importance)


def _detail_first(p: float, importance: float) -> float:
    return lerp(p, EASE_IN(p), 1.0 - importance)


MOTION_PROFILES: dict[str, Callable[[float, float], float]] = {
    "uniform": _uniform,
    "focus-first": _focus_first,
    "detail-first": _detail_first,
}


def _lerp_optional(a: float | None, b: float | None, t: float) -> float | None:
    if t <= 0.0:
        return a
    if t >= 1.0:
        return b
    if a is None or b is None:
        return a if t < 0.5 else b
    return lerp(a, b, t)


class TimelineComposer:
    """Samples every track of a morph at a global progress value."""

    def __init__(self, tracks: Sequence[Track], config: MorphConfig | None = None):
        self.config = config or MorphConfig()
        self.tracks: tuple[Track, ...] = tuple(tracks)
        self.duration_ms = self.config.duration_ms
        self.total_ms = self.duration_ms + max((t.delay_ms for t in self.tracks), default=0.0)
        self._easing = resolve_easing(self.config.easing)
        self._profile = MOTION_PROFILES[self.config.motion_profile]
        self._channels = channel_functions(self.config.property_timing, dict(self.config.property_curves))

    def local_progress(self, track: Track, progress: float) -> float:
        p = clamp01(progress)
        if p <= 0.0:
            return 0.0
        if p >= 1.0:
            return 1.0
        elapsed = self._easing(p) * self.total_ms
        local = clamp01((elapsed - track.delay_ms) / self.duration_ms)
        if 0.0 < local < 1.0:
            local = clamp01(self._profile(local, track.importance))
        return local

    def channel_progress(self, track: Track, progress: float) -> ChannelProgress:
        local = self.local_progress(track, progress)
        return ChannelProgress(*(clamp01(self._channels[channel](local)) for channel in CHANNELS))

    def _outline(self, track: Track, t: float) -> str:
        if t <= 0.0:
            return track.start.outline
        if t >= 1.0:
            return track.end.outline
        outline = track.interpolator(t)
        if track.orbit is None:
            return outline
        box = bbox_from_outline(outline)
        if box.empty:
            return outline
        x, y = orbit_point(track.orbit, t, snap=self.config.orbit_snap)
        return translate_outline(outline, x - box.cx, y - box.cy)

    def sample_track(self, track: Track, progress: float) -> TrackSample:
        ch = self.channel_progress(track, progress)
        start, end = track.start, track.end

        if track.dash_length is not None:
            length = track.dash_length
            dash_array: str | None = f"{format_number(length)} {format_number(length)}"
            dash_offset: float | None = 0.0 if ch.shape >= 1.0 else length * (1.0 - ch.shape)
        else:
            dash_array = start.dash_array if ch.stroke < 0.5 else end.dash_array
            dash_offset = None

        start_opacity = 1.0 if start.opacity is None else start.opacity
        end_opacity = 1.0 if end.opacity is None else end.opacity

        return TrackSample(
            key=track.key,
            kind=track.kind,
            outline=self._outline(track, ch.shape),
            fill=lerp_color(start.fill, end.fill, ch.color),
            stroke=lerp_color(start.stroke, end.stroke, ch.color),
            stroke_width=_lerp_optional(start.stroke_width, end.stroke_width, ch.stroke),
            fill_opacity=_lerp_optional(start.fill_opacity, end.fill_opacity, ch.stroke),
            stroke_opacity=_lerp_optional(start.stroke_opacity, end.stroke_opacity, ch.stroke),
            opacity=clamp01(lerp(start_opacity, end_opacity, ch.opacity)),
            dash_array=dash_array,
            dash_offset=dash_offset,
        )

    def sample_at_progress(self, progress: float) -> list[TrackSample]:
        return [self.sample_track(track, progress) for track in self.tracks]


def _center(outline: str) -> tuple[float, float]:
    return bbox_from_outline(outline).center


def _unique_key(base: str, seen: dict[str, int]) -> str:
    count = seen.get(base, 0)
    seen[base] = count + 1
    return base if count == 0 else f"{base}~{count}"


def _wants_draw_on(shape: Shape, outline_closed: bool) -> bool:
    return shape.has_stroke and not shape.has_fill and not outline_closed and not shape.has_dash


def _bind_orbit(
    start: Shape,
    end: Shape,
    candidates: Sequence[OrbitCandidate],
    config: MorphConfig,
) -> OrbitBinding | None:
    if config.orbit_mode == "off" or not candidates:
        return None
    c0 = _center(start.outline)
    c1 = _center(end.outline)
    if math.hypot(c1[0] - c0[0], c1[1] - c0[1]) < 1e-6:
        return None
    own = {start.stable_key, end.stable_key} - {None}
    usable = [c for c in candidates if c.source is not start and c.source is not end and c.id not in own]
    direction = (
        parse_orbit_direction(end.orbit_direction)
        or parse_orbit_direction(start.orbit_direction)
        or config.orbit_direction
    )
    return resolve_orbit(
        usable,
        c0,
        c1,
        mode=config.orbit_mode,  # type: ignore[arg-type]
        direction=direction,  # type: ignore[arg-type]
        tolerance=config.orbit_tolerance,
        manual_ref=parse_orbit_ref(end.orbit_ref) or parse_orbit_ref(start.orbit_ref),
    )


def _raw_tracks(
    start_shapes: Sequence[Shape] | None,
    end_shapes: Sequence[Shape],
    config: MorphConfig,
) -> tuple[list[Track], MatchResult | None]:
    options = MorphOptions(
        max_segment_length=max_segment_length_for(config.sample_points),
        engine=config.morph_engine,  # type: ignore[arg-type]
    )
    keys: dict[str, int] = {}
    tracks: list[Track] = []

    def appear(end: Shape) -> Track:
        length = outline_length(end.outline)
        if _wants_draw_on(end, is_closed_outline(end.outline)) and length > 0:
            start = replace(end, opacity=0.0)
            return Track(
                key=_unique_key(end.label, keys),
                kind="appear",
                start=start,
                end=end,
                interpolator=build_interpolator(end.outline, end.outline, replace(options, draw_on=True)),
                dash_length=length,
            )
        start = replace(end, outline=appear_start_outline(end.outline, config.appear_style), opacity=0.0)  # type: ignore[arg-type]
        return Track(
            key=_unique_key(end.label, keys),
            kind="appear",
            start=start,
            end=end,
            interpolator=build_interpolator(start.outline, end.outline, options),
        )

    if start_shapes is None:
        return [appear(e) for e in end_shapes], None

    result = match_shapes(start_shapes, end_shapes, config.match_weights)
    candidates: list[OrbitCandidate] = []
    if config.orbit_mode != "off":
        candidates = collect_orbit_candidates([*end_shapes, *start_shapes])

    for pair in result.pairs:
        tracks.append(
            Track(
                key=_unique_key(pair.end.label, keys),
                kind="morph",
                start=pair.start,
                end=pair.end,
                interpolator=build_interpolator(pair.start.outline, pair.end.outline, options),
                orbit=_bind_orbit(pair.start, pair.end, candidates, config),
                cost=pair.cost,
            )
        )
    tracks.extend(appear(e) for e in result.unmatched_end)
    for s in result.unmatched_start:
        end = replace(s, outline=collapse_outline(s.outline), opacity=0.0)
        tracks.append(
            Track(
                key=_unique_key(s.label, keys),
                kind="disappear",
                start=s,
                end=end,
                interpolator=build_interpolator(s.outline, end.outline, options),
            )
        )
    return tracks, result


def _area_layer(ratio: float) -> int:
    for layer, threshold in enumerate(LAYER_AREA_THRESHOLDS):
        if ratio > threshold:
            return layer
    return len(LAYER_AREA_THRESHOLDS)


def schedule(tracks: Sequence[Track], scene: Iterable[Shape], config: MorphConfig) -> list[Track]:
    """Assign layer, group rank, intra-layer index and total delay to every track."""

    if not tracks:
        return []
    scene_area = max(union_bbox(bbox_from_outline(s.outline) for s in scene).area, 1.0)
    areas = [bbox_from_outline(t.reference.outline).area for t in tracks]
    orders = [t.reference.order for t in tracks]

    if config.layer_strategy == "order":
        ranked = sorted(range(len(tracks)), key=lambda i: (orders[i], i))
        layers = [0] * len(tracks)
        for rank, idx in enumerate(ranked):
            layers[idx] = min(LAYER_COUNT - 1, rank * LAYER_COUNT // len(tracks))
    else:
        layers = [_area_layer(area / scene_area) for area in areas]

    group_keys = [t.reference.path_key or t.reference.first_class or t.reference.tag for t in tracks]
    group_first: dict[str, int] = {}
    for key, order in zip(group_keys, orders):
        group_first[key] = min(order, group_first.get(key, order))
    group_rank = {key: rank for rank, key in enumerate(sorted(group_first, key=lambda k: (group_first[k], k)))}

    layer_index = [0] * len(tracks)
    for layer in set(layers):
        members = sorted((i for i in range(len(tracks)) if layers[i] == layer), key=lambda i: (orders[i], i))
        for position, idx in enumerate(members):
            layer_index[idx] = position

    scheduled = []
    for i, track in enumerate(tracks):
        rank = group_rank[group_keys[i]]
        delay = (
            layers[i] * config.layer_stagger_ms
            + rank * config.group_stagger_ms
            + layer_index[i] * config.intra_stagger_ms
        )
        scheduled.append(
            replace(
                track,
                order=orders[i],
                area=areas[i],
                importance=clamp01(areas[i] / scene_area),
                layer=layers[i],
                layer_index=layer_index[i],
                group_key=group_keys[i],
                group_rank=rank,
                delay_ms=delay,
            )
        )
    return scheduled


def build_tracks(
    start_shapes: Sequence[Shape] | None,
    end_shapes: Sequence[Shape],
    config: MorphConfig | None = None,
) -> tuple[list[Track], MatchResult | None]:
    """Match the scenes and build every scheduled track. ``start_shapes=None`` means appear mode."""

    cfg = config or MorphConfig()
    end_list = list(end_shapes)
    start_list = None if start_shapes is None else list(start_shapes)
    tracks, result = _raw_tracks(start_list, end_list, cfg)
    scene = end_list if end_list else (start_list or [])
    tracks = schedule(tracks, scene, cfg)
    logger.debug("Built %d tracks", len(tracks))
    return tracks, result


__all__ = [
    "ChannelProgress",
    "LAYER_AREA_THRESHOLDS",
    "MOTION_PROFILES",
    "PROPERTY_PRESETS",
    "TimelineComposer",
    "Track",
    "TrackKind",
    "TrackSample",
    "build_tracks",
    "channel_functions",
    "schedule",
]
