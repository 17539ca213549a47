from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .match import MatchResult
from .options import MorphConfig
from .shapes import Shape
from .timeline import TimelineComposer, Track, TrackSample, build_tracks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Morph:
    """A built morph: immutable tracks plus the composer that samples them."""

    tracks: tuple[Track, ...]
    composer: TimelineComposer
    match: MatchResult | None
    config: MorphConfig

    @property
    def total_ms(self) -> float:
        return self.composer.total_ms

    @property
    def appear_mode(self) -> bool:
        return self.match is None

    def sample(self, progress: float) -> list[TrackSample]:
        return self.composer.sample_at_progress(progress)

    def sample_track(self, track: Track, progress: float) -> TrackSample:
        return self.composer.sample_track(track, progress)

    def track(self, key: str) -> Track:
        for track in self.tracks:
            if track.key == key:
                return track
        raise KeyError(key)


def build_morph(
    start_shapes: Sequence[Shape] | None,
    end_shapes: Sequence[Shape],
    config: MorphConfig | None = None,
) -> Morph:
    """Match two scenes and return a pure sampling handle.

    Passing ``None`` for ``start_shapes`` animates the end scene in from
    nothing ("appear" mode).
    """

    cfg = config or MorphConfig()
    tracks, match = build_tracks(start_shapes, end_shapes, cfg)
    composer = TimelineComposer(tracks, cfg)
    logger.debug("Morph built: %d tracks over %.1f ms", len(tracks), composer.total_ms)
    return Morph(tracks=composer.tracks, composer=composer, match=match, config=cfg)


__all__ = ["Morph", "build_morph"]
