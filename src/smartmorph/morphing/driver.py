"""Turn wall-clock time (or an external tween) into morph samples.

Drivers are thin: they own a progress value, call ``Morph.sample`` once per
frame and hand the result to a renderer callback. Progress may move
backwards (scrubbing); the morph itself holds no playback state.
"""

from __future__ import annotations

import time
from typing import Callable, Protocol

from ._geometry import clamp01
from .runtime import Morph
from .timeline import TrackSample

Renderer = Callable[[list[TrackSample]], None]
ProgressCallback = Callable[[float], None]
Clock = Callable[[], float]


class PlaybackError(RuntimeError):
    """Raised when a driver cannot run with the given collaborators."""


class TweenHandle(Protocol):
    def kill(self) -> None: ...


TweenFactory = Callable[[float, Callable[[float], None], Callable[[], None]], TweenHandle]


class _BaseDriver:
    def __init__(self, morph: Morph, render: Renderer, on_progress: ProgressCallback | None = None):
        self.morph = morph
        self._render = render
        self._on_progress = on_progress or morph.config.on_progress
        self.progress = 0.0

    @property
    def duration_ms(self) -> float:
        return self.morph.total_ms

    def _emit(self) -> None:
        self._render(self.morph.sample(self.progress))
        if self._on_progress is not None:
            self._on_progress(self.progress)


class PlaybackDriver(_BaseDriver):
    """Advance progress by polling a clock from a per-frame callback."""

    def __init__(
        self,
        morph: Morph,
        render: Renderer,
        on_progress: ProgressCallback | None = None,
        clock: Clock = time.monotonic,
    ):
        super().__init__(morph, render, on_progress)
        self._clock = clock
        self._started_at: float | None = None
        self._from = 0.0

    @property
    def playing(self) -> bool:
        return self._started_at is not None

    def play(self) -> None:
        if self.playing:
            return
        if self.progress >= 1.0:
            self.progress = 0.0
        self._from = self.progress
        self._started_at = self._clock()

    def pause(self) -> None:
        if self.playing:
            self.tick()
        self._started_at = None

    def stop(self) -> None:
        self._started_at = None

    def seek(self, progress: float) -> None:
        self.progress = clamp01(progress)
        if self.playing:
            self._from = self.progress
            self._started_at = self._clock()
        self._emit()

    def tick(self, now: float | None = None) -> bool:
        """Render the frame for ``now``; returns whether playback continues."""

        if self._started_at is None:
            return False
        now = self._clock() if now is None else now
        elapsed_ms = max(0.0, (now - self._started_at) * 1000.0)
        self.progress = clamp01(self._from + elapsed_ms / self.duration_ms)
        self._emit()
        if self.progress >= 1.0:
            self._started_at = None
        return self.playing

    def run(self, target_fps: int = 60, sleep: Callable[[float], None] = time.sleep) -> None:
        """Play to the end, blocking, at roughly ``target_fps`` frames per second."""

        if target_fps <= 0:
            raise ValueError("target_fps must be positive.")
        self.play()
        self._emit()
        while self.tick():
            sleep(1.0 / target_fps)


class TweenDriver(_BaseDriver):
    """Delegate the frame loop to an external tweening engine.

    ``tween_factory(duration_s, on_update, on_complete)`` must start a tween
    from 0 to 1 that calls ``on_update`` with the tween value every frame and
    return a handle with ``kill()``. The factory is injected per driver; no
    tween engine state is shared between morphs.
    """

    def __init__(
        self,
        morph: Morph,
        render: Renderer,
        tween_factory: TweenFactory | None,
        on_progress: ProgressCallback | None = None,
    ):
        super().__init__(morph, render, on_progress)
        self._factory = tween_factory
        self._tween: TweenHandle | None = None

    @property
    def playing(self) -> bool:
        return self._tween is not None

    def play(self) -> None:
        if self._factory is None:
            raise PlaybackError("TweenDriver needs a tween factory to play.")
        if self.playing:
            return
        if self.progress >= 1.0:
            self.progress = 0.0
        origin = self.progress
        remaining_s = self.duration_ms * (1.0 - origin) / 1000.0

        def on_update(value: float) -> None:
            self.progress = clamp01(origin + (1.0 - origin) * clamp01(value))
            self._emit()

        def on_complete() -> None:
            self._tween = None

        self._tween = self._factory(remaining_s, on_update, on_complete)

    def pause(self) -> None:
        if self._tween is not None:
            self._tween.kill()
        self._tween = None

    stop = pause

    def seek(self, progress: float) -> None:
        self.pause()
        self.progress = clamp01(progress)
        self._emit()


def make_driver(
    morph: Morph,
    render: Renderer,
    tween_factory: TweenFactory | None = None,
    clock: Clock = time.monotonic,
) -> PlaybackDriver | TweenDriver:
    """Pick the driver named by ``morph.config.timeline``."""

    if morph.config.timeline == "tween":
        if tween_factory is None:
            raise PlaybackError("timeline='tween' requires a tween_factory.")
        return TweenDriver(morph, render, tween_factory)
    return PlaybackDriver(morph, render, clock=clock)


__all__ = [
    "PlaybackDriver",
    "PlaybackError",
    "Renderer",
    "TweenDriver",
    "TweenFactory",
    "TweenHandle",
    "make_driver",
]
