from __future__ import annotations

import pytest

from smartmorph import MorphConfig, Shape, build_morph
from smartmorph.morphing.driver import PlaybackDriver, PlaybackError, TweenDriver, make_driver
from tests.helpers import rect_path


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += seconds


class FakeTween:
    def __init__(self) -> None:
        self.calls = []
        self.killed = False

    def __call__(self, duration_s, on_update, on_complete):
        self.calls.append(duration_s)
        self.on_update = on_update
        self.on_complete = on_complete
        return self

    def kill(self) -> None:
        self.killed = True


def _morph(**config):
    return build_morph(
        [Shape(rect_path(0, 0, 10, 10), fill="#000")],
        [Shape(rect_path(100, 0, 10, 10), fill="#000")],
        MorphConfig(**config),
    )


def test_clock_driver_ticks_through_the_timeline():
    clock = FakeClock()
    frames = []
    driver = PlaybackDriver(_morph(), frames.append, clock=clock)
    driver.play()
    assert driver.playing
    assert driver.tick(0.3) is True
    assert driver.progress == pytest.approx(0.5)
    assert frames[-1][0].outline == "M50 0 H60 V10 H50 Z"
    assert driver.tick(0.9) is False
    assert driver.progress == 1.0
    assert not driver.playing


def test_run_blocks_until_finished():
    clock = FakeClock()
    seen = []
    driver = PlaybackDriver(_morph(), lambda samples: None, on_progress=seen.append, clock=clock)
    driver.run(target_fps=10, sleep=clock.sleep)
    assert seen[0] == 0.0
    assert seen[-1] == 1.0
    assert seen == sorted(seen)
    with pytest.raises(ValueError):
        driver.run(target_fps=0)


def test_pause_and_resume_continue_from_current_progress():
    clock = FakeClock()
    driver = PlaybackDriver(_morph(), lambda samples: None, clock=clock)
    driver.play()
    clock.now = 0.3
    driver.pause()
    assert driver.progress == pytest.approx(0.5)
    clock.now = 10.0
    driver.play()
    driver.tick(10.15)
    assert driver.progress == pytest.approx(0.75)


def test_seek_renders_immediately_and_can_go_backwards():
    frames = []
    driver = PlaybackDriver(_morph(), frames.append, clock=FakeClock())
    driver.seek(0.8)
    driver.seek(0.2)
    assert len(frames) == 2
    assert driver.progress == pytest.approx(0.2)
    driver.seek(5)
    assert driver.progress == 1.0


def test_progress_callback_from_config():
    seen = []
    morph = _morph(on_progress=seen.append)
    driver = PlaybackDriver(morph, lambda samples: None, clock=FakeClock())
    driver.seek(0.4)
    assert seen == [0.4]


def test_tween_driver_delegates_to_factory():
    tween = FakeTween()
    frames = []
    driver = TweenDriver(_morph(), frames.append, tween)
    driver.play()
    assert tween.calls == [pytest.approx(0.6)]
    tween.on_update(0.5)
    assert driver.progress == pytest.approx(0.5)
    assert frames[-1][0].outline == "M50 0 H60 V10 H50 Z"
    tween.on_complete()
    assert not driver.playing


def test_tween_driver_pause_kills_tween():
    tween = FakeTween()
    driver = TweenDriver(_morph(), lambda samples: None, tween)
    driver.play()
    driver.pause()
    assert tween.killed
    assert not driver.playing


def test_tween_driver_without_factory():
    driver = TweenDriver(_morph(), lambda samples: None, None)
    with pytest.raises(PlaybackError):
        driver.play()


def test_make_driver_dispatches_on_timeline():
    assert isinstance(make_driver(_morph(), lambda s: None), PlaybackDriver)
    assert isinstance(make_driver(_morph(timeline="gsap"), lambda s: None, FakeTween()), TweenDriver)
    with pytest.raises(PlaybackError):
        make_driver(_morph(timeline="tween"), lambda s: None)
