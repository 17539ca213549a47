from __future__ import annotations

import pytest

from smartmorph.morphing._color import Rgba, lerp_color, parse_color, rgba_distance


def test_parse_hex_forms():
    assert parse_color("#fff") == Rgba(255.0, 255.0, 255.0, 1.0)
    assert parse_color("#ff000080").a == pytest.approx(128 / 255)
    assert parse_color("#12345") is None


def test_hex_matches_pyvista():
    pv = pytest.importorskip("pyvista")
    assert parse_color("#336699")[:3] == tuple(float(c) for c in pv.Color("#336699").int_rgb)
    assert parse_color("#f008") == Rgba(255.0, 0.0, 0.0, 136 / 255)
    assert parse_color("#zzzzzz") is None


def test_parse_rgb_functions():
    assert parse_color("rgb(10, 20, 30)") == Rgba(10.0, 20.0, 30.0, 1.0)
    assert parse_color("rgba(0 0 0 / 50%)") == Rgba(0.0, 0.0, 0.0, 0.5)
    assert parse_color("rgb(100%, 0%, 0%)") == Rgba(255.0, 0.0, 0.0, 1.0)


def test_parse_named_colour():
    assert parse_color("red") == Rgba(255.0, 0.0, 0.0, 1.0)
    assert parse_color("definitelynotacolour") is None


def test_paint_keywords_are_no_colour():
    for value in (None, "", "none", "transparent", "currentColor", "url(#grad)"):
        assert parse_color(value) is None


def test_distance_bounds():
    black = parse_color("#000")
    white = parse_color("#fff")
    assert rgba_distance(black, black) == 0.0
    assert 0.8 < rgba_distance(black, white) < 1.0
    assert rgba_distance(None, None) == 0.0
    assert rgba_distance(black, None) == 1.0


def test_lerp_color_returns_endpoint_strings_exactly():
    assert lerp_color("#ff0000", "#0000ff", 0.0) == "#ff0000"
    assert lerp_color("#ff0000", "#0000ff", 1.0) == "#0000ff"


def test_lerp_color_midpoint():
    assert lerp_color("#ff0000", "#0000ff", 0.5) == "rgba(128, 0, 128, 1)"


def test_lerp_color_switches_when_one_side_is_unresolvable():
    assert lerp_color("none", "#00ff00", 0.4) == "none"
    assert lerp_color("none", "#00ff00", 0.6) == "#00ff00"
    assert lerp_color(None, None, 0.5) is None
