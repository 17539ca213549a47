from __future__ import annotations

import numpy as np
import pytest

from smartmorph.morphing._geometry import (
    best_rotation,
    bbox_from_outline,
    ensure_winding,
    format_number,
    is_closed_outline,
    lerp,
    outline_length,
    outline_points,
    resample_loop,
    resample_open,
    signed_area,
    translate_outline,
    union_bbox,
)
from smartmorph.morphing.shapes import Shape, circle_outline, rect_outline


def test_format_number():
    assert format_number(10.0) == "10"
    assert format_number(0.1234567) == "0.123457"
    assert format_number(-1e-9) == "0"
    assert format_number(-2.5) == "-2.5"


def test_lerp_is_exact_at_endpoints():
    a, b = 0.1, 0.7
    assert lerp(a, b, 0.0) == a
    assert lerp(a, b, 1.0) == b


def test_bbox_and_union():
    box = bbox_from_outline("M0 0 H10 V20 H0 Z")
    assert (box.width, box.height, box.center) == (10.0, 20.0, (5.0, 10.0))
    merged = union_bbox([box, bbox_from_outline("M30 -5 L40 5")])
    assert (merged.min_x, merged.min_y, merged.max_x, merged.max_y) == (0.0, -5.0, 40.0, 20.0)


def test_malformed_outline_gives_empty_box():
    box = bbox_from_outline("   ")
    assert box.empty
    assert box.area == 0.0
    assert outline_length("") == 0.0


def test_outline_length():
    assert outline_length("M0 0 L3 4") == pytest.approx(5.0)
    assert outline_length(circle_outline(0, 0, 10)) == pytest.approx(2 * np.pi * 10, rel=1e-3)


def test_is_closed_outline():
    assert is_closed_outline("M0 0 L1 1 z")
    assert not is_closed_outline("M0 0 L1 1")
    assert not is_closed_outline(None)


def test_outline_points_respects_segment_length():
    pts = outline_points("M0 0 L10 0", max_segment_length=2.0)
    assert pts.shape == (6, 2)
    assert np.allclose(pts[-1], [10.0, 0.0])
    assert np.all(np.diff(pts[:, 0]) <= 2.0 + 1e-9)


def test_resample_open_keeps_ends():
    pts = np.array([[0.0, 0.0], [1.0, 0.0], [10.0, 0.0]])
    out = resample_open(pts, 11)
    assert np.allclose(out[:, 0], np.arange(11))


def test_resample_loop_even_spacing():
    square = np.array([[0.0, 0.0], [4.0, 0.0], [4.0, 4.0], [0.0, 4.0]])
    out = resample_loop(square, 8)
    assert out.shape == (8, 2)
    closed = np.vstack([out, out[0]])
    spacing = np.linalg.norm(np.diff(closed, axis=0), axis=1)
    assert np.allclose(spacing, 2.0)


def test_winding_and_rotation():
    ring = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
    assert signed_area(ring) > 0
    flipped = ensure_winding(ring, clockwise=True)
    assert signed_area(flipped) < 0
    rolled = np.roll(ring, 2, axis=0)
    assert np.allclose(best_rotation(ring, rolled), ring)


def test_translate_outline():
    moved = translate_outline("M0 0 L10 0", 5, 7)
    box = bbox_from_outline(moved)
    assert (box.min_x, box.min_y, box.max_x) == (5.0, 7.0, 15.0)


def test_translate_outline_keeps_commands_and_closing():
    assert translate_outline("M0 0 H10 V10 H0 Z", 5, 5) == "M5 5 H15 V15 H5 Z"
    assert translate_outline("M0 0 A5 5 0 1 0 10 0 Z", 1.5, 2) == "M1.5 2 A5 5 0 1 0 11.5 2 Z"
    assert translate_outline("m0 0 l10 0 z", 3, 4) == "m3 4 l10 0 z"
    assert translate_outline("not a path", 1, 1) == "not a path"


def test_primitive_outlines():
    circle = bbox_from_outline(circle_outline(100, 100, 50))
    assert circle.center == pytest.approx((100.0, 100.0))
    assert circle.width == pytest.approx(100.0)
    rect = bbox_from_outline(rect_outline(bbox_from_outline("M0 0 H20 V10 H0 Z"), corner_radius=2))
    assert (rect.width, rect.height) == pytest.approx((20.0, 10.0))


def test_shape_style_and_keys():
    shape = Shape("M0 0 L1 1", stroke="#000", classes="Wheel front")
    assert shape.style_key == "s"
    assert shape.classes == ("Wheel", "front")
    assert shape.class_tokens == ["wheel", "front"]
    assert shape.stable_key is None
    assert shape.label == "path#0"
    named = Shape("M0 0 L1 1", fill="red", stroke="none", name="hub")
    assert named.style_key == "f"
    assert named.stable_key == "hub"
