"""A dot sliding a quarter turn along a ring instead of cutting across it."""

from __future__ import annotations

from smartmorph import MorphConfig, Shape, build_morph
from smartmorph.morphing.shapes import circle_outline


def build():
    ring = Shape(circle_outline(100, 100, 50), stroke="#888888", stroke_width=2, id="ring")
    start = [ring, Shape("M145 95 H155 V105 H145 Z", fill="#e33d3d", id="dot")]
    end = [ring, Shape("M95 145 H105 V155 H95 Z", fill="#e33d3d", id="dot", orbit_direction="shortest")]
    return build_morph(start, end, MorphConfig(layer_stagger_ms=0, intra_stagger_ms=0))
