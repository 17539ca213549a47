"""Appear mode: open strokes draw themselves on, filled shapes grow from their centre."""

from __future__ import annotations

from smartmorph import MorphConfig, Shape, build_morph


def build():
    scene = [
        Shape("M0 0 H200 V120 H0 Z", fill="#f4f1ea", id="card", order=0),
        Shape("M20 100 C60 20 140 20 180 100", stroke="#1f2a44", stroke_width=3, id="arc", order=1),
        Shape("M90 50 H110 V70 H90 Z", fill="#ff7a18", id="sun", order=2),
    ]
    return build_morph(None, scene, MorphConfig(motion_profile="focus-first"))
