"""Layered morph: large shapes lead, details follow, colour lags behind geometry."""

from __future__ import annotations

from smartmorph import MorphConfig, Shape, build_morph


def build():
    start = [
        Shape("M0 0 H100 V100 H0 Z", fill="#203040", id="panel", path_key="svg/g#bg", order=0),
        Shape("M10 10 H20 V20 H10 Z", fill="#ffffff", classes="light", path_key="svg/g#fg", order=1),
        Shape("M30 10 H40 V20 H30 Z", fill="#ffffff", classes="light", path_key="svg/g#fg", order=2),
    ]
    end = [
        Shape("M0 0 H120 V80 H0 Z", fill="#402030", id="panel", path_key="svg/g#bg", order=0),
        Shape("M80 50 H95 V65 H80 Z", fill="#ffd700", classes="light", path_key="svg/g#fg", order=1),
        Shape("M60 50 H75 V65 H60 Z", fill="#ffd700", classes="light", path_key="svg/g#fg", order=2),
    ]
    config = MorphConfig(
        property_timing="color-lag",
        group_stagger_ms=40,
        match_weights={"position": 1.0, "color": 0.0},
    )
    return build_morph(start, end, config)
