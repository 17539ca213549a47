"""Example smartmorph script: two small scenes and a few samples."""

from __future__ import annotations

from smartmorph import MorphConfig, Shape, build_morph


def build():
    """Move a square across the canvas while a circle fades in beside it."""

    start = [Shape("M0 0 H40 V40 H0 Z", fill="#5a7bff", id="box")]
    end = [
        Shape("M120 0 H160 V40 H120 Z", fill="#ff7a18", id="box"),
        Shape("M60 20 A20 20 0 1 0 100 20 A20 20 0 1 0 60 20 Z", fill="#2bb673", id="dot"),
    ]
    return build_morph(start, end, MorphConfig(easing="ease-in-out"))


if __name__ == "__main__":
    morph = build()
    for progress in (0.0, 0.25, 0.5, 0.75, 1.0):
        for sample in morph.sample(progress):
            print(f"{progress:.2f} {sample.key:>4} {sample.to_attributes()}")
