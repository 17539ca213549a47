"""smartmorph – deterministic shape matching and morph timelines for vector scenes."""

from __future__ import annotations

from .morphing import MorphConfig, Shape, build_morph

__all__ = ["__version__", "MorphConfig", "Shape", "build_morph"]

__version__ = "0.1.0"
