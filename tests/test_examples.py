from __future__ import annotations

import importlib.util
from pathlib import Path

import pytest

from smartmorph.io.shapes import load_shapes
from smartmorph.morphing.runtime import Morph, build_morph

ROOT = Path(__file__).resolve().parents[1]
EXAMPLES = sorted((ROOT / "docs" / "examples" / "morph").glob("*_example.py")) + [ROOT / "examples" / "hello_morph.py"]


def _build(path: Path) -> Morph:
    spec = importlib.util.spec_from_file_location(f"example_{path.stem}", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.build()


@pytest.mark.parametrize("path", EXAMPLES, ids=lambda p: p.stem)
def test_examples_build_and_sample(path):
    morph = _build(path)
    assert morph.tracks
    for progress in (0.0, 0.5, 1.0):
        samples = morph.sample(progress)
        assert len(samples) == len(morph.tracks)
        assert all(0.0 <= s.opacity <= 1.0 for s in samples)


def test_orbit_example_binds_the_ring():
    morph = _build(ROOT / "docs" / "examples" / "morph" / "orbit_example.py")
    assert morph.track("dot").orbit is not None


def test_scene_files_load():
    scenes = ROOT / "docs" / "examples" / "scenes"
    start = load_shapes(scenes / "start.json")
    end = load_shapes(scenes / "end.json")
    morph = build_morph(start, end)
    kinds = sorted(t.kind for t in morph.tracks)
    assert kinds == ["appear", "disappear", "morph"]
