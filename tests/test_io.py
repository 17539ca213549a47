from __future__ import annotations

import json
import logging

import pytest

from smartmorph import build_morph
from smartmorph.io.shapes import ShapeLoadError, dump_samples, load_shapes, shape_from_record


def test_load_list_of_records(write_scene):
    path = write_scene(
        "scene.json",
        [
            {"d": "M0 0 H10 V10 H0 Z", "fill": "#000", "id": "box", "class": "a b"},
            {"outline": "M0 0 L5 5", "stroke": "red", "stroke-width": "2", "data-orbit": "#ring"},
        ],
    )
    shapes = load_shapes(path)
    assert [s.order for s in shapes] == [0, 1]
    assert shapes[0].id == "box"
    assert shapes[0].classes == ("a", "b")
    assert shapes[1].stroke_width == 2.0
    assert shapes[1].orbit_ref == "#ring"


def test_load_object_with_shapes_key(write_scene):
    path = write_scene("scene.json", {"shapes": [{"d": "M0 0 L1 1", "stroke": "#000", "order": 7}]})
    (shape,) = load_shapes(path)
    assert shape.order == 7


def test_invalid_records_are_skipped(write_scene, caplog):
    path = write_scene(
        "scene.json",
        [{"fill": "#000"}, "nonsense", {"d": "M0 0 L1 1", "opacity": "lots"}, {"d": "M0 0 L1 1", "stroke": "#000"}],
    )
    with caplog.at_level(logging.WARNING):
        shapes = load_shapes(path)
    assert len(shapes) == 1
    assert shapes[0].order == 3
    assert caplog.text.count("Skipping shape") == 3


def test_non_finite_numbers_are_rejected():
    with pytest.raises(ValueError):
        shape_from_record({"d": "M0 0 L1 1", "stroke_width": float("nan")}, 0)


def test_bad_files_raise(tmp_path, write_scene):
    broken = tmp_path / "broken.json"
    broken.write_text("[{")
    with pytest.raises(ShapeLoadError):
        load_shapes(broken)
    with pytest.raises(ShapeLoadError):
        load_shapes(write_scene("scalar.json", 42))
    with pytest.raises(ShapeLoadError):
        load_shapes(tmp_path / "missing.json")


def test_dump_samples_is_json():
    morph = build_morph(None, [shape_from_record({"d": "M0 0 L100 0", "stroke": "#000", "id": "line"}, 0)])
    records = json.loads(dump_samples(morph.sample(1.0)))
    assert records[0]["key"] == "line"
    assert records[0]["dash_offset"] == 0.0
