from __future__ import annotations

import json
import logging
import math
from dataclasses import asdict
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from smartmorph.morphing.shapes import Shape
from smartmorph.morphing.timeline import TrackSample

logger = logging.getLogger(__name__)

_FIELD_ALIASES = {
    "d": "outline",
    "outline": "outline",
    "tag": "tag",
    "id": "id",
    "name": "name",
    "data-name": "name",
    "class": "classes",
    "classes": "classes",
    "fill": "fill",
    "stroke": "stroke",
    "stroke-width": "stroke_width",
    "stroke_width": "stroke_width",
    "strokewidth": "stroke_width",
    "fill-opacity": "fill_opacity",
    "fill_opacity": "fill_opacity",
    "fillopacity": "fill_opacity",
    "stroke-opacity": "stroke_opacity",
    "stroke_opacity": "stroke_opacity",
    "strokeopacity": "stroke_opacity",
    "opacity": "opacity",
    "stroke-dasharray": "dash_array",
    "dash_array": "dash_array",
    "dasharray": "dash_array",
    "path_key": "path_key",
    "pathkey": "path_key",
    "order": "order",
    "data-orbit": "orbit_ref",
    "orbit": "orbit_ref",
    "orbit_ref": "orbit_ref",
    "data-orbit-dir": "orbit_direction",
    "orbit_dir": "orbit_direction",
    "orbit_direction": "orbit_direction",
}
_NUMERIC = ("stroke_width", "fill_opacity", "stroke_opacity", "opacity")


class ShapeLoadError(ValueError):
    """Raised when a shape file cannot be read as a scene."""


def _coerce_number(value: Any, label: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{label} must be a number.") from exc
    if not math.isfinite(number):
        raise ValueError(f"{label} must be finite.")
    return number


def shape_from_record(record: Mapping[str, Any], order: int) -> Shape:
    """Build a ``Shape`` from one JSON object; raises ``ValueError`` when it is unusable."""

    kwargs: dict[str, Any] = {"order": order}
    for key, value in record.items():
        field = _FIELD_ALIASES.get(str(key).lower())
        if field is None or value is None:
            continue
        kwargs[field] = value

    outline = kwargs.get("outline")
    if not isinstance(outline, str) or not outline.strip():
        raise ValueError("shape record needs a non-empty 'outline' (or 'd').")
    for name in _NUMERIC:
        if name in kwargs:
            kwargs[name] = _coerce_number(kwargs[name], name)
    kwargs["order"] = int(_coerce_number(kwargs["order"], "order"))
    for name in ("tag", "id", "name", "fill", "stroke", "dash_array", "path_key", "orbit_ref", "orbit_direction"):
        if name in kwargs:
            kwargs[name] = str(kwargs[name])
    classes = kwargs.get("classes", ())
    kwargs["classes"] = tuple(classes.split()) if isinstance(classes, str) else tuple(str(c) for c in classes)
    return Shape(**kwargs)


def shapes_from_records(records: Iterable[Mapping[str, Any]]) -> list[Shape]:
    shapes: list[Shape] = []
    for idx, record in enumerate(records):
        if not isinstance(record, Mapping):
            logger.warning("Skipping shape %d: not an object", idx)
            continue
        try:
            shapes.append(shape_from_record(record, idx))
        except ValueError as exc:
            logger.warning("Skipping shape %d: %s", idx, exc)
    return shapes


def load_shapes(path: Path) -> list[Shape]:
    """Read a scene file: a JSON list of shape objects, or ``{"shapes": [...]}``."""

    path = Path(path)
    try:
        data = json.loads(path.read_text())
    except OSError as exc:
        raise ShapeLoadError(f"Cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ShapeLoadError(f"{path} is not valid JSON: {exc}") from exc

    if isinstance(data, Mapping):
        data = data.get("shapes")
    if not isinstance(data, list):
        raise ShapeLoadError(f"{path} must contain a list of shapes or an object with a 'shapes' list.")
    return shapes_from_records(data)


def samples_to_records(samples: Sequence[TrackSample]) -> list[dict[str, Any]]:
    return [asdict(sample) for sample in samples]


def dump_samples(samples: Sequence[TrackSample], indent: int | None = 2) -> str:
    return json.dumps(samples_to_records(samples), indent=indent)


__all__ = [
    "ShapeLoadError",
    "dump_samples",
    "load_shapes",
    "samples_to_records",
    "shape_from_record",
    "shapes_from_records",
]
