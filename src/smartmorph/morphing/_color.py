from __future__ import annotations

import math
import re
from typing import NamedTuple, Optional

_RGB_FUNC = re.compile(r"^rgba?\((.+)\)$")
_NO_COLOR = {"", "none", "transparent", "currentcolor", "inherit"}
_MAX_DISTANCE = math.sqrt(4 * 255.0 * 255.0)


class Rgba(NamedTuple):
    r: float
    g: float
    b: float
    a: float


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _from_pyvista(value: str) -> Optional[Rgba]:
    import pyvista as pv

    try:
        col = pv.Color(value)
    except ValueError:
        return None
    r, g, b, a = col.int_rgba
    return Rgba(float(r), float(g), float(b), a / 255.0)


def _parse_hex(hex_part: str) -> Optional[Rgba]:
    # pyvista only reads the long forms
    if len(hex_part) in (3, 4):
        hex_part = "".join(ch * 2 for ch in hex_part)
    if len(hex_part) not in (6, 8):
        return None
    return _from_pyvista("#" + hex_part)


def _parse_rgb_func(body: str) -> Optional[Rgba]:
    parts = [p for p in re.split(r"[\s,/]+", body.strip()) if p]
    if len(parts) < 3:
        return None
    values = []
    for idx, part in enumerate(parts[:4]):
        try:
            if part.endswith("%"):
                scale = 1.0 if idx == 3 else 255.0
                values.append(float(part[:-1]) / 100.0 * scale)
            else:
                values.append(float(part))
        except ValueError:
            return None
    if not all(math.isfinite(v) for v in values):
        return None
    alpha = values[3] if len(values) == 4 else 1.0
    return Rgba(
        _clamp(values[0], 0.0, 255.0),
        _clamp(values[1], 0.0, 255.0),
        _clamp(values[2], 0.0, 255.0),
        _clamp(alpha, 0.0, 1.0),
    )


def parse_color(value: str | None) -> Optional[Rgba]:
    """Parse a CSS-style colour into 0-255 RGB channels plus 0-1 alpha.

    Hex (``#rgb``, ``#rgba``, ``#rrggbb``, ``#rrggbbaa``), ``rgb()``/``rgba()``
    and named colours are understood. Anything else (``none``, ``url(...)``,
    ``currentColor``) resolves to ``None`` and is treated as "no colour".
    """

    if value is None:
        return None
    s = str(value).strip().lower()
    if s in _NO_COLOR:
        return None
    if s.startswith("#"):
        return _parse_hex(s[1:])
    match = _RGB_FUNC.match(s)
    if match:
        return _parse_rgb_func(match.group(1))
    if s.isalpha():
        return _from_pyvista(s)
    return None


def rgba_distance(a: Optional[Rgba], b: Optional[Rgba]) -> float:
    """Euclidean RGBA distance normalized to [0, 1]; missing on one side counts as 1."""

    if a is None and b is None:
        return 0.0
    if a is None or b is None:
        return 1.0
    dr = a.r - b.r
    dg = a.g - b.g
    db = a.b - b.b
    da = (a.a - b.a) * 255.0
    return math.sqrt(dr * dr + dg * dg + db * db + da * da) / _MAX_DISTANCE


def rgba_to_css(color: Rgba) -> str:
    alpha = _clamp(color.a, 0.0, 1.0)
    return f"rgba({round(color.r)}, {round(color.g)}, {round(color.b)}, {alpha:.4g})"


def lerp_color(a: str | None, b: str | None, t: float) -> str | None:
    """Blend two colour strings in RGBA space.

    The endpoint strings are returned untouched at ``t <= 0`` and ``t >= 1``.
    When only one side resolves to a colour the result switches at the midpoint.
    """

    if a == b:
        return a
    if t <= 0.0:
        return a
    if t >= 1.0:
        return b

    ca = parse_color(a)
    cb = parse_color(b)
    if ca is None and cb is None:
        return b if b is not None else a
    if ca is None or cb is None:
        return a if t < 0.5 else b

    u = 1.0 - t
    return rgba_to_css(
        Rgba(
            u * ca.r + t * cb.r,
            u * ca.g + t * cb.g,
            u * ca.b + t * cb.b,
            u * ca.a + t * cb.a,
        )
    )


__all__ = ["Rgba", "parse_color", "rgba_distance", "rgba_to_css", "lerp_color"]
