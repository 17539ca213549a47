from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

from smartmorph.morphing.options import MorphConfig

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".smartmorph"
CONFIG_FILE = CONFIG_DIR / "smartmorph.cfg"
CONFIG_ENV = "SMARTMORPH_CONFIG"
DEFAULT_CONFIG: Dict[str, Any] = {
    "_comment": "Defaults for smartmorph runs. Keys may be snake_case or camelCase; invalid values are ignored.",
    "duration_ms": 600,
    "easing": "linear",
    "layer_stagger_ms": 70,
    "group_stagger_ms": 0,
    "intra_stagger_ms": 18,
    "orbit_mode": "auto+manual",
    "orbit_direction": "shortest",
    "orbit_tolerance": 6,
    "motion_profile": "uniform",
    "property_timing": "balanced",
}
_KEY_ALIASES = {
    "duration": "duration_ms",
    "durationms": "duration_ms",
    "samplepoints": "sample_points",
    "matchweights": "match_weights",
    "appearstyle": "appear_style",
    "morphengine": "morph_engine",
    "layerstrategy": "layer_strategy",
    "layerstagger": "layer_stagger_ms",
    "groupstagger": "group_stagger_ms",
    "intrastagger": "intra_stagger_ms",
    "orbitmode": "orbit_mode",
    "orbitdirection": "orbit_direction",
    "orbittolerance": "orbit_tolerance",
    "orbitsnap": "orbit_snap",
    "motionprofile": "motion_profile",
    "propertytiming": "property_timing",
    "propertycurves": "property_curves",
    "timeline": "timeline",
    "easing": "easing",
}
_FILE_FIELDS = {name for name in MorphConfig.__dataclass_fields__ if name != "on_progress"}


def config_path() -> Path:
    override = os.environ.get(CONFIG_ENV)
    return Path(override).expanduser() if override else CONFIG_FILE


def ensure_user_config(path: Path | None = None) -> Path | None:
    """Ensure the user config file exists with sane defaults; returns its path."""

    target = path or config_path()
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        return None

    if target.exists():
        return target

    try:
        target.write_text(json.dumps(DEFAULT_CONFIG, indent=2) + "\n")
    except OSError:
        return None
    return target


def _load_raw(path: Path | None) -> Dict[str, Any]:
    target = path or config_path()
    if not target.exists():
        return {}
    try:
        data = json.loads(target.read_text())
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", target, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: expected a JSON object", target)
        return {}
    return data


def _normalize_key(key: str) -> str | None:
    if key in _FILE_FIELDS:
        return key
    compact = key.replace("_", "").replace("-", "").lower()
    return _KEY_ALIASES.get(compact)


def load_config(path: Path | None = None, **overrides: Any) -> MorphConfig:
    """Build a ``MorphConfig`` from the user config file plus explicit overrides.

    File values that fail validation are logged and skipped, so a bad file
    degrades to defaults instead of aborting. Overrides are not filtered.
    """

    kwargs: Dict[str, Any] = {}
    for key, value in _load_raw(path).items():
        if key.startswith("_"):
            continue
        field = _normalize_key(key)
        if field is None:
            logger.warning("Unknown config key %r ignored", key)
            continue
        try:
            MorphConfig(**{field: value})
        except (TypeError, ValueError) as exc:
            logger.warning("Invalid value for %s ignored: %s", field, exc)
            continue
        kwargs[field] = value

    kwargs.update({k: v for k, v in overrides.items() if v is not None})
    return MorphConfig(**kwargs)
