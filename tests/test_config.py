from __future__ import annotations

import json
import logging

from smartmorph._config import DEFAULT_CONFIG, config_path, ensure_user_config, load_config
from smartmorph.morphing.bezier import EASE_IN
from smartmorph.morphing.match import MatchWeights


def test_missing_file_gives_defaults(tmp_path):
    cfg = load_config(tmp_path / "nope.cfg")
    assert cfg.duration_ms == 600.0
    assert cfg.match_weights == MatchWeights()


def test_env_override_sets_config_path(isolated_user_config):
    assert config_path() == isolated_user_config


def test_ensure_user_config_writes_defaults_once(isolated_user_config):
    path = ensure_user_config()
    assert path == isolated_user_config
    assert json.loads(path.read_text()) == DEFAULT_CONFIG
    path.write_text(json.dumps({"duration_ms": 900}))
    ensure_user_config()
    assert json.loads(path.read_text()) == {"duration_ms": 900}


def test_default_file_round_trips_to_default_config(isolated_user_config):
    ensure_user_config()
    cfg = load_config()
    assert cfg.duration_ms == 600.0
    assert cfg.orbit_mode == "auto+manual"


def test_camel_case_keys_and_presets(tmp_path):
    path = tmp_path / "smartmorph.cfg"
    path.write_text(
        json.dumps(
            {
                "duration": 900,
                "easing": "ease-in",
                "orbitMode": "off",
                "matchWeights": {"position": 2, "class": 0},
                "propertyCurves": {"color": [0.4, 0, 0.2, 1]},
            }
        )
    )
    cfg = load_config(path)
    assert cfg.duration_ms == 900.0
    assert cfg.easing == EASE_IN
    assert cfg.orbit_mode == "off"
    assert cfg.match_weights.position == 2.0
    assert cfg.match_weights.class_ == 0.0
    assert cfg.property_curves["color"].x1 == 0.4


def test_invalid_and_unknown_values_are_skipped(tmp_path, caplog):
    path = tmp_path / "smartmorph.cfg"
    path.write_text(json.dumps({"layer_stagger_ms": -5, "appearStyle": "explode", "bogus": 1, "intraStagger": 4}))
    with caplog.at_level(logging.WARNING):
        cfg = load_config(path)
    assert cfg.layer_stagger_ms == 70.0
    assert cfg.appear_style == "collapse-to-centroid"
    assert cfg.intra_stagger_ms == 4.0
    assert "bogus" in caplog.text


def test_unreadable_file_degrades_to_defaults(tmp_path, caplog):
    path = tmp_path / "smartmorph.cfg"
    path.write_text("{not json")
    with caplog.at_level(logging.WARNING):
        cfg = load_config(path)
    assert cfg.duration_ms == 600.0
    assert "Ignoring" in caplog.text


def test_overrides_win_over_file(tmp_path):
    path = tmp_path / "smartmorph.cfg"
    path.write_text(json.dumps({"duration_ms": 900}))
    cfg = load_config(path, duration_ms=250, easing=None)
    assert cfg.duration_ms == 250.0
