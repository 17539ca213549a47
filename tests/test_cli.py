from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from smartmorph.cli import app

runner = CliRunner()


@pytest.fixture
def scenes(write_scene):
    start = write_scene(
        "start.json",
        [
            {"d": "M0 0 H10 V10 H0 Z", "fill": "#000", "id": "box"},
            {"d": "M0 50 L40 50", "stroke": "#000", "id": "gone"},
        ],
    )
    end = write_scene(
        "end.json",
        {"shapes": [{"d": "M100 0 H110 V10 H100 Z", "fill": "#000", "id": "box"}]},
    )
    return start, end


def test_sample_json(scenes):
    start, end = scenes
    result = runner.invoke(app, ["sample", str(start), str(end), "--progress", "1", "--json"])
    assert result.exit_code == 0, result.output
    records = {r["key"]: r for r in json.loads(result.output)}
    assert records["box"]["outline"] == "M100 0 H110 V10 H100 Z"
    assert records["gone"]["kind"] == "disappear"
    assert records["gone"]["opacity"] == 0.0


def test_sample_appear_mode(scenes):
    _, end = scenes
    result = runner.invoke(app, ["sample", "-", str(end), "--progress", "0", "--json"])
    assert result.exit_code == 0, result.output
    (record,) = json.loads(result.output)
    assert record["kind"] == "appear"
    assert record["opacity"] == 0.0


def test_sample_table(scenes):
    start, end = scenes
    result = runner.invoke(app, ["sample", str(start), str(end), "-p", "0.5"])
    assert result.exit_code == 0, result.output
    assert "box" in result.output


def test_match_lists_pairs_and_leftovers(scenes):
    start, end = scenes
    result = runner.invoke(app, ["match", str(start), str(end)])
    assert result.exit_code == 0, result.output
    assert "box" in result.output
    assert "gone" in result.output
    assert "disappears" in result.output


def test_match_needs_a_start_scene(scenes):
    _, end = scenes
    result = runner.invoke(app, ["match", "-", str(end)])
    assert result.exit_code == 2


def test_missing_file_is_a_usage_error(tmp_path, scenes):
    _, end = scenes
    result = runner.invoke(app, ["sample", str(tmp_path / "nope.json"), str(end)])
    assert result.exit_code == 2


def test_bad_config_value_is_a_usage_error(scenes):
    start, end = scenes
    result = runner.invoke(app, ["sample", str(start), str(end), "--easing", "wobbly"])
    assert result.exit_code == 2


def test_play_runs_to_completion(scenes):
    start, end = scenes
    result = runner.invoke(app, ["play", str(start), str(end), "--duration", "5", "--fps", "240", "--no-watch"])
    assert result.exit_code == 0, result.output
    assert "tracks" in result.output


def test_init_config(tmp_path):
    target = tmp_path / "cfg" / "smartmorph.cfg"
    result = runner.invoke(app, ["init-config", "--path", str(target)])
    assert result.exit_code == 0, result.output
    assert json.loads(target.read_text())["duration_ms"] == 600
