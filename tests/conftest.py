from __future__ import annotations

import json
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def project_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture(autouse=True)
def isolated_user_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the user config at a throwaway location so the real home directory is never read."""

    target = tmp_path / "home-config" / "smartmorph.cfg"
    monkeypatch.setenv("SMARTMORPH_CONFIG", str(target))
    return target


@pytest.fixture
def write_scene(tmp_path: Path):
    def _write(name: str, records) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(records))
        return path

    return _write
