from pathlib import Path

import pytest

from turbotrack.config import ActivityPreset, load_config
from turbotrack.errors import ConfigError


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_without_config(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("TURBOTRACK_DATA_ROOT")
    cfg = load_config(repo_config_path=tmp_path / "none.toml", user_config_path=tmp_path / "none2.toml")

    root = Path.home() / "TurboTrack"
    assert cfg.paths.data_root == root
    assert cfg.paths.tracks_dir == root / "gpx"
    assert cfg.paths.activities_dir == root / "activities"
    assert cfg.paths.work_root == root / "_work"
    assert cfg.default_track_name == "Untitled Track"
    assert cfg.activity.get_preset(None) == ActivityPreset()
    assert cfg.source["paths.data_root"] == "default"


def test_precedence_repo_user_env(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("TURBOTRACK_DATA_ROOT")
    repo = _write(tmp_path / "repo" / "config.toml", """
[paths]
data_root = "/srv/turbotrack"
tracks_dir = "/srv/repo-tracks"

[track]
default_name = "Repo Track"
""")
    user = _write(tmp_path / "user" / "config.toml", """
[paths]
tracks_dir = "/home/me/tracks"

[track]
default_name = "My Track"
""")
    monkeypatch.setenv("TURBOTRACK_WORK_ROOT", "/tmp/work")

    cfg = load_config(repo_config_path=repo, user_config_path=user)

    assert cfg.paths.data_root == Path("/srv/turbotrack")
    assert cfg.paths.tracks_dir == Path("/home/me/tracks")
    assert cfg.paths.activities_dir == Path("/srv/turbotrack/activities")
    assert cfg.paths.work_root == Path("/tmp/work")
    assert cfg.default_track_name == "My Track"
    assert cfg.source["paths.data_root"] == f"repo:{repo}"
    assert cfg.source["paths.tracks_dir"] == f"user:{user}"
    assert cfg.source["paths.work_root"] == "env:TURBOTRACK_WORK_ROOT"


def test_env_data_root_moves_derived_dirs(tmp_path: Path, isolated_config: Path):
    cfg = load_config(repo_config_path=tmp_path / "none.toml", user_config_path=tmp_path / "none2.toml")
    assert cfg.paths.tracks_dir == isolated_config / "gpx"
    assert cfg.paths.activities_dir == isolated_config / "activities"


def test_activity_presets(tmp_path: Path):
    repo = _write(tmp_path / "repo.toml", """
[activity.presets.weekend]
leader = "Repo Leader"
limit = 30
""")
    user = _write(tmp_path / "user.toml", """
[activity]
default_preset = "weekend"

[activity.presets.night]
time = "7:00 PM"
""")
    cfg = load_config(repo_config_path=repo, user_config_path=user)

    weekend = cfg.activity.get_preset(None)
    assert weekend.leader == "Repo Leader"
    assert weekend.limit == "30"
    assert weekend.notes == ActivityPreset().notes
    assert cfg.activity.get_preset("night").time == "7:00 PM"
    assert cfg.activity.get_preset("unknown") == weekend
    assert "default" in cfg.activity.presets


def test_malformed_toml_fails_loudly(tmp_path: Path):
    bad = _write(tmp_path / "bad.toml", "[paths\ndata_root = ")
    with pytest.raises(ConfigError, match="Failed to parse TOML config"):
        load_config(repo_config_path=bad, user_config_path=tmp_path / "none.toml")
