import json
from dataclasses import replace
from pathlib import Path

import pytest

from turbotrack.activity.announce import ActivityForm, compose_activity
from turbotrack.analyze.track import GeoPoint, analyze, analyze_file
from turbotrack.errors import ActivityNotFoundError, StorageError, TrackNotFoundError
from turbotrack.store.json_store import ActivityStore, TrackStore


def _track(name, start=None, track_id=None):
    return analyze([GeoPoint(0, 0, 1.0, start), GeoPoint(0, 0.01, 2.0)], name, track_id=track_id)


def test_save_and_load_track(tmp_path: Path, sample_gpx_path):
    store = TrackStore(tmp_path / "gpx")
    summary = analyze_file(sample_gpx_path)

    path = store.save(summary)

    assert path == tmp_path / "gpx" / f"{summary.id}.json"
    assert store.load(summary.id) == summary
    assert store.exists(summary.id)


def test_index_has_no_points_and_is_newest_first(tmp_path: Path):
    store = TrackStore(tmp_path)
    store.save(_track("old", "2025-05-01T08:00:00Z", "t-old"))
    store.save(_track("undated", None, "t-undated"))
    store.save(_track("new", "2026-02-01T08:00:00Z", "t-new"))

    index = store.summaries()
    assert [e["id"] for e in index] == ["t-new", "t-old", "t-undated"]
    assert all("points" not in e for e in index)
    assert index[0]["distance"] == 1.11


def test_index_is_rebuilt_explicitly(tmp_path: Path):
    a = TrackStore(tmp_path)
    b = TrackStore(tmp_path)

    a.save(_track("shared", track_id="t-1"))
    assert [e["id"] for e in a.summaries()] == ["t-1"]
    assert b.summaries() == []

    assert [e["id"] for e in b.rebuild()] == ["t-1"]


def test_rebuild_skips_unreadable_files(tmp_path: Path, capsys):
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "list.json").write_text("[1, 2]", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    store = TrackStore(tmp_path)
    store.save(_track("ok", track_id="t-ok"))

    assert [e["id"] for e in store.summaries()] == ["t-ok"]
    err = capsys.readouterr().err
    assert "Skip unreadable track file" in err
    assert "Skip malformed track file" in err


def test_delete_and_missing_ids(tmp_path: Path):
    store = TrackStore(tmp_path)
    store.save(_track("gone", track_id="t-gone"))

    store.delete("t-gone")
    assert store.summaries() == []

    with pytest.raises(TrackNotFoundError):
        store.load("t-gone")
    with pytest.raises(TrackNotFoundError):
        store.delete("t-gone")


@pytest.mark.parametrize("bad_id", ["../escape", "a/b", "", ".."])
def test_ids_must_be_plain_names(tmp_path: Path, bad_id):
    store = TrackStore(tmp_path / "gpx")
    with pytest.raises(StorageError):
        store.get(bad_id)


def test_stored_json_uses_camel_case_keys(tmp_path: Path):
    store = TrackStore(tmp_path)
    path = store.save(_track("keys", "2026-01-01T00:00:00Z", "t-keys"))

    doc = json.loads(path.read_text(encoding="utf-8"))
    assert set(doc) == {
        "id", "name", "distance", "elevationGain", "elevationLoss",
        "maxElevation", "minElevation", "startTime", "points",
    }
    assert doc["points"][1] == {"lat": 0, "lng": 0.01, "ele": 2.0}


def test_activity_store(tmp_path: Path):
    store = ActivityStore(tmp_path / "activities")
    track = _track("Ridge", track_id="t-ridge")
    other = _track("Valley", track_id="t-valley")

    first = compose_activity(track, ActivityForm(route_name="Ridge", date="May 1"))
    first = replace(first, created_at="2026-05-01T00:00:00Z")
    second = compose_activity(other, ActivityForm(route_name="Valley", date="May 8"))
    second = replace(second, created_at="2026-05-08T00:00:00Z")

    store.save(first)
    store.save(second)

    assert [a.id for a in store.activities()] == [second.id, first.id]
    assert store.for_track("t-ridge") == [first]
    assert store.load(second.id) == second

    with pytest.raises(ActivityNotFoundError):
        store.load("act-missing00")


def test_non_string_timestamps_sort_last(tmp_path: Path):
    (tmp_path / "a.json").write_text(json.dumps({"id": "a", "startTime": 5}), encoding="utf-8")
    (tmp_path / "b.json").write_text(json.dumps({"id": "b", "startTime": None}), encoding="utf-8")

    store = TrackStore(tmp_path)
    store.save(_track("dated", "2026-03-01T08:00:00Z", "t-dated"))

    assert [e["id"] for e in store.summaries()] == ["t-dated", "a", "b"]

    acts = tmp_path / "activities"
    acts.mkdir()
    (acts / "x.json").write_text(json.dumps({"id": "x", "createdAt": ["2026"]}), encoding="utf-8")
    assert [a.id for a in ActivityStore(acts).activities()] == ["x"]
