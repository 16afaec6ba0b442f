from pathlib import Path

import turbotrack.activity.publish as publish
import turbotrack.formats.gpx_export as gpx_export
from turbotrack.analyze.track import analyze_file, analyze_gpx
from turbotrack.store.json_store import ActivityStore, TrackStore


def _stored_sample(sample_gpx_path, data_root: Path):
    summary = analyze_file(sample_gpx_path)
    TrackStore(data_root / "gpx").save(summary)
    return summary


def test_export_to_file(sample_gpx_path, tmp_path: Path, isolated_config: Path):
    summary = _stored_sample(sample_gpx_path, isolated_config)
    out = tmp_path / "out" / "ride.gpx"

    assert gpx_export.main([summary.id, "--out", str(out)]) == 0

    again = analyze_gpx(out.read_bytes())
    assert again.name == "Morning Hike"
    assert again.points == summary.points
    assert again.distance_km == summary.distance_km


def test_export_default_name_and_stdout(sample_gpx_path, tmp_path: Path, isolated_config: Path,
                                        monkeypatch, capsys):
    summary = _stored_sample(sample_gpx_path, isolated_config)
    monkeypatch.chdir(tmp_path)

    assert gpx_export.main([summary.id]) == 0
    assert (tmp_path / "morning_hike.gpx").is_file()

    capsys.readouterr()
    assert gpx_export.main([summary.id, "--out", "-"]) == 0
    assert "<name>Morning Hike</name>" in capsys.readouterr().out


def test_export_unknown_track(capsys):
    assert gpx_export.main(["no-such-track"]) == 1
    assert "track not found" in capsys.readouterr().err


def test_publish_then_export_with_activity_title(sample_gpx_path, tmp_path: Path,
                                                 isolated_config: Path, capsys):
    summary = _stored_sample(sample_gpx_path, isolated_config)

    rc = publish.main([summary.id, "--date", "October 26 (Sunday)", "--leader", "Ana",
                       "--route-name", "Sunrise Ridge"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "📅 Date: October 26 (Sunday)" in out
    assert "• Distance: 4.45 km" in out

    activities = ActivityStore(isolated_config / "activities").activities()
    assert len(activities) == 1
    act = activities[0]
    assert act.track_id == summary.id
    assert act.leader == "Ana"

    out_path = tmp_path / "act.gpx"
    assert gpx_export.main([summary.id, "--activity", act.id, "--out", str(out_path)]) == 0
    assert analyze_gpx(out_path.read_bytes()).name == "Sunrise Ridge"


def test_publish_edit_keeps_id(sample_gpx_path, isolated_config: Path):
    summary = _stored_sample(sample_gpx_path, isolated_config)
    assert publish.main([summary.id, "--date", "Sunday"]) == 0
    store = ActivityStore(isolated_config / "activities")
    first = store.activities()[0]

    assert publish.main([summary.id, "--edit", first.id, "--time", "6:45 AM"]) == 0

    store.rebuild()
    acts = store.activities()
    assert len(acts) == 1
    assert acts[0].id == first.id
    assert acts[0].created_at == first.created_at
    assert acts[0].time == "6:45 AM"
    assert acts[0].date == "Sunday"


def test_publish_print_only_does_not_store(sample_gpx_path, isolated_config: Path, capsys):
    summary = _stored_sample(sample_gpx_path, isolated_config)

    assert publish.main([summary.id, "--print-only"]) == 0
    assert "• Route: Morning Hike" in capsys.readouterr().out
    assert ActivityStore(isolated_config / "activities").activities() == []
