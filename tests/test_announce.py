import datetime as dt
from dataclasses import replace

from turbotrack.activity.announce import (
    Activity,
    ActivityForm,
    SECTION_RULE,
    compose_activity,
    default_activity_date,
    render_announcement,
)
from turbotrack.analyze.track import GeoPoint, analyze
from turbotrack.config import ActivityPreset


def _summary():
    return analyze(
        [GeoPoint(0, 0, 100.0), GeoPoint(0, 0.01, 180.0), GeoPoint(0, 0.02, 150.0)],
        "Ridge Loop",
        track_id="t-ridge",
    )


def test_render_announcement_sections():
    form = ActivityForm(route_name="Ridge Loop", date="October 26 (Sunday)", leader="Ana", limit="12")
    text = render_announcement(_summary(), form)

    assert text.startswith("📅 Date: October 26 (Sunday)")
    assert text.count(SECTION_RULE) == 7
    assert "• Leader: Ana" in text
    assert "• Group size: 12 people" in text
    assert "• Distance: 2.22 km" in text
    assert "• Elevation gain: 80 m" in text
    assert "• Difficulty: ★★☆☆☆" in text
    assert form.equipment in text


def test_compose_new_activity():
    summary = _summary()
    form = ActivityForm(route_name="Ridge Loop", date="Sunday")
    act = compose_activity(summary, form)

    assert act.id.startswith("act-")
    assert len(act.id) == 13
    assert act.track_id == "t-ridge"
    assert act.distance == "2.22"
    assert act.elevation_gain == "80"
    assert act.full_text == render_announcement(summary, form)
    assert act.created_at.endswith("Z")
    assert act.group_image is None

    assert compose_activity(summary, form).id != act.id


def test_editing_keeps_identity_and_images():
    summary = _summary()
    original = compose_activity(summary, ActivityForm(route_name="Ridge Loop", date="Sunday"))
    original = replace(original, created_at="2026-01-01T00:00:00Z", group_image="data:image/png;base64,AAAA")

    form = ActivityForm.from_activity(original).with_changes(time="7:30 AM", leader=None)
    edited = compose_activity(summary, form, existing=original)

    assert edited.id == original.id
    assert edited.created_at == "2026-01-01T00:00:00Z"
    assert edited.group_image == original.group_image
    assert edited.time == "7:30 AM"
    assert edited.leader == original.leader
    assert "⏰ Meeting time: 7:30 AM" in edited.full_text


def test_form_from_preset_with_overrides():
    preset = ActivityPreset(leader="Bo", meeting_point="North gate")
    form = ActivityForm.from_preset(preset, route_name="R", date="D", leader="Cy", weather=None)

    assert form.leader == "Cy"
    assert form.meeting_point == "North gate"
    assert form.weather == ActivityPreset().weather


def test_activity_wire_format_round_trip():
    act = compose_activity(_summary(), ActivityForm(route_name="Ridge Loop", date="Sunday"))
    doc = act.to_dict()

    assert doc["trackId"] == "t-ridge"
    assert doc["routeName"] == "Ridge Loop"
    assert "fullText" in doc and "createdAt" in doc
    assert "groupImage" not in doc
    assert Activity.from_dict(doc) == act


def test_default_activity_date():
    assert default_activity_date(dt.date(2026, 10, 25)) == "October 25 (Sunday)"
