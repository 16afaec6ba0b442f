# turbotrack/activity/announce.py
"""
Activity announcements built from an analyzed track.

An organiser fills in an ActivityForm (prefilled from a config preset, or
from an existing Activity when editing). render_announcement() turns the
form plus the track statistics into the plain-text announcement that gets
pasted into group chats; compose_activity() wraps that text into the
Activity record that the ActivityStore persists.
"""

from __future__ import annotations

import datetime as dt
import secrets
import string
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Optional

from turbotrack.analyze.track import TrackSummary
from turbotrack.config import ActivityPreset
from turbotrack.util.logging import utc_now_iso

_ID_ALPHABET = string.ascii_lowercase + string.digits

_DEFAULTS = ActivityPreset()

SECTION_RULE = "——————————"

# snake_case attribute -> camelCase key in stored activity JSON
_WIRE_KEYS = {
    "id": "id",
    "track_id": "trackId",
    "route_name": "routeName",
    "date": "date",
    "time": "time",
    "meeting_point": "meetingPoint",
    "leader": "leader",
    "limit": "limit",
    "difficulty": "difficulty",
    "weather": "weather",
    "road_type": "roadType",
    "distance": "distance",
    "elevation_gain": "elevationGain",
    "duration": "duration",
    "notes": "notes",
    "fees": "fees",
    "equipment": "equipment",
    "disclaimer": "disclaimer",
    "full_text": "fullText",
    "created_at": "createdAt",
    "group_image": "groupImage",
    "intro_text": "introText",
    "intro_image": "introImage",
}

_OPTIONAL = ("group_image", "intro_text", "intro_image")


def new_activity_id() -> str:
    return "act-" + "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))


def default_activity_date(today: Optional[dt.date] = None) -> str:
    """Human date for the form, e.g. "October 19 (Monday)"."""
    d = today or dt.date.today()
    return f"{d.strftime('%B')} {d.day} ({d.strftime('%A')})"


@dataclass(frozen=True)
class Activity:
    """A published announcement for one track."""
    id: str
    track_id: str
    route_name: str
    date: str
    time: str
    meeting_point: str
    leader: str
    limit: str
    difficulty: str
    weather: str
    road_type: str
    distance: str
    elevation_gain: str
    duration: str
    notes: str
    fees: str
    equipment: str
    disclaimer: str
    full_text: str
    created_at: str
    # Base64 images (group QR code, intro picture) and a longer intro
    group_image: Optional[str] = None
    intro_text: Optional[str] = None
    intro_image: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        doc = {}
        for attr, key in _WIRE_KEYS.items():
            value = getattr(self, attr)
            if value is None and attr in _OPTIONAL:
                continue
            doc[key] = value
        return doc

    @classmethod
    def from_dict(cls, doc: dict[str, Any]) -> "Activity":
        values = {}
        for attr, key in _WIRE_KEYS.items():
            if attr in _OPTIONAL:
                values[attr] = doc.get(key)
            else:
                values[attr] = str(doc.get(key) or "")
        return cls(**values)


@dataclass(frozen=True)
class ActivityForm:
    """What the organiser fills in; every field is free text."""
    route_name: str
    date: str
    time: str = _DEFAULTS.time
    meeting_point: str = _DEFAULTS.meeting_point
    leader: str = _DEFAULTS.leader
    limit: str = _DEFAULTS.limit
    difficulty: str = _DEFAULTS.difficulty
    weather: str = _DEFAULTS.weather
    road_type: str = _DEFAULTS.road_type
    duration: str = _DEFAULTS.duration
    notes: str = _DEFAULTS.notes
    fees: str = _DEFAULTS.fees
    equipment: str = _DEFAULTS.equipment
    disclaimer: str = _DEFAULTS.disclaimer

    @classmethod
    def from_preset(cls, preset: Any, *, route_name: str, date: str, **overrides: str) -> "ActivityForm":
        """
        Seed a form from a config ActivityPreset (or any object with the
        same attribute names). Keyword overrides win over the preset;
        None overrides are ignored so argparse defaults can pass through.
        """
        names = [f.name for f in fields(cls) if f.name not in ("route_name", "date")]
        values = {n: getattr(preset, n) for n in names if hasattr(preset, n)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(route_name=route_name, date=date, **values)

    @classmethod
    def from_activity(cls, activity: Activity) -> "ActivityForm":
        """Prefill the form for editing an already published activity."""
        names = [f.name for f in fields(cls)]
        return cls(**{n: getattr(activity, n) for n in names})

    def with_changes(self, **changes: str) -> "ActivityForm":
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def render_announcement(summary: TrackSummary, form: ActivityForm) -> str:
    """Render the plain-text announcement for a track and a filled-in form."""
    sections = [
        "\n".join([
            f"📅 Date: {form.date}",
            f"⏰ Meeting time: {form.time}",
            f"📍 Meeting point: {form.meeting_point}",
        ]),
        f"Notes\n{form.notes}",
        f"Fees\n{form.fees}",
        "\n".join([
            "Activity",
            f"• Route: {form.route_name}",
            f"• Estimated duration: {form.duration}",
            f"• Group size: {form.limit} people",
            f"• Terrain: {form.road_type}",
            f"• Leader: {form.leader}",
        ]),
        f"Equipment\n{form.equipment}",
        f"Weather\n• Daytime temperature: {form.weather}",
        f"Liability and disclaimer\n{form.disclaimer}",
        "\n".join([
            "Details",
            f"• Route: {form.route_name}",
            f"• Meeting point: {form.meeting_point}",
            f"• Distance: {summary.distance_km} km",
            f"• Elevation gain: {summary.elevation_gain_m} m",
            f"• Meeting time: {form.time}",
            f"• Difficulty: {form.difficulty}",
            f"• Estimated duration: {form.duration}",
        ]),
    ]
    return f"\n\n{SECTION_RULE}\n\n".join(sections)


def compose_activity(
        summary: TrackSummary,
        form: ActivityForm, *,
        existing: Optional[Activity] = None,
) -> Activity:
    """
    Build the Activity record for `summary`.

    When editing (`existing` given) the id, creation time and any images
    carry over; otherwise a new id and creation time are generated.
    """
    values = asdict(form)
    return Activity(
        id=existing.id if existing else new_activity_id(),
        track_id=summary.id,
        distance=str(summary.distance_km),
        elevation_gain=str(summary.elevation_gain_m),
        full_text=render_announcement(summary, form),
        created_at=existing.created_at if existing else utc_now_iso(),
        group_image=existing.group_image if existing else None,
        intro_text=existing.intro_text if existing else None,
        intro_image=existing.intro_image if existing else None,
        **values,
    )
