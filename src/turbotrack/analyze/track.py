# turbotrack/analyze/track.py
"""
Track analysis functions for TurboTrack

analyze() turns an ordered point sequence into a TrackSummary in a single
forward pass. It is pure and never raises for any point sequence: empty and
single-point tracks give a zero summary, and tracks without elevation give
zero elevation fields. Coordinates are not checked here; GPX extraction
(turbotrack.formats.gpx) validates them at the ingestion boundary.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Sequence

from haversine import haversine, Unit

from turbotrack.formats.gpx import (
    GeoPoint,
    extract_points,
    extract_track_name,
    parse_gpx_text,
    parse_gpx_time,
    read_gpx,
)

EARTH_RADIUS_KM = 6371.0

DEFAULT_TRACK_NAME = "Untitled Track"

__all__ = [
    "DEFAULT_TRACK_NAME",
    "EARTH_RADIUS_KM",
    "GeoPoint",
    "TrackSummary",
    "analyze",
    "analyze_file",
    "analyze_gpx",
    "cumulative_distances",
    "haversine_km",
    "nearest_point_index",
    "point_window",
]


def new_track_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class TrackSummary:
    """Derived statistics for one track, plus the points they came from."""
    id: str
    name: str
    points: tuple[GeoPoint, ...] = field(repr=False)
    distance_km: float = 0.0
    elevation_gain_m: int = 0
    elevation_loss_m: int = 0
    max_elevation_m: float = 0
    min_elevation_m: float = 0
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @property
    def duration_s(self) -> Optional[float]:
        """Seconds between the first and last timestamps, if both parse."""
        start = parse_gpx_time(self.start_time or "")
        end = parse_gpx_time(self.end_time or "")
        if start is None or end is None:
            return None
        return (end - start).total_seconds()

    def summary_dict(self) -> dict[str, Any]:
        """Wire representation without the point list (index entries)."""
        doc: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "distance": self.distance_km,
            "elevationGain": self.elevation_gain_m,
            "elevationLoss": self.elevation_loss_m,
            "maxElevation": self.max_elevation_m,
            "minElevation": self.min_elevation_m,
        }
        if self.start_time is not None:
            doc["startTime"] = self.start_time
        if self.end_time is not None:
            doc["endTime"] = self.end_time
        return doc

    def to_dict(self) -> dict[str, Any]:
        doc = self.summary_dict()
        doc["points"] = [_point_to_dict(p) for p in self.points]
        return doc

    @classmethod
    def from_dict(cls, doc: dict[str, Any]) -> "TrackSummary":
        return cls(
            id=str(doc["id"]),
            name=str(doc.get("name") or DEFAULT_TRACK_NAME),
            points=tuple(_point_from_dict(p) for p in doc.get("points") or ()),
            distance_km=float(doc.get("distance", 0.0)),
            elevation_gain_m=doc.get("elevationGain", 0),
            elevation_loss_m=doc.get("elevationLoss", 0),
            max_elevation_m=doc.get("maxElevation", 0),
            min_elevation_m=doc.get("minElevation", 0),
            start_time=doc.get("startTime"),
            end_time=doc.get("endTime"),
        )


def _point_to_dict(p: GeoPoint) -> dict[str, Any]:
    d: dict[str, Any] = {"lat": p.lat, "lng": p.lng}
    if p.ele is not None:
        d["ele"] = p.ele
    if p.time is not None:
        d["time"] = p.time
    return d


def _point_from_dict(d: dict[str, Any]) -> GeoPoint:
    lng = d["lng"] if "lng" in d else d["lon"]
    ele = d.get("ele")
    return GeoPoint(
        lat=float(d["lat"]),
        lng=float(lng),
        ele=float(ele) if ele is not None else None,
        time=d.get("time"),
    )


def haversine_km(p1: GeoPoint, p2: GeoPoint) -> float:
    """
    Great-circle distance in km on a sphere of radius 6371 km.

    The haversine package returns the central angle for Unit.RADIANS; the
    range check is off so non-finite input propagates instead of raising.
    """
    angle = haversine((p1.lat, p1.lng), (p2.lat, p2.lng), unit=Unit.RADIANS, check=False)
    return EARTH_RADIUS_KM * angle


def _round_half_up(value: float) -> float:
    # Matches JavaScript Math.round, which existing stored tracks were built with
    if not math.isfinite(value):
        return value
    return math.floor(value + 0.5)


def analyze(
        points: Sequence[GeoPoint],
        name: str, *,
        track_id: Optional[str] = None,
) -> TrackSummary:
    """
    Compute distance and elevation statistics over an ordered point sequence.

    Elevation deltas are only taken between neighbours that both carry
    elevation; a point without elevation breaks the chain for that gap, so
    [100, None, 200] yields zero gain. Distance is summed over every
    consecutive pair regardless of elevation.
    """
    pts = tuple(points)

    distance = 0.0
    gain = 0.0
    loss = 0.0
    max_ele = -math.inf
    min_ele = math.inf

    for i, p in enumerate(pts):
        if p.ele is not None:
            if p.ele > max_ele:
                max_ele = p.ele
            if p.ele < min_ele:
                min_ele = p.ele

        if i == 0:
            continue

        prev = pts[i - 1]
        if p.ele is not None and prev.ele is not None:
            delta = p.ele - prev.ele
            if delta > 0:
                gain += delta
            else:
                loss += abs(delta)

        distance += haversine_km(prev, p)

    return TrackSummary(
        id=track_id or new_track_id(),
        name=name,
        points=pts,
        distance_km=round(distance, 2),
        elevation_gain_m=_round_half_up(gain),
        elevation_loss_m=_round_half_up(loss),
        max_elevation_m=0 if max_ele == -math.inf else _round_half_up(max_ele),
        min_elevation_m=0 if min_ele == math.inf else _round_half_up(min_ele),
        start_time=pts[0].time if pts else None,
        end_time=pts[-1].time if pts else None,
    )


def analyze_gpx(
        xml_text: str | bytes, *,
        default_name: str = DEFAULT_TRACK_NAME,
        track_id: Optional[str] = None,
) -> TrackSummary:
    """
    Parse GPX text and analyze its track points.

    Raises:
      InvalidGpxError when the text is not XML or a point is unusable.
    """
    root = parse_gpx_text(xml_text)
    points = extract_points(root)
    name = extract_track_name(root) or default_name
    return analyze(points, name, track_id=track_id)


def analyze_file(gpx_path: Path, *, default_name: str = DEFAULT_TRACK_NAME) -> TrackSummary:
    root = read_gpx(gpx_path)
    return analyze(extract_points(root), extract_track_name(root) or default_name)


def cumulative_distances(points: Sequence[GeoPoint]) -> list[float]:
    """Running distance (km, unrounded) at each point; starts at 0.0."""
    out: list[float] = []
    total = 0.0
    for i, p in enumerate(points):
        if i > 0:
            total += haversine_km(points[i - 1], p)
        out.append(total)
    return out


def nearest_point_index(points: Sequence[GeoPoint], lat: float, lng: float) -> int:
    """Index of the point closest to (lat, lng); -1 for an empty track."""
    target = GeoPoint(lat=lat, lng=lng)
    best_idx = -1
    best = math.inf
    for i, p in enumerate(points):
        d = haversine_km(p, target)
        if d < best:
            best = d
            best_idx = i
    return best_idx


def point_window(points: Sequence[GeoPoint], index: int, radius: int = 5) -> list[GeoPoint]:
    """Points within `radius` positions of `index`, clamped to the track."""
    if not points or index < 0 or index >= len(points):
        return []
    start = max(0, index - radius)
    end = min(len(points) - 1, index + radius)
    return list(points[start:end + 1])
