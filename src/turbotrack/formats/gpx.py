# turbotrack/formats/gpx.py
"""
GPX helpers for TurboTrack

This module is intentionally format-focused:
- GPX namespace handling (1.1, 1.0, or none at all)
- parsing GPX text and reading/writing ElementTree documents
- extracting ordered track points and the track title
- regenerating a GPX 1.1 document from a point sequence (export)

Key design principle:
  This is the ingestion boundary. Point data is validated here, so the
  analyzer (turbotrack.analyze.track) can stay a pure, permissive function.
"""

from __future__ import annotations

import datetime as _dt
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence
from xml.etree import ElementTree as ET

from turbotrack.errors import InvalidGpxError

# GPX 1.1 default namespace
GPX_NS = {"gpx": "http://www.topografix.com/GPX/1/1"}

GPX_CREATOR = "TurboTrack"


def qn(tag: str) -> str:
    """
    Build an ElementTree-qualified name for a GPX 1.1 tag.

    ElementTree represents namespaced tags internally as
      "{namespace-uri}tag"
    """
    return f"{{{GPX_NS['gpx']}}}{tag}"


def _local(tag: str) -> str:
    """Strip any "{namespace}" prefix from an ElementTree tag."""
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _child_text(elem: ET.Element, name: str) -> Optional[str]:
    """Text of the first direct child with local name `name`, if any."""
    for child in elem:
        if _local(child.tag) == name:
            return child.text or ""
    return None


@dataclass(frozen=True)
class GeoPoint:
    """One recorded fix along a track."""
    lat: float
    lng: float
    ele: float | None = None
    time: str | None = None


def parse_gpx_time(text: str) -> Optional[_dt.datetime]:
    """
    Parse an ISO-8601 timestamp commonly found in GPX <time> nodes.

    Expected examples:
      - "2026-01-02T21:14:44Z"
      - "2026-01-02T21:14:44.123Z"
      - "2026-01-02T21:14:44+00:00"

    Returns None for blank or unparseable text.
    """
    if not text:
        return None
    s = text.strip()
    if not s:
        return None

    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    try:
        dt = _dt.datetime.fromisoformat(s)
    except ValueError:
        return None

    # Naive times are assumed to be UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=_dt.timezone.utc)

    return dt.astimezone(_dt.timezone.utc)


def _indent(elem: ET.Element, level: int = 0, indent: str = "  ") -> None:
    """
    In-place pretty-printer for ElementTree output. Eliminates double blank-line
    issues by explicitly controlling .text/.tail.
    """
    i = "\n" + level * indent
    j = "\n" + (level - 1) * indent if level > 0 else "\n"

    children = list(elem)
    if children:
        if elem.text is None or not elem.text.strip():
            elem.text = i + indent
        for child in children:
            _indent(child, level + 1, indent=indent)
        if children[-1].tail is None or not children[-1].tail.strip():
            children[-1].tail = i
    if elem.tail is None or not elem.tail.strip():
        elem.tail = j


def parse_gpx_text(text: str | bytes) -> ET.Element:
    """
    Parse GPX text into its root element.

    Raises:
      InvalidGpxError if the text is not well-formed XML.
    """
    try:
        return ET.fromstring(text)
    except ET.ParseError as e:
        raise InvalidGpxError(f"GPX parse failed: {e}") from e


def read_gpx(path: Path) -> ET.Element:
    """
    Read a GPX file and return its root element.

    Raises:
      InvalidGpxError, OSError
    """
    return parse_gpx_text(Path(path).read_bytes())


def write_gpx(root: ET.Element, out_path: Path, *, pretty: bool = True) -> None:
    """
    Write a GPX XML tree to disk.

    - pretty=True applies indentation for human readability
    - writes UTF-8 with XML declaration
    """
    if pretty:
        _indent(root)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    tree = ET.ElementTree(root)
    tree.write(out_path, encoding="utf-8", xml_declaration=True)


def _parse_coord(trkpt: ET.Element, attr: str, limit: float, index: int) -> float:
    raw = trkpt.get(attr)
    if raw is None:
        raise InvalidGpxError(f"trkpt #{index} is missing the '{attr}' attribute")
    try:
        value = float(raw)
    except ValueError:
        raise InvalidGpxError(f"trkpt #{index} has a non-numeric {attr}: {raw!r}") from None
    if not math.isfinite(value) or abs(value) > limit:
        raise InvalidGpxError(f"trkpt #{index} has an out-of-range {attr}: {raw!r}")
    return value


def _parse_ele(text: str, index: int) -> Optional[float]:
    s = text.strip()
    if not s:
        return None
    try:
        value = float(s)
    except ValueError:
        raise InvalidGpxError(f"trkpt #{index} has a non-numeric <ele>: {s!r}") from None
    if not math.isfinite(value):
        raise InvalidGpxError(f"trkpt #{index} has a non-finite <ele>: {s!r}")
    return value


def iter_trackpoints(root: ET.Element) -> Iterable[ET.Element]:
    """Yield every <trkpt> element in document order, whatever the namespace."""
    for elem in root.iter():
        if _local(elem.tag) == "trkpt":
            yield elem


def extract_points(root: ET.Element) -> list[GeoPoint]:
    """
    Extract ordered track points from a GPX document.

    Every <trkpt> becomes one GeoPoint; nothing is skipped or re-sorted.
    Points without <ele> or <time> keep those fields as None.

    Raises:
      InvalidGpxError for missing, non-numeric or out-of-range lat/lon,
      and for a non-numeric <ele>.
    """
    pts: list[GeoPoint] = []

    for i, trkpt in enumerate(iter_trackpoints(root)):
        lat = _parse_coord(trkpt, "lat", 90.0, i)
        lng = _parse_coord(trkpt, "lon", 180.0, i)

        ele_text = _child_text(trkpt, "ele")
        ele = _parse_ele(ele_text, i) if ele_text is not None else None

        time_text = _child_text(trkpt, "time")
        time = time_text.strip() if time_text and time_text.strip() else None

        pts.append(GeoPoint(lat=lat, lng=lng, ele=ele, time=time))

    return pts


def extract_track_name(root: ET.Element) -> Optional[str]:
    """
    Return the first <name> in document order (metadata, track or waypoint).

    Blank names count as missing.
    """
    for elem in root.iter():
        if _local(elem.tag) == "name":
            name = (elem.text or "").strip()
            return name or None
    return None


def _format_number(value: float) -> str:
    # repr() is the shortest string that round-trips the float exactly
    return repr(float(value))


def build_gpx(points: Sequence[GeoPoint], name: str) -> ET.Element:
    """
    Build a GPX 1.1 document with a single track and segment.

    <ele> and <time> are written only for points that carry them.
    """
    ET.register_namespace("", GPX_NS["gpx"])
    root = ET.Element(qn("gpx"), {"version": "1.1", "creator": GPX_CREATOR})
    trk = ET.SubElement(root, qn("trk"))
    ET.SubElement(trk, qn("name")).text = name
    seg = ET.SubElement(trk, qn("trkseg"))

    for p in points:
        trkpt = ET.SubElement(
            seg, qn("trkpt"),
            {"lat": _format_number(p.lat), "lon": _format_number(p.lng)},
        )
        if p.ele is not None:
            ET.SubElement(trkpt, qn("ele")).text = _format_number(p.ele)
        if p.time:
            ET.SubElement(trkpt, qn("time")).text = p.time

    return root


def export_gpx(points: Sequence[GeoPoint], name: str, *, pretty: bool = True) -> str:
    """Render a point sequence as GPX 1.1 text (with XML declaration)."""
    root = build_gpx(points, name)
    if pretty:
        _indent(root)
    body = ET.tostring(root, encoding="unicode")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + body
