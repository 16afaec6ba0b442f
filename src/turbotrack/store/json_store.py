# turbotrack/store/json_store.py
"""
Flat-file JSON stores for tracks and activities.

Layout:
    <tracks_dir>/<track_id>.json          full TrackSummary, points included
    <activities_dir>/<activity_id>.json   full Activity

Each store owns an in-memory index built from its directory. The index is
rebuilt explicitly: on construction, after every put()/delete(), or by calling
rebuild(). There is no shared module-level cache; two stores over the same
directory see each other's writes after their next rebuild().

Not safe for concurrent writers; this is a single-process store.
"""

from __future__ import annotations

import datetime as dt
import json
from pathlib import Path
from typing import Any

from turbotrack.activity.announce import Activity
from turbotrack.analyze.track import TrackSummary
from turbotrack.errors import (
    ActivityNotFoundError,
    StorageError,
    TrackNotFoundError,
)
from turbotrack.formats.gpx import parse_gpx_time
from turbotrack.util.logging import log
from turbotrack.util.paths import ensure_dir, is_plain_name

_EPOCH = dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc)


def _newest_first(ts: Any) -> tuple[int, float]:
    # Missing, non-string or unparseable timestamps sort after everything else
    parsed = parse_gpx_time(ts) if isinstance(ts, str) else None
    if parsed is None:
        return (1, 0.0)
    return (0, -(parsed - _EPOCH).total_seconds())


class JsonStore:
    """One JSON document per id in a single directory, plus a sorted index."""

    kind = "document"
    not_found_error: type[StorageError] = StorageError

    def __init__(self, root: Path) -> None:
        self.root = Path(root).expanduser()
        self._index: list[dict[str, Any]] = []
        self.rebuild()

    # ---- index ---------------------------------

    def index_entry(self, doc: dict[str, Any]) -> dict[str, Any]:
        return doc

    def sort_key(self, entry: dict[str, Any]) -> Any:
        return str(entry.get("id", ""))

    def rebuild(self) -> list[dict[str, Any]]:
        """Rescan the directory and replace the index. Returns the new index."""
        ensure_dir(self.root)
        entries: list[dict[str, Any]] = []

        for path in sorted(self.root.glob("*.json")):
            try:
                doc = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                log(f"Skip unreadable {self.kind} file: {path} ({e})")
                continue
            if not isinstance(doc, dict) or "id" not in doc:
                log(f"Skip malformed {self.kind} file: {path}")
                continue
            entries.append(self.index_entry(doc))

        entries.sort(key=self.sort_key)
        self._index = entries
        log(f"Index rebuilt: {len(entries)} {self.kind}(s) in {self.root}")
        return self.index()

    def index(self) -> list[dict[str, Any]]:
        return [dict(e) for e in self._index]

    # ---- documents -----------------------------

    def path_for(self, doc_id: str) -> Path:
        if not is_plain_name(str(doc_id)):
            raise StorageError(f"Invalid {self.kind} id: {doc_id!r}")
        return self.root / f"{doc_id}.json"

    def exists(self, doc_id: str) -> bool:
        return self.path_for(doc_id).is_file()

    def get(self, doc_id: str) -> dict[str, Any]:
        path = self.path_for(doc_id)
        if not path.is_file():
            raise self.not_found_error(f"{self.kind} not found: {doc_id}")
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def put(self, doc_id: str, doc: dict[str, Any]) -> Path:
        path = self.path_for(doc_id)
        ensure_dir(self.root)
        try:
            path.write_text(json.dumps(doc, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e
        log(f"Wrote {self.kind}: {path}")
        self.rebuild()
        return path

    def delete(self, doc_id: str) -> None:
        path = self.path_for(doc_id)
        if not path.is_file():
            raise self.not_found_error(f"{self.kind} not found: {doc_id}")
        try:
            path.unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}") from e
        log(f"Deleted {self.kind}: {path}")
        self.rebuild()


class TrackStore(JsonStore):
    """Analyzed tracks. The index holds summaries without their points."""

    kind = "track"
    not_found_error = TrackNotFoundError

    def index_entry(self, doc: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in doc.items() if k != "points"}

    def sort_key(self, entry: dict[str, Any]) -> Any:
        return _newest_first(entry.get("startTime"))

    def save(self, summary: TrackSummary) -> Path:
        return self.put(summary.id, summary.to_dict())

    def load(self, track_id: str) -> TrackSummary:
        return TrackSummary.from_dict(self.get(track_id))

    def summaries(self) -> list[dict[str, Any]]:
        return self.index()


class ActivityStore(JsonStore):
    """Published activity announcements, newest first."""

    kind = "activity"
    not_found_error = ActivityNotFoundError

    def sort_key(self, entry: dict[str, Any]) -> Any:
        return _newest_first(entry.get("createdAt"))

    def save(self, activity: Activity) -> Path:
        return self.put(activity.id, activity.to_dict())

    def load(self, activity_id: str) -> Activity:
        return Activity.from_dict(self.get(activity_id))

    def activities(self) -> list[Activity]:
        return [Activity.from_dict(e) for e in self._index]

    def for_track(self, track_id: str) -> list[Activity]:
        return [a for a in self.activities() if a.track_id == track_id]
