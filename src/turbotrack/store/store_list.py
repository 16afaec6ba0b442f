#!/usr/bin/env python3
"""
turbotrack-list: list stored tracks or activities.

Usage:
  turbotrack-list                          # tracks, newest first
  turbotrack-list activities
  turbotrack-list activities --track 3f0c...e1
  turbotrack-list --tsv > tracks.tsv

The ids printed here are what turbotrack-export, turbotrack-publish and
turbotrack-delete take.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Optional

from turbotrack.activity.announce import Activity
from turbotrack.config import TurboTrackConfig, load_config
from turbotrack.errors import TurboTrackError
from turbotrack.store.json_store import ActivityStore, JsonStore, TrackStore
from turbotrack.util.fzf import fzf_select
from turbotrack.util.logging import log

TRACK_COLUMNS = ("id", "name", "startTime", "distance", "elevationGain", "elevationLoss")
ACTIVITY_COLUMNS = ("id", "trackId", "routeName", "date", "time", "createdAt")


def _cell(value: Any) -> str:
    return "-" if value is None or value == "" else str(value)


def track_row(entry: dict[str, Any]) -> list[str]:
    return [_cell(entry.get(c)) for c in TRACK_COLUMNS]


def activity_row(activity: Activity) -> list[str]:
    doc = activity.to_dict()
    return [_cell(doc.get(c)) for c in ACTIVITY_COLUMNS]


def track_label(entry: dict[str, Any]) -> str:
    """One-line description used when picking a stored track."""
    return f"{_cell(entry.get('name'))}  {_cell(entry.get('startTime'))}  {_cell(entry.get('distance'))} km"


def activity_label(activity: Activity) -> str:
    return f"{_cell(activity.route_name)}  {_cell(activity.date)}  {_cell(activity.created_at)}"


def open_stores(cfg: TurboTrackConfig, tracks_dir: Optional[str], activities_dir: Optional[str]):
    """TrackStore and ActivityStore, CLI directories winning over config."""
    tracks = TrackStore(Path(tracks_dir).expanduser() if tracks_dir else cfg.paths.tracks_dir)
    activities = ActivityStore(
        Path(activities_dir).expanduser() if activities_dir else cfg.paths.activities_dir
    )
    return tracks, activities


def select_ids(store: JsonStore, *, header: str, multi: bool = True) -> list[str]:
    """Pick ids from a store's index with fzf, labelled for that store's kind."""
    if isinstance(store, ActivityStore):
        choices = [(a.id, activity_label(a)) for a in store.activities()]
    else:
        choices = [(str(e["id"]), track_label(e)) for e in store.index()]
    return fzf_select(choices, header=header, multi=multi)


def _print_table(columns: tuple[str, ...], rows: list[list[str]], *, tsv: bool) -> None:
    if tsv:
        print("\t".join(columns))
        for row in rows:
            print("\t".join(row))
        return

    widths = [max([len(c)] + [len(r[i]) for r in rows]) for i, c in enumerate(columns)]
    print("  ".join(c.ljust(w) for c, w in zip(columns, widths)).rstrip())
    for row in rows:
        print("  ".join(v.ljust(w) for v, w in zip(row, widths)).rstrip())


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="TurboTrack: List stored tracks or activities.")
    ap.add_argument("kind", nargs="?", choices=("tracks", "activities"), default="tracks",
                    help="What to list (default: tracks)")
    ap.add_argument("--track", default=None, metavar="TRACK_ID",
                    help="With 'activities': only activities for this track.")
    ap.add_argument("--tsv", action="store_true",
                    help="Print tab-separated output (good for piping).")
    ap.add_argument("--tracks-dir", default=None, help="Track store directory (default: from config)")
    ap.add_argument("--activities-dir", default=None, help="Activity store directory (default: from config)")
    args = ap.parse_args(argv)

    try:
        cfg = load_config()
        tracks, activities = open_stores(cfg, args.tracks_dir, args.activities_dir)
    except TurboTrackError as e:
        log(f"ERROR: {e}")
        return 2

    if args.kind == "tracks":
        rows = [track_row(e) for e in tracks.summaries()]
        _print_table(TRACK_COLUMNS, rows, tsv=args.tsv)
    else:
        acts = activities.for_track(args.track) if args.track else activities.activities()
        rows = [activity_row(a) for a in acts]
        _print_table(ACTIVITY_COLUMNS, rows, tsv=args.tsv)

    log(f"{len(rows)} {args.kind}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
