#!/usr/bin/env python3
"""
turbotrack-export: write a stored track back out as a GPX 1.1 file.

Usage:
  turbotrack-export 3f0c...e1                     # -> ./<track name>.gpx
  turbotrack-export 3f0c...e1 --out ride.gpx
  turbotrack-export 3f0c...e1 --activity act-k2j9x0a1b  # title from the activity
  turbotrack-export 3f0c...e1 --out -             # GPX to stdout
  turbotrack-export                               # pick the track with fzf

The exported <trk><name> is the track name, or the activity's route name
when --activity is given. Only points, <ele> and <time> are written.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from turbotrack.config import load_config
from turbotrack.errors import TurboTrackError
from turbotrack.formats.gpx import build_gpx, export_gpx, write_gpx
from turbotrack.store.json_store import ActivityStore, TrackStore
from turbotrack.store.store_list import select_ids
from turbotrack.util.logging import log
from turbotrack.util.paths import slugify


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="TurboTrack: Export a stored track as GPX.")
    ap.add_argument("track_id", nargs="?", default=None,
                    help="Id of the stored track. If omitted, pick one with fzf.")
    ap.add_argument("--activity", default=None,
                    help="Use this activity's route name as the GPX track title.")
    ap.add_argument("--out", default=None,
                    help="Output path, or '-' for stdout (default: ./<title>.gpx)")
    ap.add_argument("--tracks-dir", default=None, help="Track store directory (default: from config)")
    ap.add_argument("--activities-dir", default=None, help="Activity store directory (default: from config)")
    args = ap.parse_args(argv)

    try:
        cfg = load_config()
        tracks = TrackStore(Path(args.tracks_dir).expanduser() if args.tracks_dir else cfg.paths.tracks_dir)
        track_id = args.track_id
        if not track_id:
            picked = select_ids(tracks, header="Select a track to export:", multi=False)
            if not picked:
                log("No selection made. Exiting.")
                return 0
            track_id = picked[0]
        summary = tracks.load(track_id)

        title = summary.name
        if args.activity:
            activities = ActivityStore(
                Path(args.activities_dir).expanduser() if args.activities_dir else cfg.paths.activities_dir
            )
            title = activities.load(args.activity).route_name or title
    except TurboTrackError as e:
        log(f"ERROR: {e}")
        return 1

    if args.out == "-":
        sys.stdout.write(export_gpx(summary.points, title) + "\n")
        return 0

    out_path = Path(args.out).expanduser() if args.out else Path.cwd() / f"{slugify(title, default='track')}.gpx"
    try:
        write_gpx(build_gpx(summary.points, title), out_path)
    except OSError as e:
        log(f"ERROR: {out_path}: {e}")
        return 1
    log(f"Wrote: {out_path} ({len(summary.points)} points)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
