#!/usr/bin/env python3
"""
turbotrack-publish: compose an activity announcement for a stored track.

Usage:
  turbotrack-publish 3f0c...e1 --date "October 26 (Sunday)" --leader Ana
  turbotrack-publish 3f0c...e1 --preset weekend --print-only
  turbotrack-publish 3f0c...e1 --edit act-k2j9x0a1b --time "8:00 AM"

Form values come from the activity preset in config (or from the activity
being edited), then from any flags given here. The announcement text is
printed; unless --print-only is set the activity is written to the store.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from turbotrack.activity.announce import (
    ActivityForm,
    compose_activity,
    default_activity_date,
)
from turbotrack.config import load_config
from turbotrack.errors import TurboTrackError
from turbotrack.store.json_store import ActivityStore, TrackStore
from turbotrack.util.logging import log

# flag name -> ActivityForm field
FORM_FLAGS = {
    "route_name": "Route name (default: track name)",
    "date": "Activity date text (default: today)",
    "time": "Meeting time",
    "meeting_point": "Meeting point",
    "leader": "Leader",
    "limit": "Group size limit",
    "difficulty": "Difficulty, e.g. ★★★☆☆",
    "weather": "Weather forecast text",
    "road_type": "Terrain description",
    "duration": "Estimated duration",
    "notes": "Notes section text",
    "fees": "Fees section text",
    "equipment": "Equipment section text",
    "disclaimer": "Disclaimer section text",
}


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="TurboTrack: Compose and publish an activity announcement.")
    ap.add_argument("track_id", help="Id of the stored track the activity follows.")
    ap.add_argument("--preset", default=None, help="Activity preset name (from config.toml).")
    ap.add_argument("--edit", default=None, metavar="ACTIVITY_ID",
                    help="Edit an existing activity; its id and creation time are kept.")
    ap.add_argument("--print-only", action="store_true",
                    help="Print the announcement without storing the activity.")
    ap.add_argument("--tracks-dir", default=None, help="Track store directory (default: from config)")
    ap.add_argument("--activities-dir", default=None, help="Activity store directory (default: from config)")
    for name, help_text in FORM_FLAGS.items():
        ap.add_argument(f"--{name.replace('_', '-')}", dest=name, default=None, help=help_text)
    args = ap.parse_args(argv)

    overrides = {name: getattr(args, name) for name in FORM_FLAGS}

    try:
        cfg = load_config()
        tracks = TrackStore(Path(args.tracks_dir).expanduser() if args.tracks_dir else cfg.paths.tracks_dir)
        activities = ActivityStore(
            Path(args.activities_dir).expanduser() if args.activities_dir else cfg.paths.activities_dir
        )
        summary = tracks.load(args.track_id)

        existing = activities.load(args.edit) if args.edit else None
        if existing is not None:
            form = ActivityForm.from_activity(existing).with_changes(**overrides)
        else:
            route_name = overrides.pop("route_name") or summary.name
            date = overrides.pop("date") or default_activity_date()
            form = ActivityForm.from_preset(
                cfg.activity.get_preset(args.preset),
                route_name=route_name,
                date=date,
                **overrides,
            )

        activity = compose_activity(summary, form, existing=existing)
        print(activity.full_text)

        if not args.print_only:
            activities.save(activity)
            log(f"Published activity {activity.id} for track {summary.id}")
    except TurboTrackError as e:
        log(f"ERROR: {e}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
