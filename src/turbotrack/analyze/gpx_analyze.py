#!/usr/bin/env python3
"""
turbotrack-analyze: analyze GPX file(s), print statistics, optionally store them.

Usage:
  turbotrack-analyze ride.gpx hike.gpx
  turbotrack-analyze --tsv ~/TurboTrack/_work/*.gpx > stats.tsv
  turbotrack-analyze --save --plot ~/TurboTrack/plots      # pick files with fzf

Each file is parsed, analyzed and reported independently; a file that fails
to parse, store or plot is reported and skipped, and the exit code is 1 if
any file failed.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from turbotrack.analyze.track import TrackSummary, analyze_file
from turbotrack.config import load_config
from turbotrack.errors import TurboTrackError
from turbotrack.store.json_store import TrackStore
from turbotrack.util.fzf import fzf_select_paths
from turbotrack.util.logging import log
from turbotrack.util.paths import slugify


def _fmt_opt(value: Optional[object]) -> str:
    return "-" if value is None else str(value)


def print_report(path: Path, s: TrackSummary, *, tsv: bool) -> None:
    duration = s.duration_s
    if tsv:
        print(
            f"{path}\t"
            f"{s.name}\t"
            f"{len(s.points)}\t"
            f"{s.distance_km:.2f}\t"
            f"{s.elevation_gain_m}\t"
            f"{s.elevation_loss_m}\t"
            f"{s.max_elevation_m}\t"
            f"{s.min_elevation_m}\t"
            f"{_fmt_opt(s.start_time)}\t"
            f"{_fmt_opt(s.end_time)}\t"
            f"{'' if duration is None else f'{duration:.1f}'}"
        )
    else:
        print(f"\n{path}")
        print(f"  name           : {s.name}")
        print(f"  id             : {s.id}")
        print(f"  points         : {len(s.points)}")
        print(f"  distance (km)  : {s.distance_km:.2f}")
        print(f"  gain (m)       : {s.elevation_gain_m}")
        print(f"  loss (m)       : {s.elevation_loss_m}")
        print(f"  max ele (m)    : {s.max_elevation_m}")
        print(f"  min ele (m)    : {s.min_elevation_m}")
        print(f"  start          : {_fmt_opt(s.start_time)}")
        print(f"  end            : {_fmt_opt(s.end_time)}")
        if duration is not None:
            print(f"  duration (s)   : {duration:.1f}")


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="TurboTrack: Analyze GPX file(s).")
    ap.add_argument("gpx", nargs="*",
                    help="One or more GPX files. If omitted, use fzf selection under the work root.")
    ap.add_argument("--work-root", default=None,
                    help="Where to look for *.gpx when selecting with fzf (default: from config)")
    ap.add_argument("--tracks-dir", default=None,
                    help="Track store directory for --save (default: from config)")
    ap.add_argument("--tsv", action="store_true",
                    help="Print tab-separated output (good for piping).")
    ap.add_argument("--save", action="store_true",
                    help="Store each analyzed track as <id>.json in the track store.")
    ap.add_argument("--plot", default=None, metavar="DIR",
                    help="Write an elevation profile PNG per file into DIR.")

    args = ap.parse_args(argv)
    try:
        cfg = load_config()
    except TurboTrackError as e:
        log(f"ERROR: {e}")
        return 2

    if args.gpx:
        selected = [Path(p).expanduser() for p in args.gpx]
    else:
        work_root = Path(args.work_root).expanduser() if args.work_root else cfg.paths.work_root
        gpx_files = sorted(work_root.rglob("*.gpx")) if work_root.is_dir() else []
        if not gpx_files:
            log(f"No GPX files found under {work_root}")
            return 2
        try:
            selected = fzf_select_paths(gpx_files, header="Select GPX file(s) to analyze:", multi=True)
        except TurboTrackError as e:
            log(f"ERROR: {e}")
            return 2
        if not selected:
            log("No selection made. Exiting.")
            return 0

    store = None
    if args.save:
        tracks_dir = Path(args.tracks_dir).expanduser() if args.tracks_dir else cfg.paths.tracks_dir
        store = TrackStore(tracks_dir)

    if args.tsv:
        print("file\tname\tpoints\tdistance_km\tgain_m\tloss_m\tmax_ele_m\tmin_ele_m\tstart\tend\tduration_s")

    failures = 0
    for path in selected:
        if not path.is_file():
            log(f"Skipping (not a file): {path}")
            failures += 1
            continue
        try:
            summary = analyze_file(path, default_name=cfg.default_track_name)
        except (TurboTrackError, OSError) as e:
            log(f"ERROR: {path}: {e}")
            failures += 1
            continue

        print_report(path, summary, tsv=args.tsv)

        try:
            if store is not None:
                store.save(summary)
            if args.plot:
                import matplotlib.pyplot as plt
                from turbotrack.visualize.plot import plot_elevation_profile
                out = Path(args.plot).expanduser() / f"{slugify(path.stem)}_profile.png"
                plt.close(plot_elevation_profile(summary, out_path=out))
                log(f"Wrote plot: {out}")
        except (TurboTrackError, OSError) as e:
            log(f"ERROR: {path}: {e}")
            failures += 1

    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
