#!/usr/bin/env python3
"""
turbotrack-delete: remove stored tracks or activities.

Usage:
  turbotrack-delete track 3f0c...e1
  turbotrack-delete activity act-k2j9x0a1b act-p0q8z7y6x
  turbotrack-delete activity                      # pick with fzf

Deleting a track leaves its activities in place; list them with
`turbotrack-list activities --track ID` and delete them separately.
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

from turbotrack.config import load_config
from turbotrack.errors import TurboTrackError
from turbotrack.store.store_list import open_stores, select_ids
from turbotrack.util.logging import log


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="TurboTrack: Delete stored tracks or activities.")
    ap.add_argument("kind", choices=("track", "activity"), help="What to delete.")
    ap.add_argument("ids", nargs="*", help="Ids to delete. If omitted, use fzf selection.")
    ap.add_argument("--tracks-dir", default=None, help="Track store directory (default: from config)")
    ap.add_argument("--activities-dir", default=None, help="Activity store directory (default: from config)")
    args = ap.parse_args(argv)

    try:
        cfg = load_config()
        tracks, activities = open_stores(cfg, args.tracks_dir, args.activities_dir)
        store = tracks if args.kind == "track" else activities
        ids = args.ids or select_ids(store, header=f"Select {args.kind}(s) to delete:")
    except TurboTrackError as e:
        log(f"ERROR: {e}")
        return 2

    if not ids:
        log("No selection made. Exiting.")
        return 0

    failures = 0
    for doc_id in ids:
        try:
            store.delete(doc_id)
        except TurboTrackError as e:
            log(f"ERROR: {e}")
            failures += 1

    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
