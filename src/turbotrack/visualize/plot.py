# turbotrack/visualize/plot.py
"""
Plotting routines for TurboTrack
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt

from turbotrack.analyze.track import TrackSummary, cumulative_distances


def plot_elevation_profile(
        summary: TrackSummary, *,
        out_path: Optional[Path] = None,
        show: bool = False,
):
    """
    Plot elevation (m) against cumulative distance (km).

    Points without elevation are left out of the line; their distance still
    counts toward the x position of the points after them.
    """
    dists = cumulative_distances(summary.points)
    xs = [d for d, p in zip(dists, summary.points) if p.ele is not None]
    ys = [p.ele for p in summary.points if p.ele is not None]

    fig, ax = plt.subplots(figsize=(8, 4))
    if xs:
        ax.fill_between(xs, ys, min(ys), alpha=0.25, color="tab:green")
        ax.plot(xs, ys, color="tab:green", linewidth=1.2)
    ax.set_xlabel("Distance (km)")
    ax.set_ylabel("Elevation (m)")
    ax.set_title(
        f"{summary.name}: {summary.distance_km} km, "
        f"+{summary.elevation_gain_m} m / -{summary.elevation_loss_m} m"
    )
    ax.grid(True, alpha=0.3)
    fig.tight_layout()

    if out_path is not None:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(out_path)
    if show:
        plt.show()
    return fig
