"""
TurboTrack configuration loader

This module centralizes *all* configuration handling for TurboTrack.

Design goals:
- Keep command-line tools Unix-friendly: CLI flags override everything.
- Provide sensible defaults if no config exists.
- Allow per-machine config without committing personal paths:
    ~/.config/turbotrack/config.toml
- Allow repo-local config:
    <repo_root>/config/config.toml
- Allow environment variable overrides for automation.

Precedence (highest to lowest) for any given value:
1) CLI argument (handled by each tool)
2) Environment variables (TURBOTRACK_*)
3) User config: ~/.config/turbotrack/config.toml
4) Repo config: <repo_root>/config/config.toml
5) Hard defaults (~/TurboTrack/... paths)

This module uses Python's built-in tomllib on Python 3.11+, or `tomli` if installed.

Sections understood:

    [paths]
    data_root = "~/TurboTrack"        # parent of the two stores below
    tracks_dir = "~/TurboTrack/gpx"   # one <id>.json per analyzed track
    activities_dir = "~/TurboTrack/activities"
    work_root = "~/TurboTrack/_work"  # where the analyze tool looks for *.gpx

    [track]
    default_name = "Untitled Track"

    [activity]
    default_preset = "default"

    [activity.presets.default]
    leader = "Hepo"
    meeting_point = "Trailhead station"
    ...any other ActivityPreset field
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

from turbotrack.analyze.track import DEFAULT_TRACK_NAME
from turbotrack.errors import ConfigError

# ---------------------------------------------------------------------------
# TOML loading helpers
# ---------------------------------------------------------------------------
def _load_toml(path: Path) -> dict[str, Any]:
    """
    Parse a TOML file at `path`.

    Behavior:
    - If the file does not exist, return an empty dict (non-fatal).
    - If the file exists but is invalid TOML, raise ConfigError
      with a clear, user-facing message.
    """
    if not path.is_file():
        return {}

    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib

    try:
        return tomllib.loads(path.read_text(encoding="utf-8")) or {}
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to parse TOML config: {path} ({e})") from e


# ---------------------------------------------------------------------------
# Generic coercion helpers
# ---------------------------------------------------------------------------
def _deep_get(d: dict[str, Any], dotted_key: str) -> Any:
    """
    Fetch nested dictionary values using dot-separated keys.

    Example:
        _deep_get(cfg, "paths.tracks_dir")

    Returns None if any part of the path is missing.
    """
    cur: Any = d
    for part in dotted_key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return None
        cur = cur[part]
    return cur


def _as_path(v: Any) -> Optional[Path]:
    """
    Coerce a config value into a pathlib.Path if possible.

    Returns None if value cannot be interpreted as a path.
    """
    if v is None:
        return None
    if isinstance(v, Path):
        return v.expanduser()
    if isinstance(v, str) and v.strip():
        return Path(v).expanduser()
    return None


def _as_str(v: Any, default: str) -> str:
    """
    Coerce config values into strings.

    Always returns a string; never raises.
    """
    if v is None:
        return default
    return str(v)


def _env_path(var: str) -> Optional[Path]:
    """Read an environment variable and interpret it as a Path."""
    val = os.environ.get(var)
    return Path(val).expanduser() if val else None


# ---------------------------------------------------------------------------
# Repo discovery + defaults
# ---------------------------------------------------------------------------
def find_repo_root(start: Path) -> Optional[Path]:
    """
    Walk upward from `start` looking for the TurboTrack repo root.

    Heuristic:
    - The presence of a `config/` directory marks the repo root
    """
    start = start.resolve()
    for p in [start] + list(start.parents):
        if (p / "config").is_dir():
            return p
    return None


def default_data_root() -> Path:
    """
    Default data root if nothing is configured.

    Both stores and the work tree derive from this path
    unless explicitly overridden.
    """
    return Path.home() / "TurboTrack"


# ---------------------------------------------------------------------------
# Typed config dataclasses
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ActivityPreset:
    """
    Defaults used to prefill the activity announcement form.

    Every field is free text; it is pasted into the announcement as-is.
    """

    time: str = "9:00 AM"
    meeting_point: str = "Trailhead station"
    leader: str = "Hepo"
    limit: str = "20"
    difficulty: str = "★★☆☆☆"
    weather: str = "6-17°C (sunny)"
    road_type: str = "Stone steps / dirt trail / gravel / paved road"
    duration: str = "4-7 hours"
    notes: str = (
        "• Registration closes 15 minutes before the start; contact the leader to join late\n"
        "• Participants without insurance take part at their own risk\n"
        "• Insured participants must report any accident within 24 hours\n"
        "• Stay with the group, follow the rules and respect the outdoors"
    )
    fees: str = (
        "• 1 unit tier: includes outdoor sports accident insurance\n"
        "• Free tier: participants take part at their own risk"
    )
    equipment: str = (
        "• Upper body: quick-dry base layer, fleece mid layer, windproof soft shell\n"
        "• Lower body: quick-dry or insulated soft-shell trousers\n"
        "• Footwear: hiking boots, hiking shoes or trail runners\n"
        "• Traction: light microspikes recommended\n"
        "• Other: hat, buff, windproof gloves, water and snacks"
    )
    disclaimer: str = (
        "• This is a non-commercial, volunteer-organised activity\n"
        "• Participants join voluntarily and accept their own safety responsibility\n"
        "• Organisers and leaders plan the route and give guidance, but accept no "
        "liability beyond the accident insurance cover\n"
        "• Registering means you accept all of the terms above"
    )


@dataclass(frozen=True)
class ActivityConfig:
    """Parsed and merged activity configuration."""

    default_preset: str = "default"
    presets: dict[str, ActivityPreset] = None

    def get_preset(self, name: Optional[str]) -> ActivityPreset:
        """
        Return the requested preset, falling back safely.

        Resolution order:
        1) Explicitly requested preset
        2) Configured default_preset
        3) Literal "default" preset
        4) Hard-coded ActivityPreset()
        """
        presets = self.presets or {}
        if name and name in presets:
            return presets[name]
        if self.default_preset in presets:
            return presets[self.default_preset]
        if "default" in presets:
            return presets["default"]
        return ActivityPreset()


@dataclass(frozen=True)
class TurboTrackPaths:
    """Canonical resolved filesystem paths used by TurboTrack."""

    data_root: Path
    tracks_dir: Path
    activities_dir: Path
    work_root: Path


@dataclass(frozen=True)
class TurboTrackConfig:
    """
    Fully merged TurboTrack configuration.

    Attributes:
    - paths: resolved filesystem layout
    - default_track_name: title used when a GPX file has no <name>
    - activity: announcement form presets
    - source: provenance map showing where each value came from
    """

    paths: TurboTrackPaths
    default_track_name: str
    activity: ActivityConfig
    source: dict[str, str]


_PRESET_FIELDS = tuple(f.name for f in fields(ActivityPreset))

_PATH_KEYS = (
    "paths.data_root",
    "paths.tracks_dir",
    "paths.activities_dir",
    "paths.work_root",
)

ENV_MAP = {
    "TURBOTRACK_DATA_ROOT": "paths.data_root",
    "TURBOTRACK_TRACKS_DIR": "paths.tracks_dir",
    "TURBOTRACK_ACTIVITIES_DIR": "paths.activities_dir",
    "TURBOTRACK_WORK_ROOT": "paths.work_root",
}


def _parse_activity_section(cfg: dict[str, Any]) -> tuple[Optional[str], dict[str, dict[str, Any]]]:
    """
    Extract (default_preset, presets) from raw TOML.

    default_preset is None when the section does not set it.
    """
    act = cfg.get("activity", {}) or {}
    if not isinstance(act, dict):
        return None, {}

    default_preset = act.get("default_preset")
    presets = act.get("presets", {}) or {}
    if not isinstance(presets, dict):
        presets = {}
    presets = {str(k): (v if isinstance(v, dict) else {}) for k, v in presets.items()}

    return (str(default_preset) if default_preset is not None else None), presets


def _typed_preset(block: dict[str, Any]) -> ActivityPreset:
    base = ActivityPreset()
    values = {k: _as_str(block.get(k), getattr(base, k)) for k in _PRESET_FIELDS}
    return ActivityPreset(**values)


# ---------------------------------------------------------------------------
# Main config loader
# ---------------------------------------------------------------------------
def load_config(
    repo_root: Optional[Path] = None,
    repo_config_path: Optional[Path] = None,
    user_config_path: Optional[Path] = None,
) -> TurboTrackConfig:
    """
    Load, merge, and normalize all TurboTrack configuration.

    This function is the single authoritative entry point
    for configuration access.
    """

    if repo_root is None:
        repo_root = find_repo_root(Path(__file__).resolve())
    if repo_config_path is None and repo_root is not None:
        repo_config_path = repo_root / "config" / "config.toml"
    if user_config_path is None:
        user_config_path = Path.home() / ".config" / "turbotrack" / "config.toml"

    repo_cfg = _load_toml(repo_config_path) if repo_config_path else {}
    user_cfg = _load_toml(user_config_path) if user_config_path else {}
    labels = {"repo": repo_config_path, "user": user_config_path}

    src: dict[str, str] = {k: "default" for k in _PATH_KEYS}
    src["track.default_name"] = "default"
    src["activity.default_preset"] = "default"
    src["activity.presets"] = "default"

    # ------------------------------------------------------------------
    # Paths: repo, then user, then environment
    # ------------------------------------------------------------------
    resolved: dict[str, Path] = {}

    for cfg, label in ((repo_cfg, "repo"), (user_cfg, "user")):
        for k in _PATH_KEYS:
            v = _as_path(_deep_get(cfg, k))
            if v is None:
                continue
            resolved[k] = v
            src[k] = f"{label}:{labels[label]}"

    for env, key in ENV_MAP.items():
        v = _env_path(env)
        if v is None:
            continue
        resolved[key] = v
        src[key] = f"env:{env}"

    # Derive subfolders from data_root unless set explicitly
    data_root = resolved.get("paths.data_root", default_data_root())
    paths = TurboTrackPaths(
        data_root=data_root.expanduser(),
        tracks_dir=resolved.get("paths.tracks_dir", data_root / "gpx").expanduser(),
        activities_dir=resolved.get("paths.activities_dir", data_root / "activities").expanduser(),
        work_root=resolved.get("paths.work_root", data_root / "_work").expanduser(),
    )

    # ------------------------------------------------------------------
    # Track defaults
    # ------------------------------------------------------------------
    default_name = DEFAULT_TRACK_NAME
    for cfg, label in ((repo_cfg, "repo"), (user_cfg, "user")):
        v = _deep_get(cfg, "track.default_name")
        if v is not None and str(v).strip():
            default_name = str(v).strip()
            src["track.default_name"] = f"{label}:{labels[label]}"

    # ------------------------------------------------------------------
    # Activity presets (user overrides repo, preset by preset)
    # ------------------------------------------------------------------
    default_preset = "default"
    raw_presets: dict[str, dict[str, Any]] = {}
    for cfg, label in ((repo_cfg, "repo"), (user_cfg, "user")):
        dp, presets = _parse_activity_section(cfg)
        if dp is not None:
            default_preset = dp
            src["activity.default_preset"] = f"{label}:{labels[label]}"
        if presets:
            raw_presets.update(presets)
            src["activity.presets"] = f"{label}:{labels[label]}"

    typed_presets = {name: _typed_preset(block) for name, block in raw_presets.items()}
    typed_presets.setdefault("default", ActivityPreset())

    activity_cfg = ActivityConfig(default_preset=default_preset, presets=typed_presets)

    return TurboTrackConfig(
        paths=paths,
        default_track_name=default_name,
        activity=activity_cfg,
        source=src,
    )
