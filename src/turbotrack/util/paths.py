# turbotrack/util/paths.py
from __future__ import annotations

import re
from pathlib import Path

_slug_bad = re.compile(r"[^\w]+", re.UNICODE)


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists and return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def slugify(text: str, *, default: str = "untitled") -> str:
    """Create a path-safe slug (lowercase word characters and single underscores)."""
    s = (text or "").strip().lower()
    s = _slug_bad.sub("_", s).strip("_")
    return s or default


def is_plain_name(name: str) -> bool:
    """True if `name` can be used as a single file name inside a directory."""
    return bool(name) and name not in (".", "..") and Path(name).name == name and "\\" not in name
