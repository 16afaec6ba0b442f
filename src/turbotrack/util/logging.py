# turbotrack/util/logging.py
from __future__ import annotations

import datetime
import sys
from typing import TextIO


def utc_now_iso() -> str:
    """Return current UTC timestamp as ISO-8601 string (seconds, Z suffix)."""
    now = datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)
    return now.isoformat().replace("+00:00", "Z")


def log(msg: str, *, stream: TextIO | None = None) -> None:
    """Print a timestamped log line (local time with timezone) to stderr."""
    ts = datetime.datetime.now().astimezone().isoformat(timespec="seconds")
    print(f"{ts}  {msg}", file=stream or sys.stderr)
