# turbotrack/util/fzf.py
"""
Interactive selection with `fzf`.

fzf_select() is the generic picker: each choice is a (key, label) pair, fzf
shows and searches the label, and the keys of the chosen lines come back.
fzf_select_paths() picks GPX files; the store commands pick stored tracks
by id with a "name, date, distance" label.
"""

from __future__ import annotations

import re
import subprocess
from pathlib import Path
from shutil import which
from typing import Iterable

from turbotrack.errors import FzfNotFoundError, SelectionError

# fzf exits 1 when nothing matched and 130 when the user aborted
_NO_SELECTION = (1, 130)
_LABEL_BREAKS = re.compile(r"[\t\r\n]+")


def _clean_label(label: str) -> str:
    # Tabs separate label from key; newlines would split the entry
    return _LABEL_BREAKS.sub(" ", str(label))


def fzf_select(
        choices: Iterable[tuple[str, str]], *,
        header: str,
        multi: bool = True,
        preview: str | None = None,
) -> list[str]:
    """
    Let the user pick from (key, label) choices; returns the chosen keys in
    fzf's output order. No choices, or an aborted selection, gives [].
    """
    choices = list(choices)
    if not choices:
        return []
    if not which("fzf"):
        raise FzfNotFoundError("fzf not found on PATH. Install fzf or pass the file names or ids explicitly.")

    input_text = "".join(f"{_clean_label(label)}\t{key}\n" for key, label in choices)

    cmd = [
        "fzf",
        "--delimiter=\t",
        "--nth=1",
        "--with-nth=1",
        "--height=60%",
        "--layout=reverse",
        "--border",
        "--header", header,
    ]
    if multi:
        cmd.append("--multi")
    if preview:
        cmd.extend(["--preview", preview, "--preview-window", "right:60%:wrap"])

    proc = subprocess.run(
        cmd,
        input=input_text.encode(),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )

    if proc.returncode in _NO_SELECTION:
        return []
    if proc.returncode != 0:
        raise SelectionError(proc.stderr.decode(errors="replace"))

    keys: list[str] = []
    for line in proc.stdout.decode().splitlines():
        if "\t" in line:
            keys.append(line.split("\t", 1)[1])
    return keys


def fzf_select_paths(
        paths: list[Path], *,
        header: str,
        multi: bool = True,
        preview: str | None = None,
) -> list[Path]:
    """Pick GPX files, shown and searched by file name."""
    keys = fzf_select(((str(p), p.name) for p in paths), header=header, multi=multi, preview=preview)
    return [Path(k).expanduser().resolve() for k in keys]
