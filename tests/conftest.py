import os
from pathlib import Path

import pytest

# Plot tests render off-screen
os.environ.setdefault("MPLBACKEND", "Agg")


@pytest.fixture
def sample_gpx_path() -> Path:
    return Path(__file__).parent / "data" / "sample.gpx"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch) -> Path:
    """Point HOME and the data root at tmp_path so no real config or data is touched."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "TURBOTRACK_TRACKS_DIR",
        "TURBOTRACK_ACTIVITIES_DIR",
        "TURBOTRACK_WORK_ROOT",
    ):
        monkeypatch.delenv(var, raising=False)
    data_root = tmp_path / "data"
    monkeypatch.setenv("TURBOTRACK_DATA_ROOT", str(data_root))
    return data_root
