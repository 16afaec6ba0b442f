# turbotrack/errors.py

"""
turbotrack.errors

Central exception hierarchy for TurboTrack.

Rationale:
  - Library modules raise specific, meaningful errors.
  - Callers can catch TurboTrackError (broad) or specific subclasses (narrow).
  - The track analyzer itself raises nothing; errors live at the edges
    (GPX ingestion, storage, configuration, interactive selection).
"""


class TurboTrackError(RuntimeError):
    """Base class for all TurboTrack runtime errors."""


# ---- GPX ingestion errors ----------------------

class GpxError(TurboTrackError):
    """Errors reading or interpreting GPX documents."""

class InvalidGpxError(GpxError):
    """GPX text could not be parsed or carried unusable point data."""


# ---- Storage errors ----------------------------

class StorageError(TurboTrackError):
    """Errors interacting with the flat-file JSON store."""

class TrackNotFoundError(StorageError):
    """No stored track exists for the requested id."""

class ActivityNotFoundError(StorageError):
    """No stored activity exists for the requested id."""


# ---- Configuration errors ----------------------

class ConfigError(TurboTrackError):
    """A configuration file exists but could not be parsed."""


# ---- Selection errors --------------------------

class SelectionError(TurboTrackError):
    """Errors in interactive file selection."""

class FzfNotFoundError(SelectionError):
    """fzf is required but not available on PATH."""
