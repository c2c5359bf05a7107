# src/viewer_core/errors.py
"""
Exception taxonomy for viewer_core.

Per-item load failures and aborts are NOT exceptions: they are counted by
LoadSession and surfaced once per cycle as a LoadOutcome. Dictionary misses
during tag flattening fall back to an "x<tag>" name. Only programming or UI
wiring mistakes raise.
"""


class ViewerCoreError(Exception):
    """Base class for viewer_core errors."""


class BucketNotFound(ViewerCoreError, KeyError):
    """Raised when selecting a folder name absent from the current partition."""

    def __init__(self, name: str, available=()):
        self.name = name
        self.available = tuple(available)
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unknown folder {self.name!r} (available: {', '.join(self.available) or 'none'})"


class UnknownEventError(ViewerCoreError, ValueError):
    """Raised when an engine event kind cannot be mapped to LoadEventKind."""
