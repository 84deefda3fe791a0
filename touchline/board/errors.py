"""Engine exceptions.

These are raised inside the engine and caught at the BoardSession
boundary, which reports failure as unchanged state plus a flag.
"""


class TouchlineError(Exception):
    """Base class for engine errors."""


class BoardValidationError(TouchlineError):
    """Raised for unknown player/slot ids or malformed positions."""


class CorruptedSnapshotError(TouchlineError):
    """Raised when snapshot data cannot be loaded as a whole."""


class InvalidDragTransition(TouchlineError):
    """Raised when a drag step is attempted from the wrong phase."""
