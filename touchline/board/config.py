"""
Board engine configuration.

Controls snapping, collision, boundary, selection and history behaviour.
Every setting can be overridden via TOUCHLINE_* environment variables
through ``BoardConfig.from_env()``. Sessions receive their config
explicitly; there is no process-wide instance.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from touchline.core.models.field import Bounds


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return float(raw)


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return int(raw)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.lower() in ("1", "true", "yes", "on")


@dataclass
class GridConfig:
    """Snap-to-grid settings. Sizes are in percent of the surface."""

    enabled: bool = field(default_factory=lambda: _env_bool("TOUCHLINE_GRID_ENABLED", True))
    size: float = field(default_factory=lambda: _env_float("TOUCHLINE_GRID_SIZE", 5.0))
    snap_threshold: float = field(
        default_factory=lambda: _env_float("TOUCHLINE_GRID_SNAP_THRESHOLD", 2.5)
    )


@dataclass
class CollisionConfig:
    """Minimum spacing between players."""

    enabled: bool = field(
        default_factory=lambda: _env_bool("TOUCHLINE_COLLISION_ENABLED", True)
    )
    min_distance: float = field(
        default_factory=lambda: _env_float("TOUCHLINE_COLLISION_MIN_DISTANCE", 3.0)
    )
    prevent_overlap: bool = field(
        default_factory=lambda: _env_bool("TOUCHLINE_COLLISION_PREVENT_OVERLAP", True)
    )


@dataclass
class AlignmentConfig:
    """Snapping to slots, zones and peer players."""

    enabled: bool = field(
        default_factory=lambda: _env_bool("TOUCHLINE_ALIGNMENT_ENABLED", True)
    )
    snap_to_formation_slots: bool = True
    snap_to_tactical_zones: bool = True
    snap_to_players: bool = True
    alignment_threshold: float = field(
        default_factory=lambda: _env_float("TOUCHLINE_ALIGNMENT_THRESHOLD", 4.0)
    )


@dataclass
class BoundaryConfig:
    """Playable rectangle that every live position is clamped into."""

    min_x: float = field(default_factory=lambda: _env_float("TOUCHLINE_BOUNDARY_MIN_X", 2.0))
    max_x: float = field(default_factory=lambda: _env_float("TOUCHLINE_BOUNDARY_MAX_X", 98.0))
    min_y: float = field(default_factory=lambda: _env_float("TOUCHLINE_BOUNDARY_MIN_Y", 2.0))
    max_y: float = field(default_factory=lambda: _env_float("TOUCHLINE_BOUNDARY_MAX_Y", 98.0))
    enforce: bool = field(
        default_factory=lambda: _env_bool("TOUCHLINE_BOUNDARY_ENFORCE", True)
    )

    @property
    def bounds(self) -> Bounds:
        return Bounds(self.min_x, self.max_x, self.min_y, self.max_y)


@dataclass
class SelectionConfig:
    """Selection limits."""

    # None = unlimited; otherwise keep the most recently added N ids
    max_selection_count: Optional[int] = field(
        default_factory=lambda: _env_int("TOUCHLINE_MAX_SELECTION", None)
    )


@dataclass
class HistoryConfig:
    """Undo/redo settings."""

    max_history_size: int = field(
        default_factory=lambda: _env_int("TOUCHLINE_MAX_HISTORY", 50)
    )
    coalesce_window: float = field(
        default_factory=lambda: _env_float("TOUCHLINE_COALESCE_WINDOW", 0.5)
    )  # seconds


@dataclass
class BoardConfig:
    """Full configuration for one board session."""

    grid: GridConfig = field(default_factory=GridConfig)
    collision: CollisionConfig = field(default_factory=CollisionConfig)
    alignment: AlignmentConfig = field(default_factory=AlignmentConfig)
    boundary: BoundaryConfig = field(default_factory=BoundaryConfig)
    selection: SelectionConfig = field(default_factory=SelectionConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)

    @classmethod
    def from_env(cls) -> "BoardConfig":
        """Create config from environment variables."""
        return cls()

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []
        if self.grid.size <= 0:
            errors.append("Grid size must be positive")
        if self.grid.snap_threshold < 0:
            errors.append("Grid snap threshold cannot be negative")
        if self.collision.min_distance < 0:
            errors.append("Collision min distance cannot be negative")
        if self.alignment.alignment_threshold < 0:
            errors.append("Alignment threshold cannot be negative")
        if self.boundary.min_x > self.boundary.max_x:
            errors.append("Boundary min_x is greater than max_x")
        if self.boundary.min_y > self.boundary.max_y:
            errors.append("Boundary min_y is greater than max_y")
        if self.history.max_history_size < 1:
            errors.append("History size must be at least 1")
        if self.history.coalesce_window < 0:
            errors.append("Coalesce window cannot be negative")
        if self.selection.max_selection_count is not None and self.selection.max_selection_count < 1:
            errors.append("Max selection count must be at least 1")
        return errors
