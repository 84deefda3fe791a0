"""Board coordinates and rectangles.

All positions on the board use a normalized percentage space:
    (0, 0)     = top-left corner of the surface
    (100, 100) = bottom-right corner
    +X = right, +Y = down (toward the home goal line)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass(frozen=True, slots=True)
class Position:
    """Immutable 2D point in percentage space."""

    x: float = 0.0
    y: float = 0.0

    # =========================================================================
    # Arithmetic Operations
    # =========================================================================

    def __add__(self, other: Position) -> Position:
        return Position(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Position) -> Position:
        return Position(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Position:
        return Position(self.x * scalar, self.y * scalar)

    def __rmul__(self, scalar: float) -> Position:
        return Position(self.x * scalar, self.y * scalar)

    def __neg__(self) -> Position:
        return Position(-self.x, -self.y)

    # =========================================================================
    # Geometry
    # =========================================================================

    def length(self) -> float:
        """Magnitude when treated as an offset."""
        return math.hypot(self.x, self.y)

    def distance_to(self, other: Position) -> float:
        """Euclidean distance to another point."""
        return math.hypot(other.x - self.x, other.y - self.y)

    def with_x(self, x: float) -> Position:
        """Return new position with different x."""
        return Position(x, self.y)

    def with_y(self, y: float) -> Position:
        """Return new position with different y."""
        return Position(self.x, y)

    @property
    def is_finite(self) -> bool:
        """False if either coordinate is NaN or infinite."""
        return math.isfinite(self.x) and math.isfinite(self.y)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict) -> Position:
        """
        Create from a ``{"x": .., "y": ..}`` mapping.

        Raises ValueError when a coordinate is missing or not a number.
        """
        try:
            x = float(data["x"])
            y = float(data["y"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Malformed position: {data!r}") from e
        return cls(x, y)

    def __repr__(self) -> str:
        return f"Position({self.x:.2f}, {self.y:.2f})"


@dataclass(frozen=True, slots=True)
class Bounds:
    """Axis-aligned bounds in percentage space. Edges are inclusive."""

    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @classmethod
    def from_positions(cls, positions: Iterable[Position]) -> Optional[Bounds]:
        """Tightest bounds around ``positions``, or None when empty."""
        points = list(positions)
        if not points:
            return None
        return cls(
            min_x=min(p.x for p in points),
            max_x=max(p.x for p in points),
            min_y=min(p.y for p in points),
            max_y=max(p.y for p in points),
        )

    @classmethod
    def from_corners(cls, a: Position, b: Position) -> Bounds:
        """Bounds spanned by two opposite corners in any order."""
        return cls(
            min_x=min(a.x, b.x),
            max_x=max(a.x, b.x),
            min_y=min(a.y, b.y),
            max_y=max(a.y, b.y),
        )

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Position:
        return Position((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def contains(self, pos: Position) -> bool:
        """Inclusive containment on both axes."""
        return self.min_x <= pos.x <= self.max_x and self.min_y <= pos.y <= self.max_y

    def to_dict(self) -> dict:
        return {
            "min_x": self.min_x,
            "max_x": self.max_x,
            "min_y": self.min_y,
            "max_y": self.max_y,
        }


@dataclass(frozen=True, slots=True)
class SurfaceRect:
    """
    Measured rectangle of the host's drawing surface, in host pixels.

    The engine only needs it to convert pointer locations into percentage
    space and to detect a surface that has not been laid out yet.
    """

    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def is_degenerate(self) -> bool:
        """True when the surface has zero (or negative, or non-finite) area."""
        if not all(math.isfinite(v) for v in (self.left, self.top, self.width, self.height)):
            return True
        return self.width <= 0 or self.height <= 0

    def to_percent(self, px: float, py: float) -> Optional[Position]:
        """
        Convert a pointer location to percentage space.

        Returns None for a degenerate surface or a non-finite result.
        """
        if self.is_degenerate:
            return None
        pos = Position(
            (px - self.left) / self.width * 100,
            (py - self.top) / self.height * 100,
        )
        return pos if pos.is_finite else None
