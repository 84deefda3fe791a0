"""Selection and group transforms.

Group operations are pure functions over a ``{player_id: Position}``
mapping. They return a new batch of positions for the affected players and
never mutate their input; an empty batch means the operation was a no-op.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Mapping, Optional

import numpy as np

from touchline.core.models.field import Bounds, Position

logger = logging.getLogger(__name__)

PositionBatch = dict[str, Position]
SelectionCallback = Callable[[list[str]], None]


class SelectionMode(str, Enum):
    """How a single-item selection combines with the existing selection."""

    REPLACE = "replace"
    ADD = "add"
    TOGGLE = "toggle"


class AlignEdge(str, Enum):
    """Which bound of the selection to align to."""

    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"
    CENTER_HORIZONTAL = "center-horizontal"
    CENTER_VERTICAL = "center-vertical"


class Axis(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


# =============================================================================
# Derived selection geometry
# =============================================================================


def selection_center(positions: Mapping[str, Position]) -> Optional[Position]:
    """Mean position of the group, or None when empty."""
    if not positions:
        return None
    n = len(positions)
    return Position(
        sum(p.x for p in positions.values()) / n,
        sum(p.y for p in positions.values()) / n,
    )


def selection_bounds(positions: Mapping[str, Position]) -> Optional[Bounds]:
    return Bounds.from_positions(positions.values())


@dataclass(frozen=True)
class SelectionSet:
    """Selected ids plus their positions; center and bounds are derived."""

    ids: tuple[str, ...] = ()
    positions: Mapping[str, Position] = field(default_factory=dict)

    @property
    def center(self) -> Optional[Position]:
        return selection_center(self.positions)

    @property
    def bounds(self) -> Optional[Bounds]:
        return selection_bounds(self.positions)

    def __len__(self) -> int:
        return len(self.ids)

    def __contains__(self, player_id: object) -> bool:
        return player_id in self.ids


# =============================================================================
# Group transforms
# =============================================================================


def _as_matrix(positions: Mapping[str, Position]) -> tuple[list[str], np.ndarray]:
    ids = list(positions)
    points = np.array([[positions[i].x, positions[i].y] for i in ids], dtype=float)
    return ids, points


def _apply_linear(
    positions: Mapping[str, Position],
    matrix: np.ndarray,
    center: Position,
) -> PositionBatch:
    """Apply ``matrix`` to every offset from ``center``."""
    if not positions:
        return {}
    ids, points = _as_matrix(positions)
    origin = np.array([center.x, center.y])
    moved = (points - origin) @ matrix.T + origin
    return {pid: Position(float(x), float(y)) for pid, (x, y) in zip(ids, moved)}


def move_group(positions: Mapping[str, Position], offset: Position) -> PositionBatch:
    """Translate every position by ``offset``."""
    return {pid: pos + offset for pid, pos in positions.items()}


def rotate_group(
    positions: Mapping[str, Position],
    degrees: float,
    center: Optional[Position] = None,
) -> PositionBatch:
    """Rotate about ``center`` (default: the group centroid) by ``degrees``."""
    center = center or selection_center(positions)
    if center is None:
        return {}
    radians = np.radians(degrees)
    cos_a, sin_a = np.cos(radians), np.sin(radians)
    rotation = np.array([[cos_a, -sin_a], [sin_a, cos_a]])
    return _apply_linear(positions, rotation, center)


def scale_group(
    positions: Mapping[str, Position],
    factor: float,
    center: Optional[Position] = None,
) -> PositionBatch:
    """Scale each offset from ``center`` (default: the centroid) by ``factor``."""
    center = center or selection_center(positions)
    if center is None:
        return {}
    return _apply_linear(positions, np.eye(2) * factor, center)


def mirror_group(positions: Mapping[str, Position], axis: Axis) -> PositionBatch:
    """
    Reflect about the centroid.

    HORIZONTAL flips left/right (x), VERTICAL flips top/bottom (y).
    """
    center = selection_center(positions)
    if center is None:
        return {}
    axis = Axis(axis)
    flip = np.diag([-1.0, 1.0]) if axis is Axis.HORIZONTAL else np.diag([1.0, -1.0])
    return _apply_linear(positions, flip, center)


def align_group(positions: Mapping[str, Position], edge: AlignEdge) -> PositionBatch:
    """Snap every position's x or y to the group's min, max or center bound."""
    bounds = selection_bounds(positions)
    if bounds is None:
        return {}
    edge = AlignEdge(edge)

    if edge is AlignEdge.LEFT:
        return {pid: pos.with_x(bounds.min_x) for pid, pos in positions.items()}
    if edge is AlignEdge.RIGHT:
        return {pid: pos.with_x(bounds.max_x) for pid, pos in positions.items()}
    if edge is AlignEdge.TOP:
        return {pid: pos.with_y(bounds.min_y) for pid, pos in positions.items()}
    if edge is AlignEdge.BOTTOM:
        return {pid: pos.with_y(bounds.max_y) for pid, pos in positions.items()}
    if edge is AlignEdge.CENTER_HORIZONTAL:
        return {pid: pos.with_x(bounds.center.x) for pid, pos in positions.items()}
    return {pid: pos.with_y(bounds.center.y) for pid, pos in positions.items()}


def distribute_group(positions: Mapping[str, Position], axis: Axis) -> PositionBatch:
    """
    Space positions evenly across the group's existing extent on ``axis``.

    Needs at least three positions; anything less is a no-op. Ties in
    the sort keep the mapping's order.
    """
    if len(positions) < 3:
        return {}
    bounds = selection_bounds(positions)
    axis = Axis(axis)

    if axis is Axis.HORIZONTAL:
        ordered = sorted(positions.items(), key=lambda item: item[1].x)
        spacing = bounds.width / (len(ordered) - 1)
        return {
            pid: pos.with_x(bounds.min_x + spacing * index)
            for index, (pid, pos) in enumerate(ordered)
        }

    ordered = sorted(positions.items(), key=lambda item: item[1].y)
    spacing = bounds.height / (len(ordered) - 1)
    return {
        pid: pos.with_y(bounds.min_y + spacing * index)
        for index, (pid, pos) in enumerate(ordered)
    }


def swap_positions(
    positions: Mapping[str, Position],
    first_id: str,
    second_id: str,
) -> PositionBatch:
    """Exchange two players' positions. Unknown ids give an empty batch."""
    if first_id not in positions or second_id not in positions or first_id == second_id:
        return {}
    return {first_id: positions[second_id], second_id: positions[first_id]}


# =============================================================================
# Selection state
# =============================================================================


class SelectionManager:
    """
    Tracks which players are selected.

    ``set_items`` must be called whenever the positions on the board change
    so rectangle selection and group transforms see current data. Ids
    unknown to the board are ignored.
    """

    def __init__(
        self,
        max_selection_count: Optional[int] = None,
        on_change: Optional[SelectionCallback] = None,
    ) -> None:
        self.max_selection_count = max_selection_count
        self._on_change = on_change
        self._items: dict[str, Position] = {}
        self._selected: list[str] = []
        self._rect_start: Optional[Position] = None
        self._rect_end: Optional[Position] = None
        self._rect_base: list[str] = []

    # =========================================================================
    # Items and derived state
    # =========================================================================

    def set_items(self, items: Mapping[str, Position]) -> None:
        """Replace the known positions and drop selected ids that vanished."""
        self._items = dict(items)
        kept = [pid for pid in self._selected if pid in self._items]
        if kept != self._selected:
            self._commit(kept)

    @property
    def selected_ids(self) -> list[str]:
        return list(self._selected)

    @property
    def selection(self) -> SelectionSet:
        return SelectionSet(
            ids=tuple(self._selected),
            positions={pid: self._items[pid] for pid in self._selected},
        )

    @property
    def has_selection(self) -> bool:
        return bool(self._selected)

    @property
    def is_selecting(self) -> bool:
        return self._rect_start is not None

    @property
    def rectangle(self) -> Optional[Bounds]:
        """Current rubber-band rectangle, or None when not selecting."""
        if self._rect_start is None or self._rect_end is None:
            return None
        return Bounds.from_corners(self._rect_start, self._rect_end)

    # =========================================================================
    # Selection commands
    # =========================================================================

    def select(self, player_id: str, mode: SelectionMode = SelectionMode.REPLACE) -> list[str]:
        """Select a single player, combining with the current selection per ``mode``."""
        if player_id not in self._items:
            logger.debug(f"Ignoring selection of unknown player {player_id}")
            return self.selected_ids

        mode = SelectionMode(mode)
        current = list(self._selected)
        if mode is SelectionMode.ADD:
            if player_id in current:
                return current
            selection = current + [player_id]
        elif mode is SelectionMode.TOGGLE:
            if player_id in current:
                selection = [pid for pid in current if pid != player_id]
            else:
                selection = current + [player_id]
        else:
            selection = [player_id]

        self._commit(selection)
        return self.selected_ids

    def toggle(self, player_id: str) -> list[str]:
        return self.select(player_id, SelectionMode.TOGGLE)

    def select_many(self, player_ids: Iterable[str]) -> list[str]:
        """Replace the selection with ``player_ids`` (duplicates and unknowns dropped)."""
        selection: list[str] = []
        for pid in player_ids:
            if pid in self._items and pid not in selection:
                selection.append(pid)
        self._commit(selection)
        return self.selected_ids

    def select_all(self) -> list[str]:
        return self.select_many(self._items)

    def clear(self) -> list[str]:
        self._commit([])
        return []

    # =========================================================================
    # Rectangle selection
    # =========================================================================

    def start_rectangle(self, start: Position, additive: bool = False) -> None:
        """Begin a rubber-band selection; ``additive`` keeps the current selection."""
        self._rect_start = start
        self._rect_end = start
        self._rect_base = list(self._selected) if additive else []

    def update_rectangle(self, current: Position) -> list[str]:
        """Grow the rectangle and recompute membership (edges inclusive)."""
        if self._rect_start is None:
            return self.selected_ids
        self._rect_end = current
        rect = Bounds.from_corners(self._rect_start, current)
        inside = [pid for pid, pos in self._items.items() if rect.contains(pos)]
        merged = self._rect_base + [pid for pid in inside if pid not in self._rect_base]
        self._commit(merged)
        return self.selected_ids

    def end_rectangle(self) -> list[str]:
        self._rect_start = None
        self._rect_end = None
        self._rect_base = []
        return self.selected_ids

    # =========================================================================
    # Group operations on the current selection
    # =========================================================================

    def move(self, offset: Position) -> PositionBatch:
        return move_group(self.selection.positions, offset)

    def rotate(self, degrees: float, center: Optional[Position] = None) -> PositionBatch:
        return rotate_group(self.selection.positions, degrees, center)

    def scale(self, factor: float, center: Optional[Position] = None) -> PositionBatch:
        return scale_group(self.selection.positions, factor, center)

    def align(self, edge: AlignEdge) -> PositionBatch:
        return align_group(self.selection.positions, edge)

    def distribute(self, axis: Axis) -> PositionBatch:
        return distribute_group(self.selection.positions, axis)

    def mirror(self, axis: Axis) -> PositionBatch:
        return mirror_group(self.selection.positions, axis)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _commit(self, selection: list[str]) -> None:
        limit = self.max_selection_count
        if limit is not None and len(selection) > limit:
            selection = selection[-limit:]
        if selection == self._selected:
            return
        self._selected = selection
        if self._on_change is not None:
            self._on_change(list(selection))
