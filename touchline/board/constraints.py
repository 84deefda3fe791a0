"""Geometry and constraint engine.

Turns a raw candidate position into a legal one:

    raw → reject non-finite → clamp to boundary → snap → clamp → collision check

Snapping tries its tiers in a fixed order and the first match wins:
    1. nearest free formation slot within the alignment threshold
    2. nearest tactical zone snap point within the same threshold
    3. x or y alignment with a peer player within the threshold
    4. grid intersection within the grid snap threshold
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence

from touchline.board.config import BoardConfig
from touchline.core.models.field import Position
from touchline.core.models.formation import Slot, TacticalZone
from touchline.core.models.player import DEFAULT_RADIUS, Player

logger = logging.getLogger(__name__)


class SnapType(str, Enum):
    """Which anchor a position was snapped to."""

    FORMATION = "formation"
    ZONE = "zone"
    PLAYER = "player"
    GRID = "grid"


@dataclass(frozen=True)
class PeerBody:
    """Another player as seen by collision and alignment checks."""

    id: str
    position: Position
    radius: float = DEFAULT_RADIUS

    @classmethod
    def from_player(cls, player: Player) -> PeerBody:
        return cls(id=player.id, position=player.position, radius=player.radius)


@dataclass(frozen=True)
class SnapContext:
    """
    Everything a snap can anchor to.

    ``dragged_id`` is excluded from peer checks, and a slot it already
    holds still counts as free for it.
    """

    slots: tuple[Slot, ...] = ()
    zones: tuple[TacticalZone, ...] = ()
    peers: tuple[PeerBody, ...] = ()
    dragged_id: Optional[str] = None

    @classmethod
    def build(
        cls,
        slots: Iterable[Slot] = (),
        zones: Iterable[TacticalZone] = (),
        peers: Iterable[PeerBody | Player] = (),
        dragged_id: Optional[str] = None,
    ) -> SnapContext:
        bodies = tuple(
            PeerBody.from_player(p) if isinstance(p, Player) else p for p in peers
        )
        return cls(
            slots=tuple(slots),
            zones=tuple(zones),
            peers=tuple(b for b in bodies if b.id != dragged_id),
            dragged_id=dragged_id,
        )


@dataclass(frozen=True)
class SnapResult:
    """Outcome of a snap attempt."""

    position: Position
    snapped: bool = False
    snap_type: Optional[SnapType] = None
    snap_target: Optional[str] = None


@dataclass(frozen=True)
class DragResult:
    """Outcome of evaluating one candidate drag position."""

    final_position: Position
    snapped: bool = False
    snap_type: Optional[SnapType] = None
    snap_target: Optional[str] = None
    collisions: tuple[str, ...] = ()
    rejected: bool = False
    reason: Optional[str] = None  # "non_finite", "collision", "surface", "cancelled"
    committed: bool = False

    @property
    def accepted(self) -> bool:
        return not self.rejected


def _round_half_up(value: float) -> float:
    return math.floor(value + 0.5)


class ConstraintEngine:
    """
    Boundary clamping, snapping and collision detection.

    Stateless apart from its configuration; the drag session owns the
    last valid position.
    """

    def __init__(self, config: Optional[BoardConfig] = None) -> None:
        self.config = config or BoardConfig()

    # =========================================================================
    # Boundary
    # =========================================================================

    def apply_boundary(self, pos: Position) -> Position:
        """Clamp both axes into the configured boundary. Never raises."""
        boundary = self.config.boundary
        if not boundary.enforce:
            return pos
        return Position(
            self._clamp(pos.x, boundary.min_x, boundary.max_x),
            self._clamp(pos.y, boundary.min_y, boundary.max_y),
        )

    @staticmethod
    def _clamp(value: float, low: float, high: float) -> float:
        # NaN would slip through min/max comparisons unchanged
        if math.isnan(value):
            return low
        return max(low, min(high, value))

    # =========================================================================
    # Snapping
    # =========================================================================

    def snap(self, pos: Position, context: Optional[SnapContext] = None) -> SnapResult:
        """Snap ``pos`` to the highest-priority anchor in range."""
        context = context or SnapContext()

        slot = self.find_nearest_slot(pos, context.slots, context.dragged_id)
        if slot is not None:
            return SnapResult(slot.default_position, True, SnapType.FORMATION, slot.id)

        zone_snap = self.find_nearest_zone_point(pos, context.zones)
        if zone_snap is not None:
            zone, point = zone_snap
            return SnapResult(point, True, SnapType.ZONE, zone.id)

        alignment = self.find_peer_alignment(pos, context.peers)
        if alignment is not None:
            peer, aligned = alignment
            return SnapResult(aligned, True, SnapType.PLAYER, peer.id)

        gridded = self.snap_to_grid(pos)
        if gridded != pos:
            return SnapResult(gridded, True, SnapType.GRID, None)

        return SnapResult(pos)

    def find_nearest_slot(
        self,
        pos: Position,
        slots: Sequence[Slot],
        dragged_id: Optional[str] = None,
    ) -> Optional[Slot]:
        """Nearest free slot within the alignment threshold."""
        alignment = self.config.alignment
        if not alignment.enabled or not alignment.snap_to_formation_slots:
            return None

        nearest: Optional[Slot] = None
        min_distance = math.inf
        for slot in slots:
            if slot.is_occupied and slot.occupant_id != dragged_id:
                continue
            distance = pos.distance_to(slot.default_position)
            if distance < min_distance and distance <= alignment.alignment_threshold:
                min_distance = distance
                nearest = slot
        return nearest

    def find_nearest_zone_point(
        self,
        pos: Position,
        zones: Sequence[TacticalZone],
    ) -> Optional[tuple[TacticalZone, Position]]:
        """Nearest zone snap point within the alignment threshold."""
        alignment = self.config.alignment
        if not alignment.enabled or not alignment.snap_to_tactical_zones:
            return None

        nearest: Optional[tuple[TacticalZone, Position]] = None
        min_distance = math.inf
        for zone in zones:
            for point in zone.snap_points:
                distance = pos.distance_to(point)
                if distance < min_distance and distance <= alignment.alignment_threshold:
                    min_distance = distance
                    nearest = (zone, point)
        return nearest

    def find_peer_alignment(
        self,
        pos: Position,
        peers: Sequence[PeerBody],
    ) -> Optional[tuple[PeerBody, Position]]:
        """
        Closest single-axis alignment with a peer.

        Matching a peer's y keeps our x (a horizontal line), matching its x
        keeps our y. On equal offsets the horizontal alignment wins.
        """
        alignment = self.config.alignment
        if not alignment.enabled or not alignment.snap_to_players or not peers:
            return None

        best: Optional[tuple[PeerBody, Position]] = None
        min_offset = math.inf
        for peer in peers:
            dy = abs(pos.y - peer.position.y)
            if dy <= alignment.alignment_threshold and dy < min_offset:
                min_offset = dy
                best = (peer, pos.with_y(peer.position.y))

            dx = abs(pos.x - peer.position.x)
            if dx <= alignment.alignment_threshold and dx < min_offset:
                min_offset = dx
                best = (peer, pos.with_x(peer.position.x))
        return best

    def snap_to_grid(self, pos: Position) -> Position:
        """Snap to the nearest grid intersection if within the snap threshold."""
        grid = self.config.grid
        if not grid.enabled or grid.size <= 0:
            return pos

        snapped = Position(
            _round_half_up(pos.x / grid.size) * grid.size,
            _round_half_up(pos.y / grid.size) * grid.size,
        )
        if pos.distance_to(snapped) <= grid.snap_threshold:
            return snapped
        return pos

    # =========================================================================
    # Collisions
    # =========================================================================

    @staticmethod
    def detect_collisions(
        pos: Position,
        peers: Iterable[PeerBody],
        min_distance: float,
    ) -> list[str]:
        """Ids of every peer closer than ``min_distance + peer.radius``."""
        return [
            peer.id
            for peer in peers
            if pos.distance_to(peer.position) < min_distance + peer.radius
        ]

    # =========================================================================
    # Full evaluation
    # =========================================================================

    def evaluate(
        self,
        raw: Position,
        context: Optional[SnapContext],
        last_valid: Position,
    ) -> DragResult:
        """
        Compute the legal position for a raw candidate.

        Non-finite candidates and (with ``prevent_overlap``) colliding ones
        are rejected and ``last_valid`` is returned in their place.
        """
        context = context or SnapContext()

        if not raw.is_finite:
            logger.warning(f"Rejected non-finite drag position {raw!r}")
            return DragResult(final_position=last_valid, rejected=True, reason="non_finite")

        bounded = self.apply_boundary(raw)
        snap = self.snap(bounded, context)
        final = self.apply_boundary(snap.position)

        collisions: list[str] = []
        collision = self.config.collision
        if collision.enabled:
            collisions = self.detect_collisions(final, context.peers, collision.min_distance)

        if collisions and collision.prevent_overlap:
            logger.debug(f"Position {final!r} collides with {collisions}, reverting")
            return DragResult(
                final_position=last_valid,
                snapped=snap.snapped,
                snap_type=snap.snap_type,
                snap_target=snap.snap_target,
                collisions=tuple(collisions),
                rejected=True,
                reason="collision",
            )

        return DragResult(
            final_position=final,
            snapped=snap.snapped,
            snap_type=snap.snap_type,
            snap_target=snap.snap_target,
            collisions=tuple(collisions),
        )
