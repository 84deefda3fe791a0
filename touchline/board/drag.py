"""Drag session state machine.

Drag Lifecycle:
    IDLE → DRAGGING (begin)

    From DRAGGING:
        → DRAGGING (drag_by / drag_to / drop_at_pointer)
        → IDLE (end: placement completed)
        → IDLE (cancel: pointer left the surface or explicit cancel)

Only ``end()`` can produce a committed placement, and it commits the last
accepted step unchanged. Every intermediate step re-evaluates the raw
pointer position from scratch, so a snap never accumulates into the next
step.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from touchline.board.constraints import ConstraintEngine, DragResult, SnapContext
from touchline.board.errors import InvalidDragTransition
from touchline.core.models.field import Position, SurfaceRect

logger = logging.getLogger(__name__)


class DragPhase(str, Enum):
    """Current phase of a drag."""

    IDLE = "idle"
    DRAGGING = "dragging"


VALID_TRANSITIONS: dict[DragPhase, set[DragPhase]] = {
    DragPhase.IDLE: {DragPhase.DRAGGING},
    DragPhase.DRAGGING: {DragPhase.DRAGGING, DragPhase.IDLE},
}


@dataclass
class DragState:
    """Mutable bookkeeping for the drag in progress."""

    player_id: str
    origin: Position
    raw: Position
    last_valid: Position
    context: SnapContext
    surface: Optional[SurfaceRect] = None
    last_result: Optional[DragResult] = None
    last_accepted: Optional[DragResult] = None


class DragSession:
    """
    Tracks a single drag from pointer-down to drop.

    Usage:
        drag = DragSession(engine)
        drag.begin("p7", player.position, context, surface)
        drag.drag_by(Position(1.5, -0.5))
        result = drag.end()
        if result.committed:
            ...  # hand result.final_position to the board
    """

    def __init__(self, engine: ConstraintEngine) -> None:
        self.engine = engine
        self._phase = DragPhase.IDLE
        self._state: Optional[DragState] = None

    @property
    def phase(self) -> DragPhase:
        return self._phase

    @property
    def is_dragging(self) -> bool:
        return self._phase is DragPhase.DRAGGING

    @property
    def player_id(self) -> Optional[str]:
        return self._state.player_id if self._state else None

    @property
    def current_position(self) -> Optional[Position]:
        """Where the dragged token should be drawn right now."""
        return self._state.last_valid if self._state else None

    @property
    def last_result(self) -> Optional[DragResult]:
        return self._state.last_result if self._state else None

    def _transition(self, to_phase: DragPhase) -> None:
        if to_phase not in VALID_TRANSITIONS[self._phase]:
            raise InvalidDragTransition(
                f"Cannot go from {self._phase.value} to {to_phase.value}"
            )
        self._phase = to_phase

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def begin(
        self,
        player_id: str,
        start: Position,
        context: Optional[SnapContext] = None,
        surface: Optional[SurfaceRect] = None,
    ) -> None:
        """Start dragging ``player_id`` from its committed position ``start``."""
        if self.is_dragging:
            raise InvalidDragTransition(f"Already dragging {self._state.player_id}")
        self._transition(DragPhase.DRAGGING)
        self._state = DragState(
            player_id=player_id,
            origin=start,
            raw=start,
            last_valid=start,
            context=context or SnapContext(dragged_id=player_id),
            surface=surface,
        )
        logger.debug(f"Drag started for {player_id} at {start!r}")

    def drag_by(self, delta: Position) -> DragResult:
        """Move the raw pointer by a percentage-space delta."""
        state = self._require_state()
        return self.drag_to(state.raw + delta)

    def drag_to(self, raw: Position) -> DragResult:
        """Move the raw pointer to an absolute percentage-space position."""
        state = self._require_state()
        self._transition(DragPhase.DRAGGING)

        if state.surface is not None and state.surface.is_degenerate:
            return self._abort_step("surface")

        if raw.is_finite:
            state.raw = raw
        result = self.engine.evaluate(raw, state.context, state.last_valid)
        if result.accepted:
            state.last_valid = result.final_position
            state.last_accepted = result
        state.last_result = result
        return result

    def drop_at_pointer(self, px: float, py: float) -> DragResult:
        """Move to a pointer location given in host pixels."""
        state = self._require_state()
        if state.surface is None:
            return self._abort_step("surface")
        pos = state.surface.to_percent(px, py)
        if pos is None:
            return self._abort_step("surface")
        return self.drag_to(pos)

    def end(self) -> DragResult:
        """
        Finish the drag.

        Commits the last accepted step exactly as it was shown, and only
        when it differs from where the drag started.
        """
        state = self._require_state()
        self._transition(DragPhase.IDLE)
        self._state = None

        if state.surface is not None and state.surface.is_degenerate:
            logger.debug(f"Drag for {state.player_id} ended on unmeasured surface")
            return DragResult(final_position=state.origin, rejected=True, reason="surface")

        accepted = state.last_accepted
        if accepted is None:
            return DragResult(final_position=state.origin)
        return replace(accepted, committed=accepted.final_position != state.origin)

    def cancel(self) -> DragResult:
        """Abandon the drag; the token returns to where the drag started."""
        state = self._require_state()
        self._transition(DragPhase.IDLE)
        self._state = None
        logger.debug(f"Drag cancelled for {state.player_id}")
        return DragResult(final_position=state.origin, rejected=True, reason="cancelled")

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require_state(self) -> DragState:
        if self._state is None or self._phase is not DragPhase.DRAGGING:
            raise InvalidDragTransition("No drag in progress")
        return self._state

    def _abort_step(self, reason: str) -> DragResult:
        state = self._require_state()
        state.raw = state.last_valid
        result = DragResult(final_position=state.last_valid, rejected=True, reason=reason)
        state.last_result = result
        return result
