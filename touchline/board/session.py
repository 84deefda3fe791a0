"""
Board session: the state store a host constructs and owns.

A session holds one board's players, formation, zones and annotations and
routes every host command through the engine:

    drag events   → DragSession → ConstraintEngine → commit
    slot drops    → validate_placement → commit, or raise a conflict
    group ops     → selection transforms → boundary clamp → batch commit
    undo / redo   → HistoryManager → restore

Every commit bumps the formation version, records a history snapshot and
emits events on the session's EventBus. Bad ids and malformed input never
raise out of a command; they leave state unchanged and report it in the
returned outcome. Use after ``close()`` is a programming error and raises.
"""

import copy
import logging
import time
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Iterable, Optional
from uuid import uuid4

from touchline.board.analysis import FormationAnalysis, analyze_formation
from touchline.board.assignment import (
    AssignmentPlan,
    DropZones,
    PlayerInput,
    drop_zones,
    plan_assignment,
    player_positions_from_formation,
    validate_placement,
)
from touchline.board.config import BoardConfig
from touchline.board.conflicts import (
    ConflictAction,
    ConflictResolution,
    apply_resolution,
    resolve_conflict,
)
from touchline.board.constraints import ConstraintEngine, DragResult, SnapContext, SnapType
from touchline.board.drag import DragSession
from touchline.board.errors import BoardValidationError, CorruptedSnapshotError, TouchlineError
from touchline.board.history import HistoryManager, HistorySnapshot
from touchline.board.selection import (
    AlignEdge,
    Axis,
    PositionBatch,
    SelectionManager,
    SelectionMode,
    swap_positions,
)
from touchline.board.transitions import plan_transitions
from touchline.core.models.field import Position, SurfaceRect
from touchline.core.models.formation import Formation, TacticalZone
from touchline.core.models.player import Player, parse_players
from touchline.core.models.templates import build_formation
from touchline.events import (
    BatchCommittedEvent,
    BoardEvent,
    Channel,
    ChannelBridge,
    ConflictRaisedEvent,
    ConflictResolvedEvent,
    EventBus,
    FormationChangedEvent,
    HistoryChangedEvent,
    PositionCommittedEvent,
    SelectionChangedEvent,
)

logger = logging.getLogger(__name__)


DEFAULT_TEMPLATE = "4-4-2"


@dataclass
class PlacementOutcome:
    """What a placement command did."""

    committed: bool
    position: Optional[Position] = None
    slot_id: Optional[str] = None
    conflict: Optional[ConflictResolution] = None
    reason: Optional[str] = None  # Why nothing was committed
    moved: PositionBatch = field(default_factory=dict)

    @property
    def needs_resolution(self) -> bool:
        return self.conflict is not None


class BoardSession:
    """
    One board, explicitly constructed and torn down by its host.

    Usage:
        with BoardSession(players, build_formation("4-3-3")) as board:
            board.begin_drag("p7")
            board.drag_by(Position(4, -2))
            outcome = board.end_drag()
            board.undo()
    """

    def __init__(
        self,
        players: Iterable[PlayerInput] = (),
        formation: Optional[Formation] = None,
        zones: Iterable[TacticalZone] = (),
        annotations: Iterable[Any] = (),
        config: Optional[BoardConfig] = None,
        bus: Optional[EventBus] = None,
        clock: Callable[[], float] = time.time,
        session_id: Optional[str] = None,
        on_position_committed: Optional[Callable[[str, Position], None]] = None,
        on_batch_committed: Optional[Callable[[PositionBatch], None]] = None,
        on_conflict: Optional[Callable[[ConflictResolution], None]] = None,
    ) -> None:
        self.config = config or BoardConfig()
        errors = self.config.validate()
        if errors:
            raise ValueError(f"Invalid board config: {'; '.join(errors)}")

        self.session_id = session_id or str(uuid4())
        self.bus = bus or EventBus()
        self._clock = clock
        self._closed = False

        self.engine = ConstraintEngine(self.config)
        self.drag = DragSession(self.engine)

        self._players: dict[str, Player] = {}
        for player in parse_players(list(players)):
            if player.id not in self._players:
                self._players[player.id] = player.moved_to(self.engine.apply_boundary(player.position))
        self._formation = formation or build_formation(DEFAULT_TEMPLATE)
        self._zones = tuple(zones)
        self._annotations = copy.deepcopy(list(annotations))
        self._pending: Optional[ConflictResolution] = None
        self._bridges: list[ChannelBridge] = []
        self._subscriptions: list[tuple[type[BoardEvent], Callable]] = []

        self.selection = SelectionManager(
            max_selection_count=self.config.selection.max_selection_count,
            on_change=self._on_selection_change,
        )
        self.selection.set_items(self.positions)

        self.history = HistoryManager(
            self._capture("initial"),
            max_history_size=self.config.history.max_history_size,
            coalesce_window=self.config.history.coalesce_window,
        )

        if on_position_committed is not None:
            self._subscribe(
                PositionCommittedEvent,
                lambda e: on_position_committed(e.entity_id, e.position),
            )
        if on_batch_committed is not None:
            self._subscribe(BatchCommittedEvent, lambda e: on_batch_committed(dict(e.positions)))
        if on_conflict is not None:
            self._subscribe(ConflictRaisedEvent, lambda e: on_conflict(e.resolution))

        logger.debug(f"Board session {self.session_id} opened with {len(self._players)} players")

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Tear down: cancel any drag, detach channels and callbacks."""
        if self._closed:
            return
        if self.drag.is_dragging:
            self.drag.cancel()
        for bridge in self._bridges:
            bridge.detach()
        self._bridges.clear()
        for event_type, handler in self._subscriptions:
            self.bus.unsubscribe(event_type, handler)
        self._subscriptions.clear()
        self._pending = None
        self._closed = True
        logger.debug(f"Board session {self.session_id} closed")

    @property
    def is_closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "BoardSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def connect_channel(self, channel: Channel, prefix: str = "") -> ChannelBridge:
        """Forward committed events to a host sync channel until close()."""
        self._require_open()
        bridge = ChannelBridge(self.bus, channel, prefix=prefix or self.session_id)
        bridge.attach()
        self._bridges.append(bridge)
        return bridge

    # =========================================================================
    # State
    # =========================================================================

    @property
    def players(self) -> list[Player]:
        return list(self._players.values())

    def player(self, player_id: str) -> Optional[Player]:
        return self._players.get(player_id)

    @property
    def positions(self) -> dict[str, Position]:
        return {pid: p.position for pid, p in self._players.items()}

    @property
    def formation(self) -> Formation:
        return self._formation

    @property
    def zones(self) -> tuple[TacticalZone, ...]:
        return self._zones

    @property
    def annotations(self) -> list[Any]:
        return copy.deepcopy(self._annotations)

    @property
    def version(self) -> int:
        return self._formation.version

    @property
    def pending_conflict(self) -> Optional[ConflictResolution]:
        return self._pending

    # =========================================================================
    # Dragging
    # =========================================================================

    def begin_drag(self, player_id: str, surface: Optional[SurfaceRect] = None) -> bool:
        """Start dragging a player. False for unknown ids or a drag already running."""
        self._require_open()
        player = self._players.get(player_id)
        if player is None or self.drag.is_dragging:
            return False
        slots = self._formation.slots if player.team is self._formation.team else ()
        context = SnapContext.build(
            slots=slots,
            zones=self._zones,
            peers=self._players.values(),
            dragged_id=player_id,
        )
        self.drag.begin(player_id, player.position, context, surface)
        return True

    def drag_by(self, delta: Position) -> Optional[DragResult]:
        """Move the dragged player by a percentage-space delta; None when idle."""
        if not self.drag.is_dragging:
            return None
        return self.drag.drag_by(delta)

    def drag_to(self, pos: Position) -> Optional[DragResult]:
        if not self.drag.is_dragging:
            return None
        return self.drag.drag_to(pos)

    def drag_pointer(self, px: float, py: float) -> Optional[DragResult]:
        """Move the dragged player to a pointer location in host pixels."""
        if not self.drag.is_dragging:
            return None
        return self.drag.drop_at_pointer(px, py)

    def cancel_drag(self) -> Optional[DragResult]:
        """Abandon the drag. Nothing is committed."""
        if not self.drag.is_dragging:
            return None
        return self.drag.cancel()

    def end_drag(self) -> PlacementOutcome:
        """
        Finish the drag and commit the final legal position.

        Snapping onto a free slot the player may occupy also assigns the
        slot. Nothing is committed if the player ends where it started.
        """
        self._require_open()
        if not self.drag.is_dragging:
            return PlacementOutcome(committed=False, reason="not-dragging")

        player_id = self.drag.player_id
        result = self.drag.end()
        if not result.committed:
            return PlacementOutcome(
                committed=False,
                position=result.final_position,
                reason=result.reason or "unchanged",
            )

        formation = self._formation
        slot_id = None
        if result.snap_type is SnapType.FORMATION and result.snap_target is not None:
            if validate_placement(player_id, self._players, formation, result.snap_target):
                slot_id = result.snap_target
                formation = formation.with_occupant(slot_id, player_id)

        moved = {player_id: result.final_position}
        self._commit(moved, formation, label="move", coalesce_key=f"move:{player_id}")
        return PlacementOutcome(
            committed=True,
            position=result.final_position,
            slot_id=slot_id,
            moved=moved,
        )

    # =========================================================================
    # Slot placement and conflicts
    # =========================================================================

    def validate_placement(self, player_id: str, slot_id: Optional[str] = None) -> bool:
        return validate_placement(player_id, self._players, self._formation, slot_id)

    def drop_zones(self, player_id: str) -> DropZones:
        player = self._players.get(player_id)
        if player is None:
            return DropZones()
        return drop_zones(player, self._formation)

    def place_player(self, player_id: str, slot_id: str) -> PlacementOutcome:
        """
        Drop a player onto a slot.

        An occupied slot raises a conflict instead of committing; settle it
        with ``resolve_pending``. A new placement supersedes a pending
        conflict, which counts as cancelled.
        """
        self._require_open()
        if self._pending is not None:
            self._finish_conflict(ConflictAction.CANCEL)

        slot = self._formation.get_slot(slot_id)
        if player_id not in self._players or slot is None:
            logger.debug(f"Rejected placement of {player_id} into {slot_id}: unknown id")
            return PlacementOutcome(committed=False, reason="unknown")
        if slot.occupant_id == player_id:
            return PlacementOutcome(committed=False, slot_id=slot_id, reason="unchanged")
        if not self.validate_placement(player_id, slot_id):
            return PlacementOutcome(committed=False, slot_id=slot_id, reason="incompatible")

        if slot.is_occupied:
            conflict = resolve_conflict(
                player_id, slot_id, slot.occupant_id, self._formation, self._players.values()
            )
            if conflict is None:
                return PlacementOutcome(committed=False, slot_id=slot_id, reason="unknown")
            self._pending = conflict
            logger.info(f"Conflict at {slot_id}: {player_id} vs {slot.occupant_id}")
            self._emit(ConflictRaisedEvent(resolution=conflict))
            return PlacementOutcome(committed=False, slot_id=slot_id, conflict=conflict, reason="conflict")

        formation = self._formation.with_occupant(slot_id, player_id)
        moved = self._positions_for_slots(formation, [player_id])
        self._commit(moved, formation, label="place")
        return PlacementOutcome(
            committed=True,
            position=moved.get(player_id),
            slot_id=slot_id,
            moved=moved,
        )

    def resolve_pending(self, action: ConflictAction) -> PlacementOutcome:
        """Apply the caller's choice for the pending conflict."""
        self._require_open()
        conflict = self._pending
        if conflict is None:
            return PlacementOutcome(committed=False, reason="no-conflict")

        # A choice that was never offered leaves the conflict open
        try:
            action = ConflictAction(action)
        except ValueError as e:
            logger.warning(f"Could not resolve conflict at {conflict.target_slot_id}: {e}")
            return PlacementOutcome(committed=False, slot_id=conflict.target_slot_id, reason="invalid")
        if conflict.option(action) is None:
            logger.warning(f"{action.value} is not an option for the conflict at {conflict.target_slot_id}")
            return PlacementOutcome(committed=False, slot_id=conflict.target_slot_id, reason="invalid")

        try:
            formation = apply_resolution(self._formation, conflict, action)
        except BoardValidationError as e:
            logger.warning(f"Dropping stale conflict at {conflict.target_slot_id}: {e}")
            self._finish_conflict(ConflictAction.CANCEL)
            return PlacementOutcome(committed=False, slot_id=conflict.target_slot_id, reason="stale")

        self._finish_conflict(action)
        if action is ConflictAction.CANCEL:
            return PlacementOutcome(committed=False, slot_id=conflict.target_slot_id, reason="cancelled")

        moved = self._positions_for_slots(formation, [conflict.dragged_id, conflict.occupant_id])
        self._commit(moved, formation, label=action.value, operation=action.value)
        return PlacementOutcome(
            committed=True,
            position=moved.get(conflict.dragged_id),
            slot_id=conflict.target_slot_id,
            moved=moved,
        )

    def _finish_conflict(self, action: ConflictAction) -> None:
        conflict = self._pending
        self._pending = None
        if conflict is not None:
            self._emit(ConflictResolvedEvent(target_slot_id=conflict.target_slot_id, action=action.value))

    def _positions_for_slots(self, formation: Formation, player_ids: Iterable[str]) -> PositionBatch:
        """Slot default positions for the given players that hold a slot in ``formation``."""
        moved = {}
        for player_id in player_ids:
            slot = formation.slot_for(player_id)
            if slot is None:
                continue
            target = self.engine.apply_boundary(slot.default_position)
            if self._players[player_id].position != target:
                moved[player_id] = target
        return moved

    # =========================================================================
    # Selection
    # =========================================================================

    def select(self, player_id: str, mode: SelectionMode = SelectionMode.REPLACE) -> list[str]:
        return self.selection.select(player_id, mode)

    def select_in_rectangle(self, start: Position, end: Position, additive: bool = False) -> list[str]:
        """One-shot rectangle selection."""
        self.selection.start_rectangle(start, additive=additive)
        self.selection.update_rectangle(end)
        return self.selection.end_rectangle()

    def clear_selection(self) -> list[str]:
        return self.selection.clear()

    def _on_selection_change(self, selected: list[str]) -> None:
        self._emit(SelectionChangedEvent(selected_ids=selected))

    # =========================================================================
    # Group operations
    # =========================================================================

    def move_selection(self, offset: Position) -> PositionBatch:
        return self._commit_group(self.selection.move(offset), "move")

    def rotate_selection(self, degrees: float, center: Optional[Position] = None) -> PositionBatch:
        return self._commit_group(self.selection.rotate(degrees, center), "rotate")

    def scale_selection(self, factor: float, center: Optional[Position] = None) -> PositionBatch:
        return self._commit_group(self.selection.scale(factor, center), "scale")

    def align_selection(self, edge: AlignEdge) -> PositionBatch:
        return self._commit_group(self.selection.align(edge), "align")

    def distribute_selection(self, axis: Axis) -> PositionBatch:
        return self._commit_group(self.selection.distribute(axis), "distribute")

    def mirror_selection(self, axis: Axis) -> PositionBatch:
        return self._commit_group(self.selection.mirror(axis), "mirror")

    def swap_players(self, first_id: str, second_id: str) -> PositionBatch:
        """Exchange two players' positions on the board."""
        return self._commit_group(swap_positions(self.positions, first_id, second_id), "swap")

    def _commit_group(self, batch: PositionBatch, operation: str) -> PositionBatch:
        self._require_open()
        moved = {}
        for player_id, pos in batch.items():
            if not pos.is_finite or player_id not in self._players:
                continue
            clamped = self.engine.apply_boundary(pos)
            if clamped != self._players[player_id].position:
                moved[player_id] = clamped
        if not moved:
            return {}
        self._commit(moved, self._formation, label=operation, operation=operation)
        return moved

    # =========================================================================
    # Formation
    # =========================================================================

    def auto_assign(self, strategy: str = "greedy", move_players: bool = True) -> AssignmentPlan:
        """Refill the formation with the best available players."""
        self._require_open()
        plan = plan_assignment(self._players.values(), self._formation, strategy=strategy)
        formation = plan.apply(self._formation)
        moved: PositionBatch = {}
        if move_players:
            for player_id, pos in player_positions_from_formation(self.players, formation).items():
                target = self.engine.apply_boundary(pos)
                if self._players[player_id].position != target:
                    moved[player_id] = target
        if formation.slots != self._formation.slots or moved:
            self._commit(moved, formation, label="auto-assign", operation="auto-assign")
        return plan

    def apply_template(self, template_name: str) -> bool:
        """Switch to an empty formation built from a named template."""
        self._require_open()
        try:
            formation = build_formation(template_name, team=self._formation.team)
        except KeyError:
            logger.debug(f"Unknown formation template {template_name}")
            return False
        formation = replace(formation, version=self._formation.version)
        self._commit({}, formation, label=f"template:{template_name}", operation="template")
        return True

    def analyze(self) -> FormationAnalysis:
        return analyze_formation(self._formation, self._players.values())

    # =========================================================================
    # Annotations
    # =========================================================================

    def add_annotation(self, annotation: Any) -> None:
        self._require_open()
        self._annotations.append(copy.deepcopy(annotation))
        self._commit({}, self._formation, label="annotate")

    def clear_annotations(self) -> bool:
        self._require_open()
        if not self._annotations:
            return False
        self._annotations = []
        self._commit({}, self._formation, label="annotate")
        return True

    # =========================================================================
    # History
    # =========================================================================

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def undo(self) -> bool:
        self._require_open()
        if not self.history.undo():
            return False
        self._restore(self.history.present, "undo")
        return True

    def redo(self) -> bool:
        self._require_open()
        if not self.history.redo():
            return False
        self._restore(self.history.present, "redo")
        return True

    def jump_to_state(self, index: int) -> bool:
        self._require_open()
        if not self.history.jump_to_state(index):
            return False
        self._restore(self.history.present, "jump")
        return True

    def clear_history(self) -> None:
        self._require_open()
        self.history.clear()
        self._emit(HistoryChangedEvent(
            action="clear",
            index=self.history.current_index,
            can_undo=False,
            can_redo=False,
        ))

    def _restore(self, snapshot: HistorySnapshot, action: str) -> None:
        if self.drag.is_dragging:
            self.drag.cancel()
        before = self.positions
        before_slots = self._formation.slots

        self._players = {p.id: p for p in snapshot.players}
        self._annotations = copy.deepcopy(list(snapshot.annotations))
        formation = snapshot.formation or self._formation
        self._formation = replace(formation, version=self._formation.version + 1, updated_at=self._now())
        self.selection.set_items(self.positions)
        self._finish_conflict(ConflictAction.CANCEL)

        logger.info(f"{action.capitalize()} to history step {self.history.current_index}")
        self._emit(HistoryChangedEvent(
            action=action,
            index=self.history.current_index,
            can_undo=self.history.can_undo,
            can_redo=self.history.can_redo,
        ))

        after = self.positions
        changed = {pid: pos for pid, pos in after.items() if before.get(pid) != pos}
        if changed:
            self._emit(BatchCommittedEvent(
                positions=changed,
                transitions=plan_transitions(before, changed),
                operation=action,
            ))
        if self._formation.slots != before_slots:
            self._emit(FormationChangedEvent(formation=self._formation, reason=action))

    # =========================================================================
    # Snapshots
    # =========================================================================

    def export_snapshot(self) -> dict:
        """The formation in the persisted/transport wire shape."""
        from touchline.api.schemas.snapshot import snapshot_from_formation

        return snapshot_from_formation(self._formation)

    def load_snapshot(self, data: Any) -> bool:
        """
        Replace the formation from wire data.

        Corrupted data, or slots held by players this board does not know,
        reject the snapshot as a whole and leave the session as it was. The
        loaded version is kept when it is ahead of ours.
        """
        from touchline.api.schemas.snapshot import formation_from_snapshot

        self._require_open()
        try:
            formation = formation_from_snapshot(data, team=self._formation.team)
        except CorruptedSnapshotError as e:
            logger.warning(f"Rejected formation snapshot: {e}")
            return False
        unknown = [
            slot.occupant_id for slot in formation.slots
            if slot.occupant_id is not None and slot.occupant_id not in self._players
        ]
        if unknown:
            logger.warning(f"Rejected formation snapshot: unknown players {unknown}")
            return False
        formation = replace(formation, version=max(formation.version, self._formation.version))
        moved = player_positions_from_formation(self.players, formation)
        moved = {
            pid: self.engine.apply_boundary(pos)
            for pid, pos in moved.items()
            if self._players[pid].position != self.engine.apply_boundary(pos)
        }
        self._commit(moved, formation, label="load", operation="load")
        return True

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require_open(self) -> None:
        if self._closed:
            raise TouchlineError(f"Board session {self.session_id} is closed")

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self._clock())

    def _capture(self, label: str, coalesce_key: Optional[str] = None) -> HistorySnapshot:
        return HistorySnapshot.capture(
            self._formation,
            self._players.values(),
            self._annotations,
            label=label,
            coalesce_key=coalesce_key,
            timestamp=self._clock(),
        )

    def _commit(
        self,
        moved: PositionBatch,
        formation: Formation,
        label: str,
        coalesce_key: Optional[str] = None,
        operation: str = "move",
    ) -> None:
        """Apply a change, bump the version, record history and notify."""
        before = self.positions
        slots_changed = formation.slots != self._formation.slots or formation.id != self._formation.id

        for player_id, pos in moved.items():
            self._players[player_id] = self._players[player_id].moved_to(pos)
        self._formation = formation.bumped(self._now())
        self.history.push_state(self._capture(label, coalesce_key))
        self.selection.set_items(self.positions)

        logger.info(f"Committed {label} (version {self.version}, {len(moved)} players moved)")

        transitions = plan_transitions(before, moved)
        if len(moved) == 1 and operation == "move":
            (player_id, pos), = moved.items()
            self._emit(PositionCommittedEvent(
                entity_id=player_id,
                position=pos,
                transition=transitions[0] if transitions else None,
            ))
        elif moved:
            self._emit(BatchCommittedEvent(
                positions=dict(moved),
                transitions=transitions,
                operation=operation,
            ))
        if slots_changed:
            self._emit(FormationChangedEvent(formation=self._formation, reason=label))

    def _emit(self, event: BoardEvent) -> None:
        event.session_id = self.session_id
        event.version = self.version
        self.bus.emit(event)

    def _subscribe(self, event_type: type[BoardEvent], handler: Callable) -> None:
        self.bus.subscribe(event_type, handler)
        self._subscriptions.append((event_type, handler))
