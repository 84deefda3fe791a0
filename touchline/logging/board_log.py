"""In-memory activity log for a board session."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from touchline.events import (
    BatchCommittedEvent,
    ConflictRaisedEvent,
    ConflictResolvedEvent,
    EventBus,
    FormationChangedEvent,
    HistoryChangedEvent,
    PositionCommittedEvent,
)


@dataclass
class LogEntry:
    """Single entry in the board log."""

    timestamp: datetime
    version: int
    event_type: str  # "MOVE", "BATCH", "CONFLICT", "RESOLVE", "FORMATION", "HISTORY"
    description: str

    entity_ids: list[str] = field(default_factory=list)
    slot_id: Optional[str] = None
    action: Optional[str] = None


@dataclass
class ActivityStats:
    """Counts of committed activity."""

    moves: int = 0
    batches: int = 0
    players_moved: int = 0
    conflicts_raised: int = 0
    conflicts_resolved: int = 0
    conflicts_cancelled: int = 0
    formation_changes: int = 0
    undos: int = 0
    redos: int = 0

    @property
    def total_commits(self) -> int:
        return self.moves + self.batches + self.formation_changes


class BoardLog:
    """
    Accumulates board activity.

    Subscribe it to a session's EventBus and it records every committed
    change, conflict and history step. Used for the markdown session report.
    """

    def __init__(self, board_name: str = "Board") -> None:
        self.board_name = board_name
        self.entries: list[LogEntry] = []
        self.stats = ActivityStats()

        # id -> display name, for readable descriptions
        self._names: dict[str, str] = {}
        self._bus: Optional[EventBus] = None

    def connect_to_event_bus(self, event_bus: EventBus) -> None:
        """Subscribe to events from an event bus."""
        event_bus.subscribe(PositionCommittedEvent, self._handle_position)
        event_bus.subscribe(BatchCommittedEvent, self._handle_batch)
        event_bus.subscribe(ConflictRaisedEvent, self._handle_conflict)
        event_bus.subscribe(ConflictResolvedEvent, self._handle_resolution)
        event_bus.subscribe(FormationChangedEvent, self._handle_formation)
        event_bus.subscribe(HistoryChangedEvent, self._handle_history)
        self._bus = event_bus

    def disconnect(self) -> None:
        if self._bus is None:
            return
        self._bus.unsubscribe(PositionCommittedEvent, self._handle_position)
        self._bus.unsubscribe(BatchCommittedEvent, self._handle_batch)
        self._bus.unsubscribe(ConflictRaisedEvent, self._handle_conflict)
        self._bus.unsubscribe(ConflictResolvedEvent, self._handle_resolution)
        self._bus.unsubscribe(FormationChangedEvent, self._handle_formation)
        self._bus.unsubscribe(HistoryChangedEvent, self._handle_history)
        self._bus = None

    def register_player(self, player_id: str, name: str) -> None:
        self._names[player_id] = name

    def name_of(self, player_id: str) -> str:
        return self._names.get(player_id, player_id)

    def add_entry(
        self,
        event_type: str,
        description: str,
        version: int = 0,
        **kwargs,
    ) -> None:
        """Add a log entry manually."""
        self.entries.append(LogEntry(
            timestamp=datetime.now(),
            version=version,
            event_type=event_type,
            description=description,
            **kwargs,
        ))

    # =========================================================================
    # Event handlers
    # =========================================================================

    def _handle_position(self, event: PositionCommittedEvent) -> None:
        self.stats.moves += 1
        self.stats.players_moved += 1
        pos = event.position
        self.add_entry(
            "MOVE",
            f"{self.name_of(event.entity_id)} moved to ({pos.x:.1f}, {pos.y:.1f})",
            version=event.version,
            entity_ids=[event.entity_id],
        )

    def _handle_batch(self, event: BatchCommittedEvent) -> None:
        self.stats.batches += 1
        self.stats.players_moved += len(event.positions)
        names = ", ".join(self.name_of(pid) for pid in event.positions)
        self.add_entry(
            "BATCH",
            f"{event.operation or 'group move'}: {names}",
            version=event.version,
            entity_ids=list(event.positions),
            action=event.operation,
        )

    def _handle_conflict(self, event: ConflictRaisedEvent) -> None:
        self.stats.conflicts_raised += 1
        conflict = event.resolution
        if conflict is None:
            return
        self.add_entry(
            "CONFLICT",
            f"{self.name_of(conflict.dragged_id)} dropped on {conflict.target_slot_id} "
            f"held by {self.name_of(conflict.occupant_id)}",
            version=event.version,
            entity_ids=[conflict.dragged_id, conflict.occupant_id],
            slot_id=conflict.target_slot_id,
        )

    def _handle_resolution(self, event: ConflictResolvedEvent) -> None:
        if event.action == "cancel":
            self.stats.conflicts_cancelled += 1
        else:
            self.stats.conflicts_resolved += 1
        self.add_entry(
            "RESOLVE",
            f"Conflict at {event.target_slot_id} settled by {event.action}",
            version=event.version,
            slot_id=event.target_slot_id,
            action=event.action,
        )

    def _handle_formation(self, event: FormationChangedEvent) -> None:
        self.stats.formation_changes += 1
        name = event.formation.name if event.formation is not None else ""
        self.add_entry(
            "FORMATION",
            f"{name} changed ({event.reason})" if event.reason else f"{name} changed",
            version=event.version,
            action=event.reason or None,
        )

    def _handle_history(self, event: HistoryChangedEvent) -> None:
        if event.action == "undo":
            self.stats.undos += 1
        elif event.action == "redo":
            self.stats.redos += 1
        self.add_entry(
            "HISTORY",
            f"{event.action.capitalize()} to step {event.index}",
            version=event.version,
            action=event.action,
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def get_entries_by_type(self, event_type: str) -> list[LogEntry]:
        return [e for e in self.entries if e.event_type == event_type]

    def get_entries_for(self, player_id: str) -> list[LogEntry]:
        """Entries that involve a given player."""
        return [e for e in self.entries if player_id in e.entity_ids]

    @property
    def entry_count(self) -> int:
        return len(self.entries)
