"""Event types emitted by a board session."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, ClassVar, Optional

from touchline.core.models.field import Position

if TYPE_CHECKING:
    from touchline.board.conflicts import ConflictResolution
    from touchline.board.transitions import Transition
    from touchline.core.models.formation import Formation


@dataclass
class BoardEvent:
    """Base class for all board events."""

    topic: ClassVar[str] = "board"

    timestamp: datetime = field(default_factory=datetime.now)
    session_id: str = ""

    # Formation version after the change, for optimistic concurrency checks
    version: int = 0

    def to_payload(self) -> dict:
        """Plain data for a sync channel."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "session_id": self.session_id,
            "version": self.version,
        }


@dataclass
class PositionCommittedEvent(BoardEvent):
    """Fired when a single player's move is committed."""

    topic: ClassVar[str] = "position.committed"

    entity_id: str = ""
    position: Position = field(default_factory=Position)
    transition: Optional["Transition"] = None

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["entity_id"] = self.entity_id
        payload["position"] = self.position.to_dict()
        if self.transition is not None:
            payload["transition"] = self.transition.to_dict()
        return payload


@dataclass
class BatchCommittedEvent(BoardEvent):
    """Fired when a group transform or formation change moves several players."""

    topic: ClassVar[str] = "batch.committed"

    positions: dict[str, Position] = field(default_factory=dict)
    transitions: list["Transition"] = field(default_factory=list)
    operation: str = ""  # "move", "rotate", "align", "auto-assign", ...

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["operation"] = self.operation
        payload["positions"] = {pid: pos.to_dict() for pid, pos in self.positions.items()}
        payload["transitions"] = [t.to_dict() for t in self.transitions]
        return payload


@dataclass
class ConflictRaisedEvent(BoardEvent):
    """Fired when a drop lands on an occupied slot; awaits the caller's choice."""

    topic: ClassVar[str] = "conflict.raised"

    resolution: "ConflictResolution" = None

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["conflict"] = self.resolution.to_dict() if self.resolution else None
        return payload


@dataclass
class ConflictResolvedEvent(BoardEvent):
    """Fired once the caller has chosen how to settle a conflict."""

    topic: ClassVar[str] = "conflict.resolved"

    target_slot_id: str = ""
    action: str = ""

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["target_slot_id"] = self.target_slot_id
        payload["action"] = self.action
        return payload


@dataclass
class FormationChangedEvent(BoardEvent):
    """Fired when slot occupancy or the formation itself changes."""

    topic: ClassVar[str] = "formation.changed"

    formation: "Formation" = None
    reason: str = ""

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["reason"] = self.reason
        if self.formation is not None:
            payload["formation_id"] = self.formation.id
            payload["slots"] = {s.id: s.occupant_id for s in self.formation.slots}
        return payload


@dataclass
class HistoryChangedEvent(BoardEvent):
    """Fired after undo, redo, jump or clear."""

    topic: ClassVar[str] = "history.changed"

    action: str = ""  # "undo", "redo", "jump", "clear"
    index: int = 0
    can_undo: bool = False
    can_redo: bool = False

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload.update(
            action=self.action,
            index=self.index,
            can_undo=self.can_undo,
            can_redo=self.can_redo,
        )
        return payload


@dataclass
class SelectionChangedEvent(BoardEvent):
    """Fired when the set of selected players changes."""

    topic: ClassVar[str] = "selection.changed"

    selected_ids: list[str] = field(default_factory=list)

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["selected_ids"] = list(self.selected_ids)
        return payload
