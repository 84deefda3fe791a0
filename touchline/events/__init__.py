"""Board events and the bridge to host sync channels."""

from touchline.events.bus import EventBus
from touchline.events.channel import Channel, ChannelBridge
from touchline.events.types import (
    BatchCommittedEvent,
    BoardEvent,
    ConflictRaisedEvent,
    ConflictResolvedEvent,
    FormationChangedEvent,
    HistoryChangedEvent,
    PositionCommittedEvent,
    SelectionChangedEvent,
)

__all__ = [
    "BatchCommittedEvent",
    "BoardEvent",
    "Channel",
    "ChannelBridge",
    "ConflictRaisedEvent",
    "ConflictResolvedEvent",
    "EventBus",
    "FormationChangedEvent",
    "HistoryChangedEvent",
    "PositionCommittedEvent",
    "SelectionChangedEvent",
]
