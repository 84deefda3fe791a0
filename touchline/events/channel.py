"""
Bridge from board events to a host-provided message channel.

The board never talks to a transport directly. A sync layer implements
``Channel`` (anything with ``publish(topic, payload)``) and the bridge
forwards committed events to it as plain dictionaries.
"""

import logging
from typing import Iterable, Optional, Protocol, runtime_checkable

from touchline.events.bus import EventBus
from touchline.events.types import (
    BatchCommittedEvent,
    BoardEvent,
    ConflictResolvedEvent,
    FormationChangedEvent,
    PositionCommittedEvent,
)

logger = logging.getLogger(__name__)


DEFAULT_FORWARDED: tuple[type[BoardEvent], ...] = (
    PositionCommittedEvent,
    BatchCommittedEvent,
    FormationChangedEvent,
    ConflictResolvedEvent,
)


@runtime_checkable
class Channel(Protocol):
    """Topic-based publish interface implemented by the host."""

    def publish(self, topic: str, payload: dict) -> None:
        ...


class ChannelBridge:
    """
    Forwards selected event types from a bus to a channel.

    Topics are ``"<prefix>.<event topic>"`` when a prefix is given, for
    example ``"board-7.position.committed"``.
    """

    def __init__(
        self,
        bus: EventBus,
        channel: Channel,
        prefix: str = "",
        event_types: Optional[Iterable[type[BoardEvent]]] = None,
    ) -> None:
        self.bus = bus
        self.channel = channel
        self.prefix = prefix
        self.event_types = tuple(event_types) if event_types is not None else DEFAULT_FORWARDED
        self._attached = False

    @property
    def is_attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        if self._attached:
            return
        for event_type in self.event_types:
            self.bus.subscribe(event_type, self._forward)
        self._attached = True

    def detach(self) -> None:
        if not self._attached:
            return
        for event_type in self.event_types:
            self.bus.unsubscribe(event_type, self._forward)
        self._attached = False

    def topic_for(self, event: BoardEvent) -> str:
        return f"{self.prefix}.{event.topic}" if self.prefix else event.topic

    def _forward(self, event: BoardEvent) -> None:
        topic = self.topic_for(event)
        logger.debug(f"Publishing {topic} (version {event.version})")
        self.channel.publish(topic, event.to_payload())
