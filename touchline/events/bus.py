"""Event bus for pub/sub communication."""

import logging
from collections import defaultdict
from typing import Callable, TypeVar

from touchline.events.types import BoardEvent

T = TypeVar("T", bound=BoardEvent)
EventHandler = Callable[[BoardEvent], None]

logger = logging.getLogger(__name__)


class EventBus:
    """
    Synchronous pub/sub bus that decouples a board session from its host.

    Renderers, loggers and sync layers subscribe to the event types they
    care about; the session emits without knowing who is listening.

    Example:
        bus = EventBus()

        def on_move(event: PositionCommittedEvent):
            renderer.animate(event.transition)

        bus.subscribe(PositionCommittedEvent, on_move)
    """

    def __init__(self) -> None:
        self._handlers: dict[type[BoardEvent], list[EventHandler]] = defaultdict(list)
        self._global_handlers: list[EventHandler] = []

    def subscribe(
        self,
        event_type: type[T],
        handler: Callable[[T], None],
    ) -> None:
        """Register a handler for one event type."""
        self._handlers[event_type].append(handler)

    def subscribe_all(self, handler: EventHandler) -> None:
        """Register a handler for every event."""
        self._global_handlers.append(handler)

    def unsubscribe(
        self,
        event_type: type[T],
        handler: Callable[[T], None],
    ) -> None:
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    def emit(self, event: BoardEvent) -> None:
        """
        Deliver an event.

        Handlers for the exact event type run first, then global handlers.
        Handlers are copied before the loop so one may unsubscribe itself.
        A handler that raises is logged and skipped; the rest still run.
        """
        handlers = list(self._handlers[type(event)]) + list(self._global_handlers)
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(f"Handler {handler!r} failed on {type(event).__name__}")

    def clear(self) -> None:
        """Remove all handlers."""
        self._handlers.clear()
        self._global_handlers.clear()

    def handler_count(self, event_type: type[BoardEvent] | None = None) -> int:
        """
        Number of registered handlers.

        With no ``event_type`` the count includes global handlers.
        """
        if event_type is None:
            total = sum(len(handlers) for handlers in self._handlers.values())
            return total + len(self._global_handlers)
        return len(self._handlers[event_type])
