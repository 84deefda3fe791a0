"""Renderer-neutral transition data for committed position changes."""

from dataclasses import dataclass
from typing import Mapping

from touchline.core.models.field import Position


DEFAULT_DURATION = 0.3  # seconds
DEFAULT_STAGGER = 0.03  # seconds between consecutive players in a batch


@dataclass(frozen=True)
class Transition:
    """Move one token from one position to another, starting after ``delay``."""

    entity_id: str
    from_position: Position
    to_position: Position
    delay: float = 0.0
    duration: float = DEFAULT_DURATION

    def to_dict(self) -> dict:
        return {
            "entity_id": self.entity_id,
            "from": self.from_position.to_dict(),
            "to": self.to_position.to_dict(),
            "delay": self.delay,
            "duration": self.duration,
        }


def plan_transitions(
    before: Mapping[str, Position],
    after: Mapping[str, Position],
    duration: float = DEFAULT_DURATION,
    stagger: float = DEFAULT_STAGGER,
) -> list[Transition]:
    """
    Transitions for every id in ``after`` whose position changed.

    Ids missing from ``before`` start where they end. Delays grow by
    ``stagger`` in the order of ``after``.
    """
    transitions = []
    for entity_id, to_position in after.items():
        from_position = before.get(entity_id, to_position)
        if from_position == to_position:
            continue
        transitions.append(Transition(
            entity_id=entity_id,
            from_position=from_position,
            to_position=to_position,
            delay=round(len(transitions) * stagger, 6),
            duration=duration,
        ))
    return transitions
